# kyrisk/triage/pipeline.py
from __future__ import annotations
import math
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, List, Optional

from kyrisk.risk.coefficients import normalize_third_party_level
from kyrisk.triage.keywords import (
    ScoredLine,
    alignment_keywords_from,
    ensure_causal,
    make_scored,
)
from kyrisk.triage.normalizer import comparison_form, normalize_lines, to_line
from kyrisk.triage.sections import split_sections
from kyrisk.triage.select import DEFAULT_LIMIT, FallbackTable, backfill, select_top
from kyrisk.triage.similarity import BaselineSet, dedupe_exact, filter_against_baseline
from kyrisk.triage.tables import DEFAULT_TABLES, THIRD_PARTY_DEFAULTS, TriageTables
from kyrisk.utils.debug import dbg


def _threshold(v: Any, tables: TriageTables) -> float:
    try:
        x = float(v)
    except (TypeError, ValueError):
        return tables.similarity_threshold
    if not math.isfinite(x):
        return tables.similarity_threshold
    return max(0.0, min(1.0, x))


def _candidates(
    raw_text: Any,
    baseline_text: Any,
    threshold: float,
    tables: TriageTables,
):
    lines = dedupe_exact(normalize_lines(raw_text, tables.min_line_length))
    baseline = BaselineSet.from_lines(normalize_lines(baseline_text, tables.min_line_length))
    kept = filter_against_baseline(
        lines, baseline, threshold, tables.containment_min_length, tables.containment_min_ratio
    )
    dbg(
        "TRIAGE",
        f"lines={len(lines)} baseline={len(baseline)} dropped_as_duplicate={len(lines) - len(kept)}",
    )
    return kept


def triage(
    raw_text: Any,
    baseline_text: Any = "",
    limit: int = DEFAULT_LIMIT,
    threshold: float = DEFAULT_TABLES.similarity_threshold,
    alignment_keywords: Optional[Iterable[str]] = None,
    tables: TriageTables = DEFAULT_TABLES,
) -> List[ScoredLine]:
    """
    Reduce a raw text blob to at most `limit` ranked lines:
    normalize -> drop exact repeats -> drop lines restating the baseline ->
    keyword score (+ alignment bonus when keywords are given) -> top N.
    """
    if isinstance(limit, bool) or not isinstance(limit, int):
        raise TypeError(f"limit must be an int, got {type(limit).__name__}")
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")

    th = _threshold(threshold, tables)
    align = set(alignment_keywords) if alignment_keywords else None
    kept = _candidates(raw_text, baseline_text, th, tables)
    scored = [make_scored(ln, tables, align) for ln in kept]
    return select_top(scored, limit)


# --- generation pipeline ------------------------------------------------------

@dataclass(frozen=True)
class SupplementRequest:
    work_description: str = ""
    ai_hazards: str = ""
    ai_countermeasures: str = ""
    ai_third_party: str = ""
    human_hazards: str = ""
    human_countermeasures: str = ""
    third_party_level: str = ""
    limit: int = DEFAULT_LIMIT

    def with_ai_text(self, text: Any) -> "SupplementRequest":
        """Fill the empty ai_* fields (and work description) from one sectioned AI reply."""
        s = split_sections(text)
        return replace(
            self,
            work_description=self.work_description or s.work,
            ai_hazards=self.ai_hazards or s.hazards,
            ai_countermeasures=self.ai_countermeasures or s.countermeasures,
            ai_third_party=self.ai_third_party or s.third_party,
        )


@dataclass(frozen=True)
class SupplementResult:
    hazards: List[ScoredLine] = field(default_factory=list)
    countermeasures: List[ScoredLine] = field(default_factory=list)
    third_party: List[ScoredLine] = field(default_factory=list)
    alignment_keywords: List[str] = field(default_factory=list)

    def as_text(self) -> dict:
        return {
            "ai_hazards": "\n".join(s.display for s in self.hazards),
            "ai_countermeasures": "\n".join(s.display for s in self.countermeasures),
            "ai_third_party": "\n".join(s.display for s in self.third_party),
        }


def _causal(line: ScoredLine) -> ScoredLine:
    display = ensure_causal(line.display)
    if display == line.display:
        return line
    return ScoredLine(
        display=display,
        key=comparison_form(display),
        score=line.score,
        hits=line.hits,
        origin=line.origin,
    )


def generate_supplement(
    req: SupplementRequest,
    table: FallbackTable | None = None,
    tables: TriageTables = DEFAULT_TABLES,
) -> SupplementResult:
    """
    Build the AI supplement shown next to the human KY entries:
      hazards         triaged against the human hazards, topped up from templates
      countermeasures triaged against the human ones, boosted when they
                      address the selected hazards, topped up from templates
      third party     triaged; level-based defaults when nothing survives
    """
    limit = req.limit
    if limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")

    hazards = triage(req.ai_hazards, req.human_hazards, limit, tables.similarity_threshold, None, tables)
    hazards = backfill(hazards, req.work_description, "hazard", limit, table, tables)

    align = alignment_keywords_from((h.display for h in hazards), tables)
    measures = triage(
        req.ai_countermeasures, req.human_countermeasures, limit, tables.similarity_threshold, align, tables
    )
    measures = backfill(measures, req.work_description, "countermeasure", limit, table, tables)

    third = triage(req.ai_third_party, "", limit, tables.similarity_threshold, None, tables)
    if not third:
        level = normalize_third_party_level(req.third_party_level)
        third = [
            make_scored(to_line(text), tables, origin="fallback")
            for text in THIRD_PARTY_DEFAULTS.get(level, ())
        ][:limit]

    dbg(
        "TRIAGE",
        f"supplement hazards={len(hazards)} measures={len(measures)} third_party={len(third)}",
    )
    return SupplementResult(
        hazards=[_causal(h) for h in hazards],
        countermeasures=measures,
        third_party=third,
        alignment_keywords=sorted(align),
    )
