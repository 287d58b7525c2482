# kyrisk/triage/keywords.py
from __future__ import annotations
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Iterable, List, Optional, Pattern, Set, Tuple

from kyrisk.triage.normalizer import TextLine, match_form
from kyrisk.triage.tables import (
    CAUSAL_MARKERS,
    CONSEQUENCE_RULES,
    DEFAULT_CONSEQUENCE,
    DEFAULT_TABLES,
    TriageTables,
)
from kyrisk.utils.numbers import round2


@dataclass(frozen=True)
class ScoredLine:
    display: str
    key: str
    score: float
    hits: Tuple[str, ...] = ()
    origin: str = "ai"          # "ai" | "template" | "fallback"


@lru_cache(maxsize=1024)
def _phrase_re(phrase: str) -> Optional[Pattern[str]]:
    # must start a word: "fall" hits "falling" but not "rainfall"
    p = match_form(phrase)
    if not p:
        return None
    return re.compile(r"(?<![a-z0-9])" + re.escape(p))


def _present(text: str, phrases: Iterable[str]) -> List[str]:
    """Distinct phrases found at a word start in the match form `text`, in table order."""
    hits: List[str] = []
    seen: Set[str] = set()
    for p in phrases:
        rx = _phrase_re(p)
        if rx is None or rx.pattern in seen or not rx.search(text):
            continue
        seen.add(rx.pattern)
        hits.append(p)
    return hits


def _form(text: Any) -> str:
    return match_form(text.display if isinstance(text, TextLine) else text)


def keyword_hits(text: Any, tables: TriageTables = DEFAULT_TABLES) -> List[str]:
    return _present(_form(text), tables.danger_keywords)


def alignment_keywords_from(lines: Iterable[Any], tables: TriageTables = DEFAULT_TABLES) -> Set[str]:
    """Danger keywords seen in the selected hazard lines."""
    out: Set[str] = set()
    for ln in lines:
        out.update(keyword_hits(ln, tables))
    return out


def alignment_bonus(
    text: Any,
    alignment_keywords: Optional[Iterable[str]],
    tables: TriageTables = DEFAULT_TABLES,
) -> float:
    if not alignment_keywords:
        return 0.0
    shared = _present(_form(text), sorted(alignment_keywords))
    return min(tables.alignment_cap, tables.alignment_bonus * len(shared))


def score_line(
    line: TextLine,
    tables: TriageTables = DEFAULT_TABLES,
    alignment_keywords: Optional[Iterable[str]] = None,
) -> Tuple[float, List[str]]:
    """
    Relevance of one line:
      + weight of each distinct danger keyword
      - penalty of each distinct generic phrase
      - graduated short-line penalties (both apply to very short lines)
      + alignment bonus (countermeasures only), capped
    Returns (score, danger keyword hits).
    """
    text = match_form(line.display)
    hits = _present(text, tables.danger_keywords)
    score = sum(float(tables.danger_keywords[h]) for h in hits)
    score -= sum(float(tables.generic_penalties[g]) for g in _present(text, tables.generic_penalties))

    key = line.key
    if len(key) < tables.short_length:
        score -= tables.short_penalty
    if len(key) < tables.very_short_length:
        score -= tables.very_short_penalty

    score += alignment_bonus(text, alignment_keywords, tables)
    return round2(score), hits


def make_scored(
    line: TextLine,
    tables: TriageTables = DEFAULT_TABLES,
    alignment_keywords: Optional[Iterable[str]] = None,
    origin: str = "ai",
) -> ScoredLine:
    score, hits = score_line(line, tables, alignment_keywords)
    return ScoredLine(display=line.display, key=line.key, score=score, hits=tuple(hits), origin=origin)


def ensure_causal(line: str) -> str:
    """
    Hazard lines should read "X, which could lead to Y". Lines that already
    carry a causal marker are returned unchanged.
    """
    t = (line or "").strip().rstrip(".")
    if not t:
        return ""
    low = f" {t.lower()} "
    if any(m in low for m in CAUSAL_MARKERS):
        return t

    risk = DEFAULT_CONSEQUENCE
    for words, consequence in CONSEQUENCE_RULES:
        if any(w in low for w in words):
            risk = consequence
            break
    return f"{t}, which could lead to {risk}"
