# kyrisk/triage/select.py
from __future__ import annotations
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, List, Sequence, Tuple

from kyrisk.config import DEFAULT_TEMPLATES_PATH, _load_yaml
from kyrisk.triage.keywords import ScoredLine, make_scored
from kyrisk.triage.normalizer import comparison_form, to_line
from kyrisk.triage.similarity import is_near_duplicate
from kyrisk.triage.tables import DEFAULT_TABLES, TriageTables
from kyrisk.utils.debug import dbg
from kyrisk.utils.ranking import stable_rank_desc
from kyrisk.validation.table_validator import (
    GENERIC_FALLBACK_SCHEMA,
    validate_entries,
)

DEFAULT_LIMIT = 5
FIELDS = ("hazard", "countermeasure")


@dataclass(frozen=True)
class FallbackTemplate:
    patterns: Tuple[str, ...]
    hazard: str
    countermeasure: str

    def applies_to(self, work_description: Any) -> bool:
        wd = comparison_form(work_description)
        if not wd:
            return False
        return any(comparison_form(p) and comparison_form(p) in wd for p in self.patterns)


GENERIC_FALLBACK = FallbackTemplate(
    patterns=(),
    hazard="Site conditions can change during the day, so unnoticed hazards could lead to an accident",
    countermeasure="Hold a pre-start briefing, confirm signals and roles, and stop work whenever conditions change",
)


@dataclass(frozen=True)
class FallbackTable:
    templates: Tuple[FallbackTemplate, ...] = ()
    generic: FallbackTemplate = GENERIC_FALLBACK
    version: str = ""


@lru_cache(maxsize=8)
def load_fallback_table(path: str = str(DEFAULT_TEMPLATES_PATH)) -> FallbackTable:
    """
    Read the template table from YAML. Entries failing the schema are skipped;
    a missing file yields an empty table (generic fallback only).
    """
    data = _load_yaml(Path(path))
    raw = data.get("templates") or []
    if not isinstance(raw, list):
        raw = []

    bad = {p["index"]: p["errors"] for p in validate_entries(raw)}
    for idx, errs in bad.items():
        dbg("TEMPLATES", f"skipping entry {idx} in {path}: {'; '.join(errs)}")

    templates = tuple(
        FallbackTemplate(
            patterns=tuple(str(p) for p in entry["patterns"]),
            hazard=entry["hazard"].strip(),
            countermeasure=entry["countermeasure"].strip(),
        )
        for i, entry in enumerate(raw)
        if i not in bad
    )

    generic = GENERIC_FALLBACK
    g = data.get("generic")
    if isinstance(g, dict) and not validate_entries([g], GENERIC_FALLBACK_SCHEMA):
        generic = FallbackTemplate(patterns=(), hazard=g["hazard"].strip(), countermeasure=g["countermeasure"].strip())

    return FallbackTable(templates=templates, generic=generic, version=str(data.get("version") or ""))


def select_top(scored: Sequence[ScoredLine], limit: int = DEFAULT_LIMIT) -> List[ScoredLine]:
    """Highest score first (ties keep input order), truncated to `limit`."""
    order = stable_rank_desc([s.score for s in scored])
    return [scored[i] for i in order][: max(0, limit)]


def backfill(
    selected: Sequence[ScoredLine],
    work_description: Any,
    field: str = "hazard",
    limit: int = DEFAULT_LIMIT,
    table: FallbackTable | None = None,
    tables: TriageTables = DEFAULT_TABLES,
) -> List[ScoredLine]:
    """
    Top `selected` up to `limit` lines from the template table, then with the
    generic entry. Same inputs always give the same output.
    """
    if field not in FIELDS:
        raise ValueError(f"Unknown fallback field: {field}")
    table = table if table is not None else load_fallback_table()

    out = list(selected)[: max(0, limit)]
    if len(out) >= limit:
        return out

    added = 0
    for tpl in table.templates:
        if len(out) >= limit:
            break
        if not tpl.applies_to(work_description):
            continue
        line = to_line(getattr(tpl, field))
        if not line.key:
            continue
        if is_near_duplicate(
            line.key,
            [s.key for s in out],
            tables.similarity_threshold,
            tables.containment_min_length,
            tables.containment_min_ratio,
        ):
            continue
        out.append(make_scored(line, tables, origin="template"))
        added += 1

    generic = to_line(getattr(table.generic, field))
    filler = make_scored(generic, tables, origin="fallback")
    padded = 0
    while len(out) < limit:
        out.append(filler)
        padded += 1

    dbg("TRIAGE", f"backfill {field}: +{added} template(s), +{padded} generic")
    return out
