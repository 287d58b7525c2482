# kyrisk/risk/report.py
# Tabular views of engine output for the CLI and notebook use.
from typing import Iterable, List

import pandas as pd

from kyrisk.risk.models import ScoredHazard
from kyrisk.triage.keywords import ScoredLine

SCORE_COLUMNS: List[str] = [
    "rank", "hazard", "countermeasure", "category", "likelihood", "severity",
    "base_risk", "third_party", "weather", "density", "photo", "trade", "trade_factor",
    "final_risk",
]
LINE_COLUMNS: List[str] = ["rank", "line", "score", "origin", "keywords"]


def scores_frame(scored: Iterable[ScoredHazard]) -> pd.DataFrame:
    """One row per scored hazard, in the order given (already ranked)."""
    rows = []
    for i, s in enumerate(scored, start=1):
        c = s.candidate
        rows.append({
            "rank": i,
            "hazard": c.hazard,
            "countermeasure": c.countermeasure,
            "category": c.category.value,
            "likelihood": c.likelihood,
            "severity": c.severity,
            "base_risk": s.base_risk,
            "third_party": s.third_party_factor,
            "weather": round(s.weather_factor, 3),
            "density": round(s.density_factor, 3),
            "photo": round(s.photo_factor, 3),
            "trade": s.trade,
            "trade_factor": s.trade_factor,
            "final_risk": s.final_risk,
        })
    return pd.DataFrame(rows, columns=SCORE_COLUMNS)


def lines_frame(lines: Iterable[ScoredLine]) -> pd.DataFrame:
    rows = [
        {
            "rank": i,
            "line": ln.display,
            "score": ln.score,
            "origin": ln.origin,
            "keywords": ", ".join(ln.hits),
        }
        for i, ln in enumerate(lines, start=1)
    ]
    return pd.DataFrame(rows, columns=LINE_COLUMNS)
