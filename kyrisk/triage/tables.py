# kyrisk/triage/tables.py
# Named, versioned data tables for the text triage half. Tune here (or pass a
# modified TriageTables) instead of touching the scoring code.
from __future__ import annotations
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field

TABLES_VERSION = "2025.1"

DANGER_KEYWORDS: Dict[str, float] = {
    # falls / height
    "fall": 3.0,
    "height": 2.0,
    "edge": 1.5,
    "opening": 2.0,
    "ladder": 1.5,
    "scaffold": 2.0,
    # ground
    "collapse": 3.0,
    "landslide": 3.0,
    "rockfall": 3.0,
    "slope": 2.0,
    "trench": 2.0,
    "excavation": 2.0,
    "unstable": 2.0,
    # machinery / vehicles
    "heavy machinery": 2.5,
    "backhoe": 2.0,
    "excavator": 2.0,
    "crane": 2.0,
    "suspended load": 3.0,
    "blind spot": 2.5,
    "reversing": 2.0,
    "vehicle": 1.5,
    "caught": 3.0,
    "crush": 3.0,
    "contact": 2.0,
    "struck": 2.5,
    "falling object": 3.0,
    # public
    "third party": 2.0,
    "pedestrian": 2.0,
    "visitor": 1.5,
    # footing / environment
    "slip": 1.5,
    "trip": 1.5,
    "footing": 1.5,
    "mud": 1.0,
    "rain": 1.0,
    "wind": 1.0,
    "heat": 1.5,
    "electric": 2.0,
    "overhead line": 3.0,
    "fire": 2.0,
}

GENERIC_PENALTIES: Dict[str, float] = {
    "be careful": 2.0,
    "pay attention": 2.0,
    "watch out": 1.5,
    "as needed": 1.5,
    "appropriately": 1.5,
    "thoroughly": 1.0,
    "make sure": 1.0,
    "safety first": 2.0,
}

CAUSAL_MARKERS: Tuple[str, ...] = (
    "because", "due to", "so that", "could", "may ", "might", "risk of",
    "leading to", "lead to", "result in", "cause", "which",
)

# (keywords, consequence) checked in order; first hit wins
CONSEQUENCE_RULES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (("footing", "step", "slip", "mud", "uneven"), "tripping or slipping"),
    (("slope", "collapse", "soil", "landslide", "trench"), "collapse or falling"),
    (("machine", "backhoe", "excavator", "vehicle", "blind spot", "contact"), "contact or being caught"),
)
DEFAULT_CONSEQUENCE = "an accident"

# Used when the model returns no third-party lines at all.
THIRD_PARTY_DEFAULTS: Dict[str, Tuple[str, ...]] = {
    "many": (
        "Fully separate the public route from the work area with fences, ropes and signs",
        "Post a flagger and stop work whenever a third party approaches",
        "Call out to third parties and guide them along the safe side of the route",
    ),
    "few": (
        "Assume third parties may appear; fence off the entrance and walkway side and post signs",
        "Stop heavy machinery when a third party is seen and resume only after the signaller guides them clear",
    ),
    "none": (),
}


class TriageTables(BaseModel):
    """Keyword weights, penalties and thresholds for line scoring."""
    model_config = ConfigDict(frozen=True)

    version: str = TABLES_VERSION
    danger_keywords: Dict[str, float] = Field(default_factory=lambda: dict(DANGER_KEYWORDS))
    generic_penalties: Dict[str, float] = Field(default_factory=lambda: dict(GENERIC_PENALTIES))
    short_length: int = 12
    short_penalty: float = 1.0
    very_short_length: int = 6
    very_short_penalty: float = 1.5
    alignment_bonus: float = 1.0
    alignment_cap: float = 3.0
    similarity_threshold: float = Field(default=0.72, ge=0.0, le=1.0)
    containment_min_length: int = 6
    containment_min_ratio: float = Field(default=0.5, ge=0.0, le=1.0)
    min_line_length: int = 3


DEFAULT_TABLES = TriageTables()
