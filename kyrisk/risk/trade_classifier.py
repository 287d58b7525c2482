# kyrisk/risk/trade_classifier.py
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Any, Sequence, Tuple

UNCLASSIFIED = "unclassified"
OTHER_TRADE = "other"

_WS_RE = re.compile(r"\s+")


@dataclass(frozen=True)
class TradeRule:
    label: str
    keywords: Tuple[str, ...]

    def matches(self, compact: str) -> bool:
        return any(_compact(k) and _compact(k) in compact for k in self.keywords)


# Evaluated top to bottom; the first rule with any keyword hit wins.
# Order matters for texts that mention more than one trade.
DEFAULT_TRADE_RULES: Tuple[TradeRule, ...] = (
    TradeRule("traffic-control", (
        "traffic control", "lane closure", "alternating traffic", "road closure",
        "flagger", "flagman", "traffic cone", "barricade", "detour",
    )),
    TradeRule("slope-work", (
        "slope", "mortar spray", "shotcrete", "hydroseed", "vegetation",
        "ground anchor", "rock bolt", "landslide", "rockfall",
    )),
    TradeRule("earthwork", (
        "excavat", "trench", "backfill", "surplus soil", "shoring",
        "sheet pile", "earthwork", "backhoe",
    )),
    TradeRule("pipe-laying", (
        "pipe", "manhole", "sewer", "water main", "catch basin", "culvert", "drainage",
    )),
    TradeRule("paving", (
        "paving", "asphalt", "milling", "compaction", "roller", "tack coat", "subbase",
    )),
    TradeRule("bridge", (
        "bridge", "abutment", "pier", "girder", "deck slab", "expansion joint",
    )),
    TradeRule("tunnel", (
        "tunnel", "mucking", "shaft",
    )),
    TradeRule("demolition", (
        "demolition", "demolish", "dismantl", "chipping", "breaker",
    )),
)


def _compact(text: Any) -> str:
    return _WS_RE.sub("", "" if text is None else str(text)).lower()


def classify_trade(work_description: Any, rules: Sequence[TradeRule] = DEFAULT_TRADE_RULES) -> str:
    """
    Map a free-text work description to exactly one trade label.
    Empty text -> "unclassified"; no rule hit -> "other".
    """
    x = _compact(work_description)
    if not x:
        return UNCLASSIFIED
    for rule in rules:
        if rule.matches(x):
            return rule.label
    return OTHER_TRADE
