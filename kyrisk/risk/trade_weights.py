# kyrisk/risk/trade_weights.py
import math
from typing import Any, Dict, Mapping

# trade label -> accident category -> multiplier. Missing pairs are neutral (1.0).
DEFAULT_TRADE_WEIGHTS: Dict[str, Dict[str, float]] = {
    "traffic-control": {"traffic": 1.3, "caught-in": 1.1},
    "slope-work": {"fall": 1.4, "collapse": 1.35, "slip": 1.15},
    "earthwork": {"collapse": 1.25, "caught-in": 1.15},
    "pipe-laying": {"collapse": 1.15, "caught-in": 1.2, "slip": 1.1},
    "paving": {"traffic": 1.15, "slip": 1.1, "hazardous-substance": 1.05},
    "bridge": {"fall": 1.2, "struck-by": 1.15},
    "tunnel": {"hazardous-substance": 1.2, "struck-by": 1.15, "fire-explosion": 1.1},
    "demolition": {"struck-by": 1.25, "caught-in": 1.2, "fall": 1.15},
}


def get_trade_weight(
    trade: Any,
    category: Any,
    weights: Mapping[str, Mapping[str, float]] = DEFAULT_TRADE_WEIGHTS,
) -> float:
    t = str(trade or "").strip()
    if not t:
        return 1.0
    by_category = weights.get(t)
    if not by_category:
        return 1.0
    # accept AccidentCategory members as well as plain labels
    key = getattr(category, "value", category)
    v = by_category.get(str(key or ""))
    if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v) or v <= 0:
        return 1.0
    return float(v)
