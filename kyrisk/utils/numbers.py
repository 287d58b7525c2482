# kyrisk/utils/numbers.py
from __future__ import annotations
import math
import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Optional

# a leading number, optionally followed by a unit with no further digits:
# "12", "12mm", "1,200", "30 °C", "20 workers"
_NUM_RE = re.compile(
    r"^([-+]?(?:\d[\d,]*(?:\.\d*)?|\.\d+)(?:[eE][-+]?\d+)?)"
    r"(?:\s*[^\d\s.,+\-][^\d]*)?$"
)


def to_float(v: Any) -> float | None:
    """
    Best-effort numeric coercion. Returns None for None, bools, blanks,
    unparseable text and non-finite values (nan / inf).
    """
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float, Decimal)):
        x = float(v)
    else:
        s = str(v).strip()
        if not s:
            return None
        m = _NUM_RE.match(s)
        if not m:
            return None
        try:
            x = float(m.group(1).replace(",", ""))
        except (TypeError, ValueError):
            return None
    return x if math.isfinite(x) else None


def clamp(x: float, lo: float, hi: float) -> float:
    """Clamp into [lo, hi]; a non-finite x lands on lo."""
    if x is None or not math.isfinite(x):
        return lo
    return max(lo, min(hi, x))


def round2(x: float) -> float:
    # half-up on the shortest repr, so 85.04999999999998 -> 85.05
    try:
        d = Decimal(repr(float(x)))
    except (InvalidOperation, TypeError, ValueError):
        return 0.0
    if not d.is_finite():
        return 0.0
    return float(d.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def scale_1to5(v: Any, default: int = 1) -> int:
    """Coerce a likelihood / severity rating into an int in [1, 5]."""
    x: Optional[float] = to_float(v)
    if x is None:
        return default
    return int(clamp(float(round(x)), 1, 5))
