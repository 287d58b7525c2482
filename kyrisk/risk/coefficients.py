# kyrisk/risk/coefficients.py
from __future__ import annotations
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from kyrisk.utils.numbers import clamp, to_float

# Accepted spellings for each third-party exposure level. Anything else is "none".
THIRD_PARTY_ALIASES: Dict[str, str] = {
    "many": "many",
    "a lot": "many",
    "high": "many",
    "多い": "many",
    "few": "few",
    "some": "few",
    "low": "few",
    "少ない": "few",
    "none": "none",
    "no": "none",
    "なし": "none",
}


class ThirdPartyWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    none: float = 1.0
    few: float = 1.2
    many: float = 1.5


class WeatherWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    rain_weight: float = 0.2
    wind_weight: float = 0.1
    heat_weight: float = 0.08
    ceiling: float = Field(default=1.5, ge=1.0)


class DensityWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    baseline_workers: float = Field(default=10, gt=0)
    weight: float = 0.3
    ceiling: float = Field(default=1.5, ge=1.0)


class PhotoWeights(BaseModel):
    model_config = ConfigDict(frozen=True)

    weight: float = 0.5
    floor: float = 1.0
    ceiling: float = 1.5


class CoefficientTable(BaseModel):
    """
    Every multiplier constant the calculator uses. Built once, passed in,
    never mutated, so one instance can be shared by concurrent callers.
    """
    model_config = ConfigDict(frozen=True)

    third_party: ThirdPartyWeights = ThirdPartyWeights()
    weather: WeatherWeights = WeatherWeights()
    density: DensityWeights = DensityWeights()
    photo: PhotoWeights = PhotoWeights()


DEFAULT_COEFF = CoefficientTable()


def normalize_third_party_level(v: Any) -> str:
    t = "" if v is None else str(v).strip().lower()
    return THIRD_PARTY_ALIASES.get(t, "none")


# --- T: third-party exposure --------------------------------------------------

def third_party_factor(level: Any, cfg: CoefficientTable = DEFAULT_COEFF) -> float:
    return float(getattr(cfg.third_party, normalize_third_party_level(level)))


# --- W: weather ---------------------------------------------------------------

def weather_factor(applied: Any, cfg: CoefficientTable = DEFAULT_COEFF) -> float:
    """
    `applied` is a WeatherObservation (or any object / mapping with the same
    fields). No observation at all means exactly 1.0.
    """
    if applied is None:
        return 1.0
    pr = to_float(_field(applied, "precipitation_mm")) or 0.0
    ws = to_float(_field(applied, "wind_speed_ms")) or 0.0
    tc = to_float(_field(applied, "temperature_c"))

    rain_index = clamp(pr / 6, 0, 1)
    wind_index = clamp(ws / 10, 0, 1)
    heat_index = clamp(max(0.0, tc - 28) / 5, 0, 1) if tc is not None else 0.0

    w = cfg.weather
    W = 1 + rain_index * w.rain_weight + wind_index * w.wind_weight + heat_index * w.heat_weight
    return clamp(W, 1.0, w.ceiling)


# --- D: worker density --------------------------------------------------------

def density_factor(worker_count: Any, cfg: CoefficientTable = DEFAULT_COEFF) -> float:
    n = to_float(worker_count)
    if n is None or n <= 0:
        return 1.0
    d = cfg.density
    D = 1 + (n / d.baseline_workers) * d.weight
    return clamp(D, 1.0, d.ceiling)


# --- I: site photo ------------------------------------------------------------

def photo_factor(photo_score: Any, cfg: CoefficientTable = DEFAULT_COEFF) -> float:
    # a missing photo is the least informative value, not a neutral one
    p = cfg.photo
    s: Optional[float] = to_float(photo_score)
    if s is None:
        return p.floor
    I = 1 + clamp(s, 0, 1) * p.weight
    return clamp(I, p.floor, p.ceiling)


def _field(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)
