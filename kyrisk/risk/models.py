# kyrisk/risk/models.py
from __future__ import annotations
from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from kyrisk.risk.coefficients import normalize_third_party_level
from kyrisk.utils.numbers import scale_1to5, to_float


class AccidentCategory(str, Enum):
    FALL = "fall"
    STRUCK_BY = "struck-by"
    COLLAPSE = "collapse"
    CAUGHT_IN = "caught-in"
    TRAFFIC = "traffic"
    SLIP = "slip"
    HEAT_STRESS = "heat-stress"
    ELECTRIC_SHOCK = "electric-shock"
    HAZARDOUS_SUBSTANCE = "hazardous-substance"
    FIRE_EXPLOSION = "fire-explosion"
    OTHER = "other"

    @classmethod
    def coerce(cls, v: Any) -> "AccidentCategory":
        """Best-effort enum coercion; unknown labels become OTHER."""
        if isinstance(v, cls):
            return v
        key = str(v or "").strip().lower().replace("_", "-").replace(" ", "-")
        try:
            return cls(key)
        except ValueError:
            return cls.OTHER


def _text(v: Any) -> str:
    return "" if v is None else str(v).strip()


class HazardCandidate(BaseModel):
    """One hazard / countermeasure row as entered on the KY sheet."""
    model_config = ConfigDict(frozen=True)

    hazard: str = ""
    countermeasure: str = ""
    likelihood: int = Field(default=1, validation_alias=AliasChoices("likelihood", "P"))
    severity: int = Field(default=1, validation_alias=AliasChoices("severity", "S"))
    category: AccidentCategory = AccidentCategory.OTHER

    @field_validator("hazard", "countermeasure", mode="before")
    @classmethod
    def _clean_text(cls, v):
        return _text(v)

    @field_validator("likelihood", "severity", mode="before")
    @classmethod
    def _clamp_scale(cls, v):
        return scale_1to5(v)

    @field_validator("category", mode="before")
    @classmethod
    def _coerce_category(cls, v):
        return AccidentCategory.coerce(v)


class WeatherObservation(BaseModel):
    """The single weather slot applied to the sheet (e.g. the 9:00 forecast)."""
    model_config = ConfigDict(frozen=True)

    precipitation_mm: Optional[float] = None
    wind_speed_ms: Optional[float] = None
    temperature_c: Optional[float] = None
    weather_text: str = ""
    hour: Optional[int] = None

    @field_validator("precipitation_mm", "wind_speed_ms", "temperature_c", mode="before")
    @classmethod
    def _num(cls, v):
        return to_float(v)

    @field_validator("weather_text", mode="before")
    @classmethod
    def _clean_text(cls, v):
        return _text(v)

    @field_validator("hour", mode="before")
    @classmethod
    def _hour(cls, v):
        x = to_float(v)
        return None if x is None else int(x)


class RiskContext(BaseModel):
    """Per-call site conditions shared by every candidate on the sheet."""
    model_config = ConfigDict(frozen=True)

    third_party_level: str = "none"
    worker_count: Optional[int] = None
    weather: Optional[WeatherObservation] = Field(
        default=None, validation_alias=AliasChoices("weather", "weather_applied")
    )
    photo_score: Optional[float] = None
    work_description: str = Field(
        default="", validation_alias=AliasChoices("work_description", "work_detail")
    )

    @field_validator("third_party_level", mode="before")
    @classmethod
    def _level(cls, v):
        return normalize_third_party_level(v)

    @field_validator("worker_count", mode="before")
    @classmethod
    def _workers(cls, v):
        x = to_float(v)
        if x is None:
            return None
        return max(0, int(x))

    @field_validator("weather", mode="before")
    @classmethod
    def _weather(cls, v):
        if v is None or isinstance(v, (WeatherObservation, dict)):
            return v
        return None

    @field_validator("photo_score", mode="before")
    @classmethod
    def _photo(cls, v):
        return to_float(v)

    @field_validator("work_description", mode="before")
    @classmethod
    def _clean_text(cls, v):
        return _text(v)


class ScoredHazard(BaseModel):
    model_config = ConfigDict(frozen=True)

    candidate: HazardCandidate
    base_risk: int
    third_party_factor: float
    weather_factor: float
    density_factor: float
    photo_factor: float
    trade_factor: float
    trade: str
    final_risk: float

    @property
    def factors(self) -> dict:
        return {
            "third_party": self.third_party_factor,
            "weather": self.weather_factor,
            "density": self.density_factor,
            "photo": self.photo_factor,
            "trade": self.trade_factor,
        }
