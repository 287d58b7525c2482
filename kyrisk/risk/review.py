# kyrisk/risk/review.py
# -----------------------------------------------------------------------------
# Review-sheet score: compares the human-entered KY against the AI supplement.
# Input is the review screen's own shape (human / ai / weather / photos); it is
# not converted to or from RiskContext.
# Output: 0-100 totals for each side, their delta, per-factor reasons and the
# five AI-side factors ranked.
# -----------------------------------------------------------------------------
from __future__ import annotations
import re
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from kyrisk.risk.coefficients import normalize_third_party_level
from kyrisk.risk.models import WeatherObservation
from kyrisk.triage.normalizer import display_form, split_raw_lines
from kyrisk.utils.numbers import clamp, to_float
from kyrisk.utils.ranking import stable_rank_desc


def _text(v: Any) -> str:
    return "" if v is None else str(v)


class HumanInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    work_detail: str = ""
    hazards: str = ""
    countermeasures: str = ""
    third_party_level: str = ""
    worker_count: Optional[float] = None

    @field_validator("work_detail", "hazards", "countermeasures", "third_party_level", mode="before")
    @classmethod
    def _t(cls, v):
        return _text(v)

    @field_validator("worker_count", mode="before")
    @classmethod
    def _n(cls, v):
        return to_float(v)


class AiInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    ai_hazards: str = ""
    ai_countermeasures: str = ""
    ai_third_party: str = ""

    @field_validator("ai_hazards", "ai_countermeasures", "ai_third_party", mode="before")
    @classmethod
    def _t(cls, v):
        return _text(v)


class PhotoSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    slope_now_url: str = ""
    slope_prev_url: str = ""
    path_now_url: str = ""
    path_prev_url: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _t(cls, v):
        return _text(v).strip()


class ReviewInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    human: HumanInput = HumanInput()
    ai: AiInput = AiInput()
    weather: Optional[WeatherObservation] = Field(
        default=None, validation_alias=AliasChoices("weather", "weather_applied")
    )
    photos: PhotoSet = PhotoSet()

    @field_validator("human", "ai", "photos", mode="before")
    @classmethod
    def _none_is_empty(cls, v):
        return {} if v is None or not isinstance(v, (dict, BaseModel)) else v

    @field_validator("weather", mode="before")
    @classmethod
    def _weather(cls, v):
        return v if isinstance(v, (dict, WeatherObservation)) else None


class BreakdownItem(BaseModel):
    score: int
    reasons: List[str]


class SummaryItem(BaseModel):
    key: Literal["weather", "photo", "third_party", "workers", "text_quality_ai"]
    label: str
    score: int
    reason: str


class ReviewScore(BaseModel):
    total_human: int
    total_ai: int
    delta: int
    breakdown: Dict[str, BreakdownItem]
    ai_top5: List[SummaryItem]
    meta: Dict[str, float]


# Tuning knobs. Raising max_raw_* keeps totals from pinning at 100.
REVIEW_DEFAULTS: Dict[str, float] = {
    "base_human": 12,
    "base_ai": 18,
    "bias_multiplier": 1.08,
    "max_raw_human": 140,
    "max_raw_ai": 190,
}

_KEYWORD_RULES = (
    (re.compile(r"backhoe|excavator|heavy machinery|crane|rigging|suspended", re.I), 10, "machinery/lifting"),
    (re.compile(r"slope|height|fall from|edge", re.I), 10, "slope/height"),
    (re.compile(r"excavat|trench|collapse|landslide|soil", re.I), 10, "excavation/collapse"),
    (re.compile(r"vehicle|delivery|haul|traffic|flagger", re.I), 8, "vehicles/traffic"),
    (re.compile(r"third part|visitor|pedestrian|passer", re.I), 8, "third party"),
)
_CAUSAL_RE = re.compile(r"because|due to|so that|could|may |might|risk of|lead(s|ing)? to|result", re.I)
_SEVERE_WEATHER_RE = re.compile(r"thunder|fog|storm|gale|heavy rain", re.I)
_RAIN_RE = re.compile(r"rain|shower", re.I)


def _clamp100(x: float) -> int:
    return int(round(clamp(x, 0, 100)))


def _lines(text: str) -> List[str]:
    return [d for d in (display_form(x) for x in split_raw_lines(text)) if d]


def _causal_count(lines: List[str]) -> int:
    return sum(1 for ln in lines if _CAUSAL_RE.search(f"{ln} "))


# --- factor scores ------------------------------------------------------------

def score_third_party(level: Any) -> BreakdownItem:
    lv = normalize_third_party_level(level)
    if lv == "many":
        return BreakdownItem(score=22, reasons=["Third parties: many (route control and call-outs get harder)"])
    if lv == "few":
        return BreakdownItem(score=10, reasons=["Third parties: few (approach risk remains)"])
    return BreakdownItem(score=6, reasons=["Third parties: not entered (unknown, scored conservatively)"])


def score_workers(worker_count: Any) -> BreakdownItem:
    v = to_float(worker_count)
    if v is None or v <= 0:
        return BreakdownItem(score=6, reasons=["Workers: not entered (coordination load assumed)"])
    n = int(v)
    if v <= 5:
        return BreakdownItem(score=6, reasons=[f"Workers: {n} (small crew, still watch machinery and slopes)"])
    if v <= 10:
        return BreakdownItem(score=10, reasons=[f"Workers: {n} (signals and contact rules must be shared)"])
    if v <= 20:
        return BreakdownItem(score=15, reasons=[f"Workers: {n} (entry control and guiding get heavier)"])
    return BreakdownItem(score=20, reasons=[f"Workers: {n} (large crew, signals and access control are hard)"])


def score_weather(applied: Optional[WeatherObservation]) -> BreakdownItem:
    if applied is None:
        return BreakdownItem(score=0, reasons=["Weather: no data (not evaluated)"])

    reasons: List[str] = []
    score = 0
    pr = applied.precipitation_mm or 0.0
    ws = applied.wind_speed_ms or 0.0
    tc = applied.temperature_c

    if pr >= 6:
        score += 30
        reasons.append(f"Rain: {pr}mm (heavy) -> slips, poor visibility, slope instability")
    elif pr >= 3:
        score += 22
        reasons.append(f"Rain: {pr}mm (moderate) -> slips, mud, signs of collapse")
    elif pr >= 1:
        score += 12
        reasons.append(f"Rain: {pr}mm (light) -> slips and poor footing")
    else:
        reasons.append(f"Rain: {pr}mm")

    if ws >= 10:
        score += 20
        reasons.append(f"Wind: {ws}m/s (strong) -> flying debris, toppling, suspended loads")
    elif ws >= 7:
        score += 14
        reasons.append(f"Wind: {ws}m/s (fresh) -> secure covers, prevent debris")
    elif ws >= 5:
        score += 8
        reasons.append(f"Wind: {ws}m/s (moderate) -> light items may blow away")
    else:
        reasons.append(f"Wind: {ws}m/s")

    if tc is not None:
        if tc >= 30:
            score += 8
            reasons.append(f"Temperature: {tc}C (hot) -> heat stroke, poor judgement")
        elif tc <= 5:
            score += 6
            reasons.append(f"Temperature: {tc}C (cold) -> numb hands, icing")
        else:
            reasons.append(f"Temperature: {tc}C")

    wt = applied.weather_text.strip()
    if wt:
        if _SEVERE_WEATHER_RE.search(wt):
            score += 10
            reasons.append(f"Conditions: {wt} -> visibility, gusts, sudden change")
        elif _RAIN_RE.search(wt):
            score += 5
            reasons.append(f"Conditions: {wt}")
        else:
            reasons.append(f"Conditions: {wt}")

    return BreakdownItem(score=_clamp100(score), reasons=reasons)


def _photo_pair(now: str, prev: str, name: str, pts: Dict[str, int]) -> tuple[int, str]:
    if now and prev:
        if now != prev:
            return pts["diff"], f"{name}: changed since last time (check for collapse, water, obstacles)"
        return pts["same"], f"{name}: same photo as last time (still confirm current state)"
    if now:
        return pts["no_prev"], f"{name}: no previous photo, changes cannot be compared"
    if prev:
        return pts["no_now"], f"{name}: no current photo, present state unknown"
    return pts["none"], f"{name}: no photos (uncertain)"


def score_photos(photos: PhotoSet) -> BreakdownItem:
    s1, r1 = _photo_pair(
        photos.slope_now_url, photos.slope_prev_url, "Slope",
        {"diff": 18, "same": 8, "no_prev": 10, "no_now": 12, "none": 6},
    )
    s2, r2 = _photo_pair(
        photos.path_now_url, photos.path_prev_url, "Walkway",
        {"diff": 14, "same": 6, "no_prev": 8, "no_now": 10, "none": 4},
    )
    return BreakdownItem(score=_clamp100(s1 + s2), reasons=[r1, r2])


def score_keywords(text: str) -> BreakdownItem:
    score = 0
    hits: List[str] = []
    for rx, add, label in _KEYWORD_RULES:
        if rx.search(text):
            score += add
            hits.append(label)
    if not hits:
        return BreakdownItem(score=0, reasons=["Keywords: no notable hazard words (blank or very short entry?)"])
    return BreakdownItem(score=_clamp100(score), reasons=[f"Keywords: {' / '.join(hits)}"])


def score_text_quality_human(hazards: str, measures: str, third: str) -> BreakdownItem:
    hz, ms, th = _lines(hazards), _lines(measures), _lines(third)
    causal = _causal_count(hz)
    score = 0
    reasons: List[str] = []

    if not hz:
        score += 15
        reasons.append("Human: no hazards entered -> things may be missed")
    else:
        reasons.append(f"Human: {len(hz)} hazard(s), {causal} with cause and effect")
        if causal < min(len(hz), 3):
            score += 6
            reasons.append("Human: cause and effect is weak (few 'could' / 'risk of' statements)")

    if not ms:
        score += 10
        reasons.append("Human: no countermeasures entered")
    else:
        reasons.append(f"Human: {len(ms)} countermeasure(s)")
        if hz and len(ms) < min(len(hz), 3):
            score += 6
            reasons.append("Human: fewer countermeasures than hazards")

    if not th:
        score += 6
        reasons.append("Human: third-party measures thin or missing")
    else:
        reasons.append(f"Human: {len(th)} third-party measure(s)")

    return BreakdownItem(score=_clamp100(score), reasons=reasons)


def score_text_quality_ai(hazards: str, measures: str, third: str) -> BreakdownItem:
    hz, ms, th = _lines(hazards), _lines(measures), _lines(third)
    causal = _causal_count(hz)
    score = 0
    reasons: List[str] = []

    extraction = min(30, len(hz) * 2 + causal)
    score += extraction
    reasons.append(f"AI: {len(hz)} hazard(s), {causal} with cause and effect -> +{extraction}")

    if len(hz) < 8:
        score += 14
        reasons.append("AI: fewer than 8 hazards -> things may be missed")
    elif len(hz) > 12:
        score += 6
        reasons.append("AI: more than 12 hazards -> hard to read, consider trimming")

    if len(ms) < min(len(hz), 8):
        score += 12
        reasons.append("AI: countermeasures do not cover every hazard")
    else:
        reasons.append(f"AI: {len(ms)} countermeasure(s)")

    if len(th) < 4:
        score += 10
        reasons.append("AI: fewer than 4 third-party measures")
    else:
        reasons.append(f"AI: {len(th)} third-party measure(s)")

    if causal < min(len(hz), 6):
        score += 8
        reasons.append("AI: cause and effect wording is thin")

    return BreakdownItem(score=_clamp100(score), reasons=reasons)


# --- totals -------------------------------------------------------------------

def normalize_to_100(raw: float, max_raw: float) -> int:
    r, m = to_float(raw), to_float(max_raw)
    if r is None or m is None or r <= 0 or m <= 0:
        return 0
    return _clamp100(r / m * 100)


def build_ai_top5(breakdown: Dict[str, BreakdownItem]) -> List[SummaryItem]:
    items = [
        SummaryItem(key="weather", label="Weather (applied slot)", score=breakdown["weather"].score,
                    reason=(breakdown["weather"].reasons or ["Weather risk"])[0]),
        SummaryItem(key="photo", label="Photos (diff / missing)", score=breakdown["photo"].score,
                    reason=(breakdown["photo"].reasons or ["Photo risk"])[0]),
        SummaryItem(key="third_party", label="Third parties", score=breakdown["third_party"].score,
                    reason=(breakdown["third_party"].reasons or ["Third-party risk"])[0]),
        SummaryItem(key="workers", label="Worker count", score=breakdown["workers"].score,
                    reason=(breakdown["workers"].reasons or ["Worker risk"])[0]),
        SummaryItem(key="text_quality_ai", label="AI supplement (text)", score=breakdown["text_quality_ai"].score,
                    reason=(breakdown["text_quality_ai"].reasons or ["AI supplement risk"])[0]),
    ]
    order = stable_rank_desc([i.score for i in items])
    return [items[i] for i in order][:5]


def review_risk(body: Any, defaults: Dict[str, float] = REVIEW_DEFAULTS) -> ReviewScore:
    """Score one review sheet. Never raises for missing or malformed sections."""
    req = body if isinstance(body, ReviewInput) else ReviewInput.model_validate(body or {})
    human, ai = req.human, req.ai

    third = score_third_party(human.third_party_level)
    workers = score_workers(human.worker_count)
    weather = score_weather(req.weather)
    photo = score_photos(req.photos)
    human_text = "\n".join([human.work_detail, human.hazards, human.countermeasures, human.third_party_level])
    keyword = score_keywords(human_text)
    tq_human = score_text_quality_human(human.hazards, human.countermeasures, "")
    tq_ai = score_text_quality_ai(ai.ai_hazards, ai.ai_countermeasures, ai.ai_third_party)

    raw_human = defaults["base_human"] + workers.score + third.score + weather.score + keyword.score + tq_human.score
    raw_ai = defaults["base_ai"] + workers.score + third.score + weather.score + photo.score + tq_ai.score
    biased_ai = raw_ai * defaults["bias_multiplier"]

    total_human = normalize_to_100(raw_human, defaults["max_raw_human"])
    total_ai = normalize_to_100(biased_ai, defaults["max_raw_ai"])

    breakdown = {
        "weather": weather,
        "photo": photo,
        "third_party": third,
        "workers": workers,
        "keyword": keyword,
        "text_quality_human": tq_human,
        "text_quality_ai": tq_ai,
    }
    return ReviewScore(
        total_human=total_human,
        total_ai=total_ai,
        delta=int(clamp(total_ai - total_human, -100, 100)),
        breakdown=breakdown,
        ai_top5=build_ai_top5(breakdown),
        meta={
            **{k: float(v) for k, v in defaults.items()},
            "raw_human": round(raw_human, 1),
            "raw_ai": round(raw_ai, 1),
        },
    )
