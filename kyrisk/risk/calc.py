# kyrisk/risk/calc.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from kyrisk.risk.coefficients import (
    CoefficientTable,
    DEFAULT_COEFF,
    density_factor,
    photo_factor,
    third_party_factor,
    weather_factor,
)
from kyrisk.risk.models import HazardCandidate, RiskContext, ScoredHazard
from kyrisk.risk.trade_classifier import DEFAULT_TRADE_RULES, TradeRule, classify_trade
from kyrisk.risk.trade_weights import DEFAULT_TRADE_WEIGHTS, get_trade_weight
from kyrisk.utils.numbers import round2


@dataclass(frozen=True)
class ContextFactors:
    """The factors that depend only on the context (same for every row)."""
    third_party: float
    weather: float
    density: float
    photo: float
    trade: str


def as_candidate(obj: Any) -> HazardCandidate:
    if isinstance(obj, HazardCandidate):
        return obj
    return HazardCandidate.model_validate(obj)


def as_context(obj: Any) -> RiskContext:
    if isinstance(obj, RiskContext):
        return obj
    if obj is None:
        return RiskContext()
    return RiskContext.model_validate(obj)


def context_factors(
    context: RiskContext,
    coeff: CoefficientTable = DEFAULT_COEFF,
    rules: Sequence[TradeRule] = DEFAULT_TRADE_RULES,
) -> ContextFactors:
    return ContextFactors(
        third_party=third_party_factor(context.third_party_level, coeff),
        weather=weather_factor(context.weather, coeff),
        density=density_factor(context.worker_count, coeff),
        photo=photo_factor(context.photo_score, coeff),
        trade=classify_trade(context.work_description, rules),
    )


def apply_factors(
    candidate: HazardCandidate,
    factors: ContextFactors,
    weights: Mapping[str, Mapping[str, float]] = DEFAULT_TRADE_WEIGHTS,
) -> ScoredHazard:
    base_risk = candidate.likelihood * candidate.severity
    trade_factor = get_trade_weight(factors.trade, candidate.category, weights)
    raw = (
        base_risk
        * factors.third_party
        * factors.weather
        * factors.density
        * factors.photo
        * trade_factor
    )
    return ScoredHazard(
        candidate=candidate,
        base_risk=base_risk,
        third_party_factor=factors.third_party,
        weather_factor=factors.weather,
        density_factor=factors.density,
        photo_factor=factors.photo,
        trade_factor=trade_factor,
        trade=factors.trade,
        final_risk=max(0.0, round2(raw)),
    )


def score_hazard(
    candidate: Any,
    context: Any = None,
    coeff: CoefficientTable = DEFAULT_COEFF,
    rules: Sequence[TradeRule] = DEFAULT_TRADE_RULES,
    weights: Mapping[str, Mapping[str, float]] = DEFAULT_TRADE_WEIGHTS,
) -> ScoredHazard:
    """
    Ri = round2(R0 * T * W * D * I * G) for a single row, where
    R0 = likelihood * severity and G is the trade/category weight.
    """
    ctx = as_context(context)
    return apply_factors(as_candidate(candidate), context_factors(ctx, coeff, rules), weights)
