# kyrisk/risk/pipeline.py
from typing import Any, Iterable, List, Mapping, Sequence

from kyrisk.risk.calc import apply_factors, as_candidate, as_context, context_factors
from kyrisk.risk.coefficients import CoefficientTable, DEFAULT_COEFF
from kyrisk.risk.models import ScoredHazard
from kyrisk.risk.trade_classifier import DEFAULT_TRADE_RULES, TradeRule
from kyrisk.risk.trade_weights import DEFAULT_TRADE_WEIGHTS
from kyrisk.utils.debug import dbg
from kyrisk.utils.ranking import stable_rank_desc


def score_hazards(
    candidates: Iterable[Any],
    context: Any = None,
    coeff: CoefficientTable = DEFAULT_COEFF,
    rules: Sequence[TradeRule] = DEFAULT_TRADE_RULES,
    weights: Mapping[str, Mapping[str, float]] = DEFAULT_TRADE_WEIGHTS,
) -> List[ScoredHazard]:
    """
    Score every candidate against one shared context and return them
    highest final_risk first. Rows with equal final_risk keep the order
    they were entered in.
    """
    ctx = as_context(context)
    factors = context_factors(ctx, coeff, rules)
    scored = [apply_factors(as_candidate(c), factors, weights) for c in candidates or []]

    order = stable_rank_desc([s.final_risk for s in scored])
    dbg(
        "RISK",
        f"scored {len(scored)} item(s); trade={factors.trade} "
        f"T={factors.third_party} W={factors.weather:.3f} D={factors.density:.3f} I={factors.photo:.3f}",
    )
    return [scored[i] for i in order]
