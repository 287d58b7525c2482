from kyrisk.risk.models import AccidentCategory
from kyrisk.risk.trade_classifier import (
    DEFAULT_TRADE_RULES,
    OTHER_TRADE,
    UNCLASSIFIED,
    TradeRule,
    classify_trade,
)
from kyrisk.risk.trade_weights import get_trade_weight


def test_empty_description_is_unclassified():
    assert classify_trade("") == UNCLASSIFIED
    assert classify_trade(None) == UNCLASSIFIED
    assert classify_trade("   ") == UNCLASSIFIED


def test_no_keyword_is_other():
    assert classify_trade("resupply only, no site work") == OTHER_TRADE


def test_slope_work():
    assert classify_trade("mortar spraying on the slope face") == "slope-work"
    assert classify_trade("MORTAR  SPRAY upper bench") == "slope-work"


def test_first_matching_rule_wins():
    # mentions both traffic control and the slope; traffic rule comes first
    assert classify_trade("traffic control below the slope") == "traffic-control"
    rules = (TradeRule("x", ("b",)), TradeRule("y", ("a",)))
    assert classify_trade("ab", rules) == "x"
    assert classify_trade("ab", tuple(reversed(rules))) == "y"


def test_default_rules_have_labels():
    labels = [r.label for r in DEFAULT_TRADE_RULES]
    assert len(labels) == len(set(labels))
    assert UNCLASSIFIED not in labels and OTHER_TRADE not in labels


def test_trade_weight_lookup():
    assert get_trade_weight("slope-work", AccidentCategory.COLLAPSE) == 1.35
    assert get_trade_weight("slope-work", "fall") == 1.4
    assert get_trade_weight("slope-work", "electric-shock") == 1.0
    assert get_trade_weight("other", "fall") == 1.0
    assert get_trade_weight("", "fall") == 1.0


def test_trade_weight_ignores_bad_values():
    weights = {"t": {"fall": -1, "slip": "2", "collapse": float("nan")}}
    assert get_trade_weight("t", "fall", weights) == 1.0
    assert get_trade_weight("t", "slip", weights) == 1.0
    assert get_trade_weight("t", "collapse", weights) == 1.0
