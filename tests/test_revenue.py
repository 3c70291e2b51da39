# tests/test_revenue.py
import pytest
from intent_capture.utils.revenue import attribute_value, estimated_revenue, opportunity_cost, price_expectation

def test_price_expectation():
    assert price_expectation(100, 200) == 150
    assert price_expectation(80, 80) == 80
    assert price_expectation(None, 90) == 90
    assert price_expectation(40, None) == 40
    assert price_expectation(None, None) is None

def test_estimated_revenue():
    assert estimated_revenue(None, "buy", 1.0) is None
    assert estimated_revenue(100, "buy", 1.0) == pytest.approx(80)
    assert estimated_revenue(100, "inquire", 0.5) == pytest.approx(10)
    assert estimated_revenue(100, "compare", 1.0) == pytest.approx(50)
    assert estimated_revenue(100, "browse", 1.0) == pytest.approx(20)

def test_opportunity_cost_exact_for_stock_problems():
    assert opportunity_cost("out_of_stock", 50, None, None) == (50, False)
    assert opportunity_cost("variant_missing", 75, None, None) == (75, False)

def test_opportunity_cost_price_too_high():
    cost = opportunity_cost("price_too_high", 100, None, None)
    assert cost.amount == pytest.approx(80)
    assert cost.is_estimated is True

    assert opportunity_cost("price_too_high", 100, 70, None) == (70, False)

def test_opportunity_cost_product_not_found():
    assert opportunity_cost("product_not_found", 100, None, None) == (None, False)
    assert opportunity_cost("product_not_found", None, None, 95) == (95, True)

def test_opportunity_cost_unpriced_reasons():
    assert opportunity_cost("feature_missing", 100, None, None) == (None, False)
    assert opportunity_cost("other", 100, None, None) == (None, False)
    assert opportunity_cost(None, 100, None, None) == (None, False)

def test_attribute_value_gates_on_outcome():
    accepted = attribute_value("accepted", "buy", 1.0, None, 100, None)
    assert accepted["estimated_revenue"] == pytest.approx(80)
    assert accepted["opportunity_cost"] is None

    open_intent = attribute_value(None, "inquire", 0.5, None, 100, None)
    assert open_intent["estimated_revenue"] == pytest.approx(10)

    rejected = attribute_value("rejected", "buy", 1.0, "out_of_stock", 50, None)
    assert rejected == {"estimated_revenue": None, "opportunity_cost": 50, "opportunity_cost_is_estimated": False}

    abandoned = attribute_value("abandoned", "buy", 1.0, None, 100, None)
    assert abandoned == {"estimated_revenue": None, "opportunity_cost": None, "opportunity_cost_is_estimated": False}
