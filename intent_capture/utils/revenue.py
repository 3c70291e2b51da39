# intent_capture/utils/revenue.py
"""Revenue and opportunity-cost attribution for captured intents."""

from typing import NamedTuple, Optional

INTENT_WEIGHTS = {
    "buy": 0.8,
    "compare": 0.5,
    "inquire": 0.2,
    "browse": 0.2,
}

PRICE_TOO_HIGH_FACTOR = 0.8

class OpportunityCost(NamedTuple):
    amount: Optional[float]
    is_estimated: bool

def price_expectation(price_min: Optional[float], price_max: Optional[float]) -> Optional[float]:
    """Midpoint of the stated range, the single bound if only one is given, else None."""
    if price_min is not None and price_max is not None:
        return price_min if price_min == price_max else (price_min + price_max) / 2
    if price_min is not None:
        return price_min
    return price_max

def estimated_revenue(price: Optional[float], intent_type: str, confidence: float) -> Optional[float]:
    """price * intent weight * confidence; None without a price."""
    if price is None:
        return None
    weight = INTENT_WEIGHTS.get(intent_type, INTENT_WEIGHTS["inquire"])
    return price * weight * confidence

def opportunity_cost(rejection_reason: Optional[str], price: Optional[float],
                     customer_price_expectation: Optional[float],
                     estimated_similar_price: Optional[float]) -> OpportunityCost:
    """Revenue lost to a rejected intent.

    variant_missing / out_of_stock cost the product price exactly.
    price_too_high costs what the customer said they would pay, or an
    estimated 80% of the price when they gave no figure.
    product_not_found costs the estimated price of similar products.
    """
    if rejection_reason in ("variant_missing", "out_of_stock"):
        return OpportunityCost(price, False)

    if rejection_reason == "price_too_high":
        if customer_price_expectation is not None:
            return OpportunityCost(customer_price_expectation, False)
        if price is not None:
            return OpportunityCost(price * PRICE_TOO_HIGH_FACTOR, True)
        return OpportunityCost(None, False)

    if rejection_reason == "product_not_found":
        if estimated_similar_price is not None:
            return OpportunityCost(estimated_similar_price, True)
        return OpportunityCost(None, False)

    return OpportunityCost(None, False)

def attribute_value(outcome: Optional[str], intent_type: str, confidence: float,
                    rejection_reason: Optional[str], price: Optional[float],
                    customer_price_expectation: Optional[float],
                    estimated_similar_price: Optional[float] = None) -> dict:
    """Apply the outcome gating: revenue while open or accepted, cost when rejected."""
    revenue = None
    cost = OpportunityCost(None, False)

    if outcome in ("accepted", None):
        revenue = estimated_revenue(price, intent_type, confidence)

    if outcome == "rejected" and rejection_reason:
        cost = opportunity_cost(rejection_reason, price, customer_price_expectation, estimated_similar_price)

    return {
        "estimated_revenue": revenue,
        "opportunity_cost": cost.amount,
        "opportunity_cost_is_estimated": cost.is_estimated,
    }
