# intent_capture/matching/ranking.py
"""Scoring and ranking of candidate products against an extracted intent."""

import logging
from typing import List, Optional, Tuple
from ..database.models import ExtractedProductIntent, Product, ProductVariant, RankedProduct
from .matcher import (
    EXACT,
    INTENT_MORE_SPECIFIC,
    PRODUCT_MORE_SPECIFIC,
    category_match_type,
    category_words,
    find_matching_variant,
)

logger = logging.getLogger(__name__)

MAX_RESULTS = 5

IN_STOCK_SCORE = 10
CATEGORY_EXACT_SCORE = 200
CATEGORY_HIERARCHICAL_SCORE = 50
PRICE_MATCH_SCORE = 40
PRICE_BELOW_MIN_SCORE = 20
PRICE_ABOVE_MAX_SCORE = 5
VARIANT_MATCH_SCORE = 30
VARIANT_MISSING_PENALTY = -20
VARIANT_AVAILABLE_SCORE = 10

def format_price(price: float) -> str:
    """120.0 -> "120", 119.5 -> "119.5"."""
    price = float(price)
    return str(int(price)) if price.is_integer() else f"{price:.2f}".rstrip("0").rstrip(".")

def _category_score(product: Product, intent: ExtractedProductIntent) -> Tuple[int, List[str]]:
    if not intent.category:
        return 0, []

    match_type = category_match_type(intent.category, product.category)
    if match_type == EXACT:
        return CATEGORY_EXACT_SCORE, [f"category_exact_match:{product.category}"]
    if match_type == PRODUCT_MORE_SPECIFIC:
        return CATEGORY_HIERARCHICAL_SCORE, [f"category_hierarchical_match:{intent.category}->{product.category}"]
    if match_type == INTENT_MORE_SPECIFIC and set(category_words(product.category)) <= set(category_words(intent.category)):
        return 0, [f"category_too_generic:{product.category}"]
    return 0, [f"category_mismatch:{product.category}"]

def _price_score(product: Product, intent: ExtractedProductIntent) -> Tuple[int, List[str]]:
    price = format_price(product.price)
    low, high = intent.price_min, intent.price_max

    if low is not None and high is not None:
        if low <= product.price <= high:
            return PRICE_MATCH_SCORE, [f"price_in_range:{price}"]
        if product.price < low:
            return PRICE_BELOW_MIN_SCORE, [f"price_below_min:{price}"]
        return PRICE_ABOVE_MAX_SCORE, [f"price_above_max:{price}"]

    if high is not None:
        if product.price <= high:
            return PRICE_MATCH_SCORE, [f"price_within_max:{price}"]
        return 0, [f"price_above_max:{price}"]

    if low is not None:
        if product.price >= low:
            return PRICE_MATCH_SCORE, [f"price_above_min:{price}"]
        return 0, [f"price_below_min:{price}"]

    return 0, []

def _variant_score(product: Product, intent: ExtractedProductIntent) -> Tuple[int, List[str], Optional[ProductVariant]]:
    variant = find_matching_variant(product, intent.size, intent.color)

    if intent.size or intent.color:
        if variant is None:
            return VARIANT_MISSING_PENALTY, ["variant_unavailable"], None
        reasons = []
        if intent.size:
            reasons.append(f"size_match:{variant.size}")
        if intent.color:
            reasons.append(f"color_match:{variant.color}")
        return VARIANT_MATCH_SCORE, reasons, variant

    if variant is not None:
        return VARIANT_AVAILABLE_SCORE, ["variant_available"], variant
    return 0, [], None

def score_product(product: Product, intent: ExtractedProductIntent) -> Tuple[int, List[str], Optional[ProductVariant]]:
    """Pure score of one product: (score, reasons, matched variant)."""
    score = 0
    reasons: List[str] = []

    if product.in_stock:
        score += IN_STOCK_SCORE
        reasons.append("in_stock")

    for partial_score, partial_reasons in (_category_score(product, intent), _price_score(product, intent)):
        score += partial_score
        reasons.extend(partial_reasons)

    variant_score, variant_reasons, variant = _variant_score(product, intent)
    score += variant_score
    reasons.extend(variant_reasons)

    return score, reasons, variant

def _distinct(values: List[Optional[str]]) -> List[str]:
    seen = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen

def build_agent_summary(product: Product) -> str:
    """One voice-readable sentence block describing the product."""
    sizes = _distinct([v.size for v in product.variants if v.stock > 0])
    colors = _distinct([v.color for v in product.variants if v.stock > 0])

    parts = [f"{product.name}."]
    if product.description:
        parts.append(product.description.strip())
    if sizes:
        parts.append(f"Available sizes: {', '.join(sizes)}.")
    if colors:
        parts.append(f"Available colors: {', '.join(colors)}.")
    if product.tags:
        parts.append(f"Tags: {', '.join(product.tags)}.")
    parts.append(f"Price: {format_price(product.price)} {product.currency}.")
    return " ".join(parts)

def rank_products(candidates: List[Product], intent: ExtractedProductIntent,
                  limit: Optional[int] = None, max_results: int = MAX_RESULTS) -> List[RankedProduct]:
    """Score, sort descending (stable on ties) and keep the top results.

    The result count never exceeds max_results, nor MAX_RESULTS whatever
    the caller or the configuration asks for.
    """
    limit = min(limit or max_results, max_results, MAX_RESULTS)

    scored = []
    for product in candidates:
        score, reasons, variant = score_product(product, intent)
        scored.append((score, reasons, variant, product))

    # sorted() is stable, so equal scores keep catalog order
    scored = sorted(scored, key=lambda item: item[0], reverse=True)[:limit]

    ranked = []
    for score, reasons, variant, product in scored:
        ranked.append(RankedProduct(
            **product.model_dump(exclude={"in_stock"}),
            match_score=score,
            match_reasons=reasons,
            matched_variant=variant,
            agent_summary=build_agent_summary(product)
        ))

    logger.info(f"Ranked {len(candidates)} candidates, returning {len(ranked)}")
    return ranked
