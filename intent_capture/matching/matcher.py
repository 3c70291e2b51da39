# intent_capture/matching/matcher.py
"""Hierarchical category matching, variant compatibility and candidate filtering."""

import logging
from typing import List, Optional
from ..database.models import ExtractedProductIntent, Product, ProductVariant

logger = logging.getLogger(__name__)

EXACT = "exact"
PRODUCT_MORE_SPECIFIC = "product_more_specific"
INTENT_MORE_SPECIFIC = "intent_more_specific"
NO_MATCH = "no_match"

ACCEPTED_CATEGORY_MATCHES = (EXACT, PRODUCT_MORE_SPECIFIC)

def category_words(category: str) -> List[str]:
    return category.strip().lower().split()

def category_match_type(intent_category: str, product_category: str) -> str:
    """Classify how a product category relates to the requested one.

    Not symmetric: ("Shoes", "Basketball Shoes") is product_more_specific,
    ("Basketball Shoes", "Shoes") is intent_more_specific.
    """
    intent_words = category_words(intent_category or "")
    product_words = category_words(product_category or "")

    if not intent_words or not product_words:
        return NO_MATCH

    if intent_words == product_words:
        return EXACT

    if len(intent_words) == 1 and len(product_words) > 1:
        if intent_words[0] in product_words:
            return PRODUCT_MORE_SPECIFIC
        return NO_MATCH

    if len(intent_words) > 1 and len(product_words) == 1:
        return INTENT_MORE_SPECIFIC

    # Multi-word on both sides: only a strict superset of the requested words counts
    if len(product_words) > len(intent_words) and set(intent_words) <= set(product_words):
        return PRODUCT_MORE_SPECIFIC

    return NO_MATCH

def variant_matches(variant: ProductVariant, size: Optional[str] = None, color: Optional[str] = None) -> bool:
    """Size equals (trimmed, case-insensitive), color is a substring, stock > 0."""
    if variant.stock <= 0:
        return False

    if size:
        variant_size = variant.size
        if variant_size is None or variant_size.lower() != size.strip().lower():
            return False

    if color:
        variant_color = variant.color
        if variant_color is None or color.strip().lower() not in variant_color.lower():
            return False

    return True

def find_matching_variant(product: Product, size: Optional[str] = None,
                          color: Optional[str] = None) -> Optional[ProductVariant]:
    """First variant satisfying the size/color request, or first in-stock one when neither is given."""
    for variant in product.variants:
        if variant_matches(variant, size, color):
            return variant
    return None

def price_in_bounds(price: float, price_min: Optional[float], price_max: Optional[float]) -> bool:
    if price_min is not None and price < price_min:
        return False
    if price_max is not None and price > price_max:
        return False
    return True

def filter_products(products: List[Product], intent: ExtractedProductIntent) -> List[Product]:
    """Candidates that are in stock, inside the price bounds, category-compatible
    and have a usable variant. Catalog order is preserved."""
    candidates = []

    for product in products:
        if not product.in_stock:
            continue

        if not price_in_bounds(product.price, intent.price_min, intent.price_max):
            continue

        if intent.category:
            match_type = category_match_type(intent.category, product.category)
            if match_type not in ACCEPTED_CATEGORY_MATCHES:
                continue

        if find_matching_variant(product, intent.size, intent.color) is None:
            continue

        candidates.append(product)

    logger.info(f"Filtered {len(products)} products down to {len(candidates)} candidates")
    return candidates
