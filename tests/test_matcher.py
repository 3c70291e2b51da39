# tests/test_matcher.py
import pytest
from conftest import make_intent, make_product
from intent_capture.matching.matcher import (
    EXACT,
    INTENT_MORE_SPECIFIC,
    NO_MATCH,
    PRODUCT_MORE_SPECIFIC,
    category_match_type,
    filter_products,
    find_matching_variant,
    variant_matches,
)

@pytest.mark.parametrize("intent_category, product_category, expected", [
    ("Basketball Shoes", "basketball shoes", EXACT),
    ("Shoes", "Basketball Shoes", PRODUCT_MORE_SPECIFIC),
    ("shoes", "Shoes Outlet", PRODUCT_MORE_SPECIFIC),
    ("Basketball Shoes", "Shoes", INTENT_MORE_SPECIFIC),
    ("Boots", "Basketball Shoes", NO_MATCH),
    ("Running Shoes", "Basketball Shoes", NO_MATCH),
    ("Basketball Shoes", "Pro Basketball Shoes", PRODUCT_MORE_SPECIFIC),
    ("Shoes Basketball", "Basketball Shoes", NO_MATCH),
    ("Shoes", "", NO_MATCH),
])
def test_category_match_type(intent_category, product_category, expected):
    assert category_match_type(intent_category, product_category) == expected

def test_category_match_is_not_symmetric():
    assert category_match_type("Shoes", "Basketball Shoes") == PRODUCT_MORE_SPECIFIC
    assert category_match_type("Basketball Shoes", "Shoes") == INTENT_MORE_SPECIFIC

def test_variant_matches_size_color_and_stock():
    product = make_product("aj", "Basketball Shoes", 120, variants=[("42", "Electric Red", 3), ("43", "Electric Red", 0)])
    in_stock, sold_out = product.variants

    assert variant_matches(in_stock, size=" 42 ", color="red")
    assert not variant_matches(in_stock, size="43")
    assert not variant_matches(in_stock, color="blue")
    assert not variant_matches(sold_out, size="43")

def test_find_matching_variant_defaults_to_first_in_stock():
    product = make_product("aj", "Basketball Shoes", 120, variants=[("41", "Red", 0), ("42", "Red", 2), ("43", "Red", 5)])

    assert find_matching_variant(product).variant_id == "aj-1"
    assert find_matching_variant(product, size="43").variant_id == "aj-2"
    assert find_matching_variant(product, size="41") is None

def test_filter_products_applies_stock_price_category_and_variant():
    products = [
        make_product("exact", "Basketball Shoes", 120, variants=[("42", "Red", 1)]),
        make_product("generic", "Shoes", 60, variants=[("42", "Red", 1)]),
        make_product("too_expensive", "Basketball Shoes", 200, variants=[("42", "Red", 1)]),
        make_product("wrong_size", "Basketball Shoes", 100, variants=[("44", "Red", 1)]),
        make_product("sold_out", "Basketball Shoes", 100, variants=[("42", "Red", 0)]),
        make_product("other", "Running Shoes", 90, variants=[("42", "Red", 1)]),
    ]
    intent = make_intent(category="Basketball Shoes", price_max=150, size="42")

    assert [p.product_id for p in filter_products(products, intent)] == ["exact"]

def test_filter_products_accepts_hierarchical_match_and_keeps_order():
    products = [
        make_product("running", "Running Shoes", 140),
        make_product("boots", "Boots", 90),
        make_product("basketball", "Basketball Shoes", 120),
    ]
    intent = make_intent(category="Shoes")

    assert [p.product_id for p in filter_products(products, intent)] == ["running", "basketball"]

def test_filter_products_price_bounds_are_inclusive():
    products = [make_product("low", "Shoes", 50), make_product("high", "Shoes", 100), make_product("mid", "Shoes", 75)]
    intent = make_intent(price_min=50, price_max=75)

    assert [p.product_id for p in filter_products(products, intent)] == ["low", "mid"]
