# tests/test_response_parser.py
import pytest
from intent_capture.exceptions import LLMResponseError
from intent_capture.nlu.response_parser import (
    clamp_confidence,
    clean_string,
    extract_json_object,
    ordered_price_range,
    to_number,
)

def test_extract_json_object_strips_fences_and_prose():
    text = 'Here you go:\n```json\n{"category": "Shoes", "price_max": 150}\n```\nAnything else?'
    assert extract_json_object(text) == {"category": "Shoes", "price_max": 150}

def test_extract_json_object_uses_outermost_braces():
    text = 'Result: {"intents": [{"intentType": "buy"}]} done'
    assert extract_json_object(text) == {"intents": [{"intentType": "buy"}]}

@pytest.mark.parametrize("text", [None, "", "   ", "no json here", "} backwards {", '{"broken": ', "[1, 2]"])
def test_extract_json_object_rejects_unusable_output(text):
    with pytest.raises(LLMResponseError):
        extract_json_object(text)

def test_clean_string():
    assert clean_string("  Shoes ") == "Shoes"
    assert clean_string("") is None
    assert clean_string("null") is None
    assert clean_string(42) == "42"
    assert clean_string(True) is None
    assert clean_string(["a"]) is None

def test_to_number_and_confidence():
    assert to_number("12.5") == 12.5
    assert to_number(-3) is None
    assert to_number("abc") is None
    assert to_number(float("nan")) is None
    assert clamp_confidence(1.7) == 1.0
    assert clamp_confidence("0.4") == 0.4
    assert clamp_confidence(None) == 0.0

def test_ordered_price_range_swaps_inverted_bounds():
    assert ordered_price_range(200, 100) == (100, 200)
    assert ordered_price_range("50", None) == (50, None)
    assert ordered_price_range(-1, 80) == (None, 80)
