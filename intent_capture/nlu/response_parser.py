# intent_capture/nlu/response_parser.py
"""Repair and coercion helpers for raw model output."""

import json
import math
from typing import Any, Dict, Optional
from ..exceptions import LLMResponseError

def strip_code_fences(text: str) -> str:
    """Remove markdown fencing around a JSON answer."""
    text = text.strip()
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0]
    elif "```" in text:
        parts = text.split("```")
        if len(parts) >= 3:
            text = parts[1]
    return text.strip()

def extract_json_object(text: Optional[str]) -> Dict[str, Any]:
    """Parse the outermost {...} in a model response.

    Raises LLMResponseError for empty output, missing or misordered braces,
    invalid JSON, or a top-level value that is not an object.
    """
    if not text or not text.strip():
        raise LLMResponseError("Empty response from language model")

    cleaned = strip_code_fences(text)
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end == -1 or end < start:
        raise LLMResponseError("No JSON object found in response")

    try:
        parsed = json.loads(cleaned[start:end + 1])
    except json.JSONDecodeError as e:
        raise LLMResponseError(f"Invalid JSON in response: {e}") from e

    if not isinstance(parsed, dict):
        raise LLMResponseError("Response JSON is not an object")
    return parsed

def clean_string(value: Any) -> Optional[str]:
    """Trimmed non-empty string or None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        value = str(value)
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value or value.lower() in ("null", "none"):
        return None
    return value

def to_number(value: Any) -> Optional[float]:
    """Finite non-negative number or None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number) or number < 0:
        return None
    return number

def clamp_confidence(value: Any) -> float:
    number = to_number(value)
    if number is None:
        return 0.0
    return max(0.0, min(1.0, number))

def ordered_price_range(price_min: Any, price_max: Any) -> tuple[Optional[float], Optional[float]]:
    """Coerce both bounds and swap them when min > max."""
    low = to_number(price_min)
    high = to_number(price_max)
    if low is not None and high is not None and low > high:
        low, high = high, low
    return low, high
