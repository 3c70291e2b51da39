# intent_capture/nlu/call_analyzer.py
"""Call analysis: one model call per conversation, validated into typed intents."""

import asyncio
import logging
from typing import Any, Dict, List, Optional
from ..config import NLUModel
from ..database.models import CallAnalysis, CapturedIntent, MerchantMetadata, TranscriptTurn
from ..integrations.manager import StoreManager
from ..prompts import CALL_ANALYSIS_PROMPT
from ..utils.revenue import price_expectation
from .llm import LanguageModel
from .response_parser import (
    clamp_confidence,
    clean_string,
    extract_json_object,
    ordered_price_range,
)

logger = logging.getLogger(__name__)

INTENT_TYPES = ("buy", "compare", "inquire")
INTENT_TYPE_ALIASES = {"browse": "inquire"}
OUTCOMES = ("accepted", "rejected", "abandoned")
INTENT_STAGES = ("expressed", "confirmed")
REJECTION_REASONS = (
    "variant_missing",
    "out_of_stock",
    "price_too_high",
    "product_not_found",
    "feature_missing",
    "other",
)
SENTIMENTS = ("positive", "neutral", "negative")

DEFAULT_INTENT_TYPE = "inquire"
DEFAULT_INTENT_STAGE = "expressed"
DEFAULT_REJECTION_REASON = "other"
DEFAULT_SENTIMENT = "neutral"

def empty_analysis() -> CallAnalysis:
    """Safe result used whenever analysis cannot complete."""
    return CallAnalysis(intents=[], sentiment=DEFAULT_SENTIMENT, product_mentions=[], recommendation_shown=[])

def format_conversation_text(transcript: List[TranscriptTurn]) -> str:
    return "\n".join(f"{turn.role}: {turn.message}" for turn in transcript if turn.message)

def _enum_value(value: Any, allowed: tuple, default: Optional[str]) -> Optional[str]:
    if isinstance(value, str) and value.strip().lower() in allowed:
        return value.strip().lower()
    return default

def _intent_type(value: Any) -> str:
    if isinstance(value, str):
        value = INTENT_TYPE_ALIASES.get(value.strip().lower(), value)
    return _enum_value(value, INTENT_TYPES, DEFAULT_INTENT_TYPE)

def _outcome(item: Dict[str, Any]) -> Optional[str]:
    outcome = _enum_value(item.get("outcome"), OUTCOMES, None)
    if outcome is None and "outcome" not in item:
        # Older responses carry a boolean "accepted" flag instead
        accepted = item.get("accepted")
        if accepted is True:
            return "accepted"
        if accepted is False:
            return "rejected"
    return outcome

def _variant_attributes(value: Any) -> Optional[Dict[str, str]]:
    if not isinstance(value, dict):
        return None
    attributes = {}
    for key, attr_value in value.items():
        if isinstance(attr_value, str) and attr_value.strip():
            attributes[str(key).strip().lower()] = attr_value.strip()
    return attributes or None

def _describe_intent(intent_type: str, product_name: Optional[str], category: Optional[str],
                     outcome: Optional[str]) -> str:
    verbs = {"buy": "wanted to buy", "compare": "compared options for", "inquire": "asked about"}
    subject = product_name or category or "a product"
    sentence = f"Customer {verbs[intent_type]} {subject}"
    if outcome:
        sentence += f" and the outcome was {outcome}"
    return sentence + "."

def normalize_intent(item: Dict[str, Any], product_map: Dict[str, str]) -> CapturedIntent:
    """Validate one raw intent object, replacing invalid fields with defaults."""
    product_name = clean_string(item.get("productName"))
    product_id = clean_string(item.get("productId"))
    if product_id not in product_map.values():
        product_id = None
    if product_id is None and product_name:
        product_id = product_map.get(product_name.lower())
        if product_id is None:
            logger.info(f"No catalog product named '{product_name}'")

    category = clean_string(item.get("category"))
    intent_type = _intent_type(item.get("intentType"))
    outcome = _outcome(item)
    intent_stage = _enum_value(item.get("intentStage"), INTENT_STAGES, DEFAULT_INTENT_STAGE)

    rejection_reason = None
    if outcome == "rejected":
        rejection_reason = _enum_value(item.get("rejectionReason"), REJECTION_REASONS, DEFAULT_REJECTION_REASON)

    price_min, price_max = ordered_price_range(item.get("price_min"), item.get("price_max"))

    normalized = clean_string(item.get("normalizedIntent"))
    if normalized is None:
        normalized = _describe_intent(intent_type, product_name, category, outcome)

    return CapturedIntent(
        product_id=product_id,
        product_name=product_name,
        category=category,
        intent_type=intent_type,
        outcome=outcome,
        intent_stage=intent_stage,
        rejection_reason=rejection_reason,
        confidence=clamp_confidence(item.get("confidence")),
        variant_attributes=_variant_attributes(item.get("variantAttributes")),
        normalized_intent=normalized,
        price_min=price_min,
        price_max=price_max,
        customer_price_expectation=price_expectation(price_min, price_max)
    )

def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [s for s in (clean_string(v) for v in value if isinstance(v, str)) if s]

class CallAnalyzer:
    """Turns a call transcript into validated intents."""

    def __init__(self, llm: LanguageModel, store_manager: StoreManager, settings: Optional[NLUModel] = None):
        self.llm = llm
        self.store_manager = store_manager
        self.settings = settings or NLUModel()

    def _merchant_context(self, merchant_id: str, merchant_metadata: Optional[MerchantMetadata]) -> str:
        if merchant_metadata:
            return (f"Merchant: {merchant_metadata.name}, Industry: {merchant_metadata.industry}, "
                    f"Currency: {merchant_metadata.currency}, Locale: {merchant_metadata.locale}")
        return f"Merchant ID: {merchant_id}"

    async def analyze(self, transcript: List[TranscriptTurn], merchant_id: str,
                      merchant_metadata: Optional[MerchantMetadata] = None) -> CallAnalysis:
        """Analyze a call; never raises, returns an empty analysis on any failure."""
        conversation_text = format_conversation_text(transcript)
        if not conversation_text:
            return empty_analysis()

        try:
            product_map = await asyncio.to_thread(self.store_manager.product_name_index, merchant_id)

            prompt = CALL_ANALYSIS_PROMPT.format(
                merchant_context=self._merchant_context(merchant_id, merchant_metadata),
                product_names=", ".join(product_map.keys()) or "None",
                conversation_text=conversation_text
            )

            result_text = await self.llm.generate(
                prompt,
                temperature=self.settings.call_temperature,
                max_output_tokens=self.settings.call_max_tokens
            )
            logger.debug(f"Call analysis raw response: {result_text[:2000]}")

            parsed = extract_json_object(result_text)

            raw_intents = parsed.get("intents")
            if raw_intents is None and "intentType" in parsed:
                raw_intents = [parsed]
            if not isinstance(raw_intents, list):
                raw_intents = []

            intents = [normalize_intent(item, product_map) for item in raw_intents if isinstance(item, dict)]

            recommendation_shown = []
            for name in _string_list(parsed.get("recommendationShown")):
                product_id = product_map.get(name.lower())
                if product_id:
                    recommendation_shown.append(product_id)

            analysis = CallAnalysis(
                intents=intents,
                sentiment=_enum_value(parsed.get("sentiment"), SENTIMENTS, DEFAULT_SENTIMENT),
                product_mentions=_string_list(parsed.get("productMentions")),
                recommendation_shown=recommendation_shown
            )
            logger.info(f"Call analysis for merchant '{merchant_id}' captured {len(intents)} intents")
            return analysis

        except Exception as e:
            logger.error(f"Call analysis failed: {e}")
            return empty_analysis()
