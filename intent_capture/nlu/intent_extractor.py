# intent_capture/nlu/intent_extractor.py
"""Structured product requirements from a single free-form request."""

import logging
from typing import Optional
from ..config import NLUModel
from ..database.models import ExtractedProductIntent
from ..prompts import PRODUCT_INTENT_PROMPT
from .llm import LanguageModel
from .response_parser import clamp_confidence, clean_string, extract_json_object, ordered_price_range

logger = logging.getLogger(__name__)

class IntentExtractor:
    """Wraps the model call that feeds the recommendation endpoint."""

    def __init__(self, llm: LanguageModel, settings: Optional[NLUModel] = None):
        self.llm = llm
        self.settings = settings or NLUModel()

    async def extract(self, raw_intent: str) -> ExtractedProductIntent:
        """Extract category, price range, size and color.

        Any failure yields an all-null intent with zero confidence, which
        widens the search instead of failing the request.
        """
        try:
            result_text = await self.llm.generate(
                PRODUCT_INTENT_PROMPT.format(raw_intent=raw_intent),
                temperature=self.settings.query_temperature,
                max_output_tokens=self.settings.query_max_tokens
            )
            extracted = extract_json_object(result_text)

            price_min, price_max = ordered_price_range(extracted.get("price_min"), extracted.get("price_max"))

            intent = ExtractedProductIntent(
                category=clean_string(extracted.get("category")),
                price_min=price_min,
                price_max=price_max,
                size=clean_string(extracted.get("size")),
                color=clean_string(extracted.get("color")),
                confidence=clamp_confidence(extracted.get("confidence")),
                raw_intent=raw_intent
            )
            logger.info(f"Extracted intent: category={intent.category}, price=[{intent.price_min}, {intent.price_max}], "
                        f"size={intent.size}, color={intent.color}")
            return intent

        except Exception as e:
            logger.error(f"Product intent extraction failed: {e}")
            return ExtractedProductIntent(raw_intent=raw_intent)
