# intent_capture/pipeline/recommendations.py
"""Free-form request -> extracted intent -> filtered, ranked catalog matches."""

import asyncio
import logging
from typing import Any, Dict
from ..database.models import RecommendationRequest, RecommendationResponse
from ..integrations.manager import StoreManager
from ..matching.matcher import filter_products
from ..matching.ranking import MAX_RESULTS, rank_products
from ..nlu.intent_extractor import IntentExtractor

logger = logging.getLogger(__name__)

async def recommend(request: RecommendationRequest, store_manager: StoreManager,
                    extractor: IntentExtractor, max_results: int = MAX_RESULTS) -> Dict[str, Any]:
    """Run the recommendation flow and return the response body.

    The coarse store query pushes down stock and price bounds; category and
    variant checks happen in process so hierarchical category matches survive.
    """
    intent = await extractor.extract(request.raw_intent)

    products = await asyncio.to_thread(
        store_manager.query_products,
        request.merchant_id,
        price_min=intent.price_min,
        price_max=intent.price_max,
        in_stock=True
    )

    if not products:
        logger.info(f"No catalog products for merchant '{request.merchant_id}' within the requested bounds")
        return RecommendationResponse(
            extracted_intent=intent,
            unmet_demand=True,
            confidence=intent.confidence,
            message="No products found matching your criteria"
        ).to_response()

    candidates = filter_products(products, intent)

    if not candidates:
        logger.info(f"Unmet demand for merchant '{request.merchant_id}': {request.raw_intent!r}")
        return RecommendationResponse(
            extracted_intent=intent,
            unmet_demand=True,
            confidence=intent.confidence,
            message="No products match the requested category, size or color"
        ).to_response()

    ranked = rank_products(candidates, intent, limit=request.limit, max_results=max_results)

    return RecommendationResponse(
        products=ranked,
        extracted_intent=intent,
        unmet_demand=False,
        confidence=intent.confidence
    ).to_response()
