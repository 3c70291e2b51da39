# api/main.py
from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.datastructures import Headers
from starlette.responses import Response
from intent_capture.config import Config, get_config
from intent_capture.database.models import RecommendationRequest
from intent_capture.exceptions import public_message
from intent_capture.integrations.manager import StoreManager
from intent_capture.nlu.call_analyzer import CallAnalyzer
from intent_capture.nlu.intent_extractor import IntentExtractor
from intent_capture.nlu.llm import GeminiLanguageModel, LanguageModel
from intent_capture.pipeline.post_call import process_post_call
from intent_capture.pipeline.recommendations import recommend
from intent_capture.utils.signature import verify_webhook_signature
import json
import logging
from typing import Any, List

logger = logging.getLogger(__name__)

class PreflightCORSMiddleware(CORSMiddleware):
    """CORSMiddleware that answers accepted preflights with 204 No Content."""

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        headers = {
            key: value for key, value in response.headers.items()
            if key not in ("content-length", "content-type")
        }
        return Response(status_code=204, headers=headers)

app = FastAPI(title="Intent Capture API")

app.add_middleware(
    PreflightCORSMiddleware,
    allow_origins=get_config().ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

_language_model = None

def get_store_manager(config: Config = Depends(get_config)) -> StoreManager:
    return StoreManager.get_instance(config)

def get_language_model(config: Config = Depends(get_config)) -> LanguageModel:
    global _language_model
    if _language_model is None:
        _language_model = GeminiLanguageModel(config)
    return _language_model

def get_call_analyzer(config: Config = Depends(get_config),
                      store_manager: StoreManager = Depends(get_store_manager),
                      llm: LanguageModel = Depends(get_language_model)) -> CallAnalyzer:
    return CallAnalyzer(llm, store_manager, config.nlu_settings)

def get_intent_extractor(config: Config = Depends(get_config),
                         llm: LanguageModel = Depends(get_language_model)) -> IntentExtractor:
    return IntentExtractor(llm, config.nlu_settings)

def validation_message(errors: List[Any]) -> str:
    """First validation error as "<field>: <reason>"."""
    if not errors:
        return "Invalid request body"
    error = errors[0]
    location = [str(part) for part in error.get("loc", ()) if part != "body"]
    field = ".".join(location)
    return f"{field}: {error.get('msg')}" if field else str(error.get("msg"))

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "message": validation_message(exc.errors())}
    )

@app.options("/webhooks/post-call")
async def post_call_preflight():
    """Preflight without CORS request headers."""
    return Response(status_code=204)

@app.post("/webhooks/post-call")
async def post_call_webhook(request: Request,
                            config: Config = Depends(get_config),
                            store_manager: StoreManager = Depends(get_store_manager),
                            analyzer: CallAnalyzer = Depends(get_call_analyzer)):
    """Post-call transcript webhook.

    Signature and payload problems are 4xx; processing failures are reported
    with 200 so the sender does not redeliver.
    """
    body = await request.body()

    if config.WEBHOOK_SECRET:
        is_valid = verify_webhook_signature(
            request.headers.get(config.SIGNATURE_HEADER),
            request.headers.get(config.TIMESTAMP_HEADER),
            body,
            config.WEBHOOK_SECRET,
            tolerance_seconds=config.SIGNATURE_TOLERANCE_SECONDS
        )
        if not is_valid:
            logger.warning("Rejected post-call webhook with invalid signature")
            return JSONResponse(status_code=401, content={"error": "Invalid webhook signature"})

    try:
        payload = json.loads(body)
    except ValueError:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid payload", "message": "Body must be valid JSON"}
        )

    try:
        status_code, content = await process_post_call(payload, config, store_manager, analyzer)
    except Exception as e:
        logger.error(f"Post-call webhook failed: {e}")
        status_code, content = 200, {
            "error": "Processing failed",
            "message": public_message(e, config.is_production)
        }

    return JSONResponse(status_code=status_code, content=content)

@app.post("/api/recommendations")
async def recommendations(request: Request,
                          config: Config = Depends(get_config),
                          store_manager: StoreManager = Depends(get_store_manager),
                          extractor: IntentExtractor = Depends(get_intent_extractor)):
    """Ranked in-stock products for a free-form shopper request."""
    if config.RECOMMENDATION_API_KEY:
        if request.headers.get("X-API-Key") != config.RECOMMENDATION_API_KEY:
            return JSONResponse(status_code=401, content={"error": "Unauthorized", "message": "Invalid API key"})

    try:
        body = await request.json()
        recommendation_request = RecommendationRequest.model_validate(body)
    except ValidationError as e:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "message": validation_message(e.errors())}
        )
    except ValueError:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "message": "Body must be valid JSON"}
        )

    try:
        return await recommend(recommendation_request, store_manager, extractor,
                               max_results=config.MAX_RECOMMENDATIONS)
    except Exception as e:
        logger.error(f"Recommendation failed for merchant '{recommendation_request.merchant_id}': {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "message": public_message(e, config.is_production)}
        )

@app.get("/api/merchants/{merchant_id}/products")
async def list_products(merchant_id: str, store_manager: StoreManager = Depends(get_store_manager)):
    """Full catalog for a merchant, in catalog order."""
    try:
        products = store_manager.list_products(merchant_id)
    except Exception as e:
        logger.error(f"Failed to list products for '{merchant_id}': {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "merchantId": merchant_id,
        "count": len(products),
        "products": [product.to_document() for product in products]
    }

@app.get("/api/merchants/{merchant_id}/products/{product_id}")
async def get_product(merchant_id: str, product_id: str,
                      store_manager: StoreManager = Depends(get_store_manager)):
    product = store_manager.get_product(merchant_id, product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product.to_document()

@app.get("/api/merchants/{merchant_id}/categories")
async def list_categories(merchant_id: str, store_manager: StoreManager = Depends(get_store_manager)):
    products = store_manager.list_products(merchant_id)
    categories = sorted({product.category for product in products if product.category})
    return {"merchantId": merchant_id, "categories": categories}

@app.get("/api/health")
async def health_check():
    """Basic health check"""
    return {"status": "healthy", "service": "intent-capture-api"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
