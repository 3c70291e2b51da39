# intent_capture/database/models.py

from typing import List, Dict, Optional, Any, Literal
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

IntentType = Literal["buy", "compare", "inquire"]
Outcome = Literal["accepted", "rejected", "abandoned"]
IntentStage = Literal["expressed", "confirmed"]
RejectionReason = Literal[
    "variant_missing",
    "out_of_stock",
    "price_too_high",
    "product_not_found",
    "feature_missing",
    "other",
]
Sentiment = Literal["positive", "neutral", "negative"]

class StoreRecord(BaseModel):
    """Base for documents kept in the merchant store (camelCase on the wire)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")

class ProductVariant(StoreRecord):
    """A purchasable variant of a product."""
    variant_id: str
    attributes: Dict[str, Any] = {}
    stock: int = Field(default=0, ge=0)
    sku: str = ""

    def attribute(self, key: str) -> Optional[str]:
        value = self.attributes.get(key)
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    @property
    def size(self) -> Optional[str]:
        return self.attribute("size")

    @property
    def color(self) -> Optional[str]:
        return self.attribute("color")

class Product(StoreRecord):
    """Catalog product owned by a merchant."""
    product_id: str
    name: str
    category: str = ""
    price: float = 0.0
    currency: str = "USD"
    description: str = ""
    tags: List[str] = []
    images: List[str] = []
    variants: List[ProductVariant] = []

    @computed_field(alias="inStock")
    @property
    def in_stock(self) -> bool:
        return any(v.stock > 0 for v in self.variants)

class MerchantMetadata(StoreRecord):
    """Merchant profile used as prompt context."""
    merchant_id: str
    name: str = ""
    industry: str = ""
    currency: str = "USD"
    locale: str = "en"

class TranscriptTurn(StoreRecord):
    role: Literal["user", "agent"]
    message: str

class Session(StoreRecord):
    """Persisted record of one voice conversation."""
    session_id: str
    merchant_id: str
    agent_id: Optional[str] = None
    conversation_id: str
    source: str = "voice"
    transcript: List[TranscriptTurn] = []
    raw_text: str = ""
    timestamp: datetime

class CapturedIntent(StoreRecord):
    """Validated intent produced by call analysis, before attribution."""
    product_id: Optional[str] = None
    product_name: Optional[str] = None
    category: Optional[str] = None
    intent_type: IntentType = "inquire"
    outcome: Optional[Outcome] = None
    intent_stage: Optional[IntentStage] = None
    rejection_reason: Optional[RejectionReason] = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    variant_attributes: Optional[Dict[str, str]] = None
    normalized_intent: str = ""
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    customer_price_expectation: Optional[float] = None

class Intent(CapturedIntent):
    """Immutable intent history record."""
    model_config = ConfigDict(frozen=True)

    intent_id: str
    session_id: str
    merchant_id: str
    estimated_revenue: Optional[float] = None
    opportunity_cost: Optional[float] = None
    opportunity_cost_is_estimated: bool = False
    timestamp: datetime

class CallAnalysis(StoreRecord):
    """Normalized result of analyzing a whole call."""
    intents: List[CapturedIntent] = []
    sentiment: Sentiment = "neutral"
    product_mentions: List[str] = []
    recommendation_shown: List[str] = []

class ExtractedProductIntent(BaseModel):
    """Structured requirements extracted from a single recommendation query."""
    category: Optional[str] = None
    price_min: Optional[float] = None
    price_max: Optional[float] = None
    size: Optional[str] = None
    color: Optional[str] = None
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    raw_intent: str = ""

class RankedProduct(Product):
    """Product with its match score against an intent."""
    match_score: int = Field(default=0, alias="match_score")
    match_reasons: List[str] = Field(default=[], alias="match_reasons")
    matched_variant: Optional[ProductVariant] = Field(default=None, alias="matched_variant")
    agent_summary: Optional[str] = None

class RecommendationRequest(BaseModel):
    """Body of the recommendation endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    merchant_id: str = Field(alias="merchantId", min_length=1, max_length=100)
    raw_intent: str = Field(alias="rawIntent", min_length=1, max_length=10000)
    limit: Optional[int] = Field(default=None, ge=1)

class RecommendationResponse(BaseModel):
    products: List[RankedProduct] = []
    extracted_intent: ExtractedProductIntent
    unmet_demand: bool
    confidence: float
    message: Optional[str] = None

    def to_response(self) -> Dict[str, Any]:
        body = self.model_dump(by_alias=True, mode="json")
        if body.get("message") is None:
            body.pop("message", None)
        return body
