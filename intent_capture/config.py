# intent_capture/config.py
import logging
from functools import lru_cache
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

class NLUModel(BaseModel):
    """Language model settings."""
    model: str = Field(default="gemini-2.5-flash")
    call_temperature: float = Field(default=1.0)
    call_max_tokens: int = Field(default=2000)
    query_temperature: float = Field(default=0.0)
    query_max_tokens: int = Field(default=500)

class Config(BaseSettings):
    """Configuration settings for the intent capture service."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=True,
        env_file_encoding='utf-8',
        extra='ignore',
        populate_by_name=True
    )

    nlu_settings: NLUModel = Field(default=NLUModel())
    app_name: str = "intent_capture_app"
    ENVIRONMENT: str = Field(default="development")  # "development", "production"
    DEFAULT_MERCHANT_ID: str = Field(default="merchant_001")

    # Google GenAI settings
    CLOUD_PROJECT: str = Field(default="", alias="GOOGLE_CLOUD_PROJECT")
    CLOUD_LOCATION: str = Field(default="us-central1", alias="GOOGLE_CLOUD_LOCATION")
    GENAI_USE_VERTEXAI: str = Field(default="1", alias="GOOGLE_GENAI_USE_VERTEXAI")
    API_KEY: str | None = Field(default="", alias="GOOGLE_API_KEY")
    NLU_MODEL: str | None = Field(default=None)

    # Store settings
    STORE_PROVIDER: str = Field(default="memory")  # "memory", "elasticsearch"
    SEED_DEMO_CATALOG: bool = Field(default=True)
    ELASTICSEARCH_URL: str = Field(default="http://localhost:9200")
    ELASTICSEARCH_USER: str | None = Field(default=None)
    ELASTICSEARCH_PASSWORD: str | None = Field(default=None)
    ELASTICSEARCH_INDEX_PREFIX: str = Field(default="intent_capture")

    # Webhook settings
    WEBHOOK_SECRET: str | None = Field(default=None)
    SIGNATURE_HEADER: str = Field(default="ElevenLabs-Signature")
    TIMESTAMP_HEADER: str = Field(default="x-elevenlabs-timestamp")
    SIGNATURE_TOLERANCE_SECONDS: int = Field(default=30 * 60)

    # Recommendation settings
    RECOMMENDATION_API_KEY: str | None = Field(default=None)
    MAX_RECOMMENDATIONS: int = Field(default=5)

    # CORS
    ALLOWED_ORIGINS: List[str] = Field(default=["http://localhost:3000", "http://localhost:3001"])

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def use_vertexai(self) -> bool:
        return self.GENAI_USE_VERTEXAI.lower() in ("1", "true", "yes")

    @property
    def nlu_model_name(self) -> str:
        return self.NLU_MODEL or self.nlu_settings.model

@lru_cache()
def get_config() -> Config:
    """Process-wide configuration, read once."""
    return Config()
