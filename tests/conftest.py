# tests/conftest.py
import json
import pytest
from fastapi.testclient import TestClient
from intent_capture.api.main import app, get_config, get_language_model, get_store_manager
from intent_capture.config import Config
from intent_capture.database.models import ExtractedProductIntent, Product, ProductVariant
from intent_capture.integrations.manager import StoreManager
from intent_capture.integrations.mock.provider import MemoryStore
from intent_capture.nlu.llm import LanguageModel

class FakeLanguageModel(LanguageModel):
    """Returns canned responses in order (the last one repeats) or raises."""

    def __init__(self, *responses, error=None):
        self.responses = [r if isinstance(r, str) else json.dumps(r) for r in responses]
        self.error = error
        self.prompts = []

    async def generate(self, prompt, temperature=0.0, max_output_tokens=500):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if not self.responses:
            return ""
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]

def make_config(**overrides) -> Config:
    settings = {
        "ENVIRONMENT": "development",
        "STORE_PROVIDER": "memory",
        "WEBHOOK_SECRET": None,
        "RECOMMENDATION_API_KEY": None,
    }
    settings.update(overrides)
    return Config(_env_file=None, **settings)

def make_product(product_id, category, price, variants=None, name=None, **fields) -> Product:
    if variants is None:
        variants = [("42", "Black", 1)]
    return Product(
        product_id=product_id,
        name=name or product_id.replace("_", " ").title(),
        category=category,
        price=price,
        variants=[
            ProductVariant(variant_id=f"{product_id}-{i}", attributes={"size": size, "color": color}, stock=stock)
            for i, (size, color, stock) in enumerate(variants)
        ],
        **fields
    )

def make_intent(**fields) -> ExtractedProductIntent:
    return ExtractedProductIntent(**fields)

@pytest.fixture
def memory_store():
    return MemoryStore(seed_demo_data=True)

@pytest.fixture
def config():
    return make_config()

@pytest.fixture
def store_manager(config, memory_store):
    return StoreManager(config, store=memory_store)

@pytest.fixture
def make_client(memory_store):
    """Build a TestClient with config, store and language model overridden."""

    def _make(llm=None, **config_overrides):
        config = make_config(**config_overrides)
        manager = StoreManager(config, store=memory_store)
        model = llm or FakeLanguageModel()
        app.dependency_overrides[get_config] = lambda: config
        app.dependency_overrides[get_store_manager] = lambda: manager
        app.dependency_overrides[get_language_model] = lambda: model
        return TestClient(app)

    yield _make
    app.dependency_overrides.clear()
