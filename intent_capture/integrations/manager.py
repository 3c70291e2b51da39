# intent_capture/integrations/manager.py
"""Store manager - routes reads and writes to the configured provider."""

import logging
from typing import Dict, List, Optional
from ..config import Config
from ..database.models import Intent, MerchantMetadata, Product, Session
from .base import CatalogStore
from .mock.provider import MemoryStore

logger = logging.getLogger(__name__)

SIMILAR_PRODUCTS_LIMIT = 10

# Module-level singleton variables
_instance = None
_config_hash = None

class StoreManager:
    """Wraps the configured store and adds the lookups the pipeline needs."""

    def __init__(self, config: Config, store: Optional[CatalogStore] = None):
        self.config = config
        self.store = store or self._initialize_store()

    @classmethod
    def get_instance(cls, config: Optional[Config] = None) -> 'StoreManager':
        """Get singleton instance of StoreManager."""
        global _instance, _config_hash

        config = config or Config()
        current_config_hash = hash(f"{config.STORE_PROVIDER}_{config.ELASTICSEARCH_URL}_{config.ELASTICSEARCH_INDEX_PREFIX}")

        # Create new instance if none exists or config changed
        if _instance is None or _config_hash != current_config_hash:
            logger.info("Creating new StoreManager instance")
            _instance = cls(config)
            _config_hash = current_config_hash

        return _instance

    def _initialize_store(self) -> CatalogStore:
        """Initialize the configured provider, falling back to memory."""
        if self.config.STORE_PROVIDER == "elasticsearch":
            try:
                from .elasticsearch.provider import ElasticsearchStore
                store = ElasticsearchStore(self.config)
                logger.info("Initialized Elasticsearch store")
                return store
            except Exception as e:
                logger.error(f"Failed to initialize Elasticsearch store: {e}")
                logger.info("Falling back to memory store")

        logger.info(f"Initialized memory store (demo catalog: {self.config.SEED_DEMO_CATALOG})")
        return MemoryStore(seed_demo_data=self.config.SEED_DEMO_CATALOG)

    def get_merchant_metadata(self, merchant_id: str) -> Optional[MerchantMetadata]:
        """Merchant profile, or None when missing or unreadable."""
        try:
            return self.store.get_merchant(merchant_id)
        except Exception as e:
            logger.error(f"Error getting merchant {merchant_id}: {e}")
            return None

    def list_products(self, merchant_id: str) -> List[Product]:
        return self.store.list_products(merchant_id)

    def get_product(self, merchant_id: str, product_id: str) -> Optional[Product]:
        return self.store.get_product(merchant_id, product_id)

    def query_products(self, merchant_id: str, **filters) -> List[Product]:
        return self.store.query_products(merchant_id, **filters)

    def save_products(self, merchant_id: str, products: List[Product]) -> int:
        return self.store.save_products(merchant_id, products)

    def product_name_index(self, merchant_id: str) -> Dict[str, str]:
        """Lowercased product name -> productId."""
        index = {}
        for product in self.store.list_products(merchant_id):
            if product.name and product.product_id:
                index[product.name.lower()] = product.product_id
        return index

    def get_product_price(self, merchant_id: str, product_id: Optional[str]) -> Optional[float]:
        """Product price, or None when unknown or the lookup fails."""
        if not product_id:
            return None
        try:
            product = self.store.get_product(merchant_id, product_id)
            return product.price if product else None
        except Exception as e:
            logger.error(f"Error getting price for product {product_id}: {e}")
            return None

    def estimate_similar_price(self, merchant_id: str, category: Optional[str]) -> Optional[float]:
        """Average price of up to 10 products in the same category."""
        if not category:
            return None
        try:
            products = self.store.query_products(merchant_id, category=category, limit=SIMILAR_PRODUCTS_LIMIT)
        except Exception as e:
            logger.error(f"Error estimating price for category {category}: {e}")
            return None

        prices = [p.price for p in products if p.price is not None]
        if not prices:
            return None
        return sum(prices) / len(prices)

    def get_session(self, merchant_id: str, session_id: str) -> Optional[Session]:
        return self.store.get_session(merchant_id, session_id)

    def create_session(self, session: Session) -> None:
        self.store.create_session(session)

    def list_sessions(self, merchant_id: str) -> List[Session]:
        return self.store.list_sessions(merchant_id)

    def create_intent(self, intent: Intent) -> str:
        return self.store.create_intent(intent)

    def list_intents(self, merchant_id: str, session_id: Optional[str] = None) -> List[Intent]:
        return self.store.list_intents(merchant_id, session_id=session_id)
