# intent_capture/integrations/base.py
"""Store interface every provider implements."""

from abc import ABC, abstractmethod
from typing import List, Optional
from ..database.models import Intent, MerchantMetadata, Product, Session

class CatalogStore(ABC):
    """Merchant-scoped document store: merchant -> {products, sessions, intents}."""

    @abstractmethod
    def get_merchant(self, merchant_id: str) -> Optional[MerchantMetadata]:
        pass

    @abstractmethod
    def list_products(self, merchant_id: str) -> List[Product]:
        """All products of a merchant in catalog order."""
        pass

    @abstractmethod
    def get_product(self, merchant_id: str, product_id: str) -> Optional[Product]:
        pass

    @abstractmethod
    def query_products(self, merchant_id: str, price_min: Optional[float] = None,
                       price_max: Optional[float] = None, in_stock: Optional[bool] = None,
                       category: Optional[str] = None, limit: Optional[int] = None) -> List[Product]:
        """Coarse pre-filter: price range, stock flag and exact category equality."""
        pass

    @abstractmethod
    def save_products(self, merchant_id: str, products: List[Product]) -> int:
        """Batch write; returns the number of products written."""
        pass

    @abstractmethod
    def get_session(self, merchant_id: str, session_id: str) -> Optional[Session]:
        pass

    @abstractmethod
    def create_session(self, session: Session) -> None:
        pass

    @abstractmethod
    def list_sessions(self, merchant_id: str) -> List[Session]:
        pass

    @abstractmethod
    def create_intent(self, intent: Intent) -> str:
        """Persist an intent; returns its id."""
        pass

    @abstractmethod
    def list_intents(self, merchant_id: str, session_id: Optional[str] = None) -> List[Intent]:
        pass
