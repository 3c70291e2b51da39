"""In-memory store for development and tests."""

from typing import Dict, List, Optional
from ...database.models import Intent, MerchantMetadata, Product, ProductVariant, Session
from ..base import CatalogStore

DEMO_MERCHANT_ID = "merchant_001"

class MemoryStore(CatalogStore):
    """Keeps merchant documents in process memory."""

    def __init__(self, seed_demo_data: bool = False):
        self.merchants: Dict[str, MerchantMetadata] = {}
        self.products: Dict[str, Dict[str, Product]] = {}
        self.sessions: Dict[str, Dict[str, Session]] = {}
        self.intents: Dict[str, Dict[str, Intent]] = {}
        if seed_demo_data:
            self.merchants[DEMO_MERCHANT_ID] = MerchantMetadata(
                merchant_id=DEMO_MERCHANT_ID,
                name="Demo Sneaker Store",
                industry="Footwear",
                currency="EUR",
                locale="en"
            )
            self.save_products(DEMO_MERCHANT_ID, self._generate_demo_products())

    def add_merchant(self, merchant: MerchantMetadata):
        self.merchants[merchant.merchant_id] = merchant

    def get_merchant(self, merchant_id: str) -> Optional[MerchantMetadata]:
        return self.merchants.get(merchant_id)

    def list_products(self, merchant_id: str) -> List[Product]:
        return list(self.products.get(merchant_id, {}).values())

    def get_product(self, merchant_id: str, product_id: str) -> Optional[Product]:
        return self.products.get(merchant_id, {}).get(product_id)

    def query_products(self, merchant_id: str, price_min: Optional[float] = None,
                       price_max: Optional[float] = None, in_stock: Optional[bool] = None,
                       category: Optional[str] = None, limit: Optional[int] = None) -> List[Product]:
        results = self.list_products(merchant_id)

        if price_min is not None:
            results = [p for p in results if p.price >= price_min]
        if price_max is not None:
            results = [p for p in results if p.price <= price_max]
        if in_stock is not None:
            results = [p for p in results if p.in_stock == in_stock]
        if category is not None:
            results = [p for p in results if p.category == category]

        return results[:limit] if limit else results

    def save_products(self, merchant_id: str, products: List[Product]) -> int:
        catalog = self.products.setdefault(merchant_id, {})
        for product in products:
            catalog[product.product_id] = product
        return len(products)

    def get_session(self, merchant_id: str, session_id: str) -> Optional[Session]:
        return self.sessions.get(merchant_id, {}).get(session_id)

    def create_session(self, session: Session) -> None:
        self.sessions.setdefault(session.merchant_id, {})[session.session_id] = session

    def list_sessions(self, merchant_id: str) -> List[Session]:
        return list(self.sessions.get(merchant_id, {}).values())

    def create_intent(self, intent: Intent) -> str:
        self.intents.setdefault(intent.merchant_id, {})[intent.intent_id] = intent
        return intent.intent_id

    def list_intents(self, merchant_id: str, session_id: Optional[str] = None) -> List[Intent]:
        intents = list(self.intents.get(merchant_id, {}).values())
        if session_id is not None:
            intents = [i for i in intents if i.session_id == session_id]
        return intents

    def _generate_demo_products(self) -> List[Product]:
        """Generate a small shoe catalog."""

        def variants(prefix: str, sizes: List[str], color: str, stock: Dict[str, int]) -> List[ProductVariant]:
            return [
                ProductVariant(
                    variant_id=f"{prefix}-{size}-{color.lower().replace(' ', '-')}",
                    attributes={"size": size, "color": color},
                    stock=stock.get(size, 0),
                    sku=f"{prefix.upper()}-{size}"
                )
                for size in sizes
            ]

        return [
            Product(
                product_id="air_jordan_13",
                name="Air Jordan 13 Retro",
                category="Basketball Shoes",
                price=120.0,
                currency="EUR",
                description="Retro basketball shoe with a panther-paw outsole.",
                tags=["basketball", "retro", "high-top"],
                images=["https://example.com/airjordan13.jpg"],
                variants=variants("aj13", ["41", "42", "43", "44"], "Electric Red", {"41": 2, "42": 3, "44": 1})
            ),
            Product(
                product_id="nike_air_force_1",
                name="Nike Air Force 1",
                category="Casual Shoes",
                price=110.0,
                currency="EUR",
                description="Everyday leather sneaker.",
                tags=["casual", "leather", "classic"],
                images=["https://example.com/airforce1.jpg"],
                variants=variants("af1", ["40", "41", "42", "43"], "White", {"40": 5, "41": 3, "43": 4})
            ),
            Product(
                product_id="pegasus_40",
                name="Pegasus 40",
                category="Running Shoes",
                price=140.0,
                currency="EUR",
                description="Cushioned daily trainer for road running.",
                tags=["running", "road", "cushioned"],
                images=["https://example.com/pegasus40.jpg"],
                variants=variants("peg40", ["42", "43", "44"], "Black", {"42": 6, "43": 2, "44": 0})
            ),
            Product(
                product_id="court_classic",
                name="Court Classic",
                category="Shoes",
                price=65.0,
                currency="EUR",
                description="Simple canvas shoe.",
                tags=["canvas", "budget"],
                images=["https://example.com/courtclassic.jpg"],
                variants=variants("cc", ["39", "40", "41", "42"], "Navy Blue", {"39": 1, "42": 2})
            ),
            Product(
                product_id="zoom_freak_5",
                name="Zoom Freak 5",
                category="Basketball Shoes",
                price=135.0,
                currency="EUR",
                description="Lightweight basketball shoe built for quick cuts.",
                tags=["basketball", "lightweight"],
                images=["https://example.com/zoomfreak5.jpg"],
                variants=variants("zf5", ["42", "43"], "Black", {})
            )
        ]
