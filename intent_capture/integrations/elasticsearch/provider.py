# intent_capture/integrations/elasticsearch/provider.py
"""Elasticsearch-backed merchant store."""

import logging
from typing import Any, Dict, List, Optional
from elasticsearch import Elasticsearch, NotFoundError, helpers

from ...database.models import Intent, MerchantMetadata, Product, Session
from ...config import Config
from ...exceptions import StoreError
from ..base import CatalogStore

logger = logging.getLogger(__name__)

MAX_RESULTS = 10000

class ElasticsearchStore(CatalogStore):
    """One index per collection; every document carries its merchantId."""

    def __init__(self, config: Config, client: Optional[Elasticsearch] = None):
        self.config = config

        if client is not None:
            self.es = client
        elif config.ELASTICSEARCH_USER:
            self.es = Elasticsearch(
                config.ELASTICSEARCH_URL,
                basic_auth=(config.ELASTICSEARCH_USER, config.ELASTICSEARCH_PASSWORD or "")
            )
        else:
            self.es = Elasticsearch(config.ELASTICSEARCH_URL)

        prefix = config.ELASTICSEARCH_INDEX_PREFIX
        self.merchants_index = f"{prefix}_merchants"
        self.products_index = f"{prefix}_products"
        self.sessions_index = f"{prefix}_sessions"
        self.intents_index = f"{prefix}_intents"

        self._create_indices()
        logger.info(f"Initialized Elasticsearch store with prefix '{prefix}'")

    def _create_indices(self):
        """Create indices with explicit mappings for the filtered fields."""

        mappings = {
            self.merchants_index: {
                "properties": {
                    "merchantId": {"type": "keyword"},
                    "currency": {"type": "keyword"},
                    "locale": {"type": "keyword"}
                }
            },
            self.products_index: {
                "properties": {
                    "merchantId": {"type": "keyword"},
                    "productId": {"type": "keyword"},
                    "name": {"type": "text", "fields": {"keyword": {"type": "keyword"}}},
                    "category": {"type": "keyword"},
                    "price": {"type": "float"},
                    "currency": {"type": "keyword"},
                    "description": {"type": "text"},
                    "tags": {"type": "keyword"},
                    "images": {"type": "keyword", "index": False},
                    "variants": {"type": "object", "enabled": False},
                    "inStock": {"type": "boolean"}
                }
            },
            self.sessions_index: {
                "properties": {
                    "merchantId": {"type": "keyword"},
                    "sessionId": {"type": "keyword"},
                    "agentId": {"type": "keyword"},
                    "transcript": {"type": "object", "enabled": False},
                    "rawText": {"type": "text"},
                    "timestamp": {"type": "date"}
                }
            },
            self.intents_index: {
                "properties": {
                    "merchantId": {"type": "keyword"},
                    "sessionId": {"type": "keyword"},
                    "intentId": {"type": "keyword"},
                    "productId": {"type": "keyword"},
                    "intentType": {"type": "keyword"},
                    "outcome": {"type": "keyword"},
                    "rejectionReason": {"type": "keyword"},
                    "variantAttributes": {"type": "object", "enabled": False},
                    "timestamp": {"type": "date"}
                }
            }
        }

        for index_name, index_mappings in mappings.items():
            if self.es.indices.exists(index=index_name):
                continue
            try:
                self.es.indices.create(
                    index=index_name,
                    settings={"number_of_shards": 1, "number_of_replicas": 0},
                    mappings=index_mappings
                )
                logger.info(f"Created Elasticsearch index: {index_name}")
            except Exception as e:
                logger.error(f"Failed to create index {index_name}: {e}")
                raise StoreError(f"Failed to create index {index_name}") from e

    @staticmethod
    def _doc_id(merchant_id: str, key: str) -> str:
        return f"{merchant_id}:{key}"

    def _get(self, index: str, doc_id: str) -> Optional[Dict[str, Any]]:
        try:
            response = self.es.get(index=index, id=doc_id)
            return response["_source"]
        except NotFoundError:
            return None
        except Exception as e:
            logger.error(f"Failed to get {doc_id} from {index}: {e}")
            raise StoreError(f"Failed to read {doc_id}") from e

    def _search(self, index: str, filters: List[Dict], sort: Optional[List[Dict]] = None,
                size: int = MAX_RESULTS) -> List[Dict[str, Any]]:
        try:
            response = self.es.search(
                index=index,
                query={"bool": {"filter": filters}},
                sort=sort,
                size=size
            )
            return [hit["_source"] for hit in response["hits"]["hits"]]
        except Exception as e:
            logger.error(f"Search on {index} failed: {e}")
            raise StoreError(f"Search on {index} failed") from e

    def _index(self, index: str, doc_id: str, document: Dict[str, Any], refresh: Optional[str] = None):
        try:
            self.es.index(index=index, id=doc_id, document=document, refresh=refresh)
            logger.debug(f"Indexed {doc_id} into {index}")
        except Exception as e:
            logger.error(f"Failed to index {doc_id} into {index}: {e}")
            raise StoreError(f"Failed to write {doc_id}") from e

    def get_merchant(self, merchant_id: str) -> Optional[MerchantMetadata]:
        source = self._get(self.merchants_index, merchant_id)
        return MerchantMetadata.model_validate(source) if source else None

    def list_products(self, merchant_id: str) -> List[Product]:
        return self.query_products(merchant_id)

    def get_product(self, merchant_id: str, product_id: str) -> Optional[Product]:
        source = self._get(self.products_index, self._doc_id(merchant_id, product_id))
        return Product.model_validate(source) if source else None

    def query_products(self, merchant_id: str, price_min: Optional[float] = None,
                       price_max: Optional[float] = None, in_stock: Optional[bool] = None,
                       category: Optional[str] = None, limit: Optional[int] = None) -> List[Product]:
        filters: List[Dict] = [{"term": {"merchantId": merchant_id}}]

        if price_min is not None or price_max is not None:
            price_range = {}
            if price_min is not None:
                price_range["gte"] = price_min
            if price_max is not None:
                price_range["lte"] = price_max
            filters.append({"range": {"price": price_range}})

        if in_stock is not None:
            filters.append({"term": {"inStock": in_stock}})

        if category is not None:
            filters.append({"term": {"category": category}})

        sources = self._search(
            self.products_index,
            filters,
            sort=[{"productId": {"order": "asc"}}],
            size=limit or MAX_RESULTS
        )
        products = [Product.model_validate(source) for source in sources]
        logger.info(f"Product query for merchant '{merchant_id}' returned {len(products)} products")
        return products

    def save_products(self, merchant_id: str, products: List[Product]) -> int:

        def generate_docs():
            for product in products:
                document = product.to_document()
                document["merchantId"] = merchant_id
                yield {
                    "_index": self.products_index,
                    "_id": self._doc_id(merchant_id, product.product_id),
                    "_source": document
                }

        try:
            success_count, failed = helpers.bulk(self.es, generate_docs(), raise_on_error=False, refresh="wait_for")
        except Exception as e:
            logger.error(f"Bulk indexing failed: {e}")
            raise StoreError("Bulk product write failed") from e

        if failed:
            logger.error(f"Failed to index {len(failed)} products")
            for failure in failed:
                logger.error(f"Failed doc: {failure}")

        logger.info(f"Bulk indexed {success_count} products, {len(failed)} failed")
        return success_count

    def get_session(self, merchant_id: str, session_id: str) -> Optional[Session]:
        source = self._get(self.sessions_index, self._doc_id(merchant_id, session_id))
        return Session.model_validate(source) if source else None

    def create_session(self, session: Session) -> None:
        self._index(
            self.sessions_index,
            self._doc_id(session.merchant_id, session.session_id),
            session.to_document(),
            refresh="wait_for"
        )

    def list_sessions(self, merchant_id: str) -> List[Session]:
        sources = self._search(
            self.sessions_index,
            [{"term": {"merchantId": merchant_id}}],
            sort=[{"timestamp": {"order": "asc"}}]
        )
        return [Session.model_validate(source) for source in sources]

    def create_intent(self, intent: Intent) -> str:
        self._index(
            self.intents_index,
            self._doc_id(intent.merchant_id, intent.intent_id),
            intent.to_document()
        )
        return intent.intent_id

    def list_intents(self, merchant_id: str, session_id: Optional[str] = None) -> List[Intent]:
        filters: List[Dict] = [{"term": {"merchantId": merchant_id}}]
        if session_id is not None:
            filters.append({"term": {"sessionId": session_id}})
        sources = self._search(self.intents_index, filters, sort=[{"timestamp": {"order": "asc"}}])
        return [Intent.model_validate(source) for source in sources]
