# import_products.py
"""Import a flat product export into a merchant's catalog."""

import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import argparse
import json
from typing import Any, Dict, List
from dotenv import load_dotenv
from intent_capture.config import Config
from intent_capture.database.models import Product, ProductVariant
from intent_capture.integrations.manager import StoreManager

BATCH_SIZE = 500

def to_product(item: Dict[str, Any]) -> Product:
    """Flat import record -> catalog Product (size/color become variant attributes)."""
    variants = []
    for variant in item.get("variants") or []:
        attributes = {}
        for key in ("size", "color"):
            if variant.get(key) not in (None, ""):
                attributes[key] = str(variant[key])
        variants.append(ProductVariant(
            variant_id=str(variant.get("variantId") or variant.get("sku") or len(variants)),
            attributes=attributes,
            stock=max(int(variant.get("stock") or 0), 0),
            sku=variant.get("sku") or ""
        ))

    return Product(
        product_id=str(item["productId"]),
        name=item.get("productName") or item.get("name") or "",
        category=item.get("category") or "",
        price=float(item.get("price") or 0),
        currency=item.get("currency") or "USD",
        description=item.get("description") or "",
        tags=item.get("tags") or [],
        images=item.get("images") or [],
        variants=variants
    )

def load_products(path: str) -> List[Product]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    # Accept either a bare list or {"products": [...]}
    if isinstance(data, dict):
        data = data.get("products", [])

    products = []
    for item in data:
        try:
            products.append(to_product(item))
        except (KeyError, TypeError, ValueError) as e:
            print(f"⚠️  Skipping malformed product {item.get('productId', '?') if isinstance(item, dict) else item}: {e}")
    return products

def import_products(path: str, merchant_id: str) -> int:
    """Write products in batches; returns the number written."""
    config = Config()
    manager = StoreManager.get_instance(config)

    products = load_products(path)
    print(f"📦 Loaded {len(products)} products from {path}")
    print(f"🏪 Importing into merchant '{merchant_id}' ({type(manager.store).__name__})")

    written = 0
    for start in range(0, len(products), BATCH_SIZE):
        batch = products[start:start + BATCH_SIZE]
        written += manager.save_products(merchant_id, batch)
        print(f"   ✅ Batch {start // BATCH_SIZE + 1}: {len(batch)} products")

    print(f"🎉 Imported {written} products")
    return written

def main():
    load_dotenv()

    parser = argparse.ArgumentParser(description="Import products into a merchant catalog")
    parser.add_argument("--file", required=True, help="Path to the JSON product export")
    parser.add_argument("--merchant", default=None, help="Merchant id (defaults to DEFAULT_MERCHANT_ID)")
    args = parser.parse_args()

    merchant_id = args.merchant or Config().DEFAULT_MERCHANT_ID

    try:
        import_products(args.file, merchant_id)
    except FileNotFoundError:
        print(f"❌ File not found: {args.file}")
        sys.exit(1)
    except Exception as e:
        print(f"❌ Import failed: {e}")
        sys.exit(1)

if __name__ == "__main__":
    main()
