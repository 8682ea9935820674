"""Admin product management and public catalog reads."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from database import DocumentStore, parse_id
from errors import InvalidId, NotFound
from validation import validate_product_create, validate_product_update

logger = logging.getLogger(__name__)


class Catalog:
    def __init__(self, store: DocumentStore):
        self.store = store

    def _oid(self, product_id: str):
        oid = parse_id(product_id)
        if oid is None:
            raise InvalidId("Invalid product ID")
        return oid

    def add_product(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        data = validate_product_create(payload)
        now = datetime.now(timezone.utc)
        data.setdefault("mainImageIndex", 0)
        data.update({"rating": 0, "createdAt": now, "updatedAt": now})
        product_id = self.store.products.insert(data)
        logger.info("Product %s added (%s)", product_id, data["name"])
        return {"productId": product_id, "product": data}

    def list_products(self) -> List[Dict[str, Any]]:
        return self.store.products.find_many({})

    def get_product(self, product_id: str) -> Dict[str, Any]:
        product = self.store.products.find_one({"_id": self._oid(product_id)})
        if not product:
            raise NotFound("Product not found")
        return product

    def edit_product(self, product_id: str, patch: Dict[str, Any]) -> Dict[str, int]:
        oid = self._oid(product_id)
        update = validate_product_update(patch)
        update["updatedAt"] = datetime.now(timezone.utc)
        result = self.store.products.update_one({"_id": oid}, update)
        if result["matchedCount"] == 0:
            raise NotFound("Product not found")
        return {"modifiedCount": result["modifiedCount"]}

    def delete_product(self, product_id: str) -> Dict[str, int]:
        result = self.store.products.delete_one({"_id": self._oid(product_id)})
        if result["deletedCount"] == 0:
            raise NotFound("Product not found")
        logger.info("Product %s deleted", product_id)
        return {"deletedCount": result["deletedCount"]}
