"""
Request payload checks applied before anything reaches the store.

All functions are pure: they take a payload dict, raise a ShopError subclass
on failure and return a normalized copy on success.
"""
from typing import Any, Dict, Iterable

from errors import ImageCountError, InvalidStatus, MissingField

MIN_IMAGES = 2
MAX_IMAGES = 5

PRODUCT_REQUIRED = ("name", "price", "category", "stock")
REVIEW_REQUIRED = ("username", "comment", "star")
IDENTITY_FIELDS = ("_id", "id")
IMMUTABLE_PRODUCT_FIELDS = IDENTITY_FIELDS + ("createdAt", "rating")


def _check_image_count(images) -> None:
    if len(images) < MIN_IMAGES:
        raise ImageCountError(f"At least {MIN_IMAGES} images are required")
    if len(images) > MAX_IMAGES:
        raise ImageCountError(f"Maximum {MAX_IMAGES} images allowed")


def validate_product_create(payload: Dict[str, Any]) -> Dict[str, Any]:
    # Falsy values count as missing: a price or stock of 0 is rejected.
    if any(not payload.get(f) for f in PRODUCT_REQUIRED) or not payload.get("images"):
        raise MissingField("Missing required fields (name, price, category, stock, or images)")
    _check_image_count(payload["images"])

    data = {k: v for k, v in payload.items() if k not in IDENTITY_FIELDS}
    data["price"] = float(data["price"])
    data["stock"] = int(data["stock"])
    return data


def validate_product_update(payload: Dict[str, Any]) -> Dict[str, Any]:
    data = {k: v for k, v in payload.items() if k not in IMMUTABLE_PRODUCT_FIELDS}
    if "images" in data:
        _check_image_count(data["images"] or [])
    return data


def validate_review_create(payload: Dict[str, Any]) -> Dict[str, Any]:
    if any(not payload.get(f) for f in REVIEW_REQUIRED):
        raise MissingField("Missing required fields")
    data = dict(payload)
    if data.get("verified") is None:
        data["verified"] = False
    return data


def validate_order_status_update(status: Any, allowed: Iterable[str]) -> str:
    allowed = list(allowed)
    if status not in allowed:
        raise InvalidStatus(f"Invalid status. Must be one of: {', '.join(allowed)}")
    return status
