import pytest

from config import EDIT_STATUSES, PATCH_STATUSES
from errors import ImageCountError, InvalidStatus, MissingField
from validation import (
    validate_order_status_update,
    validate_product_create,
    validate_product_update,
    validate_review_create,
)


def test_product_create_normalizes_price_and_stock(product_payload):
    data = validate_product_create(product_payload)
    assert data["price"] == 89.9
    assert data["stock"] == 12
    assert product_payload["price"] == "89.90"


@pytest.mark.parametrize("field", ["name", "price", "category", "stock", "images"])
def test_product_create_requires_field(product_payload, field):
    del product_payload[field]
    with pytest.raises(MissingField):
        validate_product_create(product_payload)


def test_product_create_treats_zero_stock_as_missing(product_payload):
    product_payload["stock"] = 0
    with pytest.raises(MissingField):
        validate_product_create(product_payload)


def test_product_create_empty_images_is_missing(product_payload):
    product_payload["images"] = []
    with pytest.raises(MissingField):
        validate_product_create(product_payload)


@pytest.mark.parametrize("count", [1, 6])
def test_product_create_image_bounds(product_payload, count):
    product_payload["images"] = [f"img-{i}.jpg" for i in range(count)]
    with pytest.raises(ImageCountError):
        validate_product_create(product_payload)


@pytest.mark.parametrize("count", [2, 5])
def test_product_create_accepts_image_bounds(product_payload, count):
    product_payload["images"] = [f"img-{i}.jpg" for i in range(count)]
    assert len(validate_product_create(product_payload)["images"]) == count


def test_product_update_strips_immutable_fields():
    patch = {"_id": "x", "id": "y", "createdAt": "2024-01-01", "rating": 5, "price": 10}
    assert validate_product_update(patch) == {"price": 10}


def test_product_update_checks_images_only_when_present():
    assert validate_product_update({"name": "New name"}) == {"name": "New name"}
    with pytest.raises(ImageCountError):
        validate_product_update({"images": ["only-one.jpg"]})


def test_review_create_defaults_verified():
    data = validate_review_create({"username": "ana", "comment": "Great", "star": 4})
    assert data["verified"] is False


def test_review_create_keeps_verified():
    data = validate_review_create({"username": "ana", "comment": "Great", "star": 4, "verified": True})
    assert data["verified"] is True


@pytest.mark.parametrize("field", ["username", "comment", "star"])
def test_review_create_requires_field(field):
    payload = {"username": "ana", "comment": "Great", "star": 4}
    del payload[field]
    with pytest.raises(MissingField):
        validate_review_create(payload)


def test_status_allow_lists_diverge():
    assert validate_order_status_update("Cancelled", EDIT_STATUSES) == "Cancelled"
    with pytest.raises(InvalidStatus):
        validate_order_status_update("Cancelled", PATCH_STATUSES)


def test_pending_is_in_neither_allow_list():
    for allowed in (PATCH_STATUSES, EDIT_STATUSES):
        with pytest.raises(InvalidStatus):
            validate_order_status_update("pending", allowed)


def test_product_update_rejects_null_images():
    with pytest.raises(ImageCountError):
        validate_product_update({"images": None})


def test_product_create_drops_identity_fields(product_payload):
    product_payload.update({"_id": "custom-key", "id": "other"})
    data = validate_product_create(product_payload)
    assert "_id" not in data
    assert "id" not in data
