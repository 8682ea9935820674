import pytest
from bson import ObjectId

from errors import ImageCountError, InvalidId, MissingField, NotFound


def test_add_product_forces_zero_rating(catalog, product_payload):
    product_payload["rating"] = 5
    product_id = catalog.add_product(product_payload)["productId"]
    stored = catalog.get_product(str(product_id))
    assert stored["rating"] == 0
    assert stored["price"] == 89.9
    assert stored["stock"] == 12
    assert stored["mainImageIndex"] == 0
    assert stored["specifications"] == {"weight": "240g"}


@pytest.mark.parametrize("count", [1, 6])
def test_add_product_rejects_image_count(catalog, store, product_payload, count):
    product_payload["images"] = [f"img-{i}.jpg" for i in range(count)]
    with pytest.raises(ImageCountError):
        catalog.add_product(product_payload)
    assert store.products.count() == 0


def test_add_product_missing_name(catalog, store, product_payload):
    del product_payload["name"]
    with pytest.raises(MissingField):
        catalog.add_product(product_payload)
    assert store.products.count() == 0


def test_get_product_errors(catalog):
    with pytest.raises(InvalidId):
        catalog.get_product("nope")
    with pytest.raises(NotFound):
        catalog.get_product(str(ObjectId()))


def test_edit_product(catalog, product_id):
    result = catalog.edit_product(product_id, {"price": 75.0, "createdAt": "ignored"})
    assert result == {"modifiedCount": 1}
    stored = catalog.get_product(product_id)
    assert stored["price"] == 75.0
    assert stored["createdAt"] != "ignored"


def test_edit_product_cannot_set_rating(catalog, product_id):
    catalog.edit_product(product_id, {"rating": 4.8})
    assert catalog.get_product(product_id)["rating"] == 0


def test_edit_product_rejects_image_count(catalog, product_id):
    with pytest.raises(ImageCountError):
        catalog.edit_product(product_id, {"images": [f"img-{i}.jpg" for i in range(6)]})
    assert len(catalog.get_product(product_id)["images"]) == 2


def test_edit_unknown_product(catalog):
    with pytest.raises(NotFound):
        catalog.edit_product(str(ObjectId()), {"name": "Ghost"})


def test_delete_product(catalog, product_id):
    assert catalog.delete_product(product_id) == {"deletedCount": 1}
    with pytest.raises(NotFound):
        catalog.get_product(product_id)


def test_delete_unknown_product(catalog):
    with pytest.raises(NotFound):
        catalog.delete_product(str(ObjectId()))
    with pytest.raises(InvalidId):
        catalog.delete_product("42")


def test_list_products(catalog, product_payload):
    catalog.add_product(dict(product_payload))
    catalog.add_product(dict(product_payload, name="Road Shoe"))
    names = sorted(p["name"] for p in catalog.list_products())
    assert names == ["Road Shoe", "Trail Running Shoe"]


def test_add_product_ignores_client_id(catalog, product_payload):
    product_payload["_id"] = "custom-key"
    product_id = catalog.add_product(product_payload)["productId"]
    assert isinstance(product_id, ObjectId)
    assert catalog.get_product(str(product_id))["name"] == "Trail Running Shoe"
    assert catalog.delete_product(str(product_id)) == {"deletedCount": 1}


def test_edit_product_rejects_null_images(catalog, product_id):
    with pytest.raises(ImageCountError):
        catalog.edit_product(product_id, {"images": None})
    assert len(catalog.get_product(product_id)["images"]) == 2
