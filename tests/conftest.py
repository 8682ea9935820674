import mongomock
import pytest
from fastapi.testclient import TestClient

from catalog import Catalog
from config import Settings
from database import DocumentStore
from main import create_app
from orders import OrderWorkflow
from ratings import RatingAggregator

IMAGES = ["https://img.example.com/a.jpg", "https://img.example.com/b.jpg"]


@pytest.fixture
def settings():
    return Settings(database_url="mongodb://localhost:27017", database_name="shop_test")


@pytest.fixture
def store():
    return DocumentStore(mongomock.MongoClient(), "shop_test")


@pytest.fixture
def catalog(store):
    return Catalog(store)


@pytest.fixture
def ratings(store):
    return RatingAggregator(store)


@pytest.fixture
def orders(store, settings):
    return OrderWorkflow(store, settings)


@pytest.fixture
def product_payload():
    return {
        "name": "Trail Running Shoe",
        "description": "Lightweight shoe for rough terrain",
        "price": "89.90",
        "category": "Footwear",
        "stock": "12",
        "specifications": {"weight": "240g"},
        "images": list(IMAGES),
    }


@pytest.fixture
def product_id(catalog, product_payload):
    return str(catalog.add_product(product_payload)["productId"])


@pytest.fixture
def client(settings, store):
    app = create_app(settings=settings, store=store)
    with TestClient(app) as c:
        yield c
