"""
Document store adapter.

Thin wrapper over a pymongo database. Collections are addressed by name and
documents by ObjectId. Every driver error is re-raised as StoreFailure so the
HTTP layer can answer with a 500 envelope carrying the driver message.
"""
import functools
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from bson import ObjectId
from pymongo import ASCENDING, TEXT, MongoClient
from pymongo.errors import PyMongoError

from config import Settings
from errors import StoreFailure

logger = logging.getLogger(__name__)

PRODUCTS = "products"
ORDERS = "orders"
COMMENTS = "comments"


def _store_call(fn):
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except PyMongoError as e:
            logger.exception("Store call %s failed", fn.__name__)
            raise StoreFailure(str(e)) from e
    return wrapper


def parse_id(value: Any) -> Optional[ObjectId]:
    """Return an ObjectId for a well-formed identifier, None otherwise."""
    if isinstance(value, ObjectId):
        return value
    if not ObjectId.is_valid(value):
        return None
    return ObjectId(value)


def serialize_doc(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not doc:
        return doc
    doc = dict(doc)
    _id = doc.pop("_id", None)
    if _id is not None:
        doc["id"] = str(_id)
    for k, v in list(doc.items()):
        if isinstance(v, ObjectId):
            doc[k] = str(v)
        elif isinstance(v, datetime):
            doc[k] = v.isoformat()
    return doc


class CollectionAdapter:
    def __init__(self, collection):
        self._collection = collection

    @property
    def name(self) -> str:
        return self._collection.name

    @_store_call
    def insert(self, doc: Dict[str, Any], session=None) -> ObjectId:
        return self._collection.insert_one(doc, session=session).inserted_id

    @_store_call
    def find_one(self, filt: Dict[str, Any], session=None) -> Optional[Dict[str, Any]]:
        return self._collection.find_one(filt, session=session)

    @_store_call
    def find_many(
        self,
        filt: Optional[Dict[str, Any]] = None,
        sort: Optional[Sequence[Tuple[str, int]]] = None,
        projection: Optional[Dict[str, Any]] = None,
        session=None,
    ) -> List[Dict[str, Any]]:
        cursor = self._collection.find(filt or {}, projection, session=session)
        if sort:
            cursor = cursor.sort(list(sort))
        return list(cursor)

    @_store_call
    def update_one(self, filt: Dict[str, Any], fields: Dict[str, Any], session=None) -> Dict[str, int]:
        res = self._collection.update_one(filt, {"$set": fields}, session=session)
        return {"matchedCount": res.matched_count, "modifiedCount": res.modified_count}

    @_store_call
    def delete_one(self, filt: Dict[str, Any], session=None) -> Dict[str, int]:
        res = self._collection.delete_one(filt, session=session)
        return {"deletedCount": res.deleted_count}

    @_store_call
    def count(self, filt: Optional[Dict[str, Any]] = None) -> int:
        return self._collection.count_documents(filt or {})


class DocumentStore:
    def __init__(self, client, database_name: str, use_transactions: bool = False):
        self.client = client
        self.db = client[database_name]
        self.use_transactions = use_transactions

    @property
    def name(self) -> str:
        return self.db.name

    def collection(self, name: str) -> CollectionAdapter:
        return CollectionAdapter(self.db[name])

    @property
    def products(self) -> CollectionAdapter:
        return self.collection(PRODUCTS)

    @property
    def orders(self) -> CollectionAdapter:
        return self.collection(ORDERS)

    @property
    def comments(self) -> CollectionAdapter:
        return self.collection(COMMENTS)

    @_store_call
    def ensure_indexes(self) -> None:
        self.db[PRODUCTS].create_index([("name", TEXT)])
        self.db[PRODUCTS].create_index([("category", ASCENDING)])

    @_store_call
    def list_collection_names(self) -> List[str]:
        return self.db.list_collection_names()

    @contextmanager
    def transaction(self) -> Iterator[Any]:
        """Yield a session inside a started transaction, or None when disabled."""
        if not self.use_transactions:
            yield None
            return
        try:
            session = self.client.start_session()
        except PyMongoError as e:
            raise StoreFailure(str(e)) from e
        try:
            with session.start_transaction():
                yield session
        except PyMongoError as e:
            logger.exception("Transaction aborted")
            raise StoreFailure(str(e)) from e
        finally:
            session.end_session()

    def close(self) -> None:
        self.client.close()


def connect(settings: Settings) -> DocumentStore:
    client = MongoClient(settings.database_url)
    store = DocumentStore(client, settings.database_name, use_transactions=settings.rating_transactions)
    store.ensure_indexes()
    logger.info("Connected to MongoDB database %s", settings.database_name)
    return store
