"""
Customer reviews and the aggregate product rating.

Adding a comment inserts it, re-reads every comment of the product and writes
the arithmetic mean of their stars onto the product's ``rating`` field.

Unless the store runs with transactions enabled, the three steps are not
atomic: two comments posted concurrently for the same product may each compute
the mean from a snapshot missing the other, and the last write wins. Ratings
are a best-effort aggregate, so this window is accepted.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List

from pymongo import DESCENDING

from database import DocumentStore, parse_id
from errors import InvalidId
from validation import validate_review_create

logger = logging.getLogger(__name__)


def mean_rating(comments: List[Dict[str, Any]]) -> float:
    if not comments:
        return 0
    return sum(float(c["star"]) for c in comments) / len(comments)


class RatingAggregator:
    def __init__(self, store: DocumentStore):
        self.store = store

    def _product_oid(self, product_id: str):
        oid = parse_id(product_id)
        if oid is None:
            raise InvalidId("Invalid product ID")
        return oid

    def add_comment(self, product_id: str, comment_data: Dict[str, Any]) -> Dict[str, Any]:
        data = validate_review_create(comment_data)
        oid = self._product_oid(product_id)

        comment = {
            "username": data["username"],
            "comment": data["comment"],
            "star": data["star"],
            "verified": data["verified"],
            "productId": oid,
            "createdAt": datetime.now(timezone.utc),
        }
        logger.info("Adding comment by %s for product %s", comment["username"], product_id)

        with self.store.transaction() as session:
            self.store.comments.insert(comment, session=session)
            comments = self.store.comments.find_many({"productId": oid}, projection={"star": 1}, session=session)
            rating = mean_rating(comments)
            # A failure here leaves the comment stored and the rating stale.
            result = self.store.products.update_one({"_id": oid}, {"rating": rating}, session=session)

        if result["matchedCount"] == 0:
            logger.warning("Rating for unknown product %s was not stored", product_id)
        return {"comment": comment, "updatedRating": rating}

    def list_comments(self, product_id: str) -> List[Dict[str, Any]]:
        oid = self._product_oid(product_id)
        return self.store.comments.find_many({"productId": oid}, sort=[("createdAt", DESCENDING)])
