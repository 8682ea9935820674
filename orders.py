"""
Order placement, order status changes and the admin dashboard figures.

Status changes are checked against an allow-list only. There is no transition
graph: any allowed status may replace any other, and delivered or cancelled
orders can still be edited.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from pymongo import DESCENDING

from config import DEFAULT_ORDER_STATUS, Settings
from database import DocumentStore, parse_id
from errors import InvalidId, MissingField, NotFound
from validation import validate_order_status_update

logger = logging.getLogger(__name__)

# Literal user id that lists every order in the system.
ADMIN_USER_ID = "1"

ORDER_FIELDS = ("userId", "items", "shippingAddress", "paymentMethod", "paymentDetails", "total")


class OrderWorkflow:
    def __init__(self, store: DocumentStore, settings: Optional[Settings] = None):
        self.store = store
        self.settings = settings or Settings()

    def place_order(self, order_data: Dict[str, Any]) -> Dict[str, Any]:
        # paymentDetails is stored as received; nothing is charged or verified.
        order = {f: order_data.get(f) for f in ORDER_FIELDS}
        if order["userId"] is not None:
            # Listing matches userId by string equality.
            order["userId"] = str(order["userId"])
        order["status"] = order_data.get("status") or DEFAULT_ORDER_STATUS
        order["createdAt"] = datetime.now(timezone.utc)
        order_id = self.store.orders.insert(order)
        logger.info("Order %s placed for user %s", order_id, order["userId"])
        return {"orderId": order_id, "order": order}

    def list_orders_for_user(self, user_id: str) -> List[Dict[str, Any]]:
        if user_id == ADMIN_USER_ID:
            filt: Dict[str, Any] = {}
        else:
            filt = {"userId": user_id}
        return self.store.orders.find_many(filt, sort=[("createdAt", DESCENDING)])

    def list_all_orders(self) -> List[Dict[str, Any]]:
        return self.store.orders.find_many({})

    def update_order_status(
        self, order_id: str, new_status: Any, allowed: Optional[Iterable[str]] = None
    ) -> Dict[str, int]:
        oid = parse_id(order_id)
        if oid is None:
            raise InvalidId("Invalid order ID")
        validate_order_status_update(new_status, self.settings.edit_statuses if allowed is None else allowed)

        result = self.store.orders.update_one({"_id": oid}, {"status": new_status})
        if result["matchedCount"] == 0:
            raise NotFound("Order not found")
        logger.info("Order %s status set to %s", order_id, new_status)
        return result

    def edit_order(self, order_id: str, update: Optional[Dict[str, Any]]) -> Dict[str, int]:
        if parse_id(order_id) is None:
            raise InvalidId("Invalid order ID")
        if not update or not update.get("status"):
            raise MissingField("Status is required for update")
        return self.update_order_status(order_id, update["status"], self.settings.edit_statuses)

    def compute_dashboard_stats(self) -> Dict[str, Any]:
        total_products = self.store.products.count()
        orders = self.store.orders.find_many({}, projection={"total": 1})
        # "newOrders" counts every order, not only recent ones.
        return {
            "totalProducts": total_products,
            "newOrders": len(orders),
            "totalRevenue": sum(o.get("total") or 0 for o in orders),
        }
