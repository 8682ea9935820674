import os
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


class OrderStatus(str, Enum):
    PENDING = "pending"
    ORDER_PLACED = "Order Placed"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


# Creation default. Deliberately absent from both edit allow-lists below.
DEFAULT_ORDER_STATUS = OrderStatus.PENDING.value

PATCH_STATUSES = [
    OrderStatus.ORDER_PLACED.value,
    OrderStatus.PROCESSING.value,
    OrderStatus.SHIPPED.value,
    OrderStatus.DELIVERED.value,
]
EDIT_STATUSES = PATCH_STATUSES + [OrderStatus.CANCELLED.value]


def parse_statuses(raw: Optional[str], default: List[str]) -> List[str]:
    if not raw:
        return list(default)
    statuses = [s.strip() for s in raw.split(",") if s.strip()]
    known = {s.value for s in OrderStatus}
    unknown = [s for s in statuses if s not in known]
    if unknown:
        raise ValueError(f"Unknown order status in configuration: {', '.join(unknown)}")
    return statuses


def _truthy(raw: Optional[str]) -> bool:
    return (raw or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    database_url: str = "mongodb://localhost:27017"
    database_name: str = "ecommerce"
    port: int = 8000
    log_level: str = "INFO"
    patch_statuses: List[str] = field(default_factory=lambda: list(PATCH_STATUSES))
    edit_statuses: List[str] = field(default_factory=lambda: list(EDIT_STATUSES))
    rating_transactions: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL") or os.getenv("MONGO_URI") or "mongodb://localhost:27017",
            database_name=os.getenv("DATABASE_NAME") or os.getenv("DB_NAME") or "ecommerce",
            port=int(os.getenv("PORT", 8000)),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            patch_statuses=parse_statuses(os.getenv("ORDER_PATCH_STATUSES"), PATCH_STATUSES),
            edit_statuses=parse_statuses(os.getenv("ORDER_EDIT_STATUSES"), EDIT_STATUSES),
            rating_transactions=_truthy(os.getenv("RATING_TRANSACTIONS")),
        )
