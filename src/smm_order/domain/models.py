"""Order domain model — pure dataclass, no SQLAlchemy dependency.

Lifecycle:
    PENDING ──> PROCESSING ──> COMPLETED
       │             │
       └─────────────┴──> CANCELLED   (refunds total_price)
"""
from dataclasses import dataclass
from datetime import datetime

from src.smm_common.enums import OrderStatus

ORDER_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.PROCESSING, OrderStatus.CANCELLED}),
    OrderStatus.PROCESSING: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def can_transition(current: str, target: str) -> bool:
    return OrderStatus(target) in ORDER_TRANSITIONS[OrderStatus(current)]


def allowed_sources(target: str) -> list[str]:
    """Statuses from which `target` may be reached, for guarded UPDATEs."""
    t = OrderStatus(target)
    return sorted(src.value for src, dests in ORDER_TRANSITIONS.items() if t in dests)


@dataclass
class Order:
    id: int
    user_id: str
    service_id: str
    service_name: str       # snapshot at placement
    quantity: int
    unit_price: int         # cents per 1000, snapshot at placement
    total_price: int        # cents, frozen at placement
    status: str = OrderStatus.PENDING.value
    note: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
