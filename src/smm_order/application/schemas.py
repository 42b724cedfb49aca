# src/smm_order/application/schemas.py
from uuid import UUID

from pydantic import BaseModel, Field

from src.smm_common.cents import cents_to_display
from src.smm_common.datetime_utils import iso_or_empty
from src.smm_common.enums import OrderStatus
from src.smm_order.domain.models import Order


class PlaceOrderRequest(BaseModel):
    service_id: UUID
    quantity: int = Field(..., gt=0, le=100_000_000)
    note: str | None = Field(None, max_length=1000)


class AdvanceOrderRequest(BaseModel):
    status: OrderStatus


class OrderResponse(BaseModel):
    id: int
    user_id: str
    service_id: str
    service_name: str
    quantity: int
    unit_price_cents: int
    total_price_cents: int
    total_price_display: str
    status: str
    note: str | None = None
    created_at: str
    updated_at: str

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            id=order.id,
            user_id=order.user_id,
            service_id=order.service_id,
            service_name=order.service_name,
            quantity=order.quantity,
            unit_price_cents=order.unit_price,
            total_price_cents=order.total_price,
            total_price_display=cents_to_display(order.total_price),
            status=order.status,
            note=order.note,
            created_at=iso_or_empty(order.created_at),
            updated_at=iso_or_empty(order.updated_at),
        )


class PlaceOrderResponse(BaseModel):
    order: OrderResponse
    balance_cents: int
    ledger_entry_id: int


class AdvanceOrderResponse(BaseModel):
    order: OrderResponse
    refunded_cents: int = 0
    balance_cents: int | None = None


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    next_cursor: str | None
    has_more: bool
