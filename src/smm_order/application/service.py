# src/smm_order/application/service.py
"""Order placement workflow.

place_order inserts the order and debits the ledger in ONE transaction: the
debit's `balance + delta >= 0` guard is the funds check, so two concurrent
orders cannot both spend the same balance. Any failure rolls back both.
"""
import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.smm_common.cents import per_mille_total
from src.smm_common.enums import LedgerEntryType, OrderStatus, ReferenceType
from src.smm_common.errors import (
    AccountNotFoundError,
    InvalidOrderTransitionError,
    OrderNotFoundError,
    OrderTotalTooSmallError,
    ProfileMissingError,
    ServiceNotFoundError,
)
from src.smm_common.pagination import cursor_decode, cursor_encode, split_page
from src.smm_common.timeouts import mutation_deadline
from src.smm_ledger.domain.repository import LedgerStoreProtocol
from src.smm_ledger.infrastructure.persistence import LedgerStore
from src.smm_order.application.schemas import (
    AdvanceOrderResponse,
    OrderListResponse,
    OrderResponse,
    PlaceOrderRequest,
    PlaceOrderResponse,
)
from src.smm_order.domain.models import Order, allowed_sources
from src.smm_order.domain.repository import OrderRepositoryProtocol
from src.smm_order.infrastructure.persistence import OrderRepository

logger = logging.getLogger(__name__)

_repo: OrderRepositoryProtocol = OrderRepository()
_ledger: LedgerStoreProtocol = LedgerStore()


async def place_order(
    req: PlaceOrderRequest, user_id: str, db: AsyncSession
) -> PlaceOrderResponse:
    async with mutation_deadline("order placement", db):
        try:
            service = await _repo.lock_service(str(req.service_id), db)
            if service is None:
                raise ServiceNotFoundError(str(req.service_id))
            total = per_mille_total(service.price, req.quantity)
            if total <= 0:
                raise OrderTotalTooSmallError(req.quantity)

            order = await _repo.save(
                Order(
                    id=0,
                    user_id=user_id,
                    service_id=service.id,
                    service_name=service.name,
                    quantity=req.quantity,
                    unit_price=service.price,
                    total_price=total,
                    status=OrderStatus.PENDING.value,
                    note=req.note,
                ),
                db,
            )
            try:
                account, entry = await _ledger.adjust_balance(
                    db,
                    user_id,
                    -total,
                    LedgerEntryType.ORDER_DEBIT.value,
                    ReferenceType.ORDER.value,
                    str(order.id),
                    f"Order #{order.id}: {req.quantity} x {service.name}",
                )
            except AccountNotFoundError:
                raise ProfileMissingError(user_id) from None
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    logger.info(
        "Order %s placed by %s: %d x %s = %d (balance=%d)",
        order.id, user_id, req.quantity, service.id, total, account.balance,
    )
    return PlaceOrderResponse(
        order=OrderResponse.from_domain(order),
        balance_cents=account.balance,
        ledger_entry_id=entry.id,
    )


async def advance_order(
    order_id: int, target: OrderStatus, admin_id: str, db: AsyncSession
) -> AdvanceOrderResponse:
    """Admin status change. Cancelling refunds the frozen total in the same transaction."""
    sources = allowed_sources(target.value)
    refunded = 0
    balance: int | None = None
    async with mutation_deadline("order status change", db):
        try:
            order = await _repo.transition(order_id, sources, target.value, db)
            if order is None:
                existing = await _repo.get_by_id(order_id, db)
                if existing is None:
                    raise OrderNotFoundError(order_id)
                raise InvalidOrderTransitionError(order_id, existing.status, target.value)

            if target is OrderStatus.CANCELLED:
                account, _ = await _ledger.adjust_balance(
                    db,
                    order.user_id,
                    order.total_price,
                    LedgerEntryType.ORDER_REFUND.value,
                    ReferenceType.ORDER.value,
                    str(order.id),
                    f"Order #{order.id} cancelled",
                )
                refunded = order.total_price
                balance = account.balance
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    logger.info(
        "Order %s -> %s by %s (refunded=%d)", order_id, target.value, admin_id, refunded
    )
    return AdvanceOrderResponse(
        order=OrderResponse.from_domain(order),
        refunded_cents=refunded,
        balance_cents=balance,
    )


async def get_order(order_id: int, user_id: str, db: AsyncSession) -> OrderResponse:
    order = await _repo.get_by_id(order_id, db)
    # Someone else's order is reported as missing rather than forbidden
    if order is None or order.user_id != user_id:
        raise OrderNotFoundError(order_id)
    return OrderResponse.from_domain(order)


async def list_orders(
    user_id: str | None,
    status: str | None,
    limit: int,
    cursor: str | None,
    db: AsyncSession,
) -> OrderListResponse:
    """List orders newest first. user_id=None lists every user's orders (admin)."""
    orders = await _repo.list_orders(
        user_id=user_id,
        status=status,
        limit=limit + 1,
        cursor_id=cursor_decode(cursor),
        db=db,
    )
    page, has_more = split_page(orders, limit)
    return OrderListResponse(
        items=[OrderResponse.from_domain(o) for o in page],
        next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
        has_more=has_more,
    )


async def list_all_orders(
    status: str | None, limit: int, cursor: str | None, db: AsyncSession
) -> OrderListResponse:
    return await list_orders(None, status, limit, cursor, db)
