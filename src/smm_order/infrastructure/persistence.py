# src/smm_order/infrastructure/persistence.py
"""OrderRepository — raw SQL persistence implementation."""
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.smm_catalog.domain.models import Service
from src.smm_common.errors import InternalError
from src.smm_order.domain.models import Order

# ---------------------------------------------------------------------------
# SQL statements
# ---------------------------------------------------------------------------

_SELECT_COLUMNS = """
    id, user_id, service_id, service_name, quantity, unit_price,
    total_price, status, note, created_at, updated_at
"""

# FOR SHARE blocks a concurrent category/service delete until the order commits.
_LOCK_SERVICE_SQL = text("""
    SELECT id, category_id, name, price, processing_time_hours
    FROM services
    WHERE id = CAST(:service_id AS UUID)
    FOR SHARE
""")

_INSERT_ORDER_SQL = text(f"""
    INSERT INTO orders (user_id, service_id, service_name, quantity,
        unit_price, total_price, status, note)
    VALUES (:user_id, :service_id, :service_name, :quantity,
        :unit_price, :total_price, :status, :note)
    RETURNING {_SELECT_COLUMNS}
""")

_GET_ORDER_BY_ID_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders WHERE id = :id
""")

_TRANSITION_SQL = text(f"""
    UPDATE orders
    SET status = :target, updated_at = NOW()
    WHERE id = :id
      AND status = ANY(string_to_array(CAST(:sources_csv AS TEXT), ','))
    RETURNING {_SELECT_COLUMNS}
""")

_LIST_ORDERS_SQL = text(f"""
    SELECT {_SELECT_COLUMNS}
    FROM orders
    WHERE (CAST(:user_id AS TEXT) IS NULL OR user_id = :user_id)
      AND (CAST(:status AS TEXT) IS NULL OR status = :status)
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
    ORDER BY id DESC
    LIMIT :limit
""")


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_order(row: Any) -> Order:
    """Convert a DB result row to an Order domain object."""
    return Order(
        id=row.id,
        user_id=row.user_id,
        service_id=row.service_id,
        service_name=row.service_name,
        quantity=row.quantity,
        unit_price=row.unit_price,
        total_price=row.total_price,
        status=row.status,
        note=row.note,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class OrderRepository:
    """Concrete implementation of OrderRepositoryProtocol using raw SQL."""

    async def lock_service(self, service_id: str, db: AsyncSession) -> Service | None:
        row = (await db.execute(_LOCK_SERVICE_SQL, {"service_id": service_id})).fetchone()
        if row is None:
            return None
        return Service(
            id=str(row.id),
            category_id=str(row.category_id),
            name=row.name,
            price=row.price,
            processing_time_hours=row.processing_time_hours,
        )

    async def save(self, order: Order, db: AsyncSession) -> Order:
        result = await db.execute(
            _INSERT_ORDER_SQL,
            {
                "user_id": order.user_id,
                "service_id": order.service_id,
                "service_name": order.service_name,
                "quantity": order.quantity,
                "unit_price": order.unit_price,
                "total_price": order.total_price,
                "status": order.status,
                "note": order.note,
            },
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Order insert returned no rows")
        return _row_to_order(row)

    async def get_by_id(self, order_id: int, db: AsyncSession) -> Order | None:
        result = await db.execute(_GET_ORDER_BY_ID_SQL, {"id": order_id})
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def transition(
        self, order_id: int, sources: list[str], target: str, db: AsyncSession
    ) -> Order | None:
        """Move an order to `target` only if its current status is in `sources`."""
        result = await db.execute(
            _TRANSITION_SQL,
            {"id": order_id, "target": target, "sources_csv": ",".join(sources)},
        )
        row = result.fetchone()
        return _row_to_order(row) if row else None

    async def list_orders(
        self,
        user_id: str | None,
        status: str | None,
        limit: int,
        cursor_id: int | None,
        db: AsyncSession,
    ) -> list[Order]:
        result = await db.execute(
            _LIST_ORDERS_SQL,
            {
                "user_id": user_id,
                "status": status,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_order(row) for row in result.fetchall()]
