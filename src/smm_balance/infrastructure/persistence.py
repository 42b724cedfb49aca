"""BalanceRequestRepository — raw SQL persistence implementation.

`resolve_pending` is a conditional UPDATE guarded by `status = 'PENDING'`:
two concurrent reviewers cannot both move the same request, the loser gets
no row back.
"""
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.smm_balance.domain.models import BalanceRequest
from src.smm_common.errors import InternalError

_COLUMNS = """
    br.id, br.user_id, br.amount, br.receipt_ref, br.note, br.status,
    br.reviewed_by, br.reviewed_at, br.created_at, br.updated_at
"""

_INSERT_SQL = text("""
    INSERT INTO balance_requests AS br (user_id, amount, receipt_ref, note, status)
    VALUES (:user_id, :amount, :receipt_ref, :note, 'PENDING')
    RETURNING br.id, br.user_id, br.amount, br.receipt_ref, br.note, br.status,
              br.reviewed_by, br.reviewed_at, br.created_at, br.updated_at
""")

_GET_BY_ID_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM balance_requests br WHERE br.id = :id
""")

_RESOLVE_SQL = text("""
    UPDATE balance_requests AS br
    SET status = :new_status, reviewed_by = :reviewer_id,
        reviewed_at = NOW(), updated_at = NOW()
    WHERE br.id = :id AND br.status = 'PENDING'
    RETURNING br.id, br.user_id, br.amount, br.receipt_ref, br.note, br.status,
              br.reviewed_by, br.reviewed_at, br.created_at, br.updated_at
""")

_LIST_BY_USER_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM balance_requests br
    WHERE br.user_id = :user_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR br.id < :cursor_id)
    ORDER BY br.id DESC
    LIMIT :limit
""")

_LIST_ALL_SQL = text(f"""
    SELECT {_COLUMNS}, u.email AS user_email
    FROM balance_requests br
    LEFT JOIN users u ON CAST(u.id AS TEXT) = br.user_id
    WHERE (CAST(:status AS TEXT) IS NULL OR br.status = :status)
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR br.id < :cursor_id)
    ORDER BY br.id DESC
    LIMIT :limit
""")


def _row_to_request(row: Any) -> BalanceRequest:
    return BalanceRequest(
        id=row.id,
        user_id=row.user_id,
        amount=row.amount,
        receipt_ref=row.receipt_ref,
        note=row.note,
        status=row.status,
        reviewed_by=row.reviewed_by,
        reviewed_at=row.reviewed_at,
        created_at=row.created_at,
        updated_at=row.updated_at,
        user_email=getattr(row, "user_email", None),
    )


class BalanceRequestRepository:
    """Concrete implementation of BalanceRequestRepositoryProtocol using raw SQL."""

    async def create(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        receipt_ref: str,
        note: str | None,
    ) -> BalanceRequest:
        result = await db.execute(
            _INSERT_SQL,
            {"user_id": user_id, "amount": amount, "receipt_ref": receipt_ref, "note": note},
        )
        row = result.fetchone()
        if row is None:
            raise InternalError("Balance request insert returned no rows")
        return _row_to_request(row)

    async def get_by_id(self, db: AsyncSession, request_id: int) -> BalanceRequest | None:
        result = await db.execute(_GET_BY_ID_SQL, {"id": request_id})
        row = result.fetchone()
        return _row_to_request(row) if row else None

    async def resolve_pending(
        self, db: AsyncSession, request_id: int, new_status: str, reviewer_id: str
    ) -> BalanceRequest | None:
        result = await db.execute(
            _RESOLVE_SQL,
            {"id": request_id, "new_status": new_status, "reviewer_id": reviewer_id},
        )
        row = result.fetchone()
        return _row_to_request(row) if row else None

    async def list_by_user(
        self, db: AsyncSession, user_id: str, cursor_id: int | None, limit: int
    ) -> list[BalanceRequest]:
        result = await db.execute(
            _LIST_BY_USER_SQL,
            {"user_id": user_id, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_request(r) for r in result.fetchall()]

    async def list_all(
        self, db: AsyncSession, status: str | None, cursor_id: int | None, limit: int
    ) -> list[BalanceRequest]:
        result = await db.execute(
            _LIST_ALL_SQL,
            {"status": status, "cursor_id": cursor_id, "limit": limit},
        )
        return [_row_to_request(r) for r in result.fetchall()]
