# src/smm_admin/application/service.py
"""Admin application service: privileges, manual adjustments, destructive catalog ops."""
import logging
import uuid

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.smm_admin.application.schemas import (
    AdminUserItem,
    BalanceAdjustResponse,
    InvariantReport,
    StatsResponse,
    ToggleAdminResponse,
    UserListResponse,
)
from src.smm_catalog.application.schemas import DeleteCategoryResponse
from src.smm_catalog.domain.repository import CatalogRepositoryProtocol
from src.smm_catalog.infrastructure.persistence import CatalogRepository
from src.smm_common.cents import MAX_AMOUNT_CENTS
from src.smm_common.datetime_utils import iso_or_empty
from src.smm_common.enums import AdjustDirection, LedgerEntryType, ReferenceType
from src.smm_common.errors import (
    AccountNotFoundError,
    CategoryNotFoundError,
    InvalidAdjustmentError,
    LastAdminError,
    UserNotFoundError,
)
from src.smm_common.timeouts import mutation_deadline
from src.smm_ledger.domain.invariants import verify_ledger_invariants
from src.smm_ledger.domain.repository import LedgerStoreProtocol
from src.smm_ledger.infrastructure.persistence import LedgerStore

logger = logging.getLogger(__name__)

_GET_USER_SQL = text("""
    SELECT id, is_admin FROM users WHERE id = CAST(:user_id AS UUID) FOR UPDATE
""")
# Locks every admin row so two concurrent demotions cannot both see "2 admins".
_LOCK_ADMINS_SQL = text("""
    SELECT id FROM users WHERE is_admin ORDER BY id FOR UPDATE
""")
_SET_ADMIN_SQL = text("""
    UPDATE users SET is_admin = :is_admin, updated_at = NOW()
    WHERE id = CAST(:user_id AS UUID)
""")
_LIST_USERS_SQL = text("""
    SELECT u.id, u.email, u.full_name, u.is_admin, u.is_active, u.created_at,
           a.balance
    FROM users u
    LEFT JOIN accounts a ON a.user_id = CAST(u.id AS TEXT)
    ORDER BY u.created_at DESC
    LIMIT :limit
""")
_STATS_SQL = text("""
    SELECT
        (SELECT COUNT(*) FROM users) AS total_users,
        (SELECT COALESCE(SUM(balance), 0) FROM accounts) AS total_balance,
        (SELECT COUNT(*) FROM balance_requests WHERE status = 'PENDING')
            AS pending_balance_requests,
        (SELECT COUNT(*) FROM orders) AS total_orders,
        (SELECT COUNT(*) FROM orders WHERE status = 'PENDING') AS pending_orders,
        (SELECT COUNT(*) FROM orders WHERE status = 'COMPLETED') AS completed_orders
""")


def _valid_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


class AdminService:
    def __init__(
        self,
        ledger: LedgerStoreProtocol | None = None,
        catalog: CatalogRepositoryProtocol | None = None,
    ) -> None:
        self._ledger: LedgerStoreProtocol = ledger or LedgerStore()
        self._catalog: CatalogRepositoryProtocol = catalog or CatalogRepository()

    async def toggle_admin(
        self, user_id: str, actor_id: str, db: AsyncSession
    ) -> ToggleAdminResponse:
        """Flip the admin flag. Demoting the only remaining admin is refused."""
        if not _valid_uuid(user_id):
            raise UserNotFoundError(user_id)
        try:
            admins = (await db.execute(_LOCK_ADMINS_SQL)).fetchall()
            row = (await db.execute(_GET_USER_SQL, {"user_id": user_id})).fetchone()
            if row is None:
                raise UserNotFoundError(user_id)
            new_flag = not row.is_admin
            if not new_flag and len(admins) <= 1:
                raise LastAdminError()
            await db.execute(_SET_ADMIN_SQL, {"user_id": user_id, "is_admin": new_flag})
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Admin flag for %s set to %s by %s", user_id, new_flag, actor_id)
        return ToggleAdminResponse(user_id=user_id, is_admin=new_flag)

    async def manual_adjust(
        self,
        user_id: str,
        amount: int,
        direction: AdjustDirection,
        actor_id: str,
        db: AsyncSession,
        reason: str | None = None,
    ) -> BalanceAdjustResponse:
        """Credit or debit a user's balance outside the request/order workflows.

        Subtraction goes through the same non-negative guard as order debits.
        """
        if amount <= 0:
            raise InvalidAdjustmentError("amount must be positive")
        if amount > MAX_AMOUNT_CENTS:
            raise InvalidAdjustmentError(f"amount must not exceed {MAX_AMOUNT_CENTS} cents")
        if direction is AdjustDirection.ADD:
            delta, entry_type = amount, LedgerEntryType.ADMIN_CREDIT
        else:
            delta, entry_type = -amount, LedgerEntryType.ADMIN_DEBIT
        description = reason or f"Manual {direction.value} by admin {actor_id}"

        async with mutation_deadline("manual balance adjustment", db):
            try:
                account, entry = await self._ledger.adjust_balance(
                    db,
                    user_id,
                    delta,
                    entry_type.value,
                    ReferenceType.ADMIN.value,
                    actor_id,
                    description,
                )
                await db.commit()
            except AccountNotFoundError:
                await db.rollback()
                raise UserNotFoundError(user_id) from None
            except Exception:
                await db.rollback()
                raise
        logger.warning(
            "Manual %s of %d for %s by %s (balance=%d)",
            direction.value, amount, user_id, actor_id, account.balance,
        )
        return BalanceAdjustResponse(
            user_id=user_id, balance_cents=account.balance, ledger_entry_id=entry.id
        )

    async def delete_category(
        self, category_id: str, actor_id: str, db: AsyncSession
    ) -> DeleteCategoryResponse:
        """Remove a category and every service in it. Placed orders keep their snapshots."""
        try:
            removed = await self._catalog.delete_category(db, category_id)
            if removed is None:
                raise CategoryNotFoundError(category_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.warning(
            "Category %s deleted by %s with %d services", category_id, actor_id, removed
        )
        return DeleteCategoryResponse(category_id=category_id, deleted_services=removed)

    async def list_users(self, db: AsyncSession, limit: int = 100) -> UserListResponse:
        rows = (await db.execute(_LIST_USERS_SQL, {"limit": limit})).fetchall()
        return UserListResponse(
            items=[
                AdminUserItem(
                    user_id=str(r.id),
                    email=r.email,
                    full_name=r.full_name,
                    is_admin=r.is_admin,
                    is_active=r.is_active,
                    balance_cents=r.balance,
                    created_at=iso_or_empty(r.created_at),
                )
                for r in rows
            ]
        )

    async def get_stats(self, db: AsyncSession) -> StatsResponse:
        row = (await db.execute(_STATS_SQL)).fetchone()
        return StatsResponse(
            total_users=int(row.total_users) if row else 0,
            total_balance_cents=int(row.total_balance) if row else 0,
            pending_balance_requests=int(row.pending_balance_requests) if row else 0,
            total_orders=int(row.total_orders) if row else 0,
            pending_orders=int(row.pending_orders) if row else 0,
            completed_orders=int(row.completed_orders) if row else 0,
        )

    async def verify_all_invariants(self, db: AsyncSession) -> InvariantReport:
        violations = await verify_ledger_invariants(db)
        return InvariantReport(ok=not violations, violations=violations)
