"""LedgerStore — concrete implementation of LedgerStoreProtocol.

Every balance mutation is one PostgreSQL `UPDATE ... WHERE balance + :delta >= 0
RETURNING`. The row lock taken by the UPDATE serialises concurrent adjustments
for the same user, and the guard is evaluated against the latest committed
balance, so "verify funds" and "debit" cannot be separated by another writer.
A result of 0 rows means the account is missing or the guard failed.

Transaction ownership: The CALLER (application service or router) is responsible
for committing or rolling back. The ledger row is written in the same
transaction as the balance change.
"""

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from src.smm_common.errors import (
    AccountNotFoundError,
    InsufficientBalanceError,
    InternalError,
    InvalidAdjustmentError,
)
from src.smm_ledger.domain.models import Account, LedgerEntry

# PostgreSQL SQLSTATE numeric_value_out_of_range
_NUMERIC_OUT_OF_RANGE = "22003"
_BIGINT_MAX = 2**63 - 1

_ACCOUNT_COLUMNS = "id, user_id, balance, version, created_at, updated_at"

_ADJUST_SQL = text(f"""
    UPDATE accounts
    SET balance = balance + :delta,
        version = version + 1,
        updated_at = NOW()
    WHERE user_id = :user_id AND balance + :delta >= 0
    RETURNING {_ACCOUNT_COLUMNS}
""")

_PROVISION_SQL = text(f"""
    INSERT INTO accounts (user_id, balance, version)
    VALUES (:user_id, 0, 0)
    ON CONFLICT (user_id) DO NOTHING
    RETURNING {_ACCOUNT_COLUMNS}
""")

_GET_ACCOUNT_SQL = text(f"""
    SELECT {_ACCOUNT_COLUMNS}
    FROM accounts
    WHERE user_id = :user_id
""")

_INSERT_LEDGER_SQL = text("""
    INSERT INTO ledger_entries
        (user_id, entry_type, amount, balance_after,
         reference_type, reference_id, description)
    VALUES
        (:user_id, :entry_type, :amount, :balance_after,
         :reference_type, :reference_id, :description)
    RETURNING id, user_id, entry_type, amount, balance_after,
              reference_type, reference_id, description, created_at
""")

_LIST_LEDGER_SQL = text("""
    SELECT id, user_id, entry_type, amount, balance_after,
           reference_type, reference_id, description, created_at
    FROM ledger_entries
    WHERE user_id = :user_id
      AND (CAST(:cursor_id AS BIGINT) IS NULL OR id < :cursor_id)
      AND (CAST(:entry_type AS TEXT) IS NULL OR entry_type = :entry_type)
    ORDER BY id DESC
    LIMIT :limit
""")


def _is_numeric_overflow(exc: DBAPIError) -> bool:
    for err in (exc.orig, getattr(exc.orig, "__cause__", None)):
        if getattr(err, "sqlstate", None) == _NUMERIC_OUT_OF_RANGE:
            return True
    return False


def _row_to_account(row: object) -> Account:
    return Account(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        balance=row.balance,  # type: ignore[attr-defined]
        version=row.version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_ledger(row: object) -> LedgerEntry:
    return LedgerEntry(
        id=row.id,  # type: ignore[attr-defined]
        user_id=row.user_id,  # type: ignore[attr-defined]
        entry_type=row.entry_type,  # type: ignore[attr-defined]
        amount=row.amount,  # type: ignore[attr-defined]
        balance_after=row.balance_after,  # type: ignore[attr-defined]
        reference_type=row.reference_type,  # type: ignore[attr-defined]
        reference_id=row.reference_id,  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class LedgerStore:
    """Concrete store — all balance operations atomic at the SQL level."""

    async def get_account(self, db: AsyncSession, user_id: str) -> Account | None:
        result = await db.execute(_GET_ACCOUNT_SQL, {"user_id": user_id})
        row = result.fetchone()
        return _row_to_account(row) if row else None

    async def provision_account(
        self, db: AsyncSession, user_id: str
    ) -> tuple[Account, bool]:
        """Create the account row if absent. Returns (account, created)."""
        result = await db.execute(_PROVISION_SQL, {"user_id": user_id})
        row = result.fetchone()
        if row is not None:
            return _row_to_account(row), True
        existing = await self.get_account(db, user_id)
        if existing is None:
            raise InternalError(f"Account provisioning for {user_id} returned no row")
        return existing, False

    async def adjust_balance(
        self,
        db: AsyncSession,
        user_id: str,
        delta: int,
        entry_type: str,
        ref_type: str | None,
        ref_id: str | None,
        description: str | None,
    ) -> tuple[Account, LedgerEntry]:
        """Atomically add `delta` (negative for debits) and append a ledger entry.

        Raises:
            InvalidAdjustmentError: delta is zero.
            AccountNotFoundError: no account row for user_id.
            InsufficientBalanceError: the debit would make the balance negative.
            InvalidAdjustmentError: the resulting balance would overflow BIGINT.
        """
        if delta == 0:
            raise InvalidAdjustmentError("delta must be non-zero")
        if abs(delta) > _BIGINT_MAX:
            raise InvalidAdjustmentError("delta is out of range")

        try:
            result = await db.execute(_ADJUST_SQL, {"user_id": user_id, "delta": delta})
        except DBAPIError as exc:
            if _is_numeric_overflow(exc):
                raise InvalidAdjustmentError("resulting balance is out of range") from exc
            raise
        row = result.fetchone()
        if row is None:
            current = await self.get_account(db, user_id)
            if current is None:
                raise AccountNotFoundError(user_id)
            raise InsufficientBalanceError(-delta, current.balance)
        account = _row_to_account(row)

        ledger_result = await db.execute(
            _INSERT_LEDGER_SQL,
            {
                "user_id": user_id,
                "entry_type": entry_type,
                "amount": delta,
                "balance_after": account.balance,
                "reference_type": ref_type,
                "reference_id": ref_id,
                "description": description,
            },
        )
        ledger_row = ledger_result.fetchone()
        if ledger_row is None:
            raise InternalError("Ledger insert returned no rows")
        return account, _row_to_ledger(ledger_row)

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]:
        result = await db.execute(
            _LIST_LEDGER_SQL,
            {
                "user_id": user_id,
                "cursor_id": cursor_id,
                "entry_type": entry_type,
                "limit": limit,
            },
        )
        return [_row_to_ledger(row) for row in result.fetchall()]
