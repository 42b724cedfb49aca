"""Ledger store Protocol — the single seam for balance mutation.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.smm_ledger.domain.models import Account, LedgerEntry


class LedgerStoreProtocol(Protocol):
    async def get_account(
        self, db: AsyncSession, user_id: str
    ) -> Account | None: ...

    async def provision_account(
        self, db: AsyncSession, user_id: str
    ) -> tuple[Account, bool]: ...

    async def adjust_balance(
        self,
        db: AsyncSession,
        user_id: str,
        delta: int,
        entry_type: str,
        ref_type: str | None,
        ref_id: str | None,
        description: str | None,
    ) -> tuple[Account, LedgerEntry]: ...

    async def list_ledger_entries(
        self,
        db: AsyncSession,
        user_id: str,
        cursor_id: int | None,
        limit: int,
        entry_type: str | None,
    ) -> list[LedgerEntry]: ...
