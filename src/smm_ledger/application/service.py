"""AccountApplicationService — thin composition layer over the ledger store.

get_balance and list_ledger are read-only and run without explicit transaction;
provision commits its own insert.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.smm_common.errors import ProfileMissingError
from src.smm_common.pagination import cursor_decode, cursor_encode, split_page
from src.smm_ledger.application.schemas import (
    BalanceResponse,
    LedgerEntryItem,
    LedgerResponse,
    ProvisionResponse,
)
from src.smm_ledger.domain.repository import LedgerStoreProtocol
from src.smm_ledger.infrastructure.persistence import LedgerStore

logger = logging.getLogger(__name__)


class AccountApplicationService:
    def __init__(self, repo: LedgerStoreProtocol | None = None) -> None:
        self._repo: LedgerStoreProtocol = repo or LedgerStore()

    async def get_balance(self, db: AsyncSession, user_id: str) -> BalanceResponse:
        account = await self._repo.get_account(db, user_id)
        if account is None:
            raise ProfileMissingError(user_id)
        return BalanceResponse.from_account(account)

    async def provision(self, db: AsyncSession, user_id: str) -> ProvisionResponse:
        try:
            account, created = await self._repo.provision_account(db, user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if created:
            logger.info("Provisioned ledger account for user %s", user_id)
        return ProvisionResponse(
            user_id=user_id, created=created, balance_cents=account.balance
        )

    async def list_ledger(
        self,
        db: AsyncSession,
        user_id: str,
        cursor: str | None,
        limit: int,
        entry_type: str | None,
    ) -> LedgerResponse:
        cursor_id = cursor_decode(cursor)
        entries = await self._repo.list_ledger_entries(
            db, user_id, cursor_id, limit + 1, entry_type
        )
        page, has_more = split_page(entries, limit)
        next_cursor = cursor_encode(page[-1].id) if has_more and page else None
        return LedgerResponse(
            items=[LedgerEntryItem.from_domain(e) for e in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )
