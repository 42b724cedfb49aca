"""Balance request workflow: submit, approve, reject, listings.

approve() moves the request out of PENDING and credits the owner in ONE
transaction. If the credit fails the status change is rolled back, and
because the status UPDATE is guarded by `status = 'PENDING'` a request can
be credited at most once.
"""
import logging
from typing import NoReturn

from sqlalchemy.ext.asyncio import AsyncSession

from src.smm_balance.application.schemas import (
    BalanceRequestItem,
    BalanceRequestListResponse,
    ReviewResponse,
)
from src.smm_balance.domain.models import BalanceRequest
from src.smm_balance.domain.repository import BalanceRequestRepositoryProtocol
from src.smm_balance.infrastructure.persistence import BalanceRequestRepository
from src.smm_common.cents import MAX_AMOUNT_CENTS
from src.smm_common.enums import BalanceRequestStatus, LedgerEntryType, ReferenceType
from src.smm_common.errors import (
    BalanceRequestNotFoundError,
    BalanceRequestNotPendingError,
    InvalidBalanceRequestError,
    ProfileMissingError,
)
from src.smm_common.pagination import cursor_decode, cursor_encode, split_page
from src.smm_common.timeouts import mutation_deadline
from src.smm_ledger.domain.repository import LedgerStoreProtocol
from src.smm_ledger.infrastructure.persistence import LedgerStore

logger = logging.getLogger(__name__)


class BalanceRequestService:
    def __init__(
        self,
        repo: BalanceRequestRepositoryProtocol | None = None,
        ledger: LedgerStoreProtocol | None = None,
    ) -> None:
        self._repo: BalanceRequestRepositoryProtocol = repo or BalanceRequestRepository()
        self._ledger: LedgerStoreProtocol = ledger or LedgerStore()

    async def submit(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        receipt_ref: str,
        note: str | None,
    ) -> BalanceRequestItem:
        if amount <= 0:
            raise InvalidBalanceRequestError("amount must be positive")
        if amount > MAX_AMOUNT_CENTS:
            raise InvalidBalanceRequestError(
                f"amount must not exceed {MAX_AMOUNT_CENTS} cents"
            )
        if not receipt_ref or not receipt_ref.strip():
            raise InvalidBalanceRequestError("receipt is required")
        if await self._ledger.get_account(db, user_id) is None:
            raise ProfileMissingError(user_id)

        try:
            req = await self._repo.create(db, user_id, amount, receipt_ref, note)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Balance request %s submitted by %s for %d", req.id, user_id, amount)
        return BalanceRequestItem.from_domain(req)

    async def approve(
        self, db: AsyncSession, request_id: int, admin_id: str
    ) -> ReviewResponse:
        async with mutation_deadline("balance request approval", db):
            try:
                req = await self._repo.resolve_pending(
                    db, request_id, BalanceRequestStatus.APPROVED.value, admin_id
                )
                if req is None:
                    await self._raise_not_pending(db, request_id)
                account, entry = await self._ledger.adjust_balance(
                    db,
                    req.user_id,
                    req.amount,
                    LedgerEntryType.DEPOSIT_APPROVED.value,
                    ReferenceType.BALANCE_REQUEST.value,
                    str(req.id),
                    f"Balance request #{req.id} approved",
                )
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        logger.info(
            "Balance request %s approved by %s: +%d to %s (balance=%d)",
            req.id, admin_id, req.amount, req.user_id, account.balance,
        )
        return ReviewResponse(
            request=BalanceRequestItem.from_domain(req),
            balance_cents=account.balance,
            ledger_entry_id=entry.id,
        )

    async def reject(
        self, db: AsyncSession, request_id: int, admin_id: str
    ) -> ReviewResponse:
        async with mutation_deadline("balance request rejection", db):
            try:
                req = await self._repo.resolve_pending(
                    db, request_id, BalanceRequestStatus.REJECTED.value, admin_id
                )
                if req is None:
                    await self._raise_not_pending(db, request_id)
                await db.commit()
            except Exception:
                await db.rollback()
                raise
        logger.info("Balance request %s rejected by %s", req.id, admin_id)
        return ReviewResponse(request=BalanceRequestItem.from_domain(req))

    async def list_mine(
        self, db: AsyncSession, user_id: str, cursor: str | None, limit: int
    ) -> BalanceRequestListResponse:
        rows = await self._repo.list_by_user(db, user_id, cursor_decode(cursor), limit + 1)
        return self._page(rows, limit)

    async def list_all(
        self, db: AsyncSession, status: str | None, cursor: str | None, limit: int
    ) -> BalanceRequestListResponse:
        rows = await self._repo.list_all(db, status, cursor_decode(cursor), limit + 1)
        return self._page(rows, limit)

    async def _raise_not_pending(self, db: AsyncSession, request_id: int) -> NoReturn:
        existing = await self._repo.get_by_id(db, request_id)
        if existing is None:
            raise BalanceRequestNotFoundError(request_id)
        raise BalanceRequestNotPendingError(request_id, existing.status)

    @staticmethod
    def _page(rows: list[BalanceRequest], limit: int) -> BalanceRequestListResponse:
        page, has_more = split_page(rows, limit)
        return BalanceRequestListResponse(
            items=[BalanceRequestItem.from_domain(r) for r in page],
            next_cursor=cursor_encode(page[-1].id) if has_more and page else None,
            has_more=has_more,
        )
