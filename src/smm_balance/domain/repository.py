"""BalanceRequestRepository Protocol — interface contract for persistence layer."""
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.smm_balance.domain.models import BalanceRequest


class BalanceRequestRepositoryProtocol(Protocol):
    async def create(
        self,
        db: AsyncSession,
        user_id: str,
        amount: int,
        receipt_ref: str,
        note: str | None,
    ) -> BalanceRequest: ...

    async def get_by_id(self, db: AsyncSession, request_id: int) -> BalanceRequest | None: ...

    async def resolve_pending(
        self, db: AsyncSession, request_id: int, new_status: str, reviewer_id: str
    ) -> BalanceRequest | None: ...

    async def list_by_user(
        self, db: AsyncSession, user_id: str, cursor_id: int | None, limit: int
    ) -> list[BalanceRequest]: ...

    async def list_all(
        self, db: AsyncSession, status: str | None, cursor_id: int | None, limit: int
    ) -> list[BalanceRequest]: ...
