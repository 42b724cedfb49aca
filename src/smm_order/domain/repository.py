# src/smm_order/domain/repository.py
"""OrderRepository Protocol — interface contract for persistence layer."""
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.smm_catalog.domain.models import Service
from src.smm_order.domain.models import Order


class OrderRepositoryProtocol(Protocol):
    async def lock_service(self, service_id: str, db: AsyncSession) -> Service | None: ...

    async def save(self, order: Order, db: AsyncSession) -> Order: ...

    async def get_by_id(self, order_id: int, db: AsyncSession) -> Order | None: ...

    async def transition(
        self, order_id: int, sources: list[str], target: str, db: AsyncSession
    ) -> Order | None: ...

    async def list_orders(
        self,
        user_id: str | None,
        status: str | None,
        limit: int,
        cursor_id: int | None,
        db: AsyncSession,
    ) -> list[Order]: ...
