"""Catalog repository Protocol.

Order placement only needs `get_service`; the admin gateway uses the rest.
"""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.smm_catalog.domain.models import Category, Service


class CatalogRepositoryProtocol(Protocol):
    async def list_categories(self, db: AsyncSession) -> list[Category]: ...

    async def get_category(self, db: AsyncSession, category_id: str) -> Category | None: ...

    async def create_category(self, db: AsyncSession, name: str) -> Category: ...

    async def rename_category(
        self, db: AsyncSession, category_id: str, name: str
    ) -> Category | None: ...

    async def delete_category(self, db: AsyncSession, category_id: str) -> int | None: ...

    async def list_services(
        self, db: AsyncSession, category_id: str | None
    ) -> list[Service]: ...

    async def get_service(self, db: AsyncSession, service_id: str) -> Service | None: ...

    async def create_service(self, db: AsyncSession, fields: dict[str, Any]) -> Service: ...

    async def update_service(
        self, db: AsyncSession, service_id: str, fields: dict[str, Any]
    ) -> Service | None: ...

    async def delete_service(self, db: AsyncSession, service_id: str) -> bool: ...
