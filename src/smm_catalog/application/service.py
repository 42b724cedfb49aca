"""CatalogService — category/service reads for users, writes for admins.

Reads run without explicit transaction. Writes commit on success and roll
back on any error (including translated uniqueness violations).
"""
import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.smm_catalog.application.schemas import CategoryItem, ServiceItem
from src.smm_catalog.domain.repository import CatalogRepositoryProtocol
from src.smm_catalog.infrastructure.persistence import CatalogRepository
from src.smm_common.errors import CategoryNotFoundError, ServiceNotFoundError

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(self, repo: CatalogRepositoryProtocol | None = None) -> None:
        self._repo: CatalogRepositoryProtocol = repo or CatalogRepository()

    async def list_categories(self, db: AsyncSession) -> list[CategoryItem]:
        return [CategoryItem.from_domain(c) for c in await self._repo.list_categories(db)]

    async def list_services(
        self, db: AsyncSession, category_id: str | None
    ) -> list[ServiceItem]:
        services = await self._repo.list_services(db, category_id)
        return [ServiceItem.from_domain(s) for s in services]

    async def get_service(self, db: AsyncSession, service_id: str) -> ServiceItem:
        service = await self._repo.get_service(db, service_id)
        if service is None:
            raise ServiceNotFoundError(service_id)
        return ServiceItem.from_domain(service)

    async def create_category(self, db: AsyncSession, name: str) -> CategoryItem:
        try:
            category = await self._repo.create_category(db, name)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Category %s created: %s", category.id, name)
        return CategoryItem.from_domain(category)

    async def rename_category(
        self, db: AsyncSession, category_id: str, name: str
    ) -> CategoryItem:
        try:
            category = await self._repo.rename_category(db, category_id, name)
            if category is None:
                raise CategoryNotFoundError(category_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return CategoryItem.from_domain(category)

    async def create_service(
        self, db: AsyncSession, fields: dict[str, Any]
    ) -> ServiceItem:
        try:
            service = await self._repo.create_service(db, fields)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Service %s created in category %s", service.id, service.category_id)
        return ServiceItem.from_domain(service)

    async def update_service(
        self, db: AsyncSession, service_id: str, fields: dict[str, Any]
    ) -> ServiceItem:
        # Price changes never touch existing orders: their totals are frozen.
        try:
            service = await self._repo.update_service(db, service_id, fields)
            if service is None:
                raise ServiceNotFoundError(service_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ServiceItem.from_domain(service)

    async def delete_service(self, db: AsyncSession, service_id: str) -> None:
        try:
            if not await self._repo.delete_service(db, service_id):
                raise ServiceNotFoundError(service_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Service %s deleted", service_id)
