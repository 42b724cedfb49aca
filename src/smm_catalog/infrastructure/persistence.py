"""CatalogRepository — ORM persistence for categories and services.

Uniqueness (category name; service name within a category) is enforced by
DB constraints; IntegrityError on flush is translated into the domain
Duplicate*Error. The caller owns commit/rollback.
"""

import uuid
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.smm_catalog.domain.models import Category, Service
from src.smm_catalog.infrastructure.db_models import CategoryORM, ServiceORM
from src.smm_common.datetime_utils import utc_now
from src.smm_common.errors import (
    CategoryNotFoundError,
    DuplicateCategoryNameError,
    DuplicateServiceNameError,
)

_SERVICE_FIELDS = (
    "category_id",
    "name",
    "price",
    "processing_time_hours",
    "description",
    "image_url",
)


def _to_uuid(value: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _category(orm: CategoryORM, service_count: int = 0) -> Category:
    return Category(
        id=str(orm.id),
        name=orm.name,
        created_at=orm.created_at,
        service_count=service_count,
    )


def _service(orm: ServiceORM, category_name: str | None = None) -> Service:
    return Service(
        id=str(orm.id),
        category_id=str(orm.category_id),
        name=orm.name,
        price=orm.price,
        processing_time_hours=orm.processing_time_hours,
        description=orm.description,
        image_url=orm.image_url,
        created_at=orm.created_at,
        updated_at=orm.updated_at,
        category_name=category_name,
    )


class CatalogRepository:
    # --- categories ---

    async def list_categories(self, db: AsyncSession) -> list[Category]:
        stmt = (
            select(CategoryORM, func.count(ServiceORM.id))
            .outerjoin(ServiceORM, ServiceORM.category_id == CategoryORM.id)
            .group_by(CategoryORM.id)
            .order_by(CategoryORM.name)
        )
        result = await db.execute(stmt)
        return [_category(cat, count) for cat, count in result.all()]

    async def get_category(self, db: AsyncSession, category_id: str) -> Category | None:
        cid = _to_uuid(category_id)
        if cid is None:
            return None
        orm = await db.get(CategoryORM, cid)
        return _category(orm) if orm else None

    async def create_category(self, db: AsyncSession, name: str) -> Category:
        orm = CategoryORM(name=name)
        db.add(orm)
        try:
            await db.flush()
        except IntegrityError:
            raise DuplicateCategoryNameError(name) from None
        return _category(orm)

    async def rename_category(
        self, db: AsyncSession, category_id: str, name: str
    ) -> Category | None:
        cid = _to_uuid(category_id)
        orm = await db.get(CategoryORM, cid) if cid else None
        if orm is None:
            return None
        orm.name = name
        try:
            await db.flush()
        except IntegrityError:
            raise DuplicateCategoryNameError(name) from None
        return _category(orm)

    async def delete_category(self, db: AsyncSession, category_id: str) -> int | None:
        """Delete the category and all of its services.

        Returns the number of services removed, or None if the category is absent.
        """
        cid = _to_uuid(category_id)
        orm = await db.get(CategoryORM, cid) if cid else None
        if orm is None:
            return None
        result = await db.execute(delete(ServiceORM).where(ServiceORM.category_id == cid))
        await db.delete(orm)
        await db.flush()
        return result.rowcount or 0

    # --- services ---

    async def list_services(
        self, db: AsyncSession, category_id: str | None
    ) -> list[Service]:
        stmt = select(ServiceORM, CategoryORM.name).join(
            CategoryORM, ServiceORM.category_id == CategoryORM.id
        )
        if category_id is not None:
            cid = _to_uuid(category_id)
            if cid is None:
                return []
            stmt = stmt.where(ServiceORM.category_id == cid)
        stmt = stmt.order_by(CategoryORM.name, ServiceORM.name)
        result = await db.execute(stmt)
        return [_service(svc, cat_name) for svc, cat_name in result.all()]

    async def get_service(self, db: AsyncSession, service_id: str) -> Service | None:
        sid = _to_uuid(service_id)
        if sid is None:
            return None
        stmt = (
            select(ServiceORM, CategoryORM.name)
            .join(CategoryORM, ServiceORM.category_id == CategoryORM.id)
            .where(ServiceORM.id == sid)
        )
        row = (await db.execute(stmt)).first()
        return _service(row[0], row[1]) if row else None

    async def create_service(self, db: AsyncSession, fields: dict[str, Any]) -> Service:
        category = await self._require_category(db, str(fields["category_id"]))
        orm = ServiceORM(
            **{k: v for k, v in fields.items() if k in _SERVICE_FIELDS and k != "category_id"},
            category_id=uuid.UUID(category.id),
        )
        db.add(orm)
        try:
            await db.flush()
        except IntegrityError:
            raise DuplicateServiceNameError(fields["name"]) from None
        return _service(orm, category.name)

    async def update_service(
        self, db: AsyncSession, service_id: str, fields: dict[str, Any]
    ) -> Service | None:
        sid = _to_uuid(service_id)
        orm = await db.get(ServiceORM, sid) if sid else None
        if orm is None:
            return None
        if fields.get("category_id") is not None:
            category = await self._require_category(db, str(fields["category_id"]))
            orm.category_id = uuid.UUID(category.id)
        for key, value in fields.items():
            if key in _SERVICE_FIELDS and key != "category_id":
                setattr(orm, key, value)
        orm.updated_at = utc_now()
        try:
            await db.flush()
        except IntegrityError:
            raise DuplicateServiceNameError(fields.get("name", orm.name)) from None
        parent = await db.get(CategoryORM, orm.category_id)
        return _service(orm, parent.name if parent else None)

    async def delete_service(self, db: AsyncSession, service_id: str) -> bool:
        sid = _to_uuid(service_id)
        if sid is None:
            return False
        result = await db.execute(delete(ServiceORM).where(ServiceORM.id == sid))
        return bool(result.rowcount)

    async def _require_category(self, db: AsyncSession, category_id: str) -> Category:
        category = await self.get_category(db, category_id)
        if category is None:
            raise CategoryNotFoundError(category_id)
        return category
