"""Catalog REST API (read side). Admin writes live in smm_admin."""
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.smm_catalog.application.service import CatalogService
from src.smm_common.database import get_db_session
from src.smm_common.response import ApiResponse, success_response
from src.smm_gateway.auth.dependencies import get_current_user
from src.smm_gateway.user.db_models import UserModel

router = APIRouter(prefix="/catalog", tags=["catalog"])

_service = CatalogService()


@router.get("/categories")
async def list_categories(
    _: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    items = await _service.list_categories(db)
    return success_response([i.model_dump() for i in items], request)


@router.get("/services")
async def list_services(
    _: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    category_id: UUID | None = Query(None, description="Filter by category"),
) -> ApiResponse:
    items = await _service.list_services(db, str(category_id) if category_id else None)
    return success_response([i.model_dump() for i in items], request)


@router.get("/services/{service_id}")
async def get_service(
    service_id: UUID,
    _: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    item = await _service.get_service(db, str(service_id))
    return success_response(item.model_dump(), request)
