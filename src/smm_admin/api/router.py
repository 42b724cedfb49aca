# src/smm_admin/api/router.py
"""Admin REST API. Every route requires the admin flag."""
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.smm_admin.application.schemas import BalanceAdjustRequest
from src.smm_admin.application.service import AdminService
from src.smm_balance.application.service import BalanceRequestService
from src.smm_catalog.application.schemas import (
    CategoryRequest,
    ServiceCreateRequest,
    ServiceUpdateRequest,
)
from src.smm_catalog.application.service import CatalogService
from src.smm_common.database import get_db_session
from src.smm_common.enums import BalanceRequestStatus, OrderStatus
from src.smm_common.response import ApiResponse, success_response
from src.smm_gateway.auth.dependencies import require_admin
from src.smm_gateway.user.db_models import UserModel
from src.smm_order.application import service as order_svc
from src.smm_order.application.schemas import AdvanceOrderRequest

router = APIRouter(prefix="/admin", tags=["admin"])

_service = AdminService()
_balance = BalanceRequestService()
_catalog = CatalogService()

Admin = Annotated[UserModel, Depends(require_admin)]
Db = Annotated[AsyncSession, Depends(get_db_session)]


# --- dashboard ---

@router.get("/stats")
async def get_stats(admin: Admin, db: Db, request: Request) -> ApiResponse:
    data = await _service.get_stats(db)
    return success_response(data.model_dump(), request)


@router.get("/invariants")
async def verify_invariants(admin: Admin, db: Db, request: Request) -> ApiResponse:
    data = await _service.verify_all_invariants(db)
    return success_response(data.model_dump(), request)


# --- users ---

@router.get("/users")
async def list_users(
    admin: Admin,
    db: Db,
    request: Request,
    limit: int = Query(100, ge=1, le=500),
) -> ApiResponse:
    data = await _service.list_users(db, limit)
    return success_response(data.model_dump(), request)


@router.post("/users/{user_id}/toggle-admin")
async def toggle_admin(user_id: str, admin: Admin, db: Db, request: Request) -> ApiResponse:
    data = await _service.toggle_admin(user_id, str(admin.id), db)
    return success_response(data.model_dump(), request)


@router.post("/users/{user_id}/balance")
async def adjust_balance(
    user_id: str,
    body: BalanceAdjustRequest,
    admin: Admin,
    db: Db,
    request: Request,
) -> ApiResponse:
    data = await _service.manual_adjust(
        user_id, body.amount_cents, body.direction, str(admin.id), db, body.reason
    )
    return success_response(data.model_dump(), request)


# --- balance requests ---

@router.get("/balance-requests")
async def list_balance_requests(
    admin: Admin,
    db: Db,
    request: Request,
    status: BalanceRequestStatus | None = Query(None),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await _balance.list_all(db, status.value if status else None, cursor, limit)
    return success_response(data.model_dump(), request)


@router.post("/balance-requests/{request_id}/approve")
async def approve_balance_request(
    request_id: int, admin: Admin, db: Db, request: Request
) -> ApiResponse:
    data = await _balance.approve(db, request_id, str(admin.id))
    return success_response(data.model_dump(), request)


@router.post("/balance-requests/{request_id}/reject")
async def reject_balance_request(
    request_id: int, admin: Admin, db: Db, request: Request
) -> ApiResponse:
    data = await _balance.reject(db, request_id, str(admin.id))
    return success_response(data.model_dump(), request)


# --- orders ---

@router.get("/orders")
async def list_all_orders(
    admin: Admin,
    db: Db,
    request: Request,
    status: OrderStatus | None = Query(None),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await order_svc.list_all_orders(
        status.value if status else None, limit, cursor, db
    )
    return success_response(data.model_dump(), request)


@router.post("/orders/{order_id}/status")
async def advance_order(
    order_id: int,
    body: AdvanceOrderRequest,
    admin: Admin,
    db: Db,
    request: Request,
) -> ApiResponse:
    data = await order_svc.advance_order(order_id, body.status, str(admin.id), db)
    return success_response(data.model_dump(), request)


# --- catalog ---

@router.post("/categories", status_code=201)
async def create_category(
    body: CategoryRequest, admin: Admin, db: Db, request: Request
) -> ApiResponse:
    data = await _catalog.create_category(db, body.name)
    return success_response(data.model_dump(), request)


@router.put("/categories/{category_id}")
async def rename_category(
    category_id: UUID, body: CategoryRequest, admin: Admin, db: Db, request: Request
) -> ApiResponse:
    data = await _catalog.rename_category(db, str(category_id), body.name)
    return success_response(data.model_dump(), request)


@router.delete("/categories/{category_id}")
async def delete_category(
    category_id: UUID, admin: Admin, db: Db, request: Request
) -> ApiResponse:
    data = await _service.delete_category(str(category_id), str(admin.id), db)
    return success_response(data.model_dump(), request)


@router.post("/services", status_code=201)
async def create_service(
    body: ServiceCreateRequest, admin: Admin, db: Db, request: Request
) -> ApiResponse:
    data = await _catalog.create_service(db, body.to_fields())
    return success_response(data.model_dump(), request)


@router.put("/services/{service_id}")
async def update_service(
    service_id: UUID, body: ServiceUpdateRequest, admin: Admin, db: Db, request: Request
) -> ApiResponse:
    data = await _catalog.update_service(db, str(service_id), body.to_fields())
    return success_response(data.model_dump(), request)


@router.delete("/services/{service_id}")
async def delete_service(
    service_id: UUID, admin: Admin, db: Db, request: Request
) -> ApiResponse:
    await _catalog.delete_service(db, str(service_id))
    return success_response({"service_id": str(service_id)}, request)
