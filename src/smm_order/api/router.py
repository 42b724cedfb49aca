# src/smm_order/api/router.py
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.smm_common.database import get_db_session
from src.smm_common.enums import OrderStatus
from src.smm_common.response import ApiResponse, success_response
from src.smm_gateway.auth.dependencies import get_current_user
from src.smm_gateway.user.db_models import UserModel
from src.smm_order.application import service as svc
from src.smm_order.application.schemas import PlaceOrderRequest

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("", status_code=201)
async def place_order(
    req: PlaceOrderRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await svc.place_order(req, str(current_user.id), db)
    resp = success_response(data.model_dump(), request)
    resp.message = "Order placed"
    return resp


@router.get("")
async def list_orders(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    status: OrderStatus | None = Query(None, description="Filter by order status"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
) -> ApiResponse:
    data = await svc.list_orders(
        str(current_user.id), status.value if status else None, limit, cursor, db
    )
    return success_response(data.model_dump(), request)


@router.get("/{order_id}")
async def get_order(
    order_id: int,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await svc.get_order(order_id, str(current_user.id), db)
    return success_response(data.model_dump(), request)
