"""Balance request REST API (user side). Review endpoints live in smm_admin."""
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.smm_balance.application.schemas import SubmitBalanceRequest
from src.smm_balance.application.service import BalanceRequestService
from src.smm_common.database import get_db_session
from src.smm_common.response import ApiResponse, success_response
from src.smm_gateway.auth.dependencies import get_current_user
from src.smm_gateway.user.db_models import UserModel

router = APIRouter(prefix="/balance-requests", tags=["balance"])

_service = BalanceRequestService()


@router.post("", status_code=status.HTTP_201_CREATED)
async def submit_request(
    body: SubmitBalanceRequest,
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.submit(
        db, str(current_user.id), body.amount_cents, body.receipt_ref, body.note
    )
    resp = success_response(data.model_dump(), request)
    resp.message = "Balance request submitted"
    return resp


@router.get("")
async def list_my_requests(
    current_user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await _service.list_mine(db, str(current_user.id), cursor, limit)
    return success_response(data.model_dump(), request)
