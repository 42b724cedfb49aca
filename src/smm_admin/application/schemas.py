# src/smm_admin/application/schemas.py
from pydantic import BaseModel, Field

from src.smm_common.cents import MAX_AMOUNT_CENTS
from src.smm_common.enums import AdjustDirection


class BalanceAdjustRequest(BaseModel):
    amount_cents: int = Field(..., gt=0, le=MAX_AMOUNT_CENTS)
    direction: AdjustDirection
    reason: str | None = Field(None, max_length=500)


class AdminUserItem(BaseModel):
    user_id: str
    email: str
    full_name: str | None = None
    is_admin: bool
    is_active: bool
    balance_cents: int | None = None
    created_at: str


class UserListResponse(BaseModel):
    items: list[AdminUserItem]


class ToggleAdminResponse(BaseModel):
    user_id: str
    is_admin: bool


class BalanceAdjustResponse(BaseModel):
    user_id: str
    balance_cents: int
    ledger_entry_id: int


class StatsResponse(BaseModel):
    total_users: int
    total_balance_cents: int
    pending_balance_requests: int
    total_orders: int
    pending_orders: int
    completed_orders: int


class InvariantReport(BaseModel):
    ok: bool
    violations: list[str]
