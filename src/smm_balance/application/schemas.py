"""Pydantic schemas for the balance request API."""
from pydantic import BaseModel, Field, field_validator

from src.smm_balance.domain.models import BalanceRequest
from src.smm_common.cents import MAX_AMOUNT_CENTS, cents_to_display
from src.smm_common.datetime_utils import iso_or_empty


class SubmitBalanceRequest(BaseModel):
    amount_cents: int = Field(
        ..., gt=0, le=MAX_AMOUNT_CENTS, description="Requested top-up in cents"
    )
    receipt_ref: str = Field(
        ..., min_length=1, max_length=2048, description="URL or content hash of the receipt"
    )
    note: str | None = Field(None, max_length=1000)

    @field_validator("receipt_ref")
    @classmethod
    def receipt_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("receipt_ref must not be blank")
        return v.strip()


class BalanceRequestItem(BaseModel):
    id: int
    user_id: str
    user_email: str | None = None
    amount_cents: int
    amount_display: str
    receipt_ref: str
    note: str | None
    status: str
    reviewed_by: str | None
    reviewed_at: str | None
    created_at: str

    @classmethod
    def from_domain(cls, r: BalanceRequest) -> "BalanceRequestItem":
        return cls(
            id=r.id,
            user_id=r.user_id,
            user_email=r.user_email,
            amount_cents=r.amount,
            amount_display=cents_to_display(r.amount),
            receipt_ref=r.receipt_ref,
            note=r.note,
            status=r.status,
            reviewed_by=r.reviewed_by,
            reviewed_at=r.reviewed_at.isoformat() if r.reviewed_at else None,
            created_at=iso_or_empty(r.created_at),
        )


class BalanceRequestListResponse(BaseModel):
    items: list[BalanceRequestItem]
    next_cursor: str | None
    has_more: bool


class ReviewResponse(BaseModel):
    request: BalanceRequestItem
    balance_cents: int | None = None      # owner's balance after approval
    ledger_entry_id: int | None = None
