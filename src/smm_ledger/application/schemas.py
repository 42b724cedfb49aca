"""Pydantic schemas for smm_ledger API."""

from pydantic import BaseModel

from src.smm_common.cents import cents_to_display
from src.smm_common.datetime_utils import iso_or_empty
from src.smm_ledger.domain.models import Account, LedgerEntry


class BalanceResponse(BaseModel):
    user_id: str
    balance_cents: int
    balance_display: str
    version: int

    @classmethod
    def from_account(cls, account: Account) -> "BalanceResponse":
        return cls(
            user_id=account.user_id,
            balance_cents=account.balance,
            balance_display=cents_to_display(account.balance),
            version=account.version,
        )


class ProvisionResponse(BaseModel):
    user_id: str
    created: bool
    balance_cents: int


class LedgerEntryItem(BaseModel):
    id: int
    entry_type: str
    amount_cents: int
    amount_display: str
    balance_after_cents: int
    balance_after_display: str
    reference_type: str | None
    reference_id: str | None
    description: str | None
    created_at: str  # ISO8601 string

    @classmethod
    def from_domain(cls, e: LedgerEntry) -> "LedgerEntryItem":
        return cls(
            id=e.id,
            entry_type=e.entry_type,
            amount_cents=e.amount,
            amount_display=cents_to_display(e.amount),
            balance_after_cents=e.balance_after,
            balance_after_display=cents_to_display(e.balance_after),
            reference_type=e.reference_type,
            reference_id=e.reference_id,
            description=e.description,
            created_at=iso_or_empty(e.created_at),
        )


class LedgerResponse(BaseModel):
    items: list[LedgerEntryItem]
    next_cursor: str | None
    has_more: bool
