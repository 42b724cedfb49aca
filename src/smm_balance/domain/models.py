"""Balance request domain model — pure dataclass, no SQLAlchemy dependency.

Lifecycle: PENDING -> APPROVED | REJECTED. Both targets are terminal.
"""
from dataclasses import dataclass
from datetime import datetime

from src.smm_common.enums import BalanceRequestStatus


@dataclass
class BalanceRequest:
    id: int
    user_id: str
    amount: int             # cents, > 0
    receipt_ref: str        # opaque URL / content hash of the uploaded receipt
    note: str | None = None
    status: str = BalanceRequestStatus.PENDING.value
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    user_email: str | None = None  # populated by admin listings only

    @property
    def is_pending(self) -> bool:
        return self.status == BalanceRequestStatus.PENDING.value
