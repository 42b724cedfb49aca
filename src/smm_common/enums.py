"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class BalanceRequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class AdjustDirection(str, Enum):
    ADD = "add"
    SUBTRACT = "subtract"


class LedgerEntryType(str, Enum):
    # Balance request approved by an admin
    DEPOSIT_APPROVED = "DEPOSIT_APPROVED"
    # Order placement / compensating refund on cancel
    ORDER_DEBIT = "ORDER_DEBIT"
    ORDER_REFUND = "ORDER_REFUND"
    # Manual admin adjustments
    ADMIN_CREDIT = "ADMIN_CREDIT"
    ADMIN_DEBIT = "ADMIN_DEBIT"


class ReferenceType(str, Enum):
    BALANCE_REQUEST = "BALANCE_REQUEST"
    ORDER = "ORDER"
    ADMIN = "ADMIN"
