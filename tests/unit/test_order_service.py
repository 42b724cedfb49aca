"""Unit tests for order placement and status changes (mocked repo + ledger)."""

import uuid
from collections.abc import Iterator
from dataclasses import replace
from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from src.smm_catalog.domain.models import Service
from src.smm_common.enums import OrderStatus
from src.smm_common.errors import (
    AccountNotFoundError,
    InsufficientBalanceError,
    InvalidOrderTransitionError,
    OrderNotFoundError,
    OrderTotalTooSmallError,
    ProfileMissingError,
    ServiceNotFoundError,
)
from src.smm_ledger.domain.models import Account, LedgerEntry
from src.smm_order.application import service as svc
from src.smm_order.application.schemas import PlaceOrderRequest
from src.smm_order.domain.models import Order

SERVICE_ID = uuid.UUID("6f1c5c0e-1111-4222-8333-444455556666")


def _service(price: int = 500) -> Service:
    return Service(
        id=str(SERVICE_ID),
        category_id="cat-1",
        name="Instagram Followers",
        price=price,
        processing_time_hours=24,
    )


def _saved(order: Order, order_id: int = 7) -> Order:
    now = datetime.now(UTC)
    return replace(order, id=order_id, created_at=now, updated_at=now)


def _order(status: str = "PENDING", user_id: str = "user-1") -> Order:
    return Order(
        id=7,
        user_id=user_id,
        service_id=str(SERVICE_ID),
        service_name="Instagram Followers",
        quantity=4000,
        unit_price=500,
        total_price=2000,
        status=status,
        created_at=datetime.now(UTC),
        updated_at=datetime.now(UTC),
    )


def _account(balance: int) -> Account:
    now = datetime.now(UTC)
    return Account(
        id="acc-1", user_id="user-1", balance=balance, version=2,
        created_at=now, updated_at=now,
    )


def _entry(amount: int, balance_after: int, entry_type: str = "ORDER_DEBIT") -> LedgerEntry:
    return LedgerEntry(
        id=55, user_id="user-1", entry_type=entry_type,
        amount=amount, balance_after=balance_after,
    )


@pytest.fixture
def repo() -> Iterator[MagicMock]:
    with patch.object(svc, "_repo") as mock:
        mock.lock_service = AsyncMock(return_value=_service())
        mock.save = AsyncMock(side_effect=lambda order, db: _saved(order))
        mock.get_by_id = AsyncMock()
        mock.transition = AsyncMock()
        mock.list_orders = AsyncMock(return_value=[])
        yield mock


@pytest.fixture
def ledger() -> Iterator[MagicMock]:
    with patch.object(svc, "_ledger") as mock:
        mock.adjust_balance = AsyncMock()
        yield mock


@pytest.fixture
def db() -> AsyncMock:
    return AsyncMock()


class TestPlaceOrder:
    async def test_debits_frozen_total(
        self, repo: MagicMock, ledger: MagicMock, db: AsyncMock
    ) -> None:
        # 5.00 per 1000, 4000 units, balance 35.00 -> 15.00
        ledger.adjust_balance.return_value = (_account(1500), _entry(-2000, 1500))
        req = PlaceOrderRequest(service_id=SERVICE_ID, quantity=4000)

        result = await svc.place_order(req, "user-1", db)

        assert result.order.total_price_cents == 2000
        assert result.order.unit_price_cents == 500
        assert result.order.status == "PENDING"
        assert result.balance_cents == 1500
        assert result.ledger_entry_id == 55
        args = ledger.adjust_balance.call_args.args
        assert args[1:6] == ("user-1", -2000, "ORDER_DEBIT", "ORDER", "7")
        db.commit.assert_awaited_once()

    async def test_insufficient_balance_persists_nothing(
        self, repo: MagicMock, ledger: MagicMock, db: AsyncMock
    ) -> None:
        repo.lock_service.return_value = _service(price=1000)
        ledger.adjust_balance.side_effect = InsufficientBalanceError(2000, 1500)
        req = PlaceOrderRequest(service_id=SERVICE_ID, quantity=2000)

        with pytest.raises(InsufficientBalanceError) as exc_info:
            await svc.place_order(req, "user-1", db)

        assert exc_info.value.required == 2000
        assert exc_info.value.available == 1500
        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()

    async def test_unknown_service(
        self, repo: MagicMock, ledger: MagicMock, db: AsyncMock
    ) -> None:
        repo.lock_service.return_value = None
        req = PlaceOrderRequest(service_id=SERVICE_ID, quantity=1000)

        with pytest.raises(ServiceNotFoundError):
            await svc.place_order(req, "user-1", db)
        repo.save.assert_not_awaited()
        ledger.adjust_balance.assert_not_awaited()

    async def test_total_rounding_to_zero_rejected(
        self, repo: MagicMock, ledger: MagicMock, db: AsyncMock
    ) -> None:
        repo.lock_service.return_value = _service(price=100)
        req = PlaceOrderRequest(service_id=SERVICE_ID, quantity=4)

        with pytest.raises(OrderTotalTooSmallError):
            await svc.place_order(req, "user-1", db)
        repo.save.assert_not_awaited()

    async def test_missing_account_is_profile_missing(
        self, repo: MagicMock, ledger: MagicMock, db: AsyncMock
    ) -> None:
        ledger.adjust_balance.side_effect = AccountNotFoundError("user-1")
        req = PlaceOrderRequest(service_id=SERVICE_ID, quantity=1000)

        with pytest.raises(ProfileMissingError):
            await svc.place_order(req, "user-1", db)
        db.rollback.assert_awaited_once()

    async def test_saved_order_snapshots_price(
        self, repo: MagicMock, ledger: MagicMock, db: AsyncMock
    ) -> None:
        repo.lock_service.return_value = _service(price=1234)
        ledger.adjust_balance.return_value = (_account(991), _entry(-9, 991))
        req = PlaceOrderRequest(service_id=SERVICE_ID, quantity=7)

        await svc.place_order(req, "user-1", db)

        saved: Order = repo.save.call_args.args[0]
        assert saved.unit_price == 1234
        assert saved.total_price == 9
        assert saved.service_name == "Instagram Followers"


class TestAdvanceOrder:
    async def test_processing_has_no_balance_effect(
        self, repo: MagicMock, ledger: MagicMock, db: AsyncMock
    ) -> None:
        repo.transition.return_value = _order("PROCESSING")

        result = await svc.advance_order(7, OrderStatus.PROCESSING, "admin-1", db)

        assert result.order.status == "PROCESSING"
        assert result.refunded_cents == 0
        assert repo.transition.call_args.args[1] == ["PENDING"]
        ledger.adjust_balance.assert_not_awaited()
        db.commit.assert_awaited_once()

    async def test_cancel_refunds_total(
        self, repo: MagicMock, ledger: MagicMock, db: AsyncMock
    ) -> None:
        repo.transition.return_value = _order("CANCELLED")
        ledger.adjust_balance.return_value = (_account(3500), _entry(2000, 3500, "ORDER_REFUND"))

        result = await svc.advance_order(7, OrderStatus.CANCELLED, "admin-1", db)

        assert result.refunded_cents == 2000
        assert result.balance_cents == 3500
        assert repo.transition.call_args.args[1] == ["PENDING", "PROCESSING"]
        args = ledger.adjust_balance.call_args.args
        assert args[1:6] == ("user-1", 2000, "ORDER_REFUND", "ORDER", "7")
        db.commit.assert_awaited_once()

    async def test_completed_cannot_be_cancelled(
        self, repo: MagicMock, ledger: MagicMock, db: AsyncMock
    ) -> None:
        repo.transition.return_value = None
        repo.get_by_id.return_value = _order("COMPLETED")

        with pytest.raises(InvalidOrderTransitionError):
            await svc.advance_order(7, OrderStatus.CANCELLED, "admin-1", db)
        ledger.adjust_balance.assert_not_awaited()
        db.rollback.assert_awaited_once()

    async def test_unknown_order(
        self, repo: MagicMock, ledger: MagicMock, db: AsyncMock
    ) -> None:
        repo.transition.return_value = None
        repo.get_by_id.return_value = None

        with pytest.raises(OrderNotFoundError):
            await svc.advance_order(999, OrderStatus.PROCESSING, "admin-1", db)


class TestReads:
    async def test_get_order_owner_only(self, repo: MagicMock, db: AsyncMock) -> None:
        repo.get_by_id.return_value = _order(user_id="someone-else")
        with pytest.raises(OrderNotFoundError):
            await svc.get_order(7, "user-1", db)

    async def test_get_order_returns_snapshot(self, repo: MagicMock, db: AsyncMock) -> None:
        repo.get_by_id.return_value = _order()
        result = await svc.get_order(7, "user-1", db)
        assert result.service_name == "Instagram Followers"
        assert result.total_price_cents == 2000

    async def test_list_all_orders_has_no_owner_filter(
        self, repo: MagicMock, db: AsyncMock
    ) -> None:
        repo.list_orders.return_value = [_order(), _order()]
        result = await svc.list_all_orders("PENDING", 1, None, db)
        assert len(result.items) == 1
        assert result.has_more is True
        kwargs = repo.list_orders.call_args.kwargs
        assert kwargs["user_id"] is None
        assert kwargs["status"] == "PENDING"
        assert kwargs["limit"] == 2
