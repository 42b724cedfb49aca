"""Unit tests for the order state machine."""

import pytest

from src.smm_common.enums import OrderStatus
from src.smm_order.domain.models import Order, allowed_sources, can_transition


@pytest.mark.parametrize(
    ("current", "target"),
    [
        ("PENDING", "PROCESSING"),
        ("PROCESSING", "COMPLETED"),
        ("PENDING", "CANCELLED"),
        ("PROCESSING", "CANCELLED"),
    ],
)
def test_allowed_transitions(current: str, target: str) -> None:
    assert can_transition(current, target)


@pytest.mark.parametrize(
    ("current", "target"),
    [
        ("PENDING", "COMPLETED"),
        ("COMPLETED", "CANCELLED"),
        ("CANCELLED", "PENDING"),
        ("CANCELLED", "PROCESSING"),
        ("PROCESSING", "PENDING"),
        ("COMPLETED", "PROCESSING"),
    ],
)
def test_rejected_transitions(current: str, target: str) -> None:
    assert not can_transition(current, target)


def test_allowed_sources() -> None:
    assert allowed_sources("CANCELLED") == ["PENDING", "PROCESSING"]
    assert allowed_sources("COMPLETED") == ["PROCESSING"]
    assert allowed_sources("PROCESSING") == ["PENDING"]
    assert allowed_sources("PENDING") == []


def test_new_order_starts_pending() -> None:
    order = Order(
        id=1,
        user_id="user-1",
        service_id="svc-1",
        service_name="Instagram Followers",
        quantity=4000,
        unit_price=500,
        total_price=2000,
    )
    assert order.status == OrderStatus.PENDING.value
