"""Tests for the order status state machine: transition table and side effects."""

from datetime import UTC, datetime

import pytest

from storefront.order.status import (
    OrderStatus,
    PaymentStatus,
    can_transition,
    transition,
)
from storefront.shared.errors import InvalidTransition

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

LEGAL = [
    (OrderStatus.PENDING, OrderStatus.CONFIRMED),
    (OrderStatus.PENDING, OrderStatus.CANCELLED),
    (OrderStatus.PENDING, OrderStatus.DELIVERED),
    (OrderStatus.CONFIRMED, OrderStatus.PROCESSING),
    (OrderStatus.PROCESSING, OrderStatus.SHIPPED),
    (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
    (OrderStatus.SHIPPED, OrderStatus.RETURNED),
    (OrderStatus.DELIVERED, OrderStatus.RETURNED),
]

ILLEGAL = [
    (OrderStatus.CONFIRMED, OrderStatus.PENDING),
    (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
    (OrderStatus.DELIVERED, OrderStatus.SHIPPED),
    (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
    (OrderStatus.PENDING, OrderStatus.RETURNED),
    (OrderStatus.CANCELLED, OrderStatus.PENDING),
    (OrderStatus.CANCELLED, OrderStatus.CONFIRMED),
    (OrderStatus.RETURNED, OrderStatus.DELIVERED),
]


@pytest.mark.parametrize("current, target", LEGAL)
def test_legal_transitions(current, target):
    assert can_transition(current, target)
    change = transition(current, PaymentStatus.PENDING, target, "note", NOW)
    assert change.status == target
    assert change.timestamp == NOW


@pytest.mark.parametrize("current, target", ILLEGAL)
def test_illegal_transitions_raise(current, target):
    assert not can_transition(current, target)
    with pytest.raises(InvalidTransition):
        transition(current, PaymentStatus.PENDING, target, "", NOW)


@pytest.mark.parametrize("terminal", [OrderStatus.CANCELLED, OrderStatus.RETURNED])
def test_terminal_states_have_no_exits(terminal):
    assert not any(can_transition(terminal, target) for target in OrderStatus)


def test_delivered_marks_payment_paid():
    change = transition(OrderStatus.SHIPPED, PaymentStatus.PENDING, OrderStatus.DELIVERED, "Handed over", NOW)
    assert change.payment_status == PaymentStatus.PAID
    assert change.delivered_at == NOW
    assert change.cancelled_at is None


def test_cancelled_records_cancellation_time_and_keeps_payment():
    change = transition(OrderStatus.CONFIRMED, PaymentStatus.PAID, OrderStatus.CANCELLED, "", NOW)
    assert change.cancelled_at == NOW
    assert change.payment_status == PaymentStatus.PAID
    assert change.delivered_at is None


def test_other_transitions_carry_payment_status_through():
    change = transition(OrderStatus.PENDING, PaymentStatus.FAILED, OrderStatus.CONFIRMED, "", NOW)
    assert change.payment_status == PaymentStatus.FAILED
    assert change.note == ""


def test_error_names_both_states():
    with pytest.raises(InvalidTransition) as exc:
        transition(OrderStatus.DELIVERED, PaymentStatus.PAID, OrderStatus.PENDING, "", NOW)
    assert "Delivered" in exc.value.message
    assert "Pending" in exc.value.message
