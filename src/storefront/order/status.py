"""Order status state machine.

Forward path::

    Pending → Confirmed → Processing → Shipped → Delivered

Cancelled and Returned are absorbing. ``transition`` is pure: it validates a
move and returns the history entry and side effects (timestamps, payment
status) as data, leaving it to the Order aggregate to apply them.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from storefront.shared.errors import InvalidTransition


class OrderStatus(Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    RETURNED = "Returned"


class PaymentStatus(Enum):
    PENDING = "Pending"
    PAID = "Paid"
    FAILED = "Failed"
    REFUNDED = "Refunded"


class PaymentMethod(Enum):
    COD = "COD"
    BANK_TRANSFER = "BankTransfer"
    JAZZCASH = "JazzCash"
    EASYPAISA = "EasyPaisa"
    CARD = "Card"


_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {
        OrderStatus.CONFIRMED,
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.CONFIRMED: {
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.RETURNED},
    OrderStatus.DELIVERED: {OrderStatus.RETURNED},
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.RETURNED: set(),  # Terminal
}

# States from which a customer may cancel their own order
CUSTOMER_CANCELLABLE_STATES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})


@dataclass(frozen=True)
class StatusChange:
    status: OrderStatus
    note: str
    timestamp: datetime
    payment_status: PaymentStatus
    delivered_at: datetime | None = None
    cancelled_at: datetime | None = None


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in _VALID_TRANSITIONS.get(current, set())


def transition(
    current: OrderStatus,
    payment_status: PaymentStatus,
    target: OrderStatus,
    note: str,
    now: datetime,
) -> StatusChange:
    """Validate ``current → target`` and compute what changes on the order."""
    if not can_transition(current, target):
        raise InvalidTransition(
            f"Cannot transition order from {current.value} to {target.value}",
            [{"field": "order_status", "message": f"{target.value} is not reachable from {current.value}"}],
        )

    if target == OrderStatus.DELIVERED:
        return StatusChange(
            status=target,
            note=note,
            timestamp=now,
            payment_status=PaymentStatus.PAID,
            delivered_at=now,
        )

    if target == OrderStatus.CANCELLED:
        return StatusChange(
            status=target,
            note=note,
            timestamp=now,
            payment_status=payment_status,
            cancelled_at=now,
        )

    return StatusChange(status=target, note=note, timestamp=now, payment_status=payment_status)
