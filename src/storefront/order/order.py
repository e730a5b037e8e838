"""Order aggregate: the ledger entry written when a cart is checked out.

Everything except the status fields is frozen at placement: line items carry
the name, unit price and image the customer saw, so later catalogue edits
never rewrite history. Status changes go through ``storefront.order.status``
and are appended to ``status_history``.
"""

import json
import re
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.order.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from storefront.order.status import (
    CUSTOMER_CANCELLABLE_STATES,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    transition,
)
from storefront.shared.errors import Forbidden, InvalidTransition

_PHONE_PATTERN = re.compile(r"^(\+92|0)?[0-9]{10}$")


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order goes, captured at checkout and never updated afterwards."""

    full_name = String(required=True, max_length=100)
    street = String(required=True, max_length=255)
    city = String(required=True, max_length=100)
    province = String(required=True, max_length=100)
    postal_code = String(max_length=20)
    phone = String(required=True, max_length=20)

    @invariant.post
    def phone_must_be_a_pakistani_number(self):
        if self.phone and not _PHONE_PATTERN.match(self.phone):
            raise ValidationError({"phone": ["Please enter a valid Pakistani phone number"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A frozen line: product reference plus the name, price and image at placement time."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=200)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    size = String(max_length=20)
    image = String(max_length=500, default="")

    @property
    def line_total(self):
        return self.unit_price * self.quantity


@storefront.entity(part_of="Order")
class StatusEntry:
    status = String(required=True, choices=OrderStatus)
    note = String(max_length=500, default="")
    timestamp = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=50, unique=True)
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    shipping_address = ValueObject(ShippingAddress)
    subtotal = Float(required=True, min_value=0.0)
    shipping_cost = Float(default=0.0, min_value=0.0)
    total = Float(required=True, min_value=0.0)
    payment_method = String(required=True, choices=PaymentMethod)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    order_status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    tracking_number = String(max_length=100)
    notes = String(max_length=500)
    status_history = HasMany(StatusEntry)
    delivered_at = DateTime()
    cancelled_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def order_must_have_items(self):
        if not self.items:
            raise ValidationError({"items": ["An order must contain at least one item"]})

    @invariant.post
    def total_must_equal_subtotal_plus_shipping(self):
        if self.total is None or self.subtotal is None:
            return
        if abs(self.total - (self.subtotal + (self.shipping_cost or 0))) > 0.005:
            raise ValidationError({"total": ["Total must equal subtotal plus shipping cost"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, order_number, customer_id, lines, shipping_address, payment_method, totals, notes=None):
        """Create a Pending order from priced line snapshots.

        Args:
            order_number: A number not used by any other order.
            customer_id: The customer placing the order.
            lines: Dicts with product_id, name, unit_price, quantity, size, image.
            shipping_address: Dict with full_name, street, city, province,
                postal_code (optional), phone.
            payment_method: One of PaymentMethod values.
            totals: ``OrderTotals`` computed from ``lines``.
            notes: Optional free text for the seller.
        """
        now = datetime.now(UTC)

        order = cls(
            order_number=order_number,
            customer_id=customer_id,
            items=[OrderItem(**line) for line in lines],
            shipping_address=ShippingAddress(**shipping_address),
            subtotal=totals.subtotal,
            shipping_cost=totals.shipping_cost,
            total=totals.total,
            payment_method=PaymentMethod(payment_method).value,
            payment_status=PaymentStatus.PENDING.value,
            order_status=OrderStatus.PENDING.value,
            notes=notes or None,
            status_history=[StatusEntry(status=OrderStatus.PENDING.value, note="Order placed", timestamp=now)],
            created_at=now,
            updated_at=now,
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                items=json.dumps(lines),
                item_count=len(lines),
                subtotal=totals.subtotal,
                shipping_cost=totals.shipping_cost,
                total=totals.total,
                payment_method=order.payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def is_owned_by(self, customer_id):
        return str(self.customer_id) == str(customer_id)

    def ensure_visible_to(self, customer_id, is_admin=False):
        if not is_admin and not self.is_owned_by(customer_id):
            raise Forbidden("Not authorized to view this order")

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def update_status(self, new_status, note="", tracking_number=None):
        """Move the order to ``new_status`` and record it in the history."""
        previous = OrderStatus(self.order_status)
        change = transition(
            current=previous,
            payment_status=PaymentStatus(self.payment_status),
            target=OrderStatus(new_status),
            note=note or "",
            now=datetime.now(UTC),
        )

        if tracking_number:
            self.tracking_number = tracking_number

        self.order_status = change.status.value
        self.payment_status = change.payment_status.value
        if change.delivered_at:
            self.delivered_at = change.delivered_at
        if change.cancelled_at:
            self.cancelled_at = change.cancelled_at
        self.add_status_history(StatusEntry(status=change.status.value, note=change.note, timestamp=change.timestamp))
        self.updated_at = change.timestamp

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous.value,
                new_status=change.status.value,
                payment_status=change.payment_status.value,
                note=change.note,
                changed_at=change.timestamp,
            )
        )

    def cancel(self, requested_by, note="Cancelled by customer"):
        """Customer cancellation: only the owner, only while Pending or Confirmed.

        Stock for the lines is restored by the caller, which owns the
        Product aggregates.
        """
        if not self.is_owned_by(requested_by):
            raise Forbidden("Not authorized")

        current = OrderStatus(self.order_status)
        if current not in CUSTOMER_CANCELLABLE_STATES:
            raise InvalidTransition(
                "Order cannot be cancelled at this stage",
                [{"field": "order_status", "message": f"Order is {current.value}"}],
            )

        self.update_status(OrderStatus.CANCELLED.value, note)

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                items=json.dumps([{"product_id": str(i.product_id), "quantity": i.quantity} for i in self.items]),
                cancelled_at=self.cancelled_at,
            )
        )
