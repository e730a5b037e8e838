"""Shopping Cart aggregate: one mutable cart per customer.

Lines are identified by (product, size): adding a product in a size that is
already in the cart grows that line instead of adding a second one. The cart
is created lazily on the first add and emptied, never deleted, when it turns
into an order.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from storefront.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemQuantityUpdated,
    CartItemRemoved,
)
from storefront.catalogue.product import Size
from storefront.domain import storefront


def _normalize_size(size):
    if size is None or size == "":
        return None
    try:
        return Size(size).value
    except ValueError:
        raise ValidationError({"size": [f"{size} is not a valid size"]}) from None


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    size = String(choices=Size)
    added_at = DateTime()

    def matches(self, product_id, size):
        return str(self.product_id) == str(product_id) and (self.size or None) == size


@storefront.aggregate
class ShoppingCart:
    customer_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(customer_id=customer_id, created_at=now, updated_at=now)

    def _find_line(self, product_id, size):
        return next((item for item in self.items if item.matches(product_id, size)), None)

    @property
    def total_items(self):
        return sum(item.quantity for item in self.items)

    # -------------------------------------------------------------------
    # Line mutations
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity=1, size=None):
        """Add ``quantity`` of a product, merging into an existing (product, size) line."""
        size = _normalize_size(size)
        now = datetime.now(UTC)

        existing = self._find_line(product_id, size)
        if existing:
            existing.quantity += quantity
            line_quantity = existing.quantity
        else:
            self.add_items(CartItem(product_id=product_id, quantity=quantity, size=size, added_at=now))
            line_quantity = quantity

        self.updated_at = now
        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                product_id=str(product_id),
                size=size,
                quantity=quantity,
                line_quantity=line_quantity,
            )
        )

    def update_item_quantity(self, product_id, quantity, size=None):
        """Overwrite a line's quantity; zero or less removes the line.

        Updating a line that is not in the cart does nothing.
        """
        size = _normalize_size(size)
        item = self._find_line(product_id, size)
        if item is None:
            return

        if quantity <= 0:
            self.remove_item(product_id, size)
            return

        previous_quantity = item.quantity
        item.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemQuantityUpdated(
                cart_id=str(self.id),
                product_id=str(product_id),
                size=size,
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id, size=None):
        """Drop the (product, size) line. Absent lines are ignored."""
        size = _normalize_size(size)
        item = self._find_line(product_id, size)
        if item is None:
            return

        self.remove_items(item)
        self.updated_at = datetime.now(UTC)
        self.raise_(CartItemRemoved(cart_id=str(self.id), product_id=str(product_id), size=size))

    def clear(self):
        removed = len(self.items)
        for item in list(self.items):
            self.remove_items(item)

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                items_removed=removed,
                cleared_at=now,
            )
        )
