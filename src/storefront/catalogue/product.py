"""Product aggregate: the catalogue record that carts and orders point at.

Stock and sold count are mutated by order placement (a sale) and order
cancellation (a restore), and by admin corrections. Price edits never reach
placed orders: orders keep a snapshot of name, unit price and image.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String, Text

from storefront.catalogue.events import (
    ProductActivated,
    ProductAdded,
    ProductDeactivated,
    ProductDetailsUpdated,
    ProductPricingChanged,
    StockAdjusted,
)
from storefront.domain import storefront
from storefront.shared.errors import InsufficientStock


class Size(Enum):
    XS = "XS"
    S = "S"
    M = "M"
    L = "L"
    XL = "XL"
    XXL = "XXL"
    CUSTOM = "Custom"
    FREE_SIZE = "Free Size"


def validate_sizes(sizes):
    for size in sizes or []:
        try:
            Size(size)
        except ValueError:
            raise ValidationError({"sizes": [f"{size} is not a valid size"]}) from None


def effective_unit_price(price, discount_price):
    """The price a customer pays: the discount price when it undercuts ``price``."""
    if discount_price and discount_price < price:
        return discount_price
    return price


@storefront.aggregate
class Product:
    name = String(required=True, max_length=200)
    brand = String(max_length=100)
    description = Text()
    category_id = Identifier()
    sizes = Text()  # JSON array of Size values
    images = Text()  # JSON array of image URLs, first one is primary
    price = Float(required=True, min_value=0.0)
    discount_price = Float(min_value=0.0)
    stock_quantity = Integer(default=0, min_value=0)
    sold_count = Integer(default=0, min_value=0)
    average_rating = Float(default=0.0, min_value=0.0, max_value=5.0)
    review_count = Integer(default=0, min_value=0)
    is_active = Boolean(default=True)
    is_featured = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def discount_price_must_be_below_price(self):
        if self.discount_price and self.price is not None and self.discount_price >= self.price:
            raise ValidationError({"discount_price": ["Discount price must be less than regular price"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def add(
        cls,
        name,
        price,
        stock_quantity=0,
        discount_price=None,
        brand=None,
        description=None,
        category_id=None,
        sizes=None,
        images=None,
        is_active=True,
        is_featured=False,
    ):
        validate_sizes(sizes)

        now = datetime.now(UTC)
        product = cls(
            name=name,
            brand=brand,
            description=description,
            category_id=category_id,
            sizes=json.dumps(list(sizes or [])),
            images=json.dumps(list(images or [])),
            price=price,
            discount_price=discount_price,
            stock_quantity=stock_quantity,
            is_active=is_active,
            is_featured=is_featured,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                name=name,
                price=price,
                discount_price=discount_price,
                stock_quantity=stock_quantity,
                is_active=is_active,
                created_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def effective_price(self):
        return effective_unit_price(self.price, self.discount_price)

    @property
    def is_on_sale(self):
        return bool(self.discount_price) and self.discount_price < self.price

    @property
    def discount_percentage(self):
        if not self.is_on_sale:
            return 0
        return round((self.price - self.discount_price) / self.price * 100)

    @property
    def image_urls(self):
        return json.loads(self.images) if self.images else []

    @property
    def size_list(self):
        return json.loads(self.sizes) if self.sizes else []

    @property
    def primary_image(self):
        urls = self.image_urls
        return urls[0] if urls else ""

    # -------------------------------------------------------------------
    # Admin edits
    # -------------------------------------------------------------------
    def update_details(
        self,
        name=None,
        brand=None,
        description=None,
        category_id=None,
        sizes=None,
        images=None,
        is_featured=None,
    ):
        if name is not None:
            self.name = name
        if brand is not None:
            self.brand = brand
        if description is not None:
            self.description = description
        if category_id is not None:
            self.category_id = category_id
        if sizes is not None:
            validate_sizes(sizes)
            self.sizes = json.dumps(list(sizes))
        if images is not None:
            self.images = json.dumps(list(images))
        if is_featured is not None:
            self.is_featured = is_featured

        self.updated_at = datetime.now(UTC)
        self.raise_(ProductDetailsUpdated(product_id=str(self.id), name=self.name, brand=self.brand))

    def update_pricing(self, price, discount_price=None):
        """Replace price and discount price together; the pair is validated once."""
        previous_price, previous_discount = self.price, self.discount_price

        with atomic_change(self):
            self.price = price
            self.discount_price = discount_price

        self.updated_at = datetime.now(UTC)
        self.raise_(
            ProductPricingChanged(
                product_id=str(self.id),
                previous_price=previous_price,
                previous_discount_price=previous_discount,
                new_price=price,
                new_discount_price=discount_price,
            )
        )

    def activate(self):
        if self.is_active:
            return
        self.is_active = True
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(ProductActivated(product_id=str(self.id), activated_at=now))

    def deactivate(self):
        if not self.is_active:
            return
        self.is_active = False
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(ProductDeactivated(product_id=str(self.id), deactivated_at=now))

    # -------------------------------------------------------------------
    # Stock reconciliation
    # -------------------------------------------------------------------
    def adjust_stock(self, delta_quantity, delta_sold=0, reason=None):
        """Move stock by ``delta_quantity`` and sold count by ``delta_sold``.

        Stock never goes below zero. Sold count is floored at zero so that
        restoring stock for an order placed before a manual correction cannot
        produce a negative counter.
        """
        new_stock = (self.stock_quantity or 0) + delta_quantity
        if new_stock < 0:
            raise ValidationError(
                {"stock_quantity": [f"Cannot reduce stock by {-delta_quantity}; only {self.stock_quantity} on hand"]}
            )

        self.stock_quantity = new_stock
        self.sold_count = max((self.sold_count or 0) + delta_sold, 0)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                quantity_change=delta_quantity,
                sold_change=delta_sold,
                new_stock_quantity=self.stock_quantity,
                new_sold_count=self.sold_count,
                reason=reason,
            )
        )

    def ensure_in_stock(self, quantity):
        if (self.stock_quantity or 0) < quantity:
            raise InsufficientStock(self.name, self.stock_quantity or 0)

    def record_sale(self, quantity):
        """Take ``quantity`` units out of stock for a placed order."""
        self.ensure_in_stock(quantity)
        self.adjust_stock(-quantity, quantity, reason="Order placed")

    def restore_stock(self, quantity):
        """Put ``quantity`` units back after an order is cancelled."""
        self.adjust_stock(quantity, -quantity, reason="Order cancelled")

    # -------------------------------------------------------------------
    # Reviews
    # -------------------------------------------------------------------
    def update_rating(self, ratings):
        """Recompute the average (one decimal place) and count from every review's rating."""
        ratings = list(ratings)
        self.review_count = len(ratings)
        self.average_rating = round(sum(ratings) / len(ratings), 1) if ratings else 0.0
        self.updated_at = datetime.now(UTC)
