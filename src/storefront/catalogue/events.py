"""Domain events for the Product aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    """A new product was added to the catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    discount_price = Float()
    stock_quantity = Integer(required=True)
    is_active = Boolean()
    created_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductDetailsUpdated:
    __version__ = 1

    product_id = Identifier(required=True)
    name = String(required=True)
    brand = String()


@storefront.event(part_of="Product")
class ProductPricingChanged:
    """Price and/or discount price changed. Placed orders keep their snapshot."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_price = Float(required=True)
    previous_discount_price = Float()
    new_price = Float(required=True)
    new_discount_price = Float()


@storefront.event(part_of="Product")
class StockAdjusted:
    """Stock and sold count moved, by a sale, a cancellation or an admin correction."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity_change = Integer(required=True)
    sold_change = Integer(required=True)
    new_stock_quantity = Integer(required=True)
    new_sold_count = Integer(required=True)
    reason = String(max_length=255)


@storefront.event(part_of="Product")
class ProductActivated:
    __version__ = 1

    product_id = Identifier(required=True)
    activated_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductDeactivated:
    __version__ = 1

    product_id = Identifier(required=True)
    deactivated_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Category events
# ---------------------------------------------------------------------------
@storefront.event(part_of="Category")
class CategoryAdded:
    __version__ = 1

    category_id = Identifier(required=True)
    name = String(required=True)
    slug = String(required=True)
    parent_id = Identifier()


@storefront.event(part_of="Category")
class CategoryUpdated:
    __version__ = 1

    category_id = Identifier(required=True)
    name = String(required=True)
    slug = String(required=True)
    parent_id = Identifier()
    is_active = Boolean()
