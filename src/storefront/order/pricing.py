"""Order pricing: line snapshots, subtotal, shipping and total.

Amounts are in whole currency units (PKR), the same unit as product prices.
"""

from dataclasses import dataclass

from storefront.catalogue.product import effective_unit_price

FREE_SHIPPING_THRESHOLD = 3000
FLAT_SHIPPING_COST = 200


@dataclass(frozen=True)
class OrderTotals:
    subtotal: float
    shipping_cost: float
    total: float


def shipping_cost_for(subtotal) -> float:
    return 0 if subtotal >= FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING_COST


def compute_totals(lines) -> OrderTotals:
    """Price ``lines`` (dicts with ``unit_price`` and ``quantity``)."""
    subtotal = sum(line["unit_price"] * line["quantity"] for line in lines)
    shipping_cost = shipping_cost_for(subtotal)
    return OrderTotals(subtotal=subtotal, shipping_cost=shipping_cost, total=subtotal + shipping_cost)


def snapshot_line(product, quantity, size=None) -> dict:
    """Freeze what the customer is buying, as the catalogue shows it right now."""
    return {
        "product_id": str(product.id),
        "name": product.name,
        "unit_price": effective_unit_price(product.price, product.discount_price),
        "quantity": quantity,
        "size": size,
        "image": product.primary_image or "",
    }
