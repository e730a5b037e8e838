"""Order placement: turns a customer's cart into an Order.

The handler runs inside one Unit of Work:

    1. load the cart                          (EmptyCart)
    2. resolve every line's product           (UnavailableItem)
    3. check stock per product                (InsufficientStock)
    4-6. price lines, subtotal, shipping, total
    7. write the order with a fresh order number
    8. take the quantities out of stock
    9. empty the cart

Steps 1-3 only read. If anything fails from step 7 on, the Unit of Work is
rolled back and the failure is reported as OrderPlacementFailed.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.order.numbering import next_order_number
from storefront.order.order import Order
from storefront.order.pricing import compute_totals, snapshot_line
from storefront.order.status import PaymentMethod
from storefront.shared.errors import (
    EmptyCart,
    InsufficientStock,
    OrderPlacementFailed,
    StorefrontError,
    UnavailableItem,
)

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON: address dict
    payment_method = String(required=True, choices=PaymentMethod)
    notes = String(max_length=500)


def _line_label(product, item, product_id):
    if product is None:
        return product_id
    if item.size:
        return f"{product.name} ({item.size})"
    return product.name


def resolve_cart_products(cart, product_repo):
    """Load the product behind every cart line, failing on the first unusable one.

    Returns a dict of product id to Product. Nothing is modified.
    """
    products = {}
    requested = {}

    for item in cart.items:
        product_id = str(item.product_id)
        product = products.get(product_id) or product_repo.find(product_id)
        if product is None or not product.is_active:
            raise UnavailableItem(
                "Some products are no longer available",
                [
                    {
                        "field": "items",
                        "message": f"{_line_label(product, item, product_id)} is no longer available",
                        "product_id": product_id,
                        "size": item.size,
                    }
                ],
            )
        products[product_id] = product
        requested[product_id] = requested.get(product_id, 0) + item.quantity

    # The same product can sit in the cart once per size; stock covers them all
    for product_id, quantity in requested.items():
        product = products[product_id]
        if product.stock_quantity < quantity:
            raise InsufficientStock(product.name, product.stock_quantity)

    return products


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart_repo = current_domain.repository_for(ShoppingCart)
        product_repo = current_domain.repository_for(Product)
        order_repo = current_domain.repository_for(Order)

        cart = cart_repo.find_for_customer(command.customer_id)
        if cart is None or not cart.items:
            raise EmptyCart()

        products = resolve_cart_products(cart, product_repo)

        lines = [snapshot_line(products[str(item.product_id)], item.quantity, item.size) for item in cart.items]
        totals = compute_totals(lines)

        order_number = next_order_number(order_repo.order_number_exists)
        if order_number is None:
            raise OrderPlacementFailed("Could not allocate a unique order number")

        order = Order.place(
            order_number=order_number,
            customer_id=command.customer_id,
            lines=lines,
            shipping_address=json.loads(command.shipping_address),
            payment_method=command.payment_method,
            totals=totals,
            notes=command.notes,
        )
        order_repo.add(order)

        try:
            for item in cart.items:
                products[str(item.product_id)].record_sale(item.quantity)
            for product in products.values():
                product_repo.add(product)

            cart.clear()
            cart_repo.add(cart)
        except (StorefrontError, ValidationError) as exc:
            logger.error(
                "Order placement left incomplete, rolling back",
                order_number=order_number,
                customer_id=str(command.customer_id),
                error=str(exc),
            )
            raise OrderPlacementFailed(
                f"Order {order_number} could not be completed and was rolled back",
                [{"field": "order", "message": str(exc)}],
            ) from exc

        logger.info(
            "Order placed",
            order_number=order_number,
            customer_id=str(command.customer_id),
            items=len(lines),
            subtotal=totals.subtotal,
            shipping_cost=totals.shipping_cost,
            total=totals.total,
        )
        return str(order.id)
