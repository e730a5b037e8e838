"""Shared BDD fixtures and step definitions for ordering scenarios."""

import json

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then

from storefront.cart.items import AddToCart
from storefront.cart.view import cart_view
from storefront.catalogue.management import DeleteProduct
from storefront.catalogue.product import Product
from storefront.catalogue.stock import AdjustStock
from storefront.checkout.placement import PlaceOrder
from storefront.order.order import Order
from storefront.order.status_update import UpdateOrderStatus
from storefront.shared.errors import StorefrontError

CUSTOMER = "cust-bdd"


@pytest.fixture()
def customer_id():
    return CUSTOMER


@pytest.fixture()
def world():
    """Mutable scenario state: products by name, the placed order and any captured error."""
    return {"products": {}, "order_id": None, "error": None}


@pytest.fixture()
def place_order(world, shipping_address):
    """Place an order for the scenario customer, capturing any domain error in ``world``."""

    def _place():
        try:
            world["order_id"] = current_domain.process(
                PlaceOrder(
                    customer_id=CUSTOMER,
                    shipping_address=json.dumps(shipping_address),
                    payment_method="COD",
                ),
                asynchronous=False,
            )
        except StorefrontError as exc:
            world["error"] = exc

    return _place


def _product(world, name):
    return current_domain.repository_for(Product).get(world["products"][name])


def _order(world):
    return current_domain.repository_for(Order).get(world["order_id"])


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price:d} with {stock:d} in stock'))
def product_in_stock(world, make_product, name, price, stock):
    world["products"][name] = str(make_product(name=name, price=float(price), stock_quantity=stock).id)


@given(parsers.cfparse('a product "{name}" priced {price:d} discounted to {discount:d} with {stock:d} in stock'))
def discounted_product(world, make_product, name, price, discount, stock):
    product = make_product(name=name, price=float(price), discount_price=float(discount), stock_quantity=stock)
    world["products"][name] = str(product.id)


@given(parsers.cfparse('the customer has {quantity:d} of "{name}" in the cart'))
def product_in_cart(world, name, quantity):
    current_domain.process(
        AddToCart(customer_id=CUSTOMER, product_id=world["products"][name], quantity=quantity),
        asynchronous=False,
    )


@given(parsers.cfparse('"{name}" is sold out'))
def sold_out(world, name):
    product = _product(world, name)
    current_domain.process(
        AdjustStock(product_id=str(product.id), quantity_change=-product.stock_quantity, reason="Sold out"),
        asynchronous=False,
    )


@given(parsers.cfparse('"{name}" has been deleted'))
def deleted(world, name):
    current_domain.process(DeleteProduct(product_id=world["products"][name]), asynchronous=False)


@given("the customer has placed an order")
def placed_order(world, place_order):
    place_order()
    assert world["error"] is None


@given(parsers.cfparse('the order has moved to "{status}"'))
def moved_to(world, status):
    current_domain.process(UpdateOrderStatus(order_id=world["order_id"], order_status=status), asynchronous=False)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(world, status):
    assert _order(world).order_status == status


@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
def stock_is(world, name, stock):
    assert _product(world, name).stock_quantity == stock


@then(parsers.cfparse("the customer's cart has {count:d} items"))
def cart_has(count):
    assert cart_view(CUSTOMER)["total_items"] == count
