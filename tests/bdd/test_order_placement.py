"""BDD tests for order placement."""

from protean import current_domain
from pytest_bdd import parsers, scenarios, then, when

from storefront.order.order import Order

scenarios("features/order_placement.feature")


def _order(world):
    return current_domain.repository_for(Order).get(world["order_id"])


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the customer places an order")
def _(place_order):
    place_order()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the order subtotal is {amount:d}"))
def _(world, amount):
    assert _order(world).subtotal == amount


@then(parsers.cfparse("the order shipping cost is {amount:d}"))
def _(world, amount):
    assert _order(world).shipping_cost == amount


@then(parsers.cfparse("the order total is {amount:d}"))
def _(world, amount):
    assert _order(world).total == amount


@then(parsers.cfparse('the placement fails with "{kind}"'))
def _(world, kind):
    assert world["error"] is not None
    assert world["error"].kind == kind


@then("no order was written")
def _():
    assert current_domain.repository_for(Order)._dao.query.all().total == 0
