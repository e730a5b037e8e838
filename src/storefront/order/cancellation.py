"""Customer cancellation: command and handler.

Cancelling puts every line's quantity back on the shelf. Products deleted
since the order was placed are skipped.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.order.order import Order
from storefront.shared.errors import NotFound

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    note = String(max_length=500, default="Cancelled by customer")


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order_repo = current_domain.repository_for(Order)
        product_repo = current_domain.repository_for(Product)

        order = order_repo.find(command.order_id)
        if order is None:
            raise NotFound("Order not found")

        # Ownership and state are checked before any stock moves
        order.cancel(requested_by=command.customer_id, note=command.note or "Cancelled by customer")
        order_repo.add(order)

        for item in order.items:
            product = product_repo.find(item.product_id)
            if product is None:
                logger.warning(
                    "stock_restore_skipped",
                    order_number=order.order_number,
                    product_id=str(item.product_id),
                    quantity=item.quantity,
                )
                continue
            product.restore_stock(item.quantity)
            product_repo.add(product)

        logger.info("Order cancelled", order_number=order.order_number, customer_id=str(command.customer_id))
        return str(order.id)
