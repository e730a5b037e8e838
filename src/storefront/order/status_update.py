"""Admin status updates: moves an order along the transition table."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.order.status import OrderStatus
from storefront.shared.errors import NotFound

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    order_status = String(required=True, choices=OrderStatus)
    note = String(max_length=500)
    tracking_number = String(max_length=100)


@storefront.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find(command.order_id)
        if order is None:
            raise NotFound("Order not found")

        previous = order.order_status
        order.update_status(command.order_status, note=command.note or "", tracking_number=command.tracking_number)
        repo.add(order)

        logger.info(
            "Order status updated",
            order_number=order.order_number,
            previous_status=previous,
            new_status=order.order_status,
        )
        return str(order.id)
