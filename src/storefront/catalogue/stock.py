"""Stock adjustment: admin restocks and corrections."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.shared.errors import NotFound


@storefront.command(part_of="Product")
class AdjustStock:
    product_id = Identifier(required=True)
    quantity_change = Integer(required=True)  # Can be negative
    reason = String(required=True, max_length=255)


@storefront.command_handler(part_of=Product)
class StockAdjustmentHandler:
    @handle(AdjustStock)
    def adjust_stock(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.find(command.product_id)
        if product is None:
            raise NotFound("Product not found")

        product.adjust_stock(command.quantity_change, 0, reason=command.reason)
        repo.add(product)
        return product.stock_quantity
