"""Cart item management: commands and handler.

Availability is checked here, against the catalogue, before the cart is
touched: the cart itself only knows product ids and quantities.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.shared.errors import InsufficientStock, NotFound, UnavailableItem


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(default=1, min_value=1)
    size = String(max_length=20)


@storefront.command(part_of="ShoppingCart")
class UpdateCartItem:
    """Set a line's quantity. Zero removes the line."""

    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=0)
    size = String(max_length=20)


@storefront.command(part_of="ShoppingCart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    size = String(max_length=20)


@storefront.command(part_of="ShoppingCart")
class ClearCart:
    customer_id = Identifier(required=True)


def _existing_cart(customer_id):
    cart = current_domain.repository_for(ShoppingCart).find_for_customer(customer_id)
    if cart is None:
        raise NotFound("Cart not found")
    return cart


def _stock_message(product):
    return f"Only {product.stock_quantity} items available"


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        quantity = command.quantity or 1

        product = current_domain.repository_for(Product).find(command.product_id)
        if product is None:
            raise NotFound("Product not found")
        if not product.is_active:
            raise UnavailableItem(
                "Product is not available",
                [{"field": "product_id", "message": f"Product {command.product_id} is not available"}],
            )
        if product.stock_quantity < quantity:
            raise InsufficientStock(product.name, product.stock_quantity, message=_stock_message(product))

        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.get_or_create_for_customer(command.customer_id)
        cart.add_item(product_id=command.product_id, quantity=quantity, size=command.size)
        repo.add(cart)
        return str(cart.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        cart = _existing_cart(command.customer_id)

        if command.quantity > 0:
            product = current_domain.repository_for(Product).find(command.product_id)
            if product is not None and product.stock_quantity < command.quantity:
                raise InsufficientStock(product.name, product.stock_quantity, message=_stock_message(product))

        cart.update_item_quantity(product_id=command.product_id, quantity=command.quantity, size=command.size)
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = _existing_cart(command.customer_id)
        cart.remove_item(product_id=command.product_id, size=command.size)
        current_domain.repository_for(ShoppingCart).add(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.find_for_customer(command.customer_id)
        if cart is None:
            return
        cart.clear()
        repo.add(cart)
