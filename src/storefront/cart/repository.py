"""Repository for the ShoppingCart aggregate."""

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront


@storefront.repository(part_of=ShoppingCart)
class CartRepository:
    def find_for_customer(self, customer_id) -> ShoppingCart | None:
        carts = self._dao.query.filter(customer_id=str(customer_id)).all().items
        return carts[0] if carts else None

    def get_or_create_for_customer(self, customer_id) -> ShoppingCart:
        return self.find_for_customer(customer_id) or ShoppingCart.create(customer_id=str(customer_id))
