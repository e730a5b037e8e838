"""Read model for a customer's cart, priced against the live catalogue.

Lines whose product has been deleted or deactivated are left out of the view
(and out of the subtotal); they stay in the stored cart and are rejected at
checkout.
"""

from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue.product import Product


def cart_view(customer_id) -> dict:
    cart = current_domain.repository_for(ShoppingCart).find_for_customer(customer_id)
    products = current_domain.repository_for(Product)

    lines = []
    subtotal = 0.0
    for item in cart.items if cart else []:
        product = products.find(item.product_id)
        if product is None or not product.is_active:
            continue

        unit_price = product.effective_price
        subtotal += unit_price * item.quantity
        lines.append(
            {
                "product_id": str(product.id),
                "name": product.name,
                "size": item.size,
                "quantity": item.quantity,
                "price": product.price,
                "discount_price": product.discount_price,
                "unit_price": unit_price,
                "image": product.primary_image,
                "stock_quantity": product.stock_quantity,
                "line_total": unit_price * item.quantity,
            }
        )

    return {
        "cart_id": str(cart.id) if cart else None,
        "items": lines,
        "item_count": len(lines),
        "total_items": sum(line["quantity"] for line in lines),
        "subtotal": subtotal,
    }
