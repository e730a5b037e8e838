from storefront.api.errors import register_error_handlers
from storefront.api.routes import cart_router, category_router, order_router, product_router, review_router

__all__ = [
    "cart_router",
    "category_router",
    "order_router",
    "product_router",
    "review_router",
    "register_error_handlers",
]
