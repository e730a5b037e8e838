"""FastAPI routes for the Storefront: cart, orders, products, categories and reviews."""

import json
from datetime import datetime

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.auth import current_identity, require_admin
from storefront.api.errors import success
from storefront.api.schemas import (
    AddCategoryRequest,
    AddProductRequest,
    AddToCartRequest,
    AdjustStockRequest,
    CancelOrderRequest,
    PlaceOrderRequest,
    SubmitReviewRequest,
    UpdateCartItemRequest,
    UpdateCategoryRequest,
    UpdateOrderStatusRequest,
    UpdatePricingRequest,
    UpdateProductRequest,
    UpdateReviewRequest,
)
from storefront.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartItem
from storefront.cart.view import cart_view
from storefront.catalogue.categories import AddCategory, DeleteCategory, UpdateCategory
from storefront.catalogue.category import Category
from storefront.catalogue.management import (
    ActivateProduct,
    AddProduct,
    DeactivateProduct,
    DeleteProduct,
    UpdateProductDetails,
    UpdateProductPricing,
)
from storefront.catalogue.product import Product
from storefront.catalogue.stock import AdjustStock
from storefront.checkout.placement import PlaceOrder
from storefront.identity.tokens import Identity
from storefront.order.cancellation import CancelOrder
from storefront.order.order import Order
from storefront.order.status_update import UpdateOrderStatus
from storefront.review.editing import EditReview
from storefront.review.removal import DeleteReview
from storefront.review.review import Review
from storefront.review.submission import SubmitReview
from storefront.shared.errors import NotFound


def _timestamp(value):
    return value.isoformat() if value else None


def order_data(order: Order) -> dict:
    history = sorted(order.status_history, key=lambda entry: entry.timestamp)
    return {
        "id": str(order.id),
        "order_number": order.order_number,
        "customer_id": str(order.customer_id),
        "items": [
            {
                "product_id": str(item.product_id),
                "name": item.name,
                "unit_price": item.unit_price,
                "quantity": item.quantity,
                "size": item.size,
                "image": item.image or "",
                "line_total": item.line_total,
            }
            for item in order.items
        ],
        "shipping_address": {
            "full_name": order.shipping_address.full_name,
            "street": order.shipping_address.street,
            "city": order.shipping_address.city,
            "province": order.shipping_address.province,
            "postal_code": order.shipping_address.postal_code,
            "phone": order.shipping_address.phone,
        },
        "subtotal": order.subtotal,
        "shipping_cost": order.shipping_cost,
        "total": order.total,
        "payment_method": order.payment_method,
        "payment_status": order.payment_status,
        "order_status": order.order_status,
        "tracking_number": order.tracking_number,
        "notes": order.notes,
        "status_history": [
            {"status": entry.status, "note": entry.note, "timestamp": _timestamp(entry.timestamp)} for entry in history
        ],
        "delivered_at": _timestamp(order.delivered_at),
        "cancelled_at": _timestamp(order.cancelled_at),
        "created_at": _timestamp(order.created_at),
    }


def product_data(product: Product) -> dict:
    return {
        "id": str(product.id),
        "name": product.name,
        "brand": product.brand,
        "description": product.description,
        "category_id": str(product.category_id) if product.category_id else None,
        "sizes": product.size_list,
        "images": product.image_urls,
        "price": product.price,
        "discount_price": product.discount_price,
        "effective_price": product.effective_price,
        "is_on_sale": product.is_on_sale,
        "discount_percentage": product.discount_percentage,
        "stock_quantity": product.stock_quantity,
        "sold_count": product.sold_count,
        "average_rating": product.average_rating,
        "review_count": product.review_count,
        "is_active": product.is_active,
        "is_featured": product.is_featured,
        "created_at": _timestamp(product.created_at),
    }


def category_data(category: Category) -> dict:
    return {
        "id": str(category.id),
        "name": category.name,
        "slug": category.slug,
        "description": category.description,
        "parent_id": str(category.parent_id) if category.parent_id else None,
        "image": category.image,
        "is_active": category.is_active,
        "display_order": category.display_order,
    }


def review_data(review: Review) -> dict:
    return {
        "id": str(review.id),
        "product_id": str(review.product_id),
        "customer_id": str(review.customer_id),
        "rating": review.rating,
        "title": review.title,
        "comment": review.comment,
        "verified_purchase": review.verified_purchase,
        "is_edited": review.is_edited,
        "created_at": _timestamp(review.created_at),
        "updated_at": _timestamp(review.updated_at),
    }


def _load_order(order_id) -> Order:
    order = current_domain.repository_for(Order).find(order_id)
    if order is None:
        raise NotFound("Order not found")
    return order


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("")
async def get_cart(identity: Identity = Depends(current_identity)) -> dict:
    return success(cart_view(identity.user_id), "Cart retrieved")


@cart_router.post("/items")
async def add_cart_item(body: AddToCartRequest, identity: Identity = Depends(current_identity)) -> dict:
    command = AddToCart(
        customer_id=identity.user_id,
        product_id=body.product_id,
        quantity=body.quantity,
        size=body.size,
    )
    current_domain.process(command, asynchronous=False)
    return success(cart_view(identity.user_id), "Item added to cart")


@cart_router.put("/items")
async def update_cart_item(body: UpdateCartItemRequest, identity: Identity = Depends(current_identity)) -> dict:
    command = UpdateCartItem(
        customer_id=identity.user_id,
        product_id=body.product_id,
        quantity=body.quantity,
        size=body.size,
    )
    current_domain.process(command, asynchronous=False)
    return success(cart_view(identity.user_id), "Cart updated")


@cart_router.delete("/items/{product_id}")
async def remove_cart_item(
    product_id: str, size: str | None = None, identity: Identity = Depends(current_identity)
) -> dict:
    command = RemoveFromCart(customer_id=identity.user_id, product_id=product_id, size=size)
    current_domain.process(command, asynchronous=False)
    return success(cart_view(identity.user_id), "Item removed from cart")


@cart_router.delete("")
async def clear_cart(identity: Identity = Depends(current_identity)) -> dict:
    current_domain.process(ClearCart(customer_id=identity.user_id), asynchronous=False)
    return success(cart_view(identity.user_id), "Cart cleared")


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201)
async def place_order(body: PlaceOrderRequest, identity: Identity = Depends(current_identity)) -> dict:
    """Turn the caller's cart into an order."""
    command = PlaceOrder(
        customer_id=identity.user_id,
        shipping_address=json.dumps(body.shipping_address.model_dump()),
        payment_method=body.payment_method,
        notes=body.notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return success(order_data(_load_order(order_id)), "Order placed successfully")


@order_router.get("")
async def list_my_orders(page: int = 1, limit: int = 10, identity: Identity = Depends(current_identity)) -> dict:
    results = current_domain.repository_for(Order).list_for_customer(identity.user_id, page=page, limit=limit)
    return success([order_data(order) for order in results.items], "Orders retrieved", results.meta())


@order_router.get("/admin/all")
async def list_all_orders(
    status: str | None = None,
    payment_status: str | None = None,
    page: int = 1,
    limit: int = 20,
    identity: Identity = Depends(require_admin),
) -> dict:
    results = current_domain.repository_for(Order).list_orders(
        status=status, payment_status=payment_status, page=page, limit=limit
    )
    return success([order_data(order) for order in results.items], "Orders retrieved", results.meta())


@order_router.get("/admin/stats")
async def order_stats(identity: Identity = Depends(require_admin)) -> dict:
    stats = current_domain.repository_for(Order).stats(now=datetime.now().astimezone())
    return success(stats, "Order statistics")


@order_router.put("/admin/{order_id}/status")
async def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, identity: Identity = Depends(require_admin)
) -> dict:
    command = UpdateOrderStatus(
        order_id=order_id,
        order_status=body.order_status,
        note=body.note,
        tracking_number=body.tracking_number,
    )
    current_domain.process(command, asynchronous=False)
    return success(order_data(_load_order(order_id)), "Order status updated")


@order_router.get("/{order_number}")
async def get_order(order_number: str, identity: Identity = Depends(current_identity)) -> dict:
    order = current_domain.repository_for(Order).find_by_order_number(order_number)
    if order is None:
        raise NotFound("Order not found")
    order.ensure_visible_to(identity.user_id, is_admin=identity.is_admin)
    return success(order_data(order), "Order retrieved")


@order_router.put("/{order_id}/cancel")
async def cancel_order(
    order_id: str, body: CancelOrderRequest | None = None, identity: Identity = Depends(current_identity)
) -> dict:
    command = CancelOrder(
        order_id=order_id,
        customer_id=identity.user_id,
        note=body.note if body and body.note else "Cancelled by customer",
    )
    current_domain.process(command, asynchronous=False)
    return success(order_data(_load_order(order_id)), "Order cancelled successfully")


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


def _load_product(product_id, include_inactive=False) -> Product:
    product = current_domain.repository_for(Product).find(product_id)
    if product is None or (not product.is_active and not include_inactive):
        raise NotFound("Product not found")
    return product


@product_router.get("")
async def list_products(
    page: int = 1,
    limit: int = 12,
    category: str | None = None,
    size: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    featured: bool | None = None,
    sort: str = "-created_at",
) -> dict:
    results = current_domain.repository_for(Product).list_active(
        page=page,
        limit=limit,
        category_id=category,
        size=size,
        min_price=min_price,
        max_price=max_price,
        featured=featured,
        sort=sort,
    )
    return success([product_data(product) for product in results.items], "Products retrieved", results.meta())


@product_router.get("/featured")
async def featured_products(limit: int = 8) -> dict:
    products = current_domain.repository_for(Product).list_featured(limit=limit)
    return success([product_data(product) for product in products], "Featured products retrieved")


@product_router.get("/{product_id}")
async def get_product(product_id: str) -> dict:
    return success(product_data(_load_product(product_id)), "Product retrieved")


@product_router.post("", status_code=201)
async def add_product(body: AddProductRequest, identity: Identity = Depends(require_admin)) -> dict:
    command = AddProduct(
        name=body.name,
        price=body.price,
        discount_price=body.discount_price,
        stock_quantity=body.stock_quantity,
        brand=body.brand,
        description=body.description,
        category_id=body.category_id,
        sizes=json.dumps(body.sizes),
        images=json.dumps(body.images),
        is_active=body.is_active,
        is_featured=body.is_featured,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return success(product_data(_load_product(product_id, include_inactive=True)), "Product created")


@product_router.put("/{product_id}")
async def update_product(product_id: str, body: UpdateProductRequest, identity: Identity = Depends(require_admin)) -> dict:
    command = UpdateProductDetails(
        product_id=product_id,
        name=body.name,
        brand=body.brand,
        description=body.description,
        category_id=body.category_id,
        sizes=json.dumps(body.sizes) if body.sizes is not None else None,
        images=json.dumps(body.images) if body.images is not None else None,
        is_featured=body.is_featured,
    )
    current_domain.process(command, asynchronous=False)
    return success(product_data(_load_product(product_id, include_inactive=True)), "Product updated")


@product_router.put("/{product_id}/pricing")
async def update_pricing(product_id: str, body: UpdatePricingRequest, identity: Identity = Depends(require_admin)) -> dict:
    command = UpdateProductPricing(product_id=product_id, price=body.price, discount_price=body.discount_price)
    current_domain.process(command, asynchronous=False)
    return success(product_data(_load_product(product_id, include_inactive=True)), "Pricing updated")


@product_router.put("/{product_id}/stock")
async def adjust_stock(product_id: str, body: AdjustStockRequest, identity: Identity = Depends(require_admin)) -> dict:
    command = AdjustStock(product_id=product_id, quantity_change=body.quantity_change, reason=body.reason)
    current_domain.process(command, asynchronous=False)
    return success(product_data(_load_product(product_id, include_inactive=True)), "Stock adjusted")


@product_router.put("/{product_id}/activate")
async def activate_product(product_id: str, identity: Identity = Depends(require_admin)) -> dict:
    current_domain.process(ActivateProduct(product_id=product_id), asynchronous=False)
    return success(product_data(_load_product(product_id)), "Product activated")


@product_router.put("/{product_id}/deactivate")
async def deactivate_product(product_id: str, identity: Identity = Depends(require_admin)) -> dict:
    current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
    return success(product_data(_load_product(product_id, include_inactive=True)), "Product deactivated")


@product_router.delete("/{product_id}")
async def delete_product(product_id: str, identity: Identity = Depends(require_admin)) -> dict:
    current_domain.process(DeleteProduct(product_id=product_id), asynchronous=False)
    return success(None, "Product deleted")


# ---------------------------------------------------------------------------
# Category Router
# ---------------------------------------------------------------------------
category_router = APIRouter(prefix="/categories", tags=["categories"])


def _load_category(category_id) -> Category:
    category = current_domain.repository_for(Category).find(category_id)
    if category is None:
        raise NotFound("Category not found")
    return category


@category_router.get("")
async def category_tree() -> dict:
    """Active top-level categories with their active subcategories."""
    tree = current_domain.repository_for(Category).tree()
    data = [
        {**category_data(node["category"]), "children": [category_data(child) for child in node["children"]]}
        for node in tree
    ]
    return success(data, "Categories retrieved")


@category_router.get("/admin/all")
async def list_all_categories(identity: Identity = Depends(require_admin)) -> dict:
    categories = current_domain.repository_for(Category).list_all()
    return success([category_data(category) for category in categories], "Categories retrieved")


@category_router.get("/{slug}")
async def get_category(slug: str) -> dict:
    category = current_domain.repository_for(Category).find_by_slug(slug)
    if category is None or not category.is_active:
        raise NotFound("Category not found")
    return success(category_data(category), "Category retrieved")


@category_router.post("", status_code=201)
async def add_category(body: AddCategoryRequest, identity: Identity = Depends(require_admin)) -> dict:
    command = AddCategory(
        name=body.name,
        description=body.description,
        parent_id=body.parent_id,
        image=body.image,
        is_active=body.is_active,
        display_order=body.display_order,
    )
    category_id = current_domain.process(command, asynchronous=False)
    return success(category_data(_load_category(category_id)), "Category created")


@category_router.put("/{category_id}")
async def update_category(
    category_id: str, body: UpdateCategoryRequest, identity: Identity = Depends(require_admin)
) -> dict:
    command = UpdateCategory(
        category_id=category_id,
        name=body.name,
        description=body.description,
        parent_id=body.parent_id,
        image=body.image,
        is_active=body.is_active,
        display_order=body.display_order,
    )
    current_domain.process(command, asynchronous=False)
    return success(category_data(_load_category(category_id)), "Category updated")


@category_router.delete("/{category_id}")
async def delete_category(category_id: str, identity: Identity = Depends(require_admin)) -> dict:
    current_domain.process(DeleteCategory(category_id=category_id), asynchronous=False)
    return success(None, "Category deleted")


# ---------------------------------------------------------------------------
# Review Router
# ---------------------------------------------------------------------------
review_router = APIRouter(prefix="/reviews", tags=["reviews"])


def _load_review(review_id) -> Review:
    review = current_domain.repository_for(Review).find(review_id)
    if review is None:
        raise NotFound("Review not found")
    return review


@review_router.get("/product/{product_id}")
async def product_reviews(product_id: str, page: int = 1, limit: int = 10) -> dict:
    repo = current_domain.repository_for(Review)
    results = repo.list_for_product(product_id, page=page, limit=limit)
    data = {
        "reviews": [review_data(review) for review in results.items],
        "rating_distribution": repo.rating_distribution(product_id),
    }
    return success(data, "Reviews retrieved", results.meta())


@review_router.post("/product/{product_id}", status_code=201)
async def submit_review(
    product_id: str, body: SubmitReviewRequest, identity: Identity = Depends(current_identity)
) -> dict:
    command = SubmitReview(
        product_id=product_id,
        customer_id=identity.user_id,
        rating=body.rating,
        title=body.title,
        comment=body.comment,
    )
    review_id = current_domain.process(command, asynchronous=False)
    return success(review_data(_load_review(review_id)), "Review added")


@review_router.put("/{review_id}")
async def edit_review(review_id: str, body: UpdateReviewRequest, identity: Identity = Depends(current_identity)) -> dict:
    command = EditReview(
        review_id=review_id,
        customer_id=identity.user_id,
        rating=body.rating,
        title=body.title,
        comment=body.comment,
    )
    current_domain.process(command, asynchronous=False)
    return success(review_data(_load_review(review_id)), "Review updated")


@review_router.delete("/{review_id}")
async def delete_review(review_id: str, identity: Identity = Depends(current_identity)) -> dict:
    command = DeleteReview(review_id=review_id, requested_by=identity.user_id, is_admin=identity.is_admin)
    current_domain.process(command, asynchronous=False)
    return success(None, "Review deleted")
