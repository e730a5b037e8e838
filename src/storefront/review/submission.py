"""SubmitReview: a customer rates a product.

One review per customer per product, enforced here because it spans
Review instances. The purchase is verified against the customer's
Delivered orders.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.order.order import Order
from storefront.review.rating import refresh_product_rating
from storefront.review.review import Review
from storefront.shared.errors import DuplicateReview, NotFound

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Review")
class SubmitReview:
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    rating = Integer(required=True)
    title = String(max_length=100)
    comment = String(max_length=1000)


@storefront.command_handler(part_of=Review)
class SubmitReviewHandler:
    @handle(SubmitReview)
    def submit_review(self, command):
        if current_domain.repository_for(Product).find(command.product_id) is None:
            raise NotFound("Product not found")

        repo = current_domain.repository_for(Review)
        if repo.find_for(command.customer_id, command.product_id) is not None:
            raise DuplicateReview()

        order = current_domain.repository_for(Order).delivered_order_with(command.customer_id, command.product_id)

        review = Review.submit(
            product_id=command.product_id,
            customer_id=command.customer_id,
            rating=command.rating,
            title=command.title,
            comment=command.comment,
            order_id=str(order.id) if order else None,
        )
        repo.add(review)
        refresh_product_rating(review)

        logger.info(
            "Review submitted",
            review_id=str(review.id),
            product_id=str(command.product_id),
            rating=review.rating,
            verified_purchase=review.verified_purchase,
        )
        return str(review.id)
