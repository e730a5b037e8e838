"""Keeps Product.average_rating and Product.review_count in step with reviews."""

import structlog
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.review.review import Review

logger = structlog.get_logger(__name__)


def refresh_product_rating(review, removed=False):
    """Recompute the rating of ``review``'s product from its stored reviews plus ``review`` itself.

    ``review`` is excluded from the stored set and counted with its current
    rating unless ``removed``, so the result is right whether or not the
    change is visible to queries yet.
    """
    product_repo = current_domain.repository_for(Product)
    product = product_repo.find(review.product_id)
    if product is None:
        logger.warning("rating_refresh_skipped", product_id=str(review.product_id), review_id=str(review.id))
        return

    ratings = current_domain.repository_for(Review).ratings_for(review.product_id, exclude_review_id=review.id)
    if not removed:
        ratings.append(review.rating)

    product.update_rating(ratings)
    product_repo.add(product)
