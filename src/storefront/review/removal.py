"""DeleteReview: the author or an admin removes a review."""

import structlog
from protean import handle
from protean.fields import Boolean, Identifier
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.review.rating import refresh_product_rating
from storefront.review.review import Review
from storefront.shared.errors import NotFound

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Review")
class DeleteReview:
    review_id = Identifier(required=True)
    requested_by = Identifier(required=True)
    is_admin = Boolean(default=False)


@storefront.command_handler(part_of=Review)
class DeleteReviewHandler:
    @handle(DeleteReview)
    def delete_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.find(command.review_id)
        if review is None:
            raise NotFound("Review not found")

        review.ensure_removable_by(command.requested_by, is_admin=bool(command.is_admin))
        repo.delete(review)
        refresh_product_rating(review, removed=True)

        logger.info("Review deleted", review_id=str(review.id), requested_by=str(command.requested_by))
