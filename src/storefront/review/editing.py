"""EditReview: the author changes their rating, title or comment."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.review.rating import refresh_product_rating
from storefront.review.review import Review
from storefront.shared.errors import NotFound


@storefront.command(part_of="Review")
class EditReview:
    review_id = Identifier(required=True)
    customer_id = Identifier(required=True)  # Must be the author
    rating = Integer()
    title = String(max_length=100)
    comment = String(max_length=1000)


@storefront.command_handler(part_of=Review)
class EditReviewHandler:
    @handle(EditReview)
    def edit_review(self, command):
        repo = current_domain.repository_for(Review)
        review = repo.find(command.review_id)
        if review is None:
            raise NotFound("Review not found")

        review.edit(command.customer_id, rating=command.rating, title=command.title, comment=command.comment)
        repo.add(review)
        refresh_product_rating(review)
        return str(review.id)
