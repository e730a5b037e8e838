"""Review aggregate: a customer's rating of a product.

One review per customer per product. A review is marked as a verified
purchase when the customer has a Delivered order containing the product.
Every submission, edit and deletion recomputes the product's average rating.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String

from storefront.domain import storefront
from storefront.review.events import ReviewEdited, ReviewSubmitted
from storefront.shared.errors import Forbidden


@storefront.aggregate
class Review:
    product_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    order_id = Identifier()  # The Delivered order that verified the purchase
    rating = Integer(required=True)
    title = String(max_length=100)
    comment = String(max_length=1000)
    verified_purchase = Boolean(default=False)
    is_edited = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def rating_must_be_in_range(self):
        if self.rating is not None and not 1 <= self.rating <= 5:
            raise ValidationError({"rating": ["Rating must be between 1 and 5"]})

    @classmethod
    def submit(cls, product_id, customer_id, rating, title=None, comment=None, order_id=None):
        now = datetime.now(UTC)
        review = cls(
            product_id=product_id,
            customer_id=customer_id,
            order_id=order_id,
            rating=rating,
            title=title,
            comment=comment,
            verified_purchase=order_id is not None,
            created_at=now,
            updated_at=now,
        )
        review.raise_(
            ReviewSubmitted(
                review_id=str(review.id),
                product_id=str(product_id),
                customer_id=str(customer_id),
                rating=rating,
                verified_purchase=review.verified_purchase,
                submitted_at=now,
            )
        )
        return review

    def is_written_by(self, customer_id):
        return str(self.customer_id) == str(customer_id)

    def edit(self, editor_id, rating=None, title=None, comment=None):
        """Only the author can edit; fields left as None keep their value."""
        if not self.is_written_by(editor_id):
            raise Forbidden("Not authorized to update this review")

        previous_rating = self.rating
        if rating is not None:
            self.rating = rating
        if title is not None:
            self.title = title
        if comment is not None:
            self.comment = comment

        now = datetime.now(UTC)
        self.is_edited = True
        self.updated_at = now
        self.raise_(
            ReviewEdited(
                review_id=str(self.id),
                product_id=str(self.product_id),
                previous_rating=previous_rating,
                rating=self.rating,
                edited_at=now,
            )
        )

    def ensure_removable_by(self, customer_id, is_admin=False):
        if not is_admin and not self.is_written_by(customer_id):
            raise Forbidden("Not authorized to delete this review")
