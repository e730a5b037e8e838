"""Repository for the Review aggregate: per-product listings and rating figures."""

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.review.review import Review
from storefront.shared.pagination import paginate

_BATCH_SIZE = 100


@storefront.repository(part_of=Review)
class ReviewRepository:
    def find(self, review_id) -> Review | None:
        try:
            return self.get(str(review_id))
        except ObjectNotFoundError:
            return None

    def find_for(self, customer_id, product_id) -> Review | None:
        reviews = self._dao.query.filter(customer_id=str(customer_id), product_id=str(product_id)).all().items
        return reviews[0] if reviews else None

    def list_for_product(self, product_id, page=1, limit=10):
        """A product's reviews, newest first."""
        return paginate(self._dao.query.filter(product_id=str(product_id)).order_by("-created_at"), page, limit)

    def _iter_for_product(self, product_id):
        offset = 0
        while True:
            results = (
                self._dao.query.filter(product_id=str(product_id))
                .order_by("created_at")
                .offset(offset)
                .limit(_BATCH_SIZE)
                .all()
            )
            yield from results.items
            offset += _BATCH_SIZE
            if offset >= results.total:
                break

    def ratings_for(self, product_id, exclude_review_id=None) -> list[int]:
        return [
            review.rating
            for review in self._iter_for_product(product_id)
            if str(review.id) != str(exclude_review_id)
        ]

    def rating_distribution(self, product_id) -> list[dict]:
        """Number of reviews per star rating, highest rating first. Ratings nobody gave are left out."""
        counts = {}
        for rating in self.ratings_for(product_id):
            counts[rating] = counts.get(rating, 0) + 1
        return [{"rating": rating, "count": counts[rating]} for rating in sorted(counts, reverse=True)]

    def delete(self, review: Review) -> None:
        self._dao.delete(review)
