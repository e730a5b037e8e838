"""Repositories for the catalogue: product lookups and browsing, and the category tree."""

import json

from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.catalogue.category import Category, slugify
from storefront.catalogue.product import Product, validate_sizes
from storefront.domain import storefront
from storefront.shared.pagination import paginate

SORTABLE_FIELDS = ("created_at", "price", "name", "sold_count", "average_rating")


def _sort_key(sort):
    sort = sort or "-created_at"
    if sort.lstrip("-") not in SORTABLE_FIELDS:
        raise ValidationError({"sort": [f"Cannot sort by {sort.lstrip('-')}"]})
    return sort


@storefront.repository(part_of=Product)
class ProductRepository:
    def find(self, product_id) -> Product | None:
        """Return the product, or None when it does not exist (anymore)."""
        try:
            return self.get(str(product_id))
        except ObjectNotFoundError:
            return None

    def list_active(
        self,
        page=1,
        limit=12,
        category_id=None,
        size=None,
        min_price=None,
        max_price=None,
        featured=None,
        sort="-created_at",
    ):
        """Browse active products.

        Price bounds apply to the list price. ``sort`` is one of
        SORTABLE_FIELDS, prefixed with ``-`` for descending order.
        """
        criteria = {"is_active": True}
        if category_id:
            criteria["category_id"] = str(category_id)
        if size:
            validate_sizes([size])
            # Sizes are stored as a JSON array; the quoted value matches one element
            criteria["sizes__contains"] = json.dumps(size)
        if min_price is not None:
            criteria["price__gte"] = min_price
        if max_price is not None:
            criteria["price__lte"] = max_price
        if featured is not None:
            criteria["is_featured"] = featured

        return paginate(self._dao.query.filter(**criteria).order_by(_sort_key(sort)), page, limit)

    def list_featured(self, limit=8):
        return self._dao.query.filter(is_active=True, is_featured=True).order_by("-created_at").limit(limit).all().items

    def count_in_category(self, category_id) -> int:
        return self._dao.query.filter(category_id=str(category_id)).all().total

    def delete(self, product: Product) -> None:
        self._dao.delete(product)


@storefront.repository(part_of=Category)
class CategoryRepository:
    def find(self, category_id) -> Category | None:
        try:
            return self.get(str(category_id))
        except ObjectNotFoundError:
            return None

    def find_by_slug(self, slug) -> Category | None:
        categories = self._dao.query.filter(slug=slug).all().items
        return categories[0] if categories else None

    def unique_slug(self, name, exclude_id=None) -> str:
        """Slug for ``name``, suffixed -1, -2, ... until no other category uses it."""
        base = slugify(name)
        slug, counter = base, 1
        while True:
            existing = self.find_by_slug(slug)
            if existing is None or str(existing.id) == str(exclude_id):
                return slug
            slug = f"{base}-{counter}"
            counter += 1

    def list_all(self) -> list[Category]:
        return self._dao.query.order_by(["display_order", "name"]).all().items

    def children_of(self, category_id) -> list[Category]:
        return self._dao.query.filter(parent_id=str(category_id)).all().items

    def tree(self) -> list[dict]:
        """Active root categories, each with its active children, in display order."""
        active = self._dao.query.filter(is_active=True).order_by(["display_order", "name"]).all().items
        ids = {str(category.id) for category in active}

        children = {}
        roots = []
        for category in active:
            if category.parent_id and str(category.parent_id) in ids:
                children.setdefault(str(category.parent_id), []).append(category)
            elif not category.parent_id:
                roots.append(category)

        return [{"category": root, "children": children.get(str(root.id), [])} for root in roots]

    def delete(self, category: Category) -> None:
        self._dao.delete(category)
