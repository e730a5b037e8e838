"""Category aggregate: the groupings shoppers browse by.

Categories form a two-level tree in practice (e.g. Women → Lawn Suits) but
nothing stops deeper nesting. Products point at a category by id.
"""

import re
from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, Integer, String

from storefront.catalogue.events import CategoryAdded, CategoryUpdated
from storefront.domain import storefront


def slugify(text: str) -> str:
    """Lowercase, hyphen-separated form of ``text`` for use in URLs."""
    text = text.lower().strip()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_-]+", "-", text)
    return text.strip("-")


@storefront.aggregate
class Category:
    name = String(required=True, max_length=100)
    slug = String(required=True, max_length=120, unique=True)
    description = String(max_length=500)
    parent_id = Identifier()
    image = String(max_length=500)
    is_active = Boolean(default=True)
    display_order = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def add(cls, name, slug, description=None, parent_id=None, image=None, is_active=True, display_order=0):
        now = datetime.now(UTC)
        category = cls(
            name=name,
            slug=slug,
            description=description,
            parent_id=parent_id,
            image=image,
            is_active=is_active,
            display_order=display_order or 0,
            created_at=now,
            updated_at=now,
        )
        category.raise_(
            CategoryAdded(
                category_id=str(category.id),
                name=name,
                slug=slug,
                parent_id=str(parent_id) if parent_id else None,
            )
        )
        return category

    def update_details(
        self,
        name=None,
        slug=None,
        description=None,
        parent_id=None,
        image=None,
        is_active=None,
        display_order=None,
    ):
        if parent_id is not None and str(parent_id) == str(self.id):
            raise ValidationError({"parent_id": ["Category cannot be its own parent"]})

        if name is not None:
            self.name = name
        if slug is not None:
            self.slug = slug
        if description is not None:
            self.description = description
        if parent_id is not None:
            self.parent_id = parent_id
        if image is not None:
            self.image = image
        if is_active is not None:
            self.is_active = is_active
        if display_order is not None:
            self.display_order = display_order

        self.updated_at = datetime.now(UTC)
        self.raise_(
            CategoryUpdated(
                category_id=str(self.id),
                name=self.name,
                slug=self.slug,
                parent_id=str(self.parent_id) if self.parent_id else None,
                is_active=self.is_active,
            )
        )
