"""Tests for the Category aggregate and slug generation."""

import pytest
from protean.exceptions import ValidationError

from storefront.catalogue.category import Category, slugify
from storefront.catalogue.events import CategoryAdded, CategoryUpdated


@pytest.mark.parametrize(
    "name, slug",
    [
        ("Lawn Suits", "lawn-suits"),
        ("  Women's Wear ", "womens-wear"),
        ("Kurta & Shalwar", "kurta-shalwar"),
        ("Eid -- Collection", "eid-collection"),
    ],
)
def test_slugify(name, slug):
    assert slugify(name) == slug


class TestCategory:
    def test_add_raises_category_added(self):
        category = Category.add(name="Women", slug="women")
        assert category.is_active is True
        assert category.display_order == 0
        assert isinstance(category._events[0], CategoryAdded)
        assert category._events[0].slug == "women"

    def test_update_keeps_unspecified_fields(self):
        category = Category.add(name="Women", slug="women", description="Ladies' apparel", display_order=2)
        category._events.clear()

        category.update_details(name="Ladies", slug="ladies", is_active=False)

        assert category.name == "Ladies"
        assert category.description == "Ladies' apparel"
        assert category.display_order == 2
        assert category.is_active is False
        assert isinstance(category._events[-1], CategoryUpdated)

    def test_cannot_be_its_own_parent(self):
        category = Category.add(name="Women", slug="women")
        with pytest.raises(ValidationError) as exc:
            category.update_details(parent_id=str(category.id))
        assert "parent_id" in exc.value.messages
