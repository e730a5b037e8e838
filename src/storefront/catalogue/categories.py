"""Category management: admin commands and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.catalogue.category import Category
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.shared.errors import NotFound

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Category")
class AddCategory:
    name = String(required=True, max_length=100)
    description = String(max_length=500)
    parent_id = Identifier()
    image = String(max_length=500)
    is_active = Boolean(default=True)
    display_order = Integer(default=0)


@storefront.command(part_of="Category")
class UpdateCategory:
    category_id = Identifier(required=True)
    name = String(max_length=100)
    description = String(max_length=500)
    parent_id = Identifier()
    image = String(max_length=500)
    is_active = Boolean()
    display_order = Integer()


@storefront.command(part_of="Category")
class DeleteCategory:
    """Only empty leaf categories can be deleted."""

    category_id = Identifier(required=True)


def _load_category(repo, category_id, label="Category not found"):
    category = repo.find(category_id)
    if category is None:
        raise NotFound(label)
    return category


@storefront.command_handler(part_of=Category)
class ManageCategoryHandler:
    @handle(AddCategory)
    def add_category(self, command):
        repo = current_domain.repository_for(Category)
        if command.parent_id:
            _load_category(repo, command.parent_id, "Parent category not found")

        category = Category.add(
            name=command.name,
            slug=repo.unique_slug(command.name),
            description=command.description,
            parent_id=command.parent_id,
            image=command.image,
            is_active=command.is_active if command.is_active is not None else True,
            display_order=command.display_order,
        )
        repo.add(category)
        return str(category.id)

    @handle(UpdateCategory)
    def update_category(self, command):
        repo = current_domain.repository_for(Category)
        category = _load_category(repo, command.category_id)
        if command.parent_id and str(command.parent_id) != str(category.id):
            _load_category(repo, command.parent_id, "Parent category not found")

        category.update_details(
            name=command.name,
            slug=repo.unique_slug(command.name, exclude_id=category.id) if command.name else None,
            description=command.description,
            parent_id=command.parent_id,
            image=command.image,
            is_active=command.is_active,
            display_order=command.display_order,
        )
        repo.add(category)

    @handle(DeleteCategory)
    def delete_category(self, command):
        repo = current_domain.repository_for(Category)
        category = _load_category(repo, command.category_id)

        product_count = current_domain.repository_for(Product).count_in_category(category.id)
        if product_count:
            raise ValidationError({"category": [f"Cannot delete category with {product_count} products"]})
        if repo.children_of(category.id):
            raise ValidationError({"category": ["Cannot delete category with subcategories"]})

        repo.delete(category)
        logger.info("Category deleted", category_id=str(category.id), slug=category.slug)
