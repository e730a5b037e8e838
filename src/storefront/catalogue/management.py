"""Product management: admin commands and handler."""

import json

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.category import Category
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.shared.errors import NotFound

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Product")
class AddProduct:
    name = String(required=True, max_length=200)
    price = Float(required=True, min_value=0.0)
    discount_price = Float(min_value=0.0)
    stock_quantity = Integer(default=0, min_value=0)
    brand = String(max_length=100)
    description = Text()
    category_id = Identifier()
    sizes = Text()  # JSON array of sizes
    images = Text()  # JSON array of URLs
    is_active = Boolean(default=True)
    is_featured = Boolean(default=False)


@storefront.command(part_of="Product")
class UpdateProductDetails:
    product_id = Identifier(required=True)
    name = String(max_length=200)
    brand = String(max_length=100)
    description = Text()
    category_id = Identifier()
    sizes = Text()
    images = Text()
    is_featured = Boolean()


@storefront.command(part_of="Product")
class UpdateProductPricing:
    product_id = Identifier(required=True)
    price = Float(required=True, min_value=0.0)
    discount_price = Float(min_value=0.0)


@storefront.command(part_of="Product")
class ActivateProduct:
    product_id = Identifier(required=True)


@storefront.command(part_of="Product")
class DeactivateProduct:
    product_id = Identifier(required=True)


@storefront.command(part_of="Product")
class DeleteProduct:
    """Remove a product outright. Cart lines and placed orders keep their references."""

    product_id = Identifier(required=True)


def _load_json_list(value):
    if value is None:
        return None
    return json.loads(value) if isinstance(value, str) else list(value)


def _ensure_category(category_id):
    if category_id and current_domain.repository_for(Category).find(category_id) is None:
        raise NotFound("Category not found")


def _load_product(repo, product_id):
    product = repo.find(product_id)
    if product is None:
        raise NotFound("Product not found")
    return product


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(AddProduct)
    def add_product(self, command):
        _ensure_category(command.category_id)
        product = Product.add(
            name=command.name,
            price=command.price,
            discount_price=command.discount_price,
            stock_quantity=command.stock_quantity or 0,
            brand=command.brand,
            description=command.description,
            category_id=command.category_id,
            sizes=_load_json_list(command.sizes),
            images=_load_json_list(command.images),
            is_active=command.is_active if command.is_active is not None else True,
            is_featured=bool(command.is_featured),
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(UpdateProductDetails)
    def update_details(self, command):
        repo = current_domain.repository_for(Product)
        product = _load_product(repo, command.product_id)
        _ensure_category(command.category_id)
        product.update_details(
            name=command.name,
            brand=command.brand,
            description=command.description,
            category_id=command.category_id,
            sizes=_load_json_list(command.sizes),
            images=_load_json_list(command.images),
            is_featured=command.is_featured,
        )
        repo.add(product)

    @handle(UpdateProductPricing)
    def update_pricing(self, command):
        repo = current_domain.repository_for(Product)
        product = _load_product(repo, command.product_id)
        product.update_pricing(price=command.price, discount_price=command.discount_price)
        repo.add(product)

    @handle(ActivateProduct)
    def activate(self, command):
        repo = current_domain.repository_for(Product)
        product = _load_product(repo, command.product_id)
        product.activate()
        repo.add(product)

    @handle(DeactivateProduct)
    def deactivate(self, command):
        repo = current_domain.repository_for(Product)
        product = _load_product(repo, command.product_id)
        product.deactivate()
        repo.add(product)

    @handle(DeleteProduct)
    def delete(self, command):
        repo = current_domain.repository_for(Product)
        product = _load_product(repo, command.product_id)
        repo.delete(product)
        logger.info("Product deleted", product_id=str(command.product_id), name=product.name)
