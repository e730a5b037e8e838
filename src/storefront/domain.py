"""Storefront bounded context: catalogue, shopping carts and orders.

A single Protean domain holds every aggregate that the order placement
workflow touches, so that placing and cancelling an order can run inside one
Unit of Work.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging(log_file_prefix="storefront")

logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
