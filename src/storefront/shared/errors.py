"""Error taxonomy for the storefront.

Every failure surfaced to a caller carries a ``kind`` (stable, machine
readable), a human-readable ``message`` and an optional list of field-level
sub-errors. Transport concerns (status codes, envelopes) live in
``storefront.api.errors``.
"""


class StorefrontError(Exception):
    kind = "Error"

    def __init__(self, message, errors=None):
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [])


class EmptyCart(StorefrontError):
    kind = "EmptyCart"

    def __init__(self, message="Cart is empty", errors=None):
        super().__init__(message, errors)


class UnavailableItem(StorefrontError):
    """A cart line points at a product that is missing or inactive."""

    kind = "UnavailableItem"


class InsufficientStock(StorefrontError):
    kind = "InsufficientStock"

    def __init__(self, product_name, available, message=None):
        self.product_name = product_name
        self.available = available
        super().__init__(
            message or f"Insufficient stock for {product_name}. Only {available} available",
            [{"field": "quantity", "message": f"Only {available} items available"}],
        )


class Forbidden(StorefrontError):
    kind = "Forbidden"

    def __init__(self, message="Access forbidden", errors=None):
        super().__init__(message, errors)


class Unauthorized(StorefrontError):
    kind = "Unauthorized"

    def __init__(self, message="Unauthorized access", errors=None):
        super().__init__(message, errors)


class InvalidTransition(StorefrontError):
    kind = "InvalidTransition"


class NotFound(StorefrontError):
    kind = "NotFound"

    def __init__(self, message="Resource not found", errors=None):
        super().__init__(message, errors)


class DuplicateReview(StorefrontError):
    kind = "DuplicateReview"

    def __init__(self, message="You have already reviewed this product", errors=None):
        super().__init__(message, errors)


class OrderPlacementFailed(StorefrontError):
    """The order could not be written consistently and needs reconciliation."""

    kind = "OrderPlacementFailed"
