"""Pydantic request schemas for the Storefront API.

These are external contracts, kept separate from the internal Protean
commands they are translated into.
"""

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)
    size: str | None = None


class UpdateCartItemRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=0)
    size: str | None = None


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class ShippingAddressSchema(BaseModel):
    full_name: str
    street: str
    city: str
    province: str
    postal_code: str | None = None
    phone: str


class PlaceOrderRequest(BaseModel):
    shipping_address: ShippingAddressSchema
    payment_method: str
    notes: str | None = Field(default=None, max_length=500)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_address": {
                        "full_name": "Ayesha Khan",
                        "street": "12 Mall Road",
                        "city": "Lahore",
                        "province": "Punjab",
                        "postal_code": "54000",
                        "phone": "03001234567",
                    },
                    "payment_method": "COD",
                    "notes": "Please call before delivery",
                }
            ]
        }
    }


class CancelOrderRequest(BaseModel):
    note: str | None = Field(default=None, max_length=500)


class UpdateOrderStatusRequest(BaseModel):
    order_status: str
    note: str | None = Field(default=None, max_length=500)
    tracking_number: str | None = None


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------
class AddProductRequest(BaseModel):
    name: str
    price: float = Field(ge=0)
    discount_price: float | None = Field(default=None, ge=0)
    stock_quantity: int = Field(ge=0, default=0)
    brand: str | None = None
    description: str | None = Field(default=None, max_length=2000)
    category_id: str | None = None
    sizes: list[str] = []
    images: list[str] = []
    is_active: bool = True
    is_featured: bool = False


class UpdateProductRequest(BaseModel):
    name: str | None = None
    brand: str | None = None
    description: str | None = Field(default=None, max_length=2000)
    category_id: str | None = None
    sizes: list[str] | None = None
    images: list[str] | None = None
    is_featured: bool | None = None


class UpdatePricingRequest(BaseModel):
    price: float = Field(ge=0)
    discount_price: float | None = Field(default=None, ge=0)


class AdjustStockRequest(BaseModel):
    quantity_change: int
    reason: str


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------
class AddCategoryRequest(BaseModel):
    name: str = Field(max_length=100)
    description: str | None = Field(default=None, max_length=500)
    parent_id: str | None = None
    image: str | None = None
    is_active: bool = True
    display_order: int = 0


class UpdateCategoryRequest(BaseModel):
    name: str | None = Field(default=None, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    parent_id: str | None = None
    image: str | None = None
    is_active: bool | None = None
    display_order: int | None = None


# ---------------------------------------------------------------------------
# Reviews
# ---------------------------------------------------------------------------
class SubmitReviewRequest(BaseModel):
    rating: int = Field(ge=1, le=5)
    title: str | None = Field(default=None, max_length=100)
    comment: str | None = Field(default=None, max_length=1000)

    model_config = {
        "json_schema_extra": {
            "examples": [{"rating": 5, "title": "Lovely fabric", "comment": "True to size and the colour holds."}]
        }
    }


class UpdateReviewRequest(BaseModel):
    rating: int | None = Field(default=None, ge=1, le=5)
    title: str | None = Field(default=None, max_length=100)
    comment: str | None = Field(default=None, max_length=1000)
