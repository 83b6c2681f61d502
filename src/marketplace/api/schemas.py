"""Pydantic request schemas for the marketplace API.

These are the external contracts; handlers receive Protean commands built
from them. Shape is checked here (UUIDs, positive quantities, non-empty
addresses); business rules are checked by the domain.
"""

from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

OrderStatusValue = Literal["pending", "shipped", "delivered", "cancelled"]


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: UUID
    variant_id: UUID
    quantity: int = Field(ge=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "3fa85f64-5717-4562-b3fc-2c963f66afa6",
                    "variant_id": "9b2c1d4e-7f60-4a1b-8c3d-5e6f7a8b9c0d",
                    "quantity": 2,
                }
            ]
        }
    }


class UpdateCartItemRequest(BaseModel):
    quantity: int = Field(ge=1)


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    billing_address: str = Field(min_length=1)

    model_config = {
        "str_strip_whitespace": True,
        "json_schema_extra": {"examples": [{"billing_address": "12 Market Street, Springfield"}]},
    }


class UpdateOrderStatusRequest(BaseModel):
    status: OrderStatusValue


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class CreateShopRequest(BaseModel):
    shop_name: str = Field(min_length=1, max_length=150)
    description: str | None = None
    address: str | None = None


class UpdateShopRequest(BaseModel):
    shop_name: str | None = Field(default=None, min_length=1, max_length=150)
    description: str | None = None
    address: str | None = None


class ChangeShopStatusRequest(BaseModel):
    status: Literal["active", "inactive"]


class CreateCategoryRequest(BaseModel):
    category_name: str = Field(min_length=1, max_length=50)
    slug: str = Field(min_length=1, max_length=100, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    parent_id: UUID | None = None


class UpdateCategoryRequest(BaseModel):
    category_name: str | None = Field(default=None, min_length=1, max_length=50)
    slug: str | None = Field(default=None, min_length=1, max_length=100, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    parent_id: UUID | None = None


class ChangeCategoryStatusRequest(BaseModel):
    status: Literal["active", "inactive"]


class CreateProductRequest(BaseModel):
    shop_id: UUID
    category_id: UUID | None = None
    title: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255, pattern=r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
    discount_type: Literal["flat", "percentage", "none"] | None = None
    discount_amount: float | None = Field(default=None, ge=0)


class AddVariantRequest(BaseModel):
    label: str = Field(min_length=1, max_length=100)
    base_price: float = Field(ge=0)
    quantity: int = Field(default=0, ge=0)


class UpdateVariantRequest(BaseModel):
    label: str | None = Field(default=None, min_length=1, max_length=100)
    base_price: float | None = Field(default=None, ge=0)
    quantity: int | None = Field(default=None, ge=0)


class SetDiscountRequest(BaseModel):
    discount_type: Literal["flat", "percentage", "none"]
    discount_amount: float | None = Field(default=None, ge=0)


class ChangeProductStatusRequest(BaseModel):
    status: Literal["active", "inactive", "out_of_stock"]
