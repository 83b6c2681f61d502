"""Product aggregate root with its Variant entities.

A variant's ``quantity`` is the on-hand stock counter the Inventory Ledger
draws down at order placement and tops up on cancellation. Prices are stored
as floats; effective prices always go through ``shared.pricing``.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from marketplace.catalogue.events import (
    ProductCreated,
    ProductDiscountSet,
    ProductStatusChanged,
    StockRestored,
    StockWithdrawn,
    VariantAdded,
    VariantUpdated,
)
from marketplace.domain import marketplace
from marketplace.exceptions import InsufficientStockError, NotFoundError
from marketplace.shared.pricing import DiscountType, compute_unit_price


class ProductStatus(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    OUT_OF_STOCK = "out_of_stock"


@marketplace.entity(part_of="Product")
class Variant:
    label: String(required=True, max_length=100)
    quantity: Integer(default=0, min_value=0)
    base_price: Float(required=True, min_value=0.0)


@marketplace.aggregate
class Product:
    shop_id: Identifier(required=True)
    category_id: Identifier()
    title: String(required=True, max_length=255)
    slug: String(required=True, max_length=255, unique=True)
    discount_type: String(choices=DiscountType, default=DiscountType.NONE.value)
    discount_amount: Float(default=0.0, min_value=0.0)
    status: String(choices=ProductStatus, default=ProductStatus.ACTIVE.value)
    variants: HasMany(Variant)
    created_at: DateTime()
    updated_at: DateTime()

    @invariant.post
    def percentage_discount_cannot_exceed_hundred(self):
        if self.discount_type == DiscountType.PERCENTAGE.value and (self.discount_amount or 0) > 100:
            raise ValidationError({"discount_amount": ["Percentage discount cannot exceed 100"]})

    @invariant.post
    def discount_amount_requires_discount_type(self):
        if self.discount_type == DiscountType.NONE.value and self.discount_amount:
            raise ValidationError({"discount_amount": ["Discount amount requires a discount type"]})

    @classmethod
    def create(cls, shop_id, title, slug, category_id=None, discount_type=None, discount_amount=None):
        now = datetime.now(UTC)
        kind = discount_type or DiscountType.NONE.value
        product = cls(
            shop_id=shop_id,
            category_id=category_id,
            title=title,
            slug=slug,
            discount_type=kind,
            discount_amount=(discount_amount or 0.0) if kind != DiscountType.NONE.value else 0.0,
            status=ProductStatus.ACTIVE.value,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=product.id,
                shop_id=shop_id,
                category_id=category_id,
                title=title,
                slug=slug,
                status=product.status,
                created_at=now,
            )
        )
        return product

    # -------------------------------------------------------------------
    # Variants
    # -------------------------------------------------------------------
    def variant(self, variant_id) -> Variant:
        variant = next((v for v in self.variants if str(v.id) == str(variant_id)), None)
        if variant is None:
            raise NotFoundError(
                "Variant not found",
                product_id=str(self.id),
                variant_id=str(variant_id),
            )
        return variant

    def add_variant(self, label, base_price, quantity=0):
        variant = Variant(label=label, base_price=base_price, quantity=quantity)
        self.add_variants(variant)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            VariantAdded(
                product_id=self.id,
                variant_id=variant.id,
                label=label,
                base_price=base_price,
                quantity=quantity,
            )
        )
        return variant

    def update_variant(self, variant_id, label=None, base_price=None, quantity=None):
        variant = self.variant(variant_id)
        if label is not None:
            variant.label = label
        if base_price is not None:
            variant.base_price = base_price
        if quantity is not None:
            variant.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            VariantUpdated(
                product_id=self.id,
                variant_id=variant.id,
                label=variant.label,
                base_price=variant.base_price,
                quantity=variant.quantity,
            )
        )
        return variant

    def unit_price_of(self, variant_id):
        """Effective unit price of a variant under the current discount policy."""
        variant = self.variant(variant_id)
        return compute_unit_price(variant.base_price, self.discount_type, self.discount_amount)

    # -------------------------------------------------------------------
    # Discount and status
    # -------------------------------------------------------------------
    def set_discount(self, discount_type, discount_amount=None):
        kind = discount_type or DiscountType.NONE.value
        amount = 0.0 if kind == DiscountType.NONE.value else (discount_amount or 0.0)

        with atomic_change(self):
            self.discount_type = kind
            self.discount_amount = amount
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductDiscountSet(
                product_id=self.id,
                discount_type=kind,
                discount_amount=amount,
            )
        )

    def change_status(self, new_status):
        previous = self.status
        if previous == new_status:
            return

        self.status = new_status
        self.updated_at = datetime.now(UTC)

        self.raise_(
            ProductStatusChanged(
                product_id=self.id,
                previous_status=previous,
                new_status=new_status,
            )
        )

    @property
    def is_purchasable(self) -> bool:
        return self.status == ProductStatus.ACTIVE.value

    # -------------------------------------------------------------------
    # Stock
    # -------------------------------------------------------------------
    def has_stock(self, variant_id, quantity) -> bool:
        return self.variant(variant_id).quantity >= quantity

    def insufficient_stock(self, variant_id, requested) -> InsufficientStockError:
        variant = self.variant(variant_id)
        return InsufficientStockError(
            f"Insufficient stock for product '{self.title}' ({variant.label})",
            product_id=str(self.id),
            variant_id=str(variant.id),
            requested=requested,
            available=variant.quantity,
        )

    def withdraw_stock(self, variant_id, quantity):
        variant = self.variant(variant_id)
        if variant.quantity < quantity:
            raise self.insufficient_stock(variant_id, quantity)

        variant.quantity -= quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockWithdrawn(
                product_id=self.id,
                variant_id=variant.id,
                quantity=quantity,
                remaining=variant.quantity,
            )
        )

    def restore_stock(self, variant_id, quantity):
        variant = self.variant(variant_id)
        variant.quantity += quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockRestored(
                product_id=self.id,
                variant_id=variant.id,
                quantity=quantity,
                available=variant.quantity,
            )
        )


@marketplace.repository(part_of=Product)
class ProductRepository:
    def with_slug(self, slug) -> Product | None:
        return self._dao.query.filter(slug=slug).all().first
