"""Pricing: effective unit prices and line totals.

Amounts are computed with ``Decimal`` and rounded half-up to cents. Aggregates
store them in Float fields, so ``to_amount`` is the single place a Decimal is
narrowed back to a float.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum

from protean.exceptions import ValidationError

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


class DiscountType(Enum):
    FLAT = "flat"
    PERCENTAGE = "percentage"
    NONE = "none"


def _decimal(value, field_name) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError({field_name: [f"{field_name} must be a number"]})
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError({field_name: [f"{field_name} must be a number"]}) from None
    if not number.is_finite():
        raise ValidationError({field_name: [f"{field_name} must be a finite number"]})
    if number < 0:
        raise ValidationError({field_name: [f"{field_name} cannot be negative"]})
    return number


def _discount_type(discount_type) -> DiscountType:
    if discount_type is None or discount_type == "":
        return DiscountType.NONE
    if isinstance(discount_type, DiscountType):
        return discount_type
    try:
        return DiscountType(discount_type)
    except ValueError:
        raise ValidationError(
            {"discount_type": [f"Unknown discount type '{discount_type}'"]},
        ) from None


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def compute_unit_price(base_price, discount_type=None, discount_amount=None) -> Decimal:
    """Effective unit price of a variant under its product's discount policy.

    Percentage discounts take ``discount_amount`` percent off the base price,
    flat discounts subtract it. The result never drops below zero.
    """
    base = _decimal(base_price, "base_price")
    kind = _discount_type(discount_type)
    discount = _decimal(discount_amount, "discount_amount") if discount_amount is not None else ZERO

    if kind is DiscountType.PERCENTAGE:
        price = base - (base * discount / Decimal(100))
    elif kind is DiscountType.FLAT:
        price = base - discount
    else:
        price = base

    return quantize(max(price, ZERO))


def line_total(unit_price, quantity: int) -> Decimal:
    """``quantity * unit_price`` rounded to cents."""
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError({"quantity": ["quantity must be an integer greater than or equal to 1"]})
    return quantize(_decimal(unit_price, "unit_price") * quantity)


def sum_amounts(amounts) -> Decimal:
    """Exact cent sum of stored amounts."""
    return quantize(sum((_decimal(amount, "amount") for amount in amounts), ZERO))


def to_amount(value: Decimal) -> float:
    return float(quantize(value))
