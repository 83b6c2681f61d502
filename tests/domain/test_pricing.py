"""Tests for unit price and line total computation."""

from decimal import Decimal

import pytest
from marketplace.shared.pricing import (
    DiscountType,
    compute_unit_price,
    line_total,
    sum_amounts,
    to_amount,
)
from protean.exceptions import ValidationError


class TestComputeUnitPrice:
    def test_percentage_discount(self):
        assert compute_unit_price(100, "percentage", 10) == Decimal("90.00")

    def test_flat_discount(self):
        assert compute_unit_price(20, "flat", 5) == Decimal("15.00")

    def test_flat_discount_larger_than_price_clamps_to_zero(self):
        assert compute_unit_price(100, "flat", 150) == 0

    def test_no_discount(self):
        assert compute_unit_price(50, None, None) == Decimal("50.00")

    def test_none_discount_type_ignores_amount(self):
        assert compute_unit_price(50, "none", 10) == Decimal("50.00")

    def test_accepts_enum_member(self):
        assert compute_unit_price(80, DiscountType.PERCENTAGE, 25) == Decimal("60.00")

    def test_rounds_half_up_to_cents(self):
        # 19.99 - 33% = 13.3933
        assert compute_unit_price(19.99, "percentage", 33) == Decimal("13.39")
        # 0.125 rounds up, not to even
        assert compute_unit_price("0.125", None, None) == Decimal("0.13")

    def test_float_inputs_do_not_drift(self):
        assert compute_unit_price(0.1 + 0.2, None, None) == Decimal("0.30")

    def test_percentage_over_hundred_clamps_to_zero(self):
        assert compute_unit_price(10, "percentage", 150) == 0

    @pytest.mark.parametrize("bad", ["abc", None, float("nan"), float("inf"), True])
    def test_invalid_base_price(self, bad):
        with pytest.raises(ValidationError) as exc:
            compute_unit_price(bad, "flat", 1)
        assert "base_price" in exc.value.messages

    def test_negative_base_price(self):
        with pytest.raises(ValidationError):
            compute_unit_price(-1, None, None)

    def test_negative_discount_amount(self):
        with pytest.raises(ValidationError) as exc:
            compute_unit_price(10, "flat", -2)
        assert "discount_amount" in exc.value.messages

    def test_unknown_discount_type(self):
        with pytest.raises(ValidationError) as exc:
            compute_unit_price(10, "bogus", 2)
        assert "discount_type" in exc.value.messages


class TestLineTotal:
    def test_multiplies_and_rounds(self):
        assert line_total(Decimal("15.00"), 3) == Decimal("45.00")
        assert line_total(13.39, 3) == Decimal("40.17")

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, True])
    def test_rejects_invalid_quantity(self, quantity):
        with pytest.raises(ValidationError):
            line_total(10, quantity)


class TestAmounts:
    def test_sum_is_exact_to_the_cent(self):
        assert sum_amounts([0.1, 0.2, 0.3]) == Decimal("0.60")

    def test_sum_of_nothing_is_zero(self):
        assert sum_amounts([]) == Decimal("0.00")

    def test_to_amount_returns_two_decimal_float(self):
        assert to_amount(Decimal("45.004")) == 45.0
        assert to_amount(Decimal("13.395")) == 13.4
