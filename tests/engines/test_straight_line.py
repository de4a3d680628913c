"""
Tests for straight-line depreciation.

Covers:
- Monthly charge and the remaining-depreciable cap
- Daily proration of a partial first period
- Validation messages
"""

from datetime import date
from decimal import Decimal

import pytest

from depreciation_engines.methods import DepreciationContext, StraightLineMethod
from depreciation_kernel.exceptions import DepreciationValidationError


class TestStraightLineCalculation:
    """Tests for the monthly straight-line charge."""

    def setup_method(self):
        self.method = StraightLineMethod()

    def test_monthly_charge(self):
        """(cost - salvage) / life per month."""
        result = self.method.calculate(
            Decimal("12000"), Decimal("0"), date(2024, 1, 1), date(2024, 1, 31),
            DepreciationContext(useful_life_months=12),
        )
        assert result.amount == Decimal("1000.00")
        assert result.accumulated_depreciation == Decimal("1000.00")

    def test_salvage_reduces_base(self):
        result = self.method.calculate(
            Decimal("10000"), Decimal("1000"), date(2024, 1, 1), date(2024, 1, 31),
            DepreciationContext(useful_life_months=60),
        )
        assert result.amount == Decimal("150.00")

    def test_rounds_half_up(self):
        """10000 / 3 rounds to 3333.33."""
        result = self.method.calculate(
            Decimal("10000"), Decimal("0"), date(2024, 1, 1), date(2024, 1, 31),
            DepreciationContext(useful_life_months=3),
        )
        assert result.amount == Decimal("3333.33")

    def test_capped_at_remaining(self):
        """The final charge never exceeds what is left to depreciate."""
        result = self.method.calculate(
            Decimal("12000"), Decimal("0"), date(2024, 12, 1), date(2024, 12, 31),
            DepreciationContext(useful_life_months=12, accumulated_depreciation=Decimal("11400")),
        )
        assert result.amount == Decimal("600.00")
        assert result.accumulated_depreciation == Decimal("12000.00")

    def test_fully_depreciated_is_zero(self):
        result = self.method.calculate(
            Decimal("12000"), Decimal("0"), date(2025, 1, 1), date(2025, 1, 31),
            DepreciationContext(useful_life_months=12, accumulated_depreciation=Decimal("12000")),
        )
        assert result.is_zero()

    def test_zero_life_is_zero(self):
        """Degenerate life returns zero instead of dividing by zero."""
        result = self.method.calculate(
            Decimal("12000"), Decimal("0"), date(2024, 1, 1), date(2024, 1, 31),
            DepreciationContext(useful_life_months=0),
        )
        assert result.is_zero()

    def test_idempotent(self):
        """Identical inputs give identical outputs."""
        args = (
            Decimal("9999.99"), Decimal("123.45"), date(2024, 1, 1), date(2024, 1, 31),
            DepreciationContext(useful_life_months=37),
        )
        assert self.method.calculate(*args) == self.method.calculate(*args)

    def test_rate(self):
        assert self.method.rate(60) == Decimal("0.2")
        assert self.method.rate(0) == Decimal("0")


class TestDailyProration:
    """Tests for daily proration of partial periods."""

    def setup_method(self):
        self.method = StraightLineMethod(prorate_daily=True)
        self.context = DepreciationContext(
            useful_life_months=12, acquisition_date=date(2024, 1, 16)
        )

    def test_partial_first_month(self):
        """Acquired Jan 16: 16 of 31 days are held."""
        result = self.method.calculate(
            Decimal("12000"), Decimal("0"), date(2024, 1, 1), date(2024, 1, 31), self.context,
        )
        assert result.amount == Decimal("516.13")

    def test_factor(self):
        factor = StraightLineMethod.proration_factor(
            date(2024, 1, 16), date(2024, 1, 1), date(2024, 1, 31)
        )
        assert factor == Decimal(16) / Decimal(31)

    def test_full_month_factor_is_one(self):
        factor = StraightLineMethod.proration_factor(
            date(2024, 1, 1), date(2024, 2, 1), date(2024, 2, 29)
        )
        assert factor == Decimal("1")

    def test_month_of_life_window_is_whole(self):
        """A window from 31 Jan to 28 Feb is one full period, not 29/31 of January."""
        factor = StraightLineMethod.proration_factor(
            date(2024, 1, 31), date(2024, 1, 31), date(2024, 2, 28)
        )
        assert factor == Decimal("1")

    def test_partial_window_uses_window_length(self):
        factor = StraightLineMethod.proration_factor(
            date(2024, 2, 14), date(2024, 1, 31), date(2024, 2, 28)
        )
        assert factor == Decimal(15) / Decimal(29)

    def test_acquired_after_period(self):
        """An asset acquired after the period ends gets nothing."""
        result = self.method.calculate(
            Decimal("12000"), Decimal("0"), date(2023, 12, 1), date(2023, 12, 31), self.context,
        )
        assert result.is_zero()

    def test_context_overrides_configuration(self):
        """prorate_daily=False in the context switches proration off."""
        result = self.method.calculate(
            Decimal("12000"), Decimal("0"), date(2024, 1, 1), date(2024, 1, 31),
            self.context.evolve(prorate_daily=False),
        )
        assert result.amount == Decimal("1000.00")

    def test_supports_prorate(self):
        assert self.method.supports_prorate()
        assert not self.method.is_accelerated()


class TestStraightLineValidation:
    """Tests for input validation."""

    def setup_method(self):
        self.method = StraightLineMethod()

    def test_valid(self):
        errors = self.method.get_validation_errors(
            Decimal("1000"), Decimal("100"), DepreciationContext(useful_life_months=12)
        )
        assert errors == []

    def test_all_problems_reported(self):
        errors = self.method.get_validation_errors(
            Decimal("0"), Decimal("-1"), DepreciationContext(useful_life_months=0)
        )
        assert "Cost must be positive" in errors
        assert "Salvage value cannot be negative" in errors
        assert "Useful life months must be positive" in errors

    def test_salvage_above_cost(self):
        errors = self.method.get_validation_errors(
            Decimal("1000"), Decimal("1000.01"), DepreciationContext(useful_life_months=12)
        )
        assert errors == ["Salvage value cannot exceed cost"]

    def test_fully_salvaged_is_valid(self):
        """Salvage equal to cost leaves nothing to depreciate but is not an error."""
        errors = self.method.get_validation_errors(
            Decimal("1000"), Decimal("1000"), DepreciationContext(useful_life_months=12)
        )
        assert errors == []

    def test_validate_raises(self):
        with pytest.raises(DepreciationValidationError, match="Useful life months must be positive"):
            self.method.validate(Decimal("1000"), Decimal("0"), DepreciationContext())
