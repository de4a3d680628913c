"""
Tests for the depreciation value objects.

Covers:
- DepreciationAmount rounding and currency-checked arithmetic
- BookValue derived figures and the accumulated-depreciation cap
- DepreciationLife validity
- RevaluationAmount sign, reserve/expense split and negation
- AccountingPeriod window checks
"""

from datetime import date
from decimal import Decimal

import pytest

from depreciation_kernel.domain.values import (
    AccountingPeriod,
    BookValue,
    DepreciationAmount,
    DepreciationLife,
    RevaluationAmount,
    round_money,
    to_decimal,
)
from depreciation_kernel.exceptions import (
    CurrencyMismatchError,
    DepreciationValidationError,
    InvalidCurrencyError,
)


class TestToDecimal:
    """Tests for numeric coercion."""

    def test_float_goes_through_str(self):
        """0.1 becomes exactly Decimal('0.1')."""
        assert to_decimal(0.1) == Decimal("0.1")

    def test_decimal_passes_through(self):
        """Decimal inputs are returned unchanged."""
        value = Decimal("12.345")
        assert to_decimal(value) is value

    def test_garbage_rejected(self):
        """Unparseable strings raise a validation error naming the field."""
        with pytest.raises(DepreciationValidationError, match="Invalid cost"):
            to_decimal("twelve", "cost")

    def test_none_and_bool_rejected(self):
        """None and booleans are not numbers."""
        with pytest.raises(DepreciationValidationError):
            to_decimal(None)
        with pytest.raises(DepreciationValidationError):
            to_decimal(True)

    def test_round_money_half_up(self):
        """Rounding is to cents, half-up."""
        assert round_money(Decimal("1.005")) == Decimal("1.01")
        assert round_money(Decimal("1.004")) == Decimal("1.00")


class TestDepreciationAmount:
    """Tests for DepreciationAmount."""

    def test_of_rounds_to_cents(self):
        """of() rounds both the amount and the running total."""
        amount = DepreciationAmount.of("333.333", "USD", "666.666")
        assert amount.amount == Decimal("333.33")
        assert amount.accumulated_depreciation == Decimal("666.67")

    def test_currency_normalised(self):
        """Currency codes are upper-cased."""
        assert DepreciationAmount.of("1", "eur").currency == "EUR"

    def test_unknown_currency_rejected(self):
        """Unknown ISO codes are refused at construction."""
        with pytest.raises(InvalidCurrencyError):
            DepreciationAmount.of("1", "XXX")

    def test_add_same_currency(self):
        """Adding keeps the currency and the later running total."""
        a = DepreciationAmount.of("100", "USD", "100")
        b = DepreciationAmount.of("50", "USD", "150")
        total = a + b
        assert total.amount == Decimal("150.00")
        assert total.accumulated_depreciation == Decimal("150.00")

    def test_add_mismatched_currency(self):
        """Mixing currencies raises CurrencyMismatchError."""
        with pytest.raises(CurrencyMismatchError, match="expected USD, got EUR"):
            DepreciationAmount.of("1", "USD").add(DepreciationAmount.of("1", "EUR"))

    def test_subtract_mismatched_currency(self):
        """Subtraction checks currency too."""
        with pytest.raises(CurrencyMismatchError):
            DepreciationAmount.of("1", "USD") - DepreciationAmount.of("1", "GBP")

    def test_multiply_returns_new_instance(self):
        """multiply() leaves the original untouched."""
        original = DepreciationAmount.of("10", "USD")
        doubled = original.multiply(2)
        assert doubled.amount == Decimal("20.00")
        assert original.amount == Decimal("10.00")

    def test_zero(self):
        """zero() is zero and not positive."""
        zero = DepreciationAmount.zero("USD")
        assert zero.is_zero()
        assert not zero.is_positive()

    def test_to_dict(self):
        """Serialises amounts as strings."""
        data = DepreciationAmount.of("1.5", "USD", "3").to_dict()
        assert data == {
            "amount": "1.50",
            "currency": "USD",
            "accumulated_depreciation": "3.00",
        }


class TestBookValue:
    """Tests for BookValue."""

    def test_derived_figures(self):
        """Net book value and depreciable amount follow from the triple."""
        bv = BookValue(Decimal("10000"), Decimal("1000"), Decimal("2500"))
        assert bv.net_book_value == Decimal("7500")
        assert bv.depreciable_amount == Decimal("9000")
        assert bv.remaining_depreciable == Decimal("6500")
        assert not bv.is_fully_depreciated

    def test_accumulated_capped_on_construction(self):
        """Accumulated depreciation never exceeds cost minus salvage."""
        bv = BookValue(Decimal("10000"), Decimal("1000"), Decimal("9500"))
        assert bv.accumulated_depreciation == Decimal("9000")
        assert bv.is_fully_depreciated

    def test_depreciate_caps_at_salvage(self):
        """depreciate() cannot push book value below salvage."""
        bv = BookValue(Decimal("1000"), Decimal("100"))
        after = bv.depreciate(Decimal("5000"))
        assert after.net_book_value == Decimal("100")
        assert bv.accumulated_depreciation == Decimal("0")

    def test_depreciate_accepts_amount_object(self):
        """A DepreciationAmount can be applied directly."""
        bv = BookValue(Decimal("1000")).depreciate(DepreciationAmount.of("250"))
        assert bv.accumulated_depreciation == Decimal("250.00")

    def test_revalue_keeps_accumulated(self):
        """revalue() moves cost and salvage but keeps accumulated depreciation."""
        bv = BookValue(Decimal("10000"), Decimal("0"), Decimal("2000"))
        revalued = bv.revalue("12000", "500")
        assert revalued.cost == Decimal("12000")
        assert revalued.salvage_value == Decimal("500")
        assert revalued.accumulated_depreciation == Decimal("2000")
        assert revalued.net_book_value == Decimal("10000")

    def test_negative_components_rejected(self):
        """Every negative component is reported."""
        with pytest.raises(DepreciationValidationError) as exc_info:
            BookValue(Decimal("-1"), Decimal("-1"), Decimal("-1"))
        assert len(exc_info.value.errors) == 3

    def test_salvage_above_cost_has_nothing_to_depreciate(self):
        """With salvage above cost the cap is zero."""
        bv = BookValue(Decimal("100"), Decimal("200"), Decimal("50"))
        assert bv.accumulated_depreciation == Decimal("0")


class TestDepreciationLife:
    """Tests for DepreciationLife."""

    def test_from_years(self):
        """from_years converts to months and computes the depreciable total."""
        life = DepreciationLife.from_years(5, "10000", "1000")
        assert life.useful_life_months == 60
        assert life.total_depreciable_amount == Decimal("9000")
        assert life.is_valid()

    def test_invalid_without_months(self):
        """Zero months is not a valid life."""
        assert not DepreciationLife.from_months(0, "10000").is_valid()

    def test_invalid_without_depreciable_amount(self):
        """Salvage equal to cost leaves nothing to depreciate."""
        assert not DepreciationLife.from_months(12, "100", "100").is_valid()

    def test_remaining_months_floor(self):
        """Remaining months never go negative."""
        life = DepreciationLife.from_months(12, "1200")
        assert life.remaining_months(5) == 7
        assert life.remaining_months(20) == 0

    def test_monthly_straight_line(self):
        life = DepreciationLife.from_months(12, "1200")
        assert life.monthly_straight_line == Decimal("100")


class TestRevaluationAmount:
    """Tests for RevaluationAmount."""

    def test_increment(self):
        """A rise in value is an increment credited to the reserve."""
        amount = RevaluationAmount.from_values("8000", "10000")
        assert amount.amount == Decimal("2000")
        assert amount.is_increment()
        assert amount.reserve_impact == Decimal("2000")
        assert amount.expense_impact(Decimal("0")) == (Decimal("0"), Decimal("0"))

    def test_decrement_uses_reserve_first(self):
        """A decrement draws down the reserve before it is expensed."""
        amount = RevaluationAmount.from_values("10000", "7000")
        expense, offset = amount.expense_impact(Decimal("1000"))
        assert offset == Decimal("1000")
        assert expense == Decimal("2000")
        assert amount.reserve_impact == Decimal("0")

    def test_decrement_without_reserve_is_all_expense(self):
        amount = RevaluationAmount.from_values("10000", "7000")
        assert amount.expense_impact(Decimal("0")) == (Decimal("3000"), Decimal("0"))

    def test_from_book_change(self):
        """Book change keeps accumulated depreciation on both sides."""
        amount = RevaluationAmount.from_book_change(
            Decimal("10000"), Decimal("12000"),
            Decimal("1000"), Decimal("1000"),
            Decimal("3000"),
        )
        assert amount.previous_value == Decimal("7000")
        assert amount.new_value == Decimal("9000")
        assert amount.depreciation_impact == Decimal("2000")

    def test_negate_swaps_values(self):
        """negate() reverses direction and swaps previous/new."""
        amount = RevaluationAmount.from_values("8000", "10000", depreciation_impact="500")
        negated = amount.negate()
        assert negated.amount == Decimal("-2000")
        assert negated.previous_value == Decimal("10000")
        assert negated.new_value == Decimal("8000")
        assert negated.depreciation_impact == Decimal("-500")
        assert negated.is_decrement()

    def test_percentage_change(self):
        assert RevaluationAmount.from_values("8000", "10000").percentage_change == Decimal("0.25")

    def test_percentage_change_from_zero(self):
        """A rise from zero counts as 100%."""
        assert RevaluationAmount.from_values("0", "10").percentage_change == Decimal("1")

    def test_add_mismatched_currency(self):
        with pytest.raises(CurrencyMismatchError):
            RevaluationAmount.from_values("1", "2", "USD").add(
                RevaluationAmount.from_values("1", "2", "EUR")
            )

    def test_format(self):
        """Signed, thousands-separated display."""
        assert RevaluationAmount.from_values("10000", "8765.432").format() == "-1,234.57 USD"
        assert RevaluationAmount.from_values("0", "1500").format() == "+1,500.00 USD"

    def test_change_per_period(self):
        amount = RevaluationAmount.from_values("0", "1", depreciation_impact="1200")
        assert amount.depreciation_change_per_period(12) == Decimal("100")
        assert amount.depreciation_change_per_period(0) == Decimal("0")


class TestAccountingPeriod:
    """Tests for AccountingPeriod."""

    def test_contains(self):
        period = AccountingPeriod("2024-03", date(2024, 3, 1), date(2024, 3, 31))
        assert period.contains(date(2024, 3, 15))
        assert not period.contains(date(2024, 4, 1))
        assert period.fiscal_year == 2024

    def test_end_before_start_rejected(self):
        with pytest.raises(DepreciationValidationError, match="ends before it starts"):
            AccountingPeriod("bad", date(2024, 3, 31), date(2024, 3, 1))
