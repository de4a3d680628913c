"""
Tests for annuity depreciation.
"""

from datetime import date
from decimal import Decimal

from depreciation_engines.methods import AnnuityMethod, DepreciationContext, annuity_factor


def _run_life(method, cost: Decimal, life: int) -> list[Decimal]:
    amounts = []
    accumulated = Decimal("0")
    for _ in range(life):
        result = method.calculate(
            cost, Decimal("0"), date(2024, 1, 1), date(2024, 1, 31),
            DepreciationContext(useful_life_months=life, accumulated_depreciation=accumulated),
        )
        amounts.append(result.amount)
        accumulated += result.amount
    return amounts


class TestAnnuityFactor:
    """Tests for the capital recovery factor."""

    def test_zero_rate_is_even_split(self):
        assert annuity_factor(Decimal("0"), 4) == Decimal("0.25")

    def test_no_periods(self):
        assert annuity_factor(Decimal("0.01"), 0) == Decimal("0")

    def test_factor_exceeds_even_split(self):
        """Interest makes the level payment larger than cost / n."""
        assert annuity_factor(Decimal("0.01"), 12) > Decimal(1) / Decimal(12)


class TestAnnuityMethod:
    """Tests for the annuity charge."""

    def setup_method(self):
        self.method = AnnuityMethod(interest_rate="0.10")

    def test_charges_rise(self):
        """Principal share grows as interest on book value falls."""
        amounts = _run_life(self.method, Decimal("10000"), 60)
        assert amounts[0] < amounts[1] < amounts[30] < amounts[58]

    def test_first_charge_below_straight_line(self):
        amounts = _run_life(self.method, Decimal("10000"), 60)
        assert amounts[0] < Decimal("166.67")

    def test_full_life_conserves(self):
        """The principal parts repay the depreciable amount to within cents."""
        amounts = _run_life(self.method, Decimal("10000"), 60)
        assert abs(sum(amounts) - Decimal("10000")) <= Decimal("1.00")
        assert sum(amounts) <= Decimal("10000")

    def test_include_interest(self):
        """Expensing the whole payment charges more than the principal alone."""
        context = DepreciationContext(useful_life_months=60)
        args = (Decimal("10000"), Decimal("0"), date(2024, 1, 1), date(2024, 1, 31), context)
        principal = self.method.calculate(*args).amount
        payment = AnnuityMethod("0.10", include_interest_in_expense=True).calculate(*args).amount
        assert payment > principal

    def test_zero_rate_falls_back_to_straight_line(self):
        result = self.method.calculate(
            Decimal("10000"), Decimal("0"), date(2024, 1, 1), date(2024, 1, 31),
            DepreciationContext(useful_life_months=60, interest_rate=Decimal("0")),
        )
        assert result.amount == Decimal("166.67")

    def test_split_payment(self):
        payment, interest, principal = AnnuityMethod.split_payment(
            Decimal("1200"), Decimal("1200"), 12, Decimal("0.01")
        )
        assert interest == Decimal("12.00")
        assert principal == payment - interest

    def test_validation(self):
        errors = AnnuityMethod(interest_rate="0").get_validation_errors(
            Decimal("1000"), Decimal("0"), DepreciationContext(useful_life_months=12)
        )
        assert errors == ["Interest rate must be positive for annuity method"]
