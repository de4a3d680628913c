"""Bonus (first-year lump) depreciation."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from depreciation_engines.methods.base import DepreciationContext, DepreciationMethod
from depreciation_kernel.domain.types import DepreciationMethodType
from depreciation_kernel.domain.values import ZERO, DepreciationAmount, to_decimal

ONE = Decimal("1")


class BonusMethod(DepreciationMethod):
    """
    ``cost x bonus_rate`` in the first recovery year, nothing afterwards.

    With ``apply_to_full_cost=False`` the bonus base is ``cost - salvage``.
    Used-property is simplified to "not eligible": when the context flags
    ``is_new_property=False`` the charge is zero.
    """

    method_type = DepreciationMethodType.BONUS

    def __init__(
        self,
        bonus_rate: Decimal | str | int = ONE,
        apply_to_full_cost: bool = True,
    ):
        self.bonus_rate = to_decimal(bonus_rate, "bonus_rate")
        self.apply_to_full_cost = apply_to_full_cost

    def calculate(
        self,
        cost: Decimal,
        salvage_value: Decimal,
        period_start: date,
        period_end: date,
        context: DepreciationContext,
    ) -> DepreciationAmount:
        cost = to_decimal(cost, "cost")
        rate = self._rate(context)
        if rate < ZERO or rate > ONE:
            return DepreciationAmount.zero(context.currency, context.accumulated_depreciation)

        first_year_only = True if context.first_year_only is None else context.first_year_only
        if not self.is_available_in_year(context.effective_recovery_year, first_year_only):
            return DepreciationAmount.zero(context.currency, context.accumulated_depreciation)

        if not context.is_new_property and rate > ZERO:
            return DepreciationAmount.zero(context.currency, context.accumulated_depreciation)

        basis = cost if self.apply_to_full_cost else cost - to_decimal(salvage_value, "salvage_value")
        unrecovered = cost - context.accumulated_depreciation
        amount = max(ZERO, min(self.calculate_bonus_amount(basis, rate), unrecovered))
        return self._result(amount, context)

    def _rate(self, context: DepreciationContext) -> Decimal:
        return self.bonus_rate if context.bonus_rate is None else context.bonus_rate

    @staticmethod
    def is_available_in_year(recovery_year: int, first_year_only: bool = True) -> bool:
        if first_year_only:
            return recovery_year == 1
        return recovery_year <= 1

    def calculate_bonus_amount(self, cost: Decimal, rate: Decimal | None = None) -> Decimal:
        rate = self.bonus_rate if rate is None else rate
        return to_decimal(cost, "cost") * rate

    def calculate_adjusted_basis(self, cost: Decimal, rate: Decimal | None = None) -> Decimal:
        """Basis left for regular depreciation after the bonus is taken."""
        cost = to_decimal(cost, "cost")
        return max(ZERO, cost - self.calculate_bonus_amount(cost, rate))

    def get_validation_errors(
        self,
        cost: Decimal,
        salvage_value: Decimal,
        context: DepreciationContext,
    ) -> list[str]:
        errors: list[str] = []
        if cost <= ZERO:
            errors.append("Cost must be positive")
        rate = self._rate(context)
        if rate < ZERO or rate > ONE:
            errors.append("Bonus rate must be between 0 and 1")
        return errors

    def ignores_salvage(self) -> bool:
        return self.apply_to_full_cost

    def minimum_useful_life_months(self) -> int:
        return 0

    def __repr__(self) -> str:
        return f"BonusMethod(bonus_rate={self.bonus_rate})"
