"""Sum-of-the-years'-digits depreciation."""

from __future__ import annotations

import math
from datetime import date
from decimal import Decimal

from depreciation_engines.methods.base import DepreciationContext, DepreciationMethod
from depreciation_kernel.domain.types import DepreciationMethodType
from depreciation_kernel.domain.values import (
    MONTHS_PER_YEAR,
    ZERO,
    DepreciationAmount,
    to_decimal,
)


def life_in_years(useful_life_months: int) -> int:
    """Whole years of life, rounding a partial final year up."""
    return math.ceil(useful_life_months / MONTHS_PER_YEAR)


def sum_of_years_digits(years: int) -> int:
    """n(n+1)/2."""
    return years * (years + 1) // 2


class SumOfYearsMethod(DepreciationMethod):
    """
    Annual charge = depreciable amount x remaining life / sum of digits.

    ``context.current_year`` (1-based) selects the year; the monthly charge
    is one twelfth of that year's amount.
    """

    method_type = DepreciationMethodType.SUM_OF_YEARS

    def calculate(
        self,
        cost: Decimal,
        salvage_value: Decimal,
        period_start: date,
        period_end: date,
        context: DepreciationContext,
    ) -> DepreciationAmount:
        cost = to_decimal(cost, "cost")
        salvage_value = to_decimal(salvage_value, "salvage_value")
        depreciable = cost - salvage_value
        remaining = depreciable - context.accumulated_depreciation

        fraction = self.fraction_for_year(context.useful_life_months, context.current_year)
        if remaining <= ZERO or fraction == ZERO:
            return DepreciationAmount.zero(context.currency, context.accumulated_depreciation)

        monthly = depreciable * fraction / MONTHS_PER_YEAR
        return self._result(min(monthly, remaining), context)

    @staticmethod
    def fraction_for_year(useful_life_months: int, year: int) -> Decimal:
        """
        Share of the depreciable amount charged in ``year``.

        Postconditions:
            - Fractions for years 1..n sum to exactly 1.
            - 0 outside the asset's life.
        """
        years = life_in_years(useful_life_months)
        if years <= 0 or year < 1:
            return ZERO
        remaining_life = max(0, years - year + 1)
        return Decimal(remaining_life) / Decimal(sum_of_years_digits(years))

    def get_validation_errors(
        self,
        cost: Decimal,
        salvage_value: Decimal,
        context: DepreciationContext,
    ) -> list[str]:
        errors = self._basic_cost_errors(cost, salvage_value)
        if salvage_value > cost:
            errors.append("Salvage value cannot exceed cost")
        if context.useful_life_months < MONTHS_PER_YEAR:
            errors.append("Useful life must be at least 12 months for SYD method")
        return errors

    def is_accelerated(self) -> bool:
        return True

    def minimum_useful_life_months(self) -> int:
        return MONTHS_PER_YEAR
