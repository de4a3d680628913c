"""
MACRS (Modified Accelerated Cost Recovery System) tax depreciation.

Rates are the IRS half-year-convention percentage tables (Publication 946,
Table A-1) for 3, 5, 7, 10, 15 and 20-year property.  MACRS ignores salvage
value: the charge is ``cost x rate`` for the recovery year, capped at the
unrecovered basis ``cost - accumulated``.  The charge returned is the
recovery-year amount; callers that book monthly spread it themselves.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping

from depreciation_engines.methods.base import DepreciationContext, DepreciationMethod
from depreciation_kernel.domain.types import DepreciationMethodType
from depreciation_kernel.domain.values import (
    MONTHS_PER_YEAR,
    ZERO,
    DepreciationAmount,
    to_decimal,
)


def _rates(*values: str) -> tuple[Decimal, ...]:
    return tuple(Decimal(v) for v in values)


HALF_YEAR_RATES: Mapping[int, tuple[Decimal, ...]] = MappingProxyType({
    3: _rates("0.3333", "0.4445", "0.1481", "0.0741"),
    5: _rates("0.20", "0.32", "0.192", "0.1152", "0.1152", "0.0576"),
    7: _rates(
        "0.1429", "0.2449", "0.1749", "0.1249",
        "0.0893", "0.0892", "0.0893", "0.0446",
    ),
    10: _rates(
        "0.10", "0.18", "0.144", "0.1152", "0.0922", "0.0737",
        "0.0655", "0.0655", "0.0656", "0.0655", "0.0328",
    ),
    15: _rates(
        "0.05", "0.095", "0.0855", "0.077", "0.0693", "0.0623",
        "0.059", "0.059", "0.0591", "0.059", "0.0591", "0.059",
        "0.0591", "0.059", "0.0591", "0.0295",
    ),
    20: _rates(
        "0.0375", "0.07219", "0.06677", "0.06177", "0.05713", "0.05285",
        "0.04888", "0.04522", "0.04462", "0.04461", "0.04462", "0.04461",
        "0.04462", "0.04461", "0.04462", "0.04461", "0.04462", "0.04461",
        "0.04462", "0.04461", "0.02231",
    ),
})

PROPERTY_CLASSES: tuple[int, ...] = tuple(sorted(HALF_YEAR_RATES))


class MACRSMethod(DepreciationMethod):
    """
    Table-driven MACRS with optional first-year bonus.

    ``context.property_class`` / ``context.bonus_rate`` override the
    configured values; ``context.recovery_year`` (falling back to
    ``current_year``) selects the table row.
    """

    method_type = DepreciationMethodType.MACRS
    annual_charge = True

    def __init__(
        self,
        property_class: int = 5,
        convention: str = "half_year",
        bonus_rate: Decimal | str | int = ZERO,
    ):
        self.property_class = property_class
        self.convention = convention
        self.bonus_rate = to_decimal(bonus_rate, "bonus_rate")

    def calculate(
        self,
        cost: Decimal,
        salvage_value: Decimal,
        period_start: date,
        period_end: date,
        context: DepreciationContext,
    ) -> DepreciationAmount:
        cost = to_decimal(cost, "cost")
        property_class = context.property_class or self.property_class
        recovery_year = context.effective_recovery_year
        rate = self.get_rate(property_class, recovery_year)
        if rate == ZERO:
            return DepreciationAmount.zero(context.currency, context.accumulated_depreciation)

        amount = cost * rate
        bonus_rate = self.bonus_rate if context.bonus_rate is None else context.bonus_rate
        if bonus_rate > ZERO and recovery_year == 1:
            amount += cost * bonus_rate

        unrecovered = cost - context.accumulated_depreciation
        amount = max(ZERO, min(amount, unrecovered))
        return self._result(amount, context)

    @staticmethod
    def get_rate(property_class: int, recovery_year: int) -> Decimal:
        """Table rate, or 0 for an unknown class or a year outside the table."""
        table = HALF_YEAR_RATES.get(property_class)
        if table is None or recovery_year < 1 or recovery_year > len(table):
            return ZERO
        return table[recovery_year - 1]

    @staticmethod
    def get_rate_table(property_class: int) -> tuple[Decimal, ...]:
        return HALF_YEAR_RATES.get(property_class, ())

    def get_recovery_period_years(self) -> int:
        """Number of tax years the deduction spans (class + 1 under half-year)."""
        return len(self.get_rate_table(self.property_class))

    def get_validation_errors(
        self,
        cost: Decimal,
        salvage_value: Decimal,
        context: DepreciationContext,
    ) -> list[str]:
        errors: list[str] = []
        if cost <= ZERO:
            errors.append("Cost must be positive")
        property_class = context.property_class or self.property_class
        if property_class not in HALF_YEAR_RATES:
            errors.append(
                "Invalid MACRS property class. Must be 3, 5, 7, 10, 15, or 20 years"
            )
        bonus_rate = self.bonus_rate if context.bonus_rate is None else context.bonus_rate
        if bonus_rate < ZERO or bonus_rate > Decimal("1"):
            errors.append("Bonus rate must be between 0 and 1")
        return errors

    def is_accelerated(self) -> bool:
        return True

    def ignores_salvage(self) -> bool:
        return True

    def schedule_months(self, useful_life_months: int, context: DepreciationContext) -> int:
        table = self.get_rate_table(context.property_class or self.property_class)
        return max(useful_life_months, len(table) * MONTHS_PER_YEAR)

    def minimum_useful_life_months(self) -> int:
        return self.property_class * MONTHS_PER_YEAR

    def __repr__(self) -> str:
        return (
            f"MACRSMethod(property_class={self.property_class}, "
            f"convention={self.convention!r}, bonus_rate={self.bonus_rate})"
        )
