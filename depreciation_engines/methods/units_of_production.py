"""Units-of-production depreciation."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from depreciation_engines.methods.base import DepreciationContext, DepreciationMethod
from depreciation_kernel.domain.types import DepreciationMethodType
from depreciation_kernel.domain.values import ZERO, DepreciationAmount, to_decimal


class UnitsOfProductionMethod(DepreciationMethod):
    """
    Charge = (depreciable amount / total expected units) x units this period.

    A period with no units (or an asset with no expected-units estimate)
    depreciates nothing.
    """

    method_type = DepreciationMethodType.UNITS_OF_PRODUCTION

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
        total_units = context.total_expected_units or ZERO
        units = context.units_produced or ZERO
        remaining = cost - salvage_value - context.accumulated_depreciation

        if total_units <= ZERO or units <= ZERO or remaining <= ZERO:
            return DepreciationAmount.zero(context.currency, context.accumulated_depreciation)

        amount = self.rate_per_unit(cost, salvage_value, total_units) * units
        return self._result(min(amount, remaining), context)

    @staticmethod
    def rate_per_unit(cost: Decimal, salvage_value: Decimal, total_units: Decimal) -> Decimal:
        if total_units <= ZERO:
            return ZERO
        return (cost - salvage_value) / total_units

    def get_validation_errors(
        self,
        cost: Decimal,
        salvage_value: Decimal,
        context: DepreciationContext,
    ) -> list[str]:
        errors = self._basic_cost_errors(cost, salvage_value)
        if salvage_value > cost:
            errors.append("Salvage value cannot exceed cost")
        if context.total_expected_units is None or context.total_expected_units <= ZERO:
            errors.append("Total expected units must be positive for UOP method")
        if context.units_produced is not None and context.units_produced < ZERO:
            errors.append("Units produced cannot be negative")
        return errors

    def requires_units_data(self) -> bool:
        return True

    def minimum_useful_life_months(self) -> int:
        return 0
