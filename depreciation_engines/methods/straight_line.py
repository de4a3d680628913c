"""Straight-line depreciation, optionally prorated by day for partial months."""

from __future__ import annotations

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


class StraightLineMethod(DepreciationMethod):
    """
    ``(cost - salvage) / useful_life_months`` per month.

    With ``prorate_daily`` the charge for a period the asset only partly
    occupies is scaled by ``days held / days in the period``, where days
    held run from ``max(acquisition_date, period_start)`` to ``period_end``
    inclusive.  For a calendar-month period the denominator is the days in
    that month; a month-of-life window (31 Jan to 28 Feb) counts as a
    whole period.  The factor never exceeds 1.
    """

    method_type = DepreciationMethodType.STRAIGHT_LINE

    def __init__(self, prorate_daily: bool = False):
        self.prorate_daily = prorate_daily

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
        life = context.useful_life_months
        remaining = cost - salvage_value - context.accumulated_depreciation

        if life <= 0 or remaining <= ZERO:
            return DepreciationAmount.zero(context.currency, context.accumulated_depreciation)

        amount = (cost - salvage_value) / life

        prorate = self.prorate_daily if context.prorate_daily is None else context.prorate_daily
        if prorate and context.acquisition_date is not None:
            factor = self.proration_factor(context.acquisition_date, period_start, period_end)
            if factor == ZERO:
                return DepreciationAmount.zero(
                    context.currency, context.accumulated_depreciation
                )
            amount *= factor

        return self._result(min(amount, remaining), context)

    @staticmethod
    def proration_factor(acquisition_date: date, period_start: date, period_end: date) -> Decimal:
        """
        Fraction of the period the asset is held.

        Postconditions:
            - 0 when the asset is acquired after ``period_end``.
            - 1 when the held days cover the whole period.
        """
        effective_start = max(acquisition_date, period_start)
        if effective_start > period_end:
            return ZERO
        days_held = (period_end - effective_start).days + 1
        period_days = (period_end - period_start).days + 1
        if days_held >= period_days:
            return Decimal("1")
        return Decimal(days_held) / Decimal(period_days)

    def get_validation_errors(
        self,
        cost: Decimal,
        salvage_value: Decimal,
        context: DepreciationContext,
    ) -> list[str]:
        errors = self._basic_cost_errors(cost, salvage_value)
        if salvage_value > cost:
            errors.append("Salvage value cannot exceed cost")
        if context.useful_life_months <= 0:
            errors.append("Useful life months must be positive")
        return errors

    def supports_prorate(self) -> bool:
        return True

    def rate(self, useful_life_months: int) -> Decimal:
        """Annual straight-line rate (1 / years)."""
        if useful_life_months <= 0:
            return ZERO
        return Decimal(MONTHS_PER_YEAR) / Decimal(useful_life_months)

    def __repr__(self) -> str:
        return f"StraightLineMethod(prorate_daily={self.prorate_daily})"
