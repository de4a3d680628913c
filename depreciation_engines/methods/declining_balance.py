"""
Declining-balance depreciation (double-declining and 150%).

The monthly charge is ``book value x factor / years / 12``.  When switching
is enabled the straight-line charge over the remaining months,
``(book value - salvage) / remaining months``, is computed alongside and
the larger of the two is taken: once straight-line wins it keeps winning,
because both the remaining balance and the remaining months shrink
together.
"""

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


class DecliningBalanceMethod(DepreciationMethod):
    """Declining balance at ``factor`` times the straight-line rate."""

    method_type = DepreciationMethodType.DOUBLE_DECLINING

    def __init__(
        self,
        factor: Decimal | str | int = Decimal("2.0"),
        switch_to_straight_line: bool = True,
    ):
        self.factor = to_decimal(factor, "factor")
        self.switch_to_straight_line = switch_to_straight_line

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
        years = Decimal(context.useful_life_months) / MONTHS_PER_YEAR
        accumulated = context.accumulated_depreciation
        book_value = cost - accumulated
        remaining = max(ZERO, cost - salvage_value - accumulated)

        if years <= ZERO or remaining <= ZERO or book_value <= salvage_value:
            return DepreciationAmount.zero(context.currency, accumulated)

        amount = self.declining_amount(book_value, years)

        remaining_months = context.remaining_months or 0
        if self.switch_to_straight_line and remaining_months > 0:
            straight_line = (book_value - salvage_value) / remaining_months
            amount = max(amount, straight_line)

        amount = min(max(amount, ZERO), remaining)
        return self._result(amount, context)

    def declining_amount(self, book_value: Decimal, years: Decimal) -> Decimal:
        """Unswitched monthly declining-balance charge."""
        monthly_rate = self.factor / years / MONTHS_PER_YEAR
        return book_value * monthly_rate

    def should_switch_to_straight_line(
        self,
        book_value: Decimal,
        salvage_value: Decimal,
        remaining_months: int,
        declining_amount: Decimal,
    ) -> bool:
        if remaining_months <= 0:
            return False
        straight_line = (book_value - salvage_value) / remaining_months
        return straight_line > declining_amount

    def get_validation_errors(
        self,
        cost: Decimal,
        salvage_value: Decimal,
        context: DepreciationContext,
    ) -> list[str]:
        errors = self._basic_cost_errors(cost, salvage_value)
        if context.useful_life_months <= 0:
            errors.append("Useful life months must be positive")
        if self.factor <= ZERO:
            errors.append("Declining factor must be positive")
        return errors

    def is_accelerated(self) -> bool:
        return True

    def minimum_useful_life_months(self) -> int:
        return MONTHS_PER_YEAR

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(factor={self.factor}, "
            f"switch_to_straight_line={self.switch_to_straight_line})"
        )


class DoubleDecliningMethod(DecliningBalanceMethod):
    """200% declining balance."""

    method_type = DepreciationMethodType.DOUBLE_DECLINING

    def __init__(
        self,
        factor: Decimal | str | int = Decimal("2.0"),
        switch_to_straight_line: bool = True,
    ):
        super().__init__(factor, switch_to_straight_line)


class Declining150Method(DecliningBalanceMethod):
    """150% declining balance."""

    method_type = DepreciationMethodType.DECLINING_150

    def __init__(self, switch_to_straight_line: bool = True):
        super().__init__(Decimal("1.5"), switch_to_straight_line)
