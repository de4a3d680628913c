"""
Annuity depreciation.

Treats the asset like a loan repaid in level instalments: a fixed periodic
payment ``depreciable amount x i / (1 - (1 + i) ** -n)`` at the monthly rate
``i = annual rate / 12`` over ``n = useful_life_months`` periods.  The
depreciation charge is the principal part of that payment, i.e. the payment
less interest on the current book value, so charges rise over the life of
the asset.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from depreciation_engines.methods.base import DepreciationContext, DepreciationMethod
from depreciation_engines.methods.straight_line import StraightLineMethod
from depreciation_kernel.domain.types import DepreciationMethodType
from depreciation_kernel.domain.values import (
    MONTHS_PER_YEAR,
    ZERO,
    DepreciationAmount,
    to_decimal,
)

ONE = Decimal("1")


def annuity_factor(monthly_rate: Decimal, periods: int) -> Decimal:
    """
    Capital recovery factor ``i / (1 - (1 + i) ** -n)``.

    Preconditions:
        - ``periods`` > 0.
    Postconditions:
        - Falls back to ``1 / n`` when ``monthly_rate`` <= 0.
    """
    if periods <= 0:
        return ZERO
    if monthly_rate <= ZERO:
        return ONE / periods
    return monthly_rate / (ONE - (ONE + monthly_rate) ** -periods)


class AnnuityMethod(DepreciationMethod):
    """Increasing charges from a level annuity payment."""

    method_type = DepreciationMethodType.ANNUITY

    def __init__(
        self,
        interest_rate: Decimal | str | int = Decimal("0.10"),
        include_interest_in_expense: bool = False,
    ):
        self.interest_rate = to_decimal(interest_rate, "interest_rate")
        self.include_interest_in_expense = include_interest_in_expense

    def _annual_rate(self, context: DepreciationContext) -> Decimal:
        return self.interest_rate if context.interest_rate is None else context.interest_rate

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
        accumulated = context.accumulated_depreciation
        remaining = cost - salvage_value - accumulated

        if life <= 0 or remaining <= ZERO:
            return DepreciationAmount.zero(context.currency, accumulated)

        monthly_rate = self._annual_rate(context) / MONTHS_PER_YEAR
        if monthly_rate <= ZERO:
            return StraightLineMethod().calculate(
                cost, salvage_value, period_start, period_end, context
            )

        payment, interest, principal = self.split_payment(
            cost - accumulated, cost - salvage_value, life, monthly_rate
        )
        amount = payment if self.include_interest_in_expense else principal
        amount = min(max(amount, ZERO), remaining)
        return self._result(amount, context)

    @staticmethod
    def split_payment(
        book_value: Decimal,
        depreciable_amount: Decimal,
        periods: int,
        monthly_rate: Decimal,
    ) -> tuple[Decimal, Decimal, Decimal]:
        """Return ``(payment, interest, principal)`` for one period."""
        payment = depreciable_amount * annuity_factor(monthly_rate, periods)
        interest = book_value * monthly_rate
        return payment, interest, payment - interest

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
        if self._annual_rate(context) <= ZERO:
            errors.append("Interest rate must be positive for annuity method")
        return errors

    def __repr__(self) -> str:
        return (
            f"AnnuityMethod(interest_rate={self.interest_rate}, "
            f"include_interest_in_expense={self.include_interest_in_expense})"
        )
