"""
Values -- Immutable depreciation value objects.

Responsibility:
    Provides the numeric value types every depreciation computation passes
    around: DepreciationAmount, BookValue, DepreciationLife and
    RevaluationAmount, plus the AccountingPeriod window.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by engines and asset modules. No outward dependencies except
    the kernel currency registry and exceptions.

Invariants enforced:
    - Amounts are Decimal, never float.
    - Currency codes are validated at construction time.
    - BookValue accumulated depreciation never exceeds cost - salvage.
    - Arithmetic across currencies raises CurrencyMismatchError.
    - Every "mutator" returns a new instance.

Failure modes:
    - DepreciationValidationError on unparseable or negative components.
    - InvalidCurrencyError on unknown ISO 4217 codes.
    - CurrencyMismatchError when adding amounts in different currencies.

Audit relevance:
    Rounding happens in exactly one place (``round_money``) with
    ROUND_HALF_UP to cents, so recomputing a schedule always reproduces the
    posted figures to the cent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from depreciation_kernel.domain.currency import CurrencyRegistry
from depreciation_kernel.exceptions import (
    CurrencyMismatchError,
    DepreciationValidationError,
)

CENT = Decimal("0.01")
ZERO = Decimal("0")
MONTHS_PER_YEAR = 12

DEFAULT_CURRENCY = "USD"


def to_decimal(value: Any, field_name: str = "amount") -> Decimal:
    """
    Coerce a numeric input to Decimal.

    Floats go through ``str()`` so ``0.1`` becomes ``Decimal("0.1")``.

    Raises:
        DepreciationValidationError: If the value cannot be parsed.
    """
    if isinstance(value, Decimal):
        return value
    if value is None or isinstance(value, bool):
        raise DepreciationValidationError(f"Invalid {field_name}: {value!r}")
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise DepreciationValidationError(
            f"Invalid {field_name}: {value!r}"
        ) from e


def round_money(value: Decimal) -> Decimal:
    """Round to cents, half-up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True, slots=True)
class DepreciationAmount:
    """
    A depreciation charge tagged with its currency.

    Contract:
        ``accumulated_depreciation`` (optional) is the running total after
        this charge, as reported by the method that produced it.

    Guarantees:
        - Immutable; arithmetic returns new instances.
        - ``add``/``subtract`` refuse mixed currencies.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY
    accumulated_depreciation: Decimal | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "currency", CurrencyRegistry.validate(self.currency))
        if self.accumulated_depreciation is not None:
            object.__setattr__(
                self,
                "accumulated_depreciation",
                to_decimal(self.accumulated_depreciation, "accumulated_depreciation"),
            )

    @classmethod
    def of(
        cls,
        amount: Decimal | int | str,
        currency: str = DEFAULT_CURRENCY,
        accumulated_depreciation: Decimal | int | str | None = None,
    ) -> DepreciationAmount:
        """Build a cent-rounded amount."""
        accumulated = None
        if accumulated_depreciation is not None:
            accumulated = round_money(
                to_decimal(accumulated_depreciation, "accumulated_depreciation")
            )
        return cls(round_money(to_decimal(amount)), currency, accumulated)

    @classmethod
    def zero(
        cls,
        currency: str = DEFAULT_CURRENCY,
        accumulated_depreciation: Decimal | None = None,
    ) -> DepreciationAmount:
        return cls.of(ZERO, currency, accumulated_depreciation)

    def _check_currency(self, other: DepreciationAmount) -> None:
        if other.currency != self.currency:
            raise CurrencyMismatchError(self.currency, other.currency)

    def add(self, other: DepreciationAmount) -> DepreciationAmount:
        self._check_currency(other)
        accumulated = (
            other.accumulated_depreciation
            if other.accumulated_depreciation is not None
            else self.accumulated_depreciation
        )
        return DepreciationAmount(self.amount + other.amount, self.currency, accumulated)

    def subtract(self, other: DepreciationAmount) -> DepreciationAmount:
        self._check_currency(other)
        return DepreciationAmount(
            self.amount - other.amount, self.currency, self.accumulated_depreciation
        )

    def multiply(self, factor: Decimal | int | str) -> DepreciationAmount:
        return DepreciationAmount(
            self.amount * to_decimal(factor, "factor"),
            self.currency,
            self.accumulated_depreciation,
        )

    def round(self) -> DepreciationAmount:
        accumulated = self.accumulated_depreciation
        if accumulated is not None:
            accumulated = round_money(accumulated)
        return DepreciationAmount(round_money(self.amount), self.currency, accumulated)

    def is_zero(self) -> bool:
        return self.amount == ZERO

    def is_positive(self) -> bool:
        return self.amount > ZERO

    def to_dict(self) -> dict[str, Any]:
        return {
            "amount": str(self.amount),
            "currency": self.currency,
            "accumulated_depreciation": (
                str(self.accumulated_depreciation)
                if self.accumulated_depreciation is not None
                else None
            ),
        }

    def __add__(self, other: DepreciationAmount) -> DepreciationAmount:
        return self.add(other)

    def __sub__(self, other: DepreciationAmount) -> DepreciationAmount:
        return self.subtract(other)

    def __str__(self) -> str:
        return f"{self.amount} {self.currency}"


@dataclass(frozen=True, slots=True)
class BookValue:
    """
    Cost / salvage / accumulated depreciation triple for one asset.

    Guarantees:
        - All components are non-negative Decimals.
        - ``accumulated_depreciation <= cost - salvage_value`` (capped on
          construction, so ``depreciate`` can never overshoot salvage).
    """

    cost: Decimal
    salvage_value: Decimal = ZERO
    accumulated_depreciation: Decimal = ZERO

    def __post_init__(self) -> None:
        cost = to_decimal(self.cost, "cost")
        salvage = to_decimal(self.salvage_value, "salvage_value")
        accumulated = to_decimal(
            self.accumulated_depreciation, "accumulated_depreciation"
        )
        errors = []
        if cost < ZERO:
            errors.append("Cost cannot be negative")
        if salvage < ZERO:
            errors.append("Salvage value cannot be negative")
        if accumulated < ZERO:
            errors.append("Accumulated depreciation cannot be negative")
        if errors:
            raise DepreciationValidationError(errors, subject="book value")

        ceiling = max(ZERO, cost - salvage)
        object.__setattr__(self, "cost", cost)
        object.__setattr__(self, "salvage_value", salvage)
        object.__setattr__(self, "accumulated_depreciation", min(accumulated, ceiling))

    @property
    def net_book_value(self) -> Decimal:
        return self.cost - self.accumulated_depreciation

    @property
    def depreciable_amount(self) -> Decimal:
        return self.cost - self.salvage_value

    @property
    def remaining_depreciable(self) -> Decimal:
        return max(ZERO, self.depreciable_amount - self.accumulated_depreciation)

    @property
    def is_fully_depreciated(self) -> bool:
        return self.remaining_depreciable == ZERO

    def depreciate(self, amount: Decimal | DepreciationAmount) -> BookValue:
        """Return a new BookValue with ``amount`` added to accumulated depreciation."""
        if isinstance(amount, DepreciationAmount):
            amount = amount.amount
        return BookValue(
            self.cost,
            self.salvage_value,
            self.accumulated_depreciation + to_decimal(amount),
        )

    def revalue(
        self, new_cost: Decimal | int | str, new_salvage_value: Decimal | int | str
    ) -> BookValue:
        """Return a new BookValue at a new cost basis, keeping accumulated depreciation."""
        return BookValue(new_cost, new_salvage_value, self.accumulated_depreciation)

    def to_dict(self) -> dict[str, str]:
        return {
            "cost": str(self.cost),
            "salvage_value": str(self.salvage_value),
            "accumulated_depreciation": str(self.accumulated_depreciation),
            "net_book_value": str(self.net_book_value),
        }


@dataclass(frozen=True, slots=True)
class DepreciationLife:
    """Useful life of an asset and the amount depreciable over it."""

    useful_life_years: Decimal
    useful_life_months: int
    salvage_value: Decimal = ZERO
    total_depreciable_amount: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "useful_life_years", to_decimal(self.useful_life_years, "useful_life_years")
        )
        object.__setattr__(self, "salvage_value", to_decimal(self.salvage_value, "salvage_value"))
        object.__setattr__(
            self,
            "total_depreciable_amount",
            to_decimal(self.total_depreciable_amount, "total_depreciable_amount"),
        )

    @classmethod
    def from_months(
        cls, months: int, cost: Decimal | int | str, salvage_value: Decimal | int | str = ZERO
    ) -> DepreciationLife:
        salvage = to_decimal(salvage_value, "salvage_value")
        return cls(
            useful_life_years=Decimal(months) / MONTHS_PER_YEAR,
            useful_life_months=months,
            salvage_value=salvage,
            total_depreciable_amount=to_decimal(cost, "cost") - salvage,
        )

    @classmethod
    def from_years(
        cls, years: int, cost: Decimal | int | str, salvage_value: Decimal | int | str = ZERO
    ) -> DepreciationLife:
        return cls.from_months(years * MONTHS_PER_YEAR, cost, salvage_value)

    def is_valid(self) -> bool:
        return self.useful_life_months > 0 and self.total_depreciable_amount > ZERO

    def remaining_months(self, elapsed_months: int) -> int:
        return max(0, self.useful_life_months - elapsed_months)

    @property
    def monthly_straight_line(self) -> Decimal:
        if self.useful_life_months <= 0:
            return ZERO
        return self.total_depreciable_amount / self.useful_life_months


@dataclass(frozen=True, slots=True)
class RevaluationAmount:
    """
    Signed change in net book value produced by a revaluation.

    Contract:
        ``amount = new_value - previous_value``. Positive amounts are
        increments (IFRS: credited to the revaluation reserve); negative
        amounts are decrements (expensed after using up any reserve).
        ``depreciation_impact`` is the change in depreciable base.

    Non-goals:
        Routing to accounts happens in the revaluation service, not here.
    """

    amount: Decimal
    currency: str = DEFAULT_CURRENCY
    previous_value: Decimal = ZERO
    new_value: Decimal = ZERO
    depreciation_impact: Decimal = ZERO

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "currency", CurrencyRegistry.validate(self.currency))
        object.__setattr__(self, "previous_value", to_decimal(self.previous_value, "previous_value"))
        object.__setattr__(self, "new_value", to_decimal(self.new_value, "new_value"))
        object.__setattr__(
            self, "depreciation_impact", to_decimal(self.depreciation_impact, "depreciation_impact")
        )

    @classmethod
    def from_values(
        cls,
        previous_value: Decimal | int | str,
        new_value: Decimal | int | str,
        currency: str = DEFAULT_CURRENCY,
        depreciation_impact: Decimal | int | str = ZERO,
    ) -> RevaluationAmount:
        previous = to_decimal(previous_value, "previous_value")
        new = to_decimal(new_value, "new_value")
        return cls(
            amount=new - previous,
            currency=currency,
            previous_value=previous,
            new_value=new,
            depreciation_impact=to_decimal(depreciation_impact, "depreciation_impact"),
        )

    @classmethod
    def from_book_change(
        cls,
        previous_cost: Decimal,
        new_cost: Decimal,
        previous_salvage_value: Decimal,
        new_salvage_value: Decimal,
        accumulated_depreciation: Decimal,
        currency: str = DEFAULT_CURRENCY,
    ) -> RevaluationAmount:
        """Amount implied by moving cost/salvage while keeping accumulated depreciation."""
        previous_nbv = previous_cost - accumulated_depreciation
        new_nbv = new_cost - accumulated_depreciation
        impact = (new_cost - new_salvage_value) - (previous_cost - previous_salvage_value)
        return cls.from_values(previous_nbv, new_nbv, currency, impact)

    def is_increment(self) -> bool:
        return self.amount > ZERO

    def is_decrement(self) -> bool:
        return self.amount < ZERO

    @property
    def absolute_amount(self) -> Decimal:
        return abs(self.amount)

    @property
    def percentage_change(self) -> Decimal:
        """Change relative to the previous value (0.10 for +10%)."""
        if self.previous_value == ZERO:
            return Decimal("1") if self.amount > ZERO else ZERO
        return self.amount / self.previous_value

    def depreciation_change_per_period(self, remaining_periods: int) -> Decimal:
        if remaining_periods <= 0:
            return ZERO
        return self.depreciation_impact / remaining_periods

    @property
    def reserve_impact(self) -> Decimal:
        """Portion credited to the revaluation reserve."""
        return self.amount if self.is_increment() else ZERO

    def expense_impact(self, available_reserve: Decimal) -> tuple[Decimal, Decimal]:
        """
        Split a decrement between the reserve and profit or loss.

        Returns:
            ``(expense, offset_from_reserve)``; both zero for increments.
        """
        if not self.is_decrement():
            return ZERO, ZERO
        offset = min(self.absolute_amount, max(ZERO, to_decimal(available_reserve)))
        return self.absolute_amount - offset, offset

    def add(self, other: RevaluationAmount) -> RevaluationAmount:
        if other.currency != self.currency:
            raise CurrencyMismatchError(self.currency, other.currency)
        return RevaluationAmount(
            amount=self.amount + other.amount,
            currency=self.currency,
            previous_value=self.previous_value,
            new_value=other.new_value,
            depreciation_impact=self.depreciation_impact + other.depreciation_impact,
        )

    def negate(self) -> RevaluationAmount:
        """Reverse direction: previous and new values swap."""
        return RevaluationAmount(
            amount=-self.amount,
            currency=self.currency,
            previous_value=self.new_value,
            new_value=self.previous_value,
            depreciation_impact=-self.depreciation_impact,
        )

    def multiply(self, factor: Decimal | int | str) -> RevaluationAmount:
        f = to_decimal(factor, "factor")
        return RevaluationAmount(
            amount=self.amount * f,
            currency=self.currency,
            previous_value=self.previous_value,
            new_value=self.new_value,
            depreciation_impact=self.depreciation_impact * f,
        )

    def format(self) -> str:
        sign = "+" if self.amount >= ZERO else "-"
        return f"{sign}{round_money(self.absolute_amount):,.2f} {self.currency}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "amount": str(self.amount),
            "currency": self.currency,
            "previous_value": str(self.previous_value),
            "new_value": str(self.new_value),
            "depreciation_impact": str(self.depreciation_impact),
            "is_increment": self.is_increment(),
            "percentage_change": str(self.percentage_change),
        }


@dataclass(frozen=True, slots=True)
class AccountingPeriod:
    """A closed date window identified by ``period_id`` (e.g. ``2024-03``)."""

    period_id: str
    start_date: date
    end_date: date
    fiscal_year: int = field(default=0)

    def __post_init__(self) -> None:
        if self.end_date < self.start_date:
            raise DepreciationValidationError(
                f"Period {self.period_id} ends before it starts"
            )
        if not self.fiscal_year:
            object.__setattr__(self, "fiscal_year", self.start_date.year)

    def contains(self, d: date) -> bool:
        return self.start_date <= d <= self.end_date
