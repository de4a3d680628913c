"""
Tax/Book Depreciation Engine - parallel books and deferred tax.

Runs a book method and a tax method over the same recovery year and
derives the temporary difference and the resulting deferred tax.  A
positive difference (tax ahead of book) is a deferred tax liability; a
negative one is a deferred tax asset.  ``calculate_schedule`` chains the
years, carrying both accumulated balances and the cumulative difference.

Pure functions with no I/O - methods are built by the injected factory.

Usage:
    from depreciation_engines.tax_book import TaxBookDepreciationEngine
    from depreciation_kernel.domain.types import DepreciationMethodType as M

    engine = TaxBookDepreciationEngine(factory, tax_rate=Decimal("0.21"))
    result = engine.calculate(
        cost=Decimal("50000"), salvage_value=Decimal("5000"),
        useful_life_months=60, book_method=M.STRAIGHT_LINE, tax_method=M.MACRS,
    )
    print(result.temporary_difference, result.deferred_tax_liability)
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Iterator, Mapping

from depreciation_engines.factory import DepreciationMethodFactory, parse_method_type
from depreciation_engines.methods.base import DepreciationContext, DepreciationMethod
from depreciation_kernel.domain.dates import add_months, period_window
from depreciation_kernel.domain.types import DepreciationMethodType
from depreciation_kernel.domain.values import (
    DEFAULT_CURRENCY,
    MONTHS_PER_YEAR,
    ZERO,
    round_money,
    to_decimal,
)
from depreciation_kernel.exceptions import DepreciationValidationError
from depreciation_kernel.logging_config import get_logger

logger = get_logger("engines.tax_book")

DEFAULT_TAX_RATE = Decimal("0.21")  # US federal corporate rate

# Only used to lay out period windows when no acquisition date is given
_CALENDAR_ORIGIN = date(2000, 1, 1)


def deferred_tax_liability(
    book_depreciation: Decimal, tax_depreciation: Decimal, tax_rate: Decimal
) -> Decimal:
    """Liability arising when tax depreciation runs ahead of book (else 0)."""
    return max(ZERO, (tax_depreciation - book_depreciation) * tax_rate)


def deferred_tax_asset(
    book_depreciation: Decimal, tax_depreciation: Decimal, tax_rate: Decimal
) -> Decimal:
    """Asset arising when book depreciation runs ahead of tax (else 0)."""
    return max(ZERO, (book_depreciation - tax_depreciation) * tax_rate)


def book_basis(cost: Decimal, book_accumulated: Decimal) -> Decimal:
    return cost - book_accumulated


def tax_basis(cost: Decimal, tax_accumulated: Decimal) -> Decimal:
    return cost - tax_accumulated


def common_combinations() -> list[tuple[DepreciationMethodType, DepreciationMethodType, str]]:
    """Typical ``(book, tax)`` method pairs."""
    M = DepreciationMethodType
    return [
        (M.STRAIGHT_LINE, M.MACRS, "Straight-line book, MACRS tax (most common US)"),
        (M.STRAIGHT_LINE, M.BONUS, "Straight-line book, 100% bonus tax"),
        (M.STRAIGHT_LINE, M.DOUBLE_DECLINING, "Straight-line book, accelerated tax"),
        (M.DOUBLE_DECLINING, M.MACRS, "Accelerated book, MACRS tax"),
        (M.SUM_OF_YEARS, M.MACRS, "SYD book, MACRS tax"),
    ]


@dataclass(frozen=True)
class TaxBookResult:
    """Book and tax depreciation for one recovery year."""

    year: int
    cost: Decimal
    book_depreciation: Decimal
    tax_depreciation: Decimal
    book_accumulated: Decimal  # after this year
    tax_accumulated: Decimal  # after this year
    tax_rate: Decimal
    currency: str = DEFAULT_CURRENCY

    @property
    def temporary_difference(self) -> Decimal:
        return self.tax_depreciation - self.book_depreciation

    @property
    def deferred_tax_liability(self) -> Decimal:
        """Signed deferred tax: positive is a liability, negative an asset."""
        return round_money(self.temporary_difference * self.tax_rate)

    @property
    def has_deferred_tax_liability(self) -> bool:
        return self.temporary_difference > ZERO

    @property
    def has_deferred_tax_asset(self) -> bool:
        return self.temporary_difference < ZERO

    @property
    def has_tax_timing_advantage(self) -> bool:
        return self.tax_depreciation > self.book_depreciation

    @property
    def net_book_value(self) -> Decimal:
        return book_basis(self.cost, self.book_accumulated)

    @property
    def tax_basis(self) -> Decimal:
        return tax_basis(self.cost, self.tax_accumulated)

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "currency": self.currency,
            "book_depreciation": str(self.book_depreciation),
            "tax_depreciation": str(self.tax_depreciation),
            "temporary_difference": str(self.temporary_difference),
            "deferred_tax_liability": str(self.deferred_tax_liability),
            "tax_rate": str(self.tax_rate),
            "net_book_value": str(self.net_book_value),
            "tax_basis": str(self.tax_basis),
        }


@dataclass(frozen=True)
class TaxBookScheduleRow:
    """One year of a tax/book schedule with running cumulative figures."""

    result: TaxBookResult
    cumulative_temporary_difference: Decimal

    @property
    def year(self) -> int:
        return self.result.year

    @property
    def cumulative_deferred_tax(self) -> Decimal:
        return round_money(self.cumulative_temporary_difference * self.result.tax_rate)


@dataclass(frozen=True)
class TaxBookSchedule:
    book_method: DepreciationMethodType
    tax_method: DepreciationMethodType
    rows: tuple[TaxBookScheduleRow, ...]

    def __iter__(self) -> Iterator[TaxBookScheduleRow]:
        return iter(self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def total_book_depreciation(self) -> Decimal:
        return sum((r.result.book_depreciation for r in self.rows), ZERO)

    @property
    def total_tax_depreciation(self) -> Decimal:
        return sum((r.result.tax_depreciation for r in self.rows), ZERO)

    @property
    def ending_temporary_difference(self) -> Decimal:
        return self.rows[-1].cumulative_temporary_difference if self.rows else ZERO


class TaxBookDepreciationEngine:
    """
    Parallel book/tax depreciation.

    Both books use the same cost. MACRS and bonus work off a zero-salvage
    basis by construction, so the tax book may end below book salvage.
    """

    def __init__(
        self,
        method_factory: DepreciationMethodFactory | None = None,
        tax_rate: Decimal | str = DEFAULT_TAX_RATE,
    ):
        self._factory = method_factory or DepreciationMethodFactory()
        self.tax_rate = to_decimal(tax_rate, "tax_rate")

    def annual_amount(
        self,
        method: DepreciationMethod,
        cost: Decimal,
        salvage_value: Decimal,
        useful_life_months: int,
        year: int,
        accumulated: Decimal,
        acquisition_date: date | None = None,
        currency: str = DEFAULT_CURRENCY,
        options: Mapping[str, Any] | None = None,
    ) -> Decimal:
        """
        Depreciation for recovery ``year`` (1-based).

        Annual-charge methods are called once with ``recovery_year=year``;
        monthly methods are run over the year's twelve months.
        """
        origin = acquisition_date or _CALENDAR_ORIGIN
        context = DepreciationContext(
            useful_life_months=useful_life_months,
            accumulated_depreciation=accumulated,
            acquisition_date=acquisition_date,
            currency=currency,
            current_year=year,
            recovery_year=year,
        ).with_options(options or {})

        if method.annual_charge:
            start = add_months(origin, (year - 1) * MONTHS_PER_YEAR)
            end = add_months(origin, year * MONTHS_PER_YEAR) - timedelta(days=1)
            return method.calculate(cost, salvage_value, start, end, context).amount

        floor = ZERO if method.ignores_salvage() else salvage_value
        total = ZERO
        for month in range(1, MONTHS_PER_YEAR + 1):
            number = (year - 1) * MONTHS_PER_YEAR + month
            if cost - accumulated - total <= floor:
                break
            start, end = period_window(origin, number)
            total += method.calculate(
                cost,
                salvage_value,
                start,
                end,
                context.evolve(
                    accumulated_depreciation=accumulated + total,
                    remaining_months=useful_life_months - number + 1,
                    period_number=number,
                ),
            ).amount
        return total

    def calculate(
        self,
        cost: Decimal | str | int,
        salvage_value: Decimal | str | int,
        useful_life_months: int,
        book_method: DepreciationMethodType | str,
        tax_method: DepreciationMethodType | str,
        year: int = 1,
        book_accumulated: Decimal | str | int = ZERO,
        tax_accumulated: Decimal | str | int = ZERO,
        acquisition_date: date | None = None,
        currency: str = DEFAULT_CURRENCY,
        book_options: Mapping[str, Any] | None = None,
        tax_options: Mapping[str, Any] | None = None,
    ) -> TaxBookResult:
        """
        Book and tax depreciation for one recovery year.

        Raises:
            DepreciationValidationError: Non-positive cost, life or year.
            TierNotAvailableError / UnsupportedMethodError: Method not usable.
        """
        cost = to_decimal(cost, "cost")
        salvage_value = to_decimal(salvage_value, "salvage_value")
        errors = []
        if cost <= ZERO:
            errors.append("Cost must be positive")
        if useful_life_months <= 0:
            errors.append("Useful life months must be positive")
        if year < 1:
            errors.append("Year must be at least 1")
        if errors:
            raise DepreciationValidationError(errors, subject="tax/book calculation")

        book = self._factory.create(book_method)
        tax = self._factory.create(tax_method)
        book_acc = to_decimal(book_accumulated, "book_accumulated")
        tax_acc = to_decimal(tax_accumulated, "tax_accumulated")

        book_amount = self.annual_amount(
            book, cost, salvage_value, useful_life_months, year, book_acc,
            acquisition_date, currency, book_options,
        )
        tax_amount = self.annual_amount(
            tax, cost, salvage_value, useful_life_months, year, tax_acc,
            acquisition_date, currency, tax_options,
        )

        result = TaxBookResult(
            year=year,
            cost=cost,
            book_depreciation=book_amount,
            tax_depreciation=tax_amount,
            book_accumulated=book_acc + book_amount,
            tax_accumulated=tax_acc + tax_amount,
            tax_rate=self.tax_rate,
            currency=currency,
        )
        logger.debug("tax_book_year_calculated", extra={
            "year": year,
            "book_method": parse_method_type(book_method).value,
            "tax_method": parse_method_type(tax_method).value,
            "book_depreciation": book_amount,
            "tax_depreciation": tax_amount,
            "temporary_difference": result.temporary_difference,
        })
        return result

    def calculate_schedule(
        self,
        cost: Decimal | str | int,
        salvage_value: Decimal | str | int,
        useful_life_months: int,
        book_method: DepreciationMethodType | str,
        tax_method: DepreciationMethodType | str,
        years: int | None = None,
        acquisition_date: date | None = None,
        currency: str = DEFAULT_CURRENCY,
        book_options: Mapping[str, Any] | None = None,
        tax_options: Mapping[str, Any] | None = None,
    ) -> TaxBookSchedule:
        """
        Year-by-year book/tax comparison.

        ``years`` defaults to whichever book runs longer: the useful life or
        the tax method's recovery period.
        """
        t0 = time.monotonic()
        book_type = parse_method_type(book_method)
        tax_type = parse_method_type(tax_method)
        if years is None:
            tax_impl = self._factory.create(tax_type)
            tax_context = DepreciationContext(
                useful_life_months=useful_life_months
            ).with_options(tax_options or {})
            months = max(
                useful_life_months,
                tax_impl.schedule_months(useful_life_months, tax_context),
            )
            years = math.ceil(months / MONTHS_PER_YEAR)

        logger.info("tax_book_schedule_started", extra={
            "book_method": book_type.value,
            "tax_method": tax_type.value,
            "years": years,
            "tax_rate": self.tax_rate,
        })

        rows: list[TaxBookScheduleRow] = []
        book_acc = ZERO
        tax_acc = ZERO
        cumulative = ZERO
        for year in range(1, years + 1):
            result = self.calculate(
                cost, salvage_value, useful_life_months, book_type, tax_type,
                year=year,
                book_accumulated=book_acc,
                tax_accumulated=tax_acc,
                acquisition_date=acquisition_date,
                currency=currency,
                book_options=book_options,
                tax_options=tax_options,
            )
            book_acc = result.book_accumulated
            tax_acc = result.tax_accumulated
            cumulative += result.temporary_difference
            rows.append(TaxBookScheduleRow(result, cumulative))

        schedule = TaxBookSchedule(book_type, tax_type, tuple(rows))
        logger.info("tax_book_calculated", extra={
            "book_method": book_type.value,
            "tax_method": tax_type.value,
            "years": years,
            "total_book_depreciation": schedule.total_book_depreciation,
            "total_tax_depreciation": schedule.total_tax_depreciation,
            "ending_temporary_difference": schedule.ending_temporary_difference,
            "duration_ms": round((time.monotonic() - t0) * 1000, 2),
        })
        return schedule
