"""
Depreciation Calculator Service (``depreciation_modules.assets.service``).

Responsibility
--------------
Single entry point for depreciation work on one asset: the charge for a
date or accounting period, forward forecasts, full-life schedules and
adjustments, and book/tax comparisons.  Pure computation is delegated to
``depreciation_engines``; this layer resolves assets and periods, checks
that the asset can be depreciated, and emits domain events.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``DepreciationCalculator`` composes the
stateless engines (``DepreciationScheduleGenerator``,
``DepreciationForecastService``, ``TaxBookDepreciationEngine``) around one
tier-gated ``DepreciationMethodFactory``, and talks to the outside only
through the kernel ports (``AssetDataProvider``, ``PeriodProvider``,
``EventDispatcher``).

Invariants enforced
-------------------
* Inactive or disposed assets, and assets without a positive cost, are
  rejected before any calculation.
* A period charge uses the same per-period driver as the schedule
  generator, so ``calculate_for_period`` agrees with the matching schedule
  period when accumulated depreciation is the same.
* No charge takes book value below salvage (zero for MACRS and
  full-cost bonus).
* Nothing is written back to the asset provider except by
  ``post_depreciation``.

Failure modes
-------------
* ``AssetNotFoundError`` / ``PeriodNotFoundError``: unknown ids.
* ``AssetNotDepreciableError``: inactive, disposed or zero-cost asset.
* ``DepreciationValidationError``: method inputs rejected by the method.
* ``TierNotAvailableError`` / ``UnsupportedMethodError``: from the factory.
Failures are logged as ``depreciation_calculation_failed`` with the error
code, then re-raised.

Audit relevance
---------------
Every calculation logs ``depreciation_calculated`` with asset, period,
method, amount and ``duration_ms``, and dispatches a
``DepreciationCalculatedEvent``.  Schedules dispatch
``ScheduleGeneratedEvent`` / ``ScheduleAdjustedEvent``.

Usage::

    calculator = DepreciationCalculator(assets, factory, clock=clock)
    record = calculator.calculate_for_period("A-100", "2024-03")
    schedule = calculator.generate("A-100", "T1")
"""

from __future__ import annotations

import math
import time
from datetime import date
from decimal import Decimal
from typing import Any, Mapping
from uuid import uuid4

from depreciation_engines.factory import DepreciationMethodFactory, parse_method_type
from depreciation_engines.forecast import DepreciationForecast, DepreciationForecastService
from depreciation_engines.schedule import (
    DepreciationSchedule,
    DepreciationScheduleGenerator,
    ScheduleAdjustment,
    base_context,
    period_amount,
)
from depreciation_engines.tax_book import (
    DEFAULT_TAX_RATE,
    TaxBookDepreciationEngine,
    TaxBookResult,
    TaxBookSchedule,
)
from depreciation_kernel.domain.asset import AssetRecord
from depreciation_kernel.domain.clock import Clock, SystemClock
from depreciation_kernel.domain.dates import months_elapsed, period_key, period_window
from depreciation_kernel.domain.providers import (
    AssetDataProvider,
    EventDispatcher,
    PeriodProvider,
)
from depreciation_kernel.domain.types import (
    DepreciationMethodType,
    DepreciationStatus,
    DepreciationType,
)
from depreciation_kernel.domain.values import (
    MONTHS_PER_YEAR,
    ZERO,
    DepreciationAmount,
)
from depreciation_kernel.exceptions import (
    AssetNotDepreciableError,
    AssetNotFoundError,
    DepreciationError,
    DepreciationValidationError,
    PeriodNotFoundError,
)
from depreciation_kernel.logging_config import LogContext, get_logger
from depreciation_modules.assets.config import DepreciationConfig
from depreciation_modules.assets.events import (
    DepreciationCalculatedEvent,
    ScheduleAdjustedEvent,
    ScheduleGeneratedEvent,
)
from depreciation_modules.assets.models import AssetDepreciation
from depreciation_modules.assets.repository import InMemoryPeriodProvider

logger = get_logger("modules.assets.service")


class DepreciationCalculator:
    """
    Depreciation facade over the engines.

    Contract
    --------
    * ``calculate`` and ``calculate_for_period`` are pure with respect to
      the asset provider: calling twice with the same inputs gives the same
      amount.
    * ``post_depreciation`` is the only operation that writes accumulated
      depreciation back.

    Guarantees
    ----------
    * One method factory, hence one tier, is shared by every engine.
    * Clock is injectable for deterministic testing.

    Non-goals
    ---------
    * Does NOT create journal entries or persist schedules.
    """

    def __init__(
        self,
        asset_provider: AssetDataProvider,
        method_factory: DepreciationMethodFactory | None = None,
        period_provider: PeriodProvider | None = None,
        event_dispatcher: EventDispatcher | None = None,
        clock: Clock | None = None,
        tax_rate: Decimal | str = DEFAULT_TAX_RATE,
        default_forecast_periods: int = 12,
    ):
        self._assets = asset_provider
        self._factory = method_factory or DepreciationMethodFactory()
        self._periods = period_provider or InMemoryPeriodProvider()
        self._dispatcher = event_dispatcher
        self._clock = clock or SystemClock()
        self._default_forecast_periods = default_forecast_periods

        # Stateless engines
        self._generator = DepreciationScheduleGenerator(asset_provider, self._factory, self._clock)
        self._forecaster = DepreciationForecastService(asset_provider, self._factory, self._clock)
        self._tax_book = TaxBookDepreciationEngine(self._factory, tax_rate)

    @classmethod
    def from_config(
        cls,
        config: DepreciationConfig,
        asset_provider: AssetDataProvider,
        period_provider: PeriodProvider | None = None,
        event_dispatcher: EventDispatcher | None = None,
        clock: Clock | None = None,
    ) -> DepreciationCalculator:
        return cls(
            asset_provider,
            method_factory=config.build_factory(),
            period_provider=period_provider,
            event_dispatcher=event_dispatcher,
            clock=clock,
            tax_rate=config.tax_rate,
            default_forecast_periods=config.default_forecast_periods,
        )

    @property
    def method_factory(self) -> DepreciationMethodFactory:
        return self._factory

    @property
    def schedule_generator(self) -> DepreciationScheduleGenerator:
        return self._generator

    # =========================================================================
    # Helpers
    # =========================================================================

    def _get_asset(self, asset_id: str) -> AssetRecord:
        asset = self._assets.get_asset(asset_id)
        if asset is None:
            raise AssetNotFoundError(asset_id)
        return asset

    def _get_depreciable_asset(self, asset_id: str) -> AssetRecord:
        asset = self._get_asset(asset_id)
        if asset.is_disposed:
            raise AssetNotDepreciableError(asset_id, "asset is disposed")
        if not asset.is_active:
            raise AssetNotDepreciableError(asset_id, "asset is inactive")
        if asset.cost <= ZERO:
            raise AssetNotDepreciableError(asset_id, "cost must be positive")
        return asset

    def _dispatch(self, event: Any) -> None:
        if self._dispatcher is not None:
            self._dispatcher.dispatch(event)

    def _period_charge(
        self,
        asset: AssetRecord,
        method_type: DepreciationMethodType,
        period_number: int,
    ) -> Decimal:
        """
        Charge for the ``period_number``-th month of life at the asset's
        current accumulated depreciation.

        Zero before the asset is in service, after its schedule ends, or
        once book value has reached the floor.
        """
        method = self._factory.create(method_type)
        context = base_context(asset)
        method.validate(asset.cost, asset.salvage_value, context)

        floor = ZERO if method.ignores_salvage() else asset.salvage_value
        book_value = asset.cost - asset.accumulated_depreciation
        last_period = method.schedule_months(asset.useful_life_months, context)
        if period_number < 1 or period_number > last_period or book_value <= floor:
            return ZERO

        start, end = period_window(asset.acquisition_date, period_number)
        period_context = context.evolve(
            accumulated_depreciation=asset.accumulated_depreciation,
            remaining_months=asset.useful_life_months - period_number + 1,
            current_year=math.ceil(period_number / MONTHS_PER_YEAR),
            period_number=period_number,
            units_produced=asset.units_for_period(period_key(start)),
        )
        amount = period_amount(
            method, asset.cost, asset.salvage_value, start, end, period_context
        )
        return min(amount, book_value - floor)

    # =========================================================================
    # Calculation
    # =========================================================================

    def calculate(
        self,
        asset_id: str,
        as_of_date: date | None = None,
        depreciation_type: DepreciationType = DepreciationType.BOOK,
    ) -> DepreciationAmount:
        """
        Charge for the month of life containing ``as_of_date`` (default today).

        Returns zero when the asset is not yet in service or is fully
        depreciated.
        """
        t0 = time.monotonic()
        try:
            asset = self._get_depreciable_asset(asset_id)
            depreciation_type = DepreciationType(depreciation_type)
            method_type = self._generator.method_type_for(asset, depreciation_type)
            as_of = as_of_date or self._clock.today()

            if as_of < asset.acquisition_date:
                amount = ZERO
                period_number = 0
            else:
                period_number = months_elapsed(asset.acquisition_date, as_of) + 1
                amount = self._period_charge(asset, method_type, period_number)
        except DepreciationError as exc:
            logger.warning(
                "depreciation_calculation_failed",
                extra={"asset_id": asset_id, "error_code": exc.code},
            )
            raise

        logger.info(
            "depreciation_calculated",
            extra={
                "asset_id": asset_id,
                "as_of_date": as_of,
                "period_number": period_number,
                "method": method_type.value,
                "depreciation_type": depreciation_type.value,
                "amount": amount,
                "duration_ms": round((time.monotonic() - t0) * 1000, 2),
            },
        )
        return DepreciationAmount.of(
            amount, asset.currency, asset.accumulated_depreciation + amount
        )

    def calculate_for_period(
        self,
        asset_id: str,
        period_id: str,
        depreciation_type: DepreciationType = DepreciationType.BOOK,
    ) -> AssetDepreciation:
        """
        Full depreciation record for accounting period ``period_id``.

        The period is mapped to the month of life that starts in the same
        calendar month, which is how schedule periods are keyed.
        """
        t0 = time.monotonic()
        with LogContext.bind(asset_id=asset_id):
            try:
                asset = self._get_depreciable_asset(asset_id)
                period = self._periods.get_period(period_id)
                if period is None:
                    raise PeriodNotFoundError(period_id)
                depreciation_type = DepreciationType(depreciation_type)
                method_type = self._generator.method_type_for(asset, depreciation_type)

                acquired = asset.acquisition_date
                period_number = (
                    (period.start_date.year - acquired.year) * MONTHS_PER_YEAR
                    + period.start_date.month - acquired.month + 1
                )
                amount = self._period_charge(asset, method_type, period_number)
            except DepreciationError as exc:
                logger.warning(
                    "depreciation_calculation_failed",
                    extra={
                        "asset_id": asset_id,
                        "period_id": period_id,
                        "error_code": exc.code,
                    },
                )
                raise

            before = asset.book_value()
            record = AssetDepreciation(
                id=f"DEP-{asset_id}-{uuid4().hex[:13]}",
                asset_id=asset_id,
                tenant_id=asset.tenant_id,
                period_id=period.period_id,
                depreciation_type=depreciation_type,
                method=method_type,
                amount=amount,
                currency=asset.currency,
                book_value_before=before,
                book_value_after=before.depreciate(amount),
                period_start=period.start_date,
                period_end=period.end_date,
                calculation_date=self._clock.today(),
            )
            logger.info(
                "depreciation_calculated",
                extra={
                    "depreciation_id": record.id,
                    "period_id": period.period_id,
                    "period_number": period_number,
                    "method": method_type.value,
                    "depreciation_type": depreciation_type.value,
                    "amount": amount,
                    "net_book_value_after": record.net_book_value_after,
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )

        self._dispatch(
            DepreciationCalculatedEvent(
                depreciation_id=record.id,
                asset_id=asset_id,
                tenant_id=record.tenant_id,
                period_id=record.period_id,
                depreciation_type=depreciation_type,
                method=method_type,
                amount=amount,
                currency=record.currency,
                net_book_value_after=record.net_book_value_after,
                calculation_date=record.calculation_date,
            )
        )
        return record

    def post_depreciation(
        self, depreciation: AssetDepreciation, journal_entry_id: str | None = None
    ) -> AssetDepreciation:
        """Mark the record POSTED and write accumulated depreciation back."""
        posted = depreciation.with_posting(
            journal_entry_id or f"JE-{uuid4().hex[:13]}", self._clock.today()
        )
        self._assets.update_accumulated_depreciation(
            depreciation.asset_id, posted.book_value_after.accumulated_depreciation
        )
        logger.info(
            "depreciation_posted",
            extra={
                "asset_id": depreciation.asset_id,
                "depreciation_id": depreciation.id,
                "journal_entry_id": posted.journal_entry_id,
                "amount": posted.amount,
                "status": DepreciationStatus.POSTED.value,
            },
        )
        return posted

    # =========================================================================
    # Forecasts and schedules
    # =========================================================================

    def forecast(
        self, asset_id: str, number_of_periods: int | None = None
    ) -> DepreciationForecast:
        """Forward projection; zero periods gives an empty forecast."""
        if number_of_periods is None:
            number_of_periods = self._default_forecast_periods
        if number_of_periods == 0:
            asset = self._get_asset(asset_id)
            return DepreciationForecast(
                asset_id=asset_id,
                method=asset.method,
                currency=asset.currency,
            )
        return self._forecaster.forecast(asset_id, number_of_periods)

    def forecast_remaining_life(self, asset_id: str) -> DepreciationForecast:
        return self._forecaster.forecast_remaining_life(asset_id)

    def generate(
        self,
        asset_id: str,
        tenant_id: str | None = None,
        depreciation_type: DepreciationType = DepreciationType.BOOK,
    ) -> DepreciationSchedule:
        """Full-life schedule; ``tenant_id`` defaults to the asset's."""
        with LogContext.bind(asset_id=asset_id, tenant_id=tenant_id):
            try:
                asset = self._get_depreciable_asset(asset_id)
                tenant = tenant_id if tenant_id is not None else asset.tenant_id
                schedule = self._generator.generate(asset_id, tenant, depreciation_type)
            except DepreciationError as exc:
                logger.warning(
                    "schedule_generation_failed",
                    extra={"asset_id": asset_id, "error_code": exc.code},
                )
                raise

        self._dispatch(
            ScheduleGeneratedEvent(
                schedule_id=schedule.schedule_id,
                asset_id=asset_id,
                tenant_id=schedule.tenant_id,
                depreciation_type=schedule.depreciation_type,
                method=schedule.method,
                period_count=len(schedule),
                total_depreciation=schedule.total_depreciation,
                generated_on=self._clock.today(),
            )
        )
        return schedule

    def adjust(
        self,
        asset_id: str,
        tenant_id: str,
        adjustments: ScheduleAdjustment | Mapping[str, Any],
        depreciation_type: DepreciationType = DepreciationType.BOOK,
    ) -> DepreciationSchedule:
        """Re-plan the schedule from a cut-over period (history is replayed)."""
        if not isinstance(adjustments, ScheduleAdjustment):
            adjustments = ScheduleAdjustment.from_mapping(adjustments)
        with LogContext.bind(asset_id=asset_id, tenant_id=tenant_id):
            self._get_depreciable_asset(asset_id)
            schedule = self._generator.adjust(
                asset_id, tenant_id, adjustments, depreciation_type
            )

        self._dispatch(
            ScheduleAdjustedEvent(
                schedule_id=schedule.schedule_id,
                asset_id=asset_id,
                tenant_id=tenant_id,
                from_period_number=adjustments.from_period_number,
                method=schedule.method,
                useful_life_months=schedule.useful_life_months,
                salvage_value=schedule.salvage_value,
                reason=adjustments.reason,
                adjusted_on=self._clock.today(),
            )
        )
        return schedule

    # =========================================================================
    # Tax / book
    # =========================================================================

    def _tax_book_methods(
        self,
        asset: AssetRecord,
        book_method: DepreciationMethodType | str | None,
        tax_method: DepreciationMethodType | str | None,
    ) -> tuple[DepreciationMethodType, DepreciationMethodType]:
        book = parse_method_type(book_method or asset.method)
        tax = parse_method_type(tax_method or asset.tax_method or DepreciationMethodType.MACRS)
        return book, tax

    def tax_book_schedule(
        self,
        asset_id: str,
        book_method: DepreciationMethodType | str | None = None,
        tax_method: DepreciationMethodType | str | None = None,
        years: int | None = None,
    ) -> TaxBookSchedule:
        """Year-by-year book/tax comparison for the asset."""
        asset = self._get_depreciable_asset(asset_id)
        book, tax = self._tax_book_methods(asset, book_method, tax_method)
        return self._tax_book.calculate_schedule(
            asset.cost,
            asset.salvage_value,
            asset.useful_life_months,
            book,
            tax,
            years=years,
            acquisition_date=asset.acquisition_date,
            currency=asset.currency,
            book_options=asset.method_options,
            tax_options=asset.method_options,
        )

    def calculate_tax_book(
        self,
        asset_id: str,
        book_method: DepreciationMethodType | str | None = None,
        tax_method: DepreciationMethodType | str | None = None,
        period_number: int = 1,
    ) -> TaxBookResult:
        """
        Book and tax depreciation for recovery year ``period_number``.

        Prior years are run first so both accumulated figures are correct.
        Book defaults to the asset's method, tax to its tax method or MACRS.
        """
        if period_number < 1:
            raise DepreciationValidationError(
                "Period number must be at least 1", subject=asset_id
            )
        return self.tax_book_schedule(
            asset_id, book_method, tax_method, years=period_number
        ).rows[-1].result
