"""
Depreciation Schedule Engine - period-by-period schedules over an asset's life.

Drives a depreciation method across the useful life of an asset, one month
at a time, threading accumulated depreciation and book value forward.
Adjustments (new life, salvage or method from a cut-over period) use a
two-phase replay-then-regenerate algorithm: periods before the cut-over
are recomputed exactly as originally scheduled, and only the periods from
the cut-over onward use the new parameters.  Historical figures therefore
never change because of an adjustment.

Usage:
    from depreciation_engines.factory import DepreciationMethodFactory
    from depreciation_engines.schedule import DepreciationScheduleGenerator

    generator = DepreciationScheduleGenerator(asset_provider, DepreciationMethodFactory())
    schedule = generator.generate("A-100", tenant_id="T1")
    print(schedule.total_depreciation)

    adjusted = generator.adjust(
        "A-100", "T1", {"useful_life_months": 48, "from_period_number": 13},
    )
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, replace
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Iterator, Mapping, Sequence
from uuid import uuid4

from depreciation_engines.factory import DepreciationMethodFactory, parse_method_type
from depreciation_engines.methods.base import DepreciationContext, DepreciationMethod
from depreciation_kernel.domain.asset import AssetRecord
from depreciation_kernel.domain.clock import Clock, SystemClock
from depreciation_kernel.domain.dates import add_months, period_key, period_window
from depreciation_kernel.domain.providers import AssetDataProvider
from depreciation_kernel.domain.types import (
    DepreciationMethodType,
    DepreciationStatus,
    DepreciationType,
    ProrateConvention,
    ScheduleStatus,
)
from depreciation_kernel.domain.values import (
    MONTHS_PER_YEAR,
    ZERO,
    round_money,
    to_decimal,
)
from depreciation_kernel.exceptions import (
    AssetNotFoundError,
    DepreciationValidationError,
    InvalidPeriodTransitionError,
    InvalidScheduleAdjustmentError,
)
from depreciation_kernel.logging_config import get_logger

logger = get_logger("engines.schedule")

S = DepreciationStatus

_TRANSITIONS: Mapping[DepreciationStatus, frozenset[DepreciationStatus]] = {
    S.CALCULATED: frozenset({S.POSTED, S.ADJUSTED}),
    S.ADJUSTED: frozenset({S.POSTED, S.CALCULATED}),
    S.POSTED: frozenset({S.REVERSED}),
    S.REVERSED: frozenset(),
}


@dataclass(frozen=True)
class SchedulePeriod:
    """
    One month of a depreciation schedule.

    Immutable: status changes return a new period.  Status moves
    CALCULATED -> POSTED -> REVERSED, with CALCULATED <-> ADJUSTED on the
    side; REVERSED is final.
    """

    id: str
    schedule_id: str
    period_id: str  # YYYY-MM
    period_number: int
    start_date: date
    end_date: date
    depreciation_amount: Decimal
    accumulated_depreciation: Decimal  # after this period
    book_value_start: Decimal
    book_value_end: Decimal
    currency: str = "USD"
    status: DepreciationStatus = DepreciationStatus.CALCULATED
    depreciation_id: str | None = None
    journal_entry_id: str | None = None
    calculation_date: date | None = None
    posting_date: date | None = None

    @classmethod
    def create(
        cls,
        schedule_id: str,
        period_number: int,
        start_date: date,
        end_date: date,
        book_value_start: Decimal,
        depreciation_amount: Decimal,
        previous_accumulated: Decimal,
        currency: str = "USD",
        calculation_date: date | None = None,
    ) -> SchedulePeriod:
        return cls(
            id=f"PERIOD-{schedule_id}-{period_number}",
            schedule_id=schedule_id,
            period_id=period_key(start_date),
            period_number=period_number,
            start_date=start_date,
            end_date=end_date,
            depreciation_amount=depreciation_amount,
            accumulated_depreciation=previous_accumulated + depreciation_amount,
            book_value_start=book_value_start,
            book_value_end=book_value_start - depreciation_amount,
            currency=currency,
            calculation_date=calculation_date,
        )

    @property
    def is_posted(self) -> bool:
        return self.status is S.POSTED

    @property
    def is_reversed(self) -> bool:
        return self.status is S.REVERSED

    @property
    def days_in_period(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def can_be_posted(self) -> bool:
        return self.depreciation_id is not None and self.status not in (S.POSTED, S.REVERSED)

    @property
    def depreciable_amount(self) -> Decimal:
        return self.book_value_start - self.book_value_end + self.depreciation_amount

    @property
    def depreciation_rate(self) -> Decimal:
        """Charge as a share of opening book value."""
        if self.book_value_start <= ZERO:
            return ZERO
        return self.depreciation_amount / self.book_value_start

    def is_fully_depreciated_after(self, salvage_value: Decimal = ZERO) -> bool:
        return self.book_value_end <= salvage_value

    def with_status(self, status: DepreciationStatus) -> SchedulePeriod:
        """
        Move to ``status``.

        Raises:
            InvalidPeriodTransitionError: If the move is not allowed.
        """
        status = DepreciationStatus(status)
        if status is self.status:
            return self
        if status not in _TRANSITIONS[self.status]:
            raise InvalidPeriodTransitionError(self.id, self.status.value, status.value)
        return replace(self, status=status)

    def with_calculation_details(
        self, depreciation_id: str, calculation_date: date
    ) -> SchedulePeriod:
        """Attach the depreciation run that produced this period."""
        return replace(self, depreciation_id=depreciation_id, calculation_date=calculation_date)

    def with_posting_details(self, journal_entry_id: str, posting_date: date) -> SchedulePeriod:
        if not self.can_be_posted():
            raise InvalidPeriodTransitionError(self.id, self.status.value, S.POSTED.value)
        posted = self.with_status(S.POSTED)
        return replace(posted, journal_entry_id=journal_entry_id, posting_date=posting_date)

    def reverse(self) -> SchedulePeriod:
        """Reverse a posted period."""
        if self.status is not S.POSTED:
            raise InvalidPeriodTransitionError(self.id, self.status.value, S.REVERSED.value)
        return replace(self, status=S.REVERSED)

    def mark_adjusted(self) -> SchedulePeriod:
        return self.with_status(S.ADJUSTED)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "schedule_id": self.schedule_id,
            "period_id": self.period_id,
            "period_number": self.period_number,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "depreciation_amount": str(self.depreciation_amount),
            "accumulated_depreciation": str(self.accumulated_depreciation),
            "book_value_start": str(self.book_value_start),
            "book_value_end": str(self.book_value_end),
            "currency": self.currency,
            "status": self.status.value,
            "depreciation_id": self.depreciation_id,
            "journal_entry_id": self.journal_entry_id,
        }


@dataclass(frozen=True)
class DepreciationSchedule:
    """An ordered, immutable sequence of schedule periods for one asset and book."""

    schedule_id: str
    asset_id: str
    tenant_id: str
    depreciation_type: DepreciationType
    method: DepreciationMethodType
    cost: Decimal
    salvage_value: Decimal
    useful_life_months: int
    start_date: date
    end_date: date
    periods: tuple[SchedulePeriod, ...] = ()
    currency: str = "USD"
    prorate_convention: ProrateConvention = ProrateConvention.DAILY
    status: ScheduleStatus = ScheduleStatus.CALCULATED
    closed_reason: str | None = None
    adjustment_reason: str | None = None

    def __iter__(self) -> Iterator[SchedulePeriod]:
        return iter(self.periods)

    def __len__(self) -> int:
        return len(self.periods)

    @property
    def total_depreciation(self) -> Decimal:
        return sum((p.depreciation_amount for p in self.periods), ZERO)

    def accumulated_as_of(self, as_of: date) -> Decimal:
        """Accumulated depreciation for periods ending on or before ``as_of``."""
        return sum(
            (p.depreciation_amount for p in self.periods if p.end_date <= as_of), ZERO
        )

    @property
    def current_book_value(self) -> Decimal:
        """Book value after the last posted period (cost if nothing is posted)."""
        posted = [p for p in self.periods if p.status is S.POSTED]
        if not posted:
            return self.cost
        return posted[-1].book_value_end

    @property
    def remaining_depreciation(self) -> Decimal:
        posted = sum(
            (p.depreciation_amount for p in self.periods if p.status is S.POSTED), ZERO
        )
        return self.total_depreciation - posted

    @property
    def is_fully_depreciated(self) -> bool:
        if not self.periods:
            return False
        return self.periods[-1].book_value_end <= self.salvage_value

    @property
    def final_book_value(self) -> Decimal:
        return self.periods[-1].book_value_end if self.periods else self.cost

    def period(self, period_number: int) -> SchedulePeriod | None:
        for p in self.periods:
            if p.period_number == period_number:
                return p
        return None

    def close(self, reason: str) -> DepreciationSchedule:
        return replace(self, status=ScheduleStatus.CLOSED, closed_reason=reason)

    def with_periods(self, periods: Sequence[SchedulePeriod]) -> DepreciationSchedule:
        return replace(self, periods=tuple(periods))

    def to_dict(self) -> dict[str, Any]:
        return {
            "schedule_id": self.schedule_id,
            "asset_id": self.asset_id,
            "tenant_id": self.tenant_id,
            "depreciation_type": self.depreciation_type.value,
            "method": self.method.value,
            "cost": str(self.cost),
            "salvage_value": str(self.salvage_value),
            "useful_life_months": self.useful_life_months,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "currency": self.currency,
            "status": self.status.value,
            "total_depreciation": str(self.total_depreciation),
            "periods": [p.to_dict() for p in self.periods],
        }


@dataclass(frozen=True)
class ScheduleAdjustment:
    """
    Change of depreciation parameters effective from ``from_period_number``.

    ``None`` fields keep the asset's current value. A new ``cost`` restates
    the depreciable basis (revaluation); accumulated depreciation carries
    over unchanged.
    """

    useful_life_months: int | None = None
    cost: Decimal | None = None
    salvage_value: Decimal | None = None
    method: DepreciationMethodType | None = None
    from_period_number: int = 1
    reason: str = ""

    def __post_init__(self) -> None:
        if self.cost is not None:
            object.__setattr__(self, "cost", to_decimal(self.cost, "cost"))
        if self.salvage_value is not None:
            object.__setattr__(
                self, "salvage_value", to_decimal(self.salvage_value, "salvage_value")
            )
        if self.method is not None:
            object.__setattr__(self, "method", parse_method_type(self.method))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ScheduleAdjustment:
        return cls(
            useful_life_months=data.get("useful_life_months"),
            cost=data.get("cost"),
            salvage_value=data.get("salvage_value"),
            method=data.get("method"),
            from_period_number=int(data.get("from_period_number", 1)),
            reason=data.get("reason", ""),
        )


def base_context(asset: AssetRecord) -> DepreciationContext:
    """Asset-level inputs shared by every period of a calculation."""
    return DepreciationContext(
        useful_life_months=asset.useful_life_months,
        acquisition_date=asset.acquisition_date,
        currency=asset.currency,
        total_expected_units=asset.total_expected_units,
    ).with_options(asset.method_options)


def period_amount(
    method: DepreciationMethod,
    cost: Decimal,
    salvage_value: Decimal,
    start: date,
    end: date,
    context: DepreciationContext,
) -> Decimal:
    """
    Monthly charge from ``method``.

    Annual-charge methods (MACRS) are spread evenly over the twelve months
    of each recovery year, never exceeding the unrecovered cost.  The
    annual figure is taken before any in-year charges so every month of a
    recovery year gets the same share.
    """
    if not method.annual_charge:
        return method.calculate(cost, salvage_value, start, end, context).amount
    annual = method.calculate(
        cost, salvage_value, start, end, context.evolve(accumulated_depreciation=ZERO)
    ).amount
    unrecovered = max(ZERO, cost - context.accumulated_depreciation)
    return min(round_money(annual / MONTHS_PER_YEAR), unrecovered)


class DepreciationScheduleGenerator:
    """
    Builds and adjusts depreciation schedules.

    Contract:
        Periods for one asset are computed strictly in order; each period's
        context carries the accumulated depreciation of all prior periods.
        No state is kept between calls.
    """

    def __init__(
        self,
        asset_provider: AssetDataProvider,
        method_factory: DepreciationMethodFactory | None = None,
        clock: Clock | None = None,
    ):
        self._assets = asset_provider
        self._factory = method_factory or DepreciationMethodFactory()
        self._clock = clock or SystemClock()

    def _get_asset(self, asset_id: str) -> AssetRecord:
        asset = self._assets.get_asset(asset_id)
        if asset is None:
            raise AssetNotFoundError(asset_id)
        return asset

    @staticmethod
    def method_type_for(
        asset: AssetRecord, depreciation_type: DepreciationType
    ) -> DepreciationMethodType:
        if depreciation_type is DepreciationType.TAX and asset.tax_method is not None:
            return asset.tax_method
        return asset.method

    @staticmethod
    def _new_schedule_id(asset_id: str) -> str:
        return f"SCH-{asset_id}-{uuid4().hex[:13]}"

    def _validate_asset(
        self, asset: AssetRecord, method: DepreciationMethod, salvage_value: Decimal
    ) -> None:
        errors: list[str] = []
        if asset.cost <= ZERO:
            errors.append("Cost must be positive")
        if asset.useful_life_months <= 0:
            errors.append("Useful life months must be positive")
        if errors:
            raise DepreciationValidationError(errors, subject=asset.asset_id)
        method.validate(asset.cost, salvage_value, base_context(asset))

    def _run_periods(
        self,
        asset: AssetRecord,
        method: DepreciationMethod,
        schedule_id: str,
        *,
        salvage_value: Decimal,
        first_period: int,
        count: int,
        life_months: int,
        accumulated: Decimal,
        cost: Decimal | None = None,
        rebase: bool = False,
    ) -> tuple[list[SchedulePeriod], Decimal]:
        """
        Compute ``count`` periods starting at ``first_period``.

        ``life_months`` is the life the method sees; ``remaining_months`` and
        ``current_year`` count from ``first_period``.  Stops early once book
        value reaches the salvage floor.  ``cost`` defaults to the asset's.

        With ``rebase`` the method sees the carrying amount at
        ``first_period`` as its cost and starts from zero accumulated
        depreciation, so the remaining depreciable amount is spread over
        ``life_months``.  Units-of-production keeps the full basis because
        its rate is per unit of total expected output.
        """
        cost = asset.cost if cost is None else cost
        carried = accumulated if rebase and not method.requires_units_data() else ZERO
        method_cost = cost - carried
        floor = ZERO if method.ignores_salvage() else salvage_value
        context = base_context(asset).evolve(useful_life_months=life_months)
        calculation_date = self._clock.today()
        periods: list[SchedulePeriod] = []

        for offset in range(1, count + 1):
            book_value = cost - accumulated
            if book_value <= floor:
                break
            number = first_period + offset - 1
            start, end = period_window(asset.acquisition_date, number)
            period_context = context.evolve(
                accumulated_depreciation=accumulated - carried,
                remaining_months=life_months - offset + 1,
                current_year=math.ceil(offset / MONTHS_PER_YEAR),
                period_number=number,
                units_produced=asset.units_for_period(period_key(start)),
            )
            amount = period_amount(
                method, method_cost, salvage_value, start, end, period_context
            )
            amount = min(amount, max(ZERO, book_value - floor))
            periods.append(
                SchedulePeriod.create(
                    schedule_id,
                    number,
                    start,
                    end,
                    book_value,
                    amount,
                    accumulated,
                    asset.currency,
                    calculation_date,
                )
            )
            logger.debug(
                "schedule_period_calculated",
                extra={
                    "schedule_id": schedule_id,
                    "period_number": number,
                    "amount": amount,
                    "accumulated_depreciation": accumulated + amount,
                },
            )
            accumulated += amount

        return periods, accumulated

    def generate(
        self,
        asset_id: str,
        tenant_id: str,
        depreciation_type: DepreciationType = DepreciationType.BOOK,
        schedule_id: str | None = None,
    ) -> DepreciationSchedule:
        """
        Generate the full-life schedule for an asset, from acquisition.

        Raises:
            AssetNotFoundError: Unknown asset.
            DepreciationValidationError: Invalid cost, life or method inputs.
            TierNotAvailableError / UnsupportedMethodError: Method not usable.
        """
        t0 = time.monotonic()
        asset = self._get_asset(asset_id)
        depreciation_type = DepreciationType(depreciation_type)
        method_type = self.method_type_for(asset, depreciation_type)
        method = self._factory.create(method_type)
        self._validate_asset(asset, method, asset.salvage_value)

        schedule_id = schedule_id or self._new_schedule_id(asset_id)
        logger.info(
            "schedule_generation_started",
            extra={
                "asset_id": asset_id,
                "tenant_id": tenant_id,
                "schedule_id": schedule_id,
                "method": method_type.value,
                "depreciation_type": depreciation_type.value,
            },
        )

        count = method.schedule_months(asset.useful_life_months, base_context(asset))
        periods, accumulated = self._run_periods(
            asset,
            method,
            schedule_id,
            salvage_value=asset.salvage_value,
            first_period=1,
            count=count,
            life_months=asset.useful_life_months,
            accumulated=ZERO,
        )

        schedule = self._build_schedule(
            schedule_id, asset, tenant_id, depreciation_type, method_type,
            asset.salvage_value, asset.useful_life_months, periods,
        )
        logger.info(
            "schedule_generation_completed",
            extra={
                "asset_id": asset_id,
                "schedule_id": schedule_id,
                "period_count": len(periods),
                "total_depreciation": accumulated,
                "duration_ms": round((time.monotonic() - t0) * 1000, 2),
            },
        )
        return schedule

    def _build_schedule(
        self,
        schedule_id: str,
        asset: AssetRecord,
        tenant_id: str,
        depreciation_type: DepreciationType,
        method_type: DepreciationMethodType,
        salvage_value: Decimal,
        useful_life_months: int,
        periods: Sequence[SchedulePeriod],
        adjustment_reason: str | None = None,
        cost: Decimal | None = None,
    ) -> DepreciationSchedule:
        acquisition = asset.acquisition_date
        end_date = add_months(acquisition, max(useful_life_months, len(periods)))
        return DepreciationSchedule(
            schedule_id=schedule_id,
            asset_id=asset.asset_id,
            tenant_id=tenant_id,
            depreciation_type=depreciation_type,
            method=method_type,
            cost=asset.cost if cost is None else cost,
            salvage_value=salvage_value,
            useful_life_months=useful_life_months,
            start_date=acquisition,
            end_date=end_date - timedelta(days=1),
            periods=tuple(periods),
            currency=asset.currency,
            prorate_convention=ProrateConvention.DAILY,
            status=ScheduleStatus.CALCULATED,
            adjustment_reason=adjustment_reason,
        )

    def validate_adjustment(
        self,
        asset_id: str,
        adjustments: ScheduleAdjustment | Mapping[str, Any],
    ) -> list[str]:
        """Problems with an adjustment request (empty when it can be applied)."""
        asset = self._get_asset(asset_id)
        if not isinstance(adjustments, ScheduleAdjustment):
            adjustments = ScheduleAdjustment.from_mapping(adjustments)

        errors: list[str] = []
        life = (
            adjustments.useful_life_months
            if adjustments.useful_life_months is not None
            else asset.useful_life_months
        )
        salvage = (
            adjustments.salvage_value
            if adjustments.salvage_value is not None
            else asset.salvage_value
        )
        cost = adjustments.cost if adjustments.cost is not None else asset.cost
        if adjustments.from_period_number < 1:
            errors.append("From period number must be at least 1")
        if life <= 0:
            errors.append("Useful life months must be positive")
        elif adjustments.from_period_number > life:
            errors.append("From period number is beyond the adjusted useful life")
        if cost <= ZERO:
            errors.append("Cost must be positive")
        if salvage < ZERO:
            errors.append("Salvage value cannot be negative")
        if salvage > cost:
            errors.append("Salvage value cannot exceed cost")
        if adjustments.method is not None and not self._factory.is_method_available(
            adjustments.method
        ):
            errors.append(f"Depreciation method not available: {adjustments.method.value}")
        return errors

    def adjust(
        self,
        asset_id: str,
        tenant_id: str,
        adjustments: ScheduleAdjustment | Mapping[str, Any],
        depreciation_type: DepreciationType = DepreciationType.BOOK,
        schedule_id: str | None = None,
    ) -> DepreciationSchedule:
        """
        Re-plan the schedule from ``adjustments.from_period_number`` onward.

        Phase 1 replays the original method, life and salvage for periods
        ``1 .. from - 1`` to rebuild historical accumulated depreciation.
        Phase 2 generates the remaining periods under the new parameters,
        starting from that rebuilt book value.  The returned schedule holds
        the replayed history followed by the regenerated future, which is
        marked ADJUSTED.

        Raises:
            AssetNotFoundError: Unknown asset.
            DepreciationValidationError: Invalid asset inputs.
            InvalidScheduleAdjustmentError: Invalid adjustment request.
        """
        t0 = time.monotonic()
        asset = self._get_asset(asset_id)
        if not isinstance(adjustments, ScheduleAdjustment):
            adjustments = ScheduleAdjustment.from_mapping(adjustments)
        depreciation_type = DepreciationType(depreciation_type)

        errors: list[str] = []
        if asset.cost <= ZERO:
            errors.append("Cost must be positive")
        if asset.useful_life_months <= 0:
            errors.append("Useful life months must be positive")
        if asset.salvage_value > asset.cost:
            errors.append("Salvage value cannot exceed cost")
        if errors:
            raise DepreciationValidationError(errors, subject=asset_id)

        adjustment_errors = self.validate_adjustment(asset_id, adjustments)
        if adjustment_errors:
            logger.warning(
                "schedule_adjustment_rejected",
                extra={"asset_id": asset_id, "errors": adjustment_errors},
            )
            raise InvalidScheduleAdjustmentError(adjustment_errors, subject=asset_id)

        original_type = self.method_type_for(asset, depreciation_type)
        original_method = self._factory.create(original_type)
        new_type = adjustments.method or original_type
        new_method = self._factory.create(new_type)
        new_life = (
            adjustments.useful_life_months
            if adjustments.useful_life_months is not None
            else asset.useful_life_months
        )
        new_salvage = (
            adjustments.salvage_value
            if adjustments.salvage_value is not None
            else asset.salvage_value
        )
        new_cost = adjustments.cost if adjustments.cost is not None else asset.cost
        from_period = adjustments.from_period_number
        schedule_id = schedule_id or self._new_schedule_id(asset_id)

        # Phase 1: replay history exactly as originally scheduled
        history, accumulated = self._run_periods(
            asset,
            original_method,
            schedule_id,
            salvage_value=asset.salvage_value,
            first_period=1,
            count=from_period - 1,
            life_months=asset.useful_life_months,
            accumulated=ZERO,
        )

        # Phase 2: regenerate the future under the new parameters
        remaining = max(0, new_life - from_period + 1)
        future, accumulated = self._run_periods(
            asset,
            new_method,
            schedule_id,
            salvage_value=new_salvage,
            first_period=from_period,
            count=remaining,
            life_months=remaining,
            accumulated=accumulated,
            cost=new_cost,
            rebase=True,
        )
        future = [p.mark_adjusted() for p in future]

        schedule = self._build_schedule(
            schedule_id, asset, tenant_id, depreciation_type, new_type,
            new_salvage, new_life, [*history, *future],
            adjustment_reason=adjustments.reason or None,
            cost=new_cost,
        )
        logger.info(
            "schedule_adjusted",
            extra={
                "asset_id": asset_id,
                "schedule_id": schedule_id,
                "from_period_number": from_period,
                "replayed_periods": len(history),
                "regenerated_periods": len(future),
                "method": new_type.value,
                "useful_life_months": new_life,
                "cost": new_cost,
                "salvage_value": new_salvage,
                "reason": adjustments.reason,
                "duration_ms": round((time.monotonic() - t0) * 1000, 2),
            },
        )
        return schedule

    def regenerate_from_period(
        self,
        schedule: DepreciationSchedule,
        from_period_number: int,
        adjustments: ScheduleAdjustment | Mapping[str, Any] | None = None,
    ) -> DepreciationSchedule:
        """
        Regenerate an existing schedule's tail, keeping its head periods.

        The head periods of ``schedule`` (which may already be posted) are
        kept as they are.  The replayed accumulated depreciation is compared
        with the schedule's own figure at the cut-over, and a mismatch is
        logged.
        """
        if adjustments is None:
            adjustments = ScheduleAdjustment()
        elif not isinstance(adjustments, ScheduleAdjustment):
            adjustments = ScheduleAdjustment.from_mapping(adjustments)
        adjustments = replace(adjustments, from_period_number=from_period_number)

        regenerated = self.adjust(
            schedule.asset_id,
            schedule.tenant_id,
            adjustments,
            depreciation_type=schedule.depreciation_type,
            schedule_id=schedule.schedule_id,
        )

        head = [p for p in schedule.periods if p.period_number < from_period_number]
        tail = [p for p in regenerated.periods if p.period_number >= from_period_number]
        replayed = sum(
            (p.depreciation_amount for p in regenerated.periods
             if p.period_number < from_period_number),
            ZERO,
        )
        existing = sum((p.depreciation_amount for p in head), ZERO)
        if replayed != existing:
            logger.warning(
                "schedule_replay_mismatch",
                extra={
                    "schedule_id": schedule.schedule_id,
                    "from_period_number": from_period_number,
                    "replayed_accumulated": replayed,
                    "schedule_accumulated": existing,
                },
            )
        return regenerated.with_periods([*head, *tail])

    def recalculate_from_period(
        self, schedule: DepreciationSchedule, from_period_number: int
    ) -> DepreciationSchedule:
        """Regenerate the tail with the asset's current parameters."""
        return self.regenerate_from_period(
            schedule,
            from_period_number,
            ScheduleAdjustment(reason="recalculation"),
        )
