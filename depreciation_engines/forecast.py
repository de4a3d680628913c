"""
Depreciation Forecast Engine - forward projections without side effects.

Projects an asset's depreciation from its current accumulated position for
a number of periods, or for its remaining life, reusing the same method
strategies and per-period driver as the schedule generator.  Nothing is
written back to the asset provider.

Usage:
    from depreciation_engines.forecast import DepreciationForecastService

    service = DepreciationForecastService(asset_provider, factory, clock)
    forecast = service.forecast("A-100", number_of_periods=24)
    print(forecast.total_depreciation, forecast.yearly_summary())
"""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterator

from depreciation_engines.factory import DepreciationMethodFactory, parse_method_type
from depreciation_engines.schedule import base_context, period_amount
from depreciation_kernel.domain.asset import AssetRecord
from depreciation_kernel.domain.clock import Clock, SystemClock
from depreciation_kernel.domain.dates import add_months, period_key
from depreciation_kernel.domain.providers import AssetDataProvider
from depreciation_kernel.domain.types import DepreciationMethodType
from depreciation_kernel.domain.values import MONTHS_PER_YEAR, ZERO, round_money
from depreciation_kernel.exceptions import AssetNotFoundError, DepreciationValidationError
from depreciation_kernel.logging_config import get_logger

logger = get_logger("engines.forecast")


def remaining_life_months(
    useful_life_months: int,
    accumulated_depreciation: Decimal,
    depreciable_amount: Decimal,
) -> int:
    """
    Remaining life implied by the share of the depreciable amount used up.

    ``ceil(life x (1 - accumulated / depreciable))``, clamped to
    ``[0, life]`` and floored at 1 while any depreciation remains.  Used by
    forecasting, schedule recalculation and revaluation impact so the three
    always agree.
    """
    if useful_life_months <= 0 or depreciable_amount <= ZERO:
        return 0
    if accumulated_depreciation >= depreciable_amount:
        return 0
    used = accumulated_depreciation / depreciable_amount
    months = math.ceil(Decimal(useful_life_months) * (Decimal("1") - used))
    return min(useful_life_months, max(1, months))


@dataclass(frozen=True)
class PeriodForecast:
    """Projected depreciation for one future month."""

    period_number: int
    period_id: str
    start_date: date
    end_date: date
    depreciation_amount: Decimal
    net_book_value: Decimal  # after this period
    accumulated_depreciation: Decimal  # after this period


@dataclass(frozen=True)
class DepreciationForecast:
    """
    Snapshot of a projection: a finite, ordered sequence of periods.

    Immutable; re-run the service for a fresh projection.
    """

    asset_id: str
    method: DepreciationMethodType
    currency: str
    periods: tuple[PeriodForecast, ...] = ()

    def __iter__(self) -> Iterator[PeriodForecast]:
        return iter(self.periods)

    def __len__(self) -> int:
        return len(self.periods)

    @property
    def count(self) -> int:
        return len(self.periods)

    @property
    def total_depreciation(self) -> Decimal:
        return sum((p.depreciation_amount for p in self.periods), ZERO)

    @property
    def average_depreciation(self) -> Decimal:
        if not self.periods:
            return ZERO
        return round_money(self.total_depreciation / len(self.periods))

    @property
    def ending_book_value(self) -> Decimal | None:
        return self.periods[-1].net_book_value if self.periods else None

    def yearly_summary(self) -> dict[int, Decimal]:
        """Total projected depreciation per calendar year."""
        summary: dict[int, Decimal] = {}
        for p in self.periods:
            year = p.start_date.year
            summary[year] = summary.get(year, ZERO) + p.depreciation_amount
        return summary


class DepreciationForecastService:
    """Forward-looking depreciation projections for a single asset."""

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
    def _validate(asset: AssetRecord) -> None:
        errors: list[str] = []
        if asset.cost <= ZERO:
            errors.append("Cost must be positive")
        if asset.useful_life_months <= 0:
            errors.append("Useful life months must be positive")
        if asset.salvage_value < ZERO:
            errors.append("Salvage value cannot be negative")
        if asset.salvage_value > asset.cost:
            errors.append("Salvage value cannot exceed cost")
        if errors:
            raise DepreciationValidationError(errors, subject=asset.asset_id)

    @staticmethod
    def remaining_months_for(asset: AssetRecord) -> int:
        return remaining_life_months(
            asset.useful_life_months,
            asset.accumulated_depreciation,
            asset.depreciable_amount,
        )

    def forecast(
        self,
        asset_id: str,
        number_of_periods: int = 12,
        method: DepreciationMethodType | str | None = None,
        start_date: date | None = None,
    ) -> DepreciationForecast:
        """
        Project ``number_of_periods`` months from the asset's current position.

        Stops early once book value reaches salvage; every amount is capped
        so the running book value never drops below it.

        Raises:
            DepreciationValidationError: Non-positive period count or bad asset inputs.
            AssetNotFoundError: Unknown asset.
        """
        if number_of_periods <= 0:
            raise DepreciationValidationError(
                "Number of periods must be positive", subject=asset_id
            )
        t0 = time.monotonic()
        asset = self._get_asset(asset_id)
        self._validate(asset)

        method_type = parse_method_type(method or asset.method)
        method_impl = self._factory.create(method_type)
        start = start_date or self._clock.today()
        floor = ZERO if method_impl.ignores_salvage() else asset.salvage_value
        remaining = self.remaining_months_for(asset)
        elapsed = asset.useful_life_months - remaining

        accumulated = asset.accumulated_depreciation
        context = base_context(asset)
        periods: list[PeriodForecast] = []

        for m in range(1, number_of_periods + 1):
            book_value = asset.cost - accumulated
            if book_value <= floor:
                break
            period_start = add_months(start, m - 1)
            period_end = add_months(start, m) - timedelta(days=1)
            period_context = context.evolve(
                accumulated_depreciation=accumulated,
                remaining_months=max(0, remaining - m + 1),
                current_year=math.ceil((elapsed + m) / MONTHS_PER_YEAR),
                period_number=elapsed + m,
                units_produced=asset.units_for_period(period_key(period_start)),
            )
            amount = period_amount(
                method_impl, asset.cost, asset.salvage_value,
                period_start, period_end, period_context,
            )
            amount = min(amount, book_value - floor)
            accumulated += amount
            periods.append(
                PeriodForecast(
                    period_number=m,
                    period_id=period_key(period_start),
                    start_date=period_start,
                    end_date=period_end,
                    depreciation_amount=amount,
                    net_book_value=asset.cost - accumulated,
                    accumulated_depreciation=accumulated,
                )
            )

        result = DepreciationForecast(
            asset_id=asset_id,
            method=method_type,
            currency=asset.currency,
            periods=tuple(periods),
        )
        logger.info(
            "forecast_completed",
            extra={
                "asset_id": asset_id,
                "method": method_type.value,
                "requested_periods": number_of_periods,
                "period_count": result.count,
                "total_depreciation": result.total_depreciation,
                "duration_ms": round((time.monotonic() - t0) * 1000, 2),
            },
        )
        return result

    def forecast_remaining_life(
        self,
        asset_id: str,
        method: DepreciationMethodType | str | None = None,
        start_date: date | None = None,
    ) -> DepreciationForecast:
        """Forecast every month of the asset's remaining life (empty when none remains)."""
        asset = self._get_asset(asset_id)
        months = self.remaining_months_for(asset)
        if months == 0:
            return DepreciationForecast(
                asset_id=asset_id,
                method=parse_method_type(method or asset.method),
                currency=asset.currency,
            )
        return self.forecast(asset_id, months, method, start_date)

    def forecast_annual(
        self,
        asset_id: str,
        years: int,
        method: DepreciationMethodType | str | None = None,
        start_date: date | None = None,
    ) -> dict[int, Decimal]:
        """Projected depreciation per calendar year over the next ``years`` years."""
        return self.forecast(
            asset_id, years * MONTHS_PER_YEAR, method, start_date
        ).yearly_summary()

    def total_remaining_depreciation(self, asset_id: str) -> Decimal:
        asset = self._get_asset(asset_id)
        return max(ZERO, asset.depreciable_amount - asset.accumulated_depreciation)

    def projected_monthly_depreciation(self, asset_id: str) -> Decimal:
        """Straight average of what is left over the remaining months (at least one)."""
        asset = self._get_asset(asset_id)
        remaining = max(ZERO, asset.depreciable_amount - asset.accumulated_depreciation)
        months = max(1, self.remaining_months_for(asset))
        return round_money(remaining / months)
