"""
In-memory collaborators for the depreciation services.

These implement the kernel ports (``AssetDataProvider``, ``PeriodProvider``)
plus a revaluation store, and stand in for a persistence layer in
embedding applications and tests.
"""

from __future__ import annotations

import re
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Iterable

from depreciation_kernel.domain.asset import AssetRecord
from depreciation_kernel.domain.dates import month_bounds, period_key
from depreciation_kernel.domain.values import AccountingPeriod, to_decimal
from depreciation_kernel.exceptions import AssetNotFoundError
from depreciation_kernel.logging_config import get_logger
from depreciation_modules.assets.models import AssetRevaluation

logger = get_logger("modules.assets.repository")

_PERIOD_ID = re.compile(r"^(\d{4})-(\d{2})$")


class InMemoryAssetProvider:
    """Asset records keyed by asset id."""

    def __init__(self, assets: Iterable[AssetRecord] = ()):
        self._assets: dict[str, AssetRecord] = {}
        for asset in assets:
            self.add(asset)

    def add(self, asset: AssetRecord) -> None:
        self._assets[asset.asset_id] = asset

    def get_asset(self, asset_id: str) -> AssetRecord | None:
        return self._assets.get(asset_id)

    def update_accumulated_depreciation(self, asset_id: str, amount: Decimal) -> None:
        """Replace the asset's accumulated depreciation with ``amount``."""
        asset = self._assets.get(asset_id)
        if asset is None:
            raise AssetNotFoundError(asset_id)
        self._assets[asset_id] = asset.with_accumulated(
            to_decimal(amount, "accumulated_depreciation")
        )

    def update_cost_basis(
        self, asset_id: str, cost: Decimal, salvage_value: Decimal
    ) -> AssetRecord:
        asset = self._assets.get(asset_id)
        if asset is None:
            raise AssetNotFoundError(asset_id)
        updated = asset.revalued(cost, salvage_value)
        self._assets[asset_id] = updated
        return updated

    def dispose(self, asset_id: str) -> None:
        asset = self._assets.get(asset_id)
        if asset is None:
            raise AssetNotFoundError(asset_id)
        self._assets[asset_id] = replace(asset, is_active=False, is_disposed=True)

    def __len__(self) -> int:
        return len(self._assets)


class InMemoryPeriodProvider:
    """
    Calendar-month accounting periods identified as ``YYYY-MM``.

    Explicitly added periods take precedence over the derived monthly ones.
    ``fiscal_year_start_month`` shifts the fiscal year label: with a July
    start, ``2024-08`` belongs to fiscal year 2025.
    """

    def __init__(
        self,
        periods: Iterable[AccountingPeriod] = (),
        fiscal_year_start_month: int = 1,
    ):
        if not 1 <= fiscal_year_start_month <= 12:
            raise ValueError("fiscal_year_start_month must be between 1 and 12")
        self._fiscal_start = fiscal_year_start_month
        self._periods: dict[str, AccountingPeriod] = {p.period_id: p for p in periods}

    def add(self, period: AccountingPeriod) -> None:
        self._periods[period.period_id] = period

    def _fiscal_year(self, d: date) -> int:
        if self._fiscal_start == 1 or d.month < self._fiscal_start:
            return d.year
        return d.year + 1

    def _monthly(self, d: date) -> AccountingPeriod:
        start, end = month_bounds(d)
        return AccountingPeriod(period_key(d), start, end, self._fiscal_year(d))

    def get_period(self, period_id: str) -> AccountingPeriod | None:
        if period_id in self._periods:
            return self._periods[period_id]
        match = _PERIOD_ID.match(period_id)
        if match is None:
            return None
        year, month = int(match.group(1)), int(match.group(2))
        if not 1 <= month <= 12:
            return None
        return self._monthly(date(year, month, 1))

    def get_period_for_date(self, on_date: date) -> AccountingPeriod | None:
        for period in self._periods.values():
            if period.contains(on_date):
                return period
        return self._monthly(on_date)


class InMemoryRevaluationRepository:
    """Revaluations keyed by id; history is kept in insertion order."""

    def __init__(self):
        self._revaluations: dict[str, AssetRevaluation] = {}

    def save(self, revaluation: AssetRevaluation) -> AssetRevaluation:
        self._revaluations[revaluation.id] = revaluation
        logger.debug(
            "revaluation_saved",
            extra={
                "revaluation_id": revaluation.id,
                "asset_id": revaluation.asset_id,
                "status": revaluation.status.value,
            },
        )
        return revaluation

    def get(self, revaluation_id: str) -> AssetRevaluation | None:
        return self._revaluations.get(revaluation_id)

    def for_asset(self, asset_id: str) -> list[AssetRevaluation]:
        return [r for r in self._revaluations.values() if r.asset_id == asset_id]

    def for_period(self, asset_id: str, period_id: str) -> AssetRevaluation | None:
        """Latest revaluation of the asset dated within ``period_id``."""
        matches = [
            r for r in self.for_asset(asset_id)
            if period_key(r.revaluation_date) == period_id
        ]
        return matches[-1] if matches else None

    def __len__(self) -> int:
        return len(self._revaluations)
