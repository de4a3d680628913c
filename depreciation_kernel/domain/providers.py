"""
Collaborator ports consumed by the depreciation services.

The calculation core never reaches into storage. Asset attributes, accounting
periods and event delivery are supplied through these Protocols; the
``depreciation_modules.assets.repository`` module ships in-memory versions.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Protocol, runtime_checkable

from depreciation_kernel.domain.asset import AssetRecord
from depreciation_kernel.domain.values import AccountingPeriod


@runtime_checkable
class AssetDataProvider(Protocol):
    """Lookup of asset attributes by id."""

    def get_asset(self, asset_id: str) -> AssetRecord | None:
        """Return the asset, or None when the id is unknown."""
        ...

    def update_accumulated_depreciation(
        self, asset_id: str, accumulated_depreciation: Decimal
    ) -> None:
        ...


@runtime_checkable
class PeriodProvider(Protocol):
    """Resolution of accounting period identifiers and boundaries."""

    def get_period(self, period_id: str) -> AccountingPeriod | None:
        ...

    def get_period_for_date(self, on_date: date) -> AccountingPeriod | None:
        ...


@runtime_checkable
class EventDispatcher(Protocol):
    """Delivery of domain events after a successful operation."""

    def dispatch(self, event: Any) -> None:
        ...
