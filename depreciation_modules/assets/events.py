"""
Depreciation domain events.

Frozen records emitted through the ``EventDispatcher`` port after an
operation has succeeded.  Delivery and ordering belong to the dispatcher.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from depreciation_kernel.domain.types import (
    DepreciationMethodType,
    DepreciationType,
    RevaluationType,
)
from depreciation_kernel.logging_config import get_logger

logger = get_logger("modules.assets.events")


@dataclass(frozen=True)
class DepreciationCalculatedEvent:
    """A depreciation charge was calculated for an asset and period."""
    depreciation_id: str
    asset_id: str
    tenant_id: str
    period_id: str
    depreciation_type: DepreciationType
    method: DepreciationMethodType
    amount: Decimal
    currency: str
    net_book_value_after: Decimal
    calculation_date: date

    @property
    def event_name(self) -> str:
        return "depreciation.calculated"


@dataclass(frozen=True)
class ScheduleGeneratedEvent:
    """A full-life schedule was generated."""
    schedule_id: str
    asset_id: str
    tenant_id: str
    depreciation_type: DepreciationType
    method: DepreciationMethodType
    period_count: int
    total_depreciation: Decimal
    generated_on: date

    @property
    def event_name(self) -> str:
        return "depreciation.schedule_generated"


@dataclass(frozen=True)
class ScheduleAdjustedEvent:
    """A schedule was re-planned from a cut-over period."""
    schedule_id: str
    asset_id: str
    tenant_id: str
    from_period_number: int
    method: DepreciationMethodType
    useful_life_months: int
    salvage_value: Decimal
    reason: str
    adjusted_on: date

    @property
    def event_name(self) -> str:
        return "depreciation.schedule_adjusted"


@dataclass(frozen=True)
class AssetRevaluedEvent:
    """An asset's carrying amount was revalued."""
    revaluation_id: str
    asset_id: str
    tenant_id: str
    revaluation_type: RevaluationType
    amount: Decimal
    currency: str
    previous_cost: Decimal
    new_cost: Decimal
    previous_net_book_value: Decimal
    new_net_book_value: Decimal
    reason: str
    revaluation_date: date
    gl_account_id: str | None = None

    @property
    def event_name(self) -> str:
        return "asset.revalued"


@dataclass
class RecordingEventDispatcher:
    """EventDispatcher that keeps every event in memory, in dispatch order."""
    events: list[Any] = field(default_factory=list)

    def dispatch(self, event: Any) -> None:
        self.events.append(event)
        logger.debug(
            "event_dispatched",
            extra={"event": getattr(event, "event_name", type(event).__name__)},
        )

    def of_type(self, event_type: type) -> list[Any]:
        return [e for e in self.events if isinstance(e, event_type)]

    def clear(self) -> None:
        self.events.clear()
