"""
Fixed Asset Depreciation Module (``depreciation_modules.assets``).

Responsibility
--------------
Service facades for depreciation of a single asset: per-period charges,
schedules, forecasts, book/tax comparison, and IFRS-style revaluation.

Architecture position
---------------------
**Modules layer** -- configuration schema, records, events and service
facades that delegate all calculation to ``depreciation_engines``.

Invariants enforced
-------------------
* Tier gating happens only in the method factory (and the revaluation
  tier check); services never re-implement it.
* Historical schedule periods are replayed, never rewritten, on adjustment
  and revaluation.

Failure modes
-------------
* Typed ``DepreciationError`` subclasses from ``depreciation_kernel.exceptions``
  propagate to the caller after a ``*_failed`` warning is logged.

Audit relevance
---------------
Every calculation, schedule and revaluation is logged as a structured event
and announced through the ``EventDispatcher`` port.
"""

from depreciation_modules.assets.config import DepreciationConfig
from depreciation_modules.assets.events import (
    AssetRevaluedEvent,
    DepreciationCalculatedEvent,
    RecordingEventDispatcher,
    ScheduleAdjustedEvent,
    ScheduleGeneratedEvent,
)
from depreciation_modules.assets.models import AssetDepreciation, AssetRevaluation
from depreciation_modules.assets.repository import (
    InMemoryAssetProvider,
    InMemoryPeriodProvider,
    InMemoryRevaluationRepository,
)
from depreciation_modules.assets.revaluation import (
    AssetRevaluationService,
    RevaluationImpact,
)
from depreciation_modules.assets.service import DepreciationCalculator

__all__ = [
    "AssetDepreciation",
    "AssetRevaluation",
    "AssetRevaluationService",
    "AssetRevaluedEvent",
    "DepreciationCalculatedEvent",
    "DepreciationCalculator",
    "DepreciationConfig",
    "InMemoryAssetProvider",
    "InMemoryPeriodProvider",
    "InMemoryRevaluationRepository",
    "RecordingEventDispatcher",
    "RevaluationImpact",
    "ScheduleAdjustedEvent",
    "ScheduleGeneratedEvent",
]
