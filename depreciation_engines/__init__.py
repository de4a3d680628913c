"""
Module: depreciation_engines
Responsibility:
    Package entrypoint re-exporting the depreciation calculation engines:
    method strategies, the tier-gated factory, schedule generation,
    forecasting and the tax/book engine.

Architecture position:
    Engines -- calculation layer.  Imports only ``depreciation_kernel``.
    MUST NOT import ``depreciation_modules`` or ``depreciation_config``.

Invariants enforced:
    - Engines never read wall time; services that stamp dates receive a
      ``Clock``.
    - Decimal-only arithmetic, cents rounding at method return.
    - Determinism: identical inputs always produce identical outputs.

Usage:
    from depreciation_engines import DepreciationMethodFactory, DepreciationScheduleGenerator
    from depreciation_engines.methods import StraightLineMethod, MACRSMethod
"""

from depreciation_engines.factory import (
    METHOD_TIERS,
    DepreciationMethodFactory,
    MethodDefaults,
    parse_method_type,
)
from depreciation_engines.forecast import (
    DepreciationForecast,
    DepreciationForecastService,
    PeriodForecast,
    remaining_life_months,
)
from depreciation_engines.methods import DepreciationContext, DepreciationMethod
from depreciation_engines.schedule import (
    DepreciationSchedule,
    DepreciationScheduleGenerator,
    ScheduleAdjustment,
    SchedulePeriod,
)
from depreciation_engines.tax_book import (
    TaxBookDepreciationEngine,
    TaxBookResult,
    TaxBookSchedule,
)

__all__ = [
    "METHOD_TIERS",
    "DepreciationContext",
    "DepreciationForecast",
    "DepreciationForecastService",
    "DepreciationMethod",
    "DepreciationMethodFactory",
    "DepreciationSchedule",
    "DepreciationScheduleGenerator",
    "MethodDefaults",
    "PeriodForecast",
    "ScheduleAdjustment",
    "SchedulePeriod",
    "TaxBookDepreciationEngine",
    "TaxBookResult",
    "TaxBookSchedule",
    "parse_method_type",
    "remaining_life_months",
]
