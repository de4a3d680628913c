"""Pure domain types for depreciation: values, enums, dates, ports."""

from depreciation_kernel.domain.asset import AssetRecord
from depreciation_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from depreciation_kernel.domain.types import (
    DepreciationMethodType,
    DepreciationStatus,
    DepreciationType,
    ProrateConvention,
    RevaluationStatus,
    RevaluationType,
    ScheduleStatus,
    TierLevel,
)
from depreciation_kernel.domain.values import (
    AccountingPeriod,
    BookValue,
    DepreciationAmount,
    DepreciationLife,
    RevaluationAmount,
)

__all__ = [
    "AccountingPeriod",
    "AssetRecord",
    "BookValue",
    "Clock",
    "DepreciationAmount",
    "DepreciationLife",
    "DepreciationMethodType",
    "DepreciationStatus",
    "DepreciationType",
    "DeterministicClock",
    "ProrateConvention",
    "RevaluationAmount",
    "RevaluationStatus",
    "RevaluationType",
    "ScheduleStatus",
    "SystemClock",
    "TierLevel",
]
