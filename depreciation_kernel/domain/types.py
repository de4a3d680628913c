"""
Enumerations shared by the depreciation engines and asset services.

All enums are ``str, Enum`` (or ``IntEnum`` for ordered tiers) so they
serialise as their value in logs, events and ``to_dict`` payloads.
"""

from __future__ import annotations

from enum import Enum, IntEnum


class DepreciationMethodType(str, Enum):
    """Depreciation method selector used by the factory."""

    STRAIGHT_LINE = "straight_line"
    STRAIGHT_LINE_DAILY = "straight_line_daily"  # SL with daily proration
    DOUBLE_DECLINING = "double_declining"
    DECLINING_150 = "declining_150"
    SUM_OF_YEARS = "sum_of_years"
    UNITS_OF_PRODUCTION = "units_of_production"
    ANNUITY = "annuity"
    MACRS = "macrs"
    BONUS = "bonus"

    @property
    def is_accelerated(self) -> bool:
        return self in (
            DepreciationMethodType.DOUBLE_DECLINING,
            DepreciationMethodType.DECLINING_150,
            DepreciationMethodType.SUM_OF_YEARS,
            DepreciationMethodType.MACRS,
        )

    @property
    def is_tax_method(self) -> bool:
        """Methods that only exist for tax books (zero-salvage basis)."""
        return self in (DepreciationMethodType.MACRS, DepreciationMethodType.BONUS)

    @property
    def label(self) -> str:
        return _METHOD_LABELS[self]


_METHOD_LABELS: dict[DepreciationMethodType, str] = {
    DepreciationMethodType.STRAIGHT_LINE: "Straight-Line",
    DepreciationMethodType.STRAIGHT_LINE_DAILY: "Straight-Line (Daily Prorate)",
    DepreciationMethodType.DOUBLE_DECLINING: "Double Declining Balance",
    DepreciationMethodType.DECLINING_150: "150% Declining Balance",
    DepreciationMethodType.SUM_OF_YEARS: "Sum-of-the-Years' Digits",
    DepreciationMethodType.UNITS_OF_PRODUCTION: "Units of Production",
    DepreciationMethodType.ANNUITY: "Annuity",
    DepreciationMethodType.MACRS: "MACRS",
    DepreciationMethodType.BONUS: "Bonus Depreciation",
}


class DepreciationType(str, Enum):
    """Which book a calculation is for."""

    BOOK = "book"
    TAX = "tax"


class DepreciationStatus(str, Enum):
    """Lifecycle of a single schedule period."""

    CALCULATED = "calculated"
    POSTED = "posted"
    REVERSED = "reversed"  # final
    ADJUSTED = "adjusted"


class ScheduleStatus(str, Enum):
    ACTIVE = "active"
    CALCULATED = "calculated"
    CLOSED = "closed"


class ProrateConvention(str, Enum):
    """First-period proration convention."""

    NONE = "none"
    DAILY = "daily"
    MONTHLY = "monthly"
    HALF_YEAR = "half_year"
    MID_QUARTER = "mid_quarter"
    MID_MONTH = "mid_month"


class RevaluationType(str, Enum):
    INCREMENT = "increment"
    DECREMENT = "decrement"

    def opposite(self) -> RevaluationType:
        if self is RevaluationType.INCREMENT:
            return RevaluationType.DECREMENT
        return RevaluationType.INCREMENT


class RevaluationStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    POSTED = "posted"
    REVERSED = "reversed"


class TierLevel(IntEnum):
    """
    Product tier gating method and feature availability.

    Compared as integers at the factory and service boundary; individual
    methods never check tiers themselves.
    """

    BASIC = 1
    ADVANCED = 2
    ENTERPRISE = 3

    @classmethod
    def parse(cls, value: str | int | TierLevel | None) -> TierLevel:
        """
        Parse a tier from config.

        Accepts a member, its integer level or its lower-case name. Anything
        unrecognised falls back to ``BASIC``.
        """
        if isinstance(value, TierLevel):
            return value
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                return cls.BASIC
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper(), cls.BASIC)
        return cls.BASIC
