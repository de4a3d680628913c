"""
Depreciation Configuration Schema.

Defines the structure and defaults for depreciation settings: product tier,
method defaults and the rates used by the tax, annuity and revaluation
calculations.  Actual values are loaded from YAML at runtime by
``depreciation_config.loader``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from decimal import Decimal
from typing import Any, Self

from depreciation_engines.factory import (
    DepreciationMethodFactory,
    MethodDefaults,
    parse_method_type,
)
from depreciation_kernel.domain.currency import CurrencyRegistry
from depreciation_kernel.domain.types import DepreciationMethodType, TierLevel
from depreciation_kernel.domain.values import to_decimal
from depreciation_kernel.logging_config import get_logger

logger = get_logger("modules.assets.config")

_DECIMAL_FIELDS = (
    "macrs_bonus_rate",
    "bonus_rate",
    "annuity_interest_rate",
    "tax_rate",
    "significant_change_threshold",
)


@dataclass
class DepreciationConfig:
    """
    Configuration schema for the depreciation engine.

    Field defaults represent common practice. Override at instantiation:

        config = DepreciationConfig(
            tier=TierLevel.ENTERPRISE,
            tax_rate=Decimal("0.25"),
            disabled_methods=frozenset({DepreciationMethodType.ANNUITY}),
        )
    """

    # Product tier (gates method and revaluation availability)
    tier: TierLevel = TierLevel.BASIC

    # Methods
    default_method: DepreciationMethodType = DepreciationMethodType.STRAIGHT_LINE
    default_currency: str = "USD"
    prorate_daily: bool = False
    declining_switch_to_straight_line: bool = True
    disabled_methods: frozenset[DepreciationMethodType] = field(default_factory=frozenset)

    # Tax methods
    macrs_property_class: int = 5
    macrs_convention: str = "half_year"
    macrs_bonus_rate: Decimal = Decimal("0")
    bonus_rate: Decimal = Decimal("1.0")

    # Annuity
    annuity_interest_rate: Decimal = Decimal("0.10")
    annuity_include_interest: bool = False

    # Deferred tax
    tax_rate: Decimal = Decimal("0.21")

    # Forecasting
    default_forecast_periods: int = 12

    # Revaluation: warn when the change exceeds this share of book value
    significant_change_threshold: Decimal = Decimal("0.50")

    def __post_init__(self):
        self.tier = TierLevel.parse(self.tier)
        self.default_method = parse_method_type(self.default_method)
        self.default_currency = CurrencyRegistry.validate(self.default_currency)
        self.disabled_methods = frozenset(
            parse_method_type(m) for m in self.disabled_methods
        )
        for name in _DECIMAL_FIELDS:
            setattr(self, name, to_decimal(getattr(self, name), name))
        self.macrs_property_class = int(self.macrs_property_class)
        self.default_forecast_periods = int(self.default_forecast_periods)

        logger.info(
            "depreciation_config_initialized",
            extra={
                "tier": self.tier.name.lower(),
                "default_method": self.default_method.value,
                "default_currency": self.default_currency,
                "disabled_methods": sorted(m.value for m in self.disabled_methods),
                "tax_rate": str(self.tax_rate),
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with the standard defaults."""
        logger.info("depreciation_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """
        Create config from a flat dictionary of field values.

        Raises:
            ValueError: On keys that are not config fields.
        """
        logger.info(
            "depreciation_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown depreciation config keys: {', '.join(unknown)}")
        return cls(**data)

    def method_defaults(self) -> MethodDefaults:
        return MethodDefaults(
            prorate_daily=self.prorate_daily,
            declining_switch_to_straight_line=self.declining_switch_to_straight_line,
            macrs_property_class=self.macrs_property_class,
            macrs_convention=self.macrs_convention,
            macrs_bonus_rate=self.macrs_bonus_rate,
            bonus_rate=self.bonus_rate,
            annuity_interest_rate=self.annuity_interest_rate,
            annuity_include_interest=self.annuity_include_interest,
        )

    def build_factory(self) -> DepreciationMethodFactory:
        return DepreciationMethodFactory.create_for_config(self)
