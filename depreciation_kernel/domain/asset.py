"""AssetRecord -- the asset attributes the depreciation core reads."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Any, Mapping

from depreciation_kernel.domain.currency import CurrencyRegistry
from depreciation_kernel.domain.types import DepreciationMethodType
from depreciation_kernel.domain.values import (
    DEFAULT_CURRENCY,
    ZERO,
    BookValue,
    DepreciationLife,
    to_decimal,
)


@dataclass(frozen=True)
class AssetRecord:
    """
    Snapshot of an asset as supplied by an AssetDataProvider.

    ``method_options`` carries method-specific inputs (``property_class``,
    ``interest_rate``, ``bonus_rate``, ``is_new_property``...) and is merged
    into the calculation context. ``units_produced`` maps period ids
    (``YYYY-MM``) to units consumed in that period for units-of-production
    assets.
    """

    asset_id: str
    cost: Decimal
    useful_life_months: int
    acquisition_date: date
    salvage_value: Decimal = ZERO
    accumulated_depreciation: Decimal = ZERO
    method: DepreciationMethodType = DepreciationMethodType.STRAIGHT_LINE
    tax_method: DepreciationMethodType | None = None
    currency: str = DEFAULT_CURRENCY
    tenant_id: str = ""
    is_active: bool = True
    is_disposed: bool = False
    total_expected_units: Decimal | None = None
    units_produced: Mapping[str, Decimal] = field(default_factory=dict)
    method_options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "cost", to_decimal(self.cost, "cost"))
        object.__setattr__(self, "salvage_value", to_decimal(self.salvage_value, "salvage_value"))
        object.__setattr__(
            self,
            "accumulated_depreciation",
            to_decimal(self.accumulated_depreciation, "accumulated_depreciation"),
        )
        object.__setattr__(self, "method", DepreciationMethodType(self.method))
        if self.tax_method is not None:
            object.__setattr__(self, "tax_method", DepreciationMethodType(self.tax_method))
        object.__setattr__(self, "currency", CurrencyRegistry.validate(self.currency))
        if self.total_expected_units is not None:
            object.__setattr__(
                self,
                "total_expected_units",
                to_decimal(self.total_expected_units, "total_expected_units"),
            )

    @property
    def net_book_value(self) -> Decimal:
        return self.cost - self.accumulated_depreciation

    @property
    def depreciable_amount(self) -> Decimal:
        return self.cost - self.salvage_value

    @property
    def is_depreciable(self) -> bool:
        return self.is_active and not self.is_disposed

    def book_value(self) -> BookValue:
        return BookValue(self.cost, self.salvage_value, self.accumulated_depreciation)

    def life(self) -> DepreciationLife:
        return DepreciationLife.from_months(
            self.useful_life_months, self.cost, self.salvage_value
        )

    def units_for_period(self, period_id: str) -> Decimal:
        return to_decimal(self.units_produced.get(period_id, ZERO), "units_produced")

    def with_accumulated(self, accumulated_depreciation: Decimal) -> AssetRecord:
        return replace(self, accumulated_depreciation=accumulated_depreciation)

    def revalued(self, cost: Decimal, salvage_value: Decimal) -> AssetRecord:
        return replace(self, cost=cost, salvage_value=salvage_value)
