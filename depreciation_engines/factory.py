"""
Depreciation Method Factory - tier-gated method selection.

Maps a ``DepreciationMethodType`` to a configured method instance.  Tier
gating is a single integer comparison made here, at the boundary; method
classes never look at tiers.

Usage:
    from depreciation_engines.factory import DepreciationMethodFactory
    from depreciation_kernel.domain.types import DepreciationMethodType, TierLevel

    factory = DepreciationMethodFactory(tier=TierLevel.ADVANCED)
    method = factory.create(DepreciationMethodType.DOUBLE_DECLINING)
    factory.is_method_available(DepreciationMethodType.MACRS)  # False
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping

from depreciation_engines.methods import (
    AnnuityMethod,
    BonusMethod,
    Declining150Method,
    DepreciationMethod,
    DoubleDecliningMethod,
    MACRSMethod,
    StraightLineMethod,
    SumOfYearsMethod,
    UnitsOfProductionMethod,
)
from depreciation_kernel.domain.types import DepreciationMethodType, TierLevel
from depreciation_kernel.exceptions import TierNotAvailableError, UnsupportedMethodError
from depreciation_kernel.logging_config import get_logger

logger = get_logger("engines.factory")

M = DepreciationMethodType

METHOD_TIERS: Mapping[DepreciationMethodType, TierLevel] = MappingProxyType({
    M.STRAIGHT_LINE: TierLevel.BASIC,
    M.STRAIGHT_LINE_DAILY: TierLevel.BASIC,
    M.DOUBLE_DECLINING: TierLevel.ADVANCED,
    M.DECLINING_150: TierLevel.ADVANCED,
    M.SUM_OF_YEARS: TierLevel.ADVANCED,
    M.UNITS_OF_PRODUCTION: TierLevel.ENTERPRISE,
    M.ANNUITY: TierLevel.ENTERPRISE,
    M.MACRS: TierLevel.ENTERPRISE,
    M.BONUS: TierLevel.ENTERPRISE,
})


@dataclass(frozen=True)
class MethodDefaults:
    """Construction-time settings applied to every method the factory builds."""

    prorate_daily: bool = False
    declining_switch_to_straight_line: bool = True
    macrs_property_class: int = 5
    macrs_convention: str = "half_year"
    macrs_bonus_rate: Decimal = Decimal("0")
    bonus_rate: Decimal = Decimal("1.0")
    annuity_interest_rate: Decimal = Decimal("0.10")
    annuity_include_interest: bool = False


_BUILDERS: Mapping[DepreciationMethodType, Callable[[MethodDefaults], DepreciationMethod]] = (
    MappingProxyType({
        M.STRAIGHT_LINE: lambda d: StraightLineMethod(prorate_daily=d.prorate_daily),
        M.STRAIGHT_LINE_DAILY: lambda d: StraightLineMethod(prorate_daily=True),
        M.DOUBLE_DECLINING: lambda d: DoubleDecliningMethod(
            switch_to_straight_line=d.declining_switch_to_straight_line
        ),
        M.DECLINING_150: lambda d: Declining150Method(
            switch_to_straight_line=d.declining_switch_to_straight_line
        ),
        M.SUM_OF_YEARS: lambda d: SumOfYearsMethod(),
        M.UNITS_OF_PRODUCTION: lambda d: UnitsOfProductionMethod(),
        M.ANNUITY: lambda d: AnnuityMethod(
            interest_rate=d.annuity_interest_rate,
            include_interest_in_expense=d.annuity_include_interest,
        ),
        M.MACRS: lambda d: MACRSMethod(
            property_class=d.macrs_property_class,
            convention=d.macrs_convention,
            bonus_rate=d.macrs_bonus_rate,
        ),
        M.BONUS: lambda d: BonusMethod(bonus_rate=d.bonus_rate),
    })
)


def parse_method_type(method: DepreciationMethodType | str) -> DepreciationMethodType:
    """
    Coerce a method name to the enum.

    Raises:
        UnsupportedMethodError: For names that are not a known method.
    """
    if isinstance(method, DepreciationMethodType):
        return method
    try:
        return DepreciationMethodType(str(method).strip().lower())
    except ValueError:
        raise UnsupportedMethodError(str(method)) from None


class DepreciationMethodFactory:
    """
    Builds depreciation methods for a configured tier.

    Methods listed in ``disabled_methods`` raise ``UnsupportedMethodError``
    regardless of tier, which lets a deployment switch a method off
    explicitly instead of silently falling back to another one.
    """

    def __init__(
        self,
        tier: TierLevel | int | str = TierLevel.BASIC,
        defaults: MethodDefaults | None = None,
        disabled_methods: Iterable[DepreciationMethodType | str] = (),
    ):
        self._tier = TierLevel.parse(tier)
        self._defaults = defaults or MethodDefaults()
        self._disabled = frozenset(parse_method_type(m) for m in disabled_methods)

    @classmethod
    def create_for_config(cls, config: Any) -> DepreciationMethodFactory:
        """
        Factory for a configuration object.

        ``config`` needs ``tier``, ``disabled_methods`` and a
        ``method_defaults()`` returning ``MethodDefaults``.
        """
        return cls(
            tier=config.tier,
            defaults=config.method_defaults(),
            disabled_methods=config.disabled_methods,
        )

    @property
    def current_tier(self) -> TierLevel:
        return self._tier

    @property
    def current_tier_level(self) -> int:
        return int(self._tier)

    @property
    def defaults(self) -> MethodDefaults:
        return self._defaults

    @staticmethod
    def method_tier(method: DepreciationMethodType | str) -> TierLevel:
        """Minimum tier at which ``method`` can be created."""
        return METHOD_TIERS[parse_method_type(method)]

    def is_method_available(self, method: DepreciationMethodType | str) -> bool:
        try:
            method_type = parse_method_type(method)
        except UnsupportedMethodError:
            return False
        return method_type not in self._disabled and METHOD_TIERS[method_type] <= self._tier

    def available_methods(self) -> list[DepreciationMethodType]:
        return [m for m in DepreciationMethodType if self.is_method_available(m)]

    def create(self, method: DepreciationMethodType | str) -> DepreciationMethod:
        """
        Build the method for ``method``.

        Raises:
            UnsupportedMethodError: Unknown or disabled method.
            TierNotAvailableError: Method needs a higher tier.
        """
        method_type = parse_method_type(method)
        if method_type in self._disabled:
            logger.warning(
                "method_disabled",
                extra={"method": method_type.value},
            )
            raise UnsupportedMethodError(method_type.value)

        required = METHOD_TIERS[method_type]
        if required > self._tier:
            logger.warning(
                "method_tier_denied",
                extra={
                    "method": method_type.value,
                    "required_tier": int(required),
                    "current_tier": int(self._tier),
                },
            )
            raise TierNotAvailableError(
                f"Depreciation method {method_type.value}", int(required), int(self._tier)
            )

        instance = _BUILDERS[method_type](self._defaults)
        logger.debug(
            "method_created",
            extra={"method": method_type.value, "implementation": repr(instance)},
        )
        return instance

    # Convenience builders; all go through the same tier gate as create().

    def create_straight_line(self, prorate_daily: bool = False) -> DepreciationMethod:
        if prorate_daily:
            return self.create(M.STRAIGHT_LINE_DAILY)
        return self.create(M.STRAIGHT_LINE)

    def create_double_declining(self) -> DepreciationMethod:
        return self.create(M.DOUBLE_DECLINING)

    def create_declining_150(self) -> DepreciationMethod:
        return self.create(M.DECLINING_150)

    def create_sum_of_years(self) -> DepreciationMethod:
        return self.create(M.SUM_OF_YEARS)

    def create_units_of_production(self) -> DepreciationMethod:
        return self.create(M.UNITS_OF_PRODUCTION)
