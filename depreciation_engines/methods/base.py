"""
Depreciation method contract (``depreciation_engines.methods.base``).

Responsibility
--------------
Defines the strategy interface every depreciation method implements and
the immutable ``DepreciationContext`` that carries per-period inputs
(useful life, accumulated depreciation so far, remaining months, recovery
year and method-specific extras).

Architecture position
---------------------
**Engines layer** -- pure computation.  No I/O, no clock, no logging.
Methods are selected by ``depreciation_engines.factory`` and driven period
by period by the schedule generator and forecast service.

Invariants enforced
-------------------
* All numeric inputs and outputs use ``Decimal`` -- never ``float``.
* Results are rounded to cents (ROUND_HALF_UP) at the point of return.
* No method returns a negative amount, and no method returns more than
  the remaining depreciable amount for its basis.
* Degenerate inputs (zero life, nothing left to depreciate) return zero
  rather than raising; input validation is a separate step
  (``get_validation_errors`` / ``validate``) run before calculation.

Failure modes
-------------
* ``validate`` raises ``DepreciationValidationError`` carrying every
  message from ``get_validation_errors``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields, replace
from datetime import date
from decimal import Decimal
from typing import Any, ClassVar, Mapping

from depreciation_kernel.domain.types import DepreciationMethodType
from depreciation_kernel.domain.values import (
    DEFAULT_CURRENCY,
    ZERO,
    DepreciationAmount,
    to_decimal,
)
from depreciation_kernel.exceptions import DepreciationValidationError


@dataclass(frozen=True)
class DepreciationContext:
    """
    Per-period calculation inputs.

    ``recovery_year`` falls back to ``current_year`` when not given.
    Optional extras left as ``None`` mean "use the method's configured
    default".
    """

    useful_life_months: int = 0
    accumulated_depreciation: Decimal = ZERO
    remaining_months: int | None = None
    acquisition_date: date | None = None
    current_year: int = 1
    recovery_year: int | None = None
    period_number: int | None = None
    currency: str = DEFAULT_CURRENCY

    # Units of production
    units_produced: Decimal | None = None
    total_expected_units: Decimal | None = None

    # Annuity / MACRS / bonus extras
    interest_rate: Decimal | None = None
    bonus_rate: Decimal | None = None
    property_class: int | None = None
    convention: str | None = None
    is_new_property: bool = True
    first_year_only: bool | None = None
    prorate_daily: bool | None = None

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "accumulated_depreciation",
            to_decimal(self.accumulated_depreciation, "accumulated_depreciation"),
        )
        for name in ("units_produced", "total_expected_units", "interest_rate", "bonus_rate"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, to_decimal(value, name))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> DepreciationContext:
        """Build a context from a plain mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known and v is not None})

    def with_options(self, options: Mapping[str, Any]) -> DepreciationContext:
        """Overlay method options (e.g. an asset's ``method_options``)."""
        known = {f.name for f in fields(self)}
        updates = {k: v for k, v in options.items() if k in known and v is not None}
        return replace(self, **updates) if updates else self

    def evolve(self, **changes: Any) -> DepreciationContext:
        return replace(self, **changes)

    @property
    def effective_recovery_year(self) -> int:
        return self.recovery_year if self.recovery_year is not None else self.current_year


class DepreciationMethod(ABC):
    """
    Strategy interface: ``(cost, salvage, period window, context) -> amount``.

    Implementations are stateless apart from their construction-time
    configuration, so ``calculate`` is idempotent for identical inputs.
    """

    method_type: ClassVar[DepreciationMethodType]

    # True when calculate() returns a whole recovery year rather than a month
    annual_charge: ClassVar[bool] = False

    @abstractmethod
    def calculate(
        self,
        cost: Decimal,
        salvage_value: Decimal,
        period_start: date,
        period_end: date,
        context: DepreciationContext,
    ) -> DepreciationAmount:
        """Depreciation for one period, rounded to cents."""
        ...

    @abstractmethod
    def get_validation_errors(
        self,
        cost: Decimal,
        salvage_value: Decimal,
        context: DepreciationContext,
    ) -> list[str]:
        """Human-readable problems with the inputs (empty when valid)."""
        ...

    def validate(
        self,
        cost: Decimal,
        salvage_value: Decimal,
        context: DepreciationContext,
    ) -> None:
        errors = self.get_validation_errors(
            to_decimal(cost, "cost"), to_decimal(salvage_value, "salvage_value"), context
        )
        if errors:
            raise DepreciationValidationError(errors, subject=self.method_type.value)

    def is_accelerated(self) -> bool:
        return False

    def supports_prorate(self) -> bool:
        return False

    def requires_units_data(self) -> bool:
        return False

    def minimum_useful_life_months(self) -> int:
        return 1

    def should_switch_to_straight_line(
        self,
        book_value: Decimal,
        salvage_value: Decimal,
        remaining_months: int,
        declining_amount: Decimal,
    ) -> bool:
        return False

    def ignores_salvage(self) -> bool:
        """True for tax methods that recover the full cost basis."""
        return False

    def schedule_months(self, useful_life_months: int, context: DepreciationContext) -> int:
        """Number of monthly periods a full schedule spans."""
        return useful_life_months

    @property
    def name(self) -> str:
        return self.method_type.label

    @staticmethod
    def _result(
        amount: Decimal, context: DepreciationContext
    ) -> DepreciationAmount:
        """Round ``amount`` and report the running total after it."""
        return DepreciationAmount.of(
            amount,
            context.currency,
            context.accumulated_depreciation + amount,
        )

    @staticmethod
    def _basic_cost_errors(cost: Decimal, salvage_value: Decimal) -> list[str]:
        errors: list[str] = []
        if cost <= ZERO:
            errors.append("Cost must be positive")
        if salvage_value < ZERO:
            errors.append("Salvage value cannot be negative")
        return errors

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
