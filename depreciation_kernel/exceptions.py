"""
Typed Exception Hierarchy for the Depreciation Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Depreciation figures end up in the general ledger and in tax filings, so
callers must be able to react to failures precisely.  Every error raised by
the kernel, the engines and the asset services:

  1. Has a TYPED exception class (catch by type, not by message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries its context as structured attributes (not just a message)

Example:

    try:
        schedule = generator.generate(asset_id, tenant_id)
    except DepreciationValidationError as e:
        return {"error": e.code, "errors": e.errors}
    except AssetNotFoundError as e:
        return {"error": e.code, "asset_id": e.asset_id}

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    DepreciationError (base)
    |
    +-- DepreciationValidationError
    |   +-- InvalidScheduleAdjustmentError
    |
    +-- CapabilityError
    |   +-- TierNotAvailableError
    |   +-- UnsupportedMethodError
    |
    +-- NotFoundError
    |   +-- AssetNotFoundError
    |   +-- ScheduleNotFoundError
    |   +-- RevaluationNotFoundError
    |   +-- PeriodNotFoundError
    |
    +-- DomainInvariantError
        +-- CurrencyMismatchError
        +-- InvalidCurrencyError
        +-- InvalidRevaluationSalvageError
        +-- InvalidPeriodTransitionError
        +-- AssetNotDepreciableError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                          | When Raised
----------------|-------------------------------|-------------------------------------
Validation      | VALIDATION_FAILED             | Bad cost/salvage/life/method inputs
                | INVALID_ADJUSTMENT            | Schedule adjustment rejected
----------------|-------------------------------|-------------------------------------
Capability      | TIER_NOT_AVAILABLE            | Method/feature above configured tier
                | UNSUPPORTED_METHOD            | Method disabled in this deployment
----------------|-------------------------------|-------------------------------------
Not found       | ASSET_NOT_FOUND               | Unknown asset id
                | SCHEDULE_NOT_FOUND            | Unknown schedule id
                | REVALUATION_NOT_FOUND         | Unknown revaluation id
                | PERIOD_NOT_FOUND              | Unknown accounting period
----------------|-------------------------------|-------------------------------------
Invariant       | CURRENCY_MISMATCH             | Mixed currencies in arithmetic
                | INVALID_CURRENCY              | Not a known ISO 4217 code
                | INVALID_REVALUATION_SALVAGE   | New salvage exceeds new cost
                | INVALID_PERIOD_TRANSITION     | Illegal schedule period status change
                | ASSET_NOT_DEPRECIABLE         | Asset inactive or disposed

All errors are raised synchronously.  Pure computation has nothing transient
to retry, so no error in this module is retryable.
===============================================================================
"""

from __future__ import annotations

from decimal import Decimal


class DepreciationError(Exception):
    """
    Base exception for all depreciation errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "DEPRECIATION_ERROR"


# Validation


class DepreciationValidationError(DepreciationError):
    """Inputs failed validation before any calculation took place."""

    code: str = "VALIDATION_FAILED"

    def __init__(self, errors: list[str] | str, subject: str | None = None):
        if isinstance(errors, str):
            errors = [errors]
        self.errors = list(errors)
        self.subject = subject
        prefix = f"Invalid depreciation inputs for {subject}" if subject else (
            "Invalid depreciation inputs"
        )
        super().__init__(f"{prefix}: {'; '.join(self.errors)}")


class InvalidScheduleAdjustmentError(DepreciationValidationError):
    """A schedule adjustment request was rejected."""

    code: str = "INVALID_ADJUSTMENT"


# Capability / tier


class CapabilityError(DepreciationError):
    """Base exception for features that are not available to the caller."""

    code: str = "CAPABILITY_ERROR"


class TierNotAvailableError(CapabilityError):
    """Requested method or feature needs a higher tier than configured."""

    code: str = "TIER_NOT_AVAILABLE"

    def __init__(self, feature: str, required_tier: int, current_tier: int):
        self.feature = feature
        self.required_tier = required_tier
        self.current_tier = current_tier
        super().__init__(
            f"{feature} requires tier {required_tier}, "
            f"current tier is {current_tier}"
        )


class UnsupportedMethodError(CapabilityError):
    """Depreciation method is switched off for this deployment."""

    code: str = "UNSUPPORTED_METHOD"

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Depreciation method not supported: {method}")


# Lookups


class NotFoundError(DepreciationError):
    """Base exception for lookups that found nothing."""

    code: str = "NOT_FOUND"


class AssetNotFoundError(NotFoundError):
    """Asset with given ID was not found."""

    code: str = "ASSET_NOT_FOUND"

    def __init__(self, asset_id: str):
        self.asset_id = asset_id
        super().__init__(f"Asset not found: {asset_id}")


class ScheduleNotFoundError(NotFoundError):
    """Depreciation schedule with given ID was not found."""

    code: str = "SCHEDULE_NOT_FOUND"

    def __init__(self, schedule_id: str):
        self.schedule_id = schedule_id
        super().__init__(f"Depreciation schedule not found: {schedule_id}")


class RevaluationNotFoundError(NotFoundError):
    """Revaluation with given ID was not found."""

    code: str = "REVALUATION_NOT_FOUND"

    def __init__(self, revaluation_id: str):
        self.revaluation_id = revaluation_id
        super().__init__(f"Revaluation not found: {revaluation_id}")


class PeriodNotFoundError(NotFoundError):
    """Accounting period with given ID was not found."""

    code: str = "PERIOD_NOT_FOUND"

    def __init__(self, period_id: str):
        self.period_id = period_id
        super().__init__(f"Accounting period not found: {period_id}")


# Domain invariants


class DomainInvariantError(DepreciationError):
    """Base exception for violated domain invariants."""

    code: str = "DOMAIN_INVARIANT_VIOLATED"


class CurrencyMismatchError(DomainInvariantError):
    """Arithmetic attempted across two different currencies."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Currency mismatch: expected {expected}, got {actual}")


class InvalidCurrencyError(DomainInvariantError):
    """Currency code is not a known ISO 4217 code."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Invalid ISO 4217 currency code: {currency}")


class InvalidRevaluationSalvageError(DomainInvariantError):
    """Salvage value after revaluation would exceed the revalued cost."""

    code: str = "INVALID_REVALUATION_SALVAGE"

    def __init__(self, asset_id: str, salvage_value: Decimal, cost: Decimal):
        self.asset_id = asset_id
        self.salvage_value = salvage_value
        self.cost = cost
        super().__init__(
            f"Salvage value {salvage_value} exceeds revalued cost {cost} "
            f"for asset {asset_id}"
        )


class InvalidPeriodTransitionError(DomainInvariantError):
    """Schedule period cannot move from its current status to the target."""

    code: str = "INVALID_PERIOD_TRANSITION"

    def __init__(self, period_id: str, from_status: str, to_status: str):
        self.period_id = period_id
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Period {period_id} cannot move from {from_status} to {to_status}"
        )


class AssetNotDepreciableError(DomainInvariantError):
    """Asset exists but is not in a state that allows depreciation."""

    code: str = "ASSET_NOT_DEPRECIABLE"

    def __init__(self, asset_id: str, reason: str):
        self.asset_id = asset_id
        self.reason = reason
        super().__init__(f"Asset {asset_id} cannot be depreciated: {reason}")
