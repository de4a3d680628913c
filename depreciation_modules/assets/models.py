"""
Depreciation Domain Models.

The records of depreciation work: a calculated depreciation run for one
asset and period, and an asset revaluation.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from depreciation_kernel.domain.types import (
    DepreciationMethodType,
    DepreciationStatus,
    DepreciationType,
    RevaluationStatus,
    RevaluationType,
)
from depreciation_kernel.domain.values import BookValue, RevaluationAmount
from depreciation_kernel.exceptions import InvalidPeriodTransitionError


@dataclass(frozen=True)
class AssetDepreciation:
    """One depreciation charge for an asset and accounting period."""
    id: str
    asset_id: str
    tenant_id: str
    period_id: str
    depreciation_type: DepreciationType
    method: DepreciationMethodType
    amount: Decimal
    currency: str
    book_value_before: BookValue
    book_value_after: BookValue
    period_start: date
    period_end: date
    calculation_date: date
    status: DepreciationStatus = DepreciationStatus.CALCULATED
    journal_entry_id: str | None = None
    posting_date: date | None = None

    @property
    def net_book_value_before(self) -> Decimal:
        return self.book_value_before.net_book_value

    @property
    def net_book_value_after(self) -> Decimal:
        return self.book_value_after.net_book_value

    @property
    def is_posted(self) -> bool:
        return self.status is DepreciationStatus.POSTED

    def with_posting(self, journal_entry_id: str, posting_date: date) -> AssetDepreciation:
        if self.status not in (DepreciationStatus.CALCULATED, DepreciationStatus.ADJUSTED):
            raise InvalidPeriodTransitionError(
                self.id, self.status.value, DepreciationStatus.POSTED.value
            )
        return replace(
            self,
            status=DepreciationStatus.POSTED,
            journal_entry_id=journal_entry_id,
            posting_date=posting_date,
        )

    def reverse(self) -> AssetDepreciation:
        if self.status is not DepreciationStatus.POSTED:
            raise InvalidPeriodTransitionError(
                self.id, self.status.value, DepreciationStatus.REVERSED.value
            )
        return replace(self, status=DepreciationStatus.REVERSED)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "asset_id": self.asset_id,
            "tenant_id": self.tenant_id,
            "period_id": self.period_id,
            "depreciation_type": self.depreciation_type.value,
            "method": self.method.value,
            "amount": str(self.amount),
            "currency": self.currency,
            "book_value_before": self.book_value_before.to_dict(),
            "book_value_after": self.book_value_after.to_dict(),
            "period_start": self.period_start.isoformat(),
            "period_end": self.period_end.isoformat(),
            "calculation_date": self.calculation_date.isoformat(),
            "status": self.status.value,
            "journal_entry_id": self.journal_entry_id,
        }


@dataclass(frozen=True)
class AssetRevaluation:
    """
    A change to an asset's carrying amount.

    Status moves PENDING -> APPROVED -> POSTED; a posted or pending
    revaluation can be reversed, which records a new revaluation with the
    book values swapped and marks this one REVERSED.
    """
    id: str
    asset_id: str
    tenant_id: str
    revaluation_date: date
    revaluation_type: RevaluationType
    previous_book_value: BookValue
    new_book_value: BookValue
    amount: RevaluationAmount
    reason: str
    created_at: datetime
    gl_account_id: str | None = None
    status: RevaluationStatus = RevaluationStatus.PENDING
    journal_entry_id: str | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    new_schedule_id: str | None = None
    reverses_revaluation_id: str | None = None

    def is_increment(self) -> bool:
        return self.revaluation_type is RevaluationType.INCREMENT

    def is_decrement(self) -> bool:
        return self.revaluation_type is RevaluationType.DECREMENT

    @property
    def is_pending(self) -> bool:
        return self.status is RevaluationStatus.PENDING

    @property
    def is_posted(self) -> bool:
        return self.status is RevaluationStatus.POSTED and self.journal_entry_id is not None

    @property
    def is_reversed(self) -> bool:
        return self.status is RevaluationStatus.REVERSED

    @property
    def is_reversal(self) -> bool:
        return self.reverses_revaluation_id is not None

    @property
    def previous_net_book_value(self) -> Decimal:
        return self.previous_book_value.net_book_value

    @property
    def new_net_book_value(self) -> Decimal:
        return self.new_book_value.net_book_value

    def with_approval(self, approved_by: str, approved_at: datetime) -> AssetRevaluation:
        if self.status is not RevaluationStatus.PENDING:
            raise InvalidPeriodTransitionError(
                self.id, self.status.value, RevaluationStatus.APPROVED.value
            )
        return replace(
            self,
            status=RevaluationStatus.APPROVED,
            approved_by=approved_by,
            approved_at=approved_at,
        )

    def with_posting(self, journal_entry_id: str) -> AssetRevaluation:
        if self.status not in (RevaluationStatus.PENDING, RevaluationStatus.APPROVED):
            raise InvalidPeriodTransitionError(
                self.id, self.status.value, RevaluationStatus.POSTED.value
            )
        return replace(self, status=RevaluationStatus.POSTED, journal_entry_id=journal_entry_id)

    def with_schedule(self, schedule_id: str) -> AssetRevaluation:
        return replace(self, new_schedule_id=schedule_id)

    def mark_reversed(self) -> AssetRevaluation:
        if self.status is RevaluationStatus.REVERSED:
            raise InvalidPeriodTransitionError(
                self.id, self.status.value, RevaluationStatus.REVERSED.value
            )
        return replace(self, status=RevaluationStatus.REVERSED)

    def as_reversal(
        self, reversal_id: str, reason: str, revaluation_date: date, created_at: datetime
    ) -> AssetRevaluation:
        """New pending revaluation that undoes this one."""
        return AssetRevaluation(
            id=reversal_id,
            asset_id=self.asset_id,
            tenant_id=self.tenant_id,
            revaluation_date=revaluation_date,
            revaluation_type=self.revaluation_type.opposite(),
            previous_book_value=self.new_book_value,
            new_book_value=self.previous_book_value,
            amount=self.amount.negate(),
            reason=f"Reversal: {reason}",
            created_at=created_at,
            gl_account_id=self.gl_account_id,
            reverses_revaluation_id=self.id,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "asset_id": self.asset_id,
            "tenant_id": self.tenant_id,
            "revaluation_date": self.revaluation_date.isoformat(),
            "revaluation_type": self.revaluation_type.value,
            "previous_book_value": self.previous_book_value.to_dict(),
            "new_book_value": self.new_book_value.to_dict(),
            "amount": self.amount.to_dict(),
            "reason": self.reason,
            "gl_account_id": self.gl_account_id,
            "status": self.status.value,
            "journal_entry_id": self.journal_entry_id,
            "approved_by": self.approved_by,
            "new_schedule_id": self.new_schedule_id,
            "reverses_revaluation_id": self.reverses_revaluation_id,
        }
