"""
Asset Revaluation Service (``depreciation_modules.assets.revaluation``).

Responsibility
--------------
Records IFRS-style revaluations of an asset's carrying amount, routes the
change (increments to the revaluation reserve, decrements to expense after
the reserve is used up), reverses revaluations, and regenerates the
depreciation schedule on the revalued basis.

Architecture position
---------------------
**Modules layer**.  Reads assets through the ``AssetDataProvider`` port and
stores revaluations in a revaluation repository.  The asset master data is
never rewritten: the latest revaluation that is not reversed defines the
asset's current cost and salvage value.  Schedule regeneration goes through
``DepreciationScheduleGenerator.adjust`` so the replay-then-regenerate rule
holds for revaluations too.

Invariants enforced
-------------------
* Revaluation requires tier ADVANCED or above.
* New salvage value never exceeds the new cost.
* Accumulated depreciation is carried over unchanged by a revaluation.
* A reversal swaps previous and new book values and negates the amount;
  a reversed revaluation cannot be reversed again.
* Remaining life after a revaluation uses the same formula as forecasting
  (``remaining_life_months``).

Failure modes
-------------
* ``TierNotAvailableError``: tier below ADVANCED.
* ``AssetNotFoundError`` / ``RevaluationNotFoundError``: unknown ids.
* ``AssetNotDepreciableError``: disposed asset.
* ``InvalidRevaluationSalvageError``: salvage above the new cost.
* ``InvalidPeriodTransitionError``: approving, posting or reversing a
  revaluation in the wrong status.

Audit relevance
---------------
Every revaluation, approval, posting and reversal is logged with asset id,
amounts and the resulting status, and an ``AssetRevaluedEvent`` is
dispatched for revaluations and reversals.

Usage::

    service = AssetRevaluationService(assets, factory, dispatcher, clock=clock)
    revaluation, schedule = service.process_full_revaluation(
        "A-100", fair_value=Decimal("9000"), salvage_value=Decimal("500"),
        reason="annual fair value review", revaluation_reserve_account="3200",
    )
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import uuid4

from depreciation_engines.factory import DepreciationMethodFactory
from depreciation_engines.forecast import remaining_life_months
from depreciation_engines.schedule import (
    DepreciationSchedule,
    DepreciationScheduleGenerator,
    ScheduleAdjustment,
)
from depreciation_kernel.domain.asset import AssetRecord
from depreciation_kernel.domain.clock import Clock, SystemClock
from depreciation_kernel.domain.providers import AssetDataProvider, EventDispatcher
from depreciation_kernel.domain.types import (
    DepreciationType,
    RevaluationStatus,
    RevaluationType,
    TierLevel,
)
from depreciation_kernel.domain.values import (
    MONTHS_PER_YEAR,
    ZERO,
    BookValue,
    RevaluationAmount,
    round_money,
    to_decimal,
)
from depreciation_kernel.exceptions import (
    AssetNotDepreciableError,
    AssetNotFoundError,
    DepreciationError,
    DepreciationValidationError,
    InvalidRevaluationSalvageError,
    RevaluationNotFoundError,
    TierNotAvailableError,
)
from depreciation_kernel.logging_config import get_logger
from depreciation_modules.assets.events import AssetRevaluedEvent, ScheduleAdjustedEvent
from depreciation_modules.assets.models import AssetRevaluation
from depreciation_modules.assets.repository import InMemoryRevaluationRepository

logger = get_logger("modules.assets.revaluation")

DEFAULT_SIGNIFICANT_CHANGE = Decimal("0.50")


@dataclass(frozen=True)
class RevaluationImpact:
    """Projected effect of revaluing an asset to a proposed net book value."""
    previous_value: Decimal
    new_value: Decimal
    revaluation_amount: Decimal
    revaluation_type: RevaluationType
    depreciation_impact: Decimal  # change in depreciable base
    remaining_months: int
    previous_annual_depreciation: Decimal
    new_annual_depreciation: Decimal
    reserve_impact: Decimal

    @property
    def annual_depreciation_change(self) -> Decimal:
        return self.new_annual_depreciation - self.previous_annual_depreciation

    def to_dict(self) -> dict[str, Any]:
        return {
            "previous_value": str(self.previous_value),
            "new_value": str(self.new_value),
            "revaluation_amount": str(self.revaluation_amount),
            "revaluation_type": self.revaluation_type.value,
            "depreciation_impact": str(self.depreciation_impact),
            "remaining_months": self.remaining_months,
            "previous_annual_depreciation": str(self.previous_annual_depreciation),
            "new_annual_depreciation": str(self.new_annual_depreciation),
            "annual_depreciation_change": str(self.annual_depreciation_change),
            "reserve_impact": str(self.reserve_impact),
        }


class _RevaluedAssetView:
    """AssetDataProvider that substitutes one asset record."""

    def __init__(self, provider: AssetDataProvider, asset: AssetRecord):
        self._provider = provider
        self._asset = asset

    def get_asset(self, asset_id: str) -> AssetRecord | None:
        if asset_id == self._asset.asset_id:
            return self._asset
        return self._provider.get_asset(asset_id)

    def update_accumulated_depreciation(self, asset_id: str, amount: Decimal) -> None:
        self._provider.update_accumulated_depreciation(asset_id, amount)


class AssetRevaluationService:
    """
    Revaluation lifecycle for fixed assets.

    Contract
    --------
    * ``revalue`` records a PENDING revaluation; ``approve`` and
      ``post_to_gl`` move it forward; ``reverse`` records the undoing
      revaluation and marks the original REVERSED.
    * ``process_full_revaluation`` restates the carrying amount to fair
      value and regenerates the schedule in one step.

    Guarantees
    ----------
    * Historical schedule periods are replayed, never rewritten.
    * Clock is injectable for deterministic testing.

    Non-goals
    ---------
    * Does NOT create journal entries; ``post_to_gl`` only assigns the
      journal reference a posting layer would use.
    """

    def __init__(
        self,
        asset_provider: AssetDataProvider,
        method_factory: DepreciationMethodFactory | None = None,
        event_dispatcher: EventDispatcher | None = None,
        repository: InMemoryRevaluationRepository | None = None,
        clock: Clock | None = None,
        significant_change_threshold: Decimal | str = DEFAULT_SIGNIFICANT_CHANGE,
    ):
        self._assets = asset_provider
        self._factory = method_factory or DepreciationMethodFactory()
        self._dispatcher = event_dispatcher
        self._repository = repository or InMemoryRevaluationRepository()
        self._clock = clock or SystemClock()
        self._threshold = to_decimal(
            significant_change_threshold, "significant_change_threshold"
        )

    @property
    def current_tier(self) -> TierLevel:
        return self._factory.current_tier

    # =========================================================================
    # Lookups
    # =========================================================================

    def _require_tier(self) -> None:
        if self.current_tier < TierLevel.ADVANCED:
            logger.warning(
                "revaluation_tier_denied",
                extra={"current_tier": int(self.current_tier)},
            )
            raise TierNotAvailableError(
                "Asset revaluation", int(TierLevel.ADVANCED), int(self.current_tier)
            )

    def _get_asset(self, asset_id: str) -> AssetRecord:
        asset = self._assets.get_asset(asset_id)
        if asset is None:
            raise AssetNotFoundError(asset_id)
        return asset

    def _get_revaluation(self, revaluation_id: str) -> AssetRevaluation:
        revaluation = self._repository.get(revaluation_id)
        if revaluation is None:
            raise RevaluationNotFoundError(revaluation_id)
        return revaluation

    def _effective_asset(self, asset: AssetRecord) -> AssetRecord:
        """Asset with the cost basis of its latest revaluation that is not reversed."""
        active = [
            r for r in self._repository.for_asset(asset.asset_id)
            if r.status is not RevaluationStatus.REVERSED
        ]
        if not active:
            return asset
        latest = active[-1].new_book_value
        return asset.revalued(latest.cost, latest.salvage_value)

    def _dispatch(self, event: Any) -> None:
        if self._dispatcher is not None:
            self._dispatcher.dispatch(event)

    @staticmethod
    def _new_revaluation_id(asset_id: str) -> str:
        return f"REV-{asset_id}-{uuid4().hex[:13]}"

    @staticmethod
    def _new_journal_entry_id() -> str:
        return f"JE-{uuid4().hex[:13]}"

    def find_by_id(self, revaluation_id: str) -> AssetRevaluation | None:
        return self._repository.get(revaluation_id)

    def history(self, asset_id: str) -> list[AssetRevaluation]:
        """Revaluations of the asset, oldest first."""
        return sorted(
            self._repository.for_asset(asset_id), key=lambda r: r.revaluation_date
        )

    def for_period(self, asset_id: str, period_id: str) -> AssetRevaluation | None:
        return self._repository.for_period(asset_id, period_id)

    def current_book_value(self, asset_id: str) -> BookValue:
        """Book value on the current (possibly revalued) cost basis."""
        return self._effective_asset(self._get_asset(asset_id)).book_value()

    def reserve_balance(self, asset_id: str) -> Decimal:
        """
        Revaluation reserve built up by the asset's increments.

        Decrements draw the reserve down before anything is expensed.
        Reversed revaluations and reversal records are left out.
        """
        balance = ZERO
        for revaluation in self.history(asset_id):
            if revaluation.is_reversed or revaluation.is_reversal:
                continue
            if revaluation.amount.is_increment():
                balance += revaluation.amount.reserve_impact
            else:
                _, offset = revaluation.amount.expense_impact(balance)
                balance -= offset
        return balance

    def can_revalue(self, asset_id: str) -> bool:
        if self.current_tier < TierLevel.ADVANCED:
            return False
        asset = self._assets.get_asset(asset_id)
        if asset is None:
            return False
        return asset.is_depreciable

    # =========================================================================
    # Validation and impact
    # =========================================================================

    def validate(
        self,
        asset_id: str,
        new_value: Decimal | str | int,
        new_salvage_value: Decimal | str | int,
    ) -> list[str]:
        """
        Problems with a proposed revaluation, including a warning when the
        change is large relative to the current book value.
        """
        asset = self._assets.get_asset(asset_id)
        if asset is None:
            return ["Asset not found"]

        new_value = to_decimal(new_value, "new_value")
        new_salvage_value = to_decimal(new_salvage_value, "new_salvage_value")
        errors: list[str] = []
        if new_salvage_value < ZERO:
            errors.append("Salvage value cannot be negative")
        if new_salvage_value > new_value:
            errors.append("Salvage value cannot exceed the new asset value")

        current = self._effective_asset(asset).net_book_value
        if current > ZERO:
            change = abs(new_value - current) / current
            if change > self._threshold:
                errors.append(
                    f"Warning: Revaluation represents a {change * 100:.1f}% "
                    f"change from current book value"
                )
        return errors

    def calculate_impact(
        self, asset_id: str, proposed_value: Decimal | str | int
    ) -> RevaluationImpact:
        """
        Effect of restating the asset's net book value to ``proposed_value``.

        Annual depreciation before is the straight-line rate over the full
        life; after, the new depreciable base over the remaining life.
        """
        asset = self._effective_asset(self._get_asset(asset_id))
        proposed = to_decimal(proposed_value, "proposed_value")
        previous_value = asset.net_book_value
        amount = proposed - previous_value
        revaluation_type = (
            RevaluationType.INCREMENT if proposed > previous_value else RevaluationType.DECREMENT
        )

        previous_base = asset.depreciable_amount
        new_base = max(ZERO, proposed - asset.salvage_value)
        remaining = max(
            1,
            remaining_life_months(
                asset.useful_life_months, asset.accumulated_depreciation, previous_base
            ),
        )
        previous_annual = round_money(
            previous_base / asset.useful_life_months * MONTHS_PER_YEAR
        )
        new_annual = round_money(new_base / remaining * MONTHS_PER_YEAR)

        return RevaluationImpact(
            previous_value=previous_value,
            new_value=proposed,
            revaluation_amount=amount,
            revaluation_type=revaluation_type,
            depreciation_impact=new_base - previous_base,
            remaining_months=remaining,
            previous_annual_depreciation=previous_annual,
            new_annual_depreciation=new_annual,
            reserve_impact=amount if revaluation_type is RevaluationType.INCREMENT else ZERO,
        )

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def revalue(
        self,
        asset_id: str,
        new_cost: Decimal | str | int,
        new_salvage_value: Decimal | str | int,
        revaluation_type: RevaluationType | str | None = None,
        reason: str = "",
        revaluation_date: date | None = None,
        gl_account_id: str | None = None,
    ) -> AssetRevaluation:
        """
        Record a PENDING revaluation to ``new_cost`` / ``new_salvage_value``.

        ``revaluation_type`` defaults to the direction of the change in net
        book value; a type that contradicts that direction is rejected.

        Raises:
            TierNotAvailableError, AssetNotFoundError, AssetNotDepreciableError,
            InvalidRevaluationSalvageError, DepreciationValidationError.
        """
        t0 = time.monotonic()
        try:
            self._require_tier()
            asset = self._effective_asset(self._get_asset(asset_id))
            if asset.is_disposed:
                raise AssetNotDepreciableError(asset_id, "asset is disposed")

            new_cost = to_decimal(new_cost, "new_cost")
            new_salvage_value = to_decimal(new_salvage_value, "new_salvage_value")
            errors = []
            if new_cost <= ZERO:
                errors.append("New cost must be positive")
            if new_salvage_value < ZERO:
                errors.append("Salvage value cannot be negative")
            if errors:
                raise DepreciationValidationError(errors, subject=asset_id)
            if new_salvage_value > new_cost:
                raise InvalidRevaluationSalvageError(asset_id, new_salvage_value, new_cost)

            previous_book = asset.book_value()
            new_book = previous_book.revalue(new_cost, new_salvage_value)
            amount = RevaluationAmount.from_book_change(
                asset.cost,
                new_cost,
                asset.salvage_value,
                new_salvage_value,
                asset.accumulated_depreciation,
                asset.currency,
            )
            if revaluation_type is None:
                revaluation_type = (
                    RevaluationType.INCREMENT if amount.is_increment()
                    else RevaluationType.DECREMENT
                )
            revaluation_type = RevaluationType(revaluation_type)
            if (
                (revaluation_type is RevaluationType.INCREMENT and amount.is_decrement())
                or (revaluation_type is RevaluationType.DECREMENT and amount.is_increment())
            ):
                raise DepreciationValidationError(
                    f"Revaluation type {revaluation_type.value} does not match "
                    f"a change of {amount.format()}",
                    subject=asset_id,
                )

            revaluation = AssetRevaluation(
                id=self._new_revaluation_id(asset_id),
                asset_id=asset_id,
                tenant_id=asset.tenant_id,
                revaluation_date=revaluation_date or self._clock.today(),
                revaluation_type=revaluation_type,
                previous_book_value=previous_book,
                new_book_value=new_book,
                amount=amount,
                reason=reason,
                created_at=self._clock.now(),
                gl_account_id=gl_account_id,
            )
            self._repository.save(revaluation)
        except DepreciationError as exc:
            logger.warning(
                "revaluation_failed",
                extra={"asset_id": asset_id, "error_code": exc.code},
            )
            raise

        logger.info(
            "revaluation_recorded",
            extra={
                "asset_id": asset_id,
                "revaluation_id": revaluation.id,
                "revaluation_type": revaluation_type.value,
                "amount": amount.amount,
                "previous_cost": asset.cost,
                "new_cost": new_cost,
                "duration_ms": round((time.monotonic() - t0) * 1000, 2),
            },
        )
        self._dispatch(self._revalued_event(revaluation))
        return revaluation

    @staticmethod
    def _revalued_event(revaluation: AssetRevaluation) -> AssetRevaluedEvent:
        return AssetRevaluedEvent(
            revaluation_id=revaluation.id,
            asset_id=revaluation.asset_id,
            tenant_id=revaluation.tenant_id,
            revaluation_type=revaluation.revaluation_type,
            amount=revaluation.amount.amount,
            currency=revaluation.amount.currency,
            previous_cost=revaluation.previous_book_value.cost,
            new_cost=revaluation.new_book_value.cost,
            previous_net_book_value=revaluation.previous_net_book_value,
            new_net_book_value=revaluation.new_net_book_value,
            reason=revaluation.reason,
            revaluation_date=revaluation.revaluation_date,
            gl_account_id=revaluation.gl_account_id,
        )

    def reverse(self, revaluation_id: str, reason: str) -> AssetRevaluation:
        """
        Undo a revaluation.

        Returns the new reversal record; the original is stored as REVERSED.
        """
        original = self._get_revaluation(revaluation_id)
        reversed_original = original.mark_reversed()
        reversal = original.as_reversal(
            self._new_revaluation_id(original.asset_id),
            reason,
            self._clock.today(),
            self._clock.now(),
        )
        self._repository.save(reversed_original)
        self._repository.save(reversal)
        logger.info(
            "revaluation_reversed",
            extra={
                "asset_id": original.asset_id,
                "revaluation_id": revaluation_id,
                "reversal_id": reversal.id,
                "amount": reversal.amount.amount,
            },
        )
        self._dispatch(self._revalued_event(reversal))
        return reversal

    def approve(self, revaluation_id: str, approved_by: str) -> AssetRevaluation:
        approved = self._get_revaluation(revaluation_id).with_approval(
            approved_by, self._clock.now()
        )
        self._repository.save(approved)
        logger.info(
            "revaluation_approved",
            extra={"revaluation_id": revaluation_id, "approved_by": approved_by},
        )
        return approved

    def post_to_gl(self, revaluation_id: str) -> AssetRevaluation:
        """Mark the revaluation POSTED under a new journal entry reference."""
        posted = self._get_revaluation(revaluation_id).with_posting(
            self._new_journal_entry_id()
        )
        self._repository.save(posted)
        logger.info(
            "revaluation_posted",
            extra={
                "revaluation_id": revaluation_id,
                "journal_entry_id": posted.journal_entry_id,
                "amount": posted.amount.amount,
            },
        )
        return posted

    # =========================================================================
    # Full revaluation model
    # =========================================================================

    def process_full_revaluation(
        self,
        asset_id: str,
        fair_value: Decimal | str | int,
        salvage_value: Decimal | str | int,
        reason: str,
        revaluation_reserve_account: str,
        depreciation_expense_account: str | None = None,
        depreciation_type: DepreciationType = DepreciationType.BOOK,
    ) -> tuple[AssetRevaluation, DepreciationSchedule | None]:
        """
        Restate the asset's net book value to ``fair_value`` and regenerate
        its schedule on the new basis.

        Accumulated depreciation is kept, so the new cost is
        ``fair_value + accumulated``.  Increments reference
        ``revaluation_reserve_account``; decrements reference
        ``depreciation_expense_account`` when given.

        Returns:
            Tuple of (AssetRevaluation, regenerated schedule or None when
            nothing is left to depreciate).
        """
        self._require_tier()
        asset = self._effective_asset(self._get_asset(asset_id))
        if asset.is_disposed:
            raise AssetNotDepreciableError(asset_id, "asset is disposed")

        fair_value = to_decimal(fair_value, "fair_value")
        revaluation_type = (
            RevaluationType.INCREMENT if fair_value > asset.net_book_value
            else RevaluationType.DECREMENT
        )
        account = revaluation_reserve_account
        if revaluation_type is RevaluationType.DECREMENT and depreciation_expense_account:
            account = depreciation_expense_account

        revaluation = self.revalue(
            asset_id,
            fair_value + asset.accumulated_depreciation,
            salvage_value,
            revaluation_type,
            reason,
            gl_account_id=account,
        )
        schedule = self.recalculate_depreciation(asset_id, revaluation.id, depreciation_type)
        return self._get_revaluation(revaluation.id), schedule

    def recalculate_depreciation(
        self,
        asset_id: str,
        revaluation_id: str,
        depreciation_type: DepreciationType = DepreciationType.BOOK,
    ) -> DepreciationSchedule | None:
        """
        Regenerate the asset's schedule after ``revaluation_id``.

        The remaining life follows from the booked accumulated depreciation
        and the depreciable base before the revaluation, the same figures
        ``calculate_impact`` uses.  Periods before it are replayed on the old
        basis and the rest are regenerated on the revalued cost and salvage.
        A replay that does not rebuild the booked accumulated depreciation
        is logged.  The new schedule id is attached to the revaluation.
        """
        revaluation = self._get_revaluation(revaluation_id)
        asset = self._get_asset(asset_id)
        before = revaluation.previous_book_value
        after = revaluation.new_book_value
        life = asset.useful_life_months

        remaining = remaining_life_months(
            life, before.accumulated_depreciation, before.depreciable_amount
        )
        if remaining == 0:
            logger.info(
                "revaluation_schedule_skipped",
                extra={"asset_id": asset_id, "revaluation_id": revaluation_id},
            )
            return None

        from_period = life - remaining + 1
        base_asset = asset.revalued(before.cost, before.salvage_value)
        generator = DepreciationScheduleGenerator(
            _RevaluedAssetView(self._assets, base_asset), self._factory, self._clock
        )
        schedule = generator.adjust(
            asset_id,
            revaluation.tenant_id,
            ScheduleAdjustment(
                cost=after.cost,
                salvage_value=after.salvage_value,
                from_period_number=from_period,
                reason=f"Revaluation {revaluation_id}",
            ),
            depreciation_type=depreciation_type,
        )
        replayed = sum(
            (p.depreciation_amount for p in schedule.periods if p.period_number < from_period),
            ZERO,
        )
        if replayed != before.accumulated_depreciation:
            logger.warning(
                "revaluation_replay_mismatch",
                extra={
                    "asset_id": asset_id,
                    "revaluation_id": revaluation_id,
                    "from_period_number": from_period,
                    "replayed_accumulated": replayed,
                    "booked_accumulated": before.accumulated_depreciation,
                },
            )
        self._repository.save(revaluation.with_schedule(schedule.schedule_id))

        logger.info(
            "revaluation_schedule_regenerated",
            extra={
                "asset_id": asset_id,
                "revaluation_id": revaluation_id,
                "schedule_id": schedule.schedule_id,
                "from_period_number": from_period,
                "remaining_months": remaining,
            },
        )
        self._dispatch(
            ScheduleAdjustedEvent(
                schedule_id=schedule.schedule_id,
                asset_id=asset_id,
                tenant_id=revaluation.tenant_id,
                from_period_number=from_period,
                method=schedule.method,
                useful_life_months=schedule.useful_life_months,
                salvage_value=schedule.salvage_value,
                reason=schedule.adjustment_reason or "",
                adjusted_on=self._clock.today(),
            )
        )
        return schedule
