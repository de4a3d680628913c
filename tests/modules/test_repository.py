"""
Tests for the in-memory asset, period and revaluation stores.
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from depreciation_kernel.domain.types import RevaluationStatus, RevaluationType
from depreciation_kernel.domain.values import AccountingPeriod, BookValue, RevaluationAmount
from depreciation_kernel.exceptions import AssetNotFoundError
from depreciation_modules.assets.models import AssetRevaluation
from depreciation_modules.assets.repository import (
    InMemoryAssetProvider,
    InMemoryPeriodProvider,
    InMemoryRevaluationRepository,
)


class TestInMemoryAssetProvider:
    def test_add_and_get(self, asset_factory):
        provider = InMemoryAssetProvider([asset_factory(), asset_factory("A-2")])
        assert len(provider) == 2
        assert provider.get_asset("A-2").asset_id == "A-2"
        assert provider.get_asset("A-404") is None

    def test_update_accumulated(self, asset_provider, asset_factory):
        asset_provider.add(asset_factory())
        asset_provider.update_accumulated_depreciation("A-1", "2500.50")
        assert asset_provider.get_asset("A-1").accumulated_depreciation == Decimal("2500.50")

    def test_update_cost_basis(self, asset_provider, asset_factory):
        asset_provider.add(asset_factory(accumulated_depreciation="1000"))
        updated = asset_provider.update_cost_basis("A-1", Decimal("15000"), Decimal("500"))
        assert updated.cost == Decimal("15000")
        assert updated.salvage_value == Decimal("500")
        assert updated.accumulated_depreciation == Decimal("1000")

    def test_dispose(self, asset_provider, asset_factory):
        asset_provider.add(asset_factory())
        asset_provider.dispose("A-1")
        asset = asset_provider.get_asset("A-1")
        assert asset.is_disposed
        assert not asset.is_depreciable

    def test_unknown_asset(self, asset_provider):
        with pytest.raises(AssetNotFoundError):
            asset_provider.update_accumulated_depreciation("A-404", Decimal("1"))
        with pytest.raises(AssetNotFoundError):
            asset_provider.dispose("A-404")


class TestInMemoryPeriodProvider:
    """Tests for calendar-month periods."""

    def test_derived_month(self):
        period = InMemoryPeriodProvider().get_period("2024-02")
        assert period.start_date == date(2024, 2, 1)
        assert period.end_date == date(2024, 2, 29)
        assert period.fiscal_year == 2024

    @pytest.mark.parametrize("period_id", ["2024-13", "2024-00", "FY24-Q1", "2024-1"])
    def test_invalid_ids(self, period_id):
        assert InMemoryPeriodProvider().get_period(period_id) is None

    def test_fiscal_year_start(self):
        """With a July start, August 2024 falls in fiscal 2025."""
        provider = InMemoryPeriodProvider(fiscal_year_start_month=7)
        assert provider.get_period("2024-08").fiscal_year == 2025
        assert provider.get_period("2024-06").fiscal_year == 2024

    def test_fiscal_start_validated(self):
        with pytest.raises(ValueError, match="between 1 and 12"):
            InMemoryPeriodProvider(fiscal_year_start_month=13)

    def test_explicit_period_wins(self):
        custom = AccountingPeriod("2024-03", date(2024, 2, 26), date(2024, 3, 31), 2024)
        provider = InMemoryPeriodProvider([custom])
        assert provider.get_period("2024-03") == custom
        assert provider.get_period_for_date(date(2024, 2, 27)) == custom

    def test_period_for_date(self):
        period = InMemoryPeriodProvider().get_period_for_date(date(2024, 6, 15))
        assert period.period_id == "2024-06"


def _revaluation(revaluation_id: str, asset_id: str = "A-1", on: date = date(2024, 6, 15)):
    return AssetRevaluation(
        id=revaluation_id,
        asset_id=asset_id,
        tenant_id="TENANT-1",
        revaluation_date=on,
        revaluation_type=RevaluationType.INCREMENT,
        previous_book_value=BookValue(Decimal("12000")),
        new_book_value=BookValue(Decimal("13000")),
        amount=RevaluationAmount.from_values("12000", "13000"),
        reason="test",
        created_at=datetime(2024, 6, 15, tzinfo=timezone.utc),
    )


class TestInMemoryRevaluationRepository:
    def setup_method(self):
        self.repository = InMemoryRevaluationRepository()

    def test_save_and_get(self):
        self.repository.save(_revaluation("REV-1"))
        assert self.repository.get("REV-1").amount.amount == Decimal("1000")
        assert self.repository.get("REV-2") is None

    def test_save_replaces(self):
        revaluation = self.repository.save(_revaluation("REV-1"))
        self.repository.save(revaluation.mark_reversed())
        assert len(self.repository) == 1
        assert self.repository.get("REV-1").status is RevaluationStatus.REVERSED

    def test_for_asset(self):
        self.repository.save(_revaluation("REV-1"))
        self.repository.save(_revaluation("REV-2", asset_id="A-2"))
        self.repository.save(_revaluation("REV-3"))
        assert [r.id for r in self.repository.for_asset("A-1")] == ["REV-1", "REV-3"]

    def test_for_period_returns_latest(self):
        self.repository.save(_revaluation("REV-1"))
        self.repository.save(_revaluation("REV-2", on=date(2024, 6, 28)))
        self.repository.save(_revaluation("REV-3", on=date(2024, 7, 1)))
        assert self.repository.for_period("A-1", "2024-06").id == "REV-2"
        assert self.repository.for_period("A-1", "2024-05") is None
