"""
Tests for the DepreciationCalculator facade.

The reference asset is the default ``make_asset``: 12000 over 12 months,
acquired 2024-01-01, with the clock on 2024-06-15.
"""

from datetime import date
from decimal import Decimal

import pytest

from depreciation_engines.factory import DepreciationMethodFactory
from depreciation_kernel.domain.types import (
    DepreciationMethodType,
    DepreciationStatus,
    DepreciationType,
    TierLevel,
)
from depreciation_kernel.exceptions import (
    AssetNotDepreciableError,
    AssetNotFoundError,
    DepreciationValidationError,
    PeriodNotFoundError,
    TierNotAvailableError,
)
from depreciation_modules.assets.config import DepreciationConfig
from depreciation_modules.assets.events import (
    DepreciationCalculatedEvent,
    ScheduleAdjustedEvent,
    ScheduleGeneratedEvent,
)
from depreciation_modules.assets.service import DepreciationCalculator

M = DepreciationMethodType


@pytest.fixture
def calculator(asset_provider, event_dispatcher, deterministic_clock):
    return DepreciationCalculator(
        asset_provider,
        DepreciationMethodFactory(tier=TierLevel.ENTERPRISE),
        event_dispatcher=event_dispatcher,
        clock=deterministic_clock,
    )


class TestCalculate:
    """Tests for the charge on a date."""

    @pytest.fixture(autouse=True)
    def _asset(self, asset_provider, asset_factory):
        asset_provider.add(asset_factory())
        self.provider = asset_provider

    def test_defaults_to_clock_date(self, calculator):
        result = calculator.calculate("A-1")
        assert result.amount == Decimal("1000.00")
        assert result.currency == "USD"
        assert result.accumulated_depreciation == Decimal("1000.00")

    def test_before_acquisition_is_zero(self, calculator):
        assert calculator.calculate("A-1", date(2023, 12, 31)).amount == Decimal("0")

    def test_after_life_is_zero(self, calculator):
        assert calculator.calculate("A-1", date(2025, 1, 15)).amount == Decimal("0")

    def test_fully_depreciated_is_zero(self, calculator, asset_factory):
        self.provider.add(asset_factory(accumulated_depreciation="12000"))
        assert calculator.calculate("A-1").amount == Decimal("0")

    def test_repeatable(self, calculator):
        """Calculating does not write back to the asset provider."""
        first = calculator.calculate("A-1")
        second = calculator.calculate("A-1")
        assert first == second
        assert self.provider.get_asset("A-1").accumulated_depreciation == Decimal("0")

    def test_tax_type_uses_tax_method(self, calculator, asset_factory):
        """5-year MACRS on 10000 is 2000 in year one, 166.67 a month."""
        self.provider.add(asset_factory(cost="10000", useful_life_months=60, tax_method=M.MACRS))
        result = calculator.calculate("A-1", depreciation_type=DepreciationType.TAX)
        assert result.amount == Decimal("166.67")

    def test_unknown_asset(self, calculator):
        with pytest.raises(AssetNotFoundError, match="Asset not found: A-404"):
            calculator.calculate("A-404")

    def test_disposed_asset_rejected(self, calculator):
        self.provider.dispose("A-1")
        with pytest.raises(AssetNotDepreciableError, match="asset is disposed"):
            calculator.calculate("A-1")

    def test_inactive_asset_rejected(self, calculator, asset_factory):
        self.provider.add(asset_factory(is_active=False))
        with pytest.raises(AssetNotDepreciableError, match="asset is inactive"):
            calculator.calculate("A-1")

    def test_zero_cost_rejected(self, calculator, asset_factory):
        self.provider.add(asset_factory(cost="0"))
        with pytest.raises(AssetNotDepreciableError, match="cost must be positive"):
            calculator.calculate("A-1")

    def test_tier_gate(self, asset_provider, asset_factory, deterministic_clock):
        self.provider.add(asset_factory(method=M.DOUBLE_DECLINING))
        calculator = DepreciationCalculator(asset_provider, clock=deterministic_clock)
        with pytest.raises(TierNotAvailableError):
            calculator.calculate("A-1")

    def test_failure_logged_with_code(self, calculator, captured_logs):
        self.provider.dispose("A-1")
        with pytest.raises(AssetNotDepreciableError):
            calculator.calculate("A-1")
        failed = [r for r in captured_logs() if r["message"] == "depreciation_calculation_failed"]
        assert failed[0]["error_code"] == "ASSET_NOT_DEPRECIABLE"

    def test_success_logged(self, calculator, captured_logs):
        calculator.calculate("A-1")
        record = [r for r in captured_logs() if r["message"] == "depreciation_calculated"][0]
        assert record["period_number"] == 6
        assert record["method"] == "straight_line"
        assert "duration_ms" in record


class TestCalculateForPeriod:
    """Tests for the charge in an accounting period."""

    @pytest.fixture(autouse=True)
    def _asset(self, asset_provider, asset_factory):
        asset_provider.add(asset_factory())
        self.provider = asset_provider

    def test_record(self, calculator):
        record = calculator.calculate_for_period("A-1", "2024-03")

        assert record.id.startswith("DEP-A-1-")
        assert record.amount == Decimal("1000.00")
        assert record.period_start == date(2024, 3, 1)
        assert record.period_end == date(2024, 3, 31)
        assert record.net_book_value_before == Decimal("12000")
        assert record.net_book_value_after == Decimal("11000.00")
        assert record.status is DepreciationStatus.CALCULATED
        assert record.calculation_date == date(2024, 6, 15)

    def test_event_dispatched(self, calculator, event_dispatcher):
        record = calculator.calculate_for_period("A-1", "2024-03")
        events = event_dispatcher.of_type(DepreciationCalculatedEvent)

        assert len(events) == 1
        assert events[0].depreciation_id == record.id
        assert events[0].tenant_id == "TENANT-1"
        assert events[0].amount == Decimal("1000.00")
        assert events[0].event_name == "depreciation.calculated"

    def test_period_outside_life(self, calculator):
        assert calculator.calculate_for_period("A-1", "2025-02").amount == Decimal("0")

    def test_unknown_period(self, calculator, event_dispatcher):
        with pytest.raises(PeriodNotFoundError, match="2024-13"):
            calculator.calculate_for_period("A-1", "2024-13")
        assert event_dispatcher.events == []

    def test_matches_schedule_period(self, calculator, asset_factory):
        """A period charge agrees with the matching schedule period."""
        self.provider.add(asset_factory(
            cost="10000", salvage_value="1000", useful_life_months=60, method=M.SUM_OF_YEARS,
        ))
        schedule = calculator.generate("A-1")
        record = calculator.calculate_for_period("A-1", "2024-01")
        assert record.amount == schedule.periods[0].depreciation_amount

    def test_post_writes_back(self, calculator):
        record = calculator.calculate_for_period("A-1", "2024-01")
        posted = calculator.post_depreciation(record, "JE-1")

        assert posted.is_posted
        assert posted.journal_entry_id == "JE-1"
        assert posted.posting_date == date(2024, 6, 15)
        assert self.provider.get_asset("A-1").accumulated_depreciation == Decimal("1000.00")

    def test_post_then_next_period(self, calculator):
        """Posting advances the book value the next calculation starts from."""
        calculator.post_depreciation(calculator.calculate_for_period("A-1", "2024-01"))
        record = calculator.calculate_for_period("A-1", "2024-02")
        assert record.net_book_value_before == Decimal("11000.00")
        assert record.book_value_after.accumulated_depreciation == Decimal("2000.00")


class TestForecastAndSchedules:
    """Tests for forecasts, schedules and adjustments through the facade."""

    @pytest.fixture(autouse=True)
    def _asset(self, asset_provider, asset_factory):
        asset_provider.add(asset_factory(useful_life_months=24))

    def test_zero_periods(self, calculator):
        forecast = calculator.forecast("A-1", 0)
        assert forecast.count == 0
        assert forecast.method is M.STRAIGHT_LINE

    def test_default_periods(self, calculator):
        assert calculator.forecast("A-1").count == 12

    def test_remaining_life(self, calculator):
        assert calculator.forecast_remaining_life("A-1").count == 24

    def test_generate(self, calculator, event_dispatcher):
        schedule = calculator.generate("A-1")

        assert schedule.tenant_id == "TENANT-1"
        assert schedule.total_depreciation == Decimal("12000.00")
        event = event_dispatcher.of_type(ScheduleGeneratedEvent)[0]
        assert event.schedule_id == schedule.schedule_id
        assert event.period_count == 24
        assert event.generated_on == date(2024, 6, 15)

    def test_generate_explicit_tenant(self, calculator):
        assert calculator.generate("A-1", "TENANT-2").tenant_id == "TENANT-2"

    def test_adjust_from_mapping(self, calculator, event_dispatcher):
        schedule = calculator.adjust(
            "A-1",
            "TENANT-1",
            {"useful_life_months": 36, "from_period_number": 13, "reason": "extended"},
        )

        assert len(schedule) == 36
        assert schedule.periods[11].depreciation_amount == Decimal("500.00")
        assert schedule.periods[12].depreciation_amount == Decimal("250.00")
        event = event_dispatcher.of_type(ScheduleAdjustedEvent)[0]
        assert event.from_period_number == 13
        assert event.useful_life_months == 36
        assert event.reason == "extended"

    def test_adjust_rejects_disposed(self, calculator, asset_provider):
        asset_provider.dispose("A-1")
        with pytest.raises(AssetNotDepreciableError):
            calculator.adjust("A-1", "TENANT-1", {"useful_life_months": 36})


class TestTaxBook:
    """Tests for book/tax comparisons on an asset."""

    @pytest.fixture(autouse=True)
    def _asset(self, asset_provider, asset_factory):
        asset_provider.add(asset_factory(cost="50000", salvage_value="5000", useful_life_months=60))

    def test_defaults_to_macrs(self, calculator):
        result = calculator.calculate_tax_book("A-1")
        assert result.book_depreciation == Decimal("9000.00")
        assert result.tax_depreciation == Decimal("10000.00")
        assert result.deferred_tax_liability == Decimal("210.00")

    def test_later_year(self, calculator):
        assert calculator.calculate_tax_book("A-1", period_number=2).tax_depreciation == Decimal("16000.00")

    def test_period_must_be_positive(self, calculator):
        with pytest.raises(DepreciationValidationError, match="Period number must be at least 1"):
            calculator.calculate_tax_book("A-1", period_number=0)

    def test_schedule(self, calculator):
        schedule = calculator.tax_book_schedule("A-1")
        assert len(schedule) == 6
        assert schedule.total_tax_depreciation == Decimal("50000.00")


class TestFromConfig:
    def test_config_drives_tier_and_rate(self, asset_provider, asset_factory, deterministic_clock):
        asset_provider.add(asset_factory(cost="50000", salvage_value="5000", useful_life_months=60))
        config = DepreciationConfig(tier="enterprise", tax_rate="0.25", default_forecast_periods=6)
        calculator = DepreciationCalculator.from_config(config, asset_provider, clock=deterministic_clock)

        assert calculator.method_factory.current_tier is TierLevel.ENTERPRISE
        assert calculator.calculate_tax_book("A-1").deferred_tax_liability == Decimal("250.00")
        assert calculator.forecast("A-1").count == 6
