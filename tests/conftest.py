"""
Pytest fixtures for the depreciation engine test suite.

Provides:
- Structured logging configured once per session, with a capture fixture
- A deterministic clock
- Asset builders and in-memory providers
- Factories at each product tier
"""

import json
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from io import StringIO

import pytest

from depreciation_engines.factory import DepreciationMethodFactory
from depreciation_kernel.domain.asset import AssetRecord
from depreciation_kernel.domain.clock import DeterministicClock
from depreciation_kernel.domain.types import DepreciationMethodType, TierLevel
from depreciation_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from depreciation_modules.assets.events import RecordingEventDispatcher
from depreciation_modules.assets.repository import InMemoryAssetProvider

TEST_TENANT_ID = "TENANT-1"
TEST_ACQUISITION_DATE = date(2024, 1, 1)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture depreciation logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, calculator):
            calculator.generate("A-1")
            logs = captured_logs()
            assert any(r["message"] == "schedule_generation_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("depreciation")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock and assets
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing (2024-06-15 12:00 UTC)."""
    return DeterministicClock(datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc))


def make_asset(
    asset_id: str = "A-1",
    cost="12000",
    useful_life_months: int = 12,
    salvage_value="0",
    acquisition_date: date = TEST_ACQUISITION_DATE,
    method: DepreciationMethodType = DepreciationMethodType.STRAIGHT_LINE,
    **kwargs,
) -> AssetRecord:
    """Asset record with sensible defaults; keyword overrides pass through."""
    kwargs.setdefault("tenant_id", TEST_TENANT_ID)
    return AssetRecord(
        asset_id=asset_id,
        cost=Decimal(str(cost)),
        useful_life_months=useful_life_months,
        acquisition_date=acquisition_date,
        salvage_value=Decimal(str(salvage_value)),
        method=method,
        **kwargs,
    )


@pytest.fixture
def asset_factory():
    """Return the ``make_asset`` builder."""
    return make_asset


@pytest.fixture
def asset_provider():
    """Empty in-memory asset provider."""
    return InMemoryAssetProvider()


@pytest.fixture
def event_dispatcher():
    return RecordingEventDispatcher()


# =============================================================================
# Method factories
# =============================================================================


@pytest.fixture
def basic_factory():
    return DepreciationMethodFactory(tier=TierLevel.BASIC)


@pytest.fixture
def advanced_factory():
    return DepreciationMethodFactory(tier=TierLevel.ADVANCED)


@pytest.fixture
def enterprise_factory():
    return DepreciationMethodFactory(tier=TierLevel.ENTERPRISE)
