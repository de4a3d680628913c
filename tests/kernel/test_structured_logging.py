"""
Tests for structured JSON logging.

Verifies:
- StructuredFormatter emits one JSON object per record
- Extra fields, Decimals, dates and enums serialise
- LogContext fields appear and are restored after bind()
- DepreciationError attributes are flattened on exceptions
- configure_logging is idempotent
"""

import io
import json
import logging
from datetime import date
from decimal import Decimal

import pytest

from depreciation_kernel.domain.types import DepreciationMethodType
from depreciation_kernel.exceptions import AssetNotFoundError
from depreciation_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


def _make_handler() -> tuple[logging.Handler, io.StringIO]:
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_all_logs(stream: io.StringIO) -> list[dict]:
    return [json.loads(line) for line in stream.getvalue().strip().split("\n") if line]


@pytest.fixture
def json_logger():
    """A depreciation logger wired to an in-memory JSON handler."""
    handler, stream = _make_handler()
    logger = get_logger("tests.logging")
    root = logging.getLogger("depreciation")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    logger.addHandler(handler)
    yield logger, stream
    logger.removeHandler(handler)
    root.setLevel(previous_level)


class TestStructuredFormatter:
    """Tests for the JSON formatter."""

    def test_basic_fields(self, json_logger):
        """Every record carries ts, level, logger and message."""
        logger, stream = json_logger
        logger.info("schedule_generation_started")
        record = _parse_all_logs(stream)[-1]
        assert record["level"] == "INFO"
        assert record["logger"] == "depreciation.tests.logging"
        assert record["message"] == "schedule_generation_started"
        assert "ts" in record

    def test_extra_values_serialise(self, json_logger):
        """Decimal, date and enum extras become JSON scalars."""
        logger, stream = json_logger
        logger.info(
            "depreciation_calculated",
            extra={
                "amount": Decimal("1000.00"),
                "as_of_date": date(2024, 3, 1),
                "method": DepreciationMethodType.STRAIGHT_LINE,
                "disabled": frozenset({"annuity"}),
            },
        )
        record = _parse_all_logs(stream)[-1]
        assert record["amount"] == "1000.00"
        assert record["as_of_date"] == "2024-03-01"
        assert record["method"] == "straight_line"
        assert record["disabled"] == ["annuity"]

    def test_context_fields(self, json_logger):
        """Bound context fields appear on every record inside the block."""
        logger, stream = json_logger
        with LogContext.bind(asset_id="A-1", tenant_id="T-1"):
            logger.info("inside")
        logger.info("outside")
        inside, outside = _parse_all_logs(stream)[-2:]
        assert inside["asset_id"] == "A-1"
        assert inside["tenant_id"] == "T-1"
        assert "asset_id" not in outside

    def test_exception_attributes_flattened(self, json_logger):
        """Error code and structured attributes of a DepreciationError are logged."""
        logger, stream = json_logger
        try:
            raise AssetNotFoundError("A-404")
        except AssetNotFoundError:
            logger.exception("lookup_failed")
        record = _parse_all_logs(stream)[-1]
        assert record["exc_type"] == "AssetNotFoundError"
        assert record["exc_code"] == "ASSET_NOT_FOUND"
        assert record["exc_asset_id"] == "A-404"
        assert "traceback" in record


class TestLogContext:
    """Tests for LogContext."""

    def test_set_and_clear(self):
        LogContext.set(asset_id="A-1", schedule_id=None)
        assert LogContext.get_all() == {"asset_id": "A-1"}
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_unknown_field_rejected(self):
        with pytest.raises(KeyError, match="Unknown log context field"):
            LogContext.set(colour="blue")

    def test_bind_restores_outer_value(self):
        """Nested bind() restores the outer value on exit."""
        LogContext.set(asset_id="outer")
        with LogContext.bind(asset_id="inner"):
            assert LogContext.get_all()["asset_id"] == "inner"
        assert LogContext.get_all()["asset_id"] == "outer"


class TestConfigureLogging:
    """Tests for configure_logging / reset_logging."""

    @pytest.fixture(autouse=True)
    def _clean_logging(self):
        reset_logging()
        yield
        reset_logging()
        configure_logging(level=logging.DEBUG)

    def test_idempotent(self):
        """A second call does not add a second handler."""
        handler, _ = _make_handler()
        configure_logging(handler=handler)
        configure_logging(handler=logging.StreamHandler(io.StringIO()))
        root = logging.getLogger("depreciation")
        assert root.handlers == [handler]
        assert root.propagate is False

    def test_level_applied(self):
        handler, stream = _make_handler()
        configure_logging(level=logging.WARNING, handler=handler)
        get_logger("tests.level").info("hidden")
        get_logger("tests.level").warning("shown")
        messages = [r["message"] for r in _parse_all_logs(stream)]
        assert messages == ["shown"]

    def test_reset_clears_handlers(self):
        configure_logging(handler=logging.StreamHandler(io.StringIO()))
        reset_logging()
        root = logging.getLogger("depreciation")
        assert root.handlers == []
        assert root.level == logging.WARNING
