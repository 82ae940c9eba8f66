"""Tests for structured logging setup."""

import io
import json

import pytest

from nodekit.common.logging import NODE_LOGGER_NAME, new_logger, setup_logging
from nodekit.common.tracing import clear_correlation_id, get_correlation_id, set_correlation_id


@pytest.mark.unit
class TestSetupLogging:
    """Test root logger configuration."""

    def test_json_records_carry_correlation_id(self) -> None:
        stream = io.StringIO()
        logger = setup_logging(level="info", fmt="json", stream=stream)
        correlation_id = set_correlation_id()

        logger.info("Starting node", extra={"moniker": "alpha"})

        record = json.loads(stream.getvalue().splitlines()[-1])
        assert record["message"] == "Starting node"
        assert record["level"] == "INFO"
        assert record["moniker"] == "alpha"
        assert record["correlation_id"] == correlation_id

    def test_plain_format(self) -> None:
        stream = io.StringIO()
        logger = setup_logging(level="DEBUG", fmt="plain", stream=stream)
        logger.debug("hello")
        assert f"{NODE_LOGGER_NAME}: hello" in stream.getvalue()

    def test_level_filters_records(self) -> None:
        stream = io.StringIO()
        logger = setup_logging(level="ERROR", fmt="json", stream=stream)
        logger.info("hidden")
        assert stream.getvalue() == ""

    def test_unknown_format_raises(self) -> None:
        with pytest.raises(ValueError, match="unknown log format"):
            setup_logging(level="INFO", fmt="xml", stream=io.StringIO())

    def test_unknown_level_raises(self) -> None:
        with pytest.raises(ValueError):
            setup_logging(level="LOUD", fmt="json", stream=io.StringIO())

    def test_takes_over_detached_node_logger(self) -> None:
        detached = io.StringIO()
        new_logger(detached)
        attached = io.StringIO()

        logger = setup_logging(level="INFO", fmt="json", stream=attached)
        logger.info("after setup")

        assert detached.getvalue() == ""
        assert "after setup" in attached.getvalue()


@pytest.mark.unit
def test_new_logger_does_not_propagate() -> None:
    stream = io.StringIO()
    logger = new_logger(stream, name="nodekit.test.sink")
    logger.info("sink only")

    assert logger.propagate is False
    assert json.loads(stream.getvalue())["message"] == "sink only"


@pytest.mark.unit
def test_clear_correlation_id() -> None:
    set_correlation_id("abc")
    assert get_correlation_id() == "abc"
    clear_correlation_id()
    assert get_correlation_id() is None
