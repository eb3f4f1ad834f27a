"""
Tests for structured logging helpers.
"""

import io
import json
import logging

import pytest

from evmfaucet.utils.logging import (
    ROOT_LOGGER_NAME,
    LogContext,
    configure_logging,
    disable_logging,
    enable_debug,
    get_logger,
    set_level,
)


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        if getattr(handler, "_evmfaucet_handler", False):
            root.removeHandler(handler)
    root.setLevel(logging.NOTSET)


@pytest.fixture
def stream() -> io.StringIO:
    buffer = io.StringIO()
    configure_logging(logging.DEBUG, stream=buffer)
    return buffer


class TestGetLogger:
    """Tests for logger naming."""

    def test_module_name_is_namespaced(self) -> None:
        """Test foreign names are placed under the package logger."""
        assert get_logger("tests.something").name == "evmfaucet.tests.something"

    def test_package_name_kept(self) -> None:
        """Test package module names are not prefixed twice."""
        assert get_logger("evmfaucet.sender").name == "evmfaucet.sender"
        assert get_logger(ROOT_LOGGER_NAME).name == ROOT_LOGGER_NAME


class TestFormatting:
    """Tests for record rendering."""

    def test_extra_fields_rendered(self, stream: io.StringIO) -> None:
        """Test extra fields are appended as key=value pairs."""
        get_logger("evmfaucet.sender").info("Transfer confirmed", extra={"nonce": 12})

        line = stream.getvalue().strip()
        assert "Transfer confirmed" in line
        assert "nonce=12" in line

    def test_log_context_fields(self, stream: io.StringIO) -> None:
        """Test LogContext fields appear on records inside the block only."""
        logger = get_logger("evmfaucet.sender")
        with LogContext(chain_id=5):
            logger.info("inside")
        logger.info("outside")

        inside, outside = stream.getvalue().strip().splitlines()
        assert "chain_id=5" in inside
        assert "chain_id" not in outside

    def test_json_format(self) -> None:
        """Test JSON lines carry message, level and extras."""
        buffer = io.StringIO()
        configure_logging(logging.INFO, json_format=True, stream=buffer)
        get_logger("evmfaucet.client").warning("dry", extra={"balance": 3})

        payload = json.loads(buffer.getvalue().strip())
        assert payload["message"] == "dry"
        assert payload["level"] == "WARNING"
        assert payload["balance"] == 3

    def test_reconfigure_replaces_handler(self, stream: io.StringIO) -> None:
        """Test configure_logging does not stack handlers."""
        configure_logging(logging.INFO, stream=stream)

        root = logging.getLogger(ROOT_LOGGER_NAME)
        ours = [h for h in root.handlers if getattr(h, "_evmfaucet_handler", False)]
        assert len(ours) == 1


class TestLevels:
    """Tests for level helpers."""

    def test_set_level_and_debug(self, stream: io.StringIO) -> None:
        """Test level helpers act on the package root logger."""
        set_level(logging.ERROR)
        get_logger("evmfaucet.x").info("hidden")
        enable_debug()
        get_logger("evmfaucet.x").debug("shown")

        output = stream.getvalue()
        assert "hidden" not in output
        assert "shown" in output

    def test_disable_logging_silences_children(self, stream: io.StringIO) -> None:
        """Test disable_logging mutes module loggers too."""
        disable_logging()
        get_logger("evmfaucet.sender").critical("nope")

        assert stream.getvalue() == ""
