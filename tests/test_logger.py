"""Tests for the logging setup module."""

import logging

import pytest

from idscan.utils.logger import (
    RequestLogAdapter,
    get_logger,
    get_request_logger,
    setup_logging,
)


class TestSetupLogging:
    """Tests for the setup_logging function."""

    def test_setup_creates_handler(self) -> None:
        root = logging.getLogger()
        root.handlers.clear()

        setup_logging("DEBUG")
        assert len(root.handlers) >= 1
        assert root.level == logging.DEBUG

        # Cleanup
        root.handlers.clear()

    def test_setup_idempotent(self) -> None:
        root = logging.getLogger()
        root.handlers.clear()

        setup_logging("INFO")
        count = len(root.handlers)
        setup_logging("INFO")
        assert len(root.handlers) == count

        root.handlers.clear()

    def test_setup_invalid_level_defaults_to_info(self) -> None:
        root = logging.getLogger()
        root.handlers.clear()

        setup_logging("NONEXISTENT")
        assert root.level == logging.INFO

        root.handlers.clear()

    def test_quiets_http_client_loggers(self) -> None:
        root = logging.getLogger()
        root.handlers.clear()

        setup_logging("DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING

        root.handlers.clear()


class TestGetLogger:
    """Tests for the get_logger function."""

    def test_returns_named_logger(self) -> None:
        logger = get_logger("test.module")
        assert logger.name == "test.module"
        assert isinstance(logger, logging.Logger)

    def test_same_name_returns_same_logger(self) -> None:
        logger1 = get_logger("test.same")
        logger2 = get_logger("test.same")
        assert logger1 is logger2


class TestRequestLogger:
    """Tests for request-scoped logging."""

    def test_returns_adapter(self) -> None:
        adapter = get_request_logger("test.request", "abc123")
        assert isinstance(adapter, RequestLogAdapter)
        assert adapter.logger.name == "test.request"

    def test_prefixes_request_id(self, caplog: pytest.LogCaptureFixture) -> None:
        adapter = get_request_logger("test.request", "abc123")
        with caplog.at_level(logging.INFO, logger="test.request"):
            adapter.info("Classified as %s", "pan")
        assert "[abc123] Classified as pan" in caplog.messages


class TestSetupLoggingLevel:
    """Tests for repeated setup calls."""

    def test_second_call_adjusts_level(self) -> None:
        root = logging.getLogger()
        root.handlers.clear()

        setup_logging("INFO")
        setup_logging("WARNING")
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1

        root.handlers.clear()
