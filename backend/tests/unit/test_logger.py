"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

import pytest

from accounts.core.logger import JSONFormatter, configure_logging, ensure_request_id


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    # Act
    configure_logging("DEBUG")

    # Assert
    assert logging.getLogger().level == logging.DEBUG


def test_configure_logging_quiets_chatty_loggers() -> None:
    configure_logging("INFO")

    assert logging.getLogger("werkzeug").level == logging.WARNING


def test_json_formatter_copies_event_extras() -> None:
    record = logging.LogRecord("accounts.test", logging.INFO, __file__, 1, "auth.login", None, None)
    record.event = "auth.login"
    record.user_id = 7

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "auth.login"
    assert payload["event"] == "auth.login"
    assert payload["user_id"] == 7
    assert payload["request_id"] is None


def test_request_id_prefers_inbound_header(app) -> None:
    with app.test_request_context(headers={"X-Correlation-ID": "corr-123"}):
        assert ensure_request_id() == "corr-123"
        # Cached on ``g`` for the rest of the request
        assert ensure_request_id() == "corr-123"


def test_unknown_level_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown log level"):
        configure_logging("LOUD")
