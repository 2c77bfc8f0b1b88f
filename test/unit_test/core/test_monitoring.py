"""
Unit tests for the Logfire monitoring helpers.

Logfire is disabled in tests, so the helpers must fall back to debug logging
and never call the Logfire API. The enabled path is exercised with the
``logfire`` module patched out.
"""

from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI

from tutorconnect.core import monitoring


class TestInitializeLogfire:
    def test_disabled_by_default(self):
        with patch.object(monitoring, "logfire") as mock_logfire:
            monitoring.initialize_logfire(FastAPI())

            mock_logfire.configure.assert_not_called()
        assert monitoring.is_enabled() is False

    def test_enabled_without_token_does_not_configure(self):
        with patch.object(monitoring, "LOGFIRE_ENABLED", True), patch.object(
            monitoring, "LOGFIRE_TOKEN", ""
        ), patch.object(monitoring, "logfire") as mock_logfire:
            monitoring.initialize_logfire()

            mock_logfire.configure.assert_not_called()

    def test_enabled_with_token_instruments_app(self):
        app = FastAPI()
        with patch.object(monitoring, "LOGFIRE_ENABLED", True), patch.object(
            monitoring, "LOGFIRE_TOKEN", "token"
        ), patch.object(monitoring, "_initialized", False), patch.object(monitoring, "logfire") as mock_logfire:
            monitoring.initialize_logfire(app)

            mock_logfire.configure.assert_called_once()
            mock_logfire.instrument_fastapi.assert_called_once_with(app=app)
            mock_logfire.instrument_sqlalchemy.assert_called_once()
            assert monitoring.is_enabled() is True

    def test_failed_instrumentation_is_not_fatal(self):
        with patch.object(monitoring, "LOGFIRE_ENABLED", True), patch.object(
            monitoring, "LOGFIRE_TOKEN", "token"
        ), patch.object(monitoring, "_initialized", False), patch.object(monitoring, "logfire") as mock_logfire:
            mock_logfire.instrument_httpx.side_effect = RuntimeError("missing extra")

            monitoring.initialize_logfire()

            assert monitoring.is_enabled() is True


class TestLogHelpers:
    @pytest.mark.parametrize(
        "call",
        [
            lambda: monitoring.log_api_request("GET", "/health", 200, 1.5),
            lambda: monitoring.log_llm_call("llama", 42, 120),
            lambda: monitoring.log_error("ValueError", "boom", {"path": "/x"}),
        ],
    )
    def test_helpers_skip_logfire_when_disabled(self, call):
        with patch.object(monitoring, "logfire") as mock_logfire:
            call()

            assert mock_logfire.method_calls == []

    def test_api_request_reported_when_enabled(self):
        with patch.object(monitoring, "_initialized", True), patch.object(monitoring, "logfire") as mock_logfire:
            monitoring.log_api_request("POST", "/api/v1/sessions", 201, 12.0)

            mock_logfire.info.assert_called_once()
            assert mock_logfire.info.call_args[1]["status_code"] == 201

    def test_error_reported_with_context(self):
        with patch.object(monitoring, "_initialized", True), patch.object(
            monitoring, "logfire", MagicMock()
        ) as mock_logfire:
            monitoring.log_error("KeyError", "missing", {"path": "/x"})

            kwargs = mock_logfire.error.call_args[1]
            assert kwargs["error_type"] == "KeyError"
            assert kwargs["path"] == "/x"
