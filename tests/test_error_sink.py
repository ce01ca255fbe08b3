"""Tests for the logger-backed error sink."""

import sys
import os
from unittest.mock import patch, MagicMock

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.error_sink import ErrorSink, LoggerErrorSink


class TestLoggerErrorSink:
    """Only failed envelopes are written to the log."""

    def test_satisfies_protocol(self) -> None:
        assert isinstance(LoggerErrorSink(), ErrorSink)

    @patch("core.error_sink.logger")
    def test_success_not_logged(self, mock_logger: MagicMock) -> None:
        LoggerErrorSink().log({"ok": True, "result": True}, [{"text": "x"}])
        mock_logger.error.assert_not_called()

    @patch("core.error_sink.logger")
    def test_failure_logged_with_context(self, mock_logger: MagicMock) -> None:
        update = {"update_id": 77, "message": {"text": "hi"}}
        response = {"ok": False, "error_code": 403, "description": "Forbidden"}

        LoggerErrorSink().log(response, [update, {"chat_id": 1}])

        extra = mock_logger.error.call_args.kwargs["extra"]
        assert extra["api_response"] == response
        assert extra["request_params"] == {"chat_id": 1}
        assert extra["update_id"] == 77

    @patch("core.error_sink.logger")
    def test_undecodable_response_logged(self, mock_logger: MagicMock) -> None:
        LoggerErrorSink().log(None, [{"text": "x"}])

        extra = mock_logger.error.call_args.kwargs["extra"]
        assert extra["api_response"] is None
        assert extra["update_id"] is None
