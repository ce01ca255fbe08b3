"""Tests for the JSON formatter and token scrubbing."""

import json
import logging
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.logger import GrambotLogger, _JsonFormatter, redact_token

SECRET_URL = "https://api.telegram.org/bot123456:ABC-def_9/sendMessage"


def _record(msg: str, **extra: object) -> logging.LogRecord:
    record = logging.LogRecord(
        name="grambot", level=logging.ERROR, pathname=__file__, lineno=1,
        msg=msg, args=(), exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestRedactToken:
    """Bot tokens never survive redaction."""

    def test_url(self) -> None:
        assert redact_token(SECRET_URL) == "https://api.telegram.org/bot<token>/sendMessage"

    def test_text_without_token(self) -> None:
        assert redact_token("bot is running") == "bot is running"


class TestJsonFormatter:
    """Records become single-line JSON with scrubbed message and extras."""

    def test_standard_fields(self) -> None:
        entry = json.loads(_JsonFormatter().format(_record("hello")))
        assert entry["message"] == "hello"
        assert entry["level"] == "ERROR"
        assert entry["logger"] == "grambot"
        assert "exc_info" not in entry

    def test_message_scrubbed(self) -> None:
        entry = json.loads(_JsonFormatter().format(_record(f"GET {SECRET_URL} failed")))
        assert "ABC-def_9" not in entry["message"]

    def test_nested_extras_scrubbed(self) -> None:
        record = _record(
            "Telegram API call failed",
            api_response={"ok": False, "description": f"see {SECRET_URL}"},
            request_params=[{"url": SECRET_URL, "chat_id": 42}],
            update_id=7,
        )
        output = _JsonFormatter().format(record)
        entry = json.loads(output)

        assert "ABC-def_9" not in output
        assert entry["api_response"]["ok"] is False
        assert entry["request_params"][0]["chat_id"] == 42
        assert entry["update_id"] == 7

    def test_non_json_extra_is_stringified(self) -> None:
        entry = json.loads(_JsonFormatter().format(_record("x", path=object())))
        assert entry["path"].startswith("<object object")

    def test_exception_text_scrubbed(self) -> None:
        try:
            raise RuntimeError(SECRET_URL)
        except RuntimeError:
            record = _record("boom")
            record.exc_info = sys.exc_info()
        entry = json.loads(_JsonFormatter().format(record))
        assert "RuntimeError" in entry["exc_info"]
        assert "ABC-def_9" not in entry["exc_info"]


class TestGrambotLogger:
    """The shared logger is configured once."""

    def test_same_logger(self) -> None:
        first = GrambotLogger.get_logger()
        assert GrambotLogger.get_logger() is first
        assert first.name == "grambot"
        assert all(isinstance(h.formatter, _JsonFormatter) for h in first.handlers)
