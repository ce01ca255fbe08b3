"""Tests for the command-line poller."""

import json
import sys
import os
from unittest.mock import patch, MagicMock

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import main
from grambot import GramBot

TOKEN = "123456:ABC-def"

BATCH = {
    "ok": True,
    "result": [
        {"update_id": 5, "message": {"message_id": 1, "chat": {"id": 42, "type": "private"}, "text": "ping"}},
        {"update_id": 6, "callback_query": {"id": "cb", "data": "ok", "message": {"chat": {"id": 43}}}},
    ],
}


def _response(body: dict) -> MagicMock:
    mock_resp = MagicMock()
    mock_resp.text = json.dumps(body)
    return mock_resp


class TestPeek:
    """--peek lists updates without acknowledging them."""

    @patch("grambot.transport.requests.post")
    def test_prints_and_does_not_advance(self, mock_post: MagicMock, capsys) -> None:
        mock_post.return_value = _response(BATCH)
        bot = GramBot(TOKEN, log_errors=False)

        count = main.peek(bot)

        assert count == 2
        assert mock_post.call_count == 1
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "5\tmessage\t42\tping"
        assert lines[1] == "6\tcallback_query\t43\tok"


class TestHandleUpdate:
    """Echo replies only to text messages."""

    @patch("grambot.transport.requests.post")
    def test_echo_text_message(self, mock_post: MagicMock) -> None:
        mock_post.return_value = _response({"ok": True, "result": {}})
        bot = GramBot(TOKEN, log_errors=False, update=BATCH["result"][0])

        main.handle_update(bot, echo=True)

        kwargs = mock_post.call_args.kwargs
        assert kwargs["params"] == {"chat_id": "42"}
        assert kwargs["data"] == {"text": "ping", "reply_to_message_id": "1"}

    @patch("grambot.transport.requests.post")
    def test_no_echo_for_callback(self, mock_post: MagicMock) -> None:
        bot = GramBot(TOKEN, log_errors=False, update=BATCH["result"][1])

        main.handle_update(bot, echo=True)

        mock_post.assert_not_called()


class TestMain:
    """Startup checks."""

    def test_missing_token(self) -> None:
        with patch.object(main, "BOT_TOKEN", None):
            with pytest.raises(EnvironmentError):
                main.main([])
