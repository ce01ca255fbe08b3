"""GrambotLogger — JSON logging for the facade, with bot tokens scrubbed.

Every module logs through the one ``grambot`` logger.  Records are written as
single-line JSON to stdout and to a rotating ``grambot.log``.  Request URLs,
parameters and API replies routinely end up in ``extra`` fields, so the
formatter replaces anything shaped like ``bot<id>:<secret>`` before a record
leaves the process.

Environment:
    GRAMBOT_LOG_DIR: Directory of the rotating log file (default ``logs``);
        an empty value disables the file handler.
    GRAMBOT_LOG_LEVEL: Level name applied on first configuration (default ``INFO``).
"""

import json
import logging
import os
import re
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, List, Optional

_TOKEN_PATTERN = re.compile(r"bot\d+:[A-Za-z0-9_-]+")
_TOKEN_PLACEHOLDER = "bot<token>"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_FIELDS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


def redact_token(text: str) -> str:
    """Replace ``bot<id>:<secret>`` sequences in *text*."""
    return _TOKEN_PATTERN.sub(_TOKEN_PLACEHOLDER, text)


def _scrub(value: Any) -> Any:
    if isinstance(value, str):
        return redact_token(value)
    if isinstance(value, dict):
        return {str(k): _scrub(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [_scrub(v) for v in value]
    if value is None or isinstance(value, (bool, int, float)):
        return value
    return redact_token(str(value))


class _JsonFormatter(logging.Formatter):
    """One JSON object per record; ``extra`` keys are merged in after scrubbing.

    Example::

        logger.error(
            "Telegram API call failed",
            extra={"api_response": {...}, "request_params": {...}},
        )
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": redact_token(record.getMessage()),
            "module": record.module,
            "func_name": record.funcName,
        }
        entry.update(
            (key, _scrub(value))
            for key, value in record.__dict__.items()
            if key not in _RECORD_FIELDS and key not in entry
        )
        if record.exc_info:
            entry["exc_info"] = redact_token(self.formatException(record.exc_info))
        return json.dumps(entry, ensure_ascii=False)


class GrambotLogger:
    """Configures the shared ``grambot`` logger on first use.

    Usage::

        from core.logger import GrambotLogger

        logger = GrambotLogger.get_logger()
        logger.info("Polling started", extra={"offset": 0})
    """

    NAME = "grambot"
    _LOG_FILE = "grambot.log"
    _MAX_BYTES = 5 * 1024 * 1024
    _BACKUP_COUNT = 5

    _configured = False

    @classmethod
    def get_logger(cls, level: Optional[int] = None) -> logging.Logger:
        """Return the ``grambot`` logger, attaching handlers the first time.

        *level* only takes effect on that first call; later calls return the
        logger unchanged.
        """
        logger = logging.getLogger(cls.NAME)
        if not cls._configured:
            if level is None:
                level = logging.getLevelName(os.environ.get("GRAMBOT_LOG_LEVEL", "INFO").upper())
                if not isinstance(level, int):
                    level = logging.INFO
            logger.setLevel(level)
            # Handlers survive module reloads on the named logger.
            if not logger.handlers:
                for handler in cls._handlers():
                    logger.addHandler(handler)
            cls._configured = True
        return logger

    @classmethod
    def _handlers(cls) -> List[logging.Handler]:
        formatter = _JsonFormatter()
        handlers: List[logging.Handler] = [logging.StreamHandler()]

        log_dir = os.environ.get("GRAMBOT_LOG_DIR", "logs")
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            handlers.append(
                RotatingFileHandler(
                    os.path.join(log_dir, cls._LOG_FILE),
                    maxBytes=cls._MAX_BYTES,
                    backupCount=cls._BACKUP_COUNT,
                    encoding="utf-8",
                )
            )
        for handler in handlers:
            handler.setFormatter(formatter)
        return handlers
