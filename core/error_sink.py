"""Error sinks — where the transport reports failed API envelopes.

The transport hands every decoded response together with the request context
to an :class:`ErrorSink` when error logging is enabled.  The sink decides what
is worth recording; :class:`LoggerErrorSink` keeps only ``ok: false`` replies.
"""

from typing import Any, List, Optional, Protocol, runtime_checkable

from core.logger import GrambotLogger

logger = GrambotLogger.get_logger()


@runtime_checkable
class ErrorSink(Protocol):
    """Receives ``(response, context)`` pairs from the transport."""

    def log(self, response: Optional[dict], context: List[Any]) -> None: ...  # noqa: E704


class LoggerErrorSink:
    """Write failed API envelopes to the shared JSON logger.

    *context* is ``[update, params]`` when an update was being processed,
    or just ``[params]`` otherwise.
    """

    def log(self, response: Optional[dict], context: List[Any]) -> None:
        if isinstance(response, dict) and response.get("ok", False):
            return

        params = context[-1] if context else None
        update = context[0] if len(context) > 1 else None
        logger.error(
            "Telegram API call failed",
            extra={
                "api_response": response,
                "request_params": params,
                "update_id": update.get("update_id") if isinstance(update, dict) else None,
            },
        )
