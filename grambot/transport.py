"""TransportClient -- one HTTP round trip per call, never raises.

Requests are issued with the ``requests`` library.  Whatever happens on the
wire, :meth:`TransportClient.send` hands back a JSON body: the API's own reply
(2xx or not, the Bot API always answers with an ``ok`` envelope) or a
synthesized :class:`~grambot.models.TransportFailure` when no reply arrived.
"""

from __future__ import annotations

import contextlib
import json
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

import requests
from pydantic import BaseModel

from core.error_sink import ErrorSink, LoggerErrorSink
from core.logger import GrambotLogger, redact_token
from grambot.models import InputFile, ProxyConfig, RequestContext, TransportFailure

logger = GrambotLogger.get_logger()

# Error codes follow libcurl's numbering so logs stay comparable across clients.
_ERROR_CODES: Tuple[Tuple[Type[Exception], int], ...] = (
    (requests.exceptions.ProxyError, 5),
    (requests.exceptions.SSLError, 35),
    (requests.exceptions.Timeout, 28),
    (requests.exceptions.ConnectionError, 7),
    (requests.exceptions.TooManyRedirects, 47),
    (requests.exceptions.InvalidURL, 3),
    (requests.exceptions.MissingSchema, 3),
    (requests.exceptions.InvalidSchema, 1),
    (OSError, 26),
    (TypeError, 43),
    (ValueError, 43),
)


def _error_code(exc: Exception) -> int:
    for exc_type, code in _ERROR_CODES:
        if isinstance(exc, exc_type):
            return code
    return 0


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(exclude_none=True)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_field(value: Any) -> str:
    """Form-encode a single parameter value the way the Bot API expects."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, BaseModel):
        return value.model_dump_json(exclude_none=True)
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, default=_jsonable)
    return str(value)


class TransportClient:
    """Issues requests against the Bot API with fixed proxy and TLS settings.

    TLS certificates are verified unless *verify_tls* is ``False``, which is
    an explicit opt-in to insecure connections.
    """

    _DEFAULT_TIMEOUT: int = 10

    def __init__(
        self,
        proxy: Optional[ProxyConfig] = None,
        verify_tls: bool = True,
        log_errors: bool = True,
        error_sink: Optional[ErrorSink] = None,
        timeout: int = _DEFAULT_TIMEOUT,
    ) -> None:
        """Create a transport.

        Args:
            proxy: Proxy applied to every call; ``None`` for a direct connection.
            verify_tls: Verify server certificates.
            log_errors: Report every response to *error_sink*.
            error_sink: Sink for ``(response, context)`` pairs; defaults to
                :class:`~core.error_sink.LoggerErrorSink`.
            timeout: Default connect/read timeout in seconds.
        """
        self._proxy = proxy
        self._proxies = proxy.to_requests_proxies() if proxy else None
        self._verify_tls = verify_tls
        self._log_errors = log_errors
        self._error_sink: ErrorSink = error_sink if error_sink is not None else LoggerErrorSink()
        self._timeout = timeout
        if not verify_tls:
            logger.warning("TLS certificate verification is disabled for Telegram API calls")

    @property
    def timeout(self) -> int:
        return self._timeout

    # ------------------------------------------------------------------
    #  Public API
    # ------------------------------------------------------------------

    def send(
        self,
        url: str,
        params: Optional[Mapping[str, Any]] = None,
        is_post: bool = True,
        current_update: Optional[dict] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """Perform one request and return the raw JSON body.

        A ``chat_id`` parameter always travels in the query string and is
        removed from the body.  With ``is_post=False`` a bare GET is issued.
        Transport failures come back as a ``{"ok": false, ...}`` body.
        """
        fields: Dict[str, Any] = {k: v for k, v in (params or {}).items() if v is not None}
        query: Dict[str, str] = {}
        if "chat_id" in fields:
            query["chat_id"] = encode_field(fields.pop("chat_id"))

        uploads = {k: v for k, v in fields.items() if isinstance(v, InputFile)} if is_post else {}
        context = RequestContext(
            endpoint=url.rstrip("/").rsplit("/", 1)[-1],
            params=dict(params or {}),
            is_multipart=bool(uploads),
        )

        logger.debug(
            "Calling Telegram API",
            extra={"api_endpoint": context.endpoint, "is_post": is_post, "is_multipart": context.is_multipart},
        )
        try:
            raw = self._request(url, query, fields, uploads, is_post, timeout)
        except (requests.RequestException, OSError, TypeError, ValueError) as exc:
            failure = TransportFailure(error_code=_error_code(exc), error_message=redact_token(str(exc)))
            logger.error(
                "Telegram API transport error",
                extra={"api_endpoint": context.endpoint, "error_code": failure.error_code, "error": failure.error_message},
            )
            raw = failure.model_dump_json()

        self._report(raw, context, current_update)
        return raw

    def download(self, url: str, local_file_path: str, chunk_size: int = 8192) -> None:
        """Stream *url* into *local_file_path* in fixed-size chunks.

        Raises:
            requests.HTTPError: If the response status is not 2xx.
            requests.RequestException: On transport-level failures.
            OSError: If the local file cannot be written.
        """
        with requests.get(
            url,
            stream=True,
            proxies=self._proxies,
            verify=self._verify_tls,
            timeout=self._timeout,
        ) as response:
            response.raise_for_status()
            with open(local_file_path, "wb") as out:
                for chunk in response.iter_content(chunk_size=chunk_size):
                    if chunk:
                        out.write(chunk)

    # ------------------------------------------------------------------
    #  Internal helpers
    # ------------------------------------------------------------------

    def _request(
        self,
        url: str,
        query: Dict[str, str],
        fields: Dict[str, Any],
        uploads: Dict[str, InputFile],
        is_post: bool,
        timeout: Optional[float],
    ) -> str:
        kwargs: Dict[str, Any] = {
            "params": query or None,
            "proxies": self._proxies,
            "verify": self._verify_tls,
            "timeout": timeout if timeout is not None else self._timeout,
        }
        if not is_post:
            return requests.get(url, **kwargs).text

        data = {k: encode_field(v) for k, v in fields.items() if k not in uploads}
        with contextlib.ExitStack() as stack:
            files = {
                name: (
                    upload.upload_name,
                    stack.enter_context(open(upload.path, "rb")),
                    upload.mime_type or "application/octet-stream",
                )
                for name, upload in uploads.items()
            }
            response = requests.post(url, data=data, files=files or None, **kwargs)
        return response.text

    def _report(self, raw: str, context: RequestContext, current_update: Optional[dict]) -> None:
        """Hand the decoded response to the error sink; sink failures are logged only."""
        if not self._log_errors:
            return
        try:
            decoded = json.loads(raw)
        except ValueError:
            decoded = None
        sink_context: List[Any] = [current_update, context.params] if current_update else [context.params]
        try:
            self._error_sink.log(decoded, sink_context)
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Error sink raised while reporting",
                extra={"api_endpoint": context.endpoint, "error": str(exc)},
            )
