"""Pydantic models used by the grambot facade.

Updates themselves stay plain ``dict`` objects (the facade does not validate
the platform's schemas); these models cover what the facade builds or owns:
proxy settings, per-call request context, upload references, the synthesized
transport failure envelope and the reply-markup objects produced by
:mod:`grambot.keyboards`.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote

from pydantic import BaseModel, field_validator


class UpdateKind(str, Enum):
    """Classified category of an incoming update."""

    INLINE_QUERY = "inline_query"
    CALLBACK_QUERY = "callback_query"
    EDITED_MESSAGE = "edited_message"
    REPLY = "reply"
    MESSAGE = "message"
    PHOTO = "photo"
    VIDEO = "video"
    AUDIO = "audio"
    VOICE = "voice"
    ANIMATION = "animation"
    STICKER = "sticker"
    DOCUMENT = "document"
    LOCATION = "location"
    CONTACT = "contact"
    CHANNEL_POST = "channel_post"


# libcurl CURLPROXY_* constants, accepted for compatibility with old configs.
_CURL_PROXY_TYPES: Dict[int, str] = {
    0: "http",
    1: "http",
    2: "https",
    4: "socks4",
    5: "socks5",
    6: "socks4a",
    7: "socks5h",
}

_PROXY_SCHEMES = frozenset(_CURL_PROXY_TYPES.values())


class ProxyConfig(BaseModel):
    """Proxy applied to every transport call.

    Only the fields that are set are applied; without ``url`` no proxy is used.
    ``auth`` is ``"user:password"``.
    """

    url: Optional[str] = None
    port: Optional[int] = None
    type: Optional[str] = None
    auth: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("type", mode="before")
    @classmethod
    def _normalise_type(cls, value: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, int) and not isinstance(value, bool):
            if value not in _CURL_PROXY_TYPES:
                raise ValueError(f"unknown curl proxy type {value}")
            return _CURL_PROXY_TYPES[value]
        scheme = str(value).lower()
        if scheme not in _PROXY_SCHEMES:
            raise ValueError(f"unsupported proxy type {value!r}")
        return scheme

    @field_validator("port")
    @classmethod
    def _check_port(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and not 1 <= value <= 65535:
            raise ValueError(f"port {value} out of range")
        return value

    def to_requests_proxies(self) -> Optional[Dict[str, str]]:
        """Return a ``requests`` ``proxies`` mapping, or ``None`` for no proxy."""
        if not self.url:
            return None

        scheme, sep, host = self.url.partition("://")
        if not sep:
            scheme, host = "", self.url
        scheme = self.type or scheme or "http"
        host = host.rstrip("/")

        if self.port is not None and not _has_port(host):
            host = f"{host}:{self.port}"
        if self.auth:
            user, _, password = self.auth.partition(":")
            credentials = quote(user, safe="")
            if password:
                credentials += ":" + quote(password, safe="")
            host = f"{credentials}@{host}"

        proxy_url = f"{scheme}://{host}"
        return {"http": proxy_url, "https": proxy_url}


def _has_port(host: str) -> bool:
    """True when *host* already ends in ``:<digits>`` (IPv6 brackets aware)."""
    tail = host.rsplit("]", 1)[-1]
    return ":" in tail and tail.rsplit(":", 1)[1].isdigit()


class RequestContext(BaseModel):
    """Per-call description of an outbound request, used for logging."""

    endpoint: str
    params: Dict[str, Any] = {}
    is_multipart: bool = False


class InputFile(BaseModel):
    """Reference to a local file uploaded as a multipart part.

    ``mime_type`` and ``filename`` override what the transport would send
    otherwise (``application/octet-stream`` and the path's basename).
    """

    path: Path
    mime_type: Optional[str] = None
    filename: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def upload_name(self) -> str:
        return self.filename or self.path.name


class TransportFailure(BaseModel):
    """Envelope synthesized when the HTTP request itself did not complete."""

    ok: bool = False
    error_code: int
    error_message: str


# ── Reply markup ─────────────────────────────────────────────────────────────


class KeyboardButton(BaseModel):
    """One button of a custom reply keyboard; unnamed fields such as ``request_poll`` are kept."""

    text: str
    request_contact: Optional[bool] = None
    request_location: Optional[bool] = None

    model_config = {"extra": "allow"}


class ReplyKeyboardMarkup(BaseModel):
    """A custom keyboard with reply options."""

    keyboard: List[List[Union[str, KeyboardButton]]]
    one_time_keyboard: bool = False
    resize_keyboard: bool = False
    selective: bool = True


class InlineKeyboardButton(BaseModel):
    """One button of an inline keyboard; exactly one action field is set.

    Fields the model does not name (``web_app``, ``login_url`` ...) are kept.
    """

    text: str
    url: Optional[str] = None
    callback_data: Optional[str] = None
    switch_inline_query: Optional[str] = None
    switch_inline_query_current_chat: Optional[str] = None
    callback_game: Optional[Any] = None
    pay: Optional[Any] = None

    model_config = {"extra": "allow"}


class InlineKeyboardMarkup(BaseModel):
    """An inline keyboard shown right next to the message it belongs to."""

    inline_keyboard: List[List[InlineKeyboardButton]]


class ReplyKeyboardRemove(BaseModel):
    """Asks clients to hide the current custom keyboard."""

    remove_keyboard: bool = True
    selective: bool = True


class ForceReply(BaseModel):
    """Asks clients to display a reply interface to the user."""

    force_reply: bool = True
    selective: bool = True
