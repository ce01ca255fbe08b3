"""Kind-aware field accessors over a raw update.

Every accessor is a pure function of ``(update, kind)``.  When *kind* is not
supplied it is computed with :func:`grambot.classifier.classify`, so callers
that read several fields should classify once and pass the result along (or
use :class:`UpdateView`, which does exactly that).

Missing paths never raise; they come back as ``None``.
"""

from __future__ import annotations

import dataclasses
from typing import Any, Dict, List, Optional, Tuple

from grambot.classifier import classify, dig
from grambot.models import UpdateKind

Update = Dict[str, Any]
Path = Tuple[str, ...]

# Where the message object lives for each kind (chat and message_id lookups).
_MESSAGE_ROOT: Dict[UpdateKind, Path] = {
    UpdateKind.CALLBACK_QUERY: ("callback_query", "message"),
    UpdateKind.CHANNEL_POST: ("channel_post",),
    UpdateKind.EDITED_MESSAGE: ("edited_message",),
}

# Where the ``from`` user lives for each kind (sender identity lookups).
_SENDER_ROOT: Dict[UpdateKind, Path] = {
    UpdateKind.CALLBACK_QUERY: ("callback_query",),
    UpdateKind.CHANNEL_POST: ("channel_post",),
    UpdateKind.EDITED_MESSAGE: ("edited_message",),
}

_DEFAULT_ROOT: Path = ("message",)


def _kind(update: Any, kind: Optional[UpdateKind]) -> Optional[UpdateKind]:
    return kind if kind is not None else classify(update)


def _message_field(update: Any, kind: Optional[UpdateKind], *field: str) -> Any:
    root = _MESSAGE_ROOT.get(_kind(update, kind), _DEFAULT_ROOT)
    return dig(update, *root, *field)


def _sender_field(update: Any, kind: Optional[UpdateKind], field: str) -> Any:
    root = _SENDER_ROOT.get(_kind(update, kind), _DEFAULT_ROOT)
    return dig(update, *root, "from", field)


# ── Kind-dependent accessors ─────────────────────────────────────────────────


def text(update: Update, kind: Optional[UpdateKind] = None) -> Optional[str]:
    """Message text, or the callback data for a callback query."""
    kind = _kind(update, kind)
    if kind is UpdateKind.CALLBACK_QUERY:
        return dig(update, "callback_query", "data")
    return _message_field(update, kind, "text")


def caption(update: Update, kind: Optional[UpdateKind] = None) -> Optional[str]:
    if _kind(update, kind) is UpdateKind.CHANNEL_POST:
        return dig(update, "channel_post", "caption")
    return dig(update, "message", "caption")


def chat_id(update: Update, kind: Optional[UpdateKind] = None) -> Optional[int]:
    """Chat to answer in.  Inline queries have no chat, so the sender id is used."""
    kind = _kind(update, kind)
    if kind is UpdateKind.INLINE_QUERY:
        return dig(update, "inline_query", "from", "id")
    return _message_field(update, kind, "chat", "id")


def message_id(update: Update, kind: Optional[UpdateKind] = None) -> Optional[int]:
    return _message_field(update, kind, "message_id")


def first_name(update: Update, kind: Optional[UpdateKind] = None) -> Optional[str]:
    return _sender_field(update, kind, "first_name")


def last_name(update: Update, kind: Optional[UpdateKind] = None) -> Optional[str]:
    return _sender_field(update, kind, "last_name")


def username(update: Update, kind: Optional[UpdateKind] = None) -> Optional[str]:
    return _sender_field(update, kind, "username")


def user_id(update: Update, kind: Optional[UpdateKind] = None) -> Optional[int]:
    return _sender_field(update, kind, "id")


def photo(update: Update, kind: Optional[UpdateKind] = None) -> List[dict]:
    """Photo sizes of a photo message; an empty list for every other kind."""
    if _kind(update, kind) is not UpdateKind.PHOTO:
        return []
    return dig(update, "message", "photo") or []


# ── Fixed-path accessors ─────────────────────────────────────────────────────


def update_id(update: Update) -> Optional[int]:
    return dig(update, "update_id")


def date(update: Update) -> Optional[int]:
    return dig(update, "message", "date")


def location(update: Update) -> Optional[dict]:
    return dig(update, "message", "location")


def reply_to_message_id(update: Update) -> Optional[int]:
    return dig(update, "message", "reply_to_message", "message_id")


def reply_to_message_from_user_id(update: Update) -> Optional[int]:
    return dig(update, "message", "reply_to_message", "forward_from", "id")


def from_id(update: Update) -> Optional[int]:
    """Original sender of a forwarded message."""
    return dig(update, "message", "forward_from", "id")


def from_chat_id(update: Update) -> Optional[int]:
    """Chat a forwarded message was taken from."""
    return dig(update, "message", "forward_from_chat", "id")


def inline_query(update: Update) -> Optional[dict]:
    return dig(update, "inline_query")


def callback_query(update: Update) -> Optional[dict]:
    return dig(update, "callback_query")


def callback_id(update: Update) -> Optional[str]:
    return dig(update, "callback_query", "id")


def callback_data(update: Update) -> Optional[str]:
    return dig(update, "callback_query", "data")


def callback_message(update: Update) -> Optional[dict]:
    return dig(update, "callback_query", "message")


def callback_chat_id(update: Update) -> Optional[int]:
    return dig(update, "callback_query", "message", "chat", "id")


def message_from_group(update: Update) -> bool:
    """True when the message was posted in a group, supergroup or channel."""
    chat_type = dig(update, "message", "chat", "type")
    return chat_type is not None and chat_type != "private"


def message_from_group_title(update: Update) -> str:
    """Title of the group chat, or ``""`` for private chats."""
    if not message_from_group(update):
        return ""
    return dig(update, "message", "chat", "title") or ""


# ── Classified view ──────────────────────────────────────────────────────────


@dataclasses.dataclass(frozen=True)
class UpdateView:
    """An update paired with its kind, computed once.

    Exposes every accessor as a read-only property::

        view = UpdateView.of(update)
        if view.kind is UpdateKind.MESSAGE:
            reply(view.chat_id, view.text)
    """

    update: Update
    kind: Optional[UpdateKind]

    @classmethod
    def of(cls, update: Optional[Update]) -> "UpdateView":
        update = update if isinstance(update, dict) else {}
        return cls(update=update, kind=classify(update))

    @property
    def text(self) -> Optional[str]:
        return text(self.update, self.kind)

    @property
    def caption(self) -> Optional[str]:
        return caption(self.update, self.kind)

    @property
    def chat_id(self) -> Optional[int]:
        return chat_id(self.update, self.kind)

    @property
    def message_id(self) -> Optional[int]:
        return message_id(self.update, self.kind)

    @property
    def first_name(self) -> Optional[str]:
        return first_name(self.update, self.kind)

    @property
    def last_name(self) -> Optional[str]:
        return last_name(self.update, self.kind)

    @property
    def username(self) -> Optional[str]:
        return username(self.update, self.kind)

    @property
    def user_id(self) -> Optional[int]:
        return user_id(self.update, self.kind)

    @property
    def photo(self) -> List[dict]:
        return photo(self.update, self.kind)

    @property
    def update_id(self) -> Optional[int]:
        return update_id(self.update)

    @property
    def date(self) -> Optional[int]:
        return date(self.update)

    @property
    def location(self) -> Optional[dict]:
        return location(self.update)

    @property
    def reply_to_message_id(self) -> Optional[int]:
        return reply_to_message_id(self.update)

    @property
    def callback_id(self) -> Optional[str]:
        return callback_id(self.update)

    @property
    def message_from_group(self) -> bool:
        return message_from_group(self.update)

    @property
    def message_from_group_title(self) -> str:
        return message_from_group_title(self.update)
