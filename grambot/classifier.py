"""Update classification — map a raw update to exactly one :class:`UpdateKind`.

A well-formed update carries a single top-level kind field, but composite or
malformed payloads can satisfy several checks.  The order of
:data:`_PRIORITY` is therefore the tie-break: the first matching entry wins.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

from grambot.models import UpdateKind

# (path into the update, kind), evaluated top to bottom.
_PRIORITY: Tuple[Tuple[Tuple[str, ...], UpdateKind], ...] = (
    (("inline_query",), UpdateKind.INLINE_QUERY),
    (("callback_query",), UpdateKind.CALLBACK_QUERY),
    (("edited_message",), UpdateKind.EDITED_MESSAGE),
    (("message", "text"), UpdateKind.MESSAGE),
    (("message", "photo"), UpdateKind.PHOTO),
    (("message", "video"), UpdateKind.VIDEO),
    (("message", "audio"), UpdateKind.AUDIO),
    (("message", "voice"), UpdateKind.VOICE),
    (("message", "contact"), UpdateKind.CONTACT),
    (("message", "location"), UpdateKind.LOCATION),
    (("message", "reply_to_message"), UpdateKind.REPLY),
    (("message", "animation"), UpdateKind.ANIMATION),
    (("message", "sticker"), UpdateKind.STICKER),
    (("message", "document"), UpdateKind.DOCUMENT),
    (("channel_post",), UpdateKind.CHANNEL_POST),
)


def dig(data: Any, *path: str) -> Any:
    """Follow *path* through nested dicts; ``None`` as soon as a step is missing."""
    node = data
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
        if node is None:
            return None
    return node


def classify(update: Any) -> Optional[UpdateKind]:
    """Return the kind of *update*, or ``None`` when no known field is present.

    A field counts as present when its key exists with a non-null value.
    Never raises, whatever the input.
    """
    for path, kind in _PRIORITY:
        if dig(update, *path) is not None:
            return kind
    return None
