"""Reply-markup builders.

Keyboards are serialized to the JSON strings the Bot API expects in a
``reply_markup`` form field; single buttons are returned as dicts so they
can be arranged into rows first.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from grambot.models import (
    ForceReply,
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    KeyboardButton,
    ReplyKeyboardMarkup,
    ReplyKeyboardRemove,
)


def build_keyboard(
    options: Sequence[Sequence[Any]],
    one_time: bool = False,
    resize: bool = False,
    selective: bool = True,
) -> str:
    """Build a custom reply keyboard.

    Args:
        options: Button rows; each button is a string or a dict from
            :func:`build_keyboard_button`.
        one_time: Hide the keyboard as soon as it has been used.
        resize: Let clients shrink the keyboard vertically to fit.
        selective: Show the keyboard only to mentioned / replied-to users.
    """
    markup = ReplyKeyboardMarkup(
        keyboard=[list(row) for row in options],
        one_time_keyboard=one_time,
        resize_keyboard=resize,
        selective=selective,
    )
    return markup.model_dump_json(exclude_none=True)


def build_inline_keyboard(options: Sequence[Sequence[Dict[str, Any]]]) -> str:
    """Build an inline keyboard from rows of :func:`build_inline_keyboard_button` dicts."""
    markup = InlineKeyboardMarkup(inline_keyboard=[list(row) for row in options])
    return markup.model_dump_json(exclude_none=True)


def build_inline_keyboard_button(
    text: str,
    url: str = "",
    callback_data: str = "",
    switch_inline_query: Optional[str] = None,
    switch_inline_query_current_chat: Optional[str] = None,
    callback_game: Any = "",
    pay: Any = "",
) -> Dict[str, Any]:
    """Build one inline keyboard button.

    A button carries exactly one action; when several are given the first
    one in signature order wins.  ``switch_inline_query`` may be an empty
    string, which inserts just the bot's username.
    """
    fields: Dict[str, Any] = {"text": text}
    if url != "":
        fields["url"] = url
    elif callback_data != "":
        fields["callback_data"] = callback_data
    elif switch_inline_query is not None:
        fields["switch_inline_query"] = switch_inline_query
    elif switch_inline_query_current_chat is not None:
        fields["switch_inline_query_current_chat"] = switch_inline_query_current_chat
    elif callback_game != "":
        fields["callback_game"] = callback_game
    elif pay != "":
        fields["pay"] = pay
    return InlineKeyboardButton(**fields).model_dump(exclude_none=True)


def build_keyboard_button(text: str, request_contact: bool = False, request_location: bool = False) -> Dict[str, Any]:
    """Build one reply keyboard button."""
    button = KeyboardButton(text=text, request_contact=request_contact, request_location=request_location)
    return button.model_dump()


def build_keyboard_hide(selective: bool = True) -> str:
    """Markup that makes clients hide the current custom keyboard."""
    return ReplyKeyboardRemove(selective=selective).model_dump_json()


def build_force_reply(selective: bool = True) -> str:
    """Markup that makes clients open a reply interface for the bot's message."""
    return ForceReply(selective=selective).model_dump_json()
