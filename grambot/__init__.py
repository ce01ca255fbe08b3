"""grambot — a synchronous facade over the Telegram Bot API.

:class:`GramBot` wraps the remote methods behind one ``call`` chokepoint and
keeps the update being served; :func:`classify` and the functions in
:mod:`grambot.accessors` read fields out of raw update dicts.

Usage::

    from grambot import GramBot, UpdateKind, classify
    from grambot import accessors

    bot = GramBot("123456:ABC-DEF")
    batch = bot.poll()
    for update in batch.get("result", []):
        if classify(update) is UpdateKind.MESSAGE:
            bot.send_message({"chat_id": accessors.chat_id(update), "text": accessors.text(update)})
"""

from grambot.accessors import UpdateView
from grambot.classifier import classify
from grambot.client import GramBot
from grambot.exceptions import ConfigurationError
from grambot.models import InputFile, ProxyConfig, UpdateKind

__all__ = [
    "GramBot",
    "UpdateView",
    "UpdateKind",
    "classify",
    "ConfigurationError",
    "InputFile",
    "ProxyConfig",
]
