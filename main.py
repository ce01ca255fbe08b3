"""Command-line long-polling runner.

``python main.py --peek`` fetches pending updates once without acknowledging
them and prints each one's kind and text.  ``python main.py`` polls forever
and logs every update; add ``--echo`` to reply to text messages with the
same text.
"""

import argparse
import time

from config import BOT_TOKEN, LOG_ERRORS, POLL_LIMIT, POLL_TIMEOUT, PROXY, VERIFY_TLS
from core.logger import GrambotLogger
from grambot import GramBot, UpdateKind

logger = GrambotLogger.get_logger()

_RETRY_DELAY = 5


def handle_update(bot: GramBot, echo: bool = False) -> None:
    """Log the update currently served by *bot* and optionally echo it back."""
    view = bot.view()
    logger.info(
        "Received update",
        extra={"update_id": view.update_id, "kind": view.kind.value if view.kind else None, "chat_id": view.chat_id},
    )
    if echo and view.kind is UpdateKind.MESSAGE and view.text:
        bot.send_message({"chat_id": view.chat_id, "text": view.text, "reply_to_message_id": view.message_id})


def peek(bot: GramBot) -> int:
    """Print pending updates without acknowledging them; return how many there were."""
    bot.poll(limit=POLL_LIMIT, advance=False)
    count = bot.update_count()
    for index in range(count):
        bot.select_update(index)
        view = bot.view()
        kind = view.kind.value if view.kind else "unknown"
        print(f"{view.update_id}\t{kind}\t{view.chat_id}\t{view.text or ''}")
    return count


def run(bot: GramBot, echo: bool = False) -> None:
    """Poll forever, serving each update of every batch in order."""
    logger.info("grambot is running. Polling for updates...")
    while True:
        data = bot.poll(offset=bot.store.offset, limit=POLL_LIMIT, timeout=POLL_TIMEOUT)
        if not data.get("ok"):
            logger.warning("getUpdates returned ok=false, retrying", extra={"api_endpoint": "getUpdates", "delay": _RETRY_DELAY})
            time.sleep(_RETRY_DELAY)
            continue

        for index in range(bot.update_count()):
            bot.select_update(index)
            handle_update(bot, echo=echo)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Long-poll a Telegram bot from the command line.")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--peek", action="store_true", help="print pending updates once without acknowledging them")
    mode.add_argument("--echo", action="store_true", help="reply to text messages with the same text")
    args = parser.parse_args(argv)

    if not BOT_TOKEN:
        raise EnvironmentError("BOT_TOKEN environment variable is not set or is empty.")

    bot = GramBot(BOT_TOKEN, log_errors=LOG_ERRORS, proxy=PROXY, verify_tls=VERIFY_TLS)
    if args.peek:
        peek(bot)
        return
    try:
        run(bot, echo=args.echo)
    except KeyboardInterrupt:
        logger.info("Stopped by user")


if __name__ == "__main__":
    main()
