"""Application configuration — environment variables and derived constants.

Loads the bot token, error-logging switch, TLS setting, proxy and polling
parameters from the environment via ``python-dotenv``.  All values are
resolved at import time so ``main.py`` can ``from config import …``.  The
``grambot`` library never reads the environment itself.
"""

# ── stdlib ───────────────────────────────────────────────────────────────────
import os

# ── third-party ──────────────────────────────────────────────────────────────
from dotenv import load_dotenv

# ── project ──────────────────────────────────────────────────────────────────
from core.logger import GrambotLogger
from grambot.models import ProxyConfig

# ── Environment bootstrap ────────────────────────────────────────────────────
load_dotenv()

logger = GrambotLogger.get_logger()


# ── Helper functions (private) ───────────────────────────────────────────────


def _parse_bool(raw: str | None, default: bool) -> bool:
    """Interpret ``1/true/yes/on`` and ``0/false/no/off`` (case-insensitive)."""
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _parse_int(raw: str | None, default: int) -> int:
    """Parse an integer setting, falling back to *default* on bad input."""
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        logger.warning("Ignoring non-numeric setting", extra={"value": raw, "default": default})
        return default


def _load_proxy() -> ProxyConfig | None:
    """Build a :class:`ProxyConfig` from ``PROXY_*`` variables, if any are set."""
    settings = {
        "url": os.environ.get("PROXY_URL"),
        "port": os.environ.get("PROXY_PORT"),
        "type": os.environ.get("PROXY_TYPE"),
        "auth": os.environ.get("PROXY_AUTH"),
    }
    settings = {key: value for key, value in settings.items() if value}
    if not settings:
        return None
    return ProxyConfig.model_validate(settings)


# ── Public constants ─────────────────────────────────────────────────────────

BOT_TOKEN: str | None = os.environ.get("BOT_TOKEN")
LOG_ERRORS: bool = _parse_bool(os.environ.get("LOG_ERRORS"), True)
VERIFY_TLS: bool = _parse_bool(os.environ.get("VERIFY_TLS"), True)
PROXY: ProxyConfig | None = _load_proxy()
POLL_TIMEOUT: int = _parse_int(os.environ.get("POLL_TIMEOUT"), 30)
POLL_LIMIT: int = _parse_int(os.environ.get("POLL_LIMIT"), 100)


# ── Startup diagnostics ─────────────────────────────────────────────────────

if BOT_TOKEN:
    logger.info("Config loaded, BOT_TOKEN is set")
else:
    logger.warning("Config loaded, BOT_TOKEN is NOT set")

if PROXY is not None:
    logger.info("Proxy configured", extra={"proxy_url": PROXY.url, "proxy_type": PROXY.type})

if not VERIFY_TLS:
    logger.warning("VERIFY_TLS is off, API calls will not check certificates")
