"""Static configuration for reportwatch.

All user-editable settings (wiki, polling, ledger, notifications, logging)
live in a single JSON file for quick edits without touching Python. Secrets
(webhook and account credentials) are read from the environment or a .env
file via python-dotenv so they stay out of the repo.
"""

import json
import os

from dotenv import load_dotenv

from core.permalinks import build_wiki_url

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# config.json sits at the project root; REPORTWATCH_CONFIG points elsewhere.
CONFIG_PATH = os.getenv("REPORTWATCH_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(
            f"Config file not found: {CONFIG_PATH} (copy config.example.json to get started)"
        )

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


def _parse_color(value) -> int:
    if isinstance(value, int):
        return value
    return int(str(value), 0)


load_dotenv()

_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Wiki selection. "wiki" is an interwiki: "subdomain" or "lang.subdomain".
_fandom = _CONFIG.get("fandom", {})
FANDOM_WIKI = _fandom.get("wiki") or os.getenv("FANDOM_WIKI")
FANDOM_DOMAIN = _fandom.get("domain") or os.getenv("FANDOM_DOMAIN") or "fandom.com"
if not FANDOM_WIKI:
    raise RuntimeError("fandom.wiki is required in config.json (or FANDOM_WIKI in the environment)")
WIKI_URL = build_wiki_url(FANDOM_WIKI, FANDOM_DOMAIN)
# Optional contact appended to the User-Agent header.
USER_AGENT_CONTACT = _fandom.get("contact")

# Polling schedule. The interval is the period between cycle starts.
_poll = _CONFIG.get("poll", {})
INTERVAL_SECONDS = float(_poll.get("interval_seconds", os.getenv("INTERVAL", 60)))
PAGE_SIZE = int(_poll.get("page_size", 100))
LOGIN_RETRY_SECONDS = float(_poll.get("login_retry_seconds", 10))

# Development mode swaps in the development sink and disables persistence.
DEV_MODE = bool(_CONFIG.get("dev_mode", False))

# Ledger of already-notified report ids.
_ledger = _CONFIG.get("ledger", {})
LEDGER_PATH = _resolve_path(_ledger.get("path", "cache.json"))

# Notification method switches adapters without changing core logic.
_notifications = _CONFIG.get("notifications", {})
NOTIFICATION_METHOD = _notifications.get("method", "discord")
# Bot chat id is only required when method=telegram_bot.
BOT_CHAT_ID = _notifications.get("bot_chat_id")
ACCENT_COLOR = _parse_color(_notifications.get("accent_color", 0xE1390B))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})

# Secrets.
WEBHOOK_ID = os.getenv("WEBHOOK_ID")
WEBHOOK_TOKEN = os.getenv("WEBHOOK_TOKEN")
DEV_WEBHOOK_ID = os.getenv("DEV_WEBHOOK_ID")
DEV_WEBHOOK_TOKEN = os.getenv("DEV_WEBHOOK_TOKEN")
BOT_API = os.getenv("BOT_API")
FANDOM_USERNAME = os.getenv("FANDOM_USERNAME")
FANDOM_PASSWORD = os.getenv("FANDOM_PASSWORD")
