"""Application entry point for the reportwatch daemon."""

from __future__ import annotations

import argparse
import logging
import os
import signal
import threading
from logging.handlers import RotatingFileHandler
from typing import Optional

from art import tprint

import settings
from adapters.discord_notifier import DiscordWebhookNotifier, webhook_url
from adapters.dry_run_notifier import DryRunNotifier
from adapters.fandom_api import FandomReportSource, FandomSession
from adapters.json_ledger_store import JsonLedgerStore
from adapters.telegram_bot_notifier import TelegramBotNotifier
from client import build_http_session
from core.config import FormattingConfig, PollerConfig
from core.dedup import DedupLedger
from core.errors import AuthError
from core.ports import NotifierPort
from core.processor import ReportPoller

NAME = "REPORTWATCH"
FONT = "tarty-1"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _print_banner() -> None:
    tprint(NAME, FONT, space=1)


class _RedactingFormatter(logging.Formatter):
    """Masks credential values wherever they end up in a log line."""

    def __init__(self, secrets: list[str]) -> None:
        super().__init__(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        # Longest first so a secret containing another is masked whole.
        self._secrets = sorted({secret for secret in secrets if secret}, key=len, reverse=True)

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        for secret in self._secrets:
            message = message.replace(secret, "***")
        return message


def _secrets_to_redact(config: dict) -> list[str]:
    secrets = [
        settings.FANDOM_PASSWORD,
        settings.WEBHOOK_TOKEN,
        settings.DEV_WEBHOOK_TOKEN,
        settings.BOT_API,
    ]
    secrets.extend(os.getenv(name) for name in config.get("redact_env", []))
    return [secret for secret in secrets if secret]


def _configure_logging() -> None:
    config = settings.LOGGING or {}
    level = getattr(logging, str(config.get("level", "INFO")).upper(), logging.INFO)
    formatter = _RedactingFormatter(_secrets_to_redact(config))

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_path = config.get("file")
    if log_path:
        if not os.path.isabs(log_path):
            log_path = os.path.join(settings.PROJECT_ROOT, log_path)
        os.makedirs(os.path.dirname(log_path), exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                log_path,
                maxBytes=int(config.get("max_bytes", 5 * 1024 * 1024)),
                backupCount=int(config.get("backup_count", 5)),
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setFormatter(formatter)
    logging.basicConfig(level=level, handlers=handlers)


def _build_notifier() -> NotifierPort:
    """Select the notification adapter from configuration."""

    logger = logging.getLogger(__name__)

    if settings.DEV_MODE:
        if settings.DEV_WEBHOOK_ID and settings.DEV_WEBHOOK_TOKEN:
            logger.info("Development mode: delivering to the development webhook")
            return DiscordWebhookNotifier(
                webhook_url(settings.DEV_WEBHOOK_ID, settings.DEV_WEBHOOK_TOKEN),
                settings.WIKI_URL,
                color=settings.ACCENT_COLOR,
            )
        logger.info("Development mode: no development webhook, logging notifications only")
        return DryRunNotifier()

    if settings.NOTIFICATION_METHOD == "telegram_bot":
        if not settings.BOT_API:
            raise RuntimeError("BOT_API is required when notifications.method=telegram_bot")
        if not settings.BOT_CHAT_ID:
            raise RuntimeError("notifications.bot_chat_id is required for bot notifications")
        return TelegramBotNotifier(settings.BOT_API, str(settings.BOT_CHAT_ID), settings.WIKI_URL)

    if settings.NOTIFICATION_METHOD == "discord":
        if not settings.WEBHOOK_ID or not settings.WEBHOOK_TOKEN:
            raise RuntimeError("Missing WEBHOOK_ID or WEBHOOK_TOKEN in environment")
        return DiscordWebhookNotifier(
            webhook_url(settings.WEBHOOK_ID, settings.WEBHOOK_TOKEN),
            settings.WIKI_URL,
            color=settings.ACCENT_COLOR,
        )

    raise RuntimeError("notifications.method must be 'discord' or 'telegram_bot'")


def _build_session(http, stop_event: Optional[threading.Event] = None) -> FandomSession:
    # Fail fast on missing credentials; the login loop would otherwise retry forever.
    if not settings.FANDOM_USERNAME or not settings.FANDOM_PASSWORD:
        raise RuntimeError("Missing FANDOM_USERNAME or FANDOM_PASSWORD in environment")
    return FandomSession(
        http,
        settings.FANDOM_DOMAIN,
        settings.FANDOM_USERNAME,
        settings.FANDOM_PASSWORD,
        retry_seconds=settings.LOGIN_RETRY_SECONDS,
        stop_event=stop_event,
    )


def _build_poller(
    notifier: Optional[NotifierPort] = None,
    stop_event: Optional[threading.Event] = None,
) -> ReportPoller:
    logger = logging.getLogger(__name__)

    http = build_http_session(settings.USER_AGENT_CONTACT)
    session = _build_session(http, stop_event)
    session.login()

    # Development runs never touch the production ledger.
    store = None if settings.DEV_MODE else JsonLedgerStore(settings.LEDGER_PATH)
    ledger = DedupLedger.load(store)
    if store is None:
        logger.info("Development mode: ledger persistence disabled")

    return ReportPoller(
        source=FandomReportSource(http, settings.WIKI_URL),
        session=session,
        ledger=ledger,
        notifier=notifier or _build_notifier(),
        poller_config=PollerConfig(
            interval_seconds=settings.INTERVAL_SECONDS,
            page_size=settings.PAGE_SIZE,
        ),
        formatting=FormattingConfig(wiki_base=settings.WIKI_URL),
    )


def _install_stop_handlers(stop_event: threading.Event) -> None:
    def _stop(signum, _frame) -> None:
        logging.getLogger(__name__).info("Received signal %s, stopping after the current cycle", signum)
        stop_event.set()

    signal.signal(signal.SIGTERM, _stop)
    signal.signal(signal.SIGINT, _stop)


def _run() -> None:
    _print_banner()
    _configure_logging()
    logger = logging.getLogger(__name__)

    logger.info("Starting reportwatch for %s", settings.WIKI_URL)

    stop_event = threading.Event()
    _install_stop_handlers(stop_event)
    try:
        poller = _build_poller(stop_event=stop_event)
    except AuthError:
        logger.info("Stopped before the first login succeeded")
        return

    logger.info("Polling every %ss", settings.INTERVAL_SECONDS)
    poller.run_forever(stop_event)


def _once() -> None:
    _configure_logging()
    poller = _build_poller()
    result = poller.run_cycle()
    if result is None:
        raise SystemExit(1)


def _seed() -> None:
    _configure_logging()
    # Seeding never notifies, so no sink credentials are required.
    poller = _build_poller(notifier=DryRunNotifier())
    poller.seed()


def _login() -> None:
    _configure_logging()
    http = build_http_session(settings.USER_AGENT_CONTACT)
    _build_session(http).login()


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="reportwatch")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser("run", help="Start the watcher")
    subparsers.add_parser("once", help="Run a single poll cycle and exit")
    subparsers.add_parser(
        "seed",
        help="Mark every currently reported post as seen without notifying.",
    )
    subparsers.add_parser("login", help="Check the Fandom credentials and exit")

    args = parser.parse_args(argv)
    if args.command == "once":
        _once()
        return
    if args.command == "seed":
        _seed()
        return
    if args.command == "login":
        _login()
        return
    _run()


if __name__ == "__main__":
    main()
