"""Telegram Bot API notification adapter.

Uses the Bot API for delivery so notifications can be routed via a bot chat.
The Bot API has no multi-message call, so each payload of a batch is sent as
its own message, in order.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import requests

from adapters.notification_formatting import format_html
from core.errors import DeliveryError
from core.models import Payload

LOGGER = logging.getLogger(__name__)


class TelegramBotNotifier:
    """Notifier adapter that sends messages via the Telegram Bot API."""

    def __init__(
        self,
        bot_token: str,
        chat_id: str,
        wiki_base: str,
        http: Optional[requests.Session] = None,
    ) -> None:
        self._bot_token = bot_token
        self._chat_id = chat_id
        self._wiki_base = wiki_base
        self._http = http or requests.Session()

    def _endpoint(self) -> str:
        # The Bot API endpoint is deterministic and derived from the token.
        return f"https://api.telegram.org/bot{self._bot_token}/sendMessage"

    def send_batch(self, payloads: Sequence[Payload]) -> None:
        """Send each payload of the batch as one HTML message."""

        for payload in payloads:
            body = {
                "chat_id": self._chat_id,
                "text": format_html(payload, self._wiki_base),
                "parse_mode": "HTML",
                "disable_web_page_preview": True,
            }
            try:
                response = self._http.post(self._endpoint(), json=body, timeout=10)
            except requests.RequestException as exc:
                raise DeliveryError(f"Bot API request failed: {exc}") from exc
            if not response.ok:
                raise DeliveryError(f"Bot API error {response.status_code}: {response.text[:300]}")
        LOGGER.debug("Delivered %s message(s) via the Bot API", len(payloads))
