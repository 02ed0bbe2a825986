"""Discord webhook notification adapter.

Each batch becomes one webhook execution carrying up to ten embeds, the most
Discord accepts per message.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Sequence

import requests

from adapters.notification_formatting import DEFAULT_ACCENT_COLOR, format_embed
from core.errors import DeliveryError
from core.models import Payload

LOGGER = logging.getLogger(__name__)

MAX_EMBEDS = 10
REQUEST_TIMEOUT = 15


def webhook_url(webhook_id: str, webhook_token: str) -> str:
    return f"https://discord.com/api/webhooks/{webhook_id}/{webhook_token}"


class DiscordWebhookNotifier:
    """Notifier adapter that posts embeds to a Discord webhook."""

    def __init__(
        self,
        url: str,
        wiki_base: str,
        color: int = DEFAULT_ACCENT_COLOR,
        http: Optional[requests.Session] = None,
        retries: int = 3,
        backoff: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._url = url
        self._wiki_base = wiki_base
        self._color = color
        self._http = http or requests.Session()
        self._retries = retries
        self._backoff = backoff
        self._sleep = sleep

    def send_batch(self, payloads: Sequence[Payload]) -> None:
        """Deliver one batch of at most ten payloads."""

        if not payloads:
            return
        if len(payloads) > MAX_EMBEDS:
            raise ValueError(f"Discord accepts at most {MAX_EMBEDS} embeds per message")

        body = {"embeds": [format_embed(payload, self._wiki_base, self._color) for payload in payloads]}
        for attempt in range(1, self._retries + 1):
            try:
                response = self._http.post(self._url, json=body, timeout=REQUEST_TIMEOUT)
            except requests.RequestException as exc:
                LOGGER.warning("Discord request failed (attempt %s): %s", attempt, exc)
            else:
                if response.ok:
                    LOGGER.debug("Delivered %s embed(s) to Discord", len(payloads))
                    return
                if response.status_code == 429:
                    retry_after = _retry_after(response, self._backoff * attempt)
                    LOGGER.warning("Discord rate-limited, sleeping %.1fs", retry_after)
                    self._sleep(retry_after)
                    continue
                if 400 <= response.status_code < 500:
                    raise DeliveryError(
                        f"Discord client error {response.status_code}: {response.text[:300]}"
                    )
                LOGGER.warning("Discord server error %s (attempt %s)", response.status_code, attempt)

            if attempt < self._retries:
                self._sleep(self._backoff * attempt)

        raise DeliveryError(f"Failed to deliver Discord payload after {self._retries} attempts")


def _retry_after(response: requests.Response, default: float) -> float:
    try:
        return float(response.json().get("retry_after", default))
    except (ValueError, AttributeError):
        return default
