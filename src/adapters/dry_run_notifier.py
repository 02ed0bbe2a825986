"""Notifier adapter that only logs what would have been sent."""

from __future__ import annotations

import logging
from typing import Sequence

from core.models import Payload

LOGGER = logging.getLogger(__name__)


class DryRunNotifier:
    """Used in development mode when no development webhook is configured."""

    def __init__(self) -> None:
        self.batches: list[list[Payload]] = []

    def send_batch(self, payloads: Sequence[Payload]) -> None:
        self.batches.append(list(payloads))
        for payload in payloads:
            LOGGER.info("[DRY-RUN] %s | %s | %s", payload.report_id, payload.title, payload.url or "-")
