"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for the upstream feed, ledger storage and
notification adapters so that the core can be reused with different backends.
"""

from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from core.models import ContainerMetadata, Payload, ReportPage


class SessionPort(Protocol):
    """Authentication against the upstream platform."""

    def login(self) -> None:
        ...


class ReportSourcePort(Protocol):
    """Read access to the upstream moderation feed."""

    def fetch_reported_posts(self, limit: int) -> ReportPage:
        ...

    def fetch_container_metadata(
        self, page_ids: Iterable[str], user_ids: Iterable[str]
    ) -> ContainerMetadata:
        ...


class LedgerStorePort(Protocol):
    """Durable backing store for the dedup ledger."""

    def load(self) -> Optional[list[str]]:
        ...

    def save(self, report_ids: Sequence[str]) -> None:
        ...


class NotifierPort(Protocol):
    """Notification sink accepting small batches of payloads."""

    def send_batch(self, payloads: Sequence[Payload]) -> None:
        ...
