"""Deduplication ledger (core domain).

The ledger is the only gate preventing a report from being relayed twice. It
holds every report id ever accepted and grows monotonically; it is loaded once
at startup and written back after each successful cycle.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from core.errors import PersistenceError
from core.ports import LedgerStorePort

LOGGER = logging.getLogger(__name__)


class DedupLedger:
    """In-memory set of seen report ids backed by a store adapter."""

    def __init__(self, store: Optional[LedgerStorePort], ids: Iterable[str] = ()) -> None:
        self._store = store
        self._ids: set[str] = {str(report_id) for report_id in ids}

    @classmethod
    def load(cls, store: Optional[LedgerStorePort]) -> "DedupLedger":
        """Load the ledger from ``store``; any failure yields an empty ledger."""

        if store is None:
            return cls(None)
        try:
            ids = store.load()
        except PersistenceError as exc:
            LOGGER.warning("Ledger unreadable, starting empty: %s", exc)
            return cls(store)
        if ids is None:
            LOGGER.info("No ledger found, starting empty")
            return cls(store)
        LOGGER.info("Loaded ledger with %s report ids", len(ids))
        return cls(store, ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, report_id: object) -> bool:
        return str(report_id) in self._ids

    def contains(self, report_id: str) -> bool:
        return report_id in self

    def add(self, report_id: str) -> bool:
        """Add an id; return True when it was not present before."""

        key = str(report_id)
        if key in self._ids:
            return False
        self._ids.add(key)
        return True

    def persist(self) -> bool:
        """Write the full id set to the store.

        Best effort: a failing write is logged and reported through the return
        value, never raised, so the polling loop keeps running.
        """

        if self._store is None:
            return False
        try:
            self._store.save(sorted(self._ids))
        except PersistenceError as exc:
            LOGGER.error("Failed to persist ledger: %s", exc)
            return False
        return True
