"""Core polling pipeline.

This module is integration-agnostic. It only relies on ports for the upstream
feed, the session, ledger storage and notifications. One cycle runs in a
strict order:
1) Fetch the newest page of reported posts
2) Filter through the ledger, adding accepted ids immediately
3) Resolve wall owners and fetch container metadata when needed
4) Transform accepted reports into payloads
5) Deliver oldest-first in chunks
6) Persist the ledger

An expired session (AuthError) triggers one re-login and a retry of the same
cycle. Any other failure aborts the cycle without persisting the ledger.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence

from core.config import FormattingConfig, PollerConfig
from core.dedup import DedupLedger
from core.errors import AuthError, MalformedRecordError
from core.models import ContainerMetadata, ContainerType, Payload, Report, ReportPage
from core.ports import NotifierPort, ReportSourcePort, SessionPort
from core.transformer import transform

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleResult:
    """Counters describing one completed cycle."""

    fetched: int
    accepted: int
    delivered: int
    skipped: int
    batches: int
    relogged: bool = False


def chunked(items: Sequence[Payload], size: int) -> Iterator[Sequence[Payload]]:
    """Yield consecutive slices of at most ``size`` items."""

    for start in range(0, len(items), size):
        yield items[start : start + size]


class ReportPoller:
    """Orchestrates fetch, dedup, resolution, delivery and persistence."""

    def __init__(
        self,
        source: ReportSourcePort,
        session: SessionPort,
        ledger: DedupLedger,
        notifier: NotifierPort,
        poller_config: PollerConfig,
        formatting: FormattingConfig,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._source = source
        self._session = session
        self._ledger = ledger
        self._notifier = notifier
        self._config = poller_config
        self._formatting = formatting
        self._clock = clock
        self._busy = False

    @property
    def ledger(self) -> DedupLedger:
        return self._ledger

    def run_cycle(self) -> Optional[CycleResult]:
        """Run one cycle; return its counters, or None when it was aborted."""

        if self._busy:
            LOGGER.warning("Previous cycle still running, skipping this tick")
            return None

        self._busy = True
        try:
            return self._run_cycle_with_relogin()
        except Exception:
            LOGGER.exception("Cycle aborted")
            return None
        finally:
            self._busy = False

    def _run_cycle_with_relogin(self) -> Optional[CycleResult]:
        # Ids accepted by an earlier attempt of this same cycle stay eligible,
        # so a session expiry mid-cycle does not lose them.
        carried: set[str] = set()
        try:
            return self._attempt(carried, relogged=False)
        except AuthError as exc:
            LOGGER.warning("Upstream session expired (%s), logging in again", exc)

        try:
            self._session.login()
        except AuthError as exc:
            LOGGER.warning("Re-login abandoned, aborting cycle: %s", exc)
            return None

        try:
            return self._attempt(carried, relogged=True)
        except AuthError as exc:
            LOGGER.error("Upstream rejected the new session, aborting cycle: %s", exc)
            return None

    def _attempt(self, carried: set[str], relogged: bool) -> CycleResult:
        page = self._source.fetch_reported_posts(self._config.page_size)
        accepted = self._filter(page.reports, carried)

        resolved: list[tuple[Report, Optional[str]]] = []
        skipped = 0
        for report in accepted:
            try:
                resolved.append((report, self._resolve_wall_owner(report, page)))
            except MalformedRecordError as exc:
                skipped += 1
                LOGGER.warning("Skipping malformed report: %s", exc)

        metadata = self._fetch_metadata(resolved)
        payloads = [
            transform(report, metadata, self._formatting, wall_owner_id)
            for report, wall_owner_id in resolved
        ]

        # The feed is newest-first; recipients should read in chronological order.
        payloads.reverse()
        batches = 0
        for batch in chunked(payloads, self._config.batch_size):
            self._notifier.send_batch(batch)
            batches += 1

        self._ledger.persist()

        result = CycleResult(
            fetched=len(page.reports),
            accepted=len(accepted),
            delivered=len(payloads),
            skipped=skipped,
            batches=batches,
            relogged=relogged,
        )
        if result.accepted:
            LOGGER.info(
                "Cycle complete: fetched=%s, new=%s, delivered=%s, skipped=%s",
                result.fetched,
                result.accepted,
                result.delivered,
                result.skipped,
            )
        else:
            LOGGER.debug("Cycle complete: fetched=%s, nothing new", result.fetched)
        return result

    def _filter(self, reports: Sequence[Report], carried: set[str]) -> list[Report]:
        accepted: list[Report] = []
        seen_this_attempt: set[str] = set()
        for report in reports:
            if report.id in seen_this_attempt:
                continue
            seen_this_attempt.add(report.id)
            # carried re-admits ids accepted by a failed earlier attempt of this cycle.
            if report.id not in carried and not self._ledger.add(report.id):
                continue
            carried.add(report.id)
            accepted.append(report)
        return accepted

    @staticmethod
    def _resolve_wall_owner(report: Report, page: ReportPage) -> Optional[str]:
        if report.container_type is not ContainerType.WALL:
            return None
        owner_id = page.wall_owners.get(report.container_id or "")
        if not owner_id:
            raise MalformedRecordError(
                report.id, f"no wall owner for container {report.container_id}"
            )
        return owner_id

    def _fetch_metadata(self, resolved: Sequence[tuple[Report, Optional[str]]]) -> ContainerMetadata:
        page_ids: set[str] = set()
        user_ids: set[str] = set()
        for report, wall_owner_id in resolved:
            if report.container_type is ContainerType.ARTICLE_COMMENT and report.container_id:
                page_ids.add(report.container_id)
            elif wall_owner_id:
                user_ids.add(wall_owner_id)

        if len(page_ids) == 0 and len(user_ids) == 0:
            return ContainerMetadata()
        return self._source.fetch_container_metadata(sorted(page_ids), sorted(user_ids))

    def seed(self) -> int:
        """Mark every currently reported post as seen without notifying."""

        page = self._source.fetch_reported_posts(self._config.page_size)
        added = sum(1 for report in page.reports if self._ledger.add(report.id))
        self._ledger.persist()
        LOGGER.info("Seeded ledger with %s new report ids (%s total)", added, len(self._ledger))
        return added

    def run_forever(self, stop_event: Optional[threading.Event] = None) -> None:
        """Run cycles on a fixed period until ``stop_event`` is set.

        Ticks that fall inside a running cycle are skipped, not queued.
        """

        stop_event = stop_event or threading.Event()
        interval = self._config.interval_seconds
        next_tick = self._clock()

        while not stop_event.is_set():
            self.run_cycle()

            now = self._clock()
            next_tick += interval
            if now > next_tick:
                missed = int((now - next_tick) // interval) + 1
                next_tick += missed * interval
                LOGGER.warning("Cycle overran the poll interval, skipped %s tick(s)", missed)
            stop_event.wait(max(0.0, next_tick - now))

        LOGGER.info("Polling stopped")
