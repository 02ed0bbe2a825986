from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence

import pytest

from core.errors import PersistenceError
from core.models import Author, ContainerMetadata, ContainerType, Payload, Report, ReportPage


def make_report(
    report_id: str,
    *,
    title: Optional[str] = "Reported post",
    rich_text: Optional[str] = None,
    raw_text: Optional[str] = "body",
    container_type: Optional[ContainerType] = ContainerType.FORUM,
    container_id: Optional[str] = "c1",
    thread_id: str = "t1",
    epoch: int = 1_700_000_000,
) -> Report:
    return Report(
        id=report_id,
        title=title,
        rich_text=rich_text,
        raw_text=raw_text,
        image_url=None,
        created_at=datetime.fromtimestamp(epoch, tz=timezone.utc),
        author=Author(name="Someone", id="99", avatar_url="https://img/avatar.png"),
        thread_id=thread_id,
        container_type=container_type,
        container_id=container_id,
    )


class FakeSource:
    def __init__(self, pages: Sequence[object], metadata: Optional[ContainerMetadata] = None) -> None:
        # Each entry is a ReportPage to return or an exception to raise.
        self._pages = list(pages)
        self.metadata = metadata or ContainerMetadata()
        self.fetch_calls = 0
        self.metadata_calls: list[tuple[list[str], list[str]]] = []

    def fetch_reported_posts(self, limit: int) -> ReportPage:
        self.fetch_calls += 1
        item = self._pages[0] if len(self._pages) == 1 else self._pages.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def fetch_container_metadata(self, page_ids, user_ids) -> ContainerMetadata:
        self.metadata_calls.append((list(page_ids), list(user_ids)))
        return self.metadata


class FakeSession:
    def __init__(self) -> None:
        self.logins = 0

    def login(self) -> None:
        self.logins += 1


class FakeNotifier:
    def __init__(self, fail_with: Optional[Exception] = None) -> None:
        self.batches: list[list[Payload]] = []
        self._fail_with = fail_with

    def send_batch(self, payloads: Sequence[Payload]) -> None:
        if self._fail_with is not None:
            raise self._fail_with
        self.batches.append(list(payloads))

    @property
    def sent_ids(self) -> list[str]:
        return [payload.report_id for batch in self.batches for payload in batch]


class FakeStore:
    def __init__(self, ids: Optional[list[str]] = None, fail_save: bool = False) -> None:
        self.ids = ids
        self.saves: list[list[str]] = []
        self._fail_save = fail_save

    def load(self) -> Optional[list[str]]:
        return self.ids

    def save(self, report_ids: Sequence[str]) -> None:
        if self._fail_save:
            raise PersistenceError("disk full")
        self.saves.append(list(report_ids))
        self.ids = list(report_ids)


@pytest.fixture
def fake_store() -> FakeStore:
    return FakeStore()
