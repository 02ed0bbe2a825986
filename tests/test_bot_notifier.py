from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone

import pytest

from adapters.dry_run_notifier import DryRunNotifier
from adapters.telegram_bot_notifier import TelegramBotNotifier
from core.errors import DeliveryError
from core.models import Author, ContainerType, Payload


class DummyResponse:
    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        self.text = "{}"

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class DummyHttp:
    def __init__(self, status_code: int = 200) -> None:
        self._status_code = status_code
        self.posts: list[tuple[str, dict]] = []

    def post(self, url: str, json: dict, timeout: float) -> DummyResponse:
        self.posts.append((url, json))
        return DummyResponse(self._status_code)


def _payload(report_id: str) -> Payload:
    return Payload(
        report_id=report_id,
        title=f"post {report_id}",
        body="body",
        image_url=None,
        timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
        author=Author(name="a", id="1", avatar_url=None),
        thread_id="1",
        container_type=ContainerType.FORUM,
        container_id=None,
        url=f"https://x.fandom.com/f/p/1/r/{report_id}",
    )


def test_each_payload_is_one_message_in_order() -> None:
    http = DummyHttp()
    notifier = TelegramBotNotifier("TOKEN", "-100", "https://x.fandom.com", http=http)
    notifier.send_batch([_payload("1"), _payload("2")])

    assert [url for url, _ in http.posts] == ["https://api.telegram.org/botTOKEN/sendMessage"] * 2
    assert http.posts[0][1]["chat_id"] == "-100"
    assert http.posts[0][1]["parse_mode"] == "HTML"
    assert "post 1" in http.posts[0][1]["text"]
    assert "post 2" in http.posts[1][1]["text"]


def test_bot_api_error_raises_delivery_error() -> None:
    notifier = TelegramBotNotifier("TOKEN", "-100", "https://x.fandom.com", http=DummyHttp(400))
    with pytest.raises(DeliveryError):
        notifier.send_batch([_payload("1")])


def test_dry_run_records_batches() -> None:
    notifier = DryRunNotifier()
    notifier.send_batch([_payload("1")])
    assert [[payload.report_id for payload in batch] for batch in notifier.batches] == [["1"]]


def test_link_previews_are_always_disabled() -> None:
    http = DummyHttp()
    notifier = TelegramBotNotifier("TOKEN", "-100", "https://x.fandom.com", http=http)
    with_image = replace(_payload("1"), image_url="https://img/i.png")
    notifier.send_batch([with_image, _payload("2")])

    assert [body["disable_web_page_preview"] for _, body in http.posts] == [True, True]
