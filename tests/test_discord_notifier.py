from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from adapters.discord_notifier import DiscordWebhookNotifier, webhook_url
from core.errors import DeliveryError
from core.models import Author, ContainerType, Payload


class DummyResponse:
    def __init__(self, status_code: int, body: Optional[dict] = None) -> None:
        self.status_code = status_code
        self._body = body
        self.text = str(body)

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if self._body is None:
            raise ValueError("no JSON")
        return self._body


class DummyHttp:
    def __init__(self, *responses: DummyResponse) -> None:
        self._responses = list(responses)
        self.posts: list[dict] = []

    def post(self, url: str, json: dict, timeout: float) -> DummyResponse:
        self.posts.append({"url": url, "json": json})
        return self._responses.pop(0)


def _payload(report_id: str) -> Payload:
    return Payload(
        report_id=report_id,
        title=f"post {report_id}",
        body=None,
        image_url=None,
        timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
        author=Author(name="a", id="1", avatar_url=None),
        thread_id="1",
        container_type=ContainerType.FORUM,
        container_id=None,
    )


def _notifier(http: DummyHttp, sleeps: list) -> DiscordWebhookNotifier:
    return DiscordWebhookNotifier(
        webhook_url("123", "abc"),
        "https://x.fandom.com",
        http=http,
        sleep=sleeps.append,
    )


def test_batch_becomes_one_webhook_call() -> None:
    http = DummyHttp(DummyResponse(204))
    _notifier(http, []).send_batch([_payload("1"), _payload("2")])

    assert len(http.posts) == 1
    assert http.posts[0]["url"] == "https://discord.com/api/webhooks/123/abc"
    assert [embed["title"] for embed in http.posts[0]["json"]["embeds"]] == ["post 1", "post 2"]


def test_rate_limit_is_honoured() -> None:
    http = DummyHttp(DummyResponse(429, {"retry_after": 1.5}), DummyResponse(204))
    sleeps: list = []
    _notifier(http, sleeps).send_batch([_payload("1")])
    assert sleeps == [1.5]
    assert len(http.posts) == 2


def test_client_error_raises_delivery_error() -> None:
    http = DummyHttp(DummyResponse(400, {"message": "Invalid Form Body"}))
    with pytest.raises(DeliveryError):
        _notifier(http, []).send_batch([_payload("1")])


def test_server_errors_exhaust_retries() -> None:
    http = DummyHttp(DummyResponse(500), DummyResponse(502), DummyResponse(503))
    sleeps: list = []
    with pytest.raises(DeliveryError):
        _notifier(http, sleeps).send_batch([_payload("1")])
    assert sleeps == [2.0, 4.0]


def test_more_than_ten_payloads_rejected() -> None:
    with pytest.raises(ValueError):
        _notifier(DummyHttp(), []).send_batch([_payload(str(i)) for i in range(11)])
