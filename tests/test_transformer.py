from __future__ import annotations

import json

from conftest import make_report

from core.config import FormattingConfig
from core.models import ContainerMetadata, ContainerType
from core.text import ELLIPSIS
from core.transformer import transform

FORMATTING = FormattingConfig(wiki_base="https://x.fandom.com")


def test_title_and_body_are_truncated_independently() -> None:
    report = make_report("1", title="t" * 300, raw_text="b" * 600)
    payload = transform(report, ContainerMetadata(), FORMATTING)
    assert payload.title == "t" * 255 + ELLIPSIS
    assert payload.body == "b" * 499 + ELLIPSIS


def test_body_promoted_to_title_when_title_missing() -> None:
    report = make_report("1", title=None, raw_text="c" * 400)
    payload = transform(report, ContainerMetadata(), FORMATTING)
    assert payload.title == "c" * 255 + ELLIPSIS
    assert payload.body is None


def test_placeholder_when_title_and_body_missing() -> None:
    report = make_report("1", title="   ", raw_text=None)
    payload = transform(report, ContainerMetadata(), FORMATTING)
    assert payload.title == "(untitled)"
    assert payload.body is None


def test_rich_text_preferred_over_raw_text() -> None:
    rich = json.dumps(
        {"type": "doc", "content": [{"type": "paragraph", "content": [{"type": "text", "text": "rich"}]}]}
    )
    report = make_report("1", rich_text=rich, raw_text="raw")
    payload = transform(report, ContainerMetadata(), FORMATTING)
    assert payload.body == "rich"


def test_unparsable_rich_text_falls_back_to_raw_text() -> None:
    report = make_report("1", rich_text="{broken", raw_text="  raw fallback text ")
    payload = transform(report, ContainerMetadata(), FORMATTING)
    assert payload.body == "raw fallback text"


def test_payload_carries_url_for_forum_posts() -> None:
    report = make_report("7", thread_id="42", container_type=ContainerType.FORUM)
    payload = transform(report, ContainerMetadata(), FORMATTING)
    assert payload.url == "https://x.fandom.com/f/p/42/r/7"
    assert payload.report_id == "7"
    assert payload.thread_id == "42"


def test_missing_article_metadata_yields_no_url() -> None:
    report = make_report("7", container_type=ContainerType.ARTICLE_COMMENT, container_id="555")
    payload = transform(report, ContainerMetadata(), FORMATTING)
    assert payload.url is None
