"""Report to notification payload transformation (core domain)."""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from core.config import FormattingConfig
from core.models import ContainerMetadata, Payload, Report
from core.permalinks import build_post_url
from core.text import flatten_rich_text, truncate


def report_body(report: Report) -> str:
    """Return the plain-text body, preferring the rich-text document."""

    return flatten_rich_text(report.rich_text) or (report.raw_text or "")


def transform(
    report: Report,
    metadata: ContainerMetadata,
    formatting: FormattingConfig,
    wall_owner_id: Optional[str] = None,
) -> Payload:
    """Build the notification payload for one accepted report.

    Title rules:
    - A present title is truncated and the body becomes the description.
    - Without a title the body is promoted to the title and dropped.
    - With neither, a fixed placeholder is used.
    """

    full_body = report_body(report)
    title = truncate(report.title or "", formatting.title_chars)
    description: Optional[str] = None

    if title:
        description = truncate(full_body, formatting.body_chars) or None
    elif full_body.strip():
        title = truncate(full_body, formatting.title_chars)
    else:
        title = formatting.untitled_placeholder

    payload = Payload(
        report_id=report.id,
        title=title,
        body=description,
        image_url=report.image_url,
        timestamp=report.created_at,
        author=report.author,
        thread_id=report.thread_id,
        container_type=report.container_type,
        container_id=report.container_id,
        wall_owner_id=wall_owner_id,
    )
    url = build_post_url(payload, metadata, formatting.wiki_base)
    return replace(payload, url=url)
