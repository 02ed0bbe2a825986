"""Fandom-to-core mapping adapter.

This keeps the upstream JSON shapes out of the core pipeline. Records that
cannot be mapped are logged and dropped here so one bad entry never aborts a
whole page.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from core.errors import MalformedRecordError, TransientFetchError
from core.models import Author, ContainerMetadata, ContainerType, Report, ReportPage

LOGGER = logging.getLogger(__name__)


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _first(items: Any) -> dict:
    if isinstance(items, list) and items and isinstance(items[0], dict):
        return items[0]
    return {}


def _object(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _embedded(raw: dict) -> dict:
    return _object(raw.get("_embedded"))


def parse_report(raw: dict) -> Report:
    """Build a core Report from one ``doc:posts`` entry."""

    report_id = _optional_str(raw.get("id"))
    if report_id is None:
        raise MalformedRecordError("?", "missing post id")

    created = _object(raw.get("creationDate"))
    try:
        created_at = datetime.fromtimestamp(int(created["epochSecond"]), tz=timezone.utc)
    except (KeyError, TypeError, ValueError, OverflowError, OSError) as exc:
        raise MalformedRecordError(report_id, "missing or invalid creationDate") from exc

    created_by = _object(raw.get("createdBy"))
    embedded = _embedded(raw)
    thread = _first(embedded.get("thread"))
    image = _first(embedded.get("contentImages"))
    raw_container_type = _optional_str(thread.get("containerType"))

    return Report(
        id=report_id,
        title=_optional_str(raw.get("title")),
        rich_text=_optional_str(raw.get("jsonModel")),
        raw_text=_optional_str(raw.get("rawContent")),
        image_url=_optional_str(image.get("url")),
        created_at=created_at,
        author=Author(
            name=str(created_by.get("name") or "Unknown user"),
            id=str(created_by.get("id") or "0"),
            avatar_url=_optional_str(created_by.get("avatarUrl")),
        ),
        thread_id=str(raw.get("threadId") or ""),
        container_type=ContainerType.parse(raw_container_type),
        container_id=_optional_str(thread.get("containerId")),
        raw_container_type=raw_container_type,
    )


def parse_report_page(data: Any) -> ReportPage:
    """Map a ``getReportedPosts`` response to a ReportPage."""

    if not isinstance(data, dict):
        raise TransientFetchError("Reported posts response is not a JSON object")
    embedded = _embedded(data)
    posts = embedded.get("doc:posts")
    if posts is None:
        return ReportPage(reports=[])
    if not isinstance(posts, list):
        raise TransientFetchError("Reported posts response has no post list")

    reports: list[Report] = []
    for raw in posts:
        if not isinstance(raw, dict):
            LOGGER.warning("Skipping non-object report entry")
            continue
        try:
            report = parse_report(raw)
        except (MalformedRecordError, AttributeError, TypeError) as exc:
            LOGGER.warning("Skipping malformed report: %s", exc)
            continue
        if report.container_type is None:
            LOGGER.info("Report %s has unknown container type %s", report.id, report.raw_container_type)
        reports.append(report)

    wall_owners: dict[str, str] = {}
    for owner in embedded.get("wallOwners") or []:
        if not isinstance(owner, dict):
            continue
        container_id = _optional_str(owner.get("wallContainerId"))
        user_id = _optional_str(owner.get("userId"))
        if container_id and user_id:
            wall_owners[container_id] = user_id

    return ReportPage(reports=reports, wall_owners=wall_owners)


def parse_container_metadata(data: Any) -> ContainerMetadata:
    """Map a ``getArticleNamesAndUsernames`` response to ContainerMetadata."""

    if not isinstance(data, dict):
        raise TransientFetchError("Container metadata response is not a JSON object")

    article_paths: dict[str, str] = {}
    articles = data.get("articleNames")
    if isinstance(articles, dict):
        for page_id, article in articles.items():
            if isinstance(article, dict) and article.get("relativeUrl"):
                article_paths[str(page_id)] = str(article["relativeUrl"])

    usernames: dict[str, str] = {}
    users = data.get("userIds")
    if isinstance(users, dict):
        for user_id, user in users.items():
            if isinstance(user, dict) and user.get("username"):
                usernames[str(user_id)] = str(user["username"])

    return ContainerMetadata(article_paths=article_paths, usernames=usernames)
