"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to the upstream JSON shapes or to any delivery channel.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class ContainerType(str, Enum):
    """Structural context a reported post belongs to."""

    FORUM = "FORUM"
    ARTICLE_COMMENT = "ARTICLE_COMMENT"
    WALL = "WALL"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ContainerType"]:
        """Return the matching member, or None for unknown values."""

        try:
            return cls(value)
        except ValueError:
            return None


@dataclass(frozen=True)
class Author:
    """Author block of a reported post."""

    name: str
    id: str
    avatar_url: Optional[str]


@dataclass(frozen=True)
class Report:
    """One upstream-flagged discussion post, as returned by the feed."""

    id: str
    title: Optional[str]
    rich_text: Optional[str]
    raw_text: Optional[str]
    image_url: Optional[str]
    created_at: datetime
    author: Author
    thread_id: str
    container_type: Optional[ContainerType]
    container_id: Optional[str]
    # Raw container type string, kept for logging unknown values.
    raw_container_type: Optional[str] = None


@dataclass(frozen=True)
class ReportPage:
    """One fetched page of reports plus its wall-owner side list."""

    reports: list[Report]
    # wall container id -> owner user id
    wall_owners: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ContainerMetadata:
    """Cycle-scoped lookup of article paths and usernames."""

    # page id -> relative article path (e.g. "/wiki/Main_Page")
    article_paths: dict[str, str] = field(default_factory=dict)
    # user id -> username
    usernames: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Payload:
    """Normalized notification built from exactly one never-seen report."""

    report_id: str
    title: str
    body: Optional[str]
    image_url: Optional[str]
    timestamp: datetime
    author: Author
    thread_id: str
    container_type: Optional[ContainerType]
    container_id: Optional[str]
    wall_owner_id: Optional[str] = None
    url: Optional[str] = None
