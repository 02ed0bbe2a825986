"""Shared notification formatting helpers.

Keeping formatting here prevents drift between adapters and keeps messages
consistent regardless of delivery channel.
"""

from __future__ import annotations

import html
from typing import Any

from core.models import Payload
from core.permalinks import build_profile_url
from core.text import truncate

AUTHOR_NAME_CHARS = 256
DEFAULT_ACCENT_COLOR = 0xE1390B


def format_embed(payload: Payload, wiki_base: str, color: int = DEFAULT_ACCENT_COLOR) -> dict[str, Any]:
    """Create the Discord embed for one payload."""

    author: dict[str, Any] = {
        "name": truncate(payload.author.name, AUTHOR_NAME_CHARS),
        "url": build_profile_url(wiki_base, payload.author.id),
    }
    if payload.author.avatar_url:
        author["icon_url"] = payload.author.avatar_url

    embed: dict[str, Any] = {
        "title": payload.title,
        "color": color,
        "timestamp": payload.timestamp.isoformat(),
        "author": author,
    }
    if payload.body:
        embed["description"] = payload.body
    if payload.url:
        embed["url"] = payload.url
    if payload.image_url:
        embed["image"] = {"url": payload.image_url}
    return embed


def format_html(payload: Payload, wiki_base: str) -> str:
    """Create the HTML notification body used by the Bot API adapter."""

    timestamp = html.escape(payload.timestamp.astimezone().strftime("%H:%M:%S %d-%m-%Y").strip())
    author = html.escape(payload.author.name)
    profile = html.escape(build_profile_url(wiki_base, payload.author.id))

    parts = [
        f"[{timestamp}]",
        f"<b>{html.escape(payload.title)}</b>",
        f"<b>Author:</b> <a href=\"{profile}\">{author}</a>",
        "──────────────",
    ]
    if payload.body:
        parts.extend(["", html.escape(payload.body)])

    if payload.url:
        safe_link = html.escape(payload.url)
        parts.extend(["", "<b>Link:</b>", f"<a href=\"{safe_link}\">{safe_link}</a>"])

    parts.append("──────────────")
    return "\n".join(parts)
