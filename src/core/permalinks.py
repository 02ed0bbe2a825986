"""Permalink construction for reported posts (core domain)."""

from __future__ import annotations

from typing import Optional

from core.models import ContainerMetadata, ContainerType, Payload


def build_wiki_url(interwiki: str, domain: str) -> str:
    """Return the wiki root URL for an interwiki such as ``lang.subdomain``."""

    if "." in interwiki:
        lang, _, subdomain = interwiki.partition(".")
        return f"https://{subdomain}.{domain}/{lang}"
    return f"https://{interwiki}.{domain}"


def build_profile_url(wiki_base: str, author_id: str) -> str:
    """Return the discussions profile page of a user."""

    return f"{wiki_base}/f/u/{author_id}"


def build_post_url(payload: Payload, metadata: ContainerMetadata, wiki_base: str) -> Optional[str]:
    """Return the user-facing URL of a reported post.

    Returns None when the container type is unknown or the lookup data needed
    for the container is missing; callers omit the link in that case.
    """

    thread_id = payload.thread_id
    post_id = payload.report_id

    if payload.container_type is ContainerType.FORUM:
        return f"{wiki_base}/f/p/{thread_id}/r/{post_id}"

    if payload.container_type is ContainerType.ARTICLE_COMMENT:
        article_path = metadata.article_paths.get(payload.container_id or "")
        if not article_path:
            return None
        return f"{wiki_base}{article_path}?commentId={thread_id}&replyId={post_id}#articleComments"

    if payload.container_type is ContainerType.WALL:
        username = metadata.usernames.get(payload.wall_owner_id or "")
        if not username:
            return None
        wall_page = username.replace(" ", "_")
        return f"{wiki_base}/wiki/Message_Wall:{wall_page}?threadId={thread_id}#{post_id}"

    return None
