"""Text helpers for building notification payloads (core domain).

The upstream platform stores post bodies as a JSON rich-text document: a
list of paragraph nodes, each holding text leaves. Only the shapes below are
understood; any other node is ignored rather than guessed at.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Optional

ELLIPSIS = "…"


def truncate(text: str, limit: int, ellipsis: str = ELLIPSIS) -> str:
    """Strip surrounding whitespace and clip to ``limit`` characters.

    When clipping happens the ellipsis is counted inside the limit, so the
    result is never longer than ``limit``.
    """

    text = text.strip()
    if len(text) <= limit:
        return text
    return text[: limit - len(ellipsis)] + ellipsis


def _leaf_text(node: Any) -> str:
    if isinstance(node, dict) and node.get("type") == "text":
        text = node.get("text")
        if isinstance(text, str):
            return text
    return ""


def _paragraph_text(node: Any) -> Optional[str]:
    if not isinstance(node, dict) or node.get("type") != "paragraph":
        return None
    children = node.get("content")
    if not isinstance(children, list):
        return ""
    return "".join(_leaf_text(child) for child in children)


def _document_paragraphs(document: Any) -> Iterable[str]:
    if not isinstance(document, dict):
        return
    nodes = document.get("content")
    if not isinstance(nodes, list):
        return
    for node in nodes:
        text = _paragraph_text(node)
        if text:
            yield text


def flatten_rich_text(raw_document: Optional[str]) -> str:
    """Return plain text for a serialized rich-text document.

    Paragraphs are joined by newlines and empty paragraphs dropped. Missing
    or unparsable input yields an empty string so callers can fall back to
    the raw text field.
    """

    if not raw_document:
        return ""
    try:
        document = json.loads(raw_document)
    except (TypeError, ValueError):
        return ""
    return "\n".join(_document_paragraphs(document))
