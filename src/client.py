"""HTTP client factory for reportwatch.

A single requests.Session is shared by the login and feed adapters so the
cookies returned by a login are sent with every later request.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

NAME = "reportwatch"
VERSION = "1.0.0"


def user_agent(contact: Optional[str] = None) -> str:
    base = f"{NAME} v{VERSION}"
    if contact:
        return f"{base} ({contact})"
    return base


def build_http_session(contact: Optional[str] = None) -> requests.Session:
    """Create the shared HTTP session with the reportwatch User-Agent."""

    session = requests.Session()
    session.headers["User-Agent"] = user_agent(contact)

    logging.getLogger(__name__).info("Initializing HTTP session (%s)", session.headers["User-Agent"])

    return session
