"""Fandom HTTP adapters.

FandomSession implements the SessionPort (login against the services token
endpoint) and FandomReportSource implements the ReportSourcePort (moderation
feed and container lookups). Both share one requests.Session so the cookies
set by a login are used by every later request.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Iterable, Optional

import requests

from adapters.fandom_mapper import parse_container_metadata, parse_report_page
from core.errors import AuthError, TransientFetchError
from core.models import ContainerMetadata, ReportPage

LOGGER = logging.getLogger(__name__)

# App id header expected by the services gateway.
WIKIA_APPS_ID = "1234"
REQUEST_TIMEOUT = 30
AUTH_STATUS_CODES = {401, 403}


class FandomSession:
    """Session manager: logs in and retries until the login succeeds."""

    def __init__(
        self,
        http: requests.Session,
        domain: str,
        username: str,
        password: str,
        retry_seconds: float = 10,
        sleep: Callable[[float], None] = time.sleep,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        self._http = http
        self._domain = domain
        self._username = username
        self._password = password
        self._retry_seconds = retry_seconds
        self._sleep = sleep
        self._stop_event = stop_event
        self.user_id: Optional[str] = None

    def _wait_before_retry(self) -> bool:
        """Wait out the retry delay; return True when shutdown was requested."""

        if self._stop_event is None:
            self._sleep(self._retry_seconds)
            return False
        return self._stop_event.wait(self._retry_seconds)

    def _endpoint(self) -> str:
        return f"https://services.{self._domain}/auth/token"

    def _login_once(self) -> dict:
        try:
            response = self._http.post(
                self._endpoint(),
                data={"username": self._username, "password": self._password},
                headers={"X-Wikia-WikiaAppsID": WIKIA_APPS_ID},
                timeout=REQUEST_TIMEOUT,
            )
        except requests.RequestException as exc:
            raise AuthError(f"login request failed: {exc}") from exc

        if not response.ok:
            raise AuthError(f"HTTP {response.status_code}: {response.text[:300]}")
        try:
            data = response.json()
        except ValueError as exc:
            raise AuthError("login response is not JSON") from exc

        token = data.get("access_token") if isinstance(data, dict) else None
        if token:
            # Replaces any token left by an earlier login.
            self._http.cookies.set("access_token", token, domain=f".{self._domain}")
        return data if isinstance(data, dict) else {}

    def login(self) -> None:
        """Log in, retrying on a fixed delay until it succeeds.

        Raises AuthError only when the stop event is set while waiting to retry.
        """

        attempt = 0
        while True:
            attempt += 1
            try:
                data = self._login_once()
            except AuthError as exc:
                LOGGER.error(
                    "Failed to log in (attempt %s), retrying in %ss: %s",
                    attempt,
                    self._retry_seconds,
                    exc,
                )
                if self._wait_before_retry():
                    raise AuthError("login cancelled by shutdown")
                continue

            self.user_id = str(data.get("user_id")) if data.get("user_id") else None
            LOGGER.info("Logged into Fandom as ID %s", self.user_id)
            return


class FandomReportSource:
    """Reads reported posts and container lookups from a wiki."""

    def __init__(self, http: requests.Session, wiki_base: str) -> None:
        self._http = http
        self._wiki_base = wiki_base

    def _get(self, params: dict[str, Any]) -> Any:
        url = f"{self._wiki_base}/wikia.php"
        try:
            response = self._http.get(url, params=params, timeout=REQUEST_TIMEOUT)
        except requests.RequestException as exc:
            raise TransientFetchError(f"{params['method']} request failed: {exc}") from exc

        if response.status_code in AUTH_STATUS_CODES:
            raise AuthError(f"HTTP {response.status_code} from {params['method']}")
        if not response.ok:
            raise TransientFetchError(f"HTTP {response.status_code} from {params['method']}")
        try:
            return response.json()
        except ValueError as exc:
            raise TransientFetchError(f"{params['method']} returned invalid JSON") from exc

    def fetch_reported_posts(self, limit: int) -> ReportPage:
        """Return the newest page of reported posts."""

        data = self._get(
            {
                "controller": "DiscussionModeration",
                "method": "getReportedPosts",
                "format": "json",
                "limit": limit,
                # Cache buster.
                "t": int(time.time() * 1000),
            }
        )
        return parse_report_page(data)

    def fetch_container_metadata(
        self, page_ids: Iterable[str], user_ids: Iterable[str]
    ) -> ContainerMetadata:
        """Return article paths and usernames for the given ids."""

        data = self._get(
            {
                "controller": "FeedsAndPosts",
                "method": "getArticleNamesAndUsernames",
                "stablePageIds": ",".join(page_ids),
                "userIds": ",".join(user_ids),
            }
        )
        return parse_container_metadata(data)
