"""
HTTP client for the remote media API.

The API exposes a handful of GET endpoints under a configurable base URL
(``timeline/<user>``, ``search/<keywords>``, ``media/<id>``, ``media2/<id>``
and ``latest/<user>``) and always answers with JSON.  This module performs a
single bounded request per call and converts every failure into one of two
errors:

* :class:`~tweet_importer.utils.errors.TransportError` – connection problems,
  timeouts and HTTP error statuses;
* :class:`~tweet_importer.utils.errors.DecodeError` – a body that is not valid
  JSON.

No retries are attempted here; a failed call is terminal for the operation
that issued it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from ..settings import API_TIMEOUT
from ..utils.errors import ConfigError, DecodeError, TransportError

logger = logging.getLogger(__name__)


def api_headers(user_agent: str) -> Dict[str, str]:
    return {
        "Accept": "application/json",
        "User-Agent": user_agent,
    }


class RemoteApiClient:
    """Thin wrapper around ``requests`` bound to one API base URL."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = API_TIMEOUT,
        user_agent: str = "TweetImporter/1.0",
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = (base_url or "").strip()
        if self.base_url and not self.base_url.endswith("/"):
            self.base_url += "/"
        self.timeout = timeout
        self.user_agent = user_agent
        self.session = session or requests.Session()

    def url_for(self, path: str) -> str:
        if not self.base_url:
            raise ConfigError()
        return self.base_url + path.lstrip("/")

    def get(self, path: str) -> Any:
        """GET ``path`` relative to the base URL and return the decoded JSON.

        :raises ConfigError: if no base URL is configured.  Raised before any
            network activity.
        :raises TransportError: on connection failures, timeouts or HTTP
            status codes of 400 and above.
        :raises DecodeError: if the body is not valid JSON.
        """
        url = self.url_for(path)
        logger.debug("GET %s", url)
        try:
            resp = self.session.get(url, headers=api_headers(self.user_agent), timeout=self.timeout)
            resp.raise_for_status()
        except requests.Timeout as e:
            raise TransportError(f"Request to {url} timed out after {self.timeout}s.") from e
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            raise TransportError(f"Media API returned HTTP {status} for {url}.") from e
        except requests.RequestException as e:
            raise TransportError(f"Network error contacting the media API: {e}") from e

        try:
            return resp.json()
        except ValueError as e:
            raise DecodeError() from e
