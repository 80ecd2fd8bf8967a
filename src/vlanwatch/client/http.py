"""REST reads from the realtime database that publishes the reports.

The database exposes every node as ``<root>/<segment>/.../<leaf>.json``; a
GET returns the node as a JSON document, or ``null`` when it holds nothing.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import requests

from vlanwatch import __version__
from vlanwatch.client.errors import (
    VlanWatchFeedError,
    VlanWatchRequestError,
    VlanWatchResponseError,
)

logger = logging.getLogger(__name__)

_HEADERS: dict[str, str] = {
    "User-Agent": f"vlanwatch/{__version__}",
    "Accept": "application/json",
}


def database_root(url: str) -> str:
    """Return *url* with an ``https`` scheme when none is given and no trailing slash."""
    url = url.strip().rstrip("/")
    if "://" not in url:
        url = "https://" + url
    return url


def node_url(root: str, segments: tuple[str, ...]) -> str:
    """Build the REST URL of a node; each segment is percent-encoded."""
    return "/".join([root, *(quote(s, safe="") for s in segments)]) + ".json"


class FeedHTTP:
    """Read-only JSON access to one database root.

    Args:
        base_url: Database root URL, e.g. ``https://example.firebaseio.com``.
        timeout_s: Request timeout in seconds (default 30).
        verify_tls: Whether to verify TLS certificates (default True).
    """

    def __init__(
        self,
        base_url: str,
        timeout_s: float = 30.0,
        verify_tls: bool = True,
    ) -> None:
        self.root: str = database_root(base_url)
        self.timeout_s: float = timeout_s
        self._session: requests.Session = requests.Session()
        self._session.headers.update(_HEADERS)
        self._session.verify = verify_tls

    def read(self, *segments: str) -> Any:
        """Return the decoded JSON document stored at *segments*.

        Returns:
            The node value; ``None`` for an empty node.

        Raises:
            VlanWatchRequestError: On any transport-level failure.
            VlanWatchResponseError: On a non-2xx HTTP status code.
            VlanWatchFeedError: If the body is not valid JSON.
        """
        url = node_url(self.root, segments)
        logger.debug("GET %s", url)
        try:
            resp = self._session.get(url, timeout=self.timeout_s)
        except requests.exceptions.RequestException as exc:
            raise VlanWatchRequestError(url, exc) from exc
        if not resp.ok:
            raise VlanWatchResponseError(resp.status_code, url)
        try:
            return resp.json()
        except ValueError as exc:
            raise VlanWatchFeedError(f"Invalid JSON from {url!r}: {exc}") from exc

    def close(self) -> None:
        self._session.close()
