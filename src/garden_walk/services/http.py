"""
HTTP session used by the export transports.

The export endpoint is a script host that is slow to start and now and then
answers 502/503 while warming up. The shared session retries those a couple
of times, quickly, because the whole acquisition has a hard deadline (see
``CancelToken``); anything slower is left to the cache fallback.

Usage::

    from garden_walk.services.http import session

    resp = session.get(export_url)  # DEFAULT_TIMEOUT applies
"""

from __future__ import annotations

from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from garden_walk import __version__

#: Gateway and rate-limit errors get two retries, 0.5s apart at most.
DEFAULT_RETRY = Retry(
    total=2,
    backoff_factor=0.5,
    status_forcelist=[429, 502, 503, 504],
    allowed_methods=["GET", "HEAD", "OPTIONS"],
    raise_on_status=False,
)

#: Seconds; matches the default acquisition timeout.
DEFAULT_TIMEOUT = 12


class TimeoutAdapter(HTTPAdapter):
    """Retrying adapter that fills in a timeout when the caller gives none."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT, **kwargs: Any) -> None:
        self.timeout = timeout
        super().__init__(**kwargs)

    def send(self, request: requests.PreparedRequest, **kwargs: Any) -> requests.Response:
        if kwargs.get("timeout") is None:
            kwargs["timeout"] = self.timeout
        return super().send(request, **kwargs)


def create_session(
    retry: Retry | None = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> requests.Session:
    """Build the garden-walk session: retries, timeout default and User-Agent."""
    s = requests.Session()
    adapter = TimeoutAdapter(timeout=timeout, max_retries=retry or DEFAULT_RETRY)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers["User-Agent"] = f"garden-walk/{__version__}"
    return s


#: Shared by both transports.
session: requests.Session = create_session()
