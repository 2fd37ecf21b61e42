"""Transport strategies for fetching the raw export payload.

Two variants share one contract, ``fetch(url, token) -> Any``:

- ``DirectTransport``: plain GET, JSON body, non-2xx is an error.
- ``ScriptTransport``: JSONP. The endpoint is asked to wrap the payload in a
  uniquely named callback (``callback=<name>``) and the body must be exactly a
  call of that callback. Used for deployments that only answer cross-origin
  requests in script form.

Both raise ``TransportError`` with a reason of ``timeout``,
``http-status:<code>``, ``load-error`` or ``parse-error``.
"""

from __future__ import annotations

import concurrent.futures
import json
import logging
import re
import time
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import requests

from garden_walk.errors import FormatError, TransportError, excerpt
from garden_walk.schemas import TransportMode
from garden_walk.services.http import session

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

_XSSI_PREFIX = ")]}'"

# name( ... ) with an optional trailing semicolon and the /**/ guard some
# JSONP servers prepend.
_JSONP_RE = re.compile(r"^\s*(?:/\*\*/\s*)?([A-Za-z_$][\w$.]*)\s*\((.*)\)\s*;?\s*$", re.DOTALL)


class CancelToken:
    """Deadline-bound cancellation flag shared by a caller and a transport.

    The token expires when ``cancel()`` is called or when its deadline
    passes; either way the in-flight transport reports a ``timeout``.
    """

    def __init__(
        self,
        timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._clock = clock
        self._cancelled = False
        self.deadline = clock() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        if self._cancelled:
            return True
        return self.deadline is not None and self._clock() >= self.deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when unbounded."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - self._clock())

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise TransportError("timeout", "request cancelled")
        if self.cancelled:
            raise TransportError("timeout", "deadline exceeded")


class Transport(Protocol):
    """Uniform contract for export transports."""

    mode: TransportMode

    def fetch(self, url: str, token: CancelToken) -> Any: ...


def parse_json_body(text: str) -> Any:
    """Parse a response body as JSON.

    A second pass tolerates a byte-order mark and an anti-XSSI ``)]}'``
    prefix line, both of which some script hosts prepend.
    """
    try:
        return json.loads(text)
    except ValueError:
        pass

    trimmed = text.strip().lstrip("\ufeff").strip()
    if trimmed.startswith(_XSSI_PREFIX):
        trimmed = trimmed[len(_XSSI_PREFIX) :].lstrip()
    try:
        return json.loads(trimmed)
    except ValueError:
        raise FormatError(f"Response was not valid JSON. Body: {excerpt(text)}") from None


#: Bytes requested per read while streaming a body; the token is checked
#: between reads.
CHUNK_SIZE = 8192

# Downloads run here so the caller can wait on a wall-clock deadline.
_FETCH_EXECUTOR = concurrent.futures.ThreadPoolExecutor(
    max_workers=4, thread_name_prefix="garden-export"
)


@dataclass
class RawResponse:
    """Status and decoded body of a fully read response."""

    status_code: int
    text: str

    @property
    def ok(self) -> bool:
        return self.status_code < 400


def _decode(body: bytes, encoding: str | None) -> str:
    try:
        return str(body, encoding or "utf-8", errors="replace")
    except LookupError:
        return str(body, "utf-8", errors="replace")


def _download(
    http: requests.Session,
    url: str,
    token: CancelToken,
) -> RawResponse:
    kwargs: dict[str, Any] = {"allow_redirects": True, "stream": True}
    remaining = token.remaining()
    if remaining is not None:
        # (connect, read); each bounds a single socket wait, not the whole body.
        kwargs["timeout"] = (remaining, remaining)
    try:
        resp = http.get(url, **kwargs)
    except requests.Timeout as exc:
        raise TransportError("timeout", str(exc)) from exc
    except requests.RequestException as exc:
        raise TransportError("load-error", str(exc)) from exc

    chunks: list[bytes] = []
    try:
        for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
            token.raise_if_cancelled()
            chunks.append(chunk)
    except requests.Timeout as exc:
        raise TransportError("timeout", str(exc)) from exc
    except requests.RequestException as exc:
        raise TransportError("load-error", str(exc)) from exc
    finally:
        resp.close()
    token.raise_if_cancelled()
    return RawResponse(resp.status_code, _decode(b"".join(chunks), resp.encoding))


def _get(http: requests.Session, url: str, token: CancelToken) -> RawResponse:
    """GET ``url`` and read the whole body before the token's deadline.

    The download runs on a worker thread; the caller waits at most the time
    left on the token, measured from the start of the request, so retries
    and slowly trickling bodies cannot stretch the bound.
    """
    token.raise_if_cancelled()
    remaining = token.remaining()
    if remaining is None:
        return _download(http, url, token)

    future = _FETCH_EXECUTOR.submit(_download, http, url, token)
    try:
        return future.result(timeout=remaining)
    except concurrent.futures.TimeoutError:
        # The worker stops at its next token check and closes the response.
        future.cancel()
        raise TransportError("timeout", "deadline exceeded") from None


class DirectTransport:
    """Standard HTTP GET of a JSON body."""

    mode = TransportMode.DIRECT

    def __init__(self, http: requests.Session | None = None) -> None:
        self.http = http or session

    def fetch(self, url: str, token: CancelToken) -> Any:
        logger.debug("GET %s", url)
        resp = _get(self.http, url, token)
        if not resp.ok:
            raise TransportError(f"http-status:{resp.status_code}", excerpt(resp.text))
        return parse_json_body(resp.text)


def new_callback_name() -> str:
    """Unique, JS-identifier-safe callback name."""
    return f"__gardenExport_{uuid.uuid4().hex[:12]}"


def with_callback(url: str, callback: str) -> str:
    """Return ``url`` with its ``callback`` query parameter set."""
    parts = urlsplit(url)
    query = dict(parse_qsl(parts.query))
    query["callback"] = callback
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def unwrap_jsonp(body: str, callback: str) -> Any:
    """Extract the JSON argument of ``callback(...)`` from a JSONP body."""
    match = _JSONP_RE.match(body)
    if match is None:
        detail = f"Response is not a script callback. Body: {excerpt(body)}"
        raise TransportError("load-error", detail)
    name, argument = match.groups()
    if name != callback:
        raise TransportError("load-error", f"Script invoked {name!r}, expected {callback!r}")
    return parse_json_body(argument)


class ScriptTransport:
    """JSONP transport: the payload arrives as an argument to a named callback."""

    mode = TransportMode.SCRIPT

    def __init__(
        self,
        http: requests.Session | None = None,
        callback_factory: Callable[[], str] = new_callback_name,
    ) -> None:
        self.http = http or session
        self.callback_factory = callback_factory

    def fetch(self, url: str, token: CancelToken) -> Any:
        callback = self.callback_factory()
        script_url = with_callback(url, callback)
        logger.debug("SCRIPT %s", script_url)
        resp = _get(self.http, script_url, token)
        if not resp.ok:
            # A script tag cannot see the status; it just fails to load.
            raise TransportError("load-error", f"HTTP {resp.status_code}")
        return unwrap_jsonp(resp.text, callback)


def transport_for(mode: TransportMode, http: requests.Session | None = None) -> Transport:
    """Select the transport variant for a configured mode."""
    if mode is TransportMode.SCRIPT:
        return ScriptTransport(http)
    return DirectTransport(http)
