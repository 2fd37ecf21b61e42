"""Export endpoint URL construction and shared constants.

The export is served by a web app ``/exec`` URL. In routed mode the handler
dispatches on ``r=api_garden_export``; in direct mode the endpoint only takes
the bot selector.
"""

from __future__ import annotations

import time
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from garden_walk.schemas import AcquisitionConfig, RouteMode

EXPORT_ROUTE = "api_garden_export"

#: Query parameter carrying the cache-busting timestamp.
CACHE_BUST_PARAM = "_ts"


def build_export_url(config: AcquisitionConfig, now_ms: int | None = None) -> str:
    """
    Build the export request URL for a configuration.

    Existing query parameters on the endpoint are kept; route, bot, limit and
    the cache-bust timestamp are set (or overwritten).

    Args:
        config: Acquisition configuration with a non-empty endpoint.
        now_ms: Cache-bust value; defaults to the current time in milliseconds.

    Returns:
        Absolute request URL.
    """
    if not config.endpoint:
        msg = "Export endpoint is not configured"
        raise ValueError(msg)

    parts = urlsplit(config.endpoint)
    query = dict(parse_qsl(parts.query))
    if config.route_mode is RouteMode.ROUTED:
        query["r"] = EXPORT_ROUTE
    query["bot"] = config.bot
    query["limit"] = str(config.limit)
    query[CACHE_BUST_PARAM] = str(now_ms if now_ms is not None else int(time.time() * 1000))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


def cache_key(config: AcquisitionConfig) -> str:
    """Namespaced cache key; distinct configurations never share an entry."""
    return f"GardenExport:{config.endpoint}:{config.bot}:{config.route_mode}:{config.transport}"
