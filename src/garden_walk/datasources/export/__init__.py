"""Garden export data source.

Fetches the daily log export from the web app endpoint and normalizes it.

Public API:
  - acquire: acquire, AcquisitionResult (fetch with timeout + cache fallback)
  - normalize: normalize (payload -> DayRecord list, never raises)
  - transports: DirectTransport, ScriptTransport, CancelToken
  - cache: ExportCache
  - client: build_export_url, cache_key
"""

from garden_walk.datasources.export.acquire import AcquisitionResult, acquire, validate_payload
from garden_walk.datasources.export.cache import ExportCache
from garden_walk.datasources.export.client import EXPORT_ROUTE, build_export_url, cache_key
from garden_walk.datasources.export.normalize import extract_rows, normalize
from garden_walk.datasources.export.transports import (
    CancelToken,
    DirectTransport,
    ScriptTransport,
    transport_for,
)

__all__ = [
    "EXPORT_ROUTE",
    "AcquisitionResult",
    "CancelToken",
    "DirectTransport",
    "ExportCache",
    "ScriptTransport",
    "acquire",
    "build_export_url",
    "cache_key",
    "extract_rows",
    "normalize",
    "transport_for",
    "validate_payload",
]
