"""Fetch the export with timeout and cache fallback."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from garden_walk.datasources.export.client import build_export_url
from garden_walk.datasources.export.normalize import extract_rows
from garden_walk.datasources.export.transports import CancelToken, Transport, transport_for
from garden_walk.errors import GardenError, PayloadValidationError

if TYPE_CHECKING:
    from garden_walk.datasources.export.cache import ExportCache
    from garden_walk.schemas import AcquisitionConfig

logger = logging.getLogger(__name__)


@dataclass
class AcquisitionResult:
    """Raw payload plus where it came from.

    ``stale`` is True when the payload was served from cache after a failed
    fetch; ``saved_at`` is then the cache entry's timestamp and ``error`` the
    failure that triggered the fallback.
    """

    payload: Any
    url: str
    fetched_at: str
    stale: bool = False
    saved_at: str | None = None
    error: GardenError | None = None

    @property
    def row_count(self) -> int | None:
        rows = extract_rows(self.payload)
        return len(rows) if rows is not None else None

    @property
    def payload_keys(self) -> list[str]:
        return list(self.payload) if isinstance(self.payload, dict) else []


def validate_payload(raw: Any) -> None:
    """Reject payloads that declare failure or carry no row collection."""
    if isinstance(raw, dict) and raw.get("ok") is False:
        reason = raw.get("error")
        raise PayloadValidationError(str(reason) if reason else "export reported ok:false")
    if extract_rows(raw) is None:
        raise PayloadValidationError("payload has no rows, days or data collection")


def acquire(
    config: AcquisitionConfig,
    cache: ExportCache | None = None,
    transport: Transport | None = None,
    token: CancelToken | None = None,
) -> AcquisitionResult:
    """
    Fetch the export for ``config``.

    On success the payload is written to ``cache`` (when caching is enabled).
    On any acquisition failure the cached payload for the same configuration
    is returned with ``stale=True``; without one the failure propagates.

    Args:
        config: Endpoint, selector and transport preference.
        cache: Export cache; None disables both fallback and write-through.
        transport: Transport override (defaults to the one ``config`` selects).
        token: Cancellation token (defaults to one bounded by ``config.timeout``).

    Raises:
        ValueError: The endpoint is not configured.
        TransportError: Fetch failed (including ``FormatError``) and no cache entry exists.
        PayloadValidationError: Payload unusable and no cache entry exists.
    """
    url = build_export_url(config)
    transport = transport or transport_for(config.transport)
    token = token or CancelToken(config.timeout)
    use_cache = cache is not None and config.cache_enabled

    try:
        payload = transport.fetch(url, token)
        validate_payload(payload)
    except GardenError as exc:
        logger.warning("Export fetch failed (%s): %s", config.transport, exc)
        if use_cache:
            entry = cache.read(config)  # type: ignore[union-attr]
            if entry is not None:
                logger.info("Using cached export saved at %s", entry.saved_at)
                return AcquisitionResult(
                    payload=entry.rows,
                    url=url,
                    fetched_at=datetime.now(UTC).isoformat(),
                    stale=True,
                    saved_at=entry.saved_at,
                    error=exc,
                )
        raise

    if use_cache:
        cache.write(config, payload)  # type: ignore[union-attr]
    return AcquisitionResult(payload=payload, url=url, fetched_at=datetime.now(UTC).isoformat())
