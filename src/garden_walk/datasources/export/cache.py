"""Write-through cache of the last good export per acquisition configuration."""

from __future__ import annotations

import hashlib
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from garden_walk.datasources.export.client import cache_key
from garden_walk.schemas import ExportCacheEntry

if TYPE_CHECKING:
    from garden_walk.schemas import AcquisitionConfig
    from garden_walk.store import DataStore

CACHE_DIR = Path("cache/export")

#: How long a cached export counts as fresh for flows that skip refetching.
FRESH_FOR = timedelta(minutes=10)


def cache_path(config: AcquisitionConfig) -> Path:
    """Relative store path for a configuration's cache entry."""
    digest = hashlib.sha1(cache_key(config).encode("utf-8")).hexdigest()[:16]
    return CACHE_DIR / f"{config.bot}-{config.route_mode}-{config.transport}-{digest}.json"


class ExportCache:
    """Stores ``{savedAt, rows}`` entries in a ``DataStore``.

    Entries are only ever written after a successful acquisition and are
    never deleted.
    """

    def __init__(self, store: DataStore) -> None:
        self.store = store

    def read(self, config: AcquisitionConfig) -> ExportCacheEntry | None:
        """Return the cached entry for ``config``, or None if absent or unreadable."""
        data = self.store.read(cache_path(config))
        if not isinstance(data, dict):
            return None
        try:
            return ExportCacheEntry.model_validate(data)
        except ValidationError:
            return None

    def write(self, config: AcquisitionConfig, rows: Any) -> ExportCacheEntry:
        """Persist ``rows`` as the latest good payload for ``config``."""
        now = datetime.now(UTC)
        entry = ExportCacheEntry(saved_at=now.isoformat(), rows=rows)
        self.store.write(
            cache_path(config),
            entry.model_dump(by_alias=True),
            source=config.endpoint,
            valid_until=now + FRESH_FOR,
            cache_key=cache_key(config),
        )
        return entry

    def is_fresh(self, config: AcquisitionConfig) -> bool:
        return self.store.is_fresh(cache_path(config))
