"""Tiered data store with freshness-aware caching.

Manages read/write of JSON data files organized into tiers:
  - cache/: Last good export payload per acquisition configuration
  - derived/: Computed outputs, always rebuilt (garden SVG, HTML page)

Every JSON file is wrapped in a metadata envelope (``source``,
``fetched_at``, optional ``valid_until``) so callers can tell where the
payload came from and whether it is still fresh.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003
from typing import Any


class DataStore:
    """Manages read/write of cached data files with TTL."""

    def __init__(self, base_dir: Path) -> None:
        self.base = base_dir
        self.cache = base_dir / "cache"
        self.derived = base_dir / "derived"

    def read(self, path: Path) -> Any | None:
        """Read data payload from a metadata-enveloped JSON file.

        Returns the ``data`` field, or None if the file doesn't exist.
        """
        envelope = self.read_raw(path)
        if envelope is None:
            return None
        return envelope.get("data", envelope)

    def read_raw(self, path: Path) -> dict[str, Any] | None:
        """Read the full envelope (meta + data) from a JSON file.

        A file that exists but is not a JSON object is treated as missing.
        """
        full = self._resolve(path)
        if not full.exists():
            return None
        try:
            with full.open() as f:
                result = json.load(f)
        except json.JSONDecodeError:
            return None
        return result if isinstance(result, dict) else None

    def write(
        self,
        path: Path,
        data: Any,
        source: str,
        valid_until: datetime | None = None,
        **params: Any,
    ) -> Path:
        """Write data wrapped in a metadata envelope.

        Args:
            path: Relative path under base_dir (e.g. ``cache/export/winston.json``).
            data: Payload to store under the ``data`` key.
            source: Data source identifier (e.g. the endpoint URL).
            valid_until: Expiry timestamp. None means derived/no-cache.
            **params: Extra metadata fields (cache key, query params, etc.).

        Returns:
            Absolute path of the written file.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)

        meta: dict[str, Any] = {
            "source": source,
            "fetched_at": datetime.now(UTC).isoformat(),
        }
        if valid_until is not None:
            meta["valid_until"] = valid_until.isoformat()
        if params:
            meta.update(params)

        envelope = {"meta": meta, "data": data}
        with full.open("w") as f:
            json.dump(envelope, f, indent=2)

        return full

    def write_text(self, path: Path, text: str) -> Path:
        """Write a derived text artifact (HTML, SVG) without an envelope."""
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)
        with full.open("w") as f:
            f.write(text)
        return full

    def _resolve(self, path: Path) -> Path:
        full = self.base / path if not path.is_absolute() else path
        try:
            full.resolve().relative_to(self.base.resolve())
        except ValueError:
            msg = f"Path escapes store base directory: {path}"
            raise ValueError(msg) from None
        return full

    def is_fresh(self, path: Path) -> bool:
        """Check if a file exists and hasn't expired.

        Returns False if the file is missing, has no ``valid_until``, or
        the expiry time has passed.
        """
        envelope = self.read_raw(path)
        if envelope is None:
            return False

        valid_until = envelope.get("meta", {}).get("valid_until")
        if valid_until is None:
            return False

        expiry = datetime.fromisoformat(valid_until)
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=UTC)
        return datetime.now(UTC) < expiry
