"""
Garden context: the state one garden view owns.

Holds the acquisition config, the export cache, the mount and the last good
records, and runs the pipeline::

    acquire -> normalize -> layout -> generate/compose -> render

Every ``reload()`` takes a new request generation. A completion that
finishes after a newer reload has started is discarded, so a slow superseded
request can never overwrite newer state.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from garden_walk.datasources.export import (
    AcquisitionResult,
    CancelToken,
    ExportCache,
    acquire,
    normalize,
    transport_for,
)
from garden_walk.errors import GardenError
from garden_walk.garden.compose import ComposeOptions, compose
from garden_walk.garden.layout import Viewport, layout
from garden_walk.renderers.mount import DEFAULT_VIEW_BOX, Mount, render
from garden_walk.schemas import AcquisitionConfig, DayRecord, RouteMode, TransportMode

if TYPE_CHECKING:
    from garden_walk.config import Settings
    from garden_walk.datasources.export.transports import Transport
    from garden_walk.garden.scene import SceneSpec
    from garden_walk.store import DataStore

logger = logging.getLogger(__name__)

#: Max payload keys listed in the status block.
STATUS_KEYS_SHOWN = 12


class GardenContext:
    """Explicit state for one garden: config, cache, mount and last records."""

    def __init__(
        self,
        config: AcquisitionConfig | None = None,
        store: DataStore | None = None,
        mount: Mount | None = None,
        options: ComposeOptions | None = None,
        transport_factory: Callable[[TransportMode], Transport] = transport_for,
    ) -> None:
        self.config = config or AcquisitionConfig()
        self.cache = ExportCache(store) if store is not None else None
        self.mount = mount
        self.options = options or ComposeOptions()
        self.transport_factory = transport_factory

        self.generation = 0
        self.last_result: AcquisitionResult | None = None
        self.last_error: GardenError | None = None
        self.last_records: list[DayRecord] = []
        self.last_scene: SceneSpec | None = None
        self._token: CancelToken | None = None

    @classmethod
    def from_settings(
        cls, settings: Settings, store: DataStore | None = None, mount: Mount | None = None
    ) -> GardenContext:
        return cls(
            config=AcquisitionConfig.from_settings(settings),
            store=store,
            mount=mount if mount is not None else Mount(settings.view_box),
            options=ComposeOptions(columns=settings.columns, show_labels=settings.show_labels),
        )

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    def _update(self, **changes: Any) -> None:
        # Re-validate so setters get the same coercion as construction.
        self.config = AcquisitionConfig.model_validate({**self.config.model_dump(), **changes})

    def set_endpoint(self, value: str) -> None:
        self._update(endpoint=value)
        logger.info("Endpoint %s", "set" if self.config.endpoint else "blank")

    def set_bot(self, value: str) -> None:
        self._update(bot=value)

    def set_limit(self, value: object) -> None:
        self._update(limit=value)

    def set_route_mode(self, value: RouteMode | str) -> None:
        self._update(route_mode=RouteMode(value))

    def set_transport(self, value: TransportMode | str) -> None:
        self._update(transport=TransportMode(value))

    def set_cache_enabled(self, value: bool) -> None:
        self._update(cache_enabled=bool(value))

    @property
    def endpoint(self) -> str:
        return self.config.endpoint

    @property
    def bot(self) -> str:
        return self.config.bot

    @property
    def limit(self) -> int:
        return self.config.limit

    @property
    def route_mode(self) -> RouteMode:
        return self.config.route_mode

    @property
    def transport(self) -> TransportMode:
        return self.config.transport

    @property
    def cache_enabled(self) -> bool:
        return self.config.cache_enabled

    @property
    def viewport(self) -> Viewport:
        view_box = self.mount.view_box if self.mount is not None else DEFAULT_VIEW_BOX
        return Viewport.from_view_box(view_box)

    @property
    def stale(self) -> bool:
        return self.last_result is not None and self.last_result.stale

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    def reload(self) -> AcquisitionResult | None:
        """
        Fetch the export, normalize it and rebuild the scene.

        Returns:
            The acquisition result, or None when the endpoint is missing, the
            fetch failed without a cache entry, or this request was superseded
            by a newer reload before it completed.
        """
        self.generation += 1
        generation = self.generation
        if self._token is not None:
            self._token.cancel()
        token = CancelToken(self.config.timeout)
        self._token = token

        if not self.config.endpoint:
            logger.info("Export load skipped: endpoint missing")
            self._apply(generation, None, None)
            return None

        logger.info("Fetching export: bot=%s, limit=%d", self.config.bot, self.config.limit)
        try:
            result = acquire(
                self.config,
                cache=self.cache,
                transport=self.transport_factory(self.config.transport),
                token=token,
            )
        except GardenError as exc:
            logger.error("Export load failed: %s", exc)
            self._apply(generation, None, exc)
            return None

        if not self._apply(generation, result, result.error):
            return None
        return result

    def restore_cached(self) -> AcquisitionResult | None:
        """Rebuild from the cached export without touching the network.

        Returns:
            The cached result (``stale=True``), or None if nothing is cached
            or the cache is disabled; either way the scene is rebuilt
            (placeholder when empty).
        """
        self.generation += 1
        entry = None
        if self.cache is not None and self.config.cache_enabled:
            entry = self.cache.read(self.config)
        result = None
        if entry is not None:
            result = AcquisitionResult(
                payload=entry.rows,
                url="(cache)",
                fetched_at=entry.saved_at,
                stale=True,
                saved_at=entry.saved_at,
            )
        self._apply(self.generation, result, None)
        return result

    def _apply(
        self, generation: int, result: AcquisitionResult | None, error: GardenError | None
    ) -> bool:
        if generation != self.generation:
            logger.info(
                "Discarding superseded export (generation %d < %d)", generation, self.generation
            )
            return False
        self.last_result = result
        self.last_error = error
        self.last_records = normalize(result.payload, self.options.theme) if result else []
        self._token = None
        self.rebuild_scene()
        return True

    def rebuild_scene(self) -> SceneSpec:
        """Lay out, generate and compose the last records, then swap into the mount."""
        viewport = self.viewport
        records = self.last_records
        positions = layout(len(records), viewport, self.options.columns)
        scene = compose(records, positions, viewport, self.options)
        render(scene, self.mount)
        self.last_scene = scene
        logger.debug("Scene rebuilt: %d records, %d nodes", len(records), scene.node_count())
        return scene

    # -------------------------------------------------------------------------
    # Status
    # -------------------------------------------------------------------------

    def status_lines(self) -> list[str]:
        """Human-readable status block for the page."""
        cfg = self.config
        lines = [
            "LifeLog Garden Walk",
            f"bot={cfg.bot}  limit={cfg.limit}  route={cfg.route_mode}  "
            f"transport={cfg.transport}  cache={'1' if cfg.cache_enabled else '0'}",
            f"API: {cfg.endpoint or '(not set)'}",
        ]
        result = self.last_result
        if not cfg.endpoint:
            lines.append("Export: not loaded (set the endpoint URL)")
        elif result is None and self.last_error is not None:
            lines.append(f"Fetch: FAILED ({self.last_error})")
        elif result is None:
            lines.append("Export: not loaded")
        elif result.stale:
            if result.error is not None:
                lines.append(f"Fetch: FAILED, using cache ({result.error})")
            else:
                lines.append("Export: from cache")
            lines.append(f"Cache savedAt: {result.saved_at or '(unknown)'}")
        else:
            lines.append("Fetch: OK")

        if result is not None:
            count = result.row_count
            lines.append(f"Rows: {count if count is not None else 'unknown'}")
            keys = result.payload_keys
            if keys:
                more = " ..." if len(keys) > STATUS_KEYS_SHOWN else ""
                lines.append(f"Payload keys: {', '.join(keys[:STATUS_KEYS_SHOWN])}{more}")
        if self.last_scene is not None and self.last_scene.placeholder:
            lines.append("Scene: placeholder")
        return lines
