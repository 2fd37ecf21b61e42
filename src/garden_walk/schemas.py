"""
Domain models for garden walk.

Pydantic models for the export payload and acquisition configuration.
These define the canonical schema - the normalizer coerces raw export rows
into ``DayRecord`` and the context validates settings into ``AcquisitionConfig``.
"""

from __future__ import annotations

import math
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from garden_walk.config import Settings

# =============================================================================
# Acquisition configuration
# =============================================================================

KNOWN_BOTS = ("winston", "alfred")
DEFAULT_BOT = "winston"

LIMIT_MIN = 1
LIMIT_MAX = 500
DEFAULT_LIMIT = 40

DEFAULT_TIMEOUT_SECONDS = 12.0


class TransportMode(StrEnum):
    """How the export is requested."""

    DIRECT = "direct"
    SCRIPT = "script"  # JSONP: response wrapped in a named callback


class RouteMode(StrEnum):
    """How the export route is addressed on the endpoint."""

    ROUTED = "r"  # /exec?r=api_garden_export&bot=...
    DIRECT = "direct"  # /exec?bot=...


def normalize_endpoint(value: str | None) -> str:
    """Strip whitespace and trailing slashes from an endpoint URL."""
    return (value or "").strip().rstrip("/")


def coerce_bot(value: object) -> str:
    """Map a selector value onto a known bot, falling back to the default."""
    text = str(value or "").strip().lower()
    return text if text in KNOWN_BOTS else DEFAULT_BOT


def coerce_limit(value: object) -> int:
    """Clamp a limit to ``LIMIT_MIN..LIMIT_MAX``; unusable values give the default."""
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_LIMIT
    if not math.isfinite(number):
        return DEFAULT_LIMIT
    return max(LIMIT_MIN, min(LIMIT_MAX, int(number)))


class AcquisitionConfig(BaseModel):
    """Everything needed to fetch one export and key its cache entry."""

    model_config = ConfigDict(frozen=True)

    endpoint: str = ""
    bot: str = DEFAULT_BOT
    limit: int = DEFAULT_LIMIT
    route_mode: RouteMode = RouteMode.ROUTED
    transport: TransportMode = TransportMode.DIRECT
    cache_enabled: bool = True
    timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)

    @field_validator("endpoint", mode="before")
    @classmethod
    def _strip_endpoint(cls, value: Any) -> str:
        return normalize_endpoint(value)

    @field_validator("bot", mode="before")
    @classmethod
    def _known_bot(cls, value: Any) -> str:
        return coerce_bot(value)

    @field_validator("limit", mode="before")
    @classmethod
    def _bounded_limit(cls, value: Any) -> int:
        return coerce_limit(value)

    @classmethod
    def from_settings(cls, settings: Settings) -> AcquisitionConfig:
        """Build a config from application settings."""
        return cls(
            endpoint=settings.endpoint,
            bot=settings.bot,
            limit=settings.limit,
            route_mode=RouteMode(settings.route_mode),
            transport=TransportMode(settings.transport),
            cache_enabled=settings.cache_enabled,
            timeout=settings.timeout,
        )


# =============================================================================
# Records
# =============================================================================


class Metrics(BaseModel):
    """Per-day numeric metrics. Unbounded here; clamped by the generator."""

    model_config = ConfigDict(frozen=True)

    score: float = 0.0
    entries: float = 0.0
    level: float = 0.0


class DayRecord(BaseModel):
    """One canonical day of the export."""

    model_config = ConfigDict(frozen=True)

    identity_key: str
    primary_color: str
    secondary_color: str
    metrics: Metrics = Field(default_factory=Metrics)
    label: str = ""
    week_key: str | None = None


class ExportCacheEntry(BaseModel):
    """Last good payload for one acquisition configuration."""

    model_config = ConfigDict(populate_by_name=True)

    saved_at: str = Field(alias="savedAt")
    rows: Any = None
