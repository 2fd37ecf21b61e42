"""Color theme and metric reference ceilings.

Both are plain frozen dataclasses so a caller can override a single knob
with ``dataclasses.replace(DEFAULT_THEME, default_primary="#ff88aa")``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Theme:
    """Palette for the scene plus the default record colors."""

    # Record defaults (used when a row's color is missing or invalid)
    default_primary: str = "#ffd05a"
    default_secondary: str = "#e0785a"

    # Background
    sky_top: str = "#0b1d3a"
    sky_bottom: str = "#5b7fa8"
    hills_far: str = "#2e4a5e"
    hills_near: str = "#1f3b35"
    ground_top: str = "#2f5d3a"
    ground_bottom: str = "#12261a"
    haze: str = "#cfe3f2"
    grass: str = "#5fae6e"

    # Plant parts
    stem: str = "#78dca0"
    leaf: str = "#4caf6a"
    bead: str = "#fff3c4"
    label: str = "#f4f1e8"
    vignette: str = "#000000"

    # Blend strengths
    outer_lighten: float = 0.35  # outer petals toward white, scaled by score boost
    inner_blend: float = 0.6  # innermost ring toward the secondary color


@dataclass(frozen=True)
class MetricCeilings:
    """Reference values at which a metric's boost saturates at 1.0."""

    score: float = 100.0
    entries: float = 20.0
    level: float = 10.0


DEFAULT_THEME = Theme()
DEFAULT_CEILINGS = MetricCeilings()
