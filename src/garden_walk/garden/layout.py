"""Deterministic wrapping-grid layout of flower anchors.

Row 0 is the front row at the bottom of the planting band; later rows step
up (and back) toward the horizon. Columns are spread across the viewport
between fixed side margins.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass

#: Reference canvas the scene constants were tuned on.
REFERENCE_WIDTH = 1600.0
REFERENCE_HEIGHT = 900.0

DEFAULT_COLUMNS = 10
PLACEHOLDER_SLOTS = 10

MARGIN_FRACTION = 140 / REFERENCE_WIDTH  # each side
BAND_TOP_FRACTION = 0.64
BAND_BOTTOM_FRACTION = 0.90
BACK_ROW_SHRINK = 0.4  # back row drawn at 60% size


@dataclass(frozen=True)
class Viewport:
    """Drawing area size, fixed for one render pass."""

    width: float
    height: float

    @classmethod
    def from_view_box(cls, view_box: str) -> Viewport:
        """Parse an SVG ``viewBox`` (``"min-x min-y width height"``)."""
        parts = [p for p in re.split(r"[\s,]+", view_box.strip()) if p]
        if len(parts) != 4:
            msg = f"viewBox needs 4 numbers, got {view_box!r}"
            raise ValueError(msg)
        width, height = float(parts[2]), float(parts[3])
        if not (width > 0 and height > 0):
            msg = f"viewBox must have a positive size, got {view_box!r}"
            raise ValueError(msg)
        return cls(width=width, height=height)

    @property
    def scale(self) -> float:
        """Size factor relative to the reference canvas."""
        return min(self.width / REFERENCE_WIDTH, self.height / REFERENCE_HEIGHT)

    @property
    def view_box(self) -> str:
        return f"0 0 {self.width:g} {self.height:g}"


@dataclass(frozen=True)
class Position:
    """Anchor (stem base) of one flower."""

    x: float
    y: float
    row: int
    col: int


def row_count(n: int, columns: int = DEFAULT_COLUMNS) -> int:
    """Number of grid rows ``layout`` produces for ``n`` records."""
    count = n if n > 0 else PLACEHOLDER_SLOTS
    return math.ceil(count / columns)


def layout(n: int, viewport: Viewport, columns: int = DEFAULT_COLUMNS) -> list[Position]:
    """
    Assign grid anchors to ``n`` records.

    ``n <= 0`` yields the placeholder grid of ``PLACEHOLDER_SLOTS`` anchors.

    Args:
        n: Number of records.
        viewport: Drawing area.
        columns: Grid width; 1 pins every anchor to the horizontal center.

    Returns:
        One ``Position`` per slot, in record order.
    """
    if columns < 1:
        msg = f"columns must be >= 1, got {columns}"
        raise ValueError(msg)

    count = n if n > 0 else PLACEHOLDER_SLOTS
    rows = row_count(n, columns)

    margin = viewport.width * MARGIN_FRACTION
    x_step = (viewport.width - 2 * margin) / (columns - 1) if columns > 1 else 0.0

    band_top = viewport.height * BAND_TOP_FRACTION
    band_bottom = viewport.height * BAND_BOTTOM_FRACTION
    y_step = (band_bottom - band_top) / (rows - 1) if rows > 1 else 0.0

    positions: list[Position] = []
    for index in range(count):
        col = index % columns
        row = index // columns
        x = margin + col * x_step if columns > 1 else viewport.width / 2
        positions.append(Position(x=x, y=band_bottom - row * y_step, row=row, col=col))
    return positions


def depth_scale(row: int, rows: int) -> float:
    """Perspective shrink for ``row`` out of ``rows`` (front row is 1.0)."""
    if rows <= 1:
        return 1.0
    return 1.0 - BACK_ROW_SHRINK * row / (rows - 1)
