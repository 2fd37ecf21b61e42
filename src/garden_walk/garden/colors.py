"""Hex color parsing and RGB interpolation."""

from __future__ import annotations

WHITE = "#ffffff"


def hex_to_rgb(color: str) -> tuple[int, int, int]:
    """Parse ``#rgb`` or ``#rrggbb`` into an (r, g, b) tuple."""
    text = color.strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        msg = f"Not a hex color: {color!r}"
        raise ValueError(msg)
    return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16)


def rgb_to_hex(rgb: tuple[int, int, int]) -> str:
    r, g, b = (max(0, min(255, c)) for c in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def mix(a: str, b: str, t: float) -> str:
    """Linear interpolation from ``a`` (t=0) to ``b`` (t=1) in RGB space.

    ``t`` is clamped to [0, 1]; the endpoints return the inputs exactly
    (as lowercase ``#rrggbb``).
    """
    t = max(0.0, min(1.0, t))
    ra, ga, ba = hex_to_rgb(a)
    rb, gb, bb = hex_to_rgb(b)
    return rgb_to_hex(
        (
            round(ra + (rb - ra) * t),
            round(ga + (gb - ga) * t),
            round(ba + (bb - ba) * t),
        )
    )


def lighten(color: str, t: float) -> str:
    """Blend ``color`` toward white by ``t``."""
    return mix(color, WHITE, t)
