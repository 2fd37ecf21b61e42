"""Assemble the full garden scene from records and their grid anchors.

Layer order, back to front:
  defs -> background (sky, far/near hills, ground, haze band)
  -> ground-cover (grass tufts) -> flowers -> foreground (vignette, summary)

Background and ground cover are seeded from fixed keys, so they are the same
on every render; with no records the placeholder grid is drawn instead.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from garden_walk.garden.flower import FlowerGeometry, Leaf, generate
from garden_walk.garden.layout import (
    DEFAULT_COLUMNS,
    PLACEHOLDER_SLOTS,
    Viewport,
    depth_scale,
    layout,
)
from garden_walk.garden.scene import SceneNode, SceneSpec, fmt, node
from garden_walk.garden.seeding import rng_for
from garden_walk.garden.theme import DEFAULT_CEILINGS, DEFAULT_THEME, MetricCeilings, Theme
from garden_walk.schemas import DayRecord

if TYPE_CHECKING:
    from collections.abc import Sequence

    from garden_walk.garden.layout import Position

HORIZON_FRACTION = 0.55
GROUND_FRACTION = 0.62
HILL_SEGMENTS = 16
GRASS_TUFTS = 140


@dataclass(frozen=True)
class ComposeOptions:
    """Knobs for one composition."""

    columns: int = DEFAULT_COLUMNS
    theme: Theme = field(default=DEFAULT_THEME)
    ceilings: MetricCeilings = field(default=DEFAULT_CEILINGS)
    show_labels: bool = False
    vignette: bool = True
    summary_label: str | None = None


def placeholder_records(theme: Theme = DEFAULT_THEME) -> list[DayRecord]:
    """Synthetic records for the data-independent placeholder scene."""
    return [
        DayRecord(
            identity_key=f"placeholder-{i}",
            primary_color=theme.default_primary,
            secondary_color=theme.default_secondary,
        )
        for i in range(PLACEHOLDER_SLOTS)
    ]


# =============================================================================
# Background
# =============================================================================


def _gradient(gid: str, stops: list[tuple[float, str, float]], **attrs: object) -> SceneNode:
    return node(
        "linearGradient",
        *(
            node("stop", offset=f"{offset:.0%}", stop_color=color, stop_opacity=opacity)
            for offset, color, opacity in stops
        ),
        id=gid,
        **attrs,
    )


def _defs(theme: Theme) -> SceneNode:
    return node(
        "defs",
        _gradient(
            "sky", [(0.0, theme.sky_top, 1.0), (1.0, theme.sky_bottom, 1.0)], x1=0, y1=0, x2=0, y2=1
        ),
        _gradient(
            "ground",
            [(0.0, theme.ground_top, 1.0), (1.0, theme.ground_bottom, 1.0)],
            x1=0,
            y1=0,
            x2=0,
            y2=1,
        ),
        _gradient(
            "haze",
            [(0.0, theme.haze, 0.0), (0.5, theme.haze, 0.35), (1.0, theme.haze, 0.0)],
            x1=0,
            y1=0,
            x2=0,
            y2=1,
        ),
        node(
            "radialGradient",
            node("stop", offset="60%", stop_color=theme.vignette, stop_opacity=0),
            node("stop", offset="100%", stop_color=theme.vignette, stop_opacity=0.55),
            id="vignette",
            cx="50%",
            cy="50%",
            r="75%",
        ),
        data_layer="defs",
    )


def _hill_path(key: str, viewport: Viewport, base_y: float, amplitude: float) -> str:
    rng = rng_for(key)
    step = viewport.width / HILL_SEGMENTS
    points = [(i * step, base_y + rng.jitter(amplitude)) for i in range(HILL_SEGMENTS + 1)]
    d = [f"M 0 {fmt(viewport.height)}"]
    d.extend(f"L {fmt(x)} {fmt(y)}" for x, y in points)
    d.append(f"L {fmt(viewport.width)} {fmt(viewport.height)} Z")
    return " ".join(d)


def _background(viewport: Viewport, theme: Theme) -> SceneNode:
    w, h = viewport.width, viewport.height
    horizon = h * HORIZON_FRACTION
    ground_y = h * GROUND_FRACTION
    return node(
        "g",
        node("rect", x=0, y=0, width=w, height=h, fill="url(#sky)", data_part="sky"),
        node(
            "path",
            d=_hill_path("hills:far", viewport, horizon, h * 0.05),
            fill=theme.hills_far,
            data_part="hills-far",
        ),
        node(
            "path",
            d=_hill_path("hills:near", viewport, horizon + h * 0.04, h * 0.035),
            fill=theme.hills_near,
            data_part="hills-near",
        ),
        node(
            "rect",
            x=0,
            y=ground_y,
            width=w,
            height=h - ground_y,
            fill="url(#ground)",
            data_part="ground",
        ),
        node("rect", x=0, y=h * 0.5, width=w, height=h * 0.16, fill="url(#haze)", data_part="haze"),
        data_layer="background",
    )


def _ground_cover(viewport: Viewport, theme: Theme) -> SceneNode:
    rng = rng_for("ground-cover")
    s = viewport.scale
    ground_y = viewport.height * GROUND_FRACTION
    layer = node("g", stroke=theme.grass, stroke_linecap="round", data_layer="ground-cover")
    for _ in range(GRASS_TUFTS):
        x = rng.uniform(0, viewport.width)
        y = rng.uniform(ground_y + 8 * s, viewport.height)
        height = s * rng.uniform(4, 14)
        lean = s * rng.jitter(4)
        layer.add(
            node(
                "line",
                x1=x,
                y1=y,
                x2=x + lean,
                y2=y - height,
                stroke_width=s * 1.2,
                stroke_opacity=rng.uniform(0.25, 0.6),
            )
        )
    return layer


# =============================================================================
# Flowers
# =============================================================================


def _leaf_path(leaf: Leaf) -> str:
    half = leaf.length / 2
    return (
        f"M 0 0 Q {fmt(leaf.width)} {fmt(-half)} 0 {fmt(-leaf.length)} "
        f"Q {fmt(-leaf.width)} {fmt(-half)} 0 0 Z"
    )


def flower_node(
    geometry: FlowerGeometry,
    position: Position,
    scale: float,
    label: str | None = None,
    label_color: str = DEFAULT_THEME.label,
) -> SceneNode:
    """Subtree for one flower, translated to its anchor."""
    stem = geometry.stem
    group = node(
        "g",
        transform=f"translate({fmt(position.x)} {fmt(position.y)}) scale({fmt(scale)})",
        data_part="flower",
        data_key=geometry.key,
        data_row=position.row,
        data_col=position.col,
    )
    group.add(
        node(
            "path",
            d=(
                f"M {fmt(stem.base[0])} {fmt(stem.base[1])} "
                f"C {fmt(stem.control1[0])} {fmt(stem.control1[1])} "
                f"{fmt(stem.control2[0])} {fmt(stem.control2[1])} "
                f"{fmt(stem.tip[0])} {fmt(stem.tip[1])}"
            ),
            fill="none",
            stroke=stem.color,
            stroke_width=stem.width,
            stroke_linecap="round",
            data_part="stem",
        )
    )
    for leaf in geometry.leaves:
        group.add(
            node(
                "path",
                d=_leaf_path(leaf),
                fill=leaf.color,
                transform=(
                    f"translate({fmt(leaf.base[0])} {fmt(leaf.base[1])}) "
                    f"rotate({fmt(leaf.angle)})"
                ),
                data_part="leaf",
            )
        )
    for bead in geometry.beads:
        group.add(
            node(
                "circle",
                cx=bead.center[0],
                cy=bead.center[1],
                r=bead.radius,
                fill=bead.color,
                data_part="bead",
            )
        )

    cx, cy = geometry.head_center
    head = group.add(node("g", transform=f"translate({fmt(cx)} {fmt(cy)})", data_part="head"))
    for index, ring in enumerate(geometry.rings):
        ring_group = head.add(node("g", fill=ring.color, data_part="ring", data_ring=index))
        for petal in ring.petals:
            ring_group.add(
                node(
                    "ellipse",
                    cx=0,
                    cy=-petal.length / 2,
                    rx=petal.width / 2,
                    ry=petal.length / 2,
                    transform=f"rotate({fmt(petal.angle)})",
                    data_part="petal",
                )
            )
    head.add(
        node(
            "circle",
            cx=0,
            cy=0,
            r=geometry.head_disk_radius,
            fill=geometry.head_disk_color,
            data_part="head-disk",
        )
    )
    head.add(
        node(
            "circle",
            cx=0,
            cy=0,
            r=geometry.disk_radius,
            fill=geometry.disk_color,
            data_part="disk",
        )
    )

    if label:
        group.add(
            node(
                "text",
                text=label,
                x=0,
                y=18,
                fill=label_color,
                text_anchor="middle",
                font_size=12,
                data_part="label",
            )
        )
    return group


def _foreground(viewport: Viewport, options: ComposeOptions) -> SceneNode:
    layer = node("g", data_layer="foreground")
    if options.vignette:
        layer.add(
            node(
                "rect",
                x=0,
                y=0,
                width=viewport.width,
                height=viewport.height,
                fill="url(#vignette)",
                pointer_events="none",
                data_part="vignette",
            )
        )
    if options.summary_label:
        layer.add(
            node(
                "text",
                text=options.summary_label,
                x=24 * viewport.scale,
                y=viewport.height - 24 * viewport.scale,
                fill=options.theme.label,
                font_size=16 * viewport.scale,
                data_part="summary",
            )
        )
    return layer


def compose(
    records: Sequence[DayRecord],
    positions: Sequence[Position],
    viewport: Viewport,
    options: ComposeOptions | None = None,
) -> SceneSpec:
    """
    Build the complete scene for ``records`` anchored at ``positions``.

    With no records the placeholder grid is composed from synthetic default
    records, so a scene is always produced.

    Raises:
        ValueError: ``records`` and ``positions`` differ in length.
    """
    options = options or ComposeOptions()
    theme = options.theme
    placeholder = not records
    if placeholder:
        records = placeholder_records(theme)
        positions = layout(0, viewport, options.columns)
    if len(records) != len(positions):
        msg = f"{len(records)} records but {len(positions)} positions"
        raise ValueError(msg)

    rows = max(p.row for p in positions) + 1
    flowers = node("g", data_layer="flowers")
    # Back rows first so nearer flowers overlap them.
    order = sorted(range(len(records)), key=lambda i: (-positions[i].row, positions[i].col))
    for i in order:
        record, position = records[i], positions[i]
        geometry = generate(record, position, viewport, theme, options.ceilings)
        label = geometry.label if options.show_labels and not placeholder else None
        scale = depth_scale(position.row, rows)
        flowers.add(flower_node(geometry, position, scale, label, theme.label))

    return SceneSpec(
        viewport=viewport,
        layers=[
            _defs(theme),
            _background(viewport, theme),
            _ground_cover(viewport, theme),
            flowers,
            _foreground(viewport, options),
        ],
        placeholder=placeholder,
    )
