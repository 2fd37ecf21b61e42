"""Procedural flower geometry.

``generate`` is pure: the identity key seeds a ``Mulberry32`` stream and the
record's metrics (as clamped boosts) scale every derived size, so the same
record always produces the same flower. Geometry is in flower-local
coordinates with the stem base at the origin and y pointing up the screen
(negative); the anchor is carried alongside for the composer.

Random draws happen in a fixed order. Adding a draw anywhere changes every
flower after that point, so new parameters go at the end.
"""

from __future__ import annotations

from dataclasses import dataclass

from garden_walk.garden.colors import lighten, mix
from garden_walk.garden.layout import Position, Viewport
from garden_walk.garden.seeding import Mulberry32, hash_key
from garden_walk.garden.theme import DEFAULT_CEILINGS, DEFAULT_THEME, MetricCeilings, Theme
from garden_walk.schemas import DayRecord, Metrics

Point = tuple[float, float]

# Sizes at the reference canvas (scaled by Viewport.scale)
STEM_MIN = 110.0
STEM_SCORE = 150.0
STEM_RANDOM = 40.0
STEM_SWAY = 36.0
STEM_CURL = 22.0

LEAF_MIN = 16.0
LEAF_LEVEL = 14.0
LEAF_RANDOM = 8.0

HEAD_MIN = 14.0
HEAD_SCORE = 16.0
HEAD_RANDOM = 4.0

MAX_BEADS = 6
MIN_PETALS = 4
MAX_LEAVES = 4


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


@dataclass(frozen=True)
class Boosts:
    """Metrics normalized by their ceilings and clamped to [0, 1]."""

    score: float
    entries: float
    level: float


def boosts(metrics: Metrics, ceilings: MetricCeilings = DEFAULT_CEILINGS) -> Boosts:
    def ratio(value: float, ceiling: float) -> float:
        return clamp01(value / ceiling) if ceiling > 0 else 0.0

    return Boosts(
        score=ratio(metrics.score, ceilings.score),
        entries=ratio(metrics.entries, ceilings.entries),
        level=ratio(metrics.level, ceilings.level),
    )


@dataclass(frozen=True)
class Stem:
    """Cubic Bezier from the base (origin) to the tip under the head."""

    base: Point
    control1: Point
    control2: Point
    tip: Point
    width: float
    color: str

    def point_at(self, t: float) -> Point:
        u = 1.0 - t
        a, b, c, d = u * u * u, 3 * u * u * t, 3 * u * t * t, t * t * t
        return (
            a * self.base[0] + b * self.control1[0] + c * self.control2[0] + d * self.tip[0],
            a * self.base[1] + b * self.control1[1] + c * self.control2[1] + d * self.tip[1],
        )


@dataclass(frozen=True)
class Leaf:
    base: Point
    angle: float  # degrees from vertical, signed by side
    length: float
    width: float
    side: int  # +1 right, -1 left
    color: str


@dataclass(frozen=True)
class Bead:
    center: Point
    radius: float
    color: str


@dataclass(frozen=True)
class Petal:
    angle: float  # degrees, 0 = straight up
    length: float
    width: float


@dataclass(frozen=True)
class PetalRing:
    radius: float
    color: str
    petals: tuple[Petal, ...]


@dataclass(frozen=True)
class FlowerGeometry:
    """Everything needed to draw one flower; no drawing calls."""

    key: str
    seed: int
    anchor: Point
    boosts: Boosts
    stem: Stem
    leaves: tuple[Leaf, ...]
    beads: tuple[Bead, ...]
    rings: tuple[PetalRing, ...]  # outermost first
    head_radius: float
    head_disk_radius: float
    head_disk_color: str
    disk_radius: float
    disk_color: str
    label: str

    @property
    def head_center(self) -> Point:
        return self.stem.tip


def flower_key(record: DayRecord, position: Position) -> str:
    """Seed key: the record identity, or the grid slot when it has none."""
    return record.identity_key or f"slot:{position.row}:{position.col}"


def _stem(rng: Mulberry32, b: Boosts, s: float, theme: Theme) -> Stem:
    length = s * (STEM_MIN + STEM_SCORE * b.score + STEM_RANDOM * rng())
    sway = s * rng.jitter(STEM_SWAY)
    control1 = (sway * 0.15 + s * rng.jitter(STEM_CURL), -length * 0.35)
    control2 = (sway * 0.85 + s * rng.jitter(STEM_CURL), -length * 0.70)
    return Stem(
        base=(0.0, 0.0),
        control1=control1,
        control2=control2,
        tip=(sway, -length),
        width=s * (2.5 + 1.5 * b.level),
        color=theme.stem,
    )


def _leaves(
    rng: Mulberry32, b: Boosts, s: float, stem: Stem, record: DayRecord, theme: Theme
) -> tuple[Leaf, ...]:
    count = 2 + min(MAX_LEAVES - 2, int(b.entries * 1.5 + rng()))
    side = 1 if rng() < 0.5 else -1
    leaves: list[Leaf] = []
    for i in range(count):
        t = 0.18 + 0.5 * (i + 0.5) / count + rng.jitter(0.04)
        length = s * (LEAF_MIN + LEAF_LEVEL * b.level + LEAF_RANDOM * rng())
        leaves.append(
            Leaf(
                base=stem.point_at(t),
                angle=side * (38.0 + 18.0 * rng()),
                length=length,
                width=length * (0.38 + 0.1 * rng()),
                side=side,
                color=mix(theme.leaf, record.secondary_color, 0.12 * rng()),
            )
        )
        side = -side
    return tuple(leaves)


def _beads(
    rng: Mulberry32, b: Boosts, s: float, stem: Stem, record: DayRecord, theme: Theme
) -> tuple[Bead, ...]:
    count = min(MAX_BEADS, int(b.entries * MAX_BEADS + 0.5))
    color = mix(theme.bead, record.secondary_color, 0.25)
    return tuple(
        Bead(
            center=stem.point_at(0.1 + 0.75 * (i + 0.5) / count),
            radius=s * (1.6 + 1.4 * rng()),
            color=color,
        )
        for i in range(count)
    )


def _rings(
    rng: Mulberry32, b: Boosts, head_radius: float, record: DayRecord, theme: Theme
) -> tuple[PetalRing, ...]:
    ring_count = 2 + min(1, int(b.level * 2))
    rings: list[PetalRing] = []
    for k in range(ring_count):
        radius = head_radius * (1.0 - 0.26 * k)
        count = max(MIN_PETALS, 6 + int(b.entries * 6) + int(rng() * 3) - k)
        step = 360.0 / count
        offset = rng() * step
        if k == 0:
            color = lighten(record.primary_color, theme.outer_lighten * b.score)
        else:
            blend = theme.inner_blend * k / (ring_count - 1)
            color = mix(record.primary_color, record.secondary_color, blend)
        petals: list[Petal] = []
        for i in range(count):
            length = radius * (0.85 + 0.3 * rng())
            petals.append(
                Petal(
                    angle=offset + step * i + rng.jitter(0.12 * step),
                    length=length,
                    width=length * (0.42 + 0.12 * rng()),
                )
            )
        rings.append(PetalRing(radius=radius, color=color, petals=tuple(petals)))
    return tuple(rings)


def generate(
    record: DayRecord,
    position: Position,
    viewport: Viewport,
    theme: Theme = DEFAULT_THEME,
    ceilings: MetricCeilings = DEFAULT_CEILINGS,
) -> FlowerGeometry:
    """
    Derive one flower's geometry from a record.

    Args:
        record: Normalized day record.
        position: Grid anchor from ``layout``.
        viewport: Drawing area; sets the overall size factor.
        theme: Palette and blend strengths.
        ceilings: Reference values for metric boosts.

    Returns:
        Flat geometry descriptor in flower-local coordinates.
    """
    key = flower_key(record, position)
    seed = hash_key(key)
    rng = Mulberry32(seed)
    b = boosts(record.metrics, ceilings)
    s = viewport.scale

    stem = _stem(rng, b, s, theme)
    leaves = _leaves(rng, b, s, stem, record, theme)
    beads = _beads(rng, b, s, stem, record, theme)

    head_radius = s * (HEAD_MIN + HEAD_SCORE * b.score + HEAD_RANDOM * rng())
    rings = _rings(rng, b, head_radius, record, theme)
    disk_radius = head_radius * (0.3 + 0.12 * b.level)

    return FlowerGeometry(
        key=key,
        seed=seed,
        anchor=(position.x, position.y),
        boosts=b,
        stem=stem,
        leaves=leaves,
        beads=beads,
        rings=rings,
        head_radius=head_radius,
        head_disk_radius=disk_radius * 1.45,
        head_disk_color=mix(record.primary_color, record.secondary_color, 0.5),
        disk_radius=disk_radius,
        disk_color=record.secondary_color,
        label=record.label or record.identity_key,
    )
