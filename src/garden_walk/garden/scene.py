"""Retained scene tree of SVG-like drawable nodes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

    from garden_walk.garden.layout import Viewport


def fmt(value: float) -> str:
    """Compact fixed-precision number for attribute values."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text


@dataclass
class SceneNode:
    """One drawable primitive (or group) with attributes and children."""

    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[SceneNode] = field(default_factory=list)
    text: str | None = None

    def add(self, child: SceneNode) -> SceneNode:
        self.children.append(child)
        return child

    def walk(self) -> Iterator[SceneNode]:
        """Depth-first, parents before children."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find_all(self, part: str) -> list[SceneNode]:
        """All descendants (and self) tagged ``data-part=part``."""
        return [n for n in self.walk() if n.attrs.get("data-part") == part]


def node(tag: str, *children: SceneNode, text: str | None = None, **attrs: object) -> SceneNode:
    """Build a node.

    ``stroke_width=2`` becomes ``stroke-width="2"``; ``class_`` becomes ``class``.
    """
    rendered: dict[str, str] = {}
    for key, value in attrs.items():
        if value is None:
            continue
        name = key.rstrip("_").replace("_", "-")
        if isinstance(value, bool):
            rendered[name] = "true" if value else "false"
        elif isinstance(value, (int, float)):
            rendered[name] = fmt(value)
        else:
            rendered[name] = str(value)
    return SceneNode(tag=tag, attrs=rendered, children=list(children), text=text)


@dataclass
class SceneSpec:
    """Complete scene: ordered layers, back to front."""

    viewport: Viewport
    layers: list[SceneNode]
    placeholder: bool = False

    def walk(self) -> Iterator[SceneNode]:
        for layer in self.layers:
            yield from layer.walk()

    def node_count(self) -> int:
        return sum(1 for _ in self.walk())

    def layer(self, name: str) -> SceneNode:
        for layer in self.layers:
            if layer.attrs.get("data-layer") == name:
                return layer
        raise KeyError(name)

    def flowers(self) -> list[SceneNode]:
        return [n for n in self.walk() if n.attrs.get("data-part") == "flower"]
