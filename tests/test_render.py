"""Tests for the mount swap and the SVG/HTML renderers."""

from __future__ import annotations

import logging
from xml.etree import ElementTree

import pytest

from garden_walk.errors import RenderPreconditionError
from garden_walk.garden.compose import ComposeOptions, compose
from garden_walk.garden.layout import Viewport, layout
from garden_walk.garden.scene import SceneSpec, node
from garden_walk.renderers.mount import Mount, render, require_mount
from garden_walk.renderers.svg import build_garden_page_html, build_garden_svg
from garden_walk.schemas import DayRecord

VIEWPORT = Viewport(1600, 900)
SVG_NS = "{http://www.w3.org/2000/svg}"


def _scene(n: int = 3) -> SceneSpec:
    records = [
        DayRecord(identity_key=f"d{i}", primary_color="#ff0000", secondary_color="#00ff00")
        for i in range(n)
    ]
    return compose(records, layout(n, VIEWPORT), VIEWPORT)


class TestMount:
    """Clear-then-build swap."""

    def test_render_fills_mount(self) -> None:
        mount = Mount()
        scene = _scene()
        assert render(scene, mount) is True
        assert mount.node_count() == scene.node_count()
        assert mount.placeholder is False

    def test_rerender_replaces_content(self) -> None:
        mount = Mount()
        render(_scene(3), mount)
        first = mount.node_count()
        render(_scene(3), mount)
        assert mount.node_count() == first
        render(_scene(12), mount)
        assert len(mount.children) == 5
        assert mount.node_count() > first

    def test_placeholder_flag(self) -> None:
        mount = Mount()
        render(compose([], [], VIEWPORT), mount)
        assert mount.placeholder is True

    def test_mount_holds_a_copy(self) -> None:
        mount = Mount()
        scene = _scene()
        render(scene, mount)
        scene.layers[0].add(node("circle"))
        assert mount.node_count() == scene.node_count() - 1

    def test_missing_mount_is_logged_not_raised(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            assert render(_scene(), None) is False
        assert "Render skipped" in caplog.text

    def test_require_mount(self) -> None:
        with pytest.raises(RenderPreconditionError):
            require_mount(None)

    def test_viewport_from_view_box(self) -> None:
        assert Mount("0 0 800 450").viewport == Viewport(800, 450)


class TestSvgRenderer:
    """Standalone SVG document."""

    def test_svg_is_well_formed(self) -> None:
        mount = Mount()
        render(_scene(), mount)
        svg = build_garden_svg(mount)
        root = ElementTree.fromstring(svg.encode("utf-8"))
        assert root.tag == f"{SVG_NS}svg"
        assert root.attrib["viewBox"] == "0 0 1600 900"
        assert root.attrib["id"] == "svgRoot"
        flowers = [el for el in root.iter() if el.attrib.get("data-part") == "flower"]
        assert len(flowers) == 3

    def test_empty_mount(self) -> None:
        svg = build_garden_svg(Mount())
        root = ElementTree.fromstring(svg.encode("utf-8"))
        assert list(root) == []


class TestPageRenderer:
    """HTML page with inline SVG and status block."""

    def test_page_contents(self) -> None:
        mount = Mount()
        render(compose([], [], VIEWPORT), mount)
        html = build_garden_page_html(
            mount,
            ["LifeLog Garden Walk", "Fetch: FAILED (timeout: <slow>)"],
            generated_at="2026-01-01 00:00 UTC",
        )
        assert "<title>Garden Walk</title>" in html
        assert 'id="svgRoot"' in html
        assert 'class="status placeholder"' in html
        assert "Fetch: FAILED (timeout: &lt;slow&gt;)" in html
        assert "Generated 2026-01-01 00:00 UTC" in html

    def test_labels_escaped(self) -> None:
        records = [
            DayRecord(
                identity_key="d", primary_color="#ff0000", secondary_color="#00ff00", label="<b&>"
            )
        ]
        scene = compose(records, layout(1, VIEWPORT), VIEWPORT, ComposeOptions(show_labels=True))
        mount = Mount()
        render(scene, mount)
        html = build_garden_page_html(mount, [])
        assert "&lt;b&amp;&gt;" in html
        assert "<b&>" not in html
