"""Rendering: scene -> mount -> SVG/HTML strings.

All string renderers follow the same pattern:
  - Input: a ``Mount`` holding the current scene tree
  - Output: str (standalone SVG document or full HTML page)
  - No side effects, no I/O, no Prefect decorators

Used by flows/build.py which orchestrates the rendering pipeline.

Public API:
  - mount: Mount, render, require_mount (clear-then-build swap)
  - svg: build_garden_svg, build_garden_page_html

Templates live in ``templates/``; ``_scene.svg.j2`` holds the recursive
node serializer shared by the SVG document and the HTML page.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import jinja2

# Shared Jinja2 environment for all renderers
_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
_jinja_env = jinja2.Environment(
    loader=jinja2.FileSystemLoader(str(_TEMPLATE_DIR)),
    autoescape=True,
)


def render_template(template_name: str, **kwargs: Any) -> str:
    """Render a Jinja2 template by name."""
    return _jinja_env.get_template(template_name).render(**kwargs)
