"""Mount point that holds the current scene, and the clear-then-build swap."""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING

from garden_walk.errors import RenderPreconditionError
from garden_walk.garden.layout import Viewport

if TYPE_CHECKING:
    from garden_walk.garden.scene import SceneNode, SceneSpec

logger = logging.getLogger(__name__)

DEFAULT_VIEW_BOX = "0 0 1600 900"


class Mount:
    """Render target with a declared view box, like an ``<svg id="svgRoot">``."""

    def __init__(self, view_box: str = DEFAULT_VIEW_BOX, mount_id: str = "svgRoot") -> None:
        self.view_box = view_box
        self.mount_id = mount_id
        self.children: list[SceneNode] = []
        self.placeholder = False

    @property
    def viewport(self) -> Viewport:
        return Viewport.from_view_box(self.view_box)

    def clear(self) -> None:
        self.children.clear()
        self.placeholder = False

    def node_count(self) -> int:
        return sum(1 for child in self.children for _ in child.walk())


def require_mount(mount: Mount | None) -> Mount:
    if mount is None:
        msg = "No mount point to render into"
        raise RenderPreconditionError(msg)
    return mount


def render(scene: SceneSpec, mount: Mount | None) -> bool:
    """Replace the mount's content with ``scene``.

    Any previous tree is discarded first. The mount gets its own copy of the
    layers, so later changes to ``scene`` don't leak into what is displayed.

    Returns:
        True if rendered, False if there was no mount (logged, not raised).
    """
    try:
        target = require_mount(mount)
    except RenderPreconditionError as exc:
        logger.warning("Render skipped: %s", exc)
        return False

    target.clear()
    target.children.extend(copy.deepcopy(scene.layers))
    target.placeholder = scene.placeholder
    return True
