"""Garden SVG and page renderers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from garden_walk.renderers import render_template

if TYPE_CHECKING:
    from garden_walk.renderers.mount import Mount


def build_garden_svg(mount: Mount) -> str:
    """Serialize a mount's current scene as a standalone SVG document."""
    return render_template(
        "garden.svg.j2",
        view_box=mount.view_box,
        mount_id=mount.mount_id,
        nodes=mount.children,
    )


def build_garden_page_html(
    mount: Mount,
    status_lines: list[str],
    title: str = "Garden Walk",
    generated_at: str = "",
) -> str:
    """Full HTML page embedding the garden SVG and the status block."""
    return render_template(
        "base.html.j2",
        title=title,
        view_box=mount.view_box,
        mount_id=mount.mount_id,
        nodes=mount.children,
        placeholder=mount.placeholder,
        status="\n".join(status_lines),
        generated_at=generated_at,
    )
