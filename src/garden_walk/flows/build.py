"""
Prefect flow for building the static garden page from the cached export.

Renders whatever the export cache holds (or the placeholder garden when it
holds nothing) into an SVG document and an HTML page. With ``live=True`` the
export is fetched first, which is how the site is built when the cache is
disabled.

Run locally:
    python -m garden_walk.flows.build
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from prefect import flow, task

from garden_walk.config import get_settings
from garden_walk.context import GardenContext
from garden_walk.renderers.svg import build_garden_page_html, build_garden_svg
from garden_walk.store import DataStore

# Store and output paths
store = DataStore(get_settings().data_dir)
SITE_PATH = Path("derived/site")
INDEX_PATH = SITE_PATH / "index.html"
SVG_PATH = SITE_PATH / "garden.svg"


# =============================================================================
# Build tasks
# =============================================================================


@task(name="load-garden")
def load_garden(live: bool = False) -> GardenContext:
    """Restore the garden from the export cache, or fetch it when ``live``."""
    context = GardenContext.from_settings(get_settings(), store=store)
    if live:
        context.reload()
    else:
        context.restore_cached()
    return context


@task(name="build-pages")
def build_pages(context: GardenContext) -> dict[str, str]:
    """Serialize the mounted scene as SVG and as a full HTML page."""
    generated_at = datetime.now(UTC).strftime("%Y-%m-%d %H:%M UTC")
    mount = context.mount
    if mount is None:
        msg = "Garden context has no mount"
        raise ValueError(msg)
    return {
        "svg": build_garden_svg(mount),
        "html": build_garden_page_html(
            mount,
            context.status_lines(),
            generated_at=generated_at,
        ),
    }


@task(name="write-site")
def write_site(pages: dict[str, str]) -> Path:
    """Write the SVG and HTML into the site directory."""
    store.write_text(SVG_PATH, pages["svg"])
    return store.write_text(INDEX_PATH, pages["html"])


@flow(name="build-garden", log_prints=True)
def build_all(live: bool = False) -> dict[str, Any]:
    """
    Build the static garden page.

    Always produces output: with no cached export the placeholder garden is
    drawn and the status block says so.
    """
    print("Fetching export..." if live else "Loading cached export...")
    context = load_garden(live)

    result = context.last_result
    records = len(context.last_records)
    if result is None and live:
        reason = context.last_error or "endpoint missing"
        print(f"Warning: Export not loaded ({reason}). Building placeholder garden.")
    elif result is None:
        print("Warning: No cached export found. Building placeholder garden.")
    elif result.stale:
        print(f"Cached export saved at {result.saved_at}, {records} records")
    else:
        print(f"Export fetched, {records} records")

    print("Building pages...")
    pages = build_pages(context)

    print("Writing site...")
    output_path = write_site(pages)

    print(f"Site built: {output_path}")
    return {
        "pages": 1,
        "output": str(output_path),
        "records": records,
        "ok": result is not None,
        "placeholder": bool(context.mount and context.mount.placeholder),
    }


if __name__ == "__main__":
    result = build_all()
    print(f"Flow complete: {result}")
