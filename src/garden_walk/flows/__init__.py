"""
Prefect flows for the garden pipeline.

Flows:
- fetch: Download the export (cache fallback, skip when fresh)
- build: Render the cached export into derived/site/ (SVG + HTML page)

Usage (local):
    python -m garden_walk.flows.fetch
    python -m garden_walk.flows.build

Usage (Prefect):
    prefect server start  # Optional, for dashboard
    prefect deployment run 'fetch-export/default'
"""
