"""Garden Walk - a procedural SVG garden drawn from a daily-log export.

Architecture::

    datasources/   Export acquisition (URL building, direct/JSONP transports,
                   write-through cache, row normalization)
    store.py       Tiered JSON store with TTL envelopes (cache -> derived)
    garden/        Pure scene pipeline (seeding, colors, layout, flower
                   geometry, layer composition)
    renderers/     Mount swap and scene -> SVG/HTML strings
    context.py     GardenContext: config, cache, mount and reload generations
    flows/         Prefect orchestration (fetch checks freshness, build renders site)
    services/      Shared utilities (HTTP client with retry)

Data flow: export -> store (cache) -> normalize -> layout -> compose -> mount -> derived/site/
"""

__version__ = "0.1.0"

from garden_walk.config import Settings
from garden_walk.schemas import AcquisitionConfig, DayRecord, Metrics

__all__ = ["AcquisitionConfig", "DayRecord", "Metrics", "Settings", "__version__"]
