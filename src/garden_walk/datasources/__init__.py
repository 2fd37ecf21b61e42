"""External data source integrations.

Each subdirectory is one data source with a consistent structure:

    datasources/{name}/
    ├── __init__.py       # Public API re-exports
    ├── client.py         # URLs, query parameters, cache keys
    └── {feature}.py      # Transports, caching, normalization, acquisition

The only source today is ``export/``: the daily-log export web app, fetched
either directly or as a JSONP script and normalized into ``DayRecord`` values.

Wiring into the pipeline (see ``flows/fetch.py``):
  - A ``@task`` calls the source's acquisition function
  - Results land in the store's ``cache`` tier with a ``valid_until``
  - ``fetch_all()`` skips the network while that entry is fresh
"""
