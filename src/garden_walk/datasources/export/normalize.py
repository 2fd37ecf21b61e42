"""Coerce heterogeneous export payloads into canonical ``DayRecord`` rows.

The export has gone through several backend revisions, so the same logical
field shows up under different spellings (``DateKey``, ``dateKey``,
``date``...). Each logical field has an ordered alias list; the first
present, non-empty value wins.

``normalize`` never raises. A malformed row degrades to defaults instead of
being dropped, so record count and positional indices always match the
input collection.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any

from garden_walk.garden.theme import DEFAULT_THEME, Theme
from garden_walk.schemas import DayRecord, Metrics

logger = logging.getLogger(__name__)

#: Payload keys that may hold the row collection, in lookup order.
ROW_KEYS = ("rows", "days", "data")

IDENTITY_KEYS = ("DateKey", "dateKey", "date_key", "Date", "date", "Day", "day", "key", "id")
PRIMARY_KEYS = (
    "PrimaryColor",
    "primaryColor",
    "primary_color",
    "Primary",
    "primary",
    "color1",
    "c1",
    "color",
)
SECONDARY_KEYS = (
    "SecondaryColor",
    "secondaryColor",
    "secondary_color",
    "Secondary",
    "secondary",
    "color2",
    "c2",
    "accent",
)
SCORE_KEYS = ("DailyScore", "dailyScore", "daily_score", "Score", "score")
ENTRIES_KEYS = (
    "Entries",
    "entries",
    "EntryCount",
    "entryCount",
    "entry_count",
    "Count",
    "count",
    "n",
)
LEVEL_KEYS = ("Level", "level", "Lvl", "lvl", "Tier", "tier")
LABEL_KEYS = ("Label", "label", "Title", "title", "Name", "name")
WEEK_KEYS = ("WeekKey", "weekKey", "week_key", "Week", "week")

_HEX_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def extract_rows(raw: Any) -> list[Any] | None:
    """Find the row collection in a payload, or None if there isn't one."""
    if isinstance(raw, list):
        return raw
    if isinstance(raw, dict):
        for key in ROW_KEYS:
            value = raw.get(key)
            if isinstance(value, list):
                return value
    return None


def pick(row: dict[str, Any], keys: tuple[str, ...]) -> Any:
    """First present, non-empty value among ``keys``."""
    for key in keys:
        value = row.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def parse_color(value: Any) -> str | None:
    """Validate ``#RGB`` / ``#RRGGBB``; return lowercase ``#rrggbb`` or None."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not _HEX_RE.match(text):
        return None
    if len(text) == 4:
        text = "#" + "".join(ch * 2 for ch in text[1:])
    return text.lower()


def coerce_number(value: Any) -> float:
    """Parse to a finite float; anything else is 0."""
    if value is None:
        return 0.0
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError, OverflowError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def default_record(index: int, theme: Theme = DEFAULT_THEME) -> DayRecord:
    """All-default record occupying slot ``index``."""
    return DayRecord(
        identity_key=str(index),
        primary_color=theme.default_primary,
        secondary_color=theme.default_secondary,
    )


def normalize_row(row: Any, index: int, theme: Theme = DEFAULT_THEME) -> tuple[DayRecord, bool]:
    """Normalize one row.

    Returns:
        ``(record, degraded)`` where ``degraded`` is True when the row was not
        an object or carried an unusable color.
    """
    if not isinstance(row, dict):
        return default_record(index, theme), True

    raw_primary = pick(row, PRIMARY_KEYS)
    raw_secondary = pick(row, SECONDARY_KEYS)
    primary = parse_color(raw_primary)
    secondary = parse_color(raw_secondary)
    degraded = (raw_primary is not None and primary is None) or (
        raw_secondary is not None and secondary is None
    )

    identity = _text(pick(row, IDENTITY_KEYS)) or str(index)
    week = _text(pick(row, WEEK_KEYS)) or None

    record = DayRecord(
        identity_key=identity,
        primary_color=primary or theme.default_primary,
        secondary_color=secondary or theme.default_secondary,
        metrics=Metrics(
            score=coerce_number(pick(row, SCORE_KEYS)),
            entries=coerce_number(pick(row, ENTRIES_KEYS)),
            level=coerce_number(pick(row, LEVEL_KEYS)),
        ),
        label=_text(pick(row, LABEL_KEYS)),
        week_key=week,
    )
    return record, degraded


def normalize(raw: Any, theme: Theme = DEFAULT_THEME) -> list[DayRecord]:
    """Turn any JSON-compatible payload into an ordered list of day records.

    Unrecognized shapes (``None``, scalars, objects without a row collection)
    give an empty list.
    """
    rows = extract_rows(raw)
    if rows is None:
        return []

    records: list[DayRecord] = []
    degraded = 0
    for index, row in enumerate(rows):
        record, was_degraded = normalize_row(row, index, theme)
        records.append(record)
        degraded += was_degraded

    if degraded:
        logger.warning("Normalized %d rows; %d degraded to defaults", len(records), degraded)
    return records
