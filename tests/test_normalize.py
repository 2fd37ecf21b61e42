"""Tests for export row normalization."""

from __future__ import annotations

import logging

import pytest

from garden_walk.datasources.export.normalize import (
    coerce_number,
    extract_rows,
    normalize,
    normalize_row,
    parse_color,
)
from garden_walk.garden.theme import DEFAULT_THEME


class TestExtractRows:
    """Locate the row collection."""

    def test_bare_list(self) -> None:
        assert extract_rows([1, 2]) == [1, 2]

    @pytest.mark.parametrize("key", ["rows", "days", "data"])
    def test_known_keys(self, key: str) -> None:
        assert extract_rows({key: [{"a": 1}]}) == [{"a": 1}]

    def test_lookup_order(self) -> None:
        assert extract_rows({"data": [3], "rows": [1], "days": [2]}) == [1]

    def test_non_list_value_skipped(self) -> None:
        assert extract_rows({"rows": "nope", "days": [2]}) == [2]

    @pytest.mark.parametrize("raw", [None, 42, "rows", {"ok": True}, {"rows": {}}])
    def test_unrecognized(self, raw: object) -> None:
        assert extract_rows(raw) is None


class TestParseColor:
    def test_six_digit(self) -> None:
        assert parse_color("#A1B2C3") == "#a1b2c3"

    def test_three_digit_expanded(self) -> None:
        assert parse_color(" #f0a ") == "#ff00aa"

    @pytest.mark.parametrize("value", ["red", "#12345", "123456", "#ggg", 0xFF0000, None])
    def test_invalid(self, value: object) -> None:
        assert parse_color(value) is None


class TestCoerceNumber:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [(3, 3.0), ("4.5", 4.5), (" 7 ", 7.0), ("x", 0.0), (None, 0.0), (float("inf"), 0.0)],
    )
    def test_values(self, value: object, expected: float) -> None:
        assert coerce_number(value) == expected


class TestNormalizeRow:
    """Alias lookup and defaults for a single row."""

    def test_pascal_case_row(self) -> None:
        record, degraded = normalize_row(
            {
                "DateKey": "2024-03-01",
                "PrimaryColor": "#FF0000",
                "SecondaryColor": "#00f",
                "DailyScore": "72",
                "Entries": 5,
                "Level": 2,
                "Label": "Fri",
                "WeekKey": "2024-W09",
            },
            0,
        )
        assert degraded is False
        assert record.identity_key == "2024-03-01"
        assert record.primary_color == "#ff0000"
        assert record.secondary_color == "#0000ff"
        assert record.metrics.score == 72.0
        assert record.metrics.entries == 5.0
        assert record.metrics.level == 2.0
        assert record.label == "Fri"
        assert record.week_key == "2024-W09"

    def test_camel_and_short_aliases(self) -> None:
        record, _ = normalize_row(
            {"dateKey": "d1", "color1": "#111111", "c2": "#222222", "score": 1, "count": 2},
            0,
        )
        assert record.identity_key == "d1"
        assert record.primary_color == "#111111"
        assert record.secondary_color == "#222222"
        assert record.metrics.entries == 2.0

    def test_blank_alias_skipped(self) -> None:
        record, _ = normalize_row({"DateKey": "  ", "date": "2024-01-02"}, 0)
        assert record.identity_key == "2024-01-02"

    def test_missing_identity_uses_index(self) -> None:
        record, degraded = normalize_row({"Score": 3}, 7)
        assert record.identity_key == "7"
        assert degraded is False

    def test_missing_colors_use_theme(self) -> None:
        record, degraded = normalize_row({"date": "x"}, 0)
        assert record.primary_color == DEFAULT_THEME.default_primary
        assert record.secondary_color == DEFAULT_THEME.default_secondary
        assert degraded is False

    def test_invalid_color_degrades(self) -> None:
        record, degraded = normalize_row({"date": "x", "PrimaryColor": "blue"}, 0)
        assert record.primary_color == DEFAULT_THEME.default_primary
        assert degraded is True

    def test_non_numeric_metrics_are_zero(self) -> None:
        record, _ = normalize_row({"Score": "lots", "Entries": None, "Level": []}, 0)
        assert record.metrics.score == 0.0
        assert record.metrics.entries == 0.0
        assert record.metrics.level == 0.0

    @pytest.mark.parametrize("row", [None, 5, "2024-01-01", ["a"]])
    def test_non_object_row(self, row: object) -> None:
        record, degraded = normalize_row(row, 3)
        assert record.identity_key == "3"
        assert degraded is True


class TestNormalize:
    """Whole-payload normalization."""

    def test_preserves_count_and_order(self) -> None:
        rows = [{"date": "a"}, None, {"date": "c"}]
        records = normalize({"rows": rows})
        assert [r.identity_key for r in records] == ["a", "1", "c"]

    @pytest.mark.parametrize("raw", [None, 0, "x", {"ok": True}])
    def test_unrecognized_payload_is_empty(self, raw: object) -> None:
        assert normalize(raw) == []

    def test_empty_rows(self) -> None:
        assert normalize({"rows": []}) == []

    def test_logs_degraded_rows(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="garden_walk.datasources.export.normalize"):
            normalize([{"PrimaryColor": "nope"}, {"date": "b"}])
        assert "1 degraded" in caplog.text
