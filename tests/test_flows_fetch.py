"""
Tests for the fetch flow module.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import Mock, patch

from garden_walk.config import Settings
from garden_walk.datasources.export import ExportCache
from garden_walk.flows import fetch
from garden_walk.schemas import AcquisitionConfig
from garden_walk.store import DataStore

if TYPE_CHECKING:
    from pathlib import Path

    import pytest

ENDPOINT = "https://script.example.com/macros/s/abc/exec"
PAYLOAD_TEXT = '{"ok": true, "rows": [{"DateKey": "2024-03-01"}, {"DateKey": "2024-03-02"}]}'


def _response(text: str, status: int = 200) -> Mock:
    resp = Mock()
    resp.ok = status < 400
    resp.status_code = status
    resp.encoding = "utf-8"
    resp.iter_content.return_value = [text.encode()]
    return resp


class TestFetchExport:
    """Test the fetch-export task."""

    @patch("garden_walk.datasources.export.transports.session.get")
    def test_success(
        self, mock_get: Mock, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Successful fetch reports row count and writes the cache."""
        ds = DataStore(tmp_path)
        monkeypatch.setattr(fetch, "store", ds)
        mock_get.return_value = _response(PAYLOAD_TEXT)
        config = AcquisitionConfig(endpoint=ENDPOINT)

        summary = fetch.fetch_export(config)

        assert summary["ok"] is True
        assert summary["stale"] is False
        assert summary["rows"] == 2
        assert summary["error"] is None
        assert "r=api_garden_export" in summary["url"]
        assert ExportCache(ds).read(config) is not None

    @patch("garden_walk.datasources.export.transports.session.get")
    def test_failure_without_cache(
        self, mock_get: Mock, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """HTTP error with nothing cached is reported, not raised."""
        monkeypatch.setattr(fetch, "store", DataStore(tmp_path))
        mock_get.return_value = _response("Service unavailable", status=503)

        summary = fetch.fetch_export(AcquisitionConfig(endpoint=ENDPOINT))

        assert summary["ok"] is False
        assert "http-status:503" in summary["error"]

    @patch("garden_walk.datasources.export.transports.session.get")
    def test_failure_uses_cache(
        self, mock_get: Mock, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A failed fetch falls back to the cached export."""
        ds = DataStore(tmp_path)
        monkeypatch.setattr(fetch, "store", ds)
        config = AcquisitionConfig(endpoint=ENDPOINT)
        ExportCache(ds).write(config, {"rows": [{"DateKey": "cached"}]})
        mock_get.return_value = _response("<html>Sign in</html>")

        summary = fetch.fetch_export(config)

        assert summary["ok"] is True
        assert summary["stale"] is True
        assert summary["rows"] == 1
        assert "parse-error" in summary["error"]


class TestFetchAllFlow:
    """Test the main fetch flow."""

    def test_no_endpoint(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Flow stops early without an endpoint."""
        monkeypatch.setattr(fetch, "store", DataStore(tmp_path))
        with patch("garden_walk.flows.fetch.get_settings", return_value=Settings(endpoint="")):
            result = fetch.fetch_all()
        assert result == {"ok": False, "error": "endpoint missing"}

    @patch("garden_walk.datasources.export.transports.session.get")
    def test_fetch_all(
        self, mock_get: Mock, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Flow fetches and writes the cache entry."""
        monkeypatch.setattr(fetch, "store", DataStore(tmp_path))
        mock_get.return_value = _response(PAYLOAD_TEXT)
        settings = Settings(endpoint=ENDPOINT, bot="alfred", limit=10)

        with patch("garden_walk.flows.fetch.get_settings", return_value=settings):
            result = fetch.fetch_all()

        assert result["ok"] is True
        assert result["rows"] == 2
        requested = mock_get.call_args.args[0]
        assert "bot=alfred" in requested
        assert "limit=10" in requested
        assert list((tmp_path / "cache" / "export").glob("alfred-r-direct-*.json"))

    @patch("garden_walk.datasources.export.transports.session.get")
    def test_fresh_cache_skips_fetch(
        self, mock_get: Mock, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """A fresh cache entry short-circuits the network unless forced."""
        ds = DataStore(tmp_path)
        monkeypatch.setattr(fetch, "store", ds)
        settings = Settings(endpoint=ENDPOINT)
        ExportCache(ds).write(AcquisitionConfig.from_settings(settings), {"rows": [{}, {}, {}]})
        mock_get.return_value = _response(PAYLOAD_TEXT)

        with patch("garden_walk.flows.fetch.get_settings", return_value=settings):
            skipped = fetch.fetch_all()
            forced = fetch.fetch_all(force=True)

        assert skipped == {"ok": True, "skipped": True, "rows": 3}
        assert forced["rows"] == 2
        mock_get.assert_called_once()
