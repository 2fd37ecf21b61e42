"""Tests for the direct and script (JSONP) export transports."""

from __future__ import annotations

import threading
import time
from collections.abc import Iterator
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from unittest.mock import MagicMock

import pytest
import requests

from garden_walk.datasources.export.transports import (
    CancelToken,
    DirectTransport,
    ScriptTransport,
    parse_json_body,
    transport_for,
    unwrap_jsonp,
    with_callback,
)
from garden_walk.errors import FormatError, TransportError
from garden_walk.schemas import TransportMode
from garden_walk.services.http import create_session

URL = "https://script.example.com/exec?bot=winston"


def _session(text: str = "", status: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.ok = 200 <= status < 400
    resp.status_code = status
    resp.encoding = "utf-8"
    resp.iter_content.return_value = [text.encode()]
    http = MagicMock()
    http.get.return_value = resp
    return http


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


class TestCancelToken:
    """Deadline and explicit cancellation."""

    def test_unbounded_token(self) -> None:
        token = CancelToken()
        assert token.cancelled is False
        assert token.remaining() is None
        token.raise_if_cancelled()

    def test_deadline_expires(self) -> None:
        clock = FakeClock()
        token = CancelToken(12, clock=clock)
        assert token.remaining() == 12
        clock.now += 12
        assert token.cancelled is True
        with pytest.raises(TransportError) as exc_info:
            token.raise_if_cancelled()
        assert exc_info.value.reason == "timeout"

    def test_cancel_reports_timeout(self) -> None:
        token = CancelToken(12)
        token.cancel()
        with pytest.raises(TransportError, match="cancelled") as exc_info:
            token.raise_if_cancelled()
        assert exc_info.value.reason == "timeout"


class TestParseJsonBody:
    """Two-pass JSON parsing."""

    def test_plain_json(self) -> None:
        assert parse_json_body('{"rows": []}') == {"rows": []}

    def test_byte_order_mark(self) -> None:
        assert parse_json_body('\ufeff{"rows": [1]}') == {"rows": [1]}

    def test_xssi_prefix(self) -> None:
        assert parse_json_body(')]}\'\n{"ok": true}') == {"ok": True}

    def test_garbage_raises_parse_error(self) -> None:
        with pytest.raises(FormatError) as exc_info:
            parse_json_body("<html>Sign in</html>")
        assert exc_info.value.reason == "parse-error"
        assert "<html>Sign in</html>" in str(exc_info.value)

    def test_long_body_truncated_in_message(self) -> None:
        with pytest.raises(FormatError) as exc_info:
            parse_json_body("x" * 2000)
        assert len(str(exc_info.value)) < 600


class TestDirectTransport:
    """Plain GET transport."""

    def test_returns_parsed_json(self) -> None:
        http = _session('{"rows": [{"DateKey": "2024-01-01"}]}')
        payload = DirectTransport(http).fetch(URL, CancelToken(12))
        assert payload == {"rows": [{"DateKey": "2024-01-01"}]}
        args, kwargs = http.get.call_args
        assert args == (URL,)
        assert kwargs["allow_redirects"] is True
        assert kwargs["stream"] is True
        connect, read = kwargs["timeout"]
        assert 0 < connect <= 12
        assert 0 < read <= 12

    def test_http_error_status(self) -> None:
        http = _session("Server exploded", status=500)
        with pytest.raises(TransportError) as exc_info:
            DirectTransport(http).fetch(URL, CancelToken(12))
        assert exc_info.value.reason == "http-status:500"
        assert "Server exploded" in exc_info.value.detail

    def test_non_json_body(self) -> None:
        http = _session("<!doctype html><p>login</p>")
        with pytest.raises(FormatError):
            DirectTransport(http).fetch(URL, CancelToken(12))

    def test_request_timeout(self) -> None:
        http = MagicMock()
        http.get.side_effect = requests.Timeout("read timed out")
        with pytest.raises(TransportError) as exc_info:
            DirectTransport(http).fetch(URL, CancelToken(12))
        assert exc_info.value.reason == "timeout"

    def test_connection_error(self) -> None:
        http = MagicMock()
        http.get.side_effect = requests.ConnectionError("refused")
        with pytest.raises(TransportError) as exc_info:
            DirectTransport(http).fetch(URL, CancelToken(12))
        assert exc_info.value.reason == "load-error"

    def test_cancelled_before_request(self) -> None:
        http = _session("{}")
        token = CancelToken(12)
        token.cancel()
        with pytest.raises(TransportError):
            DirectTransport(http).fetch(URL, token)
        http.get.assert_not_called()

    def test_deadline_checked_between_chunks(self) -> None:
        clock = FakeClock()
        token = CancelToken(12, clock=clock)

        def trickle(chunk_size: int) -> Iterator[bytes]:
            yield b'{"rows": '
            clock.now += 13
            yield b"[]}"

        http = _session()
        http.get.return_value.iter_content.side_effect = trickle
        with pytest.raises(TransportError) as exc_info:
            DirectTransport(http).fetch(URL, token)
        assert exc_info.value.reason == "timeout"
        http.get.return_value.close.assert_called()


class _TrickleHandler(BaseHTTPRequestHandler):
    """Announces a large body, then sends it a few bytes at a time."""

    def do_GET(self) -> None:
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", "200")
        self.end_headers()
        try:
            for _ in range(40):
                self.wfile.write(b"     ")
                self.wfile.flush()
                time.sleep(0.2)
        except OSError:
            return

    def log_message(self, format: str, *args: object) -> None:
        pass


@pytest.fixture
def trickle_url() -> Iterator[str]:
    server = ThreadingHTTPServer(("127.0.0.1", 0), _TrickleHandler)
    server.daemon_threads = True
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address[:2]
    yield f"http://{host}:{port}/exec"
    server.shutdown()
    server.server_close()


class TestWallClockDeadline:
    """The token deadline bounds the whole request, not each socket read."""

    def test_trickling_body_times_out_on_deadline(self, trickle_url: str) -> None:
        http_session = create_session()
        http_session.trust_env = False
        started = time.monotonic()
        with pytest.raises(TransportError) as exc_info:
            DirectTransport(http_session).fetch(trickle_url, CancelToken(1.0))
        elapsed = time.monotonic() - started
        assert exc_info.value.reason == "timeout"
        assert elapsed < 1.8


class TestJsonp:
    """Callback naming and unwrapping."""

    def test_with_callback_keeps_params(self) -> None:
        url = with_callback(URL, "__gardenExport_abc")
        assert "bot=winston" in url
        assert "callback=__gardenExport_abc" in url

    def test_unwrap(self) -> None:
        assert unwrap_jsonp('cb({"rows": []});', "cb") == {"rows": []}

    def test_unwrap_with_guard_comment(self) -> None:
        assert unwrap_jsonp('/**/ cb({"ok": true})', "cb") == {"ok": True}

    def test_unwrap_wrong_callback(self) -> None:
        with pytest.raises(TransportError) as exc_info:
            unwrap_jsonp('other({"rows": []})', "cb")
        assert exc_info.value.reason == "load-error"

    def test_unwrap_not_a_call(self) -> None:
        with pytest.raises(TransportError) as exc_info:
            unwrap_jsonp('{"rows": []}', "cb")
        assert exc_info.value.reason == "load-error"


class TestScriptTransport:
    """JSONP transport end to end against a fake session."""

    def test_fetch_unwraps_callback(self) -> None:
        http = _session('__gardenExport_test({"rows": [1, 2]})')
        transport = ScriptTransport(http, callback_factory=lambda: "__gardenExport_test")
        assert transport.fetch(URL, CancelToken(12)) == {"rows": [1, 2]}
        requested = http.get.call_args.args[0]
        assert "callback=__gardenExport_test" in requested

    def test_callback_names_are_unique(self) -> None:
        http = _session("")
        transport = ScriptTransport(http)
        names = {transport.callback_factory() for _ in range(50)}
        assert len(names) == 50

    def test_error_status_is_load_error(self) -> None:
        http = _session("Not found", status=404)
        transport = ScriptTransport(http, callback_factory=lambda: "cb")
        with pytest.raises(TransportError) as exc_info:
            transport.fetch(URL, CancelToken(12))
        assert exc_info.value.reason == "load-error"


class TestTransportFor:
    def test_selects_variant(self) -> None:
        assert isinstance(transport_for(TransportMode.DIRECT), DirectTransport)
        assert isinstance(transport_for(TransportMode.SCRIPT), ScriptTransport)
