import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest
import requests

from linkharvest import fetching
from linkharvest.config import settings
from linkharvest.errors import ApiError
from linkharvest.extractor import extract_links
from linkharvest.fetching import fetch_text
from linkharvest.metadata import fetch_meta
from linkharvest.rules import DomainRules

from conftest import FakeResponse

BODY = b"<title>Slow page</title>"


class TrickleHandler(BaseHTTPRequestHandler):
    """Answers at once but sends its body one byte every half second."""

    delay = 0.5

    def do_GET(self):
        self.send_response(200)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(BODY)))
        self.end_headers()
        try:
            for i in range(len(BODY)):
                self.wfile.write(BODY[i : i + 1])
                self.wfile.flush()
                time.sleep(self.delay)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, format, *args):
        pass


class FastHandler(TrickleHandler):
    delay = 0


def _serve(handler):
    server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    return server


@pytest.fixture
def slow_server():
    server = _serve(TrickleHandler)
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


@pytest.fixture
def fast_server():
    server = _serve(FastHandler)
    yield f"http://127.0.0.1:{server.server_address[1]}"
    server.shutdown()
    server.server_close()


class TestDeadline:
    def test_trickling_body_times_out(self, slow_server):
        started = time.monotonic()
        with pytest.raises(requests.Timeout):
            fetch_text(f"{slow_server}/page", headers={}, timeout=1)
        assert time.monotonic() - started < 2.5

    def test_meta_fetch_gives_up_on_trickling_body(self, slow_server):
        started = time.monotonic()
        assert fetch_meta(f"{slow_server}/product", timeout=1) is None
        assert time.monotonic() - started < 2.5

    def test_profile_fetch_on_trickling_body_is_extraction_failed(self, slow_server, monkeypatch):
        monkeypatch.setattr(settings, "profile_fetch_timeout", 1.0)
        rules = DomainRules(allowed_domains=("127.0.0.1",))

        started = time.monotonic()
        with pytest.raises(ApiError) as exc_info:
            extract_links(f"{slow_server}/creator", rules)

        assert exc_info.value.code == "extraction_failed"
        assert exc_info.value.status_code == 500
        assert time.monotonic() - started < 2.5

    def test_prompt_body_is_read_in_full(self, fast_server):
        assert fetch_text(f"{fast_server}/page", headers={}, timeout=5) == BODY.decode()


class TestBody:
    def test_body_is_capped(self, monkeypatch):
        monkeypatch.setattr(fetching.requests, "get", lambda *a, **kw: FakeResponse("x" * 100))
        assert fetch_text("https://shop.example.com/big", headers={}, timeout=5, max_bytes=10) == "x" * 10

    def test_decodes_with_response_encoding(self, monkeypatch):
        monkeypatch.setattr(fetching.requests, "get", lambda *a, **kw: FakeResponse("Café", encoding="latin-1"))
        assert fetch_text("https://shop.example.com/p", headers={}, timeout=5) == "Café"

    def test_unknown_encoding_falls_back_to_utf8(self, monkeypatch):
        resp = FakeResponse("Café")
        resp.encoding = "no-such-codec"
        monkeypatch.setattr(fetching.requests, "get", lambda *a, **kw: resp)
        assert fetch_text("https://shop.example.com/p", headers={}, timeout=5) == "Café"

    def test_streams_the_response(self, monkeypatch):
        calls = {}

        def fake_get(url, **kwargs):
            calls.update(kwargs)
            return FakeResponse("ok")

        monkeypatch.setattr(fetching.requests, "get", fake_get)
        fetch_text("https://shop.example.com/p", headers={"User-Agent": "x"}, timeout=3)
        assert calls["stream"] is True
        assert calls["timeout"] == 3
