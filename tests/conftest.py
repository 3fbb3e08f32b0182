from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from issue_publisher.logging_config import LOGGER_NAME

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 32

_ROUTES: dict[str, tuple[int, dict[str, str], bytes]] = {
    "/pic.png": (200, {"Content-Type": "image/png"}, PNG_BYTES),
    "/photo.jpeg": (200, {"Content-Type": "image/jpeg"}, JPEG_BYTES),
    "/no-extension": (200, {"Content-Type": "image/png"}, PNG_BYTES),
    "/page.png": (200, {"Content-Type": "text/html; charset=utf-8"}, b"<html></html>"),
    "/hop-a.png": (302, {"Location": "/hop-b"}, b""),
    "/hop-b": (301, {"Location": "final/hop-c.jpeg"}, b""),
    "/final/hop-c.jpeg": (200, {"Content-Type": "image/jpeg"}, JPEG_BYTES),
    "/loop.png": (302, {"Location": "/loop.png"}, b""),
    "/redirect-without-location.png": (302, {}, b""),
    "/to-local-file.png": (302, {"Location": "file:///etc/hostname"}, b""),
}


class _ImageHostHandler(BaseHTTPRequestHandler):
    def do_GET(self) -> None:  # noqa: N802
        path = self.path.split("?", 1)[0]
        status, headers, payload = _ROUTES.get(
            path,
            (404, {"Content-Type": "text/plain"}, b"not found"),
        )
        self.send_response(status)
        for name, value in headers.items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        _ = (format, args)


@pytest.fixture(scope="session")
def image_host() -> Iterator[str]:
    server = ThreadingHTTPServer(("127.0.0.1", 0), _ImageHostHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    host, port = server.server_address[:2]
    try:
        yield f"http://{host}:{port}"
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:  # pyright: ignore[reportUnusedFunction]
    for name in ("http_proxy", "HTTP_PROXY", "https_proxy", "HTTPS_PROXY", "all_proxy", "ALL_PROXY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("no_proxy", "127.0.0.1,localhost")
    monkeypatch.delenv("GITHUB_EVENT_PATH", raising=False)
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
