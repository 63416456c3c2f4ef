"""Shared test doubles: a fake HTTP response and a fetcher serving canned routes.

No test touches the network: resolvers and lookups receive a `DummyFetcher`
whose routes map a requested URL to a `DummyResponse` (or an exception).
"""

from __future__ import annotations

import pytest
import requests

PDF_BYTES = b"%PDF-1.4\n%\xe2\xe3\xcf\xd3\n1 0 obj\n<< /Type /Catalog >>\nendobj\n" + b"0" * 400
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR" + b"\x00" * 300


class DummyResponse:
    def __init__(
        self,
        url: str,
        status_code: int = 200,
        body: bytes | str = b"",
        content_type: str | None = "text/html; charset=utf-8",
        fail_after: int | None = None,
    ):
        self.url = url
        self.status_code = status_code
        self.headers = {"Content-Type": content_type} if content_type is not None else {}
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        self.fail_after = fail_after
        self.closed = False

    @property
    def content(self) -> bytes:
        return self._body

    @property
    def text(self) -> str:
        return self._body.decode("utf-8", errors="replace")

    def iter_content(self, chunk_size: int = 1):
        sent = 0
        for i in range(0, len(self._body), chunk_size):
            if self.fail_after is not None and sent >= self.fail_after:
                raise requests.exceptions.ChunkedEncodingError("connection broken")
            chunk = self._body[i : i + chunk_size]
            sent += len(chunk)
            yield chunk

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error for {self.url}")

    def close(self) -> None:
        self.closed = True


class DummyFetcher:
    def __init__(self, routes: dict | None = None):
        self.routes = dict(routes or {})
        self.calls: list[str] = []
        self.closed = 0

    def stream_get(self, url: str, headers=None, **kwargs):
        self.calls.append(url)
        route = self.routes.get(url)
        if route is None:
            raise requests.ConnectionError(f"cannot resolve {url}")
        if isinstance(route, Exception):
            raise route
        return route

    get = stream_get

    def close(self) -> None:
        self.closed += 1

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


@pytest.fixture
def dummy_response():
    return DummyResponse


@pytest.fixture
def make_fetcher():
    return DummyFetcher


@pytest.fixture
def pdf_bytes():
    return PDF_BYTES


@pytest.fixture
def png_bytes():
    return PNG_BYTES
