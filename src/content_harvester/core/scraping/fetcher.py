"""HTTP fetcher with retries, timeout and optional UA rotation.

Provides a small `Fetcher` object exposing `get` and `stream_get`. Redirects
(HTTP 3xx) are followed transparently, so `response.url` is the resolved
destination of the request.
"""

from __future__ import annotations

import random
import threading
from typing import Dict, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

DEFAULT_UA_POOL = [
    "Mozilla/5.0 (compatible; ContentHarvester/1.0; +https://example.org/bot)",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
]

# every failure `get`/`stream_get` can surface for an unreachable or malformed URL
FETCH_ERRORS = (requests.RequestException, ValueError)


class Fetcher:
    """Small HTTP client with sensible defaults for resolving links.

    Usage:
        with Fetcher(timeout=15, retries=3) as f:
            resp = f.stream_get(url)
    """

    def __init__(
        self,
        timeout: float = 15,
        retries: int = 3,
        backoff_factor: float = 0.3,
        ua_pool: Optional[list[str]] = None,
        max_redirects: int = 30,
    ) -> None:
        self.timeout = timeout
        self.max_redirects = max_redirects
        self.retry = Retry(
            total=retries,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset(["GET", "HEAD"]),
            backoff_factor=backoff_factor,
            # the final status is reported to the caller, not raised
            raise_on_status=False,
        )
        self.ua_pool = ua_pool or DEFAULT_UA_POOL
        # requests.Session is not thread-safe: one session per calling thread
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._lock = threading.Lock()

    def _new_session(self) -> requests.Session:
        session = requests.Session()
        session.max_redirects = self.max_redirects
        adapter = HTTPAdapter(max_retries=self.retry)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        return session

    @property
    def session(self) -> requests.Session:
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._new_session()
            self._local.session = session
            with self._lock:
                self._sessions.append(session)
        return session

    def _headers(self, headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        base = {"User-Agent": random.choice(self.ua_pool)}
        if headers:
            base.update(headers)
        return base

    def get(self, url: str, headers: Optional[Dict[str, str]] = None, **kwargs):
        return self.session.get(
            url, headers=self._headers(headers), timeout=self.timeout, **kwargs
        )

    def stream_get(self, url: str, headers: Optional[Dict[str, str]] = None, **kwargs):
        # Streamed GET: the body stays on the wire until read or downloaded
        return self.session.get(
            url,
            headers=self._headers(headers),
            timeout=self.timeout,
            stream=True,
            allow_redirects=True,
            **kwargs,
        )

    def close(self) -> None:
        with self._lock:
            sessions, self._sessions = self._sessions, []
            self._local = threading.local()
        for session in sessions:
            session.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
