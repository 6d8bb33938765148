"""HTTP transport boundary and HTML parsing for the catalog engine.

The engine only needs ``execute(request) -> response``; ``HttpFetcher`` is the
default implementation on top of ``requests`` and ``RateLimitedFetcher``
decorates any fetcher with a per-period request ceiling.
"""

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

import requests
from bs4 import BeautifulSoup

from .errors import FetchFailed

logger = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/120.0.0.0 Safari/537.36"
)


@dataclass
class Request:
    """An outbound HTTP request built by the query builder."""

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None


@dataclass
class Response:
    """Status and raw body of a completed request."""

    status_code: int
    body: bytes
    url: str


class Fetcher(Protocol):
    def execute(self, request: Request) -> Response:
        """Run the request; raise FetchFailed on any transport or status failure."""
        ...


class HttpFetcher:
    """Fetcher backed by a shared ``requests.Session``."""

    def __init__(self, headers: Optional[dict[str, str]] = None, timeout: float = 30,
                 session: Optional[requests.Session] = None):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": USER_AGENT})
        if headers:
            self.session.headers.update(headers)

    def execute(self, request: Request) -> Response:
        logger.debug("%s %s", request.method, request.url)
        try:
            response = self.session.request(
                request.method,
                request.url,
                headers=request.headers or None,
                data=request.body,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise FetchFailed(request.url, str(e), status_code=status) from e
        except requests.RequestException as e:
            raise FetchFailed(request.url, str(e)) from e

        return Response(status_code=response.status_code, body=response.content, url=response.url)


class RateLimitedFetcher:
    """Allow at most ``permits`` requests per ``period`` seconds through ``inner``.

    Callers over the limit block until the oldest request leaves the window.
    """

    def __init__(self, inner: Fetcher, permits: int = 2, period: float = 1.0,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        if permits <= 0:
            raise ValueError("permits must be positive")
        self.inner = inner
        self.permits = permits
        self.period = period
        self._clock = clock
        self._sleep = sleep
        self._sent = deque()
        self._lock = threading.Lock()

    def _acquire(self) -> None:
        with self._lock:
            now = self._clock()
            while self._sent and now - self._sent[0] >= self.period:
                self._sent.popleft()

            if len(self._sent) >= self.permits:
                wait_time = self.period - (now - self._sent[0])
                if wait_time > 0:
                    logger.debug("Rate limit (%d/%ss) reached. Waiting %.3f seconds.",
                                 self.permits, self.period, wait_time)
                    self._sleep(wait_time)
                self._sent.popleft()
                now = self._clock()

            self._sent.append(now)

    def execute(self, request: Request) -> Response:
        self._acquire()
        return self.inner.execute(request)


def parse_document(body: bytes) -> BeautifulSoup:
    """Parse an HTML page or load-more fragment."""
    return BeautifulSoup(body, "html.parser")
