"""Retry-bounded, failure-sticky cache for a site's genre taxonomy."""

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Callable

from .errors import GenreFetchFailed
from .models import Genre

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3


@dataclass
class GenreCacheState:
    genres: list[Genre] = field(default_factory=list)
    attempts: int = 0
    last_attempt_failed: bool = False


class GenreCache:
    """Holds the last fetched genre list and refreshes it a bounded number of times.

    A refresh is attempted while the cache is empty or the previous attempt
    failed, up to ``max_attempts`` attempts in total. Once the ceiling is hit with
    nothing cached, the cache stays empty for the lifetime of its adapter. Fetch
    errors never escape; they only leave the genre list empty.
    """

    def __init__(self, fetch_genres: Callable[[], list[Genre]], max_attempts: int = MAX_ATTEMPTS):
        self._fetch_genres = fetch_genres
        self.max_attempts = max_attempts
        self._state = GenreCacheState()
        self._lock = threading.Lock()

    @property
    def genres(self) -> list[Genre]:
        return list(self._state.genres)

    @property
    def state(self) -> GenreCacheState:
        """A copy of the current state."""
        return replace(self._state, genres=list(self._state.genres))

    def _should_refresh(self) -> bool:
        state = self._state
        return state.attempts < self.max_attempts and (not state.genres or state.last_attempt_failed)

    def refresh_if_needed(self) -> list[Genre]:
        """Fetch the taxonomy if the guard allows it; return the cached genres."""
        with self._lock:
            if not self._should_refresh():
                return list(self._state.genres)

            try:
                genres = self._fetch()
            except GenreFetchFailed as e:
                self._state.last_attempt_failed = True
                self._state.genres = []
                self._state.attempts += 1
                logger.warning("Genre fetch failed (attempt %d/%d): %s",
                               self._state.attempts, self.max_attempts, e)
            else:
                self._state.last_attempt_failed = False
                self._state.genres = genres
                self._state.attempts += 1
                logger.debug("Fetched %d genres", len(genres))

            return list(self._state.genres)

    def _fetch(self) -> list[Genre]:
        try:
            return list(self._fetch_genres())
        except Exception as e:
            raise GenreFetchFailed(str(e)) from e
