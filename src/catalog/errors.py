"""Error types raised by the catalog engine."""

from typing import Optional


class CatalogError(Exception):
    """Base class for every failure surfaced by a site adapter."""

    pass


class FetchFailed(CatalogError):
    """Raised when the origin is unreachable or answers with a non-success status."""

    def __init__(self, url: str, reason: str = "", status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        message = f"Failed to fetch {url}"
        if status_code is not None:
            message += f" (HTTP {status_code})"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class MalformedDocument(CatalogError):
    """Raised when a structural element that must be present is missing."""

    pass


class DateParseFailed(CatalogError):
    """Raised internally when a date string does not match the site pattern.

    Never escapes the extractor; callers see a timestamp of 0 instead.
    """

    pass


class GenreFetchFailed(CatalogError):
    """Raised internally when the taxonomy page cannot be fetched or parsed.

    Absorbed by the genre cache; only observable as an empty genre list.
    """

    pass
