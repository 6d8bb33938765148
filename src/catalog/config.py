"""Per-site configuration: base URL, locale, date pattern, selectors and overrides."""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from .models import SeriesStatus
from .selectors import SelectorTable


class PaginationMode(str, Enum):
    STATIC_LIST = "static"
    AJAX_LOAD_MORE = "load_more"


class ChapterEndpoint(str, Enum):
    INLINE = "inline"  # chapters rendered in the series page
    AJAX = "ajax"  # POST <series-url>ajax/chapters/


DEFAULT_STATUS_MAP: Mapping[str, SeriesStatus] = MappingProxyType({
    "ongoing": SeriesStatus.ONGOING,
    "dropped": SeriesStatus.CANCELLED,
    "paused": SeriesStatus.ON_HIATUS,
    "completed": SeriesStatus.COMPLETED,
})

MADARA_STATUS_MAP: Mapping[str, SeriesStatus] = MappingProxyType({
    "ongoing": SeriesStatus.ONGOING,
    "on going": SeriesStatus.ONGOING,
    "updating": SeriesStatus.ONGOING,
    "en curso": SeriesStatus.ONGOING,
    "activo": SeriesStatus.ONGOING,
    "completed": SeriesStatus.COMPLETED,
    "completado": SeriesStatus.COMPLETED,
    "finalizado": SeriesStatus.COMPLETED,
    "canceled": SeriesStatus.CANCELLED,
    "cancelled": SeriesStatus.CANCELLED,
    "cancelado": SeriesStatus.CANCELLED,
    "dropped": SeriesStatus.CANCELLED,
    "on hold": SeriesStatus.ON_HIATUS,
    "hiatus": SeriesStatus.ON_HIATUS,
    "pausado": SeriesStatus.ON_HIATUS,
    "en espera": SeriesStatus.ON_HIATUS,
})


def default_listing_page_path(page: int) -> str:
    """Path suffix for page N of a paged WordPress archive."""
    return f"page/{page}/"


@dataclass(frozen=True)
class SiteOverrides:
    """Optional strategy functions replacing one step of the generic pipeline.

    Any field left as None falls back to the default behaviour.
    """

    listing_page_path: Optional[Callable[[int], str]] = None
    browse_request: Optional[Callable] = None  # (config, mode, page) -> Request
    parse_date: Optional[Callable[[str, "SiteConfig"], int]] = None
    parse_status: Optional[Callable[[Optional[str]], SeriesStatus]] = None


@dataclass(frozen=True)
class SiteConfig:
    """Immutable description of one site, built once and owned by its adapter."""

    name: str
    base_url: str
    language: str
    date_format: str
    selectors: SelectorTable
    pagination: PaginationMode = PaginationMode.STATIC_LIST
    manga_path: str = "manga"
    filter_non_manga_items: bool = True
    client_side_filtering: bool = True
    chapter_endpoint: ChapterEndpoint = ChapterEndpoint.INLINE
    rate_limit: int = 2
    rate_period: float = 1.0
    status_map: Mapping[str, SeriesStatus] = field(default_factory=lambda: DEFAULT_STATUS_MAP)
    overrides: SiteOverrides = field(default_factory=SiteOverrides)

    def __post_init__(self):
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @property
    def site_id(self) -> str:
        return "".join(ch for ch in self.name.lower() if ch.isalnum())

    def listing_page_path(self, page: int) -> str:
        strategy = self.overrides.listing_page_path or default_listing_page_path
        return strategy(page)

    def absolute_url(self, url: str) -> str:
        """Resolve a host-relative URL against the site base."""
        if url.startswith(("http://", "https://")):
            return url
        if not url.startswith("/"):
            url = "/" + url
        return self.base_url + url
