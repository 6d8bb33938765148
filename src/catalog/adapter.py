"""Site adapter: binds one SiteConfig to the generic extraction pipeline."""

import logging
from typing import Optional

from bs4 import BeautifulSoup

from . import extractor, query
from .config import PaginationMode, SiteConfig
from .fetcher import Fetcher, HttpFetcher, RateLimitedFetcher, Request, parse_document
from .filters import filter_search_results
from .genre_cache import GenreCache
from .models import (
    BrowseMode,
    CatalogPage,
    ChapterEntry,
    DetailRecord,
    FilterList,
    FilterState,
    Genre,
    PageEntry,
    SeriesStatus,
)

logger = logging.getLogger(__name__)

NO_GENRES_MESSAGE = "No genres available yet; reset the filters to try fetching them again"


def default_fetcher(config: SiteConfig) -> Fetcher:
    """Rate-limited requests-backed fetcher sending the site as Referer."""
    http = HttpFetcher(headers={"Referer": f"{config.base_url}/"})
    return RateLimitedFetcher(http, permits=config.rate_limit, period=config.rate_period)


class SiteAdapter:
    """Uniform catalog queries over one site.

    Raises FetchFailed when the origin cannot be reached and MalformedDocument
    when a page lacks an element it must have. Genre taxonomy failures never
    surface; they only leave the filter list empty.
    """

    def __init__(self, config: SiteConfig, fetcher: Optional[Fetcher] = None):
        self.config = config
        self.fetcher = fetcher or default_fetcher(config)
        self.genre_cache = GenreCache(self._fetch_genres)

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def site_id(self) -> str:
        return self.config.site_id

    # Fetching

    def _document(self, request: Request) -> tuple[BeautifulSoup, str]:
        response = self.fetcher.execute(request)
        return parse_document(response.body), response.url or request.url

    def _fetch_genres(self) -> list[Genre]:
        document, _ = self._document(query.build_genres_request(self.config))
        return extractor.extract_genres(document, self.config.selectors)

    # Per-site strategies

    def parse_status(self, text: Optional[str]) -> SeriesStatus:
        if self.config.overrides.parse_status is not None:
            return self.config.overrides.parse_status(text)
        return extractor.parse_status(text, self.config.status_map)

    def parse_date(self, text: str) -> int:
        if self.config.overrides.parse_date is not None:
            return self.config.overrides.parse_date(text, self.config)
        return extractor.parse_date(text, self.config.date_format)

    def _listing_selector(self, mode: BrowseMode) -> str:
        selectors = self.config.selectors
        selector = selectors.listing_entry
        if mode == BrowseMode.LATEST and selectors.latest_entry:
            selector = selectors.latest_entry

        if self.config.filter_non_manga_items and selectors.entry_classification:
            selector = ", ".join(
                part.strip() + selectors.entry_classification for part in selector.split(",")
            )
        return selector

    # Browse

    def _browse(self, mode: BrowseMode, page: int) -> CatalogPage:
        document, url = self._document(query.build_browse_request(self.config, mode, page))
        self.genre_cache.refresh_if_needed()

        entries = extractor.extract_listing(
            document, self.config.selectors, url, entry_selector=self._listing_selector(mode)
        )
        has_next = extractor.has_next_page(document, self.config.selectors, len(entries))
        logger.info("%s %s page %d: %d entries", self.name, mode.value, page, len(entries))
        return CatalogPage(entries=entries, has_next_page=has_next)

    def browse_popular(self, page: int = 1) -> CatalogPage:
        return self._browse(BrowseMode.POPULAR, page)

    def browse_latest(self, page: int = 1) -> CatalogPage:
        return self._browse(BrowseMode.LATEST, page)

    # Search

    def search(self, text: str = "", filters: Optional[FilterState] = None, page: int = 1) -> CatalogPage:
        """Search by title and genres; results always fit on one page.

        ``text`` takes precedence over ``filters.query`` when both are given.
        """
        filters = filters or FilterState()
        if text:
            filters = FilterState(query=text, genre_ids=filters.genre_ids)

        document, url = self._document(query.build_search_request(self.config, filters))
        self.genre_cache.refresh_if_needed()

        selectors = self.config.selectors
        elements = document.select(selectors.search_entry)
        if self.config.client_side_filtering:
            elements = filter_search_results(elements, filters, selectors)

        entries = [extractor.entry_from_element(element, selectors, url) for element in elements]
        logger.info("%s search %r (%d genres): %d entries",
                    self.name, filters.query, len(filters.genre_ids), len(entries))
        return CatalogPage(entries=entries, has_next_page=False)

    def filter_list(self) -> FilterList:
        """Genres offered for search, or an explanatory message when none are known."""
        genres = self.genre_cache.genres
        if genres:
            return FilterList(genres=genres)
        return FilterList(genres=[], message=NO_GENRES_MESSAGE)

    # Series

    def fetch_details(self, url: str) -> DetailRecord:
        document, page_url = self._document(query.build_details_request(self.config, url))
        return extractor.extract_detail(document, self.config.selectors, page_url, self.parse_status)

    def fetch_chapters(self, url: str) -> list[ChapterEntry]:
        document, page_url = self._document(query.build_chapters_request(self.config, url))
        return extractor.extract_chapters(document, self.config.selectors, page_url, self.parse_date)

    def fetch_pages(self, url: str) -> list[PageEntry]:
        document, page_url = self._document(query.build_pages_request(self.config, url))
        return extractor.extract_pages(document, self.config.selectors, page_url)

    def __repr__(self) -> str:
        mode = "load-more" if self.config.pagination == PaginationMode.AJAX_LOAD_MORE else "static"
        return f"<SiteAdapter {self.name} {self.config.base_url} ({mode})>"
