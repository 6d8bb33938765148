"""Build outbound requests for browse, search, details, chapters, pages and genres."""

from urllib.parse import urlencode

from .config import ChapterEndpoint, PaginationMode, SiteConfig
from .fetcher import Request
from .models import BrowseMode, FilterState

LOAD_MORE_PATH = "/wp-admin/admin-ajax.php"
LOAD_MORE_META_KEYS = {
    BrowseMode.POPULAR: "_wp_manga_views",
    BrowseMode.LATEST: "_latest_update",
}

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
XHR_HEADER = {"X-Requested-With": "XMLHttpRequest"}


def build_browse_request(config: SiteConfig, mode: BrowseMode, page: int) -> Request:
    """Request for page ``page`` (1-based) of the popular or latest listing."""
    if config.overrides.browse_request is not None:
        return config.overrides.browse_request(config, mode, page)

    if config.pagination == PaginationMode.AJAX_LOAD_MORE:
        return build_load_more_request(config, page - 1, LOAD_MORE_META_KEYS[mode])

    template = config.selectors.popular_path if mode == BrowseMode.POPULAR else config.selectors.latest_path
    path = template.format(manga_path=config.manga_path, page_path=config.listing_page_path(page))
    return Request("GET", config.base_url + path)


def build_load_more_request(config: SiteConfig, page_index: int, meta_key: str) -> Request:
    """POST to the theme's AJAX archive handler.

    The handler only answers when every field below is present verbatim, and
    it checks the XHR marker header to tell scripted calls from page loads.
    ``page_index`` is zero-based.
    """
    form = [
        ("action", "madara_load_more"),
        ("page", str(page_index)),
        ("template", "madara-core/content/content-archive"),
        ("vars[paged]", "1"),
        ("vars[orderby]", "meta_value_num"),
        ("vars[template]", "archive"),
        ("vars[sidebar]", "full"),
        ("vars[post_type]", "wp-manga"),
        ("vars[post_status]", "publish"),
        ("vars[meta_key]", meta_key),
        ("vars[order]", "desc"),
        ("vars[meta_query][relation]", "AND"),
        ("vars[manga_archives_item_layout]", "big_thumbnail"),
    ]
    body = urlencode(form).encode("utf-8")

    headers = {
        "Content-Length": str(len(body)),
        "Content-Type": FORM_CONTENT_TYPE,
        **XHR_HEADER,
    }
    return Request("POST", config.base_url + LOAD_MORE_PATH, headers, body)


def build_search_request(config: SiteConfig, filters: FilterState) -> Request:
    """GET of the canonical search path with text and repeated genre parameters.

    The origin narrows results only partially, so callers still run the
    client-side result filter over the response.
    """
    selectors = config.selectors
    params = []
    if filters.query.strip():
        params.append((selectors.search_query_param, filters.query.strip()))
    params.extend(selectors.search_fixed_params)
    params.extend((selectors.search_genre_param, genre_id) for genre_id in sorted(filters.genre_ids))

    url = config.base_url + selectors.search_path
    if params:
        url += "?" + urlencode(params)
    return Request("GET", url)


def build_details_request(config: SiteConfig, url: str) -> Request:
    return Request("GET", config.absolute_url(url))


def build_chapters_request(config: SiteConfig, url: str) -> Request:
    if config.chapter_endpoint == ChapterEndpoint.AJAX:
        endpoint = config.absolute_url(url).split("?")[0].rstrip("/") + "/ajax/chapters/"
        return Request("POST", endpoint, dict(XHR_HEADER), b"")
    return Request("GET", config.absolute_url(url))


def build_pages_request(config: SiteConfig, url: str) -> Request:
    absolute = config.absolute_url(url)
    extra = config.selectors.page_list_query
    if extra:
        absolute += ("&" if "?" in absolute else "?") + extra
    return Request("GET", absolute)


def build_genres_request(config: SiteConfig) -> Request:
    return Request("GET", config.base_url + config.selectors.taxonomy_path)
