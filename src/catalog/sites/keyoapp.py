"""Keyoapp-themed sites: static listings, background thumbnails, tag-filtered search.

Site: any Keyoapp deployment (name, base URL and language vary)
Auth: None required
"""

from ..config import PaginationMode, SiteConfig
from ..selectors import KEYOAPP_SELECTORS


def keyoapp_site(name: str, base_url: str, language: str, **overrides) -> SiteConfig:
    """Config for a Keyoapp site; keyword arguments replace any SiteConfig field."""
    fields = dict(
        name=name,
        base_url=base_url,
        language=language,
        date_format="MMM d, yyyy",
        selectors=KEYOAPP_SELECTORS,
        pagination=PaginationMode.STATIC_LIST,
        filter_non_manga_items=False,
        client_side_filtering=True,
        rate_limit=2,
    )
    fields.update(overrides)
    return SiteConfig(**fields)
