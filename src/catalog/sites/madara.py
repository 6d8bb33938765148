"""Madara WordPress theme sites.

Type: Madara WordPress theme
Auth: None required

Listings are paged archives (``/<manga-path>/page/N/``); some deployments only
serve the archive through the theme's AJAX "load more" handler.
"""

from ..config import MADARA_STATUS_MAP, SiteConfig
from ..selectors import MADARA_SELECTORS


def madara_site(name: str, base_url: str, language: str, date_format: str = "MMMM d, yyyy",
                **overrides) -> SiteConfig:
    """Config for a Madara site; keyword arguments replace any SiteConfig field."""
    fields = dict(
        name=name,
        base_url=base_url,
        language=language,
        date_format=date_format,
        selectors=MADARA_SELECTORS,
        manga_path="manga",
        filter_non_manga_items=True,
        # Madara search results carry no embedded tag list to re-check against
        client_side_filtering=False,
        status_map=MADARA_STATUS_MAP,
    )
    fields.update(overrides)
    return SiteConfig(**fields)
