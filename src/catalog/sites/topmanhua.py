"""Top Manhua.

Site: https://topmanhua.com
Type: Madara WordPress theme
"""

from ..config import SiteOverrides
from .madara import madara_site


def listing_page_path(page: int) -> str:
    return "" if page == 1 else f"page/{page}/"


TOP_MANHUA = madara_site(
    "Top Manhua",
    "https://topmanhua.com",
    "en",
    date_format="MM/dd/yy",
    manga_path="manhua",
    # The site does not flag its content type, so every archive item is kept
    filter_non_manga_items=False,
    rate_limit=2,
    overrides=SiteOverrides(listing_page_path=listing_page_path),
)