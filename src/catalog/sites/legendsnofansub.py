"""Legends No Fansub.

Site: https://legnmangas.com
Type: Madara WordPress theme, archive served only through AJAX "load more"
"""

from dataclasses import replace

from ..config import ChapterEndpoint, PaginationMode
from ..selectors import MADARA_SELECTORS
from .madara import madara_site

LEGENDS_NO_FANSUB = madara_site(
    "Legends No Fansub",
    "https://legnmangas.com",
    "es",
    date_format="dd/MM/yyyy",
    selectors=replace(MADARA_SELECTORS, next_page=None, last_page_marker=".no-posts"),
    pagination=PaginationMode.AJAX_LOAD_MORE,
    chapter_endpoint=ChapterEndpoint.AJAX,
    rate_limit=2,
    rate_period=1.0,
)