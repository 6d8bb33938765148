"""Turn parsed site documents into normalized catalog entities.

Every function here is a pure function of (document, selector table). Structural
elements that must exist raise MalformedDocument; optional ones (status, dates,
thumbnails) degrade to a documented fallback instead.
"""

import logging
import re
from datetime import datetime
from functools import lru_cache
from typing import Callable, Mapping, Optional
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup, Tag

from .config import DEFAULT_STATUS_MAP
from .errors import DateParseFailed, MalformedDocument
from .models import CatalogEntry, ChapterEntry, DetailRecord, Genre, PageEntry, SeriesStatus
from .selectors import SelectorTable

logger = logging.getLogger(__name__)

THUMBNAIL_WIDTH = "480"

IMAGE_ATTRIBUTES = ("data-lazy-src", "data-src", "src")


# URLs


def to_relative_url(url: str, base_url: str) -> str:
    """Strip scheme and host so the URL survives a base-URL migration."""
    parts = urlsplit(urljoin(base_url, url))
    relative = parts.path or "/"
    if parts.query:
        relative += "?" + parts.query
    if parts.fragment:
        relative += "#" + parts.fragment
    return relative


def set_query_param(url: str, key: str, value: str) -> str:
    """Replace or append one query parameter, leaving the rest of the query as sent."""
    parts = urlsplit(url)
    pairs = [pair for pair in parts.query.split("&") if pair and pair.split("=", 1)[0] != key]
    pairs.append(f"{key}={quote(value, safe='')}")
    return urlunsplit(parts._replace(query="&".join(pairs)))


def background_image_url(style: Optional[str]) -> Optional[str]:
    """Pull the URL out of a ``background-image: url(...)`` style string."""
    if not style:
        return None
    start = style.find("url(")
    if start == -1:
        return None
    start += len("url(")
    end = style.find(")", start)
    if end == -1:
        return None
    url = style[start:end].strip().strip("'\"").strip()
    return url or None


def image_url(element: Tag, base_url: str, width: Optional[str] = None) -> Optional[str]:
    """Absolute image URL from the first populated lazy-load or source attribute."""
    url = None
    for attribute in IMAGE_ATTRIBUTES:
        value = (element.get(attribute) or "").strip()
        if value:
            url = value
            break

    if url is None:
        srcset = (element.get("srcset") or "").strip()
        if srcset:
            candidate = srcset.split(",")[0].split()
            url = candidate[0] if candidate else None

    if url is None:
        return None

    url = urljoin(base_url, url)
    if width:
        url = set_query_param(url, "w", width)
    return url


def resolve_thumbnail(root: Tag, selector: str, base_url: str) -> Optional[str]:
    """Thumbnail from a CSS background image, falling back to image attributes.

    Background images get a width hint so the origin serves a reasonably sized
    variant.
    """
    element = _select_first(root, selector)
    if element is None:
        return None

    background = background_image_url(element.get("style"))
    if background:
        return set_query_param(urljoin(base_url, background), "w", THUMBNAIL_WIDTH)

    return image_url(element, base_url)


# Status and dates


def parse_status(text: Optional[str],
                 status_map: Mapping[str, SeriesStatus] = DEFAULT_STATUS_MAP) -> SeriesStatus:
    """Map status text to SeriesStatus; unknown or missing text is UNKNOWN."""
    if not text:
        return SeriesStatus.UNKNOWN
    return status_map.get(" ".join(text.split()).lower(), SeriesStatus.UNKNOWN)


_PATTERN_TOKEN = re.compile(r"'(?:[^']|'')*'|([A-Za-z])\1*|.", re.DOTALL)


@lru_cache(maxsize=32)
def java_pattern_to_strptime(pattern: str) -> str:
    """Translate a ``SimpleDateFormat``-style pattern such as ``MMM d, yyyy``."""
    parts = []
    for match in _PATTERN_TOKEN.finditer(pattern):
        token = match.group(0)
        letter, count = token[0], len(token)

        if letter == "'":
            literal = token[1:-1].replace("''", "'") if count > 1 else ""
            parts.append((literal or "'").replace("%", "%%"))
        elif letter == "y":
            parts.append("%y" if count == 2 else "%Y")
        elif letter in "ML":
            parts.append("%B" if count >= 4 else "%b" if count == 3 else "%m")
        elif letter == "d":
            parts.append("%d")
        elif letter == "H":
            parts.append("%H")
        elif letter == "h":
            parts.append("%I")
        elif letter == "m":
            parts.append("%M")
        elif letter == "s":
            parts.append("%S")
        elif letter == "a":
            parts.append("%p")
        elif letter == "E":
            parts.append("%A" if count >= 4 else "%a")
        elif letter in "Zz":
            parts.append("%z")
        elif letter.isalpha():
            raise ValueError(f"Unsupported date pattern letter {letter!r} in {pattern!r}")
        else:
            parts.append(token.replace("%", "%%"))

    return "".join(parts)


def _parse_date_strict(text: str, pattern: str) -> int:
    if not text or not text.strip():
        raise DateParseFailed("empty date")
    try:
        parsed = datetime.strptime(" ".join(text.split()), java_pattern_to_strptime(pattern))
        return int(parsed.timestamp() * 1000)
    except (ValueError, OverflowError, OSError) as e:
        raise DateParseFailed(f"{text!r} does not match {pattern!r}: {e}") from e


def parse_date(text: Optional[str], pattern: str) -> int:
    """Epoch millis for ``text`` in the local time zone, or 0 when it cannot be parsed."""
    try:
        return _parse_date_strict(text or "", pattern)
    except DateParseFailed as e:
        logger.debug("Date parse failed: %s", e)
        return 0


# Documents


def _select_first(root: Tag, selector: str) -> Optional[Tag]:
    """First match of ``selector`` in ``root``, counting ``root`` itself."""
    if not isinstance(root, BeautifulSoup) and root.css.match(selector):
        return root
    return root.select_one(selector)


def _clean(text: str) -> str:
    return " ".join(text.split())


def _text(element: Optional[Tag]) -> Optional[str]:
    """Whitespace-normalized text of an element, None when missing or blank."""
    if element is None:
        return None
    return _clean(element.get_text(" ")) or None


def entry_from_element(element: Tag, selectors: SelectorTable, base_url: str) -> CatalogEntry:
    link = _select_first(element, selectors.title_link)
    if link is None or not link.get("href"):
        raise MalformedDocument(f"Listing entry without title link ({selectors.title_link})")

    title = ""
    if selectors.title_attribute:
        title = (link.get(selectors.title_attribute) or "").strip()
    if not title:
        title = _clean(link.get_text(" "))

    return CatalogEntry(
        title=title,
        thumbnail_url=resolve_thumbnail(element, selectors.thumbnail, base_url),
        url=to_relative_url(link["href"], base_url),
    )


def extract_listing(document: Tag, selectors: SelectorTable, base_url: str,
                    entry_selector: Optional[str] = None) -> list[CatalogEntry]:
    """All listing entries of a browse page or load-more fragment, in document order."""
    return [
        entry_from_element(element, selectors, base_url)
        for element in document.select(entry_selector or selectors.listing_entry)
    ]


def has_next_page(document: Tag, selectors: SelectorTable, entry_count: int) -> bool:
    """Probe the document for a further page; there is no total-count field to rely on."""
    if selectors.last_page_marker:
        return entry_count > 0 and document.select_one(selectors.last_page_marker) is None
    if not selectors.next_page:
        return False
    return document.select_one(selectors.next_page) is not None


def extract_detail(document: Tag, selectors: SelectorTable, base_url: str,
                   status_parser: Callable[[Optional[str]], SeriesStatus] = parse_status) -> DetailRecord:
    title = _text(document.select_one(selectors.detail_title))
    if not title:
        raise MalformedDocument(f"Series page without title ({selectors.detail_title})")

    return DetailRecord(
        title=title,
        thumbnail_url=resolve_thumbnail(document, selectors.detail_thumbnail, base_url),
        description=_text(document.select_one(selectors.detail_description)),
        status=status_parser(_text(document.select_one(selectors.detail_status))),
        author=_text(document.select_one(selectors.detail_author)),
        artist=_text(document.select_one(selectors.detail_artist)),
        genres=[name for name in map(_text, document.select(selectors.detail_genre)) if name],
    )


def extract_chapters(document: Tag, selectors: SelectorTable, base_url: str,
                     date_parser: Callable[[str], int]) -> list[ChapterEntry]:
    """Chapters in the order the source lists them; no re-sorting."""
    chapters = []
    for element in document.select(selectors.chapter_entry):
        link = _select_first(element, selectors.chapter_link)
        if link is None or not link.get("href"):
            raise MalformedDocument(f"Chapter entry without link ({selectors.chapter_link})")

        if selectors.chapter_name:
            name = _text(element.select_one(selectors.chapter_name))
            if name is None:
                raise MalformedDocument(f"Chapter entry without name ({selectors.chapter_name})")
        else:
            name = _clean(link.get_text(" "))

        date_upload = 0
        if selectors.chapter_date:
            date_text = _text(element.select_one(selectors.chapter_date))
            if date_text:
                date_upload = date_parser(date_text)

        chapters.append(ChapterEntry(
            url=to_relative_url(link["href"], base_url),
            name=name,
            date_upload=date_upload,
        ))

    return chapters


_TRAILING_INT = re.compile(r"(\d+)\s*$")


def extract_pages(document: Tag, selectors: SelectorTable, base_url: str) -> list[PageEntry]:
    """Page images indexed by their index attribute, never by DOM position.

    The origin's reader script may render pages out of order, so the attribute
    is authoritative.
    """
    pages = []
    for img in document.select(selectors.page_image):
        raw_index = img.get(selectors.page_index_attribute) or ""
        match = _TRAILING_INT.search(raw_index)
        if not match:
            raise MalformedDocument(
                f"Page image without {selectors.page_index_attribute!r} index: {raw_index!r}"
            )

        url = image_url(img, base_url, selectors.page_width_hint)
        if url is None:
            raise MalformedDocument(f"Page image {match.group(1)} has no source")

        pages.append(PageEntry(index=int(match.group(1)), image_url=url))

    return pages


def extract_genres(document: Tag, selectors: SelectorTable) -> list[Genre]:
    """Taxonomy buttons: display text plus the id sent back as a filter value."""
    genres = []
    for button in document.select(selectors.genre_button):
        name = _clean(button.get_text(" "))
        if not name:
            continue

        source = button.select_one(selectors.genre_id_selector) if selectors.genre_id_selector else button
        genre_id = (source.get(selectors.genre_id_attribute) or "").strip() if source is not None else ""
        genres.append(Genre(name=name, id=genre_id or name))

    return genres
