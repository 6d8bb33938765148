"""Tests for document extraction."""

from datetime import datetime

import pytest

from src.catalog.config import MADARA_STATUS_MAP
from src.catalog.errors import MalformedDocument
from src.catalog.extractor import (
    background_image_url,
    extract_chapters,
    extract_detail,
    extract_genres,
    extract_listing,
    extract_pages,
    has_next_page,
    image_url,
    java_pattern_to_strptime,
    parse_date,
    parse_status,
    resolve_thumbnail,
    set_query_param,
    to_relative_url,
)
from src.catalog.fetcher import parse_document
from src.catalog.models import Genre, SeriesStatus
from src.catalog.selectors import KEYOAPP_SELECTORS, MADARA_SELECTORS

BASE_URL = "https://keyo.example.com"

LISTING_HTML = """
<div class="flex-col">
  <div class="grid">
    <div class="group border">
      <div class="cover" style="background-image:url(https://cdn.example.com/covers/alpha.jpg)"></div>
      <a href="https://keyo.example.com/series/alpha/" title="Alpha Saga">Alpha</a>
    </div>
    <div class="group border">
      <div class="cover" style="background-image: url('/covers/beta.webp')"></div>
      <a href="/series/beta/?ref=home" title="Beta Days">Beta</a>
    </div>
    <div class="group border">
      <a href="/series/gamma/" title="Gamma Road">Gamma</a>
    </div>
  </div>
</div>
"""


def test_extract_listing_keeps_document_order():
    """Test that every well-formed entry is returned in document order."""
    document = parse_document(LISTING_HTML.encode())
    entries = extract_listing(document, KEYOAPP_SELECTORS, BASE_URL)

    assert [entry.title for entry in entries] == ["Alpha Saga", "Beta Days", "Gamma Road"]
    assert [entry.url for entry in entries] == ["/series/alpha/", "/series/beta/?ref=home", "/series/gamma/"]


def test_extract_listing_background_thumbnails():
    """Test that background-image thumbnails are resolved with a width hint."""
    document = parse_document(LISTING_HTML.encode())
    entries = extract_listing(document, KEYOAPP_SELECTORS, BASE_URL)

    assert entries[0].thumbnail_url == "https://cdn.example.com/covers/alpha.jpg?w=480"
    assert entries[1].thumbnail_url == "https://keyo.example.com/covers/beta.webp?w=480"
    assert entries[2].thumbnail_url is None


def test_extract_listing_missing_title_link_fails():
    """Test that an entry without a title link fails the whole document."""
    html = LISTING_HTML.replace('<a href="/series/gamma/" title="Gamma Road">Gamma</a>', "<span>Gamma</span>")
    document = parse_document(html.encode())

    with pytest.raises(MalformedDocument):
        extract_listing(document, KEYOAPP_SELECTORS, BASE_URL)


def test_extract_listing_empty_document():
    """Test that a page without entries yields an empty list."""
    assert extract_listing(parse_document(b"<html></html>"), KEYOAPP_SELECTORS, BASE_URL) == []


def test_extract_listing_madara_image_attributes():
    """Test that lazy-load attributes take priority over src."""
    html = """
    <div class="page-item-detail manga">
      <img data-lazy-src="/wp-content/lazy.jpg" data-src="/wp-content/deferred.jpg" src="/loading.gif">
      <div class="post-title"><h3><a href="https://topmanhua.com/manhua/alpha/">Alpha</a></h3></div>
    </div>
    <div class="page-item-detail manga">
      <img data-src="/wp-content/deferred.jpg" src="/loading.gif">
      <div class="post-title"><h3><a href="/manhua/beta/">Beta</a></h3></div>
    </div>
    <div class="page-item-detail manga">
      <img src="https://cdn.example.com/plain.jpg">
      <div class="post-title"><h3><a href="/manhua/gamma/">Gamma</a></h3></div>
    </div>
    """
    entries = extract_listing(parse_document(html.encode()), MADARA_SELECTORS, "https://topmanhua.com/manhua/")

    assert [entry.title for entry in entries] == ["Alpha", "Beta", "Gamma"]
    assert entries[0].thumbnail_url == "https://topmanhua.com/wp-content/lazy.jpg"
    assert entries[1].thumbnail_url == "https://topmanhua.com/wp-content/deferred.jpg"
    assert entries[2].thumbnail_url == "https://cdn.example.com/plain.jpg"
    assert entries[0].url == "/manhua/alpha/"


def test_background_image_url():
    """Test parsing of CSS background-image strings."""
    assert background_image_url("background-image:url(https://x/y.jpg)") == "https://x/y.jpg"
    assert background_image_url('background-image: url("https://x/y.jpg");') == "https://x/y.jpg"
    assert background_image_url("color: red") is None
    assert background_image_url("background-image:url(") is None
    assert background_image_url(None) is None


def test_resolve_thumbnail_width_hint():
    """Test the documented width-hint contract for background images."""
    document = parse_document(b'<div style="background-image:url(https://x/y.jpg)"></div>')
    assert resolve_thumbnail(document, "*[style*=background-image]", BASE_URL) == "https://x/y.jpg?w=480"


def test_resolve_thumbnail_replaces_existing_width():
    document = parse_document(b'<div style="background-image:url(https://x/y.jpg?w=100&v=2)"></div>')
    assert resolve_thumbnail(document, "div", BASE_URL) == "https://x/y.jpg?v=2&w=480"


def test_set_query_param_keeps_rest_of_query():
    """Test that only the width pair is touched."""
    assert set_query_param("https://x/y.jpg?name=a%20b&flag&w=100", "w", "480") == (
        "https://x/y.jpg?name=a%20b&flag&w=480"
    )
    assert set_query_param("https://x/y.jpg", "w", "150") == "https://x/y.jpg?w=150"


def test_image_url_srcset_fallback():
    document = parse_document(b'<img srcset="/p/small.jpg 1x, /p/big.jpg 2x"><img srcset=",">')
    first, degenerate = document.select("img")

    assert image_url(first, BASE_URL) == "https://keyo.example.com/p/small.jpg"
    assert image_url(degenerate, BASE_URL) is None


def test_to_relative_url():
    assert to_relative_url("https://keyo.example.com/series/a/", BASE_URL) == "/series/a/"
    assert to_relative_url("series/a/", BASE_URL + "/") == "/series/a/"
    assert to_relative_url("https://keyo.example.com", BASE_URL) == "/"
    assert to_relative_url("/chapter/1/?page=2#top", BASE_URL) == "/chapter/1/?page=2#top"


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Ongoing", SeriesStatus.ONGOING),
        ("COMPLETED", SeriesStatus.COMPLETED),
        ("  paused ", SeriesStatus.ON_HIATUS),
        ("Dropped", SeriesStatus.CANCELLED),
        ("Season 2 coming", SeriesStatus.UNKNOWN),
        ("", SeriesStatus.UNKNOWN),
        (None, SeriesStatus.UNKNOWN),
    ],
)
def test_parse_status_is_total(text, expected):
    """Test that status parsing never fails and maps known words."""
    assert parse_status(text) == expected


def test_parse_status_site_vocabulary():
    assert parse_status("On Hold", MADARA_STATUS_MAP) == SeriesStatus.ON_HIATUS
    assert parse_status("En curso", MADARA_STATUS_MAP) == SeriesStatus.ONGOING
    assert parse_status("Paused", MADARA_STATUS_MAP) == SeriesStatus.UNKNOWN


def test_java_pattern_to_strptime():
    assert java_pattern_to_strptime("MMM d, yyyy") == "%b %d, %Y"
    assert java_pattern_to_strptime("MM/dd/yy") == "%m/%d/%y"
    assert java_pattern_to_strptime("dd/MM/yyyy") == "%d/%m/%Y"
    assert java_pattern_to_strptime("MMMM d, yyyy 'at' HH:mm") == "%B %d, %Y at %H:%M"
    assert java_pattern_to_strptime("d 'de' MMMM") == "%d de %B"


def test_parse_date_matching_pattern():
    """Test that well-formed dates give epoch millis in the local time zone."""
    expected = int(datetime(2023, 1, 5).timestamp() * 1000)

    assert parse_date("Jan 5, 2023", "MMM d, yyyy") == expected
    assert parse_date("01/05/23", "MM/dd/yy") == expected
    assert parse_date("05/01/2023", "dd/MM/yyyy") == expected


@pytest.mark.parametrize("text", ["", None, "yesterday", "2023-01-05", "Jan 45, 2023"])
def test_parse_date_failure_returns_zero(text):
    """Test that malformed dates degrade to 0 instead of raising."""
    assert parse_date(text, "MMM d, yyyy") == 0


def test_parse_date_unsupported_pattern_returns_zero():
    assert parse_date("Jan 5, 2023", "QQQ d, yyyy") == 0


DETAIL_HTML = """
<div class="grid">
  <h1>Alpha Saga</h1>
  <div class="photoURL-box" style="background-image:url('/covers/alpha.webp')"></div>
  <div class="overflow-hidden"><p>A   story about
    alpha.</p></div>
  <div alt="Status">Completed</div>
  <div alt="Author">Kim Lee</div>
  <div><a href="/series/?genre=action">Action</a><a href="/series/?genre=romance">Romance</a></div>
</div>
"""


def test_extract_detail():
    """Test full detail extraction from a series page."""
    document = parse_document(DETAIL_HTML.encode())
    detail = extract_detail(document, KEYOAPP_SELECTORS, BASE_URL + "/series/alpha/")

    assert detail.title == "Alpha Saga"
    assert detail.thumbnail_url == "https://keyo.example.com/covers/alpha.webp?w=480"
    assert detail.description == "A story about alpha."
    assert detail.status == SeriesStatus.COMPLETED
    assert detail.author == "Kim Lee"
    assert detail.artist is None
    assert detail.genres == ["Action", "Romance"]


def test_extract_detail_missing_status_is_unknown():
    html = DETAIL_HTML.replace('<div alt="Status">Completed</div>', "")
    detail = extract_detail(parse_document(html.encode()), KEYOAPP_SELECTORS, BASE_URL)

    assert detail.status == SeriesStatus.UNKNOWN


def test_extract_detail_missing_title_fails():
    html = DETAIL_HTML.replace("<h1>Alpha Saga</h1>", "")

    with pytest.raises(MalformedDocument):
        extract_detail(parse_document(html.encode()), KEYOAPP_SELECTORS, BASE_URL)


def test_extract_detail_custom_status_parser():
    detail = extract_detail(
        parse_document(DETAIL_HTML.encode()), KEYOAPP_SELECTORS, BASE_URL, lambda text: SeriesStatus.ON_HIATUS
    )
    assert detail.status == SeriesStatus.ON_HIATUS


CHAPTERS_HTML = """
<div id="chapters">
  <a href="/chapter/alpha-2/"><span class="text-sm">Chapter 2</span><span class="text-xs">Jan 12, 2023</span></a>
  <a href="https://keyo.example.com/chapter/alpha-1/"><span class="text-sm">Chapter 1</span>
    <span class="text-xs">yesterday</span></a>
  <a href="/chapter/alpha-0/"><span class="text-sm">Prologue</span></a>
</div>
"""


def test_extract_chapters_in_source_order():
    """Test chapter extraction with degraded dates."""
    document = parse_document(CHAPTERS_HTML.encode())
    chapters = extract_chapters(
        document, KEYOAPP_SELECTORS, BASE_URL, lambda text: parse_date(text, "MMM d, yyyy")
    )

    assert [chapter.name for chapter in chapters] == ["Chapter 2", "Chapter 1", "Prologue"]
    assert [chapter.url for chapter in chapters] == ["/chapter/alpha-2/", "/chapter/alpha-1/", "/chapter/alpha-0/"]
    assert chapters[0].date_upload == int(datetime(2023, 1, 12).timestamp() * 1000)
    assert chapters[1].date_upload == 0
    assert chapters[2].date_upload == 0


def test_extract_chapters_missing_name_fails():
    html = '<div id="chapters"><a href="/chapter/x/"><span class="text-xs">Jan 1, 2023</span></a></div>'

    with pytest.raises(MalformedDocument):
        extract_chapters(parse_document(html.encode()), KEYOAPP_SELECTORS, BASE_URL, lambda text: 0)


def test_extract_chapters_madara_link_text():
    html = """
    <ul>
      <li class="wp-manga-chapter"><a href="/manga/alpha/chapter-2/"> Chapter 2 </a>
        <span class="chapter-release-date"><i>01/12/23</i></span></li>
      <li class="wp-manga-chapter"><a href="/manga/alpha/chapter-1/">Chapter 1</a></li>
    </ul>
    """
    chapters = extract_chapters(
        parse_document(html.encode()), MADARA_SELECTORS, "https://topmanhua.com",
        lambda text: parse_date(text, "MM/dd/yy"),
    )

    assert [chapter.name for chapter in chapters] == ["Chapter 2", "Chapter 1"]
    assert chapters[0].date_upload == int(datetime(2023, 1, 12).timestamp() * 1000)
    assert chapters[1].date_upload == 0


def test_extract_pages_uses_count_attribute():
    """Test that page indexes come from the count attribute, not DOM order."""
    html = """
    <div id="pages">
      <img count="2" src="https://cdn.example.com/p/3.jpg">
      <img count="0" data-src="/p/1.jpg" src="/loading.gif">
      <img count="1" src="https://cdn.example.com/p/2.jpg">
    </div>
    """
    pages = extract_pages(parse_document(html.encode()), KEYOAPP_SELECTORS, BASE_URL + "/chapter/alpha-1/")

    assert [page.index for page in pages] == [2, 0, 1]
    assert pages[0].image_url == "https://cdn.example.com/p/3.jpg?w=150"
    assert pages[1].image_url == "https://keyo.example.com/p/1.jpg?w=150"


def test_extract_pages_gap_tolerant():
    html = '<div id="pages"><img count="0" src="/a.jpg"><img count="5" src="/b.jpg"></div>'
    pages = extract_pages(parse_document(html.encode()), KEYOAPP_SELECTORS, BASE_URL)

    assert [page.index for page in pages] == [0, 5]


def test_extract_pages_missing_index_fails():
    html = '<div id="pages"><img src="/a.jpg"></div>'

    with pytest.raises(MalformedDocument):
        extract_pages(parse_document(html.encode()), KEYOAPP_SELECTORS, BASE_URL)


def test_extract_pages_madara_image_ids():
    html = """
    <div class="page-break"><img id="image-0" data-src=" https://cdn.example.com/1.jpg "></div>
    <div class="page-break"><img id="image-1" src="https://cdn.example.com/2.jpg"></div>
    """
    pages = extract_pages(parse_document(html.encode()), MADARA_SELECTORS, "https://topmanhua.com")

    assert [(page.index, page.image_url) for page in pages] == [
        (0, "https://cdn.example.com/1.jpg"),
        (1, "https://cdn.example.com/2.jpg"),
    ]


def test_extract_genres():
    """Test taxonomy extraction from tag buttons."""
    html = """
    <div id="series_tags_page">
      <button tag="action">Action</button>
      <button tag="slice-of-life">Slice of Life</button>
      <button>Drama</button>
      <button tag="empty"> </button>
    </div>
    """
    genres = extract_genres(parse_document(html.encode()), KEYOAPP_SELECTORS)

    assert genres == [Genre("Action", "action"), Genre("Slice of Life", "slice-of-life"), Genre("Drama", "Drama")]


def test_extract_genres_nested_id():
    html = """
    <div class="checkbox-group">
      <div class="checkbox"><input type="checkbox" value="accion"><label>Acción</label></div>
    </div>
    """
    genres = extract_genres(parse_document(html.encode()), MADARA_SELECTORS)

    assert genres == [Genre("Acción", "accion")]


def test_has_next_page():
    madara_page = parse_document(b'<div class="nav-previous"><a href="/page/2/">Older</a></div>')

    assert has_next_page(madara_page, MADARA_SELECTORS, 10) is True
    assert has_next_page(parse_document(b"<div></div>"), MADARA_SELECTORS, 10) is False
    assert has_next_page(madara_page, KEYOAPP_SELECTORS, 10) is False
