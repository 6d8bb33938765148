"""Selector tables mapping semantic page roles to CSS selectors and attributes.

A table is pure data. Sites share one of the stock tables below and tweak
individual roles with ``dataclasses.replace``.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SelectorTable:
    # Listings (browse)
    popular_path: str  # may use {manga_path} and {page_path}
    latest_path: str
    listing_entry: str
    latest_entry: Optional[str]  # None reuses listing_entry
    entry_classification: str  # appended to listing selectors when non-manga items are filtered
    title_link: str
    title_attribute: Optional[str]  # None reads the link text
    thumbnail: str
    next_page: Optional[str]
    last_page_marker: Optional[str]  # load-more fragments: present once the archive is exhausted

    # Search
    search_path: str
    search_query_param: str
    search_genre_param: str
    search_fixed_params: tuple[tuple[str, str], ...]
    search_entry: str
    search_title_attribute: str
    search_tags_attribute: str

    # Details
    detail_title: str
    detail_thumbnail: str
    detail_description: str
    detail_status: str
    detail_author: str
    detail_artist: str
    detail_genre: str

    # Chapters
    chapter_entry: str
    chapter_link: str
    chapter_name: Optional[str]  # None reads the link text
    chapter_date: Optional[str]

    # Pages
    page_image: str
    page_index_attribute: str
    page_width_hint: Optional[str]
    page_list_query: Optional[str]  # appended to chapter URLs to render every page at once

    # Taxonomy
    taxonomy_path: str
    genre_button: str
    genre_id_attribute: str
    genre_id_selector: Optional[str]  # nested element carrying the id, None reads the button


KEYOAPP_SELECTORS = SelectorTable(
    popular_path="/",
    latest_path="/latest/",
    listing_entry="div.flex-col div.grid > div.group.border",
    latest_entry="div.grid > div.group",
    entry_classification="",
    title_link="a[href]",
    title_attribute="title",
    thumbnail="*[style*=background-image]",
    next_page=None,
    last_page_marker=None,
    search_path="/series/",
    search_query_param="q",
    search_genre_param="genre",
    search_fixed_params=(),
    search_entry="#searched_series_page > button",
    search_title_attribute="title",
    search_tags_attribute="tags",
    detail_title="div.grid > h1",
    detail_thumbnail="div[class*=photoURL]",
    detail_description="div.grid > div.overflow-hidden > p",
    detail_status="div[alt=Status]",
    detail_author="div[alt=Author]",
    detail_artist="div[alt=Artist]",
    detail_genre="div.grid:has(> h1) > div > a",
    chapter_entry="#chapters > a",
    chapter_link="a[href]",
    chapter_name=".text-sm",
    chapter_date=".text-xs",
    page_image="#pages > img",
    page_index_attribute="count",
    page_width_hint="150",
    page_list_query=None,
    taxonomy_path="/series/",
    genre_button="#series_tags_page > button",
    genre_id_attribute="tag",
    genre_id_selector=None,
)


MADARA_SELECTORS = SelectorTable(
    popular_path="/{manga_path}/{page_path}?m_orderby=views",
    latest_path="/{manga_path}/{page_path}?m_orderby=latest",
    listing_entry="div.page-item-detail",
    latest_entry=None,
    entry_classification=".manga",
    title_link="div.post-title a",
    title_attribute=None,
    thumbnail="img",
    next_page="div.nav-previous, nav.navigation-ajax, a.nextpostslink",
    last_page_marker=None,
    search_path="/",
    search_query_param="s",
    search_genre_param="genre[]",
    search_fixed_params=(("post_type", "wp-manga"),),
    search_entry="div.c-tabs-item__content",
    search_title_attribute="title",
    search_tags_attribute="tags",
    detail_title="div.post-title h3, div.post-title h1",
    detail_thumbnail="div.summary_image img",
    detail_description="div.description-summary div.summary__content, div.summary_content div.manga-excerpt",
    detail_status=(
        'div.post-content_item:has(div.summary-heading:-soup-contains("Status", "Estado")) '
        "div.summary-content"
    ),
    detail_author="div.author-content > a",
    detail_artist="div.artist-content > a",
    detail_genre="div.genres-content a",
    chapter_entry="li.wp-manga-chapter",
    chapter_link="a",
    chapter_name=None,
    chapter_date="span.chapter-release-date",
    page_image="div.page-break img",
    page_index_attribute="id",
    page_width_hint=None,
    page_list_query="style=list",
    taxonomy_path="/?s=genre&post_type=wp-manga",
    genre_button="div.checkbox-group div.checkbox",
    genre_id_attribute="value",
    genre_id_selector="input",
)
