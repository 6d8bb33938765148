"""Client-side narrowing of search results.

The origin's search endpoint does not reliably combine a text query with
several genres, so every entry is re-checked against the request: its title
attribute must contain the query and its embedded tag list must cover every
selected genre.
"""

import json
from typing import Iterable, Optional

from bs4 import Tag

from .errors import MalformedDocument
from .models import FilterState
from .selectors import SelectorTable


def title_matches(title: Optional[str], query: str) -> bool:
    """Case-insensitive substring match; a blank query matches everything."""
    return query.casefold() in (title or "").casefold()


def decode_tags(raw: Optional[str]) -> list[str]:
    """Decode an entry's serialized tag list (a JSON array of strings)."""
    if raw is None:
        raise MalformedDocument("Search entry without tag list")
    try:
        tags = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedDocument(f"Invalid tag list {raw!r}: {e}") from e

    if not isinstance(tags, list) or not all(isinstance(tag, str) for tag in tags):
        raise MalformedDocument(f"Tag list is not an array of strings: {raw!r}")
    return tags


def genres_match(entry_tags: Iterable[str], genre_ids: Iterable[str]) -> bool:
    """True when every selected genre equals at least one tag, ignoring case."""
    tags = {tag.casefold() for tag in entry_tags}
    return all(genre_id.casefold() in tags for genre_id in genre_ids)


def filter_search_results(elements: Iterable[Tag], filters: FilterState,
                          selectors: SelectorTable) -> list[Tag]:
    """Keep the search result elements that satisfy both predicates, in order."""
    query = filters.query.strip()
    kept = []
    for element in elements:
        if not title_matches(element.get(selectors.search_title_attribute), query):
            continue
        tags = decode_tags(element.get(selectors.search_tags_attribute))
        if not genres_match(tags, filters.genre_ids):
            continue
        kept.append(element)
    return kept
