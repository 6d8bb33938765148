"""Normalized catalog entities shared by every site adapter."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class SeriesStatus(str, Enum):
    """Publication status of a series."""

    ONGOING = "ongoing"
    COMPLETED = "completed"
    ON_HIATUS = "on_hiatus"
    CANCELLED = "cancelled"
    UNKNOWN = "unknown"


class BrowseMode(str, Enum):
    POPULAR = "popular"
    LATEST = "latest"


@dataclass
class CatalogEntry:
    """One series as it appears on a browse or search page."""

    title: str
    thumbnail_url: Optional[str]
    url: str  # host-relative


@dataclass
class CatalogPage:
    """A page of catalog entries plus whether another page can be requested."""

    entries: list[CatalogEntry]
    has_next_page: bool


@dataclass
class DetailRecord:
    """Full metadata for a single series."""

    title: str
    thumbnail_url: Optional[str]
    description: Optional[str]
    status: SeriesStatus
    author: Optional[str]
    artist: Optional[str]
    genres: list[str] = field(default_factory=list)


@dataclass
class ChapterEntry:
    """A chapter link from a series page, in source order."""

    url: str  # host-relative
    name: str
    date_upload: int = 0  # epoch millis, 0 when unknown


@dataclass
class PageEntry:
    """A single page image of a chapter."""

    index: int
    image_url: str


@dataclass(frozen=True)
class Genre:
    """A taxonomy tag; ``id`` is the value sent back as a filter parameter."""

    name: str
    id: str = ""

    def __post_init__(self):
        if not self.id:
            object.__setattr__(self, "id", self.name)


@dataclass(frozen=True)
class FilterState:
    """Search input: free text plus the selected genre ids."""

    query: str = ""
    genre_ids: frozenset[str] = frozenset()

    @classmethod
    def build(cls, query: str = "", genre_ids=None) -> "FilterState":
        return cls(query=query or "", genre_ids=frozenset(genre_ids or ()))


@dataclass
class FilterList:
    """Filter options offered to callers for the search form."""

    genres: list[Genre]
    message: Optional[str] = None
