"""Catalog CLI commands."""

import json
import sys
from dataclasses import asdict
from pathlib import Path

from src.catalog import registry
from src.catalog.adapter import SiteAdapter
from src.catalog.config import ChapterEndpoint, PaginationMode
from src.catalog.errors import CatalogError
from src.catalog.models import FilterState


def get_adapter(args):
    """Get adapter instance for a known site, or None if the site is unknown."""
    config = registry.get_site(args.site_id, Path(args.registry))
    if config is None:
        print(f"Site not found: {args.site_id}")
        return None
    return SiteAdapter(config)


def _dump(value):
    if isinstance(value, list):
        value = [asdict(item) for item in value]
    else:
        value = asdict(value)
    print(json.dumps(value, indent=2, ensure_ascii=False))


def _print_page(result, as_json):
    if as_json:
        _dump(result)
        return

    if not result.entries:
        print("No results")
        return

    for idx, entry in enumerate(result.entries, 1):
        print(f"{idx}. {entry.title}")
        print(f"   URL: {entry.url}")
        if entry.thumbnail_url:
            print(f"   Thumbnail: {entry.thumbnail_url}")
    if result.has_next_page:
        print("\n(more pages available)")


def _run(args, operation):
    """Run an adapter operation, mapping catalog failures to exit status 1."""
    adapter = get_adapter(args)
    if not adapter:
        return 1

    try:
        operation(adapter)
    except CatalogError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def cmd_list_sites(args):
    """List built-in and registered sites."""
    sites = registry.list_sites(Path(args.registry))

    print("Available sites:")
    for site_id, config in sites.items():
        mode = "load-more" if config.pagination == PaginationMode.AJAX_LOAD_MORE else "static"
        print(f"  - {site_id}: {config.name} [{config.language}] {config.base_url} ({mode})")
    return 0


def cmd_add_site(args):
    """Register a Keyoapp or Madara site."""
    registry.add_site(
        args.site_id,
        args.type,
        name=args.name or args.site_id,
        base_url=args.base_url,
        language=args.lang,
        path=Path(args.registry),
        date_format=args.date_format,
        pagination=args.pagination,
        manga_path=args.manga_path,
        chapter_endpoint=args.chapter_endpoint,
    )
    print(f"Added {args.type} site: {args.site_id} at {args.base_url}")
    return 0


def cmd_remove_site(args):
    if registry.remove_site(args.site_id, Path(args.registry)):
        print(f"Removed site: {args.site_id}")
        return 0
    print(f"Site not registered: {args.site_id}")
    return 1


def cmd_popular(args):
    return _run(args, lambda adapter: _print_page(adapter.browse_popular(args.page), args.json))


def cmd_latest(args):
    return _run(args, lambda adapter: _print_page(adapter.browse_latest(args.page), args.json))


def cmd_search(args):
    filters = FilterState.build(args.query, args.genre)
    return _run(args, lambda adapter: _print_page(adapter.search(filters=filters), args.json))


def cmd_details(args):
    def show(adapter):
        detail = adapter.fetch_details(args.url)
        if args.json:
            _dump(detail)
            return
        print(detail.title)
        print(f"  Status: {detail.status.value}")
        if detail.author:
            print(f"  Author: {detail.author}")
        if detail.artist:
            print(f"  Artist: {detail.artist}")
        if detail.genres:
            print(f"  Genres: {', '.join(detail.genres)}")
        if detail.thumbnail_url:
            print(f"  Thumbnail: {detail.thumbnail_url}")
        if detail.description:
            print(f"\n{detail.description}")

    return _run(args, show)


def cmd_chapters(args):
    def show(adapter):
        chapters = adapter.fetch_chapters(args.url)
        if args.json:
            _dump(chapters)
            return
        print(f"Found {len(chapters)} chapters")
        for chapter in chapters:
            print(f"  {chapter.name}  {chapter.url}")

    return _run(args, show)


def cmd_pages(args):
    def show(adapter):
        pages = adapter.fetch_pages(args.url)
        if args.json:
            _dump(pages)
            return
        for page in sorted(pages, key=lambda p: p.index):
            print(f"  {page.index:03d} {page.image_url}")

    return _run(args, show)


def cmd_genres(args):
    def show(adapter):
        adapter.genre_cache.refresh_if_needed()
        filters = adapter.filter_list()
        if args.json:
            _dump(filters.genres)
            return
        if filters.message:
            print(filters.message)
        for genre in filters.genres:
            print(f"  {genre.name} ({genre.id})")

    return _run(args, show)


def _add_site_argument(parser):
    parser.add_argument("site_id", help="Site identifier (see list-sites)")


def setup_catalog_commands(subparsers):
    """Setup catalog subcommands."""
    list_parser = subparsers.add_parser("list-sites", help="List available sites")
    list_parser.set_defaults(func=cmd_list_sites)

    add_parser = subparsers.add_parser("add-site", help="Register a Keyoapp or Madara site")
    add_parser.add_argument("site_id", help="Unique identifier for the site")
    add_parser.add_argument("--type", required=True, choices=list(registry.SITE_TYPES), help="Theme family")
    add_parser.add_argument("--base-url", required=True, help="Site root URL")
    add_parser.add_argument("--lang", default="en", help="Language code")
    add_parser.add_argument("--name", help="Display name (defaults to the site id)")
    add_parser.add_argument("--date-format", help="Chapter date pattern, e.g. 'MMM d, yyyy'")
    add_parser.add_argument("--pagination", choices=[mode.value for mode in PaginationMode])
    add_parser.add_argument("--manga-path", help="Madara archive path segment")
    add_parser.add_argument("--chapter-endpoint", choices=[endpoint.value for endpoint in ChapterEndpoint])
    add_parser.set_defaults(func=cmd_add_site)

    remove_parser = subparsers.add_parser("remove-site", help="Remove a registered site")
    remove_parser.add_argument("site_id", help="Site identifier")
    remove_parser.set_defaults(func=cmd_remove_site)

    for name, func, help_text in (
        ("popular", cmd_popular, "Browse popular series"),
        ("latest", cmd_latest, "Browse latest updates"),
    ):
        browse_parser = subparsers.add_parser(name, help=help_text)
        _add_site_argument(browse_parser)
        browse_parser.add_argument("--page", type=int, default=1, help="Page number (1-based)")
        browse_parser.set_defaults(func=func)

    search_parser = subparsers.add_parser("search", help="Search a site by title and genres")
    _add_site_argument(search_parser)
    search_parser.add_argument("query", nargs="?", default="", help="Title text")
    search_parser.add_argument("--genre", action="append", default=[], help="Genre id (repeatable)")
    search_parser.set_defaults(func=cmd_search)

    for name, func, help_text in (
        ("details", cmd_details, "Show series details"),
        ("chapters", cmd_chapters, "List chapters of a series"),
        ("pages", cmd_pages, "List page images of a chapter"),
    ):
        series_parser = subparsers.add_parser(name, help=help_text)
        _add_site_argument(series_parser)
        series_parser.add_argument("url", help="Host-relative URL, e.g. /series/some-title/")
        series_parser.set_defaults(func=func)

    genres_parser = subparsers.add_parser("genres", help="List genres usable as search filters")
    _add_site_argument(genres_parser)
    genres_parser.set_defaults(func=cmd_genres)
