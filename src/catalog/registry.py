"""Site registry: built-in sites plus user-added sites persisted as JSON."""

import json
import logging
from pathlib import Path
from typing import Dict, Optional

from .config import ChapterEndpoint, PaginationMode, SiteConfig
from .sites.keyoapp import keyoapp_site
from .sites.legendsnofansub import LEGENDS_NO_FANSUB
from .sites.madara import madara_site
from .sites.topmanhua import TOP_MANHUA

logger = logging.getLogger(__name__)

REGISTRY_PATH = Path("data") / "sites.json"

BUILTIN_SITES: Dict[str, SiteConfig] = {
    config.site_id: config for config in (TOP_MANHUA, LEGENDS_NO_FANSUB)
}

SITE_TYPES = ("keyoapp", "madara")


def load_sites(path: Path = REGISTRY_PATH) -> Dict[str, dict]:
    """Load user-registered sites from disk.

    Returns:
        Dict mapping site_id to site definition
    """
    if not path.exists():
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to load site registry %s: %s", path, e)
        return {}


def save_sites(sites: Dict[str, dict], path: Path = REGISTRY_PATH) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(sites, f, indent=2, ensure_ascii=False)
    except OSError as e:
        logger.error("Failed to save site registry %s: %s", path, e)
        raise


def add_site(site_id: str, site_type: str, name: str, base_url: str, language: str,
             path: Path = REGISTRY_PATH, **kwargs) -> None:
    """Add or update a user site.

    Args:
        site_id: Unique identifier for the site
        site_type: Theme family ("keyoapp" or "madara")
        name: Display name
        base_url: Site root, e.g. https://example.com
        language: Language code
        **kwargs: Optional SiteConfig fields (date_format, pagination, manga_path,
            filter_non_manga_items, chapter_endpoint)
    """
    if site_type not in SITE_TYPES:
        raise ValueError(f"Unknown site type: {site_type}")

    sites = load_sites(path)
    sites[site_id] = {
        "type": site_type,
        "name": name,
        "base_url": base_url,
        "language": language,
        **{key: value for key, value in kwargs.items() if value is not None},
    }
    save_sites(sites, path)


def remove_site(site_id: str, path: Path = REGISTRY_PATH) -> bool:
    """Remove a user site. Returns False if it was not registered."""
    sites = load_sites(path)

    if site_id in sites:
        del sites[site_id]
        save_sites(sites, path)
        return True

    return False


def config_from_entry(entry: dict) -> SiteConfig:
    """Build a SiteConfig from a registry entry."""
    entry = dict(entry)
    site_type = entry.pop("type", None)
    if "pagination" in entry:
        entry["pagination"] = PaginationMode(entry["pagination"])
    if "chapter_endpoint" in entry:
        entry["chapter_endpoint"] = ChapterEndpoint(entry["chapter_endpoint"])

    if site_type == "keyoapp":
        return keyoapp_site(**entry)
    if site_type == "madara":
        return madara_site(**entry)
    raise ValueError(f"Unknown site type: {site_type}")


def get_site(site_id: str, path: Path = REGISTRY_PATH) -> Optional[SiteConfig]:
    """Look up a site by id; user sites shadow built-in ones."""
    entry = load_sites(path).get(site_id)
    if entry is not None:
        return config_from_entry(entry)
    return BUILTIN_SITES.get(site_id)


def list_sites(path: Path = REGISTRY_PATH) -> Dict[str, SiteConfig]:
    """All known sites, built-in first."""
    sites = dict(BUILTIN_SITES)
    for site_id, entry in load_sites(path).items():
        try:
            sites[site_id] = config_from_entry(entry)
        except (TypeError, ValueError) as e:
            logger.warning("Skipping invalid site %s: %s", site_id, e)
    return sites
