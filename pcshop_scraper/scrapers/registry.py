"""Shop name to scraper class lookup.

The CLI offers exactly the shops listed here; a new shop needs a
BaseScraper subclass and one entry in SCRAPER_REGISTRY.
"""

from typing import Type

from pcshop_scraper.scrapers.base_scraper import BaseScraper
from pcshop_scraper.scrapers.phanna_scraper import PhannaScraper

DEFAULT_SHOP = "phanna"

SCRAPER_REGISTRY: dict[str, Type[BaseScraper]] = {
    DEFAULT_SHOP: PhannaScraper,
}


def get_scraper_class(shop: str) -> Type[BaseScraper]:
    """Scraper class registered for ``shop`` (case-insensitive).

    Raises:
        ValueError: If no scraper is registered for the shop
    """
    scraper_class = SCRAPER_REGISTRY.get(shop.strip().lower())
    if scraper_class is None:
        raise ValueError(f"Unknown shop: {shop}. Available: {', '.join(get_available_shops())}")
    return scraper_class


def get_available_shops() -> list[str]:
    """Registered shop names, sorted for stable CLI choices."""
    return sorted(SCRAPER_REGISTRY)
