"""Abstract base class for shop-specific scrapers.

Shared browser lifecycle in the base class, page reading in subclasses.
"""

import os
import time
from abc import ABC, abstractmethod
from typing import Optional

from playwright.sync_api import sync_playwright, Browser, Page, Playwright
from loguru import logger

from pcshop_scraper.models import CategoryUrl, RawProduct, ScraperConfig


class BaseScraper(ABC):
    """Abstract base class providing common scraping functionality.

    Subclasses must implement:
    - scrape_page(url) - Read every product card of one category page
    """

    def __init__(self, config: ScraperConfig):
        """Initialize scraper with configuration.

        Args:
            config: Scraper configuration including category URLs and timeouts
        """
        self.config = config
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._page: Optional[Page] = None

    def setup_browser(self, headless: bool | None = None) -> Page:
        """Initialize Playwright browser and return page instance.

        Args:
            headless: Whether to run browser in headless mode
                (default: config.headless, overridden by HEADLESS=false)

        Returns:
            Playwright Page instance
        """
        if self._page is not None:
            return self._page

        if headless is None:
            headless = self.config.headless and os.getenv("HEADLESS", "true").lower() != "false"

        self._playwright = sync_playwright().start()
        self._browser = self._playwright.chromium.launch(headless=headless)
        self._page = self._browser.new_page()
        self._page.set_default_timeout(self.config.timeout * 1000)

        logger.info(f"Browser initialized for {self.config.shop}")
        return self._page

    def teardown_browser(self) -> None:
        """Close browser and cleanup resources."""
        if self._page:
            self._page.close()
        if self._browser:
            self._browser.close()
        if self._playwright:
            self._playwright.stop()

        self._page = None
        self._browser = None
        self._playwright = None

        logger.info(f"Browser closed for {self.config.shop}")

    def rate_limit(self) -> None:
        """Apply rate limiting between page loads."""
        time.sleep(self.config.rate_limit_delay)

    @abstractmethod
    def scrape_page(self, url: CategoryUrl) -> list[RawProduct]:
        """Read all products of one category page in DOM order.

        Must be implemented by each shop scraper. A page that fails to load
        yields an empty list instead of raising.

        Args:
            url: Category page URL

        Returns:
            Raw products found on the page
        """
        pass

    def __enter__(self):
        """Context manager entry - setup browser."""
        self.setup_browser()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - teardown browser."""
        self.teardown_browser()
