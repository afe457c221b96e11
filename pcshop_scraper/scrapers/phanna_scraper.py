"""phannacomputershop.com category page scraper.

Reads product cards into RawProduct values; all text interpretation happens
in the parsing pipeline.
"""

import re
from typing import Optional

from loguru import logger
from playwright.sync_api import (
    ElementHandle,
    Error as PlaywrightError,
    Page,
    TimeoutError as PlaywrightTimeout,
)

from pcshop_scraper.models import (
    CategoryUrl,
    ImageUrl,
    RawProduct,
    ScraperConfig,
    ShopName,
)
from pcshop_scraper.scrapers.base_scraper import BaseScraper


DEFAULT_CATEGORY_URLS = [
    CategoryUrl("https://phannacomputershop.com/cat/desktop-all-in-1/"),
    CategoryUrl("https://phannacomputershop.com/cat/new-desktop/"),
    CategoryUrl("https://phannacomputershop.com/cat/new-laptop/"),
    CategoryUrl("https://phannacomputershop.com/cat/used-laptop/"),
    CategoryUrl("https://phannacomputershop.com/cat/used-desktop/"),
    CategoryUrl("https://phannacomputershop.com/cat/pc-part/"),
]

# Turns every <li> of the spec block into text lines, splitting on <br>
_LIST_ITEM_LINES_JS = r"""
els => els.flatMap(li => {
    const withBreaks = (li.innerHTML || '').replace(/<br\s*\/?>/gi, '\n');
    const container = document.createElement('div');
    container.innerHTML = withBreaks;
    return (container.textContent || '')
        .trim()
        .split(/\r?\n/)
        .map(s => s.trim())
        .filter(Boolean);
})
"""


def title_case_category(text: Optional[str]) -> Optional[str]:
    """Capitalize each word and each hyphenated part ("NEW-LAPTOP pc" -> "New-Laptop Pc")."""
    if not text or not text.strip():
        return None

    def _title_word(word: str) -> str:
        return "-".join(part[:1].upper() + part[1:].lower() for part in word.split("-"))

    return " ".join(_title_word(word) for word in text.split())


def parse_brand(section_title: Optional[str]) -> Optional[str]:
    """Brand is the section title text before the first hyphen."""
    if not section_title:
        return None
    brand = section_title.split("-")[0].strip()
    return brand or None


def split_block_text(text: Optional[str]) -> list[str]:
    """Split a text block into trimmed, non-empty lines."""
    if not text:
        return []
    return [line.strip() for line in re.split(r"\r?\n", text.strip()) if line.strip()]


def _element_text(element: Optional[ElementHandle]) -> Optional[str]:
    if element is None:
        return None
    text = element.text_content()
    return text.strip() if text else None


class PhannaScraper(BaseScraper):
    """Scraper for phannacomputershop.com category pages."""

    CATEGORY_LINK_SELECTOR = ".container-fluid.clearfix .menu-main-menu-container ul li a"
    SECTION_SELECTOR = ".site-content .container"
    BRAND_SELECTOR = ".section-title h2 span"
    PRODUCT_SELECTOR = ".product-item"
    TITLE_SELECTOR = ".title-and-rating h2"
    SPEC_BLOCK_SELECTOR = ".list"
    PRICE_SELECTOR = ".price .sale-price"
    LINK_SELECTOR = ".head a"

    def __init__(self, category_urls: list[CategoryUrl] | None = None):
        """Initialize scraper with the shop's default configuration."""
        config = ScraperConfig(
            shop=ShopName("phanna"),
            base_url="https://phannacomputershop.com",
            category_urls=list(category_urls or DEFAULT_CATEGORY_URLS),
            rate_limit_delay=1.0,
            timeout=120,
        )
        super().__init__(config)

    def _ensure_browser(self) -> Page:
        """Ensure browser is initialized and ready for use."""
        if self._page is None:
            self.setup_browser()
        assert self._page is not None
        return self._page

    def scrape_page(self, url: CategoryUrl) -> list[RawProduct]:
        """Read all product cards of a category page.

        Args:
            url: Category page URL

        Returns:
            Raw products in DOM order (empty if the page fails to load)
        """
        page = self._ensure_browser()
        logger.info(f"Processing {url}")

        try:
            page.goto(url, wait_until="load", timeout=self.config.timeout * 1000)
        except (PlaywrightTimeout, PlaywrightError) as e:
            logger.error(f"Failed to load {url}: {e}")
            return []

        category = self._extract_category(page)
        products: list[RawProduct] = []

        for section in page.query_selector_all(self.SECTION_SELECTOR):
            brand = parse_brand(_element_text(section.query_selector(self.BRAND_SELECTOR)))

            for card in section.query_selector_all(self.PRODUCT_SELECTOR):
                try:
                    products.append(self._extract_product(card, brand, category))
                except PlaywrightError as e:
                    logger.warning(f"Failed to read product card on {url}: {e}")

        logger.info(f"Found {len(products)} products on {url}")
        return products

    def _extract_category(self, page: Page) -> Optional[str]:
        """Category name from the menu link marked as the current page."""
        for link in page.query_selector_all(self.CATEGORY_LINK_SELECTOR):
            if link.get_attribute("aria-current") == "page":
                return title_case_category(_element_text(link.query_selector("span")))
        return None

    def _extract_product(
        self, card: ElementHandle, brand: Optional[str], category: Optional[str]
    ) -> RawProduct:
        spec_lines, raw_markup = self._extract_spec_block(card)

        link = card.query_selector(self.LINK_SELECTOR)
        image = link.get_attribute("href") if link else None
        link_title = None
        if link:
            link_title = (link.get_attribute("title") or _element_text(link) or "").strip() or None

        return RawProduct(
            spec_lines=spec_lines,
            visible_title=_element_text(card.query_selector(self.TITLE_SELECTOR)),
            brand=brand,
            category=category,
            price=_element_text(card.query_selector(self.PRICE_SELECTOR)) or "",
            image=ImageUrl(image) if image else None,
            raw_markup=raw_markup,
            link_title=link_title,
        )

    def _extract_spec_block(self, card: ElementHandle) -> tuple[list[str], Optional[str]]:
        """Raw text lines and inner HTML of the card's spec list."""
        block = card.query_selector(self.SPEC_BLOCK_SELECTOR)
        if block is None:
            return [], None

        raw_markup = block.inner_html()
        lines = block.eval_on_selector_all("li", _LIST_ITEM_LINES_JS) or []
        if not lines:
            lines = split_block_text(block.text_content())

        return list(lines), raw_markup
