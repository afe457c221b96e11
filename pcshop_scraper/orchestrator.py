"""Orchestrator for managing the scraping workflow.

One run covers every configured category URL: pages are read in URL order,
products in DOM order, and all of them share one RunContext.
"""

from pathlib import Path

from loguru import logger

from pcshop_scraper.exporters.excel_exporter import export_to_excel
from pcshop_scraper.exporters.json_exporter import export_to_json
from pcshop_scraper.models import CategoryUrl, FingerprintMode, ProductRecord
from pcshop_scraper.product_builder import RunContext
from pcshop_scraper.scrapers.registry import get_scraper_class


class ScraperOrchestrator:
    """Coordinates scraping, record building and export."""

    def __init__(self, fingerprint_mode: FingerprintMode = "specs"):
        """Initialize orchestrator.

        Args:
            fingerprint_mode: Identity fields used for product codes
        """
        self.fingerprint_mode = fingerprint_mode

    def scrape_products(
        self,
        shop: str,
        category_urls: list[str] | None = None,
    ) -> RunContext:
        """Scrape all category pages of a shop into one run.

        Args:
            shop: Shop name (e.g., 'phanna')
            category_urls: Category pages to read (default: the shop's own list)

        Returns:
            Run context holding the deduplicated records

        Raises:
            ValueError: If shop is not supported
        """
        scraper_class = get_scraper_class(shop.lower())
        urls = [CategoryUrl(url) for url in category_urls] if category_urls else None
        context = RunContext(fingerprint_mode=self.fingerprint_mode)

        with scraper_class(category_urls=urls) as scraper:
            configured_urls = scraper.config.category_urls
            logger.info(f"Starting scrape of {len(configured_urls)} pages from {shop}")

            for position, url in enumerate(configured_urls):
                if position > 0:
                    scraper.rate_limit()

                try:
                    raw_products = scraper.scrape_page(url)
                except Exception as e:
                    logger.error(f"✗ Failed to scrape {url}: {e}")
                    continue

                added = sum(1 for raw in raw_products if context.process(raw) is not None)
                logger.info(f"✓ {url}: {added}/{len(raw_products)} products added")

        logger.info(
            f"Scraping complete: {len(context.records)} products, "
            f"{context.collector.duplicates} duplicates dropped, "
            f"{context.skipped} without name"
        )
        return context

    def export_products(
        self,
        records: list[ProductRecord],
        output_dir: str = "output",
        json_filename: str = "output.json",
        excel_filename: str = "output.xlsx",
    ) -> tuple[Path, Path]:
        """Export records to JSON and XLSX.

        Args:
            records: Finished records in result order
            output_dir: Output directory path
            json_filename: JSON filename
            excel_filename: Excel filename

        Returns:
            Tuple of (json_path, excel_path)

        Raises:
            ValueError: If records list is empty
        """
        if not records:
            raise ValueError("Cannot export empty product list")

        json_path = export_to_json(records, f"{output_dir}/{json_filename}")
        excel_path = export_to_excel(records, f"{output_dir}/{excel_filename}")

        logger.info(f"Export complete: {json_path} and {excel_path}")
        return json_path, excel_path

    def run_full_pipeline(
        self,
        shop: str,
        category_urls: list[str] | None = None,
        output_dir: str = "output",
        json_filename: str = "output.json",
        excel_filename: str = "output.xlsx",
    ) -> tuple[list[ProductRecord], Path, Path]:
        """Run complete scraping and export pipeline.

        Returns:
            Tuple of (records, json_path, excel_path)

        Raises:
            ValueError: If no product could be scraped
        """
        logger.info("=" * 60)
        logger.info(f"Starting full pipeline for {shop}")
        if category_urls:
            logger.info(f"Category URLs: {category_urls}")
        logger.info(f"Fingerprint mode: {self.fingerprint_mode}")
        logger.info("=" * 60)

        context = self.scrape_products(shop, category_urls)

        if not context.records:
            logger.warning("No products were successfully scraped")
            raise ValueError("Scraping failed for all pages")

        json_path, excel_path = self.export_products(
            context.records, output_dir, json_filename, excel_filename
        )

        logger.info("=" * 60)
        logger.info("Pipeline complete!")
        logger.info(f"Products scraped: {len(context.records)}")
        logger.info(f"JSON: {json_path}")
        logger.info(f"Excel: {excel_path}")
        logger.info("=" * 60)

        return context.records, json_path, excel_path


def scrape_and_export(
    shop: str,
    category_urls: list[str] | None = None,
    output_dir: str = "output",
    fingerprint_mode: FingerprintMode = "specs",
    json_filename: str = "output.json",
    excel_filename: str = "output.xlsx",
) -> tuple[list[ProductRecord], Path, Path]:
    """Convenience function for running the full scraping pipeline.

    Args:
        shop: Shop name (e.g., 'phanna')
        category_urls: Category pages to read (default: the shop's own list)
        output_dir: Output directory
        fingerprint_mode: Identity fields used for product codes
        json_filename: JSON filename
        excel_filename: Excel filename

    Returns:
        Tuple of (records, json_path, excel_path)
    """
    orchestrator = ScraperOrchestrator(fingerprint_mode=fingerprint_mode)
    return orchestrator.run_full_pipeline(
        shop,
        category_urls,
        output_dir,
        json_filename,
        excel_filename,
    )
