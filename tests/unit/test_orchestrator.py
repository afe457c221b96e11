"""Unit tests for the scraping orchestrator with a stand-in scraper."""

import json
from unittest.mock import patch

import pytest

from pcshop_scraper.models import CategoryUrl, RawProduct, ScraperConfig, ShopName
from pcshop_scraper.orchestrator import ScraperOrchestrator, scrape_and_export

DESKTOP = RawProduct(
    spec_lines=["Gaming PC", "CPU: Ryzen 5 5600", "RAM: 16GB", "M2: 1TB"],
    category="New Desktop",
    price="$899",
)
LAPTOP = RawProduct(
    spec_lines=["Laptop A", "Processor", "Intel Core i5", "Memory", "8GB DDR4"],
    category="New Laptop",
    price="$650",
)

PAGES = {
    "https://shop.example/cat/desktop/": [DESKTOP, RawProduct()],
    "https://shop.example/cat/broken/": RuntimeError("page crashed"),
    "https://shop.example/cat/laptop/": [LAPTOP, DESKTOP],
}


class FakeScraper:
    """Serves canned pages instead of driving a browser."""

    instances: list["FakeScraper"] = []

    def __init__(self, category_urls=None):
        self.config = ScraperConfig(
            shop=ShopName("fake"),
            base_url="https://shop.example",
            category_urls=list(category_urls or [CategoryUrl(url) for url in PAGES]),
            rate_limit_delay=0,
        )
        self.visited: list[str] = []
        self.rate_limited = 0
        self.closed = False
        FakeScraper.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.closed = True

    def rate_limit(self):
        self.rate_limited += 1

    def scrape_page(self, url):
        self.visited.append(url)
        page = PAGES[url]
        if isinstance(page, Exception):
            raise page
        return list(page)


@pytest.fixture
def fake_scraper():
    """Patch the registry lookup to return the fake scraper."""
    FakeScraper.instances = []
    with patch("pcshop_scraper.orchestrator.get_scraper_class", return_value=FakeScraper) as mock:
        yield mock


@pytest.mark.unit
class TestScrapeProducts:
    """Test one run over several category pages."""

    def test_run_collects_across_pages(self, fake_scraper):
        """Should process pages in order, skip failures and drop repeats."""
        context = ScraperOrchestrator().scrape_products("Fake")

        fake_scraper.assert_called_once_with("fake")
        scraper = FakeScraper.instances[0]
        assert scraper.visited == list(PAGES)
        assert scraper.rate_limited == 2
        assert scraper.closed is True

        assert [record.base_name for record in context.records] == [
            "Gaming PC Ryzen 5 5600 16GB M.2 1TB",
            "Laptop A Intel Core i5 DDR4 8GB",
        ]
        assert context.collector.duplicates == 1
        assert context.skipped == 1

    def test_custom_urls(self, fake_scraper):
        """Should only visit the given category URLs."""
        context = ScraperOrchestrator().scrape_products(
            "fake", ["https://shop.example/cat/laptop/"]
        )

        assert FakeScraper.instances[0].visited == ["https://shop.example/cat/laptop/"]
        assert len(context.records) == 2

    def test_unknown_shop_raises(self):
        """Should propagate the registry error for unknown shops."""
        with pytest.raises(ValueError, match="Unknown shop"):
            ScraperOrchestrator().scrape_products("nowhere")


@pytest.mark.unit
class TestRunFullPipeline:
    """Test scraping followed by export."""

    def test_scrape_and_export_writes_both_files(self, fake_scraper, tmp_path):
        """Should write JSON and XLSX with the collected records."""
        records, json_path, excel_path = scrape_and_export(
            "fake", output_dir=str(tmp_path), fingerprint_mode="listing"
        )

        assert len(records) == 2
        assert json_path.exists()
        assert excel_path.exists()
        data = json.loads(json_path.read_text(encoding="utf-8"))
        assert [item["code"] for item in data] == [record.code for record in records]

    def test_no_products_raises(self, fake_scraper, tmp_path):
        """Should fail when every page failed or was empty."""
        with pytest.raises(ValueError, match="Scraping failed for all pages"):
            ScraperOrchestrator().run_full_pipeline(
                "fake", ["https://shop.example/cat/broken/"], output_dir=str(tmp_path)
            )

    def test_export_empty_raises(self, tmp_path):
        """Should refuse to export an empty record list."""
        with pytest.raises(ValueError, match="empty"):
            ScraperOrchestrator().export_products([], str(tmp_path))
