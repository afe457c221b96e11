"""Command-line interface for the shop scraper.

Usage:
    python -m pcshop_scraper.cli --shop phanna
    python -m pcshop_scraper.cli --shop phanna --urls https://phannacomputershop.com/cat/new-laptop/
    python -m pcshop_scraper.cli --shop phanna --urls-file urls.txt
"""

import argparse
import sys
from pathlib import Path

from loguru import logger

from pcshop_scraper.orchestrator import scrape_and_export
from pcshop_scraper.scrapers.registry import DEFAULT_SHOP, get_available_shops


def setup_logging(verbose: bool = False) -> None:
    """Configure loguru logging.

    Args:
        verbose: Whether to enable debug logging
    """
    logger.remove()  # Remove default handler

    log_level = "DEBUG" if verbose else "INFO"
    log_format = (
        "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
        "<level>{level: <8}</level> | "
        "<cyan>{name}</cyan>:<cyan>{function}</cyan> - "
        "<level>{message}</level>"
    )

    logger.add(sys.stderr, format=log_format, level=log_level, colorize=True)
    logger.add(
        "logs/scraper_{time:YYYY-MM-DD}.log",
        format=log_format,
        level="DEBUG",
        rotation="1 day",
        retention="30 days",
    )


def read_urls_from_file(file_path: str) -> list[str]:
    """Read category URLs from text file (one per line, # for comments).

    Raises:
        FileNotFoundError: If file doesn't exist
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"URL file not found: {file_path}")

    with open(path, "r", encoding="utf-8") as f:
        urls = [line.strip() for line in f if line.strip() and not line.startswith("#")]

    return urls


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Scrape computer shop category pages into JSON and XLSX",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scrape the shop's default category pages
  python -m pcshop_scraper.cli --shop phanna

  # Scrape specific category pages
  python -m pcshop_scraper.cli --shop phanna --urls https://phannacomputershop.com/cat/new-laptop/

  # Read URLs from file and show the browser
  HEADLESS=false python -m pcshop_scraper.cli --shop phanna --urls-file urls.txt
        """,
    )

    parser.add_argument(
        "--shop",
        "-s",
        default=DEFAULT_SHOP,
        choices=get_available_shops(),
        help=f"Shop to scrape (default: {DEFAULT_SHOP})",
    )

    url_group = parser.add_mutually_exclusive_group()
    url_group.add_argument(
        "--urls",
        "-u",
        help="Comma-separated list of category URLs (default: the shop's own list)",
    )
    url_group.add_argument(
        "--urls-file",
        "-f",
        help="Path to file containing category URLs (one per line)",
    )

    parser.add_argument(
        "--output",
        "-o",
        default="output",
        help="Output directory (default: output)",
    )

    parser.add_argument(
        "--fingerprint",
        choices=["specs", "listing"],
        default="specs",
        help=(
            "Identity fields for product codes: 'specs' uses name, category and "
            "hardware specs; 'listing' uses name, price, category and image (default: specs)"
        ),
    )

    parser.add_argument("--json-name", default="output.json", help="JSON filename")
    parser.add_argument("--excel-name", default="output.xlsx", help="Excel filename")

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose debug logging",
    )

    return parser


def main() -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = build_parser().parse_args()

    setup_logging(args.verbose)

    category_urls = None
    if args.urls:
        category_urls = [url.strip() for url in args.urls.split(",") if url.strip()]
    elif args.urls_file:
        try:
            category_urls = read_urls_from_file(args.urls_file)
        except FileNotFoundError as e:
            logger.error(str(e))
            return 1
        if not category_urls:
            logger.error(f"No URLs found in {args.urls_file}")
            return 1

    try:
        records, json_path, excel_path = scrape_and_export(
            shop=args.shop,
            category_urls=category_urls,
            output_dir=args.output,
            fingerprint_mode=args.fingerprint,
            json_filename=args.json_name,
            excel_filename=args.excel_name,
        )

        logger.success(f"Successfully scraped {len(records)} products!")
        logger.info(f"JSON: {json_path}")
        logger.info(f"Excel: {excel_path}")

        return 0

    except Exception as e:
        logger.exception(f"Scraping failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
