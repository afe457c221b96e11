"""Unit tests for CLI argument parsing and the main entry point."""

import sys
from unittest.mock import patch

import pytest

from pcshop_scraper.cli import build_parser, main, read_urls_from_file


class TestParser:
    """Tests for argument defaults and choices."""

    def test_defaults(self):
        """Without flags, the default shop, output and fingerprint mode are used."""
        args = build_parser().parse_args([])

        assert args.shop == "phanna"
        assert args.output == "output"
        assert args.fingerprint == "specs"
        assert args.json_name == "output.json"
        assert args.excel_name == "output.xlsx"
        assert args.urls is None
        assert args.urls_file is None
        assert args.verbose is False

    def test_unknown_shop_rejected(self):
        """Only registered shops are accepted."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--shop", "unknown"])

    def test_unknown_fingerprint_mode_rejected(self):
        """Only the two fingerprint modes are accepted."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--fingerprint", "sku"])

    def test_urls_and_urls_file_are_exclusive(self):
        """--urls and --urls-file cannot be combined."""
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--urls", "https://a", "--urls-file", "urls.txt"])


class TestReadUrlsFromFile:
    """Tests for URL file parsing."""

    def test_skips_comments_and_blank_lines(self, tmp_path):
        """Comment lines and blank lines are ignored."""
        url_file = tmp_path / "urls.txt"
        url_file.write_text(
            "# desktops\nhttps://phannacomputershop.com/cat/new-desktop/\n\n"
            "  https://phannacomputershop.com/cat/new-laptop/  \n",
            encoding="utf-8",
        )

        assert read_urls_from_file(str(url_file)) == [
            "https://phannacomputershop.com/cat/new-desktop/",
            "https://phannacomputershop.com/cat/new-laptop/",
        ]

    def test_missing_file_raises(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="URL file not found"):
            read_urls_from_file(str(tmp_path / "missing.txt"))


@patch("pcshop_scraper.cli.setup_logging")
class TestCLIIntegration:
    """Integration tests for CLI main function."""

    @patch("pcshop_scraper.cli.scrape_and_export")
    def test_cli_passes_defaults(self, mock_scrape_and_export, mock_setup_logging):
        """CLI should pass the default options to the orchestrator."""
        mock_scrape_and_export.return_value = ([], "output/output.json", "output/output.xlsx")

        with patch.object(sys, "argv", ["cli.py"]):
            exit_code = main()

        assert exit_code == 0
        mock_setup_logging.assert_called_once_with(False)
        mock_scrape_and_export.assert_called_once_with(
            shop="phanna",
            category_urls=None,
            output_dir="output",
            fingerprint_mode="specs",
            json_filename="output.json",
            excel_filename="output.xlsx",
        )

    @patch("pcshop_scraper.cli.scrape_and_export")
    def test_cli_splits_urls(self, mock_scrape_and_export, mock_setup_logging):
        """CLI should split comma-separated URLs and pass the chosen options."""
        mock_scrape_and_export.return_value = ([], "out/a.json", "out/a.xlsx")
        test_args = [
            "cli.py",
            "--urls",
            "https://a.example/cat/1/, https://a.example/cat/2/,",
            "--fingerprint",
            "listing",
            "--output",
            "out",
            "--verbose",
        ]

        with patch.object(sys, "argv", test_args):
            exit_code = main()

        assert exit_code == 0
        mock_setup_logging.assert_called_once_with(True)
        call_kwargs = mock_scrape_and_export.call_args[1]
        assert call_kwargs["category_urls"] == [
            "https://a.example/cat/1/",
            "https://a.example/cat/2/",
        ]
        assert call_kwargs["fingerprint_mode"] == "listing"
        assert call_kwargs["output_dir"] == "out"

    @patch("pcshop_scraper.cli.scrape_and_export")
    def test_cli_reads_urls_file(self, mock_scrape_and_export, mock_setup_logging, tmp_path):
        """CLI should read category URLs from a file."""
        mock_scrape_and_export.return_value = ([], "output/output.json", "output/output.xlsx")
        url_file = tmp_path / "urls.txt"
        url_file.write_text("https://a.example/cat/1/\n", encoding="utf-8")

        with patch.object(sys, "argv", ["cli.py", "--urls-file", str(url_file)]):
            exit_code = main()

        assert exit_code == 0
        assert mock_scrape_and_export.call_args[1]["category_urls"] == ["https://a.example/cat/1/"]

    @patch("pcshop_scraper.cli.scrape_and_export")
    def test_cli_missing_urls_file_fails(
        self, mock_scrape_and_export, mock_setup_logging, tmp_path
    ):
        """CLI should exit with 1 when the URL file does not exist."""
        test_args = ["cli.py", "--urls-file", str(tmp_path / "missing.txt")]

        with patch.object(sys, "argv", test_args):
            exit_code = main()

        assert exit_code == 1
        mock_scrape_and_export.assert_not_called()

    @patch("pcshop_scraper.cli.scrape_and_export")
    def test_cli_empty_urls_file_fails(self, mock_scrape_and_export, mock_setup_logging, tmp_path):
        """CLI should exit with 1 when the URL file has no URLs."""
        url_file = tmp_path / "urls.txt"
        url_file.write_text("# nothing here\n", encoding="utf-8")

        with patch.object(sys, "argv", ["cli.py", "--urls-file", str(url_file)]):
            exit_code = main()

        assert exit_code == 1
        mock_scrape_and_export.assert_not_called()

    @patch("pcshop_scraper.cli.scrape_and_export")
    def test_cli_returns_1_on_failure(self, mock_scrape_and_export, mock_setup_logging):
        """CLI should exit with 1 when the pipeline raises."""
        mock_scrape_and_export.side_effect = ValueError("Scraping failed for all pages")

        with patch.object(sys, "argv", ["cli.py"]):
            exit_code = main()

        assert exit_code == 1
