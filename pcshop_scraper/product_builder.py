"""Turn scraped products into finished records.

Following the pipeline order: normalize lines, resolve attributes, compose the
name, assign the code. Pure apart from the run-scoped CodeRegistry.
"""

from dataclasses import dataclass, field
from typing import Optional

from loguru import logger

from pcshop_scraper.identity.code_registry import CodeRegistry, fingerprint_for
from pcshop_scraper.models import (
    FingerprintMode,
    ProductCode,
    ProductRecord,
    RawProduct,
)
from pcshop_scraper.parsing.name_composer import derive_product_name
from pcshop_scraper.parsing.normalizer import clean_value, normalize_line
from pcshop_scraper.parsing.resolvers import resolve_attributes


def normalize_spec_lines(raw_lines: Optional[list[str]]) -> list[str]:
    """Normalize description lines and drop the empty ones."""
    if not raw_lines:
        return []
    normalized = (normalize_line(line) for line in raw_lines)
    return [line for line in normalized if line]


def build_record(
    raw: RawProduct,
    registry: CodeRegistry,
    fingerprint_mode: FingerprintMode = "specs",
) -> Optional[ProductRecord]:
    """Run the extraction pipeline for one scraped product.

    Args:
        raw: Product fields read from the page
        registry: Code registry of the current run
        fingerprint_mode: Which identity fields make up the fingerprint

    Returns:
        Finished record, or None if the product has no derivable name
    """
    lines = normalize_spec_lines(raw.spec_lines)
    attributes = resolve_attributes(lines)

    name = derive_product_name(lines, raw, attributes)
    if not name:
        logger.debug("Skipping product without a derivable name")
        return None

    price = clean_value(raw.price)
    fingerprint = fingerprint_for(
        fingerprint_mode,
        name,
        raw.category,
        attributes,
        price=price,
        image=raw.image,
    )
    code = registry.code_for(fingerprint)

    return ProductRecord(
        code=code,
        name=f"{name} - {code}",
        base_name=name,
        brand=raw.brand,
        category=raw.category,
        price=price,
        image=raw.image,
        spec_lines=lines,
        raw_markup=raw.raw_markup,
        attributes=attributes,
    )


@dataclass
class ProductCollector:
    """Ordered result list with first-seen-wins deduplication by code."""

    records: list[ProductRecord] = field(default_factory=list)
    pushed_codes: set[ProductCode] = field(default_factory=set)
    duplicates: int = 0

    def add(self, record: ProductRecord) -> bool:
        """Append a record unless its code was already pushed.

        Returns:
            True if the record was added, False if dropped as a duplicate
        """
        if record.code in self.pushed_codes:
            self.duplicates += 1
            logger.debug(f"Skipping duplicate product {record.code}: {record.base_name}")
            return False

        self.pushed_codes.add(record.code)
        self.records.append(record)
        return True


@dataclass
class RunContext:
    """State of one scraping run, owned by the caller that drives the run."""

    fingerprint_mode: FingerprintMode = "specs"
    registry: CodeRegistry = field(default_factory=CodeRegistry)
    collector: ProductCollector = field(default_factory=ProductCollector)
    skipped: int = 0

    def process(self, raw: RawProduct) -> Optional[ProductRecord]:
        """Build a record for ``raw`` and collect it.

        Returns:
            The record if it was added to the results, else None
        """
        record = build_record(raw, self.registry, self.fingerprint_mode)
        if record is None:
            self.skipped += 1
            return None
        return record if self.collector.add(record) else None

    @property
    def records(self) -> list[ProductRecord]:
        return self.collector.records
