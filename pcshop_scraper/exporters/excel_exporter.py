"""Excel XLSX exporter in the shop's product import layout.

Following the import template: 28 fixed columns, one row per product.
"""

import json
import re
from pathlib import Path
from typing import Any

import pandas as pd
from loguru import logger

from pcshop_scraper.models import ProductRecord


IMPORT_COLUMNS = [
    "_id",
    "ID",
    "Code",
    "Name",
    "Price",
    "In Stock",
    "Image",
    "Images",
    "Category",
    "Item Type",
    "Description",
    "Published",
    "Price ID 1",
    "Barcode 1",
    "Price 1",
    "Currency 1",
    "Unit Name 1",
    "Unit Rank 1",
    "Unit Size 1",
    "Type 1",
    "Price ID 2",
    "Barcode 2",
    "Price 2",
    "Currency 2",
    "Unit Name 2",
    "Unit Rank 2",
    "Unit Size 2",
    "Type 2",
]

SHEET_NAME = "Sheet1"
MAX_COLUMN_WIDTH = 50


def parse_price_number(price: str | None) -> str:
    """Keep only digits and dots of a displayed price ("$1,299.00" -> "1299.00")."""
    if not price:
        return ""
    return re.sub(r"[^0-9.]", "", str(price))


def build_description_html(record: ProductRecord) -> str:
    """Raw markup of the spec block, else a bullet list of the spec lines."""
    if record.raw_markup:
        return record.raw_markup
    if record.spec_lines:
        items = "".join(f"<li>{line}</li>" for line in record.spec_lines)
        return f"<ul>{items}</ul>"
    return ""


def _record_to_import_row(record: ProductRecord, row_number: int) -> dict[str, Any]:
    """Convert a record to one import sheet row.

    Args:
        record: Finished product record
        row_number: 1-based position in the result list

    Returns:
        Dictionary keyed by import column name
    """
    row: dict[str, Any] = {column: "" for column in IMPORT_COLUMNS}
    row.update(
        {
            "ID": row_number,
            "Code": record.code,
            "Name": record.name,
            "Price": parse_price_number(record.price),
            "In Stock": 0,
            "Image": record.image or "",
            "Images": json.dumps([str(record.image)]) if record.image else "",
            "Category": record.category or "",
            "Item Type": "simple",
            "Description": build_description_html(record),
            "Published": 1,
        }
    )
    return row


def export_to_excel(
    records: list[ProductRecord], output_path: str = "output/output.xlsx"
) -> Path:
    """Export records to an XLSX sheet with the 28 import columns.

    Args:
        records: Finished records in result order
        output_path: Path to output XLSX file

    Returns:
        Path to created XLSX file

    Raises:
        ValueError: If records list is empty
    """
    if not records:
        raise ValueError("Cannot export empty product list")

    rows = [_record_to_import_row(record, idx) for idx, record in enumerate(records, start=1)]
    df = pd.DataFrame(rows, columns=IMPORT_COLUMNS)

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with pd.ExcelWriter(output_file, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=SHEET_NAME, index=False)

        # Auto-adjust column widths
        worksheet = writer.sheets[SHEET_NAME]
        for column in worksheet.columns:
            max_length = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
            worksheet.column_dimensions[column[0].column_letter].width = min(
                max_length + 2, MAX_COLUMN_WIDTH
            )

    logger.info(f"Exported {len(records)} products to {output_file}")
    return output_file
