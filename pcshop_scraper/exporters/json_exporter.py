"""JSON exporter for finished product records."""

import json
import os
import tempfile
from pathlib import Path

from loguru import logger

from pcshop_scraper.models import ProductRecord


def export_to_json(
    records: list[ProductRecord], output_path: str = "output/output.json"
) -> Path:
    """Write all records to a JSON file atomically (temp file + rename).

    Args:
        records: Finished records in result order
        output_path: Destination file path

    Returns:
        Path to created JSON file

    Raises:
        ValueError: If records list is empty
        RuntimeError: If the file cannot be written or moved into place
    """
    if not records:
        raise ValueError("Cannot export empty product list")

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_path = tempfile.mkstemp(dir=output_file.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp_file:
            json.dump(
                [record.to_dict() for record in records], tmp_file, indent=2, ensure_ascii=False
            )
        os.replace(tmp_path, output_file)
    except Exception as e:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        if isinstance(e, OSError):
            raise RuntimeError(f"Failed to write JSON to {output_file}: {e}") from e
        raise

    logger.info(f"Exported {len(records)} products to {output_file}")
    return output_file
