"""
CSV loading into the rows-of-mappings data model.

Polars does the decoding only: every column is read as text and typing is
left to column inference, so a stray "n/a" or "2.5" anywhere in a column can
never fail the load. Empty fields are read as nulls.
"""

import io
import logging
from pathlib import Path
from typing import Any

import polars as pl

logger = logging.getLogger(__name__)


def _read_text_columns(source: Path | io.BytesIO) -> pl.DataFrame:
    # infer_schema=False reads every column as String
    return pl.read_csv(source, infer_schema=False)


def load_csv_rows(path: str | Path) -> list[dict[str, Any]]:
    """
    Load a CSV file with a header row.

    Args:
        path: Path to CSV file

    Returns:
        List of row dicts with text cells (empty list for an empty file or header-only file)

    Raises:
        FileNotFoundError: If the file does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")

    try:
        df = _read_text_columns(path)
    except pl.exceptions.NoDataError:
        logger.warning(f"CSV file {path} is empty")
        return []

    logger.info(f"Loaded {df.height} rows x {df.width} columns from {path.name}")
    return df.to_dicts()


def load_csv_text(text: str) -> list[dict[str, Any]]:
    """
    Decode CSV text with a header row.

    Args:
        text: CSV content

    Returns:
        List of row dicts with text cells (empty list for empty input)
    """
    if not text.strip():
        return []

    try:
        df = _read_text_columns(io.BytesIO(text.encode("utf-8")))
    except pl.exceptions.NoDataError:
        return []

    return df.to_dicts()
