"""
Column Type Inference - classify a column of raw cell values and summarise it.

Works on raw text cells as produced by the CSV loader or on pre-typed Python
values (numbers, booleans, dates). Inference is a uniformity check in fixed
precedence order: number, boolean, date, then string. Column statistics are
computed with polars.

Key Principles:
- One explicit, total coercion rule for numbers (no partial parses)
- Never raise on cell content; unparseable values fall through to string
- Bounded output (category counts only for low-cardinality columns)
"""

import math
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Literal

import polars as pl

from data_chat.core.analysis_config import (
    CATEGORY_VALUE_COUNT_LIMIT,
    DATE_FORMATS,
    SAMPLE_VALUE_LIMIT,
)

__all__ = [
    "ColumnProfile",
    "ColumnType",
    "coerce_number",
    "infer_column",
    "is_boolean_value",
    "is_date_value",
    "is_missing",
]

ColumnType = Literal["number", "boolean", "date", "string", "unknown"]

# Full decimal literal: optional sign, digits with optional fraction (or bare fraction), optional exponent
_DECIMAL_LITERAL = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class ColumnProfile:
    """
    Read-only summary of one column.

    Attributes:
        type: Inferred column type
        non_null_count: Number of non-missing values
        null_count: Number of missing values (None or empty string)
        sample_values: First non-null values in encounter order
        min: Minimum (number columns only)
        max: Maximum (number columns only)
        average: Arithmetic mean of non-null values (number columns only)
        unique_value_count: Distinct value count (string columns only)
        value_counts: Value -> occurrence count (string columns at or below the category limit)
    """

    type: ColumnType
    non_null_count: int
    null_count: int
    sample_values: tuple[Any, ...] = ()
    min: float | None = None
    max: float | None = None
    average: float | None = None
    unique_value_count: int | None = None
    value_counts: dict[Any, int] | None = None

    @property
    def is_numeric(self) -> bool:
        return self.type == "number"

    @property
    def is_string(self) -> bool:
        return self.type == "string"

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict, omitting statistics that do not apply."""
        data: dict[str, Any] = {
            "type": self.type,
            "non_null_count": self.non_null_count,
            "null_count": self.null_count,
            "sample_values": [_json_scalar(v) for v in self.sample_values],
        }
        if self.type == "number":
            data["min"] = self.min
            data["max"] = self.max
            data["average"] = self.average
        if self.type == "string":
            data["unique_value_count"] = self.unique_value_count
            if self.value_counts is not None:
                data["value_counts"] = {str(k): v for k, v in self.value_counts.items()}
        return data


def is_missing(value: Any) -> bool:
    """A cell is missing when it is None or the empty string."""
    return value is None or value == ""


def coerce_number(value: Any) -> float | None:
    """
    Coerce a cell to a finite float.

    Rules:
    - bool never coerces (True is not 1 in a data column)
    - int/float coerce when finite
    - str coerces only when the stripped text is a complete decimal literal
      ("12", "-3.5", ".5", "1e3"); "12abc", "0x1F", "nan", "inf" do not

    Returns:
        Float value, or None if the cell is not numeric
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        text = value.strip()
        if not text or not _DECIMAL_LITERAL.fullmatch(text):
            return None
        number = float(text)
        return number if math.isfinite(number) else None
    return None


def is_boolean_value(value: Any) -> bool:
    """True for bool cells and for the strings "true"/"false" (any case)."""
    if isinstance(value, bool):
        return True
    if isinstance(value, str):
        return value.strip().lower() in ("true", "false")
    return False


def is_date_value(value: Any) -> bool:
    """True for date/datetime cells and strings in ISO-8601 or a known date format."""
    if isinstance(value, (date, datetime)):
        return True
    if not isinstance(value, str):
        return False

    text = value.strip()
    if not text:
        return False

    try:
        datetime.fromisoformat(text)
        return True
    except ValueError:
        pass

    for fmt in DATE_FORMATS:
        try:
            datetime.strptime(text, fmt)
            return True
        except ValueError:
            continue
    return False


def _infer_type(non_null: Sequence[Any]) -> ColumnType:
    if not non_null:
        return "unknown"
    if all(coerce_number(v) is not None for v in non_null):
        return "number"
    if all(is_boolean_value(v) for v in non_null):
        return "boolean"
    if all(is_date_value(v) for v in non_null):
        return "date"
    return "string"


def infer_column(values: Iterable[Any]) -> ColumnProfile:
    """
    Infer the type of a column and compute its summary statistics.

    Args:
        values: Raw cell values for one column, in row order

    Returns:
        ColumnProfile (type "unknown" with no statistics when every value is missing)

    Example:
        >>> infer_column(["1", "2", ""]).type
        'number'
        >>> infer_column(["2024-01-01", "not a date"]).type
        'string'
    """
    all_values = list(values)
    non_null = [v for v in all_values if not is_missing(v)]
    column_type = _infer_type(non_null)

    base = {
        "type": column_type,
        "non_null_count": len(non_null),
        "null_count": len(all_values) - len(non_null),
        "sample_values": tuple(non_null[:SAMPLE_VALUE_LIMIT]),
    }

    if column_type == "number":
        numbers = pl.Series("value", [coerce_number(v) for v in non_null], dtype=pl.Float64)
        return ColumnProfile(
            **base,
            min=numbers.min(),
            max=numbers.max(),
            average=numbers.mean(),
        )

    if column_type == "string":
        # Category statistics are taken over the text form of each cell
        texts = pl.Series("value", [str(v) for v in non_null], dtype=pl.String)
        unique_count = texts.n_unique()
        return ColumnProfile(
            **base,
            unique_value_count=unique_count,
            value_counts=_value_counts(texts) if unique_count <= CATEGORY_VALUE_COUNT_LIMIT else None,
        )

    return ColumnProfile(**base)


def _json_scalar(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def _value_counts(texts: pl.Series) -> dict[str, int]:
    """Occurrence count per value, in first-seen order."""
    counts = texts.to_frame().group_by("value", maintain_order=True).agg(pl.len().alias("count"))
    return dict(counts.iter_rows())
