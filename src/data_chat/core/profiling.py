"""
Data Profiling Module - Generate per-column statistics for a loaded dataset.

A dataset is an ordered sequence of rows, each a mapping from column name to a
scalar cell. The profile is built once per dataset load, treated as immutable,
and rebuilt wholesale when the dataset changes.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from data_chat.core.analysis_config import GROUPING_MAX_CARDINALITY, GROUPING_MIN_CARDINALITY
from data_chat.core.column_inference import ColumnProfile, infer_column

Row = Mapping[str, Any]

__all__ = ["DatasetProfile", "Row", "build_profile"]


@dataclass(frozen=True)
class DatasetProfile:
    """
    Statistical summary of a dataset.

    Attributes:
        row_count: Number of rows
        column_count: Number of columns (taken from the first row)
        column_names: Column names in first-row key order
        columns: Column name -> ColumnProfile
    """

    row_count: int
    column_count: int
    column_names: tuple[str, ...]
    columns: dict[str, ColumnProfile]

    def get(self, column: str) -> ColumnProfile | None:
        """Get the profile for a column, or None if the column does not exist."""
        return self.columns.get(column)

    def numeric_columns(self) -> list[str]:
        """Columns inferred as number, in column order."""
        return [name for name in self.column_names if self.columns[name].is_numeric]

    def string_columns(self) -> list[str]:
        """Columns inferred as string, in column order."""
        return [name for name in self.column_names if self.columns[name].is_string]

    def grouping_candidates(self) -> list[str]:
        """String columns whose cardinality makes them usable as a breakdown."""
        candidates = []
        for name in self.string_columns():
            unique = self.columns[name].unique_value_count or 0
            if GROUPING_MIN_CARDINALITY < unique <= GROUPING_MAX_CARDINALITY:
                candidates.append(name)
        return candidates

    def to_dict(self) -> dict[str, Any]:
        """Convert profile to a JSON-serializable dict."""
        return {
            "row_count": self.row_count,
            "column_count": self.column_count,
            "column_names": list(self.column_names),
            "columns": {name: self.columns[name].to_dict() for name in self.column_names},
        }

    def summary(self) -> str:
        """Generate a compact, human-readable summary (one line per column)."""
        lines = [f"Rows: {self.row_count:,} | Columns: {self.column_count}"]
        for name in self.column_names:
            col = self.columns[name]
            if col.type == "number":
                detail = f"min={col.min:g}, max={col.max:g}, average={col.average:.4g}"
            elif col.type == "string":
                detail = f"{col.unique_value_count} distinct values"
                if col.value_counts is not None:
                    top = sorted(col.value_counts.items(), key=lambda item: -item[1])[:5]
                    detail += " (top: " + ", ".join(f"{k}={v}" for k, v in top) + ")"
            else:
                detail = ", ".join(str(v) for v in col.sample_values[:3]) or "no values"
            lines.append(f"- {name} [{col.type}, {col.null_count} missing]: {detail}")
        return "\n".join(lines)


def build_profile(rows: Sequence[Row]) -> DatasetProfile | None:
    """
    Profile a dataset.

    Column names are taken from the keys of the first row; rows missing a key
    contribute a missing value for that column. Pure and deterministic, so it
    is safe to memoize per dataset identity.

    Args:
        rows: Dataset rows

    Returns:
        DatasetProfile, or None for an empty dataset (no analysis possible)
    """
    if not rows:
        return None

    column_names = tuple(rows[0].keys())
    columns = {name: infer_column(row.get(name) for row in rows) for name in column_names}

    return DatasetProfile(
        row_count=len(rows),
        column_count=len(column_names),
        column_names=column_names,
        columns=columns,
    )
