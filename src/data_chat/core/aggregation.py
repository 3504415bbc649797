"""
Pure aggregation functions - exact statistics over the full dataset.

Given a dataset, its profile and a classified QueryIntent, compute the
requested operations either per group (grouped aggregation) or over all rows
(direct aggregation). No network or model calls: results are deterministic and
independent of any language-model sampling.

Returns serializable structures so the result can be handed to the
text-generation step as-is.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

import polars as pl
import structlog

from data_chat.core.column_inference import coerce_number, is_missing
from data_chat.core.profiling import DatasetProfile, Row
from data_chat.core.query_intent import QueryIntent

logger = structlog.get_logger()

__all__ = ["AggregationResult", "GroupResult", "compute_operations", "execute"]

OperationValues = dict[str, float | int]

# Group values can be of any type; polars groups on their integer codes
GROUP_KEY = "__group"

OPERATION_EXPRS = {
    "average": lambda col: col.mean(),
    "sum": lambda col: col.sum(),
    "count": lambda col: col.count(),
    "min": lambda col: col.min(),
    "max": lambda col: col.max(),
}


@dataclass(frozen=True)
class GroupResult:
    """
    Aggregates for one group value.

    Attributes:
        count: Number of rows in the group
        values: Target column -> {operation: value}; targets with no numeric values are omitted
    """

    count: int
    values: dict[str, OperationValues] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"count": self.count, **self.values}


@dataclass(frozen=True)
class AggregationResult:
    """
    Result of an aggregation run.

    Attributes:
        kind: "grouped" or "direct"
        rows_analyzed: Total row count of the input dataset (the full dataset, never a sample)
        operations: Operations computed, in canonical order
        target_columns: Target columns considered
        grouping_column: Grouping column (grouped only)
        values: Target column -> {operation: value} (direct only)
        groups: Group value -> GroupResult in encounter order (grouped only)
    """

    kind: Literal["grouped", "direct"]
    rows_analyzed: int
    operations: tuple[str, ...]
    target_columns: tuple[str, ...]
    grouping_column: str | None = None
    values: dict[str, OperationValues] = field(default_factory=dict)
    groups: dict[Any, GroupResult] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dict (group keys become strings)."""
        data: dict[str, Any] = {
            "type": f"{self.kind}_aggregation",
            "rows_analyzed": self.rows_analyzed,
            "operations": list(self.operations),
            "target_columns": list(self.target_columns),
        }
        if self.kind == "grouped":
            data["group_by"] = self.grouping_column
            data["groups"] = {str(key): group.to_dict() for key, group in self.groups.items()}
        else:
            data["values"] = self.values
        return data


def _frame(rows: Sequence[Row], targets: Sequence[str], group_codes: list[int | None] | None = None) -> pl.DataFrame:
    """Numeric frame of the target columns; non-coercible cells become nulls."""
    data: dict[str, list] = {}
    schema: dict[str, pl.DataType] = {}
    if group_codes is not None:
        data[GROUP_KEY] = group_codes
        schema[GROUP_KEY] = pl.Int64
    for index, column in enumerate(targets):
        data[f"__t{index}"] = [coerce_number(row.get(column)) for row in rows]
        schema[f"__t{index}"] = pl.Float64
    return pl.DataFrame(data, schema=schema)


def _operation_exprs(column: str, operations: Sequence[str]) -> list[pl.Expr]:
    return [OPERATION_EXPRS[op](pl.col(column)).alias(f"{column}__{op}") for op in operations]


def _target_exprs(targets: Sequence[str], operations: Sequence[str]) -> list[pl.Expr]:
    if not operations:
        return []
    exprs = []
    for index in range(len(targets)):
        column = f"__t{index}"
        exprs.append(pl.col(column).count().alias(f"{column}__n"))
        exprs.extend(_operation_exprs(column, operations))
    return exprs


def _unpack_targets(
    record: dict[str, Any], targets: Sequence[str], operations: Sequence[str]
) -> dict[str, OperationValues]:
    results = {}
    if not operations:
        return results
    for index, column in enumerate(targets):
        if not record[f"__t{index}__n"]:
            # Omit rather than emit a divide-by-zero artifact
            continue
        results[column] = {op: record[f"__t{index}__{op}"] for op in operations}
    return results


def compute_operations(values: Sequence[float], operations: Sequence[str]) -> OperationValues:
    """
    Compute the requested operations over numeric values.

    Args:
        values: Finite numeric values (must be non-empty)
        operations: Operation names (average, sum, count, min, max)

    Returns:
        Operation -> value, in the order requested
    """
    if not operations:
        return {}
    series = pl.Series("value", values, dtype=pl.Float64)
    record = series.to_frame().select(_operation_exprs("value", operations)).row(0, named=True)
    return {op: record[f"value__{op}"] for op in operations}


def _encode_groups(rows: Sequence[Row], column: str) -> tuple[list[int | None], list[Any]]:
    """Group value -> integer code in encounter order; missing values get no code."""
    labels: dict[Any, int] = {}
    codes: list[int | None] = []
    for row in rows:
        key = row.get(column)
        codes.append(None if is_missing(key) else labels.setdefault(key, len(labels)))
    return codes, list(labels)


def _known_targets(profile: DatasetProfile | None, intent: QueryIntent) -> tuple[str, ...]:
    if profile is None:
        return intent.target_columns
    known = tuple(c for c in intent.target_columns if c in profile.columns)
    dropped = [c for c in intent.target_columns if c not in profile.columns]
    if dropped:
        logger.warning("aggregation_unknown_targets_dropped", dropped=dropped)
    return known


def execute(rows: Sequence[Row], profile: DatasetProfile | None, intent: QueryIntent) -> AggregationResult:
    """
    Execute an aggregation intent over the full dataset.

    Args:
        rows: Dataset rows
        profile: DatasetProfile for the rows (used to validate column names)
        intent: Classified QueryIntent (must need full analysis)

    Returns:
        AggregationResult with rows_analyzed set to the full row count

    Raises:
        ValueError: If the intent is PASS_THROUGH (nothing to aggregate)

    Example:
        >>> rows = [{"region": "A", "score": 10}, {"region": "A", "score": 20}, {"region": "B", "score": 5}]
        >>> result = execute(rows, build_profile(rows), intent)  # average score by region
        >>> result.groups["A"].values["score"]["average"]
        15.0
    """
    if not intent.needs_full_analysis:
        raise ValueError("PASS_THROUGH intent has nothing to aggregate")

    targets = _known_targets(profile, intent)
    exprs = _target_exprs(targets, intent.operations)

    if intent.kind == "DIRECT_AGGREGATION":
        record = _frame(rows, targets).select(exprs).row(0, named=True) if exprs else {}
        result = AggregationResult(
            kind="direct",
            rows_analyzed=len(rows),
            operations=intent.operations,
            target_columns=targets,
            values=_unpack_targets(record, targets, intent.operations),
        )
        logger.info(
            "aggregation_executed",
            kind=result.kind,
            rows_analyzed=result.rows_analyzed,
            targets=list(result.values),
        )
        return result

    group_column = intent.grouping_column
    codes, labels = _encode_groups(rows, group_column)
    grouped = (
        _frame(rows, targets, group_codes=codes)
        .filter(pl.col(GROUP_KEY).is_not_null())
        .group_by(GROUP_KEY, maintain_order=True)
        .agg(pl.len().alias("__rows"), *exprs)
    )

    groups = {
        labels[record[GROUP_KEY]]: GroupResult(
            count=record["__rows"],
            values=_unpack_targets(record, targets, intent.operations),
        )
        for record in grouped.iter_rows(named=True)
    }

    logger.info(
        "aggregation_executed",
        kind="grouped",
        rows_analyzed=len(rows),
        group_by=group_column,
        group_count=len(groups),
    )
    return AggregationResult(
        kind="grouped",
        rows_analyzed=len(rows),
        operations=intent.operations,
        target_columns=targets,
        grouping_column=group_column,
        groups=groups,
    )
