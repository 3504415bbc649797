"""
Answer prompt construction for the text-generation step.

The model never computes numbers: for questions that need exact figures it
receives the locally computed AggregationResult, together with an explicit
statement of how many rows were analysed. Other questions get the dataset
profile plus a small sample of rows.

Key functions:
- build_answer_prompt: Assemble the full prompt for one question
- _sanitize_result_for_prompt: Keep only the summary fields of a result
"""

import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

import structlog

from data_chat.core.aggregation import AggregationResult
from data_chat.core.query_intent import QueryIntent

logger = structlog.get_logger()

_RESULT_FIELDS = ("type", "rows_analyzed", "operations", "target_columns", "group_by", "groups", "values")


@dataclass(frozen=True)
class DatasetAnalysis:
    """
    Everything prepared for one dataset before the model is called.

    Attributes:
        dataset_id: Catalogue id
        display_name: Human-readable dataset name
        period: Reporting period label (may be None)
        row_count: Rows in the dataset (0 when empty)
        intent: Classified intent (None when the dataset is empty)
        result: Aggregation result (None unless the intent needed full analysis)
        profile_summary: Profile summary text (None when the dataset is empty)
        sample_rows: First rows of the dataset (pass-through only)
    """

    dataset_id: str
    display_name: str
    period: str | None
    row_count: int
    intent: QueryIntent | None = None
    result: AggregationResult | None = None
    profile_summary: str | None = None
    sample_rows: list[dict[str, Any]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.row_count == 0

    def to_dict(self) -> dict[str, Any]:
        """Serializable summary (no raw rows), used for API responses and the cache."""
        return {
            "dataset_id": self.dataset_id,
            "display_name": self.display_name,
            "period": self.period,
            "row_count": self.row_count,
            "intent": self.intent.to_dict() if self.intent else None,
            "result": self.result.to_dict() if self.result else None,
        }


def _sanitize_result_for_prompt(result: dict[str, Any]) -> dict[str, Any]:
    """
    Sanitize a result dict for the prompt.

    Keeps the aggregate fields only; anything else (raw rows, debug data) is dropped.

    Args:
        result: AggregationResult.to_dict() output

    Returns:
        Dict safe to embed in the prompt
    """
    return {key: result[key] for key in _RESULT_FIELDS if key in result}


def _to_json(value: Any) -> str:
    return json.dumps(value, indent=2, default=str, ensure_ascii=False)


def format_dataset_context(analysis: DatasetAnalysis) -> str:
    """
    Render the context block for one dataset.

    Args:
        analysis: Prepared DatasetAnalysis

    Returns:
        Text block starting with a dataset header
    """
    header = f"### Dataset: {analysis.display_name}"
    if analysis.period:
        header += f" ({analysis.period})"

    if analysis.is_empty:
        return f"{header}\nThis dataset has no rows; no analysis is possible."

    if analysis.result is not None:
        sanitized = _sanitize_result_for_prompt(analysis.result.to_dict())
        return (
            f"{header}\n"
            f"Computed results over the full dataset: all {analysis.result.rows_analyzed:,} rows were analyzed. "
            f"These figures are exact; use them as given.\n"
            f"{_to_json(sanitized)}"
        )

    lines = [header]
    if analysis.profile_summary:
        lines.append(f"Dataset profile:\n{analysis.profile_summary}")
    if analysis.sample_rows:
        lines.append(
            f"Sample rows (first {len(analysis.sample_rows)} of {analysis.row_count:,}):\n"
            f"{_to_json(analysis.sample_rows)}"
        )
    return "\n".join(lines)


def build_answer_prompt(question: str, analyses: Sequence[DatasetAnalysis]) -> str:
    """
    Build the prompt for answering a question.

    Args:
        question: The user's question as asked
        analyses: One DatasetAnalysis per selected dataset

    Returns:
        Prompt text

    Example:
        >>> prompt = build_answer_prompt("average score by region", [analysis])
        >>> "all 3 rows were analyzed" in prompt
        True
    """
    blocks = [format_dataset_context(analysis) for analysis in analyses]
    prompt = (
        "Answer the question below using only the dataset information provided.\n\n"
        + "\n\n".join(blocks)
        + f"\n\nQuestion: {question}"
    )
    logger.debug(
        "answer_prompt_built",
        datasets=[a.dataset_id for a in analyses],
        computed=[a.dataset_id for a in analyses if a.result is not None],
        prompt_length=len(prompt),
    )
    return prompt
