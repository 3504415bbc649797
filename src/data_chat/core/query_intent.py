"""
Query Intent Classifier - decide whether a question needs exact computation.

A question is inspected with independent keyword/regex tests (no trained model):
- Grouping phrases ("per", "for each", "broken down by", "by vertical", ...)
- Requested operations (average, sum, count, min, max)

If any test fires the question needs full-dataset analysis, and grouping and
target columns are resolved against the dataset profile. Otherwise the question
is passed through to the text-generation model with a data sample only.

Example:
    >>> from data_chat.core.query_intent import classify_intent
    >>> intent = classify_intent("What is the average score per vertical?", profile)
    >>> intent.kind
    'GROUPED_AGGREGATION'
    >>> intent.operations
    ('average',)

Classification is deterministic: identical question text and profile always
produce equal intents, which the response cache relies on.
"""

import re
from dataclasses import dataclass

import structlog

from data_chat.core.analysis_config import (
    GROUPING_PATTERNS,
    GROUPING_SYNONYMS,
    OPERATION_PATTERNS,
    OPERATIONS,
    SCORE_TERMS,
)
from data_chat.core.profiling import DatasetProfile

logger = structlog.get_logger()

# Valid intent kinds (single source of truth)
VALID_INTENT_KINDS = [
    "GROUPED_AGGREGATION",
    "DIRECT_AGGREGATION",
    "PASS_THROUGH",
]

_BY_TERM = re.compile(r"\bby\s+(?:the\s+|each\s+)?([a-z0-9_]+)")
_SCORE_TERM = re.compile(r"\b(" + "|".join(SCORE_TERMS) + r")s?\b")


@dataclass(frozen=True)
class QueryIntent:
    """
    Computation plan derived from a question.

    Attributes:
        kind: GROUPED_AGGREGATION, DIRECT_AGGREGATION or PASS_THROUGH
        operations: Requested operations in canonical order (subset of OPERATIONS)
        grouping_requested: True if the question text asked for a breakdown
        grouping_column: Resolved grouping column (None if not grouped)
        target_columns: Resolved numeric target columns
    """

    kind: str
    operations: tuple[str, ...] = ()
    grouping_requested: bool = False
    grouping_column: str | None = None
    target_columns: tuple[str, ...] = ()

    def __post_init__(self):
        """Validate kind and operations."""
        if self.kind not in VALID_INTENT_KINDS:
            raise ValueError(f"Invalid intent kind: {self.kind}. Must be one of {VALID_INTENT_KINDS}")
        unknown = [op for op in self.operations if op not in OPERATIONS]
        if unknown:
            raise ValueError(f"Invalid operations: {unknown}. Must be a subset of {list(OPERATIONS)}")
        if self.kind == "GROUPED_AGGREGATION" and not self.grouping_column:
            raise ValueError("GROUPED_AGGREGATION requires a grouping_column")

    @property
    def needs_full_analysis(self) -> bool:
        """True when exact numbers must be computed over the full dataset."""
        return self.kind != "PASS_THROUGH"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "operations": list(self.operations),
            "grouping_requested": self.grouping_requested,
            "grouping_column": self.grouping_column,
            "target_columns": list(self.target_columns),
        }


def normalize_question(question: str) -> str:
    """Lowercase and collapse whitespace."""
    return " ".join(question.strip().split()).lower()


class QueryIntentClassifier:
    """
    Keyword-based intent classifier bound to one dataset profile.

    Args:
        profile: DatasetProfile of the dataset the question is about (None if empty)
    """

    def __init__(self, profile: DatasetProfile | None):
        self.profile = profile

    def classify(self, question: str) -> QueryIntent:
        """
        Classify a question into a QueryIntent.

        Args:
            question: User's question

        Returns:
            QueryIntent (PASS_THROUGH when no aggregation is needed or possible)

        Raises:
            ValueError: If question is empty
        """
        if not question or not question.strip():
            logger.error("intent_classify_failed", error_type="empty_question")
            raise ValueError("Question cannot be empty")

        text = normalize_question(question)
        operations = self._detect_operations(text)
        grouping_requested = self._detect_grouping(text)

        if not operations and not grouping_requested:
            logger.debug("intent_pass_through", question=text)
            return QueryIntent(kind="PASS_THROUGH")

        if self.profile is None:
            logger.warning(
                "intent_no_profile",
                question=text,
                operations=list(operations),
                reason="empty_dataset",
            )
            return QueryIntent(kind="PASS_THROUGH", operations=operations, grouping_requested=grouping_requested)

        grouping_column = self._resolve_grouping_column(text) if grouping_requested else None
        target_columns = self._resolve_target_columns(text, grouping_column)

        intent = QueryIntent(
            kind="GROUPED_AGGREGATION" if grouping_column else "DIRECT_AGGREGATION",
            operations=operations,
            grouping_requested=grouping_requested,
            grouping_column=grouping_column,
            target_columns=target_columns,
        )
        logger.info(
            "intent_classified",
            kind=intent.kind,
            operations=list(intent.operations),
            grouping_column=intent.grouping_column,
            target_columns=list(intent.target_columns),
        )
        return intent

    def _detect_operations(self, text: str) -> tuple[str, ...]:
        return tuple(op for op in OPERATIONS if re.search(OPERATION_PATTERNS[op], text))

    def _detect_grouping(self, text: str) -> bool:
        if any(re.search(pattern, text) for pattern in GROUPING_PATTERNS):
            return True

        # "by <dimension>" where the dimension is a known grouping term or a string column
        string_columns = {name.lower() for name in self.profile.string_columns()} if self.profile else set()
        for term in _BY_TERM.findall(text):
            singular = term[:-1] if term.endswith("s") else term
            if term in GROUPING_SYNONYMS or singular in GROUPING_SYNONYMS:
                return True
            if term in string_columns or singular in string_columns:
                return True
        return False

    def _mentioned_columns(self, text: str, columns: list[str]) -> list[str]:
        """Columns whose name (or name with underscores as spaces) appears in the text."""
        mentioned = []
        for name in columns:
            lowered = name.lower()
            variants = {lowered, lowered.replace("_", " ")}
            if any(v and v in text for v in variants):
                mentioned.append(name)
        return mentioned

    def _resolve_grouping_column(self, text: str) -> str | None:
        candidates = self.profile.grouping_candidates()
        if not candidates:
            logger.warning(
                "grouping_abandoned",
                reason="no_string_column_within_cardinality_bound",
                question=text,
            )
            return None

        # (a) Directly mentioned eligible column
        mentioned = self._mentioned_columns(text, candidates)
        if mentioned:
            return mentioned[0]

        # (b) Domain synonym table
        for term, substrings in GROUPING_SYNONYMS.items():
            if not re.search(rf"\b{re.escape(term)}s?\b", text):
                continue
            for substring in substrings:
                for name in candidates:
                    if substring in name.lower():
                        logger.debug("grouping_column_synonym", term=term, column=name)
                        return name

        # (c) Last resort: first eligible string column
        logger.warning(
            "grouping_column_fallback",
            column=candidates[0],
            candidates=candidates,
            question=text,
        )
        return candidates[0]

    def _resolve_target_columns(self, text: str, grouping_column: str | None) -> tuple[str, ...]:
        numeric = [name for name in self.profile.numeric_columns() if name != grouping_column]

        # (a) Directly mentioned numeric columns
        mentioned = self._mentioned_columns(text, numeric)
        if mentioned:
            return tuple(mentioned)

        # (b) Score-like columns for the score vocabulary used in the question
        terms = sorted(set(_SCORE_TERM.findall(text)))
        if terms:
            score_columns = [name for name in numeric if any(term in name.lower() for term in terms)]
            if score_columns:
                return tuple(score_columns)

        # (c) All numeric columns
        if numeric:
            logger.info("target_columns_fallback", columns=numeric, question=text)
        else:
            logger.warning("target_columns_empty", reason="no_numeric_columns", question=text)
        return tuple(numeric)


def classify_intent(question: str, profile: DatasetProfile | None) -> QueryIntent:
    """
    Classify a question against a dataset profile.

    Args:
        question: User's question
        profile: DatasetProfile (None for an empty dataset)

    Returns:
        QueryIntent
    """
    return QueryIntentClassifier(profile).classify(question)
