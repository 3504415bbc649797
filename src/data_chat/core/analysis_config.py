"""Profiling and Query Planning Constants.

Single source of truth for cardinality limits and keyword tables used by
column inference, intent classification and aggregation.
These are domain config, not code - adjust without touching the heuristics.
"""

# Column profiling
SAMPLE_VALUE_LIMIT = 5  # Non-null sample values kept per column
CATEGORY_VALUE_COUNT_LIMIT = 50  # value_counts only stored at or below this many distinct values

# Grouping column eligibility: string columns with 1 < distinct <= limit
GROUPING_MIN_CARDINALITY = 1  # Exclusive lower bound (a single value is not a breakdown)
GROUPING_MAX_CARDINALITY = 100  # Inclusive upper bound

# Date formats accepted in addition to ISO-8601 (datetime.fromisoformat)
DATE_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%d %b %Y",
    "%d %B %Y",
    "%b %d %Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y %H:%M:%S",
)

# Canonical operation order (results and intents always list operations in this order)
OPERATIONS = ("average", "sum", "count", "min", "max")

OPERATION_PATTERNS = {
    "average": r"\b(?:average|avg|mean)\b",
    "sum": r"\b(?:sum|total)\b",
    "count": r"\bcount\b|\bhow many\b|\bnumber of\b",
    "min": r"\b(?:min|minimum|lowest|smallest)\b",
    "max": r"\b(?:max|maximum|highest|largest)\b",
}

GROUPING_PATTERNS = (
    r"\bby each\b",
    r"\bfor each\b",
    r"\bper\b",
    r"\bgroup(?:ed)? by\b",
    r"\bacross\b",
    r"\bby category\b",
    r"\bcategori[sz]e",
    r"\bsegment",
    r"\bbroken down by\b",
    r"\bbreakdown\b",
)

# Score-like vocabulary: question terms that map onto score columns
SCORE_TERMS = ("score", "rating", "grade", "mark", "point")

# Domain term -> candidate column-name substrings (ordered; first match wins)
GROUPING_SYNONYMS: dict[str, tuple[str, ...]] = {
    "team": ("team", "pod", "squad", "pillar"),
    "region": ("region", "geo", "market", "country"),
    "category": ("category", "type", "group"),
    "vertical": ("vertical", "subvertical", "industry"),
    "subvertical": ("subvertical",),
    "division": ("division",),
    "parent": ("parent",),
    "account": ("account", "client", "customer", "advertiser"),
    "client": ("client", "account", "customer", "advertiser"),
    "stakeholder": ("stakeholder",),
    "priority": ("priority",),
}
