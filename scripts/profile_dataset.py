#!/usr/bin/env python3
"""
Profile a CSV dataset and optionally plan/compute a question locally.

Prints JSON to stdout. No Gemini call is made: this shows exactly what the
service would compute and hand to the model.

Usage:
    python scripts/profile_dataset.py data/h12025.csv
    python scripts/profile_dataset.py data/h12025.csv --question "average score by vertical"
"""

import argparse
import json
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from data_chat.core.aggregation import execute  # noqa: E402
from data_chat.core.profiling import build_profile  # noqa: E402
from data_chat.core.query_intent import classify_intent  # noqa: E402
from data_chat.datasets.loader import load_csv_rows  # noqa: E402


def profile_report(csv_path: Path, question: str | None = None) -> dict:
    """
    Build the JSON report for a CSV file.

    Args:
        csv_path: Path to CSV file
        question: Optional question to classify and (when needed) aggregate

    Returns:
        Dict with "profile", and "intent"/"result" when a question is given
    """
    rows = load_csv_rows(csv_path)
    profile = build_profile(rows)
    report: dict = {"source": str(csv_path), "profile": profile.to_dict() if profile else None}

    if question:
        intent = classify_intent(question, profile)
        report["intent"] = intent.to_dict()
        report["result"] = execute(rows, profile, intent).to_dict() if intent.needs_full_analysis else None

    return report


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Profile a CSV dataset and plan a question locally")
    parser.add_argument("csv_path", type=Path, help="Path to CSV file with a header row")
    parser.add_argument("--question", "-q", default=None, help="Question to classify and compute")
    parser.add_argument("--indent", type=int, default=2, help="JSON indent (default: 2)")
    args = parser.parse_args(argv)

    if not args.csv_path.exists():
        print(f"Error: CSV file not found: {args.csv_path}", file=sys.stderr)
        return 1

    try:
        report = profile_report(args.csv_path, args.question)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(report, indent=args.indent, default=str, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
