"""
Pytest configuration and fixtures for data chat tests.
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from data_chat.core.profiling import build_profile  # noqa: E402
from data_chat.datasets.registry import DatasetRegistry  # noqa: E402


@pytest.fixture(scope="session")
def project_root():
    """Return project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def region_score_rows() -> list[dict]:
    """Minimal grouped-average example: A averages 15, B averages 5."""
    return [
        {"region": "A", "score": 10},
        {"region": "A", "score": 20},
        {"region": "B", "score": 5},
    ]


@pytest.fixture
def survey_rows() -> list[dict]:
    """
    Small survey-shaped dataset.

    client/vertical/region are string columns (6, 3 and 2 distinct values),
    maturity_score and spend are numeric with one missing value each.
    """
    return [
        {"client": "Acme", "vertical": "Food", "region": "NA", "maturity_score": 3.0, "spend": 100},
        {"client": "Bolt", "vertical": "Beverage", "region": "EU", "maturity_score": 4.0, "spend": 200},
        {"client": "Crest", "vertical": "Food", "region": "EU", "maturity_score": 5.0, "spend": 300},
        {"client": "Dawn", "vertical": "Beverage", "region": "NA", "maturity_score": None, "spend": 400},
        {"client": "Echo", "vertical": "Food", "region": "NA", "maturity_score": 2.0, "spend": ""},
        {"client": "Fizz", "vertical": "Personal Care", "region": "EU", "maturity_score": 4.0, "spend": 600},
    ]


@pytest.fixture
def survey_profile(survey_rows):
    """DatasetProfile for survey_rows."""
    return build_profile(survey_rows)


@pytest.fixture
def survey_csv(tmp_path) -> Path:
    """survey_rows written as a CSV file (empty spend cell for Echo, empty score for Dawn)."""
    path = tmp_path / "survey.csv"
    path.write_text(
        "client,vertical,region,maturity_score,spend\n"
        "Acme,Food,NA,3.0,100\n"
        "Bolt,Beverage,EU,4.0,200\n"
        "Crest,Food,EU,5.0,300\n"
        "Dawn,Beverage,NA,,400\n"
        "Echo,Food,NA,2.0,\n"
        "Fizz,Personal Care,EU,4.0,600\n"
    )
    return path


@pytest.fixture
def make_registry(survey_rows):
    """
    Factory for a DatasetRegistry backed by in-memory rows.

    Usage: make_registry({"h1_2025": rows, "empty": []})
    """

    def _make(datasets: dict[str, list[dict]] | None = None) -> DatasetRegistry:
        datasets = datasets if datasets is not None else {"h1_2025": survey_rows}
        definitions = {
            dataset_id: {
                "display_name": dataset_id.upper(),
                "source_path": Path(f"/data/{dataset_id}.csv"),
                "period": None,
            }
            for dataset_id in datasets
        }
        by_path = {str(definitions[d]["source_path"]): rows for d, rows in datasets.items()}
        return DatasetRegistry(datasets=definitions, loader=lambda path: by_path[str(path)])

    return _make


@pytest.fixture
def mock_generator():
    """Text generator double returning a fixed answer."""
    generator = MagicMock(spec=["generate"])
    generator.generate.return_value = "The average maturity score is 3.6."
    return generator
