"""
Dataset Registry - the fixed catalogue of datasets questions can be asked about.

Datasets are declared in config/datasets.yaml, loaded lazily on first use and
profiled once. The profile is memoized per dataset id and rebuilt wholesale on
reload (no incremental update).
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from data_chat.core.config_loader import load_datasets_config
from data_chat.core.profiling import DatasetProfile, build_profile
from data_chat.datasets.loader import load_csv_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoadedDataset:
    """A loaded dataset snapshot with its profile (profile is None when the dataset is empty)."""

    dataset_id: str
    display_name: str
    period: str | None
    source_path: Path
    rows: list[dict[str, Any]]
    profile: DatasetProfile | None

    @property
    def is_empty(self) -> bool:
        return self.profile is None


class DatasetRegistry:
    """
    Registry of configured datasets with lazy loading and profile memoization.

    Args:
        datasets: dataset_id -> {"display_name", "source_path", "period"};
            loaded from config/datasets.yaml when None
        loader: Callable turning a path into rows (default: polars CSV loader)
    """

    def __init__(
        self,
        datasets: dict[str, dict[str, Any]] | None = None,
        loader: Callable[[Path], list[dict[str, Any]]] = load_csv_rows,
    ) -> None:
        self._definitions = datasets if datasets is not None else load_datasets_config()
        self._loader = loader
        self._loaded: dict[str, LoadedDataset] = {}
        self._lock = threading.Lock()

    def dataset_ids(self) -> list[str]:
        """Configured dataset ids in catalogue order."""
        return list(self._definitions)

    def list_datasets(self) -> list[dict[str, Any]]:
        """Catalogue entries with load status (does not trigger loading)."""
        entries = []
        for dataset_id, definition in self._definitions.items():
            loaded = self._loaded.get(dataset_id)
            entries.append(
                {
                    "dataset_id": dataset_id,
                    "display_name": definition.get("display_name", dataset_id),
                    "period": definition.get("period"),
                    "loaded": loaded is not None,
                    "row_count": loaded.profile.row_count if loaded and loaded.profile else None,
                }
            )
        return entries

    def get(self, dataset_id: str) -> LoadedDataset:
        """
        Get a dataset, loading and profiling it on first access.

        Raises:
            KeyError: If dataset_id is not configured
            FileNotFoundError: If the source file is missing
        """
        if dataset_id not in self._definitions:
            raise KeyError(f"Unknown dataset '{dataset_id}'. Available: {self.dataset_ids()}")

        with self._lock:
            if dataset_id not in self._loaded:
                self._loaded[dataset_id] = self._load(dataset_id)
            return self._loaded[dataset_id]

    def reload(self, dataset_id: str) -> LoadedDataset:
        """Reload a dataset from source and rebuild its profile."""
        if dataset_id not in self._definitions:
            raise KeyError(f"Unknown dataset '{dataset_id}'. Available: {self.dataset_ids()}")

        with self._lock:
            self._loaded[dataset_id] = self._load(dataset_id)
            return self._loaded[dataset_id]

    def _load(self, dataset_id: str) -> LoadedDataset:
        definition = self._definitions[dataset_id]
        source_path = Path(definition["source_path"])
        rows = self._loader(source_path)
        profile = build_profile(rows)

        if profile is None:
            logger.warning(f"Dataset {dataset_id} is empty, no analysis possible")
        else:
            logger.info(f"Profiled dataset {dataset_id}: {profile.row_count} rows, {profile.column_count} columns")

        return LoadedDataset(
            dataset_id=dataset_id,
            display_name=definition.get("display_name", dataset_id),
            period=definition.get("period"),
            source_path=source_path,
            rows=rows,
            profile=profile,
        )
