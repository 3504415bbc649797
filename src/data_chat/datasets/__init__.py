"""Dataset loading and the fixed dataset catalogue."""

from data_chat.datasets.loader import load_csv_rows, load_csv_text
from data_chat.datasets.registry import DatasetRegistry, LoadedDataset

__all__ = ["DatasetRegistry", "LoadedDataset", "load_csv_rows", "load_csv_text"]
