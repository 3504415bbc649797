"""Data Chat: question answering over fixed CSV datasets with locally computed aggregates."""

__version__ = "0.1.0"
