"""
Allocation dataset module.

Schema and loader for the grouped vesting entries that drive contract
generation.
"""

from allocgen.dataset.loader import (
    DataFormatError,
    JsonDatasetLoader,
    load_dataset,
    parse_dataset,
)
from allocgen.dataset.schema import AllocationDataset, AllocationEntry

__all__ = [
    "AllocationDataset",
    "AllocationEntry",
    "DataFormatError",
    "JsonDatasetLoader",
    "load_dataset",
    "parse_dataset",
]
