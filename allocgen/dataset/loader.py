"""Allocation dataset loader.

Reads ``allocations.json`` and validates it into an
:class:`~allocgen.dataset.schema.AllocationDataset`.

Numbers are never converted: each one is kept as a
:class:`~allocgen.dataset.schema.NumberLiteral` holding its source text,
so ``1e3``, ``0.0000001`` and ``-0`` reach the generated contract exactly
as written.

Usage::

    from allocgen.dataset.loader import load_dataset
    dataset = load_dataset("data/allocations.json")
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from allocgen.dataset.schema import AllocationDataset, NumberLiteral

logger = logging.getLogger(__name__)


class DataFormatError(ValueError):
    """Raised when the allocation dataset is malformed."""

    pass


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _reject_constant(name: str) -> Any:
    raise DataFormatError(f"non-finite number {name} is not allowed")


def _format_loc(loc: tuple) -> str:
    """Render a pydantic error location as ``team[0].startDate``."""
    out = ""
    for part in loc:
        if isinstance(part, int):
            out += f"[{part}]"
        elif out:
            out += f".{part}"
        else:
            out = str(part)
    return out or "<top level>"


def _format_errors(exc: ValidationError) -> str:
    lines = []
    for err in exc.errors():
        lines.append(f"{_format_loc(err['loc'])}: {err['msg']}")
    return "; ".join(lines)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_dataset(data: Any, source: str = "<memory>") -> AllocationDataset:
    """Validate already-decoded JSON data.

    Parameters
    ----------
    data : Any
        Decoded JSON document.  Must be an object of lists of objects.
    source : str
        Name used in error messages.

    Returns
    -------
    AllocationDataset
        Validated dataset, insertion order preserved.

    Raises
    ------
    DataFormatError
        If the structure or any entry is invalid.
    """
    if not isinstance(data, dict):
        raise DataFormatError(
            f"{source}: expected a JSON object of categories, "
            f"got {type(data).__name__}"
        )
    try:
        return AllocationDataset.model_validate(data)
    except ValidationError as exc:
        raise DataFormatError(f"{source}: {_format_errors(exc)}") from exc


def load_dataset(path: str | Path) -> AllocationDataset:
    """Load and validate an allocation dataset from a JSON file.

    Parameters
    ----------
    path : str | Path
        Path to the dataset file.

    Returns
    -------
    AllocationDataset
        Validated dataset.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    OSError
        If the file cannot be read.
    DataFormatError
        If the content is empty, not JSON, or not a valid dataset.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Allocation dataset not found: {path}")

    logger.info("Loading allocations from %s", path)

    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise DataFormatError(f"Allocation dataset is not UTF-8: {path}") from exc
    if not text.strip():
        raise DataFormatError(f"Empty allocation dataset: {path}")

    try:
        data = json.loads(
            text,
            parse_int=NumberLiteral,
            parse_float=NumberLiteral,
            parse_constant=_reject_constant,
        )
    except json.JSONDecodeError as exc:
        raise DataFormatError(f"Invalid JSON in {path}: {exc}") from exc

    dataset = parse_dataset(data, source=str(path))
    logger.debug(
        "Loaded %d categories (%d entries) from %s",
        len(dataset),
        dataset.total_allocations,
        path,
    )
    return dataset


class JsonDatasetLoader:
    """File-backed dataset loader used by the pipeline."""

    def load(self, path: str | Path) -> AllocationDataset:
        return load_dataset(path)
