"""Filesystem helpers for generated artifacts and YAML configuration.

Provides:
    - atomic_write_text: contract source is written to a sibling temp file,
      fsynced, then renamed over the target
    - load_yaml: safe YAML load for generator.yaml

A generated contract is either fully replaced or left untouched; compilers
and diff tools never observe a half-written ``.sol`` file.

Usage:
    from allocgen.utils import fs
    fs.atomic_write_text("generatedAllocations.sol", source)
    raw = fs.load_yaml("generator.yaml")
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Union

import yaml

logger = logging.getLogger(__name__)


def atomic_write_text(path: Union[str, Path], text: str) -> None:
    """Replace *path* with *text* (UTF-8, newlines untranslated).

    Parameters
    ----------
    path : Union[str, Path]
        Target file.  Parent directories are created as needed and any
        existing file is overwritten.
    text : str
        Full file content.

    Raises
    ------
    OSError
        If the directory or file cannot be written.  The temp file is
        removed first; the previous target, if any, is left as it was.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError:
        tmp_path.unlink(missing_ok=True)
        raise

    logger.debug("Wrote %d characters to %s", len(text), path)


def load_yaml(path: Union[str, Path]) -> Any:
    """Parse a YAML file with ``yaml.safe_load``.

    Returns ``None`` for an empty file.  ``yaml.YAMLError`` propagates so
    the caller can report it in its own terms.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)
