"""Load -> generate -> write pipeline.

One run is a full rebuild: the dataset is read fresh, the contract is
rendered in memory, and the artifact is written once.  Any failure
propagates to the caller and nothing is written unless rendering
succeeded.

Loader and writer are capabilities so tests can run the pipeline against
in-memory fixtures::

    result = run_pipeline(cfg, loader=FakeLoader(dataset), writer=MemoryWriter())
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from allocgen.codegen.generator import ContractGenerator
from allocgen.configs.loader import GeneratorConfig
from allocgen.dataset.loader import JsonDatasetLoader
from allocgen.dataset.schema import AllocationDataset
from allocgen.utils import fs

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------


class DatasetLoader(Protocol):
    def load(self, path: Path) -> AllocationDataset: ...


class ArtifactWriter(Protocol):
    def write(self, path: Path, text: str) -> None: ...


class FileArtifactWriter:
    """Writes artifacts with an atomic replace."""

    def write(self, path: Path, text: str) -> None:
        fs.atomic_write_text(path, text)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GenerationResult:
    """Outcome of one pipeline run."""

    input_path: Path
    output_path: Path
    total_allocations: int
    categories: tuple[str, ...]
    text: str


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def generate(
    config: GeneratorConfig,
    loader: DatasetLoader | None = None,
) -> GenerationResult:
    """Load and render without writing anything.

    Raises
    ------
    FileNotFoundError, OSError
        If the dataset cannot be read.
    DataFormatError
        If the dataset is malformed.
    GenerationError
        If the rendered contract is inconsistent.
    """
    loader = loader if loader is not None else JsonDatasetLoader()

    dataset = loader.load(config.input_path)
    text = ContractGenerator(config.template).generate(dataset)

    return GenerationResult(
        input_path=config.input_path,
        output_path=config.output_path,
        total_allocations=dataset.total_allocations,
        categories=tuple(dataset.categories),
        text=text,
    )


def run_pipeline(
    config: GeneratorConfig,
    loader: DatasetLoader | None = None,
    writer: ArtifactWriter | None = None,
) -> GenerationResult:
    """Regenerate the contract artifact from the configured dataset.

    Parameters
    ----------
    config : GeneratorConfig
        Input/output locations and template names.
    loader : DatasetLoader | None
        Dataset source; defaults to reading JSON from disk.
    writer : ArtifactWriter | None
        Artifact sink; defaults to an atomic file write.

    Returns
    -------
    GenerationResult
        Counts and the rendered text.

    Raises
    ------
    OSError
        If the dataset cannot be read or the artifact cannot be written.
    DataFormatError
        If the dataset is malformed.  The output file is not touched.
    GenerationError
        If the rendered contract is inconsistent.  The output file is not
        touched.
    """
    writer = writer if writer is not None else FileArtifactWriter()

    result = generate(config, loader)
    writer.write(config.output_path, result.text)
    logger.info(
        "Wrote %d allocations in %d categories to %s",
        result.total_allocations,
        len(result.categories),
        config.output_path,
    )
    return result
