#!/usr/bin/env python3
"""
Generate Allocations Script.

Regenerate ``generatedAllocations.sol`` from ``data/allocations.json``.

Usage:
    python -m allocgen.scripts.generate
    python -m allocgen.scripts.generate --config generator.yaml
    python -m allocgen.scripts.generate --input data/allocations.json --output out.sol
    python -m allocgen.scripts.generate --dry-run

Exit status is 0 on success and 1 on any failure.
"""

from __future__ import annotations

import argparse
import logging
import sys

from allocgen.codegen.generator import GenerationError
from allocgen.configs.loader import ConfigError, load_config
from allocgen.dataset.loader import DataFormatError
from allocgen.pipeline import generate, run_pipeline
from allocgen.utils.logging_config import install_excepthook, setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate the allocation vesting contract",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Configuration file path (default: shipped generator.yaml)",
    )
    parser.add_argument(
        "--input",
        "-i",
        type=str,
        help="Allocation dataset (overrides paths.input)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Generated contract path (overrides paths.output)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Override logging.level",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the contract to stdout instead of writing it",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except (ConfigError, OSError) as exc:
        setup_logging(args.log_level or "INFO", context={"app": "allocgen"})
        logger.error("Configuration error: %s", exc)
        return 1

    config = config.with_paths(input_path=args.input, output_path=args.output)

    setup_logging(
        args.log_level or config.logging.level,
        config.logging.file,
        json=config.logging.json,
        context={"app": "allocgen"},
    )
    install_excepthook()

    try:
        if args.dry_run:
            result = generate(config)
            sys.stdout.write(result.text)
        else:
            result = run_pipeline(config)
    except DataFormatError as exc:
        logger.error("Malformed allocation dataset: %s", exc)
        return 1
    except GenerationError as exc:
        logger.error("Contract generation failed: %s", exc)
        return 1
    except OSError as exc:
        logger.error("I/O error: %s", exc)
        return 1

    logger.info("Done: %d allocations", result.total_allocations)
    return 0


if __name__ == "__main__":
    sys.exit(main())
