"""
Allocation contract generator.

Build-time tool that turns a grouped allocation dataset (JSON) into the
``GeneratedAllocations`` Solidity contract, one vesting entry per record.

Subpackages:
    configs: Generator configuration loading and validation
    dataset: Allocation dataset schema and loader
    codegen: Contract source rendering
    utils: Atomic I/O and logging
    scripts: Command-line entrypoint
"""

__version__ = "0.1.0"

__all__ = ["configs", "dataset", "codegen", "utils", "scripts", "pipeline"]
