"""
Contract generation module.

Renders allocation datasets into the ``GeneratedAllocations`` Solidity
contract.
"""

from allocgen.codegen.generator import (
    ContractGenerator,
    GenerationError,
    render_contract,
)

__all__ = ["ContractGenerator", "GenerationError", "render_contract"]
