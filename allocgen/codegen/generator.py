"""Contract generator -- allocation dataset to Solidity source.

Renders a fixed contract skeleton whose constructor pushes one
``AllocationVesting.LinearVesting`` value per dataset entry into a public
array sized up front::

    contract GeneratedAllocations {
       AllocationVesting.LinearVesting[] public allAllocations = new AllocationVesting.LinearVesting[](N);

        constructor() {
            // team allocations
            allAllocations.push(AllocationVesting.LinearVesting(addr, end, start, startDate, endDate));
        }
    }

Argument order:
    The struct is built as ``(address, allocationAtEndDate,
    allocationAtStartDate, startDate, endDate)``.  The end-date amount
    comes **before** the start-date amount.  Deployed contracts were
    generated with this order, so it is reproduced as-is.

Byte layout:
    Whitespace (including the three-space separator lines) matches the
    files already committed downstream so regenerated contracts diff
    cleanly.  Identical input always yields identical output.

Field values are emitted verbatim.  Nothing is quoted or escaped.
"""

from __future__ import annotations

import logging
from io import StringIO

from allocgen.configs.loader import ContractTemplate
from allocgen.dataset.schema import (
    AllocationDataset,
    AllocationEntry,
    NumberLiteral,
    Token,
)

logger = logging.getLogger(__name__)

_INDENT = "        "
_SEPARATOR = "   \n"


class GenerationError(Exception):
    """Raised when the rendered contract would be inconsistent."""

    pass


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def render_token(value: Token) -> str:
    """Spell a dataset literal as Solidity source text."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, NumberLiteral):
        return value.text
    if isinstance(value, (int, str)):
        return str(value)
    raise GenerationError(f"Cannot render literal of type {type(value).__name__}")


def vesting_args(entry: AllocationEntry) -> tuple[str, str, str, str, str]:
    """Constructor arguments for one entry, in emitted order."""
    return (
        render_token(entry.address),
        render_token(entry.allocation_at_end_date),
        render_token(entry.allocation_at_start_date),
        render_token(entry.start_date),
        render_token(entry.end_date),
    )


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class ContractGenerator:
    """Convert an allocation dataset to contract source.

    Parameters
    ----------
    template : ContractTemplate | None
        Names used in the skeleton.  ``None`` uses the defaults
        (``GeneratedAllocations`` / ``AllocationVesting.LinearVesting``).
    """

    def __init__(self, template: ContractTemplate | None = None) -> None:
        self._tpl = template if template is not None else ContractTemplate()
        self._pushed: int = 0

    @property
    def template(self) -> ContractTemplate:
        return self._tpl

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate(self, dataset: AllocationDataset) -> str:
        """Render the complete contract.

        Parameters
        ----------
        dataset : AllocationDataset
            Validated allocations.  Not modified.

        Returns
        -------
        str
            Contract source text.

        Raises
        ------
        GenerationError
            If the number of push statements differs from the declared
            array size.
        """
        total = dataset.total_allocations
        logger.info("Total allocations found: %d", total)

        buf = StringIO()
        self._pushed = 0
        self._write_header(buf)
        self._write_declaration(buf, total)

        buf.write("    constructor() {\n")
        for category, entries in dataset.items():
            self._write_category(buf, category, entries)
        self._write_footer(buf)

        if self._pushed != total:
            raise GenerationError(
                f"Declared {total} allocations but emitted {self._pushed} "
                "push statements"
            )
        return buf.getvalue()

    def push_statement(self, entry: AllocationEntry) -> str:
        """Single ``push`` statement for *entry*, without indentation."""
        tpl = self._tpl
        args = ", ".join(vesting_args(entry))
        return f"{tpl.array_name}.push({tpl.vesting_type}({args}));"

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def _write_header(self, buf: StringIO) -> None:
        tpl = self._tpl
        buf.write(f"// SPDX-License-Identifier: {tpl.license}\n")
        buf.write(f"pragma solidity {tpl.pragma};\n")
        buf.write("\n")
        buf.write(f'import "{tpl.import_path}";\n')
        buf.write("\n")
        buf.write(f"contract {tpl.contract_name} {{\n")
        buf.write(_SEPARATOR)
        buf.write("\n")

    def _write_declaration(self, buf: StringIO, total: int) -> None:
        tpl = self._tpl
        buf.write(
            f"   {tpl.vesting_type}[] public {tpl.array_name} = "
            f"new {tpl.vesting_type}[]({total});\n"
        )
        buf.write("\n")

    def _write_category(
        self,
        buf: StringIO,
        category: str,
        entries: list[AllocationEntry],
    ) -> None:
        buf.write(f"{_INDENT}// {category} allocations\n")
        for entry in entries:
            buf.write(f"{_INDENT}{self.push_statement(entry)}\n")
            self._pushed += 1
        buf.write(_SEPARATOR)
        logger.debug("Rendered %d %s allocations", len(entries), category)

    def _write_footer(self, buf: StringIO) -> None:
        buf.write("    }\n")
        buf.write("}\n")


def render_contract(
    dataset: AllocationDataset,
    template: ContractTemplate | None = None,
) -> str:
    """Render *dataset* with a fresh :class:`ContractGenerator`."""
    return ContractGenerator(template).generate(dataset)
