"""Tests for the contract generator.

Validates the declared array size, push-statement count, category and
entry ordering, the fixed constructor argument order, literal rendering,
template substitution, and the capacity guard.
"""

from __future__ import annotations

import re
from io import StringIO
from pathlib import Path

import pytest

from allocgen.codegen.generator import (
    ContractGenerator,
    GenerationError,
    render_contract,
    render_token,
)
from allocgen.configs.loader import ContractTemplate
from allocgen.dataset.loader import load_dataset, parse_dataset
from allocgen.dataset.schema import (
    AllocationDataset,
    AllocationEntry,
    NumberLiteral,
)

PUSH_RE = re.compile(
    r"allAllocations\.push\(AllocationVesting\.LinearVesting\((.*)\)\);$"
)
SIZE_RE = re.compile(r"new AllocationVesting\.LinearVesting\[\]\((\d+)\);")


def _entry(address: str, start_alloc, end_alloc, start, end) -> dict:
    return {
        "address": address,
        "allocationAtStartDate": start_alloc,
        "allocationAtEndDate": end_alloc,
        "startDate": start,
        "endDate": end,
    }


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def example() -> AllocationDataset:
    """Single team entry plus an empty investors category."""
    return parse_dataset({
        "team": [_entry("0xAA", 10, 100, 1000, 2000)],
        "investors": [],
    })


@pytest.fixture()
def multi() -> AllocationDataset:
    return parse_dataset({
        "team": [
            _entry("0xA1", 1, 11, 100, 200),
            _entry("0xA2", 2, 12, 101, 201),
        ],
        "investors": [
            _entry("0xB1", 3, 13, 102, 202),
        ],
        "advisors": [
            _entry("0xC1", 4, 14, 103, 203),
            _entry("0xC2", 5, 15, 104, 204),
            _entry("0xC3", 6, 16, 105, 205),
        ],
    })


@pytest.fixture()
def gen() -> ContractGenerator:
    return ContractGenerator()


def _pushes(source: str) -> list[list[str]]:
    out = []
    for line in source.splitlines():
        m = PUSH_RE.search(line.strip())
        if m:
            out.append(m.group(1).split(", "))
    return out


def _declared_size(source: str) -> int:
    m = SIZE_RE.search(source)
    assert m is not None
    return int(m.group(1))


# ---------------------------------------------------------------------------
# Exact output
# ---------------------------------------------------------------------------


class TestExactOutput:
    def test_example_contract(
        self, gen: ContractGenerator, example: AllocationDataset,
    ) -> None:
        expected = (
            "// SPDX-License-Identifier: MIT\n"
            "pragma solidity ^0.8.19;\n"
            "\n"
            'import "src/token/AllocationVesting.sol";\n'
            "\n"
            "contract GeneratedAllocations {\n"
            "   \n"
            "\n"
            "   AllocationVesting.LinearVesting[] public allAllocations = "
            "new AllocationVesting.LinearVesting[](1);\n"
            "\n"
            "    constructor() {\n"
            "        // team allocations\n"
            "        allAllocations.push(AllocationVesting.LinearVesting"
            "(0xAA, 100, 10, 1000, 2000));\n"
            "   \n"
            "        // investors allocations\n"
            "   \n"
            "    }\n"
            "}\n"
        )
        assert gen.generate(example) == expected

    def test_empty_dataset(self, gen: ContractGenerator) -> None:
        source = gen.generate(parse_dataset({}))
        assert _declared_size(source) == 0
        assert _pushes(source) == []
        assert source.endswith("    constructor() {\n    }\n}\n")


# ---------------------------------------------------------------------------
# Counting
# ---------------------------------------------------------------------------


class TestCounts:
    def test_declared_size_matches_entries(
        self, gen: ContractGenerator, multi: AllocationDataset,
    ) -> None:
        source = gen.generate(multi)
        assert _declared_size(source) == 6
        assert multi.total_allocations == 6

    def test_push_count_matches_entries(
        self, gen: ContractGenerator, multi: AllocationDataset,
    ) -> None:
        assert len(_pushes(gen.generate(multi))) == 6

    def test_every_statement_terminated(
        self, gen: ContractGenerator, multi: AllocationDataset,
    ) -> None:
        lines = [
            l for l in gen.generate(multi).splitlines()
            if "allAllocations.push(" in l
        ]
        assert len(lines) == 6
        assert all(l.endswith(");") for l in lines)

    def test_empty_category_contributes_comment_only(
        self, gen: ContractGenerator, example: AllocationDataset,
    ) -> None:
        lines = gen.generate(example).splitlines()
        idx = lines.index("        // investors allocations")
        assert lines[idx + 1].strip() == ""
        assert lines[idx + 2] == "    }"

    def test_log_reports_total(
        self,
        gen: ContractGenerator,
        multi: AllocationDataset,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        with caplog.at_level("INFO", logger="allocgen.codegen.generator"):
            gen.generate(multi)
        assert "Total allocations found: 6" in caplog.text


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


class TestOrdering:
    def test_category_order_preserved(
        self, gen: ContractGenerator, multi: AllocationDataset,
    ) -> None:
        comments = [
            l.strip() for l in gen.generate(multi).splitlines()
            if l.strip().endswith(" allocations") and l.strip().startswith("//")
        ]
        assert comments == [
            "// team allocations",
            "// investors allocations",
            "// advisors allocations",
        ]

    def test_non_alphabetical_order_kept(self, gen: ContractGenerator) -> None:
        ds = parse_dataset({
            "zeta": [_entry("0xZ", 1, 2, 3, 4)],
            "alpha": [_entry("0xA", 1, 2, 3, 4)],
        })
        source = gen.generate(ds)
        assert source.index("// zeta allocations") < source.index("// alpha allocations")

    def test_entry_order_preserved(
        self, gen: ContractGenerator, multi: AllocationDataset,
    ) -> None:
        addresses = [args[0] for args in _pushes(gen.generate(multi))]
        assert addresses == ["0xA1", "0xA2", "0xB1", "0xC1", "0xC2", "0xC3"]

    def test_entries_grouped_under_their_category(
        self, gen: ContractGenerator, multi: AllocationDataset,
    ) -> None:
        source = gen.generate(multi)
        assert (
            source.index("// investors allocations")
            < source.index("(0xB1,")
            < source.index("// advisors allocations")
        )


# ---------------------------------------------------------------------------
# Argument mapping
# ---------------------------------------------------------------------------


class TestArgumentOrder:
    def test_end_allocation_before_start_allocation(
        self, gen: ContractGenerator, multi: AllocationDataset,
    ) -> None:
        pushes = _pushes(gen.generate(multi))
        entries = [e for _, group in multi.items() for e in group]
        for args, entry in zip(pushes, entries):
            assert args == [
                str(entry.address),
                str(entry.allocation_at_end_date),
                str(entry.allocation_at_start_date),
                str(entry.start_date),
                str(entry.end_date),
            ]

    def test_push_statement(self, gen: ContractGenerator) -> None:
        entry = AllocationEntry.model_validate(_entry("0xAA", 10, 100, 1000, 2000))
        assert gen.push_statement(entry) == (
            "allAllocations.push(AllocationVesting.LinearVesting"
            "(0xAA, 100, 10, 1000, 2000));"
        )


# ---------------------------------------------------------------------------
# Literal rendering
# ---------------------------------------------------------------------------


class TestTokens:
    def test_large_integer_not_rounded(self, gen: ContractGenerator) -> None:
        big = 15_000_000_000_000_000_000_000_000
        ds = parse_dataset({"team": [_entry("0xAA", 0, big, 1, 2)]})
        assert "(0xAA, 15000000000000000000000000, 0, 1, 2)" in gen.generate(ds)

    def test_number_literal_verbatim(self) -> None:
        assert render_token(NumberLiteral("1e3")) == "1e3"
        assert render_token(NumberLiteral("-0")) == "-0"

    def test_json_numbers_reach_contract_as_written(self, tmp_path: Path) -> None:
        path = tmp_path / "allocations.json"
        path.write_text(
            '{"team": [{"address": "0xAA", "allocationAtStartDate": 0.0000001, '
            '"allocationAtEndDate": 1e3, "startDate": -0, "endDate": 2000}]}',
            encoding="utf-8",
        )
        source = render_contract(load_dataset(path))
        assert (
            "allAllocations.push(AllocationVesting.LinearVesting"
            "(0xAA, 1e3, 0.0000001, -0, 2000));"
        ) in source

    def test_trailing_zeros_kept(self, tmp_path: Path) -> None:
        path = tmp_path / "allocations.json"
        path.write_text(
            '{"team": [{"address": "0xAA", "allocationAtStartDate": 1.50, '
            '"allocationAtEndDate": 2.0, "startDate": 1, "endDate": 2}]}',
            encoding="utf-8",
        )
        source = render_contract(load_dataset(path))
        assert "(0xAA, 2.0, 1.50, 1, 2)" in source

    def test_booleans_lowercase(self) -> None:
        assert render_token(True) == "true"
        assert render_token(False) == "false"

    def test_strings_unquoted(self) -> None:
        assert render_token("1 ether") == "1 ether"

    def test_unsupported_literal(self) -> None:
        with pytest.raises(GenerationError):
            render_token(None)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Determinism / immutability
# ---------------------------------------------------------------------------


class TestDeterminism:
    def test_byte_identical_runs(self, multi: AllocationDataset) -> None:
        assert render_contract(multi) == render_contract(multi)

    def test_generator_reusable(
        self, gen: ContractGenerator, multi: AllocationDataset,
    ) -> None:
        assert gen.generate(multi) == gen.generate(multi)

    def test_dataset_not_mutated(
        self, gen: ContractGenerator, multi: AllocationDataset,
    ) -> None:
        before = multi.model_dump(by_alias=True)
        gen.generate(multi)
        assert multi.model_dump(by_alias=True) == before


# ---------------------------------------------------------------------------
# Template
# ---------------------------------------------------------------------------


class TestTemplate:
    def test_custom_names(self, example: AllocationDataset) -> None:
        tpl = ContractTemplate(
            pragma="0.8.24",
            contract_name="SeedAllocations",
            library_name="Vesting",
            struct_name="Schedule",
            array_name="schedules",
        )
        source = render_contract(example, tpl)
        assert "pragma solidity 0.8.24;" in source
        assert "contract SeedAllocations {" in source
        assert "Vesting.Schedule[] public schedules = new Vesting.Schedule[](1);" in source
        assert "schedules.push(Vesting.Schedule(0xAA, 100, 10, 1000, 2000));" in source

    def test_default_template(self, gen: ContractGenerator) -> None:
        assert gen.template == ContractTemplate()


# ---------------------------------------------------------------------------
# Capacity guard
# ---------------------------------------------------------------------------


class _DroppingGenerator(ContractGenerator):
    """Emits category comments but skips every entry."""

    def _write_category(self, buf: StringIO, category: str, entries) -> None:
        buf.write(f"        // {category} allocations\n")


class TestCapacityGuard:
    def test_mismatch_raises(self, multi: AllocationDataset) -> None:
        with pytest.raises(GenerationError, match="Declared 6"):
            _DroppingGenerator().generate(multi)

    def test_empty_dataset_passes(self) -> None:
        _DroppingGenerator().generate(parse_dataset({"team": []}))
