"""Allocation dataset schema.

The dataset is a JSON object mapping a category name to an ordered list of
vesting entries::

    {
      "team": [
        {"address": "0xAA", "allocationAtStartDate": 10,
         "allocationAtEndDate": 100, "startDate": 1000, "endDate": 2000}
      ],
      "investors": []
    }

Field values are opaque literal tokens.  They are copied into the generated
contract verbatim, so the schema only checks that each one is a scalar the
renderer knows how to spell (string, number, boolean).  Numbers read from
JSON keep their source lexeme (``1e3`` stays ``1e3``, ``-0`` stays ``-0``).
Amounts and dates are **not** range-checked.

Category order and entry order are preserved exactly as read.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    RootModel,
    StrictBool,
    StrictInt,
    StrictStr,
    field_validator,
)


class NumberLiteral:
    """A JSON number held as the exact text it was written with."""

    __slots__ = ("text",)

    def __init__(self, text: str) -> None:
        self.text = text

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"NumberLiteral({self.text!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, NumberLiteral):
            return self.text == other.text
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.text)


Token = Union[StrictBool, StrictInt, StrictStr, NumberLiteral]
"""A literal value emitted into the contract without conversion."""


class AllocationEntry(BaseModel):
    """Single linear vesting record.

    JSON keys are camelCase (``allocationAtStartDate``) and only the
    camelCase spelling is accepted; attributes are snake_case.  Unknown
    keys are ignored.
    """

    model_config = ConfigDict(
        frozen=True, extra="ignore", arbitrary_types_allowed=True
    )

    address: Token = Field(..., description="Beneficiary account")
    allocation_at_start_date: Token = Field(
        ..., alias="allocationAtStartDate", description="Amount vested at start"
    )
    allocation_at_end_date: Token = Field(
        ..., alias="allocationAtEndDate", description="Amount vested at end"
    )
    start_date: Token = Field(..., alias="startDate", description="Vesting start")
    end_date: Token = Field(..., alias="endDate", description="Vesting end")

    @field_validator(
        "address",
        "allocation_at_start_date",
        "allocation_at_end_date",
        "start_date",
        "end_date",
        mode="before",
    )
    @classmethod
    def validate_token(cls, v: Any) -> Any:
        # In-memory fixtures may carry float / Decimal; JSON input never does.
        if isinstance(v, (bool, int, str, NumberLiteral)):
            return v
        if isinstance(v, float):
            if not math.isfinite(v):
                raise ValueError(f"non-finite number {v} cannot be emitted")
            return NumberLiteral(repr(v))
        if isinstance(v, Decimal):
            if not v.is_finite():
                raise ValueError(f"non-finite number {v} cannot be emitted")
            return NumberLiteral(str(v))
        raise ValueError(
            f"expected a string, number or boolean literal, got {type(v).__name__}"
        )


class AllocationDataset(RootModel[Dict[str, List[AllocationEntry]]]):
    """Ordered mapping of category name to allocation entries."""

    model_config = ConfigDict(frozen=True)

    def items(self) -> Iterator[Tuple[str, List[AllocationEntry]]]:
        """Iterate ``(category, entries)`` in input order."""
        return iter(self.root.items())

    @property
    def categories(self) -> List[str]:
        return list(self.root)

    @property
    def total_allocations(self) -> int:
        """Number of entries across all categories."""
        return sum(len(entries) for entries in self.root.values())

    def __len__(self) -> int:
        return len(self.root)
