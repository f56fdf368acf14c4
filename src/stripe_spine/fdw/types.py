"""
Row-side value types exchanged with the host query engine.

A cell is a tagged variant: either a typed scalar (``bool``, ``int``,
``str``, timezone-aware ``datetime``) or an opaque ``JsonDocument``. The
reserved ``attrs`` column always holds a ``JsonDocument`` with the full
upstream record.

Examples:
    >>> row = Row()
    >>> row.push("id", "cus_123")
    >>> row.push("attrs", JsonDocument({"id": "cus_123", "metadata": {}}))
    >>> row.columns
    ['id', 'attrs']
    >>> row["id"]
    'cus_123'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterator, Union

# Reserved column carrying the raw upstream record
ATTRS_COLUMN = "attrs"

# Only this operator is eligible for pushdown
EQUALS = "="


@dataclass(frozen=True)
class JsonDocument:
    """Opaque JSON object stored in a single cell."""

    value: dict[str, Any]


Cell = Union[bool, int, str, datetime, JsonDocument]


@dataclass
class Row:
    """
    Ordered mapping of column name to an optional cell.

    Columns keep insertion order; pushing an existing column replaces its
    cell in place.
    """

    _columns: list[str] = field(default_factory=list)
    _cells: list[Cell | None] = field(default_factory=list)

    @classmethod
    def from_dict(cls, values: dict[str, Cell | None]) -> Row:
        row = cls()
        for name, cell in values.items():
            row.push(name, cell)
        return row

    def push(self, column: str, cell: Cell | None) -> None:
        if column in self._columns:
            self._cells[self._columns.index(column)] = cell
            return
        self._columns.append(column)
        self._cells.append(cell)

    @property
    def columns(self) -> list[str]:
        return list(self._columns)

    @property
    def cells(self) -> list[Cell | None]:
        return list(self._cells)

    def get(self, column: str, default: Any = None) -> Any:
        if column in self._columns:
            return self._cells[self._columns.index(column)]
        return default

    def items(self) -> Iterator[tuple[str, Cell | None]]:
        return iter(zip(self._columns, self._cells))

    def to_dict(self) -> dict[str, Cell | None]:
        return dict(self.items())

    def __getitem__(self, column: str) -> Cell | None:
        if column not in self._columns:
            raise KeyError(column)
        return self._cells[self._columns.index(column)]

    def __contains__(self, column: object) -> bool:
        return column in self._columns

    def __len__(self) -> int:
        return len(self._columns)


@dataclass(frozen=True)
class Qual:
    """
    A single predicate supplied by the host.

    ``use_or`` marks a predicate that is one arm of a disjunction; such
    predicates are never pushed down.
    """

    field: str
    operator: str
    value: Any
    use_or: bool = False

    @property
    def is_pushable_equality(self) -> bool:
        return self.operator == EQUALS and not self.use_or


@dataclass(frozen=True)
class Sort:
    """Requested ordering. Accepted for interface parity, never pushed down."""

    field: str
    reversed: bool = False


@dataclass(frozen=True)
class Limit:
    """LIMIT/OFFSET requested by the host."""

    count: int
    offset: int = 0


__all__ = [
    "ATTRS_COLUMN",
    "EQUALS",
    "Cell",
    "JsonDocument",
    "Row",
    "Qual",
    "Sort",
    "Limit",
]
