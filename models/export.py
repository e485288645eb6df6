"""
Data models for the sheet export engine.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Set, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class ColumnType(str, Enum):
    """Declared type of an output column."""
    TEXT = "text"
    DATE = "date"
    INTEGER = "integer"
    DECIMAL = "decimal"


class CellKind(str, Enum):
    """Kind of a formatted cell."""
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    EMPTY = "empty"


class ExtractionStrategy(str, Enum):
    """How a column binding is resolved against a record."""
    FIELD = "field"  # named field on a structured object
    KEY = "key"      # key in a string-keyed mapping


class OverflowMode(str, Enum):
    """How oversized columns are tracked across a document."""
    LAST_WINS = "last_wins"   # only the most recently overflowing column is fixed
    TRACK_ALL = "track_all"   # every overflowing column is fixed


class LayoutMode(str, Enum):
    """Sizing decision for one column."""
    AUTO_SIZE = "auto_size"
    FIXED_WRAP = "fixed_wrap"


class ColumnSpec(BaseModel):
    """One output column: header label, value binding and declared type."""

    model_config = ConfigDict(frozen=True)

    header: str
    binding: str
    column_type: ColumnType = ColumnType.TEXT

    # Explicit accessor, takes the record and returns the raw value.
    # When set it replaces lookup by binding name.
    accessor: Optional[Callable[[Any], Any]] = Field(default=None, exclude=True)


@dataclass(frozen=True)
class CellValue:
    """Typed, formatted result of resolving one (record, column) pair."""
    kind: CellKind
    value: Union[str, int, float, date, None] = None

    @classmethod
    def text(cls, value: str) -> "CellValue":
        return cls(CellKind.TEXT, value)

    @classmethod
    def number(cls, value: Union[int, float]) -> "CellValue":
        return cls(CellKind.NUMBER, value)

    @classmethod
    def date(cls, value: date) -> "CellValue":
        return cls(CellKind.DATE, value)

    @classmethod
    def empty(cls) -> "CellValue":
        return cls(CellKind.EMPTY, None)

    @property
    def is_empty(self) -> bool:
        return self.kind == CellKind.EMPTY

    def render(self) -> str:
        """Display text of the cell, as a spreadsheet would show it."""
        if self.kind == CellKind.EMPTY:
            return ""
        if self.kind == CellKind.DATE:
            return format_date(self.value)
        if self.kind == CellKind.NUMBER and isinstance(self.value, float):
            return f"{self.value:g}"
        return str(self.value)


EMPTY_CELL = CellValue.empty()


@dataclass(frozen=True)
class FormattedCell:
    """Formatter output: the cell plus whether its text overflowed."""
    cell: CellValue
    overflow: bool = False


@dataclass(frozen=True)
class ColumnLayout:
    """Sizing decision for a column.

    For AUTO_SIZE the width is in characters, for FIXED_WRAP it is in
    1/256 character units.
    """
    mode: LayoutMode
    width: float

    @property
    def is_fixed(self) -> bool:
        return self.mode == LayoutMode.FIXED_WRAP

    @property
    def character_width(self) -> float:
        if self.is_fixed:
            return self.width / 256
        return self.width


@dataclass
class Document:
    """Complete in-memory single-sheet spreadsheet, ready to serialize."""
    sheet_name: str
    columns: List[ColumnSpec]
    header_row: List[CellValue]
    rows: List[List[CellValue]] = field(default_factory=list)
    layouts: List[ColumnLayout] = field(default_factory=list)
    wrapped_cells: Set[Tuple[int, int]] = field(default_factory=set)
    oversized_columns: List[int] = field(default_factory=list)

    @property
    def headers(self) -> List[str]:
        return [c.value for c in self.header_row]

    @property
    def row_count(self) -> int:
        """Number of rows including the header row."""
        return len(self.rows) + 1

    @property
    def column_count(self) -> int:
        return len(self.columns)

    def cell(self, row: int, column: int) -> CellValue:
        """Cell at a 0-based position; row 0 is the header."""
        if row == 0:
            return self.header_row[column]
        return self.rows[row - 1][column]

    def is_wrapped(self, row: int, column: int) -> bool:
        return (row, column) in self.wrapped_cells

    def values(self) -> List[List[Any]]:
        """Plain values of header and data rows, Empty as None."""
        table = [list(self.headers)]
        for row in self.rows:
            table.append([c.value for c in row])
        return table

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sheet_name": self.sheet_name,
            "headers": self.headers,
            "rows": [[c.render() for c in row] for row in self.rows],
            "layouts": [
                {"mode": l.mode.value, "width": l.width} for l in self.layouts
            ],
            "oversized_columns": list(self.oversized_columns),
        }


def format_date(value: date) -> str:
    """Format a date as m/dd/yyyy without consulting the locale."""
    return f"{value.month}/{value.day:02d}/{value.year:04d}"
