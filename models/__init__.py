"""Data models for the sheet export engine."""

from .export import (
    ColumnType,
    CellKind,
    ExtractionStrategy,
    OverflowMode,
    LayoutMode,
    ColumnSpec,
    CellValue,
    EMPTY_CELL,
    FormattedCell,
    ColumnLayout,
    Document,
    format_date,
)
from .directory import (
    LookupBy,
    DirectoryPerson,
    DirectoryLookup,
    DIRECTORY_ATTRIBUTES,
)

__all__ = [
    "ColumnType",
    "CellKind",
    "ExtractionStrategy",
    "OverflowMode",
    "LayoutMode",
    "ColumnSpec",
    "CellValue",
    "EMPTY_CELL",
    "FormattedCell",
    "ColumnLayout",
    "Document",
    "format_date",
    "LookupBy",
    "DirectoryPerson",
    "DirectoryLookup",
    "DIRECTORY_ATTRIBUTES",
]
