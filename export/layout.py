"""
Row assembly and column sizing for an export document.
"""

import logging
from typing import List, Optional, Sequence, Set, Tuple

from config import export_config
from models import (
    CellValue,
    ColumnLayout,
    ColumnSpec,
    Document,
    FormattedCell,
    LayoutMode,
    OverflowMode,
)

logger = logging.getLogger(__name__)


class LayoutEngine:
    """
    Assembles header and data rows and decides column width and wrapping.

    Overflow tracking has two modes:
    - LAST_WINS: a single "last oversized column" index is overwritten on every
      overflowing cell, so at most one column ends up fixed-width.
    - TRACK_ALL: every column with an overflowing cell ends up fixed-width.

    An overflowing cell is always wrapped. A fixed-width column is wrapped on
    every data row.
    """

    def __init__(
        self,
        columns: Sequence[ColumnSpec],
        overflow_mode: OverflowMode = OverflowMode.LAST_WINS,
        sheet_name: Optional[str] = None,
        fixed_width: Optional[int] = None,
    ):
        self.columns = list(columns)
        self.overflow_mode = overflow_mode
        self.sheet_name = sheet_name or export_config.sheet_name
        self.fixed_width = fixed_width or export_config.oversized_column_width

        self.header_row: List[CellValue] = [CellValue.text(c.header) for c in self.columns]
        self.rows: List[List[CellValue]] = []
        self.wrapped_cells: Set[Tuple[int, int]] = set()

        self.last_oversized_column: Optional[int] = None
        self.oversized_columns: Set[int] = set()

    def add_row(self, cells: Sequence[FormattedCell]) -> int:
        """
        Append a data row.

        Args:
            cells: One formatted cell per column, in column order

        Returns:
            Sheet row index of the new row (1-based, the header is row 0)
        """
        if len(cells) != len(self.columns):
            raise ValueError(
                f"Row has {len(cells)} cells, expected {len(self.columns)}"
            )

        row_index = len(self.rows) + 1
        self.rows.append([c.cell for c in cells])

        for col_index, formatted in enumerate(cells):
            if formatted.overflow:
                self._mark_oversized(row_index, col_index)

        return row_index

    def _mark_oversized(self, row_index: int, col_index: int):
        self.wrapped_cells.add((row_index, col_index))
        if self.overflow_mode == OverflowMode.TRACK_ALL:
            self.oversized_columns.add(col_index)
        else:
            if self.last_oversized_column not in (None, col_index):
                logger.debug(
                    f"Oversized column {self.last_oversized_column} replaced by {col_index}"
                )
            self.last_oversized_column = col_index

    def fixed_columns(self) -> List[int]:
        """Columns that keep a fixed width after the sizing pass."""
        if self.overflow_mode == OverflowMode.TRACK_ALL:
            return sorted(self.oversized_columns)
        if self.last_oversized_column is None:
            return []
        return [self.last_oversized_column]

    def finish(self) -> Document:
        """Run the sizing pass and return the finished document."""
        fixed = set(self.fixed_columns())

        layouts = []
        for col_index in range(len(self.columns)):
            if col_index in fixed:
                layouts.append(ColumnLayout(LayoutMode.FIXED_WRAP, self.fixed_width))
                for row_index in range(1, len(self.rows) + 1):
                    self.wrapped_cells.add((row_index, col_index))
            else:
                layouts.append(ColumnLayout(LayoutMode.AUTO_SIZE, self._auto_fit(col_index)))

        return Document(
            sheet_name=self.sheet_name,
            columns=list(self.columns),
            header_row=list(self.header_row),
            rows=[list(r) for r in self.rows],
            layouts=layouts,
            wrapped_cells=set(self.wrapped_cells),
            oversized_columns=sorted(fixed),
        )

    def _auto_fit(self, col_index: int) -> float:
        """Width in characters that fits the rendered content of a column."""
        min_width = export_config.autofit_min_width
        max_width = export_config.autofit_max_width

        max_length = len(self.header_row[col_index].render())
        for row in self.rows:
            for line in row[col_index].render().splitlines() or [""]:
                max_length = max(max_length, len(line))

        return min(max(max_length + export_config.autofit_padding, min_width), max_width)
