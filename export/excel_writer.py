"""
Excel serialization of export documents.
Writes a finished Document as a single-sheet .xlsx file into a caller-owned stream.
"""

import io
import logging
from typing import Any, BinaryIO, Iterable, Optional, Sequence

from openpyxl import Workbook
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment
from openpyxl.utils import get_column_letter

from config import export_config
from models import CellKind, ColumnSpec, Document, ExtractionStrategy, OverflowMode
from .builder import (
    build_document,
    build_from_fields,
    build_from_mappings,
    build_from_type,
)
from .errors import ChannelError

logger = logging.getLogger(__name__)


XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class ExcelWriter:
    """Serialize documents to .xlsx."""

    def __init__(self, date_format: Optional[str] = None):
        self.date_format = date_format or export_config.date_format
        self.wrap_alignment = Alignment(wrap_text=True, vertical="top")

    def write(self, document: Document, stream: BinaryIO) -> BinaryIO:
        """
        Write a document into an open binary stream.

        The stream is neither closed nor flushed here; releasing it is the
        caller's job.

        Args:
            document: Finished Document
            stream: Writable binary stream

        Returns:
            The same stream

        Raises:
            ChannelError: if the workbook cannot be written to the stream
        """
        wb = self.to_workbook(document)

        try:
            wb.save(stream)
        except Exception as e:
            logger.error(f"Failed writing sheet '{document.sheet_name}': {e}")
            raise ChannelError(f"Could not write workbook: {e}") from e

        logger.info(
            f"Wrote sheet '{document.sheet_name}' with {len(document.rows)} rows"
        )
        return stream

    def to_workbook(self, document: Document) -> Workbook:
        """Build the openpyxl workbook for a document."""
        wb = Workbook()
        ws = wb.active
        ws.title = document.sheet_name

        # Header row
        for col_idx, header in enumerate(document.headers, 1):
            _set_text(ws.cell(row=1, column=col_idx), header)

        # Data rows
        for row_idx, row in enumerate(document.rows, 1):
            for col_idx, value in enumerate(row):
                wrapped = document.is_wrapped(row_idx, col_idx)
                if value.is_empty and not wrapped:
                    continue

                cell = ws.cell(row=row_idx + 1, column=col_idx + 1)
                if value.kind == CellKind.TEXT:
                    _set_text(cell, value.value)
                elif not value.is_empty:
                    cell.value = value.value
                if value.kind == CellKind.DATE:
                    cell.number_format = self.date_format
                if wrapped:
                    cell.alignment = self.wrap_alignment

        # Column widths
        for col_idx, layout in enumerate(document.layouts, 1):
            ws.column_dimensions[get_column_letter(col_idx)].width = layout.character_width

        return wb


def _set_text(cell, text: str):
    # Control characters are not allowed in worksheet XML
    cell.value = ILLEGAL_CHARACTERS_RE.sub("", text)
    # Text starting with "=" stays text, never a formula
    cell.data_type = "s"


def write_document(document: Document, stream: BinaryIO) -> BinaryIO:
    """Convenience function to write a document to a stream."""
    writer = ExcelWriter()
    return writer.write(document, stream)


def document_to_bytes(document: Document) -> bytes:
    """Serialized .xlsx bytes of a document."""
    buffer = io.BytesIO()
    write_document(document, buffer)
    return buffer.getvalue()


def export_document(
    columns: Sequence[ColumnSpec],
    records: Iterable[Any],
    stream: BinaryIO,
    strategy: ExtractionStrategy = ExtractionStrategy.FIELD,
    threshold: Optional[int] = None,
    overflow_mode: Optional[OverflowMode] = None,
) -> Document:
    """Build a document from column specs and write it to a stream."""
    document = build_document(columns, records, strategy, threshold, overflow_mode)
    write_document(document, stream)
    return document


def export_records(
    headers: Sequence[str],
    fields: Sequence[str],
    records: Iterable[Any],
    stream: BinaryIO,
    record_type: Optional[type] = None,
    threshold: Optional[int] = None,
    overflow_mode: Optional[OverflowMode] = None,
) -> Document:
    """Export selected named fields of structured records to a stream."""
    document = build_from_fields(headers, fields, records, record_type, threshold, overflow_mode)
    write_document(document, stream)
    return document


def export_mappings(
    headers: Sequence[str],
    records: Iterable[Any],
    stream: BinaryIO,
    keys: Optional[Sequence[str]] = None,
    threshold: Optional[int] = None,
    overflow_mode: Optional[OverflowMode] = None,
) -> Document:
    """Export string-keyed mappings to a stream; keys default to the headers."""
    document = build_from_mappings(headers, records, keys, threshold, overflow_mode)
    write_document(document, stream)
    return document


def export_all_fields(
    headers: Sequence[str],
    records: Iterable[Any],
    record_type: type,
    stream: BinaryIO,
    threshold: Optional[int] = None,
    overflow_mode: Optional[OverflowMode] = None,
) -> Document:
    """Export every declared field of record_type to a stream."""
    document = build_from_type(headers, records, record_type, threshold, overflow_mode)
    write_document(document, stream)
    return document
