"""Export module for building and writing single-sheet spreadsheets."""

from .errors import (
    ExportError,
    ConfigurationError,
    ChannelError,
    AccessFault,
    CoercionFault,
)
from .accessors import EMPTY, declared_fields, extract_field, extract_key, resolve
from .formatter import CellFormatter, format_value
from .layout import LayoutEngine
from .builder import (
    WorkbookBuilder,
    build_document,
    build_from_fields,
    build_from_mappings,
    build_from_type,
    column_type_for,
)
from .excel_writer import (
    ExcelWriter,
    XLSX_MEDIA_TYPE,
    write_document,
    document_to_bytes,
    export_document,
    export_records,
    export_mappings,
    export_all_fields,
)

__all__ = [
    "ExportError",
    "ConfigurationError",
    "ChannelError",
    "AccessFault",
    "CoercionFault",
    "EMPTY",
    "declared_fields",
    "extract_field",
    "extract_key",
    "resolve",
    "CellFormatter",
    "format_value",
    "LayoutEngine",
    "WorkbookBuilder",
    "build_document",
    "build_from_fields",
    "build_from_mappings",
    "build_from_type",
    "column_type_for",
    "ExcelWriter",
    "XLSX_MEDIA_TYPE",
    "write_document",
    "document_to_bytes",
    "export_document",
    "export_records",
    "export_mappings",
    "export_all_fields",
]
