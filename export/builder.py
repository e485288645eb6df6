"""
Document assembly: resolves, formats and lays out every (record, column) pair.
"""

import logging
import types
import typing
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from config import export_config
from models import ColumnSpec, ColumnType, Document, ExtractionStrategy, OverflowMode
from validation import validate_export_config
from .accessors import EMPTY, declared_fields, declared_types, extract_field, resolve
from .errors import ConfigurationError
from .formatter import CellFormatter
from .layout import LayoutEngine

logger = logging.getLogger(__name__)


class WorkbookBuilder:
    """Build a single-sheet document from records."""

    def __init__(
        self,
        threshold: Optional[int] = None,
        overflow_mode: Optional[OverflowMode] = None,
        strategy: ExtractionStrategy = ExtractionStrategy.FIELD,
        sheet_name: Optional[str] = None,
    ):
        self.strategy = strategy
        self.threshold = default_threshold(strategy) if threshold is None else threshold
        self.overflow_mode = overflow_mode or export_config.overflow_mode
        self.sheet_name = sheet_name or export_config.sheet_name

    def build(self, columns: Sequence[ColumnSpec], records: Iterable[Any]) -> Document:
        """
        Build a document.

        Args:
            columns: Column specs, in output order
            records: Records to export, one row each, in order

        Returns:
            The finished Document

        Raises:
            ConfigurationError: if the columns cannot describe a sheet
        """
        columns = list(columns)
        check_configuration(
            [c.header for c in columns], columns, threshold=self.threshold
        )

        formatter = CellFormatter(self.threshold)
        layout = LayoutEngine(columns, self.overflow_mode, sheet_name=self.sheet_name)

        for record in records:
            cells = [
                formatter.format(resolve(record, column, self.strategy), column.column_type)
                for column in columns
            ]
            layout.add_row(cells)

        document = layout.finish()
        logger.info(
            f"Built sheet '{document.sheet_name}': {len(document.rows)} rows, "
            f"{document.column_count} columns, oversized columns {document.oversized_columns}"
        )
        return document


def default_threshold(strategy: ExtractionStrategy) -> int:
    """Overflow threshold used when the caller does not choose one."""
    if strategy == ExtractionStrategy.KEY:
        return export_config.map_overflow_threshold
    return export_config.field_overflow_threshold


def check_configuration(
    headers: Sequence[str],
    columns: Sequence[Union[str, ColumnSpec]],
    record_type: Optional[type] = None,
    require_type: bool = False,
    threshold: Optional[int] = None,
):
    """
    Validate an export configuration before any row is built.

    Raises:
        ConfigurationError: when any error-level issue is found
    """
    result = validate_export_config(headers, columns, record_type, require_type, threshold)

    for issue in result.issues:
        if issue.severity == "warning":
            logger.warning(f"{issue.field}: {issue.message}")

    if result.has_errors:
        message = "; ".join(f"{i.field}: {i.message}" for i in result.errors)
        logger.error(f"Invalid export configuration: {message}")
        raise ConfigurationError(message, result.issues)


def column_type_for(annotation: Any) -> ColumnType:
    """Column type matching a field annotation; anything unrecognised is text."""
    annotation = _unwrap(annotation)
    if not isinstance(annotation, type):
        return ColumnType.TEXT
    if issubclass(annotation, date):
        return ColumnType.DATE
    if issubclass(annotation, bool):
        return ColumnType.TEXT
    if issubclass(annotation, int):
        return ColumnType.INTEGER
    if issubclass(annotation, (float, Decimal)):
        return ColumnType.DECIMAL
    return ColumnType.TEXT


def columns_for_type(
    headers: Sequence[str],
    fields: Sequence[str],
    record_type: Optional[type] = None,
) -> List[ColumnSpec]:
    """Column specs binding headers to fields, typed from the record type's annotations."""
    annotations = declared_types(record_type) if record_type is not None else {}
    return _typed_columns(headers, fields, annotations)


def sample_types(fields: Sequence[str], sample: Any) -> Dict[str, Any]:
    """
    Types of the named fields of one record.

    Class annotations win; unannotated fields use the runtime type of the
    record's value, and stay untyped when the value is missing.
    """
    annotations = declared_types(type(sample))
    types_by_field: Dict[str, Any] = {}
    for name in fields:
        annotation = annotations.get(name)
        if annotation is None:
            value = extract_field(sample, name)
            annotation = None if value is EMPTY else type(value)
        types_by_field[name] = annotation
    return types_by_field


def _typed_columns(
    headers: Sequence[str],
    fields: Sequence[str],
    annotations: Dict[str, Any],
) -> List[ColumnSpec]:
    return [
        ColumnSpec(
            header=header,
            binding=name,
            column_type=column_type_for(annotations.get(name)),
        )
        for header, name in zip(headers, fields)
    ]


def build_document(
    columns: Sequence[ColumnSpec],
    records: Iterable[Any],
    strategy: ExtractionStrategy = ExtractionStrategy.FIELD,
    threshold: Optional[int] = None,
    overflow_mode: Optional[OverflowMode] = None,
) -> Document:
    """Convenience function to build a document from column specs."""
    builder = WorkbookBuilder(threshold, overflow_mode, strategy)
    return builder.build(columns, records)


def build_from_fields(
    headers: Sequence[str],
    fields: Sequence[str],
    records: Iterable[Any],
    record_type: Optional[type] = None,
    threshold: Optional[int] = None,
    overflow_mode: Optional[OverflowMode] = None,
) -> Document:
    """
    Build a document from selected named fields of structured records.

    Fields are typed from record_type's annotations when it is given,
    otherwise from the first record: its class annotations, then the
    runtime type of its values. Fields with neither are text.
    """
    threshold = export_config.field_overflow_threshold if threshold is None else threshold
    check_configuration(headers, fields, record_type, threshold=threshold)

    if record_type is not None:
        columns = columns_for_type(headers, fields, record_type)
    else:
        records = list(records)
        annotations = sample_types(fields, records[0]) if records else {}
        columns = _typed_columns(headers, fields, annotations)
    return build_document(columns, records, ExtractionStrategy.FIELD, threshold, overflow_mode)


def build_from_mappings(
    headers: Sequence[str],
    records: Iterable[Any],
    keys: Optional[Sequence[str]] = None,
    threshold: Optional[int] = None,
    overflow_mode: Optional[OverflowMode] = None,
) -> Document:
    """
    Build a document from string-keyed mappings.

    Keys default to the headers themselves, so mapping keys must match the
    header labels unless keys are given.
    """
    keys = list(headers) if keys is None else list(keys)
    threshold = export_config.map_overflow_threshold if threshold is None else threshold
    check_configuration(headers, keys, threshold=threshold)

    columns = [ColumnSpec(header=h, binding=k) for h, k in zip(headers, keys)]
    return build_document(columns, records, ExtractionStrategy.KEY, threshold, overflow_mode)


def build_from_type(
    headers: Sequence[str],
    records: Iterable[Any],
    record_type: type,
    threshold: Optional[int] = None,
    overflow_mode: Optional[OverflowMode] = None,
) -> Document:
    """
    Build a document from every declared field of record_type, in declaration order.

    One header is required per declared field.
    """
    threshold = export_config.dump_overflow_threshold if threshold is None else threshold
    fields = declared_fields(record_type) if isinstance(record_type, type) else []
    check_configuration(headers, fields, record_type, require_type=True, threshold=threshold)

    columns = columns_for_type(headers, fields, record_type)
    return build_document(columns, records, ExtractionStrategy.FIELD, threshold, overflow_mode)


def _unwrap(annotation: Any) -> Any:
    """Strip Optional, Union and Annotated wrappers down to the first concrete type."""
    origin = typing.get_origin(annotation)
    if origin is typing.Annotated:
        return _unwrap(typing.get_args(annotation)[0])
    if origin is Union or origin is types.UnionType:
        for arg in typing.get_args(annotation):
            if arg is not type(None):
                return _unwrap(arg)
    return annotation
