"""
Validation rules for export configuration.
Checks headers, column bindings and type descriptors before a document is built.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from models import ColumnSpec

logger = logging.getLogger(__name__)


@dataclass
class ValidationIssue:
    """Represents a single validation issue."""
    field: str
    issue_type: str
    message: str
    severity: str = "error"  # error, warning


@dataclass
class ValidationResult:
    """Result of validating one export configuration."""
    is_valid: bool
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(i.severity == "error" for i in self.issues)

    @property
    def has_warnings(self) -> bool:
        return any(i.severity == "warning" for i in self.issues)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == "error"]


class ExportConfigValidator:
    """Validator for export configuration."""

    def validate(
        self,
        headers: Sequence[str],
        columns: Sequence[Union[str, ColumnSpec]],
        record_type: Optional[type] = None,
        require_type: bool = False,
        threshold: Optional[int] = None,
    ) -> ValidationResult:
        """
        Validate an export configuration.

        Args:
            headers: Header labels, in column order
            columns: Column bindings (names or ColumnSpecs), in column order
            record_type: Type descriptor of the records, if any
            require_type: Whether a type descriptor must be supplied
            threshold: Overflow threshold selected for the call

        Returns:
            ValidationResult with issues
        """
        result = ValidationResult(is_valid=True)

        self._validate_headers(headers, result)
        self._validate_columns(columns, result)
        self._validate_counts(headers, columns, result)
        self._validate_record_type(record_type, require_type, result)
        self._validate_threshold(threshold, result)

        if result.has_errors:
            result.is_valid = False
            logger.debug(f"Export configuration has {len(result.errors)} error(s)")

        return result

    def _validate_headers(self, headers: Sequence[str], result: ValidationResult):
        """Headers must be supplied; a blank header is written as an empty cell."""
        if not headers:
            result.issues.append(ValidationIssue(
                field="headers",
                issue_type="missing",
                message="No headers supplied"
            ))
            return

        for index, header in enumerate(headers):
            if header is None:
                result.issues.append(ValidationIssue(
                    field="headers",
                    issue_type="missing",
                    message=f"Header {index} is missing"
                ))
            elif not str(header).strip():
                result.issues.append(ValidationIssue(
                    field="headers",
                    issue_type="blank",
                    message=f"Header {index} is blank",
                    severity="warning"
                ))

    def _validate_columns(
        self,
        columns: Sequence[Union[str, ColumnSpec]],
        result: ValidationResult
    ):
        """Bindings must be supplied; duplicates are allowed but suspicious."""
        if not columns:
            result.issues.append(ValidationIssue(
                field="columns",
                issue_type="missing",
                message="No column bindings supplied"
            ))
            return

        seen = set()
        for index, column in enumerate(columns):
            binding = _binding_of(column)
            if binding is None:
                continue
            if not binding.strip():
                result.issues.append(ValidationIssue(
                    field="columns",
                    issue_type="blank",
                    message=f"Column {index} has no binding"
                ))
                continue
            if binding in seen:
                result.issues.append(ValidationIssue(
                    field="columns",
                    issue_type="duplicate",
                    message=f"Binding '{binding}' is used more than once",
                    severity="warning"
                ))
            seen.add(binding)

    def _validate_counts(
        self,
        headers: Sequence[str],
        columns: Sequence[Union[str, ColumnSpec]],
        result: ValidationResult
    ):
        """Every header needs exactly one binding."""
        if headers and columns and len(headers) != len(columns):
            result.issues.append(ValidationIssue(
                field="columns",
                issue_type="count_mismatch",
                message=f"{len(headers)} headers but {len(columns)} column bindings"
            ))

    def _validate_record_type(
        self,
        record_type: Optional[type],
        require_type: bool,
        result: ValidationResult
    ):
        """A required type descriptor must be a class declaring at least one field."""
        if record_type is None:
            if require_type:
                result.issues.append(ValidationIssue(
                    field="record_type",
                    issue_type="missing",
                    message="No record type supplied"
                ))
            return

        if not isinstance(record_type, type):
            result.issues.append(ValidationIssue(
                field="record_type",
                issue_type="invalid",
                message=f"Record type must be a class, got {type(record_type).__name__}"
            ))
            return

        from export.accessors import declared_fields

        if not declared_fields(record_type):
            result.issues.append(ValidationIssue(
                field="record_type",
                issue_type="no_fields",
                message=f"{record_type.__name__} declares no fields"
            ))

    def _validate_threshold(self, threshold: Optional[int], result: ValidationResult):
        """Overflow threshold must be positive."""
        if threshold is not None and threshold < 1:
            result.issues.append(ValidationIssue(
                field="threshold",
                issue_type="range",
                message=f"Overflow threshold must be positive, got {threshold}"
            ))


def validate_export_config(
    headers: Sequence[str],
    columns: Sequence[Union[str, ColumnSpec]],
    record_type: Optional[type] = None,
    require_type: bool = False,
    threshold: Optional[int] = None,
) -> ValidationResult:
    """Convenience function to validate an export configuration."""
    validator = ExportConfigValidator()
    return validator.validate(headers, columns, record_type, require_type, threshold)


def _binding_of(column: Union[str, ColumnSpec]) -> Optional[str]:
    """Binding name of a column; None when an explicit accessor replaces it."""
    if isinstance(column, ColumnSpec):
        if column.accessor is not None:
            return None
        return column.binding
    return "" if column is None else str(column)
