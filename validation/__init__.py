"""Validation module for export configuration."""

from .validator import (
    ExportConfigValidator,
    ValidationResult,
    ValidationIssue,
    validate_export_config,
)

__all__ = [
    "ExportConfigValidator",
    "ValidationResult",
    "ValidationIssue",
    "validate_export_config",
]
