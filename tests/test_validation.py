"""
Tests for export configuration validation.
"""

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from validation import (
    ExportConfigValidator,
    ValidationIssue,
    ValidationResult,
    validate_export_config,
)
from models import ColumnSpec


class TestExportConfigValidator:
    """Tests for ExportConfigValidator."""

    def test_valid_configuration(self):
        result = validate_export_config(["Name", "City"], ["name", "city"])

        assert result.is_valid
        assert not result.has_errors
        assert result.issues == []

    def test_column_specs_accepted(self):
        columns = [ColumnSpec(header="Name", binding="name")]
        assert validate_export_config(["Name"], columns).is_valid

    def test_missing_headers(self):
        result = validate_export_config([], ["name"])

        assert not result.is_valid
        issues = [i for i in result.issues if i.field == "headers"]
        assert issues[0].issue_type == "missing"

    def test_missing_bindings(self):
        result = validate_export_config(["Name"], [])
        assert [i.issue_type for i in result.errors] == ["missing"]

    def test_count_mismatch(self):
        result = validate_export_config(["Name", "City"], ["name"])

        assert not result.is_valid
        assert any(i.issue_type == "count_mismatch" for i in result.issues)

    def test_blank_header_is_warning(self):
        result = validate_export_config(["Name", " "], ["name", "city"])

        assert result.is_valid
        assert result.has_warnings
        assert result.issues[0].issue_type == "blank"
        assert result.issues[0].severity == "warning"

    def test_none_header_is_error(self):
        result = validate_export_config(["Name", None], ["name", "city"])
        assert result.errors[0].issue_type == "missing"

    def test_blank_binding(self):
        result = validate_export_config(["Name"], [""])
        assert any(i.issue_type == "blank" and i.field == "columns" for i in result.issues)

    def test_accessor_replaces_binding(self):
        columns = [ColumnSpec(header="Name", binding="", accessor=lambda r: r)]
        assert validate_export_config(["Name"], columns).is_valid

    def test_duplicate_binding_is_warning(self):
        result = validate_export_config(["Name", "Name again"], ["name", "name"])

        assert result.is_valid
        assert result.has_warnings
        assert result.issues[0].issue_type == "duplicate"

    def test_required_record_type(self):
        result = validate_export_config(["A"], ["a"], require_type=True)
        assert any(i.field == "record_type" for i in result.errors)

    def test_record_type_must_be_class(self, sample_employee):
        result = validate_export_config(["Name"], ["name"], record_type=sample_employee)
        assert result.errors[0].issue_type == "invalid"

    def test_record_type_without_fields(self):
        class Nothing:
            pass

        result = validate_export_config(["A"], ["a"], record_type=Nothing, require_type=True)
        assert result.errors[0].issue_type == "no_fields"

    def test_record_type_with_fields(self, pair_type):
        assert validate_export_config(["A", "B"], ["a", "b"], record_type=pair_type).is_valid

    @pytest.mark.parametrize("threshold, valid", [(1, True), (50, True), (0, False), (-5, False)])
    def test_threshold(self, threshold, valid):
        result = validate_export_config(["A"], ["a"], threshold=threshold)
        assert result.is_valid == valid


class TestValidationResult:
    """Tests for ValidationResult."""

    def test_errors_and_warnings(self):
        result = ValidationResult(is_valid=False, issues=[
            ValidationIssue("columns", "blank", "Column 0 has no binding"),
            ValidationIssue("columns", "duplicate", "dup", severity="warning"),
        ])

        assert result.has_errors
        assert result.has_warnings
        assert len(result.errors) == 1

    def test_validator_is_reusable(self):
        validator = ExportConfigValidator()
        assert not validator.validate([], []).is_valid
        assert validator.validate(["A"], ["a"]).is_valid
