"""
Tests for Excel serialization.
"""

import io
import zipfile
import pytest
from pathlib import Path
from datetime import datetime

import pandas as pd
from openpyxl import load_workbook

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from export import (
    ChannelError,
    ExcelWriter,
    build_from_fields,
    build_from_mappings,
    document_to_bytes,
    export_all_fields,
    export_mappings,
    export_records,
    write_document,
)


class FailingStream(io.RawIOBase):
    """Writable stream whose writes always fail."""

    def writable(self):
        return True

    def write(self, data):
        raise OSError("disk full")


def _load(data: bytes):
    return load_workbook(io.BytesIO(data))


class TestExcelWriter:
    """Tests for ExcelWriter."""

    def test_single_sheet_named_export(self):
        document = build_from_mappings(["Name"], [{"Name": "Smith"}])
        wb = _load(document_to_bytes(document))

        assert wb.sheetnames == ["Export"]

    def test_output_is_a_zip_container(self):
        document = build_from_mappings(["Name"], [{"Name": "Smith"}])
        data = document_to_bytes(document)

        assert zipfile.is_zipfile(io.BytesIO(data))
        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            assert "xl/workbook.xml" in archive.namelist()

    def test_header_and_values(self):
        document = build_from_mappings(
            ["Name", "City"], [{"Name": "Smith", "City": ""}, {"Name": "Jones", "City": "Rome"}]
        )
        ws = _load(document_to_bytes(document))["Export"]

        assert [c.value for c in ws[1]] == ["Name", "City"]
        assert ws.cell(row=2, column=1).value == "Smith"
        assert ws.cell(row=2, column=2).value is None
        assert ws.cell(row=3, column=2).value == "Rome"

    def test_date_cells(self, sample_employee, employee_type):
        document = build_from_fields(["Hired"], ["hired"], [sample_employee], employee_type)
        cell = _load(document_to_bytes(document))["Export"]["A2"]

        assert cell.value == datetime(2024, 3, 7)
        assert cell.number_format == "m/dd/yyyy"

    def test_number_cells(self, sample_employee, employee_type):
        document = build_from_fields(
            ["Badge", "Salary"], ["badge", "salary"], [sample_employee], employee_type
        )
        ws = _load(document_to_bytes(document))["Export"]

        assert ws["A2"].value == 1042
        assert abs(ws["B2"].value - 52000.10) < 0.01

    def test_fixed_width_and_wrap(self, long_text):
        records = [{"Name": "Smith", "Note": long_text(150)}, {"Name": "Jones", "Note": "ok"}]
        document = build_from_mappings(["Name", "Note"], records)
        ws = _load(document_to_bytes(document))["Export"]

        assert ws.column_dimensions["B"].width == pytest.approx(18000 / 256)
        assert ws["B2"].alignment.wrap_text
        assert ws["B3"].alignment.wrap_text
        assert not ws["A2"].alignment.wrap_text
        assert ws["B2"].value == long_text(150)

    def test_auto_fit_width(self):
        document = build_from_mappings(["Name"], [{"Name": "Smith"}])
        ws = _load(document_to_bytes(document))["Export"]

        assert ws.column_dimensions["A"].width == pytest.approx(10)

    def test_formula_like_text_stays_text(self):
        document = build_from_mappings(["Name"], [{"Name": "=SUM(A1:A3)"}])
        ws = _load(document_to_bytes(document))["Export"]

        assert ws["A2"].value == "=SUM(A1:A3)"
        assert ws["A2"].data_type == "s"

    def test_control_characters_removed(self):
        document = build_from_mappings(["Name"], [{"Name": "Smi\x07th"}])
        ws = _load(document_to_bytes(document))["Export"]

        assert ws["A2"].value == "Smith"

    def test_to_workbook_does_no_io(self):
        document = build_from_mappings(["Name"], [{"Name": "Smith"}])
        wb = ExcelWriter().to_workbook(document)
        assert wb.active.title == "Export"


class TestStreamHandling:
    """Tests for the caller-owned output channel."""

    def test_stream_is_left_open(self):
        document = build_from_mappings(["Name"], [{"Name": "Smith"}])
        buffer = io.BytesIO()

        returned = write_document(document, buffer)

        assert returned is buffer
        assert not buffer.closed
        assert buffer.getvalue()

    def test_write_fault_raises_channel_error(self):
        document = build_from_mappings(["Name"], [{"Name": "Smith"}])

        with pytest.raises(ChannelError) as exc_info:
            write_document(document, FailingStream())
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_file_stream(self, temp_dir):
        path = temp_dir / "people.xlsx"
        with path.open("wb") as stream:
            export_mappings(["Name"], [{"Name": "Smith"}], stream)

        df = pd.read_excel(path, sheet_name="Export")
        assert df.columns.tolist() == ["Name"]
        assert df.iloc[0]["Name"] == "Smith"


class TestExportFunctions:
    """Tests for the one-call export helpers."""

    def test_export_records(self, sample_people, temp_dir):
        path = temp_dir / "records.xlsx"
        with path.open("wb") as stream:
            document = export_records(
                ["User", "Email"], ["userName", "mail"], sample_people, stream
            )

        df = pd.read_excel(path, sheet_name="Export")
        assert len(df) == len(sample_people) == len(document.rows)
        assert df["Email"].tolist() == ["john.smith@example.com", "maria.garcia@example.com"]

    def test_export_mappings_blank_cells(self, temp_dir):
        path = temp_dir / "mappings.xlsx"
        with path.open("wb") as stream:
            export_mappings(["Name", "City"], [{"Name": "Smith", "City": ""}], stream)

        df = pd.read_excel(path, sheet_name="Export")
        assert df.iloc[0]["Name"] == "Smith"
        assert pd.isna(df.iloc[0]["City"])

    def test_export_all_fields(self, sample_assignments, assignment_type, temp_dir):
        path = temp_dir / "assignments.xlsx"
        headers = ["Owner", "Started", "Hours", "Rate"]
        with path.open("wb") as stream:
            export_all_fields(headers, sample_assignments, assignment_type, stream)

        df = pd.read_excel(path, sheet_name="Export")
        assert df.columns.tolist() == headers
        assert df["Hours"].tolist() == [12, 40]
        assert df.iloc[0]["Started"] == pd.Timestamp(2024, 3, 7)

    def test_same_content_across_exports(self, sample_people):
        headers = ["userName", "mail", "title"]
        rows = [p.to_row() for p in sample_people]

        first = pd.read_excel(io.BytesIO(document_to_bytes(build_from_mappings(headers, rows))))
        second = pd.read_excel(io.BytesIO(document_to_bytes(build_from_mappings(headers, rows))))

        pd.testing.assert_frame_equal(first, second)
