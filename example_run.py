#!/usr/bin/env python3
"""
Example script exercising the three export paths on sample directory records.
Writes one .xlsx file per path into ./output.

Usage:
    python example_run.py
"""

import sys
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from models import DirectoryPerson
from export import export_records, export_mappings, export_all_fields


@dataclass
class Assignment:
    """Sample record type for the full-type dump."""
    owner: str
    description: str
    started: date
    hours: int
    rate: Decimal


SAMPLE_PEOPLE = [
    DirectoryPerson.from_attributes({
        "sAMAccountName": "jsmith",
        "givenName": "John",
        "sn": "Smith",
        "mail": "john.smith@example.com",
        "l": "Springfield",
        "department": "Finance",
    }),
    DirectoryPerson.from_attributes({
        "sAMAccountName": "mgarcia",
        "givenName": "Maria",
        "sn": "Garcia",
        "mail": "maria.garcia@example.com",
        "title": "Principal Systems Engineer, Identity and Access Management Platform Operations Group",
    }),
]

SAMPLE_ASSIGNMENTS = [
    Assignment("jsmith", "Quarterly close", date(2024, 3, 7), 12, Decimal("95.50")),
    Assignment(
        "mgarcia",
        "Migrate the legacy directory synchronisation jobs to the new scheduler",
        date(2024, 11, 21),
        40,
        Decimal("120.25"),
    ),
]


def main():
    print("=" * 60)
    print("Sheet Export - Example Run")
    print("=" * 60)
    print()

    output_dir = Path("output")
    output_dir.mkdir(exist_ok=True)

    # Named fields
    path = output_dir / "people_fields.xlsx"
    with path.open("wb") as stream:
        document = export_records(
            ["User", "First Name", "Last Name", "Email", "Title"],
            ["userName", "firstName", "lastName", "mail", "title"],
            SAMPLE_PEOPLE,
            stream,
            record_type=DirectoryPerson,
        )
    print(f"✓ {path}: {len(document.rows)} rows, oversized columns {document.oversized_columns}")

    # String-keyed mappings
    path = output_dir / "people_mappings.xlsx"
    headers = ["userName", "mail", "city", "department"]
    with path.open("wb") as stream:
        document = export_mappings(headers, [p.to_row() for p in SAMPLE_PEOPLE], stream)
    print(f"✓ {path}: {len(document.rows)} rows, oversized columns {document.oversized_columns}")

    # Every declared field of a type
    path = output_dir / "assignments.xlsx"
    with path.open("wb") as stream:
        document = export_all_fields(
            ["Owner", "Description", "Started", "Hours", "Rate"],
            SAMPLE_ASSIGNMENTS,
            Assignment,
            stream,
        )
    print(f"✓ {path}: {len(document.rows)} rows, oversized columns {document.oversized_columns}")

    print()
    print("=" * 60)
    print("Example run completed successfully!")
    print(f"Output directory: {output_dir.absolute()}")
    print("=" * 60)


if __name__ == "__main__":
    main()
