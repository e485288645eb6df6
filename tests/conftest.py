"""
Pytest configuration and fixtures for sheet export tests.
"""

import pytest
from pathlib import Path
import tempfile
import shutil
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, PrivateAttr

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from models import DirectoryPerson


class Employee(BaseModel):
    """Structured record with typed fields and a private attribute."""
    name: str
    city: Optional[str] = None
    hired: Optional[date] = None
    salary: Optional[Decimal] = None
    badge: Optional[int] = None

    _secret: str = PrivateAttr(default="s3cret")


@dataclass
class Pair:
    """Two text fields, for overflow tracking scenarios."""
    a: str
    b: str


@dataclass
class Assignment:
    """One field of every supported column type."""
    owner: str
    started: date
    hours: int
    rate: Decimal


class LegacyRecord:
    """Plain object with a name-mangled private attribute."""

    def __init__(self, code: str, token: str):
        self.code = code
        self.__token = token


class SlottedRecord:
    """Plain object storing its fields in slots."""
    __slots__ = ("code", "label")

    def __init__(self, code: str):
        self.code = code


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    temp = tempfile.mkdtemp()
    yield Path(temp)
    shutil.rmtree(temp, ignore_errors=True)


@pytest.fixture
def employee_type():
    return Employee


@pytest.fixture
def pair_type():
    return Pair


@pytest.fixture
def assignment_type():
    return Assignment


@pytest.fixture
def sample_employee() -> Employee:
    """Employee with every field populated."""
    return Employee(
        name="Smith",
        city="Springfield",
        hired=date(2024, 3, 7),
        salary=Decimal("52000.10"),
        badge=1042,
    )


@pytest.fixture
def sparse_employee() -> Employee:
    """Employee with only a name."""
    return Employee(name="Jones")


@pytest.fixture
def legacy_record() -> LegacyRecord:
    return LegacyRecord("L-1", "hidden-token")


@pytest.fixture
def slotted_record() -> SlottedRecord:
    return SlottedRecord("S-1")


@pytest.fixture
def sample_assignments():
    """Two assignments, the second with a long owner name."""
    return [
        Assignment("jsmith", date(2024, 3, 7), 12, Decimal("95.50")),
        Assignment("m" * 60, date(2024, 11, 21), 40, Decimal("120.25")),
    ]


@pytest.fixture
def sample_people():
    """Directory records as returned by a lookup."""
    return [
        DirectoryPerson.from_attributes({
            "sAMAccountName": "jsmith",
            "givenName": "John",
            "sn": "Smith",
            "mail": "john.smith@example.com",
            "l": "Springfield",
        }),
        DirectoryPerson.from_attributes({
            "sAMAccountName": "mgarcia",
            "givenName": "Maria",
            "sn": "Garcia",
            "mail": "maria.garcia@example.com",
            "title": "T" * 120,
        }),
    ]


@pytest.fixture
def long_text():
    """Return a factory for text of an exact length."""
    def make(length: int, char: str = "x") -> str:
        return char * length
    return make
