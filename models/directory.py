"""
Record shape produced by a directory (identity) lookup.

Only the contract lives here. Connecting to and querying the directory is
the job of an external collaborator.
"""

from enum import Enum
from typing import Any, Dict, Mapping, Optional, Protocol

from pydantic import BaseModel, ConfigDict


class LookupBy(str, Enum):
    """Attribute used to find a person in the directory."""
    USERNAME = "username"
    EMAIL = "email"


# Directory attribute name -> record attribute name
DIRECTORY_ATTRIBUTES = {
    "sAMAccountName": "userName",
    "givenName": "firstName",
    "sn": "lastName",
    "mail": "mail",
    "cn": "displayName",
    "l": "city",
    "streetAddress": "street",
    "st": "state",
    "postalCode": "zip",
    "telephoneNumber": "phone",
    "title": "title",
    "c": "country",
    "co": "countryName",
    "initials": "mi",
    "company": "company",
    "department": "department",
}


class DirectoryPerson(BaseModel):
    """A person's attributes; anything unavailable is an empty string."""

    model_config = ConfigDict(frozen=True)

    userName: str = ""
    firstName: str = ""
    lastName: str = ""
    mail: str = ""
    displayName: str = ""
    city: str = ""
    street: str = ""
    state: str = ""
    zip: str = ""
    phone: str = ""
    title: str = ""
    country: str = ""
    countryName: str = ""
    mi: str = ""
    company: str = ""
    department: str = ""

    @classmethod
    def from_attributes(cls, attributes: Mapping[str, Any]) -> "DirectoryPerson":
        """
        Build a person from raw directory attributes.

        Keys may be either directory attribute names (matched case-insensitively,
        as directories do) or record attribute names. Each missing or
        unreadable attribute independently falls back to "".
        """
        lowered = {str(k).lower(): v for k, v in attributes.items()}
        values: Dict[str, str] = {}
        for directory_name, name in DIRECTORY_ATTRIBUTES.items():
            raw = lowered.get(directory_name.lower(), lowered.get(name.lower()))
            values[name] = _attribute_text(raw)
        return cls(**values)

    def to_row(self) -> Dict[str, str]:
        """String-keyed mapping for the key-based export path."""
        return self.model_dump()


class DirectoryLookup(Protocol):
    """Resolves a person by username or email."""

    def lookup(self, key: str, by: LookupBy = LookupBy.USERNAME) -> Optional[DirectoryPerson]:
        ...


def _attribute_text(raw: Any) -> str:
    if raw is None:
        return ""
    # Multi-valued attributes keep their first value
    if isinstance(raw, (list, tuple)):
        raw = raw[0] if raw else ""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError:
            return ""
    return str(raw)
