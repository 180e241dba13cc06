"""
Identity data models for the DNIe extraction core.

``IdentityRecord`` is the single canonical output of both the chip path and
the QR path. Raw decoder output travels as ``RawFieldMap`` until the merger
turns it into a record.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from pydantic import BaseModel

RawFieldMap = dict[str, Optional[str]]


def camel_case(snake_str: str) -> str:
    """Convert snake_case to camelCase."""
    components = snake_str.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


def camel_to_snake(camel_str: str) -> str:
    """Convert camelCase to snake_case."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", camel_str).lower()


class ExtractionError(str, Enum):
    """Classification attached to a record that must not be trusted."""

    NO_DATA_AVAILABLE = "NoDataAvailable"
    CRITICAL_FIELDS_MISSING = "CriticalFieldsMissing"

    @property
    def description(self) -> str:
        return _ERROR_DESCRIPTIONS[self]


_ERROR_DESCRIPTIONS = {
    ExtractionError.NO_DATA_AVAILABLE: "No se pudieron leer los datos del documento",
    ExtractionError.CRITICAL_FIELDS_MISSING: (
        "No se pudieron extraer datos clave del documento (número, nombre, apellidos)"
    ),
}


class Gender(str, Enum):
    """Textual gender values used on the legal forms."""

    FEMALE = "Femenino"
    MALE = "Masculino"

    @classmethod
    def from_code(cls, code: Optional[str]) -> Optional[Gender]:
        """Map a document sex code to a gender; unknown codes map to None."""
        if code is None:
            return None
        return _GENDER_CODES.get(code.strip().upper())


_GENDER_CODES = {
    "F": Gender.FEMALE,
    "M": Gender.MALE,
}


class IdentityRecord(BaseModel):
    """Canonical identity of the person captured for a report.

    All fields are independently optional. When ``error`` is set the
    numeric and name fields must be treated as untrustworthy even if present.
    """

    gender: Optional[str] = None
    nationality: Optional[str] = None
    document_type: Optional[str] = None
    document_number: Optional[str] = None
    support_number: Optional[str] = None
    first_name: Optional[str] = None
    surnames: Optional[str] = None
    father_name: Optional[str] = None
    mother_name: Optional[str] = None
    birth_date: Optional[str] = None
    birth_place: Optional[str] = None
    address: Optional[str] = None
    uid: Optional[str] = None
    can: Optional[str] = None
    error: Optional[ExtractionError] = None

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @property
    def is_trustworthy(self) -> bool:
        return self.error is None

    @property
    def has_critical_fields(self) -> bool:
        """True when at least one of document number, first name or surnames is present."""
        return any(
            value is not None for value in (self.document_number, self.first_name, self.surnames)
        )

    def to_dict(self) -> dict:
        """Convert to dictionary with camelCase keys."""
        data = self.model_dump(mode="json")
        return {camel_case(k): v for k, v in data.items()}

    @classmethod
    def from_dict(cls, data: dict) -> IdentityRecord:
        """Create an instance from a dictionary with camelCase keys."""
        return cls(**{camel_to_snake(k): v for k, v in data.items()})


@dataclass(frozen=True)
class DecodeIssue:
    """Why a single positional element could not be turned into text."""

    index: int
    reason: str


@dataclass(frozen=True)
class ElementResult:
    """Outcome of decoding one element of a data group sequence."""

    index: int
    value: Optional[str] = None
    issue: Optional[DecodeIssue] = None

    @property
    def ok(self) -> bool:
        return self.issue is None

    @classmethod
    def success(cls, index: int, value: Optional[str]) -> ElementResult:
        return cls(index=index, value=value)

    @classmethod
    def failure(cls, index: int, reason: str) -> ElementResult:
        return cls(index=index, issue=DecodeIssue(index=index, reason=reason))
