"""Data models for the identity extraction core."""

from .identity import (
    DecodeIssue,
    ElementResult,
    ExtractionError,
    Gender,
    IdentityRecord,
    RawFieldMap,
)

__all__ = [
    "DecodeIssue",
    "ElementResult",
    "ExtractionError",
    "Gender",
    "IdentityRecord",
    "RawFieldMap",
]
