"""
Machine Readable Zone (MRZ) field splitting for the Spanish eID chip.

The DG1 MRZ is an 88-character string made of two 44-character lines.
Fields are sliced at fixed positions; no check digits are verified.
"""

from __future__ import annotations

from dataclasses import dataclass

from dnie_reader.exceptions import MRZFormatError
from dnie_reader.models.identity import RawFieldMap

FILLER = "<"
NAME_SEPARATOR = FILLER * 2
LINE_LENGTH = 44
MRZ_LENGTH = LINE_LENGTH * 2


@dataclass(frozen=True)
class MRZField:
    """Half-open slice of one MRZ line."""

    name: str
    line: int
    start: int
    end: int

    def extract(self, lines: tuple[str, str]) -> str:
        return lines[self.line][self.start : self.end]


LINE1_FIELDS = (
    MRZField("docType", 0, 0, 2),
    MRZField("issuingState", 0, 2, 5),
    MRZField("docNumber", 0, 5, 14),
)

LINE2_FIELDS = (
    MRZField("birthDate", 1, 0, 6),
    MRZField("sex", 1, 7, 8),
    MRZField("expiryDate", 1, 8, 14),
    MRZField("nationality", 1, 14, 17),
)

NAME_FIELD = MRZField("nameBlock", 1, 20, 44)


def strip_filler(value: str) -> str:
    """Remove every filler character from a field."""
    return value.replace(FILLER, "")


def pad_field(value: str, width: int) -> str:
    """Right-pad a field with fillers up to ``width`` characters."""
    if len(value) > width:
        msg = f"Field value '{value}' is longer than {width} characters"
        raise MRZFormatError(msg, length=len(value))
    return value.ljust(width, FILLER)


def normalize_name(value: str) -> str:
    """Turn single fillers into spaces and collapse the result."""
    return " ".join(segment for segment in value.replace(FILLER, " ").split() if segment)


def split_name_block(block: str) -> tuple[str, str | None]:
    """
    Split the MRZ name block into surname and given name.

    The first ``<<`` separates the surname from the remaining segment,
    which holds the given name(s).
    """
    parts = block.split(NAME_SEPARATOR, 1)
    surname = normalize_name(parts[0])
    given_name = normalize_name(parts[1]) if len(parts) > 1 else None
    return surname, given_name


def split_lines(mrz: str, expected_length: int = MRZ_LENGTH) -> tuple[str, str]:
    """
    Split a trimmed MRZ string into its two lines.

    Raises:
        MRZFormatError: If the string does not have the expected length
    """
    if len(mrz) != expected_length:
        msg = f"MRZ must be exactly {expected_length} characters, got {len(mrz)}"
        raise MRZFormatError(msg, length=len(mrz))
    half = expected_length // 2
    return mrz[:half], mrz[half:]


def split_mrz_fields(mrz: str, expected_length: int = MRZ_LENGTH) -> RawFieldMap:
    """
    Slice an 88-character MRZ into named raw fields.

    Args:
        mrz: MRZ text, already trimmed
        expected_length: Total MRZ length, both lines included

    Returns:
        Raw field map with docType, issuingState, docNumber, birthDate, sex,
        expiryDate, nationality, surname and name

    Raises:
        MRZFormatError: If the MRZ length does not match
    """
    lines = split_lines(mrz, expected_length)

    result: RawFieldMap = {}
    for field in LINE1_FIELDS + LINE2_FIELDS:
        result[field.name] = field.extract(lines)
    result["docNumber"] = strip_filler(result["docNumber"] or "")

    surname, given_name = split_name_block(NAME_FIELD.extract(lines))
    result["surname"] = surname or None
    result["name"] = given_name or None
    return result
