"""
QR text decoding for the Spanish eID.

The QR printed on the document carries the same identity fields as the chip,
packed into one text blob where single marker letters separate the values::

    @<document>B ... <DD-MM-YYYY> ... D<name>F<surnames>H<sex> ...
    AVDA. <address>b<birth place>x ... d<nationality>f<father> / <mother>@

Each field is located independently with an anchored pattern; a field whose
pattern does not match is simply absent.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from dnie_reader.models.identity import Gender, RawFieldMap

logger = logging.getLogger(__name__)

NON_PRINTABLE = re.compile(r"[^\x20-\x7E]")

DOCUMENT_PATTERN = re.compile(r"@\s*([0-9XYZ]\d{7}[A-Z])(?=B)")
NAME_PATTERN = re.compile(r"\d{2}-\d{2}-\d{4}.*?D\s*([A-Z\s]+)(?=F)")
SURNAMES_PATTERN = re.compile(r"(?<=F)[A-Z\s]+(?=H)")
SEX_PATTERN = re.compile(r"(?<=H)ML?")
BIRTH_DATE_PATTERN = re.compile(r"\d{2}-\d{2}-\d{4}")
ADDRESS_PATTERN = re.compile(r"AVDA\..+?(?=b)")
BIRTH_PLACE_PATTERN = re.compile(r"b\s*([A-Z\s]+)(?=x\s*[A-Z])")
NATIONALITY_PATTERN = re.compile(r"d\s*(ESP)(?=f)")
PARENTS_PATTERN = re.compile(r"f\s*([A-Z\s]+ / [A-Z\s]+)(?=@)")

NATIONAL_ID = re.compile(r"\d{8}[A-Z]")
FOREIGNER_ID = re.compile(r"[XYZ]\d{7}[A-Z]")

# Only male codes are known for this encoding.
SEX_CODES = {
    "M": Gender.MALE,
    "ML": Gender.MALE,
}


@dataclass(frozen=True)
class QRField:
    """Anchored pattern for one QR field; ``group`` selects the captured text."""

    name: str
    pattern: re.Pattern
    group: int = 1

    def find(self, text: str) -> Optional[str]:
        match = self.pattern.search(text)
        if match is None:
            logger.debug("QR field '%s' not found", self.name)
            return None
        value = match.group(self.group).strip()
        return value or None


QR_FIELDS = (
    QRField("docNumber", DOCUMENT_PATTERN),
    QRField("name", NAME_PATTERN),
    QRField("surname", SURNAMES_PATTERN, group=0),
    QRField("sex", SEX_PATTERN, group=0),
    QRField("birthDate", BIRTH_DATE_PATTERN, group=0),
    QRField("actualAddress", ADDRESS_PATTERN, group=0),
    QRField("birthPlace", BIRTH_PLACE_PATTERN),
    QRField("nationality", NATIONALITY_PATTERN),
    QRField("parents", PARENTS_PATTERN),
)


def clean_qr_text(text: str) -> str:
    """Remove every character outside printable ASCII."""
    return NON_PRINTABLE.sub("", text)


def classify_document(document_number: Optional[str]) -> Optional[str]:
    """``DNI`` for national ids, ``NIE`` for foreign-resident ids, else None."""
    if document_number is None:
        return None
    if NATIONAL_ID.fullmatch(document_number):
        return "DNI"
    if FOREIGNER_ID.fullmatch(document_number):
        return "NIE"
    return None


def gender_from_sex_code(code: Optional[str]) -> Optional[str]:
    gender = SEX_CODES.get(code) if code else None
    return gender.value if gender else None


def parse_qr_fields(qr_text: str) -> RawFieldMap:
    """
    Extract raw identity fields from QR text.

    Args:
        qr_text: Text decoded from the QR image

    Returns:
        Raw field map; fields whose anchors are missing are None.
        ``docType`` and the split ``fatherName``/``motherName`` are derived here.
    """
    text = clean_qr_text(qr_text)
    logger.debug("Cleaned QR content: %s", text)

    result: RawFieldMap = {field.name: field.find(text) for field in QR_FIELDS}

    result["docType"] = classify_document(result["docNumber"])

    parents = result.pop("parents")
    if parents is not None:
        father, _, mother = parents.partition("/")
        result["fatherName"] = father.strip() or None
        result["motherName"] = mother.strip() or None
    else:
        result["fatherName"] = None
        result["motherName"] = None

    return result
