"""
Identity record assembly for the chip and QR capture paths.

``decode_chip_data`` and ``decode_qr_text`` are the two entry points used by
the report screens. Both always return an ``IdentityRecord``; decode problems
are reported through ``IdentityRecord.error`` and never raised.
"""

from __future__ import annotations

import logging
from typing import Optional

from opentelemetry import trace

from dnie_reader.config import ExtractionSettings, get_settings
from dnie_reader.models.identity import ExtractionError, Gender, IdentityRecord, RawFieldMap
from dnie_reader.qr.qr_parser import gender_from_sex_code, parse_qr_fields
from dnie_reader.rfid.elementary_files import DataGroupParser
from dnie_reader.utils.date_utils import normalize_date

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


def _present(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _prefer(*values: Optional[str]) -> Optional[str]:
    """First non-blank value, in order of preference."""
    for value in values:
        value = _present(value)
        if value is not None:
            return value
    return None


def classify(record_fields: dict, sources_empty: bool) -> Optional[ExtractionError]:
    """Decide the error classification for a merged set of fields."""
    if sources_empty:
        return ExtractionError.NO_DATA_AVAILABLE
    critical = (
        record_fields.get("document_number"),
        record_fields.get("first_name"),
        record_fields.get("surnames"),
    )
    if all(value is None for value in critical):
        return ExtractionError.CRITICAL_FIELDS_MISSING
    return None


def _dg13_surnames(dg13: RawFieldMap) -> Optional[str]:
    first = _present(dg13.get("surname1"))
    if first is None:
        return None
    second = _present(dg13.get("surname2"))
    return f"{first} {second}" if second else first


def merge_chip_fields(
    dg1: Optional[RawFieldMap],
    dg13: Optional[RawFieldMap],
    uid: Optional[str] = None,
    can: Optional[str] = None,
    settings: ExtractionSettings | None = None,
) -> IdentityRecord:
    """
    Combine DG1 and DG13 raw fields into one record.

    DG13 wins over DG1 for every field both carry. Missing maps count as empty.

    Args:
        dg1: Raw DG1 fields
        dg13: Raw DG13 fields
        uid: Chip unique id, copied verbatim
        can: Card access number, copied verbatim
        settings: Extraction settings, defaults when None

    Returns:
        The merged IdentityRecord
    """
    settings = settings or get_settings()
    dg1 = dg1 or {}
    dg13 = dg13 or {}

    if not dg1 and not dg13:
        logger.info("No data group could be decoded")
        return IdentityRecord(uid=uid, can=can, error=ExtractionError.NO_DATA_AVAILABLE)

    sex = _prefer(dg13.get("sex"), dg1.get("sex"))
    gender = Gender.from_code(sex)

    birth_date = normalize_date(
        _present(dg13.get("birthDate")), settings.century_pivot
    ) or normalize_date(_present(dg1.get("birthDate")), settings.century_pivot)

    document_number = _prefer(dg13.get("personalNumber"), dg1.get("docNumber"))
    if document_number is not None:
        document_number = _present(document_number.replace("-", ""))

    fields = {
        "gender": gender.value if gender else None,
        "nationality": _prefer(dg13.get("nationality"), dg1.get("nationality"))
        or settings.default_nationality,
        "document_type": _prefer(dg1.get("docType")) or settings.default_document_type,
        "document_number": document_number,
        "support_number": _prefer(dg13.get("docNumber"), dg1.get("docNumber")),
        "first_name": _prefer(dg13.get("name"), dg1.get("name")),
        "surnames": _dg13_surnames(dg13) or _present(dg1.get("surname")),
        "father_name": _present(dg13.get("fatherName")),
        "mother_name": _present(dg13.get("motherName")),
        "birth_date": birth_date,
        "birth_place": _present(dg13.get("birthPlace")),
        "address": _present(dg13.get("actualAddress")),
    }

    error = classify(fields, sources_empty=False)
    logger.info("Chip record assembled, error=%s", error.value if error else None)
    return IdentityRecord(**fields, uid=uid, can=can, error=error)


def decode_chip_data(
    dg1_bytes: Optional[bytes] = None,
    dg13_bytes: Optional[bytes] = None,
    uid: Optional[str] = None,
    can: Optional[str] = None,
    settings: ExtractionSettings | None = None,
) -> IdentityRecord:
    """
    Decode the DNIe data groups into an identity record.

    Args:
        dg1_bytes: Raw DG1 bytes, if read
        dg13_bytes: Raw DG13 bytes, if read
        uid: Chip unique id, copied verbatim
        can: Card access number, copied verbatim
        settings: Extraction settings, defaults when None

    Returns:
        The IdentityRecord, with ``error`` set when it must not be trusted
    """
    settings = settings or get_settings()
    with tracer.start_as_current_span("dnie.decode_chip_data") as span:
        span.set_attribute("dnie.dg1_present", dg1_bytes is not None)
        span.set_attribute("dnie.dg13_present", dg13_bytes is not None)

        parser = DataGroupParser(settings)
        dg1 = parser.parse_dg1(dg1_bytes) if dg1_bytes is not None else {}
        dg13 = parser.parse_dg13(dg13_bytes) if dg13_bytes is not None else {}

        record = merge_chip_fields(dg1, dg13, uid=uid, can=can, settings=settings)
        if record.error is not None:
            span.set_attribute("dnie.error", record.error.value)
        return record


def build_qr_record(
    fields: RawFieldMap, settings: ExtractionSettings | None = None
) -> IdentityRecord:
    """
    Map raw QR fields onto an identity record.

    The birth date token (``DD-MM-YYYY``) goes through the same normalizer as
    the chip dates.
    """
    settings = settings or get_settings()
    raw_birth_date = fields.get("birthDate")
    birth_date = (
        normalize_date(raw_birth_date.replace("-", " "), settings.century_pivot)
        if raw_birth_date
        else None
    )

    record_fields = {
        "gender": gender_from_sex_code(fields.get("sex")),
        "nationality": _present(fields.get("nationality")),
        "document_type": _present(fields.get("docType")),
        "document_number": _present(fields.get("docNumber")),
        "first_name": _present(fields.get("name")),
        "surnames": _present(fields.get("surname")),
        "father_name": _present(fields.get("fatherName")),
        "mother_name": _present(fields.get("motherName")),
        "birth_date": birth_date,
        "birth_place": _present(fields.get("birthPlace")),
        "address": _present(fields.get("actualAddress")),
    }
    error = classify(record_fields, sources_empty=False)
    return IdentityRecord(**record_fields, error=error)


def decode_qr_text(qr_text: Optional[str], settings: ExtractionSettings | None = None) -> IdentityRecord:
    """
    Decode the text of a scanned eID QR code into an identity record.

    Args:
        qr_text: Raw text from the QR scanner
        settings: Extraction settings, defaults when None

    Returns:
        The IdentityRecord; ``NoDataAvailable`` when the text is empty
    """
    with tracer.start_as_current_span("dnie.decode_qr_text") as span:
        if qr_text is None or not qr_text.strip():
            logger.info("Empty QR content")
            span.set_attribute("dnie.error", ExtractionError.NO_DATA_AVAILABLE.value)
            return IdentityRecord(error=ExtractionError.NO_DATA_AVAILABLE)

        record = build_qr_record(parse_qr_fields(qr_text), settings)
        logger.info("QR record assembled, error=%s", record.error.value if record.error else None)
        if record.error is not None:
            span.set_attribute("dnie.error", record.error.value)
        return record
