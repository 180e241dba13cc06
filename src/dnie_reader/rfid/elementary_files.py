"""Elementary File parsing for the Spanish eID (DNIe) chip.

Turns the raw bytes of DG1 (MRZ) and DG13 (extended personal data) into raw
field maps. Structural problems are logged and yield an empty map; they never
propagate to the caller.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from asn1crypto import core

from dnie_reader.config import ExtractionSettings, get_settings
from dnie_reader.exceptions import DecodeError, TLVDecodeError
from dnie_reader.models.identity import ElementResult, RawFieldMap
from dnie_reader.utils.mrz_utils import split_mrz_fields
from dnie_reader.utils.tlv import (
    TAG_OCTET_STRING,
    TAG_SEQUENCE,
    TLVNode,
    decode_tlv,
)

logger = logging.getLogger(__name__)

DG1_APPLICATION_TAG = 1
MRZ_APPLICATION_TAG = 31

PARENTS_SEPARATOR = " / "
JOIN_SEPARATOR = ", "
MAX_TAGGED_LAYERS = 1


class DataGroup(Enum):
    """Data groups read from the DNIe chip."""

    DG1 = "EF.DG1"  # MRZ Information
    DG13 = "EF.DG13"  # Optional Details


# Position of each element in the DG13 sequence. Index 11 carries both
# parents and is split separately.
DG13_FIELDS = {
    0: "surname1",
    1: "surname2",
    2: "name",
    3: "personalNumber",
    4: "birthDate",
    5: "nationality",
    6: "expirationDate",
    7: "docNumber",
    8: "sex",
    9: "birthPopulation",
    10: "birthProvince",
    12: "streetAddress",
    13: "cityAddress",
    14: "cityAddress2",
    15: "provinceAddress",
}
DG13_PARENTS_INDEX = 11

BIRTH_PLACE_PARTS = ("birthPopulation", "birthProvince")
ADDRESS_PARTS = ("streetAddress", "cityAddress", "cityAddress2", "provinceAddress")


def _join_present(fields: RawFieldMap, names: tuple[str, ...]) -> Optional[str]:
    parts = [fields[name] for name in names if fields.get(name)]
    return JOIN_SEPARATOR.join(parts) if parts else None


def _clean(text: str) -> Optional[str]:
    text = text.strip()
    return text or None


class DataGroupParser:
    """Parser for the DNIe DG1 and DG13 elementary files."""

    def __init__(self, settings: ExtractionSettings | None = None) -> None:
        self.settings = settings or get_settings()
        self.logger = logging.getLogger(__name__)

    # DG1

    def extract_mrz_bytes(self, data: bytes) -> bytes:
        """Unwrap ``[APPLICATION 1] { [APPLICATION 31] mrz }``.

        When the envelope does not match, the whole buffer is taken as the
        MRZ text; some encoders ship DG1 without the expected tags.
        """
        try:
            root = decode_tlv(data)
        except TLVDecodeError as e:
            self.logger.warning("DG1 envelope is not valid TLV, using raw bytes: %s", e.message)
            return bytes(data)

        inner = self._mrz_node(root)
        if inner is None:
            self.logger.warning("Unexpected DG1 structure %s, using raw bytes", root.label())
            return bytes(data)
        return inner.contents

    def _mrz_node(self, root: TLVNode) -> TLVNode | None:
        if not (root.is_application(DG1_APPLICATION_TAG) and root.constructed):
            return None
        try:
            inner = root.first_child()
        except TLVDecodeError as e:
            self.logger.debug("DG1 envelope has no readable child: %s", e.message)
            return None
        if not inner.is_application(MRZ_APPLICATION_TAG):
            return None
        return inner

    def parse_dg1(self, data: bytes) -> RawFieldMap:
        """
        Parse DG1 into raw MRZ fields.

        Args:
            data: Raw DG1 bytes

        Returns:
            Raw field map, empty if the MRZ cannot be recovered
        """
        self.logger.debug("Raw DG1: %s", bytes(data).hex())
        mrz_bytes = self.extract_mrz_bytes(data)

        try:
            mrz = mrz_bytes.decode("utf-8").strip()
        except UnicodeDecodeError as e:
            self.logger.warning("DG1 MRZ is not valid UTF-8: %s", e)
            return {}

        try:
            result = split_mrz_fields(mrz, self.settings.mrz_length)
        except DecodeError as e:
            self.logger.warning("Invalid MRZ in DG1: %s", e.message)
            return {}

        self.logger.debug("Parsed DG1 fields: %s", result)
        return result

    # DG13

    def parse_dg13_elements(self, data: bytes) -> list[ElementResult]:
        """
        Decode every element of the DG13 sequence to text, in order.

        Elements that cannot be decoded are reported as failures and the
        walk continues with the next one. A child that overruns the sequence
        ends the walk, since no later element boundary can be trusted.

        Raises:
            TLVDecodeError: If the envelope or the sequence itself is malformed
        """
        root = decode_tlv(data)
        body = root.contents if root.is_application() else bytes(data)

        sequence = decode_tlv(body)
        if not (sequence.is_universal(TAG_SEQUENCE) and sequence.constructed):
            msg = f"DG13 body is {sequence.label()}, expected a SEQUENCE"
            raise TLVDecodeError(msg)
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug("DG13 structure:\n%s", sequence.describe())

        results: list[ElementResult] = []
        try:
            for index, element in enumerate(sequence.children()):
                results.append(self._decode_element(index, element))
        except TLVDecodeError as e:
            self.logger.warning(
                "DG13 sequence truncated after %d elements: %s", len(results), e.message
            )
        return results

    def _decode_element(self, index: int, element: TLVNode) -> ElementResult:
        try:
            return ElementResult.success(index, element_text(element))
        except (DecodeError, UnicodeDecodeError, ValueError, TypeError, NotImplementedError) as e:
            reason = getattr(e, "message", None) or str(e)
            self.logger.warning("DG13 element %d could not be decoded: %s", index, reason)
            return ElementResult.failure(index, reason)

    def parse_dg13(self, data: bytes) -> RawFieldMap:
        """
        Parse DG13 into raw personal-data fields.

        Args:
            data: Raw DG13 bytes

        Returns:
            Raw field map including the derived ``birthPlace`` and
            ``actualAddress``; empty if the sequence cannot be read at all
        """
        self.logger.debug("Raw DG13: %s", bytes(data).hex())
        try:
            elements = self.parse_dg13_elements(data)
        except TLVDecodeError as e:
            self.logger.warning("Invalid DG13 structure: %s", e.message)
            return {}

        result: RawFieldMap = {}
        for element in elements:
            field_name = DG13_FIELDS.get(element.index)
            if element.index >= self.settings.dg13_max_elements or (
                field_name is None and element.index != DG13_PARENTS_INDEX
            ):
                self.logger.debug("Ignoring DG13 element %d", element.index)
                continue
            if element.index == DG13_PARENTS_INDEX:
                father, mother = split_parents(element.value)
                result["fatherName"] = father
                result["motherName"] = mother
            else:
                result[field_name] = element.value

        if not any(result.values()):
            return {}

        result["birthPlace"] = _join_present(result, BIRTH_PLACE_PARTS)
        result["actualAddress"] = _join_present(result, ADDRESS_PARTS)

        self.logger.debug("Parsed DG13 fields: %s", result)
        return result


def split_parents(value: Optional[str]) -> tuple[Optional[str], Optional[str]]:
    """Split ``"<father> / <mother>"``; a value without separator is the father only."""
    if value is None:
        return None, None
    parts = value.split(PARENTS_SEPARATOR)
    father = _clean(parts[0])
    mother = _clean(parts[1]) if len(parts) > 1 else None
    return father, mother


def element_text(node: TLVNode, tagged_layers: int = 0) -> Optional[str]:
    """
    Decode one DG13 element to text.

    Octet strings are read as UTF-8, universal string types through
    asn1crypto, and tagged objects by descending one layer.

    Raises:
        DecodeError: If the element holds no textual value or nests more
            than one tagged layer
        UnicodeDecodeError: If the octets are not valid UTF-8
    """
    if node.is_universal():
        if node.constructed:
            msg = f"Unsupported constructed element {node.label()}"
            raise DecodeError(msg)
        if node.tag == TAG_OCTET_STRING:
            return _clean(node.contents.decode("utf-8"))
        native = core.load(node.encoded, strict=True).native
        if isinstance(native, str):
            return _clean(native)
        if isinstance(native, bytes):
            return _clean(native.decode("utf-8"))
        msg = f"Element {node.label()} does not hold text"
        raise DecodeError(msg)

    # Tagged object: explicit tagging wraps one inner node, implicit
    # tagging keeps the octets directly.
    if node.constructed:
        if tagged_layers >= MAX_TAGGED_LAYERS:
            msg = f"Element {node.label()} nests more than {MAX_TAGGED_LAYERS} tagged layer"
            raise DecodeError(msg)
        return element_text(node.first_child(), tagged_layers + 1)
    return _clean(node.contents.decode("utf-8"))
