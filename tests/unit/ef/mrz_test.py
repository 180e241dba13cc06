import pytest

from dnie_reader.exceptions import MRZFormatError
from dnie_reader.utils.mrz_utils import (
    normalize_name,
    pad_field,
    split_mrz_fields,
    split_name_block,
    strip_filler,
)
from tests.fixtures.chip_data import spanish_mrz


def test_mrz_field_positions():
    """Test slicing of the two MRZ lines into raw fields."""
    fields = split_mrz_fields(spanish_mrz())

    assert fields == {
        "docType": "ID",
        "issuingState": "ESP",
        "docNumber": "BAA000589",
        "birthDate": "990101",
        "sex": "M",
        "expiryDate": "300101",
        "nationality": "ESP",
        "surname": "GARCIA LOPEZ",
        "name": "JUAN",
    }


def test_mrz_short_document_number_is_unpadded():
    fields = split_mrz_fields(spanish_mrz(doc_number="AB123"))
    assert fields["docNumber"] == "AB123"


def test_mrz_compound_given_names():
    fields = split_mrz_fields(spanish_mrz(name_block="DE<LA<FUENTE<<MARIA<JOSE"))
    assert fields["surname"] == "DE LA FUENTE"
    assert fields["name"] == "MARIA JOSE"


@pytest.mark.parametrize("length", [0, 87, 89, 90])
def test_mrz_wrong_length(length):
    with pytest.raises(MRZFormatError) as exc_info:
        split_mrz_fields("<" * length)
    assert exc_info.value.length == length


@pytest.mark.parametrize("value", ["BAA000589", "AB123", "X", ""])
def test_mrz_filler_strip_pad(value):
    assert strip_filler(pad_field(value, 9)) == value


def test_mrz_pad_rejects_long_values():
    with pytest.raises(MRZFormatError):
        pad_field("ABCDEFGHIJ", 9)


def test_mrz_name_block_without_separator():
    assert split_name_block("GARCIA<<<<<<") == ("GARCIA", "")
    assert split_name_block("GARCIA") == ("GARCIA", None)
    assert normalize_name("<<JUAN<<CARLOS<") == "JUAN CARLOS"
