import pytest

from dnie_reader.qr.qr_parser import (
    classify_document,
    clean_qr_text,
    gender_from_sex_code,
    parse_qr_fields,
)
from tests.fixtures.chip_data import SAMPLE_QR_TEXT


def test_qr_fields():
    fields = parse_qr_fields(SAMPLE_QR_TEXT)

    assert fields == {
        "docNumber": "12345678Z",
        "name": "JUAN",
        "surname": "GARCIA LOPEZ",
        "sex": "M",
        "birthDate": "01-01-1990",
        "actualAddress": "AVDA. DE LA CONSTITUCION 5",
        "birthPlace": "ALCALA DE HENARES",
        "nationality": "ESP",
        "docType": "DNI",
        "fatherName": "PEDRO",
        "motherName": "MARIA",
    }


def test_qr_non_printable_characters_are_removed():
    noisy = "\x1d" + SAMPLE_QR_TEXT.replace("JUAN", "JU\x00AN") + "\r\n"
    assert clean_qr_text(noisy) == SAMPLE_QR_TEXT
    assert parse_qr_fields(noisy)["name"] == "JUAN"


def test_qr_foreign_resident_document():
    fields = parse_qr_fields(SAMPLE_QR_TEXT.replace("@12345678ZB", "@X1234567LB"))
    assert fields["docNumber"] == "X1234567L"
    assert fields["docType"] == "NIE"


def test_qr_missing_document_anchor():
    fields = parse_qr_fields(SAMPLE_QR_TEXT.replace("@12345678ZB", ""))

    assert fields["docNumber"] is None
    assert fields["docType"] is None
    assert fields["name"] == "JUAN"
    assert fields["surname"] == "GARCIA LOPEZ"


def test_qr_ml_sex_code():
    fields = parse_qr_fields(SAMPLE_QR_TEXT.replace("HMAVDA", "HMLAVDA"))
    assert fields["sex"] == "ML"
    assert gender_from_sex_code(fields["sex"]) == "Masculino"


def test_qr_unrelated_text():
    fields = parse_qr_fields("https://example.org/not-an-id")
    assert all(value is None for value in fields.values())


@pytest.mark.parametrize(
    ("number", "expected"),
    [
        ("12345678Z", "DNI"),
        ("X1234567L", "NIE"),
        ("Y7654321K", "NIE"),
        ("Z0000000A", "NIE"),
        ("1234567Z", None),
        (None, None),
    ],
)
def test_qr_classify_document(number, expected):
    assert classify_document(number) == expected


def test_qr_unknown_sex_codes():
    assert gender_from_sex_code("F") is None
    assert gender_from_sex_code(None) is None
