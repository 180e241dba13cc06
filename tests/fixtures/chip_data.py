"""
Builders for DNIe chip test data.

Data groups are encoded with asn1crypto so the fixtures stay readable:
DG1 is ``[APPLICATION 1] { [APPLICATION 31] mrz }`` and DG13 is
``[APPLICATION 13] { SEQUENCE { OCTET STRING ... } }``.
"""

from asn1crypto import core, parser

APPLICATION = 1
UNIVERSAL = 0
CONTEXT = 2
PRIMITIVE = 0
CONSTRUCTED = 1


def spanish_mrz(
    doc_type="ID",
    state="ESP",
    doc_number="BAA000589",
    birth_date="990101",
    sex="M",
    expiry_date="300101",
    nationality="ESP",
    name_block="GARCIA<LOPEZ<<JUAN",
):
    """Build an 88-character MRZ with the DNIe field positions."""
    line1 = (doc_type + state + doc_number.ljust(9, "<")).ljust(44, "<")
    line2 = birth_date + "5" + sex + expiry_date + nationality + "<<<" + name_block.ljust(24, "<")
    assert len(line1) == 44 and len(line2) == 44
    return line1 + line2


def dg1_bytes(mrz):
    """Wrap MRZ text in the DG1 application envelope."""
    if isinstance(mrz, str):
        mrz = mrz.encode("utf-8")
    inner = parser.emit(APPLICATION, PRIMITIVE, 31, mrz)
    return parser.emit(APPLICATION, CONSTRUCTED, 1, inner)


def octet_string(value):
    return core.OctetString(value.encode("utf-8") if isinstance(value, str) else value).dump()


def dg13_sequence(elements):
    """Encode a DG13 body; str items become OCTET STRINGs, bytes items are used as-is."""
    encoded = b"".join(
        octet_string(element) if isinstance(element, str) else element for element in elements
    )
    return parser.emit(UNIVERSAL, CONSTRUCTED, 16, encoded)


def dg13_bytes(elements):
    """Wrap a DG13 sequence in the ``[APPLICATION 13]`` envelope."""
    return parser.emit(APPLICATION, CONSTRUCTED, 13, dg13_sequence(elements))


FULL_DG13_VALUES = [
    "GARCIA",
    "LOPEZ",
    "JUAN",
    "12345678-Z",
    "01 01 1990",
    "ESP",
    "01 01 2030",
    "BAA000589",
    "M",
    "ALCALA DE HENARES",
    "MADRID",
    "PEDRO / MARIA",
    "CALLE MAYOR 1",
    "MADRID",
    "",
    "MADRID",
]

SAMPLE_QR_TEXT = (
    "@12345678ZB01-01-1990DJUANFGARCIA LOPEZHM"
    "AVDA. DE LA CONSTITUCION 5bALCALA DE HENARESxMADRIDdESPfPEDRO / MARIA@"
)
