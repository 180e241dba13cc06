import pytest
from asn1crypto import core, parser

from dnie_reader.exceptions import TLVDecodeError
from dnie_reader.utils.tlv import (
    CLASS_APPLICATION,
    CLASS_UNIVERSAL,
    TAG_OCTET_STRING,
    TAG_SEQUENCE,
    decode_tlv,
)


def test_application_envelope():
    """Application tags, including the two-byte 0x5F1F form, are decoded."""
    data = parser.emit(1, 1, 1, parser.emit(1, 0, 31, b"MRZ"))
    assert data[:1] == b"\x61"

    root = decode_tlv(data)
    assert root.class_ == CLASS_APPLICATION
    assert root.tag == 1
    assert root.constructed
    assert root.is_application(1)

    inner = root.first_child()
    assert inner.header[:2] == b"\x5f\x1f"
    assert inner.is_application(31)
    assert not inner.constructed
    assert inner.contents == b"MRZ"
    assert inner.length == 3


@pytest.mark.parametrize(
    ("size", "header"),
    [
        (5, b"\x04\x05"),
        (200, b"\x04\x81\xc8"),
        (300, b"\x04\x82\x01\x2c"),
    ],
)
def test_short_and_long_form_lengths(size, header):
    data = core.OctetString(b"A" * size).dump()

    node = decode_tlv(data)
    assert node.header == header
    assert node.length == size
    assert node.is_universal(TAG_OCTET_STRING)
    assert node.encoded == data


def test_children_are_decoded_in_order():
    values = [b"ONE", b"TWO", b"THREE"]
    data = parser.emit(0, 1, 16, b"".join(core.OctetString(v).dump() for v in values))

    node = decode_tlv(data)
    assert node.is_universal(TAG_SEQUENCE)
    assert [child.contents for child in node.children()] == values


def test_declared_length_exceeding_buffer():
    with pytest.raises(TLVDecodeError):
        decode_tlv(b"\x04\x05AB")


def test_child_overrunning_parent():
    data = parser.emit(0, 1, 16, core.OctetString(b"OK").dump() + b"\x04\x10AB")
    node = decode_tlv(data)

    children = node.children()
    assert next(children).contents == b"OK"
    with pytest.raises(TLVDecodeError):
        next(children)


def test_empty_and_invalid_input():
    with pytest.raises(TLVDecodeError):
        decode_tlv(b"")
    with pytest.raises(TLVDecodeError):
        decode_tlv("not bytes")


def test_primitive_has_no_children():
    node = decode_tlv(core.OctetString(b"X").dump())
    with pytest.raises(TLVDecodeError):
        list(node.children())


def test_constructed_without_child():
    node = decode_tlv(parser.emit(0, 1, 16, b""))
    assert list(node.children()) == []
    with pytest.raises(TLVDecodeError):
        node.first_child()


def test_trailing_bytes_are_ignored():
    data = core.OctetString(b"VALUE").dump() + b"\x00\x00\x00"
    node = decode_tlv(bytearray(data))
    assert node.class_ == CLASS_UNIVERSAL
    assert node.contents == b"VALUE"


def test_describe_lists_the_tree():
    data = parser.emit(1, 1, 13, parser.emit(0, 1, 16, core.OctetString(b"GARCIA").dump()))
    text = decode_tlv(data).describe()

    lines = text.splitlines()
    assert lines[0].startswith("[application 13] constructed")
    assert lines[1].strip().startswith("[universal 16] constructed")
    assert lines[2].strip() == "[universal 4] primitive len=6"


def test_describe_stops_at_max_depth():
    data = core.OctetString(b"X").dump()
    for _ in range(50):
        data = parser.emit(2, 1, 0, data)

    lines = decode_tlv(data).describe(max_depth=3).splitlines()

    assert len(lines) == 5
    assert lines[-1].strip() == "..."
