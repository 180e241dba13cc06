"""
Tag-Length-Value decoding for eID chip data groups.

Thin layer over ``asn1crypto.parser`` that keeps the raw identifier
information (class, constructed bit, tag number) that asn1crypto's typed
loaders hide. Application-class envelopes such as ``[APPLICATION 1]`` (0x61)
and ``[APPLICATION 31]`` (0x5F1F) are decoded like any other node.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from asn1crypto import parser

from dnie_reader.exceptions import TLVDecodeError

logger = logging.getLogger(__name__)

CLASS_UNIVERSAL = 0
CLASS_APPLICATION = 1
CLASS_CONTEXT = 2
CLASS_PRIVATE = 3

METHOD_PRIMITIVE = 0
METHOD_CONSTRUCTED = 1

CLASS_NAMES = {
    CLASS_UNIVERSAL: "universal",
    CLASS_APPLICATION: "application",
    CLASS_CONTEXT: "context",
    CLASS_PRIVATE: "private",
}

TAG_OCTET_STRING = 4
TAG_SEQUENCE = 16

DESCRIBE_MAX_DEPTH = 8


@dataclass(frozen=True)
class TLVNode:
    """One decoded tag-length-value node.

    Children of constructed nodes are decoded lazily from ``contents``.
    """

    class_: int
    method: int
    tag: int
    header: bytes
    contents: bytes
    trailer: bytes = b""

    @property
    def constructed(self) -> bool:
        return self.method == METHOD_CONSTRUCTED

    @property
    def length(self) -> int:
        return len(self.contents)

    @property
    def encoded(self) -> bytes:
        return self.header + self.contents + self.trailer

    def is_application(self, tag: int | None = None) -> bool:
        return self.class_ == CLASS_APPLICATION and (tag is None or self.tag == tag)

    def is_universal(self, tag: int | None = None) -> bool:
        return self.class_ == CLASS_UNIVERSAL and (tag is None or self.tag == tag)

    def children(self) -> Iterator[TLVNode]:
        """
        Iterate the child nodes of a constructed node.

        Raises:
            TLVDecodeError: If the node is primitive, or a child overruns the payload
        """
        if not self.constructed:
            msg = f"Node {self.label()} is primitive and has no children"
            raise TLVDecodeError(msg)

        offset = 0
        while offset < len(self.contents):
            child, consumed = _parse_one(self.contents[offset:], offset)
            yield child
            offset += consumed

    def first_child(self) -> TLVNode:
        """
        Return the first child of a constructed node.

        Raises:
            TLVDecodeError: If there is no child to return
        """
        for child in self.children():
            return child
        msg = f"Constructed node {self.label()} contains no child"
        raise TLVDecodeError(msg)

    def label(self) -> str:
        class_name = CLASS_NAMES.get(self.class_, str(self.class_))
        return f"[{class_name} {self.tag}]"

    def describe(self, indent: int = 0, max_depth: int = DESCRIBE_MAX_DEPTH) -> str:
        """Render the node tree for debug logs, down to ``max_depth`` levels."""
        kind = "constructed" if self.constructed else "primitive"
        lines = [f"{'  ' * indent}{self.label()} {kind} len={self.length}"]
        if self.constructed:
            if indent >= max_depth:
                lines.append(f"{'  ' * (indent + 1)}...")
                return "\n".join(lines)
            try:
                lines.extend(
                    child.describe(indent + 1, max_depth) for child in self.children()
                )
            except TLVDecodeError as e:
                lines.append(f"{'  ' * (indent + 1)}<undecodable: {e.message}>")
        return "\n".join(lines)


def decode_tlv(data: bytes) -> TLVNode:
    """
    Decode the top-level TLV node of a buffer.

    Short and long form lengths and multi-byte tag numbers are supported.
    Bytes following the first node are ignored.

    Args:
        data: Raw encoded bytes

    Returns:
        The decoded top-level node

    Raises:
        TLVDecodeError: If the buffer is empty or the declared length exceeds
            the bytes available
    """
    if not isinstance(data, (bytes, bytearray)):
        msg = f"TLV data must be a byte string, not {type(data).__name__}"
        raise TLVDecodeError(msg)

    node, consumed = _parse_one(bytes(data), 0)
    if consumed < len(data):
        logger.debug("Ignoring %d trailing bytes after %s", len(data) - consumed, node.label())
    return node


def _parse_one(data: bytes, offset: int) -> tuple[TLVNode, int]:
    if not data:
        msg = "No data available to decode a TLV node"
        raise TLVDecodeError(msg, offset=offset)

    try:
        class_, method, tag, header, contents, trailer = parser.parse(data, strict=False)
    except ValueError as e:
        msg = f"Malformed TLV at offset {offset}: {e}"
        raise TLVDecodeError(msg, offset=offset) from e

    node = TLVNode(
        class_=class_,
        method=method,
        tag=tag,
        header=header,
        contents=contents,
        trailer=trailer or b"",
    )
    return node, len(header) + len(contents) + len(node.trailer)
