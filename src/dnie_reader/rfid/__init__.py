"""Chip (RFID/NFC) side of the extraction core.

Provides DG1/DG13 elementary file parsing and the reader capability used to
obtain their bytes.
"""

from __future__ import annotations

__all__ = [
    "DataGroup",
    "DataGroupParser",
    "DataGroupReader",
    "StaticDataGroupReader",
    "read_chip_identity",
]

from .chip_reader import DataGroupReader, StaticDataGroupReader, read_chip_identity
from .elementary_files import DataGroup, DataGroupParser
