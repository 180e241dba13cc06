"""
DNIe reader - identity data extraction for the Spanish electronic ID.

Decodes the chip data groups (DG1, DG13) or the printed QR text into one
canonical ``IdentityRecord``.
"""

__version__ = "0.1.0"

from .exceptions import (
    ChipAccessError,
    ConfigurationError,
    DecodeError,
    DnieReaderException,
    MRZFormatError,
    TLVDecodeError,
)
from .logging_config import setup_logging
from .models.identity import ExtractionError, IdentityRecord
from .rfid.chip_reader import DataGroupReader, StaticDataGroupReader, read_chip_identity
from .services.identity_extractor import decode_chip_data, decode_qr_text

__all__ = [
    "ChipAccessError",
    "ConfigurationError",
    "DataGroupReader",
    "DecodeError",
    "DnieReaderException",
    "ExtractionError",
    "IdentityRecord",
    "MRZFormatError",
    "StaticDataGroupReader",
    "TLVDecodeError",
    "decode_chip_data",
    "decode_qr_text",
    "read_chip_identity",
    "setup_logging",
]
