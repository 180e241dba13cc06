"""Record assembly services."""

from .identity_extractor import decode_chip_data, decode_qr_text, merge_chip_fields

__all__ = ["decode_chip_data", "decode_qr_text", "merge_chip_fields"]
