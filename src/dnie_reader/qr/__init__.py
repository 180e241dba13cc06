"""QR side of the extraction core."""

from .qr_parser import classify_document, clean_qr_text, parse_qr_fields

__all__ = ["classify_document", "clean_qr_text", "parse_qr_fields"]
