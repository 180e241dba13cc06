"""
Custom exceptions for the DNIe identity extraction core.
"""


class DnieReaderException(Exception):
    """Base exception class for the identity extraction core."""

    def __init__(self, message) -> None:
        super().__init__(message)
        self.message = message


class DecodeError(DnieReaderException):
    """Raised when a data group or text blob is structurally malformed."""


class TLVDecodeError(DecodeError):
    """Raised for malformed tag, length or value encodings."""

    def __init__(self, message, offset=None) -> None:
        super().__init__(message)
        self.offset = offset


class MRZFormatError(DecodeError):
    """Raised when the machine readable zone does not have the expected layout."""

    def __init__(self, message, length=None) -> None:
        super().__init__(message)
        self.length = length


class ChipAccessError(DnieReaderException):
    """Raised when the chip reader collaborator fails to deliver a data group."""

    def __init__(self, message="Could not read data groups from the chip.", data_group=None) -> None:
        super().__init__(message)
        self.data_group = data_group


class ConfigurationError(DnieReaderException):
    """Raised when there's an error loading configuration."""
