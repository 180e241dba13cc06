"""Chip reader capability for the DNIe data groups.

The secure channel (PACE with the CAN, secure messaging, retries over the
contactless link) belongs to the reader implementation. The extraction core
only needs something that hands over the DG1 and DG13 bytes.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional, Protocol, runtime_checkable

from dnie_reader.exceptions import ChipAccessError
from dnie_reader.rfid.elementary_files import DataGroup

if TYPE_CHECKING:
    from dnie_reader.config import ExtractionSettings
    from dnie_reader.models.identity import IdentityRecord

logger = logging.getLogger(__name__)


@runtime_checkable
class DataGroupReader(Protocol):
    """Protocol for objects that deliver raw data group bytes from an eID chip."""

    def read_data_group_1(self) -> Optional[bytes]:
        """Return the raw DG1 bytes, or None if the chip does not expose them."""
        ...

    def read_data_group_13(self) -> Optional[bytes]:
        """Return the raw DG13 bytes, or None if the chip does not expose them."""
        ...


class StaticDataGroupReader:
    """Reader that serves data groups captured beforehand (tests, replays)."""

    def __init__(self, dg1: Optional[bytes] = None, dg13: Optional[bytes] = None) -> None:
        self._dg1 = dg1
        self._dg13 = dg13

    def read_data_group_1(self) -> Optional[bytes]:
        return self._dg1

    def read_data_group_13(self) -> Optional[bytes]:
        return self._dg13


def read_chip_identity(
    reader: DataGroupReader,
    uid: Optional[str] = None,
    can: Optional[str] = None,
    settings: ExtractionSettings | None = None,
) -> IdentityRecord:
    """
    Read DG1 and DG13 through ``reader`` and decode them into a record.

    DG13 is optional on the card: a failure reading it is logged and the
    record is built from DG1 alone.

    Args:
        reader: Capability that performs the actual chip access
        uid: Chip unique id, copied to the record
        can: Card access number used to open the session, copied to the record
        settings: Extraction settings, defaults when None

    Returns:
        The decoded IdentityRecord

    Raises:
        ChipAccessError: If DG1 cannot be read from the chip
    """
    from dnie_reader.services.identity_extractor import decode_chip_data

    try:
        dg1 = reader.read_data_group_1()
    except ChipAccessError:
        raise
    except (OSError, RuntimeError) as e:
        msg = f"Error reading {DataGroup.DG1.value} from the chip: {e}"
        raise ChipAccessError(msg, data_group=DataGroup.DG1) from e

    try:
        dg13 = reader.read_data_group_13()
    except (ChipAccessError, OSError, RuntimeError) as e:
        logger.warning("%s not available, continuing with DG1 only: %s", DataGroup.DG13.value, e)
        dg13 = None

    return decode_chip_data(dg1, dg13, uid=uid, can=can, settings=settings)
