"""
Normalization of raw birth-date tokens into Spanish long-form dates.

Accepted shapes, chosen by inspecting the token:

* ``"D M Y"`` (whitespace separated numbers, 1-2 digit month; day and year
  are taken as written)
* ``"YYMMDD"`` (two-digit year, pivoted into the 1900s or 2000s)
* ``"YYYYMMDD"``

The output is ``"<day> de <month name> de <year>"``, e.g. ``"1 de enero de 1999"``.
Only the month is validated; day and month combinations are not checked
against the calendar.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)

SPANISH_MONTHS = (
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
)

DEFAULT_CENTURY_PIVOT = 50

_SPACED_DATE = re.compile(r"(\d+) (\d{1,2}) (\d+)")
_SHORT_DATE = re.compile(r"(\d{2})(\d{2})(\d{2})")
_LONG_DATE = re.compile(r"(\d{4})(\d{2})(\d{2})")
_WHITESPACE = re.compile(r"\s+")


def month_name(month: int) -> Optional[str]:
    """Spanish name for a month number, or None when out of range."""
    if 1 <= month <= 12:
        return SPANISH_MONTHS[month - 1]
    return None


def expand_year(two_digit_year: int, pivot: int = DEFAULT_CENTURY_PIVOT) -> int:
    """Expand a two-digit year: above ``pivot`` is 19xx, otherwise 20xx."""
    return 1900 + two_digit_year if two_digit_year > pivot else 2000 + two_digit_year


def _split_token(token: str, pivot: int) -> Optional[tuple[int, int, int]]:
    if " " in token:
        match = _SPACED_DATE.fullmatch(token)
        if not match:
            return None
        day, month, year = match.groups()
        return int(day), int(month), int(year)

    if len(token) == 6:
        match = _SHORT_DATE.fullmatch(token)
        if not match:
            return None
        year, month, day = match.groups()
        return int(day), int(month), expand_year(int(year), pivot)

    if len(token) == 8:
        match = _LONG_DATE.fullmatch(token)
        if not match:
            return None
        year, month, day = match.groups()
        return int(day), int(month), int(year)

    return None


def normalize_date(raw: Optional[str], pivot: int = DEFAULT_CENTURY_PIVOT) -> Optional[str]:
    """
    Convert a raw date token into ``"<day> de <month> de <year>"``.

    Args:
        raw: Raw token from DG1, DG13 or the QR text
        pivot: Century pivot for two-digit years

    Returns:
        Canonical Spanish date, or None if the token has no accepted shape
        or the month is not between 1 and 12
    """
    if raw is None:
        return None

    token = _WHITESPACE.sub(" ", raw.strip())
    parts = _split_token(token, pivot)
    if parts is None:
        logger.debug("Unrecognised date shape: '%s' (length=%d)", token, len(token))
        return None

    day, month, year = parts
    name = month_name(month)
    if name is None:
        logger.debug("Invalid month %d in date '%s'", month, token)
        return None

    return f"{day} de {name} de {year}"
