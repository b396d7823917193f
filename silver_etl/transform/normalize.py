"""Field-level normalizers for bronze values.

Every function here is total: bad input maps to ``None`` or a fallback
label, never to an exception.
"""

import logging
from datetime import date, datetime
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

INT_DATE_FORMAT = "%Y%m%d"

DATE_FORMATS = [
    "%Y-%m-%d",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
]


def trim(value: Optional[str]) -> Optional[str]:
    """Strip leading/trailing whitespace."""
    if value is None:
        return None
    return value.strip()


def code_to_label(
    code: Optional[str],
    table: Mapping[str, str],
    default: str,
    passthrough: bool = False,
) -> str:
    """Map a source code to its label.

    Lookup ignores case and surrounding whitespace. Null and empty codes
    always map to ``default``.

    Args:
        code: Raw code value
        table: Mapping of upper-case codes to labels
        default: Label for null, empty or unmapped codes
        passthrough: Return an unmapped code (trimmed) instead of ``default``

    Returns:
        The mapped label

    Example:
        >>> code_to_label(" s ", {"S": "Single"}, "n/a")
        'Single'
    """
    if code is None:
        return default

    cleaned = code.strip()
    if not cleaned:
        return default

    label = table.get(cleaned.upper())
    if label is not None:
        return label

    return cleaned if passthrough else default


def strip_prefix(value: Optional[str], prefix: str) -> Optional[str]:
    """Drop ``prefix`` from the start of ``value`` if present."""
    if value is None or not prefix:
        return value
    if value.startswith(prefix):
        return value[len(prefix):]
    return value


def strip_separator(value: Optional[str], char: str) -> Optional[str]:
    """Remove every occurrence of ``char``."""
    if value is None:
        return None
    return value.replace(char, "")


def rewrite_separator(
    value: Optional[str],
    from_char: str,
    to_char: str,
    length: int,
) -> Optional[str]:
    """Take the first ``length`` characters and swap one separator for another.

    Example:
        >>> rewrite_separator("CO-RF-FR-R92B-58", "-", "_", 5)
        'CO_RF'
    """
    if value is None:
        return None
    return value[:length].replace(from_char, to_char)


def split_key(
    compound: Optional[str],
    offset: int,
    prefix_length: Optional[int] = None,
) -> tuple[Optional[str], Optional[str]]:
    """Split a compound key into ``(prefix, local_key)``.

    The local key is everything from ``offset`` onward. The prefix is the
    first ``prefix_length`` characters (defaults to ``offset``), which lets a
    separator between the two parts be skipped.
    """
    if compound is None:
        return None, None
    if prefix_length is None:
        prefix_length = offset
    return compound[:prefix_length], compound[offset:]


def parse_int_date(value: Any) -> Optional[date]:
    """Parse a ``YYYYMMDD`` integer into a date.

    Returns None unless the value is a positive integer with exactly eight
    digits that names a real calendar day (so 20230230 is None).
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)

    if isinstance(value, str):
        value = value.strip()
        if not value.isdigit():
            return None
        value = int(value)

    if not isinstance(value, int) or value <= 0:
        return None

    text = str(value)
    if len(text) != 8:
        return None

    try:
        return datetime.strptime(text, INT_DATE_FORMAT).date()
    except ValueError:
        logger.debug(f"Invalid calendar date: {value}")
        return None


def to_date(value: Any) -> Optional[date]:
    """Coerce a date, datetime or ISO string to a date."""
    if value is None:
        return None

    if isinstance(value, datetime):
        return value.date()

    if isinstance(value, date):
        return value

    if isinstance(value, str):
        for fmt in DATE_FORMATS:
            try:
                return datetime.strptime(value.strip(), fmt).date()
            except ValueError:
                continue

        logger.warning(f"Could not parse date: {value}")
        return None

    return None


def future_date_guard(value: Optional[date], today: date) -> Optional[date]:
    """Null out dates strictly after ``today``."""
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()
    if value > today:
        return None
    return value
