"""
Identifier text codec.

The canonical text form of an identifier is the decimal rendering of its
signed 64-bit value: ASCII digits, an optional leading "-", no whitespace,
no "+" sign and no digit grouping. Identifiers with bit 63 set are negative.
"""

import re
from typing import Optional

from flakeid.core.exceptions import IdFormatError

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1
UINT64_MAX = (1 << 64) - 1

_DECIMAL = re.compile(r"-?[0-9]+")


def to_signed64(value: int) -> int:
    """Reads a 64-bit pattern as a two's-complement signed integer."""
    if not INT64_MIN <= value <= UINT64_MAX:
        raise ValueError(f"{value} does not fit in 64 bits")
    value &= UINT64_MAX
    return value - (1 << 64) if value > INT64_MAX else value


def to_unsigned64(value: int) -> int:
    """Reads a signed 64-bit integer as its unsigned bit pattern."""
    if not INT64_MIN <= value <= UINT64_MAX:
        raise ValueError(f"{value} does not fit in 64 bits")
    return value & UINT64_MAX


def format_id(identifier: int) -> str:
    return str(to_signed64(identifier))


def parse_id(value: Optional[str]) -> int:
    """Parses the canonical text form of an identifier.

    Args:
        value: Decimal text of a signed 64-bit integer.

    Returns:
        The identifier as a signed 64-bit integer.

    Raises:
        IdFormatError: If the value is None, empty, not a plain decimal
            literal, or outside the signed 64-bit range.
    """
    if not isinstance(value, str) or not _DECIMAL.fullmatch(value):
        raise IdFormatError(value)

    identifier = int(value)
    if not INT64_MIN <= identifier <= INT64_MAX:
        raise IdFormatError(value)

    return identifier


def try_parse_id(value: Optional[str]) -> tuple[int, bool]:
    """Parses an identifier without raising.

    Returns:
        (identifier, True) on success, (0, False) otherwise.
    """
    try:
        return parse_id(value), True
    except IdFormatError:
        return 0, False


def compare_ids(left: int, right: int) -> int:
    """Orders two identifiers as signed 64-bit integers: -1, 0 or 1."""
    left, right = to_signed64(left), to_signed64(right)
    return (left > right) - (left < right)


def ids_equal(left: int, right: int) -> bool:
    return to_signed64(left) == to_signed64(right)
