"""
Well index codec for Microplate.

Rows are labelled with the spreadsheet-column convention: a bijective base-26
numeral over A-Z with no zero digit, so row 0 is "A", row 25 is "Z", row 26
is "AA" and row 701 is "ZZ". A well index is the row label followed by the
one-based column number ("B12" is row 1, column 12).
"""

import re
from functools import cmp_to_key
from typing import Iterable, NamedTuple

from microplate.config import (
    ALPHABET_BASE,
    ALPHABET_OFFSET,
    INDEX_PATTERN,
    ROW_LABEL_PATTERN,
    ERROR_INVALID_INDEX,
    ERROR_INVALID_ROW_LABEL,
)
from microplate.exceptions import FormatError, InvalidTypeError
from microplate.validation import validate_column, validate_row

_INDEX_RE = re.compile(INDEX_PATTERN)
_ROW_LABEL_RE = re.compile(ROW_LABEL_PATTERN)


class WellIndex(NamedTuple):
    """A parsed well coordinate. Tuple ordering is row-major."""

    row: int
    column: int

    def __str__(self) -> str:
        return format_index(self.row, self.column)


# ============================================================================
# Row Labels
# ============================================================================


def encode_row(row: int) -> str:
    """
    Convert a zero-based row number to its alphabetic label.

    Args:
        row: Row number (>= 0)

    Returns:
        Row label, e.g. 0 -> "A", 26 -> "AA"

    Raises:
        InvalidTypeError: If row is not an integer
        RangeError: If row is negative
    """
    remaining = validate_row(row) + 1
    letters = []
    while remaining > 0:
        remaining, digit = divmod(remaining - 1, ALPHABET_BASE)
        letters.append(chr(ALPHABET_OFFSET + digit))
    return "".join(reversed(letters))


def decode_row(label: str) -> int:
    """
    Convert an alphabetic row label (case-insensitive) to a zero-based row number.

    Raises:
        InvalidTypeError: If label is not a string
        FormatError: If label contains anything other than letters
    """
    if not isinstance(label, str):
        raise InvalidTypeError(ERROR_INVALID_ROW_LABEL.format(label=label))
    if not _ROW_LABEL_RE.fullmatch(label):
        raise FormatError(ERROR_INVALID_ROW_LABEL.format(label=label))

    value = 0
    for letter in label.upper():
        value = value * ALPHABET_BASE + (ord(letter) - ALPHABET_OFFSET + 1)
    return value - 1


# ============================================================================
# Well Indices
# ============================================================================


def parse_index(text: str) -> WellIndex:
    """
    Parse a well index string such as "B12".

    Args:
        text: Letters followed by digits, case-insensitive

    Returns:
        WellIndex with zero-based row and one-based column

    Raises:
        InvalidTypeError: If text is not a string
        FormatError: If text does not match ``[A-Za-z]+[0-9]+``
        RangeError: If the column is < 1
    """
    if not isinstance(text, str):
        raise InvalidTypeError(ERROR_INVALID_INDEX.format(index=text))

    match = _INDEX_RE.fullmatch(text)
    if match is None:
        raise FormatError(ERROR_INVALID_INDEX.format(index=text))

    row = decode_row(match.group(1))
    column = validate_column(int(match.group(2)))
    return WellIndex(row, column)


def format_index(row: int, column: int) -> str:
    """Format a coordinate as a well index string, e.g. (1, 12) -> "B12"."""
    return encode_row(row) + str(validate_column(column))


def normalize_index(text: str) -> str:
    """Return the canonical form of an index string ("b012" -> "B12")."""
    parsed = parse_index(text)
    return format_index(parsed.row, parsed.column)


# ============================================================================
# Ordering
# ============================================================================


def compare_indices(first: str, second: str) -> int:
    """
    Row-major comparator for index strings.

    Returns:
        -1 if first sorts before second, 1 if after, 0 if equal
    """
    parsed_first = parse_index(first)
    parsed_second = parse_index(second)
    if parsed_first < parsed_second:
        return -1
    if parsed_first > parsed_second:
        return 1
    return 0


def sort_indices(indices: Iterable[str]) -> list[str]:
    """Sort index strings row-major (row ascending, then column ascending)."""
    return sorted(indices, key=cmp_to_key(compare_indices))
