"""
Unit tests for the well index codec.

Tests row label encoding/decoding, index parsing/formatting and row-major
ordering of index strings.
"""

import pytest

from microplate.exceptions import FormatError, InvalidTypeError, RangeError
from microplate.indexing import (
    WellIndex,
    compare_indices,
    decode_row,
    encode_row,
    format_index,
    normalize_index,
    parse_index,
    sort_indices,
)


# ============================================================================
# Row Label Tests
# ============================================================================


def test_encode_row_single_letters():
    """encode_row should map 0..25 to A..Z."""
    assert encode_row(0) == "A"
    assert encode_row(1) == "B"
    assert encode_row(25) == "Z"


def test_encode_row_multiple_letters():
    """encode_row should use bijective base-26 past Z."""
    assert encode_row(26) == "AA"
    assert encode_row(27) == "AB"
    assert encode_row(51) == "AZ"
    assert encode_row(52) == "BA"
    assert encode_row(701) == "ZZ"
    assert encode_row(702) == "AAA"


def test_decode_row_is_case_insensitive():
    """decode_row should accept lower-case labels."""
    assert decode_row("a") == 0
    assert decode_row("aa") == 26
    assert decode_row("Zz") == 701


def test_row_label_round_trip():
    """decode_row(encode_row(r)) should return r for every row up to 10000."""
    for row in range(10001):
        assert decode_row(encode_row(row)) == row


def test_encode_row_rejects_negative():
    """encode_row should raise RangeError for negative rows."""
    with pytest.raises(RangeError):
        encode_row(-1)


def test_encode_row_rejects_non_integer():
    """encode_row should raise InvalidTypeError for non-integers."""
    with pytest.raises(InvalidTypeError):
        encode_row(1.5)
    with pytest.raises(InvalidTypeError):
        encode_row(True)


def test_decode_row_rejects_bad_labels():
    """decode_row should raise FormatError for labels with non-letters."""
    with pytest.raises(FormatError):
        decode_row("A1")
    with pytest.raises(FormatError):
        decode_row("")
    with pytest.raises(InvalidTypeError):
        decode_row(3)


# ============================================================================
# Index Parsing Tests
# ============================================================================


def test_parse_index_basic():
    """parse_index should split letters and digits into row and column."""
    assert parse_index("A1") == WellIndex(0, 1)
    assert parse_index("B12") == WellIndex(1, 12)
    assert parse_index("aa3") == WellIndex(26, 3)


def test_parse_index_leading_zeros():
    """parse_index should accept zero-padded columns."""
    assert parse_index("C007") == WellIndex(2, 7)


def test_parse_index_rejects_malformed():
    """parse_index should raise FormatError for anything but letters then digits."""
    for text in ["", "1A", "A", "12", "A-1", "A 1", "A1B", " A1"]:
        with pytest.raises(FormatError, match="Invalid index"):
            parse_index(text)


def test_parse_index_rejects_column_zero():
    """parse_index should raise RangeError when the column is 0."""
    with pytest.raises(RangeError, match="Column must be >= 1"):
        parse_index("A0")


def test_parse_format_round_trip():
    """parse_index(format_index(r, c)) should return (r, c)."""
    for row in [0, 1, 7, 25, 26, 100, 701, 702]:
        for column in [1, 2, 12, 48, 1000]:
            assert parse_index(format_index(row, column)) == (row, column)


def test_well_index_str():
    """WellIndex should format as an index string."""
    assert str(WellIndex(1, 12)) == "B12"


def test_normalize_index():
    """normalize_index should upper-case letters and drop leading zeros."""
    assert normalize_index("b012") == "B12"
    assert normalize_index("A1") == "A1"


# ============================================================================
# Ordering Tests
# ============================================================================


def test_compare_indices_row_major():
    """compare_indices should order by row, then column."""
    assert compare_indices("A2", "B1") == -1
    assert compare_indices("B1", "A2") == 1
    assert compare_indices("A10", "A9") == 1
    assert compare_indices("a1", "A1") == 0


def test_sort_indices():
    """sort_indices should order numerically, not lexically."""
    assert sort_indices(["B1", "A10", "A2", "AA1", "Z3"]) == ["A2", "A10", "B1", "Z3", "AA1"]
