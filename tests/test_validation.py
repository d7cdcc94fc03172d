"""
Unit tests for validation module.

Tests primitive type checks, coordinate and bounds checks, data vectors and
the range arguments accepted by the statistics dispatcher.
"""

import pytest

from microplate.exceptions import ArgumentError, BoundsError, InvalidTypeError, RangeError
from microplate.validation import (
    constructor_error,
    is_integer,
    is_number,
    split_range_arguments,
    validate_array_range,
    validate_bounds,
    validate_data,
    validate_label,
    validate_positive_integer,
    validate_range,
)


# ============================================================================
# Primitive Check Tests
# ============================================================================


def test_is_integer_excludes_bool_and_float():
    """is_integer should accept ints only."""
    assert is_integer(3)
    assert not is_integer(True)
    assert not is_integer(3.0)
    assert not is_integer("3")


def test_is_number():
    """is_number should accept ints and floats but not booleans or strings."""
    assert is_number(1)
    assert is_number(2.5)
    assert not is_number(False)
    assert not is_number("1")


def test_validate_positive_integer():
    """validate_positive_integer should reject zero and non-integers."""
    assert validate_positive_integer(8, "Rows") == 8
    with pytest.raises(RangeError, match="Rows must be > 0"):
        validate_positive_integer(0, "Rows")
    with pytest.raises(InvalidTypeError, match="Rows must be an integer"):
        validate_positive_integer(8.0, "Rows")


def test_validate_label():
    """Labels must be strings."""
    assert validate_label("Plate 1") == "Plate 1"
    with pytest.raises(InvalidTypeError):
        validate_label(None)


# ============================================================================
# Bounds Tests
# ============================================================================


def test_validate_bounds_edges():
    """The last row and column of a plate should be valid."""
    validate_bounds(7, 12, 8, 12, "H12")
    validate_bounds(0, 1, 8, 12, "A1")


def test_validate_bounds_row_equal_to_rows():
    """Row index equal to the row count is out of bounds."""
    with pytest.raises(BoundsError, match="8 rows: I1"):
        validate_bounds(8, 1, 8, 12, "I1")


def test_validate_bounds_column():
    """Column 0 and columns past the count are out of bounds."""
    with pytest.raises(BoundsError):
        validate_bounds(0, 13, 8, 12, "A13")
    with pytest.raises(BoundsError):
        validate_bounds(0, 0, 8, 12, "A0")


# ============================================================================
# Data Tests
# ============================================================================


def test_validate_data_copies():
    """validate_data should return a new list."""
    data = [1, 2.0]
    result = validate_data(data)
    result.append(3)

    assert data == [1, 2.0]


def test_validate_data_rejects():
    """Non-sequences and non-numeric entries should raise InvalidTypeError."""
    with pytest.raises(InvalidTypeError):
        validate_data("123")
    with pytest.raises(InvalidTypeError):
        validate_data([1, None])


# ============================================================================
# Range Tests
# ============================================================================


def test_validate_range():
    """Ranges must be non-negative and ordered."""
    assert validate_range(0, 0) == (0, 0)
    assert validate_range(1, 4) == (1, 4)
    with pytest.raises(RangeError, match=">= 0"):
        validate_range(-1, 2)
    with pytest.raises(RangeError, match="<= ending index"):
        validate_range(3, 2)


def test_validate_array_range():
    """Array ranges must fit the data length."""
    assert validate_array_range(0, 3, 3) == (0, 3)
    assert validate_array_range(3, 3, 3) == (3, 3)
    with pytest.raises(RangeError):
        validate_array_range(4, 4, 3)
    with pytest.raises(RangeError):
        validate_array_range(0, 4, 3)


def test_split_range_arguments_whole():
    """No bounds should select the whole vector."""
    assert split_range_arguments("wells", ()) == (0, None)


def test_split_range_arguments_pair():
    """Two integer bounds should be validated and returned."""
    assert split_range_arguments("wells", (1, 3)) == (1, 3)


def test_split_range_arguments_bad_arity():
    """Any other number of bounds should raise ArgumentError naming the entry point."""
    with pytest.raises(ArgumentError, match="plates accepts"):
        split_range_arguments("plates", (1,))
    with pytest.raises(ArgumentError):
        split_range_arguments("plates", (1, 2, 3))
    with pytest.raises(ArgumentError):
        split_range_arguments("plates", ("1", 2))


def test_constructor_error_lists_shapes():
    """constructor_error should name every accepted shape."""
    error = constructor_error("Thing", ["str - label", "int - size"])

    assert isinstance(error, ArgumentError)
    assert "str - label" in str(error)
    assert "int - size" in str(error)
