"""
Validation logic for Microplate.

This module holds the stateless checks shared by every entity:
- Argument shapes (integers, numbers, labels)
- Row / column coordinates and plate bounds
- Data vectors
- Index ranges used for slicing well data

Each validator raises on failure and returns the (possibly normalised) value
on success, so it can be used inline.
"""

import numbers
from typing import Any, Iterable

from microplate.config import (
    ERROR_NOT_INTEGER,
    ERROR_NOT_POSITIVE,
    ERROR_NOT_NUMERIC,
    ERROR_NOT_STRING,
    ERROR_NEGATIVE_ROW,
    ERROR_INVALID_COLUMN,
    ERROR_ROW_OUT_OF_BOUNDS,
    ERROR_COLUMN_OUT_OF_BOUNDS,
    ERROR_RANGE_NEGATIVE,
    ERROR_RANGE_ORDER,
    ERROR_ARRAY_RANGE,
    ERROR_RANGE_ARGUMENTS,
    ERROR_CONSTRUCTOR,
)
from microplate.exceptions import (
    ArgumentError,
    BoundsError,
    InvalidTypeError,
    RangeError,
)


# ============================================================================
# Primitive Type Checks
# ============================================================================


def is_integer(value: Any) -> bool:
    """Check for an integral value, excluding booleans."""
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def is_number(value: Any) -> bool:
    """Check for a real number, excluding booleans."""
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def is_sequence(value: Any) -> bool:
    """Check for a list or tuple (strings are not sequences here)."""
    return isinstance(value, (list, tuple))


def validate_integer(value: Any, name: str = "Value") -> int:
    """
    Ensure a value is an integer.

    Args:
        value: Value to check
        name: Human-readable name used in the error message

    Returns:
        The value as a plain int

    Raises:
        InvalidTypeError: If value is not an integer
    """
    if not is_integer(value):
        raise InvalidTypeError(ERROR_NOT_INTEGER.format(name=name, value=value))
    return int(value)


def validate_positive_integer(value: Any, name: str = "Value") -> int:
    """Ensure a value is an integer > 0."""
    value = validate_integer(value, name)
    if value <= 0:
        raise RangeError(ERROR_NOT_POSITIVE.format(name=name, value=value))
    return value


def validate_label(label: Any) -> str:
    """Ensure an entity label is a string."""
    if not isinstance(label, str):
        raise InvalidTypeError(ERROR_NOT_STRING.format(value=label))
    return label


# ============================================================================
# Coordinates
# ============================================================================


def validate_row(row: Any) -> int:
    """
    Ensure a zero-based row index is a non-negative integer.

    Raises:
        InvalidTypeError: If row is not an integer
        RangeError: If row is negative
    """
    row = validate_integer(row, "Row")
    if row < 0:
        raise RangeError(ERROR_NEGATIVE_ROW.format(row=row))
    return row


def validate_column(column: Any) -> int:
    """
    Ensure a one-based column index is an integer >= 1.

    Raises:
        InvalidTypeError: If column is not an integer
        RangeError: If column is < 1
    """
    column = validate_integer(column, "Column")
    if column < 1:
        raise RangeError(ERROR_INVALID_COLUMN.format(column=column))
    return column


def validate_bounds(row: int, column: int, rows: int, columns: int, index: str) -> None:
    """
    Ensure a coordinate lies inside a rows x columns plate.

    Valid coordinates satisfy ``0 <= row < rows`` and ``1 <= column <= columns``.

    Args:
        row: Zero-based row index
        column: One-based column index
        rows: Number of plate rows
        columns: Number of plate columns
        index: Well index string used in the error message

    Raises:
        BoundsError: If the coordinate is outside the plate
    """
    if row < 0 or row >= rows:
        raise BoundsError(ERROR_ROW_OUT_OF_BOUNDS.format(rows=rows, index=index))
    if column < 1 or column > columns:
        raise BoundsError(ERROR_COLUMN_OUT_OF_BOUNDS.format(columns=columns, index=index))


# ============================================================================
# Well Data
# ============================================================================


def validate_data(data: Any) -> list:
    """
    Ensure well data is a sequence of real numbers.

    Args:
        data: Candidate data vector

    Returns:
        A new list holding the values

    Raises:
        InvalidTypeError: If data is not a list/tuple or holds non-numeric values
    """
    if not is_sequence(data):
        raise InvalidTypeError(ERROR_NOT_NUMERIC.format(value=data))
    for value in data:
        if not is_number(value):
            raise InvalidTypeError(ERROR_NOT_NUMERIC.format(value=value))
    return list(data)


def validate_datum(value: Any) -> Any:
    """Ensure a single well value is a real number."""
    if not is_number(value):
        raise InvalidTypeError(ERROR_NOT_NUMERIC.format(value=value))
    return value


# ============================================================================
# Ranges
# ============================================================================


def validate_range(begin: int, end: int) -> tuple[int, int]:
    """
    Ensure ``[begin, end)`` is a non-negative, ordered integer range.

    Raises:
        InvalidTypeError: If either bound is not an integer
        RangeError: If a bound is negative or begin > end
    """
    begin = validate_integer(begin, "Beginning index")
    end = validate_integer(end, "Ending index")
    if begin < 0 or end < 0:
        raise RangeError(ERROR_RANGE_NEGATIVE.format(begin=begin, end=end))
    if begin > end:
        raise RangeError(ERROR_RANGE_ORDER.format(begin=begin, end=end))
    return begin, end


def validate_array_range(begin: int, end: int, length: int) -> tuple[int, int]:
    """Ensure ``[begin, end)`` is an ordered range inside a sequence of the given length."""
    begin, end = validate_range(begin, end)
    if end > length:
        raise RangeError(ERROR_ARRAY_RANGE.format(begin=begin, end=end, length=length))
    return begin, end


def split_range_arguments(name: str, bounds: tuple) -> tuple[int, int | None]:
    """
    Interpret the optional ``(begin, end)`` bounds of a statistics call.

    No bounds selects the whole data vector, returned as ``(0, None)`` so it
    can be used directly as a slice. Exactly two integer bounds select a
    range.

    Args:
        name: Entry point name used in the error message
        bounds: Extra positional arguments of the call

    Returns:
        Tuple of (begin, end) suitable for slicing

    Raises:
        ArgumentError: If the bound count is not 0 or 2, or bounds are not integers
        RangeError: If bounds are negative or begin > end
    """
    if len(bounds) == 0:
        return 0, None
    if len(bounds) != 2 or not all(is_integer(bound) for bound in bounds):
        raise ArgumentError(ERROR_RANGE_ARGUMENTS.format(name=name, count=len(bounds)))
    return validate_range(bounds[0], bounds[1])


# ============================================================================
# Constructor Shapes
# ============================================================================


def constructor_error(name: str, shapes: Iterable[str]) -> ArgumentError:
    """
    Build the ArgumentError raised for an unsupported constructor call.

    Args:
        name: Entity name
        shapes: Human-readable list of accepted argument combinations

    Returns:
        ArgumentError instance (the caller raises it)
    """
    listing = "\n".join(f"  -> {shape}" for shape in shapes)
    return ArgumentError(ERROR_CONSTRUCTOR.format(name=name, shapes=listing))
