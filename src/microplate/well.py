"""
Well entity for Microplate.

A well is a (row, column) coordinate plus an ordered vector of numeric
readings. Its canonical key is the well index string, so two wells with the
same coordinate occupy the same slot in any container regardless of data.
"""

from typing import Any, Iterator

from microplate.indexing import encode_row, format_index, parse_index
from microplate.validation import (
    constructor_error,
    is_integer,
    is_sequence,
    validate_array_range,
    validate_column,
    validate_data,
    validate_datum,
    validate_integer,
    validate_row,
)
from microplate.exceptions import InvalidTypeError

WELL_CONSTRUCTOR_SHAPES = [
    "str - the well index",
    "Well - the well to copy",
    "str - the well index, list[float] - the initial data set",
    "int - row index, int - column index",
    "int - row index, int - column index, list[float] - the initial data set",
]


class Well:
    """
    A single plate well: zero-based row, one-based column and a data vector.

    Examples:
        >>> Well("B2", [1.0, 2.0]).row
        1
        >>> str(Well(0, 12))
        'A12'
    """

    def __init__(self, *args: Any):
        self.row: int = 0
        self.column: int = 1
        self.data: list = []

        if len(args) == 1 and isinstance(args[0], str):
            self.row, self.column = parse_index(args[0])
        elif len(args) == 1 and isinstance(args[0], Well):
            self.row, self.column = args[0].row, args[0].column
            self.data = list(args[0].data)
        elif len(args) == 2 and isinstance(args[0], str) and is_sequence(args[1]):
            data = validate_data(args[1])
            self.row, self.column = parse_index(args[0])
            self.data = data
        elif len(args) == 2 and is_integer(args[0]) and is_integer(args[1]):
            self.row = validate_row(args[0])
            self.column = validate_column(args[1])
        elif len(args) == 3 and is_integer(args[0]) and is_integer(args[1]) and is_sequence(args[2]):
            self.row = validate_row(args[0])
            self.column = validate_column(args[1])
            self.data = validate_data(args[2])
        else:
            raise constructor_error("Well", WELL_CONSTRUCTOR_SHAPES)

    # ========================================================================
    # Identity
    # ========================================================================

    @property
    def index(self) -> str:
        """Canonical well index, e.g. "B12"."""
        return format_index(self.row, self.column)

    @property
    def row_label(self) -> str:
        """Alphabetic row label, e.g. "B"."""
        return encode_row(self.row)

    def sort_key(self) -> tuple[int, int]:
        return self.row, self.column

    def compare_to(self, other: "Well") -> int:
        """Row-major comparison: -1 if this well sorts first, 1 if after, 0 if same coordinate."""
        if not isinstance(other, Well):
            raise InvalidTypeError(f"Object is not a well: {other!r}")
        if self.sort_key() < other.sort_key():
            return -1
        if self.sort_key() > other.sort_key():
            return 1
        return 0

    def to_dict(self) -> dict:
        """Condensed form: ``{type, index, row, column, data}``."""
        return {
            "type": "Well",
            "index": self.index,
            "row": self.row,
            "column": self.column,
            "data": list(self.data),
        }

    # ========================================================================
    # Adding Data
    # ========================================================================

    def add(self, values: Any) -> None:
        """Append a number, a list of numbers or another well's data."""
        self.data.extend(self._values_of(values))

    # ========================================================================
    # Removing Data
    # ========================================================================

    def remove(self, values: Any) -> None:
        """Remove the first occurrence of each given value (missing values are ignored)."""
        for value in self._values_of(values):
            if value in self.data:
                self.data.remove(value)

    def remove_range(self, begin: int, length: int) -> None:
        """Remove ``length`` values starting at ``begin``."""
        begin = validate_integer(begin, "Beginning index")
        length = validate_integer(length, "Length")
        begin, end = validate_array_range(begin, begin + length, len(self.data))
        del self.data[begin:end]

    def clear(self) -> None:
        self.data = []

    # ========================================================================
    # Retaining Data
    # ========================================================================

    def retain(self, values: Any) -> None:
        """Keep only values that appear in the input, honouring multiplicity and order."""
        pool = self._values_of(values)
        retained = []
        for value in self.data:
            if value in pool:
                pool.remove(value)
                retained.append(value)
        self.data = retained

    def retain_range(self, begin: int, end: int) -> None:
        """Keep only the values in ``[begin, end)``."""
        begin, end = validate_array_range(begin, end, len(self.data))
        self.data = self.data[begin:end]

    # ========================================================================
    # Lookup
    # ========================================================================

    def contains(self, values: Any) -> bool:
        """Check whether the data holds every given value (multiset containment)."""
        try:
            wanted = self._values_of(values)
        except InvalidTypeError:
            return False
        pool = list(self.data)
        for value in wanted:
            if value not in pool:
                return False
            pool.remove(value)
        return True

    def index_of(self, value: Any) -> int:
        """Position of the first occurrence of value, or -1."""
        try:
            return self.data.index(value)
        except ValueError:
            return -1

    def size(self) -> int:
        return len(self.data)

    def is_empty(self) -> bool:
        return not self.data

    # ========================================================================
    # Helpers
    # ========================================================================

    @staticmethod
    def _values_of(values: Any) -> list:
        if isinstance(values, Well):
            return list(values.data)
        if is_sequence(values):
            return validate_data(values)
        return [validate_datum(values)]

    def __str__(self) -> str:
        return self.index

    def __repr__(self) -> str:
        return f"Well({self.index!r}, {self.data!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Well):
            return NotImplemented
        return self.sort_key() == other.sort_key() and self.data == other.data

    def __len__(self) -> int:
        return len(self.data)

    def __iter__(self) -> Iterator:
        return iter(list(self.data))
