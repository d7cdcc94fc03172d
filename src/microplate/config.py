"""
Configuration constants and defaults for Microplate.

This module contains the well-index alphabet, default entity labels, the
standard plate-type table, result-tree tag names and the message templates
used throughout the package.
"""

from typing import Final

# ============================================================================
# Well Index Encoding
# ============================================================================

# Number of letters available for row labels (A-Z)
ALPHABET_BASE: Final[int] = 26

# Code point of the first row letter
ALPHABET_OFFSET: Final[int] = ord("A")

# A well index is one or more letters followed by one or more digits (e.g. "B12")
INDEX_PATTERN: Final[str] = r"^([A-Za-z]+)([0-9]+)$"

# Row labels on their own (e.g. "AA")
ROW_LABEL_PATTERN: Final[str] = r"^[A-Za-z]+$"

# ============================================================================
# Default Labels
# ============================================================================

DEFAULT_GROUP_LABEL: Final[str] = "Group"
DEFAULT_WELLSET_LABEL: Final[str] = "WellSet"
DEFAULT_PLATE_LABEL: Final[str] = "Plate"
DEFAULT_STACK_LABEL: Final[str] = "Stack"

# ============================================================================
# Standard Plate Types
# ============================================================================

# Plate type flag for any non-standard layout
PLATE_CUSTOM: Final[int] = -1

# Plate type flag -> (rows, columns)
PLATE_DIMENSIONS: Final[dict[int, tuple[int, int]]] = {
    0: (2, 3),
    1: (3, 4),
    2: (4, 6),
    3: (6, 8),
    4: (8, 12),
    5: (16, 24),
    6: (32, 48),
}

# Plate type flag -> human-readable descriptor
PLATE_DESCRIPTORS: Final[dict[int, str]] = {
    0: "6-Well",
    1: "12-Well",
    2: "24-Well",
    3: "48-Well",
    4: "96-Well",
    5: "384-Well",
    6: "1536-Well",
}

CUSTOM_PLATE_DESCRIPTOR: Final[str] = "Custom Plate {rows}x{columns}"

# ============================================================================
# Statistics Result Tags
# ============================================================================

WELL_TAG: Final[str] = "well"
WELLS_TAG: Final[str] = "wells"
SET_TAG: Final[str] = "set"
PLATE_TAG: Final[str] = "plate"
STACK_TAG: Final[str] = "stack"
RESULT_TAG: Final[str] = "result"

# Level order used when flattening result trees (outermost first)
RESULT_LEVELS: Final[list[str]] = [STACK_TAG, PLATE_TAG, SET_TAG, WELL_TAG]

# ============================================================================
# Arithmetic Result Labels
# ============================================================================

RESULT_LABEL: Final[str] = "Result - {label}"
RESULT_PAIR_LABEL: Final[str] = "Result - {left}, {right}"
ARRAY_OPERAND_LABEL: Final[str] = "Array"

# ============================================================================
# Error Messages
# ============================================================================

ERROR_CONSTRUCTOR: Final[str] = "{name} constructor accepts the following combinations of arguments:\n{shapes}"
ERROR_INVALID_INDEX: Final[str] = "Invalid index. Index must match pattern [a-zA-Z]+[0-9]+: {index!r}"
ERROR_INVALID_ROW_LABEL: Final[str] = "Invalid row label. Row labels must contain only letters: {label!r}"
ERROR_NEGATIVE_ROW: Final[str] = "Invalid row. Row must be >= 0, got {row}"
ERROR_INVALID_COLUMN: Final[str] = "Invalid column. Column must be >= 1, got {column}"
ERROR_NOT_INTEGER: Final[str] = "{name} must be an integer, got {value!r}"
ERROR_NOT_POSITIVE: Final[str] = "{name} must be > 0, got {value}"
ERROR_NOT_NUMERIC: Final[str] = "Invalid data. Well data must contain only numbers: {value!r}"
ERROR_NOT_STRING: Final[str] = "The label must be a string: {value!r}"
ERROR_WRONG_TYPE: Final[str] = "Invalid input value: {value!r}. Input value must be of the type: {expected}"
ERROR_ROW_OUT_OF_BOUNDS: Final[str] = "Row index out of range for a plate with {rows} rows: {index}"
ERROR_COLUMN_OUT_OF_BOUNDS: Final[str] = "Column index out of range for a plate with {columns} columns: {index}"
ERROR_PLATE_DIMENSIONS: Final[str] = (
    "Plate {label!r} is {rows}x{columns}, expected {expected_rows}x{expected_columns}"
)
ERROR_INVALID_PLATE_TYPE: Final[str] = "Invalid plate type: {value!r}"
ERROR_RANGE_ARGUMENTS: Final[str] = (
    "{name} accepts either no range or exactly two integer bounds (begin, end), got {count} extra argument(s)"
)
ERROR_RANGE_NEGATIVE: Final[str] = "Invalid range. Bounds must be >= 0, got begin={begin}, end={end}"
ERROR_RANGE_ORDER: Final[str] = "Invalid range. Beginning index must be <= ending index, got begin={begin}, end={end}"
ERROR_ARRAY_RANGE: Final[str] = "Invalid range [{begin}, {end}) for a data set of length {length}"
ERROR_WEIGHTS_LENGTH: Final[str] = (
    "Weights must match the data length of well {index}: got {weights} weight(s) for {length} value(s)"
)
ERROR_OPERAND: Final[str] = "Invalid operand: {value!r}. Operand must be a {expected}, a number or a list of numbers"
ERROR_UNKNOWN_DOCUMENT: Final[str] = "Unknown or missing document type: {value!r}"
ERROR_MISSING_TAG: Final[str] = "Expected <{tag}> section is missing"
