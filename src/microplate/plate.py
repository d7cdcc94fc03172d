"""
Plates for Microplate.

A plate has fixed rows x columns bounds, a set of member wells and a
collection of well groups. Every well and every group member must fall inside
the bounds; each mutating call checks all of its input before changing state.
"""

import json
import logging
from enum import IntEnum
from functools import cmp_to_key
from typing import Any, Iterable, Iterator

from microplate.collection import UniqueTypedCollection
from microplate.config import (
    CUSTOM_PLATE_DESCRIPTOR,
    DEFAULT_PLATE_LABEL,
    ERROR_INVALID_PLATE_TYPE,
    PLATE_CUSTOM,
    PLATE_DESCRIPTORS,
    PLATE_DIMENSIONS,
)
from microplate.exceptions import InvalidTypeError, RangeError
from microplate.indexing import parse_index
from microplate.validation import (
    constructor_error,
    is_integer,
    is_sequence,
    validate_bounds,
    validate_label,
    validate_positive_integer,
)
from microplate.well import Well
from microplate.wellgroup import WellGroup
from microplate.wellset import WellSet

logger = logging.getLogger(__name__)

PLATE_CONSTRUCTOR_SHAPES = [
    "Plate - plate to copy",
    "PlateType - standard plate type",
    "PlateType - standard plate type, str - the plate label",
    "PlateType - standard plate type, Well | list[Well] | WellSet | Plate - initial wells",
    "PlateType - standard plate type, Well | list[Well] | WellSet | Plate - initial wells, str - the plate label",
    "int - rows, int - columns",
    "int - rows, int - columns, str - the plate label",
    "int - rows, int - columns, Well | list[Well] | WellSet | Plate - initial wells",
    "int - rows, int - columns, Well | list[Well] | WellSet | Plate - initial wells, str - the plate label",
]


class PlateType(IntEnum):
    """Standard plate layouts. Values match the keys of ``PLATE_DIMENSIONS``."""

    SIX = 0
    TWELVE = 1
    TWENTY_FOUR = 2
    FORTY_EIGHT = 3
    NINETY_SIX = 4
    THREE_EIGHTY_FOUR = 5
    FIFTEEN_THIRTY_SIX = 6
    CUSTOM = PLATE_CUSTOM

    @classmethod
    def from_dimensions(cls, rows: int, columns: int) -> "PlateType":
        """Standard type with the given bounds, or CUSTOM."""
        for flag, dimensions in PLATE_DIMENSIONS.items():
            if dimensions == (rows, columns):
                return cls(flag)
        return cls.CUSTOM

    @property
    def dimensions(self) -> tuple[int, int]:
        """(rows, columns) of a standard type."""
        if self is PlateType.CUSTOM:
            raise RangeError(ERROR_INVALID_PLATE_TYPE.format(value=self.value))
        return PLATE_DIMENSIONS[self.value]


def descriptor(plate_type: int, rows: int, columns: int) -> str:
    """
    Human-readable plate descriptor.

    Args:
        plate_type: Plate type flag (-1 or any unknown flag means custom)
        rows: Number of rows
        columns: Number of columns

    Returns:
        e.g. "96-Well" or "Custom Plate 5x7"
    """
    if plate_type in PLATE_DESCRIPTORS:
        return PLATE_DESCRIPTORS[plate_type]
    return CUSTOM_PLATE_DESCRIPTOR.format(rows=rows, columns=columns)


def to_plate_type(value: Any) -> PlateType:
    """Convert a standard plate type flag to PlateType (CUSTOM is not accepted)."""
    if not is_integer(value):
        raise InvalidTypeError(ERROR_INVALID_PLATE_TYPE.format(value=value))
    if value not in PLATE_DIMENSIONS:
        raise RangeError(ERROR_INVALID_PLATE_TYPE.format(value=value))
    return PlateType(value)


class Plate:
    """
    A bounded plate of wells with labelled well groups.

    Examples:
        >>> plate = Plate(PlateType.NINETY_SIX, "Assay 1")
        >>> plate.rows, plate.columns, plate.descriptor
        (8, 12, '96-Well')
    """

    def __init__(self, *args: Any):
        self.label: str = DEFAULT_PLATE_LABEL
        self.groups: UniqueTypedCollection[WellGroup] = UniqueTypedCollection(WellGroup)

        if len(args) == 1 and isinstance(args[0], Plate):
            source = args[0]
            self._set_bounds(source.rows, source.columns)
            self.label = source.label
            self.wells = WellSet(source.wells, source.label)
            self.groups.add_all([WellGroup(group) for group in source.groups])
            return

        args = list(args)
        if len(args) >= 2 and is_integer(args[0]) and is_integer(args[1]):
            rows, columns = args.pop(0), args.pop(0)
        elif len(args) >= 1 and is_integer(args[0]):
            rows, columns = to_plate_type(args.pop(0)).dimensions
        else:
            raise constructor_error("Plate", PLATE_CONSTRUCTOR_SHAPES)

        label = DEFAULT_PLATE_LABEL
        source = None
        if len(args) == 2 and isinstance(args[1], str) and self._is_source(args[0]):
            source, label = args
        elif len(args) == 1 and isinstance(args[0], str):
            label = args[0]
        elif len(args) == 1 and self._is_source(args[0]):
            source = args[0]
        elif len(args) != 0:
            raise constructor_error("Plate", PLATE_CONSTRUCTOR_SHAPES)

        self._set_bounds(rows, columns)
        self.label = label
        self.wells = WellSet(label)
        if source is not None:
            self.add(source)

    def _set_bounds(self, rows: int, columns: int) -> None:
        self.rows: int = validate_positive_integer(rows, "Rows")
        self.columns: int = validate_positive_integer(columns, "Columns")
        self.plate_type: PlateType = PlateType.from_dimensions(self.rows, self.columns)

    @property
    def descriptor(self) -> str:
        return descriptor(self.plate_type.value, self.rows, self.columns)

    def set_label(self, label: str) -> None:
        self.label = validate_label(label)

    # ========================================================================
    # Bounds
    # ========================================================================

    def check_bounds(self, indices: Iterable[str]) -> None:
        """
        Ensure every index lies on this plate.

        Raises:
            BoundsError: If any coordinate is outside rows x columns
        """
        for index in indices:
            row, column = parse_index(index)
            validate_bounds(row, column, self.rows, self.columns, index)

    # ========================================================================
    # Wells
    # ========================================================================

    def add(self, wells: Any) -> bool:
        """
        Add copies of one or more wells.

        Args:
            wells: A Well, a list of wells, a WellSet or a Plate

        Returns:
            True if at least one new coordinate was added

        Raises:
            BoundsError: If any well is outside the plate (nothing is added)
            InvalidTypeError: If any member is not a well (nothing is added)
        """
        incoming = WellSet.wells_of(wells)
        self.check_bounds(well.index for well in incoming)
        return self.wells.add(incoming)

    def remove(self, wells: Any, delimiter: str | None = None) -> bool:
        """Remove wells by well, index string, list, WellSet or Plate."""
        keys = WellSet.indices_of(wells, delimiter)
        self.check_bounds(keys)
        return self.wells.remove(keys)

    def retain(self, wells: Any, delimiter: str | None = None) -> bool:
        return self.wells.retain(wells, delimiter)

    def contains(self, wells: Any, delimiter: str | None = None) -> bool:
        return self.wells.contains(wells, delimiter)

    def get(self, wells: Any, delimiter: str | None = None) -> "Well | WellSet | None":
        return self.wells.get(wells, delimiter)

    def clear(self) -> None:
        """Remove all wells (groups are kept)."""
        self.wells.clear()

    def get_row(self, row: int | str) -> WellSet:
        return self.wells.get_row(row)

    def get_column(self, column: int) -> WellSet:
        return self.wells.get_column(column)

    def first(self) -> Well | None:
        return self.wells.first()

    def last(self) -> Well | None:
        return self.wells.last()

    def floor(self, well: Well | str) -> Well | None:
        return self.wells.floor(well)

    def ceiling(self, well: Well | str) -> Well | None:
        return self.wells.ceiling(well)

    def lower(self, well: Well | str) -> Well | None:
        return self.wells.lower(well)

    def higher(self, well: Well | str) -> Well | None:
        return self.wells.higher(well)

    def head_set(self, well: Well | str) -> WellSet:
        return self.wells.head_set(well)

    def tail_set(self, well: Well | str) -> WellSet:
        return self.wells.tail_set(well)

    def sub_set(self, begin: Well | str, end: Well | str) -> WellSet:
        return self.wells.sub_set(begin, end)

    def size(self) -> int:
        return self.wells.size()

    def is_empty(self) -> bool:
        return self.wells.is_empty()

    def to_list(self) -> list[Well]:
        """Wells in row-major order."""
        return self.wells.to_list()

    def to_index_list(self) -> list[str]:
        return self.wells.to_index_list()

    # ========================================================================
    # Groups
    # ========================================================================

    def add_groups(self, groups: Any) -> bool:
        """
        Add copies of one or more well groups.

        Raises:
            BoundsError: If any group member is outside the plate (nothing is added)
            InvalidTypeError: If any item is not a WellGroup (nothing is added)
        """
        incoming = self._groups_of(groups)
        for group in incoming:
            self.check_bounds(group.to_list())
        changed = self.groups.add_all([WellGroup(group) for group in incoming])
        logger.debug("Plate %r: %d group(s) offered, changed=%s", self.label, len(incoming), changed)
        return changed

    def remove_groups(self, groups: Any) -> bool:
        return self.groups.remove_all(self._groups_of(groups))

    def remove_group_names(self, names: Any) -> bool:
        """Remove every group whose label is listed."""
        names = self._names_of(names)
        return self.groups.remove_all([group for group in self.groups if group.label in names])

    def clear_groups(self) -> None:
        self.groups.clear()

    def contains_groups(self, groups: Any) -> bool:
        return self.groups.contains_all(self._groups_of(groups))

    def contains_group_names(self, names: Any) -> bool:
        """Check that every listed label names at least one group."""
        labels = {group.label for group in self.groups}
        return all(name in labels for name in self._names_of(names))

    def groups_to_list(self, groups: Any) -> list[WellGroup]:
        """Stored groups matching the given groups, sorted."""
        found = [self.groups.get(group) for group in self._groups_of(groups)]
        return WellGroup.sort(group for group in found if group is not None)

    def group_names_to_list(self, names: Any) -> list[WellGroup]:
        """Stored groups whose label is listed, sorted."""
        names = self._names_of(names)
        return WellGroup.sort(group for group in self.groups if group.label in names)

    def groups_to_well_sets(self, groups: Any) -> list[WellSet]:
        """One WellSet per matching stored group, holding the plate wells it tags."""
        return [self._group_well_set(group) for group in self.groups_to_list(groups)]

    def group_names_to_well_sets(self, names: Any) -> list[WellSet]:
        return [self._group_well_set(group) for group in self.group_names_to_list(names)]

    def all_groups(self) -> list[WellGroup]:
        return WellGroup.sort(self.groups)

    def all_groups_to_well_sets(self) -> list[WellSet]:
        return [self._group_well_set(group) for group in self.all_groups()]

    def group_names(self) -> list[str]:
        """Distinct group labels, sorted."""
        return sorted({group.label for group in self.groups})

    def _group_well_set(self, group: WellGroup) -> WellSet:
        selected = WellSet(group.label)
        for index in group.to_list():
            well = self.wells.get(index)
            if well is not None:
                selected.wells.add(well)
        return selected

    @staticmethod
    def _groups_of(groups: Any) -> list[WellGroup]:
        if isinstance(groups, WellGroup):
            return [groups]
        if is_sequence(groups):
            for group in groups:
                if not isinstance(group, WellGroup):
                    raise InvalidTypeError(f"Input must be a well group: {group!r}")
            return list(groups)
        raise InvalidTypeError(f"Input must be a well group or list of well groups: {groups!r}")

    @staticmethod
    def _names_of(names: Any) -> list[str]:
        if isinstance(names, str):
            return [names]
        if is_sequence(names) and all(isinstance(name, str) for name in names):
            return list(names)
        raise InvalidTypeError(f"Input must be a group label or list of labels: {names!r}")

    @staticmethod
    def _is_source(source: Any) -> bool:
        return isinstance(source, (Well, WellSet, Plate)) or is_sequence(source)

    # ========================================================================
    # Ordering
    # ========================================================================

    def compare_to(self, other: "Plate") -> int:
        """
        Compare by label, rows, columns, well count, well coordinates, then group count.

        Returns:
            -1 if this plate sorts first, 1 if after, 0 if equal
        """
        if not isinstance(other, Plate):
            raise InvalidTypeError(f"Object is not a plate: {other!r}")

        mine = (self.label, self.rows, self.columns, self.size())
        theirs = (other.label, other.rows, other.columns, other.size())
        if mine != theirs:
            return -1 if mine < theirs else 1

        for first, second in zip(self.to_list(), other.to_list()):
            order = first.compare_to(second)
            if order != 0:
                return order

        if self.groups.size() != other.groups.size():
            return -1 if self.groups.size() < other.groups.size() else 1
        return 0

    @staticmethod
    def sort(plates: Iterable["Plate"]) -> list["Plate"]:
        return sorted(plates, key=cmp_to_key(lambda first, second: first.compare_to(second)))

    # ========================================================================
    # Serialization
    # ========================================================================

    def groups_to_dict(self) -> dict[str, list[str]]:
        """Groups keyed by label; groups sharing a label are merged."""
        merged: dict[str, WellGroup] = {}
        for group in self.all_groups():
            merged.setdefault(group.label, WellGroup(group.label)).add(group)
        return {label: group.to_list() for label, group in merged.items()}

    def to_record(self) -> dict:
        """``{label, groups, wells}`` as nested inside a stack document."""
        return {
            "label": self.label,
            "groups": self.groups_to_dict(),
            "wells": self.wells.to_dict()["wells"],
        }

    def to_dict(self) -> dict:
        """Condensed form: ``{type, label, rows, columns, descriptor, groups, wells}``."""
        record = self.to_record()
        return {
            "type": "Plate",
            "label": self.label,
            "rows": self.rows,
            "columns": self.columns,
            "descriptor": self.descriptor,
            "groups": record["groups"],
            "wells": record["wells"],
        }

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

    def __repr__(self) -> str:
        return f"Plate({self.rows}, {self.columns}, {self.label!r}, wells={self.size()})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Plate):
            return NotImplemented
        return str(self) == str(other)

    def __len__(self) -> int:
        return self.wells.size()

    def __iter__(self) -> Iterator[Well]:
        return iter(self.to_list())

    def __contains__(self, well: Any) -> bool:
        return well in self.wells
