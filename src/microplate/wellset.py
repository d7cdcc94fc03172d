"""
Well sets for Microplate.

A well set is a labelled collection of full wells (coordinate plus data) that
is independent of any plate. At most one well is stored per coordinate.
"""

import json
from typing import Any, Iterator

from microplate.collection import UniqueTypedCollection
from microplate.config import DEFAULT_WELLSET_LABEL
from microplate.exceptions import InvalidTypeError
from microplate.indexing import decode_row, normalize_index
from microplate.validation import (
    constructor_error,
    is_sequence,
    validate_column,
    validate_label,
    validate_row,
)
from microplate.well import Well

WELLSET_CONSTRUCTOR_SHAPES = [
    "no arguments",
    "str - the set label",
    "Well | list[Well] - initial wells",
    "WellSet - set to copy",
    "Plate - plate whose wells are copied",
    "Well | list[Well] | WellSet | Plate - initial wells, str - the set label",
]


class WellSet:
    """
    A labelled set of wells keyed by coordinate.

    Adding a well whose coordinate is already present is ignored: the first
    well stored at a coordinate wins. Wells are copied on the way in, so later
    changes to the caller's objects do not leak into the set.
    """

    def __init__(self, *args: Any):
        self.label: str = DEFAULT_WELLSET_LABEL
        self.wells: UniqueTypedCollection[Well] = UniqueTypedCollection(Well)

        if len(args) == 0:
            return
        if len(args) > 2:
            raise constructor_error("WellSet", WELLSET_CONSTRUCTOR_SHAPES)

        source = args[0]
        if len(args) == 1 and isinstance(source, str):
            self.label = source
            return

        if not self._is_source(source):
            raise constructor_error("WellSet", WELLSET_CONSTRUCTOR_SHAPES)
        self.add(source)
        if isinstance(source, WellSet):
            self.label = source.label

        if len(args) == 2:
            if not isinstance(args[1], str):
                raise constructor_error("WellSet", WELLSET_CONSTRUCTOR_SHAPES)
            self.label = args[1]

    # ========================================================================
    # Adding Wells
    # ========================================================================

    def add(self, wells: Any) -> bool:
        """
        Add copies of one or more wells.

        Args:
            wells: A Well, a list of wells, a WellSet or a Plate

        Returns:
            True if at least one new coordinate was added

        Raises:
            InvalidTypeError: If any member is not a well (nothing is added)
        """
        return self.wells.add_all([Well(well) for well in self.wells_of(wells)])

    # ========================================================================
    # Removing / Retaining Wells
    # ========================================================================

    def remove(self, wells: Any, delimiter: str | None = None) -> bool:
        """Remove wells by well, index string, list, WellSet or Plate."""
        return self.wells.remove_all(self.indices_of(wells, delimiter))

    def retain(self, wells: Any, delimiter: str | None = None) -> bool:
        """Keep only the listed wells. Returns True if any of them was present."""
        return self.wells.retain_all(self.indices_of(wells, delimiter))

    def clear(self) -> None:
        self.wells.clear()

    # ========================================================================
    # Lookup
    # ========================================================================

    def contains(self, wells: Any, delimiter: str | None = None) -> bool:
        """Check whether every listed coordinate is present."""
        return self.wells.contains_all(self.indices_of(wells, delimiter))

    def get(self, wells: Any, delimiter: str | None = None) -> "Well | WellSet | None":
        """
        Look up stored wells.

        Args:
            wells: A Well or index string, or a collection of them
            delimiter: Split a single string into several indices

        Returns:
            The stored Well (or None) for a single well or index; otherwise a
            WellSet holding the stored wells that were found
        """
        if isinstance(wells, (Well, str)) and delimiter is None:
            return self.wells.get(self.indices_of(wells)[0])

        found = WellSet(self.label)
        for key in self.indices_of(wells, delimiter):
            well = self.wells.get(key)
            if well is not None:
                found.wells.add(well)
        return found

    def get_row(self, row: int | str) -> "WellSet":
        """Wells in one row, given as a zero-based number or a row label."""
        row = decode_row(row) if isinstance(row, str) else validate_row(row)
        return self._select(lambda well: well.row == row)

    def get_column(self, column: int) -> "WellSet":
        """Wells in one (one-based) column."""
        column = validate_column(column)
        return self._select(lambda well: well.column == column)

    def size(self) -> int:
        return self.wells.size()

    def is_empty(self) -> bool:
        return self.wells.is_empty()

    def to_list(self) -> list[Well]:
        """Wells in row-major order."""
        return sorted(self.wells, key=Well.sort_key)

    def to_index_list(self) -> list[str]:
        return [well.index for well in self.to_list()]

    # ========================================================================
    # Navigation
    # ========================================================================

    def first(self) -> Well | None:
        wells = self.to_list()
        return wells[0] if wells else None

    def last(self) -> Well | None:
        wells = self.to_list()
        return wells[-1] if wells else None

    def floor(self, well: Well | str) -> Well | None:
        """Greatest well at or before the given coordinate."""
        key = self._coordinate_of(well)
        candidates = [member for member in self.to_list() if member.sort_key() <= key]
        return candidates[-1] if candidates else None

    def ceiling(self, well: Well | str) -> Well | None:
        """Least well at or after the given coordinate."""
        key = self._coordinate_of(well)
        candidates = [member for member in self.to_list() if member.sort_key() >= key]
        return candidates[0] if candidates else None

    def lower(self, well: Well | str) -> Well | None:
        """Greatest well strictly before the given coordinate."""
        key = self._coordinate_of(well)
        candidates = [member for member in self.to_list() if member.sort_key() < key]
        return candidates[-1] if candidates else None

    def higher(self, well: Well | str) -> Well | None:
        """Least well strictly after the given coordinate."""
        key = self._coordinate_of(well)
        candidates = [member for member in self.to_list() if member.sort_key() > key]
        return candidates[0] if candidates else None

    def head_set(self, well: Well | str) -> "WellSet":
        """Wells at or before the given coordinate."""
        key = self._coordinate_of(well)
        return self._select(lambda member: member.sort_key() <= key)

    def tail_set(self, well: Well | str) -> "WellSet":
        """Wells at or after the given coordinate."""
        key = self._coordinate_of(well)
        return self._select(lambda member: member.sort_key() >= key)

    def sub_set(self, begin: Well | str, end: Well | str) -> "WellSet":
        """Wells between two coordinates, both ends inclusive."""
        low = self._coordinate_of(begin)
        high = self._coordinate_of(end)
        return self._select(lambda member: low <= member.sort_key() <= high)

    # ========================================================================
    # Serialization
    # ========================================================================

    def set_label(self, label: str) -> None:
        self.label = validate_label(label)

    def to_dict(self) -> dict:
        """Condensed form: ``{type, label, wells: {index: {row, column, data}}}``."""
        return {
            "type": "WellSet",
            "label": self.label,
            "wells": {
                well.index: {"row": well.row, "column": well.column, "data": list(well.data)}
                for well in self.to_list()
            },
        }

    def __str__(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

    def __repr__(self) -> str:
        return f"WellSet({self.label!r}, {self.to_index_list()!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WellSet):
            return NotImplemented
        return self.label == other.label and self.to_list() == other.to_list()

    def __len__(self) -> int:
        return self.wells.size()

    def __iter__(self) -> Iterator[Well]:
        return iter(self.to_list())

    def __contains__(self, well: Any) -> bool:
        return well in self.wells

    # ========================================================================
    # Helpers
    # ========================================================================

    def _select(self, predicate) -> "WellSet":
        selected = WellSet(self.label)
        for well in self.to_list():
            if predicate(well):
                selected.wells.add(well)
        return selected

    @staticmethod
    def _is_source(source: Any) -> bool:
        from microplate.plate import Plate

        return isinstance(source, (Well, WellSet, Plate)) or is_sequence(source)

    @staticmethod
    def wells_of(wells: Any) -> list[Well]:
        from microplate.plate import Plate

        if isinstance(wells, Well):
            return [wells]
        if isinstance(wells, WellSet):
            return wells.to_list()
        if isinstance(wells, Plate):
            return wells.to_list()
        if is_sequence(wells):
            for well in wells:
                if not isinstance(well, Well):
                    raise InvalidTypeError(f"Input must be a well object: {well!r}")
            return list(wells)
        raise InvalidTypeError(f"Input must be a well, list of wells, well set or plate: {wells!r}")

    @staticmethod
    def indices_of(wells: Any, delimiter: str | None = None) -> list[str]:
        from microplate.plate import Plate

        if isinstance(wells, str):
            parts = wells.split(delimiter) if delimiter is not None else [wells]
            return [normalize_index(part.strip()) for part in parts]
        if isinstance(wells, Well):
            return [wells.index]
        if isinstance(wells, (WellSet, Plate)):
            return wells.to_index_list()
        if is_sequence(wells):
            keys = []
            for item in wells:
                if isinstance(item, Well):
                    keys.append(item.index)
                elif isinstance(item, str):
                    keys.append(normalize_index(item))
                else:
                    raise InvalidTypeError(f"Input must be a string or well object: {item!r}")
            return keys
        raise InvalidTypeError(f"Input must be a well, index string or collection of them: {wells!r}")

    @staticmethod
    def _coordinate_of(well: Well | str) -> tuple[int, int]:
        if isinstance(well, Well):
            return well.sort_key()
        if isinstance(well, str):
            return Well(well).sort_key()
        raise InvalidTypeError(f"Input must be a string or well object: {well!r}")
