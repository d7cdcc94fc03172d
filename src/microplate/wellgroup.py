"""
Well groups for Microplate.

A well group is a label plus a set of well coordinates with no data. Plates
use groups to tag subsets of wells (controls, replicates, treatments).
"""

import json
from functools import cmp_to_key
from typing import Any, Iterable, Iterator

from microplate.collection import UniqueTypedCollection
from microplate.config import DEFAULT_GROUP_LABEL
from microplate.exceptions import InvalidTypeError
from microplate.indexing import compare_indices, normalize_index, sort_indices
from microplate.validation import constructor_error, is_sequence, validate_label
from microplate.well import Well
from microplate.wellset import WellSet

WELLGROUP_CONSTRUCTOR_SHAPES = [
    "no arguments",
    "str - the group label",
    "list[Well] | list[str] - initial indices",
    "WellSet - initial indices",
    "WellGroup - group to copy",
    "list[Well] | list[str] - initial indices, str - the group label",
    "WellSet - initial indices, str - the group label",
    "WellGroup - group to copy, str - the group label",
]


class WellGroup:
    """
    A labelled set of well indices.

    Member indices are stored in canonical upper-case form, so "a1" and "A1"
    name the same member.
    """

    def __init__(self, *args: Any):
        self.label: str = DEFAULT_GROUP_LABEL
        self.wells: UniqueTypedCollection[str] = UniqueTypedCollection(str)

        if len(args) == 0:
            return
        if len(args) > 2:
            raise constructor_error("WellGroup", WELLGROUP_CONSTRUCTOR_SHAPES)

        source = args[0]
        if len(args) == 1 and isinstance(source, str):
            self.label = source
            return

        if isinstance(source, WellGroup):
            self.add(source)
            self.label = source.label
        elif isinstance(source, WellSet):
            self.add(source)
            self.label = source.label
        elif is_sequence(source):
            self.add(source)
        else:
            raise constructor_error("WellGroup", WELLGROUP_CONSTRUCTOR_SHAPES)

        if len(args) == 2:
            if not isinstance(args[1], str):
                raise constructor_error("WellGroup", WELLGROUP_CONSTRUCTOR_SHAPES)
            self.label = args[1]

    # ========================================================================
    # Membership
    # ========================================================================

    def add(self, wells: Any) -> bool:
        """
        Add one or more wells to the group.

        Args:
            wells: A Well, an index string, a list of either, a WellSet or a WellGroup

        Returns:
            True if the group changed

        Raises:
            FormatError: If any index is malformed (nothing is added)
            InvalidTypeError: If any member has an unsupported type (nothing is added)
        """
        return self.wells.add_all(self._indices_of(wells))

    def remove(self, wells: Any) -> bool:
        """Remove one or more wells; accepts the same inputs as ``add``."""
        return self.wells.remove_all(self._indices_of(wells))

    def contains(self, wells: Any) -> bool:
        """Check whether every given well is a member."""
        return self.wells.contains_all(self._indices_of(wells))

    def clear(self) -> None:
        self.wells.clear()

    def set_label(self, label: str) -> None:
        self.label = validate_label(label)

    def size(self) -> int:
        return self.wells.size()

    def is_empty(self) -> bool:
        return self.wells.is_empty()

    def to_list(self) -> list[str]:
        """Member indices in row-major order."""
        return sort_indices(self.wells)

    # ========================================================================
    # Ordering
    # ========================================================================

    def compare_to(self, other: "WellGroup") -> int:
        """
        Compare two groups by label, then member count, then member sequence.

        Returns:
            -1 if this group sorts first, 1 if after, 0 if equal
        """
        if not isinstance(other, WellGroup):
            raise InvalidTypeError(f"Object is not a well group: {other!r}")

        if other.label > self.label:
            return -1
        if other.label < self.label:
            return 1

        if other.size() > self.size():
            return -1
        if other.size() < self.size():
            return 1

        for mine, theirs in zip(self.to_list(), other.to_list()):
            order = compare_indices(theirs, mine)
            if order == 1:
                return -1
            if order == -1:
                return 1
        return 0

    @staticmethod
    def sort(groups: Iterable["WellGroup"]) -> list["WellGroup"]:
        """Return groups ordered by ``compare_to``."""
        return sorted(groups, key=cmp_to_key(lambda first, second: first.compare_to(second)))

    # ========================================================================
    # Serialization
    # ========================================================================

    def to_dict(self) -> dict:
        """Condensed form: ``{type, label, wells}``."""
        return {"type": "WellGroup", "label": self.label, "wells": self.to_list()}

    def __str__(self) -> str:
        return json.dumps({"label": self.label, "wells": self.to_list()}, separators=(",", ":"))

    def __repr__(self) -> str:
        return f"WellGroup({self.to_list()!r}, {self.label!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WellGroup):
            return NotImplemented
        return self.compare_to(other) == 0

    def __len__(self) -> int:
        return self.wells.size()

    def __iter__(self) -> Iterator[str]:
        return iter(self.to_list())

    # ========================================================================
    # Helpers
    # ========================================================================

    @staticmethod
    def _indices_of(wells: Any) -> list[str]:
        if isinstance(wells, (Well, str)):
            items = [wells]
        elif isinstance(wells, WellGroup):
            items = wells.to_list()
        elif isinstance(wells, WellSet):
            items = wells.to_list()
        elif is_sequence(wells):
            items = list(wells)
        else:
            raise InvalidTypeError(f"Input must be a well, index string or collection of them: {wells!r}")

        indices = []
        for item in items:
            if isinstance(item, Well):
                indices.append(item.index)
            elif isinstance(item, str):
                indices.append(normalize_index(item))
            else:
                raise InvalidTypeError(f"Input must be a string or well object: {item!r}")
        return indices
