"""
Plate stacks for Microplate.

A stack is a labelled set of plates that all share the stack's exact rows and
columns. Plates are keyed by their canonical serialized form and copied on the
way in; treat plates obtained from a stack as read-only.
"""

import json
import logging
from typing import Any, Iterator

from microplate.collection import UniqueTypedCollection
from microplate.config import DEFAULT_STACK_LABEL, ERROR_PLATE_DIMENSIONS
from microplate.exceptions import BoundsError, InvalidTypeError
from microplate.plate import Plate, PlateType, descriptor, to_plate_type
from microplate.validation import (
    constructor_error,
    is_integer,
    is_sequence,
    validate_label,
    validate_positive_integer,
)

logger = logging.getLogger(__name__)

STACK_CONSTRUCTOR_SHAPES = [
    "Stack - stack to copy",
    "PlateType - standard plate type",
    "PlateType - standard plate type, str - the stack label",
    "Plate - initial plate",
    "Plate - initial plate, str - the stack label",
    "list[Plate] - initial plates",
    "list[Plate] - initial plates, str - the stack label",
    "int - rows, int - columns",
    "int - rows, int - columns, str - the stack label",
]


class Stack:
    """A labelled set of same-sized plates."""

    def __init__(self, *args: Any):
        self.label: str = DEFAULT_STACK_LABEL
        self.plates: UniqueTypedCollection[Plate] = UniqueTypedCollection(Plate)

        if len(args) in (1, 2) and isinstance(args[0], Stack):
            source = args[0]
            self._set_bounds(source.rows, source.columns)
            self.label = source.label
            self.add(source)
        elif len(args) in (1, 2) and isinstance(args[0], Plate):
            self._set_bounds(args[0].rows, args[0].columns)
            self.add(args[0])
        elif len(args) in (1, 2) and is_sequence(args[0]) and len(args[0]) > 0 and isinstance(args[0][0], Plate):
            self._set_bounds(args[0][0].rows, args[0][0].columns)
            self.add(args[0])
        elif len(args) in (2, 3) and is_integer(args[0]) and is_integer(args[1]):
            self._set_bounds(args[0], args[1])
            args = args[1:]
        elif len(args) in (1, 2) and is_integer(args[0]):
            rows, columns = to_plate_type(args[0]).dimensions
            self._set_bounds(rows, columns)
        else:
            raise constructor_error("Stack", STACK_CONSTRUCTOR_SHAPES)

        if len(args) == 2:
            if not isinstance(args[1], str):
                raise constructor_error("Stack", STACK_CONSTRUCTOR_SHAPES)
            self.label = args[1]

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
    # Plates
    # ========================================================================

    def add(self, plates: Any) -> bool:
        """
        Add copies of one or more plates.

        Args:
            plates: A Plate, a list of plates or a Stack

        Returns:
            True if at least one new plate was added

        Raises:
            BoundsError: If any plate's rows/columns differ from the stack's (nothing is added)
            InvalidTypeError: If any item is not a Plate (nothing is added)
        """
        incoming = self._check_dimensions(self._plates_of(plates))
        changed = self.plates.add_all([Plate(plate) for plate in incoming])
        logger.debug("Stack %r: %d plate(s) offered, changed=%s", self.label, len(incoming), changed)
        return changed

    def remove(self, plates: Any) -> bool:
        """Remove the listed plates. Raises BoundsError for a plate of another size."""
        return self.plates.remove_all(self._check_dimensions(self._plates_of(plates)))

    def retain(self, plates: Any) -> bool:
        return self.plates.retain_all(self._check_dimensions(self._plates_of(plates)))

    def contains(self, plates: Any) -> bool:
        return self.plates.contains_all(self._check_dimensions(self._plates_of(plates)))

    def get(self, plates: Any) -> "Plate | list[Plate] | None":
        """A copy of the stored plate (or None) for a single plate; sorted copies of the found plates otherwise."""
        incoming = self._check_dimensions(self._plates_of(plates))
        if isinstance(plates, Plate):
            stored = self.plates.get(plates)
            return None if stored is None else Plate(stored)
        found = [self.plates.get(plate) for plate in incoming]
        return [Plate(plate) for plate in Plate.sort(plate for plate in found if plate is not None)]

    def remove_names(self, labels: Any) -> bool:
        """Remove every plate whose label is listed."""
        labels = self._labels_of(labels)
        return self.plates.remove_all([plate for plate in self.plates if plate.label in labels])

    def retain_names(self, labels: Any) -> bool:
        """Keep only plates whose label is listed. Returns True if any were kept."""
        labels = self._labels_of(labels)
        return self.plates.retain_all([plate for plate in self.plates if plate.label in labels])

    def contains_names(self, labels: Any) -> bool:
        """Check that every listed label names at least one plate."""
        present = {plate.label for plate in self.plates}
        return all(label in present for label in self._labels_of(labels))

    def get_names(self, labels: Any) -> list[Plate]:
        """Stored plates whose label is listed, sorted."""
        labels = self._labels_of(labels)
        return [Plate(plate) for plate in Plate.sort(plate for plate in self.plates if plate.label in labels)]

    def clear(self) -> None:
        self.plates.clear()

    def size(self) -> int:
        return self.plates.size()

    def is_empty(self) -> bool:
        return self.plates.is_empty()

    def to_list(self) -> list[Plate]:
        """Copies of the plates ordered by ``Plate.compare_to``."""
        return [Plate(plate) for plate in self._sorted()]

    def _sorted(self) -> list[Plate]:
        return Plate.sort(self.plates)

    def _check_dimensions(self, plates: list[Plate]) -> list[Plate]:
        for plate in plates:
            if plate.rows != self.rows or plate.columns != self.columns:
                raise BoundsError(
                    ERROR_PLATE_DIMENSIONS.format(
                        label=plate.label,
                        rows=plate.rows,
                        columns=plate.columns,
                        expected_rows=self.rows,
                        expected_columns=self.columns,
                    )
                )
        return plates

    @staticmethod
    def _plates_of(plates: Any) -> list[Plate]:
        if isinstance(plates, Plate):
            return [plates]
        if isinstance(plates, Stack):
            return plates._sorted()
        if is_sequence(plates):
            for plate in plates:
                if not isinstance(plate, Plate):
                    raise InvalidTypeError(f"Input must be a plate: {plate!r}")
            return list(plates)
        raise InvalidTypeError(f"Input must be a plate, list of plates or stack: {plates!r}")

    @staticmethod
    def _labels_of(labels: Any) -> list[str]:
        if isinstance(labels, str):
            return [labels]
        if is_sequence(labels) and all(isinstance(label, str) for label in labels):
            return list(labels)
        raise InvalidTypeError(f"Input must be a plate label or list of labels: {labels!r}")

    # ========================================================================
    # Ordering
    # ========================================================================

    def compare_to(self, other: "Stack") -> int:
        """Compare by label, rows, columns, plate count, then plate sequence."""
        if not isinstance(other, Stack):
            raise InvalidTypeError(f"Object is not a stack: {other!r}")

        mine = (self.label, self.rows, self.columns, self.size())
        theirs = (other.label, other.rows, other.columns, other.size())
        if mine != theirs:
            return -1 if mine < theirs else 1

        for first, second in zip(self._sorted(), other._sorted()):
            order = first.compare_to(second)
            if order != 0:
                return order
        return 0

    # ========================================================================
    # Serialization
    # ========================================================================

    def to_dict(self) -> dict:
        """Condensed form: ``{type, label, rows, columns, descriptor, plates: {label: record}}``."""
        return {
            "type": "Stack",
            "label": self.label,
            "rows": self.rows,
            "columns": self.columns,
            "descriptor": self.descriptor,
            "plates": {plate.label: plate.to_record() for plate in self._sorted()},
        }

    def __str__(self) -> str:
        # Built from every plate so same-label plates stay distinct.
        return json.dumps(
            {
                "label": self.label,
                "rows": self.rows,
                "columns": self.columns,
                "plates": [plate.to_dict() for plate in self._sorted()],
            },
            sort_keys=True,
            separators=(",", ":"),
        )

    def __repr__(self) -> str:
        return f"Stack({self.rows}, {self.columns}, {self.label!r}, plates={self.size()})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Stack):
            return NotImplemented
        return str(self) == str(other)

    def __len__(self) -> int:
        return self.plates.size()

    def __iter__(self) -> Iterator[Plate]:
        return iter(self.to_list())
