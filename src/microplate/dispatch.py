"""
Statistics dispatch engine for Microplate.

This module applies any single-array statistic across the containment
hierarchy:
- Per well: one result per well, tagged with the well index
- Aggregated: one result over the concatenated data of every well reached
- Optional ``(begin, end)`` slicing of each well's data before either mode
- Optional ``weights`` multiplied element-wise into each sliced data vector

Architecture note: a statistic is any object exposing
``calculate(values, **params)``. The dispatcher never subclasses or wraps it;
all hierarchy walking lives here. Every input is type-checked and every slice
is taken before the statistic runs, so a bad argument never yields a partial
result tree.
"""

import logging
from typing import Any, Protocol

from microplate.config import (
    PLATE_TAG,
    RESULT_TAG,
    SET_TAG,
    STACK_TAG,
    WELL_TAG,
    WELLS_TAG,
    ERROR_WEIGHTS_LENGTH,
    ERROR_WRONG_TYPE,
)
from microplate.exceptions import InvalidTypeError, RangeError
from microplate.plate import Plate
from microplate.stack import Stack
from microplate.validation import is_sequence, split_range_arguments, validate_data
from microplate.well import Well
from microplate.wellset import WellSet

logger = logging.getLogger(__name__)


class Statistic(Protocol):
    """Anything with a ``calculate`` method over a flat list of numbers."""

    def calculate(self, values: list[float], **params: Any) -> Any:
        ...


# ============================================================================
# Helpers
# ============================================================================


def _targets(target: Any, item_type: type, name: str) -> list:
    """Normalise a single entity or a list of entities to a list, type-checking every item."""
    if isinstance(target, item_type):
        return [target]
    if is_sequence(target):
        for item in target:
            if not isinstance(item, item_type):
                raise InvalidTypeError(ERROR_WRONG_TYPE.format(value=item, expected=name))
        return list(target)
    raise InvalidTypeError(ERROR_WRONG_TYPE.format(value=target, expected=f"{name} or list of {name}"))


def _weights(weights: Any) -> list | None:
    return None if weights is None else validate_data(weights)


def _apply_weights(index: str, data: list, weights: list) -> list:
    if len(weights) != len(data):
        raise RangeError(ERROR_WEIGHTS_LENGTH.format(index=index, weights=len(weights), length=len(data)))
    return [value * weight for value, weight in zip(data, weights)]


def _slices(wells: list[Well], begin: int, end: int | None, weights: list | None = None) -> list[tuple[str, list]]:
    """(index, data[begin:end]) for each well, in the given order, weighted when weights are given."""
    slices = []
    for well in wells:
        data = list(well.data[begin:end])
        if weights is not None:
            data = _apply_weights(well.index, data, weights)
        slices.append((well.index, data))
    return slices


def _concatenate(slices: list[tuple[str, list]]) -> list:
    values = []
    for _, data in slices:
        values.extend(data)
    return values


def _stack_wells(stack: Stack) -> list[Well]:
    wells = []
    for plate in stack.to_list():
        wells.extend(plate.to_list())
    return wells


# ============================================================================
# Dispatcher
# ============================================================================


class StatisticsDispatcher:
    """
    Fan a statistic out over wells, well sets, plates and stacks.

    Every entry point takes ``(target, *bounds, weights=None, **params)``. With
    no bounds the whole data vector of each well is used; with exactly two
    integer bounds each vector is sliced to ``[begin, end)`` first. When
    ``weights`` is given it must have the length of every sliced vector and is
    multiplied into it value by value. Keyword parameters are passed through
    to ``calculate`` (for example ``p=25`` for a percentile).

    Examples:
        >>> from microplate.descriptive import Mean
        >>> stats = StatisticsDispatcher(Mean())
        >>> stats.wells([Well("A1", [1, 2, 3])])
        [{'well': 'A1', 'result': 2.0}]
        >>> stats.wells([Well("A1", [1, 2, 3])], weights=[3, 0, 0])
        [{'well': 'A1', 'result': 1.0}]
    """

    def __init__(self, statistic: Statistic):
        if not callable(getattr(statistic, "calculate", None)):
            raise InvalidTypeError(ERROR_WRONG_TYPE.format(value=statistic, expected="object with calculate()"))
        self.statistic = statistic

    def _calculate(self, values: list, params: dict) -> Any:
        return self.statistic.calculate(values, **params)

    def _per_well(self, slices: list[tuple[str, list]], params: dict) -> list[dict]:
        return [{WELL_TAG: index, RESULT_TAG: self._calculate(data, params)} for index, data in slices]

    # ========================================================================
    # Wells
    # ========================================================================

    def wells(self, wells: Any, *bounds: int, weights: Any = None, **params: Any) -> list[dict]:
        """
        Compute the statistic for each well independently.

        Args:
            wells: A Well or a list of wells
            *bounds: Optional (begin, end) slice applied to each well's data
            weights: Optional weights applied to each sliced data vector
            **params: Extra arguments for ``calculate``

        Returns:
            ``[{"well": index, "result": value}, ...]`` in input order

        Raises:
            ArgumentError: If bounds is not empty or a pair of integers
            RangeError: If bounds are negative or reversed, or weights do not fit a slice
            InvalidTypeError: If any target is not a Well or weights are not numeric
        """
        begin, end = split_range_arguments("wells", bounds)
        slices = _slices(_targets(wells, Well, "Well"), begin, end, _weights(weights))
        logger.debug("wells: %d well(s), range=[%s, %s), weighted=%s", len(slices), begin, end, weights is not None)
        return self._per_well(slices, params)

    def wells_aggregated(self, wells: Any, *bounds: int, weights: Any = None, **params: Any) -> dict:
        """
        Compute the statistic once over the concatenated data of every well.

        Returns:
            ``{"wells": [index, ...], "result": value}``
        """
        begin, end = split_range_arguments("wells_aggregated", bounds)
        slices = _slices(_targets(wells, Well, "Well"), begin, end, _weights(weights))
        return {
            WELLS_TAG: [index for index, _ in slices],
            RESULT_TAG: self._calculate(_concatenate(slices), params),
        }

    # ========================================================================
    # Well Sets
    # ========================================================================

    def sets(self, sets: Any, *bounds: int, weights: Any = None, **params: Any) -> list[dict]:
        """Per-well results for each well set: ``[{"set": label, "result": [...]}, ...]``."""
        begin, end = split_range_arguments("sets", bounds)
        weights = _weights(weights)
        prepared = [
            (ws.label, _slices(ws.to_list(), begin, end, weights)) for ws in _targets(sets, WellSet, "WellSet")
        ]
        return [{SET_TAG: label, RESULT_TAG: self._per_well(slices, params)} for label, slices in prepared]

    def sets_aggregated(self, sets: Any, *bounds: int, weights: Any = None, **params: Any) -> list[dict]:
        """One result per well set: ``[{"set": label, "result": value}, ...]``."""
        begin, end = split_range_arguments("sets_aggregated", bounds)
        weights = _weights(weights)
        prepared = [
            (ws.label, _concatenate(_slices(ws.to_list(), begin, end, weights)))
            for ws in _targets(sets, WellSet, "WellSet")
        ]
        return [{SET_TAG: label, RESULT_TAG: self._calculate(values, params)} for label, values in prepared]

    # ========================================================================
    # Plates
    # ========================================================================

    def plates(self, plates: Any, *bounds: int, weights: Any = None, **params: Any) -> list[dict]:
        """Per-well results for each plate: ``[{"plate": label, "result": [...]}, ...]``."""
        begin, end = split_range_arguments("plates", bounds)
        weights = _weights(weights)
        prepared = [
            (plate.label, _slices(plate.to_list(), begin, end, weights))
            for plate in _targets(plates, Plate, "Plate")
        ]
        return [{PLATE_TAG: label, RESULT_TAG: self._per_well(slices, params)} for label, slices in prepared]

    def plates_aggregated(self, plates: Any, *bounds: int, weights: Any = None, **params: Any) -> list[dict]:
        """One result per plate: ``[{"plate": label, "result": value}, ...]``."""
        begin, end = split_range_arguments("plates_aggregated", bounds)
        weights = _weights(weights)
        prepared = [
            (plate.label, _concatenate(_slices(plate.to_list(), begin, end, weights)))
            for plate in _targets(plates, Plate, "Plate")
        ]
        return [{PLATE_TAG: label, RESULT_TAG: self._calculate(values, params)} for label, values in prepared]

    # ========================================================================
    # Stacks
    # ========================================================================

    def stacks(self, stacks: Any, *bounds: int, weights: Any = None, **params: Any) -> list[dict]:
        """
        Per-well results for each plate of each stack.

        Returns:
            ``[{"stack": label, "result": [{"plate": label, "result": [...]}, ...]}, ...]``
        """
        begin, end = split_range_arguments("stacks", bounds)
        weights = _weights(weights)
        prepared = [
            (
                stack.label,
                [(plate.label, _slices(plate.to_list(), begin, end, weights)) for plate in stack.to_list()],
            )
            for stack in _targets(stacks, Stack, "Stack")
        ]
        return [
            {
                STACK_TAG: label,
                RESULT_TAG: [
                    {PLATE_TAG: plate_label, RESULT_TAG: self._per_well(slices, params)}
                    for plate_label, slices in plates
                ],
            }
            for label, plates in prepared
        ]

    def stacks_aggregated(self, stacks: Any, *bounds: int, weights: Any = None, **params: Any) -> list[dict]:
        """One result per stack over every well of every plate: ``[{"stack": label, "result": value}, ...]``."""
        begin, end = split_range_arguments("stacks_aggregated", bounds)
        weights = _weights(weights)
        prepared = [
            (stack.label, _concatenate(_slices(_stack_wells(stack), begin, end, weights)))
            for stack in _targets(stacks, Stack, "Stack")
        ]
        return [{STACK_TAG: label, RESULT_TAG: self._calculate(values, params)} for label, values in prepared]


def dispatcher(statistic: Statistic) -> StatisticsDispatcher:
    """Shorthand for ``StatisticsDispatcher(statistic)``."""
    return StatisticsDispatcher(statistic)
