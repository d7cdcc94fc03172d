"""
Element-wise arithmetic for Microplate.

This module applies a scalar operator to well data across the containment
hierarchy:
- Binary: well data combined with another entity of the same kind, a list of
  numbers or a constant
- Unary: every value of a well transformed on its own (increment, shifts)

Two modes decide what happens to values and wells present on one side only:
- Standard: missing values count as zero and unmatched wells, plates and
  values are carried into the result unchanged
- Strict (``strict=True``): only values, wells and plates present on both
  sides are combined; everything else is dropped

Like the statistics dispatcher, an operator is any object exposing
``calculate``; all hierarchy walking lives here. Operands and ranges are
checked before any value is computed.
"""

import logging
from typing import Any, Callable, Protocol

from microplate.config import (
    ARRAY_OPERAND_LABEL,
    ERROR_NOT_INTEGER,
    ERROR_OPERAND,
    ERROR_WRONG_TYPE,
    RESULT_LABEL,
    RESULT_PAIR_LABEL,
)
from microplate.exceptions import InvalidTypeError, RangeError
from microplate.plate import Plate
from microplate.stack import Stack
from microplate.validation import is_integer, is_number, is_sequence, split_range_arguments, validate_data
from microplate.well import Well
from microplate.wellset import WellSet

logger = logging.getLogger(__name__)


class BinaryOperator(Protocol):
    def calculate(self, left: float, right: float) -> float:
        ...


class UnaryOperator(Protocol):
    def calculate(self, value: float, **params: Any) -> float:
        ...


# ============================================================================
# Operators
# ============================================================================


class Addition:
    def calculate(self, left: float, right: float) -> float:
        return left + right


class Subtraction:
    def calculate(self, left: float, right: float) -> float:
        return left - right


class Multiplication:
    def calculate(self, left: float, right: float) -> float:
        return left * right


class Division:
    """Raises ZeroDivisionError when the right value is zero."""

    def calculate(self, left: float, right: float) -> float:
        return left / right


class Increment:
    def calculate(self, value: float) -> float:
        return value + 1


class Decrement:
    def calculate(self, value: float) -> float:
        return value - 1


def _check_shift(value: Any, bits: Any) -> None:
    if not is_integer(value):
        raise InvalidTypeError(ERROR_NOT_INTEGER.format(name="Shifted value", value=value))
    if not is_integer(bits):
        raise InvalidTypeError(ERROR_NOT_INTEGER.format(name="Bit count", value=bits))
    if bits < 0:
        raise RangeError(f"Bit count must be >= 0, got {bits}")


class LeftShift:
    """Shift integer values left by ``bits``."""

    def calculate(self, value: int, bits: int) -> int:
        _check_shift(value, bits)
        return value << bits


class RightShift:
    """Arithmetic (sign-preserving) right shift of integer values by ``bits``."""

    def calculate(self, value: int, bits: int) -> int:
        _check_shift(value, bits)
        return value >> bits


# ============================================================================
# Helpers
# ============================================================================


def _check_target(value: Any, item_type: type) -> None:
    if not isinstance(value, item_type):
        raise InvalidTypeError(ERROR_WRONG_TYPE.format(value=value, expected=item_type.__name__))


def _operand(value: Any, item_type: type) -> Any:
    """An entity of the given type, a constant, or a validated copy of a list of numbers."""
    if isinstance(value, item_type) or is_number(value):
        return value
    if is_sequence(value):
        return validate_data(value)
    raise InvalidTypeError(ERROR_OPERAND.format(value=value, expected=item_type.__name__))


def _in_range(data: list, begin: int, end: int | None, strict: bool, function: Callable[[Any], Any]) -> list:
    """
    Apply function to ``data[begin:end]``.

    Strict mode returns only the transformed slice; standard mode keeps the
    values outside the range unchanged.
    """
    if strict:
        return [function(value) for value in data[begin:end]]
    start = min(begin, len(data))
    stop = len(data) if end is None else max(start, min(end, len(data)))
    return data[:start] + [function(value) for value in data[start:stop]] + data[stop:]


def _wells_of(entity: WellSet | Plate) -> WellSet:
    return entity.wells if isinstance(entity, Plate) else entity


def _operand_label(operand: Any) -> str:
    return str(operand) if is_number(operand) else ARRAY_OPERAND_LABEL


# ============================================================================
# Binary Operations
# ============================================================================


class BinaryOperation:
    """
    Combine well data with a second operand.

    Every entry point takes ``(left, right, *bounds, strict=False)``. ``right``
    is an entity of the same kind as ``left``, a list of numbers or a
    constant. With two integer bounds only ``[begin, end)`` of each data
    vector takes part.

    Examples:
        >>> BinaryOperation(Addition()).wells(Well("A1", [1, 2, 3]), Well("B1", [10, 20]))
        Well('A1', [11, 22, 3])
        >>> BinaryOperation(Addition()).wells(Well("A1", [1, 2, 3]), Well("B1", [10, 20]), strict=True)
        Well('A1', [11, 22])
    """

    def __init__(self, operator: BinaryOperator):
        if not callable(getattr(operator, "calculate", None)):
            raise InvalidTypeError(ERROR_WRONG_TYPE.format(value=operator, expected="object with calculate()"))
        self.operator = operator

    def _combine(self, left: list, right: list, begin: int, end: int | None, strict: bool) -> list:
        left, right = list(left[begin:end]), list(right[begin:end])
        if strict:
            size = min(len(left), len(right))
        else:
            size = max(len(left), len(right))
            left += [0] * (size - len(left))
            right += [0] * (size - len(right))
        return [self.operator.calculate(a, b) for a, b in zip(left[:size], right[:size])]

    def _well(self, well: Well, operand: Any, begin: int, end: int | None, strict: bool) -> Well:
        if isinstance(operand, Well):
            data = self._combine(well.data, operand.data, begin, end, strict)
        elif is_number(operand):
            data = _in_range(well.data, begin, end, strict, lambda value: self.operator.calculate(value, operand))
        else:
            data = self._combine(well.data, operand, begin, end, strict)
        return Well(well.index, data)

    def _well_set(self, left: WellSet | Plate, right: Any, begin: int, end: int | None, strict: bool) -> WellSet:
        left_wells = _wells_of(left)

        if not isinstance(right, (WellSet, Plate)):
            result = WellSet(RESULT_PAIR_LABEL.format(left=left.label, right=_operand_label(right)))
            result.add([self._well(well, right, begin, end, strict) for well in left_wells])
            return result

        right_wells = _wells_of(right)
        result = WellSet(RESULT_PAIR_LABEL.format(left=left.label, right=right.label))
        for well in left_wells:
            match = right_wells.get(well.index)
            if match is not None:
                result.add(self._well(well, match, begin, end, strict))
            elif not strict:
                result.add(well)
        if not strict:
            result.add([well for well in right_wells if not left_wells.contains(well.index)])
        return result

    def wells(self, left: Well, right: Any, *bounds: int, strict: bool = False) -> Well:
        """
        Combine one well with another well, a list of numbers or a constant.

        Returns:
            A new Well at the left well's coordinate

        Raises:
            InvalidTypeError: If left is not a Well or right is not a valid operand
            ArgumentError: If bounds is not empty or a pair of integers
            RangeError: If bounds are negative or reversed
        """
        begin, end = split_range_arguments("wells", bounds)
        _check_target(left, Well)
        return self._well(left, _operand(right, Well), begin, end, strict)

    def sets(self, left: WellSet, right: Any, *bounds: int, strict: bool = False) -> WellSet:
        """Combine matching wells of two sets, or every well of a set with a list or constant."""
        begin, end = split_range_arguments("sets", bounds)
        _check_target(left, WellSet)
        return self._well_set(left, _operand(right, WellSet), begin, end, strict)

    def plates(self, left: Plate, right: Any, *bounds: int, strict: bool = False) -> WellSet:
        """Combine matching wells of two plates. The result is a WellSet, since it has no bounds of its own."""
        begin, end = split_range_arguments("plates", bounds)
        _check_target(left, Plate)
        return self._well_set(left, _operand(right, Plate), begin, end, strict)

    def stacks(self, left: Stack, right: Any, *bounds: int, strict: bool = False) -> list[WellSet]:
        """
        Combine two stacks plate by plate, matching plates by label.

        In standard mode a plate found in only one stack is returned as a
        WellSet carrying the plate's label; in strict mode it is dropped. With
        a list or constant operand every plate of ``left`` is combined with it.

        Returns:
            One WellSet per resulting plate, in plate order
        """
        begin, end = split_range_arguments("stacks", bounds)
        _check_target(left, Stack)
        right = _operand(right, Stack)
        left_plates = left.to_list()

        if not isinstance(right, Stack):
            return [self._well_set(plate, right, begin, end, strict) for plate in left_plates]

        right_plates: dict[str, Plate] = {}
        for plate in right.to_list():
            right_plates.setdefault(plate.label, plate)
        left_labels = {plate.label for plate in left_plates}

        results = []
        for plate in left_plates:
            match = right_plates.get(plate.label)
            if match is not None:
                results.append(self._well_set(plate, match, begin, end, strict))
            elif not strict:
                results.append(WellSet(plate, plate.label))
        if not strict:
            results.extend(
                WellSet(plate, plate.label) for label, plate in right_plates.items() if label not in left_labels
            )
        logger.debug("stacks: %r with %r gave %d plate result(s)", left.label, right.label, len(results))
        return results


# ============================================================================
# Unary Operations
# ============================================================================


class UnaryOperation:
    """
    Transform every value of a well on its own.

    Every entry point takes ``(target, *bounds, strict=False, **params)``;
    keyword parameters are passed to ``calculate`` (``bits=2`` for shifts).
    With bounds, standard mode transforms ``[begin, end)`` and keeps the other
    values; strict mode returns only the transformed range.

    Examples:
        >>> UnaryOperation(LeftShift()).wells(Well("A1", [1, 2, 3, 4]), bits=2)
        Well('A1', [4, 8, 12, 16])
    """

    def __init__(self, operator: UnaryOperator):
        if not callable(getattr(operator, "calculate", None)):
            raise InvalidTypeError(ERROR_WRONG_TYPE.format(value=operator, expected="object with calculate()"))
        self.operator = operator

    def _well(self, well: Well, begin: int, end: int | None, strict: bool, params: dict) -> Well:
        data = _in_range(well.data, begin, end, strict, lambda value: self.operator.calculate(value, **params))
        return Well(well.index, data)

    def _well_set(self, source: WellSet | Plate, begin: int, end: int | None, strict: bool, params: dict) -> WellSet:
        result = WellSet(RESULT_LABEL.format(label=source.label))
        result.add([self._well(well, begin, end, strict, params) for well in _wells_of(source)])
        return result

    def wells(self, well: Well, *bounds: int, strict: bool = False, **params: Any) -> Well:
        begin, end = split_range_arguments("wells", bounds)
        _check_target(well, Well)
        return self._well(well, begin, end, strict, params)

    def sets(self, well_set: WellSet, *bounds: int, strict: bool = False, **params: Any) -> WellSet:
        begin, end = split_range_arguments("sets", bounds)
        _check_target(well_set, WellSet)
        return self._well_set(well_set, begin, end, strict, params)

    def plates(self, plate: Plate, *bounds: int, strict: bool = False, **params: Any) -> WellSet:
        begin, end = split_range_arguments("plates", bounds)
        _check_target(plate, Plate)
        return self._well_set(plate, begin, end, strict, params)

    def stacks(self, stack: Stack, *bounds: int, strict: bool = False, **params: Any) -> list[WellSet]:
        """One result WellSet per plate, in plate order."""
        begin, end = split_range_arguments("stacks", bounds)
        _check_target(stack, Stack)
        return [self._well_set(plate, begin, end, strict, params) for plate in stack.to_list()]
