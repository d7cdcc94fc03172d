"""
Error taxonomy for Microplate.

Every error is raised synchronously at the point of detection and derives
from both ``MicroplateError`` and the closest built-in exception, so callers
may catch either.
"""


class MicroplateError(Exception):
    """Base class for all errors raised by this package."""
    pass


class ArgumentError(MicroplateError, TypeError):
    """Raised when a constructor or call receives an unsupported argument shape."""
    pass


class InvalidTypeError(MicroplateError, TypeError):
    """Raised when a value has the wrong runtime type for a typed field or container."""
    pass


class FormatError(MicroplateError, ValueError):
    """Raised for malformed well indices and malformed serialized documents."""
    pass


class RangeError(MicroplateError, ValueError):
    """Raised for out-of-range numeric arguments (begin > end, column < 1, ...)."""
    pass


class BoundsError(MicroplateError, IndexError):
    """Raised when a coordinate or plate falls outside a plate's or stack's bounds."""
    pass
