"""Core type definitions for step arguments.

This module defines the closed set of argument kinds a step function may
declare for values captured from step text, and the converters turning
captured text into those kinds.

It also provides the scalar and container classifications used to sanitize
runtime values before they are rendered in error messages.
"""

from collections.abc import Callable
from datetime import date, datetime, timedelta
from struct import pack, unpack
from typing import Any, NewType

#: Single-precision floating point argument kind.
#: Captured text is parsed and rounded to the nearest 32-bit float.
Float32 = NewType('Float32', float)

#: A value captured from step text. Groups that did not participate
#: in a match are captured as `None`.
type Captured = str | None

#: A converter receives captured text and returns the typed argument.
type Converter = Callable[[str], Any]

MAPPINGS = (dict,)
SCALARS = (date, datetime, timedelta, str, bytes, int, float, bool)
SEQUENCES = (list, tuple, set, frozenset)


def to_str(value: str) -> str:
    """Pass captured text through unchanged."""
    return value


def to_int(value: str) -> int:
    """Parse captured text as an integer.

    Raises:
        ValueError: If the text is not an integer literal.
    """
    return int(value)


def to_float(value: str) -> float:
    """Parse captured text as a double-precision float.

    Raises:
        ValueError: If the text is not a float literal.
    """
    return float(value)


def to_float32(value: str) -> float:
    """Parse captured text as a single-precision float.

    Raises:
        ValueError: If the text is not a float literal or does not fit
            into 32 bits.
    """
    try:
        return unpack('f', pack('f', float(value)))[0]  # type: ignore[no-any-return]
    except OverflowError as base:
        raise ValueError(f'{value!r} is out of single precision range') from base


def to_bytes(value: str) -> bytes:
    """Encode captured text as UTF-8 bytes."""
    return value.encode('utf-8')


def to_raw(value: str) -> str:
    """Pass captured text through for unsupported argument kinds."""
    return value


#: Supported argument kinds and their converters.
#: Any other annotation (or no annotation) receives raw captured text.
CONVERTERS: dict[Any, tuple[str, Converter]] = {
    str: ('str', to_str),
    int: ('int', to_int),
    Float32: ('float32', to_float32),
    float: ('float64', to_float),
    bytes: ('bytes', to_bytes),
}

RAW_KIND: tuple[str, Converter] = ('raw', to_raw)


def resolve_converter(annotation: Any) -> tuple[str, Converter]:  # noqa: ANN401
    """Resolve the kind name and converter for a parameter annotation.

    Args:
        annotation: Annotation of a step function parameter.

    Returns:
        A tuple of the kind name and its converter. Unsupported
        annotations resolve to the raw passthrough kind.
    """
    try:
        return CONVERTERS.get(annotation, RAW_KIND)
    except TypeError:
        return RAW_KIND
