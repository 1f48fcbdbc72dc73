"""Built-in parameter types for step patterns.

This module defines the placeholder tokens available in every registry
unless builtins are disabled:

- `{int}`: a signed integer,
- `{float}`: a signed decimal number,
- `{word}`: a single word of letters, digits, or underscores,
- `{text}`: a double- or single-quoted phrase.

Every fragment holds exactly one capture group for the value.
"""

from pytest_cuke.extensions import ParameterType

integer = ParameterType(
    token='{int}',
    fragments=(r'([-+]?\d+)',),
    description='Signed integer, for example `42` or `-7`.',
)

decimal = ParameterType(
    token='{float}',
    fragments=(r'([-+]?\d*\.?\d+)',),
    description='Signed decimal number, for example `3.14`, `-.5`, or `10`.',
)

word = ParameterType(
    token='{word}',
    fragments=(r'(\w+)',),
    description='Single word without whitespace, for example `banana`.',
)

text = ParameterType(
    token='{text}',
    fragments=(
        r'"([\w\-\s]+)"',
        r"'([\w\-\s]+)'",
    ),
    description=(
        'Quoted phrase of words, spaces, and dashes. The quotes are not '
        'part of the captured value.'
    ),
)

BUILTIN_PARAMETER_TYPES = (
    integer,
    decimal,
    word,
    text,
)
