"""Name primitive types and validation rules.

This module defines base name patterns and strongly-typed aliases used by
the engine to validate tags, outline placeholders, step library names, and
library import paths.

The rules defined here form part of the public contract and are relied upon
by the document models, the suite runner, and the library loader.
"""

from re import ASCII
from re import compile as regexp
from typing import Annotated

from pydantic import Field

#: Base pattern for library identifiers.
#: Identifiers must start with a letter and may contain letters, digits, or underscores
_NAME_PATTERN = r'[a-zA-Z][\w]*'

#: Base pattern for tags: `@` followed by any non-whitespace characters.
_TAG_PATTERN = r'@\S+'

#: Compiled pattern for tags.
TAG_PATTERN = regexp(rf'^{_TAG_PATTERN}$')

#: Compiled pattern for outline placeholders (`<name>`).
PLACEHOLDER_PATTERN = regexp(r'<(?P<name>[^<>]+)>')

#: Compiled pattern for library import paths (`package.module:attribute`).
IMPORT_PATH_PATTERN = regexp(
    rf'^(?P<module>{_NAME_PATTERN}(\.{_NAME_PATTERN})*):(?P<attribute>{_NAME_PATTERN})$',
    flags=ASCII,
)


Tag = Annotated[
    str, Field(
        pattern=rf'^{_TAG_PATTERN}$',
        title='Tag',
        description=(
            'Opaque token attached to features, rules, scenarios, and example '
            'tables. Tags must start with `@` and are matched by exact string '
            'equality, including the prefix.'
        ),
        examples=[
            '@slow',
            '@smoke',
        ],
    ),
]

Variable = Annotated[
    str, Field(
        pattern=rf'^{_NAME_PATTERN}$',
        title='Library identifier',
        description=(
            'Name of a step library. Used for identification, diagnostics, '
            'and conflict detection. Identifiers must start with a letter '
            'and may contain letters, digits, or underscores. Names are '
            'restricted to ASCII characters.'
        ),
        examples=[
            'cucumbers',
            'http_api',
        ],
    ),
]
