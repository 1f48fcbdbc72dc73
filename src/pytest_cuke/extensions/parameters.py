"""Declarative parameter type definitions.

A parameter type names a placeholder token usable in step patterns (for
example `{int}`) and the ordered regular expression fragments it stands
for. Parameter types are registered into the step registry before any
step pattern using them.
"""

from pydantic import Field, field_validator

from pytest_cuke.models import SchemaModel


class ParameterType(SchemaModel):
    """Declarative parameter type definition.

    Registration is additive: declaring the same token twice appends the
    fragments of the second declaration to the first.
    """

    token: str = Field(
        min_length=1,
        title='Placeholder token',
        description=(
            'Literal token replaced in step patterns, including its braces, '
            'for example `{color}`.'
        ),
        examples=[
            '{int}',
            '{color}',
        ],
    )

    fragments: tuple[str, ...] = Field(
        min_length=1,
        title='Regular expression fragments',
        description=(
            'Ordered fragments substituted for the token. Every fragment '
            'should hold exactly one capture group for the value.'
        ),
    )

    description: str | None = Field(
        default=None,
        title='Description',
        description='Detailed human-readable description of the parameter type.',
    )

    @field_validator('fragments', mode='before')
    @classmethod
    def wrap_fragment(cls, value: object) -> object:
        """Accept a single fragment given as a string."""
        if isinstance(value, str):
            return (value,)

        return value
