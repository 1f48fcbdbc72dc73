"""Declarative step definitions provided by step libraries."""

from re import Pattern

from pydantic import Field

from pytest_cuke.models import SchemaModel
from pytest_cuke.schema.options import StepRunner  # noqa: TC001


class StepDeclaration(SchemaModel):
    """Declarative step definition.

    Textual patterns are expanded through the registered parameter types
    when the declaration is added to a registry. Compiled patterns are
    used as they are.
    """

    pattern: str | Pattern[str] = Field(
        title='Step pattern',
        description=(
            'Regular expression searched for in step text. May hold '
            'parameter type tokens such as `{int}`.'
        ),
        examples=[
            r'I have {int} cucumbers',
            r'^the total is (\d+)$',
        ],
    )

    runner: StepRunner = Field(
        title='Step function',
        description=(
            'Callable implementing the step. Receives the execution context '
            'followed by one converted argument per captured group.'
        ),
    )

    description: str | None = Field(
        default=None,
        title='Description',
        description='Detailed human-readable description of the step.',
    )

    @property
    def source(self) -> str:
        """Return the pattern text as declared."""
        if isinstance(self.pattern, str):
            return self.pattern

        return self.pattern.pattern
