"""Scenario outline expansion.

An outline is a scenario whose steps hold `<name>` placeholders and whose
example tables provide the substitution values. Expansion produces one
concrete step per outline step per example row, in row-major order
(table, then row, then step), each already bound to a step definition.
"""

from re import escape
from re import compile as regexp
from typing import TYPE_CHECKING

from pydantic import Field

from pytest_cuke.core.definitions import StepDefinition  # noqa: TC001
from pytest_cuke.errors import StepResolutionError
from pytest_cuke.models import SchemaModel
from pytest_cuke.names import PLACEHOLDER_PATTERN
from pytest_cuke.schema.documents import Step  # noqa: TC001

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

if TYPE_CHECKING:
    from pytest_cuke.core.matcher import MatcherMixin
    from pytest_cuke.schema.documents import DataTable, DocString, Examples

#: Fragments substituted for placeholders in synthesized patterns.
#: The first fragment fully matching the example value is used.
VALUE_FRAGMENTS = (
    (regexp(r'[-+]?\d+'), r'([-+]?\d+)'),
    (regexp(r'[-+]?\d*\.\d+'), r'([-+]?\d*\.\d+)'),
)

ANY_VALUE_FRAGMENT = r'(.*)'


class PlannedStep(SchemaModel):
    """A concrete step bound to the definition executing it."""

    step: Step = Field(
        title='Step',
        description='Concrete step with placeholders substituted.',
    )
    definition: StepDefinition = Field(
        title='Step definition',
        description='Definition resolved for the step at expansion time.',
    )


def fragment_for(value: str) -> str:
    """Choose the capture fragment for an example value.

    Args:
        value: Example cell value.

    Returns:
        An integer fragment for integer values, a decimal fragment for
        decimal values, or a catch-all fragment otherwise.
    """
    for pattern, fragment in VALUE_FRAGMENTS:
        if pattern.fullmatch(value):
            return fragment

    return ANY_VALUE_FRAGMENT


def substitute(text: str, values: 'Mapping[str, str]') -> str:
    """Replace known placeholders in a text with example values.

    Unknown placeholders are kept as they are.
    """
    return PLACEHOLDER_PATTERN.sub(
        lambda match: values.get(match['name'], match[0]),
        text,
    )


def synthesize(text: str, values: 'Mapping[str, str]') -> str:
    """Build a pattern matching the outline text with example values.

    Literal text is escaped; every known placeholder becomes a capture
    group chosen from its value.

    Args:
        text: Outline step text holding placeholders.
        values: Example values keyed by placeholder name.

    Returns:
        Regular expression text.
    """
    parts = []
    position = 0

    for match in PLACEHOLDER_PATTERN.finditer(text):
        parts.append(escape(text[position:match.start()]))
        if (value := values.get(match['name'])) is not None:
            parts.append(fragment_for(value))
        else:
            parts.append(escape(match[0]))
        position = match.end()

    parts.append(escape(text[position:]))

    return ''.join(parts)


def _substitute_doc_string(doc_string: 'DocString | None',
                           values: 'Mapping[str, str]') -> 'DocString | None':
    if doc_string is None:
        return None

    return doc_string.model_copy(update={
        'content': substitute(doc_string.content, values),
    })


def _substitute_data_table(data_table: 'DataTable | None',
                           values: 'Mapping[str, str]') -> 'DataTable | None':
    if data_table is None:
        return None

    rows = tuple(
        row.model_copy(update={
            'cells': tuple(
                cell.model_copy(update={'value': substitute(cell.value, values)})
                for cell in row.cells
            ),
        })
        for row in data_table.rows
    )

    return data_table.model_copy(update={'rows': rows})


class OutlineExpander:
    """Expander of scenario outlines into bound concrete steps.

    The expander only reads the registry it resolves against; definitions
    bound to synthesized patterns are never registered.
    """

    def __init__(self, matcher: 'MatcherMixin') -> None:
        """Initialize an expander.

        Args:
            matcher: Registry used to resolve concrete steps.
        """
        self.matcher = matcher

    def bind(self, step: Step, values: 'Mapping[str, str]', *,
             filename: str | None = None) -> PlannedStep:
        """Substitute example values into a step and resolve it.

        The definition is resolved against the concrete text, then against
        the literal outline text. It is rebound to the synthesized pattern
        only if the pattern fits the step function arity and matches the
        concrete text more times than the resolved definition.

        Args:
            step: Outline step holding placeholders.
            values: Example values keyed by placeholder name.
            filename: Feature file name, used in error messages.

        Returns:
            The concrete step bound to its definition.

        Raises:
            StepResolutionError: If no definition matches the step.
        """
        concrete = step.model_copy(update={
            'text': substitute(step.text, values),
            'doc_string': _substitute_doc_string(step.doc_string, values),
            'data_table': _substitute_data_table(step.data_table, values),
        })

        definition = self.matcher.find(concrete.text) or self.matcher.find(step.text)
        if definition is None:
            raise StepResolutionError.from_step(
                f'Cannot find step definition for step: {concrete.text}',
                concrete,
                filename=filename,
            )

        rebound = definition.rebind(synthesize(step.text, values))
        if rebound.count(concrete.text) <= definition.count(concrete.text):
            rebound = definition

        return PlannedStep(step=concrete, definition=rebound)

    def rows(self, examples: 'Iterable[Examples]') -> 'Iterable[dict[str, str]]':
        """Yield example values of every body row, keyed by placeholder name.

        Tables without a header row are ignored.
        """
        for table in examples:
            if table.table_header is None:
                continue

            names = table.table_header.values
            for row in table.table_body:
                yield dict(zip(names, row.values, strict=False))

    def expand(self, steps: 'Iterable[Step]', examples: 'Iterable[Examples]', *,
               filename: str | None = None) -> list[PlannedStep]:
        """Expand outline steps over every example row.

        Args:
            steps: Outline steps holding placeholders.
            examples: Example tables of the outline.
            filename: Feature file name, used in error messages.

        Returns:
            Bound concrete steps in row-major order.

        Raises:
            StepResolutionError: If any generated step has no definition.
        """
        steps = tuple(steps)

        return [
            self.bind(step, values, filename=filename)
            for values in self.rows(examples)
            for step in steps
        ]

