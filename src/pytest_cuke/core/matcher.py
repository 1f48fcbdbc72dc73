"""Step text resolution against registered definitions."""

from typing import TYPE_CHECKING

from pytest_cuke.errors import StepResolutionError

if TYPE_CHECKING:
    from pytest_cuke.core.definitions import StepDefinition
    from pytest_cuke.schema.documents import Location


class MatcherMixin:
    """Mixin resolving step text to the best matching definition.

    A definition matches if its pattern is found anywhere in the text.
    Among matching definitions the one with the greatest number of
    non-overlapping matches wins; on equal counts the earlier registered
    definition is kept.
    """

    definitions: list['StepDefinition']

    def find(self, text: str) -> 'StepDefinition | None':
        """Find the best matching definition for a step text.

        Args:
            text: Literal step text (without the keyword).

        Returns:
            The best matching definition, or `None` if nothing matches.
        """
        best: StepDefinition | None = None
        best_count = 0

        for definition in self.definitions:
            count = definition.count(text)
            if count > best_count:
                best, best_count = definition, count

        return best

    def resolve(self, text: str, *,
                location: 'Location | None' = None,
                filename: str | None = None) -> 'StepDefinition':
        """Resolve a step text to a definition.

        Args:
            text: Literal step text (without the keyword).
            location: Location of the step, used in error messages.
            filename: Feature file name, used in error messages.

        Returns:
            The best matching definition.

        Raises:
            StepResolutionError: If no definition matches the text.
        """
        if (definition := self.find(text)) is not None:
            return definition

        raise StepResolutionError.from_location(
            f'Cannot find step definition for step: {text}',
            location,
            filename=filename,
        )
