"""Error and warning types.

Errors raised while loading step libraries, registering definitions,
parsing feature files, and running scenarios. Messages carry the
feature file location and, for step failures, the failing step line
followed by the context values it ran with.
"""

from os import linesep
from typing import TYPE_CHECKING, Any, TypedDict

from yaml import dump

from pytest_cuke.values import MAPPINGS, SCALARS, SEQUENCES

if TYPE_CHECKING:
    from importlib.metadata import EntryPoint
    from typing import Self

if TYPE_CHECKING:
    from pytest_cuke.schema.documents import Location, Step

FORMAT_FILENAME = '<unicode string>'
FORMAT_REPLACER = '<runtime object>'
FORMAT_INDENT = ' ' * 4

YAML_INDENT = 2


class ErrorContext(TypedDict, total=False):
    """Location and runtime details attached to an error."""

    #: Name of the feature file.
    filename: str | None

    #: Line number in the feature file (1-based).
    line_num: int | None
    #: Column number in the feature file (1-based).
    column_num: int | None

    #: Name of the running scenario.
    scenario: str | None
    #: Position of the step within the scenario (0-based).
    step_num: int | None
    #: Failing step line, keyword included.
    step: str | None

    #: Context values the step ran with.
    values: dict[str, Any] | None

    #: Underlying exception.
    error: Exception | None


def sanitize(value: Any) -> Any:  # noqa: ANN401
    """Replace values that can not be dumped as plain YAML.

    Scalars are kept, mappings and sequences are sanitized item by item,
    anything else becomes a placeholder.
    """
    if value is None or isinstance(value, SCALARS):
        return value

    if isinstance(value, MAPPINGS):
        return {f'{key}': sanitize(item) for key, item in value.items()}

    if isinstance(value, SEQUENCES):
        return [sanitize(item) for item in value]

    return FORMAT_REPLACER


class ErrorFormatter:
    """Formatter of error messages with feature file locations."""

    @classmethod
    def format(cls, message: str, context: ErrorContext | None = None) -> str:
        """Append location lines and the failing step to a message.

        Args:
            message: Human-readable error message.
            context: Optional location and runtime details.

        Returns:
            The message followed by indented detail lines.
        """
        if not context:
            return message

        details = [*cls.location_lines(context), *cls.step_lines(context)]

        return linesep.join([message, *(f'{FORMAT_INDENT}{line}' for line in details)])

    @staticmethod
    def location_lines(context: ErrorContext) -> list[str]:
        """Describe where the error happened.

        The first line names the file, line, and column. A second line
        names the scenario and the step number when they are known.
        """
        where = f'in "{context.get('filename') or FORMAT_FILENAME}"'
        if (line_num := context.get('line_num')) is not None:
            where += f', line {line_num}'
            if (column_num := context.get('column_num')) is not None:
                where += f', column {column_num}'

        if (scenario := context.get('scenario')) is None:
            return [where]

        within = f'in scenario "{scenario}"'
        if (step_num := context.get('step_num')) is not None:
            within += f', step {step_num + 1}'

        return [where, within]

    @staticmethod
    def step_lines(context: ErrorContext) -> list[str]:
        """Show the failing step and the context values as YAML."""
        if (step := context.get('step')) is None:
            return []

        lines = [f'> {step}']
        if values := context.get('values'):
            dumped = dump(
                {'context': sanitize(values)},
                indent=YAML_INDENT,
                sort_keys=False,
                allow_unicode=True,
            )
            lines.extend(line for line in dumped.splitlines() if line.strip())

        return lines


class LibraryWarning(UserWarning):
    """Warning for a step library issue tolerated in relaxed mode."""


class CukeError(Exception, ErrorFormatter):
    """Root of the pytest-cuke errors.

    The message is rendered with the location and step details of the
    error context, so `str(error)` is ready to print.
    """

    #: Step associated with the error, if any.
    step: 'Step | None' = None

    def __init__(self, message: str, *,
                 context: ErrorContext | None = None) -> None:
        """Initialize an error.

        Args:
            message: Human-readable error description.
            context: Error context containing optional runtime values.
        """
        self.message = message
        self.context = context

        super().__init__(message)

    def __str__(self) -> str:
        """String representation."""
        return self.format(self.message, self.context)

    @classmethod
    def from_step(cls, message: str, step: 'Step', *,  # noqa: PLR0913
                  filename: str | None = None,
                  scenario: str | None = None,
                  step_num: int | None = None,
                  values: dict[str, Any] | None = None) -> 'Self':
        """Create an error instance describing a failing step.

        Args:
            message: Human-readable error message.
            step: Step associated with the error.
            filename: Optional name of the feature file.
            scenario: Optional name of the executed scenario.
            step_num: Optional position of the step within the scenario.
            values: Optional context values the step ran with.

        Returns:
            An initialized error showing the failing step.
        """
        error_context = ErrorContext(
            filename=filename,
            line_num=step.location.line,
            column_num=step.location.column,
            scenario=scenario,
            step_num=step_num,
            step=f'{step.keyword}{step.text}',
            values=values,
        )

        error = cls(message, context=error_context)
        error.step = step

        return error

    @classmethod
    def from_location(cls, message: str, location: 'Location | None', *,
                      filename: str | None = None,
                      error: Exception | None = None) -> 'Self':
        """Create an error instance from a document location.

        Args:
            message: Human-readable error message.
            location: Location in the feature file, if known.
            filename: Optional name of the feature file.
            error: Optional underlying exception.

        Returns:
            An initialized error with location context.
        """
        error_context = ErrorContext(
            filename=filename,
            error=error,
        )
        if location is not None:
            error_context['line_num'] = location.line
            error_context['column_num'] = location.column

        return cls(message, context=error_context)


class LibraryError(CukeError):
    """Error raised in strict mode when a step library can not be used."""

    def __init__(self, message: str, *,
                 entrypoint: 'EntryPoint | None' = None) -> None:
        """Initialize a library error.

        Args:
            message: Human-readable error description.
            entrypoint: Optional entry point associated with the error.
        """
        self.entrypoint = entrypoint

        super().__init__(message)


class ConfigurationError(CukeError):
    """Error raised while building the step registry.

    This exception indicates an invalid parameter type fragment, a
    malformed step function signature, an invalid step pattern, or a
    registration attempted after the registry was frozen. Configuration
    errors are fatal and abort suite construction.
    """


class DocumentError(CukeError):
    """Error raised when a feature document cannot be parsed.

    This exception wraps failures reported by the Gherkin parser and
    structural problems of the resulting document tree.
    """


class StepError(CukeError):
    """Base error for failures attached to a single step.

    Step errors are recorded on the failing step and halt the scenario.
    They never abort the whole suite run.
    """


class StepResolutionError(StepError):
    """Error raised when no step definition matches a step text."""


class StepArityError(StepError):
    """Error raised when captured groups do not fit the step function."""


class StepCoercionError(StepError):
    """Error raised when captured text can not be converted to its kind."""


class StepFaultError(StepError):
    """Error describing an unexpected exception raised by a step function.

    The original exception is preserved as `__cause__`.
    """


class HookError(CukeError):
    """Error raised when a lifecycle hook fails.

    The original exception is preserved as `__cause__`.
    """

    def __init__(self, message: str, *, stage: str,
                 context: ErrorContext | None = None) -> None:
        """Initialize a hook error.

        Args:
            message: Human-readable error description.
            stage: Lifecycle stage of the failing hook (`before step`, ...).
            context: Error context containing optional runtime values.
        """
        self.stage = stage

        super().__init__(message, context=context)
