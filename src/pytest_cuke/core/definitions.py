"""Step definitions and typed argument coercion.

A step definition binds a compiled regular expression to a step function.
The function signature is inspected once, at registration time, into an
explicit table of arguments and converters; invoking a definition never
inspects types again.

A step function must accept the execution context as its first positional
parameter. Every following positional parameter receives one captured
group of the pattern, converted according to its annotation.
"""

from inspect import Parameter, signature
from re import Pattern
from re import compile as regexp
from re import error as RegexError  # noqa: N812
from typing import TYPE_CHECKING, Any, Self

from pydantic import Field

from pytest_cuke.context import Context
from pytest_cuke.errors import ConfigurationError, StepArityError, StepCoercionError, StepResolutionError
from pytest_cuke.models import SchemaModel
from pytest_cuke.schema.options import StepRunner  # noqa: TC001
from pytest_cuke.values import Converter, resolve_converter

if TYPE_CHECKING:
    from pytest_cuke.values import Captured

_POSITIONAL = (Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD)


class Argument(SchemaModel):
    """A step function parameter fed from a captured group."""

    name: str = Field(
        title='Parameter name',
        description='Name of the step function parameter.',
    )
    kind: str = Field(
        title='Argument kind',
        description='Name of the argument kind (`str`, `int`, `float32`, `float64`, `bytes`, `raw`).',
    )
    converter: Converter = Field(
        title='Converter',
        description='Callable converting captured text into the argument value.',
    )

    def convert(self, value: 'Captured') -> Any:  # noqa: ANN401
        """Convert a captured value.

        Args:
            value: Captured text, or `None` if the group did not participate.

        Returns:
            The converted argument.

        Raises:
            StepCoercionError: If the text can not be converted.
        """
        if value is None:
            return None

        try:
            return self.converter(value)
        except ValueError as base:
            raise StepCoercionError(
                f'Can not convert {value!r} to {self.kind} for parameter {self.name!r}',
            ) from base


def _accepts_context(annotation: Any) -> bool:  # noqa: ANN401
    """Check whether a parameter annotated so can receive the context."""
    if annotation is Parameter.empty or annotation is Any:
        return True

    try:
        return isinstance(annotation, type) and issubclass(Context, annotation)
    except TypeError:
        return False


def inspect_runner(runner: StepRunner, source: str = '') -> tuple[Argument, ...]:
    """Validate a step function signature and build its argument table.

    Args:
        runner: Step function to validate.
        source: Step pattern used in error messages.

    Returns:
        Arguments fed from captured groups, in declaration order.
        The leading context parameter is not included.

    Raises:
        ConfigurationError: If the runner is not callable, does not accept
            the context as its first parameter, or declares variadic or
            required keyword-only parameters.
    """
    if not callable(runner):
        raise ConfigurationError(f'The step function for step {source!r} is not callable')

    try:
        parameters = list(signature(runner, eval_str=True).parameters.values())
    except (NameError, TypeError, ValueError) as base:
        raise ConfigurationError(
            f'The step function for step {source!r} has no inspectable signature',
        ) from base

    for parameter in parameters:
        if parameter.kind in (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD):
            raise ConfigurationError(
                f'The step function for step {source!r} must not declare '
                f'variadic parameter {parameter.name!r}',
            )
        if parameter.kind is Parameter.KEYWORD_ONLY and parameter.default is Parameter.empty:
            raise ConfigurationError(
                f'The step function for step {source!r} must not declare '
                f'required keyword-only parameter {parameter.name!r}',
            )

    positional = [
        parameter
        for parameter in parameters
        if parameter.kind in _POSITIONAL
    ]
    if not positional or not _accepts_context(positional[0].annotation):
        raise ConfigurationError(
            f'The step function for step {source!r} should have Context as the first argument',
        )

    arguments = []
    for parameter in positional[1:]:
        kind, converter = resolve_converter(parameter.annotation)
        arguments.append(Argument(name=parameter.name, kind=kind, converter=converter))

    return tuple(arguments)


class StepDefinition(SchemaModel):
    """A compiled pattern bound to a step function.

    Definitions are owned by the step registry and never mutated after
    creation, so a frozen registry may be read from several threads.
    """

    pattern: Pattern[str] = Field(
        title='Compiled pattern',
        description='Regular expression searched for in step text.',
    )
    runner: StepRunner = Field(
        title='Step function',
        description='Callable implementing the step.',
    )
    arguments: tuple[Argument, ...] = Field(
        default=(),
        title='Arguments',
        description='Converters for captured groups, keyed by position.',
    )
    source: str = Field(
        default='',
        title='Pattern source',
        description='Pattern as registered, before parameter type expansion.',
    )

    @classmethod
    def build(cls, pattern: str | Pattern[str], runner: StepRunner, *,
              source: str | None = None,
              arguments: tuple[Argument, ...] | None = None) -> Self:
        """Compile a pattern and bind it to a step function.

        Args:
            pattern: Regular expression text or a compiled pattern.
            runner: Step function.
            source: Pattern as registered, used in messages.
            arguments: Pre-built argument table; built from the runner
                signature if omitted.

        Returns:
            A validated step definition.

        Raises:
            ConfigurationError: If the pattern does not compile, the runner
                signature is invalid, or the number of capture groups does
                not fit the runner arity.
        """
        text = pattern if isinstance(pattern, str) else pattern.pattern
        if source is None:
            source = text

        if arguments is None:
            arguments = inspect_runner(runner, source)

        try:
            compiled = regexp(pattern)
        except RegexError as base:
            raise ConfigurationError(f'The step pattern {text!r} does not compile ({base})') from base

        if compiled.groups != len(arguments):
            raise ConfigurationError(
                f'The step function for step {source!r} accepts {len(arguments) + 1} '
                f'arguments but pattern {text!r} captures {compiled.groups} groups',
            )

        return cls(pattern=compiled, runner=runner, arguments=arguments, source=source)

    @property
    def arity(self) -> int:
        """Number of positional parameters, including the context."""
        return len(self.arguments) + 1

    def rebind(self, pattern: str) -> 'StepDefinition':
        """Bind the same step function to another pattern.

        Args:
            pattern: Regular expression text.

        Returns:
            A new definition if the pattern compiles and fits the arity,
            otherwise this definition.
        """
        try:
            return self.build(pattern, self.runner, source=self.source, arguments=self.arguments)
        except ConfigurationError:
            return self

    def count(self, text: str) -> int:
        """Count non-overlapping matches of the pattern in a text.

        An empty match right after the previous match is not counted.
        """
        count, end = 0, -1
        for match in self.pattern.finditer(text):
            if match.start() == match.end() == end:
                continue

            count += 1
            end = match.end()

        return count

    def capture(self, text: str) -> tuple['Captured', ...]:
        """Capture groups of the first match in a text.

        Raises:
            StepResolutionError: If the pattern is not found.
        """
        match = self.pattern.search(text)
        if match is None:
            raise StepResolutionError(f'Step definition {self.source!r} does not match {text!r}')

        return match.groups()

    def coerce(self, captured: tuple['Captured', ...]) -> list[Any]:
        """Convert captured groups into step function arguments.

        Args:
            captured: Captured groups in positional order.

        Returns:
            Converted arguments.

        Raises:
            StepArityError: If the number of groups does not fit the arity.
            StepCoercionError: If a value can not be converted.
        """
        if len(captured) + 1 != self.arity:
            raise StepArityError(
                f'The step function for step {self.source!r} accepts {self.arity} '
                f'arguments but {len(captured) + 1} received',
            )

        return [
            argument.convert(value)
            for argument, value in zip(self.arguments, captured, strict=True)
        ]

    def __call__(self, context: Context, text: str) -> Any:  # noqa: ANN401
        """Execute the step function for a step text.

        Args:
            context: Execution context of the scenario.
            text: Literal step text.

        Returns:
            Whatever the step function returns.
        """
        return self.runner(context, *self.coerce(self.capture(text)))
