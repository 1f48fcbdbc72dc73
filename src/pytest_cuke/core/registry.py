"""Step definition registry.

The registry owns parameter types, step definitions, and lifecycle hooks
of a suite. It follows a two-phase lifecycle: everything is registered
while the suite is built, then the registry is frozen and only read while
scenarios run, possibly from several worker threads.
"""

import logging
from re import Pattern
from typing import TYPE_CHECKING

from pytest_cuke.builtins.parameters import BUILTIN_PARAMETER_TYPES
from pytest_cuke.core.definitions import StepDefinition, inspect_runner
from pytest_cuke.core.loader import LibrariesLoaderMixin
from pytest_cuke.core.matcher import MatcherMixin
from pytest_cuke.core.templates import ParameterTemplates
from pytest_cuke.errors import ConfigurationError
from pytest_cuke.schema.options import Hooks

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

if TYPE_CHECKING:
    from pytest_cuke.schema.options import Hook, StepRunner

logger = logging.getLogger(__name__)


class StepRegistry(MatcherMixin, LibrariesLoaderMixin):
    """Registry of parameter types, step definitions, and hooks.

    Attributes:
        templates: Parameter type templates used to expand step patterns.
        definitions: Step definitions in registration order.
        hooks: Lifecycle hooks in registration order.
        libraries: Loaded step library names and their origins.
        frozen: Whether the registry entered the read-only run phase.
    """

    def __init__(self, *, strict: bool = True, combinatorial: bool = False,
                 builtins: bool = True) -> None:
        """Initialize a registry.

        Args:
            strict: Whether step library issues raise instead of warning.
            combinatorial: Whether patterns holding several parameter types
                expand into the cross-product of their fragments.
            builtins: Whether to register the builtin parameter types.
        """
        self.strict_mode = strict
        self.frozen = False

        self.templates = ParameterTemplates(combinatorial=combinatorial)
        self.definitions: list[StepDefinition] = []
        self.hooks = Hooks()
        self.libraries: dict[str, str] = {}

        if builtins:
            for parameter_type in BUILTIN_PARAMETER_TYPES:
                self.add_parameter_type(parameter_type.token, parameter_type.fragments)

    def _ensure_mutable(self, subject: str) -> None:
        if self.frozen:
            raise ConfigurationError(f'Can not register {subject}: registry is frozen')

    def add_parameter_type(self, token: str, fragments: 'Iterable[str]') -> None:
        """Register regular expression fragments for a placeholder token.

        Args:
            token: Placeholder token, for example `{color}`.
            fragments: Ordered regular expression fragments.

        Raises:
            ConfigurationError: If the registry is frozen or a fragment
                does not compile.
        """
        self._ensure_mutable(f'parameter type {token!r}')
        self.templates.register(token, fragments)

    def add_step(self, pattern: str | Pattern[str], runner: 'StepRunner') -> list[StepDefinition]:
        """Register a step function for a pattern.

        Textual patterns are expanded through the registered parameter
        types; every variant becomes its own definition. Compiled patterns
        are registered as they are.

        Args:
            pattern: Regular expression text or a compiled pattern.
            runner: Step function receiving the context and one argument
                per captured group.

        Returns:
            Definitions created for the pattern, in registration order.

        Raises:
            ConfigurationError: If the registry is frozen, the runner
                signature is invalid, a variant does not compile, or a
                variant captures a number of groups not fitting the runner.
        """
        source = pattern if isinstance(pattern, str) else pattern.pattern
        self._ensure_mutable(f'step {source!r}')

        arguments = inspect_runner(runner, source)

        if isinstance(pattern, Pattern):
            variants: list[str | Pattern[str]] = [pattern]
        else:
            variants = list(self.templates.expand(pattern))

        try:
            definitions = [
                StepDefinition.build(variant, runner, source=source, arguments=arguments)
                for variant in variants
            ]
        except ConfigurationError as error:
            if len(variants) > 1 and not self.templates.combinatorial:
                error.message += (
                    '; patterns holding several parameter types need '
                    'combinatorial expansion'
                )
            raise

        self.definitions.extend(definitions)
        logger.debug('Registered step %r as %d definition(s)', source, len(definitions))

        return definitions

    def add_hooks(self, hooks: Hooks) -> None:
        """Append lifecycle hooks after the registered ones.

        Raises:
            ConfigurationError: If the registry is frozen.
        """
        self._ensure_mutable('hooks')
        self.hooks = self.hooks.merge(hooks)

    def step(self, pattern: str | Pattern[str]) -> 'Callable[[StepRunner], StepRunner]':
        """Decorate a function as a step definition.

        Example:
            >>> @registry.step(r'I have {int} cucumbers')
            ... def have_cucumbers(context, count: int):
            ...     context['cucumbers'] = count

        Args:
            pattern: Regular expression text or a compiled pattern.

        Returns:
            A decorator registering the function and returning it unchanged.
        """
        def decorator(runner: 'StepRunner') -> 'StepRunner':
            self.add_step(pattern, runner)
            return runner

        return decorator

    def before_scenario(self, hook: 'Hook') -> 'Hook':
        """Register a hook invoked before every scenario."""
        self.add_hooks(Hooks(before_scenario=(hook,)))
        return hook

    def after_scenario(self, hook: 'Hook') -> 'Hook':
        """Register a hook invoked after every scenario."""
        self.add_hooks(Hooks(after_scenario=(hook,)))
        return hook

    def before_step(self, hook: 'Hook') -> 'Hook':
        """Register a hook invoked before every step."""
        self.add_hooks(Hooks(before_step=(hook,)))
        return hook

    def after_step(self, hook: 'Hook') -> 'Hook':
        """Register a hook invoked after every executed step."""
        self.add_hooks(Hooks(after_step=(hook,)))
        return hook

    def freeze(self) -> None:
        """Enter the read-only run phase.

        Freezing is idempotent. Any registration afterwards raises
        `ConfigurationError`.
        """
        if not self.frozen:
            logger.debug('Registry frozen with %d step definition(s)', len(self.definitions))

        self.frozen = True
        self.templates.freeze()
