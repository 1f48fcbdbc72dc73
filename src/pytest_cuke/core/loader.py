"""Step library discovery and loading infrastructure.

This module defines a mixin responsible for discovering, loading, and
registering step libraries exposed via Python entry points or explicit
`module:attribute` import paths.

Individual library failures do not interrupt the loading process unless
strict mode is enabled. Each library may contribute parameter types,
steps, and lifecycle hooks.
"""

import logging
from importlib.metadata import EntryPoint
from typing import TYPE_CHECKING
from warnings import warn

from pydantic import ValidationError

from pytest_cuke.errors import ConfigurationError, LibraryError, LibraryWarning
from pytest_cuke.extensions import StepLibrary
from pytest_cuke.names import IMPORT_PATH_PATTERN

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from re import Pattern

if TYPE_CHECKING:
    from pytest_cuke.core.definitions import StepDefinition
    from pytest_cuke.schema.options import Hooks, StepRunner

#: Entry point group scanned for step libraries.
ENTRYPOINT_GROUP = 'cuke_steps'

logger = logging.getLogger(__name__)


class LibrariesLoaderMixin:
    """Mixin defining step library loading behavior.

    This mixin encapsulates logic for discovering and loading step
    libraries and delegating registration of their declarations.

    Implementers provide the `add_*` registration methods.
    This class provides only orchestration and error-handling logic.

    Attributes:
        strict_mode: If True, any library loading issue raises an error.
            If False, issues are emitted as warnings and loading continues.
    """

    strict_mode: bool = True

    definitions: list['StepDefinition']
    libraries: dict[str, str]

    add_parameter_type: 'Callable[[str, Iterable[str]], None]'
    add_step: 'Callable[[str | Pattern[str], StepRunner], list[StepDefinition]]'
    add_hooks: 'Callable[[Hooks], None]'

    def add_library(self, library: StepLibrary,
                    entrypoint: EntryPoint | None = None) -> None:
        """Register everything a step library declares.

        Parameter types are registered first, then steps in declaration
        order, then hooks.

        Args:
            library: Declarative step library.
            entrypoint: Entry point from which the library was loaded,
                if applicable. Used for diagnostics and warnings.

        Raises:
            LibraryError: If a declaration is invalid on strict mode.
        """
        module = f'{entrypoint.value if entrypoint else library.__module__}'

        if library.name in self.libraries and (error := self.emit_library_issue(
            f'Library {library.name!r} from {module!r} is shadowing an existing',
            entrypoint,
        )):
            raise error
        self.libraries[library.name] = module

        for parameter_type in library.parameter_types:
            try:
                self.add_parameter_type(parameter_type.token, parameter_type.fragments)
            except ConfigurationError as base:
                if error := self.emit_library_issue(
                    f'Parameter type {parameter_type.token!r} from {module!r} '
                    f'is invalid: {base.message}',
                    entrypoint,
                ):
                    raise error from base

        for declaration in library.steps:
            if any(
                definition.source == declaration.source
                for definition in self.definitions
            ) and (error := self.emit_library_issue(
                f'Step {declaration.source!r} from {module!r} is shadowing an existing',
                entrypoint,
            )):
                raise error

            try:
                self.add_step(declaration.pattern, declaration.runner)
            except ConfigurationError as base:
                if error := self.emit_library_issue(
                    f'Step {declaration.source!r} from {module!r} '
                    f'is invalid: {base.message}',
                    entrypoint,
                ):
                    raise error from base

        if library.hooks:
            self.add_hooks(library.hooks)

        logger.debug('Loaded step library %r from %r', library.name, module)

    def emit_library_issue(self, message: str,
                           entrypoint: EntryPoint | None = None) -> Exception | None:
        """Emit a library warning or return the exception.

        Args:
            message: Warning message to emit.
            entrypoint: Entry point from which the library was loaded, if applicable.

        Returns:
            LibraryError on strict mode, otherwise `None`
                with producing a LibraryWarning.
        """
        if self.strict_mode:
            return LibraryError(message, entrypoint=entrypoint)

        warn(message, category=LibraryWarning, stacklevel=2)

        return None

    def _load_library(self, entrypoint: EntryPoint) -> None:
        """Load and register a single step library entry point.

        Args:
            entrypoint: Entry point describing the library to load.

        Raises:
            LibraryError: If any loading issues occur on strict mode.
        """
        try:
            library = entrypoint.load()

        except ValidationError as base:
            if error := self.emit_library_issue(
                f'Failed to validate entrypoint {entrypoint.name!r}',
                entrypoint,
            ):
                raise error from base
            return None

        except Exception as base:
            if error := self.emit_library_issue(
                f'Failed to load entrypoint {entrypoint.name!r}',
                entrypoint,
            ):
                raise error from base
            return None

        if not isinstance(library, StepLibrary):
            if error := self.emit_library_issue(
                f'Loaded from entrypoint {entrypoint.name!r} object is not a step library',
                entrypoint,
            ):
                raise error
            return None

        self.add_library(library, entrypoint)

    def load_libraries(self, *paths: str) -> None:
        """Load step libraries and register their declarations.

        Discovers libraries from the `cuke_steps` entry point group, then
        loads libraries given explicitly as `module:attribute` paths.

        Args:
            *paths: Explicit library import paths.

        Raises:
            LibraryError: If any loading issues occur on strict mode.
        """
        from importlib.metadata import entry_points  # noqa: PLC0415

        for entrypoint in entry_points().select(group=ENTRYPOINT_GROUP):
            self._load_library(entrypoint)

        for path in paths:
            entrypoint = EntryPoint(name=path, value=path, group=ENTRYPOINT_GROUP)
            if not IMPORT_PATH_PATTERN.match(path):
                if error := self.emit_library_issue(
                    f'Library path {path!r} is not in the `module:attribute` form',
                    entrypoint,
                ):
                    raise error
                continue

            self._load_library(entrypoint)
