"""Parameter template registry.

Parameter templates map short placeholder tokens (for example `{int}`)
to one or more regular expression fragments. Step patterns holding a
registered token are expanded into one variant per fragment before
compilation.
"""

import logging
from itertools import product
from re import compile as regexp
from re import error as RegexError  # noqa: N812
from typing import TYPE_CHECKING

from pytest_cuke.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


class ParameterTemplates:
    """Registry of parameter template tokens and their fragments.

    The registry follows a two-phase lifecycle: tokens are registered
    while the suite is built, then the registry is frozen and only read
    during the run.

    Attributes:
        combinatorial: If True, a pattern holding several tokens expands
            into the cross-product of their fragments. Otherwise every
            token present is expanded independently, leaving the other
            tokens untouched.
    """

    def __init__(self, *, combinatorial: bool = False) -> None:
        """Initialize an empty registry.

        Args:
            combinatorial: Whether to expand several tokens as a cross-product.
        """
        self.combinatorial = combinatorial
        self.frozen = False

        self._fragments: dict[str, list[str]] = {}

    @property
    def tokens(self) -> tuple[str, ...]:
        """Return registered tokens in registration order."""
        return tuple(self._fragments)

    def fragments(self, token: str) -> tuple[str, ...]:
        """Return fragments registered for a token, in registration order."""
        return tuple(self._fragments.get(token, ()))

    def register(self, token: str, fragments: 'Iterable[str]') -> None:
        """Register regular expression fragments for a token.

        Registration is additive: fragments are appended to the ones
        already registered for the token.

        Args:
            token: Placeholder token as it appears in step patterns.
            fragments: Ordered regular expression fragments.

        Raises:
            ConfigurationError: If the registry is frozen, the token is
                empty, or a fragment does not compile.
        """
        if self.frozen:
            raise ConfigurationError(f'Can not register parameter type {token!r}: registry is frozen')

        if not token:
            raise ConfigurationError('Parameter type token must not be empty')

        fragments = tuple(fragments)
        if not fragments:
            raise ConfigurationError(f'Parameter type {token!r} has no regular expressions')

        for fragment in fragments:
            try:
                regexp(fragment)
            except RegexError as base:
                raise ConfigurationError(
                    f'The regular expression for parameter type {token!r} '
                    f'does not compile: {fragment!r} ({base})',
                ) from base

        self._fragments.setdefault(token, []).extend(fragments)
        logger.debug('Registered parameter type %r: %r', token, fragments)

    def expand(self, pattern: str) -> list[str]:
        """Expand a step pattern into its variants.

        Args:
            pattern: Step pattern possibly holding registered tokens.

        Returns:
            The list of pattern variants in registration order of tokens
            and fragments, or the original pattern alone if it holds no
            registered token.
        """
        present = [
            (token, fragments)
            for token, fragments in self._fragments.items()
            if token in pattern
        ]
        if not present:
            return [pattern]

        if self.combinatorial:
            return self._expand_product(pattern, present)

        return [
            pattern.replace(token, fragment)
            for token, fragments in present
            for fragment in fragments
        ]

    @staticmethod
    def _expand_product(pattern: str, present: list[tuple[str, list[str]]]) -> list[str]:
        """Expand several tokens into the cross-product of their fragments."""
        variants = []
        for combination in product(*(fragments for _, fragments in present)):
            variant = pattern
            for (token, _), fragment in zip(present, combination, strict=True):
                variant = variant.replace(token, fragment)
            variants.append(variant)

        return variants

    def freeze(self) -> None:
        """Enter the read-only run phase."""
        self.frozen = True
