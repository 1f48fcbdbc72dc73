"""Tests for parameter type templates."""

from re import compile as regexp

import pytest

from pytest_cuke.core import ParameterTemplates, StepRegistry
from pytest_cuke.errors import ConfigurationError


@pytest.mark.parametrize(('pattern', 'expected'), (
    pytest.param(
        'I have 5 cucumbers',
        ['I have 5 cucumbers'],
        id='no tokens',
    ),
    pytest.param(
        'I have {int} cucumbers',
        [r'I have ([-+]?\d+) cucumbers'],
        id='single token',
    ),
    pytest.param(
        'I say {text}',
        [r'I say "([\w\-\s]+)"', r"I say '([\w\-\s]+)'"],
        id='several fragments',
    ),
    pytest.param(
        'I have {int} and {int}',
        [r'I have ([-+]?\d+) and ([-+]?\d+)'],
        id='repeated token',
    ),
    pytest.param(
        'I have {unknown}',
        ['I have {unknown}'],
        id='unknown token',
    ),
))
def test_builtin_expansion(registry: StepRegistry, pattern: str, expected: list[str]) -> None:
    """Verify expansion of patterns through builtin parameter types."""
    variants = registry.templates.expand(pattern)

    assert variants == expected
    for variant in variants:
        regexp(variant)


def test_per_token_expansion() -> None:
    """Verify every present token is expanded independently by default."""
    templates = ParameterTemplates()
    templates.register('{a}', ['(a)', '(A)'])
    templates.register('{b}', ['(b)'])

    assert templates.expand('{a}-{b}') == ['(a)-{b}', '(A)-{b}', '{a}-(b)']


def test_combinatorial_expansion() -> None:
    """Verify cross-product expansion of several tokens."""
    templates = ParameterTemplates(combinatorial=True)
    templates.register('{a}', ['(a)', '(A)'])
    templates.register('{b}', ['(b)', '(B)'])

    assert templates.expand('{a}-{b}') == ['(a)-(b)', '(a)-(B)', '(A)-(b)', '(A)-(B)']


def test_additive_registration() -> None:
    """Verify fragments are appended to an already registered token."""
    templates = ParameterTemplates()
    templates.register('{color}', ['(green)'])
    templates.register('{color}', ['(yellow)'])

    assert templates.tokens == ('{color}',)
    assert templates.fragments('{color}') == ('(green)', '(yellow)')
    assert templates.expand('{color}') == ['(green)', '(yellow)']


@pytest.mark.parametrize(('token', 'fragments', 'message'), (
    pytest.param('{bad}', ['(unclosed'], r'does not compile', id='invalid fragment'),
    pytest.param('{none}', [], r'has no regular expressions', id='no fragments'),
    pytest.param('', ['(x)'], r'must not be empty', id='empty token'),
))
def test_invalid_registration(token: str, fragments: list[str], message: str) -> None:
    """Verify invalid parameter types are rejected at registration."""
    templates = ParameterTemplates()

    with pytest.raises(ConfigurationError, match=message):
        templates.register(token, fragments)

    assert templates.tokens == ()


def test_registration_after_freeze() -> None:
    """Verify the frozen templates reject new parameter types."""
    templates = ParameterTemplates()
    templates.freeze()

    with pytest.raises(ConfigurationError, match=r'registry is frozen'):
        templates.register('{x}', ['(x)'])


def test_registry_without_builtins() -> None:
    """Verify builtin parameter types can be disabled."""
    assert StepRegistry(builtins=False).templates.tokens == ()
    assert StepRegistry().templates.tokens == ('{int}', '{float}', '{word}', '{text}')
