"""Tests for step definitions and argument coercion."""

from re import compile as regexp
from typing import Any

import pytest

from pytest_cuke.context import Context
from pytest_cuke.core import StepDefinition, StepRegistry
from pytest_cuke.core.definitions import inspect_runner
from pytest_cuke.errors import ConfigurationError, StepArityError, StepCoercionError
from pytest_cuke.values import Float32


def test_integer_argument(registry: StepRegistry) -> None:
    """Verify an integer parameter receives a parsed integer."""
    calls = []

    @registry.step(r'I have {int} cucumbers')
    def have(context: Context, count: int) -> None:
        calls.append(count)

    registry.resolve('I have 42 cucumbers')(Context(), 'I have 42 cucumbers')

    assert calls == [42]


@pytest.mark.parametrize(('annotation', 'text', 'expected'), (
    pytest.param(str, 'abc', 'abc', id='str'),
    pytest.param(int, '-7', -7, id='int'),
    pytest.param(float, '0.1', 0.1, id='float64'),
    pytest.param(Float32, '0.1', 0.10000000149011612, id='float32'),
    pytest.param(bytes, 'abc', b'abc', id='bytes'),
    pytest.param(list, 'abc', 'abc', id='unsupported'),
))
def test_argument_kinds(annotation: Any, text: str, expected: Any) -> None:  # noqa: ANN401
    """Verify captured text is converted according to the annotation."""
    def runner(context, value):  # noqa: ANN001, ANN202
        return value

    runner.__annotations__['value'] = annotation
    definition = StepDefinition.build(r'value (.+)', runner)

    assert definition(Context(), f'value {text}') == expected


def test_unannotated_argument() -> None:
    """Verify unannotated parameters receive raw captured text."""
    definition = StepDefinition.build(r'value (.+)', lambda context, value: value)

    assert definition.arguments[0].kind == 'raw'
    assert definition(Context(), 'value 10') == '10'


def test_missing_group_passed_as_none() -> None:
    """Verify a group that did not participate is passed as None."""
    def runner(context: Context, first: int, second: int) -> tuple[int, int]:
        return first, second

    definition = StepDefinition.build(r'(\d+)(?: and (\d+))?', runner)

    assert definition(Context(), '1') == (1, None)
    assert definition(Context(), '1 and 2') == (1, 2)


def test_coercion_failure() -> None:
    """Verify unparsable values raise a coercion error naming the parameter."""
    def runner(context: Context, count: int) -> None:
        return None

    definition = StepDefinition.build(r'count (\S+)', runner)

    with pytest.raises(StepCoercionError, match=r"'abc' to int for parameter 'count'"):
        definition(Context(), 'count abc')


def test_float32_overflow() -> None:
    """Verify single precision overflow is a coercion error."""
    def runner(context: Context, value: Float32) -> None:
        return None

    definition = StepDefinition.build(r'value (\S+)', runner)

    with pytest.raises(StepCoercionError, match=r'to float32'):
        definition(Context(), 'value 1e300')


def test_arity_check_precedes_coercion() -> None:
    """Verify a group count not fitting the arity raises before conversion."""
    def runner(context: Context, count: int) -> None:
        return None

    definition = StepDefinition.build(r'count (\d+)', runner)

    with pytest.raises(StepArityError, match=r'accepts 2 arguments but 3 received'):
        definition.coerce(('1', 'x'))


@pytest.mark.parametrize('runner', (
    pytest.param(lambda context, *values: None, id='variadic positional'),
    pytest.param(lambda context, **values: None, id='variadic keyword'),
    pytest.param(lambda context, *, value: None, id='keyword only'),
    pytest.param(lambda: None, id='no context'),
    pytest.param('not callable', id='not callable'),
))
def test_invalid_signature(runner: Any) -> None:  # noqa: ANN401
    """Verify invalid step function signatures are rejected."""
    with pytest.raises(ConfigurationError, match=r'^The step function for step'):
        inspect_runner(runner, 'pattern')


def test_context_annotation() -> None:
    """Verify the first parameter must accept the context."""
    def wrong(context: int) -> None:
        return None

    def base(context: dict) -> None:
        return None

    with pytest.raises(ConfigurationError, match=r'should have Context as the first argument'):
        inspect_runner(wrong)

    assert inspect_runner(base) == ()


def test_keyword_only_with_default() -> None:
    """Verify keyword-only parameters with defaults are accepted."""
    def runner(context: Context, value: int, *, flag: bool = False) -> None:
        return None

    arguments = inspect_runner(runner)

    assert [argument.name for argument in arguments] == ['value']


def test_group_count_mismatch() -> None:
    """Verify patterns not fitting the arity are rejected at registration."""
    def runner(context: Context, count: int) -> None:
        return None

    with pytest.raises(ConfigurationError, match=r'accepts 2 arguments but pattern .* captures 0 groups'):
        StepDefinition.build(r'no groups', runner)


def test_invalid_pattern() -> None:
    """Verify patterns that do not compile are rejected at registration."""
    with pytest.raises(ConfigurationError, match=r'does not compile'):
        StepDefinition.build(r'(unclosed', lambda context: None)


def test_rebind() -> None:
    """Verify rebinding keeps the runner and falls back on arity mismatch."""
    def runner(context: Context, count: int) -> int:
        return count

    definition = StepDefinition.build(r'I eat (\d+) apples', runner)

    rebound = definition.rebind(r'I\ eat\ ([-+]?\d+)\ apples')
    assert rebound is not definition
    assert rebound.runner is runner
    assert rebound.source == definition.source
    assert rebound(Context(), 'I eat -3 apples') == -3

    assert definition.rebind(r'I eat apples') is definition


def test_count() -> None:
    """Verify non-overlapping match occurrences are counted."""
    definition = StepDefinition.build(regexp(r'a'), lambda context: None)

    assert definition.count('banana') == 3
    assert definition.count('kiwi') == 0


@pytest.mark.parametrize(('pattern', 'text', 'expected'), (
    pytest.param(r'(.*)', 'I have 42 cucumbers', 1, id='catch-all'),
    pytest.param(r'a*', 'baaa', 2, id='empty before and after'),
    pytest.param(r'x*', 'ab', 3, id='empty only'),
))
def test_count_empty_matches(pattern: str, text: str, expected: int) -> None:
    """Verify empty matches adjacent to a previous match are not counted."""
    definition = StepDefinition.build(regexp(pattern), lambda context: None)

    assert definition.count(text) == expected
