"""Tests for core document and declarative models."""

from re import compile as regexp

import pydantic
import pytest

from pytest_cuke.extensions import ParameterType, StepDeclaration, StepLibrary
from pytest_cuke.schema import Feature, Scenario, Step, TableRow


def _runner(context: dict) -> None:
    return None


def test_document_aliases() -> None:
    """Validate documents given with camelCase keys and unknown fields."""
    step = Step.model_validate({
        'id': '3',
        'keyword': 'Given ',
        'keywordType': 'Context',
        'text': 'a step',
        'docString': {'content': 'note', 'delimiter': '```', 'mediaType': 'text/plain'},
        'location': {'line': 4, 'column': 5},
    })

    assert step.keyword_type == 'Context'
    assert step.doc_string is not None
    assert step.doc_string.media_type == 'text/plain'
    assert step.location.line == 4

    with pytest.raises(pydantic.ValidationError):
        step.text = 'another step'  # type: ignore[misc]


@pytest.mark.parametrize(('tag', 'valid'), (
    pytest.param('@slow', True, id='valid'),
    pytest.param('@feature:x-1', True, id='punctuation'),
    pytest.param('slow', False, id='missing prefix'),
    pytest.param('@', False, id='prefix only'),
    pytest.param('@two words', False, id='whitespace'),
))
def test_tags(tag: str, valid: bool) -> None:
    """Validate tag names."""
    content = {'name': 'Tagged', 'tags': [{'name': tag}]}

    if not valid:
        with pytest.raises(pydantic.ValidationError, match=r'^1 validation error for Scenario'):
            Scenario.model_validate(content)
        return

    assert Scenario.model_validate(content).tag_names == frozenset({tag})


def test_from_scenarios() -> None:
    """Build a feature from scenario models."""
    first = Scenario(name='First', steps=(Step(text='a step'),))
    second = Scenario(name='Second')

    feature = Feature.from_scenarios(first, second, name='Built')

    assert feature.name == 'Built'
    assert feature.background is None
    assert [child.scenario for child in feature.children] == [first, second]
    assert not first.is_outline


def test_table_row() -> None:
    """Expose plain cell values of table rows."""
    row = TableRow.model_validate({'cells': [{'value': 'a'}, {'value': 'b'}]})

    assert row.values == ('a', 'b')


def test_step_declaration() -> None:
    """Validate step declarations with textual and compiled patterns."""
    assert StepDeclaration(pattern=r'a {int}', runner=_runner).source == r'a {int}'
    assert StepDeclaration(pattern=regexp(r'a (\d+)'), runner=_runner).source == r'a (\d+)'

    with pytest.raises(pydantic.ValidationError):
        StepDeclaration(pattern=r'a step', runner='not callable')

    with pytest.raises(pydantic.ValidationError, match=r'^1 validation error for StepDeclaration'):
        StepDeclaration(pattern=r'a step', runner=_runner, extra=True)


def test_parameter_type() -> None:
    """Validate parameter types."""
    assert ParameterType(token='{x}', fragments=r'(x)').fragments == (r'(x)',)

    with pytest.raises(pydantic.ValidationError):
        ParameterType(token='', fragments=r'(x)')

    with pytest.raises(pydantic.ValidationError):
        ParameterType(token='{x}', fragments=())


@pytest.mark.parametrize(('name', 'valid'), (
    pytest.param('basket', True, id='valid'),
    pytest.param('http_api2', True, id='underscores'),
    pytest.param('2fast', False, id='leading digit'),
    pytest.param('with-dash', False, id='dash'),
))
def test_library_name(name: str, valid: bool) -> None:
    """Validate step library names."""
    if not valid:
        with pytest.raises(pydantic.ValidationError):
            StepLibrary(name=name)
        return

    library = StepLibrary(name=name)

    assert library.steps == []
    assert library.parameter_types == []
    assert not library.hooks
