"""Tests for scenario outline expansion."""

import pytest

from pytest_cuke.context import Context
from pytest_cuke.core import DocumentParser, OutlineExpander, StepRegistry
from pytest_cuke.core.outlines import fragment_for, substitute, synthesize
from pytest_cuke.errors import StepResolutionError

OUTLINE = '''\
Feature: Basket

  Scenario Outline: Eating
    Given there are <start> cucumbers
    When I eat <eat> cucumbers
    Then I should have <left> cucumbers

    Examples: First
      | start | eat | left |
      | 12    | 5   | 7    |
      | 20    | 5   | 15   |

    Examples: Second
      | start | eat | left |
      | 3     | 3   | 0    |
'''


@pytest.mark.parametrize(('value', 'fragment'), (
    pytest.param('3', r'([-+]?\d+)', id='integer'),
    pytest.param('-3', r'([-+]?\d+)', id='negative integer'),
    pytest.param('1.5', r'([-+]?\d*\.\d+)', id='decimal'),
    pytest.param('.5', r'([-+]?\d*\.\d+)', id='bare decimal'),
    pytest.param('green', r'(.*)', id='text'),
    pytest.param('', r'(.*)', id='empty'),
))
def test_fragment_for(value: str, fragment: str) -> None:
    """Verify capture fragments are chosen from example values."""
    assert fragment_for(value) == fragment


def test_substitute_and_synthesize() -> None:
    """Verify placeholders are substituted and literal text is escaped."""
    values = {'count': '3'}

    assert substitute('I eat <count> apples (<unknown>)', values) == 'I eat 3 apples (<unknown>)'
    assert synthesize('I eat <count> apples.', values) == r'I\ eat\ ([-+]?\d+)\ apples\.'
    assert synthesize('I eat <other>', values) == r'I\ eat\ <other>'


def test_outline_digits(registry: StepRegistry, parser: DocumentParser) -> None:
    """Verify a step resolved through its outline text is bound to a digit-matching pattern."""
    eaten = []

    @registry.step(r'I eat (<\w+>) apples')
    def eat(context: Context, count: int) -> None:
        eaten.append(count)

    feature = parser.parse(
        'Feature: F\n'
        '  Scenario Outline: O\n'
        '    When I eat <count> apples\n'
        '    Examples:\n'
        '      | count |\n'
        '      | 3     |\n',
    )
    assert feature is not None
    scenario = feature.children[0].scenario
    assert scenario is not None

    planned = OutlineExpander(registry).expand(scenario.steps, scenario.examples)

    assert len(planned) == 1
    assert planned[0].step.text == 'I eat 3 apples'
    assert planned[0].definition.pattern.pattern == r'I\ eat\ ([-+]?\d+)\ apples'

    planned[0].definition(Context(), planned[0].step.text)
    assert eaten == [3]


def test_resolved_definition_wins_tie(registry: StepRegistry, parser: DocumentParser) -> None:
    """Verify the resolved definition is kept if the synthesized pattern matches as often."""
    totals = []

    @registry.step(r'the total is (\d+)')
    def total(context: Context, value: int) -> None:
        totals.append(value)

    definitions = list(registry.definitions)

    feature = parser.parse(
        'Feature: F\n'
        '  Scenario Outline: O\n'
        '    Then <who> sees the total is 5\n'
        '    Examples:\n'
        '      | who   |\n'
        '      | alice |\n',
    )
    assert feature is not None
    scenario = feature.children[0].scenario
    assert scenario is not None

    planned = OutlineExpander(registry).expand(scenario.steps, scenario.examples)

    assert planned[0].definition is definitions[0]

    planned[0].definition(Context(), planned[0].step.text)
    assert totals == [5]


def test_row_major_order(registry: StepRegistry, parser: DocumentParser) -> None:
    """Verify N rows by M steps yield N*M steps in row-major order."""
    for pattern in (r'there are {int} cucumbers', r'I eat {int} cucumbers', r'I should have {int} cucumbers'):
        registry.add_step(pattern, lambda context, count: None)

    feature = parser.parse(OUTLINE)
    assert feature is not None
    scenario = feature.children[0].scenario
    assert scenario is not None

    planned = OutlineExpander(registry).expand(scenario.steps, scenario.examples)

    assert [item.step.text for item in planned] == [
        'there are 12 cucumbers',
        'I eat 5 cucumbers',
        'I should have 7 cucumbers',
        'there are 20 cucumbers',
        'I eat 5 cucumbers',
        'I should have 15 cucumbers',
        'there are 3 cucumbers',
        'I eat 3 cucumbers',
        'I should have 0 cucumbers',
    ]


def test_arguments_substitution(registry: StepRegistry, parser: DocumentParser) -> None:
    """Verify doc strings and data tables are substituted as well."""
    registry.add_step(r'a note', lambda context: None)
    registry.add_step(r'a table', lambda context: None)

    feature = parser.parse(
        'Feature: F\n'
        '  Scenario Outline: O\n'
        '    Given a note\n'
        '      """\n'
        '      Dear <name>\n'
        '      """\n'
        '    And a table\n'
        '      | name   | color   |\n'
        '      | <name> | <color> |\n'
        '    Examples:\n'
        '      | name | color |\n'
        '      | Bob  | green |\n',
    )
    assert feature is not None
    scenario = feature.children[0].scenario
    assert scenario is not None

    note, table = OutlineExpander(registry).expand(scenario.steps, scenario.examples)

    assert note.step.doc_string is not None
    assert note.step.doc_string.content == 'Dear Bob'
    assert table.step.data_table is not None
    assert table.step.data_table.values == [['name', 'color'], ['Bob', 'green']]

    assert scenario.steps[0].doc_string is not None
    assert scenario.steps[0].doc_string.content == 'Dear <name>'


def test_fallback_to_resolved_definition(registry: StepRegistry, parser: DocumentParser) -> None:
    """Verify the resolved definition is kept if the synthesized pattern does not fit."""
    definitions = registry.add_step(r'I have (\d+) and (\d+)', lambda context, first, second: None)

    feature = parser.parse(
        'Feature: F\n'
        '  Scenario Outline: O\n'
        '    Given I have 1 and <count>\n'
        '    Examples:\n'
        '      | count |\n'
        '      | 2     |\n',
    )
    assert feature is not None
    scenario = feature.children[0].scenario
    assert scenario is not None

    planned = OutlineExpander(registry).expand(scenario.steps, scenario.examples)

    assert planned[0].definition is definitions[0]


def test_table_without_header(registry: StepRegistry, parser: DocumentParser) -> None:
    """Verify example tables without a header yield no steps."""
    registry.add_step(r'anything', lambda context: None)

    feature = parser.parse(
        'Feature: F\n'
        '  Scenario Outline: O\n'
        '    Given anything <value>\n'
        '    Examples:\n',
    )
    assert feature is not None
    scenario = feature.children[0].scenario
    assert scenario is not None

    assert OutlineExpander(registry).expand(scenario.steps, scenario.examples) == []


def test_unresolved_step(registry: StepRegistry, parser: DocumentParser) -> None:
    """Verify expansion fails if a generated step has no definition."""
    registry.freeze()
    definitions = list(registry.definitions)

    feature = parser.parse(
        'Feature: F\n'
        '  Scenario Outline: O\n'
        '    Given I peel <count> cucumbers\n'
        '    Examples:\n'
        '      | count |\n'
        '      | 3     |\n',
    )
    assert feature is not None
    scenario = feature.children[0].scenario
    assert scenario is not None

    with pytest.raises(StepResolutionError, match=r'^Cannot find step definition for step: I peel 3 cucumbers') as error:
        OutlineExpander(registry).expand(scenario.steps, scenario.examples)

    assert error.value.step is not None
    assert error.value.step.text == 'I peel 3 cucumbers'
    assert registry.definitions == definitions
