"""Tests for the command-line interface."""

from typing import TYPE_CHECKING

import pytest
from click.testing import CliRunner

from pytest_cuke.__main__ import cli

if TYPE_CHECKING:
    from pathlib import Path

LIBRARY = 'tests.examples.library:basket'

FEATURE = '''\
Feature: Basket

  Scenario: Eating
    Given there are 12 cucumbers
    When I eat 5 cucumbers
    Then I should have 7 cucumbers

  @slow
  Scenario: Starving
    Given there are 12 cucumbers
    When I eat 12 cucumbers
    Then I should have 1 cucumbers
'''


@pytest.fixture
def features(tmp_path: 'Path') -> 'Path':
    """Provide a directory holding a feature file."""
    (tmp_path / 'nested').mkdir()
    (tmp_path / 'nested' / 'basket.feature').write_text(FEATURE, encoding='utf-8')
    (tmp_path / 'notes.txt').write_text('Not a feature', encoding='utf-8')

    return tmp_path


def test_run_failed(features: 'Path') -> None:
    """Verify failed scenarios are reported and set the exit code."""
    result = CliRunner().invoke(cli, ['run', '-l', LIBRARY, f'{features}'])

    assert result.exit_code == 1
    assert 'PASSED' in result.output
    assert 'FAILED' in result.output
    assert '0 cucumbers left' in result.output
    assert result.output.splitlines()[-1] == '2 scenario(s): 1 passed, 1 failed, 0 skipped'


def test_run_passed(features: 'Path') -> None:
    """Verify ignored tags skip scenarios and a passing suite exits with zero."""
    path = features / 'nested' / 'basket.feature'
    result = CliRunner().invoke(cli, ['run', '-l', LIBRARY, '-i', '@slow', '--parallel', f'{path}'])

    assert result.exit_code == 0, result.output
    assert f'SKIPPED  {path}:9 Starving' in result.output
    assert result.output.splitlines()[-1] == '2 scenario(s): 1 passed, 0 failed, 1 skipped'


def test_run_included_tags(features: 'Path') -> None:
    """Verify included tags select scenarios."""
    result = CliRunner().invoke(cli, ['run', '-l', LIBRARY, '-t', '@slow', f'{features}'])

    assert result.exit_code == 1
    assert result.output.splitlines()[-1] == '2 scenario(s): 0 passed, 1 failed, 1 skipped'


def test_run_invalid_tag(features: 'Path') -> None:
    """Verify malformed tags are reported as usage errors."""
    result = CliRunner().invoke(cli, ['run', '-l', LIBRARY, '-t', 'slow', f'{features}'])

    assert result.exit_code == 1
    assert 'Invalid options' in result.output


def test_run_missing_library(features: 'Path') -> None:
    """Verify step library failures abort the run."""
    result = CliRunner().invoke(cli, ['run', '-l', 'tests.missing:basket', f'{features}'])

    assert result.exit_code == 1
    assert "Failed to load entrypoint 'tests.missing:basket'" in result.output


def test_run_relaxed(features: 'Path') -> None:
    """Verify relaxed mode continues without a broken library."""
    result = CliRunner().invoke(cli, ['run', '--relaxed', '-l', 'tests.missing:basket', f'{features}'])

    assert result.exit_code == 1
    assert 'Cannot find step definition for step: there are 12 cucumbers' in result.output


def test_run_invalid_document(tmp_path: 'Path') -> None:
    """Verify unparsable feature files abort the run."""
    path = tmp_path / 'broken.feature'
    path.write_text('Scenario: Orphan\n', encoding='utf-8')

    result = CliRunner().invoke(cli, ['run', f'{path}'])

    assert result.exit_code == 1
    assert f'in "{path}", line 1' in result.output


def test_steps() -> None:
    """Verify registered step patterns are listed."""
    result = CliRunner().invoke(cli, ['steps', '-l', LIBRARY])

    assert result.exit_code == 0
    assert 'there are {int} cucumbers\tthere are ([-+]?\\d+) cucumbers' in result.output
    assert 'cucumbers are {color}\tcucumbers are (green|yellow)' in result.output
