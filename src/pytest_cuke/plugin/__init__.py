"""Pytest plugin for collecting and executing Gherkin feature files.

This module integrates the `pytest-cuke` engine with pytest by:
- registering custom command-line and ini options;
- configuring a shared `SuiteRunner` with its step registry;
- collecting `*.feature` files as executable specifications.

Step libraries are loaded from the `cuke_steps` entry point group, from
the `cuke_libraries` ini option, and from the `CUKE_LIBRARIES`
environment variable.
"""

from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from .spec import FeatureFile

if TYPE_CHECKING:
    from pathlib import Path

if TYPE_CHECKING:
    from _pytest.config import Config
    from _pytest.config.argparsing import Parser
    from _pytest.nodes import Node


def _split_tags(values: list[str] | None) -> list[str]:
    """Split repeated and comma-separated tag options."""
    return [
        tag.strip()
        for value in values or ()
        for tag in value.split(',')
        if tag.strip()
    ]


def pytest_addoption(parser: 'Parser') -> None:
    """Register pytest options for pytest-cuke.

    Args:
        parser: Pytest argument parser.
    """
    group = parser.getgroup('cuke', 'Gherkin feature files')
    group.addoption(
        '--cuke-tags',
        action='append',
        dest='cuke_tags',
        default=[],
        help=(
            'Run only scenarios carrying at least one of these tags. '
            'May be repeated or given as a comma-separated list.'
        ),
    )
    group.addoption(
        '--cuke-ignore-tags',
        action='append',
        dest='cuke_ignore_tags',
        default=[],
        help=(
            'Skip features, rules, and scenarios carrying any of these tags. '
            'May be repeated or given as a comma-separated list.'
        ),
    )
    group.addoption(
        '--cuke-relaxed',
        action='store_true',
        dest='cuke_relaxed',
        default=False,
        help=(
            'Disable strict step library loading. '
            'Step shadowing and third-party library loading errors '
            'will emit warnings instead of failing the session.'
        ),
    )

    parser.addini(
        'cuke_libraries',
        type='linelist',
        default=[],
        help='Step libraries to load, in the `module:attribute` form.',
    )
    parser.addini(
        'cuke_language',
        default='en',
        help='Default Gherkin dialect of feature files.',
    )


def pytest_configure(config: 'Config') -> None:
    """Configure pytest-cuke integration.

    This hook builds the step registry, loads step libraries, and
    attaches a shared `SuiteRunner` to the pytest configuration object
    as `config.cuke_suite`.

    Args:
        config: Pytest configuration object.
    """
    from pytest_cuke.core import DocumentParser, StepRegistry, SuiteRunner  # noqa: PLC0415
    from pytest_cuke.schema import CukeSettings, SuiteOptions  # noqa: PLC0415

    settings = CukeSettings()

    registry = StepRegistry(
        strict=settings.strict and not config.getoption('cuke_relaxed', default=False),
        combinatorial=settings.combinatorial,
    )
    registry.load_libraries(
        *settings.libraries,
        *config.getini('cuke_libraries'),
    )

    overrides = {}
    if tags := _split_tags(config.getoption('cuke_tags', default=None)):
        overrides['tags'] = tags
    if ignore_tags := _split_tags(config.getoption('cuke_ignore_tags', default=None)):
        overrides['ignore_tags'] = ignore_tags

    try:
        options = SuiteOptions.from_settings(settings, **overrides)
    except ValidationError as error:
        raise pytest.UsageError(f'Invalid pytest-cuke options: {error}') from error

    config.cuke_suite = SuiteRunner(  # type: ignore[attr-defined]
        registry,
        options,
        parser=DocumentParser(config.getini('cuke_language') or 'en'),
    )


def pytest_collect_file(parent: 'Node', file_path: 'Path') -> FeatureFile | None:
    """Collect Gherkin feature files.

    Files with the `.feature` suffix are treated as executable
    specifications and collected using `FeatureFile`.

    Args:
        parent: Parent pytest collection node.
        file_path: Path to the file being considered.

    Returns:
        A `FeatureFile` collector for feature files, otherwise `None`.
    """
    if file_path.suffix == '.feature':
        return FeatureFile.from_parent(
            parent,
            path=file_path,
        )

    return None
