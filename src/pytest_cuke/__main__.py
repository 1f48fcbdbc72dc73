"""CLI utilities for running Gherkin feature files without pytest.

The `run` command executes feature files against step libraries and
prints a plain-text summary; its exit code reflects the suite result.
The `steps` command lists registered step patterns.
"""

from pathlib import Path
from typing import TYPE_CHECKING

from click import Path as PathParam
from click import ClickException, argument, echo, group, option, pass_context
from pydantic import ValidationError

from pytest_cuke.core import StepRegistry, SuiteRunner
from pytest_cuke.errors import CukeError
from pytest_cuke.schema import CukeSettings, Result, SuiteOptions

if TYPE_CHECKING:
    from click import Context as ClickContext

if TYPE_CHECKING:
    from pytest_cuke.schema import ScenarioRecord, SuiteReport

FeaturePath = PathParam(
    exists=True,
    dir_okay=True,
    readable=True,
    path_type=Path,
)


def _build_registry(libraries: tuple[str, ...], *, relaxed: bool,
                    settings: CukeSettings) -> StepRegistry:
    """Build a registry and load step libraries into it.

    Raises:
        ClickException: If a step library can not be loaded.
    """
    registry = StepRegistry(
        strict=settings.strict and not relaxed,
        combinatorial=settings.combinatorial,
    )

    try:
        registry.load_libraries(*settings.libraries, *libraries)
    except CukeError as error:
        raise ClickException(f'{error}') from error

    return registry


def _collect_features(paths: tuple[Path, ...]) -> list[Path]:
    """Expand directories into the feature files they hold, sorted by path."""
    features: list[Path] = []
    for path in paths:
        if path.is_dir():
            features.extend(sorted(path.rglob('*.feature')))
        else:
            features.append(path)

    return features


def _format_scenario(scenario: 'ScenarioRecord') -> str:
    """Format a one-line scenario summary."""
    location = f'{scenario.filename or '<unicode string>'}:{scenario.location.line}'
    mark = f'{scenario.result or 'pending'}'.upper()

    return f'{mark:<8} {location} {scenario.name}'


def _format_report(report: 'SuiteReport') -> str:
    """Format the suite summary line."""
    return (
        f'{len(report.scenarios)} scenario(s): '
        f'{len(report.passed)} passed, '
        f'{len(report.failed)} failed, '
        f'{len(report.skipped)} skipped'
    )


@group(help='Command-line utilities for pytest-cuke feature files.')
@pass_context
def cli(context: 'ClickContext') -> None:
    """Root CLI group for pytest-cuke tools."""
    context.ensure_object(dict)
    context.obj.setdefault('settings', CukeSettings())


@cli.command(
    name='run',
    help='Execute feature files and print a summary of scenario results.',
)
@option(
    '-l', '--library', 'libraries',
    multiple=True,
    help='Step library to load, in the `module:attribute` form.',
)
@option(
    '-t', '--tag', 'tags',
    multiple=True,
    help='Run only scenarios carrying at least one of these tags.',
)
@option(
    '-i', '--ignore-tag', 'ignore_tags',
    multiple=True,
    help='Skip features, rules, and scenarios carrying any of these tags.',
)
@option(
    '--parallel/--sequential',
    default=None,
    help='Run independent scenarios concurrently.',
)
@option(
    '--workers',
    type=int,
    default=None,
    help='Maximum number of worker threads in parallel mode.',
)
@option(
    '--relaxed',
    is_flag=True,
    default=False,
    help='Emit warnings instead of failing on step library issues.',
)
@argument(
    'paths',
    nargs=-1,
    required=True,
    type=FeaturePath,
)
@pass_context
def run_features(context: 'ClickContext', paths: tuple[Path, ...],  # noqa: PLR0913
                 libraries: tuple[str, ...], tags: tuple[str, ...],
                 ignore_tags: tuple[str, ...], parallel: bool | None,
                 workers: int | None, relaxed: bool) -> None:
    """Execute feature files.

    Args:
        context: Click context holding resolved settings.
        paths: Feature files or directories holding them.
        libraries: Step libraries to load.
        tags: Included tags.
        ignore_tags: Excluded tags.
        parallel: Whether to run scenarios concurrently.
        workers: Maximum number of worker threads.
        relaxed: Whether step library issues are warnings.
    """
    settings: CukeSettings = context.obj['settings']
    registry = _build_registry(libraries, relaxed=relaxed, settings=settings)

    overrides: dict[str, object] = {}
    if tags:
        overrides['tags'] = tags
    if ignore_tags:
        overrides['ignore_tags'] = ignore_tags
    if parallel is not None:
        overrides['parallel'] = parallel
    if workers is not None:
        overrides['workers'] = workers

    try:
        options = SuiteOptions.from_settings(settings, **overrides)
    except ValidationError as error:
        raise ClickException(f'Invalid options: {error}') from error

    suite = SuiteRunner(registry, options)

    try:
        report = suite.run(_collect_features(paths))
    except CukeError as error:
        raise ClickException(f'{error}') from error

    for scenario in report.scenarios:
        echo(_format_scenario(scenario))
        if scenario.result is Result.FAILED and (failure := scenario.failure) is not None:
            echo(f'    {failure!s}'.rstrip())

    echo(_format_report(report))

    context.exit(report.exit_code)


@cli.command(
    name='steps',
    help='List step patterns registered by step libraries.',
)
@option(
    '-l', '--library', 'libraries',
    multiple=True,
    help='Step library to load, in the `module:attribute` form.',
)
@option(
    '--relaxed',
    is_flag=True,
    default=False,
    help='Emit warnings instead of failing on step library issues.',
)
@pass_context
def list_steps(context: 'ClickContext', libraries: tuple[str, ...], relaxed: bool) -> None:
    """Print registered step patterns, one expanded variant per line.

    Args:
        context: Click context holding resolved settings.
        libraries: Step libraries to load.
        relaxed: Whether step library issues are warnings.
    """
    registry = _build_registry(libraries, relaxed=relaxed, settings=context.obj['settings'])

    for definition in registry.definitions:
        echo(f'{definition.source}\t{definition.pattern.pattern}')


if __name__ == '__main__':
    cli()
