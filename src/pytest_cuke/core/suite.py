"""Suite execution.

The suite runner walks features, rules, and scenarios in document order,
applies tag filtering, and drives the scenario runner either sequentially
or in a pool of worker threads. Results are aggregated into a report in
document order, regardless of the execution mode.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from os import PathLike, fspath
from typing import TYPE_CHECKING

from pytest_cuke.core.parser import DocumentParser
from pytest_cuke.core.runner import ScenarioPlan, ScenarioRunner
from pytest_cuke.schema.documents import Document, Feature
from pytest_cuke.schema.options import SuiteOptions
from pytest_cuke.schema.records import SuiteReport

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

if TYPE_CHECKING:
    from pytest_cuke.core.registry import StepRegistry
    from pytest_cuke.schema.documents import Rule, Scenario
    from pytest_cuke.schema.records import ScenarioRecord

#: A suite source: a parsed feature or document, or a feature file path.
type Source = Feature | Document | str | PathLike[str]

logger = logging.getLogger(__name__)


class SuiteRunner:
    """Runner executing features against a step registry.

    The registry is frozen before the first scenario runs.

    Attributes:
        registry: Step registry resolving steps.
        options: Configuration snapshot of the run.
        parser: Parser used for sources given as file paths.
    """

    def __init__(self, registry: 'StepRegistry', options: SuiteOptions | None = None, *,
                 parser: DocumentParser | None = None) -> None:
        """Initialize a suite runner.

        Args:
            registry: Step registry resolving steps.
            options: Configuration snapshot; defaults are used if omitted.
            parser: Document parser; an English parser if omitted.
        """
        self.registry = registry
        self.options = options or SuiteOptions()
        self.parser = parser or DocumentParser()

        self._runner: ScenarioRunner | None = None

    def freeze(self) -> ScenarioRunner:
        """Freeze the registry and build the scenario runner.

        Hooks from the suite options are invoked before registry hooks.
        Freezing is idempotent.
        """
        if self._runner is None:
            self.registry.freeze()
            self._runner = ScenarioRunner(
                self.registry,
                self.options.hooks.merge(self.registry.hooks),
            )

        return self._runner

    @property
    def runner(self) -> ScenarioRunner:
        """Return the scenario runner, freezing the registry on first use."""
        return self._runner or self.freeze()

    def load(self, source: Source) -> tuple[Feature | None, str | None]:
        """Resolve a source into a feature and its file name.

        Raises:
            DocumentError: If a feature file can not be parsed.
        """
        if isinstance(source, Feature):
            return source, None

        if isinstance(source, Document):
            return source.feature, source.uri

        filename = fspath(source)

        return self.parser.parse_file(filename), filename

    def plan(self, feature: Feature, filename: str | None = None) -> 'Iterator[ScenarioPlan]':
        """Plan every scenario of a feature in document order.

        A feature or rule carrying an excluded tag excludes all of its
        scenarios. Other scenarios are filtered by their own tags.

        Args:
            feature: Feature to plan.
            filename: Feature file name.

        Yields:
            Scenario plans, flagged as excluded when filtered out.
        """
        feature_excluded = self.options.excludes(feature.tag_names)

        for child in feature.children:
            if child.scenario is not None:
                yield self._plan(feature, child.scenario, filename=filename,
                                 excluded=feature_excluded)

            if (rule := child.rule) is not None:
                rule_excluded = feature_excluded or self.options.excludes(rule.tag_names)
                for scenario in rule.scenarios:
                    yield self._plan(feature, scenario, rule=rule, filename=filename,
                                     excluded=rule_excluded)

    def _plan(self, feature: Feature, scenario: 'Scenario', *,
              rule: 'Rule | None' = None,
              filename: str | None = None,
              excluded: bool = False) -> ScenarioPlan:
        return ScenarioPlan(
            feature=feature,
            rule=rule,
            scenario=scenario,
            filename=filename,
            excluded=excluded or not self.options.selects(scenario.tag_names),
        )

    def run_plan(self, plan: ScenarioPlan) -> 'ScenarioRecord':
        """Execute a scenario plan with an isolated context."""
        return self.runner.run(plan, self.options.make_context())

    def run(self, sources: 'Iterable[Source]') -> SuiteReport:
        """Execute every scenario of the given sources.

        Args:
            sources: Parsed features or documents, or feature file paths.

        Returns:
            The suite report in document order.

        Raises:
            DocumentError: If a feature file can not be parsed.
        """
        self.freeze()

        plans = []
        for source in sources:
            feature, filename = self.load(source)
            if feature is not None:
                plans.extend(self.plan(feature, filename))

        logger.info('Running %d scenario(s)', len(plans))

        if self.options.parallel:
            with ThreadPoolExecutor(max_workers=self.options.workers) as executor:
                records = list(executor.map(self.run_plan, plans))
        else:
            records = [self.run_plan(plan) for plan in plans]

        report = SuiteReport(scenarios=records)
        logger.info(
            'Suite %s: %d passed, %d failed, %d skipped',
            report.result, len(report.passed), len(report.failed), len(report.skipped),
        )

        return report
