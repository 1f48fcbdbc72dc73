"""Pytest integration for Gherkin feature files.

This module defines a custom pytest file collector that treats feature
files as executable specifications.

Each collected file is parsed using the preconfigured `SuiteRunner` and
converted into one `ScenarioItem` per scenario, including scenarios
nested in rules. Scenario outlines are collected as a single item running
every example row.
"""

from typing import TYPE_CHECKING

import pytest

from .case import ScenarioItem

if TYPE_CHECKING:
    from collections.abc import Iterable

if TYPE_CHECKING:
    from pytest_cuke.core import ScenarioPlan


class FeatureFile(pytest.File):
    """Pytest file collector for feature files.

    Scenarios excluded by tag filtering are collected as skipped items.
    """

    def collect(self) -> 'Iterable[ScenarioItem]':
        """Collect pytest items from a feature file.

        Returns:
            Iterable of `ScenarioItem` instances for pytest execution.

        Raises:
            DocumentError: If the feature file can not be parsed.
        """
        suite = self.config.cuke_suite  # type: ignore[attr-defined]

        feature = suite.parser.parse_file(self.path)
        if feature is None:
            return

        seen: set[str] = set()
        for plan in suite.plan(feature, f'{self.path}'):
            name = self.make_name(plan, seen)
            seen.add(name)

            item = ScenarioItem.from_parent(self, name=name, plan=plan)
            if plan.excluded:
                item.add_marker(pytest.mark.skip(reason='excluded by tags'))

            yield item

    @staticmethod
    def make_name(plan: 'ScenarioPlan', seen: set[str]) -> str:
        """Build a unique item name for a scenario.

        Unnamed scenarios and scenarios sharing a name are told apart by
        their line number.

        Args:
            plan: Scenario plan.
            seen: Names already used in the file.

        Returns:
            Item name.
        """
        name = plan.name or f'line {plan.location.line}'
        if name in seen:
            name = f'{name} [line {plan.location.line}]'

        return name
