"""Pytest item executing a single scenario.

This module bridges scenario records to pytest outcomes: a passed
scenario passes the item, a failed scenario raises its first failure.
Assertion failures raised by step functions are re-raised as
`AssertionError` enriched with the scenario and step location.
"""

from typing import TYPE_CHECKING

import pytest

from pytest_cuke.errors import CukeError, ErrorContext
from pytest_cuke.schema.records import Result

if TYPE_CHECKING:
    from typing import Any

if TYPE_CHECKING:
    from pytest_cuke.core import ScenarioPlan
    from pytest_cuke.schema.records import ScenarioRecord, StepRecord


class ScenarioItem(pytest.Item):
    """Pytest item executing a single scenario plan.

    Every execution receives an isolated context built from the suite
    options.
    """

    def __init__(self, *, plan: 'ScenarioPlan', **kwargs: 'Any') -> None:
        """Initialize a pytest item backed by a scenario plan.

        Args:
            plan: Scenario plan to execute.
            **kwargs: Keyword pytest.Item arguments.
        """
        super().__init__(**kwargs)

        self.plan = plan
        self.record: ScenarioRecord | None = None

    def runtest(self) -> None:
        """Execute the scenario and raise its failure, if any."""
        self.record = self.config.cuke_suite.run_plan(self.plan)  # type: ignore[attr-defined]
        if self.record.result is not Result.FAILED:
            return

        failure = self.record.failure
        if isinstance(failure, AssertionError):
            raise self.make_failure(failure, self.record) from failure

        if failure is not None:
            raise failure

        raise AssertionError(f'Scenario {self.plan.name!r} failed')

    def make_failure(self, failure: AssertionError, record: 'ScenarioRecord') -> AssertionError:
        """Create an AssertionError enriched with scenario context.

        Args:
            failure: Assertion raised by a step function.
            record: Record of the failed scenario.

        Returns:
            AssertionError with formatted location message.
        """
        step_num, step = self._failed_step(record)

        error_context = ErrorContext(
            filename=self.plan.filename,
            scenario=self.plan.name,
            step_num=step_num,
        )
        if step is not None:
            error_context['line_num'] = step.location.line
            error_context['column_num'] = step.location.column
            error_context['step'] = f'{step.keyword}{step.text}'

        message = 'Step assertion fail'
        if details := f'{failure}':
            message += f': {details}'

        return AssertionError(CukeError.format(message, error_context))

    @staticmethod
    def _failed_step(record: 'ScenarioRecord') -> tuple[int | None, 'StepRecord | None']:
        for step_num, step in enumerate(record.steps):
            if step.result is Result.FAILED:
                return step_num, step

        return None, None

    def reportinfo(self) -> tuple['Any', int | None, str]:
        """Return the scenario location for pytest reports."""
        return self.path, max(self.plan.location.line - 1, 0), f'scenario: {self.plan.name}'
