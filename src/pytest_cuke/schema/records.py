"""Execution records for steps, scenarios, and suites.

Records are created per step invocation and per scenario execution and
are exposed to reporting collaborators (the pytest integration or the
command-line summary). A record transitions exactly once from "not yet
executed" through "running" to a terminal result and never reverts.
"""

from datetime import UTC, datetime, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING, Self

from pydantic import Field

from pytest_cuke.models import RecordModel
from pytest_cuke.schema.documents import Location

if TYPE_CHECKING:
    from pytest_cuke.schema.documents import Step


class Result(StrEnum):
    """Terminal result of a step or a scenario."""

    PASSED = 'passed'
    FAILED = 'failed'
    SKIPPED = 'skipped'


def _now() -> datetime:
    return datetime.now(UTC)


class ExecutionRecord(RecordModel):
    """Execution state shared by step and scenario records.

    The record is `pending` until started, `running` until finished,
    and holds exactly one terminal result afterwards.
    """

    result: Result | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    error: Exception | None = None

    @property
    def pending(self) -> bool:
        """Check whether the record was not started yet."""
        return self.started_at is None and self.result is None

    @property
    def running(self) -> bool:
        """Check whether the record is started but not finished."""
        return self.started_at is not None and self.result is None

    @property
    def duration(self) -> timedelta:
        """Return the execution time, zero if not finished."""
        if self.started_at is None or self.finished_at is None:
            return timedelta(0)

        return self.finished_at - self.started_at

    def start(self) -> None:
        """Transition from pending to running.

        Raises:
            RuntimeError: If the record was already started or finished.
        """
        if not self.pending:
            raise RuntimeError('Record is already started')

        self.started_at = _now()

    def complete(self, result: Result, error: Exception | None = None) -> None:
        """Transition from running to a terminal result.

        The finish time never precedes the start time, even if the wall
        clock was adjusted during execution.

        Args:
            result: Terminal result.
            error: Failure cause for failed records.

        Raises:
            RuntimeError: If the record is not running.
        """
        if not self.running or self.started_at is None:
            raise RuntimeError('Record is not running')

        self.finished_at = max(_now(), self.started_at)
        self.result = result
        self.error = error

    def skip(self) -> None:
        """Transition from pending directly to skipped.

        Raises:
            RuntimeError: If the record was already started or finished.
        """
        self.start()
        self.complete(Result.SKIPPED)


class StepRecord(ExecutionRecord):
    """Execution record of a single step."""

    keyword: str = ''
    text: str
    location: Location = Field(default_factory=Location)

    @classmethod
    def from_step(cls, step: 'Step') -> Self:
        """Create a pending record for a step.

        Args:
            step: Step to record.

        Returns:
            A pending step record.
        """
        return cls(
            keyword=step.keyword,
            text=step.text,
            location=step.location,
        )

    def finish(self, error: Exception | None = None) -> None:
        """Complete the step as passed, or failed if an error is given.

        Args:
            error: Failure cause, if any.
        """
        self.complete(Result.FAILED if error is not None else Result.PASSED, error)


class ScenarioRecord(ExecutionRecord):
    """Execution record of a scenario and its executed steps.

    Steps never reached because an earlier step failed have no record.
    """

    name: str = ''
    filename: str | None = None
    location: Location = Field(default_factory=Location)
    tags: frozenset[str] = frozenset()
    steps: list[StepRecord] = Field(default_factory=list)

    @property
    def verdict(self) -> Result | None:
        """Derive the scenario result from its executed steps.

        Returns:
            `None` while pending, `passed` if every executed step passed
            and no hook failed, otherwise `failed`. Skipped scenarios keep
            their explicit result.
        """
        if self.result is Result.SKIPPED:
            return Result.SKIPPED

        if self.pending:
            return None

        if self.error is not None:
            return Result.FAILED

        if all(step.result is Result.PASSED for step in self.steps):
            return Result.PASSED

        return Result.FAILED

    @property
    def failure(self) -> Exception | None:
        """Return the first failure cause of the scenario, if any."""
        for step in self.steps:
            if step.error is not None:
                return step.error

        return self.error

    def fail(self, error: Exception) -> None:
        """Attach a scenario-level failure (for example, a hook error).

        The first scenario-level failure is kept.

        Args:
            error: Failure cause.
        """
        if self.error is None:
            self.error = error

    def finish(self) -> None:
        """Complete the scenario with its derived verdict."""
        if self.error is not None or any(step.result is not Result.PASSED for step in self.steps):
            self.complete(Result.FAILED, self.error)
        else:
            self.complete(Result.PASSED)


class SuiteReport(RecordModel):
    """Aggregated results of a suite run in document order."""

    scenarios: list[ScenarioRecord] = Field(default_factory=list)

    def by_result(self, result: Result) -> list[ScenarioRecord]:
        """Return scenario records with the given result."""
        return [
            scenario
            for scenario in self.scenarios
            if scenario.result is result
        ]

    @property
    def passed(self) -> list[ScenarioRecord]:
        """Passed scenarios."""
        return self.by_result(Result.PASSED)

    @property
    def failed(self) -> list[ScenarioRecord]:
        """Failed scenarios."""
        return self.by_result(Result.FAILED)

    @property
    def skipped(self) -> list[ScenarioRecord]:
        """Scenarios excluded by tag filtering."""
        return self.by_result(Result.SKIPPED)

    @property
    def executed(self) -> list[ScenarioRecord]:
        """Scenarios that reached the scenario runner."""
        return [
            scenario
            for scenario in self.scenarios
            if scenario.result is not Result.SKIPPED
        ]

    @property
    def result(self) -> Result:
        """Overall suite result: failed if any scenario failed."""
        if self.failed:
            return Result.FAILED

        return Result.PASSED

    @property
    def exit_code(self) -> int:
        """Process exit code reflecting the suite result."""
        return 1 if self.failed else 0
