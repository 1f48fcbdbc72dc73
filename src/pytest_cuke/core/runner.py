"""Scenario execution state machine.

This module defines the executable plan of a single scenario and the
runner driving it through its lifecycle:

- `before scenario` hooks,
- feature and rule background steps,
- literal steps, or steps expanded from outline example tables,
- `before step` and `after step` hooks around every step,
- `after scenario` hooks, invoked even if anything above failed.

Execution halts at the first step that does not pass. Failures are
recorded on the narrowest record (step or scenario) and never escape the
runner, except for interpreter-level exceptions such as
`KeyboardInterrupt`.
"""

import logging
from typing import TYPE_CHECKING

from pydantic import Field

from pytest_cuke.context import Context
from pytest_cuke.core.outlines import OutlineExpander, PlannedStep
from pytest_cuke.errors import CukeError, HookError, StepFaultError, StepResolutionError
from pytest_cuke.models import SchemaModel
from pytest_cuke.schema.documents import Background, Feature, Rule, Scenario, Step  # noqa: TC001
from pytest_cuke.schema.options import Hooks
from pytest_cuke.schema.records import Result, ScenarioRecord, StepRecord

if TYPE_CHECKING:
    from collections.abc import Iterable

if TYPE_CHECKING:
    from pytest_cuke.core.definitions import StepDefinition
    from pytest_cuke.core.matcher import MatcherMixin
    from pytest_cuke.schema.documents import Location
    from pytest_cuke.schema.options import Hook

logger = logging.getLogger(__name__)


class ScenarioPlan(SchemaModel):
    """Executable plan of a single scenario within its feature."""

    feature: Feature = Field(
        title='Feature',
        description='Feature holding the scenario.',
    )
    rule: Rule | None = Field(
        default=None,
        title='Rule',
        description='Rule holding the scenario, if any.',
    )
    scenario: Scenario = Field(
        title='Scenario',
        description='Scenario or scenario outline to execute.',
    )
    filename: str | None = Field(
        default=None,
        title='Feature file name',
        description='Name of the feature file, used in reports and errors.',
    )
    excluded: bool = Field(
        default=False,
        title='Excluded flag',
        description='Whether the scenario is excluded by tag filtering.',
    )

    @property
    def name(self) -> str:
        """Return the scenario name."""
        return self.scenario.name

    @property
    def location(self) -> 'Location':
        """Return the scenario location."""
        return self.scenario.location

    @property
    def tags(self) -> frozenset[str]:
        """Return scenario tags together with rule and feature tags."""
        tags = self.feature.tag_names | self.scenario.tag_names
        if self.rule is not None:
            tags |= self.rule.tag_names

        return tags

    @property
    def backgrounds(self) -> tuple[Background, ...]:
        """Return backgrounds applying to the scenario, feature first."""
        backgrounds = [self.feature.background]
        if self.rule is not None:
            backgrounds.append(self.rule.background)

        return tuple(
            background
            for background in backgrounds
            if background is not None
        )

    @property
    def background_steps(self) -> tuple[Step, ...]:
        """Return background steps in execution order."""
        return tuple(
            step
            for background in self.backgrounds
            for step in background.steps
        )


class ScenarioRunner:
    """Runner executing scenario plans against a frozen registry.

    The runner holds no per-scenario state and may execute several plans
    concurrently, each with its own context.
    """

    def __init__(self, matcher: 'MatcherMixin', hooks: Hooks | None = None) -> None:
        """Initialize a scenario runner.

        Args:
            matcher: Registry used to resolve steps.
            hooks: Lifecycle hooks invoked around scenarios and steps.
        """
        self.matcher = matcher
        self.hooks = hooks or Hooks()
        self.expander = OutlineExpander(matcher)

    def run_hooks(self, stage: str, hooks: 'Iterable[Hook]',
                  context: Context) -> HookError | None:
        """Invoke every hook of a lifecycle stage exactly once.

        A failing hook does not prevent the following ones from running.

        Args:
            stage: Lifecycle stage name used in messages.
            hooks: Hooks in invocation order.
            context: Execution context passed to every hook.

        Returns:
            The error of the first failing hook, or `None`.
        """
        failure: HookError | None = None

        for hook in hooks:
            try:
                hook(context)

            except Exception as base:
                name = getattr(hook, '__qualname__', repr(hook))
                if failure is not None:
                    logger.error('Hook %s (%s) failed after an earlier failure: %r', name, stage, base)
                    continue

                failure = HookError(f'Hook {name} failed ({stage}): {base!r}', stage=stage)
                failure.__cause__ = base

        return failure

    def invoke(self, plan: ScenarioPlan, step: Step, context: Context, *,
               definition: 'StepDefinition | None' = None,
               step_num: int | None = None) -> Exception | None:
        """Resolve and execute a single step.

        Args:
            plan: Plan of the executed scenario.
            step: Step to execute.
            context: Execution context.
            definition: Definition bound at expansion time, if any.
            step_num: Position of the step within the scenario.

        Returns:
            The failure cause, or `None` if the step passed.
        """
        try:
            if definition is None:
                definition = self.matcher.resolve(
                    step.text,
                    location=step.location,
                    filename=plan.filename,
                )
            definition(context, step.text)

        except (AssertionError, CukeError) as error:
            return error

        except Exception as base:
            logger.warning('Step %r raised an unexpected exception: %r', step.text, base)
            fault = StepFaultError.from_step(
                f'{base!r}',
                step,
                filename=plan.filename,
                scenario=plan.name,
                step_num=step_num,
                values=dict(context),
            )
            fault.__cause__ = base
            return fault

        return None

    def run_step(self, plan: ScenarioPlan, step: Step, context: Context,
                 record: ScenarioRecord, *,
                 definition: 'StepDefinition | None' = None) -> bool:
        """Execute a step with its hooks and record the result.

        Args:
            plan: Plan of the executed scenario.
            step: Step to execute.
            context: Execution context.
            record: Scenario record receiving the step record.
            definition: Definition bound at expansion time, if any.

        Returns:
            True if the step passed.
        """
        step_num = len(record.steps)
        step_record = StepRecord.from_step(step)
        record.steps.append(step_record)

        context.step = step
        step_record.start()

        error = self.run_hooks('before step', self.hooks.before_step, context)
        if error is None:
            error = self.invoke(plan, step, context, definition=definition, step_num=step_num)

        if (after_error := self.run_hooks('after step', self.hooks.after_step, context)) is not None:
            if error is None:
                error = after_error
            else:
                logger.error('After step hooks failed on a failed step %r: %s', step.text, after_error)

        step_record.finish(error)

        return step_record.result is Result.PASSED

    def plan_steps(self, plan: ScenarioPlan) -> list[PlannedStep] | list[Step]:
        """Return the scenario steps, expanding outline example tables.

        Raises:
            StepResolutionError: If an expanded outline step has no definition.
        """
        if plan.scenario.is_outline:
            return self.expander.expand(
                plan.scenario.steps,
                plan.scenario.examples,
                filename=plan.filename,
            )

        return list(plan.scenario.steps)

    def run_steps(self, plan: ScenarioPlan, context: Context,
                  record: ScenarioRecord) -> None:
        """Execute background and scenario steps until one does not pass."""
        try:
            steps = self.plan_steps(plan)
        except StepResolutionError as error:
            step_record = StepRecord.from_step(error.step or plan.scenario.steps[0])
            record.steps.append(step_record)
            step_record.start()
            step_record.finish(error)
            return None

        for step in plan.background_steps:
            if not self.run_step(plan, step, context, record):
                return None

        for item in steps:
            if isinstance(item, PlannedStep):
                passed = self.run_step(plan, item.step, context, record, definition=item.definition)
            else:
                passed = self.run_step(plan, item, context, record)

            if not passed:
                return None

        return None

    def run(self, plan: ScenarioPlan, context: Context | None = None) -> ScenarioRecord:
        """Execute a scenario plan.

        Args:
            plan: Plan of the scenario to execute.
            context: Execution context; a new empty one if omitted.

        Returns:
            The finished scenario record.
        """
        record = ScenarioRecord(
            name=plan.name,
            filename=plan.filename,
            location=plan.location,
            tags=plan.tags,
        )

        if plan.excluded:
            record.skip()
            logger.info('Scenario %r skipped', plan.name)
            return record

        if context is None:
            context = Context()
        context.scenario = plan.scenario

        record.start()
        try:
            if (error := self.run_hooks('before scenario', self.hooks.before_scenario, context)) is not None:
                record.fail(error)
            else:
                self.run_steps(plan, context, record)

        finally:
            if (error := self.run_hooks('after scenario', self.hooks.after_scenario, context)) is not None:
                if record.error is not None or record.verdict is Result.FAILED:
                    logger.error('After scenario hooks failed on a failed scenario %r: %s', plan.name, error)
                record.fail(error)

            context.step = None
            record.finish()

        logger.info('Scenario %r %s', plan.name, record.result)

        return record
