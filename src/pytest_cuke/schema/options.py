"""Suite options, lifecycle hooks, and runtime settings.

Suite options are an immutable configuration snapshot taken before the
run starts: tag filters, ordered lifecycle hooks, parallelism, and the
initial execution context. Runtime settings resolve the same options from
`CUKE_*` environment variables.
"""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Annotated, Any, Self

from pydantic import Field, PositiveFloat, PositiveInt, field_validator
from pydantic_settings import NoDecode, SettingsConfigDict

from pytest_cuke.context import Context
from pytest_cuke.models import SchemaModel, SettingsModel
from pytest_cuke.names import Tag  # noqa: TC001

if TYPE_CHECKING:
    from collections.abc import Iterable

#: A lifecycle hook receives the execution context of the scenario.
type Hook = Callable[[Context], Any]

#: A step function receives the context followed by converted arguments.
#: Its return value is ignored; failures are signalled by raising.
type StepRunner = Callable[..., Any]


class Hooks(SchemaModel):
    """Ordered lifecycle hooks.

    Each list is invoked in registration order. Hooks never run
    concurrently with the steps or scenarios they bracket.
    """

    before_scenario: tuple[Hook, ...] = Field(
        default=(),
        title='Before scenario hooks',
        description='Hooks invoked before the first step of every scenario.',
    )
    after_scenario: tuple[Hook, ...] = Field(
        default=(),
        title='After scenario hooks',
        description=(
            'Hooks invoked after every scenario, even if a step or '
            'another hook failed.'
        ),
    )
    before_step: tuple[Hook, ...] = Field(
        default=(),
        title='Before step hooks',
        description='Hooks invoked before every step.',
    )
    after_step: tuple[Hook, ...] = Field(
        default=(),
        title='After step hooks',
        description='Hooks invoked after every executed step.',
    )

    def merge(self, *others: 'Hooks') -> 'Hooks':
        """Concatenate hooks, keeping this instance first.

        Args:
            *others: Hooks appended after the hooks of this instance.

        Returns:
            New hooks with combined lists.
        """
        merged = self
        for other in others:
            merged = Hooks(
                before_scenario=(*merged.before_scenario, *other.before_scenario),
                after_scenario=(*merged.after_scenario, *other.after_scenario),
                before_step=(*merged.before_step, *other.before_step),
                after_step=(*merged.after_step, *other.after_step),
            )

        return merged

    def __bool__(self) -> bool:
        return any((
            self.before_scenario,
            self.after_scenario,
            self.before_step,
            self.after_step,
        ))


def _split(value: Any) -> Any:  # noqa: ANN401
    """Split comma-separated environment values into lists."""
    if isinstance(value, str):
        return [item.strip() for item in value.split(',') if item.strip()]

    return value


class CukeSettings(SettingsModel):
    """Runtime settings resolved from `CUKE_*` environment variables.

    List values are given as comma-separated strings, for example
    `CUKE_IGNORE_TAGS=@slow,@wip`.
    """

    model_config = SettingsConfigDict(
        env_prefix='CUKE_',
        frozen=True,
        extra='ignore',
    )

    tags: Annotated[list[Tag], NoDecode] = Field(
        default_factory=list,
        title='Included tags',
        description='Run only scenarios carrying at least one of these tags.',
    )
    ignore_tags: Annotated[list[Tag], NoDecode] = Field(
        default_factory=list,
        title='Excluded tags',
        description='Never run features, rules, or scenarios carrying these tags.',
    )
    libraries: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        title='Step libraries',
        description='Step library import paths in the `module:attribute` form.',
    )

    parallel: bool = Field(
        default=False,
        title='Parallel mode',
        description='Run independent scenarios concurrently.',
    )
    workers: PositiveInt | None = Field(
        default=None,
        title='Worker threads',
        description='Maximum number of worker threads in parallel mode.',
    )
    timeout: PositiveFloat | None = Field(
        default=None,
        title='Scenario timeout',
        description=(
            'Seconds after which the context deadline of a scenario '
            'expires. The deadline is informative only.'
        ),
    )

    strict: bool = Field(
        default=True,
        title='Strict mode',
        description='Fail on step library issues instead of emitting warnings.',
    )
    combinatorial: bool = Field(
        default=False,
        title='Combinatorial templates',
        description=(
            'Expand patterns holding several parameter types into the '
            'cross-product of their fragments.'
        ),
    )

    @field_validator('tags', 'ignore_tags', 'libraries', mode='before')
    @classmethod
    def split_lists(cls, value: Any) -> Any:  # noqa: ANN401
        """Accept comma-separated strings for list settings."""
        return _split(value)


class SuiteOptions(SchemaModel):
    """Immutable configuration snapshot of a suite run."""

    tags: frozenset[Tag] = Field(
        default=frozenset(),
        title='Included tags',
        description=(
            'If not empty, only scenarios carrying at least one of these '
            'tags are executed.'
        ),
    )
    ignore_tags: frozenset[Tag] = Field(
        default=frozenset(),
        title='Excluded tags',
        description=(
            'Features, rules, and scenarios carrying any of these tags are '
            'never executed. Exclusion takes precedence over inclusion.'
        ),
    )
    hooks: Hooks = Field(
        default_factory=Hooks,
        title='Lifecycle hooks',
        description='Ordered hooks invoked around scenarios and steps.',
    )
    parallel: bool = Field(
        default=False,
        title='Parallel mode',
        description=(
            'Run independent scenarios concurrently in worker threads. '
            'Steps within a scenario always run in order.'
        ),
    )
    workers: PositiveInt | None = Field(
        default=None,
        title='Worker threads',
        description='Maximum number of worker threads in parallel mode.',
    )
    timeout: PositiveFloat | None = Field(
        default=None,
        title='Scenario timeout',
        description='Seconds until the context deadline of each scenario.',
    )
    context: dict[str, Any] = Field(
        default_factory=dict,
        title='Initial context',
        description=(
            'Values copied into the execution context of every scenario. '
            'Each scenario receives its own deep copy.'
        ),
    )

    @classmethod
    def from_settings(cls, settings: CukeSettings | None = None, **overrides: Any) -> Self:  # noqa: ANN401
        """Build suite options from runtime settings.

        Args:
            settings: Resolved settings; read from the environment if omitted.
            **overrides: Option values taking precedence over settings.

        Returns:
            Suite options.
        """
        if settings is None:
            settings = CukeSettings()

        return cls.model_validate({
            'tags': settings.tags,
            'ignore_tags': settings.ignore_tags,
            'parallel': settings.parallel,
            'workers': settings.workers,
            'timeout': settings.timeout,
            **overrides,
        })

    def excludes(self, tags: 'Iterable[str]') -> bool:
        """Check whether an element carries an excluded tag."""
        return not self.ignore_tags.isdisjoint(tags)

    def selects(self, tags: 'Iterable[str]') -> bool:
        """Check whether a scenario passes the tag filters.

        Args:
            tags: Tags carried by the scenario.

        Returns:
            `False` if any tag is excluded, or if an inclusion set is
            configured and none of the tags is included.
        """
        tags = frozenset(tags)

        if self.excludes(tags):
            return False

        if not self.tags:
            return True

        return not self.tags.isdisjoint(tags)

    def make_context(self) -> Context:
        """Create an isolated execution context for one scenario."""
        deadline = None
        if self.timeout is not None:
            deadline = datetime.now(UTC) + timedelta(seconds=self.timeout)

        return Context(self.context, deadline=deadline).isolate()
