"""Execution context shared by steps and hooks.

This module defines the mutable carrier passed as the first argument to
every step function and lifecycle hook within one scenario execution.
"""

from copy import deepcopy
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pytest_cuke.schema.documents import Scenario, Step


class Context(dict[str, Any]):
    """Execution context of a single scenario.

    The context acts as a mapping of cross-step state: values stored by
    one step are observed by subsequent steps and hooks of the same
    scenario. Besides the mapping, it exposes the executing scenario, the
    executing step (with its doc string and data table), and an optional
    deadline.

    The engine never enforces the deadline; honoring it is the
    responsibility of step functions.
    """

    def __init__(self, *args: Any, deadline: datetime | None = None,  # noqa: ANN401
                 **kwargs: Any) -> None:  # noqa: ANN401
        """Initialize a context.

        Args:
            *args: Positional arguments accepted by `dict`.
            deadline: Optional moment after which the scenario is expired.
            **kwargs: Keyword arguments accepted by `dict`.
        """
        super().__init__(*args, **kwargs)

        self.deadline = deadline
        self.scenario: Scenario | None = None
        self.step: Step | None = None

    @property
    def expired(self) -> bool:
        """Check whether the deadline has passed."""
        if self.deadline is None:
            return False

        return datetime.now(UTC) >= self.deadline

    def isolate(self) -> 'Context':
        """Create an independent deep copy of the context values.

        Returns:
            A new context sharing no mutable state with this one.
        """
        return Context(deepcopy(dict(self)), deadline=self.deadline)
