"""Declarative step library definition.

This module defines the top-level declarative container used to describe
step definitions provided by a pytest-cuke step library.

A step library aggregates:
- parameter types (placeholder tokens usable in step patterns),
- step declarations (patterns bound to step functions),
- and lifecycle hooks.

The library model itself is purely declarative. It contains no execution
logic and is consumed by the library loader during initialization to
register everything it provides into the step registry.
"""

from pydantic import Field

from pytest_cuke.models import SchemaModel
from pytest_cuke.names import Variable  # noqa: TC001
from pytest_cuke.schema.options import Hooks

from .parameters import ParameterType
from .steps import StepDeclaration

__all__ = (
    'Hooks',
    'ParameterType',
    'StepDeclaration',
    'StepLibrary',
)


class StepLibrary(SchemaModel):
    """Declarative container for step library extensions.

    Parameter types of a library are registered before its steps, so the
    steps of a library may use the tokens it declares.

    All contained elements are optional, allowing libraries to provide
    only hooks or only parameter types.
    """

    name: Variable = Field(
        title='Library name',
        description=(
            'Logical name of the library. '
            'Used for identification, diagnostics, and conflict detection. '
            'Typically corresponds to the library package or domain name.'
        ),
    )

    parameter_types: list[ParameterType] = Field(
        default_factory=list,
        title='Parameter types',
        description=(
            'Placeholder tokens and their regular expression fragments. '
            'Registered before the steps of the library.'
        ),
    )

    steps: list[StepDeclaration] = Field(
        default_factory=list,
        title='Steps',
        description=(
            'Step declarations provided by the library, in registration order. '
            'On equal match counts the earlier registered step wins.'
        ),
    )

    hooks: Hooks = Field(
        default_factory=Hooks,
        title='Lifecycle hooks',
        description=(
            'Hooks invoked around scenarios and steps. Appended after the '
            'hooks already registered.'
        ),
    )
