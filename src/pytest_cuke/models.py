"""Base Pydantic models for engine elements.

This module defines the foundational model classes used by all engine
structures. It enforces immutability so that parsed documents, registered
step definitions and suite options stay deterministic while scenarios are
executed, possibly from several threads at once.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict


class SchemaModel(BaseModel):
    """Base immutable model for engine elements.

    This class serves as the root for all Pydantic models representing
    declarative constructs such as step definitions, step libraries,
    parameter types, and suite options.

    Design principles enforced by this model:
        - Immutability: elements cannot be modified after creation.
          Registries built from them can be shared between worker threads
          without locking.
        - Strict schema validation: unknown or extra fields are rejected
          to avoid silent errors caused by typos.

    All declarative models must inherit from this class.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        frozen=True,
        extra='forbid',
    )


class DocumentModel(BaseModel):
    """Base immutable model for parsed Gherkin documents.

    The document parser produces a tree of plain dictionaries keyed in
    camelCase. Models derived from this class accept those keys as
    aliases while exposing snake_case attributes, and ignore the fields
    the engine has no use for (identifiers, comments, and so on).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra='ignore',
    )


class RecordModel(BaseModel):
    """Base mutable model for execution records.

    Records are the only models mutated during a run: every record is
    owned by the scenario execution that creates it and transitions
    through its states exactly once.
    """

    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra='forbid',
    )


class SettingsModel(BaseSettings):
    """Base immutable model for runtime settings.

    This class serves as the root for all settings models responsible for
    resolving runtime configuration (for example, environment variables,
    CI-provided values, or local overrides).

    Design principles enforced by this model:
        - Immutability: resolved settings cannot be modified after creation.
          This guarantees consistent behavior during scenario execution.
        - Tolerant schema handling: unknown or extra fields are ignored.
          This allows the surrounding environment to contain unrelated
          variables without breaking configuration resolution.

    All runtime settings models must inherit from this class.
    """

    model_config =  SettingsConfigDict(
        frozen=True,
        extra='ignore',
    )
