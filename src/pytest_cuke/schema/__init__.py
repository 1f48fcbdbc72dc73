"""Immutable document models, suite options, and execution records.

Defines the Pydantic models describing parsed Gherkin documents, the
configuration snapshot of a suite run, and the mutable records produced
while scenarios are executed. These models form the contract between the
document parser, the execution engine, and reporting collaborators.
"""

from .documents import (
    Background,
    Cell,
    DataTable,
    DocString,
    Document,
    Examples,
    Feature,
    Location,
    Rule,
    Scenario,
    Step,
    TableRow,
)
from .options import CukeSettings, Hook, Hooks, StepRunner, SuiteOptions
from .records import ExecutionRecord, Result, ScenarioRecord, StepRecord, SuiteReport

__all__ = (
    'Background',
    'Cell',
    'CukeSettings',
    'DataTable',
    'DocString',
    'Document',
    'Examples',
    'ExecutionRecord',
    'Feature',
    'Hook',
    'Hooks',
    'Location',
    'Result',
    'Rule',
    'Scenario',
    'ScenarioRecord',
    'Step',
    'StepRecord',
    'StepRunner',
    'SuiteOptions',
    'SuiteReport',
    'TableRow',
)
