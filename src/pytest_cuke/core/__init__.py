"""Step matching and scenario execution engine.

This module defines the core infrastructure for registering step
definitions and executing Gherkin documents against them.

It provides:
- parameter type templates expanding placeholder tokens in step patterns;
- a step registry with best-match resolution and typed argument coercion;
- safe loading of step libraries from entry points and import paths;
- scenario outline expansion from example tables;
- scenario and suite runners recording pass, fail, and skip results.

The primary public entry points are `StepRegistry`, where steps are
registered, and `SuiteRunner`, which executes parsed or file-based
features against a frozen registry.
"""

from .definitions import Argument, StepDefinition
from .outlines import OutlineExpander, PlannedStep
from .parser import DocumentParser
from .registry import StepRegistry
from .runner import ScenarioPlan, ScenarioRunner
from .suite import SuiteRunner
from .templates import ParameterTemplates

__all__ = (
    'Argument',
    'DocumentParser',
    'OutlineExpander',
    'ParameterTemplates',
    'PlannedStep',
    'ScenarioPlan',
    'ScenarioRunner',
    'StepDefinition',
    'StepRegistry',
    'SuiteRunner',
)
