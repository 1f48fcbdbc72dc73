"""Pytest plugin and execution engine for Gherkin feature files.

The `pytest_cuke` package executes behavior scenarios written in
Gherkin against a registry of Python step implementations and integrates
the execution with pytest.

Key features:
- step definitions matched by regular expressions expanded from reusable
  parameter types (`{int}`, `{word}`, ...);
- typed argument coercion driven by the step function signature;
- scenario outlines expanded from example tables;
- ordered lifecycle hooks, tag filtering and optional parallel execution;
- step libraries discovered from Python entry points.

Feature files are collected as pytest test items, one item per scenario,
preserving pytest execution model and reporting capabilities.
"""
