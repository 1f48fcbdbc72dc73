"""Test suite for the pytest-cuke package.

This package contains unit and integration tests validating step
registration and resolution, Gherkin document parsing, scenario
execution semantics, pytest integration, and the command-line tool.
"""
