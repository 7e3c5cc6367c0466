# tests/fixtures/__init__.py
"""Shared test infrastructure (importable, not conftest-based).

Import fixtures and helpers explicitly:
    from tests.fixtures.contracts import associative, declare_combine
    from tests.fixtures.types import Point
"""
