# tests/strategies/__init__.py
"""Hypothesis strategies for property-based tests.

Re-exports commonly used strategies for convenience:
    from tests.strategies import contract_dags, identifiers, STANDARD_SETTINGS
"""

from tests.strategies.contracts import contract_dags, identifiers
from tests.strategies.settings import QUICK_SETTINGS, STANDARD_SETTINGS

__all__ = [
    "QUICK_SETTINGS",
    "STANDARD_SETTINGS",
    "contract_dags",
    "identifiers",
]
