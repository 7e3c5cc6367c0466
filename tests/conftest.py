# tests/conftest.py
"""Shared fixtures.

Every test gets a fresh default runtime and unconfigured logging, so tests
that call configure_logging() or the module-level shortcuts cannot leak
state into each other.
"""

import logging
from collections.abc import Iterator

import pytest
import structlog

from lawkeeper.core.config import LawkeeperSettings, VerificationSettings
from lawkeeper.runtime import Runtime, reset_runtime

# Small budget keeps law searches fast; still enough to find the failures
# the tests plant.
FAST_VERIFICATION = VerificationSettings(trial_count=50, max_seed=20)


@pytest.fixture
def settings() -> LawkeeperSettings:
    return LawkeeperSettings(verification=FAST_VERIFICATION)


@pytest.fixture
def runtime(settings: LawkeeperSettings) -> Runtime:
    """Isolated runtime with the fast verification budget."""
    return Runtime(settings)


@pytest.fixture(autouse=True)
def _isolate_global_state() -> Iterator[None]:
    yield
    reset_runtime()
    structlog.reset_defaults()
    root = logging.getLogger()
    root.handlers = []
    root.setLevel(logging.WARNING)
