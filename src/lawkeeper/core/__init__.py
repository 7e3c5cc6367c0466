# src/lawkeeper/core/__init__.py
"""Core infrastructure: configuration, logging, contract registry and dependency graph."""

from lawkeeper.core.config import (
    BypassRule,
    LawkeeperSettings,
    LoggingSettings,
    VerificationSettings,
    load_settings,
)
from lawkeeper.core.graph import DependencyGraph, stable_topological_order
from lawkeeper.core.logging import binding_context, configure_logging, get_logger
from lawkeeper.core.registry import ContractRegistry

__all__ = [
    "BypassRule",
    "ContractRegistry",
    "DependencyGraph",
    "LawkeeperSettings",
    "LoggingSettings",
    "VerificationSettings",
    "binding_context",
    "configure_logging",
    "get_logger",
    "load_settings",
    "stable_topological_order",
]
