"""Plugin system: pluggy hooks contributing contracts, generators and instances."""

from lawkeeper.plugins.hookspecs import PROJECT_NAME, hookimpl, hookspec
from lawkeeper.plugins.manager import ContractPluginManager

__all__ = [
    "PROJECT_NAME",
    "ContractPluginManager",
    "hookimpl",
    "hookspec",
]
