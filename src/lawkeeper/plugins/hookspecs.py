# src/lawkeeper/plugins/hookspecs.py
"""pluggy hook specifications for lawkeeper plugins.

A plugin contributes contracts, generators and instances. The plugin
manager collects them and installs them into a Runtime.

Usage (implementing a plugin):
    from lawkeeper.plugins.hookspecs import hookimpl

    class MyPlugin:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def lawkeeper_contracts(self):
            return [ContractSpec("Functor", operations=[("fmap", 2)], laws=[identity])]

Note: @hookspec defines the hook interface (done here).
      @hookimpl marks plugin implementations of those hooks.
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from lawkeeper.contracts.models import BindingRequest, ContractSpec, GeneratorSpec

# Project name for pluggy; also the entry point group
PROJECT_NAME = "lawkeeper"

# Hook specification marker
hookspec = pluggy.HookspecMarker(PROJECT_NAME)

# Hook implementation marker (for plugins to use)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class LawkeeperContractSpec:
    """Hook specifications for contract declarations."""

    @hookspec
    def lawkeeper_contracts(self) -> list["ContractSpec"]:  # type: ignore[empty-body]
        """Return contracts to declare.

        Dependencies may name contracts from any registered plugin;
        the manager declares them in dependency order.
        """


class LawkeeperGeneratorSpec:
    """Hook specifications for sample generators."""

    @hookspec
    def lawkeeper_generators(self) -> list["GeneratorSpec"]:  # type: ignore[empty-body]
        """Return generators for types the plugin's instances need."""


class LawkeeperInstanceSpec:
    """Hook specifications for instance bindings."""

    @hookspec
    def lawkeeper_instances(self) -> list["BindingRequest"]:  # type: ignore[empty-body]
        """Return bindings to verify and commit."""
