# src/lawkeeper/plugins/manager.py
"""Plugin manager for contract discovery, registration and installation.

Uses pluggy for hook-based plugin registration.
"""

from __future__ import annotations

import importlib
from typing import TYPE_CHECKING, Any

import pluggy

from lawkeeper.contracts.errors import DuplicateContractError, DuplicateGeneratorError
from lawkeeper.contracts.models import BatchResult, BindingRequest, ContractSpec, GeneratorSpec
from lawkeeper.core.graph import stable_topological_order
from lawkeeper.core.logging import get_logger
from lawkeeper.plugins.hookspecs import (
    PROJECT_NAME,
    LawkeeperContractSpec,
    LawkeeperGeneratorSpec,
    LawkeeperInstanceSpec,
)

if TYPE_CHECKING:
    from lawkeeper.runtime import Runtime

logger = get_logger(__name__)


class ContractPluginManager:
    """Collects contracts, generators and instances from plugins.

    Usage:
        manager = ContractPluginManager()
        manager.register_builtin_plugins()
        manager.register_module("my_package.contracts")

        result = manager.install(runtime)
        result.raise_for_errors()
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)

        # Register hookspecs
        self._pm.add_hookspecs(LawkeeperContractSpec)
        self._pm.add_hookspecs(LawkeeperGeneratorSpec)
        self._pm.add_hookspecs(LawkeeperInstanceSpec)

    def register(self, plugin: Any, name: str | None = None) -> None:
        """Register a plugin.

        Args:
            plugin: Module or object implementing hook functions
            name: Registration name (pluggy derives one when omitted)

        Raises:
            ValueError: plugin or name already registered
        """
        self._pm.register(plugin, name=name)

    def register_builtin_plugins(self) -> None:
        """Register the contracts shipped with lawkeeper (Semigroup, Monoid)."""
        from lawkeeper.plugins import algebra

        if not self._pm.is_registered(algebra):
            self.register(algebra, name="lawkeeper.algebra")

    def register_module(self, dotted_path: str) -> None:
        """Import a module by dotted path and register it as a plugin.

        Registering the same module twice is a no-op.

        Raises:
            ModuleNotFoundError: module cannot be imported
        """
        module = importlib.import_module(dotted_path)
        if self._pm.is_registered(module):
            return
        self.register(module, name=dotted_path)

    def load_entrypoints(self) -> int:
        """Register plugins advertised under the 'lawkeeper' entry point group.

        Returns:
            Number of plugins loaded
        """
        return self._pm.load_setuptools_entrypoints(PROJECT_NAME)

    def plugins(self) -> list[Any]:
        return list(self._pm.get_plugins())

    # === Collection ===
    # pluggy calls hooks last-registered first; results are reversed so
    # earlier registrations come first.

    def contract_specs(self) -> list[ContractSpec]:
        """Contracts from all plugins, in registration order.

        Raises:
            DuplicateContractError: two plugins contribute the same name
        """
        seen: set[str] = set()
        specs: list[ContractSpec] = []
        for contributed in reversed(self._pm.hook.lawkeeper_contracts()):
            for spec in contributed:
                if spec.name in seen:
                    raise DuplicateContractError(spec.name)
                seen.add(spec.name)
                specs.append(spec)
        return specs

    def generator_specs(self) -> list[GeneratorSpec]:
        """Generators from all plugins, in registration order.

        Raises:
            DuplicateGeneratorError: two plugins contribute the same type
        """
        seen: set[type] = set()
        specs: list[GeneratorSpec] = []
        for contributed in reversed(self._pm.hook.lawkeeper_generators()):
            for spec in contributed:
                if spec.type_id in seen:
                    raise DuplicateGeneratorError(spec.type_id)
                seen.add(spec.type_id)
                specs.append(spec)
        return specs

    def binding_requests(self) -> list[BindingRequest]:
        return [request for contributed in reversed(self._pm.hook.lawkeeper_instances()) for request in contributed]

    # === Installation ===

    def declare_contracts(self, runtime: Runtime) -> None:
        """Declare every plugin contract in runtime, dependencies first.

        Raises:
            DeclarationError: a contract was rejected; contracts declared
                before it stay declared
        """
        specs = self.contract_specs()
        index_of = {spec.name: index for index, spec in enumerate(specs)}
        prerequisites = [
            (index, index_of[dependency])
            for index, spec in enumerate(specs)
            for dependency in spec.dependencies
            if dependency in index_of
        ]
        for index in stable_topological_order(list(range(len(specs))), prerequisites):
            spec = specs[index]
            runtime.declare_contract(
                spec.name,
                spec.operations,
                spec.dependencies,
                spec.laws,
                bypass_all=spec.bypass_all,
                description=spec.description,
            )

    def declare_generators(self, runtime: Runtime) -> None:
        for spec in self.generator_specs():
            runtime.declare_generator(spec.type_id, spec.producer)

    def install(self, runtime: Runtime) -> BatchResult:
        """Declare contracts and generators, then bind every contributed instance.

        Returns:
            Result of binding the contributed instances

        Raises:
            DeclarationError: a contract or generator was rejected
        """
        self.declare_contracts(runtime)
        self.declare_generators(runtime)
        result = runtime.bind_all(self.binding_requests())
        logger.info(
            "Plugins installed",
            plugins=len(self.plugins()),
            contracts=len(runtime.contracts()),
            committed=len(result.committed),
            rejected=len(result.rejected),
        )
        return result
