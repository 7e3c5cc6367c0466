# src/lawkeeper/runtime.py
"""The owned store of contracts, generators and committed instances.

A Runtime wires the registry, generator registry, dispatch table and
binder together. Declaration and binding calls are serialised by a
re-entrant lock and stop after freeze(); lookups and invocations read
committed state only.

Most programs use the process default through get_runtime() or the
module-level shortcuts re-exported from lawkeeper.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from lawkeeper.contracts.errors import RuntimeFrozenError
from lawkeeper.contracts.models import BatchResult, BindingOutcome, BindingRequest, Contract, Instance
from lawkeeper.contracts.types import TypeId
from lawkeeper.core.config import LawkeeperSettings
from lawkeeper.core.logging import get_logger
from lawkeeper.core.registry import ContractRegistry, LawDecl, OperationDecl
from lawkeeper.engine.binder import InstanceBinder
from lawkeeper.engine.bypass import BypassPolicy
from lawkeeper.engine.dispatch import ContractHandle, DispatchTable
from lawkeeper.engine.generators import Generator, GeneratorRegistry, Producer
from lawkeeper.engine.laws import LawRunner

logger = get_logger(__name__)


class Runtime:
    """Contracts, generators and instances for one program.

    Usage:
        runtime = Runtime()
        runtime.declare_contract("Combine", ["combine"], laws=[associative])
        runtime.bind_instance("Combine", list, {"combine": operator.add})
        runtime.invoke("Combine", list, "combine", [1], [2])  # [1, 2]
        runtime.freeze()
    """

    def __init__(self, settings: LawkeeperSettings | None = None) -> None:
        self._settings = settings if settings is not None else LawkeeperSettings()
        self._lock = threading.RLock()
        self._frozen = False

        verification = self._settings.verification
        self._registry = ContractRegistry()
        self._generators = GeneratorRegistry()
        self._dispatch = DispatchTable(self._registry)
        self._binder = InstanceBinder(
            self._registry,
            self._dispatch,
            self._generators,
            LawRunner(verification, self._generators),
            BypassPolicy(verification),
        )

    @property
    def settings(self) -> LawkeeperSettings:
        return self._settings

    @property
    def registry(self) -> ContractRegistry:
        return self._registry

    @property
    def generators(self) -> GeneratorRegistry:
        return self._generators

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        """End the declaration and binding phase. Idempotent."""
        with self._lock:
            if not self._frozen:
                self._frozen = True
                logger.debug(
                    "Runtime frozen",
                    contracts=len(self._registry),
                    instances=len(self._dispatch.instances()),
                )

    @contextmanager
    def _mutation(self, action: str) -> Iterator[None]:
        with self._lock:
            if self._frozen:
                raise RuntimeFrozenError(f"Cannot {action}: the runtime is frozen")
            yield

    # === Declarations ===

    def declare_contract(
        self,
        name: str,
        operations: Iterable[OperationDecl] = (),
        dependencies: Iterable[str] = (),
        laws: Iterable[LawDecl] | Mapping[str, Callable[..., Any]] = (),
        *,
        bypass_all: bool = False,
        description: str = "",
    ) -> Contract:
        with self._mutation("declare a contract"):
            return self._registry.declare(
                name,
                operations,
                dependencies,
                laws,
                bypass_all=bypass_all,
                description=description,
            )

    def declare_law(self, contract: str, name: str, predicate: Callable[..., Any], description: str = "") -> Contract:
        with self._mutation("declare a law"):
            return self._registry.declare_law(contract, name, predicate, description)

    def declare_generator(self, type_id: TypeId, producer: Producer | Generator) -> Generator:
        with self._mutation("declare a generator"):
            return self._generators.declare(type_id, producer)

    # === Binding ===

    def bind_instance(
        self,
        contract: str,
        type_id: TypeId,
        implementation: Any = None,
        *,
        force: bool = False,
        generator_override: Any = None,
    ) -> BindingOutcome:
        """Bind type_id to contract after checking dependencies, coverage and laws.

        Raises:
            RuntimeFrozenError: freeze() was called
            UnknownContractError: contract not declared
            BindingError: the binding was rejected (nothing was committed)
        """
        request = BindingRequest(
            contract=contract,
            type_id=type_id,
            implementation=implementation,
            force=force,
            generator_override=generator_override,
        )
        with self._mutation("bind an instance"):
            return self._binder.bind(request)

    def bind_all(self, requests: Iterable[BindingRequest]) -> BatchResult:
        with self._mutation("bind instances"):
            return self._binder.bind_all(requests)

    def conforms(self, contract: str, type_id: TypeId, *, trial_count: int | None = None) -> int:
        """Re-run the laws of a committed instance without changing state.

        Returns:
            Number of trials executed

        Raises:
            NoInstanceError: no committed instance for the pair
            LawViolationError: a law no longer holds
        """
        with self._lock:
            return self._binder.verify(contract, type_id, trial_count=trial_count)

    # === Lookup and invocation ===

    def is_committed(self, contract: str, type_id: TypeId) -> bool:
        return self._dispatch.is_registered(contract, type_id)

    def instance(self, contract: str, type_id: TypeId) -> Instance | None:
        return self._dispatch.lookup(contract, type_id)

    def invoke(self, contract: str, type_id: TypeId, operation: str, *args: Any, **kwargs: Any) -> Any:
        return self._dispatch.invoke(contract, type_id, operation, *args, **kwargs)

    def dispatch(self, contract: str, operation: str, value: Any, *args: Any, **kwargs: Any) -> Any:
        return self._dispatch.dispatch(contract, operation, value, *args, **kwargs)

    def contract(self, name: str) -> ContractHandle:
        return ContractHandle(self._dispatch, self._registry.get(name))

    def contracts(self) -> tuple[Contract, ...]:
        return self._registry.contracts()

    def instances(self) -> tuple[Instance, ...]:
        return self._dispatch.instances()


# =============================================================================
# Process default runtime
# =============================================================================

_default_runtime: Runtime | None = None
_default_lock = threading.Lock()


def get_runtime() -> Runtime:
    """The process default runtime, created with default settings on first use."""
    global _default_runtime
    with _default_lock:
        if _default_runtime is None:
            _default_runtime = Runtime()
        return _default_runtime


def reset_runtime(settings: LawkeeperSettings | None = None) -> Runtime:
    """Replace the process default runtime with an empty one."""
    global _default_runtime
    with _default_lock:
        _default_runtime = Runtime(settings)
        return _default_runtime


def declare_contract(
    name: str,
    operations: Iterable[OperationDecl] = (),
    dependencies: Iterable[str] = (),
    laws: Iterable[LawDecl] | Mapping[str, Callable[..., Any]] = (),
    *,
    bypass_all: bool = False,
    description: str = "",
) -> Contract:
    return get_runtime().declare_contract(
        name, operations, dependencies, laws, bypass_all=bypass_all, description=description
    )


def declare_law(contract: str, name: str, predicate: Callable[..., Any], description: str = "") -> Contract:
    return get_runtime().declare_law(contract, name, predicate, description)


def declare_generator(type_id: TypeId, producer: Producer | Generator) -> Generator:
    return get_runtime().declare_generator(type_id, producer)


def bind_instance(
    contract: str,
    type_id: TypeId,
    implementation: Any = None,
    *,
    force: bool = False,
    generator_override: Any = None,
) -> BindingOutcome:
    return get_runtime().bind_instance(
        contract, type_id, implementation, force=force, generator_override=generator_override
    )


def bind_all(requests: Iterable[BindingRequest]) -> BatchResult:
    return get_runtime().bind_all(requests)


def conforms(contract: str, type_id: TypeId, *, trial_count: int | None = None) -> int:
    return get_runtime().conforms(contract, type_id, trial_count=trial_count)


def invoke(contract: str, type_id: TypeId, operation: str, *args: Any, **kwargs: Any) -> Any:
    return get_runtime().invoke(contract, type_id, operation, *args, **kwargs)


def contract(name: str) -> ContractHandle:
    return get_runtime().contract(name)
