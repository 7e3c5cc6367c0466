# src/lawkeeper/engine/dispatch.py
"""Capability dispatch: per-contract tables of concrete implementations.

Law bodies and user code call abstract operations through this module,
never against a concrete type. Only committed instances are stored here;
the binder validates and verifies an implementation before register().
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Mapping
from typing import Any

from lawkeeper.contracts.errors import (
    AlreadyBoundError,
    MissingOperationError,
    NoInstanceError,
    OperationArityError,
    UnexpectedOperationError,
    UnknownOperationError,
)
from lawkeeper.contracts.models import Contract, Instance
from lawkeeper.contracts.types import TypeId
from lawkeeper.core.registry import ContractRegistry


def _accepts_arity(fn: Callable[..., Any], arity: int) -> bool:
    """Whether fn can be called with arity positional arguments.

    Callables without an inspectable signature (some C builtins) are
    given the benefit of the doubt.
    """
    try:
        signature = inspect.signature(fn)
    except (TypeError, ValueError):
        return True
    try:
        signature.bind(*([None] * arity))
    except TypeError:
        return False
    return True


def collect_implementation(contract: Contract, type_id: TypeId, implementation: Any) -> dict[str, Callable[..., Any]]:
    """Extract and validate the callables implementing contract's operations.

    Args:
        contract: Contract being implemented (only its own operations are
            checked; dependency operations live in the dependency's table)
        type_id: Type the implementation is for (used in error messages)
        implementation: Mapping of operation name to callable, or any object
            exposing the operations as attributes. None means "no operations",
            which is valid for contracts that declare none.

    Returns:
        Operation name -> callable, in declaration order

    Raises:
        MissingOperationError: first declared operation that is absent or not callable
        UnexpectedOperationError: a mapping key that is not an operation
        OperationArityError: a callable cannot take the declared arity
    """
    if implementation is None:
        implementation = {}

    if isinstance(implementation, Mapping):
        for key in implementation:
            if contract.operation(key) is None:
                raise UnexpectedOperationError(contract.name, type_id, str(key))

        def lookup(name: str) -> Any:
            return implementation.get(name)
    else:

        def lookup(name: str) -> Any:
            return getattr(implementation, name, None)

    collected: dict[str, Callable[..., Any]] = {}
    for op in contract.operations:
        fn = lookup(op.name)
        if fn is None or not callable(fn):
            raise MissingOperationError(contract.name, type_id, op.name)
        if op.arity is not None and not _accepts_arity(fn, op.arity):
            raise OperationArityError(contract.name, type_id, op.name, op.arity)
        collected[op.name] = fn
    return collected


class DispatchTable:
    """Committed instances, keyed by contract then by concrete type.

    Usage:
        table = DispatchTable(registry)
        table.register("Semigroup", list, {"concat": operator.add})
        table.invoke("Semigroup", list, "concat", [1], [2])   # [1, 2]
        table.dispatch("Semigroup", "concat", [1], [2])       # same, by value
    """

    def __init__(self, registry: ContractRegistry) -> None:
        self._registry = registry
        self._tables: dict[str, dict[TypeId, Instance]] = {}

    def register(
        self,
        contract: str,
        type_id: TypeId,
        implementation: Any,
        *,
        forced: bool = False,
        bypass_reason: str | None = None,
        generator_override: Any = None,
    ) -> Instance:
        """Store an implementation for (contract, type_id).

        Raises:
            UnknownContractError: contract not declared
            AlreadyBoundError: the pair already has an instance
            MissingOperationError, UnexpectedOperationError, OperationArityError:
                implementation does not match the contract's operations
        """
        record = self._registry.get(contract)
        if self.is_registered(contract, type_id):
            raise AlreadyBoundError(contract, type_id)

        instance = Instance(
            contract=contract,
            type_id=type_id,
            implementation=collect_implementation(record, type_id, implementation),
            forced=forced,
            bypass_reason=bypass_reason,
            generator_override=generator_override,
        )
        self._tables.setdefault(contract, {})[type_id] = instance
        return instance

    def is_registered(self, contract: str, type_id: TypeId) -> bool:
        return type_id in self._tables.get(contract, {})

    def lookup(self, contract: str, type_id: TypeId) -> Instance | None:
        """Instance registered for exactly type_id, or None."""
        return self._tables.get(contract, {}).get(type_id)

    def resolve(self, contract: str, cls: type) -> Instance | None:
        """Instance for cls or its nearest registered base class (MRO order)."""
        table = self._tables.get(contract, {})
        for base in cls.__mro__:
            if base in table:
                return table[base]
        return None

    def invoke(self, contract: str, type_id: TypeId, operation: str, *args: Any, **kwargs: Any) -> Any:
        """Call operation of contract as implemented for exactly type_id.

        Raises:
            UnknownContractError: contract not declared
            UnknownOperationError: operation not declared on contract
            NoInstanceError: no instance for the exact pair
        """
        self._require_operation(contract, operation)
        instance = self.lookup(contract, type_id)
        if instance is None:
            raise NoInstanceError(contract, type_id)
        return instance.implementation[operation](*args, **kwargs)

    def dispatch(self, contract: str, operation: str, value: Any, *args: Any, **kwargs: Any) -> Any:
        """Call operation on value, resolving the instance from type(value).

        Resolution walks the MRO, so an instance for a base class serves
        its subclasses, the same way functools.singledispatch does.
        """
        self._require_operation(contract, operation)
        instance = self.resolve(contract, type(value))
        if instance is None:
            raise NoInstanceError(contract, type(value))
        return instance.implementation[operation](value, *args, **kwargs)

    def types_for(self, contract: str) -> tuple[TypeId, ...]:
        """Types with a committed instance of contract, in binding order."""
        return tuple(self._tables.get(contract, {}))

    def instances(self) -> tuple[Instance, ...]:
        return tuple(instance for table in self._tables.values() for instance in table.values())

    def _require_operation(self, contract: str, operation: str) -> None:
        if self._registry.get(contract).operation(operation) is None:
            raise UnknownOperationError(contract, operation)


class ContractHandle:
    """Attribute-style access to a contract's operations.

    Each operation dispatches on the type of its first argument:

        Semigroup = runtime.contract("Semigroup")
        Semigroup.concat([1], [2])            # [1, 2]
        Semigroup.on(int).concat(1, 2)        # explicit type, exact match
    """

    def __init__(self, table: DispatchTable, contract: Contract) -> None:
        self._table = table
        self._contract = contract

    @property
    def name(self) -> str:
        return self._contract.name

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if self._contract.operation(name) is None:
            raise AttributeError(f"Contract '{self._contract.name}' has no operation '{name}'")
        contract, table = self._contract.name, self._table

        def operation(value: Any, *args: Any, **kwargs: Any) -> Any:
            return table.dispatch(contract, name, value, *args, **kwargs)

        operation.__name__ = name
        operation.__qualname__ = f"{contract}.{name}"
        return operation

    def __dir__(self) -> list[str]:
        return [*super().__dir__(), *self._contract.operation_names]

    def __repr__(self) -> str:
        return f"<ContractHandle {self._contract.name} ({', '.join(map(str, self._contract.operations))})>"

    def on(self, type_id: TypeId) -> _TypedContractHandle:
        return _TypedContractHandle(self._table, self._contract, type_id)


class _TypedContractHandle:
    """ContractHandle pinned to one concrete type (needed for nullary operations)."""

    def __init__(self, table: DispatchTable, contract: Contract, type_id: TypeId) -> None:
        self._table = table
        self._contract = contract
        self._type_id = type_id

    def __getattr__(self, name: str) -> Callable[..., Any]:
        if self._contract.operation(name) is None:
            raise AttributeError(f"Contract '{self._contract.name}' has no operation '{name}'")
        contract, table, type_id = self._contract.name, self._table, self._type_id

        def operation(*args: Any, **kwargs: Any) -> Any:
            return table.invoke(contract, type_id, name, *args, **kwargs)

        operation.__name__ = name
        return operation
