"""Records for contracts, laws, instances and binding results.

Leaf module: only imports from lawkeeper.contracts. All records are frozen;
the registry replaces a Contract wholesale when a law is appended.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from lawkeeper.contracts.enums import BindingState, BypassSource
from lawkeeper.contracts.errors import BatchBindingError, BindingError
from lawkeeper.contracts.types import LawPredicate, TypeId, type_name


@dataclass(frozen=True, slots=True)
class OperationSignature:
    """Abstract operation: a name and, optionally, the arity implementations must accept."""

    name: str
    arity: int | None = None

    def __str__(self) -> str:
        return self.name if self.arity is None else f"{self.name}/{self.arity}"


@dataclass(frozen=True, slots=True)
class Law:
    """Named predicate every conforming instance must satisfy."""

    name: str
    predicate: LawPredicate = field(repr=False)
    description: str = ""


@dataclass(frozen=True, slots=True)
class Contract:
    """A declared capability contract (a type class).

    dependencies holds direct parents only, in declaration order. Use
    ContractRegistry.transitive_dependencies() for the closure.
    """

    name: str
    operations: tuple[OperationSignature, ...] = ()
    dependencies: tuple[str, ...] = ()
    laws: tuple[Law, ...] = ()
    bypass_all: bool = False
    description: str = ""

    @property
    def operation_names(self) -> tuple[str, ...]:
        return tuple(op.name for op in self.operations)

    @property
    def law_names(self) -> tuple[str, ...]:
        return tuple(law.name for law in self.laws)

    def operation(self, name: str) -> OperationSignature | None:
        for op in self.operations:
            if op.name == name:
                return op
        return None


@dataclass(frozen=True, slots=True)
class Instance:
    """A committed binding of a concrete type to a contract.

    implementation is frozen to a MappingProxyType on construction, so a
    committed instance cannot be mutated through the record.
    """

    contract: str
    type_id: TypeId
    implementation: Mapping[str, Any]
    forced: bool = False
    bypass_reason: str | None = None
    generator_override: Any = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.implementation, MappingProxyType):
            object.__setattr__(self, "implementation", MappingProxyType(dict(self.implementation)))

    @property
    def key(self) -> tuple[str, TypeId]:
        return (self.contract, self.type_id)


@dataclass(frozen=True, slots=True)
class BindingRequest:
    """Everything bind_instance needs for one (contract, type) pair.

    implementation may be a mapping of operation name to callable, or any
    object (class, module, namespace) exposing the operations as attributes.
    generator_override is a Hypothesis strategy or a seed -> strategy callable.
    """

    contract: str
    type_id: TypeId
    implementation: Any = None
    force: bool = False
    generator_override: Any = None

    @property
    def key(self) -> tuple[str, TypeId]:
        return (self.contract, self.type_id)

    def describe(self) -> str:
        return f"{self.contract}[{type_name(self.type_id)}]"


@dataclass(frozen=True, slots=True)
class BindingOutcome:
    """Result of one binding attempt.

    Attributes:
        contract: Contract name
        type_id: Bound type
        state: COMMITTED or REJECTED
        bypass: Which bypass applied, if laws were skipped
        bypass_reason: Human readable bypass reason (always set when bypass is)
        laws_checked: Laws that ran and passed, in execution order
        trials: Total trials executed across those laws
        error: The rejection error, if state is REJECTED
    """

    contract: str
    type_id: TypeId
    state: BindingState
    bypass: BypassSource | None = None
    bypass_reason: str | None = None
    laws_checked: tuple[str, ...] = ()
    trials: int = 0
    error: BindingError | None = None

    @property
    def committed(self) -> bool:
        return self.state == BindingState.COMMITTED

    @property
    def bypassed(self) -> bool:
        return self.bypass is not None

    def describe(self) -> str:
        return f"{self.contract}[{type_name(self.type_id)}]"


@dataclass(frozen=True, slots=True)
class BatchResult:
    """Outcomes of bind_all, in the order the bindings were attempted."""

    outcomes: tuple[BindingOutcome, ...] = ()

    @property
    def committed(self) -> tuple[BindingOutcome, ...]:
        return tuple(o for o in self.outcomes if o.committed)

    @property
    def rejected(self) -> tuple[BindingOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.committed)

    @property
    def ok(self) -> bool:
        return not self.rejected

    def raise_for_errors(self) -> None:
        """Raise BatchBindingError if any binding was rejected."""
        errors = [o.error for o in self.rejected if o.error is not None]
        if errors:
            raise BatchBindingError(errors)


@dataclass(frozen=True, slots=True)
class ContractSpec:
    """Declaration payload for a contract, as contributed by plugins."""

    name: str
    operations: tuple[Any, ...] = ()
    dependencies: tuple[str, ...] = ()
    laws: tuple[Law, ...] = ()
    bypass_all: bool = False
    description: str = ""


@dataclass(frozen=True, slots=True)
class GeneratorSpec:
    """Declaration payload for a type's sample generator."""

    type_id: TypeId
    producer: Any = field(repr=False)
