# src/lawkeeper/core/registry.py
"""Contract registry: declarations, laws and the dependency graph.

All validation happens before any state changes, so a rejected
declaration leaves the registry exactly as it was.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from lawkeeper.contracts.errors import (
    CyclicDependencyError,
    DuplicateContractError,
    DuplicateLawError,
    DuplicateOperationError,
    InvalidDeclarationError,
    NoLawsDeclaredError,
    SealedContractError,
    UnknownContractError,
    UnknownDependencyError,
)
from lawkeeper.contracts.models import Contract, Law, OperationSignature
from lawkeeper.core.graph import DependencyGraph
from lawkeeper.core.logging import get_logger

logger = get_logger(__name__)

type OperationDecl = OperationSignature | tuple[str, int | None] | str
type LawDecl = Law | tuple[str, Callable[..., Any]] | Callable[..., Any]


def normalize_operations(contract: str, operations: Iterable[OperationDecl]) -> tuple[OperationSignature, ...]:
    """Coerce operation declarations into OperationSignature records.

    Accepts OperationSignature, (name, arity) tuples and bare names.

    Raises:
        InvalidDeclarationError: Bad identifier or negative arity
        DuplicateOperationError: Same name declared twice
    """
    result: list[OperationSignature] = []
    seen: set[str] = set()
    for decl in operations:
        if isinstance(decl, OperationSignature):
            op = decl
        elif isinstance(decl, str):
            op = OperationSignature(decl)
        elif isinstance(decl, tuple) and len(decl) == 2:
            op = OperationSignature(decl[0], decl[1])
        else:
            raise InvalidDeclarationError(f"Contract '{contract}': cannot interpret operation declaration {decl!r}")

        if not isinstance(op.name, str) or not op.name.isidentifier():
            raise InvalidDeclarationError(f"Contract '{contract}': operation name {op.name!r} is not a valid identifier")
        if op.arity is not None and (not isinstance(op.arity, int) or op.arity < 0):
            raise InvalidDeclarationError(f"Contract '{contract}': operation '{op.name}' has invalid arity {op.arity!r}")
        if op.name in seen:
            raise DuplicateOperationError(contract, op.name)
        seen.add(op.name)
        result.append(op)
    return tuple(result)


def normalize_laws(contract: str, laws: Iterable[LawDecl] | Mapping[str, Callable[..., Any]]) -> tuple[Law, ...]:
    """Coerce law declarations into Law records.

    Accepts Law records, (name, predicate) tuples, a {name: predicate}
    mapping, or plain functions (named after the function).
    """
    items: Iterable[Any] = laws.items() if isinstance(laws, Mapping) else laws
    result: list[Law] = []
    seen: set[str] = set()
    for decl in items:
        if isinstance(decl, Law):
            law = decl
        elif isinstance(decl, tuple) and len(decl) == 2:
            law = Law(decl[0], decl[1])
        elif callable(decl):
            law = Law(decl.__name__, decl, (decl.__doc__ or "").strip())
        else:
            raise InvalidDeclarationError(f"Contract '{contract}': cannot interpret law declaration {decl!r}")

        if not isinstance(law.name, str) or not law.name:
            raise InvalidDeclarationError(f"Contract '{contract}': law name {law.name!r} must be a non-empty string")
        if not callable(law.predicate):
            raise InvalidDeclarationError(f"Contract '{contract}': law '{law.name}' is not callable")
        if law.name in seen:
            raise DuplicateLawError(contract, law.name)
        seen.add(law.name)
        result.append(law)
    return tuple(result)


class ContractRegistry:
    """Declared contracts, keyed by name, in declaration order.

    Usage:
        registry = ContractRegistry()
        registry.declare("Semigroup", ["concat"], laws=[associative])
        registry.declare("Monoid", ["empty"], dependencies=["Semigroup"], laws=[left_identity])
        registry.transitive_dependencies("Monoid")  # ("Semigroup",)
    """

    def __init__(self) -> None:
        self._contracts: dict[str, Contract] = {}
        self._graph = DependencyGraph()
        self._sealed: set[str] = set()

    def __contains__(self, name: object) -> bool:
        return name in self._contracts

    def __len__(self) -> int:
        return self._graph.contract_count

    def declare(
        self,
        name: str,
        operations: Iterable[OperationDecl] = (),
        dependencies: Iterable[str] = (),
        laws: Iterable[LawDecl] | Mapping[str, Callable[..., Any]] = (),
        *,
        bypass_all: bool = False,
        description: str = "",
    ) -> Contract:
        """Declare a contract.

        Raises:
            DuplicateContractError: name already declared
            CyclicDependencyError: a dependency would close a cycle
            UnknownDependencyError: a dependency is not declared
            NoLawsDeclaredError: no laws and bypass_all is False
            InvalidDeclarationError, DuplicateOperationError, DuplicateLawError:
                malformed operations or laws
        """
        if not isinstance(name, str) or not name:
            raise InvalidDeclarationError(f"Contract name {name!r} must be a non-empty string")
        if name in self._contracts:
            raise DuplicateContractError(name)

        deps = tuple(dependencies)
        if len(set(deps)) != len(deps):
            raise InvalidDeclarationError(f"Contract '{name}' lists a dependency more than once: {deps}")
        if name in deps:
            raise CyclicDependencyError(name, [name, name])
        for dep in deps:
            if dep not in self._contracts:
                raise UnknownDependencyError(name, dep)

        ops = normalize_operations(name, operations)
        law_records = normalize_laws(name, laws)
        if not law_records and not bypass_all:
            raise NoLawsDeclaredError(name)

        # Raises CyclicDependencyError before the contract becomes visible
        self._graph.add_contract(name, deps)
        contract = Contract(
            name=name,
            operations=ops,
            dependencies=deps,
            laws=law_records,
            bypass_all=bypass_all,
            description=description,
        )
        self._contracts[name] = contract
        logger.debug(
            "Contract declared",
            contract=name,
            operations=[str(op) for op in ops],
            dependencies=list(deps),
            laws=list(contract.law_names),
            bypass_all=bypass_all,
        )
        return contract

    def declare_law(self, contract: str, name: str, predicate: Callable[..., Any], description: str = "") -> Contract:
        """Append a law to a declared contract.

        Raises:
            UnknownContractError: contract not declared
            SealedContractError: the contract already has committed instances
            DuplicateLawError: a law with this name exists
        """
        current = self.get(contract)
        if contract in self._sealed:
            raise SealedContractError(contract)
        (law,) = normalize_laws(contract, [Law(name, predicate, description)])
        if law.name in current.law_names:
            raise DuplicateLawError(contract, law.name)

        updated = dataclasses.replace(current, laws=(*current.laws, law))
        self._contracts[contract] = updated
        logger.debug("Law declared", contract=contract, law=law.name)
        return updated

    def seal(self, contract: str) -> None:
        """Freeze a contract's law list. Called when its first instance commits."""
        self.get(contract)
        self._sealed.add(contract)

    def is_sealed(self, contract: str) -> bool:
        return contract in self._sealed

    def get(self, name: str) -> Contract:
        try:
            return self._contracts[name]
        except KeyError:
            raise UnknownContractError(name) from None

    def names(self) -> tuple[str, ...]:
        """Contract names in declaration order (dependencies always come first)."""
        return tuple(self._contracts)

    def contracts(self) -> tuple[Contract, ...]:
        return tuple(self._contracts.values())

    def transitive_dependencies(self, name: str) -> tuple[str, ...]:
        """Breadth-first dependency closure of name, excluding name itself."""
        return self._graph.transitive_dependencies(name)

    def dependents(self, name: str) -> frozenset[str]:
        return self._graph.dependents(name)

    def operations_in_scope(self, name: str) -> dict[str, str]:
        """Map every operation callable from name's laws to its owning contract.

        Covers the contract and its transitive dependencies. When two
        contracts declare the same operation name, the one closest to name
        in breadth-first order wins.
        """
        scope: dict[str, str] = {}
        for owner in (name, *self.transitive_dependencies(name)):
            for op in self._contracts[owner].operations:
                scope.setdefault(op.name, owner)
        return scope
