"""Exception hierarchy for declaration, binding and dispatch failures.

Every error is recoverable: declaration errors reject a declare_* call,
binding errors reject a bind_* call, dispatch errors reject an invoke.
None of them leave partial state behind.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from lawkeeper.contracts.types import TypeId, type_name

if TYPE_CHECKING:
    from lawkeeper.contracts.models import BindingOutcome


class LawkeeperError(Exception):
    """Base class for all lawkeeper errors."""


class RuntimeFrozenError(LawkeeperError):
    """Raised when declaring or binding after Runtime.freeze()."""


# =============================================================================
# Declaration errors
# =============================================================================


class DeclarationError(LawkeeperError):
    """A contract, law or generator declaration was rejected."""


class InvalidDeclarationError(DeclarationError):
    """Malformed declaration (bad identifier, negative arity, non-callable law)."""


class DuplicateContractError(DeclarationError):
    def __init__(self, contract: str) -> None:
        self.contract = contract
        super().__init__(f"Contract '{contract}' is already declared")


class UnknownDependencyError(DeclarationError):
    def __init__(self, contract: str, dependency: str) -> None:
        self.contract = contract
        self.dependency = dependency
        super().__init__(f"Contract '{contract}' depends on undeclared contract '{dependency}'")


class NoLawsDeclaredError(DeclarationError):
    def __init__(self, contract: str) -> None:
        self.contract = contract
        super().__init__(f"Contract '{contract}' declares no laws; declare at least one law or set bypass_all=True")


class CyclicDependencyError(DeclarationError):
    def __init__(self, contract: str, cycle: Sequence[str]) -> None:
        self.contract = contract
        self.cycle = tuple(cycle)
        super().__init__(f"Contract '{contract}' would create a dependency cycle: {' -> '.join(self.cycle)}")


class DuplicateOperationError(DeclarationError):
    def __init__(self, contract: str, operation: str) -> None:
        self.contract = contract
        self.operation = operation
        super().__init__(f"Contract '{contract}' declares operation '{operation}' more than once")


class DuplicateLawError(DeclarationError):
    def __init__(self, contract: str, law: str) -> None:
        self.contract = contract
        self.law = law
        super().__init__(f"Contract '{contract}' already has a law named '{law}'")


class SealedContractError(DeclarationError):
    """Laws cannot be added once an instance of the contract is committed."""

    def __init__(self, contract: str) -> None:
        self.contract = contract
        super().__init__(f"Contract '{contract}' already has committed instances; its laws are sealed")


class DuplicateGeneratorError(DeclarationError):
    def __init__(self, type_id: TypeId) -> None:
        self.type_id = type_id
        super().__init__(f"A generator for type '{type_name(type_id)}' is already declared")


# =============================================================================
# Dispatch errors
# =============================================================================


class DispatchError(LawkeeperError, LookupError):
    """Lookup of a contract, operation or instance failed."""


class UnknownContractError(DispatchError):
    def __init__(self, contract: str) -> None:
        self.contract = contract
        super().__init__(f"Unknown contract '{contract}'")


class UnknownOperationError(DispatchError):
    def __init__(self, contract: str, operation: str) -> None:
        self.contract = contract
        self.operation = operation
        super().__init__(f"'{operation}' is not an operation of contract '{contract}'")


class NoInstanceError(DispatchError):
    def __init__(self, contract: str, type_id: TypeId) -> None:
        self.contract = contract
        self.type_id = type_id
        super().__init__(f"No instance of '{contract}' is committed for type '{type_name(type_id)}'")


# =============================================================================
# Binding errors
# =============================================================================


class BindingError(LawkeeperError):
    """A bind_instance call was rejected.

    Attributes:
        contract: Contract being bound
        type_id: Type being bound
        outcome: Final BindingOutcome (state REJECTED); set by the binder
    """

    def __init__(self, message: str, *, contract: str, type_id: TypeId) -> None:
        self.contract = contract
        self.type_id = type_id
        self.outcome: BindingOutcome | None = None
        super().__init__(message)


class AlreadyBoundError(BindingError):
    def __init__(self, contract: str, type_id: TypeId) -> None:
        super().__init__(
            f"Type '{type_name(type_id)}' already has a committed instance of '{contract}'",
            contract=contract,
            type_id=type_id,
        )


class MissingOperationError(BindingError):
    def __init__(self, contract: str, type_id: TypeId, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"Instance of '{contract}' for '{type_name(type_id)}' does not implement '{operation}'",
            contract=contract,
            type_id=type_id,
        )


class UnexpectedOperationError(BindingError):
    def __init__(self, contract: str, type_id: TypeId, operation: str) -> None:
        self.operation = operation
        super().__init__(
            f"Implementation of '{contract}' for '{type_name(type_id)}' provides '{operation}', which the contract does not declare",
            contract=contract,
            type_id=type_id,
        )


class OperationArityError(BindingError):
    def __init__(self, contract: str, type_id: TypeId, operation: str, arity: int) -> None:
        self.operation = operation
        self.arity = arity
        super().__init__(
            f"Implementation of '{contract}.{operation}' for '{type_name(type_id)}' cannot be called with {arity} argument(s)",
            contract=contract,
            type_id=type_id,
        )


class UnsatisfiedDependencyError(BindingError):
    def __init__(self, contract: str, type_id: TypeId, dependency: str) -> None:
        self.dependency = dependency
        super().__init__(
            f"Cannot bind '{contract}' for '{type_name(type_id)}': dependency '{dependency}' has no committed instance for that type",
            contract=contract,
            type_id=type_id,
        )


class NoGeneratorAvailableError(BindingError):
    def __init__(self, type_id: TypeId, contract: str | None = None) -> None:
        target = f"Cannot verify '{contract}' for '{type_name(type_id)}'" if contract else f"Cannot sample '{type_name(type_id)}'"
        super().__init__(
            f"{target}: no sample generator is declared for that type",
            contract=contract or "",
            type_id=type_id,
        )


class LawViolationError(BindingError):
    """A law evaluated falsy (or raised) for a generated sample.

    Attributes:
        law: Name of the failing law
        seed: Size seed of the minimal failing trial (None if no trial ran)
        cause: Exception raised by the law, or LawFalsifiedError
        samples: Values drawn during the failing trial, in draw order

    reproduce() re-evaluates the law on samples without a new search.
    """

    def __init__(
        self,
        contract: str,
        type_id: TypeId,
        law: str,
        *,
        seed: int | None,
        cause: BaseException,
        samples: Sequence[Any] = (),
        replay: Callable[[], None] | None = None,
    ) -> None:
        self.law = law
        self.seed = seed
        self.cause = cause
        self.samples = tuple(samples)
        self._replay = replay
        super().__init__(
            f"Law '{contract}.{law}' failed for '{type_name(type_id)}' (seed={seed}, samples={self.samples!r}): "
            f"{type(cause).__name__}: {cause}",
            contract=contract,
            type_id=type_id,
        )

    def reproduce(self) -> None:
        """Evaluate the law again on the recorded samples.

        Returns normally if the law now holds for them.

        Raises:
            LawViolationError: the law still fails; a new error
            ReplayError: the error carries no replayable trial, or the law
                drew more values than were recorded
        """
        if self._replay is None:
            raise ReplayError(f"No recorded trial to replay for law '{self.contract}.{self.law}'")
        self._replay()


class LawTimeoutError(BindingError):
    def __init__(self, contract: str, type_id: TypeId, law: str, *, deadline_ms: float) -> None:
        self.law = law
        self.deadline_ms = deadline_ms
        super().__init__(
            f"Law '{contract}.{law}' exceeded the {deadline_ms}ms trial deadline for '{type_name(type_id)}'",
            contract=contract,
            type_id=type_id,
        )


class BatchBindingError(LawkeeperError):
    """Raised by BatchResult.raise_for_errors() when any binding was rejected."""

    def __init__(self, errors: Sequence[BindingError]) -> None:
        self.errors = tuple(errors)
        first = self.errors[0]
        more = f" (and {len(self.errors) - 1} more)" if len(self.errors) > 1 else ""
        super().__init__(f"{first}{more}")


# =============================================================================
# Law evaluation signals
# =============================================================================


class GeneratorError(LawkeeperError, TypeError):
    """A generator, or what it produced, is not usable as a Hypothesis strategy."""


class ReplayError(LawkeeperError):
    """A recorded law failure could not be replayed."""


class LawFalsifiedError(AssertionError):
    """Cause recorded when a law body returns a falsy value."""

    def __init__(self, law: str, result: Any) -> None:
        self.law = law
        self.result = result
        super().__init__(f"law '{law}' returned {result!r}")


class LawInequalityError(AssertionError):
    """Raised by equal() so the observed inequality reaches the violation cause."""

    def __init__(self, left: Any, right: Any) -> None:
        self.left = left
        self.right = right
        super().__init__(f"{left!r} != {right!r}")
