"""Shared records, enums and errors.

This package is a leaf: nothing here imports from lawkeeper.core,
lawkeeper.engine or lawkeeper.plugins.
"""

from lawkeeper.contracts.enums import BindingState, BypassSource
from lawkeeper.contracts.errors import (
    AlreadyBoundError,
    BatchBindingError,
    BindingError,
    CyclicDependencyError,
    DeclarationError,
    DispatchError,
    DuplicateContractError,
    DuplicateGeneratorError,
    DuplicateLawError,
    DuplicateOperationError,
    GeneratorError,
    InvalidDeclarationError,
    LawFalsifiedError,
    LawInequalityError,
    LawkeeperError,
    LawTimeoutError,
    LawViolationError,
    MissingOperationError,
    NoGeneratorAvailableError,
    NoInstanceError,
    NoLawsDeclaredError,
    OperationArityError,
    ReplayError,
    RuntimeFrozenError,
    SealedContractError,
    UnknownContractError,
    UnexpectedOperationError,
    UnknownDependencyError,
    UnknownOperationError,
    UnsatisfiedDependencyError,
)
from lawkeeper.contracts.models import (
    BatchResult,
    BindingOutcome,
    BindingRequest,
    Contract,
    ContractSpec,
    GeneratorSpec,
    Instance,
    Law,
    OperationSignature,
)
from lawkeeper.contracts.types import (
    LawPredicate,
    TypeId,
    type_name,
)

__all__ = [
    "AlreadyBoundError",
    "BatchBindingError",
    "BatchResult",
    "BindingError",
    "BindingOutcome",
    "BindingRequest",
    "BindingState",
    "BypassSource",
    "Contract",
    "ContractSpec",
    "CyclicDependencyError",
    "DeclarationError",
    "DispatchError",
    "DuplicateContractError",
    "DuplicateGeneratorError",
    "DuplicateLawError",
    "DuplicateOperationError",
    "GeneratorError",
    "GeneratorSpec",
    "Instance",
    "InvalidDeclarationError",
    "Law",
    "LawFalsifiedError",
    "LawInequalityError",
    "LawPredicate",
    "LawTimeoutError",
    "LawViolationError",
    "LawkeeperError",
    "MissingOperationError",
    "NoGeneratorAvailableError",
    "NoInstanceError",
    "NoLawsDeclaredError",
    "OperationArityError",
    "OperationSignature",
    "ReplayError",
    "RuntimeFrozenError",
    "SealedContractError",
    "TypeId",
    "UnknownContractError",
    "UnexpectedOperationError",
    "UnknownDependencyError",
    "UnknownOperationError",
    "UnsatisfiedDependencyError",
    "type_name",
]
