"""
Lawkeeper: law-checked capability contracts for Python types.

Declare a contract (operations, parent contracts and algebraic laws), then
bind concrete types to it. A binding commits only when its parents are
bound for the same type and every law holds over generated samples, so
code that dispatches through a contract can rely on its laws.
"""

from lawkeeper.contracts import (
    BatchBindingError,
    BatchResult,
    BindingError,
    BindingOutcome,
    BindingRequest,
    BindingState,
    BypassSource,
    Contract,
    DeclarationError,
    DispatchError,
    Instance,
    Law,
    LawkeeperError,
    LawViolationError,
    OperationSignature,
)
from lawkeeper.core.config import LawkeeperSettings, load_settings
from lawkeeper.core.logging import configure_logging
from lawkeeper.engine.laws import Sample, equal
from lawkeeper.runtime import (
    Runtime,
    bind_all,
    bind_instance,
    conforms,
    contract,
    declare_contract,
    declare_generator,
    declare_law,
    get_runtime,
    invoke,
    reset_runtime,
)

__version__ = "0.1.0"

__all__ = [
    "BatchBindingError",
    "BatchResult",
    "BindingError",
    "BindingOutcome",
    "BindingRequest",
    "BindingState",
    "BypassSource",
    "Contract",
    "DeclarationError",
    "DispatchError",
    "Instance",
    "Law",
    "LawViolationError",
    "LawkeeperError",
    "LawkeeperSettings",
    "OperationSignature",
    "Runtime",
    "Sample",
    "__version__",
    "bind_all",
    "bind_instance",
    "configure_logging",
    "conforms",
    "contract",
    "declare_contract",
    "declare_generator",
    "declare_law",
    "equal",
    "get_runtime",
    "invoke",
    "load_settings",
    "reset_runtime",
]
