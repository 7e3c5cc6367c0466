"""Status codes shared between the binder, the runtime and the CLI."""

from enum import StrEnum


class BindingState(StrEnum):
    """Position of a (contract, type) binding in its lifecycle.

    DECLARED -> DEPENDENCY_CHECKED -> VERIFIED -> COMMITTED, or REJECTED at any
    gate. Only COMMITTED bindings are observable through dispatch.
    """

    DECLARED = "declared"
    DEPENDENCY_CHECKED = "dependency_checked"
    VERIFIED = "verified"
    COMMITTED = "committed"
    REJECTED = "rejected"


class BypassSource(StrEnum):
    """Why law verification was skipped for a binding."""

    CONTRACT = "contract"  # Contract declared with bypass_all
    INSTANCE = "instance"  # bind_instance(force=True)
    POLICY = "policy"  # Matched a configured bypass rule
