# src/lawkeeper/engine/bypass.py
"""Decide whether a binding skips law verification.

Three sources can waive verification: the contract (bypass_all), the
binding request (force=True) and the configured allow-list. Operation
coverage is still checked for every bypassed binding.
"""

from __future__ import annotations

from dataclasses import dataclass

from lawkeeper.contracts.enums import BypassSource
from lawkeeper.contracts.models import BindingRequest, Contract
from lawkeeper.contracts.types import type_name
from lawkeeper.core.config import VerificationSettings


@dataclass(frozen=True, slots=True)
class BypassDecision:
    source: BypassSource
    reason: str


class BypassPolicy:
    """Evaluates bypass sources in order: contract, instance, configured rules."""

    def __init__(self, settings: VerificationSettings) -> None:
        self._settings = settings

    def decide(self, contract: Contract, request: BindingRequest) -> BypassDecision | None:
        """Bypass applying to request, or None when its laws must run."""
        if contract.bypass_all:
            return BypassDecision(BypassSource.CONTRACT, f"contract '{contract.name}' is declared with bypass_all")
        if request.force:
            return BypassDecision(BypassSource.INSTANCE, "instance bound with force=True")

        rule = self._settings.bypass_rule_for(contract.name, type_name(request.type_id))
        if rule is not None:
            return BypassDecision(BypassSource.POLICY, rule.reason)
        return None
