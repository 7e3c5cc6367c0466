# tests/unit/engine/test_bypass.py
"""Tests for bypass source precedence."""

from lawkeeper.contracts import BindingRequest, BypassSource, Contract
from lawkeeper.core.config import BypassRule, VerificationSettings
from lawkeeper.engine.bypass import BypassPolicy
from tests.fixtures.types import Point

COMBINE = Contract("Combine")
MARKER = Contract("Marker", bypass_all=True)


def _policy(*rules: BypassRule) -> BypassPolicy:
    return BypassPolicy(VerificationSettings(bypass=rules))


class TestBypassPolicy:
    def test_no_bypass_by_default(self) -> None:
        assert _policy().decide(COMBINE, BindingRequest("Combine", int)) is None

    def test_contract_wins_over_force(self) -> None:
        decision = _policy().decide(MARKER, BindingRequest("Marker", int, force=True))
        assert decision is not None
        assert decision.source == BypassSource.CONTRACT
        assert "Marker" in decision.reason

    def test_force(self) -> None:
        decision = _policy(BypassRule(reason="everything")).decide(COMBINE, BindingRequest("Combine", int, force=True))
        assert decision is not None
        assert decision.source == BypassSource.INSTANCE

    def test_rule_matches_qualified_type_name(self) -> None:
        policy = _policy(BypassRule(contract="Comb.*", type=r"tests\.fixtures\.types\.Point", reason="slow"))

        decision = policy.decide(COMBINE, BindingRequest("Combine", Point))
        assert decision is not None
        assert decision.source == BypassSource.POLICY
        assert decision.reason == "slow"
        assert policy.decide(COMBINE, BindingRequest("Combine", int)) is None

    def test_rule_is_fullmatch(self) -> None:
        policy = _policy(BypassRule(type="Point", reason="short name"))
        assert policy.decide(COMBINE, BindingRequest("Combine", Point)) is None

    def test_first_matching_rule_applies(self) -> None:
        policy = _policy(
            BypassRule(contract="Combine", type="int", reason="first"),
            BypassRule(reason="catch-all"),
        )
        assert policy.decide(COMBINE, BindingRequest("Combine", int)).reason == "first"  # type: ignore[union-attr]
        assert policy.decide(COMBINE, BindingRequest("Combine", str)).reason == "catch-all"  # type: ignore[union-attr]
