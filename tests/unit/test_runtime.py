# tests/unit/test_runtime.py
"""Tests for Runtime and the process default runtime."""

import operator
import threading

import pytest

import lawkeeper
from lawkeeper import BindingRequest, LawViolationError, Runtime
from lawkeeper.contracts import (
    NoInstanceError,
    RuntimeFrozenError,
    SealedContractError,
    UnknownContractError,
)
from lawkeeper.core.config import LawkeeperSettings
from tests.fixtures.contracts import CONCAT, SUBTRACT, commutative, declare_combine, declare_unital, empty_list, left_identity
from tests.fixtures.types import Point, add_points, points


class TestDeclarations:
    def test_declare_and_bind(self, runtime: Runtime) -> None:
        declare_combine(runtime)
        outcome = runtime.bind_instance("Combine", list, CONCAT)

        assert outcome.committed
        assert runtime.is_committed("Combine", list)
        assert runtime.invoke("Combine", list, "combine", [1], [2]) == [1, 2]

    def test_added_law_applies_to_later_bindings(self, runtime: Runtime) -> None:
        declare_combine(runtime)
        runtime.declare_law("Combine", "commutative", commutative)

        # Concatenation is associative but not commutative
        with pytest.raises(LawViolationError) as exc_info:
            runtime.bind_instance("Combine", list, CONCAT)
        assert exc_info.value.law == "commutative"

        assert runtime.bind_instance("Combine", int, {"combine": operator.add}).laws_checked == (
            "associative",
            "commutative",
        )

    def test_laws_sealed_after_first_commit(self, runtime: Runtime) -> None:
        declare_combine(runtime)
        runtime.bind_instance("Combine", str, CONCAT)
        with pytest.raises(SealedContractError):
            runtime.declare_law("Combine", "commutative", commutative)

    def test_generator_declaration(self, runtime: Runtime) -> None:
        declare_combine(runtime)
        runtime.declare_generator(Point, points)
        assert runtime.bind_instance("Combine", Point, {"combine": add_points}).committed

    def test_contract_listing(self, runtime: Runtime) -> None:
        declare_combine(runtime)
        declare_unital(runtime)
        assert [c.name for c in runtime.contracts()] == ["Combine", "Unital"]

    def test_unknown_contract_handle(self, runtime: Runtime) -> None:
        with pytest.raises(UnknownContractError):
            runtime.contract("Missing")


class TestFreeze:
    def test_frozen_runtime_rejects_mutation(self, runtime: Runtime) -> None:
        declare_combine(runtime)
        runtime.bind_instance("Combine", list, CONCAT)
        runtime.freeze()

        assert runtime.frozen
        with pytest.raises(RuntimeFrozenError):
            declare_unital(runtime)
        with pytest.raises(RuntimeFrozenError):
            runtime.bind_instance("Combine", str, CONCAT)
        with pytest.raises(RuntimeFrozenError):
            runtime.declare_generator(Point, points)
        with pytest.raises(RuntimeFrozenError):
            runtime.bind_all([BindingRequest("Combine", str, CONCAT)])

    def test_frozen_runtime_still_dispatches(self, runtime: Runtime) -> None:
        declare_combine(runtime)
        runtime.bind_instance("Combine", list, CONCAT)
        runtime.freeze()
        runtime.freeze()

        assert runtime.contract("Combine").combine([1], [2]) == [1, 2]
        assert runtime.dispatch("Combine", "combine", [3], [4]) == [3, 4]
        assert runtime.conforms("Combine", list, trial_count=5) > 0


class TestConforms:
    def test_checks_dependency_laws(self, runtime: Runtime) -> None:
        declare_combine(runtime)
        declare_unital(runtime)
        runtime.bind_instance("Combine", int, SUBTRACT, force=True)
        runtime.bind_instance("Unital", int, {"identity": lambda value: 0}, force=True)

        with pytest.raises(LawViolationError) as exc_info:
            runtime.conforms("Unital", int)
        assert exc_info.value.contract == "Combine"

    def test_requires_committed_instance(self, runtime: Runtime) -> None:
        declare_combine(runtime)
        with pytest.raises(NoInstanceError):
            runtime.conforms("Combine", list)


class TestConcurrentBinding:
    def test_parallel_binds_commit_once(self, runtime: Runtime) -> None:
        declare_combine(runtime)
        results: list[bool] = []

        def bind() -> None:
            try:
                runtime.bind_instance("Combine", str, CONCAT)
                results.append(True)
            except lawkeeper.BindingError:
                results.append(False)

        threads = [threading.Thread(target=bind) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert sorted(results) == [False, False, False, True]
        assert len(runtime.instances()) == 1


class TestDefaultRuntime:
    def test_shortcuts_share_the_default(self, settings: LawkeeperSettings) -> None:
        lawkeeper.reset_runtime(settings)
        declare_combine(lawkeeper.get_runtime())

        lawkeeper.bind_instance("Combine", list, CONCAT)
        lawkeeper.declare_contract(
            "Unital",
            [("identity", 1)],
            dependencies=["Combine"],
            laws=[left_identity],
            bypass_all=True,
        )
        lawkeeper.bind_instance("Unital", list, {"identity": empty_list})

        assert lawkeeper.invoke("Combine", list, "combine", [1], [2]) == [1, 2]
        assert lawkeeper.contract("Unital").identity([5]) == []
        assert lawkeeper.conforms("Combine", list, trial_count=5) > 0

    def test_reset_replaces_state(self) -> None:
        declare_combine(lawkeeper.get_runtime())
        fresh = lawkeeper.reset_runtime()
        assert fresh is lawkeeper.get_runtime()
        assert fresh.contracts() == ()

    def test_bind_all_shortcut(self, settings: LawkeeperSettings) -> None:
        lawkeeper.reset_runtime(settings)
        declare_combine(lawkeeper.get_runtime())
        declare_unital(lawkeeper.get_runtime())

        result = lawkeeper.bind_all(
            [
                BindingRequest("Unital", str, {"identity": lambda value: ""}),
                BindingRequest("Combine", str, CONCAT),
            ]
        )
        result.raise_for_errors()
        assert len(result.committed) == 2
