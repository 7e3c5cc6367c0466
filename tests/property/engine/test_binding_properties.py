# tests/property/engine/test_binding_properties.py
"""Property-based tests for binding order and the dependency gate.

Contracts here are declared with bypass_all, so no law search runs
inside the property test itself.

Properties tested:
1. bind_all commits a full dependency closure in any input order
2. A committed instance always has committed instances for every dependency
3. A rejected binding leaves the dispatch table unchanged
"""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lawkeeper.contracts import BindingRequest, UnsatisfiedDependencyError
from lawkeeper.runtime import Runtime
from tests.strategies import QUICK_SETTINGS, contract_dags


def _declare(layout: list[tuple[str, tuple[str, ...]]]) -> Runtime:
    runtime = Runtime()
    for name, deps in layout:
        runtime.declare_contract(name, dependencies=deps, bypass_all=True)
    return runtime


class TestBindAllProperties:
    @QUICK_SETTINGS
    @given(layout=contract_dags(), data=st.data())
    def test_any_order_commits_everything(
        self, layout: list[tuple[str, tuple[str, ...]]], data: st.DataObject
    ) -> None:
        runtime = _declare(layout)
        names = data.draw(st.permutations([name for name, _ in layout]))

        result = runtime.bind_all([BindingRequest(name, int) for name in names])

        assert result.ok
        assert {outcome.contract for outcome in result.committed} == set(names)

    @QUICK_SETTINGS
    @given(layout=contract_dags(), data=st.data())
    def test_committed_implies_dependencies_committed(
        self, layout: list[tuple[str, tuple[str, ...]]], data: st.DataObject
    ) -> None:
        runtime = _declare(layout)
        names = [name for name, _ in layout]
        subset = data.draw(st.lists(st.sampled_from(names), unique=True))

        runtime.bind_all([BindingRequest(name, int) for name in subset])

        for instance in runtime.instances():
            for dependency in runtime.registry.transitive_dependencies(instance.contract):
                assert runtime.is_committed(dependency, int)


class TestGateProperties:
    @QUICK_SETTINGS
    @given(layout=contract_dags(), data=st.data())
    def test_unsatisfied_dependency_leaves_no_residue(
        self, layout: list[tuple[str, tuple[str, ...]]], data: st.DataObject
    ) -> None:
        runtime = _declare(layout)
        dependent = [name for name, deps in layout if deps]
        if not dependent:
            return
        name = data.draw(st.sampled_from(dependent))

        before = runtime.instances()
        with pytest.raises(UnsatisfiedDependencyError) as exc_info:
            runtime.bind_instance(name, int)
        assert exc_info.value.dependency in runtime.registry.transitive_dependencies(name)
        assert runtime.instances() == before
