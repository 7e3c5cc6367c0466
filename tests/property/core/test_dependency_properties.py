# tests/property/core/test_dependency_properties.py
"""Property-based tests for the contract dependency graph.

Properties tested:
1. Transitive dependencies are exactly the reachable contracts, each once
2. dependents() is the inverse of transitive_dependencies()
3. stable_topological_order puts prerequisites first and keeps sorted input unchanged
4. Any edge back into the closure is rejected as a cycle
"""

from __future__ import annotations

import pytest
from hypothesis import given
from hypothesis import strategies as st

from lawkeeper.contracts.errors import CyclicDependencyError
from lawkeeper.core.graph import DependencyGraph, stable_topological_order
from tests.strategies import STANDARD_SETTINGS, contract_dags


def _build(layout: list[tuple[str, tuple[str, ...]]]) -> DependencyGraph:
    graph = DependencyGraph()
    for name, deps in layout:
        graph.add_contract(name, deps)
    return graph


def _reachable(layout: list[tuple[str, tuple[str, ...]]], name: str) -> set[str]:
    parents = dict(layout)
    seen: set[str] = set()
    stack = list(parents[name])
    while stack:
        current = stack.pop()
        if current not in seen:
            seen.add(current)
            stack.extend(parents[current])
    return seen


class TestClosureProperties:
    @STANDARD_SETTINGS
    @given(layout=contract_dags())
    def test_closure_is_reachable_set(self, layout: list[tuple[str, tuple[str, ...]]]) -> None:
        graph = _build(layout)
        for name, deps in layout:
            closure = graph.transitive_dependencies(name)
            assert len(closure) == len(set(closure))
            assert set(closure) == _reachable(layout, name)
            # Direct dependencies come first, in declaration order
            assert closure[: len(deps)] == deps

    @STANDARD_SETTINGS
    @given(layout=contract_dags())
    def test_dependents_invert_closure(self, layout: list[tuple[str, tuple[str, ...]]]) -> None:
        graph = _build(layout)
        names = [name for name, _ in layout]
        for name in names:
            expected = {other for other in names if name in graph.transitive_dependencies(other)}
            assert graph.dependents(name) == expected

    @STANDARD_SETTINGS
    @given(layout=contract_dags(), data=st.data())
    def test_back_edge_is_a_cycle(self, layout: list[tuple[str, tuple[str, ...]]], data: st.DataObject) -> None:
        graph = _build(layout)
        candidates = [(name, dep) for name, _ in layout for dep in graph.transitive_dependencies(name)]
        if not candidates:
            return
        dependent, dependency = data.draw(st.sampled_from(candidates))

        # dependency reaching dependent again closes a loop
        assert graph.find_cycle(dependency, [dependent]) is not None
        with pytest.raises(CyclicDependencyError):
            graph.add_contract(dependency, [dependent])


class TestStableOrderProperties:
    @STANDARD_SETTINGS
    @given(layout=contract_dags(), data=st.data())
    def test_prerequisites_first(self, layout: list[tuple[str, tuple[str, ...]]], data: st.DataObject) -> None:
        shuffled = data.draw(st.permutations([name for name, _ in layout]))
        pairs = [(name, dep) for name, deps in layout for dep in deps]

        ordered = stable_topological_order(shuffled, pairs)

        assert sorted(ordered) == sorted(shuffled)
        position = {name: index for index, name in enumerate(ordered)}
        for name, dep in pairs:
            assert position[dep] < position[name]

    @STANDARD_SETTINGS
    @given(layout=contract_dags())
    def test_declaration_order_unchanged(self, layout: list[tuple[str, tuple[str, ...]]]) -> None:
        names = [name for name, _ in layout]
        pairs = [(name, dep) for name, deps in layout for dep in deps]
        assert stable_topological_order(names, pairs) == names

    @STANDARD_SETTINGS
    @given(items=st.lists(st.integers(), unique=True, max_size=20))
    def test_no_pairs_keeps_input(self, items: list[int]) -> None:
        assert stable_topological_order(items, []) == items
