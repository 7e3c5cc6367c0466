# src/lawkeeper/core/graph.py
"""Contract dependency graph.

Wraps a NetworkX DiGraph with one node per contract and an edge
contract -> dependency per declared dependency. The graph is derived from
the registry; it is never edited except through add_contract().
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Sequence
from typing import TypeVar

import networkx as nx
from networkx import DiGraph

from lawkeeper.contracts.errors import CyclicDependencyError, UnknownContractError

K = TypeVar("K", bound=Hashable)


class DependencyGraph:
    """Acyclic graph over declared contracts.

    Successor order is insertion order, so traversals follow the order in
    which dependencies were declared.
    """

    def __init__(self) -> None:
        self._graph: DiGraph[str] = nx.DiGraph()

    def __contains__(self, name: object) -> bool:
        return self._graph.has_node(name)

    @property
    def contract_count(self) -> int:
        return self._graph.number_of_nodes()

    def find_cycle(self, name: str, dependencies: Sequence[str]) -> list[str] | None:
        """Return the cycle that adding name -> dependencies would create, if any.

        Returns:
            Contract names along the cycle, starting and ending at the same
            contract, or None when the edges keep the graph acyclic.
        """
        if name in dependencies:
            return [name, name]

        candidate = self._graph.copy()
        candidate.add_node(name)
        candidate.add_edges_from((name, dep) for dep in dependencies)
        try:
            edges = nx.find_cycle(candidate, source=name)
        except nx.NetworkXNoCycle:
            return None
        return [edge[0] for edge in edges] + [edges[0][0]]

    def add_contract(self, name: str, dependencies: Sequence[str]) -> None:
        """Add a contract node and its dependency edges.

        Raises:
            CyclicDependencyError: If the edges would close a cycle
        """
        cycle = self.find_cycle(name, dependencies)
        if cycle is not None:
            raise CyclicDependencyError(name, cycle)
        self._graph.add_node(name)
        for dep in dependencies:
            self._graph.add_edge(name, dep)

    def transitive_dependencies(self, name: str) -> tuple[str, ...]:
        """Breadth-first closure over dependency edges.

        The contract itself is excluded; each contract appears once, at the
        level where it is first reached, in declaration order within a level.
        """
        self._require(name)
        return tuple(child for _, child in nx.bfs_edges(self._graph, name))

    def dependents(self, name: str) -> frozenset[str]:
        """Contracts that depend on name, directly or transitively."""
        self._require(name)
        return frozenset(nx.ancestors(self._graph, name))

    def _require(self, name: str) -> None:
        if not self._graph.has_node(name):
            raise UnknownContractError(name)


def stable_topological_order(items: Sequence[K], depends_on: Iterable[tuple[K, K]]) -> list[K]:
    """Order items so each one follows everything it depends on.

    Ties are broken by position in items, so already-ordered input is
    returned unchanged.

    Args:
        items: Items to order (hashable, unique)
        depends_on: (item, prerequisite) pairs; pairs naming unknown items are ignored

    Returns:
        Items in dependency order

    Raises:
        CyclicDependencyError: If the pairs form a cycle
    """
    position = {item: index for index, item in enumerate(items)}
    graph: DiGraph[K] = nx.DiGraph()
    graph.add_nodes_from(items)
    for item, prerequisite in depends_on:
        if item in position and prerequisite in position and item != prerequisite:
            graph.add_edge(prerequisite, item)

    try:
        return list(nx.lexicographical_topological_sort(graph, key=lambda item: position[item]))
    except nx.NetworkXUnfeasible:
        cycle = [str(edge[0]) for edge in nx.find_cycle(graph)]
        raise CyclicDependencyError(cycle[0], [*cycle, cycle[0]]) from None
