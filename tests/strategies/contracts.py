# tests/strategies/contracts.py
"""Strategies for contract names and acyclic dependency layouts."""

from hypothesis import strategies as st

identifiers = st.from_regex(r"[A-Za-z_][A-Za-z0-9_]{0,11}", fullmatch=True)


@st.composite
def contract_dags(draw: st.DrawFn, max_contracts: int = 8) -> list[tuple[str, tuple[str, ...]]]:
    """(name, dependencies) pairs in a valid declaration order.

    Each contract depends only on contracts listed before it, so the
    layout is acyclic by construction.
    """
    names = draw(st.lists(identifiers, min_size=1, max_size=max_contracts, unique=True))
    layout: list[tuple[str, tuple[str, ...]]] = []
    for index, name in enumerate(names):
        if index:
            deps = draw(st.lists(st.sampled_from(names[:index]), unique=True, max_size=3))
        else:
            deps = []
        layout.append((name, tuple(deps)))
    return layout
