# src/lawkeeper/plugins/algebra.py
"""Built-in algebraic contracts: Semigroup and Monoid.

Instances are provided for list, tuple and str (concatenation) and int
(addition). Monoid.empty takes a value of the type and returns the
identity element, so it dispatches like any other operation:

    Monoid = runtime.contract("Monoid")
    Monoid.empty([1, 2])  # []
"""

import operator
from typing import Any

from lawkeeper.contracts.models import BindingRequest, ContractSpec, Law
from lawkeeper.engine.laws import Sample, equal
from lawkeeper.plugins.hookspecs import hookimpl


def associative(sample: Sample) -> bool:
    """concat(concat(a, b), c) == concat(a, concat(b, c))"""
    a, b, c = sample.generate(), sample.generate(), sample.generate()
    concat = sample.operation("concat")
    return equal(concat(concat(a, b), c), concat(a, concat(b, c)))


def left_identity(sample: Sample) -> bool:
    """concat(empty(a), a) == a"""
    a = sample.generate()
    return equal(sample.invoke("concat", sample.invoke("empty", a), a), a)


def right_identity(sample: Sample) -> bool:
    """concat(a, empty(a)) == a"""
    a = sample.generate()
    return equal(sample.invoke("concat", a, sample.invoke("empty", a)), a)


SEMIGROUP = ContractSpec(
    name="Semigroup",
    operations=(("concat", 2),),
    laws=(Law("associative", associative, associative.__doc__ or ""),),
    description="Types with an associative binary combination",
)

MONOID = ContractSpec(
    name="Monoid",
    operations=(("empty", 1),),
    dependencies=("Semigroup",),
    laws=(
        Law("left_identity", left_identity, left_identity.__doc__ or ""),
        Law("right_identity", right_identity, right_identity.__doc__ or ""),
    ),
    description="Semigroups with an identity element",
)

# Identity element per type
_EMPTY: dict[type, Any] = {list: [], tuple: (), str: "", int: 0}


def _empty_for(type_id: type) -> Any:
    identity = _EMPTY[type_id]

    def empty(value: Any) -> Any:
        return identity.copy() if isinstance(identity, list) else identity

    return empty


@hookimpl
def lawkeeper_contracts() -> list[ContractSpec]:
    return [SEMIGROUP, MONOID]


@hookimpl
def lawkeeper_instances() -> list[BindingRequest]:
    requests = [BindingRequest("Semigroup", type_id, {"concat": operator.add}) for type_id in _EMPTY]
    requests += [BindingRequest("Monoid", type_id, {"empty": _empty_for(type_id)}) for type_id in _EMPTY]
    return requests
