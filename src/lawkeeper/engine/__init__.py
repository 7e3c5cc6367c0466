"""Binding engine: generators, law execution, dispatch and the instance binder."""

from lawkeeper.engine.binder import InstanceBinder
from lawkeeper.engine.bypass import BypassDecision, BypassPolicy
from lawkeeper.engine.dispatch import ContractHandle, DispatchTable, collect_implementation
from lawkeeper.engine.generators import BUILTIN_GENERATORS, Generator, GeneratorRegistry, as_generator
from lawkeeper.engine.laws import LawRunner, Sample, equal

__all__ = [
    "BUILTIN_GENERATORS",
    "BypassDecision",
    "BypassPolicy",
    "ContractHandle",
    "DispatchTable",
    "Generator",
    "GeneratorRegistry",
    "InstanceBinder",
    "LawRunner",
    "Sample",
    "as_generator",
    "collect_implementation",
    "equal",
]
