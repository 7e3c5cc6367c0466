# src/lawkeeper/engine/generators.py
"""Sample generators: Hypothesis strategies keyed by concrete type.

A generator turns a seed into a strategy. The seed bounds size and
magnitude (list length, integer range), so the trials of one law spread
across small and large samples; values are then drawn from the strategy
inside a law trial.

Resolution order for a binding: instance-local override, then the
generator declared for the exact type, then NoGeneratorAvailableError.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal
from fractions import Fraction
from typing import Any

from hypothesis import strategies as st
from hypothesis.strategies import SearchStrategy

from lawkeeper.contracts.errors import DuplicateGeneratorError, GeneratorError, NoGeneratorAvailableError
from lawkeeper.contracts.types import TypeId, type_name

type Producer = SearchStrategy[Any] | Callable[[int], SearchStrategy[Any]]


@dataclass(frozen=True, slots=True)
class Generator:
    """Strategy factory for one type.

    sized is False when the producer is a plain strategy that ignores the
    seed; otherwise producer is called with the seed for every trial.
    """

    type_id: TypeId
    producer: Any = field(repr=False)
    sized: bool = True

    def strategy(self, seed: int) -> SearchStrategy[Any]:
        """Strategy for samples of this type at the given seed.

        Raises:
            GeneratorError: The producer did not return a SearchStrategy
        """
        result = self.producer(seed) if self.sized else self.producer
        if not isinstance(result, SearchStrategy):
            raise GeneratorError(
                f"Generator for '{type_name(self.type_id)}' returned {type(result).__name__}, expected a Hypothesis strategy"
            )
        return result


def as_generator(type_id: TypeId, producer: Producer | Generator) -> Generator:
    """Wrap a strategy or seed -> strategy callable as a Generator.

    Raises:
        GeneratorError: producer is neither a strategy nor callable
    """
    if isinstance(producer, Generator):
        return producer
    if isinstance(producer, SearchStrategy):
        return Generator(type_id, producer, sized=False)
    if callable(producer):
        return Generator(type_id, producer, sized=True)
    raise GeneratorError(f"Generator for '{type_name(type_id)}' must be a Hypothesis strategy or a callable taking a seed")


# =============================================================================
# Built-in generators
# =============================================================================


def hashable_scalars(seed: int) -> SearchStrategy[Any]:
    """Element strategy for built-in containers: ints, short text, booleans."""
    return st.integers(min_value=-seed, max_value=seed) | st.text(max_size=min(seed, 8)) | st.booleans()


def _floats(seed: int) -> SearchStrategy[float]:
    return st.floats(min_value=-seed, max_value=seed, allow_nan=False, allow_infinity=False)


BUILTIN_GENERATORS: dict[type, Callable[[int], SearchStrategy[Any]]] = {
    bool: lambda seed: st.booleans(),
    int: lambda seed: st.integers(min_value=-seed, max_value=seed),
    float: _floats,
    complex: lambda seed: st.complex_numbers(max_magnitude=seed, allow_nan=False, allow_infinity=False),
    Decimal: lambda seed: st.decimals(min_value=-seed, max_value=seed, allow_nan=False, allow_infinity=False, places=4),
    Fraction: lambda seed: st.fractions(min_value=-seed, max_value=seed, max_denominator=seed + 1),
    str: lambda seed: st.text(max_size=seed),
    bytes: lambda seed: st.binary(max_size=seed),
    type(None): lambda seed: st.none(),
    list: lambda seed: st.lists(hashable_scalars(seed), max_size=seed),
    tuple: lambda seed: st.lists(hashable_scalars(seed), max_size=seed).map(tuple),
    set: lambda seed: st.sets(hashable_scalars(seed), max_size=seed),
    frozenset: lambda seed: st.frozensets(hashable_scalars(seed), max_size=seed),
    dict: lambda seed: st.dictionaries(st.text(max_size=8), hashable_scalars(seed), max_size=seed),
}


class GeneratorRegistry:
    """Process-wide generators, one per concrete type.

    Usage:
        generators = GeneratorRegistry()
        generators.declare(Point, lambda seed: st.builds(Point, st.integers(-seed, seed), st.integers(-seed, seed)))
        generators.resolve(Point).strategy(10)
    """

    def __init__(self, *, builtins: bool = True) -> None:
        self._generators: dict[TypeId, Generator] = {}
        if builtins:
            for type_id, producer in BUILTIN_GENERATORS.items():
                self._generators[type_id] = Generator(type_id, producer)

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._generators

    def declare(self, type_id: TypeId, producer: Producer | Generator) -> Generator:
        """Declare the generator for a type, reusable by every contract.

        Raises:
            DuplicateGeneratorError: the type already has a generator
            TypeError: producer is neither a strategy nor callable
        """
        if not isinstance(type_id, type):
            raise TypeError(f"Generators are keyed by type, got {type_id!r}")
        if type_id in self._generators:
            raise DuplicateGeneratorError(type_id)
        generator = as_generator(type_id, producer)
        self._generators[type_id] = generator
        return generator

    def get(self, type_id: TypeId) -> Generator | None:
        return self._generators.get(type_id)

    def resolve(self, type_id: TypeId, override: Producer | Generator | None = None, *, contract: str | None = None) -> Generator:
        """Pick the generator used to sample type_id.

        Args:
            type_id: Type to sample
            override: Instance-local generator; wins over the declared one
            contract: Contract being verified (for the error message only)

        Raises:
            NoGeneratorAvailableError: no override and nothing declared
        """
        if override is not None:
            return as_generator(type_id, override)
        generator = self._generators.get(type_id)
        if generator is None:
            raise NoGeneratorAvailableError(type_id, contract)
        return generator

    def generate(self, type_id: TypeId, seed: int, override: Producer | Generator | None = None) -> SearchStrategy[Any]:
        """Strategy producing samples of type_id for the given seed."""
        return self.resolve(type_id, override).strategy(seed)

    def types(self) -> tuple[TypeId, ...]:
        return tuple(self._generators)
