# tests/fixtures/types.py
"""User-defined types bound in tests, with their generators."""

from dataclasses import dataclass

from hypothesis import strategies as st
from hypothesis.strategies import SearchStrategy


@dataclass(frozen=True)
class Point:
    x: int
    y: int


def points(seed: int) -> SearchStrategy[Point]:
    coordinate = st.integers(min_value=-seed, max_value=seed)
    return st.builds(Point, coordinate, coordinate)


def add_points(a: Point, b: Point) -> Point:
    return Point(a.x + b.x, a.y + b.y)


class Meters(float):
    """Float subclass with no generator of its own."""


class TaggedList(list):
    """list subclass; dispatch by value resolves it through the MRO."""
