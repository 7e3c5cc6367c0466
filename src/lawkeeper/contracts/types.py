"""Semantic type aliases shared across lawkeeper."""

from collections.abc import Callable
from typing import Any

type TypeId = type
"""Concrete data type an instance is bound for. Classes are their own id."""

type LawPredicate = Callable[[Any], Any]
"""Unary law body. Receives a Sample and returns a truthy value on success."""


def type_name(type_id: TypeId) -> str:
    """Human readable, qualified name for a type id.

    Builtins render bare ('list'); everything else is module-qualified
    ('shapes.Point') so bypass patterns can target a package.
    """
    module = type_id.__module__
    if module == "builtins":
        return type_id.__qualname__
    return f"{module}.{type_id.__qualname__}"
