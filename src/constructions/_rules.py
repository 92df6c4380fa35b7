"""Helpers for writing construction rules as plain functions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ._elements import ConstructedSpec

if TYPE_CHECKING:
    from collections.abc import Callable

    from ._view import ConstructionView


def lift(func: Callable[..., Any], *requires: str) -> ConstructedSpec:
    """Turn a function of values into a constructed element definition.

    The resulting rule reads ``requires`` from the construction, in the
    order given, and passes their values positionally to ``func``. The
    same name may appear more than once.

    Example:
        >>> spec = lift(operator.mul, "A", "B")
        >>> c.replace("S", spec)
        10

    """

    def rule(view: ConstructionView) -> Any:
        return func(*(view[name] for name in requires))

    rule.__name__ = getattr(func, "__name__", rule.__name__)
    rule.__qualname__ = getattr(func, "__qualname__", rule.__qualname__)
    return ConstructedSpec(rule=rule, requires=frozenset(requires))
