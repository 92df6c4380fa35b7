"""Read-only access to a construction, handed to construction rules."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ._construction import Construction


class ConstructionView:
    """A read-only window onto a construction.

    Rules are evaluated against a view rather than the construction itself,
    so they can read the current value of any element but cannot mutate
    the graph they are part of.

    Example:
        >>> c = Construction()
        >>> c.place("A", 1)
        1
        >>> c.construct("B", lambda view: view["A"] + 1, {"A"})
        2

    """

    __slots__ = ("_construction",)

    def __init__(self, construction: Construction) -> None:
        self._construction = construction

    def get(self, name: str) -> Any:
        """Return the current value of ``name``.

        Raises:
            ElementNotFoundError: If no element is named ``name``.

        """
        return self._construction.get(name)

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._construction

    def __repr__(self) -> str:
        return f"ConstructionView({self._construction!r})"
