"""Query functions for CLI commands.

This module provides pure functions for inspecting a construction.
These are the functional core - no I/O, no Rich rendering.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from constructions._construction import Construction
    from constructions._elements import ElementKind


@dataclass(frozen=True, slots=True)
class ElementInfo:
    """Information about one element for listing."""

    name: str
    kind: ElementKind
    requires: tuple[str, ...]
    dependent_count: int
    value: Any


@dataclass(slots=True)
class TreeNode:
    """A node in a dependency tree for rendering."""

    name: str
    children: list[TreeNode]
    repeated: bool = False


def list_elements(construction: Construction) -> list[ElementInfo]:
    """List every element of a construction in dependency order.

    Raises:
        CycleDetectedError: If the construction cannot be ordered.

    """
    return [
        ElementInfo(
            name=name,
            kind=construction.kind(name),
            requires=tuple(sorted(construction.requires(name))),
            dependent_count=len(construction.required_by(name)),
            value=construction[name],
        )
        for name in construction.order()
    ]


def get_dependency_tree(
    construction: Construction,
    name: str,
    *,
    dependents: bool = False,
    max_depth: int | None = None,
) -> TreeNode:
    """Build the tree of what ``name`` requires, or of what requires it.

    A name met a second time on the same branch is marked ``repeated``
    and not expanded again, so cycles still produce a finite tree.

    Args:
        construction: The construction to inspect.
        name: The root of the tree.
        dependents: Follow required-by links instead of requires links.
        max_depth: Stop expanding below this depth (None for no limit).

    Raises:
        ElementNotFoundError: If ``name`` does not exist.

    """
    neighbours = construction.required_by if dependents else construction.requires

    def build(current: str, depth: int, ancestors: frozenset[str]) -> TreeNode:
        if current in ancestors:
            return TreeNode(name=current, children=[], repeated=True)
        if max_depth is not None and depth >= max_depth:
            return TreeNode(name=current, children=[])
        seen = ancestors | {current}
        children = [build(child, depth + 1, seen) for child in sorted(neighbours(current))]
        return TreeNode(name=current, children=children)

    return build(name, 0, frozenset())
