"""Graph algorithms for dependency ordering and reachability."""

from collections.abc import Collection, Mapping

from constructions._errors import CycleDetectedError


def dependency_order(requires: Mapping[str, Collection[str]]) -> list[str]:
    """Sort names so that every name comes after everything it requires.

    The names are peeled off in layers: each round emits every remaining
    name whose requirements are all already emitted. Names within one
    layer are emitted in lexicographic order, so the result only depends
    on the graph and not on insertion order.

    Args:
        requires: Mapping from name to the names it directly requires.
            Requirements that are not keys of the mapping are ignored.

    Returns:
        List of all names in dependency order.

    Raises:
        CycleDetectedError: If some names can never become free. The error
            carries every name left over, i.e. the cycles and whatever
            depends on them.

    Example:
        >>> dependency_order({"S": {"A", "B"}, "B": set(), "A": set()})
        ['A', 'B', 'S']

    """
    remaining = set(requires)
    order: list[str] = []

    while remaining:
        free = sorted(name for name in remaining if remaining.isdisjoint(requires[name]))
        if not free:
            raise CycleDetectedError(remaining)
        order.extend(free)
        remaining.difference_update(free)

    return order


def transitive_closure(edges: Mapping[str, Collection[str]], start: str) -> set[str]:
    """Collect every name reachable from ``start`` by following ``edges``.

    ``start`` itself is part of the result only when it lies on a cycle.
    Each name is expanded once, so cycles do not loop forever.

    Args:
        edges: Mapping from name to its direct neighbours.
        start: The name to start from.

    Returns:
        Set of reachable names.

    Example:
        >>> sorted(transitive_closure({"A": ["B"], "B": ["C"], "C": []}, "A"))
        ['B', 'C']

    """
    visited: set[str] = set()
    stack = list(edges.get(start, ()))
    while stack:
        current = stack.pop()
        if current not in visited:
            visited.add(current)
            stack.extend(edges.get(current, ()))
    return visited
