"""Recomputation and cascading removal over the element store.

These functions operate on the raw ``name -> Element`` mapping owned by a
construction. They assume the mapping satisfies the link invariants on
entry; callers are responsible for having detached or attached links
before asking for propagation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ._elements import ConstructedElement, PlacedElement
from ._errors import RecomputeFailedError, UpdateStalledError
from ._graph import transitive_closure

if TYPE_CHECKING:
    from ._elements import Element
    from ._view import ConstructionView

logger = logging.getLogger(__name__)


def _required_by_edges(elements: dict[str, Element]) -> dict[str, set[str]]:
    return {name: element.required_by for name, element in elements.items()}


def affected_by(elements: dict[str, Element], origin: str) -> set[str]:
    """Return every element that transitively requires ``origin``."""
    return transitive_closure(_required_by_edges(elements), origin)


def propagate(
    elements: dict[str, Element],
    origin: str,
    view: ConstructionView,
) -> list[str]:
    """Recompute every element downstream of a change to ``origin``.

    Elements are recomputed layer by layer: an affected element is
    recomputed once none of the elements it requires is still waiting to
    be recomputed. Within a layer, elements are processed in name order.

    Values are written back as soon as each rule returns. A failure part
    way through leaves the elements recomputed before it updated.

    Args:
        elements: The element store. Values are updated in place.
        origin: Name of the element whose value or definition changed.
        view: Read-only view passed to each rule.

    Returns:
        Names of the recomputed elements, in recomputation order.

    Raises:
        RecomputeFailedError: If a rule raises.
        UpdateStalledError: If the affected elements contain a cycle.

    """
    affected = affected_by(elements, origin)
    recomputed: list[str] = []

    logger.debug("Propagating change of %s to %d elements", origin, len(affected))

    while affected:
        stable = sorted(name for name in affected if affected.isdisjoint(elements[name].requires))
        if not stable:
            raise UpdateStalledError(origin, affected)

        for name in stable:
            match elements[name]:
                case ConstructedElement() as element:
                    try:
                        element.value = element.rule(view)
                    except Exception as e:
                        raise RecomputeFailedError(name, origin, e) from e
                    recomputed.append(name)
                    logger.debug("  Recomputed %s = %r", name, element.value)
                case PlacedElement():
                    pass

        affected.difference_update(stable)

    return recomputed


def detach(elements: dict[str, Element], element: Element) -> None:
    """Remove ``element`` from the ``required_by`` links of what it requires."""
    for required in element.requires:
        if required in elements:
            elements[required].required_by.discard(element.name)


def attach(elements: dict[str, Element], element: Element) -> None:
    """Add ``element`` to the ``required_by`` links of what it requires."""
    for required in element.requires:
        elements[required].required_by.add(element.name)


def cascade_remove(elements: dict[str, Element], name: str) -> list[str]:
    """Remove ``name`` and every element that transitively requires it.

    Removal is depth first: an element is detached from its requirements
    and deleted, then the same happens to each of its direct dependents.
    Dependents are never recomputed, only deleted.

    Args:
        elements: The element store. Modified in place.
        name: Name of the element to remove. Must be present.

    Returns:
        Names of the removed elements, in deletion order.

    """
    removed: list[str] = []
    stack = [name]

    while stack:
        current = stack.pop()
        element = elements.pop(current, None)
        if element is None:
            # Reached again through another path
            continue

        detach(elements, element)
        removed.append(current)
        stack.extend(sorted(element.required_by, reverse=True))

    logger.debug("Removed %s", ", ".join(removed))
    return removed
