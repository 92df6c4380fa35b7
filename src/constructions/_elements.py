"""Element records stored in a construction."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum, auto
from typing import TYPE_CHECKING, Any, ClassVar

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ._view import ConstructionView


class ElementKind(StrEnum):
    """The kind of element in a construction."""

    PLACED = auto()  # Value supplied directly
    CONSTRUCTED = auto()  # Value derived by a rule


@dataclass(slots=True)
class PlacedElement:
    """An element holding a directly supplied value.

    Attributes:
        name: Unique name of the element within its construction.
        value: The supplied value. Opaque to the construction.
        required_by: Names of the elements that directly require this one.

    """

    kind: ClassVar[ElementKind] = ElementKind.PLACED

    name: str
    value: Any
    required_by: set[str] = field(default_factory=set)

    @property
    def requires(self) -> frozenset[str]:
        """Placed elements never require anything."""
        return frozenset()


@dataclass(slots=True)
class ConstructedElement:
    """An element whose value is derived by a rule over other elements.

    Attributes:
        name: Unique name of the element within its construction.
        value: The value produced by the last evaluation of ``rule``.
        rule: Function from a read-only view of the construction to a value.
        requires: Names this element's rule reads. Fixed at creation.
        required_by: Names of the elements that directly require this one.

    """

    kind: ClassVar[ElementKind] = ElementKind.CONSTRUCTED

    name: str
    value: Any
    rule: Callable[[ConstructionView], Any]
    requires: frozenset[str] = frozenset()
    required_by: set[str] = field(default_factory=set)


Element = PlacedElement | ConstructedElement


@dataclass(frozen=True, slots=True)
class PlacedSpec:
    """Definition of a placed element, used when redefining an element."""

    value: Any


@dataclass(frozen=True, slots=True)
class ConstructedSpec:
    """Definition of a constructed element, used when redefining an element."""

    rule: Callable[[ConstructionView], Any]
    requires: frozenset[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "requires", normalize_requires(self.requires))


ElementSpec = PlacedSpec | ConstructedSpec


def normalize_requires(requires: Iterable[str] | str) -> frozenset[str]:
    """Turn a collection of names into a frozenset.

    A bare string is treated as a single name rather than as a sequence
    of one-character names.
    """
    if isinstance(requires, str):
        return frozenset({requires})
    return frozenset(requires)


def copy_element(element: Element) -> Element:
    """Copy an element record with its own ``required_by`` set."""
    match element:
        case PlacedElement():
            return PlacedElement(
                name=element.name,
                value=element.value,
                required_by=set(element.required_by),
            )
        case ConstructedElement():
            return ConstructedElement(
                name=element.name,
                value=element.value,
                rule=element.rule,
                requires=element.requires,
                required_by=set(element.required_by),
            )
