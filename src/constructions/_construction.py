"""The construction graph and its public operations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ._elements import (
    ConstructedElement,
    ConstructedSpec,
    ElementKind,
    ElementSpec,
    PlacedElement,
    PlacedSpec,
    copy_element,
    normalize_requires,
)
from ._engine import attach, cascade_remove, detach, propagate
from ._errors import (
    ConstructionRuleFailedError,
    CycleDetectedError,
    DuplicateNameError,
    ElementNotFoundError,
    NotAPlacedElementError,
    UnknownDependencyError,
)
from ._graph import dependency_order, transitive_closure
from ._rules import lift
from ._view import ConstructionView

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from ._elements import Element

logger = logging.getLogger(__name__)


class Construction:
    """A container of named elements kept consistent with their dependencies.

    Elements are either placed (a value supplied directly) or constructed
    (a value derived by a rule from other elements). Changing a placed
    element recomputes everything downstream of it in dependency order, and
    removing an element removes everything downstream of it.

    Mutating operations are not thread-safe. Hold an external lock around
    them if a construction is shared between threads.

    Example:
        >>> c = Construction()
        >>> c.place("A", 1)
        1
        >>> c.place("B", 2)
        2
        >>> c.construct("S", lambda view: view["A"] + view["B"], {"A", "B"})
        3
        >>> c.modify("A", 5)
        5
        >>> c["S"]
        7

    """

    def __init__(self) -> None:
        self._elements: dict[str, Element] = {}
        self._view = ConstructionView(self)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _element(self, name: str) -> Element:
        try:
            return self._elements[name]
        except KeyError:
            raise ElementNotFoundError(name) from None

    def get(self, name: str) -> Any:
        """Return the current value of ``name``.

        Raises:
            ElementNotFoundError: If no element is named ``name``.

        """
        return self._element(name).value

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._elements

    def __len__(self) -> int:
        return len(self._elements)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._elements))

    def names(self) -> list[str]:
        """All element names, in insertion order."""
        return list(self._elements)

    @property
    def view(self) -> ConstructionView:
        """The read-only view handed to rules."""
        return self._view

    def kind(self, name: str) -> ElementKind:
        """Return whether ``name`` is placed or constructed."""
        return self._element(name).kind

    def requires(self, name: str) -> frozenset[str]:
        """Names that ``name`` directly requires."""
        return frozenset(self._element(name).requires)

    def required_by(self, name: str) -> frozenset[str]:
        """Names that directly require ``name``."""
        return frozenset(self._element(name).required_by)

    def dependencies(self, name: str) -> frozenset[str]:
        """Names that ``name`` transitively requires."""
        self._element(name)
        edges = {n: element.requires for n, element in self._elements.items()}
        return frozenset(transitive_closure(edges, name))

    def dependents(self, name: str) -> frozenset[str]:
        """Names that transitively require ``name``."""
        self._element(name)
        edges = {n: element.required_by for n, element in self._elements.items()}
        return frozenset(transitive_closure(edges, name))

    def order(self) -> list[str]:
        """Return all names so that each comes after everything it requires.

        Names that become free at the same time are ordered by name.

        Raises:
            CycleDetectedError: If the elements contain a dependency cycle.

        """
        return dependency_order({name: element.requires for name, element in self._elements.items()})

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def _check_unused(self, name: str) -> None:
        if name in self._elements:
            raise DuplicateNameError(name)

    def _build_constructed(
        self,
        name: str,
        rule: Callable[[ConstructionView], Any],
        requires: frozenset[str],
    ) -> ConstructedElement:
        """Validate requirements and evaluate ``rule`` without touching the store.

        ``name`` itself never counts as an existing requirement, so an
        element cannot be redefined in terms of its own previous value.
        """
        missing = {r for r in requires if r == name or r not in self._elements}
        if missing:
            raise UnknownDependencyError(name, missing)

        try:
            value = rule(self._view)
        except Exception as e:
            raise ConstructionRuleFailedError(name, e) from e

        return ConstructedElement(name=name, value=value, rule=rule, requires=requires)

    def place(self, name: str, value: Any) -> Any:
        """Add a placed element holding ``value``.

        Returns:
            The placed value.

        Raises:
            DuplicateNameError: If ``name`` is already used.

        """
        self._check_unused(name)
        self._elements[name] = PlacedElement(name=name, value=value)
        logger.debug("Placed %s = %r", name, value)
        return value

    def construct(
        self,
        name: str,
        rule: Callable[[ConstructionView], Any],
        requires: Iterable[str] | str = (),
    ) -> Any:
        """Add an element whose value is ``rule(view)``.

        The rule is evaluated immediately. It is evaluated again whenever
        anything in ``requires`` changes.

        Args:
            name: Name of the new element.
            rule: Function reading other elements through a read-only view.
            requires: Names the rule reads. A single string is one name.

        Returns:
            The initial value of the element.

        Raises:
            DuplicateNameError: If ``name`` is already used.
            UnknownDependencyError: If some required names do not exist.
            ConstructionRuleFailedError: If the rule raises.

        """
        self._check_unused(name)
        element = self._build_constructed(name, rule, normalize_requires(requires))
        self._elements[name] = element
        attach(self._elements, element)
        logger.debug("Constructed %s from {%s} = %r", name, ", ".join(sorted(element.requires)), element.value)
        return element.value

    def construct_from(self, name: str, func: Callable[..., Any], *requires: str) -> Any:
        """Add an element computed as ``func(*values of requires)``.

        Example:
            >>> c.construct_from("S", operator.add, "A", "B")
            3

        """
        spec = lift(func, *requires)
        return self.construct(name, spec.rule, spec.requires)

    def define(self, name: str, *requires: str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of :meth:`construct_from`.

        Example:
            >>> @c.define("S", "A", "B")
            ... def total(a, b):
            ...     return a + b
            >>> c["S"]
            3

        """

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.construct_from(name, func, *requires)
            return func

        return decorator

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def modify(self, name: str, value: Any) -> Any:
        """Set the value of a placed element and recompute its dependents.

        Returns:
            The new value.

        Raises:
            ElementNotFoundError: If ``name`` does not exist.
            NotAPlacedElementError: If ``name`` is a constructed element.
            RecomputeFailedError: If a dependent's rule raises.
            UpdateStalledError: If the dependents contain a cycle.

        """
        match self._element(name):
            case PlacedElement() as element:
                element.value = value
            case ConstructedElement():
                raise NotAPlacedElementError(name)

        logger.debug("Modified %s = %r", name, value)
        propagate(self._elements, name, self._view)
        return value

    def replace(self, name: str, definition: ElementSpec | Any) -> Any:
        """Redefine an element, keeping the elements that require it.

        ``definition`` is a :class:`PlacedSpec` or :class:`ConstructedSpec`;
        any other object is placed as a value. The new element is built
        before the old one is discarded, so a definition with unknown
        requirements or a failing rule leaves the construction unchanged.
        Once swapped in, every dependent is recomputed against it.

        Returns:
            The value of the new element.

        Raises:
            ElementNotFoundError: If ``name`` does not exist.
            UnknownDependencyError: If the new definition requires unknown names.
            ConstructionRuleFailedError: If the new rule raises.
            RecomputeFailedError: If a dependent's rule raises.
            UpdateStalledError: If the redefinition introduced a cycle.

        """
        old = self._element(name)
        if not isinstance(definition, ElementSpec):
            definition = PlacedSpec(definition)

        new: Element
        match definition:
            case PlacedSpec(value=value):
                new = PlacedElement(name=name, value=value)
            case ConstructedSpec(rule=rule, requires=requires):
                new = self._build_constructed(name, rule, requires)

        detach(self._elements, old)
        new.required_by = old.required_by
        self._elements[name] = new
        attach(self._elements, new)
        logger.debug("Replaced %s with a %s element = %r", name, new.kind, new.value)

        propagate(self._elements, name, self._view)
        return new.value

    def remove(self, name: str) -> None:
        """Remove an element and every element that transitively requires it.

        Raises:
            ElementNotFoundError: If ``name`` does not exist.

        """
        self._element(name)
        cascade_remove(self._elements, name)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def copy(self) -> Construction:
        """Return an independent snapshot of this construction.

        Element records are copied, values and rules are shared. Restoring
        the snapshot after a failed update is the way to get all-or-nothing
        behaviour, since propagation is not rolled back.
        """
        other = Construction()
        other._elements = {name: copy_element(element) for name, element in self._elements.items()}  # noqa: SLF001
        return other

    def validate(self) -> list[str]:
        """Check the link invariants and return a list of error messages.

        Checks for:
        - Requirements naming elements that do not exist
        - ``requires`` / ``required_by`` links that are not mirrored
        - Dependency cycles

        Returns:
            List of error messages. Empty list if the construction is sound.

        """
        errors: list[str] = []

        for name, element in self._elements.items():
            missing = element.requires.difference(self._elements)
            if missing:
                errors.append(f"Element '{name}' requires unknown elements: {', '.join(sorted(missing))}")
            for required in sorted(element.requires.intersection(self._elements)):
                if name not in self._elements[required].required_by:
                    errors.append(f"Element '{name}' requires '{required}' but is not in its required-by set")
            for dependent in sorted(element.required_by):
                if dependent not in self._elements:
                    errors.append(f"Element '{name}' is required by unknown element '{dependent}'")
                elif name not in self._elements[dependent].requires:
                    errors.append(f"Element '{name}' lists '{dependent}' as required-by but is not required by it")

        try:
            self.order()
        except CycleDetectedError as e:
            errors.append(str(e))

        return errors

    def describe(self) -> str:
        """Describe every element with its requirements and value.

        Placed elements read ``name: value;`` and constructed ones
        ``{requirements} => name: value;``, in dependency order. A
        construction with a cycle is described in name order after a line
        reporting it as unorderable.
        """
        lines: list[str] = []
        try:
            names = self.order()
        except CycleDetectedError as e:
            lines.append(f"unorderable: dependency cycle among {', '.join(e.stuck)}")
            names = sorted(self._elements)

        for name in names:
            match self._elements[name]:
                case PlacedElement(value=value):
                    lines.append(f"{name}: {value!r};")
                case ConstructedElement(value=value, requires=requires):
                    lines.append(f"{{{', '.join(sorted(requires))}}} => {name}: {value!r};")

        return "\n".join(lines)

    def __str__(self) -> str:
        return self.describe()

    def __repr__(self) -> str:
        return f"<Construction with {len(self._elements)} elements>"
