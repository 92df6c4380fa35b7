"""Dependency-aware graphs of named constructions."""

__all__ = [
    "ConstructedElement",
    "ConstructedSpec",
    "Construction",
    "ConstructionRuleFailedError",
    "ConstructionView",
    "ConstructionsError",
    "CycleDetectedError",
    "DuplicateNameError",
    "Element",
    "ElementKind",
    "ElementNotFoundError",
    "ElementSpec",
    "NotAPlacedElementError",
    "PlacedElement",
    "PlacedSpec",
    "RecomputeFailedError",
    "UnknownDependencyError",
    "UpdateStalledError",
    "apply_values",
    "dependency_order",
    "export_to_toml",
    "lift",
    "load_values_from_toml",
    "values_to_dict",
]

from ._construction import Construction
from ._elements import (
    ConstructedElement,
    ConstructedSpec,
    Element,
    ElementKind,
    ElementSpec,
    PlacedElement,
    PlacedSpec,
)
from ._errors import (
    ConstructionRuleFailedError,
    ConstructionsError,
    CycleDetectedError,
    DuplicateNameError,
    ElementNotFoundError,
    NotAPlacedElementError,
    RecomputeFailedError,
    UnknownDependencyError,
    UpdateStalledError,
)
from ._graph import dependency_order
from ._io import apply_values, export_to_toml, load_values_from_toml, values_to_dict
from ._rules import lift
from ._view import ConstructionView
