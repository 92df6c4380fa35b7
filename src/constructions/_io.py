"""Import and export of element values as TOML."""

from __future__ import annotations

import dataclasses
import logging
import tomllib
from collections.abc import Mapping
from datetime import date, datetime, time
from pathlib import Path
from typing import TYPE_CHECKING, Any

import tomli_w
from pydantic import BaseModel

from ._elements import ElementKind
from ._errors import NotAPlacedElementError

if TYPE_CHECKING:
    from ._construction import Construction

logger = logging.getLogger(__name__)

_TOML_SCALARS = (str, bool, int, float, datetime, date, time)


def _serialize_value(value: Any) -> Any:
    """Recursively serialize a value for TOML export, handling special types.

    Handles:
    - Pydantic BaseModel: Converts to dict via model_dump()
    - Dataclass instances: Converts to dict via dataclasses.asdict()
    - Mappings: Recursively serializes values with string keys
    - list/tuple/set: Recursively serializes items
    - TOML-native scalars: Returns as-is
    - Anything else (Path, complex, custom objects): Converts to str
    """
    # Use mode='python' to preserve Python types (datetime, Decimal, etc.)
    if isinstance(value, BaseModel):
        return _serialize_value(value.model_dump(mode="python"))

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _serialize_value(dataclasses.asdict(value))

    # Exclude None (TOML doesn't support None)
    if isinstance(value, Mapping):
        return {str(k): _serialize_value(v) for k, v in value.items() if v is not None}

    if isinstance(value, (list, tuple)):
        return [_serialize_value(item) for item in value]

    if isinstance(value, (set, frozenset)):
        return [_serialize_value(item) for item in sorted(value, key=repr)]

    if isinstance(value, _TOML_SCALARS):
        return value

    return str(value)


def values_to_dict(construction: Construction) -> dict[str, Any]:
    """Convert the values of a construction to a dictionary suitable for TOML.

    Keys follow the dependency order of the construction. Elements whose
    value is None are left out.

    Raises:
        CycleDetectedError: If the construction cannot be ordered.

    """
    data: dict[str, Any] = {}
    for name in construction.order():
        value = construction[name]
        if value is None:
            logger.debug("Skipping %s (value is None)", name)
            continue
        data[name] = _serialize_value(value)
    return data


def export_to_toml(construction: Construction, output_path: Path | str) -> None:
    """Export the values of a construction to a TOML file."""
    output_path = Path(output_path)
    with output_path.open("wb") as f:
        tomli_w.dump(values_to_dict(construction), f)

    logger.debug("Exported values to %s", output_path)


def load_values_from_toml(input_path: Path | str) -> dict[str, Any]:
    """Load element values from a TOML file.

    Each top-level key is an element name and its value is the raw TOML
    value for that element.
    """
    input_path = Path(input_path)
    with input_path.open("rb") as f:
        values = tomllib.load(f)

    logger.debug("Loaded %d values from %s", len(values), input_path)
    return values


def _coerce(current: Any, raw: Any) -> Any:
    """Validate a raw value into the model type of the current value, if any."""
    if isinstance(current, BaseModel):
        return type(current).model_validate(raw)
    return raw


def apply_values(construction: Construction, values: Mapping[str, Any]) -> list[str]:
    """Apply raw values to the placed elements of a construction.

    Existing placed elements are modified, which recomputes their
    dependents. When the current value is a pydantic model the raw value is
    validated into that model type first. Names that do not exist yet are
    placed as new elements.

    Returns:
        The names that were applied, in the order they were applied.

    Raises:
        NotAPlacedElementError: If a name refers to a constructed element.
        pydantic.ValidationError: If a value does not fit its model type.

    """
    for name in values:
        if name in construction and construction.kind(name) is ElementKind.CONSTRUCTED:
            raise NotAPlacedElementError(name)

    applied: list[str] = []
    for name, raw in values.items():
        if name not in construction:
            construction.place(name, raw)
        else:
            construction.modify(name, _coerce(construction[name], raw))
        applied.append(name)

    return applied
