"""Locate and import the construction a command should operate on.

Script discovery was adapted from `fastapi_cli.discover` of package `fastapi-cli` version 0.0.8 (77e6d1f).
"""

from __future__ import annotations

import importlib
import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from constructions._construction import Construction

if TYPE_CHECKING:
    from .config import ConstructionsConfig

logger = logging.getLogger(__name__)


@dataclass
class ModuleData:
    """Import information for a Python file."""

    module_import_str: str
    extra_sys_path: Path


def get_module_data_from_path(path: Path) -> ModuleData:
    """Work out how to import a file, walking up through its packages.

    Args:
        path: Path to a Python file or package

    Returns:
        ModuleData with the dotted module name and the directory to put on sys.path

    """
    module_path = path.resolve()
    if module_path.is_file() and module_path.stem == "__init__":
        module_path = module_path.parent
    module_paths = [module_path]
    extra_sys_path = module_path.parent
    for parent in module_path.parents:
        if (parent / "__init__.py").is_file():
            module_paths.insert(0, parent)
            extra_sys_path = parent.parent
        else:
            break

    return ModuleData(
        module_import_str=".".join(p.stem for p in module_paths),
        extra_sys_path=extra_sys_path.resolve(),
    )


def load_construction_from_script(script_path: Path, variable: str | None = None) -> Construction:
    """Load a construction defined at module level in a Python script.

    Args:
        script_path: Path to the Python script
        variable: Name of the construction variable. If None, the first
            Construction found in the module is used.

    Raises:
        ImportError: If the module cannot be imported
        ValueError: If no construction is found or the named variable doesn't exist
        TypeError: If the named variable is not a Construction

    """
    module_data = get_module_data_from_path(script_path)
    if str(module_data.extra_sys_path) not in sys.path:
        sys.path.insert(0, str(module_data.extra_sys_path))

    try:
        module = importlib.import_module(module_data.module_import_str)
    except (ImportError, ValueError):
        logger.exception("Import error")
        logger.warning("Ensure all the package directories have an __init__.py file")
        raise

    if variable:
        if not hasattr(module, variable):
            msg = f"Could not find construction '{variable}' in {module_data.module_import_str}"
            raise ValueError(msg)
        construction = getattr(module, variable)
        if not isinstance(construction, Construction):
            msg = f"'{variable}' in {module_data.module_import_str} is not a Construction instance"
            raise TypeError(msg)
        return construction

    for name in dir(module):
        obj = getattr(module, name)
        if isinstance(obj, Construction):
            logger.debug("Found construction: %s", name)
            return obj

    msg = "Could not find a Construction in module, try using --construction"
    raise ValueError(msg)


def load_construction_from_module_path(module_path: str) -> Construction:
    """Load a construction from a module path (e.g., 'examples.triangle:construction').

    Raises:
        ValueError: If module path format is invalid
        TypeError: If the variable is not a Construction

    """
    if ":" not in module_path:
        msg = "Module path must be in format 'module.path:variable_name'"
        raise ValueError(msg)

    module_name, variable = module_path.split(":", 1)
    module = importlib.import_module(module_name)
    if not hasattr(module, variable):
        msg = f"Could not find construction '{variable}' in {module_name}"
        raise ValueError(msg)
    construction = getattr(module, variable)

    if not isinstance(construction, Construction):
        msg = f"'{variable}' in module '{module_name}' is not a Construction instance"
        raise TypeError(msg)

    return construction


def resolve_construction(
    path: str | None,
    config: ConstructionsConfig,
    variable: str | None = None,
) -> Construction:
    """Load the construction named on the command line, falling back to config.

    Args:
        path: Script path or 'module:variable' given on the command line, if any
        config: Loaded [tool.constructions] configuration
        variable: Construction variable name (script paths only)

    Raises:
        ValueError: If neither a path nor a configured construction is available

    """
    if path is None:
        path = config.construction
        variable = variable or config.variable

    if path is None:
        msg = (
            "No construction specified. Provide a path argument or configure "
            "[tool.constructions].construction in pyproject.toml."
        )
        raise ValueError(msg)

    if ":" in path:
        return load_construction_from_module_path(path)
    return load_construction_from_script(Path(path), variable)
