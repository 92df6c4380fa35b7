"""Read the ``[tool.constructions]`` table of the nearest pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path

_KEYS = frozenset({"construction", "variable", "input", "output"})


class ConfigError(Exception):
    """Raised when ``[tool.constructions]`` cannot be used."""


@dataclass(slots=True, frozen=True)
class ConstructionsConfig:
    """Defaults for the commands, taken from ``[tool.constructions]``.

    ``construction`` takes the same forms as the PATH argument of the
    commands, a script path or ``module:variable``. ``variable`` names the
    construction inside a script. Script, input and output paths are
    resolved from the directory holding pyproject.toml.
    """

    construction: str | None = None
    variable: str | None = None
    input: Path | None = None
    output: Path | None = None


def load_config(start_dir: Path | None = None) -> ConstructionsConfig:
    """Load defaults from the first pyproject.toml in ``start_dir`` or above it.

    ``start_dir`` defaults to the current directory. Without a pyproject.toml
    or a ``[tool.constructions]`` table the result has no defaults.

    Raises:
        ConfigError: If the file is not valid TOML, or the table holds
            unknown keys or values that are not strings.

    """
    start = (start_dir or Path.cwd()).resolve()
    candidates = (directory / "pyproject.toml" for directory in (start, *start.parents))
    pyproject = next((candidate for candidate in candidates if candidate.is_file()), None)
    if pyproject is None:
        return ConstructionsConfig()

    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        msg = f"{pyproject} is not valid TOML: {e}"
        raise ConfigError(msg) from e

    table = data.get("tool", {}).get("constructions", {})
    unknown = table.keys() - _KEYS
    if unknown:
        msg = f"Unknown keys in [tool.constructions]: {', '.join(sorted(unknown))}"
        raise ConfigError(msg)
    for key, value in table.items():
        if not isinstance(value, str):
            msg = f"[tool.constructions].{key} must be a string, got {type(value).__name__}"
            raise ConfigError(msg)

    root = pyproject.parent
    construction = table.get("construction")
    if construction is not None and ":" not in construction:
        construction = str(root / construction)

    return ConstructionsConfig(
        construction=construction,
        variable=table.get("variable"),
        input=root / table["input"] if "input" in table else None,
        output=root / table["output"] if "output" in table else None,
    )
