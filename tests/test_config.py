"""Tests for the configuration module."""

from pathlib import Path

import pytest

from constructions._cli.config import ConfigError, ConstructionsConfig, load_config


def write_pyproject(directory: Path, text: str) -> Path:
    pyproject = directory / "pyproject.toml"
    pyproject.write_text(text)
    return pyproject


class TestLookup:
    """Finding the pyproject.toml to read."""

    def test_reads_parent_directory(self, tmp_path: Path) -> None:
        write_pyproject(tmp_path, '[tool.constructions]\noutput = "out.toml"\n')
        subdir = tmp_path / "src" / "pkg"
        subdir.mkdir(parents=True)

        config = load_config(subdir)

        assert config.output == tmp_path / "out.toml"

    def test_nearest_file_wins(self, tmp_path: Path) -> None:
        write_pyproject(tmp_path, '[tool.constructions]\noutput = "outer.toml"\n')
        inner = tmp_path / "inner"
        inner.mkdir()
        write_pyproject(inner, "[project]\nname = 'inner'\n")

        assert load_config(inner) == ConstructionsConfig()

    def test_no_section(self, tmp_path: Path) -> None:
        write_pyproject(tmp_path, "[project]\nname = 'test'\n")

        assert load_config(tmp_path) == ConstructionsConfig()


class TestKeys:
    """Reading the keys of [tool.constructions]."""

    def test_module_path_is_kept(self, tmp_path: Path) -> None:
        write_pyproject(tmp_path, '[tool.constructions]\nconstruction = "examples.triangle:construction"\n')

        config = load_config(tmp_path)

        assert config.construction == "examples.triangle:construction"
        assert config.variable is None

    def test_script_path_is_resolved(self, tmp_path: Path) -> None:
        write_pyproject(
            tmp_path,
            """
[tool.constructions]
construction = "examples/triangle.py"
variable = "construction"
""",
        )

        config = load_config(tmp_path)

        assert config.construction == str(tmp_path / "examples/triangle.py")
        assert config.variable == "construction"

    def test_input_and_output(self, tmp_path: Path) -> None:
        write_pyproject(
            tmp_path,
            """
[tool.constructions]
input = "data/input.toml"
output = "/abs/output.toml"
""",
        )

        config = load_config(tmp_path)

        assert config.input == tmp_path / "data/input.toml"
        assert config.output == Path("/abs/output.toml")
        assert config.construction is None


class TestErrors:
    def test_invalid_toml(self, tmp_path: Path) -> None:
        write_pyproject(tmp_path, "invalid toml [[[")

        with pytest.raises(ConfigError, match="not valid TOML"):
            load_config(tmp_path)

    def test_non_string_value(self, tmp_path: Path) -> None:
        write_pyproject(tmp_path, "[tool.constructions]\noutput = 123\n")

        with pytest.raises(ConfigError, match=r"output must be a string, got int"):
            load_config(tmp_path)

    def test_unknown_key(self, tmp_path: Path) -> None:
        write_pyproject(tmp_path, '[tool.constructions]\nproject = "pkg:project"\n')

        with pytest.raises(ConfigError, match="Unknown keys in \\[tool.constructions\\]: project"):
            load_config(tmp_path)


def test_config_is_frozen() -> None:
    config = ConstructionsConfig()

    with pytest.raises(AttributeError):
        config.output = Path("out.toml")  # type: ignore[misc]
