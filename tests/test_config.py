"""Tests for the configuration module."""

from pathlib import Path

import pytest

from adaptlab._cli.config import (
    AdaptlabConfig,
    ConfigError,
    dump_lab_params,
    find_pyproject_toml,
    load_config,
    load_lab_params,
)
from adaptlab._models import LabParams, default_lab_params
from adaptlab._workload import NominalStrategy


class TestFindPyprojectToml:
    """Tests for find_pyproject_toml function."""

    def test_finds_in_current_directory(self, tmp_path: Path) -> None:
        """Should find pyproject.toml in current directory."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        result = find_pyproject_toml(tmp_path)

        assert result == pyproject

    def test_finds_in_parent_directory(self, tmp_path: Path) -> None:
        """Should find pyproject.toml in parent directory."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")

        subdir = tmp_path / "labs" / "runs"
        subdir.mkdir(parents=True)

        result = find_pyproject_toml(subdir)

        assert result == pyproject

    def test_run_file_from_nested_directory(self, tmp_path: Path) -> None:
        """Should resolve [tool.adaptlab] params against the project root from a nested run directory."""
        (tmp_path / "pyproject.toml").write_text('[tool.adaptlab]\nparams = "runs/small.toml"\n')
        nested = tmp_path / "runs" / "nested"
        nested.mkdir(parents=True)

        pyproject = find_pyproject_toml(nested)
        assert pyproject is not None
        config = load_config(pyproject)

        assert config.params == tmp_path / "runs/small.toml"


class TestLoadConfig:
    """Tests for loading the [tool.adaptlab] section."""

    def test_paths_are_resolved_from_project_root(self, tmp_path: Path) -> None:
        """Should resolve relative paths against the directory of pyproject.toml."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.adaptlab]
params = "runs/small.toml"
output = "out/report"
""",
        )

        config = load_config(pyproject)

        assert config.params == tmp_path / "runs/small.toml"
        assert config.output == tmp_path / "out/report"
        assert config.project_root == tmp_path

    def test_absolute_paths_are_kept(self, tmp_path: Path) -> None:
        """Should keep absolute paths unchanged."""
        target = tmp_path / "elsewhere" / "run.toml"
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(f'[tool.adaptlab]\nparams = "{target.as_posix()}"\n')

        config = load_config(pyproject)

        assert config.params == target
        assert config.output is None

    def test_no_tool_adaptlab_section(self, tmp_path: Path) -> None:
        """Should return empty config when no [tool.adaptlab] section."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[project]
name = "test"
""",
        )

        config = load_config(pyproject)

        assert config == AdaptlabConfig(project_root=tmp_path)

    def test_non_string_path_raises_error(self, tmp_path: Path) -> None:
        """Should raise ConfigError when a path is not a string."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.adaptlab]
output = 123
""",
        )

        with pytest.raises(ConfigError, match="expected string path"):
            load_config(pyproject)

    def test_invalid_toml_raises_error(self, tmp_path: Path) -> None:
        """Should raise ConfigError for malformed TOML."""
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.adaptlab\nparams = ")

        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(pyproject)


class TestRunFiles:
    """Tests for reading and writing run parameter files."""

    def test_load_partial_file(self, tmp_path: Path) -> None:
        """Should fill in defaults for parameters the file leaves out."""
        run_file = tmp_path / "run.toml"
        run_file.write_text(
            """
change_batch_loopc = 3

[sample_params]
input_seeds = [1, 2]
demand = 5

[sample_params.generate_params]
size = 40
nominal_strategy = "by-content"
""",
        )

        params = load_lab_params(run_file)

        assert params.change_batch_loopc == 3
        assert params.sample_params.input_seeds == (1, 2)
        assert params.sample_params.demand == 5
        assert params.sample_params.generate_params.size == 40
        assert params.sample_params.generate_params.gauge == 1
        assert params.sample_params.generate_params.nominal_strategy == NominalStrategy.BY_CONTENT

    def test_invalid_parameters_raise_error(self, tmp_path: Path) -> None:
        """Should raise ConfigError when a parameter is out of range."""
        run_file = tmp_path / "run.toml"
        run_file.write_text("[sample_params.generate_params]\ngauge = 0\n")

        with pytest.raises(ConfigError, match="Invalid run parameters"):
            load_lab_params(run_file)

    def test_unknown_keys_raise_error(self, tmp_path: Path) -> None:
        """Should reject keys that are not parameters."""
        run_file = tmp_path / "run.toml"
        run_file.write_text("loops = 3\n")

        with pytest.raises(ConfigError):
            load_lab_params(run_file)

    def test_dump_then_load_defaults(self, tmp_path: Path) -> None:
        """Should write default parameters that load back unchanged."""
        run_file = tmp_path / "runs" / "default.toml"

        dump_lab_params(default_lab_params(), run_file)

        assert "demand" not in run_file.read_text()
        assert load_lab_params(run_file) == LabParams()
