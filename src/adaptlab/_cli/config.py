"""Run configuration: TOML run files and the [tool.adaptlab] section of pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path

import tomli_w
from pydantic import ValidationError

from adaptlab._models import LabParams


class ConfigError(Exception):
    """Error in adaptlab configuration."""


@dataclass(slots=True, frozen=True)
class AdaptlabConfig:
    """Configuration loaded from pyproject.toml.

    All relative paths are resolved from the project root (directory containing pyproject.toml).
    """

    params: Path | None = None
    output: Path | None = None
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    current = (start_dir or Path.cwd()).resolve()
    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


def _read_toml(path: Path) -> dict[str, object]:
    with path.open("rb") as f:
        try:
            return tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {path}: {e}"
            raise ConfigError(msg) from e


def _parse_path(section: dict[str, object], key: str, project_root: Path) -> Path | None:
    if key not in section:
        return None
    value = section[key]
    if not isinstance(value, str):
        msg = f"Invalid [tool.adaptlab].{key}: expected string path"
        raise ConfigError(msg)
    path = Path(value)
    if not path.is_absolute():
        path = project_root / path
    return path


def load_config(pyproject_path: Path) -> AdaptlabConfig:
    """Load and validate [tool.adaptlab] config from pyproject.toml.

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent
    data = _read_toml(pyproject_path)
    tool_section = data.get("tool", {})
    section = tool_section.get("adaptlab", {}) if isinstance(tool_section, dict) else {}
    if not section:
        return AdaptlabConfig(project_root=project_root)
    if not isinstance(section, dict):
        msg = "Invalid [tool.adaptlab]: expected a table"
        raise ConfigError(msg)

    return AdaptlabConfig(
        params=_parse_path(section, "params", project_root),
        output=_parse_path(section, "output", project_root),
        project_root=project_root,
    )


def get_config() -> AdaptlabConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        AdaptlabConfig (may be empty if no pyproject.toml or no [tool.adaptlab] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return AdaptlabConfig()
    return load_config(pyproject_path)


def load_lab_params(path: Path) -> LabParams:
    """Load run parameters from a TOML file.

    Raises:
        ConfigError: If the file is not valid TOML or the parameters are invalid.

    """
    data = _read_toml(path)
    try:
        return LabParams.model_validate(data)
    except ValidationError as e:
        msg = f"Invalid run parameters in {path}:\n{e}"
        raise ConfigError(msg) from e


def dump_lab_params(params: LabParams, path: Path) -> None:
    """Write run parameters as TOML; an unbounded demand is omitted."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        tomli_w.dump(params.model_dump(mode="json", exclude_none=True), f)
