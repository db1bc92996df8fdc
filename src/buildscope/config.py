"""Per-project analysis settings read from ``.buildscope.toml`` or pyproject.toml."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from buildscope.errors import ConfigError
from buildscope.graph import ORDERINGS
from buildscope.selection import DEFAULT_TEST_PROPERTIES

logger = logging.getLogger(__name__)

CONFIG_FILE = ".buildscope.toml"


@dataclass(frozen=True)
class Settings:
    """Knobs that change what the analyzer reports."""

    target_order: str = "topological"  # or "declaration"
    default_excludes: bool = True
    case_sensitive: bool = True
    external_targets: tuple[str, ...] = ()
    test_properties: tuple[str, ...] = DEFAULT_TEST_PROPERTIES
    properties: dict[str, str] = field(default_factory=dict)

    def with_overrides(self, **overrides: Any) -> Settings:
        """Return a copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _validate(data: dict[str, Any], source: Path) -> Settings:
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"{source}: unknown settings {unknown}")

    values: dict[str, Any] = {}
    if "target_order" in data:
        if data["target_order"] not in ORDERINGS:
            raise ConfigError(
                f"{source}: target_order must be one of {ORDERINGS}, "
                f"got {data['target_order']!r}"
            )
        values["target_order"] = data["target_order"]
    for flag in ("default_excludes", "case_sensitive"):
        if flag in data:
            if not isinstance(data[flag], bool):
                raise ConfigError(f"{source}: {flag} must be a boolean")
            values[flag] = data[flag]
    for name in ("external_targets", "test_properties"):
        if name in data:
            value = data[name]
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"{source}: {name} must be a list of strings")
            values[name] = tuple(value)
    if "properties" in data:
        props = data["properties"]
        if not isinstance(props, dict):
            raise ConfigError(f"{source}: properties must be a table")
        values["properties"] = {str(k): str(v) for k, v in props.items()}
    return Settings(**values)


def _load_table(path: Path, *keys: str) -> dict[str, Any] | None:
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: {e}") from e
    for key in keys:
        data = data.get(key)
        if data is None:
            return None
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: [{'.'.join(keys)}] must be a table")
    return data


def load_settings(project_dir: Path) -> Settings:
    """Read settings from ``.buildscope.toml`` or ``[tool.buildscope]``."""
    # Try .buildscope.toml first
    config_path = project_dir / CONFIG_FILE
    if config_path.exists():
        table = _load_table(config_path, "buildscope")
        if table is not None:
            logger.debug("Settings from %s", config_path)
            return _validate(table, config_path)

    # Fall back to [tool.buildscope] in pyproject.toml
    pyproject = project_dir / "pyproject.toml"
    if pyproject.exists():
        table = _load_table(pyproject, "tool", "buildscope")
        if table is not None:
            logger.debug("Settings from %s", pyproject)
            return _validate(table, pyproject)

    return Settings()
