# SPDX-License-Identifier: MIT
"""CLI configuration loading from pyproject.toml."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from chlog_changelog.constants import DEFAULT_BRANCH, DEFAULT_CHANGELOG_FILENAME
from chlog_changelog.ordering import ORDER_DIRECTIONS, ORDER_FIELDS

PACKAGE_MANAGERS = ("npm", "yarn", "pnpm", "bun", "composer", "cargo", "pip")
SOURCES = ("changelog", "releases")


class ConfigError(Exception):
    """Raised when configuration loading fails."""

    pass


@dataclass
class ChlogConfig:
    """Defaults for the chlog command, read from ``[tool.chlog]``.

    Attributes:
        branch: Branch holding the changelog
        file: Changelog file name to look for in the repository
        order_by: "date" or "version"
        order: "asc" or "desc"
        source: "changelog", "releases", or None to try both
        package_manager: Package manager to use instead of detecting one
    """

    branch: str = DEFAULT_BRANCH
    file: str = DEFAULT_CHANGELOG_FILENAME
    order_by: str = "date"
    order: str = "asc"
    source: Optional[str] = None
    package_manager: Optional[str] = None

    @classmethod
    def from_pyproject(cls, project_dir: str | Path) -> "ChlogConfig":
        """Load configuration from a pyproject.toml file.

        A missing pyproject.toml yields the defaults.

        Args:
            project_dir: Directory containing pyproject.toml

        Returns:
            ChlogConfig instance

        Raises:
            ConfigError: If the file cannot be parsed or holds invalid values
        """
        pyproject_path = Path(project_dir) / "pyproject.toml"
        if not pyproject_path.exists():
            return cls()

        try:
            with open(pyproject_path, "rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid TOML in {pyproject_path}: {e}") from e

        return cls.from_pyproject_dict(data)

    @classmethod
    def from_pyproject_dict(cls, data: dict[str, Any]) -> "ChlogConfig":
        """Build configuration from parsed pyproject.toml data.

        Raises:
            ConfigError: If a value has the wrong type or is not an allowed choice
        """
        table = data.get("tool", {}).get("chlog", {})
        if not isinstance(table, dict):
            raise ConfigError("[tool.chlog] must be a table")

        defaults = cls()
        config = cls(
            branch=_string(table, "branch", defaults.branch),
            file=_string(table, "file", defaults.file),
            order_by=_choice(table, "order-by", ORDER_FIELDS, defaults.order_by),
            order=_choice(table, "order", ORDER_DIRECTIONS, defaults.order),
            source=_choice(table, "source", SOURCES, None),
            package_manager=_choice(table, "package-manager", PACKAGE_MANAGERS, None),
        )
        return config


def _string(table: dict[str, Any], key: str, default: Optional[str]) -> Optional[str]:
    value = table.get(key, default)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"[tool.chlog] {key} must be a string")
    return value


def _choice(
    table: dict[str, Any], key: str, choices: tuple[str, ...], default: Optional[str]
) -> Optional[str]:
    value = _string(table, key, default)
    if value is not None and value not in choices:
        raise ConfigError(
            f"[tool.chlog] {key} must be one of {', '.join(choices)}, got {value!r}"
        )
    return value


def load_config(project_dir: Optional[str | Path] = None) -> ChlogConfig:
    """Load chlog configuration from the project directory.

    Args:
        project_dir: Project directory (defaults to the current directory)

    Returns:
        ChlogConfig instance

    Raises:
        ConfigError: If configuration cannot be loaded
    """
    return ChlogConfig.from_pyproject(Path(project_dir) if project_dir else Path.cwd())
