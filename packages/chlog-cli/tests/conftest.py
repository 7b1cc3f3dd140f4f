# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for CLI tests."""

from __future__ import annotations

from pathlib import Path
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

KEEP_A_CHANGELOG = """
# Changelog

## [1.0.0] - 2024-04-18

### Added
- Foo feature

## [0.1.0] - 2024-03-01

### Fixed
- Bug fix

## [0.0.1] - 2023-12-30

### Removed
- Old feature
"""


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def temp_project(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary project directory with a [tool.chlog] table."""
    project_dir = tmp_path / "test_project"
    project_dir.mkdir()

    pyproject = project_dir / "pyproject.toml"
    pyproject.write_text(
        """[project]
name = "test-project"
version = "1.0.0"

[tool.chlog]
branch = "develop"
order = "desc"
"""
    )

    yield project_dir


@pytest.fixture
def github() -> Generator[MagicMock, None, None]:
    """Patch the CLI's GitHubClient; yields the client the command uses."""
    with patch("chlog_cli.main.GitHubClient") as mock_client_class:
        client = MagicMock()
        client.find_changelog_paths.return_value = []
        client.fetch_text.return_value = None
        client.list_releases.return_value = []
        mock_client_class.return_value.__enter__.return_value = client
        yield client


@pytest.fixture
def changelog_text() -> str:
    """A keep-a-changelog style file with three releases."""
    return KEEP_A_CHANGELOG
