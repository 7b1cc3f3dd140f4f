# SPDX-License-Identifier: MIT
"""Installed package lookups through the project's package manager."""

from __future__ import annotations

import json
import logging
import re
import subprocess
from importlib import metadata
from pathlib import Path
from typing import Optional

import httpx

from chlog_changelog.constants import GITHUB_URL_PREFIX
from chlog_version import Version, coerce

logger = logging.getLogger(__name__)

PYPI_URL = "https://pypi.org/pypi"

# Checked in order, first hit wins.
LOCK_FILES = (
    ("yarn.lock", "yarn"),
    ("package-lock.json", "npm"),
    ("pnpm-lock.yaml", "pnpm"),
    ("bun.lockb", "bun"),
    ("bun.lock", "bun"),
    ("composer.json", "composer"),
    ("Cargo.toml", "cargo"),
    ("pyproject.toml", "pip"),
    ("requirements.txt", "pip"),
)

NODE_MANAGERS = ("npm", "yarn", "pnpm")

COMPOSER_VERSION_PATTERN = re.compile(r"versions[ \t]+: \* (.*)")
COMPOSER_SOURCE_PATTERN = re.compile(r"source[ \t]+: \[git\] (\S+)")
CARGO_PKGID_PATTERN = re.compile(r"[@#:]([^@#:/]+)$")

# Preferred keys of PyPI project_urls when looking for the repository.
PYPI_REPOSITORY_KEYS = ("source", "source code", "repository", "code", "github", "homepage")


def detect_package_manager(base_path: Path) -> Optional[str]:
    """Guess the package manager from the files in a project directory."""
    for file_name, manager in LOCK_FILES:
        if (base_path / file_name).exists():
            logger.debug("Found %s, using %s", file_name, manager)
            return manager
    return None


def _run(command: list[str], cwd: Path) -> Optional[str]:
    """Run a package manager command, returning stdout or None on failure."""
    logger.debug("Running %s", " ".join(command))
    try:
        result = subprocess.run(
            command,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        logger.debug("%s is not installed", command[0])
        return None

    if result.returncode != 0:
        logger.debug("%s exited with %d: %s", command[0], result.returncode, result.stderr.strip())
        return None
    return result.stdout


def _bun_version(package: str, output: str) -> Optional[str]:
    match = re.search(rf" {re.escape(package)}@(\S+)", output)
    return match.group(1) if match else None


def get_installed_version(package: str, manager: str, base_path: Path) -> Optional[Version]:
    """Return the installed version of a package, or None if it cannot be found.

    Args:
        package: Package name
        manager: One of npm, yarn, pnpm, bun, composer, cargo, pip
        base_path: Project directory the package manager runs in

    Raises:
        ValueError: If the package manager is unknown
    """
    if manager == "pip":
        try:
            raw = metadata.version(package)
        except metadata.PackageNotFoundError:
            return None
        return coerce(raw)

    if manager in NODE_MANAGERS:
        output = _run([manager, "info", package, "version"], base_path)
        raw = output.strip() if output else None
    elif manager == "bun":
        output = _run(["bun", "pm", "ls"], base_path)
        raw = _bun_version(package, output) if output else None
    elif manager == "composer":
        output = _run(["composer", "show", package, "--no-ansi"], base_path)
        match = COMPOSER_VERSION_PATTERN.search(output) if output else None
        raw = match.group(1) if match else None
    elif manager == "cargo":
        output = _run(["cargo", "pkgid", package], base_path)
        match = CARGO_PKGID_PATTERN.search(output.strip()) if output else None
        raw = match.group(1) if match else None
    else:
        raise ValueError(f"Unknown package manager: {manager}")

    return coerce(raw) if raw else None


def normalize_repository_url(url: str) -> str:
    """Turn a git remote URL into a https GitHub URL where possible.

    Examples:
        >>> normalize_repository_url("git+https://github.com/owner/repo.git")
        'https://github.com/owner/repo'
        >>> normalize_repository_url("git+ssh://git@github.com/owner/repo.git")
        'https://github.com/owner/repo'
    """
    url = url.strip().removeprefix("git+").removesuffix(".git")
    for prefix in ("ssh://git@github.com/", "git://github.com/", "git@github.com:", "http://github.com/"):
        if url.startswith(prefix):
            return GITHUB_URL_PREFIX + url[len(prefix):]
    return url


def _pypi_repository_url(package: str) -> Optional[str]:
    try:
        response = httpx.get(f"{PYPI_URL}/{package}/json", timeout=30.0, follow_redirects=True)
    except httpx.HTTPError as e:
        logger.debug("PyPI lookup for %s failed: %s", package, e)
        return None
    if not response.is_success:
        logger.debug("PyPI lookup for %s returned %d", package, response.status_code)
        return None

    info = response.json().get("info") or {}
    urls = {k.lower(): v for k, v in (info.get("project_urls") or {}).items() if v}
    candidates = [urls[key] for key in PYPI_REPOSITORY_KEYS if key in urls]
    candidates.extend(urls.values())
    if info.get("home_page"):
        candidates.append(info["home_page"])

    for url in candidates:
        if url.startswith(GITHUB_URL_PREFIX):
            return url
    return candidates[0] if candidates else None


def _cargo_repository_url(package: str, base_path: Path) -> Optional[str]:
    output = _run(["cargo", "metadata", "--format-version", "1"], base_path)
    if not output:
        return None
    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        logger.debug("Invalid cargo metadata: %s", e)
        return None
    for item in data.get("packages", []):
        if item.get("name") == package:
            return item.get("repository")
    return None


def get_repository_url(package: str, manager: str, base_path: Path) -> Optional[str]:
    """Return the repository URL of a package, or None if it is not known.

    Raises:
        ValueError: If the package manager is unknown
    """
    if manager in NODE_MANAGERS or manager == "bun":
        output = _run(["npm", "view", package, "repository.url"], base_path)
        url = output.strip() if output else None
    elif manager == "composer":
        output = _run(["composer", "show", package, "--no-ansi"], base_path)
        match = COMPOSER_SOURCE_PATTERN.search(output) if output else None
        url = match.group(1) if match else None
    elif manager == "cargo":
        url = _cargo_repository_url(package, base_path)
    elif manager == "pip":
        url = _pypi_repository_url(package)
    else:
        raise ValueError(f"Unknown package manager: {manager}")

    return normalize_repository_url(url) if url else None
