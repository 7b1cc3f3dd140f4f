# SPDX-License-Identifier: MIT
"""Finding the releases the user asked for."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from chlog_changelog import (
    GitHubClient,
    ReleaseBlock,
    SourceError,
    load_changelog_releases,
    make_changelog_url,
    releases_from_raw,
)
from chlog_version import Range, VersionSpec, make_predicate

from .input import ARG_CHANGELOG_URL, ARG_PACKAGE_NAME, PackageArg
from .package import get_installed_version

_logger = logging.getLogger(__name__)

StatusCallback = Callable[[str], None]


class ChlogError(Exception):
    """Raised when the requested releases cannot be found."""

    pass


@dataclass
class Query:
    """Everything needed to look up releases for one invocation.

    Attributes:
        package: The PACKAGE argument as given
        arg: Classification of the argument
        base_path: Project directory
        branch: Branch holding the changelog
        file: Changelog file name
        package_manager: Package manager in use, if any
        source: "changelog", "releases", or None to try both
    """

    package: str
    arg: PackageArg
    base_path: Path
    branch: str
    file: str
    package_manager: Optional[str] = None
    source: Optional[str] = None

    @property
    def changelog_url(self) -> Optional[str]:
        """The changelog file to try first."""
        if self.arg.type == ARG_CHANGELOG_URL:
            return self.package
        if self.arg.repo_name:
            return make_changelog_url(self.arg.repo_name, self.branch, self.file)
        return None


def _ignore_status(message: str) -> None:
    pass


def fill_installed_version(spec: VersionSpec, query: Query) -> VersionSpec:
    """Start an open-ended range just after the installed version.

    Only applies to package names with a known package manager; other
    arguments keep the open lower bound.
    """
    if not isinstance(spec, Range) or spec.from_.value is not None:
        return spec
    if query.arg.type != ARG_PACKAGE_NAME:
        return spec
    if not query.package_manager:
        raise ChlogError("Could not find package manager to retrieve installed version.")

    installed = get_installed_version(query.package, query.package_manager, query.base_path)
    if installed is None:
        _logger.debug("No installed version of %s found", query.package)
        return spec
    _logger.debug("Installed version of %s is %s", query.package, installed)
    return Range(from_=spec.from_.with_value(installed, excluding=True), to=spec.to)


def _changelog_urls(query: Query, client: GitHubClient, log: logging.Logger) -> list[str]:
    urls = [query.changelog_url] if query.changelog_url else []
    if query.arg.type == ARG_CHANGELOG_URL or not query.arg.repo_name:
        return urls

    try:
        paths = client.find_changelog_paths(query.arg.repo_name, query.branch, query.file)
    except SourceError as e:
        log.debug("Could not list changelog files: %s", e)
        return urls
    urls.extend(make_changelog_url(query.arg.repo_name, query.branch, p) for p in paths)
    return urls


def find_releases(
    query: Query,
    spec: VersionSpec,
    client: GitHubClient,
    *,
    status: StatusCallback = _ignore_status,
    logger: Optional[logging.Logger] = None,
) -> list[ReleaseBlock]:
    """Load releases matching the version expression from changelog files, then GitHub releases.

    GitHub releases are used when no changelog release matches, or directly
    when the query's source is "releases".

    Raises:
        ChlogError: If no source can be used
        SourceError: If a download fails
    """
    log = logger or _logger
    predicate = make_predicate(spec)
    releases: list[ReleaseBlock] = []

    if query.source != "releases":
        status("Looking for changelog files")
        urls = _changelog_urls(query, client, log)
        if not urls:
            raise ChlogError(f"Could not find a repository for {query.package}")
        status("Loading changelog")
        releases = load_changelog_releases(client, urls, predicate, logger=log)
        if not releases and query.source == "changelog":
            raise ChlogError("Failed to load changelog file or no matching releases found.")

    if not releases:
        if not query.arg.repo_name:
            raise ChlogError(f"Could not find a GitHub repository for {query.package}")
        status("Loading GitHub releases")
        raw = client.list_releases(query.arg.repo_name)
        log.debug("Found %d GitHub releases", len(raw))
        releases = releases_from_raw(raw, predicate)

    return releases
