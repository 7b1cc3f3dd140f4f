# SPDX-License-Identifier: MIT
"""Classification of the PACKAGE argument."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Optional

from chlog_changelog import is_changelog_url
from chlog_changelog.constants import GITHUB_URL_PREFIX

REPO_NAME_PATTERN = re.compile(r"^[\w.-]+/[\w.-]+$")

ARG_CHANGELOG_URL = "changelog-url"
ARG_REPO_URL = "repo-url"
ARG_REPO_NAME = "repo-name"
ARG_PACKAGE_NAME = "package-name"


@dataclass(frozen=True, slots=True)
class PackageArg:
    """What the PACKAGE argument turned out to be.

    Attributes:
        type: One of "changelog-url", "repo-url", "repo-name", "package-name"
        repo_url: GitHub repository URL, if known
        repo_name: ``owner/repo``, if known
    """

    type: str
    repo_url: Optional[str] = None
    repo_name: Optional[str] = None


def is_repo_url(text: str) -> bool:
    return text.startswith(GITHUB_URL_PREFIX)


def is_repo_name(text: str) -> bool:
    return REPO_NAME_PATTERN.match(text) is not None


def get_repo_name_from_url(url: str) -> Optional[str]:
    """Return ``owner/repo`` for a GitHub URL, or None if it has no such path."""
    if not is_repo_url(url):
        return None
    parts = [p for p in url[len(GITHUB_URL_PREFIX):].split("/") if p]
    if len(parts) < 2:
        return None
    return f"{parts[0]}/{parts[1].removesuffix('.git')}"


def parse_package_arg(
    arg: str, get_repository_url: Callable[[], Optional[str]]
) -> PackageArg:
    """Classify the PACKAGE argument.

    Args:
        arg: The argument as typed by the user
        get_repository_url: Looks up the repository URL of ``arg`` as a
            package name; only called when ``arg`` is nothing else

    Returns:
        PackageArg describing the argument

    Examples:
        >>> parse_package_arg("owner/repo", lambda: None)
        PackageArg(type='repo-name', repo_url='https://github.com/owner/repo', repo_name='owner/repo')
    """
    if is_changelog_url(arg):
        return PackageArg(
            type=ARG_CHANGELOG_URL,
            repo_name=get_repo_name_from_url(arg),
        )

    if is_repo_url(arg):
        return PackageArg(type=ARG_REPO_URL, repo_url=arg, repo_name=get_repo_name_from_url(arg))

    if is_repo_name(arg):
        return PackageArg(type=ARG_REPO_NAME, repo_url=f"{GITHUB_URL_PREFIX}{arg}", repo_name=arg)

    repo_url = get_repository_url()
    return PackageArg(
        type=ARG_PACKAGE_NAME,
        repo_url=repo_url,
        repo_name=get_repo_name_from_url(repo_url) if repo_url else None,
    )
