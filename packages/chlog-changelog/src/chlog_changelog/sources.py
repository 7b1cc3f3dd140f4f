# SPDX-License-Identifier: MIT
"""Loading releases from changelog files and GitHub releases."""

from __future__ import annotations

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, Optional, Union
from urllib.parse import urlparse

import httpx

from chlog_version import Version, find_first_coercible

from .constants import (
    GITHUB_API_URL,
    GITHUB_API_VERSION,
    GITHUB_PAGE_LIMIT,
    GITHUB_PAGE_SIZE,
    GITHUB_RAW_URL,
)
from .models import RawRelease, ReleaseBlock
from .segment import segment

Predicate = Callable[[Union[Version, str, None]], bool]

# "changelog", "changelog.md" or "changelog-<anything>.md", any case.
CHANGELOG_URL_PATTERN = re.compile(r"changelog(-.*)?(\.md)?$", re.IGNORECASE)

_logger = logging.getLogger(__name__)


class SourceError(Exception):
    """Raised when a changelog or release list cannot be loaded."""

    pass


def is_changelog_url(text: str) -> bool:
    """Return True if the text is a URL pointing at a changelog file."""
    parsed = urlparse(text)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        return False
    return CHANGELOG_URL_PATTERN.search(text) is not None


def make_changelog_url(repo_name: str, branch: str, file_path: str) -> str:
    """Return the raw download URL of a file in a GitHub repository."""
    return f"{GITHUB_RAW_URL}/{repo_name}/{branch}/{file_path.lstrip('/')}"


class GitHubClient:
    """Minimal GitHub REST and raw-content client.

    The token is only sent to the GitHub API, never to arbitrary changelog
    URLs.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        *,
        base_url: str = GITHUB_API_URL,
        timeout: float = 30.0,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.token = token
        self.log = logger or _logger
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": "chlog"},
        )

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def _api_headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _api_get(self, path: str, params: Optional[dict] = None) -> httpx.Response:
        try:
            response = self._client.get(path, params=params, headers=self._api_headers())
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SourceError(
                f"GitHub API request {path} failed ({e.response.status_code})"
            ) from e
        except httpx.HTTPError as e:
            raise SourceError(f"GitHub API request {path} failed: {e}") from e
        return response

    def fetch_text(self, url: str) -> Optional[str]:
        """Download a text file.

        Returns:
            The file content, or None if the server answered with an error status

        Raises:
            SourceError: If the request could not be made at all
        """
        self.log.debug("Fetching %s", url)
        try:
            response = self._client.get(url)
        except httpx.HTTPError as e:
            raise SourceError(f"Failed to fetch {url}: {e}") from e

        if not response.is_success:
            self.log.debug("Fetching %s returned %d", url, response.status_code)
            return None
        return response.text

    def find_changelog_paths(self, repo_name: str, branch: str, file_name: str) -> list[str]:
        """Find every file with the changelog file name in a repository tree.

        The match ignores case, so ``changelog.md`` finds ``CHANGELOG.md`` and
        ``packages/core/CHANGELOG.md``.
        """
        response = self._api_get(
            f"/repos/{repo_name}/git/trees/{branch}", params={"recursive": "1"}
        )
        file_name = file_name.lower()

        paths = []
        for item in response.json().get("tree", []):
            path = item.get("path", "")
            if item.get("type") != "blob":
                continue
            lowered = path.lower()
            if lowered == file_name or lowered.endswith(f"/{file_name}"):
                paths.append(path)

        self.log.debug("Found %d changelog files in %s", len(paths), repo_name)
        return paths

    def list_releases(
        self, repo_name: str, page_limit: int = GITHUB_PAGE_LIMIT
    ) -> list[RawRelease]:
        """Fetch releases of a repository, newest first.

        Stops at the first empty page or after page_limit pages.
        """
        releases: list[RawRelease] = []
        for page in range(1, page_limit + 1):
            self.log.debug("Fetching releases page %d", page)
            response = self._api_get(
                f"/repos/{repo_name}/releases",
                params={"per_page": GITHUB_PAGE_SIZE, "page": page},
            )
            items = response.json()
            if not items:
                self.log.debug("No more releases found, stopping")
                break
            releases.extend(RawRelease.model_validate(item) for item in items)
        return releases


def releases_from_raw(raw_releases: Iterable[RawRelease], predicate: Predicate) -> list[ReleaseBlock]:
    """Turn API release records (newest first) into release blocks (oldest first).

    The version comes from the tag name, or the release name if the tag
    holds none. Releases whose version the predicate rejects are dropped.
    """
    releases = []
    for raw in reversed(list(raw_releases)):
        version = find_first_coercible([raw.tag_name, raw.name])
        release = ReleaseBlock(
            version=version.canonical if version else "",
            content=raw.body or "",
            url=raw.html_url,
            date=raw.published_at.strftime("%Y-%m-%d") if raw.published_at else None,
        )
        if predicate(release.version):
            releases.append(release)
    return releases


def load_changelog_releases(
    client: GitHubClient,
    urls: Iterable[str],
    predicate: Predicate,
    *,
    logger: Optional[logging.Logger] = None,
) -> list[ReleaseBlock]:
    """Download candidate changelog files and segment each into releases.

    Files are fetched in parallel; results keep the order of the URLs.
    Missing files contribute nothing.
    """
    log = logger or _logger
    urls = list(dict.fromkeys(urls))
    if not urls:
        return []

    with ThreadPoolExecutor(max_workers=min(8, len(urls))) as pool:
        sources = list(pool.map(client.fetch_text, urls))

    releases: list[ReleaseBlock] = []
    for url, source in zip(urls, sources):
        if not source:
            continue
        found = segment(source, predicate, logger=log)
        log.debug("%s: %d matching releases", url, len(found))
        releases.extend(found)
    return releases
