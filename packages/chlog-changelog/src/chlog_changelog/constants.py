# SPDX-License-Identifier: MIT
"""Defaults shared by the changelog and release sources."""

GITHUB_API_URL = "https://api.github.com"
GITHUB_RAW_URL = "https://raw.githubusercontent.com"
GITHUB_URL_PREFIX = "https://github.com/"
GITHUB_API_VERSION = "2022-11-28"

# Pages of 100 releases fetched at most from the releases API.
GITHUB_PAGE_LIMIT = 10
GITHUB_PAGE_SIZE = 100

DEFAULT_BRANCH = "main"
DEFAULT_CHANGELOG_FILENAME = "changelog.md"
