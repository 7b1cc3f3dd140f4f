# SPDX-License-Identifier: MIT
"""Release notes from markdown changelogs and GitHub releases.

Example:
    >>> from chlog_changelog import segment, order_releases
    >>> from chlog_version import make_predicate, parse_version_expression
    >>>
    >>> predicate = make_predicate(parse_version_expression("0.1..1"))
    >>> releases = segment(changelog_markdown, predicate)
    >>> [r.version for r in order_releases(releases, by="version", direction="desc")]
    ['1.0.0', '0.1.0']
"""

__version__ = "0.1.0"

from .models import ReleaseBlock, RawRelease, Token
from .lexer import tokenize, heading_depth, token_text, to_markdown
from .segment import segment
from .ordering import order_releases
from .sources import (
    GitHubClient,
    SourceError,
    is_changelog_url,
    make_changelog_url,
    releases_from_raw,
    load_changelog_releases,
)

__all__ = [
    # Models
    "ReleaseBlock",
    "RawRelease",
    "Token",
    # Markdown tokens
    "tokenize",
    "heading_depth",
    "token_text",
    "to_markdown",
    # Segmentation and ordering
    "segment",
    "order_releases",
    # Sources
    "GitHubClient",
    "SourceError",
    "is_changelog_url",
    "make_changelog_url",
    "releases_from_raw",
    "load_changelog_releases",
]
