# SPDX-License-Identifier: MIT
"""Split a markdown changelog into one block per released version.

Any heading of level 1 to 3 whose text contains a version starts a new
release; authors rarely agree on heading levels. Headings without a version
(``# Changelog``, ``### Added``) belong to the release above them, and so
do headings repeating a version that already started a release.

Changelogs list the newest release first. Blocks are emitted oldest first by
prepending each block when it closes; they are not re-sorted, so a document
in ascending order comes out reversed.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from chlog_version import Version, coerce

from .lexer import heading_depth, token_text, tokenize
from .models import ReleaseBlock

RELEASE_HEADING_DEPTHS = (1, 2, 3)

_logger = logging.getLogger(__name__)


def segment(
    source: str,
    predicate: Callable[[Version], bool],
    *,
    logger: Optional[logging.Logger] = None,
) -> list[ReleaseBlock]:
    """Partition a changelog into release blocks selected by a predicate.

    Args:
        source: Markdown changelog document
        predicate: Decides whether the release for a version is kept
        logger: Receives debug diagnostics; defaults to the module logger

    Returns:
        Release blocks, oldest first for a newest-first document. Content
        before the first versioned heading is dropped.
    """
    log = logger or _logger
    releases: list[ReleaseBlock] = []

    if not source:
        return releases

    current: Optional[ReleaseBlock] = None
    seen: set[str] = set()
    for token in tokenize(source):
        if heading_depth(token) in RELEASE_HEADING_DEPTHS:
            text = token_text(token).strip()
            version = coerce(text)

            if version is not None and version.canonical not in seen:
                seen.add(version.canonical)
                if current is not None:
                    releases.insert(0, current)

                if predicate(version):
                    log.debug("Release %s starts at heading %r", version, text)
                    current = ReleaseBlock(version=version.canonical, content=[])
                else:
                    log.debug("Skipping release %s", version)
                    current = None

        if current is not None:
            current.content.append(token)

    if current is not None and current.content:
        releases.insert(0, current)

    log.debug("Found %d matching releases", len(releases))
    return releases
