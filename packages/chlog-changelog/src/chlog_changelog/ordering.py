# SPDX-License-Identifier: MIT
"""Ordering of resolved releases."""

from __future__ import annotations

from typing import Iterable

from chlog_version import coerce, version_key

from .models import ReleaseBlock

ORDER_FIELDS = ("date", "version")
ORDER_DIRECTIONS = ("asc", "desc")


def _version_sort_key(release: ReleaseBlock) -> tuple:
    version = coerce(release.version)
    if version is None:
        return (0,)
    return (1, version_key(version))


def order_releases(
    releases: Iterable[ReleaseBlock],
    by: str = "date",
    direction: str = "asc",
) -> list[ReleaseBlock]:
    """Order releases by date or version.

    Sources already produce releases in publication order, so ordering by
    date keeps the incoming order. Ordering by version is a stable sort.
    ``desc`` reverses the result in both cases.

    Args:
        releases: Releases in source order
        by: "date" or "version"
        direction: "asc" or "desc"

    Returns:
        A new list of releases

    Raises:
        ValueError: If by or direction is not a known value
    """
    if by not in ORDER_FIELDS:
        raise ValueError(f"Cannot order releases by {by!r}, expected one of {ORDER_FIELDS}")
    if direction not in ORDER_DIRECTIONS:
        raise ValueError(f"Unknown order direction {direction!r}, expected one of {ORDER_DIRECTIONS}")

    ordered = list(releases)
    if by == "version":
        ordered.sort(key=_version_sort_key)
    if direction == "desc":
        ordered.reverse()
    return ordered
