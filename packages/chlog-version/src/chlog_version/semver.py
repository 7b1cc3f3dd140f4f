# SPDX-License-Identifier: MIT
"""Semantic version parsing and coercion.

Supports MAJOR.MINOR.PATCH format with optional pre-release and build metadata:
- Pre-release: -alpha, -alpha.1, -beta, -beta.2, -rc, -rc.1
- Build metadata: +build, +build.123, +20240101

Besides strict parsing, versions can be coerced out of noisy strings such as
changelog headings (``## [1.0.0] - 2024-04-18``) or release tags
(``release: v3.2``).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional

# Semantic versioning regex pattern (SemVer 2.0.0 compliant)
# https://semver.org/#is-there-a-suggested-regular-expression-regex-to-check-a-semver-string
SEMVER_PATTERN = re.compile(
    r"^(?P<major>0|[1-9]\d*)"
    r"\.(?P<minor>0|[1-9]\d*)"
    r"\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+(?P<buildmetadata>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

# The numeric forms are tried first, as npm does, so "1.2.3-0abc" coerces
# with pre-release "0" and the trailing "abc" is left behind.
_PRERELEASE_IDENTIFIER = r"(?:0|[1-9]\d*|\d*[a-zA-Z-][a-zA-Z0-9-]*)"

# Unanchored: the first run of up to three dotted numbers, not glued to other
# digits, optionally followed by pre-release and build metadata.
COERCE_PATTERN = re.compile(
    r"(?:^|[^\d])"
    r"(?P<major>\d{1,16})"
    r"(?:\.(?P<minor>\d{1,16}))?"
    r"(?:\.(?P<patch>\d{1,16}))?"
    rf"(?:-(?P<prerelease>{_PRERELEASE_IDENTIFIER}(?:\.{_PRERELEASE_IDENTIFIER})*))?"
    r"(?:\+(?P<buildmetadata>[0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?"
    r"(?:$|[^\d])"
)

# Anything other than numbers, dots, letters and hyphens marks a range.
_NON_VERSION_CHARACTER = re.compile(r"[^0-9a-zA-Z.-]")


class InvalidVersionError(ValueError):
    """Raised when a version string does not follow semantic versioning."""

    def __init__(self, version: str, message: str = ""):
        self.version = version
        self.message = message or f"Invalid semantic version: {version}"
        super().__init__(self.message)


def _prerelease_key(prerelease: Optional[str]) -> tuple:
    # A release outranks any of its pre-releases; numeric identifiers rank
    # below alphanumeric ones.
    if prerelease is None:
        return (1,)
    parts = []
    for part in prerelease.split("."):
        if part.isdigit():
            parts.append((0, int(part), ""))
        else:
            parts.append((1, 0, part))
    return (0, tuple(parts))


@dataclass(frozen=True, slots=True, eq=False)
class Version:
    """Represents a parsed semantic version.

    Versions are totally ordered by SemVer precedence. Build metadata is
    kept for display but ignored by comparisons, equality and hashing.

    Attributes:
        major: Major version number (breaking changes)
        minor: Minor version number (new features, backward compatible)
        patch: Patch version number (bug fixes, backward compatible)
        prerelease: Optional pre-release identifier (e.g., "alpha.1", "beta", "rc.2")
        build: Optional build metadata (e.g., "build.123", "20240101")
    """

    major: int
    minor: int
    patch: int
    prerelease: Optional[str] = None
    build: Optional[str] = None

    def __str__(self) -> str:
        """Return the canonical string representation of the version."""
        version = f"{self.major}.{self.minor}.{self.patch}"
        if self.prerelease:
            version += f"-{self.prerelease}"
        if self.build:
            version += f"+{self.build}"
        return version

    @property
    def is_prerelease(self) -> bool:
        """Return True if this is a pre-release version."""
        return self.prerelease is not None

    @property
    def base_version(self) -> str:
        """Return the base version without pre-release or build metadata."""
        return f"{self.major}.{self.minor}.{self.patch}"

    @property
    def canonical(self) -> str:
        """Return the version without build metadata.

        Versions that compare equal share the same canonical form.

        Examples:
            >>> parse_version("1.0.0-rc.1+build.5").canonical
            '1.0.0-rc.1'
        """
        if self.prerelease:
            return f"{self.base_version}-{self.prerelease}"
        return self.base_version

    @property
    def precedence(self) -> tuple:
        """Sort key implementing SemVer precedence."""
        return (self.major, self.minor, self.patch, _prerelease_key(self.prerelease))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.precedence == other.precedence

    def __hash__(self) -> int:
        return hash(self.precedence)

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.precedence < other.precedence

    def __le__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.precedence <= other.precedence

    def __gt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.precedence > other.precedence

    def __ge__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.precedence >= other.precedence


def parse_version(version_string: str) -> Version:
    """Parse a semantic version string into a Version object.

    Args:
        version_string: A string following semantic versioning format
            (MAJOR.MINOR.PATCH[-prerelease][+build])

    Returns:
        A Version object with parsed components

    Raises:
        InvalidVersionError: If the string does not follow semantic versioning

    Examples:
        >>> parse_version("1.2.3")
        Version(major=1, minor=2, patch=3, prerelease=None, build=None)

        >>> parse_version("1.0.0-alpha.1")
        Version(major=1, minor=0, patch=0, prerelease='alpha.1', build=None)
    """
    if not isinstance(version_string, str):
        raise InvalidVersionError(
            str(version_string), f"Version must be a string, got {type(version_string).__name__}"
        )

    version_string = version_string.strip()
    if not version_string:
        raise InvalidVersionError(version_string, "Version string cannot be empty")

    match = SEMVER_PATTERN.match(version_string)
    if not match:
        raise InvalidVersionError(version_string)

    return Version(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        patch=int(match.group("patch")),
        prerelease=match.group("prerelease"),
        build=match.group("buildmetadata"),
    )


def is_valid_semver(version_string: str) -> bool:
    """Check if a string is a valid semantic version.

    Examples:
        >>> is_valid_semver("1.0.0")
        True
        >>> is_valid_semver("1.0")
        False
    """
    if not isinstance(version_string, str):
        return False
    return SEMVER_PATTERN.match(version_string.strip()) is not None


def coerce(text: Optional[str]) -> Optional[Version]:
    """Extract the first plausible version from an arbitrary string.

    Missing minor and patch components default to 0. Pre-release and build
    metadata directly attached to the version are kept.

    Args:
        text: Any string, e.g. a changelog heading or a release tag

    Returns:
        The coerced Version, or None if the text holds no version

    Examples:
        >>> str(coerce("## [1.0.0] - 2024-04-18"))
        '1.0.0'
        >>> str(coerce("release: v3.2"))
        '3.2.0'
        >>> str(coerce("1.2.3-beta"))
        '1.2.3-beta'
        >>> coerce("a.b.c") is None
        True
    """
    if not text:
        return None

    match = COERCE_PATTERN.search(text)
    if not match:
        return None

    return Version(
        major=int(match.group("major")),
        minor=int(match.group("minor") or 0),
        patch=int(match.group("patch") or 0),
        prerelease=match.group("prerelease"),
        build=match.group("buildmetadata"),
    )


def looks_like_range(token: str) -> bool:
    """Guess whether a version boundary is a range rather than a fixed version.

    Examples:
        >>> looks_like_range("1.x")
        True
        >>> looks_like_range("^0.2.3")
        True
        >>> looks_like_range("1.2.3")
        False
    """
    return bool(_NON_VERSION_CHARACTER.search(token)) or token.endswith(".x")


def find_first_coercible(candidates: Iterable[Optional[str]]) -> Optional[Version]:
    """Return the first candidate string that coerces to a version.

    Used where several raw fields (tag name, display name) may carry the
    version.

    Examples:
        >>> str(find_first_coercible(["hello world", "release: v3.2"]))
        '3.2.0'
        >>> find_first_coercible(["abc", "def"]) is None
        True
    """
    for candidate in candidates:
        version = coerce(candidate)
        if version is not None:
            return version
    return None
