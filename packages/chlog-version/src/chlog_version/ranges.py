# SPDX-License-Identifier: MIT
"""Semantic version range expressions.

Ranges follow the grammar used by npm packages:

- Comparators: ``<1.2.3``, ``<=1.2.3``, ``>1.2.3``, ``>=1.2.3``, ``=1.2.3``, ``1.2.3``
- X-ranges: ``*``, ``1.x``, ``1.2.*``, ``1``, ``1.2``
- Tilde ranges: ``~1.2.3``, ``~>1.2``
- Caret ranges: ``^1.2.3``, ``^0.2``
- Hyphen ranges: ``1.2.3 - 2.3.4``
- Comparator sets joined by ``||``

Every range is desugared into sets of primitive comparators. Matching
always considers pre-release versions, so ``3.2.1-beta`` satisfies ``3.x``.
Parsing with ``include_prerelease`` also lets in the pre-releases of a
range's first version: ``3.0.0-beta.1`` satisfies ``3.x`` only then.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from operator import ge, gt, le, lt
from typing import Optional, Union

from .semver import Version, coerce

_NUMERIC = r"0|[1-9]\d*"
_X_IDENTIFIER = rf"{_NUMERIC}|x|X|\*"
_PRERELEASE_IDENTIFIER = r"(?:0|[1-9]\d*|\d*[a-zA-Z-][a-zA-Z0-9-]*)"
_PRERELEASE = rf"(?:-({_PRERELEASE_IDENTIFIER}(?:\.{_PRERELEASE_IDENTIFIER})*))"
_BUILD = r"(?:\+([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))"

# Groups: major, minor, patch, prerelease, build
_X_RANGE_PLAIN = (
    rf"[v=\s]*({_X_IDENTIFIER})"
    rf"(?:\.({_X_IDENTIFIER})"
    rf"(?:\.({_X_IDENTIFIER})"
    rf"{_PRERELEASE}?{_BUILD}?)?)?"
)

PARTIAL_PATTERN = re.compile(rf"^{_X_RANGE_PLAIN}$")
TILDE_PATTERN = re.compile(rf"^~>?{_X_RANGE_PLAIN}$")
CARET_PATTERN = re.compile(rf"^\^{_X_RANGE_PLAIN}$")
X_RANGE_PATTERN = re.compile(rf"^(<=|>=|<|>|=)?\s*{_X_RANGE_PLAIN}$")
HYPHEN_PATTERN = re.compile(r"^\s*(\S+)\s+-\s+(\S+)\s*$")

# Operators may be separated from their version by whitespace.
_OPERATOR_TRIM = re.compile(r"(<=|>=|<|>|=|~>|~|\^)\s+")
_SET_SEPARATOR = re.compile(r"\s*\|\|\s*")

ANY = "*"


class InvalidRangeError(ValueError):
    """Raised when a string is not a valid version range."""

    def __init__(self, range_text: str, message: str = ""):
        self.range = range_text
        self.message = message or f"Invalid version range: {range_text}"
        super().__init__(self.message)


@dataclass(frozen=True, slots=True)
class Comparator:
    """A single ``<operator><version>`` condition.

    An empty operator means exact match.
    """

    operator: str
    version: Version

    def __str__(self) -> str:
        return f"{self.operator}{self.version.canonical}"

    def test(self, version: Version) -> bool:
        """Return True if the version meets this condition."""
        if self.operator == ">=":
            return version >= self.version
        if self.operator == ">":
            return version > self.version
        if self.operator == "<=":
            return version <= self.version
        if self.operator == "<":
            return version < self.version
        return version == self.version


# Matches nothing; what ``>*`` and ``<*`` desugar to.
_NOTHING = Comparator("<", Version(0, 0, 0, "0"))
_FLOOR = Comparator(">=", Version(0, 0, 0))


def _is_x(part: Optional[str]) -> bool:
    return not part or part.lower() == "x" or part == "*"


def _at_least(major: int, minor: int, patch: int, prerelease: Optional[str] = None) -> Comparator:
    return Comparator(">=", Version(major, minor, patch, prerelease))


def _below(major: int, minor: int, patch: int) -> Comparator:
    # The "-0" floor keeps pre-releases of the next version out of the range.
    return Comparator("<", Version(major, minor, patch, "0"))


def _floor(include_prerelease: bool) -> Optional[str]:
    # A "-0" lower bound lets pre-releases of the first version in.
    return "0" if include_prerelease else None


def _desugar_caret(match: re.Match, include_prerelease: bool = False) -> list[Comparator]:
    major, minor, patch, prerelease, _ = match.groups()
    if _is_x(major):
        return []
    M = int(major)
    floor = _floor(include_prerelease)
    if _is_x(minor):
        return [_at_least(M, 0, 0, floor), _below(M + 1, 0, 0)]
    m = int(minor)
    if _is_x(patch):
        if M == 0:
            return [_at_least(M, m, 0, floor), _below(M, m + 1, 0)]
        return [_at_least(M, m, 0, floor), _below(M + 1, 0, 0)]
    p = int(patch)
    if M == 0 and m == 0:
        upper = _below(0, 0, p + 1)
    elif M == 0:
        upper = _below(0, m + 1, 0)
    else:
        upper = _below(M + 1, 0, 0)
    return [_at_least(M, m, p, prerelease), upper]


def _desugar_tilde(match: re.Match) -> list[Comparator]:
    # Tilde lower bounds never get the "-0" floor.
    major, minor, patch, prerelease, _ = match.groups()
    if _is_x(major):
        return []
    M = int(major)
    if _is_x(minor):
        return [_at_least(M, 0, 0), _below(M + 1, 0, 0)]
    m = int(minor)
    if _is_x(patch):
        return [_at_least(M, m, 0), _below(M, m + 1, 0)]
    return [_at_least(M, m, int(patch), prerelease), _below(M, m + 1, 0)]


def _desugar_x_range(match: re.Match, include_prerelease: bool = False) -> list[Comparator]:
    operator, major, minor, patch, prerelease, build = match.groups()
    operator = operator or ""
    x_major = _is_x(major)
    x_minor = x_major or _is_x(minor)
    x_patch = x_minor or _is_x(patch)

    if operator == "=" and x_patch:
        operator = ""

    if x_major:
        return [_NOTHING] if operator in (">", "<") else []

    M = int(major)
    floor = _floor(include_prerelease)
    if operator and x_patch:
        m = 0 if x_minor else int(minor)
        p = 0
        if operator == ">":
            operator = ">="
            if x_minor:
                M, m = M + 1, 0
            else:
                m += 1
        elif operator == "<=":
            operator = "<"
            if x_minor:
                M += 1
            else:
                m += 1
        if operator == "<":
            floor = "0"
        return [Comparator(operator, Version(M, m, p, floor))]

    if x_minor:
        return [_at_least(M, 0, 0, floor), _below(M + 1, 0, 0)]
    if x_patch:
        m = int(minor)
        return [_at_least(M, m, 0, floor), _below(M, m + 1, 0)]

    if operator == "=":
        operator = ""
    return [Comparator(operator, Version(M, int(minor), int(patch), prerelease, build))]


def _desugar_hyphen(
    text: str, low_text: str, high_text: str, include_prerelease: bool = False
) -> list[Comparator]:
    low = PARTIAL_PATTERN.match(low_text)
    high = PARTIAL_PATTERN.match(high_text)
    if not low or not high:
        raise InvalidRangeError(text)

    comparators: list[Comparator] = []
    floor = _floor(include_prerelease)

    major, minor, patch, prerelease, _ = low.groups()
    if not _is_x(major):
        if _is_x(minor):
            comparators.append(_at_least(int(major), 0, 0, floor))
        elif _is_x(patch):
            comparators.append(_at_least(int(major), int(minor), 0, floor))
        else:
            comparators.append(
                _at_least(int(major), int(minor), int(patch), prerelease or floor)
            )

    major, minor, patch, prerelease, _ = high.groups()
    if not _is_x(major):
        if _is_x(minor):
            comparators.append(_below(int(major) + 1, 0, 0))
        elif _is_x(patch):
            comparators.append(_below(int(major), int(minor) + 1, 0))
        elif prerelease or not include_prerelease:
            comparators.append(
                Comparator("<=", Version(int(major), int(minor), int(patch), prerelease))
            )
        else:
            # Pre-releases of the next patch stay out.
            comparators.append(_below(int(major), int(minor), int(patch) + 1))

    return comparators


def _parse_comparator(text: str, part: str, include_prerelease: bool) -> list[Comparator]:
    match = CARET_PATTERN.match(part)
    if match:
        return _desugar_caret(match, include_prerelease)
    match = TILDE_PATTERN.match(part)
    if match:
        return _desugar_tilde(match)
    match = X_RANGE_PATTERN.match(part)
    if match:
        return _desugar_x_range(match, include_prerelease)
    raise InvalidRangeError(text, f"Invalid comparator '{part}' in range: {text}")


def _parse_set(text: str, set_text: str, include_prerelease: bool) -> tuple[Comparator, ...]:
    set_text = set_text.strip()
    hyphen = HYPHEN_PATTERN.match(set_text)
    if hyphen:
        comparators = _desugar_hyphen(text, hyphen.group(1), hyphen.group(2), include_prerelease)
    else:
        comparators = []
        for part in _OPERATOR_TRIM.sub(r"\1", set_text).split():
            comparators.extend(_parse_comparator(text, part, include_prerelease))

    # Drop duplicates while keeping the written order.
    return tuple(dict.fromkeys(comparators))


@dataclass(frozen=True)
class VersionRange:
    """A parsed range: a union of comparator sets.

    An empty comparator set matches every version.
    """

    sets: tuple[tuple[Comparator, ...], ...]

    def __str__(self) -> str:
        formatted = "||".join(" ".join(str(c) for c in comparators) for comparators in self.sets)
        return formatted or ANY

    @classmethod
    def parse(cls, text: str, include_prerelease: bool = False) -> "VersionRange":
        """Parse a range expression.

        Args:
            text: Range expression
            include_prerelease: Start partial, caret and hyphen lower bounds at
                the "-0" pre-release of their first version, so ``3.x`` becomes
                ``>=3.0.0-0 <4.0.0-0``

        Raises:
            InvalidRangeError: If the expression is not a valid range
        """
        if not isinstance(text, str):
            raise InvalidRangeError(str(text), f"Range must be a string, got {type(text).__name__}")
        return _parse_range(text.strip(), include_prerelease)

    def contains(self, version: Version) -> bool:
        """Return True if the version satisfies any comparator set."""
        return any(all(c.test(version) for c in comparators) for comparators in self.sets)

    def outside(self, version: Version, hilo: str) -> bool:
        """Return True if the version lies entirely above or below the range.

        Args:
            version: Version to check
            hilo: ``">"`` to test for above the range, ``"<"`` for below

        Raises:
            ValueError: If hilo is neither ``">"`` nor ``"<"``
        """
        if hilo == ">":
            beyond, at_or_before, before = gt, le, lt
            strict, inclusive = ">", ">="
        elif hilo == "<":
            beyond, at_or_before, before = lt, ge, gt
            strict, inclusive = "<", "<="
        else:
            raise ValueError(f"hilo must be '<' or '>', got {hilo!r}")

        if self.contains(version):
            return False

        for comparators in self.sets:
            high = low = None
            for comparator in comparators or (_FLOOR,):
                high = high or comparator
                low = low or comparator
                if beyond(comparator.version, high.version):
                    high = comparator
                elif before(comparator.version, low.version):
                    low = comparator

            # The edge comparator leaves the range open in this direction.
            if high.operator in (strict, inclusive):
                return False
            if low.operator in ("", strict) and at_or_before(version, low.version):
                return False
            if low.operator == inclusive and before(version, low.version):
                return False

        return True


@lru_cache(maxsize=256)
def _parse_range(text: str, include_prerelease: bool) -> VersionRange:
    sets = [_parse_set(text, part, include_prerelease) for part in _SET_SEPARATOR.split(text)]

    if len(sets) > 1:
        # Sets that can never match are dropped unless nothing else remains.
        matchable = [s for s in sets if not (s and s[0] == _NOTHING)]
        sets = matchable or sets[:1]
        for comparators in sets:
            if not comparators:
                sets = [comparators]
                break

    return VersionRange(tuple(sets))


def valid_range(text: Optional[str]) -> Optional[str]:
    """Return the normalized form of a range, or None if it is invalid.

    Examples:
        >>> valid_range("3.x")
        '>=3.0.0 <4.0.0-0'
        >>> valid_range("^0.2.3")
        '>=0.2.3 <0.3.0-0'
        >>> valid_range("not a range") is None
        True
    """
    if text is None:
        return None
    try:
        return str(VersionRange.parse(text))
    except InvalidRangeError:
        return None


def _to_version(version: Union[str, Version, None]) -> Optional[Version]:
    if isinstance(version, Version):
        return version
    return coerce(version)


def satisfies(
    version: Union[str, Version, None], range_text: str, include_prerelease: bool = False
) -> bool:
    """Return True if the version is contained in the range.

    Unparseable versions and ranges never satisfy. See
    ``VersionRange.parse`` for include_prerelease.
    """
    parsed = _to_version(version)
    if parsed is None:
        return False
    try:
        return VersionRange.parse(range_text, include_prerelease).contains(parsed)
    except InvalidRangeError:
        return False


def outside(version: Union[str, Version, None], range_text: str, hilo: str) -> bool:
    """Return True if the version is entirely above (``">"``) or below (``"<"``) the range."""
    parsed = _to_version(version)
    if parsed is None:
        return False
    try:
        return VersionRange.parse(range_text).outside(parsed, hilo)
    except InvalidRangeError:
        return False
