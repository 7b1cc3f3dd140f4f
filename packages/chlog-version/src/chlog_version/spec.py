# SPDX-License-Identifier: MIT
"""Version expressions: what the user asks to see.

A version expression is either a single range reference (``1.x``,
``>=1.2.3``, ``1.2``) or a two-sided range with ``..`` (2 to 4 dots)
between the boundaries:

- ``1.2..3``: from 1.2.0 up to and including 3.0.0
- ``3..``: 3.0.0 and everything after it
- ``..3.x``: everything up to the end of the 3.x series
- ``2.x..``: the 2.x series and everything after it
- empty: from the installed version (filled in by the caller) to the latest

A boundary that looks like a range (``2.x``, ``^1.2``) matches every version
inside that range *or beyond it*, so an open-ended ``2.x..`` keeps releases
newer than the 2.x series.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Callable, Optional, Union

from . import ranges
from .semver import Version, coerce, looks_like_range

RANGE_SEPARATOR = re.compile(r"\.{2,4}")


class InvalidExpressionError(ValueError):
    """Raised when a version expression cannot be parsed."""

    def __init__(self, expression: str, message: str = ""):
        self.expression = expression
        self.message = message or f"Invalid version range: {expression}"
        super().__init__(self.message)


@dataclass(frozen=True, slots=True)
class Bound:
    """One side of a two-sided range.

    Attributes:
        value: Boundary version; None leaves this side unbounded
        raw: Boundary text as written by the user
        range: Normalized range when the boundary text is itself a range
        excluding: Compare strictly instead of inclusively
    """

    value: Optional[Version] = None
    raw: Optional[str] = None
    range: Optional[str] = None
    excluding: bool = False

    def with_value(self, value: Optional[Version], excluding: bool = False) -> "Bound":
        """Return a copy of this bound pointing at another version."""
        return replace(self, value=value, excluding=excluding)


@dataclass(frozen=True, slots=True)
class Ref:
    """A single range expression, matched including pre-releases."""

    expression: str


@dataclass(frozen=True, slots=True)
class Range:
    """An explicit lower/upper bound pair."""

    from_: Bound
    to: Bound


VersionSpec = Union[Ref, Range]


def _parse_bound(expression: str, text: str, side: str) -> Bound:
    text = text.strip()
    if not text:
        return Bound()

    value = coerce(text)
    if value is None:
        raise InvalidExpressionError(
            expression, f"Invalid version range: {expression}. {side} is invalid."
        )

    return Bound(
        value=value,
        raw=text,
        range=ranges.valid_range(text) if looks_like_range(text) else None,
    )


def parse_version_expression(expression: Optional[str]) -> VersionSpec:
    """Parse a version expression into a VersionSpec.

    Args:
        expression: The expression as typed by the user; empty or None means
            "from the installed version to the latest"

    Returns:
        A Ref for single range references, a Range for ``from..to`` forms

    Raises:
        InvalidExpressionError: On more than one separator, an uncoercible
            boundary, two empty boundaries or an invalid single reference

    Examples:
        >>> parse_version_expression("1.2")
        Ref(expression='1.2')
        >>> str(parse_version_expression("1.2..3").from_.value)
        '1.2.0'
    """
    if not expression:
        return Range(from_=Bound(), to=Bound())

    if RANGE_SEPARATOR.search(expression):
        parts = RANGE_SEPARATOR.split(expression)
        if len(parts) != 2:
            raise InvalidExpressionError(expression)

        lower = _parse_bound(expression, parts[0], "From")
        upper = _parse_bound(expression, parts[1], "To")

        if lower.value is None and upper.value is None:
            raise InvalidExpressionError(
                expression, f"Invalid version range: {expression}. Both from and to are invalid."
            )

        return Range(from_=lower, to=upper)

    if ranges.valid_range(expression) is None:
        raise InvalidExpressionError(expression)

    return Ref(expression=expression)


def _lower_bound_holds(version: Version, bound: Bound) -> bool:
    if bound.value is None:
        return True
    if bound.range:
        return ranges.satisfies(version, bound.range) or ranges.outside(version, bound.range, ">")
    if bound.excluding:
        return version > bound.value
    return version >= bound.value


def _upper_bound_holds(version: Version, bound: Bound) -> bool:
    if bound.value is None:
        return True
    if bound.range:
        return ranges.satisfies(version, bound.range) or ranges.outside(version, bound.range, "<")
    if bound.excluding:
        return version < bound.value
    return version <= bound.value


def satisfies(version: Union[Version, str, None], spec: VersionSpec) -> bool:
    """Return True if the version is selected by the version expression.

    String versions are coerced first; None and strings without a version
    never satisfy. Pre-release versions are always considered.

    Examples:
        >>> satisfies("2.5.0", parse_version_expression("1.2..3"))
        True
        >>> satisfies("5.0.0", parse_version_expression("2.x.."))
        True
        >>> satisfies(None, parse_version_expression("1.x"))
        False
    """
    if isinstance(version, str):
        version = coerce(version)
    if version is None:
        return False

    match spec:
        case Ref(expression=expression):
            return ranges.satisfies(version, expression, include_prerelease=True)
        case Range(from_=lower, to=upper):
            return _lower_bound_holds(version, lower) and _upper_bound_holds(version, upper)
        case _:
            raise TypeError(f"Expected Ref or Range, got {type(spec).__name__}")


def make_predicate(spec: VersionSpec) -> Callable[[Union[Version, str, None]], bool]:
    """Bind a spec into a one-argument filter for release sources."""

    def predicate(version: Union[Version, str, None]) -> bool:
        return satisfies(version, spec)

    return predicate
