# SPDX-License-Identifier: MIT
"""Semantic versions, version ranges and version expressions for chlog.

This package turns what a user types ("which releases do I want to see?")
into a predicate over semantic versions.

Example:
    >>> from chlog_version import coerce, parse_version_expression, satisfies
    >>>
    >>> spec = parse_version_expression("1.2..3")
    >>> satisfies("2.0.0", spec)
    True
    >>> satisfies("3.0.1", spec)
    False
    >>>
    >>> str(coerce("## [1.0.0] - 2024-04-18"))
    '1.0.0'
"""

__version__ = "0.1.0"

from .semver import (
    Version,
    parse_version,
    is_valid_semver,
    coerce,
    looks_like_range,
    find_first_coercible,
    InvalidVersionError,
    SEMVER_PATTERN,
)
from .compare import (
    compare_versions,
    version_key,
)
from .ranges import (
    Comparator,
    VersionRange,
    valid_range,
    InvalidRangeError,
)
from .spec import (
    Bound,
    Ref,
    Range,
    VersionSpec,
    parse_version_expression,
    satisfies,
    make_predicate,
    InvalidExpressionError,
)

__all__ = [
    # Version parsing
    "Version",
    "parse_version",
    "is_valid_semver",
    "coerce",
    "looks_like_range",
    "find_first_coercible",
    "InvalidVersionError",
    "SEMVER_PATTERN",
    # Version comparison
    "compare_versions",
    "version_key",
    # Ranges
    "Comparator",
    "VersionRange",
    "valid_range",
    "InvalidRangeError",
    # Version expressions
    "Bound",
    "Ref",
    "Range",
    "VersionSpec",
    "parse_version_expression",
    "satisfies",
    "make_predicate",
    "InvalidExpressionError",
]
