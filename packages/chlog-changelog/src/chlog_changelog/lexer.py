# SPDX-License-Identifier: MIT
"""Block-level markdown tokens.

Tokens are mistune's AST nodes: dictionaries with a ``type`` key and, for
headings, ``attrs["level"]`` and inline ``children``.
"""

from __future__ import annotations

from typing import Iterable, Optional

import mistune
from mistune.core import BlockState
from mistune.renderers.markdown import MarkdownRenderer

from .models import Token

_parse = mistune.create_markdown(renderer=None)


def tokenize(source: str) -> list[Token]:
    """Split a markdown document into a flat list of block-level tokens."""
    if not source:
        return []
    return list(_parse(source))


def heading_depth(token: Token) -> Optional[int]:
    """Return the level of a heading token, or None for other tokens."""
    if token.get("type") != "heading":
        return None
    return token.get("attrs", {}).get("level")


def token_text(token: Token) -> str:
    """Return the plain text of a token, without markdown syntax."""
    if "children" in token:
        return "".join(token_text(child) for child in token["children"])
    if token.get("type") in ("softbreak", "linebreak"):
        return " "
    return token.get("raw", "")


def to_markdown(tokens: Iterable[Token]) -> str:
    """Serialize tokens back to markdown source."""
    state = BlockState()
    state.env.setdefault("ref_links", {})
    return MarkdownRenderer()(list(tokens), state)
