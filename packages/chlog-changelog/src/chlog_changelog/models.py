# SPDX-License-Identifier: MIT
"""Release data shared by changelog files and GitHub releases."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict

Token = dict[str, Any]


@dataclass
class ReleaseBlock:
    """One changelog entry or one tagged release.

    Attributes:
        version: Normalized version string without build metadata, e.g. "1.0.0"
        content: Markdown tokens when segmented from a changelog file,
            the raw markdown body when loaded from GitHub releases
        url: Link to the release page, if known
        date: Publication date as YYYY-MM-DD, if known
    """

    version: str
    content: Union[list[Token], str]
    url: Optional[str] = None
    date: Optional[str] = None

    @property
    def has_tokens(self) -> bool:
        """Return True if the content is a token list rather than raw markdown."""
        return not isinstance(self.content, str)


class RawRelease(BaseModel):
    """A release record as returned by the GitHub releases API."""

    model_config = ConfigDict(extra="ignore")

    tag_name: str = ""
    name: Optional[str] = None
    body: Optional[str] = None
    html_url: Optional[str] = None
    published_at: Optional[datetime] = None
