# SPDX-License-Identifier: MIT
"""Terminal rendering of releases."""

from __future__ import annotations

from typing import Optional, Sequence

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.rule import Rule
from rich.text import Text

from chlog_changelog import ReleaseBlock, to_markdown

PREVIOUS_KEYS = frozenset({"\x1b[D", "\xe0K", "a", "k"})
NEXT_KEYS = frozenset({"\x1b[C", "\xe0M", "d", "j", " ", "\r", "\n", "\t"})
QUIT_KEYS = frozenset({"q", "Q", "\x03"})

FOOTER = "[←|a|k] Previous   [→|d|j] Next   [q|ctrl+c] Quit"


def release_markdown(release: ReleaseBlock) -> str:
    """Return the markdown text of a release.

    Changelog releases are re-serialized from their tokens; GitHub releases
    get a linked title above their body.
    """
    if release.has_tokens:
        return to_markdown(release.content)

    title = release.version or "Unversioned release"
    if release.url:
        title = f"[{title}]({release.url})"
    heading = f"## {title}"
    if release.date:
        heading += f" ({release.date})"
    return f"{heading}\n\n{release.content}"


def release_header(releases: Sequence[ReleaseBlock], index: int) -> Text:
    """Header line: ``[i/n] version (date) | first - last``."""
    release = releases[index]
    header = Text.assemble(
        f"[{index + 1}/{len(releases)}] ",
        (release.version or "?", "bold magenta"),
    )
    if release.date:
        header.append(f" ({release.date})", style="dim")
    header.append(f" | {releases[0].version} - {releases[-1].version}")
    return header


def print_release_list(releases: Sequence[ReleaseBlock], console: Optional[Console] = None) -> None:
    """Print every release one after the other."""
    console = console or Console()
    text = "\n\n".join(release_markdown(r) for r in releases)
    console.print(Markdown(text))


class Pager:
    """Shows one release at a time and moves with single key presses."""

    def __init__(self, releases: Sequence[ReleaseBlock], console: Optional[Console] = None) -> None:
        if not releases:
            raise ValueError("Pager needs at least one release")
        self.releases = releases
        self.console = console or Console()
        self.index = 0

    def move(self, step: int) -> None:
        """Move by step releases, wrapping around at both ends."""
        self.index = (self.index + step) % len(self.releases)

    def show(self) -> None:
        self.console.clear()
        self.console.print(release_header(self.releases, self.index))
        self.console.print(Rule())
        self.console.print(Markdown(release_markdown(self.releases[self.index])))
        self.console.print(Rule())
        self.console.print(Text(FOOTER, style="dim"))

    def run(self) -> None:
        """Run until the user quits."""
        while True:
            self.show()
            try:
                key = click.getchar()
            except (KeyboardInterrupt, EOFError):
                return

            if key in QUIT_KEYS:
                return
            if key in PREVIOUS_KEYS:
                self.move(-1)
            elif key in NEXT_KEYS:
                self.move(1)
