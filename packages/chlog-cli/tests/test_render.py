# SPDX-License-Identifier: MIT
"""Tests for release rendering and the pager."""

from __future__ import annotations

import io
from unittest.mock import patch

import pytest
from rich.console import Console

from chlog_changelog import ReleaseBlock, segment
from chlog_cli.render import Pager, print_release_list, release_header, release_markdown


def _console() -> Console:
    return Console(file=io.StringIO(), width=100, color_system=None)


@pytest.fixture
def releases(changelog_text):
    return segment(changelog_text, lambda version: True)


GITHUB_RELEASE = ReleaseBlock(
    version="2.0.0",
    content="- Shiny",
    url="https://github.com/owner/repo/releases/tag/v2.0.0",
    date="2024-05-01",
)


class TestReleaseMarkdown:
    def test_changelog_release(self, releases):
        text = release_markdown(releases[2])
        assert "[1.0.0] - 2024-04-18" in text
        assert "Foo feature" in text

    def test_github_release(self):
        text = release_markdown(GITHUB_RELEASE)
        assert text.startswith(
            "## [2.0.0](https://github.com/owner/repo/releases/tag/v2.0.0) (2024-05-01)"
        )
        assert text.endswith("- Shiny")

    def test_unversioned_github_release(self):
        text = release_markdown(ReleaseBlock(version="", content="body"))
        assert text.startswith("## Unversioned release")


class TestReleaseHeader:
    def test_header(self, releases):
        all_releases = [*releases, GITHUB_RELEASE]
        header = release_header(all_releases, 3)
        assert header.plain == "[4/4] 2.0.0 (2024-05-01) | 0.0.1 - 2.0.0"

    def test_header_without_date(self, releases):
        assert release_header(releases, 0).plain == "[1/3] 0.0.1 | 0.0.1 - 1.0.0"


class TestPrintReleaseList:
    def test_prints_all_releases(self, releases):
        console = _console()
        print_release_list(releases, console)
        output = console.file.getvalue()
        assert "Foo feature" in output
        assert "Bug fix" in output
        assert "Old feature" in output


class TestPager:
    def test_needs_releases(self):
        with pytest.raises(ValueError):
            Pager([], _console())

    def test_move_wraps(self, releases):
        pager = Pager(releases, _console())
        pager.move(-1)
        assert pager.index == 2
        pager.move(1)
        assert pager.index == 0

    def test_keys(self, releases):
        pager = Pager(releases, _console())
        with patch("chlog_cli.render.click.getchar", side_effect=["d", "j", "x", "a", "q"]):
            pager.run()
        assert pager.index == 1
        output = pager.console.file.getvalue()
        assert "[1/3] 0.0.1" in output
        assert "[3/3] 1.0.0" in output
        assert "Previous" in output

    def test_ctrl_c_quits(self, releases):
        pager = Pager(releases, _console())
        with patch("chlog_cli.render.click.getchar", side_effect=KeyboardInterrupt):
            pager.run()
        assert pager.index == 0
