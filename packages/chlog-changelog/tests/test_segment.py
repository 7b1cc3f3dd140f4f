# SPDX-License-Identifier: MIT
"""Tests for changelog segmentation."""

from __future__ import annotations

import logging

from hypothesis import given, settings, strategies as st

from chlog_changelog import heading_depth, segment, to_markdown, token_text, tokenize
from chlog_version import Version, make_predicate, parse_version_expression

KEEP_A_CHANGELOG = """
# Changelog

## [1.0.0] - 2024-04-18

### Added
- Foo feature
- Bar feature

### Changed
- Baz feature

## [0.1.0] - 2024-03-01

### Added
- New feature
- Another feature

### Fixed
- Bug fix

## [0.0.1] - 2023-12-30

### Removed
- Old feature
"""

TOP_LEVEL_HEADINGS = """
# [1.0.0] - 2024-04-18
- Added foo feature
- Fixed bar feature

# [0.1.0] - 2024-03-01
- Added new feature
- Added another feature

# [0.0.1] - 2023-12-30
- Old feature removed
"""

INCONSISTENT_HEADINGS = """
# Changelog

Hello this is my changelog.

## [1.0.0] - 2024-04-18

# Added
- Added foo feature
- Fixed bar feature

### Changed
- Baz feature

### [0.1.0] - 2024-03-01
- Added new feature
- Added another feature

# [0.0.1] - 2023-12-30

### Removed
- Old feature removed
"""


def _keep_all(version):
    return True


def _headings(release):
    return [token_text(t) for t in release.content if t["type"] == "heading"]


def _structure(tokens):
    return [t["type"] for t in tokens if t["type"] != "blank_line"]


class TestSegment:
    """Tests for segment function."""

    def test_empty_source(self):
        assert segment("", _keep_all) == []

    def test_no_versions(self):
        assert segment("# Readme\n\nNothing to see here.\n", _keep_all) == []

    def test_keep_a_changelog(self):
        releases = segment(KEEP_A_CHANGELOG, _keep_all)
        assert [r.version for r in releases] == ["0.0.1", "0.1.0", "1.0.0"]
        assert _headings(releases[2]) == ["[1.0.0] - 2024-04-18", "Added", "Changed"]
        assert _headings(releases[1]) == ["[0.1.0] - 2024-03-01", "Added", "Fixed"]
        assert _headings(releases[0]) == ["[0.0.1] - 2023-12-30", "Removed"]

    def test_top_level_headings(self):
        releases = segment(TOP_LEVEL_HEADINGS, _keep_all)
        assert [r.version for r in releases] == ["0.0.1", "0.1.0", "1.0.0"]
        assert "Added foo feature" in to_markdown(releases[2].content)

    def test_inconsistent_headings(self):
        releases = segment(INCONSISTENT_HEADINGS, _keep_all)
        assert [r.version for r in releases] == ["0.0.1", "0.1.0", "1.0.0"]
        assert _headings(releases[2]) == ["[1.0.0] - 2024-04-18", "Added", "Changed"]
        assert _headings(releases[0]) == ["[0.0.1] - 2023-12-30", "Removed"]

    def test_preamble_discarded(self):
        releases = segment(INCONSISTENT_HEADINGS, _keep_all)
        rendered = "".join(to_markdown(r.content) for r in releases)
        assert "Hello this is my changelog." not in rendered
        assert "# Changelog" not in rendered

    def test_release_starts_with_its_heading(self):
        for release in segment(KEEP_A_CHANGELOG, _keep_all):
            first = release.content[0]
            assert heading_depth(first) in (1, 2, 3)
            assert release.version in token_text(first)

    def test_tokens_content(self):
        releases = segment(KEEP_A_CHANGELOG, _keep_all)
        assert all(r.has_tokens for r in releases)
        assert releases[0].url is None
        assert releases[0].date is None

    def test_filters_with_predicate(self):
        predicate = make_predicate(parse_version_expression("0.1..1"))
        releases = segment(KEEP_A_CHANGELOG, predicate)
        assert [r.version for r in releases] == ["0.1.0", "1.0.0"]

    def test_filtered_release_content_dropped(self):
        predicate = make_predicate(parse_version_expression("1.x"))
        releases = segment(KEEP_A_CHANGELOG, predicate)
        assert [r.version for r in releases] == ["1.0.0"]
        assert "Bug fix" not in to_markdown(releases[0].content)

    def test_predicate_receives_versions(self):
        seen = []

        def predicate(version):
            seen.append(version)
            return False

        assert segment(KEEP_A_CHANGELOG, predicate) == []
        assert seen == [Version(1, 0, 0), Version(0, 1, 0), Version(0, 0, 1)]

    def test_deep_headings_are_content(self):
        source = "## 2.0.0\n\n#### 1.5.0 notes\n\ntext\n\n## 1.0.0\n\nold\n"
        releases = segment(source, _keep_all)
        assert [r.version for r in releases] == ["1.0.0", "2.0.0"]
        assert "1.5.0 notes" in _headings(releases[1])

    def test_repeated_version_folds_into_release(self):
        source = "## 1.0.0\n\nfirst\n\n### 1.0.0 migration\n\nsteps\n\n## 0.9.0\n\nold\n"
        releases = segment(source, _keep_all)
        assert [r.version for r in releases] == ["0.9.0", "1.0.0"]
        assert _headings(releases[1]) == ["1.0.0", "1.0.0 migration"]

    def test_build_metadata_dropped(self):
        releases = segment("## 1.0.0+build.5\n\n- a\n", _keep_all)
        assert [r.version for r in releases] == ["1.0.0"]

    def test_build_variants_share_a_release(self):
        source = "## 1.0.0+a\n\n- first\n\n## 1.0.0\n\n- second\n\n## 0.9.0\n\n- old\n"
        releases = segment(source, _keep_all)
        assert [r.version for r in releases] == ["0.9.0", "1.0.0"]
        assert "second" in to_markdown(releases[1].content)

    def test_prerelease_headings(self):
        source = "## v2.0.0-beta.1\n\n- beta\n\n## v1.0.0\n\n- stable\n"
        releases = segment(source, _keep_all)
        assert [r.version for r in releases] == ["1.0.0", "2.0.0-beta.1"]

    def test_ascending_document_is_not_resorted(self):
        source = "## 0.1.0\n\n- a\n\n## 0.2.0\n\n- b\n"
        releases = segment(source, _keep_all)
        assert [r.version for r in releases] == ["0.2.0", "0.1.0"]

    def test_logger_receives_diagnostics(self, caplog):
        logger = logging.getLogger("test.segment")
        with caplog.at_level(logging.DEBUG, logger="test.segment"):
            segment(KEEP_A_CHANGELOG, _keep_all, logger=logger)
        assert "Found 3 matching releases" in caplog.text


class TestRoundTrip:
    """Serializing a release and tokenizing it again keeps its structure."""

    def test_keep_a_changelog(self):
        for release in segment(KEEP_A_CHANGELOG, _keep_all):
            again = tokenize(to_markdown(release.content))
            assert _structure(again) == _structure(release.content)

    def test_inconsistent_headings(self):
        for release in segment(INCONSISTENT_HEADINGS, _keep_all):
            again = tokenize(to_markdown(release.content))
            assert _structure(again) == _structure(release.content)


# =============================================================================
# Property-based tests
# =============================================================================

version_triples = st.tuples(st.integers(0, 20), st.integers(0, 20), st.integers(0, 20))


@st.composite
def changelogs(draw):
    """Generate a newest-first changelog with unique versions and mixed heading depths."""
    triples = draw(st.lists(version_triples, min_size=1, max_size=8, unique=True))
    versions = sorted((Version(*t) for t in triples), reverse=True)
    lines = ["# Changelog", ""]
    for version in versions:
        depth = draw(st.integers(1, 3))
        lines.append(f"{'#' * depth} [{version}]")
        lines.append("")
        if draw(st.booleans()):
            lines.append("### Fixed")
            lines.append("")
        lines.append(f"- change in {version.major}-{version.minor}-{version.patch}")
        lines.append("")
    return versions, "\n".join(lines)


class TestSegmentProperties:
    @settings(max_examples=50)
    @given(changelogs())
    def test_one_block_per_version_oldest_first(self, generated):
        versions, source = generated
        releases = segment(source, _keep_all)
        assert [r.version for r in releases] == [str(v) for v in reversed(versions)]

    @settings(max_examples=50)
    @given(changelogs(), version_triples)
    def test_predicate_selects_subset(self, generated, pivot):
        versions, source = generated
        floor = Version(*pivot)
        releases = segment(source, lambda v: v >= floor)
        expected = [str(v) for v in reversed(versions) if v >= floor]
        assert [r.version for r in releases] == expected
