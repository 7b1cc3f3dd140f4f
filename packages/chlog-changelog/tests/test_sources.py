# SPDX-License-Identifier: MIT
"""Tests for changelog and GitHub release sources."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import httpx
import pytest

from chlog_changelog import (
    GitHubClient,
    RawRelease,
    SourceError,
    is_changelog_url,
    load_changelog_releases,
    make_changelog_url,
    releases_from_raw,
)
from chlog_version import make_predicate, parse_version_expression


def _keep_all(version):
    return True


def _response(json_data=None, text="", status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.is_success = 200 <= status_code < 300
    response.text = text
    response.json = MagicMock(return_value=json_data)
    response.raise_for_status = MagicMock()
    return response


@pytest.fixture
def mock_http():
    """Patch httpx.Client so GitHubClient talks to a MagicMock."""
    with patch("chlog_changelog.sources.httpx.Client") as mock_client_class:
        mock_client = MagicMock()
        mock_client_class.return_value = mock_client
        yield mock_client


class TestIsChangelogUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/changelog.md",
            "https://example.com/CHANGELOG.md",
            "https://example.com/changelog-1.md",
            "https://example.com/changelog-3.1.md",
            "https://example.com/CHANGELOG-3.1.md",
            "https://example.com/docs/changelog",
        ],
    )
    def test_changelog_urls(self, url):
        assert is_changelog_url(url) is True

    @pytest.mark.parametrize(
        "text",
        [
            "changelog.md",
            "owner/changelog",
            "https://github.com/owner/repo",
            "https://example.com/readme.md",
            "ftp://example.com/changelog.md",
        ],
    )
    def test_other_inputs(self, text):
        assert is_changelog_url(text) is False


class TestMakeChangelogUrl:
    def test_raw_url(self):
        assert (
            make_changelog_url("owner/repo", "main", "CHANGELOG.md")
            == "https://raw.githubusercontent.com/owner/repo/main/CHANGELOG.md"
        )

    def test_nested_path(self):
        assert (
            make_changelog_url("owner/repo", "dev", "/packages/core/CHANGELOG.md")
            == "https://raw.githubusercontent.com/owner/repo/dev/packages/core/CHANGELOG.md"
        )


RAW_RELEASES = [
    {
        "tag_name": "v1.0.0",
        "name": "Version 1.0.0",
        "body": "- Foo feature",
        "html_url": "https://github.com/owner/repo/releases/tag/v1.0.0",
        "published_at": "2024-04-18T10:00:00Z",
    },
    {
        "tag_name": "latest",
        "name": "Release 0.1.0",
        "body": "- New feature",
        "html_url": "https://github.com/owner/repo/releases/tag/latest",
        "published_at": "2024-03-01T10:00:00Z",
    },
    {
        "tag_name": "nightly",
        "name": "Nightly build",
        "body": None,
        "html_url": "https://github.com/owner/repo/releases/tag/nightly",
        "published_at": None,
    },
]


class TestReleasesFromRaw:
    def test_oldest_first(self):
        raw = [RawRelease.model_validate(r) for r in RAW_RELEASES[:2]]
        releases = releases_from_raw(raw, _keep_all)
        assert [r.version for r in releases] == ["0.1.0", "1.0.0"]

    def test_fields(self):
        raw = [RawRelease.model_validate(RAW_RELEASES[0])]
        (release,) = releases_from_raw(raw, _keep_all)
        assert release.content == "- Foo feature"
        assert release.url == "https://github.com/owner/repo/releases/tag/v1.0.0"
        assert release.date == "2024-04-18"
        assert release.has_tokens is False

    def test_version_from_name(self):
        raw = [RawRelease.model_validate(RAW_RELEASES[1])]
        assert releases_from_raw(raw, _keep_all)[0].version == "0.1.0"

    def test_build_metadata_dropped(self):
        raw = [RawRelease(tag_name="v1.0.0+build.5")]
        assert releases_from_raw(raw, _keep_all)[0].version == "1.0.0"

    def test_unversioned_release_never_satisfies(self):
        predicate = make_predicate(parse_version_expression(""))
        raw = [RawRelease.model_validate(r) for r in RAW_RELEASES]
        releases = releases_from_raw(raw, predicate)
        assert [r.version for r in releases] == ["0.1.0", "1.0.0"]

    def test_filtered(self):
        predicate = make_predicate(parse_version_expression("1.x"))
        raw = [RawRelease.model_validate(r) for r in RAW_RELEASES]
        assert [r.version for r in releases_from_raw(raw, predicate)] == ["1.0.0"]


class TestGitHubClient:
    def test_fetch_text(self, mock_http):
        mock_http.get.return_value = _response(text="# Changelog")
        client = GitHubClient()
        assert client.fetch_text("https://example.com/CHANGELOG.md") == "# Changelog"
        mock_http.get.assert_called_once_with("https://example.com/CHANGELOG.md")

    def test_fetch_text_missing(self, mock_http):
        mock_http.get.return_value = _response(status_code=404)
        assert GitHubClient().fetch_text("https://example.com/CHANGELOG.md") is None

    def test_fetch_text_connection_error(self, mock_http):
        mock_http.get.side_effect = httpx.ConnectError("boom")
        with pytest.raises(SourceError):
            GitHubClient().fetch_text("https://example.com/CHANGELOG.md")

    def test_find_changelog_paths(self, mock_http):
        mock_http.get.return_value = _response(
            json_data={
                "tree": [
                    {"path": "CHANGELOG.md", "type": "blob"},
                    {"path": "packages/core/CHANGELOG.md", "type": "blob"},
                    {"path": "packages/core", "type": "tree"},
                    {"path": "docs/old-changelog.md", "type": "blob"},
                    {"path": "README.md", "type": "blob"},
                ]
            }
        )
        paths = GitHubClient().find_changelog_paths("owner/repo", "main", "changelog.md")
        assert paths == ["CHANGELOG.md", "packages/core/CHANGELOG.md"]

        args, kwargs = mock_http.get.call_args
        assert args[0] == "/repos/owner/repo/git/trees/main"
        assert kwargs["params"] == {"recursive": "1"}

    def test_token_sent_to_api_only(self, mock_http):
        mock_http.get.return_value = _response(json_data={"tree": []})
        client = GitHubClient(token="secret")
        client.find_changelog_paths("owner/repo", "main", "changelog.md")
        _, kwargs = mock_http.get.call_args
        assert kwargs["headers"]["Authorization"] == "Bearer secret"
        assert kwargs["headers"]["X-GitHub-Api-Version"] == "2022-11-28"

        mock_http.get.return_value = _response(text="")
        client.fetch_text("https://example.com/changelog.md")
        _, kwargs = mock_http.get.call_args
        assert "headers" not in kwargs

    def test_api_error(self, mock_http):
        request = httpx.Request("GET", "https://api.github.com/repos/owner/repo/releases")
        error_response = httpx.Response(404, request=request)
        response = _response()
        response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Not Found", request=request, response=error_response
        )
        mock_http.get.return_value = response
        with pytest.raises(SourceError, match="404"):
            GitHubClient().list_releases("owner/repo")

    def test_list_releases_paginates(self, mock_http):
        mock_http.get.side_effect = [
            _response(json_data=RAW_RELEASES[:2]),
            _response(json_data=RAW_RELEASES[2:]),
            _response(json_data=[]),
        ]
        releases = GitHubClient().list_releases("owner/repo")
        assert [r.tag_name for r in releases] == ["v1.0.0", "latest", "nightly"]
        assert mock_http.get.call_count == 3
        pages = [call.kwargs["params"]["page"] for call in mock_http.get.call_args_list]
        assert pages == [1, 2, 3]

    def test_list_releases_page_limit(self, mock_http):
        mock_http.get.return_value = _response(json_data=RAW_RELEASES[:1])
        releases = GitHubClient().list_releases("owner/repo", page_limit=2)
        assert len(releases) == 2
        assert mock_http.get.call_count == 2

    def test_context_manager_closes(self, mock_http):
        with GitHubClient():
            pass
        mock_http.close.assert_called_once()


class FakeClient:
    def __init__(self, files):
        self.files = files

    def fetch_text(self, url):
        return self.files.get(url)


class TestLoadChangelogReleases:
    def test_concatenates_in_url_order(self):
        client = FakeClient(
            {
                "https://example.com/a/changelog.md": "## 2.0.0\n\n- a2\n\n## 1.0.0\n\n- a1\n",
                "https://example.com/b/changelog.md": "## 0.5.0\n\n- b\n",
            }
        )
        releases = load_changelog_releases(
            client,
            ["https://example.com/a/changelog.md", "https://example.com/b/changelog.md"],
            _keep_all,
        )
        assert [r.version for r in releases] == ["1.0.0", "2.0.0", "0.5.0"]

    def test_missing_files_skipped(self):
        client = FakeClient({"https://example.com/changelog.md": "## 1.0.0\n\n- x\n"})
        releases = load_changelog_releases(
            client,
            ["https://example.com/missing/changelog.md", "https://example.com/changelog.md"],
            _keep_all,
        )
        assert [r.version for r in releases] == ["1.0.0"]

    def test_duplicate_urls_loaded_once(self):
        client = FakeClient({"https://example.com/changelog.md": "## 1.0.0\n\n- x\n"})
        url = "https://example.com/changelog.md"
        assert len(load_changelog_releases(client, [url, url], _keep_all)) == 1

    def test_no_urls(self):
        assert load_changelog_releases(FakeClient({}), [], _keep_all) == []
