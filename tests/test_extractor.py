"""
Tests for findupdate.upstream.extractor and the directory backends.

Tests version extraction including:
- Entry matching (named group, first group, filters, leading "v")
- Index page parsing with BeautifulSoup
- HTTP listings (mocked with requests_mock)
- Local directory listings
- Error mapping (timeouts, HTTP statuses, size limit, missing directories)
"""

from __future__ import annotations

import re

import pytest
import requests

from findupdate.exceptions import FetchError, UnsupportedSchemeError
from findupdate.upstream import SourceLocation, extract_versions, locate_source, match_entries
from findupdate.upstream.directory import parse_index_page
from findupdate.versioning import VersionCandidate


def _versions(candidates) -> set[str]:
    return {c.version for c in candidates}


class TestMatchEntries:
    """Tests for match_entries."""

    def test_named_group(self):
        """Test that the version named group is used."""
        pattern = re.compile(r"foo-(?P<version>[\d.]+)\.tgz")
        result = match_entries(["foo-1.0.tgz", "bar-2.0.tgz", "foo-1.1.tgz"], pattern)
        assert result == {
            VersionCandidate("1.0", "foo-1.0.tgz"),
            VersionCandidate("1.1", "foo-1.1.tgz"),
        }

    def test_first_group(self):
        """Test that the first group is used without a named group."""
        pattern = re.compile(r"release-([\d.]+)")
        result = match_entries(["release-3.2", "release-3.10"], pattern, "search")
        assert _versions(result) == {"3.2", "3.10"}

    def test_pattern_without_group_filters(self):
        """Test that a group-less pattern keeps matching entries whole."""
        pattern = re.compile(r"^[^b]+$")
        result = match_entries(["1.0", "1.1beta", "1.2"], pattern, "search")
        assert _versions(result) == {"1.0", "1.2"}

    def test_no_pattern_accepts_everything(self):
        """Test that every non-blank entry is a version without a pattern."""
        result = match_entries(["1.0", " ", "", "2.0 "], None)
        assert _versions(result) == {"1.0", "2.0"}

    def test_leading_v_is_dropped(self):
        """Test that v1.2 and V1.3 become 1.2 and 1.3."""
        result = match_entries(["v1.2", "V1.3", "vim-9.0"], None)
        assert _versions(result) == {"1.2", "1.3", "vim-9.0"}

    def test_duplicates_collapse(self):
        """Test that the first entry per version is kept."""
        pattern = re.compile(r"foo-(?P<version>[\d.]+)\.(?:tgz|zip)")
        result = match_entries(["foo-1.0.tgz", "foo-1.0.zip"], pattern)
        assert result == {VersionCandidate("1.0", "foo-1.0.tgz")}

    def test_fullmatch_is_anchored(self):
        """Test that fullmatch mode rejects partial matches."""
        pattern = re.compile(r"foo-(?P<version>[\d.]+)\.tgz")
        assert match_entries(["foo-1.0.tgz.asc"], pattern) == set()
        assert match_entries(["foo-1.0.tgz.asc"], pattern, "search") != set()


class TestParseIndexPage:
    """Tests for HTML index parsing."""

    def test_autoindex(self, listing_page):
        """Test a typical autoindex page."""
        entries = parse_index_page(listing_page("foo-1.0.tar.xz", "foo-1.1.tar.xz", "sub/"))
        assert "foo-1.0.tar.xz" in entries
        assert "foo-1.1.tar.xz" in entries
        assert "sub" in entries

    def test_absolute_href_and_text(self):
        """Test that href basenames and link texts are both collected."""
        html = (
            '<a href="https://mirror.example.org/pub/foo-2.0.tar.gz?dl=1">Download</a>'
            '<a href="/redirect?id=7">foo-2.1.tar.gz</a>'
        )
        entries = parse_index_page(html)
        assert entries[:2] == ["foo-2.0.tar.gz", "Download"]
        assert "foo-2.1.tar.gz" in entries

    def test_quoted_href(self):
        """Test that percent-encoded names are decoded."""
        entries = parse_index_page('<a href="foo%2B%2B-1.0.tgz">x</a>')
        assert entries[0] == "foo++-1.0.tgz"

    def test_sort_links_skipped(self):
        """Test that query-only hrefs do not produce entries."""
        assert parse_index_page('<a href="?C=N;O=D"></a>') == []


class TestHttpListing:
    """Tests for extracting versions from HTTP directory listings."""

    def test_finds_versions(self, requests_mock, make_spec, foo_spec_text, listing_page):
        """Test versions are extracted from a mocked index page."""
        requests_mock.get(
            "https://example.org/foo/",
            text=listing_page(
                "foo-1.2.3.tar.xz",
                "foo-1.3.0.tar.xz",
                "foo-1.3.0.tar.xz.sig",
                "foo-1.0-docs.tar.xz",
                "bar-9.0.tar.xz",
            ),
        )
        loc = locate_source(make_spec(foo_spec_text))

        result = extract_versions(loc, requests.Session(), timeout=5)

        assert result == {
            VersionCandidate("1.2.3", "foo-1.2.3.tar.xz"),
            VersionCandidate("1.3.0", "foo-1.3.0.tar.xz"),
        }

    def test_creates_own_session(self, requests_mock, listing_page):
        """Test that a session is created when none is given."""
        requests_mock.get("https://x.org/pub/", text=listing_page("a-1.0.tgz"))
        loc = SourceLocation(
            kind="archive",
            provider="http",
            listing="https://x.org/pub/",
            pattern=re.compile(r"a-(?P<version>[\d.]+)\.tgz"),
        )
        assert _versions(extract_versions(loc)) == {"1.0"}

    def test_no_matches_is_empty(self, requests_mock, listing_page):
        """Test that an unrelated listing yields no candidates."""
        requests_mock.get("https://x.org/pub/", text=listing_page("README", "b-1.0.tgz"))
        loc = SourceLocation(
            kind="archive",
            provider="http",
            listing="https://x.org/pub/",
            pattern=re.compile(r"a-(?P<version>[\d.]+)\.tgz"),
        )
        assert extract_versions(loc) == set()

    def test_timeout(self, requests_mock):
        """Test that a timeout becomes FetchError."""
        requests_mock.get("https://x.org/pub/", exc=requests.exceptions.ConnectTimeout)
        loc = SourceLocation(kind="archive", provider="http", listing="https://x.org/pub/")
        with pytest.raises(FetchError, match="timed out after 2s"):
            extract_versions(loc, timeout=2)

    def test_http_error(self, requests_mock):
        """Test that an error status becomes FetchError."""
        requests_mock.get("https://x.org/pub/", status_code=404, reason="Not Found")
        loc = SourceLocation(kind="archive", provider="http", listing="https://x.org/pub/")
        with pytest.raises(FetchError, match="404"):
            extract_versions(loc)

    def test_connection_error(self, requests_mock):
        """Test that a connection failure becomes FetchError."""
        requests_mock.get("https://x.org/pub/", exc=requests.exceptions.ConnectionError("refused"))
        loc = SourceLocation(kind="archive", provider="http", listing="https://x.org/pub/")
        with pytest.raises(FetchError, match="failed to fetch"):
            extract_versions(loc)

    def test_size_limit(self, requests_mock):
        """Test that an oversized listing is rejected."""
        requests_mock.get("https://x.org/pub/", text="x" * 1000)
        loc = SourceLocation(kind="archive", provider="http", listing="https://x.org/pub/")
        with pytest.raises(FetchError, match="too large|exceeds"):
            extract_versions(loc, max_bytes=100)


class TestLocalListing:
    """Tests for local directory listings."""

    def test_local_directory(self, tmp_path, make_spec):
        """Test that files of a local mirror are matched."""
        mirror = tmp_path / "mirror"
        mirror.mkdir()
        for name in ("foo-1.0.tgz", "foo-1.10.tgz", "notes.txt"):
            (mirror / name).write_text("")
        spec = make_spec(f'VER=1.0\nSRCS="tbl::file://{mirror}/foo-$VER.tgz"\n')

        result = extract_versions(locate_source(spec))

        assert _versions(result) == {"1.0", "1.10"}

    def test_missing_directory(self, tmp_path):
        """Test that a missing directory becomes FetchError."""
        loc = SourceLocation(kind="archive", provider="file", listing=str(tmp_path / "gone"))
        with pytest.raises(FetchError, match="cannot list"):
            extract_versions(loc)


def test_unknown_provider():
    """Test that an unregistered provider is unsupported."""
    loc = SourceLocation(kind="checker", provider="nonexistent", listing="")
    with pytest.raises(UnsupportedSchemeError):
        extract_versions(loc)
