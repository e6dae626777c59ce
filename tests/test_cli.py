"""
Tests for findupdate.cli module.

Tests the command-line interface including:
- Argument parsing and validation (exit code 2)
- Global errors (exit code 1)
- Summary, version-only output and the result log (exit code 0)
- Loading API tokens from the tree .env file
"""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest

from findupdate.cli import build_parser, main, run

FOO_SPEC = 'VER=1.2.3\nREL=2\nSRCS="tbl::https://example.org/foo/foo-$VER.tar.xz"\n'
BAR_SPEC = 'VER=1.0\nSRCS="svn::https://svn.example.org/bar"\n'


def _run(*argv: str) -> int:
    return run(build_parser().parse_args(list(argv)))


@pytest.fixture
def tree(tree_root, write_spec, requests_mock, listing_page):
    """A tree with one updatable and one unsupported package."""
    write_spec("app-utils/foo", FOO_SPEC)
    write_spec("app-utils/bar", BAR_SPEC)
    requests_mock.get("https://example.org/foo/", text=listing_page("foo-1.3.0.tar.xz"))
    return tree_root


class TestArguments:
    """Tests for argument parsing."""

    def test_defaults(self):
        """Test default argument values."""
        args = build_parser().parse_args([])
        assert str(args.dir) == "."
        assert not args.dry_run
        assert args.jobs is None
        assert args.log is None

    def test_version(self, capsys):
        """Test that --version prints the version and exits 0."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert capsys.readouterr().out.startswith("findupdate ")

    @pytest.mark.parametrize(
        "argv",
        [["--jobs", "0"], ["--jobs", "many"], ["--timeout", "-1"], ["--bogus"]],
    )
    def test_invalid_arguments(self, argv):
        """Test that invalid arguments exit with code 2."""
        with pytest.raises(SystemExit) as exc_info:
            main(argv)
        assert exc_info.value.code == 2


class TestGlobalErrors:
    """Tests for errors that abort the run."""

    def test_missing_tree(self, tmp_path, capsys):
        """Test that a missing tree exits 1."""
        assert _run("-d", str(tmp_path / "nope")) == 1
        assert "abbs tree not found" in capsys.readouterr().err

    def test_invalid_include(self, tree, capsys):
        """Test that an invalid include regex exits 1."""
        assert _run("-d", str(tree), "-i", "app-(") == 1
        assert "invalid include pattern" in capsys.readouterr().err

    def test_missing_list(self, tree, tmp_path, capsys):
        """Test that an unreadable package list exits 1."""
        assert _run("-d", str(tree), "-f", str(tmp_path / "nolist")) == 1
        assert "cannot read package list" in capsys.readouterr().err

    def test_invalid_config(self, tree, tmp_path, capsys):
        """Test that an invalid configuration file exits 1."""
        config = tmp_path / "bad.yaml"
        config.write_text("survey:\n  jobs: -3\n")
        assert _run("-d", str(tree), "--config", str(config)) == 1
        assert "survey.jobs" in capsys.readouterr().err

    def test_unwritable_log(self, tree, tmp_path, capsys):
        """Test that a log write failure exits 1."""
        log = tmp_path / "no-such-dir" / "updates.log"
        assert _run("-d", str(tree), "--dry-run", "-l", str(log)) == 1
        assert "cannot write log" in capsys.readouterr().err


@pytest.mark.integration
class TestSurvey:
    """Tests for complete runs."""

    def test_dry_run_summary(self, tree, capsys):
        """Test the summary of a dry run."""
        assert _run("-d", str(tree), "--dry-run") == 0

        out = capsys.readouterr().out
        assert "UPDATED PACKAGES (dry run)" in out
        assert "app-utils/foo" in out
        assert "1.2.3 -> 1.3.0" in out
        assert "[SKIP] app-utils/bar" in out
        assert "Checked 2 package(s): 1 updated, 0 unchanged, 1 skipped, 0 failed" in out
        assert "VER=1.2.3" in (tree / "app-utils" / "foo" / "spec").read_text()

    def test_update_writes(self, tree):
        """Test that a normal run rewrites the spec."""
        assert _run("-d", str(tree)) == 0
        assert (tree / "app-utils" / "foo" / "spec").read_text().startswith("VER=1.3.0\n")

    def test_version_only(self, tree, capsys):
        """Test that -x prints only name/version lines."""
        assert _run("-d", str(tree), "-x") == 0

        assert capsys.readouterr().out == "app-utils/bar 1.0\napp-utils/foo 1.3.0\n"
        assert "VER=1.2.3" in (tree / "app-utils" / "foo" / "spec").read_text()

    def test_include_filter(self, tree, capsys):
        """Test that -i narrows the selection."""
        assert _run("-d", str(tree), "-x", "-i", "/foo$") == 0
        assert capsys.readouterr().out == "app-utils/foo 1.3.0\n"

    def test_package_list(self, tree, tmp_path, capsys):
        """Test that -f narrows the selection."""
        package_list = tmp_path / "list"
        package_list.write_text("bar\n")
        assert _run("-d", str(tree), "-x", "-f", str(package_list)) == 0
        assert capsys.readouterr().out == "app-utils/bar 1.0\n"

    def test_log_file(self, tree, tmp_path):
        """Test that -l appends one line per package."""
        log = tmp_path / "updates.log"
        assert _run("-d", str(tree), "--dry-run", "-l", str(log)) == 0

        lines = log.read_text().splitlines()
        assert [line.split("\t")[:2] for line in lines] == [
            ["app-utils/bar", "skipped"],
            ["app-utils/foo", "updated"],
        ]

    def test_main_exit_code(self, tree):
        """Test that main exits with the run's code."""
        with pytest.raises(SystemExit) as exc_info:
            main(["-d", str(tree), "--dry-run", "-j", "1"])
        assert exc_info.value.code == 0

    def test_env_file_token(self, tree_root, write_spec, requests_mock, capsys):
        """Test that a token kept in <tree>/.env reaches the GitHub API."""
        write_spec("app-utils/proj", "VER=1.0\nCHKUPDATE='github::repo=owner/proj'\n")
        (tree_root / ".env").write_text("GITHUB_TOKEN=from-dotenv\n")
        requests_mock.get(
            "https://api.github.com/repos/owner/proj/tags", json=[{"name": "v1.1"}]
        )

        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("GITHUB_TOKEN", None)
            assert _run("-d", str(tree_root), "-x") == 0

        assert capsys.readouterr().out == "app-utils/proj 1.1\n"
        request = requests_mock.last_request
        assert request.headers["Authorization"] == "token from-dotenv"
