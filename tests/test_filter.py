"""
Tests for findupdate.filter module.

Tests package selection including:
- Include regex filtering
- Package list files with comments and nested groups
- Intersection of both filters
"""

from __future__ import annotations

import pytest

from findupdate.exceptions import ConfigError
from findupdate.filter import compile_include, read_package_list, select_packages


@pytest.fixture
def specs(tree_root, write_spec):
    """Create a small tree and return its spec paths in tree order."""
    return [
        write_spec("app-utils/bar", "VER=1\n"),
        write_spec("app-utils/foo", "VER=1\n"),
        write_spec("lang-python/foo-py", "VER=1\n"),
    ]


def _names(paths):
    return [p.parent.name for p in paths]


class TestReadPackageList:
    """Tests for package list files."""

    def test_comments_and_blank_lines(self, tmp_path, tree_root):
        """Test that comments and blank lines are ignored."""
        path = tmp_path / "list"
        path.write_text("# header\n\napp-utils/foo   # inline\nbar\n")

        assert read_package_list(path, tree_root) == ["app-utils/foo", "bar"]

    def test_nested_groups(self, tmp_path, tree_root):
        """Test that groups/ entries are expanded against the tree root."""
        groups = tree_root / "groups"
        groups.mkdir()
        (groups / "base").write_text("foo\ngroups/extra\n")
        (groups / "extra").write_text("bar\n")
        path = tmp_path / "list"
        path.write_text("groups/base\nbaz\n")

        assert read_package_list(path, tree_root) == ["foo", "bar", "baz"]

    def test_missing_nested_group_is_skipped(self, tmp_path, tree_root):
        """Test that an unreadable nested group does not abort the list."""
        path = tmp_path / "list"
        path.write_text("groups/missing\nfoo\n")

        assert read_package_list(path, tree_root) == ["foo"]

    def test_cyclic_groups(self, tmp_path, tree_root):
        """Test that self-including groups stop with ConfigError."""
        groups = tree_root / "groups"
        groups.mkdir()
        (groups / "loop").write_text("groups/loop\n")
        path = tmp_path / "list"
        path.write_text("groups/loop\n")

        with pytest.raises(ConfigError, match="32 levels"):
            read_package_list(path, tree_root)

    def test_missing_list(self, tmp_path, tree_root):
        """Test that an unreadable top-level list raises ConfigError."""
        with pytest.raises(ConfigError, match="cannot read package list"):
            read_package_list(tmp_path / "nope", tree_root)


class TestSelectPackages:
    """Tests for select_packages."""

    def test_no_filters(self, specs, tree_root):
        """Test that every spec is kept without filters."""
        assert select_packages(specs, tree_root) == specs

    def test_include(self, specs, tree_root):
        """Test that the include regex is searched in the package path."""
        result = select_packages(specs, tree_root, include=compile_include("^app-utils/"))
        assert _names(result) == ["bar", "foo"]

    def test_entries_by_name_or_path(self, specs, tree_root):
        """Test that list entries match names or relative paths."""
        result = select_packages(specs, tree_root, entries=["foo-py", "app-utils/bar"])
        assert _names(result) == ["bar", "foo-py"]

    def test_intersection(self, specs, tree_root):
        """Test that include and list are intersected."""
        result = select_packages(
            specs,
            tree_root,
            include=compile_include("foo"),
            entries=["foo", "bar"],
        )
        assert _names(result) == ["foo"]

    def test_empty_list_selects_nothing(self, specs, tree_root):
        """Test that an empty list keeps no package."""
        assert select_packages(specs, tree_root, entries=[]) == []


def test_invalid_include():
    """Test that an invalid include regex raises ConfigError."""
    with pytest.raises(ConfigError, match="invalid include pattern"):
        compile_include("app-(utils")
