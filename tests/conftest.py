"""
Pytest configuration and shared fixtures for findupdate tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from findupdate.logging import SilentLogger, set_global_logger
from findupdate.spec import PackageSpec, parse_spec_text

FOO_SPEC = (
    "VER=1.2.3\n"
    "REL=2\n"
    'SRCS="tbl::https://example.org/foo/foo-$VER.tar.xz"\n'
    'CHKSUMS="sha256::0123456789abcdef"\n'
)


@pytest.fixture
def foo_spec_text() -> str:
    """Provide a typical archive-based spec (VER=1.2.3, REL=2)."""
    return FOO_SPEC


@pytest.fixture(autouse=True)
def reset_global_logger():
    """Restore the silent global logger after each test (the CLI replaces it)."""
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def tree_root(tmp_path: Path) -> Path:
    """Provide an empty abbs tree root."""
    root = tmp_path / "tree"
    root.mkdir()
    return root


@pytest.fixture
def write_spec(tree_root: Path):
    """
    Factory fixture for writing spec files into the test tree.

    Usage:
        spec_path = write_spec("app-utils/foo", "VER=1.0\\n...")
    """

    def _write(package: str, text: str) -> Path:
        path = tree_root / package / "spec"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(text.encode("utf-8"))
        return path

    return _write


@pytest.fixture
def make_spec():
    """
    Factory fixture for parsing spec text in memory.

    Usage:
        spec = make_spec('VER=1.0\\nSRCS="tbl::https://x/foo-$VER.tgz"\\n')
    """

    def _make(text: str, name: str = "foo") -> PackageSpec:
        return parse_spec_text(text, name=name)

    return _make


def index_page(*names: str) -> str:
    """Render a minimal autoindex page linking the given file names."""
    links = "\n".join(f'<a href="{n}">{n}</a>' for n in names)
    return f"<html><body><h1>Index of /</h1>\n<a href=\"../\">../</a>\n{links}\n</body></html>"


@pytest.fixture
def listing_page():
    """Provide the index page renderer."""
    return index_page
