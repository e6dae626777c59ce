# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""abbs tree enumeration.

An abbs tree stores one package per directory, ``<section>/<name>/spec``.
``iter_spec_files`` walks the tree lazily, in sorted order, and never
descends into hidden directories or the ``groups`` directory (package
lists, not packages).
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

SPEC_FILENAME = "spec"
_SKIP_DIRS = {"groups"}


def iter_spec_files(root: Path, max_depth: int = 3) -> Iterator[Path]:
    """Yield every spec file under root, at most max_depth levels down.

    The root itself is depth 0, so the default finds
    ``<root>/<section>/<name>/spec``.

    Unreadable subdirectories are skipped silently; an unreadable root
    raises OSError.
    """
    yield from _walk(root, 1, max_depth, is_root=True)


def _walk(directory: Path, depth: int, max_depth: int, is_root: bool = False) -> Iterator[Path]:
    if depth > max_depth:
        return
    try:
        children = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError:
        if is_root:
            raise
        return
    for child in children:
        if child.name.startswith("."):
            continue
        if child.is_dir():
            if child.name in _SKIP_DIRS:
                continue
            yield from _walk(child, depth + 1, max_depth)
        elif child.name == SPEC_FILENAME and child.is_file():
            yield child


def package_path(spec_path: Path, root: Path) -> str:
    """Package directory relative to root, e.g. "app-utils/foo"."""
    package_dir = spec_path.parent
    try:
        return package_dir.relative_to(root).as_posix()
    except ValueError:
        return package_dir.name
