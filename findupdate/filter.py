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

"""Package selection for a survey.

Two independent filters narrow down the packages of a tree:

- an include regex, searched in the package path relative to the tree root
  (``app-utils/foo``)
- a package list file, one entry per line

When both are given the selection is their intersection.

Package List Format:
    ```text
    # comments and blank lines are ignored
    app-utils/foo        # relative package path
    bar                  # bare package name
    groups/kde           # includes <tree>/groups/kde, recursively
    ```

Nested ``groups/`` entries are resolved against the tree root and may nest
up to 32 levels deep. An unreadable nested group is logged and skipped; an
unreadable top-level list is a configuration error.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
import re

from findupdate.exceptions import ConfigError
from findupdate.logging import Logger, get_global_logger
from findupdate.tree import package_path

MAX_GROUP_DEPTH = 32
GROUP_PREFIX = "groups/"


def _read_list(
    path: Path, tree_root: Path, depth: int, logger: Logger
) -> list[str]:
    if depth > MAX_GROUP_DEPTH:
        raise ConfigError(
            f"Nested group exceeded {MAX_GROUP_DEPTH} levels at {path}. "
            "Potential infinite loop."
        )
    with path.open("r", encoding="utf-8") as f:
        lines = f.read().splitlines()

    entries: list[str] = []
    for line in lines:
        entry = line.split("#", 1)[0].strip()
        if not entry:
            continue
        if entry.startswith(GROUP_PREFIX):
            nested = tree_root / entry
            try:
                entries.extend(_read_list(nested, tree_root, depth + 1, logger))
            except OSError as err:
                logger.verbose("FILTER", f"Unable to read package group {entry}: {err}")
            continue
        entries.append(entry.strip("/"))
    return entries


def read_package_list(
    path: Path, tree_root: Path, logger: Logger | None = None
) -> list[str]:
    """Read a package list file, expanding nested groups.

    Args:
        path: List file to read.
        tree_root: abbs tree root, against which ``groups/`` entries resolve.
        logger: Logger for skipped groups. Defaults to the global logger.

    Returns:
        Entries (package names or relative paths) in file order.

    Raises:
        ConfigError: If the list cannot be read or groups nest too deeply.
    """
    if logger is None:
        logger = get_global_logger()
    try:
        entries = _read_list(path, tree_root, 0, logger)
    except (OSError, UnicodeDecodeError) as err:
        raise ConfigError(f"cannot read package list {path}: {err}") from err
    logger.verbose("FILTER", f"Read {len(entries)} packages from {path}")
    return entries


def compile_include(pattern: str) -> re.Pattern[str]:
    """Compile an include regex.

    Raises:
        ConfigError: If the pattern is not a valid regular expression.
    """
    try:
        return re.compile(pattern)
    except re.error as err:
        raise ConfigError(f"invalid include pattern {pattern!r}: {err}") from err


def select_packages(
    spec_paths: Iterable[Path],
    tree_root: Path,
    include: re.Pattern[str] | None = None,
    entries: Iterable[str] | None = None,
) -> list[Path]:
    """Filter spec paths by include regex and/or list entries.

    Args:
        spec_paths: Candidate spec files (order is preserved).
        tree_root: abbs tree root.
        include: Pattern searched in the relative package path.
        entries: Package names or relative package paths to keep.

    Returns:
        Spec paths accepted by every given filter. With no filter, all.
    """
    wanted = set(entries) if entries is not None else None
    selected = []
    for spec_path in spec_paths:
        rel = package_path(spec_path, tree_root)
        if include is not None and not include.search(rel):
            continue
        if wanted is not None and rel not in wanted and spec_path.parent.name not in wanted:
            continue
        selected.append(spec_path)
    return selected
