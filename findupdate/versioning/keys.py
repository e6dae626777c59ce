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

"""Core version comparison utilities for findupdate.

This module is format-agnostic: it does NOT download or read files. It only
parses and compares version strings.

Ordering rules:

- A version is split into runs of digits, letters and separators
  ("1.10rc2" -> 1, ".", 10, "rc", 2; "1.a" -> 1, ".", "a").
- Numeric runs compare by value, so "10" > "9" and "00" == "0".
- Non-numeric runs compare lexically.
- At the same position a numeric run sorts after a non-numeric run.
- When one version's tokens are a prefix of the other's, the longer one is
  newer: "2.0" < "2.0.1" and "1.0" < "1.0rc1".

Because the key is a plain tuple compared lexicographically, the ordering is
a strict weak ordering; versions with equal keys ("2.0" and "2.00") are
treated as the same release.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
import re
from typing import Literal

# ----------------------------
# Shared DTO
# ----------------------------


@dataclass(frozen=True)
class VersionCandidate:
    """A version discovered from an upstream listing.

    Attributes:
        version: Raw version string captured from the entry (e.g., "1.3.0").
        entry: Full entry name it was extracted from (artifact filename or
            tag name, e.g., "foo-1.3.0.tar.xz").
    """

    version: str
    entry: str


# ----------------------------
# Comparison core
# ----------------------------

Ordering = Literal[-1, 0, 1]

_TOKEN_RE = re.compile(r"\d+|[^\W\d_]+|[\W_]+")

# Token tags: text runs sort before numeric runs at the same position.
_TEXT = 0
_NUMBER = 1


def tokenize(version: str) -> list[str]:
    """Split a version string into digit, letter and separator runs.

    Example:
        >>> tokenize("1.10rc2")
        ['1', '.', '10', 'rc', '2']
    """
    return _TOKEN_RE.findall(version)


def version_key(version: str) -> tuple[tuple[int, int | str], ...]:
    """Compute a sortable key for a version string.

    Each token becomes ``(1, int)`` for numeric runs or ``(0, str)`` for
    text runs. Tuples compare element-wise and a shorter tuple that is a
    prefix of a longer one sorts first, which gives the "more tokens is
    newer" rule for free.
    """
    key: list[tuple[int, int | str]] = []
    for token in tokenize(version):
        if token.isdigit():
            key.append((_NUMBER, int(token)))
        else:
            key.append((_TEXT, token))
    return tuple(key)


def compare_versions(a: str, b: str) -> Ordering:
    """Compare two versions.

    Returns -1 if a is older than b, 0 if they are equal, 1 if a is newer.
    """
    ka = version_key(a)
    kb = version_key(b)
    return (ka > kb) - (ka < kb)  # type: ignore[return-value]


def is_newer(candidate: str, current: str) -> bool:
    """Return True iff candidate sorts strictly after current."""
    return compare_versions(candidate, current) > 0


def newest(versions: Iterable[str]) -> str | None:
    """Return the greatest version of an iterable, or None if it is empty.

    Among versions with equal keys the lexically smallest string wins, so the
    result does not depend on iteration order.
    """
    best: str | None = None
    for v in versions:
        if best is None:
            best = v
            continue
        cmpv = compare_versions(v, best)
        if cmpv > 0 or (cmpv == 0 and v < best):
            best = v
    return best


def pick_update(
    current: str, candidates: Iterable[VersionCandidate]
) -> VersionCandidate | None:
    """Select the update target among discovered candidates.

    Args:
        current: Version currently recorded in the spec.
        candidates: Candidates discovered upstream.

    Returns:
        The greatest candidate strictly newer than current, or None when no
            candidate is newer.
    """
    newer = {c.version: c for c in candidates if is_newer(c.version, current)}
    target = newest(newer)
    return newer[target] if target is not None else None
