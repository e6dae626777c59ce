"""
Version comparison and house-style normalization for findupdate.

Modules
-------
keys : module
    Tokenized, numeric-aware version ordering and update selection.
style : module
    Regex-based rewriting of upstream versions into house style.

Public API
----------
VersionCandidate : dataclass
    A discovered version plus the listing entry it came from.
compare_versions : function
    Compare two version strings, returning -1, 0, or 1.
is_newer : function
    Check if a candidate version is strictly newer than the current one.
pick_update : function
    Choose the greatest strictly-newer candidate.
normalize_version : function
    Rewrite a version into house style (best-effort, review required).

Examples
--------
    >>> from findupdate.versioning import compare_versions, is_newer
    >>> compare_versions("1.10", "1.9")
    1
    >>> is_newer("2.0", "2.00")
    False
    >>> from findupdate.versioning import normalize_version
    >>> normalize_version("2.16-rc1").version
    '2.16~rc1'
"""

from .keys import (
    Ordering,
    VersionCandidate,
    compare_versions,
    is_newer,
    newest,
    pick_update,
    tokenize,
    version_key,
)
from .style import STYLE_RULES, StyleResult, StyleRule, normalize_version

__all__ = [
    "Ordering",
    "STYLE_RULES",
    "StyleResult",
    "StyleRule",
    "VersionCandidate",
    "compare_versions",
    "is_newer",
    "newest",
    "normalize_version",
    "pick_update",
    "tokenize",
    "version_key",
]
