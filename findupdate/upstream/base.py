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

"""Upstream source protocol, location types and registry for findupdate.

This module defines the foundational components of upstream discovery:

- SourceLocation: the closed tagged variant produced by the locator
  (``archive``, ``tag_index`` or ``checker``; unsupported sources raise
  UnsupportedSchemeError instead of producing a location)
- FetchContext: per-package network settings (session, timeout, limits)
- UpstreamSource protocol: interface every listing backend implements
- Source registry: ``register_source()`` and ``get_source()``

Each backend lists raw entries (directory entry names, tag names, version
strings); the extractor turns entries into version candidates by applying
the location's pattern. Adding a new kind of upstream is a localized change:
write a module with a class implementing the protocol and register it.

Design Philosophy:
    - Backends are Protocol classes (structural subtyping, not inheritance)
    - Registration happens at module import time (backends self-register)
    - Registry is a simple dict
    - Backends are stateless and instantiated on demand

Example:
    Implementing a custom backend:
        ```python
        from findupdate.upstream.base import register_source

        class StaticSource:
            def fetch_entries(self, location, ctx):
                return ["foo-1.0.tar.gz", "foo-1.1.tar.gz"]

            def validate_options(self, options):
                return []

        register_source("static", StaticSource)
        ```
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Literal, Protocol

import requests

from findupdate.exceptions import UnsupportedSchemeError
from findupdate.io.http import DEFAULT_MAX_BYTES, DEFAULT_TIMEOUT
from findupdate.logging import Logger, SilentLogger
from findupdate.versioning.keys import VersionCandidate

# -------------------------------
# Location and context types
# -------------------------------

SourceKind = Literal["archive", "tag_index", "checker"]
MatchMode = Literal["fullmatch", "search"]

# A version inside an entry name: starts with a digit and only crosses a dash
# when the next segment holds a digit, so "foo-1.0-docs.tar.gz" yields "1.0".
VERSION_CAPTURE = r"\d[\w.+~]*(?:-\w*\d[\w.+~]*)*"


@dataclass(frozen=True)
class SourceLocation:
    """Where and how to look for upstream versions of one package.

    Attributes:
        kind: Scheme variant: ``archive`` (versioned artifact under a
            listable directory), ``tag_index`` (tag list of a repository)
            or ``checker`` (explicit CHKUPDATE line).
        provider: Registered backend name that performs the listing
            (e.g. "http", "file", "github", "gitlab", "git", "anitya").
        listing: Listing endpoint: directory URL, local directory, or
            repository URL. Empty for API checkers keyed by options.
        pattern: Pattern applied to each entry; None means every entry is a
            version.
        match_mode: ``fullmatch`` for patterns derived from templates,
            ``search`` for user-supplied CHKUPDATE patterns.
        reference_url: Template with the current version substituted.
        options: Backend options (e.g. {"repo": "owner/name"}).
    """

    kind: SourceKind
    provider: str
    listing: str
    pattern: re.Pattern[str] | None = None
    match_mode: MatchMode = "fullmatch"
    reference_url: str | None = None
    options: dict[str, str] = field(default_factory=dict)


@dataclass
class FetchContext:
    """Network settings shared by all listing requests of one package.

    Attributes:
        session: HTTP session to use.
        timeout: Per-request timeout in seconds.
        max_bytes: Maximum accepted response size.
        github_token: Token for api.github.com, if any.
        max_pages: Maximum number of pages fetched from paginated APIs.
        logger: Logger for verbose/debug output.
    """

    session: requests.Session
    timeout: float = DEFAULT_TIMEOUT
    max_bytes: int = DEFAULT_MAX_BYTES
    github_token: str | None = None
    max_pages: int = 5
    logger: Logger = field(default_factory=SilentLogger)

    def http_kwargs(self) -> dict:
        """Keyword arguments for findupdate.io.http fetch functions."""
        return {
            "timeout": self.timeout,
            "max_bytes": self.max_bytes,
            "logger": self.logger,
        }


# -------------------------------
# Backend protocol
# -------------------------------


class UpstreamSource(Protocol):
    """Protocol for upstream listing backends."""

    def fetch_entries(self, location: SourceLocation, ctx: FetchContext) -> list[str]:
        """List raw entries (file names, tag names or versions).

        Args:
            location: Location produced by the locator.
            ctx: Network settings.

        Returns:
            Entry names in upstream order.

        Raises:
            FetchError: On network or IO failure, including timeouts.
        """
        ...

    def validate_options(self, options: dict[str, str]) -> list[str]:
        """Validate CHKUPDATE options without network calls.

        Returns:
            List of error messages. Empty list if the options are valid.
        """
        ...


# -------------------------------
# Registry
# -------------------------------

_SOURCE_REGISTRY: dict[str, type[UpstreamSource]] = {}


def register_source(name: str, source_class: type[UpstreamSource]) -> None:
    """Register a listing backend by name.

    Registering the same name twice overwrites the previous registration
    (allows monkey-patching for tests).
    """
    _SOURCE_REGISTRY[name] = source_class


def available_sources() -> list[str]:
    """Names of all registered backends, sorted."""
    return sorted(_SOURCE_REGISTRY)


def get_source(name: str) -> UpstreamSource:
    """Get a backend instance by name.

    Raises:
        UnsupportedSchemeError: If the name is not registered.
    """
    if name not in _SOURCE_REGISTRY:
        available = ", ".join(available_sources())
        raise UnsupportedSchemeError(
            f"Unknown upstream type: {name!r}. Available: {available or '(none)'}"
        )
    return _SOURCE_REGISTRY[name]()


# -------------------------------
# Entry matching
# -------------------------------


def _strip_v(version: str) -> str:
    if len(version) > 1 and version[0] in "vV" and version[1].isdigit():
        return version[1:]
    return version


def match_entries(
    entries: list[str],
    pattern: re.Pattern[str] | None,
    mode: MatchMode = "fullmatch",
) -> set[VersionCandidate]:
    """Turn listing entries into version candidates.

    The version is the ``version`` named group when the pattern has one,
    else its first group, else the entry itself. A leading "v" before a
    digit is dropped. Candidates are collapsed per version string, keeping
    the first entry seen.

    Args:
        entries: Raw entries in upstream order.
        pattern: Entry pattern, or None to accept every entry.
        mode: ``fullmatch`` or ``search``.
    """
    found: dict[str, VersionCandidate] = {}
    for entry in entries:
        entry = entry.strip()
        if not entry:
            continue
        if pattern is None:
            version = entry
        else:
            m = pattern.fullmatch(entry) if mode == "fullmatch" else pattern.search(entry)
            if not m:
                continue
            if "version" in pattern.groupindex:
                version = m.group("version")
            elif pattern.groups:
                version = m.group(1)
            else:
                version = entry
        if not version:
            continue
        version = _strip_v(version.strip())
        found.setdefault(version, VersionCandidate(version=version, entry=entry))
    return set(found.values())
