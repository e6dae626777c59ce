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

"""Source location for findupdate.

Turns a PackageSpec into a SourceLocation: where upstream releases are
listed and which pattern recognizes a versioned entry.

Resolution order:

1. An explicit ``CHKUPDATE="<type>::k=v;k=v"`` line selects a checker.
2. Otherwise the first SRCS entry (``<fetch-type>::<options>::<url>``) is
   analyzed. Archive URLs become either a GitHub tag index or a directory
   listing; ``git::commit=tags/...`` sources become a tag index.

The current version is swapped for an opaque marker before variable
expansion, so the marker's position in the expanded template shows exactly
where the version lives. Templates that transform the version
(``${VER//./_}``) or never mention it cannot be searched and raise
UnsupportedSchemeError.

Example:
    ```python
    from findupdate.spec import parse_spec_text
    from findupdate.upstream import locate_source

    spec = parse_spec_text(
        'VER=1.2.3\\nSRCS="tbl::https://example.org/dl/foo-$VER.tar.xz"\\n',
        name="foo",
    )
    loc = locate_source(spec)
    print(loc.kind, loc.listing)  # archive https://example.org/dl/
    ```
"""

from __future__ import annotations

import re
from urllib.parse import unquote, urlsplit

from findupdate.exceptions import ConfigError, UnsupportedSchemeError
from findupdate.spec.parser import VERSION_FIELD, PackageSpec
from findupdate.spec.shell import ExpansionError, expand_variables

from .base import VERSION_CAPTURE, SourceLocation, get_source

# Stands in for the version during template expansion. NUL never appears in
# spec text, URLs or regular expressions.
PLACEHOLDER = "\x00VER\x00"

_ARCHIVE_TYPES = {"tbl", "tarball", "file"}
_VCS_TYPES = {"svn", "bzr", "hg", "fossil"}
_ARCHIVE_SUFFIXES = (
    ".tar.gz",
    ".tar.xz",
    ".tar.bz2",
    ".tar.zst",
    ".tar.lz",
    ".tgz",
    ".tbz2",
    ".txz",
    ".zip",
)
_GITHUB_RE = re.compile(
    r"https?://github\.com/(?P<owner>[^/]+)/(?P<repo>[^/]+)/"
    r"(?:archive/(?:refs/tags/)?(?P<archive>[^/]+)"
    r"|releases/download/(?P<tag>[^/]+)/[^/]+)"
)
_REPO_HOSTS = {"github.com": "github", "gitlab.com": "gitlab"}


def split_source_entry(entry: str) -> tuple[str, dict[str, str], str]:
    """Split one SRCS entry into (fetch type, options, url).

    A bare URL is a ``tbl`` entry. Options are ``k=v`` pairs separated by
    ``;``; a bare flag maps to an empty string.

    Example:
        >>> split_source_entry("git::commit=tags/v$VER::https://x.org/foo.git")
        ('git', {'commit': 'tags/v$VER'}, 'https://x.org/foo.git')
    """
    parts = entry.split("::")
    if len(parts) == 1:
        return "tbl", {}, entry
    fetch_type = parts[0].strip().lower()
    url = parts[-1]
    options: dict[str, str] = {}
    for chunk in "::".join(parts[1:-1]).split(";"):
        chunk = chunk.strip()
        if not chunk:
            continue
        key, _, value = chunk.partition("=")
        options[key.strip()] = value.strip()
    return fetch_type, options, url


def parse_check_update(line: str) -> tuple[str, dict[str, str]]:
    """Parse a CHKUPDATE value of the form ``<type>::k=v;k=v``.

    Raises:
        ConfigError: If the line has no type or an option is not ``k=v``.
    """
    name, sep, rest = line.strip().partition("::")
    name = name.strip().lower()
    if not sep or not re.fullmatch(r"[a-z0-9_-]+", name):
        raise ConfigError(f"Invalid CHKUPDATE line: {line!r}")
    options: dict[str, str] = {}
    for chunk in rest.split(";"):
        if not chunk.strip():
            continue
        key, eq, value = chunk.partition("=")
        key = key.strip()
        if not eq or not re.fullmatch(r"[A-Za-z0-9_]+", key):
            raise ConfigError(f"Invalid CHKUPDATE option {chunk.strip()!r} in {line!r}")
        options[key] = value.strip()
    return name, options


def entry_pattern(segment: str) -> re.Pattern[str]:
    """Compile the entry pattern for a path segment or tag template.

    Every occurrence of the placeholder becomes the version capture (later
    occurrences must repeat the same version); all other text is literal.
    """
    pieces = segment.split(PLACEHOLDER)
    regex = re.escape(pieces[0]) + f"(?P<version>{VERSION_CAPTURE})"
    for piece in pieces[1:-1]:
        regex += re.escape(piece) + "(?P=version)"
    regex += re.escape(pieces[-1])
    return re.compile(regex)


def _expand(text: str, spec: PackageSpec, version: str) -> str:
    variables = dict(spec.fields)
    variables[VERSION_FIELD] = version
    opaque = PLACEHOLDER if version == PLACEHOLDER else None
    try:
        return expand_variables(text, variables, opaque=opaque)
    except ExpansionError as err:
        raise UnsupportedSchemeError(f"cannot expand source template: {err}") from err


def _require_placeholder(template: str, entry: str) -> None:
    if PLACEHOLDER not in template:
        raise UnsupportedSchemeError(
            f"source has no version placeholder (hard-coded URL): {entry}"
        )


def _strip_archive_suffix(name: str) -> str:
    lower = name.lower()
    for suffix in _ARCHIVE_SUFFIXES:
        if lower.endswith(suffix):
            return name[: -len(suffix)]
    return name


def _repo_name(name: str) -> str:
    return name[:-4] if name.endswith(".git") else name


def _locate_github_archive(template: str, reference: str) -> SourceLocation | None:
    m = _GITHUB_RE.fullmatch(template)
    if not m:
        return None
    if m.group("archive") is not None:
        tag_template = _strip_archive_suffix(m.group("archive"))
    else:
        tag_template = m.group("tag")
    if PLACEHOLDER not in tag_template:
        return None
    repo = f"{m.group('owner')}/{_repo_name(m.group('repo'))}"
    return SourceLocation(
        kind="tag_index",
        provider="github",
        listing=f"https://github.com/{repo}",
        pattern=entry_pattern(tag_template),
        reference_url=reference,
        options={"repo": repo},
    )


def _locate_directory(template: str, reference: str) -> SourceLocation:
    if "?" in template or "#" in template:
        raise UnsupportedSchemeError(f"cannot list URL with a query: {reference}")

    if template.startswith("/"):
        provider, root, path = "file", "", template
    else:
        scheme, sep, rest = template.partition("://")
        scheme = scheme.lower()
        if not sep or scheme not in ("http", "https", "file"):
            raise UnsupportedSchemeError(
                f"unsupported URL scheme {scheme!r}: {reference}"
            )
        host, slash, path = rest.partition("/")
        if PLACEHOLDER in host:
            raise UnsupportedSchemeError(f"version appears in host name: {reference}")
        if scheme == "file":
            provider, root, path = "file", "", "/" + path
        else:
            provider, root, path = "http", f"{scheme}://{host}", slash + path

    segments = path.split("/")
    for index, segment in enumerate(segments):
        if PLACEHOLDER in segment:
            break
    listing = root + "/".join(segments[:index]) + "/"
    if provider == "file":
        listing = unquote(listing)
    return SourceLocation(
        kind="archive",
        provider=provider,
        listing=listing,
        pattern=entry_pattern(unquote(segment)),
        reference_url=reference,
    )


def _locate_git(spec: PackageSpec, options: dict[str, str], url: str) -> SourceLocation:
    commit = options.get("commit", "")
    if not commit.startswith("tags/"):
        raise UnsupportedSchemeError(
            f"git source is not pinned to a tag (commit={commit or 'HEAD'})"
        )
    tag = commit[len("tags/") :]
    tag_template = _expand(tag, spec, PLACEHOLDER)
    _require_placeholder(tag_template, commit)
    repo_url = _expand(url, spec, spec.version)
    reference = f"{repo_url}#tag={_expand(tag, spec, spec.version)}"

    parts = urlsplit(repo_url)
    if parts.scheme not in ("http", "https"):
        transport = parts.scheme or "a local path"
        raise UnsupportedSchemeError(
            f"git repository is not listable over {transport}: {repo_url}"
        )
    provider = _REPO_HOSTS.get(parts.hostname or "", "git")
    location_options: dict[str, str] = {}
    if provider in ("github", "gitlab"):
        repo = _repo_name(parts.path.strip("/"))
        if not repo or (provider == "github" and repo.count("/") != 1):
            provider = "git"
        else:
            location_options["repo"] = repo
            if provider == "gitlab":
                location_options["instance"] = f"{parts.scheme}://{parts.netloc}"
    return SourceLocation(
        kind="tag_index",
        provider=provider,
        listing=repo_url,
        pattern=entry_pattern(tag_template),
        reference_url=reference,
        options=location_options,
    )


def _locate_checker(line: str) -> SourceLocation:
    name, options = parse_check_update(line)
    source = get_source(name)
    errors = source.validate_options(options)
    if errors:
        raise ConfigError(f"CHKUPDATE {name}: " + "; ".join(errors))

    pattern = None
    if options.get("pattern") and not getattr(source, "extracts_versions", False):
        try:
            pattern = re.compile(options["pattern"])
        except re.error as err:
            raise ConfigError(f"CHKUPDATE {name}: invalid pattern: {err}") from err
    return SourceLocation(
        kind="checker",
        provider=name,
        listing=options.get("url", ""),
        pattern=pattern,
        match_mode="search",
        options=options,
    )


def locate_source(spec: PackageSpec) -> SourceLocation:
    """Derive where to look for newer versions of a package.

    Args:
        spec: Parsed package spec.

    Returns:
        The location of kind ``archive``, ``tag_index`` or ``checker``.

    Raises:
        UnsupportedSchemeError: If the source cannot be searched (VCS other
            than tagged git, non-listable URL scheme, hard-coded URL,
            transformed version, unknown checker type).
        ConfigError: If the CHKUPDATE line is malformed or misses required
            options.
    """
    if spec.check_update:
        return _locate_checker(spec.check_update)

    entry = spec.source_template
    if entry is None:
        raise UnsupportedSchemeError("no source entry")
    fetch_type, options, url = split_source_entry(entry)

    if fetch_type in _VCS_TYPES:
        raise UnsupportedSchemeError(f"{fetch_type} sources have no release listing")
    if fetch_type == "git":
        return _locate_git(spec, options, url)
    if fetch_type not in _ARCHIVE_TYPES:
        raise UnsupportedSchemeError(f"unknown fetch type {fetch_type!r}")

    template = _expand(url, spec, PLACEHOLDER)
    _require_placeholder(template, url)
    reference = _expand(url, spec, spec.version)
    github = _locate_github_archive(template, reference)
    if github is not None:
        return github
    return _locate_directory(template, reference)
