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

"""Upstream discovery for findupdate.

This package finds the versions an upstream project currently offers. It
has two stages:

1. ``locate_source(spec)`` derives a SourceLocation from a spec: either an
   explicit CHKUPDATE checker, an archive directory listing, or a tag index.
2. ``extract_versions(location, session)`` asks the registered backend for
   entries and matches them into VersionCandidate objects.

Available Backends:
    http : HttpDirectorySource
        HTML index pages of release directories (BeautifulSoup).
    file : LocalDirectorySource
        Local directories and file:// URLs.
    github : GitHubTagSource
        GitHub tags API (pagination, optional token).
    gitlab : GitLabTagSource
        GitLab tags API on gitlab.com or any instance.
    git : GitRefsSource
        Tags from the git smart-HTTP ref advertisement.
    gitweb : GitWebSource
        Tag names scraped from a GitWeb ``/tags`` page.
    anitya : AnityaSource
        release-monitoring.org project versions.
    html : HtmlPatternSource
        Regex over an arbitrary page body.
    json : JsonApiSource
        JSONPath selection from a JSON API response (jsonpath-ng).

Example:
    ```python
    from findupdate.io import make_session
    from findupdate.spec import parse_spec
    from findupdate.upstream import extract_versions, locate_source

    spec = parse_spec(path)
    with make_session() as session:
        candidates = extract_versions(locate_source(spec), session, timeout=10)
    ```

Note:
    Backends self-register when their module is imported; importing this
    package imports all of them.
"""

from .base import (
    VERSION_CAPTURE,
    FetchContext,
    SourceKind,
    SourceLocation,
    UpstreamSource,
    available_sources,
    get_source,
    match_entries,
    register_source,
)

# Import backends so they register themselves
from . import anitya, directory, git, github, gitlab, gitweb, html, json_api  # noqa: F401
from .extractor import extract_versions
from .locator import PLACEHOLDER, locate_source, parse_check_update, split_source_entry

__all__ = [
    "PLACEHOLDER",
    "VERSION_CAPTURE",
    "FetchContext",
    "SourceKind",
    "SourceLocation",
    "UpstreamSource",
    "available_sources",
    "extract_versions",
    "get_source",
    "locate_source",
    "match_entries",
    "parse_check_update",
    "register_source",
    "split_source_entry",
]
