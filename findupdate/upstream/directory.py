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

"""Directory listing backends for archive sources.

Archive sources live in a directory that upstream publishes: an HTTP(S)
index page (Apache/nginx autoindex, SourceForge-like file lists, project
download pages) or a local mirror directory.

Supported Listings:

- ``http``: GET the listing URL and collect, for every ``<a>`` element, the
  basename of its ``href`` (URL-unquoted, trailing ``/`` dropped) and its
  link text. Both are offered as entries so that pages linking through
  redirectors still yield the file name.
- ``file``: read a local directory (``file://`` URL or absolute path).

Entries are returned in page order; duplicates are removed. Matching the
entries against the archive pattern happens in the extractor.

Error Handling:

- FetchError: network failures, HTTP error statuses, timeouts, oversized
  pages, unreadable directories
- Errors are chained with 'from err' for better debugging

Example:
    ```python
    from findupdate.io import make_session
    from findupdate.upstream.base import FetchContext, SourceLocation
    from findupdate.upstream.directory import HttpDirectorySource

    loc = SourceLocation(kind="archive", provider="http",
                         listing="https://example.org/dl/")
    with make_session() as session:
        entries = HttpDirectorySource().fetch_entries(loc, FetchContext(session))
    ```
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlsplit

from bs4 import BeautifulSoup

from findupdate.exceptions import FetchError
from findupdate.io.http import fetch_text

from .base import FetchContext, SourceLocation, register_source


def _href_basename(href: str) -> str:
    path = urlsplit(href).path.rstrip("/")
    return unquote(PurePosixPath(path).name) if path else ""


def parse_index_page(html: str) -> list[str]:
    """Collect candidate entry names from an HTML index page.

    Example:
        >>> parse_index_page('<a href="foo-1.0.tar.gz">foo-1.0.tar.gz</a>')
        ['foo-1.0.tar.gz']
    """
    soup = BeautifulSoup(html, "html.parser")
    entries: dict[str, None] = {}
    for anchor in soup.find_all("a"):
        href = anchor.get("href")
        if href:
            name = _href_basename(href)
            if name:
                entries.setdefault(name, None)
        text = anchor.get_text(strip=True).rstrip("/")
        if text:
            entries.setdefault(text, None)
    return list(entries)


class HttpDirectorySource:
    """List an HTTP(S) directory index page."""

    def fetch_entries(self, location: SourceLocation, ctx: FetchContext) -> list[str]:
        ctx.logger.verbose("UPSTREAM", f"Listing {location.listing}")
        html = fetch_text(ctx.session, location.listing, **ctx.http_kwargs())
        entries = parse_index_page(html)
        ctx.logger.debug("UPSTREAM", f"Index page has {len(entries)} entries")
        return entries

    def validate_options(self, options: dict[str, str]) -> list[str]:
        return []


class LocalDirectorySource:
    """List a local directory (``file://`` sources and local mirrors)."""

    def fetch_entries(self, location: SourceLocation, ctx: FetchContext) -> list[str]:
        directory = Path(location.listing)
        ctx.logger.verbose("UPSTREAM", f"Listing directory {directory}")
        try:
            return sorted(child.name for child in directory.iterdir())
        except OSError as err:
            raise FetchError(f"cannot list {directory}: {err}") from err

    def validate_options(self, options: dict[str, str]) -> list[str]:
        return []


register_source("http", HttpDirectorySource)
register_source("file", LocalDirectorySource)
