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

"""Version extraction for findupdate.

Queries the backend named by a SourceLocation and turns its entries into a
set of VersionCandidate objects. Finding nothing is not an error: an empty
set means upstream currently offers no recognizable version.
"""

from __future__ import annotations

import requests

from findupdate.io.http import DEFAULT_MAX_BYTES, DEFAULT_TIMEOUT, make_session
from findupdate.logging import Logger, get_global_logger
from findupdate.versioning.keys import VersionCandidate

from .base import FetchContext, SourceLocation, get_source, match_entries


def extract_versions(
    location: SourceLocation,
    session: requests.Session | None = None,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    max_bytes: int = DEFAULT_MAX_BYTES,
    github_token: str | None = None,
    max_pages: int = 5,
    logger: Logger | None = None,
) -> set[VersionCandidate]:
    """Discover the versions available at an upstream location.

    Args:
        location: Location produced by ``locate_source``.
        session: HTTP session. A temporary one is created when omitted.
        timeout: Per-request timeout in seconds.
        max_bytes: Maximum accepted size of a listing response.
        github_token: Token for the GitHub API, if any.
        max_pages: Page limit for paginated tag APIs.
        logger: Logger for verbose/debug output. Defaults to the global
            logger.

    Returns:
        Candidates collapsed per version string (possibly empty).

    Raises:
        FetchError: On network, HTTP-status, timeout, size-limit and IO
            failures.
        UnsupportedSchemeError: If no backend is registered for the
            location's provider.
        ConfigError: If a checker option cannot be applied to the response
            (e.g. a JSONPath expression).
    """
    if logger is None:
        logger = get_global_logger()
    source = get_source(location.provider)

    own_session = session is None
    if own_session:
        session = make_session()
    try:
        ctx = FetchContext(
            session=session,
            timeout=timeout,
            max_bytes=max_bytes,
            github_token=github_token,
            max_pages=max_pages,
            logger=logger,
        )
        entries = source.fetch_entries(location, ctx)
    finally:
        if own_session:
            session.close()

    candidates = match_entries(entries, location.pattern, location.match_mode)
    logger.verbose(
        "UPSTREAM",
        f"{len(candidates)} version(s) among {len(entries)} entries",
    )
    if candidates:
        logger.debug(
            "UPSTREAM",
            "Versions: " + ", ".join(sorted(c.version for c in candidates)),
        )
    return candidates
