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

"""GitHub tag listing for findupdate.

Lists the tags of a GitHub repository through the REST API. Used both for
archive sources hosted on github.com (``/archive/`` and
``/releases/download/`` URLs, ``git::`` sources on github.com) and for
explicit ``CHKUPDATE="github::repo=owner/name"`` lines.

Spec Configuration:
    ```sh
    CHKUPDATE="github::repo=AOSC-Dev/ciel-rs;pattern=^v(\\d.*)$"
    ```

Options:

- **repo** (str, required): Repository in "owner/name" format.
- **pattern** (str, optional): Regular expression; with a capturing group
    the version is group 1, without one it only filters tag names.

Pagination:
    Tags are requested 100 per page and the ``Link: rel="next"`` header is
    followed up to the configured page limit (``github.max_pages``).

Rate Limits:

- Unauthenticated: 60 requests/hour per IP
- Authenticated: 5000 requests/hour per token
- The token is read from the environment variable named by the
  ``github.token_env`` setting (default ``GITHUB_TOKEN``).

Error Handling:

- FetchError: API failures, rate limiting, unexpected payloads
- Errors are chained with 'from err' for better debugging
"""

from __future__ import annotations

from findupdate.exceptions import FetchError
from findupdate.io.http import fetch_json

from .base import FetchContext, SourceLocation, register_source

API_ENDPOINT = "https://api.github.com"
PER_PAGE = 100


class GitHubTagSource:
    """List tags of a GitHub repository."""

    def fetch_entries(self, location: SourceLocation, ctx: FetchContext) -> list[str]:
        """Fetch tag names, newest first as returned by the API.

        Raises:
            FetchError: If a request fails or the payload is not a tag list.
        """
        repo = location.options["repo"]
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if ctx.github_token:
            headers["Authorization"] = f"token {ctx.github_token}"
            ctx.logger.debug("UPSTREAM", "Using authenticated API request")

        ctx.logger.verbose("UPSTREAM", f"Listing GitHub tags of {repo}")
        url: str | None = f"{API_ENDPOINT}/repos/{repo}/tags"
        params: dict[str, int] | None = {"per_page": PER_PAGE}
        tags: list[str] = []
        pages = 0
        while url and pages < ctx.max_pages:
            payload, resp = fetch_json(
                ctx.session, url, headers=headers, params=params, **ctx.http_kwargs()
            )
            if not isinstance(payload, list):
                raise FetchError(f"unexpected GitHub API response for {repo}")
            tags.extend(
                item["name"]
                for item in payload
                if isinstance(item, dict) and isinstance(item.get("name"), str)
            )
            pages += 1
            # The next link already carries the query string.
            url = resp.links.get("next", {}).get("url")
            params = None

        if url:
            ctx.logger.verbose(
                "UPSTREAM", f"Stopped after {pages} page(s) of tags for {repo}"
            )
        ctx.logger.debug("UPSTREAM", f"GitHub returned {len(tags)} tag(s)")
        return tags

    def validate_options(self, options: dict[str, str]) -> list[str]:
        """Check that ``repo`` is present and in owner/name form."""
        errors = []
        repo = options.get("repo", "").strip()
        if not repo:
            errors.append("Please specify the repository slug (repo=owner/name)")
        elif repo.count("/") != 1:
            errors.append(f"repo must be in format 'owner/name', got {repo!r}")
        return errors


register_source("github", GitHubTagSource)
