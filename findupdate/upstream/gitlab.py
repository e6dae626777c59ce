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

"""GitLab tag listing for findupdate.

Options:

- **repo** (str, required): Project path ("group/name") or numeric ID.
- **instance** (str, optional): Base URL of the GitLab instance.
    Default: https://gitlab.com
- **pattern** (str, optional): Version regex (see the github backend).

Tags are read page by page up to the same page limit as the github backend
(``github.max_pages`` in the configuration).

Example:
    ```sh
    CHKUPDATE="gitlab::repo=GNOME/fractal;instance=https://gitlab.gnome.org"
    ```
"""

from __future__ import annotations

from urllib.parse import quote

from findupdate.exceptions import FetchError
from findupdate.io.http import fetch_json

from .base import FetchContext, SourceLocation, register_source

DEFAULT_INSTANCE = "https://gitlab.com"
PER_PAGE = 100


class GitLabTagSource:
    """List tags of a GitLab project."""

    def fetch_entries(self, location: SourceLocation, ctx: FetchContext) -> list[str]:
        """Fetch tag names, following the API's ``Link`` pagination.

        Raises:
            FetchError: If a request fails or the payload is not a tag list.
        """
        instance = location.options.get("instance") or DEFAULT_INSTANCE
        repo = location.options["repo"]
        url: str | None = (
            f"{instance.rstrip('/')}/api/v4/projects/"
            f"{quote(repo, safe='')}/repository/tags"
        )
        ctx.logger.verbose("UPSTREAM", f"Listing GitLab tags of {repo} on {instance}")
        params: dict[str, int] | None = {"per_page": PER_PAGE}
        tags: list[str] = []
        pages = 0
        while url and pages < ctx.max_pages:
            payload, resp = fetch_json(ctx.session, url, params=params, **ctx.http_kwargs())
            if not isinstance(payload, list):
                raise FetchError(f"unexpected GitLab API response for {repo}")
            tags.extend(
                item["name"]
                for item in payload
                if isinstance(item, dict) and isinstance(item.get("name"), str)
            )
            pages += 1
            url = resp.links.get("next", {}).get("url")
            params = None

        if url:
            ctx.logger.verbose(
                "UPSTREAM", f"Stopped after {pages} page(s) of tags for {repo}"
            )
        ctx.logger.debug("UPSTREAM", f"GitLab returned {len(tags)} tag(s)")
        return tags

    def validate_options(self, options: dict[str, str]) -> list[str]:
        errors = []
        if not options.get("repo", "").strip():
            errors.append("Please specify the repository slug or project ID (repo=...)")
        instance = options.get("instance")
        if instance is not None and not instance.startswith(("http://", "https://")):
            errors.append(f"instance must be an http(s) URL, got {instance!r}")
        return errors


register_source("gitlab", GitLabTagSource)
