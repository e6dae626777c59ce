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

"""Anitya (release-monitoring.org) version lookup.

Anitya already tracks upstream releases for thousands of projects, so a
package can delegate its update check with ``CHKUPDATE="anitya::id=1832"``.

Options:

- **id** (int, required): Anitya project ID.
- **stable_only** (bool, optional): Use ``stable_versions`` instead of
    ``versions``. Default: true. Only the literal ``true`` enables it when
    given.

The API returns versions already sorted newest first; every returned
version is a candidate and the comparator still picks the greatest.
"""

from __future__ import annotations

from findupdate.exceptions import FetchError
from findupdate.io.http import fetch_json

from .base import FetchContext, SourceLocation, register_source

API_ENDPOINT = "https://release-monitoring.org/api/project/"


class AnityaSource:
    """Query the Anitya project API."""

    def fetch_entries(self, location: SourceLocation, ctx: FetchContext) -> list[str]:
        project_id = int(location.options["id"])
        stable_only = location.options.get("stable_only", "true") == "true"
        url = f"{API_ENDPOINT}{project_id}/"
        ctx.logger.verbose("UPSTREAM", f"Querying Anitya project {project_id}")
        payload, _resp = fetch_json(ctx.session, url, **ctx.http_kwargs())
        if not isinstance(payload, dict):
            raise FetchError(f"unexpected Anitya response for project {project_id}")
        if payload.get("id") != project_id:
            raise FetchError(
                f"Anitya returned project {payload.get('id')!r} "
                f"instead of {project_id}"
            )
        key = "stable_versions" if stable_only else "versions"
        versions = payload.get(key) or []
        return [v for v in versions if isinstance(v, str)]

    def validate_options(self, options: dict[str, str]) -> list[str]:
        project_id = options.get("id", "").strip()
        if not project_id:
            return ["Please specify the Anitya project ID (id=...)"]
        if not project_id.isdigit():
            return [f"Anitya project ID must be an integer, got {project_id!r}"]
        return []


register_source("anitya", AnityaSource)
