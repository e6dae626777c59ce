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

"""JSON API version lookup for findupdate.

Many upstreams publish their releases through a JSON endpoint (crates.io,
npm, vendor release feeds) rather than a directory or a tag list.
A CHKUPDATE line names the endpoint and a JSONPath expression selecting the
version values:

    ```sh
    CHKUPDATE='json::url=https://crates.io/api/v1/crates/ripgrep/versions;path=$.versions[*].num'
    CHKUPDATE='json::url=https://api.github.com/repos/owner/proj/releases;path=$[*].tag_name'
    ```

Options:

- **url** (str, required): Endpoint returning JSON.
- **path** (str, required): JSONPath expression (jsonpath-ng syntax). Every
    string or number it selects is an entry.
- **pattern** (str, optional): Regex applied to the entries, as for the
    github backend.

Notes:

- Single-quote the CHKUPDATE value in the spec, or escape ``$`` as ``\\$``
  inside double quotes.
- Lists selected by the expression are flattened one level.
"""

from __future__ import annotations

from typing import Any

from jsonpath_ng.ext import parse as jsonpath_parse

from findupdate.exceptions import ConfigError
from findupdate.io.http import fetch_json

from .base import FetchContext, SourceLocation, register_source


def _entries(value: Any) -> list[str]:
    if isinstance(value, bool):
        return []
    if isinstance(value, (str, int, float)):
        return [str(value)]
    if isinstance(value, list):
        return [entry for v in value for entry in _entries(v) if not isinstance(v, list)]
    return []


class JsonApiSource:
    """Select version values from a JSON document with JSONPath."""

    def fetch_entries(self, location: SourceLocation, ctx: FetchContext) -> list[str]:
        """Fetch the document and return every selected value.

        Raises:
            FetchError: If the request fails or the body is not JSON.
            ConfigError: If the JSONPath expression cannot be evaluated.
        """
        url = location.options["url"]
        path = location.options["path"]
        ctx.logger.verbose("UPSTREAM", f"Querying {url}")
        payload, _resp = fetch_json(ctx.session, url, **ctx.http_kwargs())

        try:
            matches = jsonpath_parse(path).find(payload)
        except Exception as err:
            raise ConfigError(f"Failed to evaluate JSONPath {path!r}: {err}") from err
        if not matches:
            ctx.logger.verbose("UPSTREAM", f"JSONPath {path!r} matched nothing at {url}")

        entries: list[str] = []
        for match in matches:
            entries.extend(_entries(match.value))
        ctx.logger.debug("UPSTREAM", f"Selected {len(entries)} value(s)")
        return entries

    def validate_options(self, options: dict[str, str]) -> list[str]:
        """Check the endpoint URL and the JSONPath syntax."""
        errors = []
        url = options.get("url", "").strip()
        if not url:
            errors.append("Please specify the JSON endpoint (url=...)")
        elif not url.startswith(("http://", "https://")):
            errors.append(f"url must be an http(s) URL, got {url!r}")

        path = options.get("path", "").strip()
        if not path:
            errors.append("Please specify the JSONPath of the versions (path=...)")
        else:
            try:
                jsonpath_parse(path)
            except Exception as err:
                errors.append(f"Invalid JSONPath {path!r}: {err}")
        return errors


register_source("json", JsonApiSource)
