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

"""Regex scraping of an arbitrary web page.

For upstreams without a listable directory or tag API, a CHKUPDATE line can
name a page and a pattern whose first group is the version:

    CHKUPDATE="html::url=https://repo.aosc.io/misc/l10n/;pattern=zh_CN_l10n_(.+?)\\.pdf"

The pattern runs over the raw page body (not per link), so versions that
only appear in text are found too.
"""

from __future__ import annotations

import re

from findupdate.io.http import fetch_text

from .base import FetchContext, SourceLocation, register_source


class HtmlPatternSource:
    """Find versions in a page body with a user-supplied regex."""

    # Entries returned here are already versions.
    extracts_versions = True

    def fetch_entries(self, location: SourceLocation, ctx: FetchContext) -> list[str]:
        url = location.options["url"]
        pattern = re.compile(location.options["pattern"])
        ctx.logger.verbose("UPSTREAM", f"Scraping {url}")
        body = fetch_text(ctx.session, url, **ctx.http_kwargs())
        versions = [m.group(1) for m in pattern.finditer(body) if m.group(1)]
        ctx.logger.debug("UPSTREAM", f"Matched: {versions}")
        return versions

    def validate_options(self, options: dict[str, str]) -> list[str]:
        errors = []
        if not options.get("url", "").strip():
            errors.append("Please specify the HTML URL (url=...)")
        pattern = options.get("pattern", "")
        if not pattern:
            errors.append("Please specify the regex pattern for matching versions (pattern=...)")
        else:
            try:
                if re.compile(pattern).groups < 1:
                    errors.append("html pattern must capture the version in a group")
            except re.error as err:
                errors.append(f"Invalid pattern regex: {err}")
        return errors


register_source("html", HtmlPatternSource)
