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

"""GitWeb tag page scraping.

``CHKUPDATE="gitweb::url=https://repo.or.cz/0ad.git;pattern=^[^b]+$"``
fetches ``<url>/tags`` and reads the text of every element with class
``name`` (the tag column of the GitWeb tags view).
"""

from __future__ import annotations

from bs4 import BeautifulSoup

from findupdate.io.http import fetch_text

from .base import FetchContext, SourceLocation, register_source


class GitWebSource:
    """List tag names from a GitWeb ``/tags`` page."""

    def fetch_entries(self, location: SourceLocation, ctx: FetchContext) -> list[str]:
        url = f"{location.options['url'].rstrip('/')}/tags"
        ctx.logger.verbose("UPSTREAM", f"Scraping GitWeb tags at {url}")
        html = fetch_text(ctx.session, url, **ctx.http_kwargs())
        soup = BeautifulSoup(html, "html.parser")
        names = [el.get_text(strip=True) for el in soup.select(".name")]
        return [name for name in names if name]

    def validate_options(self, options: dict[str, str]) -> list[str]:
        if not options.get("url", "").strip():
            return ["Please specify the GitWeb project URL (url=...)"]
        return []


register_source("gitweb", GitWebSource)
