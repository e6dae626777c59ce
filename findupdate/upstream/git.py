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

"""Tag listing over the git smart-HTTP protocol.

Any git server reachable over HTTP(S) advertises its refs at
``<repo>/info/refs?service=git-upload-pack``. The advertisement is a
sequence of pkt-lines::

    001e# service=git-upload-pack
    0000
    00fa<sha1> HEAD\\0<capabilities>
    003f<sha1> refs/tags/v1.0
    0042<sha1> refs/tags/v1.0^{}
    0000

This backend reads that advertisement (protocol v0, which every server
speaks) and returns the tag names, dropping the peeled ``^{}`` entries.
No git binary is needed.
"""

from __future__ import annotations

from findupdate.exceptions import FetchError
from findupdate.io.http import fetch_bytes

from .base import FetchContext, SourceLocation, register_source

SIMULATED_GIT_VERSION = "2.43.0"
_TAG_PREFIX = "refs/tags/"


def parse_ref_advertisement(body: bytes) -> list[str]:
    """Extract ref names from a smart-HTTP ref advertisement.

    Raises:
        FetchError: If the body is not a pkt-line stream.
    """
    refs: list[str] = []
    i = 0
    n = len(body)
    while i < n:
        header = body[i : i + 4]
        try:
            length = int(header, 16)
        except ValueError as err:
            raise FetchError(f"malformed git ref advertisement at byte {i}") from err
        if length == 0:
            # flush-pkt
            i += 4
            continue
        if length < 4 or i + length > n:
            raise FetchError(f"malformed git ref advertisement at byte {i}")
        payload = body[i + 4 : i + length].rstrip(b"\n")
        i += length
        if payload.startswith(b"#"):
            continue
        payload = payload.split(b"\x00", 1)[0]
        _sha, _, ref = payload.partition(b" ")
        if ref:
            refs.append(ref.decode("utf-8", errors="replace"))
    return refs


def collect_tags(refs: list[str]) -> list[str]:
    """Keep tag refs, without the ``refs/tags/`` prefix and peeled entries."""
    return [
        ref[len(_TAG_PREFIX) :]
        for ref in refs
        if ref.startswith(_TAG_PREFIX) and not ref.endswith("^{}")
    ]


class GitRefsSource:
    """List tags of a git repository over smart HTTP."""

    def fetch_entries(self, location: SourceLocation, ctx: FetchContext) -> list[str]:
        repo_url = location.options.get("url") or location.listing
        url = f"{repo_url.rstrip('/')}/info/refs"
        ctx.logger.verbose("UPSTREAM", f"Reading refs of {repo_url}")
        body, _resp = fetch_bytes(
            ctx.session,
            url,
            params={"service": "git-upload-pack"},
            headers={"User-Agent": f"git/{SIMULATED_GIT_VERSION}"},
            **ctx.http_kwargs(),
        )
        tags = collect_tags(parse_ref_advertisement(body))
        ctx.logger.debug("UPSTREAM", f"Repository advertises {len(tags)} tag(s)")
        return tags

    def validate_options(self, options: dict[str, str]) -> list[str]:
        url = options.get("url", "").strip()
        if not url:
            return ["Please specify the repository URL (url=...)"]
        if not url.startswith(("http://", "https://")):
            return [f"url must be an http(s) URL, got {url!r}"]
        return []


register_source("git", GitRefsSource)
