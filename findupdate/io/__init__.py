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

"""Network IO for findupdate.

Public API:

make_session : function
    Create a requests.Session with retries and a project User-Agent.
fetch_text, fetch_json, fetch_bytes : functions
    Bounded, timeout-limited GET requests raising FetchError on failure.

Example:
    from findupdate.io import fetch_text, make_session

    with make_session() as session:
        html = fetch_text(session, "https://example.org/releases/", timeout=10)
"""

from .http import (
    DEFAULT_MAX_BYTES,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    fetch_bytes,
    fetch_json,
    fetch_text,
    make_session,
)

__all__ = [
    "DEFAULT_MAX_BYTES",
    "DEFAULT_TIMEOUT",
    "DEFAULT_USER_AGENT",
    "fetch_bytes",
    "fetch_json",
    "fetch_text",
    "make_session",
]
