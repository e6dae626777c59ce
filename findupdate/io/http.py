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

"""HTTP access for findupdate listings.

This module owns every network read the update pipeline performs:

- ``make_session`` builds a ``requests.Session`` with retry/backoff on
  transient failures and a project User-Agent.
- ``fetch_text`` / ``fetch_json`` / ``fetch_bytes`` GET a URL with a
  per-request timeout, enforce a response size limit and translate every
  ``requests`` failure into ``FetchError``.

Design notes:

- Timeouts are per request (connect and read). A hung upstream therefore
  turns into a FetchError for one package instead of stalling the survey.
- Bodies are streamed so the size limit is enforced even when the server
  sends no Content-Length.
- All errors are chained with ``from err``.
"""

from __future__ import annotations

import json
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from findupdate.exceptions import FetchError
from findupdate.logging import Logger, get_global_logger

DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_USER_AGENT = "findupdate/0.3 (+https://github.com/AOSC-Dev/findupdate)"
_CHUNK = 64 * 1024


def make_session(
    *,
    user_agent: str = DEFAULT_USER_AGENT,
    retries: int = 3,
) -> requests.Session:
    """Create a requests.Session with sane retry/backoff defaults.

    - Retries on common transient status codes (429 and 5xx).
    - Applies exponential backoff.
    - Sets a User-Agent so upstream admins can identify the crawler.

    Args:
        user_agent: User-Agent header value.
        retries: Total retries per request.
    """
    s = requests.Session()
    policy = Retry(
        total=retries,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=("GET", "HEAD"),
        raise_on_status=False,
    )
    s.headers.update({"User-Agent": user_agent})
    s.mount("http://", HTTPAdapter(max_retries=policy))
    s.mount("https://", HTTPAdapter(max_retries=policy))
    return s


def fetch_bytes(
    session: requests.Session,
    url: str,
    *,
    timeout: float = DEFAULT_TIMEOUT,
    max_bytes: int = DEFAULT_MAX_BYTES,
    headers: dict[str, str] | None = None,
    params: dict[str, Any] | None = None,
    logger: Logger | None = None,
) -> tuple[bytes, requests.Response]:
    """GET a URL and return its body.

    Args:
        session: Session to use.
        url: URL to fetch.
        timeout: Per-request timeout in seconds.
        max_bytes: Maximum body size. Larger bodies raise FetchError.
        headers: Extra request headers.
        params: Query parameters.
        logger: Logger for HTTP tracing. Defaults to the global logger.

    Returns:
        A tuple (body, response). The response is closed; use it for status
            and headers (e.g. pagination links).

    Raises:
        FetchError: On connection errors, timeouts, HTTP error statuses and
            oversized bodies.
    """
    if logger is None:
        logger = get_global_logger()

    logger.debug("HTTP", f"GET {url}")
    try:
        resp = session.get(
            url, headers=headers, params=params, timeout=timeout, stream=True
        )
    except requests.exceptions.Timeout as err:
        raise FetchError(f"timed out after {timeout:g}s fetching {url}") from err
    except requests.exceptions.RequestException as err:
        raise FetchError(f"failed to fetch {url}: {err}") from err

    with resp:
        try:
            resp.raise_for_status()
        except requests.exceptions.HTTPError as err:
            raise FetchError(
                f"failed to fetch {url}: {resp.status_code} {resp.reason}"
            ) from err

        declared = resp.headers.get("Content-Length")
        if declared and declared.isdigit() and int(declared) > max_bytes:
            raise FetchError(f"response from {url} too large ({declared} bytes)")

        body = bytearray()
        try:
            for chunk in resp.iter_content(chunk_size=_CHUNK):
                body.extend(chunk)
                if len(body) > max_bytes:
                    raise FetchError(
                        f"response from {url} exceeds {max_bytes} bytes"
                    )
        except requests.exceptions.RequestException as err:
            raise FetchError(f"failed to read {url}: {err}") from err

    logger.debug("HTTP", f"Response: {resp.status_code} ({len(body)} bytes)")
    return bytes(body), resp


def fetch_text(session: requests.Session, url: str, **kwargs: Any) -> str:
    """GET a URL and decode its body as text.

    Accepts the same keyword arguments as fetch_bytes.
    """
    body, resp = fetch_bytes(session, url, **kwargs)
    encoding = resp.encoding or "utf-8"
    return body.decode(encoding, errors="replace")


def fetch_json(session: requests.Session, url: str, **kwargs: Any) -> tuple[Any, requests.Response]:
    """GET a URL and parse its body as JSON.

    Accepts the same keyword arguments as fetch_bytes.

    Returns:
        A tuple (payload, response).

    Raises:
        FetchError: On transport failures or an invalid JSON body.
    """
    body, resp = fetch_bytes(session, url, **kwargs)
    try:
        return json.loads(body.decode("utf-8")), resp
    except (UnicodeDecodeError, ValueError) as err:
        raise FetchError(f"invalid JSON from {url}: {err}") from err
