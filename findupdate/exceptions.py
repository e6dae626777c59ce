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

"""Exception hierarchy for findupdate.

This module defines the error taxonomy used across the update pipeline so
that the survey driver can map every failure onto a per-package outcome:

- ParseError: Malformed or incomplete spec file (package is reported failed)
- UnsupportedSchemeError: The source has no listing strategy (package is
  reported skipped)
- FetchError: Network or IO failure while reading a listing, including
  timeouts (package is reported failed)
- WriteError: The spec file could not be rewritten (package is reported
  failed, the original file is untouched)
- ConfigError: Invalid configuration file or CHKUPDATE line

All exceptions inherit from FindUpdateError, allowing callers to catch every
findupdate error with a single except clause.

Example:
    Handling per-package errors:
        ```python
        from findupdate.exceptions import FetchError, UnsupportedSchemeError
        from findupdate.upstream import extract_versions, locate_source

        try:
            candidates = extract_versions(locate_source(spec))
        except UnsupportedSchemeError as e:
            print(f"skipped: {e}")
        except FetchError as e:
            print(f"failed: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "FindUpdateError",
    "ParseError",
    "UnsupportedSchemeError",
    "FetchError",
    "WriteError",
    "ConfigError",
]


class FindUpdateError(Exception):
    """Base exception for all findupdate errors."""

    pass


class ParseError(FindUpdateError):
    """Raised when a spec file is malformed or misses required fields.

    This covers:

    - Missing or empty VER
    - Missing SRCS (and no CHKUPDATE line to fall back on)
    - A REL value that is not a non-negative integer
    - Unterminated quotes or lines that are not assignments

    Attributes:
        line: 1-based line number of the offending text, if known.
    """

    def __init__(self, message: str, line: int | None = None) -> None:
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)
        self.line = line


class UnsupportedSchemeError(FindUpdateError):
    """Raised when a source template cannot be turned into a listing request.

    Examples are version-control sources without a discoverable tag listing
    (svn, bzr, hg, fossil, git pinned to a commit hash), templates without a
    version placeholder, and URL schemes that cannot be listed (ftp).

    This is an expected limitation: the survey reports the package as
    skipped, not failed.
    """

    pass


class FetchError(FindUpdateError):
    """Raised for network or IO failures while reading a listing endpoint.

    This includes connection errors, HTTP error statuses, request timeouts,
    oversized responses and unreadable local directories.
    """

    pass


class WriteError(FindUpdateError):
    """Raised when a spec file could not be rewritten.

    The writer guarantees that the original file is left untouched when this
    is raised.
    """

    pass


class ConfigError(FindUpdateError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - YAML parsing of the configuration file
    - A configuration file whose top level is not a mapping
    - CHKUPDATE lines that are malformed or miss required checker options
    """

    pass
