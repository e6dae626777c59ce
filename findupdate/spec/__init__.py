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

"""Spec file reading and rewriting for findupdate.

Public API:

- parse_spec / parse_spec_text: Parse a spec into a PackageSpec
- update_spec_text: Compute the text of a version bump
- write_spec_atomic: Replace a spec file atomically
- expand_variables: Shell-style expansion of spec values

Example:
    Bump a spec in place:

        from pathlib import Path
        from findupdate.spec import parse_spec, update_spec_text, write_spec_atomic

        path = Path("tree/app-utils/foo/spec")
        spec = parse_spec(path)
        write_spec_atomic(path, update_spec_text(spec, "1.3.0"))
"""

from .parser import FieldSpan, PackageSpec, parse_spec, parse_spec_text, read_spec_text
from .shell import ExpansionError, expand_variables
from .updater import update_spec_text, write_spec_atomic

__all__ = [
    "ExpansionError",
    "FieldSpan",
    "PackageSpec",
    "expand_variables",
    "parse_spec",
    "parse_spec_text",
    "read_spec_text",
    "update_spec_text",
    "write_spec_atomic",
]
