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

"""Public API return types for findupdate.

This module defines dataclasses for return values from the survey driver.

All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using result types:
        ```python
        from pathlib import Path
        from findupdate.core import SurveyConfig, run_survey

        result = run_survey([Path("tree/app-utils/foo/spec")], SurveyConfig())
        for outcome in result.outcomes:
            print(outcome.name, outcome.status, outcome.detail)
        ```

Note:
    Only public API return types belong in this module. Domain types
    (like VersionCandidate or SourceLocation) remain co-located with their
    related logic.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

OutcomeStatus = Literal["unchanged", "updated", "skipped", "failed"]

STATUSES: tuple[OutcomeStatus, ...] = ("updated", "unchanged", "skipped", "failed")


@dataclass(frozen=True)
class UpdateOutcome:
    """Result of checking one package.

    Attributes:
        name: Package path relative to the tree root (e.g. "app-utils/foo").
        status: One of "unchanged", "updated", "skipped" or "failed".
        old_version: Version recorded in the spec, when it could be read.
        new_version: Target version ("updated" only).
        reason: Why the package was skipped ("skipped" only).
        error: Error message ("failed" only).
        note: Extra information (e.g. "no candidates found").
        warnings: Review hints attached to the outcome.
        dry_run: True when an update was computed but not written.
        path: Spec file path.
    """

    name: str
    status: OutcomeStatus
    old_version: str | None = None
    new_version: str | None = None
    reason: str | None = None
    error: str | None = None
    note: str | None = None
    warnings: tuple[str, ...] = ()
    dry_run: bool = False
    path: Path | None = None

    @property
    def detail(self) -> str:
        """One-line human description of the outcome."""
        if self.status == "updated":
            text = f"{self.old_version} -> {self.new_version}"
            return f"{text} (dry run)" if self.dry_run else text
        if self.status == "skipped":
            return self.reason or ""
        if self.status == "failed":
            return self.error or ""
        text = self.old_version or ""
        return f"{text} ({self.note})" if self.note else text

    @property
    def target_version(self) -> str | None:
        """Version the package should be at: new one if updated, else current."""
        return self.new_version if self.status == "updated" else self.old_version


@dataclass(frozen=True)
class SurveyResult:
    """Result of a survey over many packages.

    Attributes:
        outcomes: One outcome per selected package, in selection order.
        log_path: Log file the outcomes were appended to, if any.
    """

    outcomes: tuple[UpdateOutcome, ...]
    log_path: Path | None = None

    def counts(self) -> dict[str, int]:
        """Number of outcomes per status (every status present, maybe 0)."""
        counter = Counter(o.status for o in self.outcomes)
        return {status: counter.get(status, 0) for status in STATUSES}

    def by_status(self, status: OutcomeStatus) -> list[UpdateOutcome]:
        return [o for o in self.outcomes if o.status == status]
