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

"""Survey output: the result log and the console summary.

Log Format:
    One line per package, tab-separated, appended to the log file:

        name<TAB>status<TAB>detail<TAB>warnings

    ``warnings`` is a ``; ``-joined list (empty when there are none). Tabs
    and newlines inside fields are replaced by spaces so every outcome stays
    on one line.

Example:
    ```text
    app-utils/foo	updated	1.2.3 -> 1.3.0
    lang-python/bar	skipped	svn sources have no release listing
    net-misc/baz	failed	timed out after 30s fetching https://baz.org/dl/
    ```
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
import re

from findupdate.exceptions import WriteError
from findupdate.results import SurveyResult, UpdateOutcome

_WS = re.compile(r"[\t\r\n]+")


def _field(text: str) -> str:
    return _WS.sub(" ", text).strip()


def format_outcome(outcome: UpdateOutcome) -> str:
    """Format one outcome as a log line (without line terminator)."""
    return "\t".join(
        [
            _field(outcome.name),
            outcome.status,
            _field(outcome.detail),
            _field("; ".join(outcome.warnings)),
        ]
    )


def write_log(path: Path, outcomes: Iterable[UpdateOutcome]) -> int:
    """Append outcomes to the log file.

    Returns:
        Number of lines written.

    Raises:
        WriteError: If the log file cannot be opened or written.
    """
    lines = [format_outcome(o) + "\n" for o in outcomes]
    try:
        with path.open("a", encoding="utf-8") as f:
            f.writelines(lines)
    except OSError as err:
        raise WriteError(f"cannot write log {path}: {err}") from err
    return len(lines)


def print_versions(outcomes: Iterable[UpdateOutcome]) -> None:
    """Print ``name version`` per package (version-only mode)."""
    for outcome in outcomes:
        version = outcome.target_version
        if version is not None:
            print(f"{outcome.name} {version}")


def print_summary(result: SurveyResult, dry_run: bool = False) -> None:
    """Print the human-readable survey summary."""
    updated = result.by_status("updated")
    failed = result.by_status("failed")
    skipped = result.by_status("skipped")

    print("=" * 70)
    print("UPDATED PACKAGES (dry run)" if dry_run else "UPDATED PACKAGES")
    print("=" * 70)
    if not updated:
        print("  (none)")
    for outcome in updated:
        print(f"  {outcome.name:<36} {outcome.old_version} -> {outcome.new_version}")
        for warning in outcome.warnings:
            print(f"      [WARNING] {warning}")
    print()

    if skipped:
        print(f"Skipped ({len(skipped)}):")
        for outcome in skipped:
            print(f"  [SKIP] {outcome.name}: {outcome.reason}")
        print()

    if failed:
        print(f"Errors ({len(failed)}):")
        for outcome in failed:
            print(f"  [X] {outcome.name}: {outcome.error}")
        print()

    counts = result.counts()
    print("=" * 70)
    print(
        f"Checked {len(result.outcomes)} package(s): "
        + ", ".join(f"{counts[s]} {s}" for s in counts)
    )
    if result.log_path is not None:
        print(f"Log:      {result.log_path}")
