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

"""Core orchestration for findupdate.

This module drives a survey: every selected package goes through

    parse -> locate -> query -> compare -> (normalize) -> rewrite

and ends in exactly one UpdateOutcome:

- **unchanged**: upstream has nothing strictly newer (or nothing at all)
- **updated**: the spec was rewritten (or would be, under dry-run)
- **skipped**: the source cannot be searched (UnsupportedSchemeError)
- **failed**: parse, fetch, configuration or write error

Design Principles:

- Packages are independent. A failure is converted into an outcome at the
  package boundary and never stops the survey.
- Packages run concurrently on a ThreadPoolExecutor; every package gets its
  own requests.Session.
- Workers only touch their own spec file. The result log is written once, by
  the caller thread, after all workers have finished.
- Configuration is an explicit SurveyConfig object, not global state.

Example:
    Programmatic usage:
        ```python
        from pathlib import Path
        from findupdate.core import SurveyConfig, run_survey
        from findupdate.tree import iter_spec_files

        root = Path("abbs-tree")
        config = SurveyConfig(tree_root=root, dry_run=True, jobs=8)
        result = run_survey(list(iter_spec_files(root)), config)
        print(result.counts())
        ```

"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
import itertools
import os
from pathlib import Path
import threading
from typing import Any

import requests

from findupdate.exceptions import (
    ConfigError,
    FetchError,
    ParseError,
    UnsupportedSchemeError,
    WriteError,
)
from findupdate.io.http import (
    DEFAULT_MAX_BYTES,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    make_session,
)
from findupdate.logging import Logger, get_global_logger
from findupdate.report import write_log
from findupdate.results import SurveyResult, UpdateOutcome
from findupdate.spec import (
    ExpansionError,
    PackageSpec,
    expand_variables,
    parse_spec,
    parse_spec_text,
    update_spec_text,
    write_spec_atomic,
)
from findupdate.spec.parser import SOURCE_FIELD
from findupdate.tree import package_path
from findupdate.upstream import extract_versions, locate_source
from findupdate.versioning import (
    compare_versions,
    is_newer,
    normalize_version,
    pick_update,
)

SNAPSHOT_MARKERS = ("+git", "+hg", "+svn", "+bzr")


@dataclass
class SurveyConfig:
    """Settings for one survey run.

    Attributes:
        tree_root: abbs tree root, used for relative package names.
        dry_run: Compute updates without writing spec files.
        comply: Rewrite discovered versions into house style.
        version_only: Only report target versions; never write spec files.
        log_path: Append one line per outcome to this file.
        timeout: Per-request timeout in seconds.
        jobs: Number of packages checked concurrently.
        retries: Retries for transient HTTP failures.
        user_agent: User-Agent sent with every request.
        max_bytes: Maximum accepted listing size.
        github_token: Token for the GitHub API.
        max_pages: Page limit for paginated tag APIs.
        logger: Logger for progress output. Defaults to the global logger.
    """

    tree_root: Path | None = None
    dry_run: bool = False
    comply: bool = False
    version_only: bool = False
    log_path: Path | None = None
    timeout: float = DEFAULT_TIMEOUT
    jobs: int = 4
    retries: int = 3
    user_agent: str = DEFAULT_USER_AGENT
    max_bytes: int = DEFAULT_MAX_BYTES
    github_token: str | None = None
    max_pages: int = 5
    logger: Logger | None = field(default=None, repr=False)

    @classmethod
    def from_settings(cls, settings: dict[str, Any], **overrides: Any) -> SurveyConfig:
        """Build a SurveyConfig from a loaded configuration mapping.

        Args:
            settings: Result of ``findupdate.config.load_config``.
            **overrides: Attributes to set explicitly (CLI flags). ``None``
                values are ignored.
        """
        http = settings["http"]
        github = settings["github"]
        values: dict[str, Any] = {
            "timeout": float(http["timeout"]),
            "retries": http["retries"],
            "user_agent": http["user_agent"],
            "max_bytes": http["max_listing_bytes"],
            "jobs": settings["survey"]["jobs"],
            "github_token": os.environ.get(github["token_env"]) or None,
            "max_pages": github["max_pages"],
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def writes(self) -> bool:
        """True when updated specs are written to disk."""
        return not (self.dry_run or self.version_only)


def _current_version_warnings(version: str) -> list[str]:
    warnings = []
    if "+" in version:
        warnings.append(f"Compound version number '{version}'")
        for marker in SNAPSHOT_MARKERS:
            if marker in version:
                warnings.append(f"Version number indicates a snapshot ({marker}) is used")
                break
    return warnings


def _expanded_sources(spec: PackageSpec) -> dict[str, list[str]]:
    sources = {}
    for key, value in spec.fields.items():
        if key != SOURCE_FIELD and not key.startswith(SOURCE_FIELD + "__"):
            continue
        try:
            value = expand_variables(value, spec.fields)
        except ExpansionError:
            pass
        sources[key] = value.split()
    return sources


def has_hardcoded_sources(old: PackageSpec, new: PackageSpec) -> bool:
    """True when a source entry is identical before and after a version bump.

    Such an entry does not follow VER and will keep fetching the old
    release.
    """
    before = _expanded_sources(old)
    after = _expanded_sources(new)
    for key, entries in before.items():
        for a, b in zip(entries, after.get(key, [])):
            if a == b:
                return True
    return False


def check_package(
    spec_path: Path,
    config: SurveyConfig,
    session: requests.Session,
) -> UpdateOutcome:
    """Check one package and update its spec when upstream is newer.

    Args:
        spec_path: Path to the package's spec file.
        config: Survey settings.
        session: HTTP session for this package.

    Returns:
        The package outcome. Expected errors (ParseError,
            UnsupportedSchemeError, ConfigError, FetchError, WriteError) are
            converted into outcomes rather than raised.
    """
    logger = config.logger or get_global_logger()
    if config.tree_root is not None:
        name = package_path(spec_path, config.tree_root)
    else:
        name = spec_path.parent.name

    def outcome(status: str, **kwargs: Any) -> UpdateOutcome:
        return UpdateOutcome(name=name, status=status, path=spec_path, **kwargs)

    # Parsed
    try:
        spec = parse_spec(spec_path, config.tree_root)
    except ParseError as err:
        return outcome("failed", error=f"parse error: {err}")
    current = spec.version
    logger.verbose("SPEC", f"{name}: VER={current} REL={spec.revision}")

    # Located
    try:
        location = locate_source(spec)
    except UnsupportedSchemeError as err:
        return outcome("skipped", old_version=current, reason=str(err))
    except ConfigError as err:
        return outcome("failed", old_version=current, error=str(err))
    logger.verbose(
        "UPSTREAM", f"{name}: {location.kind} via {location.provider} {location.listing}"
    )

    # Queried
    try:
        candidates = extract_versions(
            location,
            session,
            timeout=config.timeout,
            max_bytes=config.max_bytes,
            github_token=config.github_token,
            max_pages=config.max_pages,
            logger=logger,
        )
    except UnsupportedSchemeError as err:
        return outcome("skipped", old_version=current, reason=str(err))
    except (ConfigError, FetchError) as err:
        return outcome("failed", old_version=current, error=str(err))

    # Compared
    if not candidates:
        return outcome("unchanged", old_version=current, note="no candidates found")
    target = pick_update(current, candidates)
    if target is None:
        return outcome("unchanged", old_version=current)

    new_version = target.version
    warnings = _current_version_warnings(current)
    if config.comply:
        styled = normalize_version(new_version)
        if styled.changed:
            warnings.append(
                f"Version rewritten to house style ({styled.rule}): "
                f"{new_version} -> {styled.version}, please review"
            )
            if compare_versions(styled.version, current) == 0:
                return outcome(
                    "unchanged",
                    old_version=current,
                    note=f"upstream {new_version} is {current} in house style",
                )
            if not is_newer(styled.version, current):
                warnings.append(
                    f"Normalized version {styled.version} does not sort newer "
                    f"than {current}"
                )
            new_version = styled.version
    logger.verbose("VERSION", f"{name}: {current} -> {new_version} ({target.entry})")

    # Updating
    text = update_spec_text(spec, new_version)
    try:
        updated = parse_spec_text(
            text, name=spec.name, package_path=spec.package_path, path=spec.path
        )
    except ParseError as err:
        return outcome(
            "failed",
            old_version=current,
            error=f"rewritten spec does not parse: {err}",
        )
    if updated.version != new_version:
        return outcome(
            "failed",
            old_version=current,
            error=f"rewritten spec records VER={updated.version!r}, expected {new_version!r}",
        )
    if has_hardcoded_sources(spec, updated):
        warnings.append("Hardcoded URLs detected in SRCS")

    if config.writes:
        try:
            write_spec_atomic(spec_path, text)
        except WriteError as err:
            return outcome("failed", old_version=current, error=str(err))

    return outcome(
        "updated",
        old_version=current,
        new_version=new_version,
        warnings=tuple(warnings),
        dry_run=not config.writes,
    )


def run_survey(spec_paths: list[Path], config: SurveyConfig) -> SurveyResult:
    """Check many packages concurrently and collect their outcomes.

    Args:
        spec_paths: Spec files to check, in report order.
        config: Survey settings.

    Returns:
        Outcomes in the order of spec_paths. When ``config.log_path`` is
            set, every outcome has been appended to the log.

    Raises:
        WriteError: If the result log cannot be written.
    """
    logger = config.logger or get_global_logger()
    total = len(spec_paths)
    counter = itertools.count(1)
    counter_lock = threading.Lock()

    def work(spec_path: Path) -> UpdateOutcome:
        with counter_lock:
            index = next(counter)
        if config.tree_root is not None:
            label = package_path(spec_path, config.tree_root)
        else:
            label = spec_path.parent.name
        logger.step(index, total, f"Checking {label} ...")
        try:
            with make_session(
                user_agent=config.user_agent, retries=config.retries
            ) as session:
                return check_package(spec_path, config, session)
        except Exception as err:  # isolation boundary: one package, one outcome
            logger.debug("SURVEY", f"{label}: unexpected {type(err).__name__}")
            return UpdateOutcome(
                name=label,
                status="failed",
                error=f"{type(err).__name__}: {err}",
                path=spec_path,
            )

    with ThreadPoolExecutor(max_workers=max(1, config.jobs)) as pool:
        outcomes = tuple(pool.map(work, spec_paths))

    if config.log_path is not None:
        write_log(config.log_path, outcomes)
        logger.verbose("SURVEY", f"Wrote {len(outcomes)} line(s) to {config.log_path}")

    return SurveyResult(outcomes=outcomes, log_path=config.log_path)
