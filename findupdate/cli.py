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

"""Command-line interface for findupdate.

Example:
    Survey the whole tree without touching any file:
        ```bash
        $ findupdate -d ~/aosc-os-abbs --dry-run
        ```

    Update the packages of a group, logging every outcome:
        ```bash
        $ findupdate -d ~/aosc-os-abbs -f groups/kde -l updates.log
        ```

    Only print target versions for python packages:
        ```bash
        $ findupdate -d ~/aosc-os-abbs -i '^lang-python/' -x
        ```

Exit Codes:

- 0: The survey ran to completion (individual packages may have failed or
  been skipped; see the summary and the log)
- 1: The tree is inaccessible, or the configuration, package list or
  include pattern is invalid
- 2: Invalid command-line arguments

Note:
    The CLI uses argparse (stdlib). Verbose mode shows full tracebacks on
    errors for debugging; debug mode implies verbose mode.

"""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
import sys

from dotenv import load_dotenv

from findupdate.config import load_config
from findupdate.core import SurveyConfig, run_survey
from findupdate.exceptions import FindUpdateError
from findupdate.filter import compile_include, read_package_list, select_packages
from findupdate.logging import SilentLogger, get_logger, set_global_logger
from findupdate.report import print_summary, print_versions
from findupdate.tree import iter_spec_files


def _package_version() -> str:
    try:
        return version("findupdate")
    except PackageNotFoundError:
        from findupdate import __version__

        return __version__


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError as err:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}") from err
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def _positive_float(text: str) -> float:
    try:
        value = float(text)
    except ValueError as err:
        raise argparse.ArgumentTypeError(f"invalid number: {text!r}") from err
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {text}")
    return value


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="findupdate",
        description="Find updated packages in the abbs tree",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"findupdate {_package_version()}",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Do not update the files in the abbs tree",
    )
    parser.add_argument(
        "-l",
        "--log",
        type=Path,
        default=None,
        help="Append one line per checked package to this file",
    )
    parser.add_argument(
        "-f",
        "--file",
        type=Path,
        default=None,
        help="Path to a list of packages to be updated",
    )
    parser.add_argument(
        "-i",
        "--include",
        default=None,
        help="Regular expression selecting packages by path (e.g. '^app-utils/')",
    )
    parser.add_argument(
        "-d",
        "--dir",
        type=Path,
        default=Path("."),
        help="Directory of the abbs tree (default: current directory)",
    )
    parser.add_argument(
        "-c",
        "--comply",
        action="store_true",
        help="Rewrite versions to comply with the package styling manual",
    )
    parser.add_argument(
        "-x",
        "--version-only",
        action="store_true",
        help="Print the target version only, even if no update was found (no files are written)",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=_positive_int,
        default=None,
        help="Number of packages checked concurrently (default: from config, 4)",
    )
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        default=None,
        help="Per-request timeout in seconds (default: from config, 30)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Configuration file (default: <dir>/.findupdate.yaml if present)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )
    return parser


def run(args: argparse.Namespace) -> int:
    """Run a survey for parsed arguments.

    Returns:
        Exit code (0 when the survey completed, 1 on global errors).
    """
    if args.version_only:
        # Keep stdout machine-readable.
        logger = SilentLogger()
    else:
        logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)

    root = args.dir.resolve()
    if not root.is_dir():
        print(f"Error: abbs tree not found: {root}", file=sys.stderr)
        return 1

    # Tokens may be kept in <tree>/.env; the process environment wins.
    load_dotenv(root / ".env")

    try:
        settings = load_config(args.config, tree=root)
        include = compile_include(args.include) if args.include else None
        entries = read_package_list(args.file, root, logger) if args.file else None
        spec_paths = select_packages(iter_spec_files(root), root, include, entries)
        config = SurveyConfig.from_settings(
            settings,
            tree_root=root,
            dry_run=args.dry_run,
            comply=args.comply,
            version_only=args.version_only,
            log_path=args.log,
            timeout=args.timeout,
            jobs=args.jobs,
            logger=logger,
        )
        logger.verbose("SURVEY", f"Checking updates for {len(spec_paths)} packages ...")
        result = run_survey(spec_paths, config)
    except FindUpdateError as err:
        print(f"Error: {err}", file=sys.stderr)
        if args.verbose or args.debug:
            import traceback

            traceback.print_exc()
        return 1
    except OSError as err:
        print(f"Error: cannot read abbs tree {root}: {err}", file=sys.stderr)
        return 1

    if args.version_only:
        print_versions(result.outcomes)
    else:
        print()
        print_summary(result, dry_run=args.dry_run)
    return 0


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the findupdate CLI.

    This function is registered as the 'findupdate' console script in
    pyproject.toml.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    sys.exit(run(args))


if __name__ == "__main__":
    main()
