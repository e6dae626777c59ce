"""
findupdate - Find updated packages in the abbs tree

A Python CLI tool that surveys an abbs tree (``<section>/<package>/spec``),
checks each package's upstream for a newer release and rewrites the spec's
version when one is found.

findupdate provides:
  - A surgical spec parser/updater (only VER and REL change)
  - Source location from SRCS templates (directory listings, tag indexes)
    or explicit CHKUPDATE checkers (Anitya, GitHub, GitLab, GitWeb, git, HTML)
  - Numeric-aware version comparison
  - Optional rewriting of versions into the distribution's house style
  - Concurrent surveys with per-package error isolation and a result log

Quick Start
-----------
Check the tree in the current directory without changing anything:

    $ findupdate --dry-run

Update the packages of one section and log the outcomes:

    $ findupdate -d ~/aosc-os-abbs -i '^app-utils/' -l updates.log

For full CLI documentation:

    $ findupdate --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    Survey orchestration (SurveyConfig, check_package, run_survey).
config : package
    YAML configuration loading and merging.
spec : package
    Spec parsing, variable expansion and rewriting.
upstream : package
    Source location and version discovery backends.
versioning : package
    Version comparison and house-style normalization.
io : package
    HTTP session and bounded fetch helpers.
tree, filter, report : modules
    Tree enumeration, package selection and survey output.

Public API
----------
The primary interface is the CLI, but key functions are exported for
programmatic use:

    from findupdate.core import SurveyConfig, check_package, run_survey
    from findupdate.spec import parse_spec, update_spec_text
    from findupdate.upstream import locate_source, extract_versions
    from findupdate.versioning import compare_versions, normalize_version

For more details, see the individual module docstrings.

Project Information
-------------------
Author: Roger Cibrian
License: Apache-2.0
"""

__version__ = "0.3.0"
__author__ = "Roger Cibrian"
__license__ = "Apache-2.0"
__description__ = "Find updated packages in the abbs tree"

# Re-export commonly used functions for convenience
from findupdate.config import load_config
from findupdate.core import SurveyConfig, check_package, run_survey
from findupdate.spec import parse_spec, update_spec_text
from findupdate.upstream import extract_versions, locate_source
from findupdate.versioning import compare_versions, is_newer, normalize_version

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "__description__",
    "SurveyConfig",
    "check_package",
    "run_survey",
    "load_config",
    "parse_spec",
    "update_spec_text",
    "locate_source",
    "extract_versions",
    "compare_versions",
    "is_newer",
    "normalize_version",
]
