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

"""
Configuration loading and merging for findupdate.

Settings come from two layers:

1. **Built-in defaults** (``DEFAULTS`` in this module)
2. **Configuration file** (YAML), either given with ``--config`` or found at
   ``<tree>/.findupdate.yaml``

Command-line flags are applied last by the CLI and override both layers.

Merge Behavior
--------------
The loader performs deep merging with "last wins" semantics:
  - **Dicts**: Recursively merged (keys from overlay override base)
  - **Lists**: Completely replaced (NOT appended/extended)
  - **Scalars**: Overwritten (strings, numbers, booleans)

Recognized Settings
-------------------
.. code-block:: yaml

    http:
      timeout: 30              # seconds, per request
      retries: 3               # transient failures (429/5xx)
      user_agent: "findupdate/0.3 (...)"
      max_listing_bytes: 10485760
    survey:
      jobs: 4                  # concurrent packages
    github:
      token_env: GITHUB_TOKEN  # environment variable holding the API token
      max_pages: 5             # tag pages fetched per repository

Unknown keys are kept (and ignored) so that newer configuration files still
load with older versions.

Functions
---------
load_config : function
    Load and merge the configuration (main public API).

Error Handling
--------------
- ConfigError: missing explicit file, YAML parse errors, empty files,
  non-mapping documents and values of the wrong type
- All errors are chained with "from err" for better debugging

Examples
--------
    >>> from pathlib import Path
    >>> from findupdate.config import load_config
    >>> cfg = load_config(tree=Path("abbs-tree"))
    >>> cfg["http"]["timeout"]
    30.0
"""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any

import yaml

from findupdate.exceptions import ConfigError
from findupdate.io.http import DEFAULT_MAX_BYTES, DEFAULT_TIMEOUT, DEFAULT_USER_AGENT

CONFIG_FILENAME = ".findupdate.yaml"

DEFAULTS: dict[str, Any] = {
    "http": {
        "timeout": DEFAULT_TIMEOUT,
        "retries": 3,
        "user_agent": DEFAULT_USER_AGENT,
        "max_listing_bytes": DEFAULT_MAX_BYTES,
    },
    "survey": {
        "jobs": 4,
    },
    "github": {
        "token_env": "GITHUB_TOKEN",
        "max_pages": 5,
    },
}

# (section, key) -> (accepted types, must be positive)
_SCHEMA: dict[tuple[str, str], tuple[tuple[type, ...], bool]] = {
    ("http", "timeout"): ((int, float), True),
    ("http", "retries"): ((int,), False),
    ("http", "user_agent"): ((str,), False),
    ("http", "max_listing_bytes"): ((int,), True),
    ("survey", "jobs"): ((int,), True),
    ("github", "token_env"): ((str,), False),
    ("github", "max_pages"): ((int,), True),
}


def _load_yaml_file(p: Path) -> Any:
    """
    Load a YAML file and return the parsed Python object.

    Raises:
      ConfigError - when the file cannot be read, is not valid YAML, or is empty
    """
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as err:
        raise ConfigError(f"cannot read configuration file {p}: {err}") from err
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    if data is None:
        raise ConfigError(f"configuration file is empty: {p}")
    return data


def _deep_merge_dicts(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """
    Deep-merge two dicts with "overlay wins".

    Rules:
      - dict + dict -> deep merge
      - list + list -> overlay REPLACES base (not concatenated)
      - everything else -> overlay overwrites base

    This function does not mutate inputs; returns a new dict.
    """
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge_dicts(result[k], v)
        else:
            # Replace lists and scalars entirely
            result[k] = v
    return result


def _validate(cfg: dict[str, Any], source: Path) -> None:
    """Check known settings for type and range. Raises ConfigError."""
    for (section, key), (types, positive) in _SCHEMA.items():
        block = cfg.get(section)
        if not isinstance(block, dict):
            raise ConfigError(f"{source}: '{section}' must be a mapping")
        value = block.get(key)
        # bool is an int subclass; reject it for numeric settings
        if isinstance(value, bool) or not isinstance(value, types):
            expected = " or ".join(t.__name__ for t in types)
            raise ConfigError(
                f"{source}: '{section}.{key}' must be {expected}, got {value!r}"
            )
        if positive and value <= 0:
            raise ConfigError(f"{source}: '{section}.{key}' must be positive")
        if key == "retries" and value < 0:
            raise ConfigError(f"{source}: '{section}.{key}' must not be negative")


def find_config_file(tree: Path) -> Path | None:
    """Return ``<tree>/.findupdate.yaml`` if it exists."""
    candidate = tree / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def load_config(path: Path | None = None, tree: Path | None = None) -> dict[str, Any]:
    """
    Load the effective configuration.

    Parameters
    ----------
    path : Path, optional
        Explicit configuration file. It must exist.
    tree : Path, optional
        abbs tree root, searched for ``.findupdate.yaml`` when no explicit
        path is given.

    Returns
    -------
    dict
        Defaults deep-merged with the file contents (a fresh copy).

    Raises
    ------
    ConfigError
        If an explicit file is missing, or the file is invalid.
    """
    if path is None and tree is not None:
        path = find_config_file(tree)
    if path is None:
        return copy.deepcopy(DEFAULTS)
    if not path.is_file():
        raise ConfigError(f"configuration file not found: {path}")

    data = _load_yaml_file(path)
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top level must be a mapping, got {type(data).__name__}")

    cfg = _deep_merge_dicts(copy.deepcopy(DEFAULTS), data)
    _validate(cfg, path)
    return cfg
