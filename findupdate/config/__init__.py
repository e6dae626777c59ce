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

"""Configuration loading for findupdate.

Built-in defaults are deep-merged with an optional YAML file (dicts merged
recursively, lists and scalars replaced). Command-line flags override the
result.

Public API:

- load_config: Load and merge the effective configuration
- DEFAULTS: Built-in settings

Example:
    Basic usage:

        from pathlib import Path
        from findupdate.config import load_config

        config = load_config(tree=Path("abbs-tree"))
        print(config["survey"]["jobs"])

"""

from .loader import CONFIG_FILENAME, DEFAULTS, find_config_file, load_config

__all__ = ["CONFIG_FILENAME", "DEFAULTS", "find_config_file", "load_config"]
