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

"""Configuration loading for pkgprobe.

Built-in defaults are deep-merged with an optional YAML file. Dicts are
merged recursively and lists/scalars are replaced (last wins).

Public API:

- load_config: Load and validate the effective configuration
- ProbeConfig: Immutable settings object
- DEFAULTS: Built-in default values

Example:
    Basic usage:

        from pathlib import Path
        from pkgprobe.config import load_config

        config = load_config(Path("pkgprobe.yaml"))
        print(config.api_base_url)

"""

from .loader import (
    CONFIG_ENV_VAR,
    DEFAULTS,
    MAX_TIMEOUT,
    MIN_TIMEOUT,
    ProbeConfig,
    load_config,
)

__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULTS",
    "MAX_TIMEOUT",
    "MIN_TIMEOUT",
    "ProbeConfig",
    "load_config",
]
