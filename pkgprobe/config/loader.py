"""
Configuration loading and merging for pkgprobe.

Settings come from two layers, merged with "last wins" semantics:

1. **Built-in defaults** (DEFAULTS below)
   - Public winget.run v2 endpoint, 30s timeouts, 3 attempts, 0.5s backoff
2. **Configuration file** (YAML, optional)
   - Passed explicitly (``--config``) or via the PKGPROBE_CONFIG environment
     variable
   - Only the keys present override the defaults

Merge Behavior
--------------
  - **Dicts**: Recursively merged (keys from overlay override base)
  - **Lists**: Completely replaced (NOT appended/extended)
  - **Scalars**: Overwritten (strings, numbers, booleans)

File Format
-----------
    api:
      base_url: https://api.winget.run/v2
      timeout: 30        # seconds per request attempt (5-300)
      take: 12           # search results requested per query
    retry:
      max_attempts: 3
      base_delay: 0.5    # seconds, doubled before every further retry
    prewarm:
      delay: 0.1         # seconds between prewarm calls
    winget:
      enabled: true
      path: null         # null = locate winget on PATH
      timeout: 30

Error Handling
--------------
- ConfigError: Missing file, invalid YAML, non-mapping document, unknown
  section or key, wrongly typed value. Errors are chained with "from err".

Examples
--------
    >>> from pathlib import Path
    >>> from pkgprobe.config import load_config
    >>> cfg = load_config(Path("pkgprobe.yaml"))
    >>> cfg.request_timeout
    30
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Any

import yaml

from pkgprobe.exceptions import ConfigError
from pkgprobe.logging import get_global_logger

CONFIG_ENV_VAR = "PKGPROBE_CONFIG"

# Accepted range for every timeout, in seconds.
MIN_TIMEOUT = 5
MAX_TIMEOUT = 300

DEFAULTS: dict[str, Any] = {
    "api": {
        "base_url": "https://api.winget.run/v2",
        "timeout": 30,
        "take": 12,
    },
    "retry": {
        "max_attempts": 3,
        "base_delay": 0.5,
    },
    "prewarm": {
        "delay": 0.1,
    },
    "winget": {
        "enabled": True,
        "path": None,
        "timeout": 30,
    },
}

# -------------------------------
# Data types
# -------------------------------


@dataclass(frozen=True)
class ProbeConfig:
    """Effective settings after merging defaults and the config file.

    Attributes:
        api_base_url: Catalog API root.
        request_timeout: Per-attempt HTTP timeout in seconds.
        search_take: Number of search results requested per query.
        max_attempts: Total HTTP attempts including the first.
        base_delay: Backoff base in seconds.
        prewarm_delay: Pause between prewarm fetches in seconds.
        winget_enabled: Whether the local winget client may be used.
        winget_path: Explicit winget path, or None to locate it.
        winget_timeout: Seconds before a winget process is killed.
        source: Config file the values came from, None for defaults only.
    """

    api_base_url: str = DEFAULTS["api"]["base_url"]
    request_timeout: float = DEFAULTS["api"]["timeout"]
    search_take: int = DEFAULTS["api"]["take"]
    max_attempts: int = DEFAULTS["retry"]["max_attempts"]
    base_delay: float = DEFAULTS["retry"]["base_delay"]
    prewarm_delay: float = DEFAULTS["prewarm"]["delay"]
    winget_enabled: bool = DEFAULTS["winget"]["enabled"]
    winget_path: str | None = DEFAULTS["winget"]["path"]
    winget_timeout: float = DEFAULTS["winget"]["timeout"]
    source: Path | None = None


# -------------------------------
# YAML helpers
# -------------------------------


def _load_yaml_file(p: Path) -> dict[str, Any]:
    """
    Load a YAML config file and return the parsed mapping.

    An empty file is treated as an empty mapping (all defaults).

    Raises:
      ConfigError - missing file, invalid YAML, or non-mapping document
    """
    if not p.exists():
        raise ConfigError(f"config file not found: {p}")
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as err:
        raise ConfigError(f"Error parsing YAML: {p}: {err}") from err
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"top-level YAML must be a mapping (dict): {p}")
    return data


# -------------------------------
# Merge logic
# -------------------------------


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
            result[k] = v
    return result


# -------------------------------
# Validation
# -------------------------------


def _check_known_keys(data: dict[str, Any]) -> None:
    """Reject sections and keys that DEFAULTS does not define."""
    for section, values in data.items():
        if section not in DEFAULTS:
            raise ConfigError(f"unknown config section: {section!r}")
        if not isinstance(values, dict):
            raise ConfigError(f"config section {section!r} must be a mapping")
        for key in values:
            if key not in DEFAULTS[section]:
                raise ConfigError(f"unknown config key: {section}.{key}")


def _number(
    cfg: dict[str, Any],
    section: str,
    key: str,
    *,
    minimum: float,
    maximum: float | None = None,
) -> float:
    value = cfg[section][key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{section}.{key} must be a number, got {value!r}")
    if value < minimum:
        raise ConfigError(f"{section}.{key} must be >= {minimum}, got {value!r}")
    if maximum is not None and value > maximum:
        raise ConfigError(f"{section}.{key} must be <= {maximum}, got {value!r}")
    return value


def _integer(cfg: dict[str, Any], section: str, key: str, *, minimum: int) -> int:
    value = cfg[section][key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{section}.{key} must be an integer, got {value!r}")
    if value < minimum:
        raise ConfigError(f"{section}.{key} must be >= {minimum}, got {value!r}")
    return value


def _build_config(cfg: dict[str, Any], source: Path | None) -> ProbeConfig:
    base_url = cfg["api"]["base_url"]
    if not isinstance(base_url, str) or not base_url.startswith(("http://", "https://")):
        raise ConfigError(f"api.base_url must be an http(s) URL, got {base_url!r}")

    enabled = cfg["winget"]["enabled"]
    if not isinstance(enabled, bool):
        raise ConfigError(f"winget.enabled must be true or false, got {enabled!r}")

    path = cfg["winget"]["path"]
    if path is not None and not isinstance(path, str):
        raise ConfigError(f"winget.path must be a string or null, got {path!r}")

    return ProbeConfig(
        api_base_url=base_url,
        request_timeout=_number(
            cfg, "api", "timeout", minimum=MIN_TIMEOUT, maximum=MAX_TIMEOUT
        ),
        search_take=_integer(cfg, "api", "take", minimum=1),
        max_attempts=_integer(cfg, "retry", "max_attempts", minimum=1),
        base_delay=_number(cfg, "retry", "base_delay", minimum=0),
        prewarm_delay=_number(cfg, "prewarm", "delay", minimum=0),
        winget_enabled=enabled,
        winget_path=os.path.expandvars(path) if path else None,
        winget_timeout=_number(
            cfg, "winget", "timeout", minimum=MIN_TIMEOUT, maximum=MAX_TIMEOUT
        ),
        source=source,
    )


# -------------------------------
# Public API
# -------------------------------


def load_config(path: Path | None = None) -> ProbeConfig:
    """Load the effective configuration.

    Args:
        path: Config file to load. When None, the PKGPROBE_CONFIG environment
            variable is consulted; when that is unset too, only the built-in
            defaults apply.

    Returns:
        The merged, validated configuration.

    Raises:
        ConfigError: On a missing file, YAML parse errors, unknown keys or
            invalid values.
    """
    logger = get_global_logger()

    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            path = Path(env_path)
            logger.verbose("CONFIG", f"Using {CONFIG_ENV_VAR}={env_path}")

    overlay: dict[str, Any] = {}
    if path is not None:
        path = Path(path).resolve()
        logger.verbose("CONFIG", f"Loading config file: {path}")
        overlay = _load_yaml_file(path)
        _check_known_keys(overlay)

    merged = _deep_merge_dicts(DEFAULTS, overlay)
    config = _build_config(merged, path)
    logger.debug("CONFIG", f"Effective config: {config}")
    return config
