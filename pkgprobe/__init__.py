"""
pkgprobe - WinGet package metadata probe

A Python library and CLI that answers three questions about a Windows
application name: does a matching package exist in the WinGet catalog, what
is its metadata, and does it ship a 64-bit installer.

pkgprobe provides:
  - Deterministic best-match selection for free-text application names
  - Installer metadata extraction (architecture, installer type, scope)
  - Session-scoped response caching with hit/miss statistics
  - Retry with exponential backoff for transient API failures
  - Optional confirmation through the local winget client
  - MSI product code resolution through winget (best effort)

Quick Start
-----------
Check whether a package exists:

    $ pkgprobe exists "PuTTY"

Show full metadata, requiring a 64-bit installer:

    $ pkgprobe info "7-Zip" --require-64bit

For full CLI documentation:

    $ pkgprobe --help

Package Structure
-----------------
cli : module
    Command-line interface with argparse.
core : module
    PackageLookup, the high-level lookup session.
catalog : package
    Catalog entities, API client, match resolution, installer extraction.
cache : package
    In-memory response cache with statistics.
io : package
    Retrying JSON fetcher.
versioning : package
    WinGet-style version comparison.
winget : package
    Local winget client integration.
config : package
    YAML configuration loading and merging.

Public API
----------
    from pkgprobe.core import LookupRequest, PackageLookup
    from pkgprobe.config import load_config
    from pkgprobe.versioning import compare_versions, latest_version

Project Information
-------------------
License: Apache-2.0
"""

__version__ = "0.1.0"
__license__ = "Apache-2.0"
__description__ = "WinGet package metadata probe with match resolution"

# Re-export commonly used names for convenience
from pkgprobe.config import load_config
from pkgprobe.core import LookupRequest, PackageLookup
from pkgprobe.exceptions import (
    ConfigError,
    InputError,
    NetworkError,
    PkgProbeError,
)
from pkgprobe.results import PackageDetails, PrewarmResult
from pkgprobe.versioning import compare_versions, latest_version

__all__ = [
    "__version__",
    "__license__",
    "__description__",
    "ConfigError",
    "InputError",
    "LookupRequest",
    "NetworkError",
    "PackageDetails",
    "PackageLookup",
    "PkgProbeError",
    "PrewarmResult",
    "compare_versions",
    "latest_version",
    "load_config",
]
