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

"""Public API return types for pkgprobe.

This module defines dataclasses for return values from public API functions.
All dataclasses are frozen (immutable) to prevent accidental mutation of
return values.

Example:
    Using result types:
        ```python
        from pkgprobe.core import LookupRequest, PackageLookup
        from pkgprobe.results import PackageDetails

        details: PackageDetails = PackageLookup().get_details(
            LookupRequest(display_name="PuTTY")
        )
        print(details.latest_version)  # Attribute access, not dict access
        ```

Note:
    Only public API return types belong in this module. Domain types
    (like PackageCandidate or MatchResult) remain co-located with their
    related logic.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from pkgprobe.cache import CacheStatistics


@dataclass(frozen=True)
class PackageDetails:
    """Full metadata record for one lookup.

    Attributes:
        found: True if a package matched the query.
        query: The display name that was looked up.
        id: Package identifier (e.g., "PuTTY.PuTTY").
        name: Display name.
        publisher: Publisher name.
        description: Short description.
        homepage: Project homepage URL.
        license: License name.
        tags: Tags joined for display (", " separated).
        versions: Versions as listed by the catalog.
        latest_version: Highest version under the WinGet ordering.
        architectures: Installer architectures (sorted).
        installer_types: Installer types (sorted).
        scopes: Installation scopes (sorted).
        has_64bit: True if an x64 installer is known to exist.
        has_arm64: True if an arm64 installer is known to exist.
        architecture_source: Where has_64bit came from: "manifest",
            "winget", or "none".
        match_score: Score of the chosen candidate (0 for exact id matches).
    """

    found: bool
    query: str
    id: str | None = None
    name: str | None = None
    publisher: str | None = None
    description: str | None = None
    homepage: str | None = None
    license: str | None = None
    tags: str = ""
    versions: tuple[str, ...] = ()
    latest_version: str | None = None
    architectures: tuple[str, ...] = ()
    installer_types: tuple[str, ...] = ()
    scopes: tuple[str, ...] = ()
    has_64bit: bool = False
    has_arm64: bool = False
    architecture_source: str = "none"
    match_score: int = 0

    @classmethod
    def not_found(cls, query: str) -> PackageDetails:
        """Default-valued record for a query that matched nothing."""
        return cls(found=False, query=query)

    def to_dict(self) -> dict[str, Any]:
        """JSON-serializable mapping (tuples become lists)."""
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, tuple):
                data[key] = list(value)
        return data


@dataclass(frozen=True)
class PrewarmResult:
    """Result from pre-warming the search cache.

    Attributes:
        requested: Unique search terms after case-insensitive deduplication.
        skipped: Terms that were already cached.
        fetched: Terms that were fetched (successfully or not; failures are
            cached as empty results).
        stats: Cache statistics after the run.
    """

    requested: int
    skipped: int
    fetched: int
    stats: CacheStatistics
