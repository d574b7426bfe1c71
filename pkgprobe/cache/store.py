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

"""In-memory response cache for pkgprobe.

This module keeps catalog responses for the lifetime of one ResponseCache
object (normally one process), so repeated lookups of the same application
do not hit the API again.

Key Features:

- Two independent stores: search results and full manifests
- Case- and whitespace-insensitive keys
- Negative caching: failed or empty fetches are cached too, so a package
  that is missing (or an API that is down) costs one call per session
- Shared hit/miss counters with a derived efficiency percentage
- Lock-protected, safe to share between threads

Example:
    Basic usage:
        ```python
        from pkgprobe.cache import ResponseCache

        cache = ResponseCache()
        key = ResponseCache.search_key("PuTTY", publisher="Simon Tatham")
        candidates = cache.get_or_fetch_search(key, lambda: client_fetch())
        print(cache.stats().efficiency)
        ```

Note:
    Entries never expire. Call clear() to start over.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
from dataclasses import dataclass
import threading
from typing import TYPE_CHECKING, Any, TypeVar

from pkgprobe.exceptions import NetworkError
from pkgprobe.logging import get_global_logger

if TYPE_CHECKING:
    from pkgprobe.catalog.models import PackageCandidate

SearchKey = tuple[str, str, str]

_T = TypeVar("_T")


def normalize_key_part(value: str | None) -> str:
    """Normalize one key component: trimmed, lowercased, None -> ""."""
    return (value or "").strip().lower()


@dataclass(frozen=True)
class CacheStatistics:
    """Snapshot of cache counters.

    Attributes:
        hits: Lookups answered from the cache.
        misses: Lookups that required a fetch.
        search_entries: Number of cached search results.
        manifest_entries: Number of cached manifests (including not-found).
    """

    hits: int = 0
    misses: int = 0
    search_entries: int = 0
    manifest_entries: int = 0

    @property
    def total_requests(self) -> int:
        return self.hits + self.misses

    @property
    def efficiency(self) -> float:
        """Hit percentage rounded to 2 decimals, 0.0 before any request."""
        if not self.total_requests:
            return 0.0
        return round(self.hits / self.total_requests * 100, 2)


class ResponseCache:
    """Session-scoped cache for catalog search results and manifests.

    The fetch callable runs outside the lock. Two threads racing on the same
    key may both fetch; the later write wins.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._search: dict[SearchKey, list[PackageCandidate]] = {}
        self._manifests: dict[str, PackageCandidate | None] = {}
        self._hits = 0
        self._misses = 0

    @staticmethod
    def search_key(
        term: str,
        publisher: str | None = None,
        package_id: str | None = None,
    ) -> SearchKey:
        """Build the composite search key for a query."""
        return (
            normalize_key_part(term),
            normalize_key_part(publisher),
            normalize_key_part(package_id),
        )

    def has_search(self, key: SearchKey) -> bool:
        """Return True if a search result is cached (does not count as a hit)."""
        with self._lock:
            return key in self._search

    def get_or_fetch_search(
        self,
        key: SearchKey,
        fetch: Callable[[], list[PackageCandidate]],
    ) -> list[PackageCandidate]:
        """Return cached candidates for ``key``, fetching on a miss.

        A NetworkError from ``fetch`` is logged and cached as an empty list.
        Each call returns a fresh list so callers cannot alter the cached entry.
        """
        candidates = self._get_or_fetch(
            self._search, key, fetch, empty=list, label="search"
        )
        return list(candidates)

    def get_or_fetch_manifest(
        self,
        package_id: str,
        fetch: Callable[[], PackageCandidate | None],
    ) -> PackageCandidate | None:
        """Return the cached manifest for ``package_id``, fetching on a miss.

        None is the cached "not found" sentinel. A NetworkError from ``fetch``
        is logged and cached as None.
        """
        key = normalize_key_part(package_id)
        return self._get_or_fetch(
            self._manifests, key, fetch, empty=lambda: None, label="manifest"
        )

    def _get_or_fetch(
        self,
        store: dict[Any, _T],
        key: Hashable,
        fetch: Callable[[], _T],
        *,
        empty: Callable[[], _T],
        label: str,
    ) -> _T:
        logger = get_global_logger()

        with self._lock:
            if key in store:
                self._hits += 1
                logger.debug("CACHE", f"Hit ({label}): {key}")
                return store[key]
            self._misses += 1

        logger.debug("CACHE", f"Miss ({label}): {key}")
        try:
            value = fetch()
        except NetworkError as err:
            logger.verbose("CACHE", f"Fetch failed for {key}, caching empty: {err}")
            value = empty()

        with self._lock:
            store[key] = value
        return value

    def clear(self) -> None:
        """Drop all entries and reset both counters."""
        with self._lock:
            self._search.clear()
            self._manifests.clear()
            self._hits = 0
            self._misses = 0
        get_global_logger().verbose("CACHE", "Cache cleared")

    def stats(self) -> CacheStatistics:
        """Return a consistent snapshot of the counters."""
        with self._lock:
            return CacheStatistics(
                hits=self._hits,
                misses=self._misses,
                search_entries=len(self._search),
                manifest_entries=len(self._manifests),
            )
