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

"""Response caching for pkgprobe.

This package keeps catalog API responses in memory for the lifetime of a
lookup session. Nothing is written to disk.

Public API:

- ResponseCache: Search-result and manifest stores with hit/miss counters
- CacheStatistics: Immutable snapshot returned by ResponseCache.stats()

Example:
    Basic usage:

        from pkgprobe.cache import ResponseCache

        cache = ResponseCache()
        stats = cache.stats()
        print(f"{stats.hits} hits, {stats.efficiency}% efficiency")

"""

from .store import CacheStatistics, ResponseCache, SearchKey, normalize_key_part

__all__ = ["CacheStatistics", "ResponseCache", "SearchKey", "normalize_key_part"]
