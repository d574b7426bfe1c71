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

"""Core orchestration for pkgprobe.

This module provides the high-level lookup operations that coordinate the
catalog client, the match resolver, installer extraction and the optional
winget probe.

Lookup Flow:

1. **Search** - The catalog is searched through the response cache; a
   repeated query within the session never reaches the API again.
2. **Match** - resolve_match picks one candidate (or none).
3. **Extract** - Installer facts come from the search entry. When the entry
   carries no installer list, the full manifest is fetched through the same
   cache/retry path.
4. **Confirm** - Only when the manifest is silent on architecture AND the
   request requires 64-bit proof, the local winget client is asked.

Design Principles:

- Not found is a value, never an exception: lookups return a default-valued
  PackageDetails, so batch callers need no per-item exception handling
- Invalid input is rejected at the boundary (LookupRequest construction)
- One PackageLookup owns one cache; build a new one (or call clear_cache)
  to start a fresh session

Example:
    Programmatic usage:
        ```python
        from pkgprobe.core import LookupRequest, PackageLookup

        lookup = PackageLookup()
        request = LookupRequest(display_name="PuTTY", require_64bit=True)

        if lookup.exists(request):
            details = lookup.get_details(request)  # served from the cache
            print(details.id, details.latest_version, details.architectures)

        print(lookup.cache_stats().efficiency)
        ```

"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
import time

from pkgprobe.cache import CacheStatistics, ResponseCache
from pkgprobe.catalog import (
    CatalogClient,
    InstallerFacts,
    PackageCandidate,
    extract_installer_facts,
    resolve_match,
)
from pkgprobe.config import MAX_TIMEOUT, MIN_TIMEOUT, ProbeConfig
from pkgprobe.exceptions import InputError
from pkgprobe.io import RetryingFetcher
from pkgprobe.logging import get_global_logger
from pkgprobe.results import PackageDetails, PrewarmResult
from pkgprobe.versioning import latest_version
from pkgprobe.winget import PackageRef, WingetProbe

DEFAULT_TIMEOUT = 30


def _check_timeout(timeout: object) -> None:
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        raise InputError(f"timeout must be a number of seconds, got {timeout!r}")
    if not MIN_TIMEOUT <= timeout <= MAX_TIMEOUT:
        raise InputError(
            f"timeout must be between {MIN_TIMEOUT} and {MAX_TIMEOUT} seconds, "
            f"got {timeout!r}"
        )


@dataclass(frozen=True)
class LookupRequest:
    """One lookup, validated on construction.

    Attributes:
        display_name: Free-text application name (required, non-blank).
        publisher: Optional publisher filter (equality or substring).
        package_id: Optional exact package id; disables fuzzy matching.
        require_64bit: Gate existence on a known x64 installer and allow the
            winget fallback when the catalog is silent on architecture.
        timeout: Seconds allowed per API attempt and per winget call (5-300).

    Raises:
        InputError: On a blank display name or an out-of-range timeout.
    """

    display_name: str
    publisher: str | None = None
    package_id: str | None = None
    require_64bit: bool = False
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not isinstance(self.display_name, str) or not self.display_name.strip():
            raise InputError("display_name must be a non-empty string")
        _check_timeout(self.timeout)
        # Blank hints mean "no hint".
        for name in ("publisher", "package_id"):
            value = getattr(self, name)
            if value is not None and not str(value).strip():
                object.__setattr__(self, name, None)


def _build_details(
    query: str,
    candidate: PackageCandidate,
    manifest: PackageCandidate | None,
    facts: InstallerFacts,
    *,
    has_64bit: bool,
    architecture_source: str,
    score: int,
) -> PackageDetails:
    """Combine the search entry with its manifest (search entry wins)."""
    fallback = manifest or candidate

    def pick(field: str):
        return getattr(candidate, field) or getattr(fallback, field)

    versions = candidate.versions or fallback.versions
    tags = candidate.tags or fallback.tags

    return PackageDetails(
        found=True,
        query=query,
        id=candidate.id,
        name=pick("display_name"),
        publisher=pick("publisher"),
        description=pick("description"),
        homepage=pick("homepage"),
        license=pick("license"),
        tags=", ".join(tags),
        versions=versions,
        latest_version=latest_version(versions),
        architectures=tuple(sorted(facts.architectures)),
        installer_types=tuple(sorted(facts.installer_types)),
        scopes=tuple(sorted(facts.scopes)),
        has_64bit=has_64bit,
        has_arm64=facts.has_arm64,
        architecture_source=architecture_source,
        match_score=score,
    )


class PackageLookup:
    """Lookup session: one cache, one catalog client, one winget probe.

    Attributes:
        config: Effective configuration.
        cache: Response cache owned by this session.
        client: Catalog client bound to the cache.
        probe: winget probe used as the last-resort 64-bit check.
    """

    def __init__(
        self,
        config: ProbeConfig | None = None,
        *,
        cache: ResponseCache | None = None,
        fetcher: RetryingFetcher | None = None,
        probe: WingetProbe | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config if config is not None else ProbeConfig()
        self.cache = cache if cache is not None else ResponseCache()
        if fetcher is None:
            fetcher = RetryingFetcher(
                max_attempts=self.config.max_attempts,
                base_delay=self.config.base_delay,
            )
        self.client = CatalogClient(
            fetcher,
            self.cache,
            base_url=self.config.api_base_url,
            take=self.config.search_take,
        )
        if probe is None:
            probe = WingetProbe(
                self.config.winget_path, enabled=self.config.winget_enabled
            )
        self.probe = probe
        self._sleep = sleep

    def get_details(self, request: LookupRequest) -> PackageDetails:
        """Look up a package and return its full metadata record.

        Never raises for "not found" or API failures; those yield a record
        with ``found=False``.
        """
        logger = get_global_logger()
        query = request.display_name
        logger.verbose("LOOKUP", f"Looking up {query!r}")

        candidates = self.client.search(
            query, request.publisher, request.package_id, timeout=request.timeout
        )
        match = resolve_match(
            candidates, query, request.publisher, request.package_id
        )
        if not match.found:
            if match.candidate_count == 0:
                logger.verbose("LOOKUP", "Catalog returned no candidates")
            else:
                logger.verbose(
                    "LOOKUP",
                    f"None of {match.candidate_count} candidate(s) matched {query!r}",
                )
            return PackageDetails.not_found(query)

        candidate = match.candidate
        assert candidate is not None

        manifest: PackageCandidate | None = None
        facts = extract_installer_facts(candidate)
        if not candidate.has_installer_detail:
            logger.verbose("LOOKUP", f"No installer detail for {candidate.id}, fetching manifest")
            manifest = self.client.get_manifest(candidate.id, timeout=request.timeout)
            if manifest is not None:
                facts = extract_installer_facts(manifest)

        has_64bit = facts.has_64bit
        architecture_source = "manifest" if facts.declares_architecture else "none"

        if request.require_64bit and not facts.declares_architecture:
            logger.verbose("LOOKUP", "Manifest silent on architecture, asking winget")
            has_64bit = self.probe.has_64bit_installer(
                candidate.id, timeout=request.timeout
            )
            if self.probe.available:
                architecture_source = "winget"

        details = _build_details(
            query,
            candidate,
            manifest,
            facts,
            has_64bit=has_64bit,
            architecture_source=architecture_source,
            score=match.score,
        )
        logger.verbose(
            "LOOKUP",
            f"Found {details.id} (latest {details.latest_version}, "
            f"64-bit: {details.has_64bit} via {details.architecture_source})",
        )
        return details

    def exists(self, request: LookupRequest) -> bool:
        """Return True if the package exists (and has x64 when required)."""
        details = self.get_details(request)
        if not details.found:
            return False
        if request.require_64bit and not details.has_64bit:
            get_global_logger().verbose(
                "LOOKUP", f"{details.id} has no known 64-bit installer"
            )
            return False
        return True

    def find_by_product_code(
        self, product_code: str, timeout: float | None = None
    ) -> PackageRef | None:
        """Resolve an MSI product code through winget (best effort).

        ``timeout`` defaults to the configured winget timeout.

        Raises:
            InputError: On a blank product code or an out-of-range timeout.
        """
        if not isinstance(product_code, str) or not product_code.strip("{} \t"):
            raise InputError("product_code must be a non-empty string")
        if timeout is None:
            timeout = self.config.winget_timeout
        _check_timeout(timeout)
        return self.probe.find_by_product_code(product_code, timeout=timeout)

    def prewarm(
        self,
        terms: Iterable[str],
        publisher: str | None = None,
        delay: float | None = None,
    ) -> PrewarmResult:
        """Fill the search cache for many terms, one call at a time.

        Terms are deduplicated case-insensitively (first spelling kept);
        blank and already-cached terms are skipped. ``delay`` seconds pass
        between consecutive fetches, never before the first.
        """
        logger = get_global_logger()
        if delay is None:
            delay = self.config.prewarm_delay

        unique: list[str] = []
        seen: set[str] = set()
        for term in terms:
            cleaned = term.strip()
            if not cleaned or cleaned.lower() in seen:
                continue
            seen.add(cleaned.lower())
            unique.append(cleaned)

        pending = [t for t in unique if not self.client.is_cached(t, publisher)]
        skipped = len(unique) - len(pending)
        if skipped:
            logger.verbose("PREWARM", f"Skipping {skipped} cached term(s)")

        for index, term in enumerate(pending, start=1):
            if index > 1 and delay > 0:
                self._sleep(delay)
            logger.step(index, len(pending), f"Caching {term!r}")
            self.client.search(term, publisher, timeout=self.config.request_timeout)

        return PrewarmResult(
            requested=len(unique),
            skipped=skipped,
            fetched=len(pending),
            stats=self.cache.stats(),
        )

    def clear_cache(self) -> None:
        """Reset both caches and both counters."""
        self.cache.clear()

    def cache_stats(self) -> CacheStatistics:
        """Snapshot of the cache counters."""
        return self.cache.stats()
