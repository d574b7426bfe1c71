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

"""Catalog API client for pkgprobe.

Talks to a winget.run style v2 REST API through the response cache and the
retrying fetcher. Every call goes cache first; misses are fetched with retry
and whatever comes back (including nothing) is cached for the session.

Endpoints:

- Search: ``GET {base_url}/packages?query=<term>&take=<n>&partialMatch=true
  &ensureContains=true[&publisher=<publisher>]`` returning
  ``{"Packages": [...], "Total": n}``
- Manifest: ``GET {base_url}/packages/{Publisher}/{Name}`` returning
  ``{"Package": {...}}``, where "Publisher.Name" is the package id split
  at its first dot.

Example:
    ```python
    from pkgprobe.cache import ResponseCache
    from pkgprobe.catalog import CatalogClient
    from pkgprobe.io import RetryingFetcher

    client = CatalogClient(RetryingFetcher(), ResponseCache())
    candidates = client.search("PuTTY")
    manifest = client.get_manifest("PuTTY.PuTTY")
    ```
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from pkgprobe.cache import ResponseCache, SearchKey
from pkgprobe.exceptions import UpstreamError
from pkgprobe.io import RetryingFetcher
from pkgprobe.logging import get_global_logger

from .models import PackageCandidate

DEFAULT_BASE_URL = "https://api.winget.run/v2"
DEFAULT_TAKE = 12


def manifest_path(package_id: str) -> str | None:
    """Return the "Publisher/Name" path for a package id, or None.

    Example:
        ```python
        manifest_path("Microsoft.VisualStudioCode.Insiders")
        # "Microsoft/VisualStudioCode.Insiders"
        ```
    """
    publisher, sep, name = package_id.strip().partition(".")
    if not sep or not publisher or not name:
        return None
    return f"{quote(publisher, safe='')}/{quote(name, safe='')}"


def parse_search_page(data: Any) -> list[PackageCandidate]:
    """Parse a search response into candidates, keeping API order.

    Entries without an id are skipped.

    Raises:
        UpstreamError: If the body is not a search page.
    """
    if isinstance(data, dict):
        entries = data.get("Packages", [])
    elif isinstance(data, list):
        entries = data
    else:
        raise UpstreamError(f"unexpected search response type: {type(data).__name__}")

    if not isinstance(entries, list):
        raise UpstreamError("search response 'Packages' is not a list")

    candidates: list[PackageCandidate] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        try:
            candidates.append(PackageCandidate.from_api(entry))
        except ValueError:
            continue
    return candidates


def parse_manifest(data: Any) -> PackageCandidate | None:
    """Parse a manifest response. Returns None when it holds no package.

    Raises:
        UpstreamError: If the body is not a JSON object.
    """
    if not isinstance(data, dict):
        raise UpstreamError(
            f"unexpected manifest response type: {type(data).__name__}"
        )
    package = data.get("Package", data)
    if not isinstance(package, dict):
        return None
    try:
        return PackageCandidate.from_api(package)
    except ValueError:
        return None


class CatalogClient:
    """Cached, retrying access to the catalog API.

    Attributes:
        fetcher: RetryingFetcher used for cache misses.
        cache: ResponseCache shared by every call on this client.
        base_url: API root without a trailing slash.
        take: Maximum number of search results requested.
    """

    def __init__(
        self,
        fetcher: RetryingFetcher,
        cache: ResponseCache,
        *,
        base_url: str = DEFAULT_BASE_URL,
        take: int = DEFAULT_TAKE,
    ) -> None:
        self.fetcher = fetcher
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.take = take

    def search_key(
        self,
        term: str,
        publisher: str | None = None,
        package_id: str | None = None,
    ) -> SearchKey:
        return ResponseCache.search_key(term, publisher, package_id)

    def is_cached(
        self,
        term: str,
        publisher: str | None = None,
        package_id: str | None = None,
    ) -> bool:
        """Return True if this exact query is already cached."""
        return self.cache.has_search(self.search_key(term, publisher, package_id))

    def search(
        self,
        term: str,
        publisher: str | None = None,
        package_id: str | None = None,
        *,
        timeout: float = 30,
    ) -> list[PackageCandidate]:
        """Search the catalog, cache first.

        With a package id filter the API is queried by that id, which keeps
        the exact package inside the ``take`` window.

        Returns:
            Candidates in API order; empty on no results or API failure.
        """
        logger = get_global_logger()
        key = self.search_key(term, publisher, package_id)

        def fetch() -> list[PackageCandidate]:
            params: dict[str, Any] = {
                "query": (package_id or term).strip(),
                "take": self.take,
                "partialMatch": "true",
                "ensureContains": "true",
            }
            if publisher:
                params["publisher"] = publisher.strip()
            logger.verbose("SEARCH", f"Querying catalog for {params['query']!r}")
            data = self.fetcher.fetch(
                f"{self.base_url}/packages", timeout=timeout, params=params
            )
            candidates = parse_search_page(data)
            logger.verbose("SEARCH", f"Catalog returned {len(candidates)} candidate(s)")
            return candidates

        return self.cache.get_or_fetch_search(key, fetch)

    def get_manifest(
        self, package_id: str, *, timeout: float = 30
    ) -> PackageCandidate | None:
        """Fetch the full manifest for a package id, cache first.

        Returns:
            The manifest as a candidate, or None if it could not be found.
        """
        logger = get_global_logger()

        def fetch() -> PackageCandidate | None:
            path = manifest_path(package_id)
            if path is None:
                logger.verbose("MANIFEST", f"Cannot derive manifest path for {package_id!r}")
                return None
            logger.verbose("MANIFEST", f"Fetching manifest for {package_id}")
            data = self.fetcher.fetch(
                f"{self.base_url}/packages/{path}", timeout=timeout
            )
            return parse_manifest(data)

        return self.cache.get_or_fetch_manifest(package_id, fetch)
