"""
Resilient JSON fetching for pkgprobe.

This module wraps a single outbound catalog API call with bounded retry and
exponential backoff, and classifies failures so callers (the response cache)
can tell transient trouble from a definitive answer.

Key Features:

- **Retry Logic with Exponential Backoff** - Retries on transient HTTP statuses
  (429, 500, 502, 503, 504) and on connection-level failures (connect errors,
  timeouts, truncated bodies). The delay before retry n is
  base_delay * 2^(n-1): 0.5s, 1s, 2s, ... with the defaults.
- **No Trailing Sleep** - The delay is applied before a retry, never after the
  final failed attempt.
- **Typed Failures** - TransportError for connection trouble, UpstreamError
  for bad statuses and malformed JSON. Both carry the HTTP status when known.
- **Injectable Sleep** - Tests pass a recording function instead of time.sleep.

Constants:

- RETRY_STATUSES (frozenset[int]): HTTP statuses that trigger a retry.
- DEFAULT_MAX_ATTEMPTS (int): Total attempts including the first (3).
- DEFAULT_BASE_DELAY (float): Backoff base in seconds (0.5).

Example:
Fetch a search page:

    >>> from pkgprobe.io import RetryingFetcher
    >>> fetcher = RetryingFetcher()
    >>> data = fetcher.fetch(
    ...     "https://api.winget.run/v2/packages",
    ...     timeout=30,
    ...     params={"query": "PuTTY"},
    ... )

Handle a terminal failure:

    >>> from pkgprobe.exceptions import FetchError
    >>> try:
    ...     fetcher.fetch("https://api.winget.run/v2/packages/Nope/Nope")
    ... except FetchError as err:
    ...     print(err.status, err.message)

Design Decisions:
- **Why not urllib3 Retry?** urllib3 skips the delay before the first retry
  and hides the attempt count. The explicit loop keeps the schedule exact and
  observable.
- **Why is DNS failure retried?** requests reports name resolution failures as
  ConnectionError, which is classified as a connect failure.

Notes:
- Timeouts are per attempt, not total call time.
- All errors are chained for better debugging.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
import time
from typing import Any

import requests

from pkgprobe import __version__
from pkgprobe.exceptions import FetchError, TransportError, UpstreamError
from pkgprobe.logging import get_global_logger

RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY = 0.5
DEFAULT_TIMEOUT = 30


def make_session() -> requests.Session:
    """
    Create a requests.Session for catalog API calls.

    - Identifies pkgprobe in the User-Agent to help with debugging/support.
    - Asks for JSON explicitly; the catalog API serves nothing else we use.

    Retries are NOT mounted on the adapter; RetryingFetcher owns the policy.
    """
    s = requests.Session()
    s.headers.update(
        {
            "User-Agent": f"pkgprobe/{__version__}",
            "Accept": "application/json",
        }
    )
    return s


def is_retryable(err: FetchError) -> bool:
    """Return True if a failed attempt should be retried."""
    if isinstance(err, TransportError):
        return True
    return err.status in RETRY_STATUSES


class RetryingFetcher:
    """Fetch JSON documents with bounded exponential-backoff retry.

    Attributes:
        max_attempts: Total attempts including the first one.
        base_delay: Backoff base in seconds.
        session: The requests.Session used for all attempts.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay: float = DEFAULT_BASE_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")
        if base_delay < 0:
            raise ValueError(f"base_delay must be >= 0, got {base_delay}")
        self.session = session if session is not None else make_session()
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._sleep = sleep

    def backoff_delay(self, retry: int) -> float:
        """Delay in seconds before retry number ``retry`` (1-indexed)."""
        return self.base_delay * 2 ** (retry - 1)

    def fetch(
        self,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """GET ``url`` and return the decoded JSON body.

        Args:
            url: Absolute URL to request.
            timeout: Per-attempt timeout in seconds.
            params: Optional query string parameters.

        Returns:
            The decoded JSON document.

        Raises:
            TransportError: Connection-level failure on the last attempt.
            UpstreamError: Non-2xx status or malformed JSON. Non-retryable
                statuses are raised on the first occurrence.
            FetchError: The request could not be sent at all (invalid URL).
        """
        logger = get_global_logger()
        last_error: FetchError | None = None

        for attempt in range(1, self.max_attempts + 1):
            if attempt > 1:
                delay = self.backoff_delay(attempt - 1)
                logger.verbose(
                    "FETCH",
                    f"Retrying in {delay:.2f}s "
                    f"(attempt {attempt}/{self.max_attempts})",
                )
                self._sleep(delay)

            try:
                return self._attempt(url, timeout, params)
            except FetchError as err:
                last_error = err
                if not is_retryable(err):
                    logger.debug("FETCH", f"Not retryable: {err}")
                    raise
                logger.debug("FETCH", f"Attempt {attempt} failed: {err}")

        assert last_error is not None
        raise last_error

    def _attempt(
        self,
        url: str,
        timeout: float,
        params: Mapping[str, Any] | None,
    ) -> Any:
        logger = get_global_logger()
        logger.debug("FETCH", f"GET {url} params={dict(params or {})}")

        try:
            resp = self.session.get(url, params=params, timeout=timeout)
        except (
            requests.ConnectionError,
            requests.Timeout,
            requests.exceptions.ChunkedEncodingError,
        ) as err:
            raise TransportError(f"GET {url} failed: {err}") from err
        except requests.RequestException as err:
            raise FetchError(f"GET {url} could not be sent: {err}") from err

        logger.debug("FETCH", f"Response: {resp.status_code} {resp.reason}")

        if not resp.ok:
            raise UpstreamError(
                f"GET {url} returned {resp.status_code} {resp.reason}",
                status=resp.status_code,
            )

        try:
            return resp.json()
        except ValueError as err:
            raise UpstreamError(
                f"GET {url} returned malformed JSON: {err}",
                status=resp.status_code,
            ) from err
