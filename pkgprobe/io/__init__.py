"""Input/Output operations for pkgprobe.

This module provides the resilient API-call layer: JSON fetching with
bounded exponential-backoff retry and typed failures.

Modules:

fetch : module
    HTTP(S) JSON fetch with retries on transient failures.

Public API:

RetryingFetcher : class
    Fetch a JSON document, retrying 429/5xx and connection failures.
make_session : function
    Build the requests.Session used for catalog calls.

Example:
    from pkgprobe.io import RetryingFetcher

    fetcher = RetryingFetcher(max_attempts=3, base_delay=0.5)
    data = fetcher.fetch("https://api.winget.run/v2/packages", timeout=30,
                         params={"query": "7zip"})

"""

from .fetch import RETRY_STATUSES, RetryingFetcher, is_retryable, make_session

__all__ = ["RetryingFetcher", "RETRY_STATUSES", "is_retryable", "make_session"]
