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

"""Exception hierarchy for pkgprobe.

This module defines a custom exception hierarchy that allows library users
to distinguish between different types of errors:

- ConfigError: Configuration file errors (missing file, YAML parse, bad values)
- InputError: Invalid arguments at a public entry point (empty name, bad timeout)
- NetworkError: Catalog API failures, split into FetchError subclasses:
    - TransportError: Connection-level failures (timeouts, refused connections)
    - UpstreamError: Non-2xx responses and malformed JSON bodies

All exceptions inherit from PkgProbeError, allowing users to catch all
pkgprobe errors with a single except clause if needed.

Note:
    "Package not found" is never an exception. Lookups return a
    default-valued result instead, so batch callers can iterate large lists
    without per-item exception handling. Network failures are absorbed by
    the response cache and surface as empty results as well.

Example:
    Catching specific error types:
        ```python
        from pkgprobe.core import LookupRequest
        from pkgprobe.exceptions import ConfigError, InputError

        try:
            request = LookupRequest(display_name="", timeout=30)
        except InputError as e:
            print(f"Invalid request: {e}")
        ```
"""

from __future__ import annotations

__all__ = [
    "PkgProbeError",
    "ConfigError",
    "InputError",
    "NetworkError",
    "FetchError",
    "TransportError",
    "UpstreamError",
]


class PkgProbeError(Exception):
    """Base exception for all pkgprobe errors.

    All pkgprobe-specific exceptions inherit from this class, allowing users
    to catch all pkgprobe errors with a single except clause if needed.
    """

    pass


class ConfigError(PkgProbeError):
    """Raised for configuration-related errors.

    This exception is raised when there are problems with:

    - A configuration file that does not exist
    - YAML parsing (syntax errors, non-mapping documents)
    - Unknown sections or wrongly typed values
    """

    pass


class InputError(PkgProbeError):
    """Raised when a public operation receives invalid input.

    Only raised at the boundary (request construction, public entry points),
    never from inside scoring or extraction logic.
    """

    pass


class NetworkError(PkgProbeError):
    """Raised for catalog API related errors."""

    pass


class FetchError(NetworkError):
    """A single outbound API call failed terminally.

    Attributes:
        status: HTTP status code when the server answered, else None.
        message: Human readable description of the failure.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class TransportError(FetchError):
    """Connection-level failure (connect error, timeout, receive failure)."""

    pass


class UpstreamError(FetchError):
    """The API answered, but with a non-2xx status or an unusable body."""

    pass
