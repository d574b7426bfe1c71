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

"""Authoritative checks through the local winget client.

The catalog API does not always say which architectures a package ships.
When that matters, the local winget client is the only other source of
truth: ``winget show --architecture x64`` either prints an installer or
says none applies.

winget is a soft dependency. When it is missing, disabled, slow or prints
something unexpected, every operation returns a negative answer instead of
raising.

Example:
    ```python
    from pkgprobe.winget import WingetProbe

    probe = WingetProbe()
    if probe.available:
        print(probe.has_64bit_installer("PuTTY.PuTTY"))
        print(probe.find_by_product_code("45B3032F-22CC-40CD-9E97-4DA7095FA5A2"))
    ```
"""

from __future__ import annotations

from pkgprobe.logging import get_global_logger

from .output import PackageRef, parse_search_output, parse_show_output
from .runner import (
    DEFAULT_TIMEOUT,
    NON_INTERACTIVE_ARGS,
    locate_winget,
    run_winget,
)


def normalize_product_code(product_code: str) -> str:
    """Wrap an MSI product code in braces: "ABC-..." -> "{ABC-...}"."""
    code = product_code.strip().strip("{}").strip()
    return f"{{{code}}}"


class WingetProbe:
    """Query the local winget client.

    Attributes:
        executable: Path to winget, or None when it is not installed.
        enabled: False to never invoke winget (e.g., from configuration).
    """

    def __init__(self, executable: str | None = None, *, enabled: bool = True):
        """Initialize the probe.

        Args:
            executable: Path to winget. When None, the process-wide result
                of locate_winget() is used.
            enabled: If False, the probe never runs winget.
        """
        self.executable = executable or locate_winget()
        self.enabled = enabled
        self._warned = False

    @property
    def available(self) -> bool:
        return self.enabled and bool(self.executable)

    def _unavailable(self) -> None:
        """Warn once per probe that winget checks are skipped."""
        if self._warned:
            return
        self._warned = True
        reason = "disabled by configuration" if not self.enabled else "not found"
        get_global_logger().warning(
            "WINGET", f"winget is {reason}; local installer checks are skipped"
        )

    def has_64bit_installer(
        self, package_id: str, timeout: float = DEFAULT_TIMEOUT
    ) -> bool:
        """Return True if winget shows an x64 installer for ``package_id``.

        Requires the package to be found, installer details to be printed,
        and no "No applicable installer found" message. Anything else,
        including a timeout, is a negative answer.
        """
        if not self.available:
            self._unavailable()
            return False

        output = run_winget(
            str(self.executable),
            [
                "show",
                "--id",
                package_id,
                "--exact",
                "--architecture",
                "x64",
                *NON_INTERACTIVE_ARGS,
            ],
            timeout=timeout,
        )
        if output is None:
            return False

        evidence = parse_show_output(output.stdout)
        get_global_logger().debug(
            "WINGET",
            f"show {package_id}: found={evidence.found} "
            f"details={evidence.installer_details} "
            f"no_applicable={evidence.no_applicable_installer}",
        )
        return evidence.positive

    def find_by_product_code(
        self, product_code: str, timeout: float = DEFAULT_TIMEOUT
    ) -> PackageRef | None:
        """Resolve an MSI product code to a catalog package (best effort).

        Returns:
            The first result row, or None when winget is unavailable, times
            out, or prints no usable row.
        """
        if not self.available:
            self._unavailable()
            return None

        code = normalize_product_code(product_code)
        output = run_winget(
            str(self.executable),
            ["search", "--query", code, *NON_INTERACTIVE_ARGS],
            timeout=timeout,
        )
        if output is None:
            return None

        ref = parse_search_output(output.stdout)
        logger = get_global_logger()
        if ref is None:
            logger.verbose("WINGET", f"No package found for product code {code}")
        else:
            logger.verbose("WINGET", f"Product code {code} -> {ref.id} {ref.version}")
        return ref
