"""Local winget client integration for pkgprobe.

This package is an optional, soft dependency: when winget is unavailable
every operation returns a negative answer.

Modules:

runner : module
    Locate winget once per process and run it with a hard timeout.
output : module
    Best-effort parsers for winget's console output.
probe : module
    WingetProbe, the interface used by lookups.

Example:
    from pkgprobe.winget import WingetProbe

    probe = WingetProbe()
    probe.has_64bit_installer("7zip.7zip", timeout=30)

"""

from .output import PackageRef, ShowEvidence, parse_search_output, parse_show_output
from .probe import WingetProbe, normalize_product_code
from .runner import ToolOutput, locate_winget, run_winget

__all__ = [
    "PackageRef",
    "ShowEvidence",
    "ToolOutput",
    "WingetProbe",
    "locate_winget",
    "normalize_product_code",
    "parse_search_output",
    "parse_show_output",
    "run_winget",
]
