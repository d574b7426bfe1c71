"""
Version comparison utilities for pkgprobe.

Catalog entries list their versions in whatever format the publisher chose
("24.09", "v1.2.3", "1.0-beta", "2023.12.01"). This package orders them the
way the WinGet client does, so the "latest version" reported by a lookup
matches what the package manager would install.

Modules
-------
keys : module
    Segment-wise version comparison with a numeric/lexicographic policy.

Public API
----------
compare_versions : function
    Compare two version strings, returning -1, 0, or 1.
latest_version : function
    Pick the highest version from a sequence, or None when empty.
sort_versions : function
    Sort versions, newest first by default.

Comparison Rules
----------------
1. A single leading "v"/"V" is ignored.
2. Versions are split on "." and the shorter one is padded with "0".
3. A segment pair is compared numerically only when BOTH sides are integers.
4. Otherwise the two segments are compared as strings, ordinal and
   case-insensitive.

Examples
--------
    >>> from pkgprobe.versioning import compare_versions, latest_version
    >>> compare_versions("2.0", "1.9.9")
    1
    >>> latest_version(["1.0", "2.0", "1.5"])
    '2.0'
"""

from .keys import compare_versions, latest_version, sort_versions

__all__ = ["compare_versions", "latest_version", "sort_versions"]
