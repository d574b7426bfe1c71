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

"""Core version comparison utilities for pkgprobe.

This module is format-agnostic: it does NOT download or read files.
It only compares version strings the way the WinGet catalog orders them,
segment by segment, so "latest" agrees with what the package manager shows.
"""

from __future__ import annotations

from collections.abc import Iterable
from functools import cmp_to_key
import re

# Signed ASCII integer with optional surrounding whitespace.
_INT_SEGMENT = re.compile(r"\s*[+-]?[0-9]+\s*")


def _strip_prefix(version: str) -> str:
    """Drop a single leading "v"/"V" (e.g., "v1.2.3" -> "1.2.3")."""
    if version[:1] in ("v", "V"):
        return version[1:]
    return version


def _as_int(segment: str) -> int | None:
    if _INT_SEGMENT.fullmatch(segment):
        return int(segment)
    return None


def _compare_segment(a: str, b: str) -> int:
    """Compare one segment pair.

    Numeric comparison applies only when BOTH sides parse as integers.
    Otherwise the raw strings are compared ordinally, ignoring case.
    """
    ai, bi = _as_int(a), _as_int(b)
    if ai is not None and bi is not None:
        return (ai > bi) - (ai < bi)
    au, bu = a.upper(), b.upper()
    return (au > bu) - (au < bu)


def compare_versions(v1: str, v2: str) -> int:
    """Compare two dotted version strings.

    Returns -1 if v1 < v2, 0 if equal, 1 if v1 > v2. The shorter version is
    padded with "0" segments, so "1.0" == "1.0.0".

    Example:
        ```python
        compare_versions("24.09", "24.10")   # -1
        compare_versions("v1.2.3", "1.2.3")  # 0
        compare_versions("1.0-beta", "1.0.1")  # string compare on "0-beta" vs "0"
        ```
    """
    left = _strip_prefix(v1).split(".")
    right = _strip_prefix(v2).split(".")
    width = max(len(left), len(right))
    left += ["0"] * (width - len(left))
    right += ["0"] * (width - len(right))

    for a, b in zip(left, right):
        result = _compare_segment(a, b)
        if result:
            return result
    return 0


def latest_version(versions: Iterable[str]) -> str | None:
    """Return the highest version under compare_versions, or None if empty.

    Among versions that compare equal (e.g., "1.0" and "1.0.0") the first
    one seen is returned.
    """
    items = list(versions)
    if not items:
        return None
    return max(items, key=cmp_to_key(compare_versions))


def sort_versions(versions: Iterable[str], *, descending: bool = True) -> list[str]:
    """Sort versions with compare_versions (newest first by default)."""
    return sorted(versions, key=cmp_to_key(compare_versions), reverse=descending)
