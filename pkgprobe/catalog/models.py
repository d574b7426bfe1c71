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

"""Catalog entities for pkgprobe.

The catalog API returns the same package in two shapes: a lightweight search
entry (usually without installers) and a full manifest (with installers).
Both are parsed into PackageCandidate here, with every optional field modeled
explicitly so the matching and extraction code never probes raw JSON.

API shape (winget.run v2 style):
    ```json
    {
      "Id": "PuTTY.PuTTY",
      "Versions": ["0.81.0.0", "0.80.0.0"],
      "SearchScore": 31.5,
      "Latest": {
        "Name": "PuTTY",
        "Publisher": "Simon Tatham",
        "Tags": ["ssh", "telnet"],
        "Description": "...",
        "Homepage": "https://www.chiark.greenend.org.uk/~sgtatham/putty/",
        "License": "MIT"
      },
      "InstallerType": "msi",
      "Installers": [
        {"Architecture": "x64", "InstallerType": "wix", "Scope": "machine"}
      ]
    }
    ```

Descriptive fields are read from "Latest" first, then from the top level.
Installers are read from the top level first, then from "Latest". Root-level
"InstallerType" and "Scope" act as defaults for installers that omit them.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any

KNOWN_ARCHITECTURES = frozenset({"x86", "x64", "arm", "arm64", "neutral"})
KNOWN_INSTALLER_TYPES = frozenset(
    {
        "msix",
        "msi",
        "appx",
        "exe",
        "zip",
        "inno",
        "nullsoft",
        "wix",
        "burn",
        "pwa",
        "portable",
        "font",
    }
)
KNOWN_SCOPES = frozenset({"user", "machine"})


def _text(value: Any) -> str | None:
    """Return a stripped string, or None for missing/blank/non-scalar values."""
    if value is None or isinstance(value, (dict, list)):
        return None
    text = str(value).strip()
    return text or None


def _lower(value: Any) -> str | None:
    text = _text(value)
    return text.lower() if text else None


def _pick(sources: list[dict[str, Any]], *keys: str) -> Any:
    """First non-empty value for any of ``keys`` across ``sources`` in order."""
    for source in sources:
        for key in keys:
            value = source.get(key)
            if value not in (None, "", [], {}):
                return value
    return None


def _string_tuple(value: Any) -> tuple[str, ...]:
    """Normalize a list-or-scalar field to a deduplicated tuple of strings."""
    if value is None:
        return ()
    items = value if isinstance(value, list) else [value]
    out: list[str] = []
    for item in items:
        text = _text(item)
        if text and text not in out:
            out.append(text)
    return tuple(out)


@dataclass(frozen=True)
class InstallerRecord:
    """One concrete installer offered for a package version.

    All values are lowercased at ingestion. Values outside the known enums
    are kept as-is; the catalog is reported faithfully, not corrected.

    Attributes:
        architecture: "x86", "x64", "arm", "arm64", "neutral", or None.
        installer_type: "msi", "exe", "msix", ... or None.
        scope: "user", "machine", or None when unspecified.
    """

    architecture: str | None = None
    installer_type: str | None = None
    scope: str | None = None

    @classmethod
    def from_api(
        cls,
        data: dict[str, Any],
        *,
        default_type: str | None = None,
        default_scope: str | None = None,
    ) -> InstallerRecord:
        return cls(
            architecture=_lower(data.get("Architecture")),
            installer_type=_lower(data.get("InstallerType")) or default_type,
            scope=_lower(data.get("Scope")) or default_scope,
        )


@dataclass(frozen=True)
class PackageCandidate:
    """One package entry from a search result or a full manifest.

    Attributes:
        id: Dotted "Publisher.Name" identifier.
        display_name: Human readable package name.
        publisher: Publisher name.
        description: Short description.
        homepage: Project homepage URL.
        license: License name.
        tags: Tags in catalog order, deduplicated.
        versions: Version strings as listed by the catalog.
        search_score: Upstream relevance score (0-100), when supplied.
        installers: Installer records, or None when the entry carried no
            installer list at all.
    """

    id: str
    display_name: str | None = None
    publisher: str | None = None
    description: str | None = None
    homepage: str | None = None
    license: str | None = None
    tags: tuple[str, ...] = ()
    versions: tuple[str, ...] = ()
    search_score: float | None = None
    installers: tuple[InstallerRecord, ...] | None = None

    @property
    def has_installer_detail(self) -> bool:
        """True when at least one installer record is present.

        This is the single decision point for "does this entry already tell
        us about installers, or do we need the full manifest?".
        """
        return bool(self.installers)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> PackageCandidate:
        """Parse one catalog API entry.

        Args:
            data: A package object from a search page or a manifest response.

        Returns:
            The parsed candidate.

        Raises:
            ValueError: If the entry has no "Id".
        """
        package_id = _text(data.get("Id"))
        if not package_id:
            raise ValueError("catalog entry has no 'Id'")

        latest = data.get("Latest")
        latest = latest if isinstance(latest, dict) else {}
        described = [latest, data]

        score = data.get("SearchScore")
        try:
            search_score = float(score) if score is not None else None
        except (TypeError, ValueError):
            search_score = None
        # JSON decoding accepts NaN and Infinity.
        if search_score is not None and not math.isfinite(search_score):
            search_score = None

        return cls(
            id=package_id,
            display_name=_text(_pick(described, "Name", "PackageName")),
            publisher=_text(_pick(described, "Publisher")),
            description=_text(_pick(described, "Description", "ShortDescription")),
            homepage=_text(_pick(described, "Homepage", "PackageUrl")),
            license=_text(_pick(described, "License")),
            tags=_string_tuple(_pick(described, "Tags")),
            versions=_string_tuple(_pick([data, latest], "Versions", "Version")),
            search_score=search_score,
            installers=_installers_from_api(data, latest),
        )


def _installers_from_api(
    data: dict[str, Any], latest: dict[str, Any]
) -> tuple[InstallerRecord, ...] | None:
    """Parse the installer list, or None when no list was supplied."""
    for source in (data, latest):
        raw = source.get("Installers")
        if isinstance(raw, list):
            default_type = _lower(source.get("InstallerType"))
            default_scope = _lower(source.get("Scope"))
            return tuple(
                InstallerRecord.from_api(
                    item, default_type=default_type, default_scope=default_scope
                )
                for item in raw
                if isinstance(item, dict)
            )
    return None
