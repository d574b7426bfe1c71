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

"""Installer metadata extraction.

Summarizes a package's installer list into architecture, installer type and
scope sets plus the 64-bit/ARM64 flags reported by lookups.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .models import PackageCandidate

DEFAULT_SCOPE = "machine"


@dataclass(frozen=True)
class InstallerFacts:
    """Normalized installer summary for one package.

    Attributes:
        architectures: Lowercased architectures seen across installers.
        installer_types: Lowercased installer types seen across installers.
        scopes: Installation scopes; {"machine"} when installers exist but
            none declares a scope, empty when there are no installers.
        has_64bit: True if any installer targets x64.
        has_arm64: True if any installer targets arm64.
    """

    architectures: frozenset[str] = field(default_factory=frozenset)
    installer_types: frozenset[str] = field(default_factory=frozenset)
    scopes: frozenset[str] = field(default_factory=frozenset)
    has_64bit: bool = False
    has_arm64: bool = False

    @property
    def declares_architecture(self) -> bool:
        """True when the installer data says anything about architecture."""
        return bool(self.architectures)


def extract_installer_facts(candidate: PackageCandidate) -> InstallerFacts:
    """Derive installer facts from a candidate.

    A candidate without installer detail (typical for lightweight search
    results) yields empty sets and false flags. Deciding whether to fetch the
    full manifest is left to the caller.
    """
    if not candidate.has_installer_detail:
        return InstallerFacts()

    architectures: set[str] = set()
    installer_types: set[str] = set()
    scopes: set[str] = set()

    for installer in candidate.installers or ():
        if installer.architecture:
            architectures.add(installer.architecture.lower())
        if installer.installer_type:
            installer_types.add(installer.installer_type.lower())
        if installer.scope:
            scopes.add(installer.scope.lower())

    # Unspecified scope means a machine-wide install.
    if not scopes:
        scopes.add(DEFAULT_SCOPE)

    return InstallerFacts(
        architectures=frozenset(architectures),
        installer_types=frozenset(installer_types),
        scopes=frozenset(scopes),
        has_64bit="x64" in architectures,
        has_arm64="arm64" in architectures,
    )
