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

"""Parsers for winget's human-readable console output.

winget has no machine-readable output for ``show`` or ``search``, so these
parsers key off text markers of the current CLI:

- ``Found <Name> [<Id>]``: the package was resolved
- ``Installer Url:`` / ``Installer Type:``: installer details were printed
- ``No applicable installer found``: nothing matches the requested filters
- A ``Name  Id  Version ...`` header, a dashed separator, then table rows
  whose columns are separated by two or more spaces

These markers are undocumented and may change between winget releases.
Results are best effort, never authoritative. Keep all text handling in this
module so a future structured output only touches this file.
"""

from __future__ import annotations

from dataclasses import dataclass
import re

# winget draws spinners and progress bars with ANSI sequences and \r.
_ANSI_OSC_RE = re.compile(r"\x1b\][^\x07]*(?:\x07|\x1b\\)")
_ANSI_CSI_RE = re.compile(r"\x1b\[[0-?]*[ -/]*[@-~]")
_ANSI_2CHAR_RE = re.compile(r"\x1b[@-Z\\-_]")
_SPINNER_FRAMES = frozenset({"-", "\\", "|", "/"})
_PROGRESS_BAR_CHARS = ("█", "▒")

_FOUND_RE = re.compile(r"^Found\s+\S")
_INSTALLER_DETAIL_MARKERS = ("installer url:", "installer type:")
_NO_APPLICABLE_MARKER = "no applicable installer found"
_COLUMN_SPLIT_RE = re.compile(r"\s{2,}")


@dataclass(frozen=True)
class ShowEvidence:
    """What ``winget show`` output proves about a package.

    Attributes:
        found: A "Found ..." line was printed.
        installer_details: An installer URL or type line was printed.
        no_applicable_installer: winget reported no installer for the filters.
    """

    found: bool = False
    installer_details: bool = False
    no_applicable_installer: bool = False

    @property
    def positive(self) -> bool:
        """All three conditions hold for a positive answer."""
        return self.found and self.installer_details and not self.no_applicable_installer


@dataclass(frozen=True)
class PackageRef:
    """One row of ``winget search`` output."""

    name: str
    id: str
    version: str
    source: str | None = None


def _is_noise(line: str) -> bool:
    """Blank lines, lone spinner frames and progress bars."""
    stripped = line.strip()
    if not stripped or stripped in _SPINNER_FRAMES:
        return True
    return any(ch in stripped for ch in _PROGRESS_BAR_CHARS)


def clean_lines(text: str) -> list[str]:
    """Strip ANSI sequences and spinner frames; return non-empty lines.

    For lines redrawn with carriage returns only the final frame is kept.
    """
    text = _ANSI_OSC_RE.sub("", text)
    text = _ANSI_CSI_RE.sub("", text)
    text = _ANSI_2CHAR_RE.sub("", text)

    lines: list[str] = []
    for raw in text.replace("\r\n", "\n").split("\n"):
        frames = [frame for frame in raw.split("\r") if frame.strip()]
        line = frames[-1].rstrip() if frames else ""
        if _is_noise(line):
            continue
        lines.append(line)
    return lines


def parse_show_output(text: str) -> ShowEvidence:
    """Collect the markers printed by ``winget show``."""
    found = details = no_applicable = False
    for line in clean_lines(text):
        stripped = line.strip()
        lowered = stripped.lower()
        if _FOUND_RE.match(stripped):
            found = True
        if any(marker in lowered for marker in _INSTALLER_DETAIL_MARKERS):
            details = True
        if _NO_APPLICABLE_MARKER in lowered:
            no_applicable = True
    return ShowEvidence(
        found=found, installer_details=details, no_applicable_installer=no_applicable
    )


def _is_header(line: str) -> bool:
    columns = [c.lower() for c in _COLUMN_SPLIT_RE.split(line.strip())]
    return len(columns) >= 3 and columns[0] == "name" and columns[1] == "id"


def _is_separator(line: str) -> bool:
    stripped = line.strip()
    return len(stripped) >= 3 and set(stripped) == {"-"}


def parse_search_output(text: str) -> PackageRef | None:
    """Parse the first result row of ``winget search`` output.

    Rows after the dashed separator are preferred. Without a separator the
    first line that is not a header is used. A row with fewer than three
    columns (for example "No package found matching input criteria.")
    yields None.
    """
    lines = clean_lines(text)

    row: str | None = None
    for index, line in enumerate(lines):
        if _is_separator(line):
            row = lines[index + 1] if index + 1 < len(lines) else None
            break
    else:
        row = next((ln for ln in lines if not _is_header(ln)), None)

    if row is None:
        return None

    columns = [c for c in _COLUMN_SPLIT_RE.split(row.strip()) if c]
    if len(columns) < 3:
        return None

    return PackageRef(
        name=columns[0],
        id=columns[1],
        version=columns[2],
        # A "Match" column may sit between Version and Source.
        source=columns[-1] if len(columns) >= 4 else None,
    )
