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

"""Locating and invoking the local winget executable.

Both functions are thin wrappers: locate_winget() runs once per process and
run_winget() turns every failure mode (missing binary, timeout) into None so
callers can degrade to a negative answer.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from functools import lru_cache
import os
from pathlib import Path
import shutil
import subprocess

from pkgprobe.logging import get_global_logger

DEFAULT_TIMEOUT = 30

# Flags that keep winget from prompting on first use.
NON_INTERACTIVE_ARGS = ("--accept-source-agreements", "--disable-interactivity")


@dataclass(frozen=True)
class ToolOutput:
    """Captured result of one winget invocation."""

    returncode: int
    stdout: str
    stderr: str


@lru_cache(maxsize=None)
def locate_winget() -> str | None:
    """Return the path of the winget executable, or None if not installed.

    Checks PATH first, then the per-user App Execution Alias location
    (%LOCALAPPDATA%\\Microsoft\\WindowsApps\\winget.exe), which is often
    missing from PATH in service and CI sessions. The result is cached for
    the life of the process.
    """
    found = shutil.which("winget")
    if found:
        return found

    local_app_data = os.environ.get("LOCALAPPDATA")
    if local_app_data:
        alias = Path(local_app_data) / "Microsoft" / "WindowsApps" / "winget.exe"
        if alias.exists():
            return str(alias)
    return None


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


def run_winget(
    executable: str,
    args: Sequence[str],
    timeout: float = DEFAULT_TIMEOUT,
) -> ToolOutput | None:
    """Run winget with ``args`` and capture its output.

    subprocess.run kills the child when the timeout expires and reaps it on
    every exit path.

    Args:
        executable: Path to winget.
        args: Arguments after the executable name.
        timeout: Seconds before the process is killed.

    Returns:
        Captured output, or None on timeout or if the process could not start.
    """
    logger = get_global_logger()
    cmd = [executable, *args]
    logger.verbose("WINGET", f"Running: {' '.join(cmd)}")

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            stdin=subprocess.DEVNULL,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as err:
        logger.verbose("WINGET", f"winget timed out after {err.timeout}s, killed")
        return None
    except OSError as err:
        logger.verbose("WINGET", f"winget could not be started: {err}")
        return None

    logger.debug("WINGET", f"Exit code: {result.returncode}")
    return ToolOutput(
        returncode=result.returncode,
        stdout=_decode(result.stdout),
        stderr=_decode(result.stderr),
    )
