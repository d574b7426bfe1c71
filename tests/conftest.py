"""
Pytest configuration and shared fixtures for pkgprobe tests.

This module provides reusable fixtures and test utilities used across
the test suite.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest
import yaml

from pkgprobe.catalog.models import InstallerRecord, PackageCandidate
from pkgprobe.logging import SilentLogger, set_global_logger


@pytest.fixture(autouse=True)
def silent_global_logger():
    """Reset the global logger so CLI tests do not leak verbosity."""
    set_global_logger(SilentLogger())
    yield
    set_global_logger(SilentLogger())


@pytest.fixture
def tmp_test_dir(tmp_path: Path) -> Path:
    """
    Provide a temporary directory for test artifacts.

    Automatically cleaned up after test completion.
    """
    return tmp_path


@pytest.fixture
def create_yaml_file(tmp_test_dir: Path):
    """
    Factory fixture for creating temporary YAML files.

    Usage:
        yaml_path = create_yaml_file("pkgprobe.yaml", {"api": {"timeout": 10}})
    """

    def _create(filename: str, data: dict[str, Any]) -> Path:
        path = tmp_test_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.dump(data, f)
        return path

    return _create


@pytest.fixture
def make_candidate():
    """
    Factory fixture for PackageCandidate objects.

    Usage:
        candidate = make_candidate("PuTTY.PuTTY", "PuTTY", publisher="Simon Tatham")
        candidate = make_candidate("7zip.7zip", installers=[("x64", "exe", None)])
    """

    def _create(
        package_id: str,
        name: str | None = None,
        *,
        publisher: str | None = None,
        search_score: float | None = None,
        versions: tuple[str, ...] = (),
        installers: list[tuple[str | None, str | None, str | None]] | None = None,
    ) -> PackageCandidate:
        records = None
        if installers is not None:
            records = tuple(
                InstallerRecord(architecture=a, installer_type=t, scope=s)
                for a, t, s in installers
            )
        return PackageCandidate(
            id=package_id,
            display_name=name,
            publisher=publisher,
            search_score=search_score,
            versions=versions,
            installers=records,
        )

    return _create


@pytest.fixture
def putty_search_page() -> dict[str, Any]:
    """
    Provide a catalog search response for "PuTTY".

    Mirrors the winget.run v2 shape: descriptive fields under "Latest",
    no installer list.
    """
    return {
        "Packages": [
            {
                "Id": "TTYPlus.MTPutty",
                "Versions": ["1.8"],
                "Latest": {"Name": "MTPuTTY", "Publisher": "TTY Plus"},
            },
            {
                "Id": "PuTTY.PuTTY",
                "Versions": ["0.80.0.0", "0.81.0.0", "0.79.0.0"],
                "Latest": {
                    "Name": "PuTTY",
                    "Publisher": "Simon Tatham",
                    "Tags": ["ssh", "telnet", "serial"],
                    "Description": "SSH and telnet client",
                    "Homepage": "https://www.chiark.greenend.org.uk/~sgtatham/putty/",
                    "License": "MIT",
                },
            },
            {
                "Id": "9XCODE.ExtraPuTTY",
                "Versions": ["0.30"],
                "Latest": {"Name": "ExtraPuTTY", "Publisher": "9XCODE"},
            },
        ],
        "Total": 3,
    }


@pytest.fixture
def putty_manifest() -> dict[str, Any]:
    """Provide a catalog manifest response for PuTTY.PuTTY."""
    return {
        "Package": {
            "Id": "PuTTY.PuTTY",
            "Versions": ["0.81.0.0"],
            "Latest": {"Name": "PuTTY", "Publisher": "Simon Tatham"},
            "Installers": [
                {"Architecture": "x64", "InstallerType": "msi", "Scope": "machine"},
                {"Architecture": "x86", "InstallerType": "msi", "Scope": "machine"},
                {"Architecture": "arm64", "InstallerType": "msi"},
            ],
        }
    }
