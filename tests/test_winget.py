"""
Tests for pkgprobe.winget package.

Tests local winget integration including:
- Console output cleanup (ANSI codes, spinners, progress bars)
- "winget show" marker detection
- "winget search" table parsing
- WingetProbe behaviour when winget is missing, times out, or answers
- Executable location

All subprocess calls are mocked; these tests never start winget.
"""

from __future__ import annotations

import subprocess
from unittest.mock import patch

import pytest

from pkgprobe.winget import (
    PackageRef,
    ToolOutput,
    WingetProbe,
    locate_winget,
    normalize_product_code,
    parse_search_output,
    parse_show_output,
    run_winget,
)
from pkgprobe.winget.output import clean_lines

pytestmark = pytest.mark.unit

SHOW_X64 = """\
   - \r   \\ \r   | \r
Found PuTTY [PuTTY.PuTTY]
Version: 0.81.0.0
Publisher: Simon Tatham
Installer:
  Installer Type: msi
  Architecture: x64
  Installer Url: https://the.earth.li/~sgtatham/putty/0.81/w64/putty-64bit-0.81-installer.msi
"""

SHOW_NO_X64 = """\
Found Legacy Tool [Legacy.Tool]
No applicable installer found; see logs for more details.
"""

SEARCH_TABLE = """\
\x1b[2K   ██████████████████████████████  1.00 MB / 1.00 MB
Name              Id                      Version   Source
----------------------------------------------------------
Mozilla Firefox   Mozilla.Firefox         125.0.3   winget
"""

SEARCH_EMPTY = "No package found matching input criteria.\n"


class TestOutputParsing:
    """Tests for the output parsers."""

    def test_clean_lines_strips_noise(self):
        """Test that ANSI codes, spinner frames and progress bars vanish."""
        lines = clean_lines("\x1b[32mFound\x1b[0m X [Y]\r\n  /  \n\n██▒▒ 50%\n")
        assert lines == ["Found X [Y]"]

    def test_clean_lines_keeps_last_frame(self):
        """Test that carriage-return redraws keep only the final frame."""
        assert clean_lines("Downloading\rDone\r\n") == ["Done"]

    def test_clean_lines_keeps_separator(self):
        assert clean_lines("Name  Id  Version\n-----------------\n")[1] == "-----------------"

    def test_show_positive(self):
        """Test that found + installer details is a positive answer."""
        evidence = parse_show_output(SHOW_X64)
        assert evidence.found
        assert evidence.installer_details
        assert not evidence.no_applicable_installer
        assert evidence.positive

    def test_show_no_applicable_installer(self):
        """Test that the "No applicable installer" marker vetoes the answer."""
        evidence = parse_show_output(SHOW_NO_X64)
        assert evidence.found
        assert evidence.no_applicable_installer
        assert not evidence.positive

    def test_show_not_found(self):
        evidence = parse_show_output("No package found matching input criteria.")
        assert not evidence.found
        assert not evidence.positive

    def test_search_table(self):
        """Test that the row after the separator is parsed."""
        ref = parse_search_output(SEARCH_TABLE)
        assert ref == PackageRef(
            name="Mozilla Firefox",
            id="Mozilla.Firefox",
            version="125.0.3",
            source="winget",
        )

    def test_search_without_source_column(self):
        """Test that a three-column row has no source."""
        text = "Name   Id       Version\n-----------------------\nFoo    Foo.Foo  1.0\n"
        assert parse_search_output(text) == PackageRef("Foo", "Foo.Foo", "1.0")

    def test_search_without_separator(self):
        """Test the fallback to the first non-header line."""
        text = "Name   Id       Version\nFoo    Foo.Foo  1.0    winget\n"
        assert parse_search_output(text).id == "Foo.Foo"

    def test_search_no_results(self):
        """Test that a message line is not mistaken for a row."""
        assert parse_search_output(SEARCH_EMPTY) is None
        assert parse_search_output("") is None


class TestProductCode:
    def test_normalize_product_code(self):
        """Test that braces are added exactly once."""
        assert normalize_product_code("abc-123") == "{abc-123}"
        assert normalize_product_code(" {ABC-123} ") == "{ABC-123}"


class TestRunWinget:
    """Tests for run_winget."""

    def test_captures_output(self):
        """Test that stdout is decoded and returned."""
        completed = subprocess.CompletedProcess(
            args=["winget"], returncode=0, stdout=b"Found X [Y]\n", stderr=b""
        )
        with patch("pkgprobe.winget.runner.subprocess.run", return_value=completed) as run:
            output = run_winget("winget", ["show", "--id", "Y"], timeout=12)

        assert output == ToolOutput(returncode=0, stdout="Found X [Y]\n", stderr="")
        _, kwargs = run.call_args
        assert run.call_args[0][0] == ["winget", "show", "--id", "Y"]
        assert kwargs["timeout"] == 12
        assert kwargs["stdin"] == subprocess.DEVNULL

    def test_timeout_returns_none(self):
        """Test that a hung winget is killed and reported as None."""
        with patch(
            "pkgprobe.winget.runner.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="winget", timeout=5),
        ):
            assert run_winget("winget", ["show"], timeout=5) is None

    def test_missing_executable_returns_none(self):
        with patch(
            "pkgprobe.winget.runner.subprocess.run",
            side_effect=FileNotFoundError("winget"),
        ):
            assert run_winget("winget", ["show"]) is None


class TestLocateWinget:
    """Tests for locate_winget."""

    def setup_method(self):
        locate_winget.cache_clear()

    def teardown_method(self):
        locate_winget.cache_clear()

    def test_found_on_path(self):
        with patch("pkgprobe.winget.runner.shutil.which", return_value="C:/bin/winget.exe"):
            assert locate_winget() == "C:/bin/winget.exe"

    def test_app_execution_alias(self, tmp_path, monkeypatch):
        """Test the WindowsApps alias fallback."""
        alias = tmp_path / "Microsoft" / "WindowsApps" / "winget.exe"
        alias.parent.mkdir(parents=True)
        alias.write_bytes(b"")
        monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))

        with patch("pkgprobe.winget.runner.shutil.which", return_value=None):
            assert locate_winget() == str(alias)

    def test_not_installed(self, monkeypatch):
        monkeypatch.delenv("LOCALAPPDATA", raising=False)
        with patch("pkgprobe.winget.runner.shutil.which", return_value=None):
            assert locate_winget() is None


class TestWingetProbe:
    """Tests for WingetProbe."""

    def test_has_64bit_installer_positive(self):
        """Test the exact show invocation and a positive answer."""
        probe = WingetProbe("winget.exe")
        with patch(
            "pkgprobe.winget.probe.run_winget",
            return_value=ToolOutput(0, SHOW_X64, ""),
        ) as run:
            assert probe.has_64bit_installer("PuTTY.PuTTY", timeout=20)

        executable, args = run.call_args[0]
        assert executable == "winget.exe"
        assert args[:6] == ["show", "--id", "PuTTY.PuTTY", "--exact", "--architecture", "x64"]
        assert "--accept-source-agreements" in args
        assert "--disable-interactivity" in args
        assert run.call_args[1]["timeout"] == 20

    def test_has_64bit_installer_negative(self):
        probe = WingetProbe("winget.exe")
        with patch(
            "pkgprobe.winget.probe.run_winget",
            return_value=ToolOutput(0, SHOW_NO_X64, ""),
        ):
            assert not probe.has_64bit_installer("Legacy.Tool")

    def test_timeout_is_negative(self):
        probe = WingetProbe("winget.exe")
        with patch("pkgprobe.winget.probe.run_winget", return_value=None):
            assert not probe.has_64bit_installer("PuTTY.PuTTY")
            assert probe.find_by_product_code("{ABC}") is None

    def test_unavailable_never_runs(self):
        """Test that a missing winget short-circuits without a subprocess."""
        with patch("pkgprobe.winget.probe.locate_winget", return_value=None):
            probe = WingetProbe()
        assert not probe.available

        with patch("pkgprobe.winget.probe.run_winget") as run:
            assert not probe.has_64bit_installer("PuTTY.PuTTY")
            assert probe.find_by_product_code("ABC") is None
        run.assert_not_called()

    def test_disabled_never_runs(self):
        probe = WingetProbe("winget.exe", enabled=False)
        assert not probe.available
        with patch("pkgprobe.winget.probe.run_winget") as run:
            assert not probe.has_64bit_installer("PuTTY.PuTTY")
        run.assert_not_called()

    def test_unavailable_warns_once(self):
        """Test that the skip warning is emitted only once per probe."""
        probe = WingetProbe("winget.exe", enabled=False)
        with patch("pkgprobe.winget.probe.get_global_logger") as get_logger:
            probe.has_64bit_installer("A.B")
            probe.has_64bit_installer("C.D")
        assert get_logger.return_value.warning.call_count == 1

    def test_find_by_product_code(self):
        """Test the search invocation with a braced product code."""
        probe = WingetProbe("winget.exe")
        with patch(
            "pkgprobe.winget.probe.run_winget",
            return_value=ToolOutput(0, SEARCH_TABLE, ""),
        ) as run:
            ref = probe.find_by_product_code("45B3032F-22CC-40CD-9E97-4DA7095FA5A2")

        assert ref.id == "Mozilla.Firefox"
        args = run.call_args[0][1]
        assert args[:3] == ["search", "--query", "{45B3032F-22CC-40CD-9E97-4DA7095FA5A2}"]
