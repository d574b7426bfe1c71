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

"""Command-line interface for pkgprobe.

This module provides the main CLI entry point for the pkgprobe tool.

Commands:

    exists: Check whether a package exists (optionally with x64 installer)
    info: Show full package metadata
    product-code: Resolve an MSI product code through winget
    prewarm: Fill the session cache for many names and report statistics

Example:
    Check existence:
        ```bash
        $ pkgprobe exists "PuTTY"
        ```

    Full metadata as JSON:
        ```bash
        $ pkgprobe info "7-Zip" --publisher "Igor Pavlov" --json
        ```

    Require a 64-bit installer:
        ```bash
        $ pkgprobe exists "Notepad++" --require-64bit
        ```

    Resolve a product code:
        ```bash
        $ pkgprobe product-code 45B3032F-22CC-40CD-9E97-4DA7095FA5A2
        ```

    Enable debug output:
        ```bash
        $ pkgprobe info "PuTTY" --debug
        ```

Exit Codes:

- 0: Success (package found)
- 1: Package not found, or an error (configuration, invalid input)

Note:
    The CLI uses argparse for command parsing (stdlib, zero dependencies).
    Each command has its own handler function (cmd_<command>).
    Verbose mode shows full tracebacks on errors for debugging.
"""

from __future__ import annotations

import argparse
from importlib.metadata import PackageNotFoundError, version
import json
from pathlib import Path
import sys

from pkgprobe import __version__
from pkgprobe.config import load_config
from pkgprobe.core import LookupRequest, PackageLookup
from pkgprobe.exceptions import ConfigError, InputError, PkgProbeError
from pkgprobe.logging import get_logger, set_global_logger
from pkgprobe.results import PackageDetails


def _installed_version() -> str:
    try:
        return version("pkgprobe")
    except PackageNotFoundError:
        return __version__


def _configure(args: argparse.Namespace) -> PackageLookup:
    """Install the global logger and build a lookup session."""
    logger = get_logger(verbose=args.verbose, debug=args.debug)
    set_global_logger(logger)
    config = load_config(Path(args.config) if args.config else None)
    return PackageLookup(config)


def _report_error(args: argparse.Namespace, err: Exception) -> int:
    print(f"Error: {err}")
    if args.verbose or args.debug:
        import traceback

        traceback.print_exc()
    return 1


def _build_request(args: argparse.Namespace, lookup: PackageLookup) -> LookupRequest:
    timeout = args.timeout if args.timeout is not None else lookup.config.request_timeout
    return LookupRequest(
        display_name=args.name,
        publisher=args.publisher,
        package_id=args.id,
        require_64bit=args.require_64bit,
        timeout=timeout,
    )


def _print_details(details: PackageDetails) -> None:
    print("=" * 70)
    print("PACKAGE DETAILS")
    print("=" * 70)
    print(f"Query:           {details.query}")
    print(f"Package ID:      {details.id}")
    print(f"Name:            {details.name or '-'}")
    print(f"Publisher:       {details.publisher or '-'}")
    print(f"Description:     {details.description or '-'}")
    print(f"Homepage:        {details.homepage or '-'}")
    print(f"License:         {details.license or '-'}")
    print(f"Tags:            {details.tags or '-'}")
    print(f"Latest Version:  {details.latest_version or '-'}")
    print(f"Versions:        {len(details.versions)}")
    print(f"Architectures:   {', '.join(details.architectures) or '-'}")
    print(f"Installer Types: {', '.join(details.installer_types) or '-'}")
    print(f"Scopes:          {', '.join(details.scopes) or '-'}")
    print(f"64-bit:          {details.has_64bit} ({details.architecture_source})")
    print(f"ARM64:           {details.has_arm64}")
    print(f"Match Score:     {details.match_score}")
    print("=" * 70)


def cmd_exists(args: argparse.Namespace) -> int:
    """Handler for 'pkgprobe exists' command.

    Args:
        args: Parsed command-line arguments containing the name, filters
            and flags.

    Returns:
        Exit code (0 if the package exists, 1 otherwise).
    """
    try:
        lookup = _configure(args)
        request = _build_request(args, lookup)
        found = lookup.exists(request)
    except (ConfigError, InputError) as err:
        return _report_error(args, err)
    except PkgProbeError as err:
        # Unexpected library error
        return _report_error(args, err)

    suffix = " (64-bit)" if args.require_64bit else ""
    if found:
        print(f"[FOUND] {args.name}{suffix}")
        return 0
    print(f"[NOT FOUND] {args.name}{suffix}")
    return 1


def cmd_info(args: argparse.Namespace) -> int:
    """Handler for 'pkgprobe info' command.

    Prints the full metadata record, as a text block or as JSON.

    Args:
        args: Parsed command-line arguments containing the name, filters,
            the json flag and verbosity flags.

    Returns:
        Exit code (0 if the package was found, 1 otherwise).
    """
    try:
        lookup = _configure(args)
        request = _build_request(args, lookup)
        details = lookup.get_details(request)
    except (ConfigError, InputError) as err:
        return _report_error(args, err)
    except PkgProbeError as err:
        # Unexpected library error
        return _report_error(args, err)

    if args.json:
        print(json.dumps(details.to_dict(), indent=2))
    elif details.found:
        _print_details(details)
    else:
        print(f"[NOT FOUND] No package matched {args.name!r}")

    return 0 if details.found else 1


def cmd_product_code(args: argparse.Namespace) -> int:
    """Handler for 'pkgprobe product-code' command.

    Returns:
        Exit code (0 if winget resolved the code, 1 otherwise).
    """
    try:
        lookup = _configure(args)
        ref = lookup.find_by_product_code(args.code, timeout=args.timeout)
    except PkgProbeError as err:
        return _report_error(args, err)

    if ref is None:
        print(f"[NOT FOUND] No package for product code {args.code}")
        return 1

    print(f"Name:      {ref.name}")
    print(f"ID:        {ref.id}")
    print(f"Version:   {ref.version}")
    print(f"Source:    {ref.source or '-'}")
    return 0


def _read_terms(args: argparse.Namespace) -> list[str]:
    terms = list(args.terms)
    if args.file:
        path = Path(args.file)
        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except OSError as err:
            raise InputError(f"cannot read terms file {path}: {err}") from err
        terms.extend(
            line.strip()
            for line in lines
            if line.strip() and not line.lstrip().startswith("#")
        )
    return terms


def cmd_prewarm(args: argparse.Namespace) -> int:
    """Handler for 'pkgprobe prewarm' command.

    Searches every term once (deduplicated, throttled) and reports cache
    statistics for the run.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    try:
        lookup = _configure(args)
        terms = _read_terms(args)
        if not terms:
            raise InputError("no search terms given (use TERM... or --file)")
        result = lookup.prewarm(terms, publisher=args.publisher, delay=args.delay)
    except PkgProbeError as err:
        return _report_error(args, err)

    stats = result.stats
    print("=" * 70)
    print("PREWARM RESULTS")
    print("=" * 70)
    print(f"Unique Terms:    {result.requested}")
    print(f"Already Cached:  {result.skipped}")
    print(f"Fetched:         {result.fetched}")
    print(f"Search Entries:  {stats.search_entries}")
    print(f"Cache Hits:      {stats.hits}")
    print(f"Cache Misses:    {stats.misses}")
    print(f"Efficiency:      {stats.efficiency:.2f}%")
    print("=" * 70)
    return 0


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML config file (default: $PKGPROBE_CONFIG or built-in)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show progress and high-level status updates",
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show detailed debugging output (implies --verbose)",
    )


def _add_lookup_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "name",
        help="Application display name to search for",
    )
    parser.add_argument(
        "--publisher",
        default=None,
        help="Only accept packages whose publisher equals or contains this value",
    )
    parser.add_argument(
        "--id",
        default=None,
        help="Exact package id (e.g., PuTTY.PuTTY); disables fuzzy matching",
    )
    parser.add_argument(
        "--require-64bit",
        action="store_true",
        help="Require a 64-bit installer (may consult the local winget client)",
    )
    parser.add_argument(
        "--timeout",
        type=int,
        default=None,
        help="Seconds per API attempt and winget call, 5-300 (default: from config)",
    )
    _add_common_args(parser)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="pkgprobe",
        description="pkgprobe - WinGet package existence and metadata probe",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"pkgprobe {_installed_version()}",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        help="Available commands",
        required=True,
    )

    # 'exists' command
    parser_exists = subparsers.add_parser(
        "exists",
        help="Check whether a package exists",
        description="Search the catalog and report whether a package matches the name.",
    )
    _add_lookup_args(parser_exists)
    parser_exists.set_defaults(func=cmd_exists)

    # 'info' command
    parser_info = subparsers.add_parser(
        "info",
        help="Show full package metadata",
        description="Show id, publisher, versions, architectures, installer types and scopes.",
    )
    _add_lookup_args(parser_info)
    parser_info.add_argument(
        "--json",
        action="store_true",
        help="Print the metadata record as JSON",
    )
    parser_info.set_defaults(func=cmd_info)

    # 'product-code' command
    parser_code = subparsers.add_parser(
        "product-code",
        help="Resolve an MSI product code through winget",
        description="Search the local winget client for an MSI product code (best effort).",
    )
    parser_code.add_argument(
        "code",
        help="MSI product code, with or without braces",
    )
    parser_code.add_argument(
        "--timeout",
        type=int,
        default=None,
        help="Seconds before winget is killed, 5-300 (default: from config)",
    )
    _add_common_args(parser_code)
    parser_code.set_defaults(func=cmd_product_code)

    # 'prewarm' command
    parser_prewarm = subparsers.add_parser(
        "prewarm",
        help="Search many names once and report cache statistics",
        description="Fill the session cache for a list of names, one call at a time.",
    )
    parser_prewarm.add_argument(
        "terms",
        nargs="*",
        help="Search terms",
    )
    parser_prewarm.add_argument(
        "--file",
        default=None,
        help="File with one search term per line ('#' starts a comment)",
    )
    parser_prewarm.add_argument(
        "--publisher",
        default=None,
        help="Publisher filter shared by all terms",
    )
    parser_prewarm.add_argument(
        "--delay",
        type=float,
        default=None,
        help="Seconds between API calls (default: from config, 0.1)",
    )
    _add_common_args(parser_prewarm)
    parser_prewarm.set_defaults(func=cmd_prewarm)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the pkgprobe CLI.

    This function is registered as the 'pkgprobe' console script in
    pyproject.toml.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
