"""
Catalog access and package matching for pkgprobe.

This package turns raw catalog API responses into typed entities, picks the
package a free-text query refers to, and summarizes its installers.

Modules
-------
models : module
    PackageCandidate and InstallerRecord with explicit optional fields.
client : module
    Cached, retrying search and manifest calls against the catalog API.
matching : module
    Deterministic best-candidate selection with additive scoring.
installers : module
    Architecture / installer type / scope extraction and 64-bit flags.

Public API
----------
CatalogClient : class
    Search and manifest access through the response cache.
PackageCandidate, InstallerRecord : dataclasses
    Parsed catalog entities.
MatchResult : dataclass
    Outcome of resolve_match.
resolve_match : function
    Pick one candidate for a search term and optional filters.
InstallerFacts : dataclass
    Outcome of extract_installer_facts.
extract_installer_facts : function
    Summarize a candidate's installers.

Examples
--------
    >>> from pkgprobe.catalog import resolve_match, extract_installer_facts
    >>> result = resolve_match(candidates, "PuTTY")
    >>> facts = extract_installer_facts(result.candidate)
    >>> facts.has_64bit
    True
"""

from .client import CatalogClient
from .installers import InstallerFacts, extract_installer_facts
from .matching import MatchResult, primary_word, resolve_match, score_candidate
from .models import InstallerRecord, PackageCandidate

__all__ = [
    "CatalogClient",
    "InstallerFacts",
    "InstallerRecord",
    "MatchResult",
    "PackageCandidate",
    "extract_installer_facts",
    "primary_word",
    "resolve_match",
    "score_candidate",
]
