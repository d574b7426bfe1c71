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

"""Best-candidate selection for catalog searches.

A catalog search for "PuTTY" returns PuTTY itself alongside MTPuTTY,
ExtraPuTTY and other products that merely contain the word. This module picks
the single package the caller meant, deterministically.

Resolution Steps:

1. **Exact id short-circuit** - With a package id filter, only a
   case-sensitive id match is accepted. No scoring happens at all.
2. **Primary word** - The first search token that is not a bare version
   number ("Notepad++ 8.6" -> "notepad++").
3. **Relevance filter** - The primary word must appear in the id, the display
   name or the publisher. A publisher filter must equal or be contained in
   the candidate's publisher.
4. **Scoring** - Independent, additive bonuses (see SCORE_* constants).
5. **Selection** - Scores below MIN_SCORE are dropped; the highest score wins
   and ties go to the candidate the API listed first.

Example:
    ```python
    from pkgprobe.catalog.matching import resolve_match

    result = resolve_match(candidates, "PuTTY")
    if result.found:
        print(result.candidate.id, result.score)
    ```

Note:
    Scores are only comparable within one resolve_match call.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import math
import re

from pkgprobe.logging import get_global_logger

from .models import PackageCandidate

MIN_SCORE = 15

SCORE_BASE = 10
SCORE_UPSTREAM_FACTOR = 0.5
SCORE_ID_TERM_TERM = 100
SCORE_PUBLISHER_EXACT = 75
SCORE_NAME_EXACT = 50
SCORE_NAME_PRIMARY = 30
SCORE_NAME_STARTS_TERM = 25
SCORE_NAME_STARTS_PRIMARY = 20
SCORE_ID_STARTS_TERM = 15
SCORE_ID_SEGMENT = 10

_VERSION_TOKEN = re.compile(r"\d+(?:\.\d+)*")


@dataclass(frozen=True)
class MatchResult:
    """Outcome of one resolution call.

    Attributes:
        candidate: The chosen package, or None when nothing qualified.
        score: Score of the chosen package (0 when not found).
        candidate_count: Number of candidates considered. Zero means the
            search itself came back empty.
    """

    candidate: PackageCandidate | None
    score: int = 0
    candidate_count: int = 0

    @property
    def found(self) -> bool:
        return self.candidate is not None


def primary_word(search_term: str) -> str:
    """Return the first non-version token of the lowercased search term.

    Example:
        ```python
        primary_word("Notepad++ 8.6.2")  # "notepad++"
        primary_word("2024")             # "2024" (nothing survives)
        ```
    """
    lowered = search_term.strip().lower()
    for token in lowered.split():
        if token and not _VERSION_TOKEN.fullmatch(token):
            return token
    return lowered


def is_relevant(
    candidate: PackageCandidate, primary: str, publisher: str | None = None
) -> bool:
    """Check the relevance filter for one candidate."""
    fields = (
        candidate.id.lower(),
        (candidate.display_name or "").lower(),
        (candidate.publisher or "").lower(),
    )
    if not any(primary in field for field in fields):
        return False

    if publisher:
        wanted = publisher.lower()
        actual = (candidate.publisher or "").lower()
        if actual != wanted and wanted not in actual:
            return False
    return True


def score_candidate(
    candidate: PackageCandidate,
    search_term: str,
    publisher: str | None = None,
) -> int:
    """Compute the additive relevance score of one candidate.

    Every bonus is evaluated independently; several usually apply at once.
    """
    term = search_term.strip().lower()
    primary = primary_word(term)
    cid = candidate.id.lower()
    name = (candidate.display_name or "").lower()

    score = SCORE_BASE
    if candidate.search_score is not None:
        score += math.floor(candidate.search_score * SCORE_UPSTREAM_FACTOR)
    if cid == f"{term}.{term}":
        score += SCORE_ID_TERM_TERM
    if publisher and (candidate.publisher or "").lower() == publisher.lower():
        score += SCORE_PUBLISHER_EXACT
    if name == term:
        score += SCORE_NAME_EXACT
    if name == primary:
        score += SCORE_NAME_PRIMARY
    if name.startswith(term):
        score += SCORE_NAME_STARTS_TERM
    if name.startswith(primary):
        score += SCORE_NAME_STARTS_PRIMARY
    if cid.startswith(term):
        score += SCORE_ID_STARTS_TERM
    if cid.endswith(f".{term}") or cid.startswith(f"{term}."):
        score += SCORE_ID_SEGMENT
    return score


def resolve_match(
    candidates: Sequence[PackageCandidate],
    search_term: str,
    publisher: str | None = None,
    package_id: str | None = None,
) -> MatchResult:
    """Pick the single best candidate for a search.

    Args:
        candidates: Candidates in the order the API returned them.
        search_term: Free-text application name the user searched for.
        publisher: Optional publisher filter (equality or substring).
        package_id: Optional exact package id. When given, only an exact
            id match is accepted and no scoring takes place.

    Returns:
        The match result; ``found`` is False when nothing qualified.
    """
    logger = get_global_logger()
    count = len(candidates)

    if package_id:
        for candidate in candidates:
            if candidate.id == package_id:
                logger.debug("MATCH", f"Exact id match: {candidate.id}")
                return MatchResult(candidate, 0, count)
        logger.debug("MATCH", f"No candidate has id {package_id!r}")
        return MatchResult(None, 0, count)

    term = search_term.strip()
    primary = primary_word(term)
    valid = [c for c in candidates if is_relevant(c, primary, publisher)]
    logger.debug(
        "MATCH",
        f"Primary word {primary!r}: {len(valid)}/{count} candidate(s) relevant",
    )
    if not valid:
        return MatchResult(None, 0, count)

    best: PackageCandidate | None = None
    best_score = 0
    for candidate in valid:
        score = score_candidate(candidate, term, publisher)
        logger.debug("MATCH", f"  {candidate.id}: {score}")
        if score < MIN_SCORE:
            continue
        # Strictly greater keeps the first-seen candidate on ties.
        if best is None or score > best_score:
            best, best_score = candidate, score

    if best is None:
        logger.debug("MATCH", f"No candidate reached the minimum score {MIN_SCORE}")
        return MatchResult(None, 0, count)

    logger.verbose("MATCH", f"Selected {best.id} (score {best_score})")
    return MatchResult(best, best_score, count)
