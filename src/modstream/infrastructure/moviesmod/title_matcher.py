"""Pick the search result that corresponds to the requested title.

Pure transformation logic with no I/O.

Two passes:

1. Similarity: exact match 1.0, substring containment 0.8, otherwise a
   token-overlap ratio.  The best candidate is accepted above a
   threshold (and, for movies, only if it names the requested year).
2. Stricter whole-word regex fallback that additionally requires the
   year (movies) or the word "season" (series) in the candidate.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

import structlog

from modstream.domain.entities import SearchResult
from modstream.infrastructure.common.extractors import escape_regex

log = structlog.get_logger(__name__)

DEFAULT_THRESHOLD = 0.3


@dataclass(frozen=True)
class BestMatch:
    """Highest-rated candidate (``index == -1`` when there were none)."""

    target: str
    rating: float
    index: int


def similarity(main: str, target: str) -> float:
    """Score *target* against the requested title *main* (0.0..1.0)."""
    if not target:
        return 0.0

    main_l = main.lower()
    target_l = target.lower()

    if main_l == target_l:
        return 1.0
    if main_l in target_l or target_l in main_l:
        return 0.8

    main_words = main_l.split()
    target_words = target_l.split()
    if not main_words or not target_words:
        return 0.0

    matches = sum(
        1
        for word in main_words
        if len(word) > 2 and any(tw in word or word in tw for tw in target_words)
    )
    return matches / max(len(main_words), len(target_words))


def find_best_match(main: str, targets: list[str]) -> BestMatch:
    """Return the first candidate with the maximum similarity."""
    if not targets:
        return BestMatch(target="", rating=0.0, index=-1)

    ratings = [similarity(main, t) for t in targets]
    best = max(ratings)
    index = ratings.index(best)
    return BestMatch(target=targets[index], rating=best, index=index)


def _strict_match(
    title: str,
    results: list[SearchResult],
    *,
    is_series: bool,
    year: str | None,
) -> SearchResult | None:
    pattern = re.compile(rf"\b{escape_regex(title.lower())}\b")
    for result in results:
        candidate = result.title.lower()
        if not pattern.search(candidate):
            continue
        if is_series:
            if "season" in candidate:
                return result
        elif not year or year in result.title:
            return result
    return None


def select_result(
    title: str,
    results: list[SearchResult],
    *,
    is_series: bool = False,
    year: str | None = None,
    threshold: float = DEFAULT_THRESHOLD,
) -> SearchResult | None:
    """Choose the search result for *title*, or None when nothing fits.

    A missing match is a normal negative outcome, never an error.
    """
    if not results:
        return None

    best = find_best_match(title, [r.title for r in results])
    log.info(
        "title_best_match",
        query=title,
        target=best.target,
        rating=round(best.rating, 2),
    )

    selected: SearchResult | None = None
    if best.rating > threshold:
        selected = results[best.index]
        if not is_series and year and year not in selected.title:
            log.warning(
                "title_year_mismatch",
                matched=selected.title,
                expected_year=year,
            )
            selected = None

    if selected is None:
        log.debug("title_strict_fallback", query=title)
        selected = _strict_match(title, results, is_series=is_series, year=year)

    return selected
