"""
Text matching primitives shared by the linker and the price resolver.

Two kinds of comparison:
  1. exact_match — case-insensitive, whitespace-trimmed equality
  2. fuzzy_match — rapidfuzz token-sort similarity, ranked best-first

Similarity convention (used everywhere in the engine):
  0.0 = nothing in common, 1.0 = identical after normalization.
  A candidate is kept when similarity >= min_similarity. The catalogs were
  originally tuned with a distance cutoff of 0.4, which is min_similarity 0.6.
  Words are sorted before the whole strings are compared, so word order does
  not matter but every extra or missing word costs similarity: "Home care"
  does not reach "Home modifications" on the shared word alone.

FuzzyIndex pre-normalizes a candidate collection once so it can be searched
for every leaf / every query without re-processing the candidates.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

from rapidfuzz import fuzz, utils

from concept_wiki.settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

Scorer = Callable[..., float]


# ── Normalization ─────────────────────────────────────────────────────────────


def normalize_text(value: Any) -> str:
    """Trim and case-fold; None becomes the empty string."""
    if value is None:
        return ""
    return str(value).strip().casefold()


def exact_match(a: Any, b: Any) -> bool:
    """
    True iff both values are present and equal ignoring case and surrounding
    whitespace. Missing or blank text never matches (not even another blank).
    """
    left = normalize_text(a)
    right = normalize_text(b)
    return bool(left) and left == right


def contains_text(haystack: Any, needle: Any) -> bool:
    """Case-insensitive substring test; missing text on either side is no match."""
    hay = normalize_text(haystack)
    pin = normalize_text(needle)
    return bool(hay) and bool(pin) and pin in hay


def similarity(a: Any, b: Any, scorer: Scorer = fuzz.token_sort_ratio) -> float:
    """Similarity of two strings in the engine's 0.0–1.0 convention."""
    left = utils.default_process(str(a)) if a is not None else ""
    right = utils.default_process(str(b)) if b is not None else ""
    if not left or not right:
        return 0.0
    return scorer(left, right) / 100.0


# ── Fuzzy index ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FuzzyMatch(Generic[T]):
    candidate: T
    score: float  # 0.0–1.0, higher is closer
    position: int  # index in the original candidate sequence


class FuzzyIndex(Generic[T]):
    """
    A candidate collection prepared for repeated fuzzy lookups.

    Usage:
        index = FuzzyIndex(activities, key=lambda a: a.activity)
        matches = index.search("Domestic assistance", limit=3)
    """

    def __init__(
        self,
        candidates: Iterable[T],
        key: Callable[[T], Any],
        min_similarity: Optional[float] = None,
        scorer: Scorer = fuzz.token_sort_ratio,
    ):
        self.min_similarity = (
            settings.fuzzy_min_similarity if min_similarity is None else min_similarity
        )
        self._scorer = scorer
        self._entries: list[tuple[int, T, str]] = []
        for position, candidate in enumerate(candidates):
            raw = key(candidate)
            processed = utils.default_process(str(raw)) if raw is not None else ""
            # Candidates without usable text can never match
            if processed:
                self._entries.append((position, candidate, processed))

    def __len__(self) -> int:
        return len(self._entries)

    def search(
        self,
        query: Any,
        limit: Optional[int] = None,
        min_similarity: Optional[float] = None,
    ) -> list[FuzzyMatch[T]]:
        """
        Rank candidates against the query, highest similarity first.
        Ties keep the original candidate order. Returns [] for blank queries.
        """
        processed_query = utils.default_process(str(query)) if query is not None else ""
        if not processed_query or not self._entries:
            return []

        threshold = self.min_similarity if min_similarity is None else min_similarity
        cutoff = threshold * 100.0

        matches: list[FuzzyMatch[T]] = []
        for position, candidate, choice in self._entries:
            score = self._scorer(processed_query, choice, score_cutoff=cutoff)
            if score >= cutoff:
                matches.append(FuzzyMatch(candidate, score / 100.0, position))

        # sorted() is stable, so equal scores stay in input order
        matches = sorted(matches, key=lambda m: -m.score)
        if limit is not None:
            matches = matches[:limit]
        return matches

    def best(self, query: Any, min_similarity: Optional[float] = None) -> Optional[FuzzyMatch[T]]:
        matches = self.search(query, limit=1, min_similarity=min_similarity)
        return matches[0] if matches else None


def fuzzy_match(
    query: Any,
    candidates: Iterable[T],
    key: Callable[[T], Any],
    min_similarity: Optional[float] = None,
    limit: Optional[int] = None,
) -> list[tuple[T, float]]:
    """
    One-off fuzzy ranking of candidates against a query.

    Returns (candidate, similarity) pairs, best first. For repeated lookups
    against the same candidates build a FuzzyIndex once instead.
    """
    index = FuzzyIndex(candidates, key=key, min_similarity=min_similarity)
    return [(m.candidate, m.score) for m in index.search(query, limit=limit)]
