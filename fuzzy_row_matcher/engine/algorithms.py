"""Catalog of the string similarity/distance algorithms a run can apply.

Every algorithm is a ``(kind, threshold)`` pair.  The kind selects both the
scoring function and the qualification rule from the dispatch tables below;
the threshold is bound once when the run configuration is built.
"""

from __future__ import annotations

import math
import numbers
import re
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Union

from rapidfuzz.distance import Hamming, JaroWinkler, Levenshtein

Score = Union[int, float]

HAMMING_LENGTH_MISMATCH = -1

_WORD_PATTERN = re.compile(r"(\w)+")


class AlgorithmKind(str, Enum):
    """Supported algorithms; declaration order is the run's evaluation order."""

    FUZZY_SIMILARITY = "FuzzySimilarity"
    LEVENSHTEIN_DISTANCE = "LevenshteinDistance"
    HAMMING_DISTANCE = "HammingDistance"
    JACCARD_DISTANCE = "JaccardDistance"
    COSINE_DISTANCE = "CosineDistance"
    JARO_DISTANCE = "JaroDistance"

    @property
    def integral(self) -> bool:
        """Whether scores and thresholds of this kind are integers."""

        return self in _INTEGRAL_KINDS


_INTEGRAL_KINDS = frozenset(
    {
        AlgorithmKind.FUZZY_SIMILARITY,
        AlgorithmKind.LEVENSHTEIN_DISTANCE,
        AlgorithmKind.HAMMING_DISTANCE,
    }
)


# ----------------------------------------------------------------------
# Scoring functions
# ----------------------------------------------------------------------
def jaro_winkler_score(left: str, right: str) -> float:
    return JaroWinkler.similarity(left, right) * 100


def levenshtein_score(left: str, right: str) -> int:
    return Levenshtein.distance(left, right)


def hamming_score(left: str, right: str) -> int:
    """Count of matching positions, or -1 when the lengths differ."""

    if len(left) != len(right):
        return HAMMING_LENGTH_MISMATCH
    return len(left) - Hamming.distance(left, right)


def jaccard_score(left: str, right: str) -> float:
    """Jaccard distance over the character sets of both strings.

    Two empty strings are identical (distance 0.0); one empty string is
    maximally distant from any other.
    """

    if not left and not right:
        return 0.0
    if not left or not right:
        return 1.0
    left_chars = set(left)
    right_chars = set(right)
    union = left_chars | right_chars
    return 1.0 - len(left_chars & right_chars) / len(union)


def cosine_score(left: str, right: str) -> float:
    """Cosine distance between word-frequency vectors, scaled to 0..100."""

    left_vector = Counter(match.group(0) for match in _WORD_PATTERN.finditer(left))
    right_vector = Counter(match.group(0) for match in _WORD_PATTERN.finditer(right))
    dot_product = sum(count * right_vector[term] for term, count in left_vector.items())
    left_norm = math.sqrt(sum(count * count for count in left_vector.values()))
    right_norm = math.sqrt(sum(count * count for count in right_vector.values()))
    if left_norm <= 0.0 or right_norm <= 0.0:
        similarity = 0.0
    else:
        similarity = dot_product / (left_norm * right_norm)
    return (1.0 - similarity) * 100


def fuzzy_score(term: str, query: str) -> int:
    """Score how well ``query`` matches ``term`` character by character.

    Each query character found (in order) in the term earns one point; a match
    immediately following the previous matched position earns two more.
    """

    term_lower = term.lower()
    query_lower = query.lower()
    score = 0
    term_index = 0
    previous_match: int | None = None
    for query_char in query_lower:
        while term_index < len(term_lower):
            position = term_index
            term_index += 1
            if term_lower[position] == query_char:
                score += 1
                if previous_match is not None and previous_match + 1 == position:
                    score += 2
                previous_match = position
                break
    return score


# ----------------------------------------------------------------------
# Qualification rules: (threshold, score) -> bool
# ----------------------------------------------------------------------
def _at_least(threshold: Score, score: Score) -> bool:
    return score >= threshold


def _at_most(threshold: Score, score: Score) -> bool:
    return threshold >= score


def _hamming_qualifies(threshold: Score, score: Score) -> bool:
    if score == HAMMING_LENGTH_MISMATCH:
        return False
    return threshold <= score


_SCORERS: dict[AlgorithmKind, Callable[[str, str], Score]] = {
    AlgorithmKind.FUZZY_SIMILARITY: fuzzy_score,
    AlgorithmKind.LEVENSHTEIN_DISTANCE: levenshtein_score,
    AlgorithmKind.HAMMING_DISTANCE: hamming_score,
    AlgorithmKind.JACCARD_DISTANCE: jaccard_score,
    AlgorithmKind.COSINE_DISTANCE: cosine_score,
    AlgorithmKind.JARO_DISTANCE: jaro_winkler_score,
}

_QUALIFIERS: dict[AlgorithmKind, Callable[[Score, Score], bool]] = {
    AlgorithmKind.FUZZY_SIMILARITY: _at_least,
    AlgorithmKind.LEVENSHTEIN_DISTANCE: _at_most,
    AlgorithmKind.HAMMING_DISTANCE: _hamming_qualifies,
    AlgorithmKind.JACCARD_DISTANCE: _at_most,
    AlgorithmKind.COSINE_DISTANCE: _at_most,
    AlgorithmKind.JARO_DISTANCE: _at_least,
}


def _coerce_threshold(kind: AlgorithmKind, value: object) -> Score:
    """Validate a configured threshold against the numeric type of its kind."""

    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ValueError(f"{kind.value} threshold must be a number, got {value!r}")
    if not kind.integral:
        return float(value)
    if not float(value).is_integer():
        raise ValueError(f"{kind.value} threshold must be a whole number, got {value!r}")
    return int(value)


@dataclass(frozen=True, slots=True)
class Algorithm:
    """One configured algorithm: its kind plus the threshold it qualifies against."""

    kind: AlgorithmKind
    threshold: Score

    def __post_init__(self) -> None:
        kind = AlgorithmKind(self.kind)
        threshold = _coerce_threshold(kind, self.threshold)
        object.__setattr__(self, "kind", kind)
        object.__setattr__(self, "threshold", threshold)

    def apply(self, left: str, right: str) -> Score:
        return _SCORERS[self.kind](left, right)

    def qualifies(self, score: Score) -> bool:
        return _QUALIFIERS[self.kind](self.threshold, score)


def build_algorithms(thresholds: dict[AlgorithmKind | str, Score]) -> tuple[Algorithm, ...]:
    """Return one algorithm per configured kind, in declaration order of the kinds."""

    by_kind: dict[AlgorithmKind, Score] = {}
    for raw_kind, threshold in thresholds.items():
        by_kind[AlgorithmKind(raw_kind)] = threshold
    return tuple(Algorithm(kind, by_kind[kind]) for kind in AlgorithmKind if kind in by_kind)


__all__ = [
    "Algorithm",
    "AlgorithmKind",
    "HAMMING_LENGTH_MISMATCH",
    "Score",
    "build_algorithms",
    "cosine_score",
    "fuzzy_score",
    "hamming_score",
    "jaccard_score",
    "jaro_winkler_score",
    "levenshtein_score",
]
