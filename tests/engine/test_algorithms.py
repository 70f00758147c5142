from __future__ import annotations

import pytest

from fuzzy_row_matcher.engine.algorithms import (
    HAMMING_LENGTH_MISMATCH,
    Algorithm,
    AlgorithmKind,
    build_algorithms,
    cosine_score,
    fuzzy_score,
    hamming_score,
    jaccard_score,
    jaro_winkler_score,
    levenshtein_score,
)


def test_hamming_counts_matching_positions() -> None:
    assert hamming_score("karolin", "kathrin") == 4
    assert hamming_score("abc", "abc") == 3


def test_hamming_length_mismatch_never_qualifies() -> None:
    assert hamming_score("abc", "ab") == HAMMING_LENGTH_MISMATCH
    algorithm = Algorithm(AlgorithmKind.HAMMING_DISTANCE, -10)
    assert not algorithm.qualifies(algorithm.apply("abc", "ab"))
    assert algorithm.qualifies(algorithm.apply("abc", "abd"))


def test_levenshtein_distance() -> None:
    assert levenshtein_score("kitten", "sitting") == 3
    assert levenshtein_score("", "abc") == 3


@pytest.mark.parametrize(
    "scorer",
    [jaro_winkler_score, levenshtein_score, jaccard_score, cosine_score],
)
@pytest.mark.parametrize(
    ("left", "right"),
    [("martha", "marhta"), ("hello world", "world of hello"), ("abc", "xyz")],
)
def test_symmetric_scorers(scorer, left: str, right: str) -> None:
    assert scorer(left, right) == pytest.approx(scorer(right, left))


def test_jaro_winkler_identical_strings() -> None:
    assert jaro_winkler_score("abc", "abc") == pytest.approx(100.0)
    assert jaro_winkler_score("abc", "xyz") == pytest.approx(0.0)


def test_jaccard_distance_over_character_sets() -> None:
    assert jaccard_score("abc", "abd") == pytest.approx(0.5)
    assert jaccard_score("abc", "cba") == pytest.approx(0.0)
    assert jaccard_score("", "abc") == 1.0
    assert jaccard_score("abc", "") == 1.0
    assert jaccard_score("", "") == 0.0


def test_cosine_distance_over_words() -> None:
    assert cosine_score("hello world", "hello world") == pytest.approx(0.0, abs=1e-9)
    assert cosine_score("hello", "world") == pytest.approx(100.0)
    assert cosine_score("a b", "a c") == pytest.approx(50.0)
    assert cosine_score("", "hello") == pytest.approx(100.0)


@pytest.mark.parametrize(
    ("term", "query", "expected"),
    [
        ("", "", 0),
        ("Workshop", "b", 0),
        ("Room", "o", 1),
        ("Workshop", "w", 1),
        ("Workshop", "ws", 2),
        ("Workshop", "wo", 4),
        ("Apache Software Foundation", "asf", 3),
    ],
)
def test_fuzzy_score(term: str, query: str, expected: int) -> None:
    assert fuzzy_score(term, query) == expected


@pytest.mark.parametrize(
    ("kind", "threshold", "score", "expected"),
    [
        (AlgorithmKind.JARO_DISTANCE, 90.0, 95.0, True),
        (AlgorithmKind.JARO_DISTANCE, 90.0, 89.9, False),
        (AlgorithmKind.FUZZY_SIMILARITY, 3, 4, True),
        (AlgorithmKind.FUZZY_SIMILARITY, 3, 2, False),
        (AlgorithmKind.LEVENSHTEIN_DISTANCE, 1, 1, True),
        (AlgorithmKind.LEVENSHTEIN_DISTANCE, 1, 2, False),
        (AlgorithmKind.JACCARD_DISTANCE, 0.5, 0.5, True),
        (AlgorithmKind.JACCARD_DISTANCE, 0.5, 0.6, False),
        (AlgorithmKind.COSINE_DISTANCE, 30.0, 31.0, False),
        (AlgorithmKind.COSINE_DISTANCE, 30.0, 12.5, True),
        (AlgorithmKind.HAMMING_DISTANCE, 3, 3, True),
        (AlgorithmKind.HAMMING_DISTANCE, 3, 2, False),
    ],
)
def test_qualification_direction(kind: AlgorithmKind, threshold, score, expected: bool) -> None:
    assert Algorithm(kind, threshold).qualifies(score) is expected


def test_algorithm_coerces_kind_and_threshold() -> None:
    levenshtein = Algorithm("LevenshteinDistance", 5.0)
    assert levenshtein.kind is AlgorithmKind.LEVENSHTEIN_DISTANCE
    assert isinstance(levenshtein.threshold, int)
    assert levenshtein.threshold == 5

    jaro = Algorithm(AlgorithmKind.JARO_DISTANCE, 98)
    assert isinstance(jaro.threshold, float)


def test_unknown_algorithm_kind_is_rejected() -> None:
    with pytest.raises(ValueError):
        Algorithm("SoundexDistance", 1)


def test_build_algorithms_follows_kind_order() -> None:
    algorithms = build_algorithms({"JaroDistance": 90, "FuzzySimilarity": 2, "LevenshteinDistance": 1})
    assert [algorithm.kind for algorithm in algorithms] == [
        AlgorithmKind.FUZZY_SIMILARITY,
        AlgorithmKind.LEVENSHTEIN_DISTANCE,
        AlgorithmKind.JARO_DISTANCE,
    ]
    assert build_algorithms({}) == ()


def test_whole_number_threshold_required_for_integer_kinds() -> None:
    with pytest.raises(ValueError):
        Algorithm(AlgorithmKind.LEVENSHTEIN_DISTANCE, 1.7)
    with pytest.raises(ValueError):
        Algorithm(AlgorithmKind.FUZZY_SIMILARITY, None)
    assert Algorithm(AlgorithmKind.HAMMING_DISTANCE, 3.0).threshold == 3
    assert Algorithm(AlgorithmKind.JACCARD_DISTANCE, 1).threshold == 1.0
