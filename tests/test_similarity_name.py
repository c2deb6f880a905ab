from __future__ import annotations

import pytest

from skillsync.similarity.name import (
    NameAlgorithm,
    jaro_similarity,
    jaro_winkler_similarity,
    levenshtein_distance,
    levenshtein_similarity,
    name_similarity,
)


class TestLevenshtein:
    @pytest.mark.parametrize(
        ("a", "b", "distance"),
        [
            ("", "", 0),
            ("abc", "", 3),
            ("kitten", "sitting", 3),
            ("http-client", "https-client", 1),
        ],
    )
    def test_distance(self, a: str, b: str, distance: int):
        assert levenshtein_distance(a, b) == distance

    def test_similarity(self):
        assert levenshtein_similarity("", "") == 1.0
        assert levenshtein_similarity("http-client", "https-client") == pytest.approx(11 / 12)


class TestJaroWinkler:
    def test_classic_pair(self):
        assert jaro_similarity("martha", "marhta") == pytest.approx(0.9444, abs=1e-4)
        assert jaro_winkler_similarity("martha", "marhta") == pytest.approx(0.9611, abs=1e-4)

    def test_no_boost_below_threshold(self):
        jaro = jaro_similarity("abcxyz", "abqrst")
        assert jaro <= 0.7
        assert jaro_winkler_similarity("abcxyz", "abqrst") == jaro

    def test_disjoint(self):
        assert jaro_winkler_similarity("abc", "xyz") == 0.0


class TestNameSimilarity:
    def test_identical(self):
        assert name_similarity("http-client", "http-client") == 1.0

    def test_close_names(self):
        score = name_similarity("http-client", "https-client")
        assert 0.85 < score < 0.95

    def test_unrelated_names(self):
        assert name_similarity("http-client", "database") < 0.3

    def test_normalizes_case_and_whitespace(self):
        assert name_similarity("  HTTP-Client ", "http-client") == 1.0

    @pytest.mark.parametrize("algorithm", list(NameAlgorithm))
    def test_symmetric_and_bounded(self, algorithm: NameAlgorithm):
        pairs = [("deploy", "deploy-prod"), ("lint", "list"), ("a", "zzzz"), ("", "x")]
        for a, b in pairs:
            forward = name_similarity(a, b, algorithm)
            assert forward == name_similarity(b, a, algorithm)
            assert 0.0 <= forward <= 1.0

    def test_algorithm_by_name(self):
        assert name_similarity("abc", "abd", "levenshtein") == pytest.approx(2 / 3)
        with pytest.raises(ValueError, match="unknown similarity algorithm"):
            name_similarity("a", "b", "soundex")

    def test_parse_aliases(self):
        assert NameAlgorithm.parse("Jaro_Winkler") is NameAlgorithm.JARO_WINKLER
        assert NameAlgorithm.parse("jarowinkler") is NameAlgorithm.JARO_WINKLER
