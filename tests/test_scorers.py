"""Tests for similarity and heuristic scoring."""

import pytest

from archive_search.ranking.fusion import build_query_profile
from archive_search.ranking.scorers import (
    ScoreBreakdown,
    cosine_similarity,
    fuzzy_title_match,
    jaccard_similarity,
    levenshtein,
    score_document,
)
from archive_search.ranking.vectorizer import build_doc_tokens, compute_idf, to_vector


def _score(query, doc, batch=None):
    """Score ``doc`` against ``query`` within ``batch`` (defaults to just doc)."""
    batch = batch or [doc]
    bags = [build_doc_tokens(d) for d in batch]
    idf = compute_idf(bags)
    profile = build_query_profile(query, idf)
    return score_document(profile, doc, to_vector(build_doc_tokens(doc), idf))


def test_cosine_similarity_bounds():
    """Identical vectors score 1, disjoint vectors 0."""
    vec = {"a": 1.0, "b": 2.0}
    norm = (1.0 + 4.0) ** 0.5

    assert cosine_similarity(vec, vec, norm) == pytest.approx(1.0)
    assert cosine_similarity(vec, {"c": 3.0}, norm) == 0.0


def test_cosine_similarity_zero_norm_guard():
    """A zero-norm side yields 0.0 rather than NaN."""
    assert cosine_similarity({}, {"a": 1.0}, 0.0) == 0.0
    assert cosine_similarity({"a": 1.0}, {}, 1.0) == 0.0


def test_jaccard_similarity():
    """Intersection over union of distinct tokens."""
    assert jaccard_similarity(["a", "b"], ["b", "c"]) == pytest.approx(1 / 3)
    assert jaccard_similarity(["a", "a"], ["a"]) == pytest.approx(1.0)
    assert jaccard_similarity([], ["a"]) == 0.0


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ("kitten", "sitting", 3),
        ("flaw", "lawn", 2),
        ("same", "same", 0),
        ("", "abc", 3),
        ("abc", "", 3),
        ("", "", 0),
    ],
)
def test_levenshtein(a, b, expected):
    """Classic edit distance values, including empty strings."""
    assert levenshtein(a, b) == expected


def test_fuzzy_short_token_rejects_distance_two():
    """Tokens under eight characters allow a single edit."""
    assert levenshtein("hello", "hxllx") == 2
    assert fuzzy_title_match(["hello"], ["hxllx"]) == (0.0, 0)


def test_fuzzy_short_token_accepts_distance_one():
    """A single edit on a short token is a near match."""
    bonus, matched = fuzzy_title_match(["hello"], ["hallo"])
    assert matched == 1
    assert bonus == pytest.approx(0.20)


def test_fuzzy_long_token_accepts_distance_two():
    """Tokens of eight or more characters allow two edits."""
    assert levenshtein("adventure", "advintura") == 2
    bonus, matched = fuzzy_title_match(["adventure"], ["advintura"])
    assert matched == 1
    assert bonus == pytest.approx(0.20)


def test_fuzzy_exact_matches_accumulate():
    """Exact matches add the larger bonus per query token, uncapped."""
    bonus, matched = fuzzy_title_match(
        ["mission", "impossible"],
        ["mission", "impossible", "ii"],
    )
    assert matched == 2
    assert bonus == pytest.approx(0.70)


def test_fuzzy_skips_tokens_with_large_length_difference():
    """Title tokens more than two characters longer are never compared."""
    assert fuzzy_title_match(["cat"], ["category"]) == (0.0, 0)


def test_score_breakdown_total():
    """The total is the plain sum of every signal."""
    breakdown = ScoreBreakdown(
        vector=0.5, phrase=1.25, overlap=0.45, fuzzy=0.35, sequel=0.8, coverage=-0.5
    )
    assert breakdown.total == pytest.approx(2.85)


def test_phrase_bonus_for_query_in_title():
    """The normalized query inside the normalized title earns the phrase bonus."""
    breakdown = _score("Apollo 13", {"title": "Apollo-13: Mission"})
    assert breakdown.phrase == pytest.approx(1.25)

    breakdown = _score("Apollo 13", {"title": "Mission to Apollo"})
    assert breakdown.phrase == 0.0


def test_token_overlap_ignores_stop_words():
    """Overlap compares significant query tokens with title tokens."""
    breakdown = _score("the rocky", {"title": "Rocky"})
    assert breakdown.overlap == pytest.approx(0.9)


def test_sequel_bonus_matches_variants():
    """A sequel number matches arabic, roman and word forms in the title."""
    for title in ("Rocky 2", "Rocky II", "Rocky Two"):
        assert _score("rocky 2", {"title": title}).sequel == pytest.approx(0.8)

    assert _score("rocky 2", {"title": "Rocky III"}).sequel == 0.0
    assert _score("rocky", {"title": "Rocky II"}).sequel == 0.0


def test_coverage_penalty_for_poor_title_match():
    """Long queries matching at most one title token are penalized."""
    penalized = _score("alpha beta gamma delta", {"title": "Alpha Zulu"})
    assert penalized.coverage == pytest.approx(-0.5)

    covered = _score("alpha beta gamma delta", {"title": "Alpha Beta"})
    assert covered.coverage == 0.0

    short_query = _score("alpha beta", {"title": "Zulu"})
    assert short_query.coverage == 0.0


def test_score_document_tolerates_missing_fields():
    """Documents without a title or any fields score without errors."""
    breakdown = _score("anything", {"identifier": "x"})
    assert breakdown.vector == 0.0
    assert breakdown.phrase == 0.0
    assert breakdown.fuzzy == 0.0
