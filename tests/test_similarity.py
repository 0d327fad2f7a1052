"""Tests for cosine similarity and the legacy Jaccard diagnostics."""

import numpy as np
import pytest

from energytune.patterns.similarity import (
    cosine_similarity, jaccard_similarity, legacy_phrase_similarity, similarity_matrix,
)
from energytune.patterns.tokenizer import tokenize
from energytune.patterns.vectorizer import vectorize

from conftest import REGRESSION_TEXTS


def _regression_matrix():
    tfidf = vectorize([tokenize(t) for t in REGRESSION_TEXTS])
    return tfidf, similarity_matrix(tfidf.matrix)


def test_cosine_symmetric_and_bounded():
    rng = np.random.default_rng(7)
    for _ in range(20):
        a = rng.random(12)
        b = rng.random(12)
        ab = cosine_similarity(a, b)
        assert ab == cosine_similarity(b, a)
        assert 0.0 <= ab <= 1.0


def test_cosine_self_similarity_is_one():
    vec = np.array([0.2, 0.0, 0.7, 0.1])
    assert cosine_similarity(vec, vec) == pytest.approx(1.0)


def test_cosine_zero_vector():
    zero = np.zeros(4)
    assert cosine_similarity(zero, np.array([1.0, 0.0, 0.0, 0.0])) == 0.0
    assert cosine_similarity(zero, zero) == 0.0
    assert cosine_similarity(np.array([]), np.array([])) == 0.0


def test_matrix_properties():
    tfidf, sims = _regression_matrix()
    assert sims.shape == (5, 5)
    assert np.array_equal(sims, sims.T)
    assert np.all(sims >= 0.0) and np.all(sims <= 1.0)
    assert np.all(np.diag(sims) == 1.0)


def test_matrix_matches_pairwise_cosine():
    tfidf, sims = _regression_matrix()
    for i in range(5):
        for j in range(5):
            if i != j:
                assert sims[i, j] == pytest.approx(
                    cosine_similarity(tfidf.matrix[i], tfidf.matrix[j]), abs=1e-12
                )


def test_matrix_zero_rows():
    matrix = np.array([[0.6, 0.8], [0.0, 0.0]])
    sims = similarity_matrix(matrix)
    assert sims.tolist() == [[1.0, 0.0], [0.0, 0.0]]


def test_matrix_empty():
    assert similarity_matrix(np.zeros((0, 0))).shape == (0, 0)


def test_common_word_does_not_dominate_tfidf():
    _, sims = _regression_matrix()
    # "exploring new parts of town" vs "idea for new side project"
    assert sims[0, 1] < 0.6
    assert sims[0, 1] == pytest.approx(0.0606, abs=1e-3)
    # Topical pairs score higher than the common-word pair
    assert sims[0, 2] > sims[0, 1]
    assert sims[0, 4] > sims[0, 1]
    assert sims[1, 3] > sims[0, 1]


def test_legacy_phrase_jaccard_false_positive():
    # One shared word in two-word phrases already passes the old 0.3 cutoff
    score = legacy_phrase_similarity(REGRESSION_TEXTS[0], REGRESSION_TEXTS[1])
    assert score == pytest.approx(1 / 3)
    assert score > 0.3


def test_raw_jaccard():
    assert jaccard_similarity(REGRESSION_TEXTS[0], REGRESSION_TEXTS[1]) == pytest.approx(1 / 9)
    assert jaccard_similarity("Bike Ride", "bike ride") == 1.0
    assert jaccard_similarity("", "") == 0.0


def test_legacy_phrase_needs_phrases():
    assert legacy_phrase_similarity("gym", "gym") == 0.0
