"""Tests for vocabulary building and TF-IDF encoding."""

import math

import numpy as np
import pytest

from energytune.patterns.tokenizer import tokenize
from energytune.patterns.vectorizer import build_vocabulary, encode_tfidf, vectorize


def test_vocabulary_first_seen_order_and_doc_freq():
    docs = [["bike", "ride", "bike"], ["ride", "home"], []]
    vocab = build_vocabulary(docs)

    assert vocab.terms == ["bike", "ride", "home"]
    assert vocab.term_index == {"bike": 0, "ride": 1, "home": 2}
    # Repeats within a document count once
    assert vocab.df("bike") == 1
    assert vocab.df("ride") == 2
    assert vocab.df("missing") == 0
    assert vocab.n_documents == 3
    assert len(vocab) == 3 and "home" in vocab


def test_idf_is_smoothed():
    vocab = build_vocabulary([["a1x"], ["a1x"], ["b2y"]])
    assert vocab.idf("a1x") == pytest.approx(math.log(4 / 3) + 1)
    assert vocab.idf("b2y") == pytest.approx(math.log(4 / 2) + 1)
    # Term in every document keeps weight 1, not 0
    everywhere = build_vocabulary([["x1x"], ["x1x"]])
    assert everywhere.idf("x1x") == pytest.approx(1.0)


def test_weights_use_sublinear_tf():
    docs = [["bike", "bike", "ride"], ["home"]]
    tfidf = encode_tfidf(docs, build_vocabulary(docs))

    idf = math.log(3 / 2) + 1
    raw_bike = (1 + math.log(2)) * idf
    raw_ride = 1.0 * idf
    norm = math.hypot(raw_bike, raw_ride)

    vec = tfidf.vector(0)
    assert vec["bike"] == pytest.approx(raw_bike / norm)
    assert vec["ride"] == pytest.approx(raw_ride / norm)
    assert "home" not in vec


def test_rows_are_l2_normalized():
    docs = [tokenize(t) for t in ["morning bike ride", "bike ride to work", "quiet evening alone"]]
    tfidf = vectorize(docs)
    norms = np.linalg.norm(tfidf.matrix, axis=1)
    assert np.allclose(norms, 1.0)
    assert tfidf.clusterable.all()


def test_empty_document_is_unclusterable():
    docs = [tokenize("morning walk"), tokenize("and the of"), []]
    tfidf = vectorize(docs)

    assert tfidf.clusterable.tolist() == [True, False, False]
    assert not tfidf.matrix[1].any()
    assert tfidf.vector(2) == {}
    assert tfidf.n_documents == 3


def test_no_documents():
    tfidf = vectorize([])
    assert tfidf.matrix.shape == (0, 0)
    assert tfidf.n_documents == 0
