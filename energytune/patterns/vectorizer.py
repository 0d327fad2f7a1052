"""
Vocabulary, document frequency and TF-IDF encoding for one pipeline run.

THE PROBLEM THIS SOLVES:
  Raw word overlap treats every shared word alike, so "exploring NEW parts of
  town" and "idea for NEW side project" look related. TF-IDF weights a term by
  how rare it is across the run's mentions: "new" (in many mentions) gets a
  low weight, "town" / "project" (in a few) dominate the comparison.

FORMULA (per mention d, corpus of N mentions):
  w(t,d) = (1 + ln tf(t,d)) × (ln((1 + N) / (1 + df(t))) + 1)

  - sublinear tf: a word repeated inside one mention is dampened
  - smoothed idf: the +1 terms avoid division by zero and keep terms present
    in every mention at weight 1 instead of 0

  Each row is then L2-normalized. A mention whose terms were all filtered out
  keeps an all-zero row and is flagged unclusterable.

The vocabulary is rebuilt from scratch on every run; indices are only stable
within that run.
"""

import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Sequence

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Vocabulary:
    """Term → column index, plus per-term document frequency."""
    term_index: Dict[str, int]
    terms: List[str]
    doc_freq: np.ndarray
    n_documents: int

    def __len__(self) -> int:
        return len(self.terms)

    def __contains__(self, term: str) -> bool:
        return term in self.term_index

    def df(self, term: str) -> int:
        """Number of documents containing `term` (0 if unseen)."""
        idx = self.term_index.get(term)
        return int(self.doc_freq[idx]) if idx is not None else 0

    def idf(self, term: str) -> float:
        """Smoothed inverse document frequency."""
        return math.log((1 + self.n_documents) / (1 + self.df(term))) + 1.0


@dataclass(frozen=True)
class TfidfMatrix:
    """L2-normalized TF-IDF rows, one per document."""
    matrix: np.ndarray
    vocabulary: Vocabulary
    clusterable: np.ndarray

    @property
    def n_documents(self) -> int:
        return self.matrix.shape[0]

    def vector(self, i: int) -> Dict[str, float]:
        """Sparse view of row i: {term: weight} for non-zero weights."""
        row = self.matrix[i]
        return {
            self.vocabulary.terms[j]: float(row[j])
            for j in np.flatnonzero(row)
        }


def build_vocabulary(documents: Sequence[Sequence[str]]) -> Vocabulary:
    """
    Assign every distinct term an index (first-seen order) and count how many
    documents contain it. Repeats within one document count once.
    """
    term_index: Dict[str, int] = {}
    df_counts: Counter = Counter()

    for doc in documents:
        for term in doc:
            if term not in term_index:
                term_index[term] = len(term_index)
        df_counts.update(set(doc))

    terms = list(term_index)
    doc_freq = np.array([df_counts[t] for t in terms], dtype=np.int64)

    logger.debug(
        f"Vocabulary: {len(terms)} terms from {len(documents)} documents"
    )
    return Vocabulary(
        term_index=term_index,
        terms=terms,
        doc_freq=doc_freq,
        n_documents=len(documents),
    )


def encode_tfidf(
    documents: Sequence[Sequence[str]],
    vocabulary: Vocabulary,
) -> TfidfMatrix:
    """Encode each document as a sublinear-tf × smoothed-idf, L2-normalized row."""
    n_docs = len(documents)
    n_terms = len(vocabulary)
    matrix = np.zeros((n_docs, n_terms), dtype=np.float64)

    idf = np.log((1.0 + n_docs) / (1.0 + vocabulary.doc_freq.astype(np.float64))) + 1.0

    for row, doc in enumerate(documents):
        if not doc:
            continue
        for term, count in Counter(doc).items():
            col = vocabulary.term_index.get(term)
            if col is None:
                continue
            matrix[row, col] = (1.0 + math.log(count)) * idf[col]

    norms = np.linalg.norm(matrix, axis=1)
    clusterable = norms > 0
    matrix[clusterable] = matrix[clusterable] / norms[clusterable][:, np.newaxis]

    n_zero = int(n_docs - clusterable.sum())
    if n_zero:
        logger.debug(f"TF-IDF: {n_zero}/{n_docs} documents have no usable terms")

    return TfidfMatrix(matrix=matrix, vocabulary=vocabulary, clusterable=clusterable)


def vectorize(documents: Sequence[Sequence[str]]) -> TfidfMatrix:
    """Build the vocabulary and encode in one step."""
    return encode_tfidf(documents, build_vocabulary(documents))
