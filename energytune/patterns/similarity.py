"""
Similarity engine: cosine similarity over TF-IDF vectors, plus the legacy
word-overlap (Jaccard) scores kept for diagnostics.

Properties the cosine functions guarantee:
  - symmetry: cosine(a, b) == cosine(b, a), bit for bit
  - self-similarity: 1.0 for any non-zero vector
  - range [0, 1]: TF-IDF weights are never negative, so values are clipped
    into [0, 1] to absorb floating-point overshoot
  - zero-norm operand → 0.0

LEGACY JACCARD (do NOT cluster with it):
  Intersection-over-union of word sets gives every shared word the same
  weight. Two short phrases sharing one common word ("new parts" /
  "new side") already score 1/3, above the 0.3 grouping cutoff the old
  phrase-grouping used. Kept only to compare against the TF-IDF signal.
"""

import logging
from itertools import product
from typing import Optional

import numpy as np
from sklearn.metrics.pairwise import cosine_similarity as sk_cosine_similarity

from energytune.schemas.patterns import PatternOptions
from energytune.patterns.tokenizer import extract_phrases

logger = logging.getLogger(__name__)


def cosine_similarity(vec_a: np.ndarray, vec_b: np.ndarray) -> float:
    """Cosine similarity of two 1-D vectors (0.0 if either has zero norm)."""
    a = np.asarray(vec_a, dtype=np.float64)
    b = np.asarray(vec_b, dtype=np.float64)
    if a.size == 0 or b.size == 0:
        return 0.0

    norm_a = float(np.linalg.norm(a))
    norm_b = float(np.linalg.norm(b))
    if norm_a == 0 or norm_b == 0:
        return 0.0

    # norm_a * norm_b commutes exactly, and dot() sums in index order,
    # so swapping the operands gives the identical float.
    sim = float(np.dot(a, b)) / (norm_a * norm_b)
    return min(1.0, max(0.0, sim))


def similarity_matrix(matrix: np.ndarray) -> np.ndarray:
    """
    Pairwise cosine similarity for every row pair, computed once per run.

    The result is exactly symmetric, clipped to [0, 1], with 1.0 on the
    diagonal for non-zero rows and 0.0 rows/columns for zero rows.
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    n = matrix.shape[0]
    if n == 0:
        return np.zeros((0, 0), dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[1] == 0:
        return np.zeros((n, n), dtype=np.float64)

    sims = sk_cosine_similarity(matrix)
    sims = (sims + sims.T) / 2.0
    np.clip(sims, 0.0, 1.0, out=sims)

    nonzero = np.linalg.norm(matrix, axis=1) > 0
    diag = np.where(nonzero, 1.0, 0.0)
    np.fill_diagonal(sims, diag)
    sims[~nonzero, :] = 0.0
    sims[:, ~nonzero] = 0.0
    return sims


def jaccard_similarity(text_a: str, text_b: str) -> float:
    """Word-set Jaccard of two raw texts (lower-cased, split on whitespace).

    Diagnostic only: vulnerable to common-word false positives.
    """
    words_a = set(str(text_a).lower().split())
    words_b = set(str(text_b).lower().split())
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)


def legacy_phrase_similarity(
    text_a: str,
    text_b: str,
    options: Optional[PatternOptions] = None,
) -> float:
    """
    The old phrase-grouping score: the highest Jaccard between any phrase of
    one mention and any phrase of the other.

    Diagnostic only. "exploring new parts of town" vs "idea for new side
    project" scores 1/3 here ("new parts" vs "new side") even though the
    mentions are unrelated.
    """
    phrases_a = extract_phrases(text_a, options)
    phrases_b = extract_phrases(text_b, options)
    if not phrases_a or not phrases_b:
        return 0.0
    return max(jaccard_similarity(pa, pb) for pa, pb in product(phrases_a, phrases_b))
