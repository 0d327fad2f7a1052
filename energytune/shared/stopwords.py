"""
Consolidated stopword sets: single source for journal-text filtering.

Used by:
  - energytune.schemas.patterns (PatternOptions.stopwords default)
  - energytune.patterns.tokenizer (filtering before n-gram extraction)
"""
from __future__ import annotations

# Pattern stopwords: English function words plus the filler verbs people use
# when describing how a day went ("feeling", "getting").  Only closed-class
# words and fillers: topical words are down-weighted by TF-IDF, not listed here.
PATTERN_STOP = frozenset({
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "from", "as", "is", "was", "are", "were", "been",
    "be", "have", "has", "had", "do", "does", "did", "will", "would",
    "could", "should", "may", "might", "must", "can", "this", "that",
    "these", "those", "i", "you", "he", "she", "it", "we", "they",
    "what", "which", "who", "when", "where", "why", "how", "all", "each",
    "every", "both", "few", "more", "most", "other", "some", "such",
    "only", "own", "same", "so", "than", "too", "very", "just", "now",
    "feeling", "being", "having", "doing", "getting", "making",
})
