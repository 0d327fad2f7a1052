"""
N-gram tokenizer for short journal phrases.

Turns "Exploring new parts of town!" into
  unigrams:  exploring, new, parts, town
  bigrams:   exploring new, new parts, parts town
  trigrams:  exploring new parts, new parts town

N-grams are built from the FILTERED unigram sequence, so "parts of town"
yields the bigram "parts town". Duplicates are kept because term frequency
feeds the TF-IDF weights downstream.

Length filters:
  - unigrams of length <= 2 are dropped ("go", "ok")
  - bigrams of <= 4 characters and trigrams of <= 6 characters are dropped,
    which removes degenerate phrases built from very short words
"""

import re
from typing import List, Optional

from energytune.schemas.patterns import PatternOptions

_NON_WORD = re.compile(r"\W+")

_DEFAULT_OPTIONS = PatternOptions()


def _words(text: str, options: PatternOptions) -> List[str]:
    """Lower-case word tokens with short words and stopwords removed."""
    words = _NON_WORD.sub(" ", text.lower()).split()
    return [
        w for w in words
        if len(w) >= options.min_token_length and w not in options.stopwords
    ]


def tokenize(text: str, options: Optional[PatternOptions] = None) -> List[str]:
    """
    Tokenize into unigrams + bigrams + trigrams, in that order.

    Non-string, empty or whitespace-only input yields an empty list.
    """
    if not isinstance(text, str) or not text.strip():
        return []
    options = options or _DEFAULT_OPTIONS
    low, high = options.ngram_range

    filtered = _words(text, options)
    tokens: List[str] = []

    # Unigrams
    if low <= 1:
        tokens.extend(filtered)

    # Bigrams
    if low <= 2 <= high and len(filtered) >= 2:
        for i in range(len(filtered) - 1):
            bigram = f"{filtered[i]} {filtered[i + 1]}"
            if len(bigram) >= options.min_bigram_length:
                tokens.append(bigram)

    # Trigrams
    if high >= 3 and len(filtered) >= 3:
        for i in range(len(filtered) - 2):
            trigram = f"{filtered[i]} {filtered[i + 1]} {filtered[i + 2]}"
            if len(trigram) >= options.min_trigram_length:
                tokens.append(trigram)

    return tokens


def extract_phrases(text: str, options: Optional[PatternOptions] = None) -> List[str]:
    """Distinct bigram/trigram phrases of a text, in first-seen order.

    This is the phrase set the legacy word-overlap grouping compared.
    """
    options = options or _DEFAULT_OPTIONS
    phrases = [t for t in tokenize(text, options) if " " in t]
    return list(dict.fromkeys(phrases))
