"""
Pattern recognition engine: journal descriptions → recurring themes.

Pipeline:
  tokenize → TF-IDF encode → cosine matrix → average-link clustering → label/rank

Modules:
  - tokenizer.py: n-gram tokenizer with stopword and length filters
  - vectorizer.py: per-run vocabulary, document frequency, TF-IDF matrix
  - similarity.py: cosine similarity (+ legacy Jaccard diagnostics)
  - clustering.py: threshold-stopped average-link agglomerative clustering
  - labeling.py: medoid label, emoji, aggregation and ranking
  - readiness.py: data-sufficiency gate and onboarding progress
  - cache.py: result cache with in-flight coalescing and invalidation
  - engine.py: pipeline entry points, mention extraction, logging setup
  - service.py: async facade (gate → cache → pipeline)
"""

from energytune.patterns.engine import (
    compute_top_patterns, run_pipeline, extract_mentions, pattern_sources,
    configure_logging, PipelineResult,
)
from energytune.patterns.readiness import assess_data_readiness, pattern_discovery_progress
from energytune.patterns.cache import PatternResultCache
from energytune.patterns.service import PatternService, filter_entries_by_range
from energytune.patterns.similarity import cosine_similarity, jaccard_similarity
from energytune.patterns.tokenizer import tokenize
