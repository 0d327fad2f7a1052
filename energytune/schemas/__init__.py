"""
Schemas package: all data models for the EnergyTune pattern engine.

Models are organized by concern in submodules:
  - base.py: MetricType enum and the cache key
  - entries.py: DailyEntry (storage input), RawMention (clustering unit)
  - patterns.py: PatternOptions, Cluster, PatternSource, SubPattern, Pattern, PatternAnalysis
  - readiness.py: DataReadiness and progress models for the sufficiency gate
"""

# base.py: enums and value objects
from energytune.schemas.base import MetricType, CacheKey

# entries.py: input models
from energytune.schemas.entries import DailyEntry, RawMention, coerce_entries

# readiness.py: gate models
from energytune.schemas.readiness import (
    ReadinessReason, ReadinessProgress, ReadinessStats, DataReadiness, PatternProgress,
)

# patterns.py: run configuration and results
from energytune.schemas.patterns import (
    PatternOptions, Cluster, PatternSource, SubPattern, Pattern, PatternAnalysis,
)

__all__ = [
    # base
    "MetricType", "CacheKey",
    # entries
    "DailyEntry", "RawMention", "coerce_entries",
    # readiness
    "ReadinessReason", "ReadinessProgress", "ReadinessStats", "DataReadiness", "PatternProgress",
    # patterns
    "PatternOptions", "Cluster", "PatternSource", "SubPattern", "Pattern", "PatternAnalysis",
]
