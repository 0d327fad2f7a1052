"""
Pattern engine data models.

Defines the run configuration (PatternOptions), the per-run Cluster record and
the only entity that crosses the subsystem boundary, Pattern.

Lifecycle:
  RawMention[]  ──tokenize/TF-IDF/cluster──▶  Cluster[]  ──label/rank──▶  Pattern[]

Clusters are frozen once built. Patterns are plain pydantic records so UI and
export consumers can serialize them directly.
"""

import logging
from dataclasses import dataclass
from datetime import date as Date
from typing import FrozenSet, List, Optional, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator

from energytune.shared.helpers import format_label
from energytune.shared.stopwords import PATTERN_STOP

from .base import MetricType
from .readiness import DataReadiness

logger = logging.getLogger(__name__)

_MAX_NGRAM = 3


# ══════════════════════════════════════════════════════════════════════════════
# RUN CONFIGURATION
# ══════════════════════════════════════════════════════════════════════════════

class PatternOptions(BaseModel):
    """
    Explicit configuration for one pipeline run.

    Validated at construction, so a bad value (negative threshold, top_n=0,
    inverted n-gram range) fails fast with a pydantic ValidationError before
    any text is processed.
    """
    merge_threshold: float = Field(default=0.6, ge=0.0, le=1.0, allow_inf_nan=False)
    min_cluster_size: int = Field(default=1, ge=1)
    top_n: int = Field(default=3, ge=1)
    ngram_range: Tuple[int, int] = (1, 3)
    # Tokens shorter than this are dropped (3 = drop length <= 2)
    min_token_length: int = Field(default=3, ge=1)
    # Bigrams/trigrams shorter than these (in characters) are dropped
    min_bigram_length: int = Field(default=5, ge=0)
    min_trigram_length: int = Field(default=7, ge=0)
    stopwords: FrozenSet[str] = PATTERN_STOP
    split_sources: bool = False

    class Config:
        frozen = True

    @field_validator("ngram_range")
    @classmethod
    def validate_ngram_range(cls, v):
        low, high = v
        if not 1 <= low <= high <= _MAX_NGRAM:
            raise ValueError(
                f"ngram_range must satisfy 1 <= low <= high <= {_MAX_NGRAM}, got {v}"
            )
        return v

    @field_validator("stopwords", mode="before")
    @classmethod
    def validate_stopwords(cls, v):
        """Lower-case and strip stopwords so matching is case-insensitive."""
        if v is None:
            return PATTERN_STOP
        if isinstance(v, str):
            raise ValueError("stopwords must be a collection of words, not a string")
        return frozenset(str(w).strip().lower() for w in v if str(w).strip())

    @classmethod
    def from_settings(cls, settings=None, **overrides) -> "PatternOptions":
        """Default options from Settings (environment), with explicit overrides."""
        if settings is None:
            from energytune.config import get_settings
            settings = get_settings()
        values = {
            "merge_threshold": settings.pattern_merge_threshold,
            "min_cluster_size": settings.pattern_min_cluster_size,
            "top_n": settings.pattern_top_n,
            "split_sources": settings.pattern_split_sources,
        }
        values.update(overrides)
        return cls(**values)


# ══════════════════════════════════════════════════════════════════════════════
# CLUSTER: one group of mentions within a single run
# ══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Cluster:
    """A labeled group of mentions.

    `members` index into the run's canonical mention list (date, then text
    order), so they are only meaningful alongside that run's mentions.
    """
    members: Tuple[int, ...]
    label: str
    emoji: str
    dates: FrozenSet[Date]
    metric_type: MetricType
    medoid: int = -1

    @property
    def size(self) -> int:
        return len(self.members)


# ══════════════════════════════════════════════════════════════════════════════
# PATTERN: externally visible result
# ══════════════════════════════════════════════════════════════════════════════

class PatternSource(BaseModel):
    """One original mention behind a pattern, verbatim."""
    date: Date
    text: str

    class Config:
        frozen = True


class SubPattern(BaseModel):
    """A finer-grained theme inside a pattern, keyed by a shared phrase."""
    phrase: str
    label: str
    frequency: int = Field(ge=1)
    avg_level: Optional[float] = None
    # Up to 3 distinct texts and up to 5 dates, most recent first
    examples: List[str] = Field(default_factory=list)
    dates: List[Date] = Field(default_factory=list)
    recommendation: Optional[str] = None


class Pattern(BaseModel):
    """A recurring theme surfaced to the UI."""
    label: str
    emoji: str
    count: int = Field(ge=1)
    dates: List[Date] = Field(default_factory=list)
    sources: List[PatternSource] = Field(default_factory=list)
    metric_type: MetricType
    # Share of all mentions in the run, 0-100
    percentage: int = Field(default=0, ge=0, le=100)
    avg_level: Optional[float] = None
    recommendation: Optional[str] = None
    sub_patterns: List[SubPattern] = Field(default_factory=list)

    @field_validator("dates", mode="after")
    @classmethod
    def validate_dates(cls, v):
        """Dates are distinct calendar days in ascending order."""
        return sorted(set(v))

    @model_validator(mode="after")
    def validate_counts(self):
        if self.sources and self.count != len(self.sources):
            raise ValueError(
                f"count ({self.count}) must equal the number of sources ({len(self.sources)})"
            )
        if len(self.dates) > self.count:
            raise ValueError("a pattern cannot span more distinct days than mentions")
        return self

    @property
    def title(self) -> str:
        """Display label with every word capitalized."""
        return format_label(self.label)

    @property
    def last_seen(self) -> Optional[Date]:
        return self.dates[-1] if self.dates else None


class PatternAnalysis(BaseModel):
    """Service response: gate outcome plus the ranked patterns (if any)."""
    metric_type: MetricType
    readiness: DataReadiness
    total_mentions: int = 0
    patterns: List[Pattern] = Field(default_factory=list)
    from_cache: bool = False
