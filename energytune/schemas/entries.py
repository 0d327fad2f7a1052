"""
Journal entry and mention models.

DailyEntry mirrors what the storage layer hands over: one record per day with
optional free-text energy/stress descriptions and per-period ratings. Both
camelCase (storage JSON) and snake_case field names are accepted.

RawMention is the unit the pattern engine clusters: one non-blank description
of one metric on one day. It is rebuilt from entries on every query and never
persisted.

Validators coerce sloppy optional fields (None, wrong container types) instead
of failing the whole entry; every coercion is logged.
"""

import logging
from collections import abc
from datetime import date as Date
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from .base import MetricType

logger = logging.getLogger(__name__)

# Source descriptions are either one string for the whole day or a mapping of
# time-of-day sub-entries ("morning", "afternoon", "evening").
SourceField = Union[str, Dict[str, str], None]

_PERIOD_ORDER = {"day": 0, "morning": 1, "afternoon": 2, "evening": 3}


class DailyEntry(BaseModel):
    """One day of journal data as supplied by the entry service."""
    date: Date
    energy_sources: SourceField = Field(default=None, alias="energySources")
    stress_sources: SourceField = Field(default=None, alias="stressSources")
    energy_levels: Dict[str, float] = Field(default_factory=dict, alias="energyLevels")
    stress_levels: Dict[str, float] = Field(default_factory=dict, alias="stressLevels")

    class Config:
        populate_by_name = True
        extra = "ignore"

    @field_validator("energy_sources", "stress_sources", mode="before")
    @classmethod
    def validate_sources(cls, v):
        """Keep strings and string-valued mappings; drop anything else."""
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, dict):
            kept = {
                str(period): text for period, text in v.items()
                if isinstance(text, str)
            }
            if len(kept) != len(v):
                logger.debug(f"Dropped {len(v) - len(kept)} non-text source sub-entries")
            return kept
        logger.warning(f"Ignoring source field of type {type(v).__name__}")
        return None

    @field_validator("energy_levels", "stress_levels", mode="before")
    @classmethod
    def validate_levels(cls, v):
        """Coerce to {period: float}, dropping missing or non-numeric ratings."""
        if v is None:
            return {}
        if not isinstance(v, dict):
            logger.warning(f"Ignoring levels of type {type(v).__name__}")
            return {}
        levels = {}
        for period, value in v.items():
            if value is None or isinstance(value, bool):
                continue
            try:
                levels[str(period)] = float(value)
            except (TypeError, ValueError):
                logger.debug(f"Dropped non-numeric level {period}={value!r}")
        return levels

    def source_texts(self, metric_type: MetricType) -> List[Tuple[Optional[str], str]]:
        """Non-blank descriptions for a metric as (period, text) pairs.

        A plain string yields a single pair with period None; a mapping
        yields one pair per non-blank sub-entry in time-of-day order.
        """
        raw = getattr(self, metric_type.source_field)
        if raw is None:
            return []
        if isinstance(raw, str):
            return [(None, raw)] if raw.strip() else []
        periods = sorted(raw, key=lambda p: (_PERIOD_ORDER.get(p, len(_PERIOD_ORDER)), p))
        return [(p, raw[p]) for p in periods if raw[p].strip()]

    def has_description(self, metric_type: MetricType) -> bool:
        return bool(self.source_texts(metric_type))

    def average_level(self, metric_type: MetricType) -> Optional[float]:
        levels = getattr(self, metric_type.levels_field)
        if not levels:
            return None
        return sum(levels.values()) / len(levels)


class RawMention(BaseModel):
    """A single non-blank description of one metric on one day."""
    date: Date
    metric_type: MetricType
    text: str
    level: Optional[float] = None
    period: Optional[str] = None

    class Config:
        frozen = True

    @field_validator("text", mode="before")
    @classmethod
    def validate_text(cls, v):
        """Reject non-string or blank text; the text itself is kept verbatim."""
        if not isinstance(v, str):
            raise ValueError(f"mention text must be a string, got {type(v).__name__}")
        if not v.strip():
            raise ValueError("mention text is blank")
        return v


def coerce_entries(items: Iterable[Any]) -> List[DailyEntry]:
    """Validate storage records into DailyEntry, skipping malformed ones.

    Accepts DailyEntry instances or plain dicts (camelCase or snake_case).
    """
    if items is None:
        return []
    if isinstance(items, (str, bytes, dict)) or not isinstance(items, abc.Iterable):
        logger.warning(f"Expected a sequence of entries, got {type(items).__name__}")
        return []

    entries: List[DailyEntry] = []
    skipped = 0
    for item in items:
        if isinstance(item, DailyEntry):
            entries.append(item)
            continue
        try:
            entries.append(DailyEntry.model_validate(item))
        except ValidationError as e:
            skipped += 1
            logger.warning(f"Skipping malformed entry: {e.error_count()} validation error(s)")
    if skipped:
        logger.info(f"Entries: kept {len(entries)}, skipped {skipped} malformed")
    return entries
