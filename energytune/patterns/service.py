"""
PatternService: async facade the insights screen talks to.

Per request:
  1. filter entries to the requested date window (inclusive)
  2. data-sufficiency gate: not ready → empty analysis with the gate outcome
  3. result cache: same (window, metric) → cached full ranking, concurrent
     identical requests share one pipeline run
  4. cut the ranking to top_n
"""

import logging
from datetime import date
from typing import Any, Iterable, List, Optional, Union

from energytune.config import Settings, get_settings
from energytune.schemas.base import CacheKey, MetricType
from energytune.schemas.entries import DailyEntry, coerce_entries
from energytune.schemas.patterns import PatternAnalysis, PatternOptions
from energytune.patterns.cache import PatternResultCache
from energytune.patterns.engine import extract_mentions, resolve_options, run_pipeline
from energytune.patterns.readiness import assess_data_readiness

logger = logging.getLogger(__name__)


def filter_entries_by_range(
    entries: Iterable[Any],
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[DailyEntry]:
    """Entries whose date lies in [start_date, end_date]; None = unbounded."""
    parsed = coerce_entries(entries)
    return [
        e for e in parsed
        if (start_date is None or e.date >= start_date)
        and (end_date is None or e.date <= end_date)
    ]


class PatternService:
    """Gate → cache → pipeline, shared by both metric types."""

    def __init__(
        self,
        options: Optional[PatternOptions] = None,
        settings: Optional[Settings] = None,
        cache: Optional[PatternResultCache] = None,
    ):
        self.settings = settings or get_settings()
        self.options = options or PatternOptions.from_settings(self.settings)
        self.cache = cache or PatternResultCache(
            max_entries=self.settings.pattern_cache_max_entries,
        )

    def invalidate(self) -> None:
        """Call after any entry is created, edited or deleted."""
        self.cache.invalidate()

    async def analyze(
        self,
        entries: Iterable[Any],
        metric_type: Union[MetricType, str],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        top_n: Optional[int] = None,
    ) -> PatternAnalysis:
        metric_type = MetricType(metric_type)
        options = (
            resolve_options(self.options, top_n=top_n) if top_n is not None else self.options
        )

        window = filter_entries_by_range(entries, start_date, end_date)
        readiness = assess_data_readiness(window, self.settings)
        if not readiness.has_enough_data:
            logger.info(
                f"Pattern analysis ({metric_type.value}) gated: {readiness.reason.value} "
                f"({readiness.progress.label})"
            )
            return PatternAnalysis(metric_type=metric_type, readiness=readiness)

        key = CacheKey(start_date, end_date, metric_type)

        def compute():
            mentions = extract_mentions(window, metric_type, self.options.split_sources)
            return run_pipeline(mentions, metric_type, self.options)

        result, from_cache = await self.cache.get_or_compute(key, compute)
        logger.debug(f"Pattern analysis {key}: from_cache={from_cache}")

        return PatternAnalysis(
            metric_type=metric_type,
            readiness=readiness,
            total_mentions=len(result.mentions),
            patterns=result.top(options.top_n),
            from_cache=from_cache,
        )
