"""
Common enums and value objects used across the pattern engine.

These are foundational types that don't belong to any specific pipeline
stage: which metric a mention describes, and the key results are cached under.
"""

from datetime import date
from enum import Enum
from typing import NamedTuple, Optional


class MetricType(str, Enum):
    """Which journal field a mention came from."""
    ENERGY = "energy"
    STRESS = "stress"

    @property
    def source_field(self) -> str:
        """Name of the DailyEntry attribute holding this metric's description."""
        return f"{self.value}_sources"

    @property
    def levels_field(self) -> str:
        return f"{self.value}_levels"


class CacheKey(NamedTuple):
    """Result-cache key: one date window for one metric type."""
    start_date: Optional[date]
    end_date: Optional[date]
    metric_type: MetricType
