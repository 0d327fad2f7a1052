"""
Data-sufficiency models.

Insufficient data is the normal state for a new user, so the gate reports it
as a structured result (reason + literal progress) instead of an error.
"""

from enum import Enum
from typing import List

from pydantic import BaseModel, Field


class ReadinessReason(str, Enum):
    """First unmet requirement, in the order the gate checks them."""
    READY = "ready"
    TOO_FEW_ENTRIES = "too_few_entries"
    TOO_FEW_ENERGY_DESCRIPTIONS = "too_few_energy_descriptions"
    TOO_FEW_STRESS_DESCRIPTIONS = "too_few_stress_descriptions"


class ReadinessProgress(BaseModel):
    """Count toward a target, e.g. 3 of 5 entries."""
    current: int = Field(ge=0)
    needed: int = Field(ge=0)
    unit: str = "entries"

    @property
    def remaining(self) -> int:
        return max(0, self.needed - self.current)

    @property
    def percentage(self) -> int:
        if self.needed <= 0:
            return 100
        return min(100, round(self.current * 100 / self.needed))

    @property
    def label(self) -> str:
        return f"{self.current} of {self.needed} {self.unit}"


class ReadinessStats(BaseModel):
    total_entries: int = 0
    energy_entries: int = 0
    stress_entries: int = 0
    both_entries: int = 0


class DataReadiness(BaseModel):
    """Outcome of the data-sufficiency gate."""
    has_enough_data: bool
    reason: ReadinessReason
    message: str
    progress: ReadinessProgress
    next_steps: List[str] = Field(default_factory=list)
    stats: ReadinessStats = Field(default_factory=ReadinessStats)
    # Correlation view: needs entries carrying both descriptions
    can_do_advanced_analysis: bool = False
    advanced_progress: ReadinessProgress = Field(
        default_factory=lambda: ReadinessProgress(current=0, needed=0)
    )


class PatternProgress(BaseModel):
    """Onboarding indicator: days with any description toward a target."""
    days_with_sources: int = 0
    total_days: int = 0
    target_days: int = 10
    days_remaining: int = 10
    progress_percentage: float = 0.0
    has_enough_data: bool = False
