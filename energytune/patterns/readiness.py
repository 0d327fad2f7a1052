"""
Data-sufficiency gate: decides whether pattern discovery should run at all.

Checks, in order (first failure wins):
  1. total entries            >= readiness_min_total_entries  (5)
  2. entries with energy text >= readiness_min_energy_entries (3)
  3. entries with stress text >= readiness_min_stress_entries (3)

A failing check reports the literal count toward its target ("3 of 5
entries", 2 remaining) with a user-facing message and next steps. Passing
all three also reports whether the energy/stress correlation view has enough
entries carrying both descriptions.

Never raises: malformed entries are skipped and counted as absent.
"""

import logging
from typing import Any, Iterable, Optional

from energytune.config import Settings, get_settings
from energytune.schemas.base import MetricType
from energytune.schemas.entries import coerce_entries
from energytune.schemas.readiness import (
    DataReadiness, PatternProgress, ReadinessProgress, ReadinessReason, ReadinessStats,
)

logger = logging.getLogger(__name__)

_NO_DATA_STEPS = [
    "Go to Entry screen and log your energy and stress levels",
    "Add descriptions about what gave you energy or stress",
]
_MORE_ENTRIES_STEPS = [
    "Keep logging daily entries with energy and stress levels",
    "Add detailed descriptions about what affects your energy and stress",
]
_ENERGY_STEPS = [
    'Add descriptions about what gives you energy (e.g., "good sleep", "workout", "coffee")',
    "Be specific about activities, foods, or situations that boost your energy",
]
_STRESS_STEPS = [
    'Add descriptions about what causes you stress (e.g., "tight deadlines", "traffic", "conflicts")',
    "Be specific about situations, people, or events that increase your stress",
]


def _not_ready(reason, message, current, needed, unit, next_steps, stats, advanced) -> DataReadiness:
    return DataReadiness(
        has_enough_data=False,
        reason=reason,
        message=message,
        progress=ReadinessProgress(current=current, needed=needed, unit=unit),
        next_steps=list(next_steps),
        stats=stats,
        can_do_advanced_analysis=False,
        advanced_progress=advanced,
    )


def assess_data_readiness(
    entries: Optional[Iterable[Any]],
    settings: Optional[Settings] = None,
) -> DataReadiness:
    """Run the three-step sufficiency check over a user's entries."""
    settings = settings or get_settings()
    req = settings.get_readiness_requirements()
    parsed = coerce_entries(entries)

    total = len(parsed)
    with_energy = sum(1 for e in parsed if e.has_description(MetricType.ENERGY))
    with_stress = sum(1 for e in parsed if e.has_description(MetricType.STRESS))
    with_both = sum(
        1 for e in parsed
        if e.has_description(MetricType.ENERGY) and e.has_description(MetricType.STRESS)
    )
    stats = ReadinessStats(
        total_entries=total,
        energy_entries=with_energy,
        stress_entries=with_stress,
        both_entries=with_both,
    )
    advanced = ReadinessProgress(
        current=with_both,
        needed=req["min_correlation_entries"],
        unit="entries with both descriptions",
    )

    min_total = req["min_total_entries"]
    if total == 0 and min_total > 0:
        result = _not_ready(
            ReadinessReason.TOO_FEW_ENTRIES,
            "No data yet - start by adding your first energy and stress entry!",
            0, min_total, "entries", _NO_DATA_STEPS, stats, advanced,
        )
    elif total < min_total:
        result = _not_ready(
            ReadinessReason.TOO_FEW_ENTRIES,
            f"Need {min_total - total} more entries for pattern analysis",
            total, min_total, "entries", _MORE_ENTRIES_STEPS, stats, advanced,
        )
    elif with_energy < req["min_energy_entries"]:
        needed = req["min_energy_entries"]
        result = _not_ready(
            ReadinessReason.TOO_FEW_ENERGY_DESCRIPTIONS,
            f"Need {needed - with_energy} more entries with energy descriptions",
            with_energy, needed, "entries with energy descriptions", _ENERGY_STEPS, stats, advanced,
        )
    elif with_stress < req["min_stress_entries"]:
        needed = req["min_stress_entries"]
        result = _not_ready(
            ReadinessReason.TOO_FEW_STRESS_DESCRIPTIONS,
            f"Need {needed - with_stress} more entries with stress descriptions",
            with_stress, needed, "entries with stress descriptions", _STRESS_STEPS, stats, advanced,
        )
    else:
        result = DataReadiness(
            has_enough_data=True,
            reason=ReadinessReason.READY,
            message="Great! You have enough data for pattern analysis",
            progress=ReadinessProgress(current=total, needed=min_total),
            stats=stats,
            can_do_advanced_analysis=with_both >= req["min_correlation_entries"],
            advanced_progress=advanced,
        )

    logger.debug(
        f"Readiness: {result.reason.value} "
        f"(total={total}, energy={with_energy}, stress={with_stress}, both={with_both})"
    )
    return result


def pattern_discovery_progress(
    entries: Optional[Iterable[Any]],
    settings: Optional[Settings] = None,
) -> PatternProgress:
    """Onboarding indicator: days with any description toward the target."""
    settings = settings or get_settings()
    target = settings.pattern_progress_target_days
    parsed = coerce_entries(entries)

    days = sum(
        1 for e in parsed
        if e.has_description(MetricType.ENERGY) or e.has_description(MetricType.STRESS)
    )
    percentage = min(100.0, days * 100.0 / target) if target > 0 else 100.0

    return PatternProgress(
        days_with_sources=days,
        total_days=len(parsed),
        target_days=target,
        days_remaining=max(0, target - days),
        progress_percentage=percentage,
        has_enough_data=days >= settings.pattern_progress_ready_days,
    )
