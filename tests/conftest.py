"""Shared fixtures and factories for the pattern engine tests.

- mention(): build a RawMention with sensible defaults
- entry(): build a DailyEntry the way the storage layer hands it over
- REGRESSION_TEXTS: the common-word scenario ("new" shared by unrelated phrases)
"""

from datetime import date, timedelta

import pytest

from energytune.config import Settings
from energytune.schemas import DailyEntry, MetricType, RawMention


# ─────────────────────────────────────────────────────────────────────────────
# Factories
# ─────────────────────────────────────────────────────────────────────────────

BASE_DATE = date(2025, 1, 10)

REGRESSION_TEXTS = [
    "exploring new parts of town",
    "idea for new side project",
    "exploring different parts of city",
    "working on side project",
    "discovered new area in town",
]


def day(n: int) -> date:
    """BASE_DATE shifted by n days."""
    return BASE_DATE + timedelta(days=n)


def mention(text, n=0, metric_type=MetricType.ENERGY, level=None, period=None) -> RawMention:
    return RawMention(date=day(n), metric_type=metric_type, text=text, level=level, period=period)


def regression_mentions():
    """The five regression mentions, one per day in listed order."""
    return [mention(text, n=i) for i, text in enumerate(REGRESSION_TEXTS)]


def entry(n=0, energy=None, stress=None, energy_levels=None, stress_levels=None) -> dict:
    """Storage-shaped (camelCase) entry dict."""
    record = {"date": day(n).isoformat()}
    if energy is not None:
        record["energySources"] = energy
    if stress is not None:
        record["stressSources"] = stress
    if energy_levels is not None:
        record["energyLevels"] = energy_levels
    if stress_levels is not None:
        record["stressLevels"] = stress_levels
    return record


def full_entries(count=5):
    """`count` entries that each carry both descriptions."""
    energy_texts = ["morning bike ride", "good sleep", "coffee with friends",
                    "morning bike ride to work", "quiet evening alone"]
    stress_texts = ["work deadline pressure", "traffic jam", "technical issues",
                    "tight deadline at work", "family conflict"]
    return [
        entry(
            i,
            energy=energy_texts[i % len(energy_texts)],
            stress=stress_texts[i % len(stress_texts)],
            energy_levels={"morning": 7, "evening": 8},
            stress_levels={"morning": 4},
        )
        for i in range(count)
    ]


# ─────────────────────────────────────────────────────────────────────────────
# Fixtures
# ─────────────────────────────────────────────────────────────────────────────

@pytest.fixture
def settings() -> Settings:
    """Settings with documented defaults, independent of the environment."""
    return Settings(_env_file=None)


@pytest.fixture
def daily_entries():
    return [DailyEntry.model_validate(e) for e in full_entries(5)]
