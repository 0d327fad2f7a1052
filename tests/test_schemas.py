"""Tests for settings and boundary models."""

from datetime import date

import pytest
from pydantic import ValidationError

from energytune.config import Settings
from energytune.schemas import (
    DailyEntry, MetricType, PatternOptions, RawMention, ReadinessProgress, coerce_entries,
)
from energytune.shared import PATTERN_STOP, format_label, truncate_text


def test_settings_defaults(settings):
    assert settings.pattern_merge_threshold == 0.6
    assert settings.pattern_top_n == 3
    assert settings.pattern_min_cluster_size == 1
    assert settings.pattern_cache_max_entries == 32
    assert settings.get_readiness_requirements() == {
        "min_total_entries": 5,
        "min_energy_entries": 3,
        "min_stress_entries": 3,
        "min_correlation_entries": 7,
    }


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("PATTERN_MERGE_THRESHOLD", "0.45")
    monkeypatch.setenv("PATTERN_SPLIT_SOURCES", "true")
    settings = Settings(_env_file=None)
    assert settings.pattern_merge_threshold == 0.45
    assert settings.pattern_split_sources is True

    options = PatternOptions.from_settings(settings, top_n=5)
    assert options.merge_threshold == 0.45
    assert options.split_sources is True
    assert options.top_n == 5


def test_options_defaults_and_frozen():
    options = PatternOptions()
    assert options.merge_threshold == 0.6
    assert options.ngram_range == (1, 3)
    assert options.stopwords == PATTERN_STOP
    with pytest.raises(ValidationError):
        options.top_n = 5


def test_daily_entry_accepts_camel_and_snake_case():
    camel = DailyEntry.model_validate({
        "date": "2025-01-10", "energySources": "walk", "energyLevels": {"morning": "7"},
    })
    snake = DailyEntry(date=date(2025, 1, 10), energy_sources="walk", energy_levels={"morning": 7})
    assert camel == snake
    assert camel.energy_levels == {"morning": 7.0}


def test_daily_entry_coerces_sloppy_fields():
    entry = DailyEntry.model_validate({
        "date": "2025-01-10",
        "energySources": 12,
        "stressSources": {"morning": "traffic", "evening": None},
        "energyLevels": {"morning": None, "evening": "high", "afternoon": 6},
        "stressLevels": None,
    })
    assert entry.energy_sources is None
    assert entry.stress_sources == {"morning": "traffic"}
    assert entry.energy_levels == {"afternoon": 6.0}
    assert entry.stress_levels == {}
    assert entry.average_level(MetricType.ENERGY) == 6.0
    assert entry.average_level(MetricType.STRESS) is None


def test_raw_mention_keeps_text_verbatim():
    m = RawMention(date=date(2025, 1, 1), metric_type="stress", text="  Traffic JAM ")
    assert m.text == "  Traffic JAM "
    assert m.metric_type is MetricType.STRESS
    with pytest.raises(ValidationError):
        RawMention(date=date(2025, 1, 1), metric_type="energy", text=" ")


def test_coerce_entries_skips_invalid():
    entries = coerce_entries([{"date": "2025-01-01"}, {"date": "bad"}, 7])
    assert len(entries) == 1


def test_readiness_progress():
    progress = ReadinessProgress(current=3, needed=5)
    assert progress.remaining == 2
    assert progress.percentage == 60
    assert progress.label == "3 of 5 entries"
    assert ReadinessProgress(current=7, needed=5).remaining == 0


def test_helpers():
    assert format_label("alone_time with friends") == "Alone Time With Friends"
    assert truncate_text("x" * 50, 10) == "xxxxxxx..."
    assert truncate_text("short", 10) == "short"
