"""
Configuration management for the EnergyTune pattern engine.
Defaults are overridable through environment variables or a local .env file.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Clustering (average-link agglomerative, threshold-stopped) ──
    # Mean pairwise cosine similarity two groups need before they merge.
    # Inclusive: a pair scoring exactly the threshold is merged.
    # 0.6 = only clearly related phrases merge (RECOMMENDED for UI patterns)
    # 0.1 = aggressive grouping, useful for tiny corpora in diagnostics
    pattern_merge_threshold: float = Field(default=0.6, alias="PATTERN_MERGE_THRESHOLD")
    # Smallest cluster surfaced as a pattern (1 = singletons are shown too)
    pattern_min_cluster_size: int = Field(default=1, alias="PATTERN_MIN_CLUSTER_SIZE")
    pattern_top_n: int = Field(default=3, alias="PATTERN_TOP_N")
    # Split a source field on ',' / ';' into several mentions
    pattern_split_sources: bool = Field(default=False, alias="PATTERN_SPLIT_SOURCES")

    # ── Result cache ──
    pattern_cache_max_entries: int = Field(default=32, alias="PATTERN_CACHE_MAX_ENTRIES")

    # ── Data-sufficiency gate ──
    readiness_min_total_entries: int = Field(default=5, alias="READINESS_MIN_TOTAL_ENTRIES")
    readiness_min_energy_entries: int = Field(default=3, alias="READINESS_MIN_ENERGY_ENTRIES")
    readiness_min_stress_entries: int = Field(default=3, alias="READINESS_MIN_STRESS_ENTRIES")
    # Entries with both descriptions needed by the energy/stress correlation view
    readiness_min_correlation_entries: int = Field(default=7, alias="READINESS_MIN_CORRELATION_ENTRIES")

    # ── Pattern discovery progress (onboarding indicator) ──
    pattern_progress_target_days: int = Field(default=10, alias="PATTERN_PROGRESS_TARGET_DAYS")
    pattern_progress_ready_days: int = Field(default=7, alias="PATTERN_PROGRESS_READY_DAYS")

    # ── Logging ──
    pattern_log_level: str = Field(default="INFO", alias="PATTERN_LOG_LEVEL")
    # Empty = console only
    pattern_log_file: str = Field(default="", alias="PATTERN_LOG_FILE")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        populate_by_name = True

    def get_readiness_requirements(self) -> dict:
        """Thresholds used by the data-sufficiency gate."""
        return {
            "min_total_entries": self.readiness_min_total_entries,
            "min_energy_entries": self.readiness_min_energy_entries,
            "min_stress_entries": self.readiness_min_stress_entries,
            "min_correlation_entries": self.readiness_min_correlation_entries,
        }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
