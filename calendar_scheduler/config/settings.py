"""
Configuration settings for the scheduling engine.

Values come from environment variables (optionally via a .env file) and fall
back to the defaults below.
"""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from calendar_scheduler.utils.logger import setup_logging


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class SchedulerSettings:
    """Tunable knobs for slot generation, scoring and caching."""

    # Working window used when the caller supplies none
    working_hours_start: int = 9
    working_hours_end: int = 18

    horizon_days: int = 14
    slot_granularity_minutes: int = 30
    max_suggestions: int = 5

    # Conflict buffer and back-to-back window are separate knobs
    conflict_buffer_minutes: int = 15
    consecutive_window_minutes: int = 30

    pattern_ttl_hours: int = 24
    min_pattern_events: int = 5

    # Offsets in the static timezone table are relative to this zone
    reference_timezone: str = "Asia/Seoul"

    # 1 = score slots serially
    max_workers: int = 1

    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "SchedulerSettings":
        """
        Build settings from the environment.

        Args:
            dotenv_path: Optional path to a .env file (defaults to searching from the CWD)

        Returns:
            SchedulerSettings with environment overrides applied
        """
        load_dotenv(dotenv_path)

        return cls(
            working_hours_start=_env_int("SCHEDULER_WORKING_HOURS_START", cls.working_hours_start),
            working_hours_end=_env_int("SCHEDULER_WORKING_HOURS_END", cls.working_hours_end),
            horizon_days=_env_int("SCHEDULER_HORIZON_DAYS", cls.horizon_days),
            slot_granularity_minutes=_env_int("SCHEDULER_SLOT_GRANULARITY", cls.slot_granularity_minutes),
            max_suggestions=_env_int("SCHEDULER_MAX_SUGGESTIONS", cls.max_suggestions),
            conflict_buffer_minutes=_env_int(
                "SCHEDULER_CONFLICT_BUFFER_MINUTES", cls.conflict_buffer_minutes
            ),
            consecutive_window_minutes=_env_int(
                "SCHEDULER_CONSECUTIVE_WINDOW_MINUTES", cls.consecutive_window_minutes
            ),
            pattern_ttl_hours=_env_int("SCHEDULER_PATTERN_TTL_HOURS", cls.pattern_ttl_hours),
            min_pattern_events=_env_int("SCHEDULER_MIN_PATTERN_EVENTS", cls.min_pattern_events),
            reference_timezone=os.getenv("SCHEDULER_REFERENCE_TIMEZONE", cls.reference_timezone),
            max_workers=_env_int("SCHEDULER_MAX_WORKERS", cls.max_workers),
            log_level=os.getenv("SCHEDULER_LOG_LEVEL", cls.log_level).upper(),
        )

    def configure_logging(self, log_file: Optional[str] = None) -> logging.Logger:
        """Apply `log_level` to the package logger."""
        return setup_logging(self.log_level, log_file)


DEFAULT_SETTINGS = SchedulerSettings()
