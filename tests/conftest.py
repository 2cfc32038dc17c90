"""
Pytest fixtures for the scheduling engine tests.

Provides:
- A fixed Monday horizon (2025-09-01) so results do not depend on the clock
- Factories for intervals, busy events and team members
- Settings and service instances
"""

from datetime import datetime, timedelta

import pytest

from calendar_scheduler.config.settings import SchedulerSettings
from calendar_scheduler.models.entities import (
    BusyEvent,
    MemberPriority,
    TeamMember,
    TimeInterval,
    WorkingHours,
)
from calendar_scheduler.services.pattern_cache import PatternCache
from calendar_scheduler.services.pattern_learner import PatternLearner
from calendar_scheduler.services.scheduling_engine import SchedulingEngine
from calendar_scheduler.services.team_coordinator import TeamCoordinator


# =============================================================================
# TIME FIXTURES
# =============================================================================

@pytest.fixture
def monday():
    """Midnight at the start of Monday 2025-09-01 (naive, reference-zone clock)."""
    return datetime(2025, 9, 1)


@pytest.fixture
def tuesday(monday):
    return monday + timedelta(days=1)


# =============================================================================
# FACTORIES
# =============================================================================

@pytest.fixture
def interval():
    """Build a TimeInterval from a day and "HH:MM" strings."""
    def _make(day: datetime, start: str, end: str) -> TimeInterval:
        sh, sm = map(int, start.split(":"))
        eh, em = map(int, end.split(":"))
        return TimeInterval(
            start=day.replace(hour=sh, minute=sm),
            end=day.replace(hour=eh, minute=em)
        )
    return _make


@pytest.fixture
def event(interval):
    """Build a BusyEvent on a day between two "HH:MM" times."""
    counter = {"n": 0}

    def _make(day: datetime, start: str, end: str, title: str = "Busy", location=None, id=None):
        counter["n"] += 1
        return BusyEvent(
            id=id or f"evt-{counter['n']}",
            title=title,
            interval=interval(day, start, end),
            location=location
        )
    return _make


@pytest.fixture
def member():
    """Build a TeamMember."""
    def _make(
        id: str,
        priority: MemberPriority = MemberPriority.REQUIRED,
        timezone=None,
        hours=(9, 18)
    ) -> TeamMember:
        return TeamMember(
            id=id,
            priority=priority,
            timezone=timezone,
            working_hours=WorkingHours.from_hours(*hours)
        )
    return _make


# =============================================================================
# SERVICE FIXTURES
# =============================================================================

@pytest.fixture
def settings():
    return SchedulerSettings()


@pytest.fixture
def engine(settings):
    return SchedulingEngine(settings=settings)


@pytest.fixture
def coordinator(settings):
    return TeamCoordinator(settings=settings)


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 9, 1, 8, 0))


@pytest.fixture
def cache(clock):
    return PatternCache(ttl=timedelta(hours=24), clock=clock)


@pytest.fixture
def learner(cache):
    return PatternLearner(cache=cache)
