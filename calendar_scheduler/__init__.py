"""Calendar scheduling engine: slot search, conflict detection and team coordination."""

from .config.settings import SchedulerSettings
from .services.pattern_learner import PatternLearner
from .services.scheduling_engine import SchedulingEngine
from .services.team_coordinator import TeamCoordinator

__version__ = "0.1.0"

__all__ = [
    "PatternLearner",
    "SchedulerSettings",
    "SchedulingEngine",
    "TeamCoordinator",
]
