"""Core scheduling algorithm for a single participant."""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Iterable, Mapping, Optional, Sequence, Union

from calendar_scheduler.config.settings import DEFAULT_SETTINGS, SchedulerSettings
from calendar_scheduler.models.entities import (
    BusyEvent,
    ConflictInfo,
    ConflictType,
    ProductivityPattern,
    SchedulingConstraint,
    SchedulingSuggestion,
    TimeInterval,
    WorkingHours,
)
from calendar_scheduler.services.availability_index import AvailabilityIndex
from calendar_scheduler.services import conflict_detector
from calendar_scheduler.services.slot_generator import generate_slots
from calendar_scheduler.services.slot_scorer import SlotScorer
from calendar_scheduler.services.travel_time import TravelTimeEstimator

logger = logging.getLogger(__name__)

COMMON_SLOTS_HORIZON_DAYS = 7
MAX_COMMON_SLOTS = 10


def rank_suggestions(suggestions: Iterable[SchedulingSuggestion]) -> list[SchedulingSuggestion]:
    """Order by score (higher is better), ties broken by earlier start."""
    return sorted(suggestions, key=lambda s: (-s.score, s.slot.start))


def default_horizon_start() -> datetime:
    return datetime.now().replace(second=0, microsecond=0)


class SchedulingEngine:
    """Engine for finding optimal meeting time slots."""

    def __init__(
        self,
        settings: Optional[SchedulerSettings] = None,
        scorer: Optional[SlotScorer] = None,
        travel: Optional[TravelTimeEstimator] = None
    ):
        """Initialize scheduling engine."""
        self.settings = settings or DEFAULT_SETTINGS
        self.travel = travel or TravelTimeEstimator()
        self.scorer = scorer or SlotScorer(
            consecutive_window_minutes=self.settings.consecutive_window_minutes,
            travel=self.travel
        )

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "SchedulingEngine":
        """Build an engine from environment settings and configure logging to match."""
        settings = SchedulerSettings.from_env(dotenv_path)
        settings.configure_logging()
        return cls(settings)

    @property
    def default_working_hours(self) -> WorkingHours:
        return WorkingHours.from_hours(
            self.settings.working_hours_start,
            self.settings.working_hours_end
        )

    def find_optimal_time(
        self,
        constraint: SchedulingConstraint,
        existing_events: Sequence[BusyEvent],
        horizon_start: Optional[datetime] = None,
        horizon_days: Optional[int] = None,
        working_hours: Optional[WorkingHours] = None,
        exclude_weekends: bool = True,
        pattern: Optional[ProductivityPattern] = None,
        max_suggestions: Optional[int] = None
    ) -> list[SchedulingSuggestion]:
        """
        Find the best slots for one participant.

        Args:
            constraint: Duration, preferred/avoid ranges, buffers and location
            existing_events: The participant's busy events
            horizon_start: Earliest start (defaults to now)
            horizon_days: Search horizon in days (defaults to settings)
            working_hours: Daily window (defaults to settings)
            exclude_weekends: Skip Saturdays and Sundays
            pattern: Optional learned pattern biasing the score
            max_suggestions: Maximum number of suggestions (defaults to settings)

        Returns:
            List of suggestions sorted by score (best first); empty when nothing fits
        """
        if horizon_start is None:
            horizon_start = default_horizon_start()
        if horizon_days is None:
            horizon_days = self.settings.horizon_days
        if working_hours is None:
            working_hours = self.default_working_hours
        if max_suggestions is None:
            max_suggestions = self.settings.max_suggestions

        slots = generate_slots(
            constraint,
            horizon_start,
            horizon_days,
            working_hours,
            exclude_weekends=exclude_weekends,
            granularity=self.settings.slot_granularity_minutes
        )

        events = sorted(existing_events, key=lambda e: (e.start, e.end, e.id))
        free_slots = [slot for slot in slots if not conflict_detector.has_conflict(slot, events)]

        def _score(slot: TimeInterval) -> SchedulingSuggestion:
            # Overlaps were filtered above, so only buffer conflicts remain
            conflicts = [
                c for c in self.detect_conflicts(slot, events)
                if c.conflict_type == ConflictType.BUFFER
            ]
            return self.scorer.score(slot, constraint, events, pattern=pattern, conflicts=conflicts)

        if self.settings.max_workers > 1 and len(free_slots) > 1:
            with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
                scored = list(executor.map(_score, free_slots))
        else:
            scored = [_score(slot) for slot in free_slots]

        ranked = rank_suggestions(scored)[:max_suggestions]

        logger.info(
            f"Scored {len(free_slots)} free slots, returning {len(ranked)} suggestions"
        )
        return ranked

    def detect_conflicts(
        self,
        candidate: TimeInterval,
        events: Iterable[BusyEvent]
    ) -> list[ConflictInfo]:
        """Overlap and buffer conflicts using the configured buffer."""
        return conflict_detector.detect_conflicts(
            candidate,
            events,
            self.settings.conflict_buffer_minutes
        )

    def suggest_reschedule(
        self,
        conflict: ConflictInfo,
        constraint: SchedulingConstraint,
        existing_events: Sequence[BusyEvent],
        **kwargs
    ) -> list[SchedulingSuggestion]:
        """
        Propose alternative slots for a meeting that hit a conflict.

        The conflicting event itself is left out of the busy list so the
        meeting being moved does not block its own new slot. Extra keyword
        arguments go to find_optimal_time.
        """
        remaining = [e for e in existing_events if e.id != conflict.event_id]
        suggestions = self.find_optimal_time(constraint, remaining, **kwargs)

        prefix = f"Alternative to avoid the conflict with '{conflict.event_title}'."
        for suggestion in suggestions:
            suggestion.rationale = f"{prefix} {suggestion.rationale}"
        return suggestions

    def find_common_slots(
        self,
        participant_ids: Sequence[str],
        duration: int,
        participant_events: Union[AvailabilityIndex, Mapping[str, Iterable[BusyEvent]]],
        horizon_start: Optional[datetime] = None,
        horizon_days: int = COMMON_SLOTS_HORIZON_DAYS,
        working_hours: Optional[WorkingHours] = None,
        limit: int = MAX_COMMON_SLOTS
    ) -> list[TimeInterval]:
        """
        Find slots where every listed participant is free.

        Args:
            participant_ids: Participants that must all be free
            duration: Meeting length in minutes
            participant_events: Busy events per participant
            horizon_start: Earliest start (defaults to now)
            horizon_days: Search horizon in days
            working_hours: Daily window (defaults to settings)
            limit: Maximum number of slots returned

        Returns:
            The first `limit` common slots in chronological order
        """
        if isinstance(participant_events, AvailabilityIndex):
            index = participant_events
        else:
            index = AvailabilityIndex(participant_events)

        slots = generate_slots(
            SchedulingConstraint(duration=duration),
            horizon_start or default_horizon_start(),
            horizon_days,
            working_hours or self.default_working_hours,
            granularity=self.settings.slot_granularity_minutes
        )

        common = []
        for slot in slots:
            if all(index.is_free(pid, slot) for pid in participant_ids):
                common.append(slot)
                if len(common) >= limit:
                    break

        logger.debug(f"Found {len(common)} common slots for {len(participant_ids)} participants")
        return common

    def estimate_travel_minutes(
        self,
        from_location: Optional[str],
        to_location: Optional[str]
    ) -> int:
        return self.travel.estimate_travel_minutes(from_location, to_location)

