"""Learns productivity patterns from a caller-supplied event history."""

import logging
from collections import Counter, defaultdict
from typing import Iterable, Optional

from calendar_scheduler.models.entities import BusyEvent, ProductivityPattern
from calendar_scheduler.models.meeting_types import category_label
from calendar_scheduler.services.pattern_cache import PatternCache

logger = logging.getLogger(__name__)

MIN_EVENTS_FOR_PATTERN = 5
TOP_HOURS = 3
BOTTOM_HOURS = 2
TOP_WEEKDAYS = 3
FATIGUE_EVENT_THRESHOLD = 3


def _ranked(counter: Counter) -> list[int]:
    """Keys ordered by count desc, then value asc."""
    return [value for value, _ in sorted(counter.items(), key=lambda item: (-item[1], item[0]))]


class PatternLearner:
    """Builds ProductivityPatterns and keeps them in a PatternCache."""

    def __init__(
        self,
        cache: Optional[PatternCache] = None,
        min_events: int = MIN_EVENTS_FOR_PATTERN
    ):
        self.cache = cache if cache is not None else PatternCache()
        self.min_events = min_events

    def learn_patterns(self, subject_id: str, events: Iterable[BusyEvent]) -> ProductivityPattern:
        """
        Derive a usage pattern from past events.

        Args:
            subject_id: Opaque key (user or team) the pattern is cached under
            events: Historical busy events

        Returns:
            ProductivityPattern; neutral when there are fewer than `min_events` events
        """
        events = list(events)

        if len(events) < self.min_events:
            logger.debug(
                f"Only {len(events)} events for {subject_id}, returning a neutral pattern"
            )
            pattern = ProductivityPattern(subject_id=subject_id, sample_size=len(events))
            self.cache.set(subject_id, pattern)
            return pattern

        hour_counts = Counter(e.start.hour for e in events)
        weekday_counts = Counter(e.start.weekday() for e in events)

        ranked_hours = _ranked(hour_counts)
        most_productive = ranked_hours[:TOP_HOURS]

        # Least productive: lowest counts, never one of the top hours
        ascending = sorted(hour_counts.items(), key=lambda item: (item[1], item[0]))
        least_productive = [
            hour for hour, _ in ascending if hour not in most_productive
        ][:BOTTOM_HOURS]

        optimal_weekdays = _ranked(weekday_counts)[:TOP_WEEKDAYS]

        fatigue_bands = [
            f"{hour:02d}:00"
            for hour in sorted(hour_counts)
            if hour_counts[hour] > FATIGUE_EVENT_THRESHOLD
        ]

        durations = defaultdict(list)
        for event in events:
            durations[category_label(event.title)].append(event.interval.duration_minutes)
        avg_duration = {
            category: round(sum(values) / len(values))
            for category, values in sorted(durations.items())
        }

        pattern = ProductivityPattern(
            subject_id=subject_id,
            most_productive_hours=most_productive,
            least_productive_hours=least_productive,
            optimal_weekdays=optimal_weekdays,
            fatigue_time_bands=fatigue_bands,
            avg_duration_by_category=avg_duration,
            sample_size=len(events)
        )
        self.cache.set(subject_id, pattern)

        logger.info(
            f"Learned pattern for {subject_id} from {len(events)} events "
            f"(peak hours {most_productive})"
        )
        return pattern

    def get_pattern(self, subject_id: str) -> Optional[ProductivityPattern]:
        """Cached pattern for a subject, if still fresh."""
        return self.cache.get(subject_id)

    def forget(self, subject_id: str) -> bool:
        return self.cache.invalidate(subject_id)
