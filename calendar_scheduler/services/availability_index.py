"""Per-participant lookup of busy events."""

from datetime import date
from typing import Iterable, Mapping, Optional

from calendar_scheduler.models.entities import BusyEvent, ConflictInfo, TimeInterval
from calendar_scheduler.services.conflict_detector import (
    DEFAULT_BUFFER_MINUTES,
    detect_conflicts,
    overlaps,
)


class AvailabilityIndex:
    """Read-only index of busy events keyed by participant id."""

    def __init__(self, participant_events: Optional[Mapping[str, Iterable[BusyEvent]]] = None):
        """Copy and sort each participant's events by start time."""
        self._events: dict[str, list[BusyEvent]] = {}
        for participant_id, events in (participant_events or {}).items():
            self._events[participant_id] = sorted(events, key=lambda e: (e.start, e.end, e.id))

    @classmethod
    def for_single(cls, events: Iterable[BusyEvent], participant_id: str = "me") -> "AvailabilityIndex":
        """Index holding one participant's calendar."""
        return cls({participant_id: events})

    @property
    def participants(self) -> list[str]:
        return list(self._events.keys())

    def events_for(self, participant_id: str) -> list[BusyEvent]:
        """Busy events for a participant (empty when unknown)."""
        return list(self._events.get(participant_id, []))

    def events_on(self, participant_id: str, day: date) -> list[BusyEvent]:
        """Events starting on a given calendar day."""
        return [e for e in self._events.get(participant_id, []) if e.start.date() == day]

    def all_events(self) -> list[BusyEvent]:
        """
        Aggregate calendar across participants.

        An event shared by several participants (same id and interval) is
        listed once.
        """
        seen: set[tuple] = set()
        merged = []
        for events in self._events.values():
            for event in events:
                key = (event.id, event.start, event.end)
                if key in seen:
                    continue
                seen.add(key)
                merged.append(event)
        merged.sort(key=lambda e: (e.start, e.end, e.id))
        return merged

    def is_free(self, participant_id: str, interval: TimeInterval) -> bool:
        """True if no busy event of the participant overlaps the interval."""
        for event in self._events.get(participant_id, []):
            if event.start >= interval.end:
                break
            if overlaps(interval, event.interval):
                return False
        return True

    def conflicts_for(
        self,
        participant_id: str,
        interval: TimeInterval,
        buffer_minutes: int = DEFAULT_BUFFER_MINUTES
    ) -> list[ConflictInfo]:
        """Overlap and buffer conflicts for one participant."""
        return detect_conflicts(interval, self._events.get(participant_id, []), buffer_minutes)
