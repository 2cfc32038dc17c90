"""Overlap and buffer-proximity checks between a candidate and busy events."""

from datetime import timedelta
from typing import Iterable

from calendar_scheduler.models.entities import (
    BusyEvent,
    ConflictInfo,
    ConflictSeverity,
    ConflictType,
    TimeInterval,
)

DEFAULT_BUFFER_MINUTES = 15


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    """Check if two time ranges overlap."""
    return a.start < b.end and a.end > b.start


def within_buffer(a: TimeInterval, b: TimeInterval, buffer_minutes: int) -> bool:
    """
    Check if two ranges sit close together without touching.

    True when a ends shortly before b starts, or b ends shortly before a
    starts, with a gap greater than zero and at most `buffer_minutes`.
    """
    buffer = timedelta(minutes=buffer_minutes)
    gap_after = b.start - a.end
    gap_before = a.start - b.end
    return (timedelta(0) < gap_after <= buffer) or (timedelta(0) < gap_before <= buffer)


def has_conflict(candidate: TimeInterval, events: Iterable[BusyEvent]) -> bool:
    """True if any event overlaps the candidate."""
    return any(overlaps(candidate, event.interval) for event in events)


def detect_conflicts(
    candidate: TimeInterval,
    events: Iterable[BusyEvent],
    buffer_minutes: int = DEFAULT_BUFFER_MINUTES
) -> list[ConflictInfo]:
    """
    Find events colliding with a candidate slot.

    Each event contributes at most one entry: an overlap (high severity) takes
    precedence over buffer proximity (medium severity).
    """
    conflicts = []

    for event in events:
        if overlaps(candidate, event.interval):
            conflicts.append(ConflictInfo(
                event_id=event.id,
                event_title=event.title,
                conflict_type=ConflictType.OVERLAP,
                severity=ConflictSeverity.HIGH
            ))
        elif within_buffer(candidate, event.interval, buffer_minutes):
            conflicts.append(ConflictInfo(
                event_id=event.id,
                event_title=event.title,
                conflict_type=ConflictType.BUFFER,
                severity=ConflictSeverity.MEDIUM
            ))

    return conflicts
