"""Tests for conflict detection and the availability index."""

from calendar_scheduler.models.entities import BusyEvent, ConflictSeverity, ConflictType
from calendar_scheduler.services.availability_index import AvailabilityIndex
from calendar_scheduler.services.conflict_detector import (
    detect_conflicts,
    has_conflict,
    overlaps,
    within_buffer,
)


class TestOverlaps:

    def test_partial_overlap(self, interval, monday):
        assert overlaps(interval(monday, "09:00", "10:00"), interval(monday, "09:30", "10:30"))

    def test_touching_is_not_overlap(self, interval, monday):
        assert not overlaps(interval(monday, "09:00", "10:00"), interval(monday, "10:00", "11:00"))

    def test_containment(self, interval, monday):
        assert overlaps(interval(monday, "09:00", "12:00"), interval(monday, "10:00", "10:30"))


class TestWithinBuffer:

    def test_gap_inside_buffer_either_direction(self, interval, monday):
        a = interval(monday, "09:00", "10:00")
        b = interval(monday, "10:10", "11:00")
        assert within_buffer(a, b, 15)
        assert within_buffer(b, a, 15)

    def test_gap_equal_to_buffer_counts(self, interval, monday):
        assert within_buffer(interval(monday, "09:00", "10:00"), interval(monday, "10:15", "11:00"), 15)

    def test_zero_gap_is_not_buffer(self, interval, monday):
        assert not within_buffer(interval(monday, "09:00", "10:00"), interval(monday, "10:00", "11:00"), 15)

    def test_large_gap(self, interval, monday):
        assert not within_buffer(interval(monday, "09:00", "10:00"), interval(monday, "10:30", "11:00"), 15)


class TestDetectConflicts:

    def test_overlap_is_high(self, interval, event, monday):
        busy = event(monday, "10:00", "11:00", title="Sync", id="e1")
        conflicts = detect_conflicts(interval(monday, "10:30", "11:30"), [busy])

        assert len(conflicts) == 1
        assert conflicts[0].event_id == "e1"
        assert conflicts[0].event_title == "Sync"
        assert conflicts[0].conflict_type == ConflictType.OVERLAP
        assert conflicts[0].severity == ConflictSeverity.HIGH

    def test_buffer_is_medium(self, interval, event, monday):
        busy = event(monday, "10:00", "11:00")
        conflicts = detect_conflicts(interval(monday, "11:10", "11:40"), [busy])

        assert [(c.conflict_type, c.severity) for c in conflicts] == [
            (ConflictType.BUFFER, ConflictSeverity.MEDIUM)
        ]

    def test_at_most_one_entry_per_event(self, interval, event, monday):
        events = [event(monday, "10:00", "11:00"), event(monday, "11:05", "11:30")]
        conflicts = detect_conflicts(interval(monday, "10:30", "11:00"), events)

        assert [c.conflict_type for c in conflicts] == [ConflictType.OVERLAP, ConflictType.BUFFER]

    def test_no_conflicts(self, interval, event, monday):
        busy = event(monday, "13:00", "14:00")
        assert detect_conflicts(interval(monday, "09:00", "10:00"), [busy]) == []
        assert not has_conflict(interval(monday, "09:00", "10:00"), [busy])

    def test_custom_buffer(self, interval, event, monday):
        busy = event(monday, "10:00", "11:00")
        slot = interval(monday, "11:20", "12:00")
        assert detect_conflicts(slot, [busy], buffer_minutes=15) == []
        assert len(detect_conflicts(slot, [busy], buffer_minutes=30)) == 1


class TestAvailabilityIndex:

    def test_is_free(self, interval, event, monday):
        index = AvailabilityIndex({"a@x.com": [event(monday, "10:00", "11:00")]})

        assert not index.is_free("a@x.com", interval(monday, "10:30", "11:30"))
        assert index.is_free("a@x.com", interval(monday, "11:00", "12:00"))
        assert index.is_free("unknown@x.com", interval(monday, "10:30", "11:30"))

    def test_events_sorted(self, event, monday):
        late = event(monday, "15:00", "16:00")
        early = event(monday, "09:00", "10:00")
        index = AvailabilityIndex.for_single([late, early])

        assert index.participants == ["me"]
        assert index.events_for("me") == [early, late]

    def test_events_on_day(self, event, monday, tuesday):
        index = AvailabilityIndex({"a": [event(monday, "09:00", "10:00"), event(tuesday, "09:00", "10:00")]})
        assert len(index.events_on("a", tuesday.date())) == 1

    def test_all_events_deduplicates_shared_meetings(self, interval, monday):
        shared = interval(monday, "10:00", "11:00")
        index = AvailabilityIndex({
            "a": [BusyEvent("standup", "Standup", shared)],
            "b": [BusyEvent("standup", "Standup", shared)],
        })
        assert len(index.all_events()) == 1

    def test_conflicts_for(self, interval, event, monday):
        index = AvailabilityIndex({"a": [event(monday, "10:00", "11:00")]})
        conflicts = index.conflicts_for("a", interval(monday, "11:10", "11:40"))
        assert conflicts[0].conflict_type == ConflictType.BUFFER
