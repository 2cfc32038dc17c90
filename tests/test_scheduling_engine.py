"""Tests for the single-participant scheduling engine."""

from datetime import timedelta

import pytest

from calendar_scheduler.config.settings import SchedulerSettings
from calendar_scheduler.models.entities import (
    ConflictInfo,
    ConflictSeverity,
    ConflictType,
    SchedulingConstraint,
    WorkingHours,
)
from calendar_scheduler.models.errors import InvalidConstraint
from calendar_scheduler.services.availability_index import AvailabilityIndex
from calendar_scheduler.services.scheduling_engine import SchedulingEngine


def hhmm(moment):
    return moment.strftime("%H:%M")


class TestFindOptimalTime:

    def test_busy_hour_excludes_overlapping_starts(self, engine, event, monday):
        busy = event(monday, "10:00", "11:00")
        suggestions = engine.find_optimal_time(
            SchedulingConstraint(duration=60),
            [busy],
            horizon_start=monday,
            horizon_days=1,
            max_suggestions=100
        )
        starts = {hhmm(s.slot.start) for s in suggestions}

        assert not starts & {"09:30", "10:00", "10:30"}
        assert {"09:00", "11:00"} <= starts

    def test_no_suggestion_overlaps_busy_events(self, engine, event, monday):
        events = [event(monday, "09:00", "12:00"), event(monday + timedelta(days=1), "13:00", "17:30")]
        suggestions = engine.find_optimal_time(
            SchedulingConstraint(duration=30), events, horizon_start=monday, horizon_days=2, max_suggestions=100
        )

        assert suggestions
        for suggestion in suggestions:
            assert all(not suggestion.slot.overlaps(e.interval) for e in events)

    def test_ranked_by_score_then_start(self, engine, monday):
        suggestions = engine.find_optimal_time(
            SchedulingConstraint(duration=60), [], horizon_start=monday, horizon_days=5
        )

        assert len(suggestions) == 5
        keys = [(-s.score, s.slot.start) for s in suggestions]
        assert keys == sorted(keys)

    def test_buffer_conflicts_are_attached(self, engine, event, monday):
        busy = event(monday, "10:10", "11:00", title="Coffee", id="coffee")
        suggestions = engine.find_optimal_time(
            SchedulingConstraint(duration=60),
            [busy],
            horizon_start=monday,
            horizon_days=1,
            max_suggestions=100
        )
        nine = next(s for s in suggestions if hhmm(s.slot.start) == "09:00")

        assert nine.conflicts == [
            ConflictInfo("coffee", "Coffee", ConflictType.BUFFER, ConflictSeverity.MEDIUM)
        ]

    def test_fully_booked_returns_nothing(self, engine, event, monday):
        busy = [event(monday + timedelta(days=d), "00:00", "23:59") for d in range(3)]
        suggestions = engine.find_optimal_time(
            SchedulingConstraint(duration=30), busy, horizon_start=monday, horizon_days=3
        )
        assert suggestions == []

    def test_custom_working_hours(self, engine, monday):
        suggestions = engine.find_optimal_time(
            SchedulingConstraint(duration=30),
            [],
            horizon_start=monday,
            horizon_days=1,
            working_hours=WorkingHours.from_hours(13, 15),
            max_suggestions=100
        )
        assert [hhmm(s.slot.start) for s in sorted(suggestions, key=lambda s: s.slot.start)] == [
            "13:00", "13:30", "14:00", "14:30"
        ]

    def test_invalid_constraint_raises(self, engine, monday):
        with pytest.raises(InvalidConstraint):
            engine.find_optimal_time(SchedulingConstraint(duration=0), [], horizon_start=monday)

    def test_serial_and_threaded_scoring_agree(self, event, monday):
        events = [
            event(monday, "10:00", "11:00"),
            event(monday, "13:30", "14:00", location="Gangnam"),
            event(monday + timedelta(days=2), "09:00", "09:45"),
        ]
        constraint = SchedulingConstraint(
            duration=30,
            buffer_before=10,
            buffer_after=10,
            location="Pangyo",
            avoid_ranges=[],
        )
        kwargs = dict(horizon_start=monday, horizon_days=5, max_suggestions=40)

        serial = SchedulingEngine(SchedulerSettings(max_workers=1)).find_optimal_time(constraint, events, **kwargs)
        threaded = SchedulingEngine(SchedulerSettings(max_workers=4)).find_optimal_time(constraint, events, **kwargs)

        assert [(s.slot, s.score, s.rationale, s.conflicts) for s in serial] == [
            (s.slot, s.score, s.rationale, s.conflicts) for s in threaded
        ]


class TestDetectConflicts:

    def test_uses_configured_buffer(self, interval, event, monday):
        busy = event(monday, "10:00", "11:00")
        slot = interval(monday, "11:20", "12:00")

        assert SchedulingEngine().detect_conflicts(slot, [busy]) == []
        wide = SchedulingEngine(SchedulerSettings(conflict_buffer_minutes=30))
        assert len(wide.detect_conflicts(slot, [busy])) == 1


class TestSuggestReschedule:

    def test_conflicting_event_no_longer_blocks(self, engine, event, monday):
        review = event(monday, "10:00", "11:00", title="Design review", id="review")
        other = event(monday, "14:00", "15:00", title="Sync", id="sync")
        conflict = ConflictInfo("review", "Design review", ConflictType.OVERLAP, ConflictSeverity.HIGH)

        suggestions = engine.suggest_reschedule(
            conflict,
            SchedulingConstraint(duration=60),
            [review, other],
            horizon_start=monday,
            horizon_days=1,
            max_suggestions=100
        )
        starts = {hhmm(s.slot.start) for s in suggestions}

        assert "10:00" in starts
        assert "14:00" not in starts
        assert all(
            s.rationale.startswith("Alternative to avoid the conflict with 'Design review'.")
            for s in suggestions
        )


class TestFindCommonSlots:

    def test_first_ten_common_slots(self, engine, event, monday):
        participant_events = {
            "a": [event(monday, "09:00", "12:00")],
            "b": [event(monday, "13:00", "14:00")],
        }
        slots = engine.find_common_slots(["a", "b"], 60, participant_events, horizon_start=monday)

        assert len(slots) == 10
        assert hhmm(slots[0].start) == "12:00"
        assert hhmm(slots[1].start) == "14:00"
        assert slots[-1].start == (monday + timedelta(days=1)).replace(hour=9, minute=30)

    def test_accepts_an_index(self, engine, event, monday):
        index = AvailabilityIndex({"a": [event(monday, "09:00", "18:00")]})
        slots = engine.find_common_slots(["a"], 30, index, horizon_start=monday, horizon_days=1)
        assert slots == []


class TestTravel:

    def test_delegates_to_estimator(self, engine):
        assert engine.estimate_travel_minutes("Gangnam", "Gangbuk") == 40
