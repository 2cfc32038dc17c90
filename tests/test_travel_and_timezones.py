"""Tests for travel time estimates and the static timezone table."""

from datetime import datetime

import pytest

from calendar_scheduler.services.timezones import (
    is_known_zone,
    relative_offset_minutes,
    shift_minute_of_day,
    to_member_local,
)
from calendar_scheduler.services.travel_time import TravelTimeEstimator, match_place


class TestTravelTime:

    @pytest.fixture
    def estimator(self):
        return TravelTimeEstimator()

    def test_known_places_are_symmetric(self, estimator):
        assert estimator.estimate_travel_minutes("Gangnam office", "Pangyo campus") == 30
        assert estimator.estimate_travel_minutes("Pangyo campus", "Gangnam office") == 30

    def test_korean_keywords(self, estimator):
        assert estimator.estimate_travel_minutes("강남역", "여의도") == 25

    def test_same_location_is_zero(self, estimator):
        assert estimator.estimate_travel_minutes("Room 4A", "room 4a") == 0

    def test_missing_location_is_zero(self, estimator):
        assert estimator.estimate_travel_minutes(None, "Gangnam") == 0
        assert estimator.estimate_travel_minutes("Gangnam", "") == 0

    def test_unknown_places_use_default(self, estimator):
        assert estimator.estimate_travel_minutes("Cafe", "Library") == 20
        assert TravelTimeEstimator(default_minutes=45).estimate_travel_minutes("Cafe", "Library") == 45

    def test_match_place(self):
        assert match_place("YEOUIDO tower") == "yeouido"
        assert match_place("somewhere") is None


class TestTimezones:

    def test_relative_offset(self):
        assert relative_offset_minutes("Asia/Tokyo", "Asia/Seoul") == 0
        assert relative_offset_minutes("America/New_York", "Asia/Seoul") == -840
        assert relative_offset_minutes("Europe/London", "Asia/Seoul") == -540

    def test_unknown_zone_is_zero(self):
        assert not is_known_zone("Mars/Olympus")
        assert not is_known_zone(None)
        assert relative_offset_minutes("Mars/Olympus", "Asia/Seoul") == 0
        assert relative_offset_minutes(None, "Asia/Seoul") == 0

    def test_shift_wraps_midnight(self):
        assert shift_minute_of_day(23 * 60, 120) == 60
        assert shift_minute_of_day(60, -120) == 23 * 60

    def test_to_member_local_from_naive_reference_time(self):
        local = to_member_local(datetime(2025, 9, 1, 10, 0), "America/Los_Angeles", "Asia/Seoul")
        # 10:00 in Seoul is 17:00 the previous day at UTC-8
        assert (local.day, local.hour) == (31, 17)

    def test_to_member_local_unknown_zone_keeps_clock(self):
        local = to_member_local(datetime(2025, 9, 1, 10, 0), None, "Asia/Seoul")
        assert local.hour == 10
