"""Static timezone offsets used for cross-zone scheduling.

This is a best-effort table of standard UTC offsets: no daylight saving and no
IANA rule evaluation. Zones missing from the table are treated as sharing the
reference zone's clock.
"""

from datetime import datetime
from typing import Optional

import pytz

# Standard UTC offsets in minutes
UTC_OFFSET_MINUTES: dict[str, int] = {
    "UTC": 0,
    "Etc/UTC": 0,
    "Asia/Seoul": 540,
    "Asia/Tokyo": 540,
    "Asia/Shanghai": 480,
    "Asia/Singapore": 480,
    "Asia/Kolkata": 330,
    "Europe/London": 0,
    "Europe/Paris": 60,
    "Europe/Berlin": 60,
    "America/New_York": -300,
    "America/Chicago": -360,
    "America/Denver": -420,
    "America/Los_Angeles": -480,
    "Australia/Sydney": 600,
}


def is_known_zone(zone: Optional[str]) -> bool:
    return bool(zone) and zone in UTC_OFFSET_MINUTES


def relative_offset_minutes(zone: Optional[str], reference_zone: str) -> int:
    """
    Minutes to add to a reference-zone wall clock to get the zone's wall clock.

    Unknown or missing zones (on either side) yield 0.
    """
    if not is_known_zone(zone) or not is_known_zone(reference_zone):
        return 0
    return UTC_OFFSET_MINUTES[zone] - UTC_OFFSET_MINUTES[reference_zone]


def fixed_tz(zone: Optional[str], reference_zone: str):
    """pytz fixed-offset tzinfo for a zone; unknown zones map to the reference offset."""
    if is_known_zone(zone):
        return pytz.FixedOffset(UTC_OFFSET_MINUTES[zone])
    return pytz.FixedOffset(UTC_OFFSET_MINUTES.get(reference_zone, 0))


def to_member_local(moment: datetime, zone: Optional[str], reference_zone: str) -> datetime:
    """
    Convert a moment to a member's local wall clock.

    Naive datetimes are read as reference-zone wall clock time.
    """
    if moment.tzinfo is None:
        moment = fixed_tz(reference_zone, reference_zone).localize(moment)
    return moment.astimezone(fixed_tz(zone, reference_zone))


def shift_minute_of_day(minute_of_day: int, offset_minutes: int) -> int:
    """Shift a minute-of-day value, wrapping around midnight."""
    return (minute_of_day + offset_minutes) % (24 * 60)

