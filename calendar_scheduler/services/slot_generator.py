"""Candidate slot enumeration over a bounded horizon."""

import logging
from datetime import date, datetime, timedelta, time
from typing import Iterator

from calendar_scheduler.models.entities import SchedulingConstraint, TimeInterval, WorkingHours
from calendar_scheduler.models.errors import InvalidConstraint

logger = logging.getLogger(__name__)

SLOT_GRANULARITY_MINUTES = 30


def generate_slots(
    constraint: SchedulingConstraint,
    horizon_start: datetime,
    horizon_days: int,
    working_hours: WorkingHours,
    exclude_weekends: bool = True,
    granularity: int = SLOT_GRANULARITY_MINUTES
) -> Iterator[TimeInterval]:
    """
    Enumerate candidate slots of exactly `constraint.duration` minutes.

    Inputs are validated immediately; the returned iterator is lazy and can be
    consumed only once.

    Args:
        constraint: Requested meeting constraint (only duration is used here)
        horizon_start: Earliest allowed slot start
        horizon_days: Length of the horizon; slots end no later than horizon_start + horizon_days
        working_hours: Daily window every slot must fit in
        exclude_weekends: Skip Saturdays and Sundays
        granularity: Alignment step in minutes, counted from working_hours.start

    Returns:
        Iterator of TimeIntervals in chronological order
    """
    constraint.validate()
    if horizon_days <= 0:
        raise InvalidConstraint(f"Horizon must span at least one day, got {horizon_days}")
    if granularity <= 0:
        raise InvalidConstraint(f"Slot granularity must be positive, got {granularity}")
    if working_hours.length_minutes <= 0:
        raise InvalidConstraint(
            f"Working hours must end after they start: {working_hours.start} - {working_hours.end}"
        )

    return _iter_slots(
        constraint.duration,
        horizon_start,
        horizon_start + timedelta(days=horizon_days),
        working_hours,
        exclude_weekends,
        granularity
    )


def _iter_slots(
    duration_minutes: int,
    horizon_start: datetime,
    horizon_end: datetime,
    working_hours: WorkingHours,
    exclude_weekends: bool,
    granularity: int
) -> Iterator[TimeInterval]:
    duration = timedelta(minutes=duration_minutes)
    step = timedelta(minutes=granularity)
    tz = horizon_start.tzinfo

    current_date = horizon_start.date()
    last_date = horizon_end.date()
    produced = 0

    while current_date <= last_date:
        # Skip weekends
        if exclude_weekends and current_date.weekday() >= 5:
            current_date += timedelta(days=1)
            continue

        if working_hours.length_minutes < duration_minutes:
            # Window too short: this day contributes nothing
            current_date += timedelta(days=1)
            continue

        day_open = _at(current_date, working_hours.start, tz)
        day_close = _at(current_date, working_hours.end, tz)

        slot_start = day_open
        while slot_start + duration <= day_close:
            slot_end = slot_start + duration
            if slot_end > horizon_end:
                break
            if slot_start >= horizon_start:
                produced += 1
                yield TimeInterval(start=slot_start, end=slot_end)
            slot_start += step

        current_date += timedelta(days=1)

    logger.debug(f"Generated {produced} candidate slots of {duration_minutes} minutes")


def _at(day: date, clock: time, tz) -> datetime:
    """Combine a date and a wall-clock time in the horizon's timezone."""
    naive = datetime.combine(day, clock)
    if tz is None:
        return naive
    # pytz zones need localize() to pick the right offset
    localize = getattr(tz, "localize", None)
    if localize is not None:
        return localize(naive)
    return naive.replace(tzinfo=tz)
