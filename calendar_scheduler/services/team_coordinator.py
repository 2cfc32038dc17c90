"""Team meeting scheduling across several calendars and time zones."""

import logging
from datetime import datetime, time, timedelta
from itertools import takewhile
from typing import Iterable, Mapping, Optional, Sequence

from calendar_scheduler.config.settings import DEFAULT_SETTINGS, SchedulerSettings
from calendar_scheduler.models.entities import (
    Availability,
    BusyEvent,
    ConflictInfo,
    ConflictSeverity,
    ConflictType,
    MemberPriority,
    PreparationTask,
    ProductivityPattern,
    SchedulingConstraint,
    TeamAnalysisReport,
    TeamMember,
    TeamSchedulingRequest,
    TeamSchedulingResult,
    TeamSchedulingSuggestion,
    TimeInterval,
    WorkingHours,
)
from calendar_scheduler.models.errors import InvalidInterval
from calendar_scheduler.models.meeting_types import (
    EFFICIENCY_WEIGHTS,
    MeetingTypeProfile,
    get_profile,
    preparation_checklist,
)
from calendar_scheduler.services.availability_index import AvailabilityIndex
from calendar_scheduler.services.pattern_cache import PatternCache
from calendar_scheduler.services.pattern_learner import PatternLearner
from calendar_scheduler.services.scheduling_engine import default_horizon_start
from calendar_scheduler.services.slot_generator import generate_slots
from calendar_scheduler.services.slot_scorer import NEUTRAL_RATIONALE, SlotScorer, clamp_score
from calendar_scheduler.services.timezones import (
    fixed_tz,
    relative_offset_minutes,
    shift_minute_of_day,
    to_member_local,
)

logger = logging.getLogger(__name__)

IDEAL_START_BONUS = 15
PRODUCTIVE_HOUR_BONUS = 20
UNPRODUCTIVE_HOUR_PENALTY = 20
OPTIMAL_WEEKDAY_BONUS = 15
FATIGUE_BAND_PENALTY = 15
UNCOMFORTABLE_LOCAL_TIME_PENALTY = 10

# Local wall clock outside this window counts as uncomfortable
COMFORT_START_MINUTE = 7 * 60
COMFORT_END_MINUTE = 20 * 60

LOW_COVERAGE_THRESHOLD = 80
MANY_TIMEZONES_THRESHOLD = 3
BEST_TIME_EFFICIENCY_THRESHOLD = 80


def to_reference_clock(moment: datetime, reference_zone: str) -> datetime:
    """
    Express an aware moment on the reference zone's wall clock.

    Working hours, ideal start times and pattern hours are all read on that
    clock. Naive datetimes are already reference-zone time and pass through.
    """
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(fixed_tz(reference_zone, reference_zone))


def member_offset_minutes(member: TeamMember, reference_zone: str) -> int:
    """Member's wall-clock offset from the reference zone (0 when unknown)."""
    return relative_offset_minutes(member.timezone, reference_zone)


def common_working_hours(
    members: Sequence[TeamMember],
    reference_zone: str,
    fallback: WorkingHours
) -> WorkingHours:
    """
    Intersect members' working hours on the reference zone's clock.

    Each member's local window is shifted by their offset. An empty or
    inverted intersection (including one that wraps midnight) falls back to
    `fallback`.
    """
    if not members:
        return fallback

    latest_start = 0
    earliest_end = 24 * 60
    for member in members:
        offset = member_offset_minutes(member, reference_zone)
        start = shift_minute_of_day(member.working_hours.start_minute, -offset)
        end = shift_minute_of_day(member.working_hours.end_minute, -offset)
        if end <= start:
            # Window crosses midnight on the reference clock
            return fallback
        latest_start = max(latest_start, start)
        earliest_end = min(earliest_end, end)

    if latest_start >= earliest_end:
        logger.debug("Working hours do not intersect, using the default window")
        return fallback

    return WorkingHours(
        start=time(latest_start // 60, latest_start % 60),
        end=time(earliest_end // 60, earliest_end % 60)
    )


def count_meetings_ending_near(
    events: Iterable[BusyEvent],
    moment: datetime,
    window_minutes: int
) -> int:
    """Same-day events whose end lies within the window of `moment`."""
    window = timedelta(minutes=window_minutes)
    day = moment.date()
    return sum(
        1 for e in events
        if e.start.date() == day and abs(e.end - moment) <= window
    )


class TeamCoordinator:
    """Finds and ranks meeting slots for a team."""

    def __init__(
        self,
        settings: Optional[SchedulerSettings] = None,
        scorer: Optional[SlotScorer] = None,
        learner: Optional[PatternLearner] = None
    ):
        self.settings = settings or DEFAULT_SETTINGS
        self.scorer = scorer or SlotScorer(
            consecutive_window_minutes=self.settings.consecutive_window_minutes
        )
        self.learner = learner or PatternLearner(
            cache=PatternCache(ttl=timedelta(hours=self.settings.pattern_ttl_hours)),
            min_events=self.settings.min_pattern_events
        )

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "TeamCoordinator":
        settings = SchedulerSettings.from_env(dotenv_path)
        settings.configure_logging()
        return cls(settings)

    def schedule_team_meeting(
        self,
        request: TeamSchedulingRequest,
        participant_events: Mapping[str, Iterable[BusyEvent]],
        pattern: Optional[ProductivityPattern] = None
    ) -> TeamSchedulingResult:
        """
        Schedule a meeting for every member of a team.

        Args:
            request: Team meeting request (members, category, duration, window)
            participant_events: Busy events keyed by member id
            pattern: Optional team pattern biasing the ranking

        Returns:
            TeamSchedulingResult with up to `max_suggestions` ranked suggestions,
            an analysis report and recommendations
        """
        profile = get_profile(request.meeting_type)
        duration = profile.optimal_duration_minutes if request.flexible_duration else request.duration
        constraint = SchedulingConstraint(
            duration=duration,
            buffer_before=request.buffer_before,
            buffer_after=request.buffer_after
        )
        constraint.validate()

        if not request.members:
            logger.info(f"No members for '{request.title}', nothing to schedule")
            return TeamSchedulingResult()

        required = [m for m in request.members if m.priority == MemberPriority.REQUIRED]
        reference_zone = self.settings.reference_timezone
        fallback = WorkingHours.from_hours(
            self.settings.working_hours_start,
            self.settings.working_hours_end
        )
        window = common_working_hours(required, reference_zone, fallback)

        horizon_start = to_reference_clock(request.horizon_start or default_horizon_start(), reference_zone)
        if request.deadline is not None and (request.deadline.tzinfo is None) != (horizon_start.tzinfo is None):
            raise InvalidInterval(
                f"Cannot mix naive and timezone-aware datetimes: horizon {horizon_start!r} / deadline {request.deadline!r}"
            )
        slots = generate_slots(
            constraint,
            horizon_start,
            self.settings.horizon_days,
            window,
            exclude_weekends=True,
            granularity=self.settings.slot_granularity_minutes
        )
        if request.deadline is not None:
            deadline = request.deadline
            slots = takewhile(lambda s: s.end <= deadline, slots)

        index = AvailabilityIndex(participant_events)
        aggregate = index.all_events()

        candidates = []
        for slot in slots:
            suggestion = self._evaluate_slot(
                slot, request, profile, constraint, required, index, aggregate, pattern
            )
            if suggestion is not None:
                candidates.append(suggestion)

        ranked = sorted(
            candidates,
            key=lambda s: (-s.meeting_efficiency_score, s.slot.start)
        )[:self.settings.max_suggestions]

        for suggestion in ranked:
            suggestion.preparation_tasks = self._preparation_tasks(request, profile, suggestion.slot)

        report = self._analysis_report(request, profile, ranked)
        recommendations = self._recommendations(request, profile, report, ranked)

        logger.info(
            f"Team meeting '{request.title}': {len(candidates)} viable slots, "
            f"returning {len(ranked)} suggestions"
        )
        return TeamSchedulingResult(
            suggestions=ranked,
            analysis_report=report,
            recommendations=recommendations
        )

    def learn_team_patterns(self, team_id: str, events: Iterable[BusyEvent]) -> ProductivityPattern:
        return self.learner.learn_patterns(team_id, events)

    def _evaluate_slot(
        self,
        slot: TimeInterval,
        request: TeamSchedulingRequest,
        profile: MeetingTypeProfile,
        constraint: SchedulingConstraint,
        required: list[TeamMember],
        index: AvailabilityIndex,
        aggregate: list[BusyEvent],
        pattern: Optional[ProductivityPattern]
    ) -> Optional[TeamSchedulingSuggestion]:
        """Availability check and scoring for one slot; None when the slot is dropped."""
        availability: dict[str, Availability] = {}
        conflicts: list[ConflictInfo] = []
        seen_events: set[str] = set()

        for member in request.members:
            if index.is_free(member.id, slot):
                availability[member.id] = Availability.AVAILABLE
                continue

            if member.priority == MemberPriority.INFORMATIONAL:
                # Informational members are kept in the loop, never waited for
                availability[member.id] = Availability.AVAILABLE
                continue

            if member.priority == MemberPriority.OPTIONAL:
                availability[member.id] = Availability.TENTATIVE
                continue

            availability[member.id] = Availability.BUSY
            for event in index.events_for(member.id):
                if event.id in seen_events or not slot.overlaps(event.interval):
                    continue
                seen_events.add(event.id)
                conflicts.append(ConflictInfo(
                    event_id=event.id,
                    event_title=event.title,
                    conflict_type=ConflictType.OVERLAP,
                    severity=ConflictSeverity.HIGH
                ))

        available_required = sum(
            1 for m in required if availability[m.id] == Availability.AVAILABLE
        )
        if required:
            if available_required < len(required):
                if not request.allow_partial_attendance or available_required == 0:
                    return None
            coverage = available_required / len(required) * 100
        else:
            coverage = 100.0

        base = self.scorer.score(slot, constraint, aggregate)
        score = base.score * coverage / 100
        fragments = [] if base.rationale == NEUTRAL_RATIONALE else [base.rationale]

        if coverage < 100:
            fragments.append(f"{coverage:.0f}% of required attendees are available.")

        if slot.start.strftime("%H:%M") in profile.ideal_start_times:
            score += IDEAL_START_BONUS
            fragments.append(f"Ideal start time for a {request.meeting_type.value} meeting.")

        if pattern is not None:
            score += self._pattern_adjustment(slot, pattern, fragments)

        reference_zone = self.settings.reference_timezone
        timezone_impact = {}
        for member in request.members:
            local = to_member_local(slot.start, member.timezone, reference_zone)
            timezone_impact[member.id] = local.strftime("%H:%M")
            minute_of_day = local.hour * 60 + local.minute
            if minute_of_day < COMFORT_START_MINUTE or minute_of_day > COMFORT_END_MINUTE:
                score -= UNCOMFORTABLE_LOCAL_TIME_PENALTY
                fragments.append(f"Uncomfortable local time for {member.label}.")

        back_to_back = max(
            count_meetings_ending_near(
                index.events_for(member.id),
                slot.start,
                self.settings.consecutive_window_minutes
            )
            for member in request.members
        )
        if back_to_back > 2:
            score -= 5 * back_to_back
            fragments.append("Some participants have back-to-back meetings.")

        score = clamp_score(score)
        weight = EFFICIENCY_WEIGHTS.get(request.meeting_type, 1.0)
        efficiency = clamp_score((0.7 * score + 0.3 * coverage) * weight)

        return TeamSchedulingSuggestion(
            slot=slot,
            score=score,
            conflicts=conflicts,
            rationale=" ".join(fragments) or NEUTRAL_RATIONALE,
            attendee_availability=availability,
            timezone_impact=timezone_impact,
            attendance_coverage=coverage,
            meeting_efficiency_score=efficiency
        )

    @staticmethod
    def _pattern_adjustment(
        slot: TimeInterval,
        pattern: ProductivityPattern,
        fragments: list[str]
    ) -> float:
        adjustment = 0.0
        hour = slot.start.hour

        if hour in pattern.most_productive_hours:
            adjustment += PRODUCTIVE_HOUR_BONUS
            fragments.append("One of the team's most productive hours.")
        if hour in pattern.least_productive_hours:
            adjustment -= UNPRODUCTIVE_HOUR_PENALTY
            fragments.append("One of the team's least productive hours.")
        if slot.start.weekday() in pattern.optimal_weekdays:
            adjustment += OPTIMAL_WEEKDAY_BONUS
            fragments.append("A day the team usually meets.")
        if f"{hour:02d}:00" in pattern.fatigue_time_bands:
            adjustment -= FATIGUE_BAND_PENALTY
            fragments.append("The team is usually worn out by meetings at this hour.")

        return adjustment

    @staticmethod
    def _preparation_tasks(
        request: TeamSchedulingRequest,
        profile: MeetingTypeProfile,
        slot: TimeInterval
    ) -> list[PreparationTask]:
        if not profile.needs_preparation:
            return []

        due = slot.start - timedelta(minutes=profile.preparation_minutes)
        return [
            PreparationTask(
                task=item.task,
                due=due,
                priority=item.priority,
                estimated_minutes=item.estimated_minutes
            )
            for item in preparation_checklist(request.meeting_type)
        ]

    def _analysis_report(
        self,
        request: TeamSchedulingRequest,
        profile: MeetingTypeProfile,
        suggestions: list[TeamSchedulingSuggestion]
    ) -> TeamAnalysisReport:
        if suggestions:
            average_coverage = round(
                sum(s.attendance_coverage for s in suggestions) / len(suggestions)
            )
        else:
            average_coverage = 0

        reference_zone = self.settings.reference_timezone
        zones = {member.timezone or reference_zone for member in request.members}

        return TeamAnalysisReport(
            total_conflicts=sum(len(s.conflicts) for s in suggestions),
            average_attendance_coverage=average_coverage,
            timezone_spread=len(zones),
            preparation_needed=profile.needs_preparation,
            follow_up_required=profile.needs_follow_up
        )

    @staticmethod
    def _recommendations(
        request: TeamSchedulingRequest,
        profile: MeetingTypeProfile,
        report: TeamAnalysisReport,
        suggestions: list[TeamSchedulingSuggestion]
    ) -> list[str]:
        recommendations = []

        if report.average_attendance_coverage < LOW_COVERAGE_THRESHOLD:
            recommendations.append(
                "Attendance is low. Consider relaxing the constraints or offering remote attendance."
            )

        if report.timezone_spread >= MANY_TIMEZONES_THRESHOLD:
            recommendations.append(
                "Participants span several time zones. Consider recording the meeting."
            )

        if request.duration < profile.optimal_duration_minutes:
            recommendations.append(
                f"{request.meeting_type.value} meetings usually run "
                f"{profile.optimal_duration_minutes} minutes."
            )

        if profile.needs_preparation:
            recommendations.append(
                "Block time to prepare. Share material at least a day in advance."
            )

        if profile.needs_follow_up:
            recommendations.append(
                f"Reserve about {profile.follow_up_minutes} minutes afterwards to write up action items."
            )

        if suggestions and suggestions[0].meeting_efficiency_score > BEST_TIME_EFFICIENCY_THRESHOLD:
            best = suggestions[0].slot.start
            recommendations.append(f"Best time: {best:%Y-%m-%d %H:%M}.")

        if any("back-to-back" in s.rationale for s in suggestions):
            recommendations.append(
                "Some participants have back-to-back meetings. Consider a 5-10 minute break."
            )

        return recommendations
