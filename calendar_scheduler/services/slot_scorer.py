"""Heuristic scoring of a candidate slot for a single participant.

Scoring starts at BASE_SCORE and folds an ordered list of independent rules
over the slot. Each rule returns a RuleOutcome (score delta plus a rationale
fragment) or None when it does not apply.
"""

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Callable, Optional, Sequence

from calendar_scheduler.models.entities import (
    BusyEvent,
    ConflictInfo,
    ProductivityPattern,
    SchedulingConstraint,
    SchedulingSuggestion,
    TimeInterval,
)
from calendar_scheduler.services.conflict_detector import overlaps, within_buffer
from calendar_scheduler.services.travel_time import TravelTimeEstimator

BASE_SCORE = 100.0
MIN_SCORE = 0.0
MAX_SCORE = 100.0
NEUTRAL_RATIONALE = "Acceptable time."

CONSECUTIVE_WINDOW_MINUTES = 30
CONSECUTIVE_THRESHOLD = 2


@dataclass(frozen=True)
class RuleOutcome:
    """Score change and explanation produced by one rule."""
    delta: float
    fragment: str


@dataclass
class ScoringContext:
    """Everything a rule may look at for one slot."""
    slot: TimeInterval
    constraint: SchedulingConstraint
    events: Sequence[BusyEvent]
    pattern: Optional[ProductivityPattern] = None
    consecutive_window_minutes: int = CONSECUTIVE_WINDOW_MINUTES
    travel: TravelTimeEstimator = field(default_factory=TravelTimeEstimator)

    def same_day_events(self) -> list[BusyEvent]:
        day = self.slot.start.date()
        return [e for e in self.events if e.start.date() == day]


ScoringRule = Callable[[ScoringContext], Optional[RuleOutcome]]


def clamp_score(score: float) -> float:
    return max(MIN_SCORE, min(MAX_SCORE, score))


def preferred_range_rule(ctx: ScoringContext) -> Optional[RuleOutcome]:
    if any(r.contains(ctx.slot) for r in ctx.constraint.preferred_ranges):
        return RuleOutcome(20, "Inside a preferred time range.")
    return None


def avoid_range_rule(ctx: ScoringContext) -> Optional[RuleOutcome]:
    if any(overlaps(ctx.slot, r) for r in ctx.constraint.avoid_ranges):
        return RuleOutcome(-30, "Overlaps a time range you wanted to avoid.")
    return None


def has_buffer_before(slot: TimeInterval, events: Sequence[BusyEvent], minutes: int) -> bool:
    """No event ends inside the margin right before the slot."""
    if minutes == 0:
        return True
    margin_start = slot.start - timedelta(minutes=minutes)
    return not any(margin_start < e.end <= slot.start for e in events)


def has_buffer_after(slot: TimeInterval, events: Sequence[BusyEvent], minutes: int) -> bool:
    """No event starts inside the margin right after the slot."""
    if minutes == 0:
        return True
    margin_end = slot.end + timedelta(minutes=minutes)
    return not any(slot.end <= e.start < margin_end for e in events)


def buffer_quality_rule(ctx: ScoringContext) -> Optional[RuleOutcome]:
    before = has_buffer_before(ctx.slot, ctx.events, ctx.constraint.buffer_before)
    after = has_buffer_after(ctx.slot, ctx.events, ctx.constraint.buffer_after)
    if before and after:
        return RuleOutcome(15, "Comfortable buffer before and after.")
    if before or after:
        return RuleOutcome(8, "Buffer on one side only.")
    return None


def pattern_affinity_rule(ctx: ScoringContext) -> Optional[RuleOutcome]:
    if ctx.pattern and ctx.slot.start.hour in ctx.pattern.most_productive_hours:
        return RuleOutcome(10, "Matches a time you often meet.")
    return None


def count_consecutive_meetings(
    slot: TimeInterval,
    events: Sequence[BusyEvent],
    window_minutes: int = CONSECUTIVE_WINDOW_MINUTES
) -> int:
    """Same-day events touching or sitting within the window of the slot."""
    day = slot.start.date()
    return sum(
        1 for e in events
        if e.start.date() == day
        and (overlaps(slot, e.interval) or within_buffer(slot, e.interval, window_minutes))
    )


def consecutive_meetings_rule(ctx: ScoringContext) -> Optional[RuleOutcome]:
    count = count_consecutive_meetings(ctx.slot, ctx.events, ctx.consecutive_window_minutes)
    if count > CONSECUTIVE_THRESHOLD:
        return RuleOutcome(-5 * count, f"{count} meetings back-to-back around this slot.")
    return None


def time_of_day_rule(ctx: ScoringContext) -> Optional[RuleOutcome]:
    hour = ctx.slot.start.hour
    if 14 <= hour <= 15:
        return RuleOutcome(-5, "Post-lunch dip in focus.")
    if 10 <= hour <= 11:
        return RuleOutcome(5, "Morning focus time.")
    return None


def weekday_rule(ctx: ScoringContext) -> Optional[RuleOutcome]:
    weekday = ctx.slot.start.weekday()
    if weekday == 0:
        return RuleOutcome(-3, "Start of the week, often busy.")
    if weekday == 4:
        return RuleOutcome(-2, "End of the week, focus tends to drop.")
    return None


def travel_feasibility_rule(ctx: ScoringContext) -> Optional[RuleOutcome]:
    location = ctx.constraint.location
    if not location:
        return None

    day_events = ctx.same_day_events()
    previous = max(
        (e for e in day_events if e.end <= ctx.slot.start),
        key=lambda e: e.end,
        default=None
    )
    following = min(
        (e for e in day_events if e.start >= ctx.slot.end),
        key=lambda e: e.start,
        default=None
    )

    for neighbour, gap in (
        (previous, previous and ctx.slot.start - previous.end),
        (following, following and following.start - ctx.slot.end),
    ):
        if neighbour is None or not neighbour.location:
            continue
        needed = ctx.travel.estimate_travel_minutes(neighbour.location, location)
        gap_minutes = int(gap.total_seconds() // 60)
        if gap_minutes < needed:
            return RuleOutcome(
                -10,
                f"Only {gap_minutes} minutes to travel between '{neighbour.location}' and "
                f"'{location}', about {needed} needed."
            )
    return None


DEFAULT_RULES: tuple[ScoringRule, ...] = (
    preferred_range_rule,
    avoid_range_rule,
    buffer_quality_rule,
    pattern_affinity_rule,
    consecutive_meetings_rule,
    time_of_day_rule,
    weekday_rule,
    travel_feasibility_rule,
)


class SlotScorer:
    """Scores candidate slots by folding scoring rules in order."""

    def __init__(
        self,
        rules: Sequence[ScoringRule] = DEFAULT_RULES,
        consecutive_window_minutes: int = CONSECUTIVE_WINDOW_MINUTES,
        travel: Optional[TravelTimeEstimator] = None
    ):
        self.rules = tuple(rules)
        self.consecutive_window_minutes = consecutive_window_minutes
        self.travel = travel or TravelTimeEstimator()

    def evaluate(self, ctx: ScoringContext) -> tuple[float, list[str]]:
        """Unclamped score and rationale fragments, in rule order."""
        score = BASE_SCORE
        fragments = []
        for rule in self.rules:
            outcome = rule(ctx)
            if outcome is None:
                continue
            score += outcome.delta
            fragments.append(outcome.fragment)
        return score, fragments

    def score(
        self,
        slot: TimeInterval,
        constraint: SchedulingConstraint,
        events: Sequence[BusyEvent],
        pattern: Optional[ProductivityPattern] = None,
        conflicts: Optional[list[ConflictInfo]] = None
    ) -> SchedulingSuggestion:
        """
        Score one slot.

        Args:
            slot: Candidate interval
            constraint: The caller's scheduling constraint
            events: Busy events the slot is judged against
            pattern: Optional learned usage pattern
            conflicts: Conflicts already detected for the slot, attached as-is

        Returns:
            SchedulingSuggestion with a clamped score and a non-empty rationale
        """
        ctx = ScoringContext(
            slot=slot,
            constraint=constraint,
            events=events,
            pattern=pattern,
            consecutive_window_minutes=self.consecutive_window_minutes,
            travel=self.travel
        )
        raw_score, fragments = self.evaluate(ctx)

        return SchedulingSuggestion(
            slot=slot,
            score=clamp_score(raw_score),
            conflicts=list(conflicts or []),
            rationale=" ".join(fragments) or NEUTRAL_RATIONALE
        )
