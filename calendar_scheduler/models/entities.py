"""Domain models for the scheduling engine."""

from dataclasses import dataclass, field
from datetime import datetime, time
from enum import Enum
from typing import Literal, Optional

from calendar_scheduler.models.errors import InvalidConstraint, InvalidInterval
from calendar_scheduler.models.meeting_types import MeetingCategory


class ConflictType(Enum):
    """How a busy event collides with a candidate slot."""
    OVERLAP = "overlap"
    BUFFER = "buffer"


class ConflictSeverity(Enum):
    """Severity attached to a conflict."""
    HIGH = "high"
    MEDIUM = "medium"


class MemberPriority(Enum):
    """How much a team member's calendar constrains the meeting."""
    REQUIRED = "required"
    OPTIONAL = "optional"
    INFORMATIONAL = "informational"


class Availability(Enum):
    """Per-member availability for a candidate slot."""
    AVAILABLE = "available"
    BUSY = "busy"
    TENTATIVE = "tentative"


@dataclass(frozen=True)
class TimeInterval:
    """A half-open [start, end) time range."""
    start: datetime
    end: datetime

    def __post_init__(self):
        if (self.start.tzinfo is None) != (self.end.tzinfo is None):
            raise InvalidInterval(
                f"Cannot mix naive and timezone-aware datetimes: {self.start!r} / {self.end!r}"
            )
        if self.start >= self.end:
            raise InvalidInterval(
                f"Interval start must be before end: {self.start.isoformat()} >= {self.end.isoformat()}"
            )

    @property
    def duration_minutes(self) -> int:
        """Return duration in minutes."""
        return int((self.end - self.start).total_seconds() // 60)

    def overlaps(self, other: "TimeInterval") -> bool:
        """Check if this interval overlaps with another."""
        return self.start < other.end and self.end > other.start

    def contains(self, other: "TimeInterval") -> bool:
        """Check if another interval lies entirely inside this one."""
        return self.start <= other.start and other.end <= self.end


@dataclass(frozen=True)
class WorkingHours:
    """Daily working window in wall-clock time."""
    start: time = time(9, 0)
    end: time = time(18, 0)

    @classmethod
    def from_hours(cls, start_hour: int, end_hour: int) -> "WorkingHours":
        """Build a window from whole hours (0-23)."""
        return cls(start=time(start_hour, 0), end=time(end_hour, 0))

    @property
    def start_minute(self) -> int:
        return self.start.hour * 60 + self.start.minute

    @property
    def end_minute(self) -> int:
        return self.end.hour * 60 + self.end.minute

    @property
    def length_minutes(self) -> int:
        return self.end_minute - self.start_minute


@dataclass
class SchedulingConstraint:
    """What the caller wants scheduled, already resolved to absolute times."""
    duration: int  # minutes
    preferred_ranges: list[TimeInterval] = field(default_factory=list)
    avoid_ranges: list[TimeInterval] = field(default_factory=list)
    buffer_before: int = 0  # minutes
    buffer_after: int = 0  # minutes
    location: Optional[str] = None

    def validate(self) -> None:
        """Reject constraints that would produce meaningless scores."""
        if self.duration <= 0:
            raise InvalidConstraint(f"Duration must be positive, got {self.duration}")
        if self.buffer_before < 0 or self.buffer_after < 0:
            raise InvalidConstraint(
                f"Buffers must not be negative, got before={self.buffer_before} after={self.buffer_after}"
            )


@dataclass
class BusyEvent:
    """An already-scheduled item on one participant's calendar."""
    id: str
    title: str
    interval: TimeInterval
    location: Optional[str] = None

    @property
    def start(self) -> datetime:
        return self.interval.start

    @property
    def end(self) -> datetime:
        return self.interval.end


@dataclass(frozen=True)
class ConflictInfo:
    """A busy event that collides with a candidate slot."""
    event_id: str
    event_title: str
    conflict_type: ConflictType
    severity: ConflictSeverity


@dataclass
class SchedulingSuggestion:
    """A scored slot proposal for a single participant."""
    slot: TimeInterval
    score: float  # 0..100
    conflicts: list[ConflictInfo] = field(default_factory=list)
    rationale: str = ""
    kind: Literal["single"] = field(default="single", init=False)


@dataclass
class TeamMember:
    """A meeting participant."""
    id: str  # email
    priority: MemberPriority = MemberPriority.REQUIRED
    display_name: Optional[str] = None
    timezone: Optional[str] = None
    working_hours: WorkingHours = field(default_factory=WorkingHours)

    @property
    def label(self) -> str:
        return self.display_name or self.id


@dataclass
class TeamSchedulingRequest:
    """Request to schedule a meeting for a team."""
    title: str
    meeting_type: MeetingCategory
    members: list[TeamMember]
    duration: int  # minutes
    deadline: Optional[datetime] = None
    flexible_duration: bool = False
    allow_partial_attendance: bool = False
    buffer_before: int = 0
    buffer_after: int = 0
    horizon_start: Optional[datetime] = None


@dataclass
class PreparationTask:
    """A task to finish before a meeting starts."""
    task: str
    due: datetime
    priority: Literal["low", "medium", "high"]
    estimated_minutes: int


@dataclass
class TeamSchedulingSuggestion:
    """A scored slot proposal for a team meeting."""
    slot: TimeInterval
    score: float  # 0..100
    conflicts: list[ConflictInfo] = field(default_factory=list)
    rationale: str = ""
    attendee_availability: dict[str, Availability] = field(default_factory=dict)
    timezone_impact: dict[str, str] = field(default_factory=dict)  # member id -> local "HH:MM"
    attendance_coverage: float = 100.0  # percent of required members available
    meeting_efficiency_score: float = 0.0
    preparation_tasks: list[PreparationTask] = field(default_factory=list)
    kind: Literal["team"] = field(default="team", init=False)


@dataclass
class TeamAnalysisReport:
    """Summary of a team scheduling run."""
    total_conflicts: int = 0
    average_attendance_coverage: float = 0.0
    timezone_spread: int = 0
    preparation_needed: bool = False
    follow_up_required: bool = False


@dataclass
class TeamSchedulingResult:
    """Ranked team suggestions plus analysis and advice."""
    suggestions: list[TeamSchedulingSuggestion] = field(default_factory=list)
    analysis_report: TeamAnalysisReport = field(default_factory=TeamAnalysisReport)
    recommendations: list[str] = field(default_factory=list)


@dataclass
class ProductivityPattern:
    """Usage profile derived from a subject's event history."""
    subject_id: str
    most_productive_hours: list[int] = field(default_factory=list)
    least_productive_hours: list[int] = field(default_factory=list)
    optimal_weekdays: list[int] = field(default_factory=list)  # 0 = Monday
    fatigue_time_bands: list[str] = field(default_factory=list)  # "HH:00"
    avg_duration_by_category: dict[str, int] = field(default_factory=dict)
    sample_size: int = 0

    @property
    def is_neutral(self) -> bool:
        """True when the pattern carries no scoring signal."""
        return not (
            self.most_productive_hours
            or self.least_productive_hours
            or self.optimal_weekdays
            or self.fatigue_time_bands
        )
