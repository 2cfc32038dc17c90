"""Meeting categories and their static scheduling profiles."""

from dataclasses import dataclass
from enum import Enum
from typing import Literal, Optional


class MeetingCategory(Enum):
    """Closed set of meeting categories the engine knows about."""
    STANDUP = "standup"
    PLANNING = "planning"
    REVIEW = "review"
    BRAINSTORM = "brainstorm"
    ONE_ON_ONE = "one-on-one"
    ALL_HANDS = "all-hands"
    WORKSHOP = "workshop"
    SOCIAL = "social"


# Bucket for events whose title matches no category
GENERAL_CATEGORY = "general"


@dataclass(frozen=True)
class MeetingTypeProfile:
    """Scheduling profile for one meeting category."""
    category: MeetingCategory
    optimal_duration_minutes: int
    ideal_start_times: tuple[str, ...]  # "HH:MM"
    needs_preparation: bool = False
    preparation_minutes: int = 0
    needs_follow_up: bool = False
    follow_up_minutes: int = 0


@dataclass(frozen=True)
class ChecklistItem:
    """One entry of a category's preparation checklist."""
    task: str
    priority: Literal["low", "medium", "high"]
    estimated_minutes: int


MEETING_TYPE_PROFILES: dict[MeetingCategory, MeetingTypeProfile] = {
    MeetingCategory.STANDUP: MeetingTypeProfile(
        category=MeetingCategory.STANDUP,
        optimal_duration_minutes=15,
        ideal_start_times=("09:00", "09:30"),
    ),
    MeetingCategory.PLANNING: MeetingTypeProfile(
        category=MeetingCategory.PLANNING,
        optimal_duration_minutes=120,
        ideal_start_times=("10:00", "14:00"),
        needs_preparation=True,
        preparation_minutes=60,
        needs_follow_up=True,
        follow_up_minutes=30,
    ),
    MeetingCategory.REVIEW: MeetingTypeProfile(
        category=MeetingCategory.REVIEW,
        optimal_duration_minutes=90,
        ideal_start_times=("14:00", "15:00"),
        needs_preparation=True,
        preparation_minutes=45,
    ),
    MeetingCategory.BRAINSTORM: MeetingTypeProfile(
        category=MeetingCategory.BRAINSTORM,
        optimal_duration_minutes=60,
        ideal_start_times=("10:00", "11:00", "15:00"),
        needs_follow_up=True,
        follow_up_minutes=30,
    ),
    MeetingCategory.ONE_ON_ONE: MeetingTypeProfile(
        category=MeetingCategory.ONE_ON_ONE,
        optimal_duration_minutes=30,
        ideal_start_times=("11:00", "14:00", "16:00"),
    ),
    MeetingCategory.ALL_HANDS: MeetingTypeProfile(
        category=MeetingCategory.ALL_HANDS,
        optimal_duration_minutes=60,
        ideal_start_times=("10:00", "14:00"),
        needs_preparation=True,
        preparation_minutes=120,
    ),
    MeetingCategory.WORKSHOP: MeetingTypeProfile(
        category=MeetingCategory.WORKSHOP,
        optimal_duration_minutes=180,
        ideal_start_times=("09:00", "13:00"),
        needs_preparation=True,
        preparation_minutes=120,
        needs_follow_up=True,
        follow_up_minutes=60,
    ),
    MeetingCategory.SOCIAL: MeetingTypeProfile(
        category=MeetingCategory.SOCIAL,
        optimal_duration_minutes=60,
        ideal_start_times=("12:00", "16:00", "17:00"),
    ),
}

# Multiplier applied to a team slot's efficiency score
EFFICIENCY_WEIGHTS: dict[MeetingCategory, float] = {
    MeetingCategory.STANDUP: 1.0,
    MeetingCategory.PLANNING: 1.5,
    MeetingCategory.REVIEW: 1.3,
    MeetingCategory.BRAINSTORM: 1.2,
    MeetingCategory.ONE_ON_ONE: 1.1,
    MeetingCategory.ALL_HANDS: 1.4,
    MeetingCategory.WORKSHOP: 1.6,
    MeetingCategory.SOCIAL: 0.9,
}

PREPARATION_CHECKLISTS: dict[MeetingCategory, tuple[ChecklistItem, ...]] = {
    MeetingCategory.PLANNING: (
        ChecklistItem("Groom the sprint backlog and set priorities", "high", 30),
        ChecklistItem("Summarise the previous sprint retrospective", "medium", 15),
    ),
    MeetingCategory.REVIEW: (
        ChecklistItem("Prepare and share review material", "high", 45),
        ChecklistItem("List key results and open issues", "medium", 20),
    ),
    MeetingCategory.ALL_HANDS: (
        ChecklistItem("Prepare presentation slides", "high", 60),
        ChecklistItem("Collect likely Q&A questions", "medium", 30),
    ),
    MeetingCategory.WORKSHOP: (
        ChecklistItem("Prepare workshop material and templates", "high", 90),
        ChecklistItem("Check required tools and resources", "high", 30),
    ),
}

DEFAULT_CHECKLIST: tuple[ChecklistItem, ...] = (
    ChecklistItem("Prepare the meeting agenda", "medium", 15),
)

# Ordered: the first rule whose keywords appear in a title wins
CATEGORY_KEYWORD_RULES: list[tuple[tuple[str, ...], MeetingCategory]] = [
    (("standup", "stand-up", "daily sync", "daily scrum"), MeetingCategory.STANDUP),
    (("planning", "sprint plan", "roadmap"), MeetingCategory.PLANNING),
    (("review", "retro", "demo"), MeetingCategory.REVIEW),
    (("1:1", "one-on-one", "1on1", "one on one"), MeetingCategory.ONE_ON_ONE),
    (("workshop", "training"), MeetingCategory.WORKSHOP),
    (("all-hands", "all hands", "town hall", "townhall"), MeetingCategory.ALL_HANDS),
    (("brainstorm", "ideation"), MeetingCategory.BRAINSTORM),
    (("social", "happy hour", "team lunch", "offsite"), MeetingCategory.SOCIAL),
]


def classify_title(title: Optional[str]) -> Optional[MeetingCategory]:
    """Map an event title to a meeting category, or None when nothing matches."""
    if not title:
        return None
    lowered = title.lower()
    for keywords, category in CATEGORY_KEYWORD_RULES:
        if any(keyword in lowered for keyword in keywords):
            return category
    return None


def category_label(title: Optional[str]) -> str:
    """Category name for an event title, falling back to the general bucket."""
    category = classify_title(title)
    return category.value if category else GENERAL_CATEGORY


def get_profile(category: MeetingCategory) -> MeetingTypeProfile:
    """Look up the static profile for a category."""
    return MEETING_TYPE_PROFILES[category]


def preparation_checklist(category: MeetingCategory) -> tuple[ChecklistItem, ...]:
    """Fixed preparation checklist for a category."""
    return PREPARATION_CHECKLISTS.get(category, DEFAULT_CHECKLIST)
