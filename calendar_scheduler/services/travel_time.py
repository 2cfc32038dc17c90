"""Rough travel-time lookup between free-text locations.

This is an approximation keyed on a handful of known districts, not a routing
engine.
"""

from typing import Optional

DEFAULT_TRAVEL_MINUTES = 20

# Ordered: the first place whose keywords appear in a location wins
PLACE_KEYWORD_RULES: list[tuple[tuple[str, ...], str]] = [
    (("gangnam", "강남"), "gangnam"),
    (("pangyo", "판교"), "pangyo"),
    (("yeouido", "여의도"), "yeouido"),
    (("gangbuk", "강북"), "gangbuk"),
]

_TRAVEL_MINUTES: dict[frozenset, int] = {
    frozenset(("gangnam", "pangyo")): 30,
    frozenset(("gangnam", "yeouido")): 25,
    frozenset(("gangnam", "gangbuk")): 40,
    frozenset(("pangyo", "yeouido")): 35,
    frozenset(("pangyo", "gangbuk")): 50,
    frozenset(("yeouido", "gangbuk")): 30,
}


def match_place(location: str) -> Optional[str]:
    """Known place for a free-text location, or None."""
    lowered = location.lower()
    for keywords, place in PLACE_KEYWORD_RULES:
        if any(keyword in lowered for keyword in keywords):
            return place
    return None


class TravelTimeEstimator:
    """Estimates minutes needed to move between two event locations."""

    def __init__(self, default_minutes: int = DEFAULT_TRAVEL_MINUTES):
        self.default_minutes = default_minutes

    def estimate_travel_minutes(
        self,
        from_location: Optional[str],
        to_location: Optional[str]
    ) -> int:
        """
        Estimate travel time in minutes.

        Returns 0 when either location is missing or both strings are the same
        (case-insensitive), the table value when both map to different known
        places, and the default otherwise.
        """
        if not from_location or not to_location:
            return 0

        from_place = match_place(from_location)
        to_place = match_place(to_location)
        if from_place and to_place:
            minutes = _TRAVEL_MINUTES.get(frozenset((from_place, to_place)))
            if minutes is not None:
                return minutes

        if from_location.strip().lower() == to_location.strip().lower():
            return 0
        return self.default_minutes
