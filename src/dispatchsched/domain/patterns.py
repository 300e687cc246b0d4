"""Shift-pattern policies.

Each shift pattern fixes the shape of an employee's work cycle: how many
shifts it contains, how long each one is, and in what order. Policies are
kept separate from the validators and the generator so the rules for a
pattern live in one place.
"""

from abc import ABC, abstractmethod

from dispatchsched.domain.models import ShiftPattern

MAX_CONSECUTIVE_DAYS = 4
VALID_SHIFT_DURATIONS = (4, 10, 12)


class PatternPolicy(ABC):
    """Abstract base class for work-cycle shapes."""

    pattern: ShiftPattern

    @abstractmethod
    def duration_sequence(self) -> tuple[float, ...]:
        """Shift lengths in hours, in the order they are worked in one cycle."""
        pass

    def cycle_length(self) -> int:
        """Number of shifts in one cycle."""
        return len(self.duration_sequence())

    def max_consecutive_days(self) -> int:
        """Most days in a row the pattern allows."""
        return MAX_CONSECUTIVE_DAYS

    def allowed_durations(self) -> frozenset:
        """Every shift length that may appear somewhere in the cycle."""
        return frozenset(self.duration_sequence())

    def is_allowed_duration(self, hours: float) -> bool:
        return hours in self.allowed_durations()

    def expected_duration(self, position: int) -> float:
        """Length expected for the shift at ``position`` (0-based) in the cycle.

        Positions past the end of the cycle wrap around to the start.
        """
        sequence = self.duration_sequence()
        return sequence[position % len(sequence)]


class FourTenPolicy(PatternPolicy):
    """Pattern A: four consecutive 10-hour shifts."""

    pattern = ShiftPattern.FOUR_TEN

    def duration_sequence(self) -> tuple[float, ...]:
        return (10, 10, 10, 10)


class ThreeTwelvePlusFourPolicy(PatternPolicy):
    """Pattern B: three consecutive 12-hour shifts followed by one 4-hour shift."""

    pattern = ShiftPattern.THREE_TWELVE_PLUS_FOUR

    def duration_sequence(self) -> tuple[float, ...]:
        return (12, 12, 12, 4)


_POLICIES = {
    ShiftPattern.FOUR_TEN: FourTenPolicy(),
    ShiftPattern.THREE_TWELVE_PLUS_FOUR: ThreeTwelvePlusFourPolicy(),
}


def get_pattern_policy(pattern) -> PatternPolicy:
    """Look up the policy for a pattern or any accepted pattern name.

    Raises:
        ValueError: If the pattern name is unknown.
    """
    return _POLICIES[ShiftPattern.from_name(pattern)]
