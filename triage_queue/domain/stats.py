"""Stats Engine - priority x age bracket cross-tabulation."""

from dataclasses import dataclass
from typing import Iterable

from triage_queue.domain.patient_record import (
    LEAST_URGENT_PRIORITY,
    MOST_URGENT_PRIORITY,
    PatientRecord,
)

# Inclusive upper bound of each bracket; the last bracket is open-ended
AGE_BRACKET_LIMITS = (17, 40, 60)
AGE_BRACKET_LABELS = ("0-17", "18-40", "41-60", "61+")
PRIORITY_LEVELS = tuple(range(MOST_URGENT_PRIORITY, LEAST_URGENT_PRIORITY + 1))


def age_bracket(age: int) -> int:
    """Return the column index of the bracket ``age`` falls into."""
    for column, limit in enumerate(AGE_BRACKET_LIMITS):
        if age <= limit:
            return column
    return len(AGE_BRACKET_LIMITS)


@dataclass(frozen=True)
class StatsMatrix:
    """Counts of live records by priority (rows) and age bracket (columns).

    Attributes:
        counts: One row per priority level 1..5, one column per age bracket
    """
    counts: tuple[tuple[int, ...], ...]

    @property
    def total(self) -> int:
        return sum(sum(row) for row in self.counts)

    @property
    def column_labels(self) -> tuple[str, ...]:
        return AGE_BRACKET_LABELS

    def row(self, priority: int) -> tuple[int, ...]:
        """Counts for one priority level.

        Raises:
            ValueError: If ``priority`` is outside 1..5
        """
        if priority not in PRIORITY_LEVELS:
            raise ValueError(f"Priority must be in {PRIORITY_LEVELS[0]}..{PRIORITY_LEVELS[-1]}, got {priority}")
        return self.counts[priority - MOST_URGENT_PRIORITY]

    def as_rows(self) -> list[tuple[int, tuple[int, ...]]]:
        """Pairs of (priority, counts) in display order."""
        return list(zip(PRIORITY_LEVELS, self.counts))


def tabulate(records: Iterable[PatientRecord]) -> StatsMatrix:
    """Cross-tabulate records by priority and age bracket.

    Records with a priority outside 1..5 are left out. Pure read: the
    records are neither reordered nor modified.
    """
    grid = [[0] * len(AGE_BRACKET_LABELS) for _ in PRIORITY_LEVELS]
    for record in records:
        if record.priority not in PRIORITY_LEVELS:
            continue
        grid[record.priority - MOST_URGENT_PRIORITY][age_bracket(record.age)] += 1
    return StatsMatrix(counts=tuple(tuple(row) for row in grid))
