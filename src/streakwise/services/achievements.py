"""Milestone achievements derived from completion totals and streaks."""

from __future__ import annotations

from dataclasses import dataclass

# (threshold, title, description), highest first; only the best tier is awarded.
COMPLETION_TIERS = (
    (100, "Century Club", "Completed 100 habits!"),
    (50, "Half Century", "Completed 50 habits!"),
    (10, "Getting Started", "Completed 10 habits!"),
)
STREAK_TIERS = (
    (30, "Consistency Master", "30-day streak achieved!"),
    (7, "Week Warrior", "7-day streak achieved!"),
)


@dataclass(frozen=True, slots=True)
class Achievement:
    title: str
    description: str
    kind: str


def _best_tier(value: int, tiers, kind: str) -> list[Achievement]:
    for threshold, title, description in tiers:
        if value >= threshold:
            return [Achievement(title=title, description=description, kind=kind)]
    return []


def evaluate_achievements(*, total_completed: int, longest_streak: int) -> list[Achievement]:
    """Return the earned completion and streak milestones."""

    return _best_tier(total_completed, COMPLETION_TIERS, "habit_completion") + _best_tier(
        longest_streak, STREAK_TIERS, "streak"
    )


__all__ = ["Achievement", "evaluate_achievements"]
