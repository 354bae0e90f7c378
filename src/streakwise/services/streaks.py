"""Streak and completion-rate calculations.

All values are derived from a snapshot of ledger statuses on every call; nothing
here is stored. Unscheduled days are skipped, never treated as gaps.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Callable, Mapping

from ..domain.recurrence import InactivePolicy, is_scheduled, scheduled_dates
from ..models.habit import CompletionStatus, Habit
from .ledger import CompletionLedger

Statuses = Mapping[date, CompletionStatus]

ONE_DAY = timedelta(days=1)


def _effective_end(habit: Habit, as_of: date, today: date) -> date:
    end = min(as_of, today)
    if habit.end_date is not None:
        end = min(end, habit.end_date)
    return end


def current_streak(
    habit: Habit,
    statuses: Statuses,
    as_of: date,
    *,
    today: date | None = None,
    policy: InactivePolicy = InactivePolicy.PRESERVE_HISTORY,
) -> int:
    """Count consecutive completed scheduled days walking back from ``as_of``.

    When ``as_of`` is today and today has no record yet, the walk starts the
    day before: a pending today never breaks a streak. Dates after today are
    clamped to today.
    """

    today = today or date.today()
    cursor = min(as_of, today)
    if cursor == today and cursor not in statuses:
        cursor -= ONE_DAY

    streak = 0
    while cursor >= habit.start_date:
        if is_scheduled(habit, cursor, policy=policy, today=today):
            if statuses.get(cursor) is not CompletionStatus.COMPLETED:
                break
            streak += 1
        cursor -= ONE_DAY
    return streak


def longest_streak(
    habit: Habit,
    statuses: Statuses,
    *,
    today: date | None = None,
    policy: InactivePolicy = InactivePolicy.PRESERVE_HISTORY,
) -> int:
    """Longest run of consecutive completed scheduled days up to today/end date."""

    today = today or date.today()
    end = _effective_end(habit, today, today)

    longest = 0
    run = 0
    for day in scheduled_dates(habit, habit.start_date, end, policy=policy, today=today):
        if statuses.get(day) is CompletionStatus.COMPLETED:
            run += 1
            longest = max(longest, run)
        else:
            run = 0
    return longest


def _counts(
    habit: Habit,
    statuses: Statuses,
    as_of: date,
    today: date,
    policy: InactivePolicy,
) -> tuple[int, int]:
    end = _effective_end(habit, as_of, today)
    days = scheduled_dates(habit, habit.start_date, end, policy=policy, today=today)
    completed = sum(1 for day in days if statuses.get(day) is CompletionStatus.COMPLETED)
    return len(days), completed


def completion_rate(
    habit: Habit,
    statuses: Statuses,
    as_of: date,
    *,
    today: date | None = None,
    policy: InactivePolicy = InactivePolicy.PRESERVE_HISTORY,
) -> float:
    """Completed / scheduled over ``[start_date, as_of]``; 0.0 when nothing was scheduled."""

    scheduled, completed = _counts(habit, statuses, as_of, today or date.today(), policy)
    if scheduled == 0:
        return 0.0
    return completed / scheduled


def missed_count(
    habit: Habit,
    statuses: Statuses,
    as_of: date,
    *,
    today: date | None = None,
    policy: InactivePolicy = InactivePolicy.PRESERVE_HISTORY,
) -> int:
    """Scheduled days up to ``as_of`` that were missed or never recorded."""

    scheduled, completed = _counts(habit, statuses, as_of, today or date.today(), policy)
    return scheduled - completed


@dataclass(slots=True)
class StreakSummary:
    """Per-habit figures shown on detail screens."""

    habit_id: int
    current_streak: int
    longest_streak: int
    completion_rate: float
    missed_count: int


class StreakCalculator:
    """Ledger-backed front end to the streak functions."""

    def __init__(
        self,
        ledger: CompletionLedger,
        *,
        clock: Callable[[], date] | None = None,
    ) -> None:
        self.ledger = ledger
        self.clock = clock or ledger.clock

    @property
    def policy(self) -> InactivePolicy:
        return self.ledger.policy

    def _statuses(self, habit: Habit) -> Statuses:
        return self.ledger.statuses(habit.id, habit.start_date, self.clock())

    def current_streak(self, habit: Habit, as_of: date | None = None) -> int:
        today = self.clock()
        return current_streak(
            habit, self._statuses(habit), as_of or today, today=today, policy=self.policy
        )

    def longest_streak(self, habit: Habit) -> int:
        return longest_streak(habit, self._statuses(habit), today=self.clock(), policy=self.policy)

    def completion_rate(self, habit: Habit, as_of: date | None = None) -> float:
        today = self.clock()
        return completion_rate(
            habit, self._statuses(habit), as_of or today, today=today, policy=self.policy
        )

    def missed_count(self, habit: Habit, as_of: date | None = None) -> int:
        today = self.clock()
        return missed_count(
            habit, self._statuses(habit), as_of or today, today=today, policy=self.policy
        )

    def summary(self, habit: Habit, as_of: date | None = None) -> StreakSummary:
        """All figures from a single ledger read."""
        today = self.clock()
        as_of = as_of or today
        statuses = self._statuses(habit)
        kwargs = {"today": today, "policy": self.policy}
        return StreakSummary(
            habit_id=habit.id,
            current_streak=current_streak(habit, statuses, as_of, **kwargs),
            longest_streak=longest_streak(habit, statuses, **kwargs),
            completion_rate=completion_rate(habit, statuses, as_of, **kwargs),
            missed_count=missed_count(habit, statuses, as_of, **kwargs),
        )


__all__ = [
    "StreakCalculator",
    "StreakSummary",
    "completion_rate",
    "current_streak",
    "longest_streak",
    "missed_count",
]
