"""Calendar projection: per-day status sequences for heatmaps and grids."""

from __future__ import annotations

import calendar as _calendar
from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Callable, Mapping, Optional

from ..domain.recurrence import InactivePolicy, is_scheduled, iter_days
from ..models.habit import CompletionStatus, Habit
from .ledger import CompletionLedger


class DayStatus(str, Enum):
    """What a calendar cell shows for one day."""

    COMPLETED = "completed"
    MISSED = "missed"
    PENDING = "pending"  # today, scheduled, nothing recorded yet
    NOT_SCHEDULED = "not_scheduled"
    FUTURE = "future"


@dataclass(frozen=True, slots=True)
class CalendarDay:
    day: date
    status: DayStatus
    notes: Optional[str] = None


@dataclass(slots=True)
class CalendarProjection:
    """Ordered day statuses for a date range."""

    habit_id: int
    days: list[CalendarDay]

    def __iter__(self):
        return iter(self.days)

    def __len__(self) -> int:
        return len(self.days)

    def status_at(self, day: date) -> DayStatus:
        for cell in self.days:
            if cell.day == day:
                return cell.status
        raise KeyError(day)

    def counts(self) -> dict[DayStatus, int]:
        totals = {status: 0 for status in DayStatus}
        for cell in self.days:
            totals[cell.status] += 1
        return totals


def classify_day(
    habit: Habit,
    day: date,
    status: CompletionStatus,
    *,
    today: date,
    policy: InactivePolicy = InactivePolicy.PRESERVE_HISTORY,
) -> DayStatus:
    """Map one day's ledger status onto the cell status."""

    if day < habit.start_date:
        return DayStatus.NOT_SCHEDULED
    if day > today:
        return DayStatus.FUTURE
    if not is_scheduled(habit, day, policy=policy, today=today):
        return DayStatus.NOT_SCHEDULED
    if status is CompletionStatus.COMPLETED:
        return DayStatus.COMPLETED
    if status is CompletionStatus.MISSED:
        return DayStatus.MISSED
    if day == today:
        return DayStatus.PENDING
    return DayStatus.MISSED


def project_statuses(
    habit: Habit,
    statuses: Mapping[date, CompletionStatus],
    range_start: date,
    range_end: date,
    *,
    today: date,
    policy: InactivePolicy = InactivePolicy.PRESERVE_HISTORY,
    notes: Mapping[date, Optional[str]] | None = None,
) -> CalendarProjection:
    """Project a status snapshot onto every day of ``[range_start, range_end]``."""

    notes = notes or {}
    days = [
        CalendarDay(
            day=day,
            status=classify_day(
                habit,
                day,
                statuses.get(day, CompletionStatus.NO_RECORD),
                today=today,
                policy=policy,
            ),
            notes=notes.get(day),
        )
        for day in iter_days(range_start, range_end)
    ]
    return CalendarProjection(habit_id=habit.id, days=days)


class CalendarProjector:
    """Builds calendar views from the ledger."""

    def __init__(
        self, ledger: CompletionLedger, *, clock: Callable[[], date] | None = None
    ) -> None:
        self.ledger = ledger
        self.clock = clock or ledger.clock

    def project(self, habit: Habit, range_start: date, range_end: date) -> CalendarProjection:
        """Status for every day in the inclusive range, oldest first."""
        if range_end < range_start:
            raise ValueError("range_end must not precede range_start")
        records = self.ledger.repository.get_records(habit.id, range_start, range_end)
        statuses = {r.occurred_on: r.completion_status for r in records}
        notes = {r.occurred_on: r.notes for r in records}
        return project_statuses(
            habit,
            statuses,
            range_start,
            range_end,
            today=self.clock(),
            policy=self.ledger.policy,
            notes=notes,
        )

    def month_grid(self, habit: Habit, year: int, month: int) -> list[list[Optional[CalendarDay]]]:
        """Six Monday-first weeks covering the month; days of other months are None."""
        first = date(year, month, 1)
        last = date(year, month, _calendar.monthrange(year, month)[1])
        by_day = {cell.day: cell for cell in self.project(habit, first, last)}

        weeks = _calendar.Calendar(firstweekday=0).monthdatescalendar(year, month)
        grid = [[by_day.get(day) for day in week] for week in weeks]
        while len(grid) < 6:
            grid.append([None] * 7)
        return grid

    def progress_grid(
        self, habit: Habit, *, columns: int = 16, rows: int = 4
    ) -> list[list[CalendarDay]]:
        """Recent-history grid, newest first: cell (0, 0) is today, filled row by row."""
        today = self.clock()
        total = columns * rows
        projection = self.project(habit, today - timedelta(days=total - 1), today)
        newest_first = list(reversed(projection.days))
        return [newest_first[row * columns:(row + 1) * columns] for row in range(rows)]


__all__ = [
    "CalendarDay",
    "CalendarProjection",
    "CalendarProjector",
    "DayStatus",
    "classify_day",
    "project_statuses",
]
