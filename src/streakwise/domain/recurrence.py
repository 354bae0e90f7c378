"""Recurrence patterns and the rule deciding whether a habit applies on a date.

``is_scheduled`` is the only place pattern kinds are dispatched on. Everything
that needs to know "does this habit count on day D" (the today list, calendars,
streaks, buckets) calls it instead of re-deriving the answer.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Iterator, Optional, Protocol

from ..errors import ValidationError

WEEKDAY_NAMES = {
    "Monday": 1,
    "Tuesday": 2,
    "Wednesday": 3,
    "Thursday": 4,
    "Friday": 5,
    "Saturday": 6,
    "Sunday": 7,
}


class RecurrenceKind(str, Enum):
    """Closed set of recurrence pattern kinds; values are the stored labels."""

    EVERYDAY = "Everyday"
    WEEKDAYS = "Weekdays"
    WEEKENDS = "Weekends"
    WEEKLY = "Weekly"
    CUSTOM_DAYS = "Custom"
    EVERY_OTHER_DAY = "EveryOtherDay"


class InactivePolicy(str, Enum):
    """How a deactivated habit answers scheduling questions about the past."""

    PRESERVE_HISTORY = "preserve_history"
    NEVER_SCHEDULED = "never_scheduled"


@dataclass(frozen=True, slots=True)
class RecurrencePattern:
    """A recurrence rule. ``days`` holds ISO weekdays (1=Mon..7=Sun) for CUSTOM_DAYS only."""

    kind: RecurrenceKind
    days: frozenset[int] = frozenset()

    def __post_init__(self) -> None:
        if not isinstance(self.kind, RecurrenceKind):
            raise ValidationError(f"Unknown recurrence kind: {self.kind!r}")
        if self.kind is RecurrenceKind.CUSTOM_DAYS:
            if not self.days:
                raise ValidationError("Custom recurrence needs at least one weekday")
            invalid = sorted(d for d in self.days if not 1 <= d <= 7)
            if invalid:
                raise ValidationError(f"Weekday ordinals must be 1-7, got {invalid}")
        elif self.days:
            raise ValidationError(f"{self.kind.value} recurrence does not take custom days")

    @classmethod
    def everyday(cls) -> "RecurrencePattern":
        return cls(RecurrenceKind.EVERYDAY)

    @classmethod
    def weekdays(cls) -> "RecurrencePattern":
        return cls(RecurrenceKind.WEEKDAYS)

    @classmethod
    def weekends(cls) -> "RecurrencePattern":
        return cls(RecurrenceKind.WEEKENDS)

    @classmethod
    def weekly(cls) -> "RecurrencePattern":
        return cls(RecurrenceKind.WEEKLY)

    @classmethod
    def every_other_day(cls) -> "RecurrencePattern":
        return cls(RecurrenceKind.EVERY_OTHER_DAY)

    @classmethod
    def custom_days(cls, days: Iterable[int]) -> "RecurrencePattern":
        return cls(RecurrenceKind.CUSTOM_DAYS, frozenset(days))

    @classmethod
    def parse(cls, label: str, custom_days: Iterable[int] = ()) -> "RecurrencePattern":
        """Build a pattern from a stored label.

        Single weekday names ("Monday".."Sunday") are accepted and become a
        one-day custom pattern.
        """

        cleaned = (label or "").strip()
        if cleaned in WEEKDAY_NAMES:
            return cls.custom_days({WEEKDAY_NAMES[cleaned]})
        try:
            kind = RecurrenceKind(cleaned)
        except ValueError as exc:
            raise ValidationError(f"Unknown recurrence pattern: {label!r}") from exc
        if kind is RecurrenceKind.CUSTOM_DAYS:
            return cls.custom_days(custom_days)
        return cls(kind)

    @property
    def label(self) -> str:
        return self.kind.value

    def sorted_days(self) -> list[int]:
        return sorted(self.days)


class Schedulable(Protocol):
    """Fields ``is_scheduled`` reads from a habit."""

    start_date: date
    end_date: Optional[date]
    is_active: bool
    deactivated_on: Optional[date]

    @property
    def pattern(self) -> RecurrencePattern:  # pragma: no cover - interface
        ...


def in_window(habit: Schedulable, day: date) -> bool:
    """Return True when ``day`` falls inside ``[start_date, end_date]``."""

    if day < habit.start_date:
        return False
    if habit.end_date is not None and day > habit.end_date:
        return False
    return True


def _pattern_matches(pattern: RecurrencePattern, day: date, anchor: date) -> bool:
    kind = pattern.kind
    weekday = day.isoweekday()
    if kind is RecurrenceKind.EVERYDAY:
        return True
    if kind is RecurrenceKind.WEEKDAYS:
        return weekday <= 5
    if kind is RecurrenceKind.WEEKENDS:
        return weekday >= 6
    if kind is RecurrenceKind.WEEKLY:
        return weekday == anchor.isoweekday()
    if kind is RecurrenceKind.CUSTOM_DAYS:
        return weekday in pattern.days
    if kind is RecurrenceKind.EVERY_OTHER_DAY:
        return (day - anchor).days % 2 == 0
    raise ValidationError(f"Unhandled recurrence kind: {kind!r}")


def is_scheduled(
    habit: Schedulable,
    day: date,
    *,
    policy: InactivePolicy = InactivePolicy.PRESERVE_HISTORY,
    today: date | None = None,
) -> bool:
    """Return whether ``habit`` applies on ``day``.

    Pure and total for any date. An inactive habit keeps its schedule up to
    and including its deactivation day, and is never scheduled after it. When
    that day is unknown, only days before today count. With
    ``InactivePolicy.NEVER_SCHEDULED`` it is not scheduled at all.
    """

    if not in_window(habit, day):
        return False
    if not habit.is_active:
        if policy is InactivePolicy.NEVER_SCHEDULED:
            return False
        if habit.deactivated_on is not None:
            if day > habit.deactivated_on:
                return False
        elif day >= (today or date.today()):
            return False
    return _pattern_matches(habit.pattern, day, habit.start_date)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day in ``[start, end]`` in order."""

    cursor = start
    while cursor <= end:
        yield cursor
        cursor += timedelta(days=1)


def scheduled_dates(
    habit: Schedulable,
    start: date,
    end: date,
    *,
    policy: InactivePolicy = InactivePolicy.PRESERVE_HISTORY,
    today: date | None = None,
) -> list[date]:
    """Return the scheduled days within ``[start, end]``, oldest first."""

    lower = max(start, habit.start_date)
    upper = end if habit.end_date is None else min(end, habit.end_date)
    return [
        day
        for day in iter_days(lower, upper)
        if is_scheduled(habit, day, policy=policy, today=today)
    ]


__all__ = [
    "InactivePolicy",
    "RecurrenceKind",
    "RecurrencePattern",
    "Schedulable",
    "WEEKDAY_NAMES",
    "in_window",
    "is_scheduled",
    "iter_days",
    "scheduled_dates",
]
