"""Period bucketing, trend classification and dashboard rollups."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from enum import Enum
from typing import Callable, Iterable, Mapping, Optional, Sequence

from ..domain.recurrence import InactivePolicy, is_scheduled, scheduled_dates
from ..models.habit import CompletionStatus, Habit
from .ledger import CompletionLedger
from .streaks import Statuses, current_streak

UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True, slots=True)
class Bucket:
    """Scheduled-vs-completed counts for one calendar week or month."""

    period_label: str
    period_start: date
    period_end: date
    scheduled_count: int
    completed_count: int

    @property
    def completion_rate_percent(self) -> float:
        if self.scheduled_count == 0:
            return 0.0
        return round(self.completed_count / self.scheduled_count * 100, 2)


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    NEUTRAL = "neutral"


@dataclass(frozen=True, slots=True)
class TrendResult:
    direction: TrendDirection
    change_percent: float = 0.0
    recent_rate: float = 0.0
    previous_rate: float = 0.0


def _week_start(day: date) -> date:
    return day - timedelta(days=day.weekday())


def _month_start(day: date, months_back: int = 0) -> date:
    index = day.year * 12 + (day.month - 1) - months_back
    return date(index // 12, index % 12 + 1, 1)


def _next_month(day: date) -> date:
    return _month_start(day, -1)


def _build_bucket(
    habit: Habit,
    statuses: Statuses,
    label: str,
    period_start: date,
    period_end: date,
    today: date,
    policy: InactivePolicy,
) -> Bucket:
    # Future days are neither scheduled-so-far nor completable.
    upper = min(period_end, today)
    days = scheduled_dates(habit, period_start, upper, policy=policy, today=today)
    completed = sum(1 for day in days if statuses.get(day) is CompletionStatus.COMPLETED)
    return Bucket(
        period_label=label,
        period_start=period_start,
        period_end=period_end,
        scheduled_count=len(days),
        completed_count=completed,
    )


def weekly_buckets(
    habit: Habit,
    statuses: Statuses,
    weeks_back: int,
    *,
    today: date,
    policy: InactivePolicy = InactivePolicy.PRESERVE_HISTORY,
) -> list[Bucket]:
    """``weeks_back`` ISO weeks ending with the current one, oldest first."""

    if weeks_back < 1:
        raise ValueError("weeks_back must be at least 1")
    current = _week_start(today)
    buckets = []
    for offset in range(weeks_back - 1, -1, -1):
        start = current - timedelta(weeks=offset)
        iso_year, iso_week, _ = start.isocalendar()
        buckets.append(
            _build_bucket(
                habit,
                statuses,
                f"{iso_year}-W{iso_week:02d}",
                start,
                start + timedelta(days=6),
                today,
                policy,
            )
        )
    return buckets


def monthly_buckets(
    habit: Habit,
    statuses: Statuses,
    months_back: int,
    *,
    today: date,
    policy: InactivePolicy = InactivePolicy.PRESERVE_HISTORY,
) -> list[Bucket]:
    """``months_back`` calendar months ending with the current one, oldest first."""

    if months_back < 1:
        raise ValueError("months_back must be at least 1")
    buckets = []
    for offset in range(months_back - 1, -1, -1):
        start = _month_start(today, offset)
        end = _next_month(start) - timedelta(days=1)
        buckets.append(
            _build_bucket(habit, statuses, start.strftime("%Y-%m"), start, end, today, policy)
        )
    return buckets


def trend(buckets: Sequence[Bucket], *, threshold: float) -> TrendResult:
    """Classify the change between the two most recent buckets.

    ``threshold`` is the relative change, in percent, needed to call the
    trend up or down.
    """

    if len(buckets) < 2:
        return TrendResult(TrendDirection.NEUTRAL)

    previous_rate = buckets[-2].completion_rate_percent
    recent_rate = buckets[-1].completion_rate_percent
    if previous_rate == 0:
        direction = TrendDirection.UP if recent_rate > 0 else TrendDirection.NEUTRAL
        return TrendResult(direction, 0.0, recent_rate, previous_rate)

    change = (recent_rate - previous_rate) / previous_rate * 100
    if change > threshold:
        direction = TrendDirection.UP
    elif change < -threshold:
        direction = TrendDirection.DOWN
    else:
        direction = TrendDirection.NEUTRAL
    return TrendResult(direction, round(abs(change), 2), recent_rate, previous_rate)


@dataclass(slots=True)
class TodayItem:
    habit: Habit
    status: CompletionStatus


@dataclass(slots=True)
class CategoryBreakdown:
    habit_count: int = 0
    scheduled_today: int = 0
    completed_today: int = 0


@dataclass(slots=True)
class HabitPerformance:
    habit_id: int
    name: str
    current_streak: int
    completed_today: bool


@dataclass(slots=True)
class DashboardRollup:
    """Cross-habit totals for the dashboard."""

    scheduled_today: int = 0
    completed_today: int = 0
    total_completed: int = 0
    total_missed: int = 0
    max_current_streak: int = 0
    average_current_streak: float = 0.0
    current_streaks: dict[int, int] = field(default_factory=dict)
    by_category: dict[str, CategoryBreakdown] = field(default_factory=dict)
    top_habits: list[HabitPerformance] = field(default_factory=list)

    @property
    def today_completion_rate_percent(self) -> float:
        if self.scheduled_today == 0:
            return 0.0
        return round(self.completed_today / self.scheduled_today * 100, 2)


def today_overview(
    habits: Iterable[Habit],
    statuses_by_habit: Mapping[int, Statuses],
    *,
    today: date,
    policy: InactivePolicy = InactivePolicy.PRESERVE_HISTORY,
) -> list[TodayItem]:
    """Habits scheduled today with their current status, in input order."""

    return [
        TodayItem(
            habit=habit,
            status=statuses_by_habit.get(habit.id, {}).get(today, CompletionStatus.NO_RECORD),
        )
        for habit in habits
        if is_scheduled(habit, today, policy=policy, today=today)
    ]


def dashboard_rollup(
    habits: Iterable[Habit],
    statuses_by_habit: Mapping[int, Statuses],
    *,
    today: date,
    policy: InactivePolicy = InactivePolicy.PRESERVE_HISTORY,
    category_names: Mapping[int, str] | None = None,
    top_limit: int = 5,
) -> DashboardRollup:
    """Aggregate today's totals, per-category breakdown and streak figures."""

    category_names = category_names or {}
    rollup = DashboardRollup()
    performances: list[HabitPerformance] = []

    for habit in habits:
        statuses = statuses_by_habit.get(habit.id, {})
        category = UNCATEGORIZED
        if habit.category_id is not None:
            category = category_names.get(habit.category_id, UNCATEGORIZED)
        breakdown = rollup.by_category.setdefault(category, CategoryBreakdown())
        breakdown.habit_count += 1

        done_today = statuses.get(today) is CompletionStatus.COMPLETED
        if is_scheduled(habit, today, policy=policy, today=today):
            rollup.scheduled_today += 1
            breakdown.scheduled_today += 1
            if done_today:
                rollup.completed_today += 1
                breakdown.completed_today += 1

        for status in statuses.values():
            if status is CompletionStatus.COMPLETED:
                rollup.total_completed += 1
            elif status is CompletionStatus.MISSED:
                rollup.total_missed += 1

        streak = current_streak(habit, statuses, today, today=today, policy=policy)
        rollup.current_streaks[habit.id] = streak
        performances.append(HabitPerformance(habit.id, habit.name, streak, done_today))

    if rollup.current_streaks:
        values = list(rollup.current_streaks.values())
        rollup.max_current_streak = max(values)
        rollup.average_current_streak = round(sum(values) / len(values), 2)

    performances.sort(key=lambda p: p.current_streak, reverse=True)
    rollup.top_habits = performances[:top_limit]
    return rollup


class StatisticsAggregator:
    """Ledger-backed statistics for one or many habits."""

    def __init__(
        self,
        ledger: CompletionLedger,
        *,
        weekly_threshold: float = 5.0,
        monthly_threshold: float = 10.0,
        category_names: Callable[[], Mapping[int, str]] | None = None,
        clock: Callable[[], date] | None = None,
    ) -> None:
        self.ledger = ledger
        self.weekly_threshold = weekly_threshold
        self.monthly_threshold = monthly_threshold
        self.category_names = category_names
        self.clock = clock or ledger.clock

    def _statuses(self, habit: Habit) -> Statuses:
        return self.ledger.statuses(habit.id, habit.start_date, self.clock())

    def weekly_buckets(self, habit: Habit, weeks_back: int) -> list[Bucket]:
        return weekly_buckets(
            habit, self._statuses(habit), weeks_back, today=self.clock(), policy=self.ledger.policy
        )

    def monthly_buckets(self, habit: Habit, months_back: int) -> list[Bucket]:
        return monthly_buckets(
            habit, self._statuses(habit), months_back, today=self.clock(), policy=self.ledger.policy
        )

    def weekly_trend(self, habit: Habit, threshold: Optional[float] = None) -> TrendResult:
        buckets = self.weekly_buckets(habit, 2)
        return trend(buckets, threshold=self.weekly_threshold if threshold is None else threshold)

    def monthly_trend(self, habit: Habit, threshold: Optional[float] = None) -> TrendResult:
        buckets = self.monthly_buckets(habit, 2)
        return trend(buckets, threshold=self.monthly_threshold if threshold is None else threshold)

    def today_overview(self, habits: Sequence[Habit]) -> list[TodayItem]:
        today = self.clock()
        statuses = {h.id: self.ledger.statuses(h.id, today, today) for h in habits}
        return today_overview(habits, statuses, today=today, policy=self.ledger.policy)

    def dashboard_rollup(self, habits: Sequence[Habit]) -> DashboardRollup:
        statuses = {h.id: self._statuses(h) for h in habits}
        names = self.category_names() if self.category_names else None
        return dashboard_rollup(
            habits,
            statuses,
            today=self.clock(),
            policy=self.ledger.policy,
            category_names=names,
        )


__all__ = [
    "Bucket",
    "CategoryBreakdown",
    "DashboardRollup",
    "HabitPerformance",
    "StatisticsAggregator",
    "TodayItem",
    "TrendDirection",
    "TrendResult",
    "dashboard_rollup",
    "monthly_buckets",
    "today_overview",
    "trend",
    "weekly_buckets",
]
