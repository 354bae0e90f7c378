"""Tests for period buckets, trend classification and dashboard rollups."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from streakwise.domain.recurrence import RecurrencePattern
from streakwise.models import CompletionStatus
from streakwise.services.statistics import (
    Bucket,
    StatisticsAggregator,
    TrendDirection,
    dashboard_rollup,
    monthly_buckets,
    today_overview,
    trend,
    weekly_buckets,
)

from conftest import MONDAY, TODAY

C = CompletionStatus.COMPLETED
M = CompletionStatus.MISSED


def _bucket(scheduled: int, completed: int, label: str = "2024-W01") -> Bucket:
    return Bucket(label, MONDAY, MONDAY + timedelta(days=6), scheduled, completed)


class TestWeeklyBuckets:
    def test_zero_completions_gives_empty_buckets_and_neutral_trend(
        self, aggregator, habit_factory
    ):
        habit = habit_factory()

        buckets = aggregator.weekly_buckets(habit, 2)

        assert len(buckets) == 2
        assert all(b.completed_count == 0 for b in buckets)
        assert all(b.completion_rate_percent == 0.0 for b in buckets)
        assert aggregator.weekly_trend(habit).direction is TrendDirection.NEUTRAL

    def test_buckets_are_iso_weeks_oldest_first(self, make_habit):
        habit = make_habit(RecurrencePattern.weekdays(), start_date=MONDAY)

        buckets = weekly_buckets(habit, {}, 2, today=TODAY)

        assert [b.period_label for b in buckets] == ["2024-W01", "2024-W02"]
        assert buckets[0].period_start == MONDAY
        assert buckets[0].period_end == date(2024, 1, 7)

    def test_weekend_days_never_count_as_scheduled(self, make_habit):
        habit = make_habit(RecurrencePattern.weekdays(), start_date=MONDAY)
        statuses = {MONDAY + timedelta(days=i): C for i in range(5)}

        first, current = weekly_buckets(habit, statuses, 2, today=TODAY)

        assert (first.scheduled_count, first.completed_count) == (5, 5)
        assert first.completion_rate_percent == 100.0
        # Only Mon-Wed of the current week have happened.
        assert current.scheduled_count == 3

    def test_week_before_start_is_empty(self, make_habit):
        habit = make_habit(start_date=date(2024, 1, 3))

        older, first, current = weekly_buckets(habit, {}, 3, today=TODAY)

        assert older.period_label == "2023-W52"
        assert older.scheduled_count == 0
        assert first.scheduled_count == 5

    def test_rate_is_rounded_to_two_places(self):
        assert _bucket(3, 1).completion_rate_percent == 33.33

    def test_weeks_back_must_be_positive(self, make_habit):
        with pytest.raises(ValueError):
            weekly_buckets(make_habit(), {}, 0, today=TODAY)


class TestMonthlyBuckets:
    def test_labels_span_year_boundary(self, make_habit):
        habit = make_habit(start_date=date(2023, 12, 1))

        buckets = monthly_buckets(habit, {}, 2, today=TODAY)

        assert [b.period_label for b in buckets] == ["2023-12", "2024-01"]
        assert buckets[0].scheduled_count == 31
        assert buckets[0].period_end == date(2023, 12, 31)
        assert buckets[1].scheduled_count == 10
        assert buckets[1].period_end == date(2024, 1, 31)

    def test_completed_counts(self, make_habit):
        habit = make_habit(start_date=date(2023, 12, 1))
        statuses = {date(2023, 12, 25): C, date(2023, 12, 26): M, MONDAY: C}

        december, january = monthly_buckets(habit, statuses, 2, today=TODAY)

        assert december.completed_count == 1
        assert january.completed_count == 1

    def test_months_back_must_be_positive(self, make_habit):
        with pytest.raises(ValueError):
            monthly_buckets(make_habit(), {}, 0, today=TODAY)


class TestTrend:
    def test_twenty_percent_rise_is_up_at_low_threshold(self):
        result = trend([_bucket(10, 5), _bucket(10, 6)], threshold=5.0)

        assert result.direction is TrendDirection.UP
        assert result.change_percent == 20.0
        assert (result.previous_rate, result.recent_rate) == (50.0, 60.0)

    def test_same_rise_is_neutral_at_high_threshold(self):
        result = trend([_bucket(10, 5), _bucket(10, 6)], threshold=25.0)
        assert result.direction is TrendDirection.NEUTRAL

    def test_fall_beyond_threshold_is_down(self):
        result = trend([_bucket(10, 6), _bucket(10, 3)], threshold=10.0)

        assert result.direction is TrendDirection.DOWN
        assert result.change_percent == 50.0

    def test_previous_zero_and_recent_positive_is_up(self):
        assert trend([_bucket(5, 0), _bucket(5, 1)], threshold=5.0).direction is TrendDirection.UP

    def test_both_zero_is_neutral(self):
        result = trend([_bucket(5, 0), _bucket(0, 0)], threshold=5.0)
        assert result.direction is TrendDirection.NEUTRAL

    def test_single_bucket_is_neutral(self):
        assert trend([_bucket(5, 5)], threshold=5.0).direction is TrendDirection.NEUTRAL

    def test_aggregator_weekly_trend_down(self, aggregator, ledger, habit_factory):
        habit = habit_factory()
        for offset in range(7):
            ledger.record_completion(habit.id, MONDAY + timedelta(days=offset))
        ledger.record_completion(habit.id, date(2024, 1, 8))
        ledger.record_missed(habit.id, date(2024, 1, 9))

        result = aggregator.weekly_trend(habit)

        assert result.direction is TrendDirection.DOWN
        assert result.previous_rate == 100.0
        assert result.recent_rate == 33.33

    def test_aggregator_monthly_trend_uses_configured_threshold(self, ledger, habit_factory):
        habit = habit_factory(start_date=date(2023, 12, 1))
        for offset in range(31):
            ledger.record_completion(habit.id, date(2023, 12, 1) + timedelta(days=offset))
        for offset in range(9):
            ledger.record_completion(habit.id, MONDAY + timedelta(days=offset))

        # 100% in December, 90% so far in January: a 10% fall.
        lenient = StatisticsAggregator(ledger, monthly_threshold=15.0)
        strict = StatisticsAggregator(ledger, monthly_threshold=5.0)

        assert lenient.monthly_trend(habit).direction is TrendDirection.NEUTRAL
        assert strict.monthly_trend(habit).direction is TrendDirection.DOWN


class TestTodayOverview:
    def test_lists_only_habits_scheduled_today(self, make_habit):
        daily = make_habit(habit_id=1, name="Read")
        weekend = make_habit(RecurrencePattern.weekends(), habit_id=2, name="Hike")
        statuses = {1: {TODAY: C}}

        items = today_overview([daily, weekend], statuses, today=TODAY)

        assert [item.habit.id for item in items] == [1]
        assert items[0].status is CompletionStatus.COMPLETED

    def test_unrecorded_today_is_no_record(self, aggregator, habit_factory):
        habit = habit_factory()

        items = aggregator.today_overview([habit])

        assert items[0].status is CompletionStatus.NO_RECORD


class TestDashboardRollup:
    def test_rollup_totals_and_categories(self, make_habit):
        daily = make_habit(habit_id=1, name="Read", category_id=1)
        weekend = make_habit(RecurrencePattern.weekends(), habit_id=2, name="Hike")
        statuses = {
            1: {MONDAY + timedelta(days=i): C for i in range(10)},
            2: {date(2024, 1, 6): C, date(2024, 1, 7): M},
        }

        rollup = dashboard_rollup(
            [daily, weekend], statuses, today=TODAY, category_names={1: "Health"}
        )

        assert rollup.scheduled_today == 1
        assert rollup.completed_today == 1
        assert rollup.today_completion_rate_percent == 100.0
        assert rollup.total_completed == 11
        assert rollup.total_missed == 1
        assert rollup.current_streaks == {1: 10, 2: 0}
        assert rollup.max_current_streak == 10
        assert rollup.average_current_streak == 5.0
        assert rollup.by_category["Health"].completed_today == 1
        assert rollup.by_category["Uncategorized"].habit_count == 1
        assert rollup.by_category["Uncategorized"].scheduled_today == 0
        assert [p.habit_id for p in rollup.top_habits] == [1, 2]

    def test_empty_rollup(self):
        rollup = dashboard_rollup([], {}, today=TODAY)

        assert rollup.today_completion_rate_percent == 0.0
        assert rollup.max_current_streak == 0
        assert rollup.top_habits == []

    def test_top_habits_limited(self, make_habit):
        habits = [make_habit(habit_id=i, name=f"H{i}") for i in range(1, 8)]
        statuses = {
            h.id: {TODAY - timedelta(days=d): C for d in range(h.id)} for h in habits
        }

        rollup = dashboard_rollup(habits, statuses, today=TODAY, top_limit=3)

        assert [p.habit_id for p in rollup.top_habits] == [7, 6, 5]

    def test_aggregator_resolves_category_names(
        self, aggregator, ledger, habit_factory, category_factory
    ):
        health = category_factory("Health")
        habit = habit_factory(category_id=health.id)
        ledger.record_completion(habit.id, TODAY)

        rollup = aggregator.dashboard_rollup([habit])

        assert rollup.by_category["Health"].completed_today == 1
        assert rollup.current_streaks[habit.id] == 1
