"""Pytest configuration and shared fixtures for Streakwise tests.

This module provides database fixtures, test data factories, and a fixed
"today" so date-sensitive logic is deterministic.
"""

from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path

import pytest
from sqlmodel import Session, SQLModel, create_engine

# Import all models to ensure they're registered with SQLModel metadata
from streakwise.domain.recurrence import RecurrencePattern
from streakwise.infra.repositories import SQLModelCategoryRepository, SQLModelHabitRepository
from streakwise.models import Category, CompletionRecord, CompletionStatus, Habit
from streakwise.services.calendar import CalendarProjector
from streakwise.services.ledger import CompletionLedger
from streakwise.services.statistics import StatisticsAggregator
from streakwise.services.streaks import StreakCalculator

# Wednesday. 2024-01-01 is a Monday.
TODAY = date(2024, 1, 10)
MONDAY = date(2024, 1, 1)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(
        f"sqlite:///{db_path}", echo=False, connect_args={"check_same_thread": False}
    )
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory for repositories that expect Callable[[], Session]."""

    def factory():
        return Session(db_engine, expire_on_commit=False)

    return factory


@pytest.fixture
def habit_repo(session_factory) -> SQLModelHabitRepository:
    return SQLModelHabitRepository(session_factory)


@pytest.fixture
def category_repo(session_factory) -> SQLModelCategoryRepository:
    return SQLModelCategoryRepository(session_factory)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def ledger(habit_repo, today) -> CompletionLedger:
    return CompletionLedger(habit_repo, clock=lambda: today)


@pytest.fixture
def calculator(ledger) -> StreakCalculator:
    return StreakCalculator(ledger)


@pytest.fixture
def projector(ledger) -> CalendarProjector:
    return CalendarProjector(ledger)


@pytest.fixture
def aggregator(ledger, category_repo) -> StatisticsAggregator:
    return StatisticsAggregator(
        ledger,
        category_names=lambda: {c.id: c.name for c in category_repo.list_all()},
    )


# =============================================================================
# Test Data Factories
# =============================================================================


def build_habit(
    pattern: RecurrencePattern | None = None,
    *,
    habit_id: int | None = 1,
    name: str = "Test Habit",
    start_date: date = MONDAY,
    end_date: date | None = None,
    is_active: bool = True,
    deactivated_on: date | None = None,
    category_id: int | None = None,
) -> Habit:
    """Build an unsaved habit for pure-function tests."""

    habit = Habit(
        id=habit_id,
        name=name,
        start_date=start_date,
        end_date=end_date,
        is_active=is_active,
        deactivated_on=deactivated_on,
        category_id=category_id,
    )
    habit.apply_pattern(pattern or RecurrencePattern.everyday())
    return habit


@pytest.fixture
def make_habit():
    """Factory for unsaved habits (no database)."""
    return build_habit


@pytest.fixture
def habit_factory(habit_repo):
    """Factory for creating persisted habits.

    Bypasses creation-time validation so tests can use past start dates.
    """

    def _create_habit(pattern: RecurrencePattern | None = None, **kwargs) -> Habit:
        habit = build_habit(pattern, habit_id=None, **kwargs)
        return habit_repo.create(habit)

    return _create_habit


@pytest.fixture
def record_factory(habit_repo):
    """Factory that writes records straight to storage, skipping ledger checks."""

    def _create_record(
        habit: Habit,
        day: date,
        status: CompletionStatus = CompletionStatus.COMPLETED,
        notes: str | None = None,
    ) -> CompletionRecord:
        return habit_repo.upsert_record(
            CompletionRecord(habit_id=habit.id, occurred_on=day, status=status.value, notes=notes)
        )

    return _create_record


@pytest.fixture
def category_factory(category_repo):
    def _create_category(name: str = "Health", color: str | None = "#2E7D32") -> Category:
        return category_repo.create(Category(name=name, color=color))

    return _create_category
