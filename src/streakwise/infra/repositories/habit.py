"""SQLModel implementation of Habit repository."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.habit import CompletionRecord, Habit


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: Callable[[], Session]):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        with self.session_factory() as session:
            obj = session.get(Habit, habit_id)
            if obj:
                session.expunge(obj)
            return obj

    def list_all(self, include_inactive: bool = False) -> list[Habit]:
        """List all habits, optionally including inactive ones."""
        with self.session_factory() as session:
            statement = select(Habit).order_by(Habit.name)  # type: ignore

            if not include_inactive:
                statement = statement.where(Habit.is_active == True)  # noqa: E712

            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, habit: Habit) -> Habit:
        """Create a new habit."""
        with self.session_factory() as session:
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def update(self, habit: Habit) -> Habit:
        """Update an existing habit."""
        with self.session_factory() as session:
            habit.updated_at = datetime.now(timezone.utc)
            merged = session.merge(habit)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def delete(self, habit_id: int) -> bool:
        """Delete a habit; its completion records go with it."""
        with self.session_factory() as session:
            habit = session.get(Habit, habit_id)
            if habit is None:
                return False
            session.delete(habit)
            session.commit()
            return True

    # Completion record operations
    def get_record(self, habit_id: int, occurred_on: date) -> Optional[CompletionRecord]:
        """Get the record for one (habit, day) key."""
        with self.session_factory() as session:
            obj = session.get(CompletionRecord, (habit_id, occurred_on))
            if obj:
                session.expunge(obj)
            return obj

    def get_records(
        self, habit_id: int, start_date: date | None = None, end_date: date | None = None
    ) -> list[CompletionRecord]:
        """Get records for a habit, optionally bounded, oldest first."""
        with self.session_factory() as session:
            statement = select(CompletionRecord).where(CompletionRecord.habit_id == habit_id)
            if start_date is not None:
                statement = statement.where(CompletionRecord.occurred_on >= start_date)
            if end_date is not None:
                statement = statement.where(CompletionRecord.occurred_on <= end_date)
            statement = statement.order_by(CompletionRecord.occurred_on)  # type: ignore
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def upsert_record(self, record: CompletionRecord) -> CompletionRecord:
        """Insert or replace the record for its (habit, day) key."""
        with self.session_factory() as session:
            existing = session.get(CompletionRecord, (record.habit_id, record.occurred_on))

            if existing:
                existing.status = record.status
                existing.notes = record.notes
                existing.recorded_at = record.recorded_at
                session.add(existing)
                session.commit()
                session.refresh(existing)
                session.expunge(existing)
                return existing

            session.add(record)
            session.commit()
            session.refresh(record)
            session.expunge(record)
            return record

    def delete_record(self, habit_id: int, occurred_on: date) -> bool:
        """Delete a record; return whether one existed."""
        with self.session_factory() as session:
            record = session.get(CompletionRecord, (habit_id, occurred_on))
            if record is None:
                return False
            session.delete(record)
            session.commit()
            return True
