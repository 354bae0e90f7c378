"""Habit repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ...models.habit import CompletionRecord, Habit


class HabitRepository(Protocol):
    """Keyed storage for habits and their completion records."""

    def get_by_id(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID."""
        ...

    def list_all(self, include_inactive: bool = False) -> list[Habit]:
        """List all habits, optionally including inactive ones."""
        ...

    def create(self, habit: Habit) -> Habit:
        """Create a new habit."""
        ...

    def update(self, habit: Habit) -> Habit:
        """Update an existing habit."""
        ...

    def delete(self, habit_id: int) -> bool:
        """Delete a habit and all of its records."""
        ...

    # Completion record operations
    def get_record(self, habit_id: int, occurred_on: date) -> Optional[CompletionRecord]:
        """Get the record for one (habit, day) key."""
        ...

    def get_records(
        self, habit_id: int, start_date: date | None = None, end_date: date | None = None
    ) -> list[CompletionRecord]:
        """Get records for a habit, optionally bounded, oldest first."""
        ...

    def upsert_record(self, record: CompletionRecord) -> CompletionRecord:
        """Insert or replace the record for its (habit, day) key."""
        ...

    def delete_record(self, habit_id: int, occurred_on: date) -> bool:
        """Delete a record; return whether one existed."""
        ...
