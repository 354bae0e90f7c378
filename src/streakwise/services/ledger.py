"""Completion ledger: the one writer of completion/missed records.

Every write is validated against the recurrence rule, so the store never holds
a record for an unscheduled day. Writes are upserts keyed by (habit, day) and
serialized per key; retries and double submissions converge on the same row.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from datetime import date, datetime, timezone
from typing import Callable, Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..domain.recurrence import InactivePolicy, in_window, is_scheduled
from ..domain.repositories import HabitRepository
from ..errors import (
    EngineError,
    NotFoundError,
    OutOfRangeError,
    Result,
    SchedulingError,
    StorageError,
)
from ..logging_config import get_logger
from ..models.habit import CompletionRecord, CompletionStatus, Habit

logger = get_logger("ledger")

StatusMap = dict[date, CompletionStatus]


class _KeyedLocks:
    """Hands out one lock per (habit_id, day) key; idle keys are dropped."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        # key -> [lock, holders and waiters]
        self._locks: dict[tuple[int, date], list] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, habit_id: int, day: date) -> Iterator[None]:
        key = (habit_id, day)
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]


class CompletionLedger:
    """Validated, per-key serialized access to completion records."""

    def __init__(
        self,
        repository: HabitRepository,
        *,
        policy: InactivePolicy = InactivePolicy.PRESERVE_HISTORY,
        clock: Callable[[], date] = date.today,
    ) -> None:
        self.repository = repository
        self.policy = policy
        self.clock = clock
        self._locks = _KeyedLocks()

    # Writes
    def record_completion(
        self, habit_id: int, day: date, notes: Optional[str] = None
    ) -> Result[CompletionRecord]:
        """Mark ``day`` completed, replacing any earlier record for that day."""
        return self._write(habit_id, day, CompletionStatus.COMPLETED, notes)

    def record_missed(
        self, habit_id: int, day: date, notes: Optional[str] = None
    ) -> Result[CompletionRecord]:
        """Mark ``day`` missed, replacing any earlier record for that day."""
        return self._write(habit_id, day, CompletionStatus.MISSED, notes)

    def undo(self, habit_id: int, day: date) -> Result[bool]:
        """Delete the record for ``day``; succeeds when there was none.

        The result value tells whether a record was actually removed. An
        unknown habit fails with ``NotFoundError``.
        """
        try:
            with self._locks.hold(habit_id, day):
                self._require_habit(habit_id)
                removed = self.repository.delete_record(habit_id, day)
        except EngineError as exc:
            logger.warning(
                "Rejected undo: %s",
                exc.message,
                extra={"habit_id": habit_id, "day": day.isoformat(), "code": exc.code},
            )
            return Result.failure(exc)
        except SQLAlchemyError as exc:
            logger.error(
                "Undo failed",
                exc_info=True,
                extra={"habit_id": habit_id, "day": day.isoformat()},
            )
            return Result.failure(StorageError(f"Could not undo record: {exc}", habit_id=habit_id))

        logger.info(
            "Record undone" if removed else "Undo with no record",
            extra={"habit_id": habit_id, "day": day.isoformat()},
        )
        return Result.success(removed)

    def _write(
        self,
        habit_id: int,
        day: date,
        status: CompletionStatus,
        notes: Optional[str],
    ) -> Result[CompletionRecord]:
        try:
            with self._locks.hold(habit_id, day):
                habit = self._require_habit(habit_id)
                self._check_writable(habit, day)
                record = CompletionRecord(
                    habit_id=habit_id,
                    occurred_on=day,
                    status=status.value,
                    notes=notes,
                    recorded_at=datetime.now(timezone.utc),
                )
                saved = self.repository.upsert_record(record)
        except EngineError as exc:
            logger.warning(
                "Rejected ledger write: %s",
                exc.message,
                extra={"habit_id": habit_id, "day": day.isoformat(), "code": exc.code},
            )
            return Result.failure(exc)
        except SQLAlchemyError as exc:
            logger.error(
                "Ledger write failed",
                exc_info=True,
                extra={"habit_id": habit_id, "day": day.isoformat()},
            )
            return Result.failure(StorageError(f"Could not save record: {exc}", habit_id=habit_id))

        logger.info(
            "Recorded %s",
            status.value,
            extra={"habit_id": habit_id, "day": day.isoformat()},
        )
        return Result.success(saved)

    def _require_habit(self, habit_id: int) -> Habit:
        habit = self.repository.get_by_id(habit_id)
        if habit is None:
            raise NotFoundError(f"Habit {habit_id} does not exist", habit_id=habit_id)
        return habit

    def _check_writable(self, habit: Habit, day: date) -> None:
        today = self.clock()
        if not in_window(habit, day):
            raise OutOfRangeError(
                f"{day.isoformat()} is outside the habit's active dates", habit_id=habit.id
            )
        if day > today:
            raise SchedulingError(
                f"{day.isoformat()} is in the future", habit_id=habit.id
            )
        if not is_scheduled(habit, day, policy=self.policy, today=today):
            raise SchedulingError(
                f"Habit is not scheduled on {day.isoformat()}", habit_id=habit.id
            )

    # Reads
    def get_status(self, habit_id: int, day: date) -> CompletionStatus:
        """Return the ledger status for one day."""
        record = self.repository.get_record(habit_id, day)
        if record is None:
            return CompletionStatus.NO_RECORD
        return record.completion_status

    def statuses(
        self, habit_id: int, start: date | None = None, end: date | None = None
    ) -> StatusMap:
        """Snapshot of recorded statuses keyed by day; absent days have no record."""
        return {
            record.occurred_on: record.completion_status
            for record in self.repository.get_records(habit_id, start, end)
        }


__all__ = ["CompletionLedger", "StatusMap"]
