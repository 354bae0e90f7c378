"""Habit lifecycle helpers: creation with validation, deactivation, cascading delete."""

from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..domain.recurrence import RecurrencePattern
from ..domain.repositories import HabitRepository
from ..errors import EngineError, NotFoundError, Result, StorageError, ValidationError
from ..logging_config import get_logger
from ..models.habit import Habit

logger = get_logger("habits")


def build_pattern(label: str, custom_days: Iterable[int] = ()) -> RecurrencePattern:
    """Parse a user-facing pattern label; raises ValidationError when malformed."""
    return RecurrencePattern.parse(label, custom_days)


def create_habit(
    repository: HabitRepository,
    *,
    name: str,
    pattern: RecurrencePattern,
    start_date: date,
    end_date: Optional[date] = None,
    description: str = "",
    category_id: Optional[int] = None,
    today: date | None = None,
) -> Result[Habit]:
    """Validate and persist a new habit."""

    today = today or date.today()
    try:
        if not name or not name.strip():
            raise ValidationError("Habit name is required")
        if start_date < today:
            raise ValidationError("Start date cannot be in the past")
        if end_date is not None and end_date < start_date:
            raise ValidationError("End date cannot precede start date")

        habit = Habit(
            name=name.strip(),
            description=description,
            category_id=category_id,
            start_date=start_date,
            end_date=end_date,
        )
        habit.apply_pattern(pattern)
        saved = repository.create(habit)
    except EngineError as exc:
        logger.warning("Rejected habit: %s", exc.message, extra={"code": exc.code})
        return Result.failure(exc)
    except SQLAlchemyError as exc:
        logger.error("Habit create failed", exc_info=True)
        return Result.failure(StorageError(f"Could not save habit: {exc}"))

    logger.info("Habit created", extra={"habit_id": saved.id, "recurrence": saved.recurrence})
    return Result.success(saved)


def deactivate_habit(
    repository: HabitRepository, habit_id: int, *, today: date | None = None
) -> Result[Habit]:
    """Stop scheduling a habit from ``today`` on; history stays queryable."""

    today = today or date.today()
    try:
        habit = repository.get_by_id(habit_id)
        if habit is None:
            raise NotFoundError(f"Habit {habit_id} does not exist", habit_id=habit_id)
        if habit.is_active:
            habit.is_active = False
            habit.deactivated_on = today
            habit = repository.update(habit)
    except EngineError as exc:
        logger.warning("Deactivate rejected: %s", exc.message, extra={"habit_id": habit_id})
        return Result.failure(exc)
    except SQLAlchemyError as exc:
        logger.error("Habit deactivate failed", exc_info=True, extra={"habit_id": habit_id})
        return Result.failure(StorageError(f"Could not update habit: {exc}", habit_id=habit_id))

    logger.info("Habit deactivated", extra={"habit_id": habit_id})
    return Result.success(habit)


def delete_habit(repository: HabitRepository, habit_id: int) -> Result[bool]:
    """Delete a habit together with all of its completion records."""

    try:
        if not repository.delete(habit_id):
            raise NotFoundError(f"Habit {habit_id} does not exist", habit_id=habit_id)
    except EngineError as exc:
        logger.warning("Delete rejected: %s", exc.message, extra={"habit_id": habit_id})
        return Result.failure(exc)
    except SQLAlchemyError as exc:
        logger.error("Habit delete failed", exc_info=True, extra={"habit_id": habit_id})
        return Result.failure(StorageError(f"Could not delete habit: {exc}", habit_id=habit_id))

    logger.info("Habit deleted", extra={"habit_id": habit_id})
    return Result.success(True)


__all__ = ["build_pattern", "create_habit", "deactivate_habit", "delete_habit"]
