"""Habit tracking data structures."""

from datetime import date, datetime, timezone
from enum import Enum
from typing import ClassVar, Optional

from sqlmodel import Field, Relationship, SQLModel

from ..domain.recurrence import RecurrenceKind, RecurrencePattern


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CompletionStatus(str, Enum):
    """Per-day ledger status. NO_RECORD is never persisted."""

    COMPLETED = "completed"
    MISSED = "missed"
    NO_RECORD = "no_record"


def parse_custom_days(raw: Optional[str]) -> list[int]:
    """Parse the stored "1,3,5" form; blank input means no days."""

    if not raw or not raw.strip():
        return []
    return [int(part) for part in raw.split(",") if part.strip()]


def serialize_custom_days(days) -> str:
    return ",".join(str(d) for d in sorted(set(days)))


class Habit(SQLModel, table=True):
    """A user-defined recurring habit."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=80, index=True)
    description: str = Field(default="", max_length=255)
    category_id: Optional[int] = Field(default=None, foreign_key="category.id", index=True)
    recurrence: str = Field(default=RecurrenceKind.EVERYDAY.value, max_length=32)
    custom_days: str = Field(default="", max_length=32)
    start_date: date = Field(nullable=False)
    end_date: Optional[date] = Field(default=None)
    is_active: bool = Field(default=True, nullable=False)
    deactivated_on: Optional[date] = Field(default=None)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=_utcnow, nullable=False)

    records: list["CompletionRecord"] = Relationship(
        back_populates="habit",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )

    @property
    def pattern(self) -> RecurrencePattern:
        """Recurrence rule decoded from the stored label and day list."""
        return RecurrencePattern.parse(self.recurrence, parse_custom_days(self.custom_days))

    def apply_pattern(self, pattern: RecurrencePattern) -> None:
        self.recurrence = pattern.label
        self.custom_days = serialize_custom_days(pattern.days)


class CompletionRecord(SQLModel, table=True):
    """Completed/missed outcome for a habit on one calendar day."""

    __tablename__: ClassVar[str] = "completion_record"

    habit_id: int = Field(foreign_key="habit.id", primary_key=True)
    occurred_on: date = Field(primary_key=True, index=True)
    status: str = Field(default=CompletionStatus.COMPLETED.value, nullable=False, max_length=16)
    notes: Optional[str] = Field(default=None, max_length=500)
    recorded_at: datetime = Field(default_factory=_utcnow, nullable=False)

    habit: Optional["Habit"] = Relationship(back_populates="records")

    @property
    def completion_status(self) -> CompletionStatus:
        return CompletionStatus(self.status)
