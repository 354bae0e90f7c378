"""Engine error taxonomy and the result value returned across the write boundary."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class EngineError(Exception):
    """Base class for every error the engine reports to callers."""

    code = "engine_error"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class ValidationError(EngineError):
    """Malformed habit definition, e.g. an empty custom-day set."""

    code = "validation_error"


class NotFoundError(EngineError):
    """Unknown habit id."""

    code = "not_found"


class SchedulingError(EngineError):
    """Recording on a date the habit is not scheduled for."""

    code = "scheduling_error"


class OutOfRangeError(EngineError):
    """Date outside the habit's ``[start_date, end_date]`` window."""

    code = "out_of_range"


class StorageError(EngineError):
    """The persistence layer failed; the write did not happen."""

    code = "storage_error"


@dataclass(frozen=True, slots=True)
class Result(Generic[T]):
    """Outcome of a write operation.

    Engine-level failures are carried in ``error`` instead of being raised so
    callers can render them inline.
    """

    value: Optional[T] = None
    error: Optional[EngineError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: EngineError) -> "Result[T]":
        return cls(error=error)

    def unwrap(self) -> Optional[T]:
        """Return the value or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value


__all__ = [
    "EngineError",
    "NotFoundError",
    "OutOfRangeError",
    "Result",
    "SchedulingError",
    "StorageError",
    "ValidationError",
]
