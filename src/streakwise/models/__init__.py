"""SQLModel table exports."""

from .category import Category
from .habit import CompletionRecord, CompletionStatus, Habit

__all__ = [
    "Category",
    "CompletionRecord",
    "CompletionStatus",
    "Habit",
]
