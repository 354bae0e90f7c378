"""Concrete repository implementations using SQLModel."""

from .category import SQLModelCategoryRepository
from .habit import SQLModelHabitRepository

__all__ = [
    "SQLModelCategoryRepository",
    "SQLModelHabitRepository",
]
