"""Repository protocol definitions for domain layer."""

from .category import CategoryRepository
from .habit import HabitRepository

__all__ = [
    "CategoryRepository",
    "HabitRepository",
]
