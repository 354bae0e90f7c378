"""Habit category definitions."""

from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel


class Category(SQLModel, table=True):
    """Grouping used for per-category dashboard breakdowns."""

    __tablename__: ClassVar[str] = "category"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(index=True, nullable=False, max_length=64, unique=True)
    color: Optional[str] = Field(default=None, max_length=7)
